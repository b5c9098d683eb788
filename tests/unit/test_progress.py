from __future__ import annotations

from unittest.mock import patch

from sheetboard.services.progress import ProgressTracker


def test_disabled_when_not_a_tty():
    with patch("sheetboard.services.progress.is_tty_enabled", return_value=False):
        with ProgressTracker(3) as progress:
            progress.advance("2020")
            progress.set_postfix(created=1)

    assert progress.enabled is False
    assert progress.pbar is None
    assert progress.current == 1


def test_disabled_for_empty_runs():
    with patch("sheetboard.services.progress.is_tty_enabled", return_value=True):
        assert ProgressTracker(0).enabled is False


def test_tty_bar_advances_and_closes():
    with patch("sheetboard.services.progress.is_tty_enabled", return_value=True), \
            patch("sheetboard.services.progress.tqdm") as bar_cls:
        progress = ProgressTracker(2, description="Syncing items")
        progress.advance("2020")
        progress.advance()
        progress.close()

    bar = bar_cls.return_value
    assert bar.update.call_count == 2
    bar.set_description.assert_any_call("Syncing items (2020)")
    bar.close.assert_called_once()
    assert progress.pbar is None
