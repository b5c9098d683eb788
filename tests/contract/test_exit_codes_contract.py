from __future__ import annotations

from sheetboard.cli import __main__ as cli

"""Exit code contract (wrappers and UI launchers depend on these values)."""


def test_exit_codes():
    assert cli.EXIT_SUCCESS == 0
    assert cli.EXIT_FATAL == 1
    assert cli.EXIT_SYNC_FAILED == 2
