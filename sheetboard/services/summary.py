from __future__ import annotations

from ..models.sync_result import SyncStats

"""SUMMARY line rendering.

Format:
SUMMARY direction={push|pull} mode={mode} group="{title}" groups_created={n}
groups_archived={n} columns_created={n} columns_deleted={n} items_created={n}
items_updated={n} items_skipped={n} cells_updated={n} warnings={n} elapsed_sec={s}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_summary_line(stats: SyncStats) -> str:
    """Render the SUMMARY line for one run.

    >>> render_summary_line(SyncStats(direction="pull", mode="incremental", group="Acura", cells_updated=3))
    'SUMMARY direction=pull mode=incremental group="Acura" groups_created=0 groups_archived=0 columns_created=0 columns_deleted=0 items_created=0 items_updated=0 items_skipped=0 cells_updated=3 warnings=0 elapsed_sec=0'
    """
    return (
        f"SUMMARY direction={stats.direction} "
        f"mode={stats.mode} "
        f'group="{stats.group}" '
        f"groups_created={stats.groups_created} "
        f"groups_archived={stats.groups_archived} "
        f"columns_created={stats.columns_created} "
        f"columns_deleted={stats.columns_deleted} "
        f"items_created={stats.items_created} "
        f"items_updated={stats.items_updated} "
        f"items_skipped={stats.items_skipped} "
        f"cells_updated={stats.cells_updated} "
        f"warnings={stats.warnings} "
        f"elapsed_sec={_format_seconds(stats.elapsed_seconds)}"
    )
