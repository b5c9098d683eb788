from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

"""Out-of-band launcher for the external document parser.

The parser is a separate program (configured as extraction.command, e.g.
["node", "Docuparse.js"]) that receives the selected file paths as arguments.
Its output is only logged; the sync engine never consumes it.
"""

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    pass


@dataclass(frozen=True)
class ExtractionResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.stderr.strip()


def run_extraction(
    paths: Sequence[Path | str],
    command: Sequence[str],
    *,
    timeout: float | None = None,
) -> ExtractionResult:
    """Run command + paths and log what it printed.

    Raises ExtractionError when no command is configured, a path is missing,
    or the program cannot be started.
    """
    if not command:
        raise ExtractionError("no extraction command configured (extraction.command)")
    if not paths:
        raise ExtractionError("no files given for extraction")
    missing = [str(p) for p in paths if not Path(p).exists()]
    if missing:
        raise ExtractionError(f"files not found: {missing}")

    argv = [*command, *(str(p) for p in paths)]
    logger.info(f"running extraction: {' '.join(argv)}")
    try:
        proc = subprocess.run(argv, capture_output=True, text=True, timeout=timeout, check=False)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ExtractionError(f"cannot run {command[0]}: {e}") from e

    result = ExtractionResult(returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)
    if result.stdout.strip():
        logger.info(f"extraction output: {result.stdout.strip()}")
    if result.stderr.strip():
        logger.error(f"extraction error output: {result.stderr.strip()}")
    if proc.returncode != 0:
        logger.error(f"extraction exited with code {proc.returncode}")
    return result
