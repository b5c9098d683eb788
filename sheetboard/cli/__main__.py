from __future__ import annotations

import argparse
import dataclasses
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from sheetboard.board.client import BoardClient
from sheetboard.config.loader import DEFAULT_CONFIG_PATH, ConfigError, default_config, load_config
from sheetboard.errors import SyncError
from sheetboard.excel.reader import inspect_sheet
from sheetboard.logging.audit_log import AuditLogBuffer
from sheetboard.logging.events import FanoutSink, LoggerSink
from sheetboard.logging.init import log_summary, setup_logging
from sheetboard.models.config_models import AppConfig, Direction, SyncMode
from sheetboard.models.sync_result import SyncRequest
from sheetboard.services.engine import run_sync
from sheetboard.services.extraction import ExtractionError, run_extraction
from sheetboard.services.summary import render_summary_line

"""CLI entrypoint.

    sheetboard push  FILE (--board-id ID | --board-name NAME) [--mode replace|incremental]
    sheetboard pull  FILE (--board-id ID | --board-name NAME)
    sheetboard inspect FILE
    sheetboard check-key
    sheetboard workspaces
    sheetboard extract PATH [PATH ...]

Credentials come from --api-key or BOARD_API_KEY (.env is loaded first and
wins over the process environment), the board from --board-id or BOARD_ID.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_SYNC_FAILED = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; failures only warn."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sheetboard", description="Spreadsheet <-> project board sync")
    p.add_argument("--config", help=f"YAML config (default: {DEFAULT_CONFIG_PATH} when present)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("push", "Push spreadsheet rows to the board"),
        ("pull", "Pull board values into the spreadsheet"),
    ):
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("file", help="Spreadsheet (.xlsx / .xls)")
        target = sp.add_mutually_exclusive_group()
        target.add_argument("--board-id", help="Board id (default: BOARD_ID)")
        target.add_argument("--board-name", help="Resolve the board by name")
        sp.add_argument("--workspace-id", help="Workspace used with --board-name (push creates the board if missing)")
        sp.add_argument("--api-key", help="API key (default: BOARD_API_KEY)")
        sp.add_argument("--group", help="Group title (default: first word of the file name)")
        if name == "push":
            sp.add_argument("--mode", choices=[m.value for m in SyncMode], help="Override sync.mode")

    sp = sub.add_parser("inspect", help="Print headers and sample rows, then exit")
    sp.add_argument("file")

    sp = sub.add_parser("check-key", help="Validate the API key")
    sp.add_argument("--api-key", help="API key (default: BOARD_API_KEY)")

    sp = sub.add_parser("workspaces", help="List workspaces and their boards")
    sp.add_argument("--api-key", help="API key (default: BOARD_API_KEY)")

    sp = sub.add_parser("extract", help="Run the configured document extraction command")
    sp.add_argument("paths", nargs="+")

    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> AppConfig:
    if args.config:
        return load_config(Path(args.config))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def _api_key(args: argparse.Namespace) -> str | None:
    return getattr(args, "api_key", None) or os.getenv("BOARD_API_KEY")


def _inspect(path: Path) -> int:
    try:
        info = inspect_sheet(path)
    except SyncError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {info['file']}  SHEET: {info['sheet']}  rows={info['rows']}")
    print(f"  cols={info['columns']}")
    print("  sample_rows=", json.dumps(info["sample_rows"], ensure_ascii=False, default=str))
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # NOTE: only read sys.argv when argv is None; [] from tests must stay empty.
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        setup_logging(debug=True)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "inspect":
        return _inspect(Path(args.file))

    if args.command == "extract":
        try:
            result = run_extraction(args.paths, cfg.extraction.command)
        except ExtractionError as e:
            logger.error(f"extract: {e}")
            return EXIT_FATAL
        return EXIT_SUCCESS if result.success else EXIT_SYNC_FAILED

    api_key = _api_key(args)
    if not api_key:
        logger.error("no API key: pass --api-key or set BOARD_API_KEY")
        return EXIT_FATAL

    if args.command == "check-key":
        try:
            me = BoardClient(api_key, cfg.api).validate_credentials()
        except SyncError as e:
            logger.error(f"check-key: {e}")
            return EXIT_SYNC_FAILED
        logger.info(f"API key valid for {me.get('name')} <{me.get('email')}>")
        return EXIT_SUCCESS

    if args.command == "workspaces":
        return _workspaces(BoardClient(api_key, cfg.api))

    return _sync(args, cfg, api_key)


def _workspaces(client: BoardClient) -> int:
    logger = setup_logging()
    try:
        workspaces = client.list_workspaces_with_boards()
    except SyncError as e:
        logger.error(f"workspaces: {e}")
        return EXIT_SYNC_FAILED
    if not workspaces:
        logger.info("no workspaces visible to this API key")
    for ws in workspaces:
        logger.info(f"workspace {ws.name} (id={ws.id}): {len(ws.boards)} boards")
        for board in ws.boards:
            logger.info(f"  board {board.name} (id={board.id})")
    return EXIT_SUCCESS


def _sync(args: argparse.Namespace, cfg: AppConfig, api_key: str) -> int:
    logger = setup_logging()
    direction = Direction(args.command)

    if getattr(args, "mode", None):
        cfg = dataclasses.replace(cfg, sync=dataclasses.replace(cfg.sync, mode=SyncMode(args.mode)))

    file_path = Path(args.file)
    board_id = args.board_id or (None if args.board_name else os.getenv("BOARD_ID"))
    client = None
    if board_id is None and args.board_name:
        try:
            client = BoardClient(api_key, cfg.api)
            if direction is Direction.PUSH:
                board_id = client.ensure_board(args.board_name, args.workspace_id)
            else:
                board = client.find_board_by_name(args.board_name, args.workspace_id)
                if board is None:
                    logger.error(f'board "{args.board_name}" not found')
                    return EXIT_SYNC_FAILED
                board_id = board.id
        except SyncError as e:
            logger.error(f"board lookup: {e}")
            return EXIT_SYNC_FAILED
    if not board_id:
        logger.error("no board: pass --board-id / --board-name or set BOARD_ID")
        return EXIT_FATAL

    logger.info(f"{direction.value} {file_path} <-> board {board_id} (mode={cfg.sync.mode.value})")

    audit = AuditLogBuffer()
    events = FanoutSink(LoggerSink(), audit)
    request = SyncRequest(direction=direction, board_id=str(board_id), api_key=api_key, file_path=str(file_path))
    result = run_sync(request, cfg, events=events, board=client, group_name=args.group)

    try:
        audit_path = audit.flush()
        if audit_path is not None:
            logger.debug(f"audit trail: {audit_path}")
    except OSError as e:
        logger.warning(f"audit trail not written: {e}")

    if result.stats is not None:
        # log_summary adds the "SUMMARY " prefix itself
        log_summary(render_summary_line(result.stats)[len("SUMMARY "):])

    if result.success:
        logger.info(f"{direction.value} completed: {result.message}")
        return EXIT_SUCCESS
    logger.error(f"Error: {result.message}")
    return EXIT_SYNC_FAILED


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
