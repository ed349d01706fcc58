from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..excel.reader import normalize_sheet, read_workbook
from ..excel.writer import create_workbook
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import DocStoreConfig
from ..models.errors import AccessError
from ..models.query import make_condition, make_query
from ..models.write_result import WriteStatus
from ..services.bulk import bulk_set_docs
from ..services.repository import Repository
from ..services.summary import render_summary_line

"""CLI entrypoint.

    python -m sheet_docstore.cli [--config PATH] [--collection NAME] [--debug] COMMAND ...

Documents are printed as JSON on stdout; log lines go to stderr.

Exit codes:
    0 success
    1 fatal (config error, store unreachable)
    2 write failed / bulk load had failures
    3 document not found
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2
EXIT_NOT_FOUND = 3


def _parse_value(text: str) -> Any:
    """JSON when it parses (numbers, lists for ``in``), else the raw text."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _parse_data(text: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"--data is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("--data must be a JSON object")
    return data


def _read_documents(path: Path) -> list[dict[str, Any]]:
    """Read a JSON array of objects, or JSON Lines (one object per line)."""
    text = path.read_text(encoding="utf-8")
    stripped = text.lstrip()
    if stripped.startswith("["):
        docs = json.loads(stripped)
    else:
        docs = [json.loads(line) for line in text.splitlines() if line.strip()]
    if not all(isinstance(d, dict) for d in docs):
        raise ValueError(f"{path}: every document must be a JSON object")
    return docs


def _emit(obj: Any) -> None:
    print(json.dumps(obj, ensure_ascii=False))


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sheet-docstore", description="Spreadsheet-backed document store")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--env-file", type=Path, default=Path(".env"), help=".env file (overrides environment)")
    p.add_argument("--collection", help="Collection (sheet) name; default from config or first sheet")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    q = sub.add_parser("get-docs", help="List documents, optionally filtered")
    q.add_argument(
        "--where", nargs=3, action="append", default=[], metavar=("FIELD", "OP", "VALUE"),
        help="Condition (repeatable, AND-combined). VALUE is parsed as JSON when possible",
    )

    g = sub.add_parser("get-doc", help="Fetch one document by id")
    g.add_argument("id")
    g.add_argument("--key", help="Key column (default: key_field from config)")

    for name, help_text in (("set-doc", "Create or replace a document"), ("update-doc", "Patch fields of a document")):
        w = sub.add_parser(name, help=help_text)
        w.add_argument("id")
        w.add_argument("--data", required=True, help="JSON object")
        w.add_argument("--key", help="Key column (default: key_field from config)")

    b = sub.add_parser("load", help="Upsert documents from a JSON array / JSON Lines file")
    b.add_argument("file", type=Path)
    b.add_argument("--key", help="Key column (default: key_field from config)")
    b.add_argument("--no-progress", action="store_true", help="Disable the progress bar")

    i = sub.add_parser("inspect", help="Print headers & first rows of every sheet")
    i.add_argument("--rows", type=int, default=3)

    n = sub.add_parser("init", help="Create the workbook / sheet with a header row")
    n.add_argument("headers", nargs="+")
    return p.parse_args(argv)


def _inspect_data(cfg: DocStoreConfig, rows: int) -> int:
    if cfg.store.backend != "excel" or not cfg.store.workbook:
        print("inspect: only available for the excel backend")
        return EXIT_FATAL
    raw = read_workbook(Path(cfg.store.workbook))
    for sname, df in raw.items():
        sd = normalize_sheet(df, sname)
        print(f"SHEET: {sname} cols={sd.columns} rows={len(sd.rows)}")
        for r in sd.rows[:rows]:
            print("    ", r)
    return EXIT_SUCCESS


def _write_exit_code(status: WriteStatus) -> int:
    if status in (WriteStatus.CREATED, WriteStatus.UPDATED):
        return EXIT_SUCCESS
    if status is WriteStatus.NOT_FOUND:
        return EXIT_NOT_FOUND
    if status is WriteStatus.ACCESS_ERROR:
        return EXIT_FATAL
    return EXIT_PARTIAL_FAILURE


def _run(args: argparse.Namespace, cfg: DocStoreConfig, error_log: ErrorLogBuffer) -> int:
    repo = Repository.from_config(cfg, args.collection, error_log=error_log)
    key = getattr(args, "key", None) or cfg.key_field

    if args.command == "get-docs":
        query = make_query(make_condition(f, op, _parse_value(v)) for f, op, v in args.where)
        docs = repo.get_docs(query)
        if any(r.error_type == "ACCESS_ERROR" for r in error_log.records):
            return EXIT_FATAL
        _emit(docs)
        return EXIT_SUCCESS

    if args.command == "get-doc":
        doc = repo.get_doc(args.id, key)
        if any(r.error_type == "ACCESS_ERROR" for r in error_log.records):
            return EXIT_FATAL
        if doc is None:
            return EXIT_NOT_FOUND
        _emit(doc)
        return EXIT_SUCCESS

    if args.command in ("set-doc", "update-doc"):
        data = _parse_data(args.data)
        write = repo.set_doc if args.command == "set-doc" else repo.update_doc
        result = write(args.id, data, key)
        _emit({"status": result.status.value, "row": result.row_index, "message": result.message})
        return _write_exit_code(result.status)

    if args.command == "load":
        docs = _read_documents(args.file)
        result = bulk_set_docs(repo, docs, key, progress=not args.no_progress)
        log_summary(render_summary_line(result)[len("SUMMARY "):])
        return EXIT_SUCCESS if result.ok else EXIT_PARTIAL_FAILURE

    if args.command == "inspect":
        return _inspect_data(cfg, args.rows)

    if args.command == "init":
        if cfg.store.backend != "excel" or not cfg.store.workbook:
            print("init: only available for the excel backend")
            return EXIT_FATAL
        create_workbook(Path(cfg.store.workbook), args.collection or cfg.store.default_collection or "Sheet1", args.headers)
        return EXIT_SUCCESS

    raise AssertionError(f"unhandled command: {args.command}")  # pragma: no cover


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] from tests must not fall back to sys.argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    # .env wins over the process environment
    if args.env_file.exists():
        load_dotenv(dotenv_path=args.env_file, override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer(Path(cfg.error_log_dir))
    try:
        return _run(args, cfg, error_log)
    except AccessError as e:
        logger.error(f"{args.command}: {e}")
        return EXIT_FATAL
    except (ValueError, OSError) as e:
        logger.error(f"{args.command}: {e}")
        return EXIT_FATAL
    finally:
        path = error_log.flush()
        if path is not None:
            logger.info(f"error log written: {path}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
