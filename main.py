#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Branch Outline
Entry point: opens the viewer, or with --sync refreshes the outline headlessly.
"""

import argparse
import sys
from pathlib import Path

import org_store
from config import load_config, get_categories, get_document_path
from logging_config import setup_logging, get_logger
from overview import OverviewBuilder

logger = get_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Keep an Org outline of the branches of your git repositories.")
    parser.add_argument("--sync", action="store_true", help="refresh the outline once and exit, without a window")
    parser.add_argument("--document", type=Path, help="org file holding the outline")
    parser.add_argument("--config", type=Path, help="settings file to use")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--no-log-file", action="store_true", help="log to the console only")
    parser.add_argument("--json-logs", action="store_true", help="write log records as JSON lines")
    return parser.parse_args(argv)


def run_sync(cfg: dict, document_path: Path, builder: OverviewBuilder | None = None) -> int:
    """Refresh the outline once; return the process exit code."""
    categories = get_categories(cfg)
    if not categories:
        print("No repositories configured.", file=sys.stderr)
        return 1

    document = org_store.load(document_path)
    warnings = (builder or OverviewBuilder()).build(document, categories)
    org_store.save(document, document_path)

    for info in warnings:
        print(f"warning: {info.user_message}", file=sys.stderr)
    logger.info(f"Outline written to {document_path}")
    return 1 if warnings else 0


def run_gui(cfg: dict, document_path: Path, config_path: Path | None = None) -> int:
    from PySide6.QtWidgets import QApplication
    from logging_config import configure_qt_logging
    from ui.main_window import OutlineWindow

    app = QApplication(sys.argv)
    configure_qt_logging()
    app.setApplicationName("Branch Outline")
    app.setApplicationDisplayName("Branch Outline")

    logger.info("Creating main application window")
    window = OutlineWindow(cfg, document_path=document_path, config_path=config_path)
    window.show()
    window.refresh()
    return app.exec()


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(level=args.log_level, log_to_file=not args.no_log_file, log_to_console=True,
                  json_format=args.json_logs)

    cfg = load_config(args.config)
    document_path = args.document or get_document_path(cfg)

    if args.sync:
        return run_sync(cfg, document_path)
    return run_gui(cfg, document_path, args.config)


if __name__ == "__main__":
    sys.exit(main())
