"""
1.0 Main Entry Point
Runs the product catalog monitor and the read-only history queries.

Usage:
    python -m src.main                       # run until SIGINT/SIGTERM
    python -m src.main --once                # run a single cycle
    python -m src.main --show-change [ID]    # print a change (latest if no ID)
    python -m src.main --list-changes
    python -m src.main --show-snapshot
    python -m src.main --export-csv output/change_log.csv
"""

import argparse
import json
import logging
import os
import signal
import sys
import threading
from typing import List, Optional

from src.change_store import ChangeStore
from src.config import CONFIG_FILE_PATH, MonitorConfig, load_config
from src.scheduler import CatalogMonitor
from src.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

LOG_FILE = "monitor.log"


def setup_logging(level: str = "INFO") -> None:
    """1.1 Configure root logging to file and console."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(LOG_FILE, encoding="utf-8"),
            logging.StreamHandler()
        ]
    )


def build_arg_parser() -> argparse.ArgumentParser:
    """2.0 Command-line interface."""
    parser = argparse.ArgumentParser(
        prog="catalog-monitor",
        description="Watch a product sitemap and report added/removed products.",
    )
    parser.add_argument("--config", default=CONFIG_FILE_PATH, help="Path to config.json")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    mode.add_argument(
        "--show-change",
        nargs="?",
        const="",
        default=None,
        metavar="ID",
        help="Print a change record as JSON (latest when ID is omitted)",
    )
    mode.add_argument("--list-changes", action="store_true", help="Summarise every change record")
    mode.add_argument("--show-snapshot", action="store_true", help="Print the current product snapshot")
    mode.add_argument("--export-csv", metavar="PATH", help="Write the change log as CSV")
    return parser


# =============================================================================
# 3.0 READ-ONLY QUERIES
# =============================================================================

def show_change(store: ChangeStore, change_id: str) -> int:
    """3.1 Print one change record. Empty id means the latest one."""
    record = store.lookup(change_id) if change_id else store.latest()
    if record is None:
        target = change_id or "latest"
        logger.error(f"No change record found ({target}).")
        return 1
    print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
    return 0


def list_changes(store: ChangeStore) -> int:
    """3.2 One line per change record, oldest first."""
    records = store.all_changes()
    if not records:
        print("No changes recorded yet.")
        return 0
    for record in records:
        print(
            f"{record.id}  {record.timestamp.isoformat()}  "
            f"+{len(record.added)} -{len(record.removed)}"
        )
    return 0


def show_snapshot(store: SnapshotStore) -> int:
    """3.3 Print the persisted product list."""
    print(json.dumps(store.load().to_list(), indent=2, ensure_ascii=False))
    return 0


# =============================================================================
# 4.0 MONITOR LOOP
# =============================================================================

def install_signal_handlers(monitor: CatalogMonitor) -> None:
    """4.1 Translate SIGINT/SIGTERM into a cooperative stop."""
    def _handle(signum, _frame):
        logger.info(f"Received signal {signum}; stopping after the current cycle.")
        monitor.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _handle)


def main(argv: Optional[List[str]] = None) -> int:
    """
    5.0 Main function.

    Flow:
    1. Parse arguments and load configuration
    2. Either answer a read-only query, or
    3. Run one cycle (--once) or loop until signalled
    """
    args = build_arg_parser().parse_args(argv)

    config_data = load_config(args.config)
    if not config_data:
        logging.basicConfig(level=logging.INFO)
        logger.error("Failed to load configuration. Exiting.")
        return 2

    config = MonitorConfig.from_dict(config_data)
    setup_logging(config.log_level)

    if args.show_change is not None:
        return show_change(ChangeStore(config.changes_path), args.show_change)
    if args.list_changes:
        return list_changes(ChangeStore(config.changes_path))
    if args.show_snapshot:
        return show_snapshot(SnapshotStore(config.snapshot_path))
    if args.export_csv:
        ChangeStore(config.changes_path).export_csv(args.export_csv)
        return 0

    os.makedirs(config.data_directory, exist_ok=True)
    monitor = CatalogMonitor.from_config(config, stop_event=threading.Event())

    if args.once:
        result = monitor.run_cycle()
        return 0 if result["status"] != "error" else 1

    install_signal_handlers(monitor)
    monitor.run_forever()
    return 0


if __name__ == "__main__":
    # 6.0 Entry point - handle running from different directories
    script_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.dirname(script_dir)
    potential_config_path = os.path.join(project_root, CONFIG_FILE_PATH)

    if not os.path.exists(CONFIG_FILE_PATH) and os.path.exists(potential_config_path):
        os.chdir(project_root)

    sys.exit(main())
