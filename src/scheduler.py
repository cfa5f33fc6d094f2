"""
1.0 Scheduler Module
Runs the fetch -> diff -> persist -> notify cycle on a fixed interval.

Key features:
- One cycle at a time; a failed cycle is logged and never ends the process
- Notification failures do not block the snapshot update for that cycle
- Cooperative shutdown: a stop event interrupts the sleep between cycles
"""

import enum
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from src.change_store import ChangeStore
from src.config import MonitorConfig
from src.diff_engine import diff_catalogs
from src.errors import CatalogMonitorError, DeliveryError, FetchError
from src.notifier import WebhookNotifier
from src.sitemap_fetcher import CatalogFetcher
from src.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class MonitorState(enum.Enum):
    RUNNING = "running"
    FETCHING = "fetching"
    DIFFING = "diffing"
    PERSISTING = "persisting"
    NOTIFYING = "notifying"
    SLEEPING = "sleeping"
    STOPPED = "stopped"


class CatalogMonitor:
    """
    2.0 CatalogMonitor Class
    Owns the in-memory catalog and change record for the duration of a cycle.
    """

    def __init__(
        self,
        config: MonitorConfig,
        fetcher: CatalogFetcher,
        change_store: ChangeStore,
        snapshot_store: SnapshotStore,
        notifier: WebhookNotifier,
        stop_event: Optional[threading.Event] = None,
    ):
        self.config = config
        self.fetcher = fetcher
        self.change_store = change_store
        self.snapshot_store = snapshot_store
        self.notifier = notifier
        self.stop_event = stop_event or threading.Event()
        self.state = MonitorState.RUNNING
        self.cycles_run = 0

    @classmethod
    def from_config(cls, config: MonitorConfig, stop_event: Optional[threading.Event] = None) -> "CatalogMonitor":
        """2.1 Wire up the default collaborators from settings."""
        return cls(
            config=config,
            fetcher=CatalogFetcher(config=config.as_dict()),
            change_store=ChangeStore(config.changes_path),
            snapshot_store=SnapshotStore(config.snapshot_path),
            notifier=WebhookNotifier(
                webhook_url=config.webhook_url,
                change_url_base=config.change_url_base,
                max_items=config.max_items,
                timeout=config.webhook_timeout,
            ),
            stop_event=stop_event,
        )

    def _set_state(self, state: MonitorState) -> None:
        logger.debug(f"State: {self.state.value} -> {state.value}")
        self.state = state

    # =========================================================================
    # 3.0 SINGLE CYCLE
    # =========================================================================

    def _cycle(self, result: Dict[str, Any]) -> None:
        """
        3.1 Body of one cycle. Exceptions propagate to run_cycle.
        """
        self._set_state(MonitorState.FETCHING)
        current = self.fetcher.fetch()

        self._set_state(MonitorState.DIFFING)
        previous = self.snapshot_store.load()
        diff = diff_catalogs(previous, current)
        result["added"] = len(diff.added)
        result["removed"] = len(diff.removed)
        logger.info(f"📦 Added: {len(diff.added)}, Removed: {len(diff.removed)}")

        self._set_state(MonitorState.PERSISTING)
        change_id = self.change_store.record_change(diff.added, diff.removed)
        result["change_id"] = str(change_id) if change_id else None

        if change_id is not None:
            self._set_state(MonitorState.NOTIFYING)
            try:
                result["notified"] = self.notifier.notify(diff.added, diff.removed, change_id)
            except DeliveryError as e:
                # Change is already durable in history; it is not re-announced.
                logger.error(f"🔥 Notification failed for change {change_id}: {e}")
                result["status"] = "warning"
                result["message"] = str(e)

        self._set_state(MonitorState.PERSISTING)
        result["snapshot_written"] = self.snapshot_store.save(current)

    def run_cycle(self) -> Dict[str, Any]:
        """
        3.2 Run one cycle, isolating every failure from the caller.

        Returns:
            Summary dict with status ('success', 'warning' or 'error'),
            added/removed counts, change_id, notified, snapshot_written, message
        """
        started = datetime.now(timezone.utc)
        logger.info(f"🔄 Starting scrape cycle at {started.isoformat()}")

        result: Dict[str, Any] = {
            "status": "success",
            "added": 0,
            "removed": 0,
            "change_id": None,
            "notified": False,
            "snapshot_written": False,
            "message": "",
        }

        try:
            self._cycle(result)
            if result["status"] == "success":
                logger.info("✅ Scrape cycle completed successfully.")
        except FetchError as e:
            logger.error(f"🔥 Worker cycle aborted: {e}")
            result.update(status="error", message=str(e))
        except CatalogMonitorError as e:
            logger.error(f"🔥 Worker cycle failed: {type(e).__name__}: {e}")
            result.update(status="error", message=str(e))
        except Exception as e:
            logger.exception(f"🔥 Worker cycle failed unexpectedly: {type(e).__name__}: {e}")
            result.update(status="error", message=str(e))
        finally:
            self.cycles_run += 1
            self._set_state(MonitorState.RUNNING)

        return result

    # =========================================================================
    # 4.0 LOOP
    # =========================================================================

    def stop(self) -> None:
        """4.1 Request shutdown; observed at the next sleep boundary."""
        self.stop_event.set()

    def run_forever(self, max_cycles: Optional[int] = None) -> int:
        """
        4.2 Run cycles until stopped (or until max_cycles have run).

        Returns:
            Number of cycles run
        """
        logger.info(f"🚀 Product scraper worker started (interval={self.config.interval_seconds}s).")
        cycles = 0

        while not self.stop_event.is_set():
            self.run_cycle()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break

            self._set_state(MonitorState.SLEEPING)
            logger.info(f"⏳ Sleeping for {self.config.interval_seconds}s...")
            if self.stop_event.wait(self.config.interval_seconds):
                break
            self._set_state(MonitorState.RUNNING)

        self._set_state(MonitorState.STOPPED)
        logger.info("🛑 Product scraper worker stopping.")
        return cycles
