"""
1.0 Change Store Module
Append-only history of detected catalog changes.

Key features:
- One record per cycle with a non-empty change, keyed by a random UUID
- Whole-file rewrite on every append (read, append in memory, replace)
- Lossy recovery: an unreadable history file is treated as empty
- Read-only lookups (by id, latest, all) for the query commands
- Flat change-log table / CSV export via pandas
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from src.errors import PersistenceReadError
from src.file_io import read_json, write_json_atomic
from src.models import ChangeRecord

logger = logging.getLogger(__name__)

# 1.1 Change-log column names
COL_CHANGE_ID = "change_id"
COL_DETECTED_AT = "detected_at"
COL_CHANGE_TYPE = "change_type"
COL_LOC = "loc"
CHANGE_LOG_COLUMNS = [COL_CHANGE_ID, COL_DETECTED_AT, COL_CHANGE_TYPE, COL_LOC]


class ChangeStore:
    """
    2.0 ChangeStore Class
    Sole writer of the change history file.
    """

    def __init__(self, path: str):
        """
        2.1 Initialize the store.

        Args:
            path: Location of the history JSON file (e.g. "output/changes.json")
        """
        self.path = path
        logger.info(f"ChangeStore initialized with file: {path}")

    # =========================================================================
    # 3.0 READING
    # =========================================================================

    def _load_raw_history(self) -> List[Dict[str, Any]]:
        """
        3.1 Load the history as raw JSON objects.

        Existing entries are kept exactly as read so that an append never
        rewrites an earlier record.
        """
        try:
            data = read_json(self.path, default=[])
        except PersistenceReadError as e:
            logger.warning(f"{e}. Treating change history as empty.")
            return []

        if not isinstance(data, list):
            logger.warning(
                f"Change history {self.path} is not a JSON array "
                f"({type(data).__name__}). Treating it as empty."
            )
            return []
        return data

    def all_changes(self) -> List[ChangeRecord]:
        """
        3.2 Return every readable change record in insertion order.

        Entries that cannot be decoded are skipped with a warning.
        """
        records = []
        for index, raw in enumerate(self._load_raw_history()):
            try:
                records.append(ChangeRecord.from_dict(raw))
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping unreadable change record at index {index}: {e}")
        return records

    def lookup(self, change_id: Union[uuid.UUID, str]) -> Optional[ChangeRecord]:
        """3.3 Find a change record by identifier. Unparsable ids are not found."""
        if not isinstance(change_id, uuid.UUID):
            try:
                change_id = uuid.UUID(str(change_id).strip())
            except ValueError:
                logger.debug(f"Not a valid change id: {change_id!r}")
                return None

        for record in self.all_changes():
            if record.id == change_id:
                return record
        return None

    def latest(self) -> Optional[ChangeRecord]:
        """3.4 Most recently appended change record, or None for an empty history."""
        records = self.all_changes()
        return records[-1] if records else None

    # =========================================================================
    # 4.0 WRITING
    # =========================================================================

    def record_change(self, added: Iterable[str], removed: Iterable[str]) -> Optional[uuid.UUID]:
        """
        4.1 Append a change record for this cycle.

        Args:
            added: Product URLs new since the last snapshot
            removed: Product URLs gone since the last snapshot

        Returns:
            The new record's id, or None when nothing changed (no write happens)
        """
        added = tuple(added)
        removed = tuple(removed)

        if not added and not removed:
            logger.info("💾 No changes detected. Skipping change history update.")
            return None

        record = ChangeRecord(
            id=uuid.uuid4(),
            timestamp=datetime.now(timezone.utc),
            added=added,
            removed=removed,
        )

        history = self._load_raw_history()
        history.append(record.to_dict())
        write_json_atomic(self.path, history)

        logger.info(
            f"💾 Change history updated. (+{len(added)}, -{len(removed)}) "
            f"id={record.id}, {len(history)} records total"
        )
        return record.id

    # =========================================================================
    # 5.0 CHANGE LOG EXPORT
    # =========================================================================

    def to_dataframe(self) -> pd.DataFrame:
        """
        5.1 Flatten the history into one row per product per change.

        Columns: change_id, detected_at, change_type ('added' / 'removed'), loc
        """
        rows = []
        for record in self.all_changes():
            base = {
                COL_CHANGE_ID: str(record.id),
                COL_DETECTED_AT: record.timestamp.isoformat(),
            }
            rows.extend({**base, COL_CHANGE_TYPE: "added", COL_LOC: loc} for loc in record.added)
            rows.extend({**base, COL_CHANGE_TYPE: "removed", COL_LOC: loc} for loc in record.removed)

        return pd.DataFrame(rows, columns=CHANGE_LOG_COLUMNS)

    def export_csv(self, csv_path: str) -> int:
        """
        5.2 Write the flattened change log to CSV.

        Returns:
            Number of rows written
        """
        df = self.to_dataframe()
        parent = os.path.dirname(os.path.abspath(csv_path))
        os.makedirs(parent, exist_ok=True)
        df.to_csv(csv_path, index=False)
        logger.info(f"Exported {len(df):,} change rows to {csv_path}")
        return len(df)
