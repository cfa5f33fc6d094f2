"""
1.0 Snapshot Store Module
Persists the last observed catalog as a JSON array of product URLs.

The snapshot is the diff baseline for the next cycle. It is rewritten
wholesale, and only when its ordered content actually changed.
"""

import logging
import os

from src.errors import PersistenceReadError
from src.file_io import read_json, write_json_atomic
from src.models import Catalog

logger = logging.getLogger(__name__)


class SnapshotStore:
    """
    2.0 SnapshotStore Class
    Sole writer of the snapshot file.
    """

    def __init__(self, path: str):
        """
        2.1 Initialize the store.

        Args:
            path: Location of the snapshot JSON file (e.g. "output/products.json")
        """
        self.path = path
        logger.info(f"SnapshotStore initialized with file: {path}")

    def load(self) -> Catalog:
        """
        2.2 Load the persisted catalog.

        A missing file is a first run. An unreadable or malformed file is
        treated the same way, so every current product will be reported as
        added on the next diff.
        """
        if not os.path.exists(self.path):
            logger.warning(f"⚠️ No saved product file found at {self.path}. First run?")
            return Catalog()

        try:
            data = read_json(self.path, default=[])
        except PersistenceReadError as e:
            logger.warning(f"{e}. Treating snapshot as empty.")
            return Catalog()

        if not isinstance(data, list):
            logger.warning(
                f"Snapshot {self.path} is not a JSON array ({type(data).__name__}). "
                f"Treating snapshot as empty."
            )
            return Catalog()

        catalog = Catalog(p for p in data if isinstance(p, str) and p)
        logger.info(f"📖 Loaded product file from disk ({len(catalog):,} items).")
        return catalog

    def save(self, catalog: Catalog) -> bool:
        """
        2.3 Persist the catalog unless it matches what is already on disk.

        Returns:
            True if the file was written, False if the write was skipped
        """
        if not isinstance(catalog, Catalog):
            catalog = Catalog(catalog)

        if os.path.exists(self.path) and self.load() == catalog:
            logger.info("💾 No changes detected in product list. Skipping save.")
            return False

        write_json_atomic(self.path, catalog.to_list())
        logger.info(f"💾 Product file updated. ({len(catalog):,} items)")
        return True
