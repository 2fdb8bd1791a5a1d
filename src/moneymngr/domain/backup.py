"""Snapshot export and restore for an external backup collaborator.

A snapshot is a mapping of collection name to domain entities. Serializing
it (spreadsheet, JSON, ...) is the collaborator's job.
"""

from moneymngr.database.base import COLLECTIONS, Database
from moneymngr.domain.errors import ValidationError
from moneymngr.utils.log import get_logger

log = get_logger(__name__)

Snapshot = dict[str, list]


class BackupService:
    """Service exporting and restoring the store.

    Export is scoped to one owner; restore replaces whole collections.
    """

    def __init__(self, db: Database, owner_id: str = "local"):
        self.db = db
        self.owner_id = owner_id

    def export_snapshot(self) -> Snapshot:
        """Return every collection's entities."""
        return {
            "account_types": self.db.list_account_types(owner_id=self.owner_id),
            "account_groups": self.db.list_account_groups(owner_id=self.owner_id),
            "accounts": self.db.list_accounts(owner_id=self.owner_id),
            "categories": self.db.list_categories(owner_id=self.owner_id),
            "transactions": self.db.list_transactions(owner_id=self.owner_id),
        }

    def restore_snapshot(self, snapshot: Snapshot) -> dict[str, int]:
        """Replace each collection present in ``snapshot`` with its entities.

        Collections missing from the snapshot are left alone. The whole
        restore runs in one unit of work.

        Returns:
            Number of entities restored per collection

        Raises:
            ValidationError: If the snapshot names an unknown collection
        """
        unknown = set(snapshot) - set(COLLECTIONS)
        if unknown:
            raise ValidationError(f"Unknown collections in snapshot: {', '.join(sorted(unknown))}")

        counts = {}
        with self.db.unit_of_work():
            for collection in COLLECTIONS:
                if collection not in snapshot:
                    continue
                self.db.clear(collection)
                counts[collection] = self.db.bulk_insert(collection, snapshot[collection])
        log.info("snapshot_restored", **counts)
        return counts
