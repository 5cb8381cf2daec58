"""
Record store service: account records, their owning subjects,
and sampling of owned references used as mapping examples.
"""

from typing import Optional
import structlog

from config import get_supabase_client, settings
from models.mapping import OwnedRecordRef, OwnedRecordPair
from exceptions import RecordNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)


class RecordStoreService:
    """
    Read access to account and subject records.

    Records are stored as JSON rows; the whole row is the record.
    """

    def __init__(self, client=None):
        self.db = client if client is not None else get_supabase_client()
        self.accounts_table = settings.accounts_table
        self.subjects_table = settings.subjects_table

    # ===================
    # READ OPERATIONS
    # ===================

    def get_account(self, account_id: str) -> dict:
        """
        Get an account record by ID.

        Raises:
            RecordNotFoundError: If the account doesn't exist
            DatabaseError: If the query fails
        """
        return self._get_by_id(self.accounts_table, "Account", account_id)

    def get_subject(self, subject_id: str) -> dict:
        """
        Get a subject (owner) record by ID.

        Raises:
            RecordNotFoundError: If the subject doesn't exist
            DatabaseError: If the query fails
        """
        return self._get_by_id(self.subjects_table, "Subject", subject_id)

    def _get_by_id(self, table: str, record_kind: str, record_id: str) -> dict:
        logger.debug("getting_record", table=table, record_id=record_id)

        try:
            result = (
                self.db.table(table)
                .select("*")
                .eq("id", record_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(
                "get_record_failed",
                table=table,
                record_id=record_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e), details={"table": table})

        if not result.data:
            raise RecordNotFoundError(record_kind, record_id)

        return result.data[0]

    def sample_owned_refs(
        self,
        resource_id: str,
        object_type: str,
        limit: Optional[int] = None
    ) -> list[OwnedRecordRef]:
        """
        Sample accounts of a resource/object type that have an owner.

        Args:
            resource_id: Resource the accounts live on
            object_type: Object type of the accounts
            limit: Maximum number of references (defaults to attribute_mapping_examples)

        Returns:
            List of OwnedRecordRef, possibly empty
        """
        limit = limit or settings.attribute_mapping_examples
        logger.debug(
            "sampling_owned_refs",
            resource_id=resource_id,
            object_type=object_type,
            limit=limit
        )

        try:
            result = (
                self.db.table(self.accounts_table)
                .select("id, owner_id")
                .eq("resource_id", resource_id)
                .eq("object_type", object_type)
                .not_.is_("owner_id", "null")
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.error(
                "sample_owned_refs_failed",
                resource_id=resource_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e), details={"table": self.accounts_table})

        refs = [
            OwnedRecordRef(account_id=row.get("id"), owner_id=row.get("owner_id"))
            for row in result.data or []
        ]

        logger.debug(
            "owned_refs_sampled",
            resource_id=resource_id,
            object_type=object_type,
            count=len(refs)
        )
        return refs


def preload_owned_pairs(
    refs: Optional[list[OwnedRecordRef]],
    store: RecordStoreService
) -> list[OwnedRecordPair]:
    """
    Load account and owner records for each reference.

    References missing either id are skipped. Errors are not caught here;
    callers decide whether to proceed without examples.

    Args:
        refs: Sampled references (may be None)
        store: Record store to fetch from

    Returns:
        OwnedRecordPair list in reference order
    """
    if not refs:
        return []

    loaded: list[OwnedRecordPair] = []
    for ref in refs:
        if not ref.account_id or not ref.owner_id:
            logger.debug(
                "owned_ref_skipped",
                account_id=ref.account_id,
                owner_id=ref.owner_id
            )
            continue
        account = store.get_account(ref.account_id)
        owner = store.get_subject(ref.owner_id)
        loaded.append(OwnedRecordPair(account=account, owner=owner))

    logger.debug("owned_pairs_preloaded", requested=len(refs), loaded=len(loaded))
    return loaded


# Singleton instance for convenience
_record_store_service: Optional[RecordStoreService] = None


def get_record_store_service() -> RecordStoreService:
    """Get or create RecordStoreService instance."""
    global _record_store_service
    if _record_store_service is None:
        _record_store_service = RecordStoreService()
    return _record_store_service
