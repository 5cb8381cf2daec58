"""
Unit tests for RecordStoreService and preload_owned_pairs().

Run: pytest tests/unit/test_record_store_service.py -v
"""

import pytest
from unittest.mock import MagicMock

from models.mapping import OwnedRecordRef
from services.record_store_service import RecordStoreService, preload_owned_pairs
from exceptions import DatabaseError, RecordNotFoundError

from tests.factories import RecordFactory


class TestRecordStoreServiceGet:
    """Tests for get_account() / get_subject()"""

    def test_get_account_returns_row(self, mock_db, mock_supabase):
        """Should return the whole row as the record."""
        # Arrange
        account = RecordFactory.account(id="a-1", attributes={"mail": ["x@example.com"]})
        mock_supabase.set_table_data("shadows", [account])
        service = RecordStoreService()

        # Act
        result = service.get_account("a-1")

        # Assert
        assert result["attributes"]["mail"] == ["x@example.com"]

    def test_get_subject_not_found_raises_error(self, mock_db, mock_supabase):
        """Should raise RecordNotFoundError when the subject doesn't exist."""
        mock_supabase.set_table_data("users", [])
        service = RecordStoreService()

        with pytest.raises(RecordNotFoundError) as exc_info:
            service.get_subject("missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "SUBJECT_NOT_FOUND"

    def test_query_failure_raises_database_error(self):
        """Store errors are wrapped in DatabaseError."""
        client = MagicMock()
        client.table.side_effect = RuntimeError("connection reset")
        service = RecordStoreService(client=client)

        with pytest.raises(DatabaseError) as exc_info:
            service.get_account("a-1")

        assert "connection reset" in exc_info.value.message


class TestRecordStoreServiceSample:
    """Tests for sample_owned_refs()"""

    def test_sample_returns_only_owned_accounts(self, mock_db, mock_supabase):
        """Accounts without owner are not sampled."""
        mock_supabase.set_table_data("shadows", [
            RecordFactory.account(id="a-1", owner_id="u-1"),
            RecordFactory.account(id="a-2", owner_id=None),
            RecordFactory.account(id="a-3", owner_id="u-3"),
            RecordFactory.account(id="a-4", owner_id="u-4", resource_id="other"),
        ])
        service = RecordStoreService()

        refs = service.sample_owned_refs("resource-ldap", "account")

        assert [r.account_id for r in refs] == ["a-1", "a-3"]
        assert [r.owner_id for r in refs] == ["u-1", "u-3"]

    def test_sample_respects_limit(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("shadows", [
            RecordFactory.account(owner_id=f"u-{i}") for i in range(30)
        ])
        service = RecordStoreService()

        refs = service.sample_owned_refs("resource-ldap", "account")
        limited = service.sample_owned_refs("resource-ldap", "account", limit=5)

        assert len(refs) == 20
        assert len(limited) == 5


class TestPreloadOwnedPairs:
    """Tests for preload_owned_pairs()"""

    def test_none_refs_returns_empty(self):
        store = MagicMock()

        assert preload_owned_pairs(None, store) == []
        store.get_account.assert_not_called()

    def test_loads_pairs_in_order_and_skips_incomplete_refs(self):
        """References missing an id are skipped silently."""
        store = MagicMock()
        store.get_account.side_effect = lambda account_id: {"id": account_id}
        store.get_subject.side_effect = lambda subject_id: {"id": subject_id}
        refs = [
            OwnedRecordRef(account_id="a-1", owner_id="u-1"),
            OwnedRecordRef(account_id="a-2", owner_id=None),
            OwnedRecordRef(account_id=None, owner_id="u-3"),
            OwnedRecordRef(account_id="a-4", owner_id="u-4"),
        ]

        pairs = preload_owned_pairs(refs, store)

        assert [(p.account["id"], p.owner["id"]) for p in pairs] == [("a-1", "u-1"), ("a-4", "u-4")]
        assert store.get_account.call_count == 2

    def test_errors_propagate(self):
        """Callers decide how to degrade."""
        store = MagicMock()
        store.get_account.side_effect = DatabaseError("select", "down")

        with pytest.raises(DatabaseError):
            preload_owned_pairs([OwnedRecordRef(account_id="a-1", owner_id="u-1")], store)
