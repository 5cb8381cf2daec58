"""
Unit tests for the database connection helpers.

Run: pytest tests/unit/test_database.py -v
"""

import pytest
from unittest.mock import patch

import config
from config.database import check_connection, get_supabase_client
from exceptions import DatabaseError


class TestGetSupabaseClient:
    """Tests for get_supabase_client()"""

    def test_not_configured_raises_app_database_error(self):
        """Missing credentials surface as the application's DatabaseError."""
        get_supabase_client.cache_clear()
        with patch("config.database.settings") as mock_settings:
            mock_settings.supabase_configured = False

            with pytest.raises(DatabaseError) as exc_info:
                get_supabase_client()

        assert exc_info.value.status_code == 500
        assert exc_info.value.details["operation"] == "connect"

    def test_config_exports_only_used_helpers(self):
        assert config.__all__ == [
            "settings",
            "get_settings",
            "Settings",
            "get_supabase_client",
            "check_connection",
        ]


class TestCheckConnection:
    """Tests for check_connection()"""

    def test_healthy_reports_counts(self, mock_supabase):
        mock_supabase.set_table_data("shadows", [{"id": "a-1"}, {"id": "a-2"}])
        mock_supabase.set_table_data("users", [{"id": "u-1"}])

        with patch("config.database.get_supabase_client", return_value=mock_supabase):
            status = check_connection()

        assert status == {"status": "healthy", "accounts_count": 2, "subjects_count": 1}

    def test_connection_failure_is_unhealthy(self):
        with patch(
            "config.database.get_supabase_client",
            side_effect=DatabaseError("connect", "refused")
        ):
            status = check_connection()

        assert status["status"] == "unhealthy"
        assert "refused" in status["error"]
