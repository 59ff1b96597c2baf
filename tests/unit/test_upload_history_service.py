"""
Unit tests for UploadHistoryService.

Run: pytest tests/unit/test_upload_history_service.py -v
"""

import pytest

from models.imports import Provenance
from services.upload_history_service import (
    STATUS_ERROR,
    STATUS_PARTIAL,
    STATUS_PROCESSING,
    UploadHistoryService,
)
from exceptions import DatabaseError


PROVENANCE = Provenance(user_id="user-1", tenant_id="tenant-1")


class TestStartUpload:
    """Tests for UploadHistoryService.start_upload()"""

    def test_creates_processing_entry(self, mock_db, mock_supabase):
        # Act
        upload_id = UploadHistoryService().start_upload(PROVENANCE, "produkte.xlsx", "Produkte", 12)

        # Assert
        payload = mock_supabase.writes("upload_history", "insert")[0]["payload"][0]
        assert payload["id"] == upload_id
        assert payload["status"] == STATUS_PROCESSING
        assert payload["tenant_id"] == "tenant-1"
        assert payload["row_count"] == 12

    def test_failure_raises(self, mock_db, mock_supabase):
        mock_supabase.set_table_error("upload_history", Exception("down"), operation="insert")

        with pytest.raises(DatabaseError):
            UploadHistoryService().start_upload(PROVENANCE, "x.csv", "Kunden", 1)


class TestFinishAndFail:
    """Tests for finish_upload() and fail_upload()"""

    def test_finish_sets_status(self, mock_db, mock_supabase):
        UploadHistoryService().finish_upload("u-1", 10, status=STATUS_PARTIAL)

        op = mock_supabase.writes("upload_history", "update")[0]
        assert op["payload"] == {"status": STATUS_PARTIAL, "row_count": 10}
        assert op["filters"] == [("eq", "id", "u-1")]

    def test_finish_failure_is_swallowed(self, mock_db, mock_supabase):
        mock_supabase.set_table_error("upload_history", Exception("down"), operation="update")

        UploadHistoryService().finish_upload("u-1", 10)

    def test_fail_truncates_message(self, mock_db, mock_supabase):
        UploadHistoryService().fail_upload("u-1", "x" * 5000)

        payload = mock_supabase.writes("upload_history", "update")[0]["payload"]
        assert payload["status"] == STATUS_ERROR
        assert len(payload["error_message"]) == 2000

    def test_fail_never_raises(self, mock_db, mock_supabase):
        mock_supabase.set_table_error("upload_history", Exception("down"))

        UploadHistoryService().fail_upload("u-1", "validation failed")


class TestListUploads:
    """Tests for list_uploads()"""

    def test_returns_entries(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("upload_history", [{
            "id": "u-1",
            "user_id": "user-1",
            "tenant_id": None,
            "filename": "kunden.csv",
            "data_type": "Kunden",
            "row_count": 3,
            "status": "success",
            "uploaded_at": "2025-06-01T10:00:00+00:00",
        }])

        entries = UploadHistoryService().list_uploads(None)

        assert entries[0].filename == "kunden.csv"
        assert ("is", "tenant_id", "null") in mock_supabase.operations[0]["filters"]
