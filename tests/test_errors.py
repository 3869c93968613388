"""Tests for error classification and Result."""

import httpx
import pytest
from supabase import PostgrestAPIError, StorageException

from vaultshare.core.errors import (
    BackendError, ErrorKind, RetryExhaustedError, ValidationError, classify_error,
    is_backend_reported, to_backend_error,
)
from vaultshare.core.result import Result


class TestClassifyError:
    @pytest.mark.parametrize("exc", [
        httpx.ConnectError("refused"),
        httpx.ReadTimeout("timed out"),
        httpx.RemoteProtocolError("server disconnected"),
        ConnectionResetError("reset"),
        RuntimeError("Network error while contacting backend"),
    ])
    def test_transport_failures_are_transient(self, exc):
        assert classify_error(exc) is ErrorKind.TRANSIENT

    @pytest.mark.parametrize("exc", [
        PostgrestAPIError({"message": "duplicate key", "code": "23505"}),
        StorageException({"statusCode": 400, "error": "Bad", "message": "invalid key"}),
        ValueError("bad input"),
    ])
    def test_everything_else_is_not_transient(self, exc):
        assert classify_error(exc) is not ErrorKind.TRANSIENT

    def test_taxonomy_members_keep_their_kind(self):
        assert classify_error(ValidationError("too big")) is ErrorKind.VALIDATION
        assert classify_error(BackendError("nope")) is ErrorKind.BACKEND


class TestToBackendError:
    def test_postgrest_fields_are_kept(self):
        error = to_backend_error(PostgrestAPIError({
            "message": "JSON object requested, multiple (or no) rows returned",
            "code": "PGRST116",
            "details": "The result contains 0 rows",
            "hint": None,
        }))

        assert error.code == "PGRST116"
        assert error.is_not_found
        assert error.details == "The result contains 0 rows"

    def test_storage_payload_is_unpacked(self):
        error = to_backend_error(StorageException({
            "statusCode": 409, "error": "Duplicate", "message": "The resource already exists",
        }))

        assert error.message == "The resource already exists"
        assert error.code == "409"
        assert error.is_conflict

    def test_missing_relation_detected_by_code_or_message(self):
        assert BackendError("boom", code="42P01").is_missing_relation
        assert BackendError('relation "public.profiles" does not exist').is_missing_relation
        assert not BackendError("permission denied", code="42501").is_missing_relation

    def test_backend_reported(self):
        assert is_backend_reported(PostgrestAPIError({"message": "x"}))
        assert not is_backend_reported(httpx.ConnectError("x"))
        assert not is_backend_reported(RetryExhaustedError("op", 3, httpx.ConnectError("x")))


class TestResult:
    def test_unpacks_as_pair(self):
        data, error = Result.success([1, 2])
        assert data == [1, 2]
        assert error is None

    def test_failure_unwrap_raises(self):
        result = Result.failure(BackendError("gone", code="PGRST116"))
        assert not result.ok
        with pytest.raises(BackendError):
            result.unwrap()
