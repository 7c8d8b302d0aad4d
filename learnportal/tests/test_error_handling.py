"""
Tests for the error taxonomy and the logging helpers.
"""

import json
import logging

import pytest

from learnportal.common.error_handling import (
    ConflictError, DatabaseError, DuplicateError, ErrorCode, NotFoundError, PortalError,
    ValidationError, error_response, log_error
)
from learnportal.common.logger import JsonFormatter, LoggerAdapter, log_execution_time


class TestErrors:
    def test_codes(self):
        assert ValidationError("bad").code == ErrorCode.VALIDATION_ERROR
        assert NotFoundError("Exam", "x").code == ErrorCode.NOT_FOUND_ERROR
        assert ConflictError("busy").code == ErrorCode.CONFLICT_ERROR
        assert DatabaseError("down").code == ErrorCode.DATABASE_ERROR

    def test_duplicate_is_a_conflict(self):
        error = DuplicateError("active attempt", "u/e")
        assert isinstance(error, ConflictError)
        assert error.code == ErrorCode.DUPLICATE_ERROR
        assert error.details == {"resource_type": "active attempt", "identifier": "u/e"}

    def test_not_found_message(self):
        error = NotFoundError("Exam", "abc")
        assert error.message == "Exam with ID abc not found"
        assert error.details["resource_id"] == "abc"

    def test_to_dict(self):
        error = DatabaseError("insert failed", cause=RuntimeError("disk full"))
        data = error.to_dict()
        assert data["code"] == "database_error"
        assert data["message"] == "Database error: insert failed"
        assert data["details"]["cause"] == {"type": "RuntimeError", "message": "disk full"}
        assert data["exception_type"] == "DatabaseError"

    def test_error_response(self):
        response = error_response(ValidationError("title is required", details={"field": "title"}))
        assert response == {
            "status": "error",
            "code": "validation_error",
            "message": "title is required",
            "details": {"field": "title"}
        }
        assert "details" not in error_response(ValidationError("x", details={"a": 1}), include_details=False)

    def test_error_response_wraps_foreign_exceptions(self):
        response = error_response(KeyError("boom"))
        assert response["code"] == "unknown_error"

    def test_log_error_levels(self, caplog):
        log = logging.getLogger("learnportal.tests.errors")
        log.propagate = True
        with caplog.at_level(logging.DEBUG, logger="learnportal.tests.errors"):
            log_error(NotFoundError("Exam", "abc"), context={"path": "/exams/abc"}, log=log)
            log_error(DatabaseError("down"), log=log)

        levels = [record.levelno for record in caplog.records]
        assert levels == [logging.WARNING, logging.ERROR]
        assert "path=/exams/abc" in caplog.records[0].getMessage()


class TestLogging:
    def test_json_formatter_merges_context(self):
        logger = logging.getLogger("learnportal.tests.json")
        adapter = LoggerAdapter(logger, {"attempt_id": "a1"}).with_context(user_id="u1")
        msg, kwargs = adapter.process("hello", {})

        record = logger.makeRecord(logger.name, logging.INFO, __file__, 1, msg, (), None, extra=kwargs["extra"])
        payload = json.loads(JsonFormatter().format(record))
        assert payload["message"] == "hello"
        assert payload["attempt_id"] == "a1"
        assert payload["user_id"] == "u1"

    @pytest.mark.asyncio
    async def test_log_execution_time_wraps_coroutines(self):
        @log_execution_time(logging.getLogger("learnportal.tests.timing"))
        async def double(value):
            return value * 2

        assert await double(21) == 42

    def test_log_execution_time_reraises(self):
        @log_execution_time()
        def fail():
            raise PortalError("nope")

        with pytest.raises(PortalError):
            fail()
