"""Tests for ServiceResult."""

from __future__ import annotations

from covctl.domain.errors import UnknownImplementationError
from covctl.services.result import ServiceResult


class TestServiceResult:
    def test_success(self) -> None:
        result = ServiceResult.success("op", {"a": 1}, ["careful"])
        assert result.ok
        assert result.data == {"a": 1}
        assert result.warnings == ["careful"]
        assert result.error is None

    def test_failure_carries_detail(self) -> None:
        result = ServiceResult.failure("op", "NOT_FOUND", "missing", name="x")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
        assert result.error.detail == {"name": "x"}

    def test_from_exception_uses_error_code(self) -> None:
        result = ServiceResult.from_exception("use_runner", UnknownImplementationError("nose"))
        assert result.error is not None
        assert result.error.code == "UNKNOWN_RUNNER"
        assert "nose" in result.error.message
