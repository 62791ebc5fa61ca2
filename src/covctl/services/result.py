"""ServiceResult and ServiceError — the contract between services and the CLI.

INVARIANT: every CLI-facing service method returns a ServiceResult; domain
exceptions are converted here, never printed by the service itself.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from covctl.domain.errors import CovctlError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"use_runner"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def success(
        cls,
        op: str,
        data: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        return cls(ok=True, op=op, data=data or {}, warnings=warnings or [])

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        **detail: Any,
    ) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))

    @classmethod
    def from_exception(cls, op: str, exc: CovctlError) -> ServiceResult:
        return cls.failure(op, exc.code, str(exc))
