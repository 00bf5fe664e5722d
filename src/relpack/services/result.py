"""ServiceResult and ServiceError — the shared result contract.

INVARIANT: Service operations and plugin build steps return ServiceResult.
The CLI consumes this type; plugins use it to short-circuit their step chains.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type for service operations and plugin steps.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"assemble"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        **detail: Any,
    ) -> ServiceResult:
        """Shorthand for a failed result carrying a single error."""
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))
