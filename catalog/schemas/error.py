"""Error envelope schema shared across API handlers."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone

from pydantic import BaseModel
from pydantic import Field


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ErrorResponse(BaseModel):
    """Uniform error payload rendered for every failed request."""

    status_code: int = Field(serialization_alias="statusCode")
    message: str
    error_code: str = Field(serialization_alias="errorCode")
    validation_errors: dict[str, list[str]] | None = Field(default=None, serialization_alias="validationErrors")
    details: str | None = None
    timestamp: datetime = Field(default_factory=_utc_now)

    def to_wire(self) -> dict:
        """Return the camelCase JSON-ready payload."""
        return self.model_dump(mode="json", by_alias=True)
