"""Common schemas used across multiple endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model mapping snake_case fields to the API's camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorDetail(CamelModel):
    """Structured error payload."""
    code: str
    message: str
    retry_after: Optional[float] = None

    @field_validator("retry_after", mode="before")
    @classmethod
    def lenient_retry_after(cls, value: Any) -> Optional[float]:
        """An unusable delay is dropped rather than failing the whole error body."""
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None


class ErrorResponse(CamelModel):
    """Response model for errors."""
    error: ErrorDetail


class SuccessResponse(CamelModel):
    """Response model for bare acknowledgements."""
    success: bool
