"""Pydantic schemas for error responses."""

from pydantic import BaseModel, Field


class ValidationErrorDetail(BaseModel):
    """A single validation error."""

    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error code")


class ValidationErrorResponse(BaseModel):
    """Response for schema or entry validation errors."""

    error: str = Field(default="Validation error", description="Error type")
    details: list[ValidationErrorDetail] = Field(..., description="List of validation errors")


class NotFoundResponse(BaseModel):
    """Response for a stale database or entry ID."""

    error: str = Field(default="Not found", description="Error type")
    message: str = Field(..., description="What could not be found")
