"""API schemas for the category API.

Pydantic models for response validation and serialization.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Category Page Schemas
# ============================================================================


class CategoryPageData(BaseModel):
    """Category page payload."""

    model_config = ConfigDict(populate_by_name=True)

    category: dict[str, Any] = Field(..., description="Category with its product lists")
    options: list[dict[str, Any]] = Field(
        default_factory=list, description="Resolved product options"
    )
    filters: list[dict[str, Any]] = Field(
        default_factory=list, description="Active filters with active values"
    )
    tags: list[dict[str, Any]] = Field(default_factory=list, description="Category tags")
    breadcrumbs: list[dict[str, Any]] = Field(
        default_factory=list, description="Ancestor categories, root first"
    )
    options_viewed_with: list[dict[str, Any]] = Field(
        default_factory=list,
        alias="optionsViewedWith",
        description="Ordered options of related categories",
    )


class CategoryPageResponse(BaseModel):
    """Category page response envelope."""

    status: bool = Field(default=True, description="Whether resolution succeeded")
    data: CategoryPageData
