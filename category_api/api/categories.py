"""Category API endpoints.

Provides the category page endpoint and the inline image cleanup.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from category_api.api.schemas import CategoryPageData, CategoryPageResponse, ErrorResponse
from category_api.application.category_service import CategoryService, get_category_service
from category_api.domain.exceptions import ErrorKind
from category_api.infrastructure.config import settings
from category_api.infrastructure.database import get_session_factory

router = APIRouter(prefix="/v1", tags=["Categories"])

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "CATEGORY_NOT_FOUND"),
    ErrorKind.INVALID: (status.HTTP_400_BAD_REQUEST, "INVALID_CATEGORY_URL"),
    ErrorKind.STORE_FAILURE: (status.HTTP_500_INTERNAL_SERVER_ERROR, "STORE_FAILURE"),
}


# ============================================================================
# Dependencies
# ============================================================================


def get_service(
    request: Request,
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> CategoryService:
    """Get category service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_category_service(session_factory, request_id=request_id)


def error_status(kind: ErrorKind | None) -> tuple[int, str]:
    """Map an error kind to an HTTP status and error code.

    With ``flatten_errors_to_500`` enabled every failure is reported as an
    internal error, as older clients expect.
    """
    if settings.flatten_errors_to_500:
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR"
    return ERROR_STATUS.get(kind, (status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR"))


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/remove-base64",
    response_class=PlainTextResponse,
    status_code=status.HTTP_200_OK,
    responses={500: {"model": ErrorResponse}},
    summary="Remove inline images",
    description="Clear image fields that hold inline base64 data.",
)
async def remove_base64(
    service: Annotated[CategoryService, Depends(get_service)],
) -> PlainTextResponse:
    """Clear inline base64 images from categories, products and galleries.

    Returns:
        Plain-text ``success``.

    Raises:
        HTTPException: If the data store fails.
    """
    result = await service.remove_base64_images()

    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error_code": "STORE_FAILURE",
                "message": result.error or "Failed to remove inline images",
            },
        )

    return PlainTextResponse("success")


@router.get(
    "/{url}",
    response_model=CategoryPageResponse,
    response_model_by_alias=True,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Get category page",
    description=(
        "Resolve a category URL (slug followed by `__key_value` facet "
        "segments) into the category, its options, filters, tags, "
        "breadcrumbs and viewed-with options."
    ),
)
async def get_category_page(
    url: str,
    service: Annotated[CategoryService, Depends(get_service)],
) -> CategoryPageResponse:
    """Get a category page.

    Args:
        url: Category slug with optional facet segments.
        service: Category service.

    Returns:
        Category page envelope.

    Raises:
        HTTPException: If the category is missing or resolution fails.
    """
    result = await service.get_category_page(url)

    if not result.success or result.page is None:
        status_code, error_code = error_status(result.error_kind)
        raise HTTPException(
            status_code=status_code,
            detail={
                "error_code": error_code,
                "message": result.error or f"Category not found: {url}",
            },
        )

    return CategoryPageResponse(
        status=True,
        data=CategoryPageData.model_validate(result.page.to_dict()),
    )
