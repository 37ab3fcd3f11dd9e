"""
Lookup API Routes

Public reference data for the document portal.
"""

from fastapi import APIRouter, Depends

from document_service.api.dependencies import get_category_repository
from document_service.core.category_repository import DocumentCategorieRepository
from document_service.models import CategoryListResponse, CategoryResponse

router = APIRouter(prefix="/api/v1/lookup", tags=["lookup"])


@router.get(
    "/document-categorieen",
    response_model=CategoryListResponse,
    summary="List Document Categories",
    description="""
Returns active document categories ordered for display, with their allowed
extensions and maximum file size. Served from a process-wide cache
(TTL configured via CATEGORY_CACHE_TTL_SECONDS).

**Authorization**: None required (public endpoint)
    """,
    responses={200: {"description": "Categories returned"}},
)
async def list_document_categories(
    categories: DocumentCategorieRepository = Depends(get_category_repository),
) -> CategoryListResponse:
    """List active categories"""
    active = await categories.find_all_active()
    return CategoryListResponse(categorieen=[CategoryResponse.from_categorie(c) for c in active])
