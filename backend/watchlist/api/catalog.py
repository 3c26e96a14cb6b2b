"""
Catalog API — /catalog
───────────────────────
Read-only TMDB proxy; keeps the TMDB token on the server.

Endpoints:
  GET /catalog/search        — Title search (paged)
  GET /catalog/{tmdb_id}     — Movie details
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status

from watchlist.api.errors import error_envelope
from watchlist.schemas.catalog import CatalogDetailEntry, CatalogSearchResponse
from watchlist.services.catalog_service import (
    CatalogConfigError,
    CatalogNotFoundError,
    CatalogService,
    CatalogUpstreamError,
)

router = APIRouter()


def get_catalog_service() -> CatalogService:
    try:
        return CatalogService()
    except CatalogConfigError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=error_envelope("CATALOG_DISABLED", str(exc)),
        ) from exc


@router.get("/search", response_model=CatalogSearchResponse)
async def search_catalog(
    q: str = Query(..., min_length=1, description="Title query"),
    page: int = Query(1, ge=1, le=500),
    catalog: CatalogService = Depends(get_catalog_service),
) -> CatalogSearchResponse:
    try:
        return await catalog.search(q, page=page)
    except CatalogUpstreamError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=error_envelope("CATALOG_SEARCH_FAILED", str(exc)),
        ) from exc


@router.get("/{tmdb_id}", response_model=CatalogDetailEntry)
async def catalog_details(
    tmdb_id: int,
    catalog: CatalogService = Depends(get_catalog_service),
) -> CatalogDetailEntry:
    try:
        return await catalog.get_details(tmdb_id)
    except CatalogNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_envelope("CATALOG_NOT_FOUND", str(exc)),
        ) from exc
    except CatalogUpstreamError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=error_envelope("CATALOG_DETAILS_FAILED", str(exc)),
        ) from exc
