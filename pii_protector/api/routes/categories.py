"""GET /categories -- the configured category catalog."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from pii_protector.api.deps import get_catalog
from pii_protector.catalog.catalog import CategoryCatalog

router = APIRouter(tags=["categories"])


@router.get("/categories", summary="List recognised PII categories in display order")
def list_categories(catalog: CategoryCatalog = Depends(get_catalog)) -> dict[str, list[str]]:
    return {"categories": catalog.names}
