"""GET /health -- liveness plus oracle reachability."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from pii_protector.api.deps import get_catalog, get_oracle_client
from pii_protector.catalog.catalog import CategoryCatalog
from pii_protector.core.settings import get_settings
from pii_protector.llm.client import OllamaClient

router = APIRouter(tags=["health"])


@router.get("/health", summary="Service and oracle status")
async def health_check(
    client: OllamaClient = Depends(get_oracle_client),
    catalog: CategoryCatalog = Depends(get_catalog),
) -> dict[str, object]:
    """Report ``degraded`` rather than failing when Ollama is down.

    Scans need the oracle; the catalog endpoints do not.
    """
    settings = get_settings()
    reachable = await client.is_available()
    return {
        "status": "ok" if reachable else "degraded",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
        "oracle": {"model": client.model, "reachable": reachable},
        "categories": len(catalog),
    }
