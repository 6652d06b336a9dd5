"""FastAPI dependency injection -- catalog, oracle client and scan service."""
from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from pii_protector.catalog.catalog import CategoryCatalog
from pii_protector.core.settings import get_settings
from pii_protector.llm.client import OllamaClient
from pii_protector.scan.service import ScanService


@lru_cache(maxsize=1)
def get_catalog() -> CategoryCatalog:
    """Return the catalog loaded from ``CATEGORIES_PATH`` (loaded once)."""
    return CategoryCatalog.default()


def get_oracle_client() -> OllamaClient:
    """Return an Ollama client configured from settings."""
    return OllamaClient()


def get_scan_service(
    client: OllamaClient = Depends(get_oracle_client),
    catalog: CategoryCatalog = Depends(get_catalog),
) -> ScanService:
    """Return a ScanService bound to the configured oracle and catalog."""
    return ScanService(client, catalog, get_settings())
