"""Catalog Loader: read and write rule catalogs as JSON documents.

Invariants:
    - load_catalog() returns a fully validated CategoryCatalog or raises
      CatalogConfigurationError (InvalidCatalogError for unreadable documents)
    - dump_catalog() output is stable: canonical category order, sorted keys
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from license_engine.core.category_catalog import CategoryCatalog
from license_engine.core.errors import ErrorContext, InvalidCatalogError
from license_engine.schemas.catalog import CatalogDocument

logger = logging.getLogger(__name__)


def load_catalog(path: str | Path) -> CategoryCatalog:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InvalidCatalogError(
            f"Catalog document cannot be read: {path}",
            ErrorContext(source=str(path), debug_info={"error": str(e)}),
        ) from e

    try:
        document = CatalogDocument.model_validate_json(text)
    except ValidationError as e:
        raise InvalidCatalogError(
            f"Catalog document is invalid: {path} ({e.error_count()} errors)",
            ErrorContext(source=str(path), debug_info={"errors": e.errors(include_url=False)}),
        ) from e

    catalog = document.to_catalog()
    logger.info(
        "Catalog loaded from %s (%d rules)", path, len(document.rules),
        extra={"catalog_source": str(path)},
    )
    return catalog


def dump_catalog(catalog: CategoryCatalog, path: str | Path) -> Path:
    path = Path(path)
    document = CatalogDocument.from_catalog(catalog)
    path.write_text(
        json.dumps(document.model_dump(mode="json"), indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return path
