"""Catalog loading and the process-wide snapshot holder.

The search core never sees the store: request handlers read
:attr:`CatalogStore.snapshot` once and pass its product tuple along. Reloads
build a complete new snapshot and publish it with a single attribute
assignment, so concurrent searches keep working on whichever snapshot they
started with.
"""
from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Tuple

from .config import settings
from .models import Product

logger = logging.getLogger(__name__)


class CatalogLoadError(RuntimeError):
    """Raised when the catalog file cannot be turned into products."""


@dataclass(frozen=True)
class CatalogSnapshot:
    products: Tuple[Product, ...] = ()
    ready: bool = False
    version: str = ""
    loaded_at: datetime | None = None
    error: str | None = None
    load_ms: float = 0.0

    @property
    def count(self) -> int:
        return len(self.products)


def load_products(path: str | Path) -> Tuple[Product, ...]:
    """Read a JSON array of product records from ``path``."""

    file_path = Path(path)
    if not file_path.exists():
        raise CatalogLoadError(f"File not found: {file_path}")

    size = file_path.stat().st_size
    logger.info("Catalog file %s size=%s bytes (%.2f MB)", file_path, size, size / 1024 / 1024)
    if size == 0:
        raise CatalogLoadError(f"{file_path.name} is empty")

    try:
        with file_path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise CatalogLoadError(f"{file_path.name} is not valid JSON: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogLoadError(f"Cannot read {file_path}: {exc}") from exc

    if not isinstance(data, list):
        raise CatalogLoadError(f"{file_path.name} must be an array")
    if not data:
        logger.warning("Catalog %s is an empty array", file_path)

    products = []
    for position, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise CatalogLoadError(f"{file_path.name}: record {position} is not an object")
        products.append(Product.model_validate(raw))
    return tuple(products)


class CatalogStore:
    """Holds the current :class:`CatalogSnapshot` for one catalog file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._snapshot = CatalogSnapshot()
        self._reload_lock = threading.Lock()

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def reload(self) -> bool:
        """Load the catalog file and publish it; degrade on failure."""

        with self._reload_lock:
            started = time.perf_counter()
            logger.info("Loading products from %s", self.path)
            try:
                products = load_products(self.path)
            except CatalogLoadError as exc:
                logger.error("Failed to load products: %s", exc)
                self._snapshot = CatalogSnapshot(error=str(exc))
                return False

            load_ms = (time.perf_counter() - started) * 1000
            self._snapshot = CatalogSnapshot(
                products=products,
                ready=True,
                version=uuid.uuid4().hex,
                loaded_at=datetime.now(timezone.utc),
                load_ms=load_ms,
            )
            logger.info("Products loaded count=%s load_ms=%.1f", len(products), load_ms)
            return True


@lru_cache(maxsize=1)
def get_store() -> CatalogStore:
    return CatalogStore(settings.catalog_path)
