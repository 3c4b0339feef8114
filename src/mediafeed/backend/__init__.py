from .base import CatalogBackend, Row
from .rest_backend import RestCatalogBackend

__all__ = [
    "CatalogBackend",
    "RestCatalogBackend",
    "Row",
]
