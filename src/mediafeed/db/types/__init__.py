"""Database model types."""

from .favorite import Favorite

__all__ = [
    "Favorite",
]
