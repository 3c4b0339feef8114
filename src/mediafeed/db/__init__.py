from .favorites_db import FavoritesDatabase
from .sqlalchemy_core import SqlalchemyCore

__all__ = [
    "FavoritesDatabase",
    "SqlalchemyCore",
]
