"""Database access layer for the favorite set."""

import logging

from sqlalchemy import delete
from sqlalchemy.dialects.sqlite import insert
from sqlmodel import col, select

from .decorators import handle_db_errors
from .sqlalchemy_core import SqlalchemyCore
from .types import Favorite

logger = logging.getLogger(__name__)


class FavoritesDatabase:
    """Manage persistence of the favorite set.

    Attributes:
        _db: Core SQLAlchemy database manager.
    """

    def __init__(self, db_core: SqlalchemyCore):
        self._db = db_core

    @handle_db_errors("load favorites")
    async def get_favorite_ids(self) -> set[str]:
        """Return the ids of all favorite items."""
        async with self._db.session() as session:
            result = await session.execute(select(Favorite.item_id))
            return {row[0] for row in result.all()}

    @handle_db_errors("add favorite", item_id_from="item_id")
    async def add_favorite(self, item_id: str) -> None:
        """Mark ``item_id`` as a favorite; adding an existing favorite is a no-op.

        Args:
            item_id: Catalog item identifier.

        Raises:
            DatabaseOperationError: If the database operation fails.
        """
        async with self._db.session() as session:
            stmt = (
                insert(Favorite)
                .values(item_id=item_id)
                .on_conflict_do_nothing(index_elements=["item_id"])
            )
            await session.execute(stmt)
            await session.commit()
        logger.debug("Favorite stored.", extra={"item_id": item_id})

    @handle_db_errors("remove favorite", item_id_from="item_id")
    async def remove_favorite(self, item_id: str) -> bool:
        """Remove ``item_id`` from the favorites.

        Args:
            item_id: Catalog item identifier.

        Returns:
            True if a row was deleted.

        Raises:
            DatabaseOperationError: If the database operation fails.
        """
        async with self._db.session() as session:
            stmt = delete(Favorite).where(col(Favorite.item_id) == item_id)
            result = await session.execute(stmt)
            await session.commit()
        logger.debug("Favorite removed.", extra={"item_id": item_id})
        return result.rowcount > 0
