"""Signed-in session context handed to the library engine."""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class SessionContext(BaseModel):
    """The catalog-relevant slice of the signed-in session.

    Attributes:
        user_id: Identifier of the signed-in user.
        role: Role of the signed-in user.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: Literal["admin", "user"] = "user"

    @property
    def is_admin(self) -> bool:
        """Whether the user may curate the catalog and events feed."""
        return self.role == "admin"
