"""Comment model."""

from pydantic import AwareDatetime, BaseModel, ConfigDict


class Comment(BaseModel):
    """Represent one comment on a catalog item.

    Attributes:
        id: Comment identifier.
        item_id: Catalog item the comment belongs to.
        user_id: Author identifier.
        user_name: Author display name.
        content: Comment text.
        created_at: When the comment was created.
        updated_at: When the comment was last edited.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    item_id: str
    user_id: str
    user_name: str = "Anonymous"
    content: str
    created_at: AwareDatetime
    updated_at: AwareDatetime | None = None
