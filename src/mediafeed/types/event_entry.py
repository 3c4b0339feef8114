"""Events feed entry model."""

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class EventEntry(BaseModel):
    """Represent a scheduled event in the secondary events feed.

    Attributes:
        id: Event identifier assigned by the backend.
        title: Event title.
        event_date: When the event takes place.
        created_at: When the event was created, if known.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    event_date: AwareDatetime
    created_at: AwareDatetime | None = None
