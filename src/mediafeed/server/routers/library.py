"""Library endpoints: derived view, item commands and comments."""

from datetime import datetime
import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from ...exceptions import (
    BackendError,
    CommentError,
    InvalidMediaUrlError,
    ItemCreateError,
    ItemDeleteError,
    NotFoundError,
)
from ...library_session import LibraryStats
from ...types import (
    CatalogItem,
    Category,
    Comment,
    ItemDraft,
    Section,
    SortKey,
    ViewParameters,
)
from ...view_pipeline import DerivedView
from ..dependencies import LibrarySessionDep, require_admin
from ..validation import ValidatedCommentId, ValidatedItemId

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/library")


class LibraryPageResponse(BaseModel):
    """One derived page of the library.

    Attributes:
        items: Items on the current page.
        page: Current 1-based page.
        total_pages: Number of pages; 0 when nothing matches.
        total_items: Number of items matching the filters.
        view: The view parameters the page was derived from.
    """

    items: list[CatalogItem]
    page: int
    total_pages: int
    total_items: int
    view: ViewParameters

    @classmethod
    def build(cls, view: DerivedView, params: ViewParameters) -> "LibraryPageResponse":
        return cls(
            items=list(view.items),
            page=view.page,
            total_pages=view.total_pages,
            total_items=view.total_items,
            view=params,
        )


class ViewUpdateRequest(BaseModel):
    """Changes to the view parameters; omitted fields keep their value."""

    category: Category | None = None
    query: str | None = None
    section: Section | None = None
    sort: SortKey | None = None


class PageRequest(BaseModel):
    page: int = Field(ge=1)


class AddItemRequest(BaseModel):
    """Admin request to add a catalog item from a video URL.

    Attributes:
        url: Video URL or bare video id.
        title: Item title; a placeholder is used when blank.
        description: Item description; a placeholder is used when blank.
        category: Item category.
    """

    url: str = Field(min_length=1)
    title: str = ""
    description: str = ""
    category: Category = Category.SERMONS


class FavoriteResponse(BaseModel):
    item_id: str
    favorite: bool


class ReloadResponse(BaseModel):
    item_count: int


class DetailResponse(BaseModel):
    """The item open in the detail view, if any."""

    item: CatalogItem | None
    opened_at: datetime | None


class CommentRequest(BaseModel):
    content: str = Field(min_length=1)


def _current_page(session: LibrarySessionDep) -> LibraryPageResponse:
    return LibraryPageResponse.build(session.current_view(), session.view_parameters)


# --- Derived view ---


@router.get("", response_model=LibraryPageResponse)
async def get_library(session: LibrarySessionDep) -> LibraryPageResponse:
    """Return the current page of the derived view."""
    return _current_page(session)


@router.patch("/view", response_model=LibraryPageResponse)
async def update_view(
    request: ViewUpdateRequest, session: LibrarySessionDep
) -> LibraryPageResponse:
    """Change category, query, section or sort; the page resets to 1."""
    session.update_view(**request.model_dump(exclude_none=True))
    return _current_page(session)


@router.put("/page", response_model=LibraryPageResponse)
async def set_page(
    request: PageRequest, session: LibrarySessionDep
) -> LibraryPageResponse:
    """Move to a page; out-of-range pages are clamped."""
    view = session.set_page(request.page)
    return LibraryPageResponse.build(view, session.view_parameters)


@router.get(
    "/stats", response_model=LibraryStats, dependencies=[Depends(require_admin)]
)
async def get_stats(session: LibrarySessionDep) -> LibraryStats:
    """Return the dashboard totals."""
    return session.stats()


@router.post("/reload", response_model=ReloadResponse)
async def reload_library(session: LibrarySessionDep) -> ReloadResponse:
    """Re-fetch the catalog and its like and comment aggregates.

    Raises:
        HTTPException: 502 if the backend cannot be reached.
    """
    try:
        count = await session.reload()
    except BackendError as e:
        raise HTTPException(status_code=502, detail="Failed to reload library") from e
    return ReloadResponse(item_count=count)


# --- Items ---


@router.get("/items/{item_id}", response_model=CatalogItem)
async def get_item(item_id: ValidatedItemId, session: LibrarySessionDep) -> CatalogItem:
    try:
        return session.get_item(item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Item not found") from e


@router.post("/items/{item_id}/play", response_model=CatalogItem)
async def play_item(
    item_id: ValidatedItemId, session: LibrarySessionDep
) -> CatalogItem:
    """Count a view and open the item in the detail view."""
    try:
        return session.play(item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Item not found") from e


@router.post("/items/{item_id}/like", response_model=CatalogItem)
async def like_item(
    item_id: ValidatedItemId, session: LibrarySessionDep
) -> CatalogItem:
    """Toggle the signed-in user's like."""
    try:
        return session.toggle_like(item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Item not found") from e


@router.post("/items/{item_id}/favorite", response_model=FavoriteResponse)
async def favorite_item(
    item_id: ValidatedItemId, session: LibrarySessionDep
) -> FavoriteResponse:
    """Toggle the favorite state; the item need not be in the catalog."""
    favorite = await session.toggle_favorite(item_id)
    return FavoriteResponse(item_id=item_id, favorite=favorite)


@router.post(
    "/items",
    response_model=CatalogItem,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
async def add_item(request: AddItemRequest, session: LibrarySessionDep) -> CatalogItem:
    """Add a catalog item from a video URL.

    Raises:
        HTTPException: 400 for an unrecognized URL; 502 if the backend
            rejects the item.
    """
    try:
        draft = ItemDraft.from_url(
            request.url,
            title=request.title,
            description=request.description,
            category=request.category,
        )
    except InvalidMediaUrlError as e:
        raise HTTPException(status_code=400, detail="Invalid YouTube URL") from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    try:
        return await session.add_item(draft)
    except ItemCreateError as e:
        logger.error(
            "Add item failed.", extra={"title": draft.title}, exc_info=e
        )
        raise HTTPException(
            status_code=502, detail="Failed to add media item. Please try again."
        ) from e


@router.delete(
    "/items/{item_id}", status_code=204, dependencies=[Depends(require_admin)]
)
async def delete_item(item_id: ValidatedItemId, session: LibrarySessionDep) -> Response:
    """Delete a catalog item.

    Raises:
        HTTPException: 404 if the item is unknown; 502 if the backend
            refuses the deletion.
    """
    if item_id not in session.store:
        raise HTTPException(status_code=404, detail="Item not found")
    try:
        await session.delete_item(item_id)
    except ItemDeleteError as e:
        logger.error("Delete item failed.", extra={"item_id": item_id}, exc_info=e)
        raise HTTPException(
            status_code=502, detail="Failed to delete media item. Please try again."
        ) from e
    return Response(status_code=204)


# --- Detail view ---


@router.get("/detail", response_model=DetailResponse)
async def get_detail(session: LibrarySessionDep) -> DetailResponse:
    return DetailResponse(item=session.detail.item, opened_at=session.detail.opened_at)


@router.delete("/detail", status_code=204)
async def close_detail(session: LibrarySessionDep) -> Response:
    session.close_detail()
    return Response(status_code=204)


# --- Comments ---


@router.get("/items/{item_id}/comments", response_model=list[Comment])
async def list_comments(
    item_id: ValidatedItemId, session: LibrarySessionDep
) -> list[Comment]:
    try:
        return await session.comments(item_id)
    except CommentError as e:
        raise HTTPException(status_code=502, detail="Failed to load comments") from e


@router.post("/items/{item_id}/comments", status_code=201, response_model=list[Comment])
async def add_comment(
    item_id: ValidatedItemId, request: CommentRequest, session: LibrarySessionDep
) -> list[Comment]:
    """Post a comment and return the refreshed comment list."""
    if not request.content.strip():
        raise HTTPException(status_code=422, detail="Comment content is empty")
    try:
        await session.add_comment(item_id, request.content)
        return await session.comments(item_id)
    except CommentError as e:
        raise HTTPException(status_code=502, detail="Failed to add comment") from e


@router.put("/comments/{comment_id}", status_code=204)
async def update_comment(
    comment_id: ValidatedCommentId,
    request: CommentRequest,
    session: LibrarySessionDep,
) -> Response:
    if not request.content.strip():
        raise HTTPException(status_code=422, detail="Comment content is empty")
    try:
        await session.update_comment(comment_id, request.content)
    except CommentError as e:
        raise HTTPException(status_code=502, detail="Failed to update comment") from e
    return Response(status_code=204)


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: ValidatedCommentId, session: LibrarySessionDep
) -> Response:
    try:
        await session.delete_comment(comment_id)
    except CommentError as e:
        raise HTTPException(status_code=502, detail="Failed to delete comment") from e
    return Response(status_code=204)


@router.post("/items/{item_id}/comments/close", response_model=LibraryPageResponse)
async def close_comments(
    item_id: ValidatedItemId, session: LibrarySessionDep
) -> LibraryPageResponse:
    """End the comment view; like and comment counts are reloaded."""
    await session.close_comments(item_id)
    return _current_page(session)
