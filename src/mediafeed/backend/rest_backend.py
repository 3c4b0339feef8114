"""HTTP implementation of the backend collaborator.

Talks to a PostgREST-style REST API (``/rest/v1/<table>`` and
``/rest/v1/rpc/<function>``) with httpx.
"""

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime
import logging
from typing import Any, cast

import httpx

from ..exceptions import BackendError
from ..types import ItemDraft
from .base import Row

logger = logging.getLogger(__name__)

ITEMS_TABLE = "media_items"
LIKES_TABLE = "video_likes"
COMMENTS_TABLE = "video_comments"
PROFILES_TABLE = "profiles"
EVENTS_TABLE = "church_events"
INCREMENT_VIEWS_RPC = "increment_views"


def _in_filter(values: Iterable[str]) -> str:
    """Render a PostgREST ``in.(...)`` filter value."""
    quoted = ",".join(f'"{v}"' for v in values)
    return f"in.({quoted})"


class RestCatalogBackend:
    """Backend collaborator over a PostgREST-style HTTP API.

    Attributes:
        _client: Shared async HTTP client bound to the backend base URL.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/rest/v1",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        logger.debug("RestCatalogBackend initialized.", extra={"base_url": base_url})

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        item_id: str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request and translate failures to BackendError.

        Args:
            method: HTTP method.
            path: Path relative to the REST root.
            operation: Short operation name for error context.
            item_id: Catalog item id for error context.
            **kwargs: Passed to :meth:`httpx.AsyncClient.request`.

        Returns:
            The successful response.

        Raises:
            BackendError: On transport failure or a non-2xx status.
        """
        log_params = {"operation": operation, "path": path}
        if item_id is not None:
            log_params["item_id"] = item_id
        logger.debug("Sending backend request.", extra=log_params)

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise BackendError(
                "Backend request failed.",
                operation=operation,
                item_id=item_id,
            ) from e

        if response.is_error:
            raise BackendError(
                f"Backend returned HTTP {response.status_code}.",
                operation=operation,
                item_id=item_id,
                status_code=response.status_code,
            )
        return response

    async def _rows(
        self,
        path: str,
        operation: str,
        params: dict[str, str],
        item_id: str | None = None,
    ) -> list[Row]:
        response = await self._request(
            "GET", path, operation, item_id=item_id, params=params
        )
        try:
            payload = response.json()
        except ValueError as e:
            raise BackendError(
                "Backend returned invalid JSON.", operation=operation, item_id=item_id
            ) from e
        if not isinstance(payload, list):
            raise BackendError(
                "Backend returned a non-list payload.",
                operation=operation,
                item_id=item_id,
            )
        return cast(list[Row], payload)

    async def _insert_returning(
        self, path: str, operation: str, body: dict[str, Any]
    ) -> Row:
        response = await self._request(
            "POST",
            path,
            operation,
            json=body,
            headers={"Prefer": "return=representation"},
        )
        try:
            payload = response.json()
        except ValueError as e:
            raise BackendError(
                "Backend returned invalid JSON.", operation=operation
            ) from e
        if isinstance(payload, list) and payload:
            payload = payload[0]
        if not isinstance(payload, dict):
            raise BackendError(
                "Backend did not return the created row.", operation=operation
            )
        return cast(Row, payload)

    async def _count_by_item(
        self, table: str, item_ids: Iterable[str], operation: str
    ) -> dict[str, int]:
        ids = list(item_ids)
        if not ids:
            return {}
        rows = await self._rows(
            f"/{table}",
            operation,
            params={"select": "video_id", "video_id": _in_filter(ids)},
        )
        return dict(Counter(str(row["video_id"]) for row in rows if "video_id" in row))

    # --- Catalog ---

    async def fetch_catalog(self) -> list[Row]:
        return await self._rows(
            f"/{ITEMS_TABLE}",
            "fetch catalog",
            params={"select": "*", "order": "created_at.desc"},
        )

    async def insert_item(self, draft: ItemDraft, created_by: str) -> Row:
        return await self._insert_returning(
            f"/{ITEMS_TABLE}",
            "insert item",
            {
                "youtube_id": draft.media_ref,
                "title": draft.title,
                "description": draft.description,
                "category": draft.category.value,
                "thumbnail_url": draft.thumbnail,
                "created_by": created_by,
            },
        )

    async def delete_item(self, item_id: str) -> None:
        await self._request(
            "DELETE",
            f"/{ITEMS_TABLE}",
            "delete item",
            item_id=item_id,
            params={"id": f"eq.{item_id}"},
        )

    async def like_item(self, item_id: str, user_id: str) -> None:
        await self._request(
            "POST",
            f"/{LIKES_TABLE}",
            "like item",
            item_id=item_id,
            json={"video_id": item_id, "user_id": user_id},
        )

    async def unlike_item(self, item_id: str, user_id: str) -> None:
        await self._request(
            "DELETE",
            f"/{LIKES_TABLE}",
            "unlike item",
            item_id=item_id,
            params={"video_id": f"eq.{item_id}", "user_id": f"eq.{user_id}"},
        )

    async def increment_views(self, item_id: str) -> None:
        await self._request(
            "POST",
            f"/rpc/{INCREMENT_VIEWS_RPC}",
            "increment views",
            item_id=item_id,
            json={"video_id": item_id},
        )

    async def fetch_like_counts(self, item_ids: Iterable[str]) -> dict[str, int]:
        return await self._count_by_item(LIKES_TABLE, item_ids, "fetch like counts")

    async def fetch_user_likes(
        self, user_id: str, item_ids: Iterable[str]
    ) -> set[str]:
        ids = list(item_ids)
        if not ids:
            return set()
        rows = await self._rows(
            f"/{LIKES_TABLE}",
            "fetch user likes",
            params={
                "select": "video_id",
                "user_id": f"eq.{user_id}",
                "video_id": _in_filter(ids),
            },
        )
        return {str(row["video_id"]) for row in rows if "video_id" in row}

    async def fetch_comment_counts(self, item_ids: Iterable[str]) -> dict[str, int]:
        return await self._count_by_item(
            COMMENTS_TABLE, item_ids, "fetch comment counts"
        )

    # --- Comments ---

    async def fetch_comments(self, item_id: str) -> list[Row]:
        return await self._rows(
            f"/{COMMENTS_TABLE}",
            "fetch comments",
            item_id=item_id,
            params={
                "select": "id,video_id,user_id,content,created_at,updated_at",
                "video_id": f"eq.{item_id}",
                "order": "created_at.desc",
            },
        )

    async def insert_comment(self, item_id: str, user_id: str, content: str) -> None:
        await self._request(
            "POST",
            f"/{COMMENTS_TABLE}",
            "insert comment",
            item_id=item_id,
            json={"video_id": item_id, "user_id": user_id, "content": content},
        )

    async def update_comment(self, comment_id: str, user_id: str, content: str) -> None:
        await self._request(
            "PATCH",
            f"/{COMMENTS_TABLE}",
            "update comment",
            params={"id": f"eq.{comment_id}", "user_id": f"eq.{user_id}"},
            json={
                "content": content,
                "updated_at": datetime.now(UTC).isoformat(),
            },
        )

    async def delete_comment(self, comment_id: str, user_id: str) -> None:
        await self._request(
            "DELETE",
            f"/{COMMENTS_TABLE}",
            "delete comment",
            params={"id": f"eq.{comment_id}", "user_id": f"eq.{user_id}"},
        )

    async def fetch_profile_names(self, user_ids: Iterable[str]) -> dict[str, str]:
        ids = list(user_ids)
        if not ids:
            return {}
        rows = await self._rows(
            f"/{PROFILES_TABLE}",
            "fetch profiles",
            params={"select": "id,full_name", "id": _in_filter(ids)},
        )
        return {
            str(row["id"]): row["full_name"]
            for row in rows
            if row.get("id") is not None and row.get("full_name")
        }

    # --- Events feed ---

    async def fetch_events(self) -> list[Row]:
        return await self._rows(
            f"/{EVENTS_TABLE}",
            "fetch events",
            params={"select": "*", "order": "event_date.asc"},
        )

    async def insert_event(
        self, title: str, event_date: datetime, created_by: str
    ) -> Row:
        return await self._insert_returning(
            f"/{EVENTS_TABLE}",
            "insert event",
            {
                "title": title,
                "event_date": event_date.isoformat(),
                "created_by": created_by,
            },
        )

    async def delete_event(self, event_id: str) -> None:
        await self._request(
            "DELETE",
            f"/{EVENTS_TABLE}",
            "delete event",
            params={"id": f"eq.{event_id}"},
        )
