"""HTTP client for the LinkShelf API with optimistic drag reordering.

:class:`LinkBoard` keeps a local copy of the user's links in display order.
A drag is modeled as a :class:`PendingReorder` that moves through the
:class:`ReorderState` states::

    IDLE -> DRAGGING -> PENDING_SYNC -> SYNCED
                                     -> ROLLBACK -> IDLE

The local order is updated as soon as the item is dropped. If the server
rejects the new order, the board goes back to the order it had before the
drop and then fetches the server copy again.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

import httpx


logger = logging.getLogger(__name__)


class ReorderState(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    PENDING_SYNC = "pending_sync"
    SYNCED = "synced"
    ROLLBACK = "rollback"


class LinkBoardError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class PendingReorder:
    link_id: int
    from_index: int
    to_index: int | None = None
    state: ReorderState = ReorderState.DRAGGING
    previous: list[dict] = field(default_factory=list)
    orders: list[dict] = field(default_factory=list)
    error: str | None = None


def array_move(items: list, from_index: int, to_index: int) -> list:
    moved = list(items)
    item = moved.pop(from_index)
    moved.insert(to_index, item)
    return moved


def matches_tags(link: dict, selected) -> bool:
    tags = set(link.get("tags") or [])
    return all(tag in tags for tag in selected)


class LinkBoard:
    def __init__(self, http: httpx.Client):
        self.http = http
        self.links: list[dict] = []
        self.pending: PendingReorder | None = None

    @property
    def state(self) -> ReorderState:
        if self.pending is None:
            return ReorderState.IDLE
        return self.pending.state

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        response = self.http.request(method, path, **kwargs)
        if response.is_error:
            try:
                message = response.json().get("error") or response.reason_phrase
            except ValueError:
                message = response.reason_phrase
            raise LinkBoardError(message, status_code=response.status_code)
        return response

    def login(self, username: str, password: str) -> dict:
        response = self._request(
            "POST",
            "/api/auth/login",
            json={"username": username, "password": password},
        )
        return response.json()["user"]

    def refresh(self) -> list[dict]:
        response = self._request("GET", "/api/links")
        self.links = sorted(response.json(), key=lambda link: link["order"])
        return self.links

    def add(self, url: str, tags: list[str] | None = None) -> dict:
        response = self._request(
            "POST", "/api/links", json={"url": url, "tags": tags or []}
        )
        link = response.json()
        self.links.append(link)
        return link

    def delete(self, link_id: int) -> None:
        self._request("DELETE", f"/api/links/{link_id}")
        self.refresh()

    def available_tags(self) -> list[str]:
        seen: list[str] = []
        for link in self.links:
            for tag in link.get("tags") or []:
                if tag not in seen:
                    seen.append(tag)
        return seen

    def filter_by_tags(self, selected) -> list[dict]:
        return [link for link in self.links if matches_tags(link, selected)]

    def ids(self) -> list[int]:
        return [link["id"] for link in self.links]

    def start_drag(self, link_id: int) -> PendingReorder:
        if self.pending and self.pending.state in (
            ReorderState.DRAGGING,
            ReorderState.PENDING_SYNC,
        ):
            raise LinkBoardError("another reorder is still in progress")
        try:
            from_index = self.ids().index(link_id)
        except ValueError:
            raise LinkBoardError(f"link {link_id} is not on the board") from None
        self.pending = PendingReorder(link_id=link_id, from_index=from_index)
        return self.pending

    def drop(self, to_index: int) -> PendingReorder:
        pending = self.pending
        if pending is None or pending.state != ReorderState.DRAGGING:
            raise LinkBoardError("nothing is being dragged")

        to_index = max(0, min(to_index, len(self.links) - 1))
        pending.to_index = to_index
        if to_index == pending.from_index:
            pending.state = ReorderState.IDLE
            self.pending = None
            return pending

        pending.previous = [dict(link) for link in self.links]
        reordered = array_move(self.links, pending.from_index, to_index)
        for index, link in enumerate(reordered):
            link["order"] = index
        self.links = reordered
        pending.orders = [
            {"id": link["id"], "order": link["order"]} for link in reordered
        ]
        pending.state = ReorderState.PENDING_SYNC
        return pending

    def sync(self, pending: PendingReorder | None = None) -> PendingReorder:
        pending = pending or self.pending
        if pending is None or pending.state != ReorderState.PENDING_SYNC:
            raise LinkBoardError("no reorder waiting to be synced")

        try:
            self._request("POST", "/api/links/reorder", json={"orders": pending.orders})
        except (httpx.HTTPError, LinkBoardError) as exc:
            pending.error = getattr(exc, "message", None) or str(exc)
            logger.warning("Reorder failed, restoring server order: %s", pending.error)
            self.rollback(pending)
            return pending

        pending.state = ReorderState.SYNCED
        return pending

    def rollback(self, pending: PendingReorder) -> None:
        pending.state = ReorderState.ROLLBACK
        # Drop the optimistic order before asking the server for the truth.
        self.links = [dict(link) for link in pending.previous]
        try:
            self.refresh()
        except (httpx.HTTPError, LinkBoardError) as exc:
            logger.warning("Could not refetch links after a failed reorder: %s", exc)
        finally:
            pending.state = ReorderState.IDLE
            self.pending = None

    def move(self, link_id: int, to_index: int) -> PendingReorder:
        self.start_drag(link_id)
        pending = self.drop(to_index)
        if pending.state == ReorderState.PENDING_SYNC:
            return self.sync(pending)
        return pending
