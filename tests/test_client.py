import json

import httpx
import pytest

from linkshelf.client import (
    LinkBoard,
    LinkBoardError,
    ReorderState,
    array_move,
    matches_tags,
)


def _token_for(app, username: str) -> str:
    response = app.test_client().post(
        "/api/auth/signup", json={"username": username, "password": "secret"}
    )
    assert response.status_code == 201
    return response.get_json()["token"]


def _board(app, token: str) -> LinkBoard:
    http = httpx.Client(
        transport=httpx.WSGITransport(app=app),
        base_url="http://linkshelf.test",
        headers={"Authorization": f"Bearer {token}"},
    )
    return LinkBoard(http)


def _server_links():
    return [
        {"id": 1, "url": "https://a.example/", "order": 0, "tags": []},
        {"id": 2, "url": "https://b.example/", "order": 1, "tags": []},
        {"id": 3, "url": "https://c.example/", "order": 2, "tags": []},
    ]


def test_array_move_is_stable():
    assert array_move(["a", "b", "c", "d"], 0, 3) == ["b", "c", "d", "a"]
    assert array_move(["a", "b", "c", "d"], 3, 1) == ["a", "d", "b", "c"]
    assert array_move(["a", "b", "c"], 1, 1) == ["a", "b", "c"]


def test_matches_tags_requires_every_selected_tag():
    link = {"tags": ["python", "docs"]}
    assert matches_tags(link, [])
    assert matches_tags(link, ["python"])
    assert matches_tags(link, ["docs", "python"])
    assert not matches_tags(link, ["python", "rust"])


def test_move_first_link_to_end_syncs_with_server(app):
    board = _board(app, _token_for(app, "mover"))
    a = board.add("https://a.example/")
    b = board.add("https://b.example/")
    c = board.add("https://c.example/")
    board.refresh()

    pending = board.move(a["id"], 2)

    assert pending.state == ReorderState.SYNCED
    assert pending.orders == [
        {"id": b["id"], "order": 0},
        {"id": c["id"], "order": 1},
        {"id": a["id"], "order": 2},
    ]
    assert board.ids() == [b["id"], c["id"], a["id"]]

    board.refresh()
    assert board.ids() == [b["id"], c["id"], a["id"]]
    assert [link["order"] for link in board.links] == [0, 1, 2]


def test_rejected_reorder_rolls_back_to_server_state(app):
    token = _token_for(app, "stale")
    board = _board(app, token)
    a = board.add("https://a.example/")
    b = board.add("https://b.example/")
    c = board.add("https://c.example/")
    board.refresh()

    # Another tab removes a link behind this board's back.
    other = _board(app, token)
    other.delete(c["id"])

    pending = board.move(a["id"], 2)

    assert pending.state == ReorderState.IDLE
    assert pending.error == "Link not found"
    assert board.state == ReorderState.IDLE
    assert board.ids() == [a["id"], b["id"]]


def test_failed_submission_restores_server_order():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append((request.method, request.url.path))
        if request.method == "GET" and request.url.path == "/api/links":
            return httpx.Response(200, json=_server_links())
        if request.url.path == "/api/links/reorder":
            assert json.loads(request.content)["orders"][0] == {"id": 2, "order": 0}
            return httpx.Response(500, json={"error": "Something went wrong"})
        return httpx.Response(404, json={"error": "not found"})

    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://x")
    board = LinkBoard(http)
    board.refresh()

    board.start_drag(1)
    assert board.state == ReorderState.DRAGGING
    pending = board.drop(2)
    assert pending.state == ReorderState.PENDING_SYNC
    assert board.ids() == [2, 3, 1]

    board.sync()

    assert pending.state == ReorderState.IDLE
    assert pending.error == "Something went wrong"
    assert board.ids() == [1, 2, 3]
    assert requests == [
        ("GET", "/api/links"),
        ("POST", "/api/links/reorder"),
        ("GET", "/api/links"),
    ]


def test_failed_submission_and_refetch_restores_pre_drop_order():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        if len(calls) == 1:
            return httpx.Response(200, json=_server_links())
        raise httpx.ConnectError("down", request=request)

    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://x")
    board = LinkBoard(http)
    board.refresh()

    pending = board.move(1, 2)

    assert calls == ["GET", "POST", "GET"]
    assert pending.state == ReorderState.IDLE
    assert pending.error == "down"
    assert board.pending is None
    assert board.ids() == [1, 2, 3]
    assert [link["order"] for link in board.links] == [0, 1, 2]


def test_drop_in_place_sends_nothing():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request.method)
        return httpx.Response(200, json=_server_links())

    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://x")
    board = LinkBoard(http)
    board.refresh()

    pending = board.move(2, 1)

    assert pending.state == ReorderState.IDLE
    assert board.pending is None
    assert requests == ["GET"]
    assert board.ids() == [1, 2, 3]


def test_drop_without_drag_is_rejected():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[]))
    board = LinkBoard(httpx.Client(transport=transport))
    with pytest.raises(LinkBoardError):
        board.drop(0)


def test_start_drag_on_unknown_link_is_rejected():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[]))
    board = LinkBoard(httpx.Client(transport=transport, base_url="http://x"))
    board.refresh()

    with pytest.raises(LinkBoardError, match="not on the board"):
        board.start_drag(42)
    assert board.state == ReorderState.IDLE


def test_tag_filter_and_available_tags(app):
    board = _board(app, _token_for(app, "filters"))
    board.add("https://a.example/", tags=["python", "docs"])
    board.add("https://b.example/", tags=["python"])
    board.add("https://c.example/", tags=["rust"])
    board.refresh()

    assert board.available_tags() == ["python", "docs", "rust"]
    assert [link["url"] for link in board.filter_by_tags(["python"])] == [
        "https://a.example/",
        "https://b.example/",
    ]
    assert [link["url"] for link in board.filter_by_tags(["python", "docs"])] == [
        "https://a.example/"
    ]


def test_add_duplicate_surfaces_server_error(app):
    board = _board(app, _token_for(app, "dupes"))
    board.add("https://a.example/")

    with pytest.raises(LinkBoardError) as excinfo:
        board.add("https://a.example/")

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Link already saved"
