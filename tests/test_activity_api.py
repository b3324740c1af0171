"""Integration tests for the activity API endpoints."""

from __future__ import annotations

from conftest import auth_headers, make_event, store
from fastapi.testclient import TestClient

ALICE = auth_headers(1)
BOB = auth_headers(2)
ADMIN = auth_headers(3, role="admin")


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_track_requires_a_token(client: TestClient) -> None:
    response = client.post("/activity/track", json={"activity_type": "login"})

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_track_rejects_a_forged_token(client: TestClient) -> None:
    response = client.post(
        "/activity/track",
        json={"activity_type": "login"},
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == 401


def test_track_and_read_journey(client: TestClient, users) -> None:
    response = client.post(
        "/activity/track",
        json={
            "activity_type": "page_view",
            "session_id": "tab-1",
            "page": {"path": "/courses", "title": "Courses"},
            "duration": 2500,
        },
        headers={**ALICE, "User-Agent": "pytest-browser"},
    )

    assert response.status_code == 201
    created = response.json()
    assert created["user_id"] == 1
    assert created["session_id"] == "tab-1"
    assert created["device"]["user_agent"] == "pytest-browser"
    assert created["location"]["ip"] == "testclient"

    client.post("/activity/track", json={"activity_type": "scroll"}, headers=ALICE)
    client.post("/activity/track", json={"activity_type": "login"}, headers=BOB)

    journey = client.get("/activity/my-journey", headers=ALICE).json()
    assert journey["count"] == 2
    assert [event["activity_type"] for event in journey["data"]] == ["scroll", "page_view"]

    filtered = client.get(
        "/activity/my-journey", params={"activity_type": "page_view"}, headers=ALICE
    ).json()
    assert filtered["count"] == 1


def test_track_rejects_unknown_activity_type(client: TestClient) -> None:
    response = client.post(
        "/activity/track", json={"activity_type": "teleport"}, headers=ALICE
    )

    assert response.status_code == 400
    assert "teleport" in response.json()["detail"]


def test_track_rejects_malformed_body(client: TestClient) -> None:
    response = client.post("/activity/track", json={"page": {"path": "/"}}, headers=ALICE)

    assert response.status_code == 400


def test_batch_is_all_or_nothing(client: TestClient) -> None:
    response = client.post(
        "/activity/batch",
        json={
            "activities": [
                {"activity_type": "page_view"},
                {"activity_type": "bogus"},
                {"activity_type": "scroll"},
            ]
        },
        headers=ALICE,
    )

    assert response.status_code == 400
    assert response.json()["detail"].startswith("activities[1]:")
    assert client.get("/activity/my-journey", headers=ALICE).json()["count"] == 0


def test_batch_stores_every_item(client: TestClient) -> None:
    response = client.post(
        "/activity/batch",
        json={
            "activities": [
                {"activity_type": "page_view", "timestamp": "2024-03-04T09:00:00Z"},
                {"activity_type": "scroll", "timestamp": "2024-03-04T09:05:00Z"},
            ]
        },
        headers=ALICE,
    )

    assert response.status_code == 201
    assert response.json() == {"count": 2}

    sessions = client.get("/activity/my-sessions", headers=ALICE).json()
    assert sessions["total_sessions"] == 1
    assert sessions["sessions"][0]["duration_seconds"] == 300
    assert sessions["sessions"][0]["activity_types"] == ["page_view", "scroll"]


def test_batch_without_activities_is_rejected(client: TestClient) -> None:
    response = client.post("/activity/batch", json={}, headers=ALICE)

    assert response.status_code == 400


def test_journey_limit_is_bounded(client: TestClient) -> None:
    response = client.get("/activity/my-journey", params={"limit": 5000}, headers=ALICE)

    assert response.status_code == 400


def test_my_stats(client: TestClient, db_session, users) -> None:
    store(
        db_session,
        make_event(0, path="/a", duration=1000, session_id="tab-1"),
        make_event(1, path="/a", duration=3000, session_id="tab-1"),
        make_event(2, activity_type="scroll"),
    )

    stats = client.get("/activity/my-stats", headers=ALICE).json()

    assert stats["total_activities"] == 3
    assert stats["total_sessions"] == 1
    assert stats["activity_breakdown"] == [
        {"activity_type": "page_view", "count": 2},
        {"activity_type": "scroll", "count": 1},
    ]
    assert stats["top_pages"][0]["path"] == "/a"
    assert stats["top_pages"][0]["avg_duration"] == 2000


def test_admin_routes_reject_regular_users(client: TestClient) -> None:
    for path in ("/admin/activity/", "/admin/activity/stats", "/admin/activity/users"):
        assert client.get(path, headers=ALICE).status_code == 403


def test_admin_feed_and_totals(client: TestClient, users) -> None:
    client.post("/activity/track", json={"activity_type": "login"}, headers=ALICE)
    client.post("/activity/track", json={"activity_type": "page_view"}, headers=BOB)

    feed = client.get("/admin/activity/", headers=ADMIN).json()
    assert feed["stats"]["total_activities"] == 2
    assert feed["stats"]["unique_users"] == 2
    assert feed["total_pages"] == 1

    by_user = client.get("/admin/activity/", params={"search": "alice"}, headers=ADMIN).json()
    assert [event["user_id"] for event in by_user["activities"]] == [1]

    totals = client.get("/admin/activity/stats", headers=ADMIN).json()
    assert totals == {"total_activities": 2, "unique_users": 2}


def test_admin_feed_rejects_unknown_date_range(client: TestClient) -> None:
    response = client.get(
        "/admin/activity/", params={"date_range": "fortnight"}, headers=ADMIN
    )

    assert response.status_code == 400


def test_admin_roster_and_detail(client: TestClient, users) -> None:
    client.post(
        "/activity/track",
        json={"activity_type": "page_view", "page": {"path": "/home"}, "session_id": "t"},
        headers=ALICE,
    )
    client.post("/activity/track", json={"activity_type": "button_click"}, headers=ALICE)

    roster = client.get("/admin/activity/users", headers=ADMIN).json()
    assert roster["total"] == 1
    assert roster["users"][0]["email"] == "alice@example.com"
    assert roster["users"][0]["session_count"] == 1

    detail = client.get("/admin/activity/users/1", headers=ADMIN).json()
    assert detail["user"]["name"] == "Alice Moreno"
    assert detail["stats"]["total_activities"] == 2
    assert detail["stats"]["total_clicks"] == 1
    assert detail["timeline"]["total"] == 2
    assert detail["timeline"]["activities"][0]["activity_type"] == "button_click"
    assert detail["top_pages"][0]["path"] == "/home"


def test_admin_roster_covers_all_time_and_feed_covers_today(
    client: TestClient, db_session, users
) -> None:
    store(db_session, make_event(0, user_id=2, activity_type="login"))
    client.post("/activity/track", json={"activity_type": "scroll"}, headers=ALICE)

    roster = client.get("/admin/activity/users", headers=ADMIN).json()
    assert sorted(row["user_id"] for row in roster["users"]) == [1, 2]

    feed = client.get("/admin/activity/", headers=ADMIN).json()
    assert [event["user_id"] for event in feed["activities"]] == [1]


def test_admin_detail_for_unknown_user(client: TestClient, users) -> None:
    response = client.get("/admin/activity/users/404", headers=ADMIN)

    assert response.status_code == 404
    assert response.json() == {"detail": "User not found"}


def test_admin_user_events_search_and_sort(client: TestClient, users) -> None:
    for path in ("/courses/python", "/courses/go", "/profile"):
        client.post(
            "/activity/track",
            json={"activity_type": "page_view", "page": {"path": path}},
            headers=ALICE,
        )

    events = client.get(
        "/admin/activity/users/1/events",
        params={"search": "courses", "sort_order": "asc"},
        headers=ADMIN,
    ).json()

    assert events["total"] == 2
    assert [event["page"]["path"] for event in events["activities"]] == [
        "/courses/python",
        "/courses/go",
    ]


def test_admin_user_sessions(client: TestClient, users) -> None:
    client.post(
        "/activity/batch",
        json={
            "activities": [
                {"activity_type": "login", "timestamp": "2024-03-04T09:00:00Z"},
                {"activity_type": "page_view", "timestamp": "2024-03-04T10:00:00Z"},
            ]
        },
        headers=ALICE,
    )

    report = client.get(
        "/admin/activity/users/1/sessions",
        params={"start_date": "2024-03-04T00:00:00Z", "end_date": "2024-03-05T00:00:00Z"},
        headers=ADMIN,
    ).json()

    assert report["total_sessions"] == 2
    assert [s["session_key"] for s in report["sessions"]] == ["session-1", "session-2"]


def test_admin_analytics(client: TestClient, db_session, users) -> None:
    store(
        db_session,
        make_event(0, user_id=1, path="/a"),
        make_event(1, user_id=2, path="/a"),
        make_event(2, user_id=2, activity_type="scroll"),
    )

    analytics = client.get("/admin/activity/analytics", headers=ADMIN).json()

    assert analytics["popular_pages"][0] == {
        "path": "/a",
        "title": "Page /a",
        "count": 2,
        "avg_duration": None,
    }
    assert [row["user_id"] for row in analytics["top_users"]] == [2, 1]
    assert sum(row["count"] for row in analytics["activity_trends"]) == 3


def test_websocket_streams_own_activity(client: TestClient, users) -> None:
    token = ALICE["Authorization"].split()[1]
    with client.websocket_connect(f"/activity/ws?token={token}") as websocket:
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        websocket.send_json({"type": "subscribe", "channel": "user-activity", "user_id": 1})
        assert websocket.receive_json() == {
            "type": "subscribed",
            "channel": "user-activity:1",
        }

        client.post("/activity/track", json={"activity_type": "login"}, headers=ALICE)
        message = websocket.receive_json()
        assert message["type"] == "user-activity-update"
        assert message["data"]["activity_type"] == "login"


def test_websocket_rejects_foreign_and_analytics_channels(client: TestClient) -> None:
    token = ALICE["Authorization"].split()[1]
    with client.websocket_connect(f"/activity/ws?token={token}") as websocket:
        websocket.send_json({"type": "subscribe", "channel": "user-activity", "user_id": 2})
        assert websocket.receive_json()["type"] == "error"

        websocket.send_json({"type": "subscribe", "channel": "analytics"})
        assert websocket.receive_json()["type"] == "error"


def test_websocket_admin_receives_analytics(client: TestClient, users) -> None:
    token = ADMIN["Authorization"].split()[1]
    with client.websocket_connect(f"/activity/ws?token={token}") as websocket:
        websocket.send_json({"type": "subscribe", "channel": "analytics"})
        assert websocket.receive_json()["channel"] == "analytics"

        client.post("/activity/track", json={"activity_type": "scroll"}, headers=BOB)
        message = websocket.receive_json()
        assert message == {
            "type": "analytics-update",
            "data": {
                "user_id": 2,
                "activity_type": "scroll",
                "timestamp": message["data"]["timestamp"],
            },
        }
