# tests/routes/test_event_matches_routes.py
"""Event match hand-off route tests: POST /api/v1/event-matches/start-chat."""

from app.core.enums import PostStatus


def _body(matched_post_id, **overrides):
    body = {
        "event_id": "E1",
        "matched_post_id": matched_post_id,
        "give_items": [{"character_name": "CharA", "quantity": 1}],
        "want_items": [{"character_name": "CharB", "quantity": 2}],
        "zone_code": "Z1",
    }
    body.update(overrides)
    return body


def test_start_chat(client, bob, alice_headers, make_post):
    matched = make_post(bob, event_id="E1")

    res = client.post(
        "/api/v1/event-matches/start-chat", json=_body(matched.id), headers=alice_headers
    )

    assert res.status_code == 201
    data = res.json()
    room = client.get(f"/api/v1/chat-rooms/{data['chat_room_id']}", headers=alice_headers)
    assert room.status_code == 200
    assert data["post_id"] in {room.json()["post1"]["id"], room.json()["post2"]["id"]}


def test_second_initiator_conflicts(client, bob, alice_headers, carol_headers, make_post):
    matched = make_post(bob, event_id="E1")
    client.post("/api/v1/event-matches/start-chat", json=_body(matched.id), headers=alice_headers)

    res = client.post(
        "/api/v1/event-matches/start-chat", json=_body(matched.id), headers=carol_headers
    )

    assert res.status_code == 409


def test_zero_quantity_is_validation_error(client, bob, alice_headers, make_post):
    matched = make_post(bob, event_id="E1")

    res = client.post(
        "/api/v1/event-matches/start-chat",
        json=_body(matched.id, give_items=[{"character_name": "CharA", "quantity": 0}]),
        headers=alice_headers,
    )

    assert res.status_code == 400
    assert res.json()["code"] == "VALIDATION_ERROR"
    detail = client.get(f"/api/v1/posts/{matched.id}").json()
    assert detail["status"] == PostStatus.ACTIVE.value
