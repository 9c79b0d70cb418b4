from conftest import register


def open_conversation(client, owner, other) -> int:
    response = client.post("/api/conversations", json={"participantId": other["id"]}, headers=owner["headers"])
    assert response.status_code == 200, response.text
    return response.json()["id"]


def authenticate(ws, user):
    ws.send_json({"type": "auth", "userId": user["id"]})
    assert ws.receive_json() == {"type": "auth", "success": True}


def test_auth_is_acknowledged(client, alice):
    with client.websocket_connect("/ws") as ws:
        authenticate(ws, alice)


def test_message_reaches_both_sockets_and_matches_history(client, alice, bob):
    conversation_id = open_conversation(client, alice, bob)

    with client.websocket_connect("/ws") as alice_ws, client.websocket_connect("/ws") as bob_ws:
        authenticate(alice_ws, alice)
        authenticate(bob_ws, bob)

        alice_ws.send_json({"type": "message", "conversationId": conversation_id, "content": "  hello bob  "})

        to_alice = alice_ws.receive_json()
        to_bob = bob_ws.receive_json()

    assert to_alice == to_bob
    assert to_alice["type"] == "message"
    event = to_alice["message"]
    assert event["senderId"] == alice["id"]
    assert event["conversationId"] == conversation_id
    assert event["content"] == "hello bob"

    history = client.get(f"/api/conversations/{conversation_id}/messages", headers=bob["headers"]).json()
    assert history == [event]


def test_message_before_auth_is_dropped(client, alice, bob):
    conversation_id = open_conversation(client, alice, bob)

    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "message", "conversationId": conversation_id, "content": "too early"})
        # the next frame the socket sees is the auth ack, not an error or echo
        authenticate(ws, alice)

    history = client.get(f"/api/conversations/{conversation_id}/messages", headers=alice["headers"]).json()
    assert history == []


def test_malformed_frame_keeps_socket_open(client, alice, bob):
    conversation_id = open_conversation(client, alice, bob)

    with client.websocket_connect("/ws") as ws:
        authenticate(ws, alice)
        ws.send_text("this is not json")
        assert ws.receive_json() == {"type": "error", "message": "Invalid message format"}

        ws.send_json({"type": "message", "conversationId": conversation_id, "content": "still here"})
        assert ws.receive_json()["message"]["content"] == "still here"


def test_outsider_cannot_post_into_conversation(client, alice, bob, carol):
    conversation_id = open_conversation(client, alice, bob)

    with client.websocket_connect("/ws") as ws:
        authenticate(ws, carol)
        ws.send_json({"type": "message", "conversationId": conversation_id, "content": "hi"})
        assert ws.receive_json() == {"type": "error", "message": "Not a participant of this conversation"}


def test_rest_send_is_fanned_out_to_sockets(client, alice, bob):
    conversation_id = open_conversation(client, alice, bob)

    with client.websocket_connect("/ws") as bob_ws:
        authenticate(bob_ws, bob)
        response = client.post(
            "/api/messages",
            json={"conversationId": conversation_id, "content": "via rest"},
            headers=alice["headers"],
        )
        assert response.status_code == 201, response.text
        pushed = bob_ws.receive_json()

    assert pushed == {"type": "message", "message": response.json()}


def test_both_senders_are_persisted_in_order(client, alice, bob):
    conversation_id = open_conversation(client, alice, bob)

    with client.websocket_connect("/ws") as alice_ws, client.websocket_connect("/ws") as bob_ws:
        authenticate(alice_ws, alice)
        authenticate(bob_ws, bob)

        alice_ws.send_json({"type": "message", "conversationId": conversation_id, "content": "one"})
        alice_ws.receive_json()
        bob_ws.receive_json()
        bob_ws.send_json({"type": "message", "conversationId": conversation_id, "content": "two"})
        alice_ws.receive_json()
        bob_ws.receive_json()

    history = client.get(f"/api/conversations/{conversation_id}/messages", headers=alice["headers"]).json()
    assert [(m["senderId"], m["content"]) for m in history] == [(alice["id"], "one"), (bob["id"], "two")]
    assert history[0]["id"] < history[1]["id"]

    conversations = client.get("/api/conversations", headers=bob["headers"]).json()
    assert conversations[0]["lastMessageId"] == history[1]["id"]


def test_token_auth_frame(client):
    dave = register(client, "dave")
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "auth", "token": dave["token"]})
        assert ws.receive_json() == {"type": "auth", "success": True}


def test_presence_tracks_local_sockets(client, alice):
    assert client.get(f"/api/presence/{alice['id']}").json() == {"userId": alice["id"], "online": False}
    with client.websocket_connect("/ws") as ws:
        authenticate(ws, alice)
        assert client.get(f"/api/presence/{alice['id']}").json()["online"] is True
