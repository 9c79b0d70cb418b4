from conftest import register


def test_register_and_login(client):
    created = register(client, "dana")

    me = client.get("/api/user", headers=created["headers"])
    assert me.status_code == 200
    assert me.json()["username"] == "dana"
    assert me.json()["walletBalance"] == "0.00"
    assert "hashedPassword" not in me.json()

    login = client.post("/api/login", json={"username": "dana", "password": "secret123"})
    assert login.status_code == 200
    assert login.json()["user"]["id"] == created["id"]

    wrong = client.post("/api/login", json={"username": "dana", "password": "nope-nope"})
    assert wrong.status_code == 401


def test_duplicate_username_is_rejected(client, alice):
    response = client.post(
        "/api/register",
        json={"username": "alice", "email": "other@example.com", "password": "secret123"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Username already exists"


def test_auth_is_required(client):
    assert client.get("/api/user").status_code == 401
    bad = client.get("/api/user", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401


def test_update_profile(client, alice):
    response = client.patch("/api/user", json={"bio": "hi there", "displayName": "Alice"}, headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["bio"] == "hi there"
    assert response.json()["displayName"] == "Alice"
    assert client.get(f"/api/users/{alice['id']}").json()["bio"] == "hi there"


def test_missing_profile_is_404(client):
    assert client.get("/api/users/999").status_code == 404


def test_follow_toggles_counters(client, alice, bob):
    assert client.post(f"/api/users/{bob['id']}/follow", headers=alice["headers"]).json() == {"following": True}
    assert client.get(f"/api/users/{bob['id']}").json()["followersCount"] == 1
    assert client.get(f"/api/users/{alice['id']}").json()["followingCount"] == 1
    assert [u["username"] for u in client.get(f"/api/users/{bob['id']}/followers").json()] == ["alice"]
    assert [u["username"] for u in client.get(f"/api/users/{alice['id']}/following").json()] == ["bob"]

    assert client.post(f"/api/users/{bob['id']}/follow", headers=alice["headers"]).json() == {"following": False}
    assert client.get(f"/api/users/{bob['id']}").json()["followersCount"] == 0

    assert client.post(f"/api/users/{alice['id']}/follow", headers=alice["headers"]).status_code == 400


def test_posts_likes_and_comments(client, alice, bob):
    created = client.post("/api/posts", json={"content": "first post"}, headers=alice["headers"])
    assert created.status_code == 201
    post_id = created.json()["id"]

    assert client.post("/api/posts", json={"content": "   "}, headers=alice["headers"]).status_code == 422

    assert client.post(f"/api/posts/{post_id}/like", headers=bob["headers"]).json() == {"liked": True}
    comment = client.post(f"/api/posts/{post_id}/comments", json={"content": "nice"}, headers=bob["headers"])
    assert comment.status_code == 201
    assert client.post(f"/api/comments/{comment.json()['id']}/like", headers=alice["headers"]).json() == {"liked": True}

    feed = client.get("/api/posts/feed", headers=bob["headers"]).json()
    assert [p["id"] for p in feed] == [post_id]
    assert feed[0]["likesCount"] == 1
    assert feed[0]["commentsCount"] == 1

    comments = client.get(f"/api/posts/{post_id}/comments").json()
    assert [(c["content"], c["likesCount"]) for c in comments] == [("nice", 1)]

    assert client.post(f"/api/posts/{post_id}/like", headers=bob["headers"]).json() == {"liked": False}
    assert client.get(f"/api/posts/user/{alice['id']}").json()[0]["likesCount"] == 0
    assert client.get(f"/api/users/{alice['id']}").json()["postsCount"] == 1


def test_only_author_deletes_post(client, alice, bob):
    post_id = client.post("/api/posts", json={"content": "mine"}, headers=alice["headers"]).json()["id"]

    assert client.delete(f"/api/posts/{post_id}", headers=bob["headers"]).status_code == 403
    assert client.delete(f"/api/posts/{post_id}", headers=alice["headers"]).status_code == 204
    assert client.get("/api/posts/feed", headers=alice["headers"]).json() == []
    assert client.post(f"/api/posts/{post_id}/like", headers=bob["headers"]).status_code == 404
    assert client.delete("/api/posts/999", headers=alice["headers"]).status_code == 404


def test_stories(client, alice, bob):
    created = client.post("/api/stories", json={"content": "sunset", "backgroundColor": "#ff8800"}, headers=alice["headers"])
    assert created.status_code == 201
    story_id = created.json()["id"]

    assert client.post("/api/stories", json={"content": "x", "backgroundColor": "orange"}, headers=alice["headers"]).status_code == 422

    assert client.post(f"/api/stories/{story_id}/view", headers=alice["headers"]).json() == {"recorded": False}
    assert client.post(f"/api/stories/{story_id}/view", headers=bob["headers"]).json() == {"recorded": True}
    assert client.post(f"/api/stories/{story_id}/view", headers=bob["headers"]).json() == {"recorded": False}

    stories = client.get("/api/stories", headers=bob["headers"]).json()
    assert [(s["id"], s["viewsCount"]) for s in stories] == [(story_id, 1)]

    assert client.post("/api/stories/999/view", headers=bob["headers"]).status_code == 404


def test_products(client, alice):
    created = client.post(
        "/api/products",
        json={"title": "Bike", "price": "120.50", "category": "sport", "images": ["a.jpg"]},
        headers=alice["headers"],
    )
    assert created.status_code == 201
    product = created.json()
    assert product["price"] == "120.50"
    assert product["sellerId"] == alice["id"]

    viewed = client.get(f"/api/products/{product['id']}").json()
    assert viewed["viewsCount"] == 1

    assert [p["id"] for p in client.get("/api/products", params={"category": "sport"}).json()] == [product["id"]]
    assert client.get("/api/products", params={"category": "books"}).json() == []
    assert [p["title"] for p in client.get(f"/api/users/{alice['id']}/products").json()] == ["Bike"]
    assert client.get("/api/products/999").status_code == 404

    bad_price = client.post("/api/products", json={"title": "Free", "price": "0"}, headers=alice["headers"])
    assert bad_price.status_code == 422


def test_search(client, alice, bob):
    client.post("/api/posts", json={"content": "Learning FastAPI today"}, headers=alice["headers"])
    client.post("/api/posts", json={"content": "lunch"}, headers=bob["headers"])

    assert [u["username"] for u in client.get("/api/search/users", params={"q": "bo"}).json()] == ["bob"]
    assert [p["content"] for p in client.get("/api/search/posts", params={"q": "fastapi"}).json()] == ["Learning FastAPI today"]
    assert client.get("/api/search/posts", params={"q": "  "}).json() == []


def test_wallet(client, alice, bob):
    deposit = client.post("/api/wallet/deposit", json={"amount": "100.00"}, headers=alice["headers"])
    assert deposit.status_code == 200
    assert deposit.json()["type"] == "deposit"
    assert deposit.json()["amount"] == "100.00"

    short = client.post("/api/wallet/withdraw", json={"amount": "150"}, headers=alice["headers"])
    assert short.status_code == 400
    assert short.json()["detail"] == "Insufficient balance"

    transfer = client.post("/api/wallet/transfer", json={"amount": "40.25", "recipientId": bob["id"]}, headers=alice["headers"])
    assert transfer.status_code == 200
    assert transfer.json()["type"] == "transfer_out"

    assert client.get("/api/wallet", headers=alice["headers"]).json() == {"balance": "59.75"}
    assert client.get("/api/wallet", headers=bob["headers"]).json() == {"balance": "40.25"}
    assert [t["type"] for t in client.get("/api/wallet/transactions", headers=bob["headers"]).json()] == ["transfer_in"]

    to_self = client.post("/api/wallet/transfer", json={"amount": "1", "recipientId": alice["id"]}, headers=alice["headers"])
    assert to_self.status_code == 400
    nobody = client.post("/api/wallet/transfer", json={"amount": "1", "recipientId": 999}, headers=alice["headers"])
    assert nobody.status_code == 404


def test_conversation_permissions(client, alice, bob, carol):
    convo = client.post("/api/conversations", json={"participantId": bob["id"]}, headers=alice["headers"]).json()
    again = client.post("/api/conversations", json={"participantId": alice["id"]}, headers=bob["headers"]).json()
    assert convo["id"] == again["id"]
    assert convo["isGroup"] is False

    assert client.get(f"/api/conversations/{convo['id']}/messages", headers=carol["headers"]).status_code == 403
    assert client.get("/api/conversations/999/messages", headers=alice["headers"]).status_code == 404
    assert client.post("/api/conversations", json={"participantId": alice["id"]}, headers=alice["headers"]).status_code == 400

    sent = client.post("/api/messages", json={"conversationId": convo["id"], "content": "hey"}, headers=carol["headers"])
    assert sent.status_code == 403
    empty = client.post("/api/messages", json={"conversationId": convo["id"], "content": "   "}, headers=alice["headers"])
    assert empty.status_code == 400


def test_read_receipts(client, alice, bob):
    convo_id = client.post("/api/conversations", json={"participantId": bob["id"]}, headers=alice["headers"]).json()["id"]
    client.post("/api/messages", json={"conversationId": convo_id, "content": "one"}, headers=alice["headers"])
    client.post("/api/messages", json={"conversationId": convo_id, "content": "two"}, headers=alice["headers"])

    assert client.post(f"/api/conversations/{convo_id}/read", headers=alice["headers"]).json() == {"updated": 0}
    assert client.post(f"/api/conversations/{convo_id}/read", headers=bob["headers"]).json() == {"updated": 2}


def test_group_leave(client, alice, bob, carol):
    group = client.post(
        "/api/conversations",
        json={"participantIds": [bob["id"], carol["id"]], "name": "plans"},
        headers=alice["headers"],
    ).json()
    assert group["isGroup"] is True
    assert len(group["participants"]) == 3

    assert client.post(f"/api/conversations/{group['id']}/leave", headers=carol["headers"]).status_code == 204
    assert client.get("/api/conversations", headers=carol["headers"]).json() == []
    # former members keep read access but can no longer post
    assert client.get(f"/api/conversations/{group['id']}/messages", headers=carol["headers"]).status_code == 200
    sent = client.post("/api/messages", json={"conversationId": group["id"], "content": "hi"}, headers=carol["headers"])
    assert sent.status_code == 403

    one_to_one = client.post("/api/conversations", json={"participantId": bob["id"]}, headers=alice["headers"]).json()
    assert client.post(f"/api/conversations/{one_to_one['id']}/leave", headers=alice["headers"]).status_code == 400


def test_root(client):
    assert client.get("/").json()["message"] == "SocialHub API"
