from datetime import date


def test_todos_require_auth(client):
    assert client.get("/api/todos").status_code == 401
    assert client.post("/api/todos", json={"text": "x"}).status_code == 401


def test_create_trims_text_and_defaults(client, register):
    user, headers = register("alice")

    resp = client.post("/api/todos", json={"text": "  buy milk  "}, headers=headers)
    assert resp.status_code == 201
    todo = resp.json()
    assert todo["text"] == "buy milk"
    assert todo["completed"] is False
    assert todo["owner_id"] == user["id"]
    assert todo["due_date"] is None
    assert todo["last_reminded_at"] is None
    # 알림 이메일 기본값은 소유자 이메일
    assert todo["notification_email"] == "alice@example.com"


def test_create_with_due_date_and_email(client, register):
    _, headers = register("alice")
    resp = client.post(
        "/api/todos",
        json={"text": "pay rent", "due_date": "2026-11-01", "notification_email": "me@x.com"},
        headers=headers,
    )
    assert resp.status_code == 201
    assert resp.json()["due_date"] == "2026-11-01"
    assert resp.json()["notification_email"] == "me@x.com"


def test_create_blank_text_is_400(client, register):
    _, headers = register("alice")
    for text in ("", "   "):
        resp = client.post("/api/todos", json={"text": text}, headers=headers)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Todo text is required"}


def test_list_keeps_insertion_order(client, register):
    _, headers = register("alice")
    for text in ("first", "second", "third"):
        client.post("/api/todos", json={"text": text}, headers=headers)

    resp = client.get("/api/todos", headers=headers)
    assert [t["text"] for t in resp.json()] == ["first", "second", "third"]


def test_same_text_different_owners_are_isolated(client, register):
    alice, alice_headers = register("alice")
    bob, bob_headers = register("bob")

    client.post("/api/todos", json={"text": "gym"}, headers=alice_headers)
    client.post("/api/todos", json={"text": "gym"}, headers=bob_headers)

    alice_todos = client.get("/api/todos", headers=alice_headers).json()
    bob_todos = client.get("/api/todos", headers=bob_headers).json()

    assert len(alice_todos) == 1 and alice_todos[0]["owner_id"] == alice["id"]
    assert len(bob_todos) == 1 and bob_todos[0]["owner_id"] == bob["id"]
    assert alice_todos[0]["id"] != bob_todos[0]["id"]


def test_update_is_shallow_merge(client, register):
    _, headers = register("alice")
    todo = client.post(
        "/api/todos", json={"text": "write report", "due_date": "2026-10-20"}, headers=headers
    ).json()

    resp = client.put(f"/api/todos/{todo['id']}", json={"completed": True}, headers=headers)
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["completed"] is True
    assert updated["text"] == "write report"
    assert updated["due_date"] == "2026-10-20"

    resp = client.put(f"/api/todos/{todo['id']}", json={"due_date": None}, headers=headers)
    assert resp.json()["due_date"] is None
    assert resp.json()["completed"] is True


def test_update_blank_text_is_400(client, register):
    _, headers = register("alice")
    todo = client.post("/api/todos", json={"text": "keep me"}, headers=headers).json()

    resp = client.put(f"/api/todos/{todo['id']}", json={"text": "  "}, headers=headers)
    assert resp.status_code == 400


def test_update_ignores_owner_and_reminder_fields(client, register):
    alice, headers = register("alice")
    todo = client.post("/api/todos", json={"text": "mine"}, headers=headers).json()

    resp = client.put(
        f"/api/todos/{todo['id']}",
        json={"owner_id": "00000000-0000-0000-0000-000000000000", "last_reminded_at": "2026-01-01T00:00:00"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["owner_id"] == alice["id"]
    assert resp.json()["last_reminded_at"] is None


def test_non_owner_cannot_update_or_delete(client, register):
    _, alice_headers = register("alice")
    _, bob_headers = register("bob")
    todo = client.post("/api/todos", json={"text": "secret plan"}, headers=alice_headers).json()

    resp = client.put(f"/api/todos/{todo['id']}", json={"text": "hijacked"}, headers=bob_headers)
    assert resp.status_code == 403
    assert "secret plan" not in resp.text

    resp = client.delete(f"/api/todos/{todo['id']}", headers=bob_headers)
    assert resp.status_code == 403
    assert "secret plan" not in resp.text

    still_there = client.get("/api/todos", headers=alice_headers).json()
    assert [t["text"] for t in still_there] == ["secret plan"]


def test_unknown_id_is_404(client, register):
    _, headers = register("alice")
    missing = "11111111-1111-1111-1111-111111111111"
    assert client.put(f"/api/todos/{missing}", json={"completed": True}, headers=headers).status_code == 404
    assert client.delete(f"/api/todos/{missing}", headers=headers).status_code == 404

    # UUID 형식이 아닌 id도 없는 todo로 취급
    for bogus in ("12345", "not-a-uuid"):
        resp = client.put(f"/api/todos/{bogus}", json={"completed": True}, headers=headers)
        assert resp.status_code == 404
        assert resp.json() == {"error": "Todo not found"}
        assert client.delete(f"/api/todos/{bogus}", headers=headers).status_code == 404


def test_delete(client, register):
    _, headers = register("alice")
    todo = client.post("/api/todos", json={"text": "temp"}, headers=headers).json()

    resp = client.delete(f"/api/todos/{todo['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Todo deleted successfully"}
    assert client.get("/api/todos", headers=headers).json() == []


def test_invalid_due_date_is_400(client, register):
    _, headers = register("alice")
    resp = client.post("/api/todos", json={"text": "x", "due_date": "not-a-date"}, headers=headers)
    assert resp.status_code == 400
    assert "due_date" in resp.json()["error"]


def test_repository_create_and_list_directly(store):
    from app.models.user import User
    from app.services.task_repository import TaskRepository

    owner = store.add(User(username="zed", email="zed@example.com", password_hash="x"))
    repo = TaskRepository(store)
    task = repo.create(owner.id, "  read book ", date(2026, 10, 19), default_email=owner.email)

    assert task.text == "read book"
    assert task.notification_email == "zed@example.com"
    assert [t.id for t in repo.list(owner.id)] == [task.id]
