"""
Integration tests for API endpoints
"""
from conftest import PHOTOSYNTHESIS, register

LONG_NOTES = (
    "Photosynthesis is the process by which plants convert light energy into chemical energy. "
    "This process is essential for plant growth.\n\n"
    "Chlorophyll is the green pigment that absorbs red and blue light inside the chloroplast. "
    "The key product of the light reactions is ATP, which powers the Calvin cycle.\n\n"
    "Cellular respiration is the reverse process that releases stored energy from glucose. "
    "Mitochondria are the organelles where most of this respiration takes place."
)


def create_note(client, headers, content=PHOTOSYNTHESIS, title="Biology"):
    response = client.post("/notes", json={"title": title, "content": content}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["note_id"]


class TestHealthEndpoints:
    def test_health_check(self, client):
        """Test health check endpoint"""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert "status" in data
        assert "timestamp" in data
        assert data["checks"]["database"]["status"] == "healthy"

    def test_metrics_endpoint(self, client):
        """Test metrics endpoint"""
        response = client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "http_requests_total" in response.text


class TestAuthEndpoints:
    def test_register_login_me(self, client):
        register(client, email="a@example.com", password="pw-123456")
        response = client.post("/auth/login", json={"email": "a@example.com", "password": "pw-123456"})
        assert response.status_code == 200
        token = response.json()["access_token"]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "a@example.com"

    def test_duplicate_email(self, client):
        register(client, email="dup@example.com")
        response = client.post("/auth/register", json={"email": "dup@example.com", "password": "x"})
        assert response.status_code == 400

    def test_wrong_password(self, client):
        register(client, email="b@example.com", password="right")
        response = client.post("/auth/login", json={"email": "b@example.com", "password": "wrong"})
        assert response.status_code == 401

    def test_refresh(self, client):
        response = client.post(
            "/auth/register", json={"email": "c@example.com", "password": "pw"}
        )
        refresh_token = response.json()["refresh_token"]
        refreshed = client.post("/auth/refresh", json={"refresh_token": refresh_token})
        assert refreshed.status_code == 200
        assert refreshed.json()["access_token"]

        rejected = client.post("/auth/refresh", json={"refresh_token": response.json()["access_token"]})
        assert rejected.status_code == 401

    def test_protected_routes_need_token(self, client):
        assert client.get("/notes").status_code == 401
        assert client.get("/notes", headers={"Authorization": "Bearer garbage"}).status_code == 401


class TestNoteEndpoints:
    def test_create_and_list(self, client, auth_headers):
        note_id = create_note(client, auth_headers)
        notes = client.get("/notes", headers=auth_headers).json()
        assert [n["id"] for n in notes] == [note_id]
        assert notes[0]["preview"].startswith("Photosynthesis is the process")

    def test_upload_text_file(self, client, auth_headers):
        response = client.post(
            "/notes/upload",
            files={"file": ("biology.txt", PHOTOSYNTHESIS.encode("utf-8"), "text/plain")},
            headers=auth_headers,
        )
        assert response.status_code == 200
        note = client.get(f"/notes/{response.json()['note_id']}", headers=auth_headers).json()
        assert note["title"] == "biology"
        assert note["content"] == PHOTOSYNTHESIS.strip()

    def test_upload_unsupported_file(self, client, auth_headers):
        response = client.post(
            "/notes/upload",
            files={"file": ("photo.png", b"\x89PNG", "image/png")},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_update_note(self, client, auth_headers):
        note_id = create_note(client, auth_headers)
        response = client.patch(f"/notes/{note_id}", json={"title": "Plants"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["title"] == "Plants"
        assert response.json()["content"] == PHOTOSYNTHESIS.strip()

    def test_delete_note_removes_children(self, client, auth_headers):
        note_id = create_note(client, auth_headers)
        client.post(f"/notes/{note_id}/flashcards", data={"count": "2"}, headers=auth_headers)
        assert client.delete(f"/notes/{note_id}", headers=auth_headers).status_code == 200
        assert client.get(f"/notes/{note_id}", headers=auth_headers).status_code == 404
        assert client.get("/flashcards", headers=auth_headers).json() == []

    def test_process_note(self, client, auth_headers):
        note_id = create_note(client, auth_headers, content=LONG_NOTES)
        response = client.post(f"/notes/{note_id}/process", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["requested"] == {"flashcards": 5, "questions": 3}
        assert data["summary"]
        assert data["flashcards"] == 5
        assert data["questions"] == 3

        summaries = client.get(f"/notes/{note_id}/summaries", headers=auth_headers).json()
        assert len(summaries) == 1


class TestOwnership:
    def test_other_users_note_is_hidden(self, client, auth_headers):
        note_id = create_note(client, auth_headers)
        intruder = register(client, email="intruder@example.com")

        assert client.get(f"/notes/{note_id}", headers=intruder).status_code == 404
        assert client.get(f"/notes/{note_id}/flashcards", headers=intruder).status_code == 404
        assert client.post(f"/notes/{note_id}/quizzes", data={"count": "2"}, headers=intruder).status_code == 404
        assert client.delete(f"/notes/{note_id}", headers=intruder).status_code == 404
        assert client.post("/chat", json={"message": "hi", "note_id": note_id}, headers=intruder).status_code == 404
        assert client.get("/notes", headers=intruder).json() == []

    def test_other_users_summary_cannot_be_deleted(self, client, auth_headers):
        note_id = create_note(client, auth_headers)
        summary_id = client.post(f"/notes/{note_id}/summaries", headers=auth_headers).json()["id"]
        intruder = register(client, email="intruder@example.com")
        assert client.delete(f"/summaries/{summary_id}", headers=intruder).status_code == 404
        assert client.delete(f"/summaries/{summary_id}", headers=auth_headers).status_code == 200


class TestGenerationEndpoints:
    def test_summary(self, client, auth_headers):
        note_id = create_note(client, auth_headers)
        response = client.post(f"/notes/{note_id}/summaries", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["summary_text"] == "This process is essential for plant growth."
        assert data["used_fallback"] is False

    def test_flashcards(self, client, auth_headers):
        note_id = create_note(client, auth_headers)
        response = client.post(f"/notes/{note_id}/flashcards", data={"count": "1"}, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["created"] == 1
        assert data["flashcards"][0]["question"] == "What is Photosynthesis?"

        listed = client.get("/flashcards", headers=auth_headers).json()
        assert listed[0]["note_title"] == "Biology"

    def test_flashcard_count_validated(self, client, auth_headers):
        note_id = create_note(client, auth_headers)
        response = client.post(f"/notes/{note_id}/flashcards", data={"count": "0"}, headers=auth_headers)
        assert response.status_code == 422

    def test_quiz_generate_and_score(self, client, auth_headers):
        note_id = create_note(client, auth_headers, content=LONG_NOTES)
        response = client.post(f"/notes/{note_id}/quizzes", data={"count": "3"}, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["created"] == 3
        for question in data["questions"]:
            assert len(question["options"]) == 4
            assert 0 <= question["correct"] < 4

        items = client.get(f"/notes/{note_id}/quizzes", headers=auth_headers).json()
        answers = {str(item["id"]): item["correct_answer"] for item in items}
        answers[str(items[0]["id"])] = "definitely wrong"

        scored = client.post(
            f"/notes/{note_id}/quizzes/score",
            json={"answers": answers, "time_spent": 42},
            headers=auth_headers,
        ).json()
        assert scored == {"total_questions": 3, "correct_answers": 2, "score": 67, "time_spent": 42}

    def test_delete_quizzes(self, client, auth_headers):
        note_id = create_note(client, auth_headers, content=LONG_NOTES)
        client.post(f"/notes/{note_id}/quizzes", data={"count": "2"}, headers=auth_headers)
        assert client.delete(f"/notes/{note_id}/quizzes", headers=auth_headers).status_code == 200
        assert client.get(f"/notes/{note_id}/quizzes", headers=auth_headers).json() == []


class TestChatEndpoints:
    def test_chat_without_note(self, client, auth_headers):
        response = client.post("/chat", json={"message": "hello"}, headers=auth_headers)
        assert response.status_code == 200
        assert "Hello" in response.json()["response"]

    def test_chat_with_note(self, client, auth_headers):
        note_id = create_note(client, auth_headers)
        response = client.post(
            "/chat", json={"message": "What is photosynthesis?", "note_id": note_id}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["response"] == (
            "Photosynthesis is the process by which plants convert light energy into chemical energy"
        )

    def test_empty_message(self, client, auth_headers):
        response = client.post("/chat", json={"message": "   "}, headers=auth_headers)
        assert response.status_code == 400

    def test_history(self, client, auth_headers):
        client.post("/chat", json={"message": "hello"}, headers=auth_headers)
        client.post("/chat", json={"message": "Tell me about blockchain"}, headers=auth_headers)
        history = client.get("/chat/history", headers=auth_headers).json()
        assert [h["message"] for h in history] == ["hello", "Tell me about blockchain"]

        assert client.delete("/chat/history", headers=auth_headers).status_code == 200
        assert client.get("/chat/history", headers=auth_headers).json() == []
