"""Integration tests for submission, results and export endpoints."""

import csv
import io

import pytest
from fastapi.testclient import TestClient

from formly.main import app

SURVEY = {
    "title": "Lunch poll",
    "questions": [
        {"text": "Name", "type": "text", "required": True},
        {"text": "Day", "type": "dropdown", "options": ["Mon", "Fri"]},
    ],
}


@pytest.fixture
def form(alice_client) -> dict:
    response = alice_client.post("/api/forms", json=SURVEY)
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def visitor(client) -> TestClient:
    """Anonymous client without a session cookie, on the test database."""
    return TestClient(app)


def submit(client: TestClient, form: dict, values: dict):
    """Submit answers keyed by question text."""
    ids = {q["text"]: q["id"] for q in form["questions"]}
    return client.post(
        f"/api/forms/{form['id']}/responses",
        json={"answers": [{"questionId": ids[text], "value": value} for text, value in values.items()]},
    )


def response_count(client: TestClient, form: dict) -> int:
    return client.get(f"/api/forms/{form['id']}").json()["responseCount"]


class TestSubmit:
    """Test suite for POST /api/forms/{id}/responses."""

    def test_anonymous_submission(self, visitor, form, alice_client):
        response = submit(visitor, form, {"Name": "Al", "Day": "Fri"})

        assert response.status_code == 200
        body = response.json()
        assert body["formId"] == form["id"]
        assert sorted(a["value"] for a in body["answers"]) == ["Al", "Fri"]
        assert response_count(alice_client, form) == 1

    def test_missing_required_answer(self, visitor, form, alice_client):
        """Test that a rejected submission does not change the response count."""
        response = submit(visitor, form, {"Day": "Mon"})

        assert response.status_code == 400
        assert response.json() == {"error": 'Question "Name" is required'}
        assert response_count(alice_client, form) == 0

    def test_unpublished_form(self, visitor, form, alice_client):
        alice_client.put(f"/api/forms/{form['id']}", json={**form, "published": False})

        response = submit(visitor, form, {"Name": "Al"})

        assert response.status_code == 404
        assert response.json() == {"error": "Form not found or not published"}

    def test_missing_form(self, visitor):
        response = visitor.post("/api/forms/nope/responses", json={"answers": []})

        assert response.status_code == 404

    def test_malformed_answers(self, visitor, form):
        response = visitor.post(
            f"/api/forms/{form['id']}/responses", json={"answers": [{"value": "x"}]}
        )

        assert response.status_code == 400


class TestOwnerResults:
    """Test suite for owner-only result endpoints."""

    def test_list_responses_newest_first(self, visitor, form, alice_client):
        submit(visitor, form, {"Name": "First"})
        submit(visitor, form, {"Name": "Second"})

        body = alice_client.get(f"/api/forms/{form['id']}/responses").json()

        assert body["responseCount"] == 2
        names = [r["answers"][0]["value"] for r in body["responses"]]
        assert names == ["Second", "First"]

    @pytest.mark.parametrize("suffix", ["", "/summary", "/export"])
    def test_anonymous_rejected(self, visitor, form, suffix):
        assert visitor.get(f"/api/forms/{form['id']}/responses{suffix}").status_code == 401

    @pytest.mark.parametrize("suffix", ["", "/summary", "/export"])
    def test_other_user_forbidden(self, form, bob, sign_in, suffix):
        bob_client = TestClient(app)
        sign_in(bob_client, bob.email)

        assert bob_client.get(f"/api/forms/{form['id']}/responses{suffix}").status_code == 403

    def test_summary(self, visitor, form, alice_client):
        submit(visitor, form, {"Name": "Al", "Day": "Fri"})
        submit(visitor, form, {"Name": "Bo"})

        body = alice_client.get(f"/api/forms/{form['id']}/responses/summary").json()

        assert body["columns"] == ["Timestamp", "Name", "Day"]
        assert [row[1:] for row in body["rows"]] == [["Bo", "-"], ["Al", "Fri"]]
        assert len(body["charts"]) == 1
        chart = body["charts"][0]
        assert chart["text"] == "Day"
        assert chart["optionCount"] == 2
        assert chart["responseCount"] == 1
        assert chart["distribution"] == [{"name": "Fri", "value": 1}]


class TestExport:
    """Test suite for GET /api/forms/{id}/responses/export."""

    def test_csv_download(self, visitor, form, alice_client):
        submit(visitor, form, {"Name": "Al", "Day": "Fri"})

        response = alice_client.get(f"/api/forms/{form['id']}/responses/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="Lunch poll-responses.csv"' in response.headers["content-disposition"]
        lines = response.text.split("\n")
        assert lines[0] == "Response ID,Timestamp,Name,Day"
        assert lines[1].endswith(",Al,Fri")

    def test_question_added_after_response(self, visitor, form, alice_client):
        """Test that a later-added question exports as an empty cell."""
        submit(visitor, form, {"Name": "Al", "Day": "Mon"})
        alice_client.put(
            f"/api/forms/{form['id']}",
            json={
                **form,
                "published": True,
                "questions": form["questions"] + [{"text": "Dessert", "type": "text"}],
            },
        )

        response = alice_client.get(f"/api/forms/{form['id']}/responses/export")

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == ["Response ID", "Timestamp", "Name", "Day", "Dessert"]
        assert len(rows) == 2
        assert rows[1][2:] == ["Al", "Mon", ""]

    def test_non_latin_title(self, visitor, alice_client):
        """Test that titles outside Latin-1 still download with their name."""
        created = alice_client.post(
            "/api/forms",
            json={"title": "日本語アンケート", "questions": [{"text": "名前", "required": True}]},
        ).json()
        submit(visitor, created, {"名前": "太郎"})

        response = alice_client.get(f"/api/forms/{created['id']}/responses/export")

        assert response.status_code == 200
        disposition = response.headers["content-disposition"]
        assert 'filename="________-responses.csv"' in disposition
        assert "filename*=UTF-8''%E6%97%A5%E6%9C%AC%E8%AA%9E" in disposition
        assert response.text.split("\n")[1].endswith(",太郎")
