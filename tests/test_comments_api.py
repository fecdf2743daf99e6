"""Tests for /api/documents/{id}/comments: commenting, listing and moderation."""

from collabdocs.models import NotificationEvent
from tests.conftest import (
    create_comment,
    create_document,
    past_date,
    token_headers,
)


def _resolved_events(db):
    return db.query(NotificationEvent).filter(NotificationEvent.event_type == "comment-resolved").all()


class TestCreateComment:

    def test_create_comment(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        comment = create_comment(client, doc["id"], reader_headers, decoration={"from": 0, "to": 3})
        assert comment["user_id"] == "reader-b"
        assert comment["field"] == "brief"
        assert comment["resolved"] is False
        assert comment["reply"] is None
        assert comment["version_id"] == doc["current_version"]["id"]
        assert comment["decoration"] == {"from": 0, "to": 3}

    def test_comment_increments_count(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        create_comment(client, doc["id"], reader_headers)
        create_comment(client, doc["id"], reader_headers, field="articles")
        assert client.get(f"/api/documents/{doc['id']}").json()["comments_count"] == 2

    def test_comment_attaches_to_current_version(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        first = create_comment(client, doc["id"], reader_headers)
        updated = client.put(
            f"/api/documents/{doc['id']}",
            json={"contributions": [first["id"]]},
            headers=author_headers,
        ).json()
        second = create_comment(client, doc["id"], reader_headers)
        assert second["version_id"] == updated["current_version"]["id"]

    def test_requires_authentication(self, client, author_headers):
        doc = create_document(client, author_headers)
        resp = client.post(
            f"/api/documents/{doc['id']}/comments",
            json={"field": "brief", "content": "Anonymous remark"},
        )
        assert resp.status_code == 401

    def test_non_commentable_field_rejected(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        for field in ("title", "closingDate", "unknown"):
            resp = client.post(
                f"/api/documents/{doc['id']}/comments",
                json={"field": field, "content": "Hmm"},
                headers=reader_headers,
            )
            assert resp.status_code == 400
            assert resp.json()["error"] == "INVALID_PARAM"

    def test_closed_document_rejects_comments(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers, closingDate=past_date())
        resp = client.post(
            f"/api/documents/{doc['id']}/comments",
            json={"field": "brief", "content": "Too late"},
            headers=reader_headers,
        )
        assert resp.status_code == 403
        assert resp.json()["error"] == "DOCUMENT_CLOSED"
        assert client.get(f"/api/documents/{doc['id']}").json()["comments_count"] == 0

    def test_manually_closed_document_rejects_comments(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        client.put(f"/api/documents/{doc['id']}", json={"closed": True}, headers=author_headers)
        resp = client.post(
            f"/api/documents/{doc['id']}/comments",
            json={"field": "brief", "content": "Too late"},
            headers=reader_headers,
        )
        assert resp.status_code == 403

    def test_draft_accepts_comments_from_any_user(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers, published=False)
        comment = create_comment(client, doc["id"], reader_headers, content="Sneak peek")
        assert comment["document_id"] == doc["id"]

    def test_draft_non_commentable_field_is_invalid_param(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers, published=False)
        resp = client.post(
            f"/api/documents/{doc['id']}/comments",
            json={"field": "title", "content": "Hmm"},
            headers=reader_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "INVALID_PARAM"

    def test_unknown_document(self, client, reader_headers):
        resp = client.post(
            "/api/documents/missing/comments",
            json={"field": "brief", "content": "?"},
            headers=reader_headers,
        )
        assert resp.status_code == 404


class TestListComments:

    def test_requires_ids_or_field(self, client, author_headers):
        doc = create_document(client, author_headers)
        resp = client.get(f"/api/documents/{doc['id']}/comments")
        assert resp.status_code == 400
        assert resp.json()["error"] == "MISSING_QUERY"

    def test_by_ids(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        first = create_comment(client, doc["id"], reader_headers)
        create_comment(client, doc["id"], reader_headers)

        resp = client.get(f"/api/documents/{doc['id']}/comments", params={"ids": first["id"]})
        assert resp.status_code == 200
        assert [c["id"] for c in resp.json()] == [first["id"]]

    def test_by_field_returns_unresolved_only(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        open_one = create_comment(client, doc["id"], reader_headers)
        done = create_comment(client, doc["id"], reader_headers)
        create_comment(client, doc["id"], reader_headers, field="articles")
        client.post(f"/api/documents/{doc['id']}/comments/{done['id']}/resolve", headers=author_headers)

        resp = client.get(f"/api/documents/{doc['id']}/comments", params={"field": "brief"})
        assert [c["id"] for c in resp.json()] == [open_one["id"]]

    def test_ids_from_other_documents_are_ignored(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        other = create_document(client, author_headers)
        foreign = create_comment(client, other["id"], reader_headers)
        resp = client.get(f"/api/documents/{doc['id']}/comments", params={"ids": foreign["id"]})
        assert resp.json() == []

    def test_without_replies(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        comment = create_comment(client, doc["id"], reader_headers)
        client.post(
            f"/api/documents/{doc['id']}/comments/{comment['id']}/reply",
            json={"reply": "Good point."},
            headers=author_headers,
        )
        url = f"/api/documents/{doc['id']}/comments"
        assert client.get(url, params={"ids": comment["id"]}).json()[0]["reply"] == "Good point."
        hidden = client.get(url, params={"ids": comment["id"], "with_replies": "false"}).json()
        assert hidden[0]["reply"] is None


class TestResolve:

    def test_resolve_scenario(self, client, db, author_headers, reader_headers):
        """A authors, B comments, C (accountable, not the author) cannot resolve, A can."""
        doc = create_document(client, author_headers)
        comment = create_comment(client, doc["id"], reader_headers)
        url = f"/api/documents/{doc['id']}/comments/{comment['id']}/resolve"

        resp = client.post(url, headers=token_headers("author-c", "accountable"))
        assert resp.status_code == 403
        assert _resolved_events(db) == []

        resp = client.post(url, headers=author_headers)
        assert resp.status_code == 200
        assert resp.json()["resolved"] is True
        events = _resolved_events(db)
        assert len(events) == 1
        assert events[0].comment_id == comment["id"]

    def test_resolve_is_idempotent(self, client, db, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        comment = create_comment(client, doc["id"], reader_headers)
        url = f"/api/documents/{doc['id']}/comments/{comment['id']}/resolve"

        assert client.post(url, headers=author_headers).json()["resolved"] is True
        assert client.post(url, headers=author_headers).json()["resolved"] is True
        assert len(_resolved_events(db)) == 1

    def test_plain_user_cannot_resolve(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        comment = create_comment(client, doc["id"], reader_headers)
        resp = client.post(
            f"/api/documents/{doc['id']}/comments/{comment['id']}/resolve",
            headers=reader_headers,
        )
        assert resp.status_code == 403

    def test_comment_of_another_document_is_not_found(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        other = create_document(client, author_headers)
        foreign = create_comment(client, other["id"], reader_headers)
        resp = client.post(
            f"/api/documents/{doc['id']}/comments/{foreign['id']}/resolve",
            headers=author_headers,
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "COMMENT_NOT_FOUND"


class TestReply:

    def test_reply_overwrites(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        comment = create_comment(client, doc["id"], reader_headers)
        url = f"/api/documents/{doc['id']}/comments/{comment['id']}/reply"

        client.post(url, json={"reply": "First answer"}, headers=author_headers)
        resp = client.post(url, json={"reply": "Second answer"}, headers=author_headers)
        assert resp.status_code == 200
        assert resp.json()["reply"] == "Second answer"

    def test_only_author_replies(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        comment = create_comment(client, doc["id"], reader_headers)
        resp = client.post(
            f"/api/documents/{doc['id']}/comments/{comment['id']}/reply",
            json={"reply": "Not mine to answer"},
            headers=token_headers("author-c", "accountable"),
        )
        assert resp.status_code == 403

    def test_empty_reply_rejected(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        comment = create_comment(client, doc["id"], reader_headers)
        resp = client.post(
            f"/api/documents/{doc['id']}/comments/{comment['id']}/reply",
            json={"reply": ""},
            headers=author_headers,
        )
        assert resp.status_code == 422
