"""Tests for the /api/documents endpoints.

Covers creation (limit, form resolution, first version), visibility of
drafts, listing with pagination, and the update rules: decorations,
in-place amendments and contribution-bearing new versions.
"""

from collabdocs.models import NotificationEvent
from tests.conftest import (
    AUTHOR,
    create_comment,
    create_document,
    make_document,
    past_date,
    token_headers,
)


class TestCreateDocument:

    def test_create_document(self, client, author_headers):
        resp = client.post("/api/documents", json=make_document(), headers=author_headers)
        assert resp.status_code == 201
        data = resp.json()
        assert data["author_id"] == AUTHOR
        assert data["published"] is True
        assert data["closed"] is False
        assert data["comments_count"] == 0
        assert data["current_version"]["version"] == 1
        assert data["current_version"]["content"]["title"] == "Open procurement data"
        assert data["current_version"]["contributions"] == []

    def test_form_by_id_or_slug(self, client, author_headers):
        form_id = client.get("/api/custom-forms/default").json()["id"]
        payload = make_document()
        payload["custom_form"] = form_id
        resp = client.post("/api/documents", json=payload, headers=author_headers)
        assert resp.status_code == 201
        assert resp.json()["custom_form_id"] == form_id

    def test_unknown_form_is_bad_request(self, client, author_headers):
        payload = make_document()
        payload["custom_form"] = "no-such-form"
        resp = client.post("/api/documents", json=payload, headers=author_headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "BAD_REQUEST"

    def test_invalid_closing_date_rejected(self, client, author_headers):
        resp = client.post(
            "/api/documents",
            json=make_document(closingDate="next tuesday"),
            headers=author_headers,
        )
        assert resp.status_code == 422

    def test_create_schedules_closing_notification(self, client, db, author_headers):
        doc = create_document(client, author_headers)
        events = db.query(NotificationEvent).filter(NotificationEvent.document_id == doc["id"]).all()
        assert len(events) == 1
        assert events[0].event_type == "document-closes"
        assert events[0].status == "queued"

    def test_without_closing_date_nothing_scheduled(self, client, db, author_headers):
        payload = make_document()
        del payload["content"]["closingDate"]
        resp = client.post("/api/documents", json=payload, headers=author_headers)
        assert resp.status_code == 201
        assert db.query(NotificationEvent).count() == 0
        assert resp.json()["closing_date"] is None


class TestCreationLimit:

    def test_limit_boundary(self, client, author_headers, admin_headers):
        resp = client.put("/api/community", json={"document_creation_limit": 2}, headers=admin_headers)
        assert resp.status_code == 200

        create_document(client, author_headers)
        create_document(client, author_headers, published=False)

        resp = client.post("/api/documents", json=make_document(), headers=author_headers)
        assert resp.status_code == 403
        body = resp.json()
        assert body["error"] == "POLICY_VIOLATION"
        assert body["details"]["limit"] == 2

    def test_limit_is_per_author(self, client, author_headers, admin_headers):
        client.put("/api/community", json={"document_creation_limit": 1}, headers=admin_headers)
        create_document(client, author_headers)

        other_author = token_headers("author-z", "accountable")
        create_document(client, other_author)

    def test_zero_limit_blocks_everyone(self, client, author_headers, admin_headers):
        client.put("/api/community", json={"document_creation_limit": 0}, headers=admin_headers)
        resp = client.post("/api/documents", json=make_document(), headers=author_headers)
        assert resp.status_code == 403


class TestReadDocuments:

    def test_get_document(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        resp = client.get(f"/api/documents/{doc['id']}", headers=reader_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == doc["id"]
        assert data["is_author"] is False
        assert data["contributions_count"] is None

    def test_author_sees_is_author(self, client, author_headers):
        doc = create_document(client, author_headers)
        assert client.get(f"/api/documents/{doc['id']}", headers=author_headers).json()["is_author"] is True

    def test_get_nonexistent_returns_404(self, client):
        resp = client.get("/api/documents/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["error"] == "DOCUMENT_NOT_FOUND"

    def test_draft_hidden_from_others(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers, published=False)
        assert client.get(f"/api/documents/{doc['id']}", headers=reader_headers).status_code == 403
        assert client.get(f"/api/documents/{doc['id']}").status_code == 403
        assert client.get(f"/api/documents/{doc['id']}", headers=author_headers).status_code == 200

    def test_public_list_excludes_drafts(self, client, author_headers):
        published = create_document(client, author_headers)
        create_document(client, author_headers, published=False)

        data = client.get("/api/documents").json()
        assert [d["id"] for d in data["results"]] == [published["id"]]
        assert data["pagination"] == {"count": 1, "page": 1, "limit": 10}

    def test_my_documents_includes_drafts(self, client, author_headers):
        create_document(client, author_headers)
        create_document(client, author_headers, published=False)
        create_document(client, token_headers("author-z", "accountable"))

        data = client.get("/api/documents/my-documents", headers=author_headers).json()
        assert data["pagination"]["count"] == 2
        assert all(d["author_id"] == AUTHOR for d in data["results"])

    def test_my_documents_requires_accountable(self, client, reader_headers):
        assert client.get("/api/documents/my-documents", headers=reader_headers).status_code == 403

    def test_pagination(self, client, author_headers):
        for _ in range(3):
            create_document(client, author_headers)

        first = client.get("/api/documents?page=1&limit=2").json()
        second = client.get("/api/documents?page=2&limit=2").json()
        assert len(first["results"]) == 2
        assert len(second["results"]) == 1
        assert first["pagination"] == {"count": 3, "page": 1, "limit": 2}
        ids = {d["id"] for d in first["results"]} | {d["id"] for d in second["results"]}
        assert len(ids) == 3

    def test_limit_is_capped(self, client):
        assert client.get("/api/documents?limit=1000").json()["pagination"]["limit"] == 100

    def test_page_must_be_positive(self, client):
        assert client.get("/api/documents?page=0").status_code == 422


class TestUpdateDocument:

    def test_only_author_can_update(self, client, author_headers):
        doc = create_document(client, author_headers)
        intruder = token_headers("author-z", "accountable")
        resp = client.put(f"/api/documents/{doc['id']}", json={"published": False}, headers=intruder)
        assert resp.status_code == 403

    def test_publish_flag(self, client, author_headers):
        doc = create_document(client, author_headers, published=False)
        resp = client.put(f"/api/documents/{doc['id']}", json={"published": True}, headers=author_headers)
        assert resp.status_code == 200
        assert resp.json()["published"] is True

    def test_content_without_contributions_amends_in_place(self, client, author_headers):
        doc = create_document(client, author_headers)
        content = dict(doc["current_version"]["content"], brief="A sharper brief.")
        resp = client.put(f"/api/documents/{doc['id']}", json={"content": content}, headers=author_headers)
        assert resp.status_code == 200
        version = resp.json()["current_version"]
        assert version["version"] == 1
        assert version["id"] == doc["current_version"]["id"]
        assert version["content"]["brief"] == "A sharper brief."

    def test_contributions_create_new_version(self, client, db, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        comment = create_comment(client, doc["id"], reader_headers)

        content = dict(doc["current_version"]["content"], brief="Brief with the deadline.")
        resp = client.put(
            f"/api/documents/{doc['id']}",
            json={"content": content, "contributions": [comment["id"]]},
            headers=author_headers,
        )
        assert resp.status_code == 200
        version = resp.json()["current_version"]
        assert version["version"] == 2
        assert version["contributions"] == [comment["id"]]
        assert version["content"]["brief"] == "Brief with the deadline."

        versions = client.get(f"/api/documents/{doc['id']}/versions").json()
        assert [v["version"] for v in versions] == [2, 1]
        assert versions[1]["content"]["brief"] == doc["current_version"]["content"]["brief"]

    def test_contributions_without_content_copy_current(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        comment = create_comment(client, doc["id"], reader_headers)
        resp = client.put(
            f"/api/documents/{doc['id']}",
            json={"contributions": [comment["id"]]},
            headers=author_headers,
        )
        version = resp.json()["current_version"]
        assert version["version"] == 2
        assert version["content"] == doc["current_version"]["content"]

    def test_each_contribution_update_adds_exactly_one_version(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        for expected in (2, 3, 4):
            comment = create_comment(client, doc["id"], reader_headers)
            resp = client.put(
                f"/api/documents/{doc['id']}",
                json={"contributions": [comment["id"]]},
                headers=author_headers,
            )
            assert resp.json()["current_version"]["version"] == expected

    def test_two_contributions_queue_two_events(self, client, db, author_headers, reader_headers, other_headers):
        doc = create_document(client, author_headers)
        first = create_comment(client, doc["id"], reader_headers)
        second = create_comment(client, doc["id"], other_headers, field="articles")

        resp = client.put(
            f"/api/documents/{doc['id']}",
            json={"contributions": [first["id"], second["id"]]},
            headers=author_headers,
        )
        assert resp.status_code == 200
        assert sorted(resp.json()["current_version"]["contributions"]) == sorted([first["id"], second["id"]])

        events = (
            db.query(NotificationEvent)
            .filter(NotificationEvent.event_type == "comment-contribution")
            .all()
        )
        assert sorted(e.comment_id for e in events) == sorted([first["id"], second["id"]])

    def test_unknown_contribution_rejected(self, client, author_headers):
        doc = create_document(client, author_headers)
        resp = client.put(
            f"/api/documents/{doc['id']}",
            json={"contributions": ["nope"]},
            headers=author_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "INVALID_PARAM"
        versions = client.get(f"/api/documents/{doc['id']}/versions").json()
        assert len(versions) == 1

    def test_contribution_from_other_document_rejected(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        other = create_document(client, author_headers)
        foreign = create_comment(client, other["id"], reader_headers)
        resp = client.put(
            f"/api/documents/{doc['id']}",
            json={"contributions": [foreign["id"]]},
            headers=author_headers,
        )
        assert resp.status_code == 400

    def test_decorations_rewrite_named_comments_only(self, client, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        moved = create_comment(client, doc["id"], reader_headers, decoration={"from": 1, "to": 5})
        kept = create_comment(client, doc["id"], reader_headers, decoration={"from": 8, "to": 9})

        resp = client.put(
            f"/api/documents/{doc['id']}",
            json={"decorations": [{"comment": moved["id"], "decoration": {"from": 3, "to": 7}}]},
            headers=author_headers,
        )
        assert resp.status_code == 200

        comments = client.get(
            f"/api/documents/{doc['id']}/comments",
            params={"ids": f"{moved['id']},{kept['id']}"},
        ).json()
        by_id = {c["id"]: c for c in comments}
        assert by_id[moved["id"]]["decoration"] == {"from": 3, "to": 7}
        assert by_id[kept["id"]]["decoration"] == {"from": 8, "to": 9}

    def test_new_closing_date_supersedes_queued_event(self, client, db, author_headers):
        doc = create_document(client, author_headers)
        content = dict(doc["current_version"]["content"], closingDate="2031-01-01T00:00:00Z")
        client.put(f"/api/documents/{doc['id']}", json={"content": content}, headers=author_headers)

        events = (
            db.query(NotificationEvent)
            .filter(NotificationEvent.document_id == doc["id"])
            .all()
        )
        assert sorted(e.status for e in events) == ["queued", "superseded"]

    def test_removing_closing_date_cancels_queued_event(self, client, db, author_headers):
        doc = create_document(client, author_headers)
        content = dict(doc["current_version"]["content"])
        del content["closingDate"]
        resp = client.put(f"/api/documents/{doc['id']}", json={"content": content}, headers=author_headers)
        assert resp.json()["closing_date"] is None

        events = (
            db.query(NotificationEvent)
            .filter(NotificationEvent.document_id == doc["id"])
            .all()
        )
        assert [e.status for e in events] == ["superseded"]

    def test_contribution_version_reschedules_closing(self, client, db, author_headers, reader_headers):
        doc = create_document(client, author_headers)
        comment = create_comment(client, doc["id"], reader_headers)
        client.put(
            f"/api/documents/{doc['id']}",
            json={"contributions": [comment["id"]]},
            headers=author_headers,
        )

        events = (
            db.query(NotificationEvent)
            .filter(NotificationEvent.document_id == doc["id"])
            .all()
        )
        assert sorted(e.status for e in events) == ["queued", "superseded"]
        queued = [e for e in events if e.status == "queued"]
        assert queued[0].event_type == "document-closes"

    def test_flags_only_update_leaves_closing_event(self, client, db, author_headers):
        doc = create_document(client, author_headers)
        client.put(f"/api/documents/{doc['id']}", json={"published": False}, headers=author_headers)

        events = (
            db.query(NotificationEvent)
            .filter(NotificationEvent.document_id == doc["id"])
            .all()
        )
        assert [e.status for e in events] == ["queued"]

    def test_update_nonexistent_returns_404(self, client, author_headers):
        resp = client.put("/api/documents/missing", json={"published": True}, headers=author_headers)
        assert resp.status_code == 404


class TestClosedDocuments:

    def test_past_closing_date_closes(self, client, author_headers):
        doc = create_document(client, author_headers, closingDate=past_date())
        assert doc["closed"] is True

    def test_manual_close(self, client, author_headers):
        doc = create_document(client, author_headers)
        resp = client.put(f"/api/documents/{doc['id']}", json={"closed": True}, headers=author_headers)
        assert resp.json()["closed"] is True

    def test_reopen_cannot_override_closing_date(self, client, author_headers):
        doc = create_document(client, author_headers, closingDate=past_date())
        resp = client.put(f"/api/documents/{doc['id']}", json={"closed": False}, headers=author_headers)
        assert resp.json()["closed"] is True

    def test_closed_document_carries_aggregates(self, client, author_headers, reader_headers, other_headers):
        doc = create_document(client, author_headers)
        first = create_comment(client, doc["id"], reader_headers, decoration={"from": 0, "to": 4})
        second = create_comment(client, doc["id"], other_headers)
        create_comment(client, doc["id"], other_headers, field="articles")
        client.put(
            f"/api/documents/{doc['id']}",
            json={"contributions": [first["id"], second["id"]], "closed": True},
            headers=author_headers,
        )

        data = client.get(f"/api/documents/{doc['id']}").json()
        assert data["closed"] is True
        assert data["comments_count"] == 3
        assert data["contributions_count"] == 2
        assert data["contributors_count"] == 2
        assert data["contextual_comments_count"] == 1
