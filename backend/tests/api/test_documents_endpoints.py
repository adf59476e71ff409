"""API tests for the document vault."""

from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from adjusterhub.repositories.document_repo import DocumentRepository
from adjusterhub.schemas.enums import ClaimStatus
from tests.fixtures import SAMPLE_ESTIMATE, SAMPLE_PDF


def _upload(client, headers, filename="estimate.txt", content=SAMPLE_ESTIMATE, mime="text/plain", **form):
    return client.post(
        "/api/documents/upload",
        files={"file": (filename, content, mime)},
        data=form,
        headers=headers,
    )


class TestDocuments:
    def test_upload_list_download_delete(self, client, make_user, auth_headers, test_settings):
        headers = auth_headers(make_user())

        resp = _upload(client, headers, name="Roof estimate", type="ESTIMATE")
        assert resp.status_code == 201
        doc = resp.json()
        assert doc["name"] == "Roof estimate"
        assert doc["type"] == "ESTIMATE"
        assert doc["size"] == len(SAMPLE_ESTIMATE)
        stored = list(Path(test_settings.storage_dir).rglob("*.txt"))
        assert len(stored) == 1

        listed = client.get("/api/documents", headers=headers).json()
        assert listed["pagination"]["total"] == 1
        assert listed["stats"]["totalSize"] == len(SAMPLE_ESTIMATE)

        download = client.get(f"/api/documents/{doc['id']}/download", headers=headers)
        assert download.status_code == 200
        assert download.content == SAMPLE_ESTIMATE

        assert client.delete(f"/api/documents/{doc['id']}", headers=headers).status_code == 204
        assert not stored[0].exists()
        assert client.get(f"/api/documents/{doc['id']}/download", headers=headers).status_code == 404

    def test_pdf_attached_to_assigned_claim(self, client, make_user, auth_headers, make_firm, make_claim):
        adjuster = make_user()
        claim = make_claim(make_firm(), status=ClaimStatus.ASSIGNED, adjuster=adjuster)
        resp = _upload(
            client, auth_headers(adjuster), "Inspection Report.pdf", SAMPLE_PDF, "application/pdf",
            claimId=str(claim.id), type="REPORT",
        )
        assert resp.status_code == 201
        assert resp.json()["claimId"] == claim.id
        assert resp.json()["originalFilename"] == "Inspection_Report.pdf"

        listed = client.get("/api/documents", params={"claimId": claim.id}, headers=auth_headers(adjuster))
        assert listed.json()["pagination"]["total"] == 1

    def test_disallowed_type_rejected(self, client, make_user, auth_headers):
        resp = _upload(client, auth_headers(make_user()), "run.sh", b"echo hi", "application/x-sh")
        assert resp.status_code == 400
        assert resp.json() == {"error": "File type not allowed", "type": "FILE_UPLOAD"}

    def test_dangerous_extension_rejected(self, client, make_user, auth_headers):
        resp = _upload(client, auth_headers(make_user()), "notes.js", b"alert(1)", "text/plain")
        assert resp.status_code == 400
        assert resp.json()["error"] == "File extension not allowed"

    def test_empty_file_rejected(self, client, make_user, auth_headers):
        resp = _upload(client, auth_headers(make_user()), content=b"")
        assert resp.status_code == 400

    def test_other_users_cannot_download(self, client, make_user, auth_headers):
        doc = _upload(client, auth_headers(make_user())).json()
        resp = client.get(f"/api/documents/{doc['id']}/download", headers=auth_headers(make_user()))
        assert resp.status_code == 403

    def test_oversized_file_rejected_without_storing(self, client, make_user, auth_headers, test_settings):
        test_settings.max_upload_bytes = 16
        resp = _upload(client, auth_headers(make_user()))
        assert resp.status_code == 400
        assert resp.json()["error"].startswith("File size exceeds")
        assert list(Path(test_settings.storage_dir).rglob("*.txt")) == []

    def test_failed_insert_removes_stored_file(self, client, make_user, auth_headers, test_settings, monkeypatch):
        def fail_create(self, obj):
            raise SQLAlchemyError("insert failed")

        monkeypatch.setattr(DocumentRepository, "create", fail_create)
        resp = _upload(client, auth_headers(make_user()))
        assert resp.status_code == 500
        assert resp.json()["type"] == "DATABASE"
        assert list(Path(test_settings.storage_dir).rglob("*.txt")) == []
