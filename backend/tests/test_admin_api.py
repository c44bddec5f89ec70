import pytest

from excel_analytics.models.analysis import Analysis
from excel_analytics.models.upload import Upload
from excel_analytics.models.user import User
from helpers import stored_files


@pytest.fixture
def populated(client, user_headers, other_headers, upload_workbook, sales_workbook):
    """Alice: one upload with a bar and a pie chart. Bob: one upload with a bar chart."""
    alice_upload = upload_workbook(user_headers, sales_workbook, filename="alice.xlsx").json()
    bob_upload = upload_workbook(other_headers, sales_workbook, filename="bob.xlsx").json()
    for headers, upload, chart_type in [
        (user_headers, alice_upload, "bar"),
        (user_headers, alice_upload, "pie"),
        (other_headers, bob_upload, "bar"),
    ]:
        response = client.post(
            "/api/analysis/generate-chart",
            json={"uploadId": upload["id"], "sheetName": "Sales", "chartType": chart_type,
                  "xAxis": "Month", "yAxis": "Sales"},
            headers=headers,
        )
        assert response.status_code == 201
    return {"alice_upload": alice_upload, "bob_upload": bob_upload}


def _user_id(client, headers):
    return client.get("/api/auth/me", headers=headers).json()["id"]


class TestAccess:
    @pytest.mark.parametrize("path", ["/api/admin/stats", "/api/admin/users", "/api/admin/uploads", "/api/admin/analyses"])
    def test_regular_users_are_forbidden(self, client, user_headers, path):
        assert client.get(path, headers=user_headers).status_code == 403

    def test_anonymous_is_unauthorized(self, client):
        assert client.get("/api/admin/stats").status_code == 401


class TestStats:
    def test_platform_stats(self, client, admin_headers, populated, sales_workbook):
        response = client.get("/api/admin/stats", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        platform = body["platform"]
        assert platform["totalUsers"] == 3
        assert platform["activeUsers"] == 3
        assert platform["totalUploads"] == 2
        assert platform["totalAnalyses"] == 3
        assert platform["storageUsedMB"] == round(2 * len(sales_workbook) / (1024 * 1024), 2)

        recent = body["recentActivity"]["recentUploads"]
        assert [u["filename"] for u in recent] == ["bob.xlsx", "alice.xlsx"]
        assert recent[0]["user"] == "Bob"

        assert body["analytics"]["chartTypeStats"] == [
            {"chartType": "bar", "count": 2},
            {"chartType": "pie", "count": 1},
        ]

    def test_empty_platform(self, client, admin_headers):
        platform = client.get("/api/admin/stats", headers=admin_headers).json()["platform"]

        assert platform["totalUploads"] == 0
        assert platform["storageUsedMB"] == 0


class TestUsers:
    def test_search_users(self, client, admin_headers, user_headers, other_headers):
        everyone = client.get("/api/admin/users", headers=admin_headers).json()
        matches = client.get("/api/admin/users", params={"search": "ALI"}, headers=admin_headers).json()

        assert len(everyone) == 3
        assert [u["email"] for u in matches] == ["alice@example.com"]
        assert "hashed_password" not in matches[0]

    def test_user_details_include_activity(self, client, admin_headers, user_headers, populated):
        user_id = _user_id(client, user_headers)

        body = client.get(f"/api/admin/users/{user_id}", headers=admin_headers).json()

        assert body["user"]["email"] == "alice@example.com"
        assert len(body["activity"]["uploads"]) == 1
        assert len(body["activity"]["analyses"]) == 2

    def test_unknown_user(self, client, admin_headers):
        response = client.get("/api/admin/users/9999", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"

    def test_deactivate_user_blocks_access(self, client, admin_headers, user_headers):
        user_id = _user_id(client, user_headers)

        response = client.patch(f"/api/admin/users/{user_id}/status", json={"isActive": False}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "User deactivated successfully"
        assert response.json()["user"]["is_active"] is False
        assert client.get("/api/upload/", headers=user_headers).status_code == 403

    def test_status_must_be_boolean(self, client, admin_headers, user_headers):
        user_id = _user_id(client, user_headers)

        response = client.patch(f"/api/admin/users/{user_id}/status", json={"isActive": "no"}, headers=admin_headers)

        assert response.status_code == 422

    def test_promote_user(self, client, admin_headers, user_headers):
        user_id = _user_id(client, user_headers)

        response = client.patch(f"/api/admin/users/{user_id}/role", json={"role": "admin"}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"
        assert client.get("/api/admin/stats", headers=user_headers).status_code == 200

    def test_invalid_role(self, client, admin_headers, user_headers):
        user_id = _user_id(client, user_headers)

        response = client.patch(f"/api/admin/users/{user_id}/role", json={"role": "owner"}, headers=admin_headers)

        assert response.status_code == 422

    def test_delete_user_cascades(self, client, admin_headers, user_headers, populated, db_session):
        user_id = _user_id(client, user_headers)

        response = client.delete(f"/api/admin/users/{user_id}", headers=admin_headers)

        assert response.status_code == 200
        assert db_session.query(User).filter(User.id == user_id).count() == 0
        assert db_session.query(Upload).filter(Upload.user_id == user_id).count() == 0
        assert db_session.query(Analysis).filter(Analysis.user_id == user_id).count() == 0
        # Bob's data is untouched
        assert db_session.query(Upload).count() == 1
        assert db_session.query(Analysis).count() == 1
        assert len(stored_files()) == 1

    def test_admin_cannot_delete_self(self, client, admin_headers):
        admin_id = _user_id(client, admin_headers)

        response = client.delete(f"/api/admin/users/{admin_id}", headers=admin_headers)

        assert response.status_code == 400


class TestUploadsAndAnalyses:
    def test_lists_everything(self, client, admin_headers, populated):
        uploads = client.get("/api/admin/uploads", headers=admin_headers).json()
        analyses = client.get("/api/admin/analyses", headers=admin_headers).json()

        assert {u["original_filename"] for u in uploads} == {"alice.xlsx", "bob.xlsx"}
        assert len(analyses) == 3

    def test_delete_any_upload(self, client, admin_headers, user_headers, populated, db_session):
        upload_id = populated["alice_upload"]["id"]

        response = client.delete(f"/api/admin/uploads/{upload_id}", headers=admin_headers)

        assert response.status_code == 200
        assert db_session.query(Analysis).filter(Analysis.upload_id == upload_id).count() == 0
        assert client.get(f"/api/upload/{upload_id}", headers=user_headers).status_code == 404
        assert len(stored_files()) == 1

    def test_delete_unknown_upload(self, client, admin_headers):
        assert client.delete("/api/admin/uploads/4242", headers=admin_headers).status_code == 404
