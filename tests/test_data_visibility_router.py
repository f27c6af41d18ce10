# tests/test_data_visibility_router.py

"""
Tests for the /data-visibility endpoints.
"""

from fastapi.testclient import TestClient
from unittest.mock import Mock, patch

from dependencies.auth import CurrentUser, get_current_user


def roles_by_name(response):
    return {row["role"]: row for row in response.json()}


def test_requires_authentication(client: TestClient):
    response = client.get("/data-visibility/categories")
    assert response.status_code in (401, 403)


def test_list_categories(client: TestClient, login_as, mock_viewer_user):
    login_as(mock_viewer_user)

    response = client.get("/data-visibility/categories")

    assert response.status_code == 200
    data = response.json()
    assert list(data)[:3] == ["basic", "budget", "logistics"]
    budget = data["budget"]
    assert budget["label"] == "Budget & Costs"
    assert "cost" in budget["fields"]


def test_me_returns_defaults_for_viewer(client: TestClient, login_as, mock_viewer_user, fake_supabase):
    login_as(mock_viewer_user)

    response = client.get("/data-visibility/me")

    assert response.status_code == 200
    assert response.json() == {
        "organization_id": "org-1",
        "role": "viewer",
        "visible_categories": ["basic", "logistics", "travel", "notes"],
    }


def test_me_fails_closed_on_storage_error(client: TestClient, login_as, mock_viewer_user, fake_supabase):
    login_as(mock_viewer_user)
    fake_supabase.fail_with = Exception("db offline")

    response = client.get("/data-visibility/me")

    assert response.status_code == 500


def test_me_fails_closed_on_malformed_row(client: TestClient, login_as, mock_viewer_user, fake_supabase):
    login_as(mock_viewer_user)
    fake_supabase.tables["role_data_permissions"] = [
        {"id": "bad", "organization_id": "org-1", "role": "member", "visible_categories": ["basic"]},
    ]

    response = client.get("/data-visibility/me")

    assert response.status_code == 500


def test_list_roles_for_member(client: TestClient, login_as, mock_viewer_user, fake_supabase):
    login_as(mock_viewer_user)

    response = client.get("/data-visibility/organizations/org-1/roles")

    assert response.status_code == 200
    rows = roles_by_name(response)
    assert set(rows) == {"owner", "admin", "editor", "viewer"}
    assert rows["owner"]["configurable"] is False
    assert rows["viewer"]["is_custom"] is False
    assert len(rows["admin"]["visible_categories"]) == 10


def test_list_roles_other_org_forbidden(client: TestClient, login_as, mock_viewer_user, fake_supabase):
    login_as(mock_viewer_user)

    response = client.get("/data-visibility/organizations/org-2/roles")

    assert response.status_code == 403
    assert fake_supabase.calls == []


def test_admin_updates_then_resets_viewer(client: TestClient, login_as, mock_admin_user, fake_supabase):
    login_as(mock_admin_user)

    response = client.put(
        "/data-visibility/organizations/org-1/roles/viewer",
        json={"visible_categories": ["budget"]},
    )

    assert response.status_code == 200
    viewer = roles_by_name(response)["viewer"]
    assert viewer["visible_categories"] == ["budget"]
    assert viewer["is_custom"] is True

    response = client.delete("/data-visibility/organizations/org-1/roles/viewer")

    assert response.status_code == 200
    viewer = roles_by_name(response)["viewer"]
    assert viewer["visible_categories"] == ["basic", "logistics", "travel", "notes"]
    assert viewer["is_custom"] is False


def test_updated_override_is_visible_to_viewer(client: TestClient, login_as, mock_admin_user, mock_viewer_user, fake_supabase):
    login_as(mock_admin_user)
    client.put(
        "/data-visibility/organizations/org-1/roles/viewer",
        json={"visible_categories": ["budget", "leads"]},
    )

    login_as(mock_viewer_user)
    response = client.get("/data-visibility/me")

    assert response.json()["visible_categories"] == ["budget", "leads"]


def test_cannot_modify_privileged_roles(client: TestClient, login_as, mock_admin_user, fake_supabase):
    login_as(mock_admin_user)

    put = client.put(
        "/data-visibility/organizations/org-1/roles/owner",
        json={"visible_categories": ["basic"]},
    )
    delete = client.delete("/data-visibility/organizations/org-1/roles/admin")

    assert put.status_code == 403
    assert delete.status_code == 403
    assert fake_supabase.calls == []


def test_viewer_cannot_update(client: TestClient, login_as, mock_viewer_user, fake_supabase):
    login_as(mock_viewer_user)

    response = client.put(
        "/data-visibility/organizations/org-1/roles/viewer",
        json={"visible_categories": ["budget"]},
    )

    assert response.status_code == 403
    assert fake_supabase.calls == []


def test_invalid_category_rejected(client: TestClient, login_as, mock_admin_user, fake_supabase):
    login_as(mock_admin_user)

    response = client.put(
        "/data-visibility/organizations/org-1/roles/viewer",
        json={"visible_categories": ["salaries"]},
    )

    assert response.status_code == 422


def test_storage_error_on_update(client: TestClient, login_as, mock_admin_user, fake_supabase):
    login_as(mock_admin_user)
    fake_supabase.fail_with = Exception("permission denied for table role_data_permissions")

    response = client.put(
        "/data-visibility/organizations/org-1/roles/editor",
        json={"visible_categories": ["budget"]},
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Update role permissions failed"


# ============================================================
# get_current_user
# ============================================================

def _auth_response(metadata, email="user@example.com"):
    user = Mock()
    user.id = "auth-uid"
    user.email = email
    user.user_metadata = metadata
    return Mock(user=user)


def test_current_user_from_supabase_metadata():
    client = Mock()
    client.auth.get_user.return_value = _auth_response(
        {"organization_id": "org-9", "role": "editor", "full_name": "Sam"}
    )
    credentials = Mock(credentials="token")

    with patch("dependencies.auth.get_supabase_client", return_value=client):
        user = get_current_user(credentials)

    assert isinstance(user, CurrentUser)
    assert user.organization_id == "org-9"
    assert user.role == "editor"
    assert not user.is_org_admin


def test_current_user_unknown_role_has_no_role():
    client = Mock()
    client.auth.get_user.return_value = _auth_response({"organization_id": "org-9", "role": "superuser"})

    with patch("dependencies.auth.get_supabase_client", return_value=client):
        user = get_current_user(Mock(credentials="token"))

    assert user.role is None


def test_invalid_token_is_unauthorized(client: TestClient):
    supabase = Mock()
    supabase.auth.get_user.side_effect = Exception("invalid JWT")

    with patch("dependencies.auth.get_supabase_client", return_value=supabase):
        response = client.get(
            "/data-visibility/categories",
            headers={"Authorization": "Bearer bad-token"},
        )

    assert response.status_code == 401
