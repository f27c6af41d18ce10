# tests/test_health.py

from fastapi.testclient import TestClient
from unittest.mock import Mock, patch


def test_health_app(client: TestClient):
    response = client.get("/health/app")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_health_db_not_configured(client: TestClient):
    with patch("core.supabase_client.get_supabase_client", return_value=None):
        response = client.get("/health/db")

    assert response.status_code == 200
    assert response.json()["status"] == "not_configured"


def test_health_db_reports_table_errors(client: TestClient):
    supabase = Mock()
    supabase.table.return_value.select.return_value.limit.return_value.execute.side_effect = Exception("relation does not exist")

    with patch("core.supabase_client.get_supabase_client", return_value=supabase):
        response = client.get("/health/db")

    body = response.json()
    assert body["status"] == "degraded"
    assert body["details"]["tables"]["role_data_permissions"]["status"] == "error"
