"""Fixtures da API: TestClient com banco em memória e serviços novos por teste."""

from datetime import date, timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

from app.dependencies.services import init_services
from config.database import get_db


class FakeAnalysisAPI:
    """Handler do httpx.MockTransport que imita o serviço de análise."""

    def __init__(self):
        self.status_code = 200
        self.body = {
            "request_id": "req-1",
            "results": {
                "summary": "Bebê alegre e atento",
                "confidence": 0.91,
                "recommendations": ["Brinque de esconde-esconde"],
                "emotion_tags": ["feliz"],
            },
        }
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def analysis_api():
    return FakeAnalysisAPI()


@pytest.fixture
def test_client(session_factory, tmp_path, analysis_api):
    from main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    init_services(app, media_root=str(tmp_path / "Media"), analysis_transport=httpx.MockTransport(analysis_api))

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


def signup_and_login(client, email, password="segredo123", name="Maria"):
    response = client.post("/api/auth/cadastro", json={"email": email, "password": password, "name": name})
    assert response.status_code == 201, response.text
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(test_client):
    return signup_and_login(test_client, "mae@babycare.com.br")


@pytest.fixture
def other_headers(test_client):
    return signup_and_login(test_client, "pai@babycare.com.br", name="João")


@pytest.fixture
def baby_id(test_client, auth_headers):
    response = test_client.post(
        "/api/babies",
        json={
            "name": "Ana",
            "birth_date": (date.today() - timedelta(days=70)).isoformat(),
            "gender": "female",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["id"]
