"""Tests for app/services/analysis_client.py

- Escolha estável da chave de API por aparelho
- Mapeamento das respostas HTTP para erros de domínio (httpx.MockTransport)
"""

import base64
import json

import httpx
import pytest

from app.errors import (
    AnalysisAPIError,
    AnalysisNetworkError,
    InvalidAnalysisResponse,
    InvalidAPIKey,
    QuotaExceeded,
)
from app.services.analysis_client import AnalysisAPIClient, APIKeyManager

URL = "https://analysis.test/v1/analyze"
KEYS = ["sk-a", "sk-b", "sk-c"]


def client_returning(status_code=200, **kwargs):
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(status_code, **kwargs)

    return AnalysisAPIClient(URL, transport=httpx.MockTransport(handler)), captured


# ─────────────────────────────────────────────────────────────────────────────
# APIKeyManager
# ─────────────────────────────────────────────────────────────────────────────


class TestAPIKeyManager:
    def test_same_device_same_key(self):
        manager = APIKeyManager(KEYS)
        assert manager.get_api_key("iphone-1") == manager.get_api_key("iphone-1")

    def test_stable_across_instances(self):
        assert APIKeyManager(KEYS).get_api_key("iphone-1") == APIKeyManager(KEYS).get_api_key("iphone-1")

    def test_key_comes_from_pool(self):
        manager = APIKeyManager(KEYS)
        assert {manager.get_api_key(f"device-{i}") for i in range(50)} <= set(KEYS)

    def test_devices_spread_over_pool(self):
        manager = APIKeyManager(KEYS)
        assert len({manager.get_api_key(f"device-{i}") for i in range(50)}) > 1

    def test_failed_key_is_skipped(self):
        manager = APIKeyManager(KEYS)
        key = manager.get_api_key("iphone-1")

        manager.report_failed_key(key)

        assert manager.get_api_key("iphone-1") != key
        assert manager.failed_keys == {key}

    def test_all_failed_falls_back_to_full_pool(self):
        manager = APIKeyManager(KEYS)
        for key in KEYS:
            manager.report_failed_key(key)

        assert manager.get_api_key("iphone-1") in KEYS

    def test_empty_pool(self):
        with pytest.raises(ValueError):
            APIKeyManager([])


# ─────────────────────────────────────────────────────────────────────────────
# AnalysisAPIClient
# ─────────────────────────────────────────────────────────────────────────────


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_success_returns_results(self):
        client, captured = client_returning(
            json={"request_id": "r1", "results": {"summary": "Bebê sorridente", "confidence": 0.92}}
        )

        results = await client.analyze("sk-a", b"\xff\xd8imagem", "emotion")

        assert results == {"summary": "Bebê sorridente", "confidence": 0.92}
        request = captured["request"]
        assert request.headers["Authorization"] == "Bearer sk-a"
        body = json.loads(request.content)
        assert body["analysis_type"] == "emotion"
        assert body["anonymized_media"]["format"] == "jpg"
        assert base64.b64decode(body["anonymized_media"]["data"]) == b"\xff\xd8imagem"
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_missing_results_is_empty(self):
        client, _ = client_returning(json={"request_id": "r1"})
        assert await client.analyze("sk-a", b"x", "emotion") == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code, error",
        [(429, QuotaExceeded), (401, InvalidAPIKey), (500, AnalysisAPIError), (403, AnalysisAPIError)],
    )
    async def test_status_codes(self, status_code, error):
        client, _ = client_returning(status_code, json={})

        with pytest.raises(error):
            await client.analyze("sk-a", b"x", "emotion")

    @pytest.mark.asyncio
    async def test_error_body(self):
        client, _ = client_returning(json={"error": {"code": "bad_media", "message": "Imagem ilegível"}})

        with pytest.raises(AnalysisAPIError) as exc_info:
            await client.analyze("sk-a", b"x", "emotion")

        assert exc_info.value.api_code == "bad_media"
        assert exc_info.value.api_message == "Imagem ilegível"

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        client, _ = client_returning(content=b"<html>oops</html>")

        with pytest.raises(InvalidAnalysisResponse):
            await client.analyze("sk-a", b"x", "emotion")

    @pytest.mark.asyncio
    async def test_non_object_body(self):
        client, _ = client_returning(json=[1, 2, 3])

        with pytest.raises(InvalidAnalysisResponse):
            await client.analyze("sk-a", b"x", "emotion")

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("sem rede", request=request)

        client = AnalysisAPIClient(URL, transport=httpx.MockTransport(handler))

        with pytest.raises(AnalysisNetworkError):
            await client.analyze("sk-a", b"x", "emotion")
