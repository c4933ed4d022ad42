# app/services/analysis_client.py

import base64
import hashlib
import threading
import uuid
from typing import List, Optional, Set

import httpx

from app.errors import (
    AnalysisAPIError,
    AnalysisNetworkError,
    InvalidAnalysisResponse,
    InvalidAPIKey,
    QuotaExceeded,
)
from config.logging_config import get_logger
from config.settings import ANALYSIS_API_KEYS, ANALYSIS_API_URL

logger = get_logger(__name__)

REQUEST_TIMEOUT = 30.0


class APIKeyManager:
    """Escolhe a chave do pool a partir do id do aparelho."""

    def __init__(self, keys: Optional[List[str]] = None):
        self._keys = list(keys if keys is not None else ANALYSIS_API_KEYS)
        if not self._keys:
            raise ValueError("É preciso pelo menos uma chave de API")
        self._failed: Set[str] = set()
        self._lock = threading.Lock()

    @staticmethod
    def _index(device_id: str, size: int) -> int:
        digest = hashlib.sha256(device_id.encode("utf-8")).digest()
        return int.from_bytes(digest[:8], "big") % size

    def get_api_key(self, device_id: str) -> str:
        with self._lock:
            healthy = [key for key in self._keys if key not in self._failed]
        # todas falharam: volta ao pool completo
        pool = healthy or self._keys
        return pool[self._index(device_id, len(pool))]

    def report_failed_key(self, key: str) -> None:
        with self._lock:
            self._failed.add(key)
        logger.warning("api_key_failed", key_suffix=key[-4:])

    @property
    def failed_keys(self) -> Set[str]:
        with self._lock:
            return set(self._failed)


class AnalysisAPIClient:
    def __init__(self, url: str = ANALYSIS_API_URL, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self._transport = transport

    async def analyze(self, api_key: str, media: bytes, analysis_type: str, media_format: str = "jpg") -> dict:
        """Envia a mídia e devolve o objeto `results` da resposta."""
        body = {
            "request_id": str(uuid.uuid4()),
            "analysis_type": analysis_type,
            "anonymized_media": {
                "format": media_format,
                "data": base64.b64encode(media).decode("ascii"),
            },
        }
        headers = {"Authorization": f"Bearer {api_key}"}

        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=self._transport) as client:
                response = await client.post(self.url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("analysis_request_failed", error=str(exc))
            raise AnalysisNetworkError()

        if response.status_code == 429:
            raise QuotaExceeded()
        if response.status_code == 401:
            raise InvalidAPIKey()
        if response.status_code != 200:
            raise AnalysisAPIError(str(response.status_code), "API request failed")

        try:
            payload = response.json()
        except ValueError:
            raise InvalidAnalysisResponse()
        if not isinstance(payload, dict):
            raise InvalidAnalysisResponse()

        error = payload.get("error")
        if isinstance(error, dict):
            raise AnalysisAPIError(str(error.get("code", "unknown")), str(error.get("message", "")))

        results = payload.get("results")
        return results if isinstance(results, dict) else {}
