# app/services/analysis_service.py

from typing import List

from app.errors import (
    AnalysisOptedOut,
    DataProcessingFailed,
    InvalidAPIKey,
    QuotaExceeded,
    RateLimitExceeded,
)
from app.models.media_model import AnalysisResult
from app.schemas.analysis_schema import GAIAnalysisType, QuotaStatus
from app.services.analysis_client import AnalysisAPIClient, APIKeyManager
from app.stores.media_store import MediaStore
from app.stores.settings_store import SettingsStore
from app.utils.rate_limiter import AnalysisRateLimiter
from config.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_RESULT_TEXT = "Análise concluída"
DEFAULT_CONFIDENCE = 0.9


class AnalysisService:
    def __init__(
        self,
        media_store: MediaStore,
        settings_store: SettingsStore,
        rate_limiter: AnalysisRateLimiter,
        key_manager: APIKeyManager,
        client: AnalysisAPIClient,
    ):
        self.media_store = media_store
        self.settings_store = settings_store
        self.rate_limiter = rate_limiter
        self.key_manager = key_manager
        self.client = client

    async def request_analysis(
        self, media_id: str, analysis_type: GAIAnalysisType, device_id: str = "unknown"
    ) -> AnalysisResult:
        """Envia a mídia para análise em nuvem e grava o resultado.

        A ordem das checagens é: opt-in do usuário, limite de taxa, cota
        da janela e só então a leitura do arquivo. O uso só é registrado
        quando a API responde com sucesso.
        """
        category = GAIAnalysisType(analysis_type).value

        if not self.settings_store.load().ai.analysis_enabled:
            logger.info("analysis_request_rejected", media_id=media_id, reason="opted_out")
            raise AnalysisOptedOut()
        if not self.rate_limiter.allow_request(category):
            logger.info("analysis_request_rejected", media_id=media_id, reason="rate_limited")
            raise RateLimitExceeded()
        if not self.rate_limiter.has_available_quota(category):
            logger.info("analysis_request_rejected", media_id=media_id, reason="quota")
            raise QuotaExceeded()

        media = self.media_store.read_media_bytes(media_id)
        api_key = self.key_manager.get_api_key(device_id)

        try:
            results = await self.client.analyze(api_key, media, category)
        except InvalidAPIKey:
            self.key_manager.report_failed_key(api_key)
            raise

        try:
            confidence = float(results.get("confidence", DEFAULT_CONFIDENCE))
        except (TypeError, ValueError):
            raise DataProcessingFailed()

        analysis = self.media_store.add_analysis_result(
            media_id,
            analysis_type=category,
            result=str(results.get("summary") or DEFAULT_RESULT_TEXT),
            confidence=confidence,
            recommendations=_string_list(results.get("recommendations")),
            development_scores=_score_map(results.get("development_scores")),
            emotion_tags=_string_list(results.get("emotion_tags")),
        )

        self.rate_limiter.record_request(category)
        self.settings_store.increment_used_quota()

        logger.info("analysis_completed", media_id=media_id, analysis_type=category, analysis_id=analysis.id)
        return analysis

    def results_for(self, media_id: str) -> List[AnalysisResult]:
        return self.media_store.analysis_results(media_id)

    def quota_status(self) -> QuotaStatus:
        return QuotaStatus(**self.rate_limiter.quota_status())


def _string_list(value) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def _score_map(value) -> dict:
    if not isinstance(value, dict):
        return {}
    return {str(key): float(score) for key, score in value.items() if isinstance(score, (int, float))}
