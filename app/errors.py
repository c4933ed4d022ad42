# app/errors.py

from typing import List, Optional


class AppError(Exception):
    """Erro de domínio com mensagem para o usuário e status HTTP."""

    status_code = 400
    code = "app_error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message()
        super().__init__(self.message)

    def default_message(self) -> str:
        return "Erro inesperado."


# ---------------- stores ----------------

class RecordNotFound(AppError):
    status_code = 404
    code = "not_found"

    def default_message(self) -> str:
        return "Registro não encontrado."


class ValidationFailed(AppError):
    status_code = 422
    code = "validation_failed"

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class MediaStorageError(AppError):
    status_code = 500
    code = "media_storage_error"

    def default_message(self) -> str:
        return "Falha ao gravar o arquivo de mídia."


# ---------------- análise em nuvem ----------------

class AnalysisError(AppError):
    code = "analysis_error"


class AnalysisOptedOut(AnalysisError):
    status_code = 403
    code = "analysis_opted_out"

    def default_message(self) -> str:
        return "A análise em nuvem não está habilitada."


class RateLimitExceeded(AnalysisError):
    status_code = 429
    code = "rate_limit_exceeded"

    def default_message(self) -> str:
        return "Muitas solicitações, tente novamente mais tarde."


class QuotaExceeded(AnalysisError):
    status_code = 429
    code = "quota_exceeded"

    def default_message(self) -> str:
        return "Cota de análises esgotada, tente novamente amanhã."


class InvalidAPIKey(AnalysisError):
    status_code = 502
    code = "invalid_api_key"

    def default_message(self) -> str:
        return "Chave de API inválida."


class AnalysisAPIError(AnalysisError):
    status_code = 502
    code = "api_error"

    def __init__(self, api_code: str, api_message: str):
        self.api_code = api_code
        self.api_message = api_message
        super().__init__(f"Erro da API ({api_code}): {api_message}")


class AnalysisNetworkError(AnalysisError):
    status_code = 503
    code = "network_error"

    def default_message(self) -> str:
        return "Erro de conexão com o serviço de análise."


class InvalidAnalysisResponse(AnalysisError):
    status_code = 502
    code = "invalid_response"

    def default_message(self) -> str:
        return "Resposta inválida do serviço de análise."


class DataProcessingFailed(AnalysisError):
    status_code = 500
    code = "data_processing_failed"

    def default_message(self) -> str:
        return "Falha ao processar os dados."


class MediaNotFound(AnalysisError):
    status_code = 404
    code = "media_not_found"

    def default_message(self) -> str:
        return "Arquivo de mídia não encontrado."


# ---------------- social ----------------

class SocialError(AppError):
    code = "social_error"


class NotConnected(SocialError):
    status_code = 409
    code = "not_connected"

    def default_message(self) -> str:
        return "Conta social não conectada."


class PublishFailed(SocialError):
    status_code = 502
    code = "publish_failed"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Falha ao publicar: {reason}")
