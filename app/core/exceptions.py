"""
Exceções de domínio da API de gravações e respetivos handlers FastAPI.
"""
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class RecordingsAPIError(Exception):
    """Erro base da aplicação."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    @property
    def client_message(self) -> str:
        """Mensagem devolvida ao cliente."""
        return self.message


class InvalidRequestError(RecordingsAPIError):
    """Pedido inválido: campos em falta, datas mal formatadas, OPCO desconhecida ou desabilitada."""
    status_code = status.HTTP_400_BAD_REQUEST


class RecordingNotFoundError(RecordingsAPIError):
    """Registo ou ficheiro de gravação não encontrado."""
    status_code = status.HTTP_404_NOT_FOUND


class ProcessingError(RecordingsAPIError):
    """Falha de processamento (FFmpeg, cópia de blob, criação de ZIP)."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    @property
    def client_message(self) -> str:
        return "Erro ao processar a gravação"


class TranscodeTimeoutError(ProcessingError):
    """Conversão excedeu o tempo máximo permitido."""
    status_code = status.HTTP_504_GATEWAY_TIMEOUT

    def __init__(self, message: str, timeout_seconds: float, pid: Optional[int] = None):
        super().__init__(message)
        self.timeout_seconds = timeout_seconds
        self.pid = pid

    @property
    def client_message(self) -> str:
        return f"Conversão excedeu o tempo limite de {self.timeout_seconds:g} segundos"


async def recordings_api_error_handler(request: Request, exc: RecordingsAPIError) -> JSONResponse:
    """Converte exceções de domínio em respostas JSON."""
    if isinstance(exc, ProcessingError):
        logger.error(f"{request.method} {request.url.path}: {exc.message} {exc.detail or ''}".rstrip())
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": str(exc.status_code),
            "message": exc.client_message
        }
    )


def register_exception_handlers(app: FastAPI):
    """Regista os handlers de exceções de domínio na aplicação."""
    app.add_exception_handler(RecordingsAPIError, recordings_api_error_handler)
