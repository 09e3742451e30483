"""
Serviço de gravações: localização, download e conversão para MP3.
"""
from datetime import datetime
from typing import Tuple
from app.core.exceptions import InvalidRequestError, ProcessingError
from app.core.tenants import TenantRegistry
from app.schemas.recording import RecordingRequest
from app.services.recording_locator import RecordingLocator, WAV_EXTENSION, extract_file_name
from app.utils.date_format import parse_datetime
from app.utils.ffmpeg_wrapper import FFmpegTranscoder
from app.utils.storage_manager import BlobStore, BlobStoreError
import logging

logger = logging.getLogger(__name__)

MP3_EXTENSION = ".mp3"


class RecordingService:
    """Obtém gravações individuais convertidas para MP3."""

    def __init__(self, registry: TenantRegistry, blob_store: BlobStore, transcoder: FFmpegTranscoder):
        self.registry = registry
        self.blob_store = blob_store
        self.transcoder = transcoder
        self.locator = RecordingLocator(blob_store)

    def validate_request(self, request: RecordingRequest) -> Tuple[str, datetime]:
        """
        Valida OPCO, data e nome de um pedido.

        Returns:
            (código OPCO normalizado, data/hora da gravação)
        """
        binding = self.registry.resolve(request.opco)
        file_date = parse_datetime(request.date, "Data")

        if not request.username or not request.username.strip():
            raise InvalidRequestError("Nome é obrigatório")

        return binding.code, file_date

    @staticmethod
    def mp3_filename(key: str) -> str:
        """Nome do ficheiro MP3 a partir da chave do WAV."""
        file_name = extract_file_name(key)
        if file_name.endswith(WAV_EXTENSION):
            return file_name[:-len(WAV_EXTENSION)] + MP3_EXTENSION
        return file_name + MP3_EXTENSION

    async def download_blob(self, key: str) -> bytes:
        try:
            return await self.blob_store.get_bytes(key)
        except BlobStoreError as e:
            raise ProcessingError("Falha ao descarregar a gravação", detail=str(e)) from e

    async def fetch_recording(self, request: RecordingRequest) -> Tuple[str, bytes]:
        """
        Localiza, descarrega e converte uma gravação.

        Returns:
            (nome do ficheiro MP3, bytes MP3)
        """
        logger.info(f"A obter gravação de '{request.username}' ({request.opco} {request.date})")

        opco, file_date = self.validate_request(request)
        key = await self.locator.locate(opco, file_date, request.username)

        wav_data = await self.download_blob(key)
        mp3_data = await self.transcoder.transcode(wav_data)

        return self.mp3_filename(key), mp3_data
