"""
Exportação em lote: várias gravações num ZIP com resumo status.json.
"""
import io
import logging
import zipfile
from datetime import datetime
from typing import List, Optional, Set, Tuple
from app.core.exceptions import InvalidRequestError, ProcessingError, RecordingNotFoundError
from app.schemas.recording import (
    ArchiveSummarySchema, RecordingOutcome, RecordingRequest, RecordingStatusSchema
)
from app.services.recording_locator import RecordingLocator, WAV_EXTENSION
from app.services.recording_service import RecordingService
from app.utils.storage_manager import BlobStore

logger = logging.getLogger(__name__)

STATUS_ENTRY_NAME = "status.json"


class ArchiveService:
    """Constrói o ZIP de um lote de pedidos, item a item."""

    def __init__(self, recording_service: RecordingService, blob_store: BlobStore,
                 locator: Optional[RecordingLocator] = None):
        self.recording_service = recording_service
        self.blob_store = blob_store
        self.locator = locator or RecordingLocator(blob_store)

    @staticmethod
    def entry_name(file_date: datetime, username: str, used_names: Set[str]) -> str:
        """Nome único da entrada: yyyy-MM-dd_<nome>.wav (com sufixo se repetido)."""
        base = f"{file_date.date().isoformat()}_{username}"
        name = f"{base}{WAV_EXTENSION}"
        counter = 2
        while name in used_names:
            name = f"{base} ({counter}){WAV_EXTENSION}"
            counter += 1
        used_names.add(name)
        return name

    async def _read_blob(self, key: str) -> bytes:
        """Copia o blob, por blocos, para um buffer privado."""
        buffer = io.BytesIO()
        async for chunk in self.blob_store.get_stream(key):
            buffer.write(chunk)
        return buffer.getvalue()

    async def _add_recording(
        self,
        request: RecordingRequest,
        opco: str,
        file_date: datetime,
        archive: zipfile.ZipFile,
        used_names: Set[str]
    ) -> RecordingStatusSchema:
        try:
            key = await self.locator.locate(opco, file_date, request.username)
        except RecordingNotFoundError:
            logger.warning(f"Nenhum blob para user={request.username} date={request.date}")
            return RecordingStatusSchema(
                subject_name=request.username,
                requested_date=request.date,
                status=RecordingOutcome.NOT_FOUND,
                detail="Nenhum ficheiro de áudio correspondente"
            )
        except ProcessingError as e:
            logger.error(f"Falha ao localizar user={request.username} date={request.date}: {e.detail}")
            return RecordingStatusSchema(
                subject_name=request.username,
                requested_date=request.date,
                status=RecordingOutcome.ERROR,
                detail=e.detail or e.message
            )

        name = self.entry_name(file_date, request.username, used_names)

        try:
            content = await self._read_blob(key)
            archive.writestr(name, content)
        except Exception as e:
            logger.error(f"Falha ao adicionar gravação ao ZIP: {key}: {e}")
            return RecordingStatusSchema(
                subject_name=request.username,
                requested_date=request.date,
                archive_entry_name=name,
                status=RecordingOutcome.ERROR,
                detail=str(e)
            )

        return RecordingStatusSchema(
            subject_name=request.username,
            requested_date=request.date,
            archive_entry_name=name,
            status=RecordingOutcome.SUCCESS
        )

    async def build_archive(self, requests: List[RecordingRequest]) -> Optional[bytes]:
        """
        Constrói o ZIP do lote.

        Returns:
            Bytes do ZIP, ou None se nenhum item foi adicionado

        Raises:
            InvalidRequestError: lista vazia ou algum item inválido
            ProcessingError: falha ao escrever o ZIP
        """
        if not requests:
            raise InvalidRequestError("A lista de pedidos não pode estar vazia")

        validated: List[Tuple[RecordingRequest, str, datetime]] = [
            (request, *self.recording_service.validate_request(request))
            for request in requests
        ]

        statuses: List[RecordingStatusSchema] = []
        used_names: Set[str] = set()
        buffer = io.BytesIO()

        try:
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for request, opco, file_date in validated:
                    statuses.append(
                        await self._add_recording(request, opco, file_date, archive, used_names)
                    )

                success_count = sum(1 for item in statuses if item.status == RecordingOutcome.SUCCESS)
                if success_count == 0:
                    logger.info(f"Nenhuma das {len(requests)} gravações pedidas foi encontrada")
                    return None

                summary = ArchiveSummarySchema(
                    total_requested=len(requests),
                    success_count=success_count,
                    failure_count=len(requests) - success_count,
                    statuses=statuses
                )
                archive.writestr(
                    STATUS_ENTRY_NAME,
                    summary.model_dump_json(by_alias=True, indent=2)
                )
        except (OSError, zipfile.BadZipFile) as e:
            raise ProcessingError("Falha ao criar o ZIP", detail=str(e)) from e

        logger.info(f"ZIP criado: {success_count}/{len(requests)} gravações")
        return buffer.getvalue()
