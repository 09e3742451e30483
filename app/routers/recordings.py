"""
Rotas de pesquisa, metadados e download de gravações VPI.
"""
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from typing import List
from uuid import UUID
from app.core.security import get_current_user
from app.core.tenants import TenantRegistry, get_tenant_registry
from app.schemas.recording import RecordingRequest
from app.schemas.search import SearchRequest, SearchResponse
from app.services.archive_service import ArchiveService
from app.services.capture_service import CaptureService
from app.services.recording_service import RecordingService
from app.utils.ffmpeg_wrapper import FFmpegTranscoder, ffmpeg_transcoder
from app.utils.storage_manager import BlobStore, get_blob_store

router = APIRouter(prefix="/api/v1", tags=["recordings"])


def get_transcoder() -> FFmpegTranscoder:
    """Dependency do conversor FFmpeg."""
    return ffmpeg_transcoder


def get_recording_service(
    registry: TenantRegistry = Depends(get_tenant_registry),
    blob_store: BlobStore = Depends(get_blob_store),
    transcoder: FFmpegTranscoder = Depends(get_transcoder)
) -> RecordingService:
    return RecordingService(registry, blob_store, transcoder)


@router.post("/search", response_model=SearchResponse, response_model_by_alias=True)
async def search_recordings(
    request: SearchRequest,
    current_user: dict = Depends(get_current_user),
    registry: TenantRegistry = Depends(get_tenant_registry)
):
    """Pesquisa paginada de capturas de uma OPCO."""
    return CaptureService(registry).search_request(request)


@router.get("/metadata")
async def get_metadata(
    id: UUID = Query(..., description="ID da captura"),
    opco: str = Query(..., description="Código da OPCO"),
    current_user: dict = Depends(get_current_user),
    registry: TenantRegistry = Depends(get_tenant_registry)
):
    """Obtém todos os metadados de uma captura."""
    return CaptureService(registry).get_metadata(id, opco)


@router.post("/recording")
async def get_recording(
    request: RecordingRequest,
    current_user: dict = Depends(get_current_user),
    service: RecordingService = Depends(get_recording_service)
):
    """Devolve uma gravação convertida para MP3."""
    filename, mp3_data = await service.fetch_recording(request)

    return Response(
        content=mp3_data,
        media_type="audio/mpeg",
        headers={"Content-Disposition": f'inline; filename="{filename}"'}
    )


@router.post("/download")
async def download_recordings(
    requests: List[RecordingRequest],
    current_user: dict = Depends(get_current_user),
    service: RecordingService = Depends(get_recording_service),
    blob_store: BlobStore = Depends(get_blob_store)
):
    """Descarrega várias gravações num ZIP (204 se nenhuma for encontrada)."""
    archive = await ArchiveService(service, blob_store).build_archive(requests)

    if archive is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": 'attachment; filename="recordings.zip"'}
    )
