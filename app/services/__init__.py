"""
Módulo services com a lógica de negócio.
"""
from app.services.user_service import UserService
from app.services.capture_service import CaptureService, SearchPage
from app.services.metadata_projector import MetadataProjector
from app.services.recording_locator import RecordingLocator
from app.services.recording_service import RecordingService
from app.services.archive_service import ArchiveService

__all__ = [
    "UserService",
    "CaptureService",
    "SearchPage",
    "MetadataProjector",
    "RecordingLocator",
    "RecordingService",
    "ArchiveService"
]
