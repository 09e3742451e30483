"""
Módulo utils com utilitários para FFmpeg, object store e datas.
"""
from app.utils.ffmpeg_wrapper import FFmpegTranscoder
from app.utils.storage_manager import BlobStore, LocalBlobStore, S3BlobStore

__all__ = [
    "FFmpegTranscoder",
    "BlobStore",
    "LocalBlobStore",
    "S3BlobStore"
]
