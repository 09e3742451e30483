"""
Módulo schemas com os schemas Pydantic para validação de dados.
"""
from app.schemas.pagination import PaginationParams, PaginationResponse
from app.schemas.search import FiltersRequest, SearchRequest, SearchResponse
from app.schemas.recording import (
    RecordingOutcome, RecordingRequest, RecordingStatusSchema, ArchiveSummarySchema
)

__all__ = [
    "PaginationParams",
    "PaginationResponse",
    "FiltersRequest",
    "SearchRequest",
    "SearchResponse",
    "RecordingOutcome",
    "RecordingRequest",
    "RecordingStatusSchema",
    "ArchiveSummarySchema"
]
