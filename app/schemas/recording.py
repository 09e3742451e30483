"""
Schemas Pydantic para gravações (pedido individual, lote e resumo do ZIP).
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from uuid import UUID
import enum


class RecordingOutcome(str, enum.Enum):
    """Resultado de um item do lote."""
    SUCCESS = "SUCCESS"
    NOT_FOUND = "NOT_FOUND"
    ERROR = "ERROR"


class RecordingRequest(BaseModel):
    """Chave lógica de uma gravação: OPCO, data/hora e nome do sujeito."""
    opco: str = Field(..., description="Código da OPCO")
    date: str = Field(..., description="Data/hora da gravação (yyyy-MM-dd HH:mm:ss)")
    username: str = Field(..., description="Nome do sujeito gravado, como aparece no ficheiro")
    object_id: Optional[UUID] = Field(None, alias="objectId", description="ID da captura (informativo)")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "opco": "CMP",
                "date": "2024-01-15 10:30:00",
                "username": "John Smith"
            }
        }


class RecordingStatusSchema(BaseModel):
    """Estado de um item do lote, registado em status.json."""
    subject_name: str = Field(..., alias="subjectName")
    requested_date: str = Field(..., alias="requestedDate")
    archive_entry_name: Optional[str] = Field(None, alias="archiveEntryName")
    status: RecordingOutcome
    detail: Optional[str] = None

    class Config:
        populate_by_name = True


class ArchiveSummarySchema(BaseModel):
    """Resumo do lote (última entrada do ZIP)."""
    total_requested: int = Field(..., alias="totalRequested")
    success_count: int = Field(..., alias="successCount")
    failure_count: int = Field(..., alias="failureCount")
    statuses: List[RecordingStatusSchema]

    class Config:
        populate_by_name = True
