"""
Schemas Pydantic para a pesquisa de capturas.
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from uuid import UUID
from app.schemas.pagination import PaginationParams, PaginationResponse


class FiltersRequest(BaseModel):
    """Filtros opcionais da pesquisa (campo ausente = sem restrição)."""
    object_ids: Optional[List[Optional[UUID]]] = Field(
        None, alias="objectIDs", description="IDs exatos de captura"
    )
    direction: Optional[int] = Field(
        None, description="Direção da chamada (0 ou 1; outros valores são ignorados)"
    )
    extension_num: Optional[List[Optional[str]]] = Field(
        None, alias="extensionNum", description="Substrings da extensão"
    )
    channel_num: Optional[List[Optional[str]]] = Field(
        None, alias="channelNum", description="Substrings do número de canal"
    )
    ani_ali_digits: Optional[List[Optional[str]]] = Field(
        None, alias="aniAliDigits", description="Substrings dos dígitos ANI/ALI"
    )
    name: Optional[List[Optional[str]]] = Field(
        None, description="Substrings do nome completo do utilizador"
    )

    class Config:
        populate_by_name = True


class SearchRequest(BaseModel):
    """Pedido de pesquisa (datas no formato yyyy-MM-dd HH:mm:ss)."""
    from_date: str = Field(..., description="Data inicial")
    to_date: str = Field(..., description="Data final")
    opco: str = Field(..., description="Código da OPCO (CMP, NYSEG, RGE)")
    filters: Optional[FiltersRequest] = None
    pagination: Optional[PaginationParams] = None

    class Config:
        json_schema_extra = {
            "example": {
                "from_date": "2024-01-01 00:00:00",
                "to_date": "2024-01-31 23:59:59",
                "opco": "CMP",
                "filters": {"direction": 1, "name": ["smith"]},
                "pagination": {"pageNumber": 1, "pageSize": 20}
            }
        }


class SearchResponse(BaseModel):
    """Resposta paginada da pesquisa."""
    status: str = "200"
    message: str = "Success"
    data: List[Dict[str, Any]]
    pagination: PaginationResponse
