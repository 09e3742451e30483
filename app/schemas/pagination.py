"""
Schemas e utilitários para paginação consistente.
"""
from pydantic import BaseModel, Field
from typing import Optional
from app.core.config import settings

MIN_PAGE_NUMBER = 1


class PaginationParams(BaseModel):
    """Parâmetros de paginação enviados pelo cliente (página começa em 1)."""
    page_number: Optional[int] = Field(
        default=MIN_PAGE_NUMBER,
        alias="pageNumber",
        description="Número da página (valores < 1 são tratados como 1)"
    )
    page_size: Optional[int] = Field(
        default=None,
        alias="pageSize",
        description="Registos por página (valores <= 0 usam o tamanho por omissão)"
    )

    class Config:
        populate_by_name = True

    @property
    def safe_page_number(self) -> int:
        """Página normalizada (>= 1)."""
        return max(self.page_number or MIN_PAGE_NUMBER, MIN_PAGE_NUMBER)

    @property
    def safe_page_size(self) -> int:
        """Tamanho de página normalizado (> 0)."""
        if self.page_size is None or self.page_size <= 0:
            return settings.default_page_size
        return self.page_size

    @property
    def offset(self) -> int:
        """Número de registos a pular."""
        return (self.safe_page_number - 1) * self.safe_page_size


class PaginationResponse(BaseModel):
    """Bloco de paginação da resposta de pesquisa."""
    page_number: int = Field(..., alias="pageNumber", description="Página atual")
    page_size: int = Field(..., alias="pageSize", description="Registos por página")
    total_records: int = Field(..., alias="totalRecords", description="Total de registos (sem paginação)")
    total_pages: int = Field(..., alias="totalPages", description="Total de páginas")

    class Config:
        populate_by_name = True

    @classmethod
    def create(cls, page_number: int, page_size: int, total_records: int):
        """
        Factory method para criar o bloco de paginação.

        Args:
            page_number: Página atual (1-based)
            page_size: Registos por página
            total_records: Total de registos (sem paginação)
        """
        total_pages = (total_records + page_size - 1) // page_size if page_size > 0 else 0

        return cls(
            page_number=page_number,
            page_size=page_size,
            total_records=total_records,
            total_pages=total_pages
        )
