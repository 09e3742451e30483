"""
Serviço de pesquisa de capturas: encaminha cada pedido para a fonte de dados da OPCO.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID
from app.core.database import session_scope
from app.core.exceptions import InvalidRequestError, RecordingNotFoundError
from app.core.tenants import TenantRegistry
from app.schemas.pagination import PaginationParams, PaginationResponse
from app.schemas.search import FiltersRequest, SearchRequest, SearchResponse
from app.services.capture_filters import build_capture_predicate, clean_string_list
from app.services.metadata_projector import MetadataProjector
from app.services.user_service import UserService
from app.utils.date_format import parse_datetime
import logging

logger = logging.getLogger(__name__)


@dataclass
class SearchPage:
    """Página de resultados já projetados."""
    items: List[Dict[str, Any]]
    page_number: int
    page_size: int
    total: int = 0

    def to_response(self) -> SearchResponse:
        return SearchResponse(
            data=self.items,
            pagination=PaginationResponse.create(self.page_number, self.page_size, self.total)
        )


class CaptureService:
    """Pesquisa e leitura de metadados de capturas por OPCO."""

    def __init__(self, registry: TenantRegistry):
        self.registry = registry

    def search_request(self, request: SearchRequest) -> SearchResponse:
        """
        Valida o pedido de pesquisa e executa-o.

        Raises:
            InvalidRequestError: datas mal formatadas, intervalo invertido ou OPCO inválida
        """
        logger.debug(f"Pesquisa recebida: opco={request.opco} de {request.from_date} a {request.to_date}")

        self.registry.resolve(request.opco)
        date_from = parse_datetime(request.from_date, "Data inicial")
        date_to = parse_datetime(request.to_date, "Data final")

        if date_to < date_from:
            raise InvalidRequestError("A data final deve ser posterior à data inicial")

        page = self.search(
            request.opco,
            date_from,
            date_to,
            request.filters,
            request.pagination or PaginationParams()
        )
        return page.to_response()

    def search(
        self,
        opco: str,
        date_from: Optional[datetime],
        date_to: Optional[datetime],
        filters: Optional[FiltersRequest],
        pagination: PaginationParams
    ) -> SearchPage:
        """
        Pesquisa paginada nas capturas de uma OPCO, ordenada por date_added descendente.

        Um filtro de nome sem correspondências devolve página vazia (nunca
        volta a pesquisar todos os utilizadores).
        """
        binding = self.registry.resolve(opco)
        capture_model = binding.capture_model
        user_model = binding.user_model

        page_number = pagination.safe_page_number
        page_size = pagination.safe_page_size

        with session_scope(binding.session_factory) as db:
            names = clean_string_list(filters.name if filters else None)
            user_ids = None

            if names:
                user_ids = UserService.find_user_ids_by_name(db, user_model, names)
                if not user_ids:
                    logger.info(f"[{binding.code}] Nenhum utilizador corresponde a {names}")
                    return SearchPage(items=[], page_number=page_number, page_size=page_size)

            predicate = build_capture_predicate(
                capture_model, user_model, date_from, date_to, filters, user_ids
            )

            query = db.query(capture_model).filter(predicate)
            total = query.count()

            records = query.order_by(
                capture_model.date_added.desc()
            ).offset(pagination.offset).limit(page_size).all()

            user_names = UserService.get_user_names(
                db, user_model, {record.user_id for record in records if record.user_id}
            )

            items = [
                MetadataProjector.to_compact(record, binding.code, user_names)
                for record in records
            ]

        logger.info(f"[{binding.code}] Pesquisa: {len(items)} de {total} registos (página {page_number})")
        return SearchPage(
            items=items,
            page_number=page_number,
            page_size=page_size,
            total=total
        )

    def get_metadata(self, object_id: UUID, opco: str) -> Dict[str, Any]:
        """
        Obtém os metadados completos de uma captura.

        Raises:
            InvalidRequestError: OPCO inválida ou desabilitada
            RecordingNotFoundError: captura inexistente na OPCO
        """
        binding = self.registry.resolve(opco)
        capture_model = binding.capture_model

        with session_scope(binding.session_factory) as db:
            record = db.query(capture_model).filter(capture_model.object_id == object_id).first()

            if record is None:
                raise RecordingNotFoundError(
                    f"Gravação não encontrada com ID={object_id} e OPCO={binding.code}"
                )

            return MetadataProjector.to_full(record)
