"""
Construção dos predicados de pesquisa de capturas.

Cada função devolve uma cláusula SQLAlchemy; filtros ausentes ou vazios
devolvem true() (sem restrição), nunca "nada corresponde".
"""
from datetime import datetime
from typing import Iterable, List, Optional, Type
from uuid import UUID
from sqlalchemy import String, and_, cast, func, or_, true
from sqlalchemy.sql.elements import ColumnElement
from app.schemas.search import FiltersRequest

VALID_DIRECTIONS = (0, 1)


def clean_string_list(values: Optional[Iterable[Optional[str]]]) -> List[str]:
    """Remove nulos e vazios, aplica trim e minúsculas."""
    if values is None:
        return []

    cleaned = []
    for value in values:
        if value is None:
            continue
        trimmed = value.strip()
        if trimmed:
            cleaned.append(trimmed.lower())
    return cleaned


def clean_uuid_list(values: Optional[Iterable[Optional[UUID]]]) -> List[UUID]:
    """Remove nulos e duplicados, mantendo a ordem."""
    if values is None:
        return []
    return list(dict.fromkeys(value for value in values if value is not None))


def date_between(column, date_from: Optional[datetime], date_to: Optional[datetime]) -> ColumnElement:
    """Intervalo inclusivo; com só um limite, filtro de um lado."""
    if date_from is None and date_to is None:
        return true()
    if date_from is not None and date_to is not None:
        return column.between(date_from, date_to)
    if date_from is not None:
        return column >= date_from
    return column <= date_to


def ids_exact_any(column, ids: Optional[Iterable[Optional[UUID]]]) -> ColumnElement:
    """Pertença a uma lista de IDs."""
    cleaned = clean_uuid_list(ids)
    if not cleaned:
        return true()
    return column.in_(cleaned)


def direction_exact(column, direction: Optional[int]) -> ColumnElement:
    """Igualdade da direção; valores fora de 0/1 são ignorados."""
    if direction is None or direction not in VALID_DIRECTIONS:
        return true()
    return column == str(direction)


def _like_any(expression, values: List[str]) -> ColumnElement:
    return or_(*[expression.like(f"%{value}%") for value in values])


def contains_any(column, values: Optional[Iterable[Optional[str]]]) -> ColumnElement:
    """Substring (case-insensitive) numa coluna de texto, OR entre valores."""
    cleaned = clean_string_list(values)
    if not cleaned:
        return true()
    return _like_any(func.lower(column), cleaned)


def number_contains_any(column, values: Optional[Iterable[Optional[str]]]) -> ColumnElement:
    """Substring numa coluna inteira convertida para texto."""
    cleaned = clean_string_list(values)
    if not cleaned:
        return true()
    return _like_any(cast(column, String), cleaned)


def fullname_contains_any(capture_model: Type, user_model: Type,
                          values: Optional[Iterable[Optional[str]]]) -> ColumnElement:
    """Substring no nome completo do utilizador associado à captura."""
    cleaned = clean_string_list(values)
    if not cleaned:
        return true()
    return capture_model.user.has(_like_any(func.lower(user_model.fullname), cleaned))


def build_capture_predicate(
    capture_model: Type,
    user_model: Type,
    date_from: Optional[datetime],
    date_to: Optional[datetime],
    filters: Optional[FiltersRequest] = None,
    user_ids: Optional[Iterable[UUID]] = None
) -> ColumnElement:
    """
    Compõe o predicado completo da pesquisa (AND de todas as cláusulas).

    Args:
        capture_model: Classe de captura da OPCO
        user_model: Classe de utilizador da OPCO
        date_from: Limite inferior de date_added (inclusivo)
        date_to: Limite superior de date_added (inclusivo)
        filters: Filtros opcionais
        user_ids: IDs já resolvidos a partir de filters.name; quando presentes
            substituem o join pelo nome
    """
    clauses = [date_between(capture_model.date_added, date_from, date_to)]

    if user_ids is not None:
        clauses.append(ids_exact_any(capture_model.user_id, user_ids))

    if filters is None:
        return and_(*clauses)

    clauses.extend([
        ids_exact_any(capture_model.object_id, filters.object_ids),
        direction_exact(capture_model.direction, filters.direction),
        contains_any(capture_model.extension_num, filters.extension_num),
        number_contains_any(capture_model.channel_num, filters.channel_num),
        contains_any(capture_model.ani_ali_digits, filters.ani_ali_digits),
    ])

    if user_ids is None:
        clauses.append(fullname_contains_any(capture_model, user_model, filters.name))

    return and_(*clauses)
