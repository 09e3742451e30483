"""
Conversão entre strings `yyyy-MM-dd HH:mm:ss` e datetime.
"""
from datetime import datetime
from typing import Optional
from app.core.exceptions import InvalidRequestError

DATE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_TIME_PATTERN = "yyyy-MM-dd HH:mm:ss"


def parse_datetime(value: Optional[str], field_name: str = "Data") -> datetime:
    """
    Converte uma string no padrão fixo para datetime.

    Raises:
        InvalidRequestError: valor vazio ou fora do padrão
    """
    if value is None or not value.strip():
        raise InvalidRequestError(f"{field_name} é obrigatório")

    try:
        return datetime.strptime(value.strip(), DATE_TIME_FORMAT)
    except ValueError:
        raise InvalidRequestError(
            f"Formato de data inválido '{value}'. Formato esperado: {DATE_TIME_PATTERN}"
        )


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Formata um datetime no padrão canónico (None se ausente)."""
    if value is None:
        return None
    return value.strftime(DATE_TIME_FORMAT)
