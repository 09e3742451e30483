"""
Localização do blob de uma gravação a partir de (OPCO, data/hora, nome do sujeito).

Nome do ficheiro esperado (posições fixas):
    [0:5]   prefixo livre
    [5:15]  data   yyyy-MM-dd
    [16:24] hora   HH-mm-ss
    [24:]   nome do sujeito até à extensão .wav
"""
import re
import logging
from datetime import date, datetime
from typing import List, Optional
from app.core.config import settings
from app.core.exceptions import ProcessingError, RecordingNotFoundError
from app.utils.storage_manager import BlobStore, BlobStoreError

logger = logging.getLogger(__name__)

WAV_EXTENSION = ".wav"
FILENAME_DATE_START = 5
FILENAME_DATE_END = 15
FILENAME_TIME_START = 16
FILENAME_TIME_END = 24
FILENAME_SUBJECT_START = 24

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")


def normalize_name(value: Optional[str]) -> str:
    """Minúsculas e só caracteres alfanuméricos."""
    if value is None:
        return ""
    return _NON_ALPHANUMERIC.sub("", value.lower())


def build_day_prefix(opco: str, day: date) -> str:
    """Prefixo OPCO/ANO/MES/DIA/ sem zeros à esquerda."""
    return f"{opco.strip().upper()}/{day.year}/{day.month}/{day.day}/"


def extract_file_name(key: str) -> str:
    return key.rsplit("/", 1)[-1]


def extract_timestamp(key: str) -> datetime:
    """
    Lê a data/hora embutida no nome do ficheiro.

    Raises:
        ValueError: nome curto demais ou data/hora inválida
    """
    file_name = extract_file_name(key)
    if len(file_name) < FILENAME_TIME_END:
        raise ValueError(f"Nome de ficheiro curto demais: {file_name}")

    day = file_name[FILENAME_DATE_START:FILENAME_DATE_END]
    time = file_name[FILENAME_TIME_START:FILENAME_TIME_END].replace("-", ":")
    return datetime.strptime(f"{day} {time}", "%Y-%m-%d %H:%M:%S")


def extract_subject_name(key: str) -> str:
    """
    Lê o nome do sujeito embutido no nome do ficheiro.

    Raises:
        ValueError: nome sem extensão .wav ou curto demais
    """
    file_name = extract_file_name(key)
    end_index = file_name.find(WAV_EXTENSION)
    if end_index == -1 or len(file_name) < FILENAME_SUBJECT_START:
        raise ValueError(f"Formato de nome de ficheiro inválido: {file_name}")
    return file_name[FILENAME_SUBJECT_START:end_index]


class RecordingLocator:
    """Resolve a chave de uma gravação no object store."""

    def __init__(self, blob_store: BlobStore, strict_name_match: Optional[bool] = None):
        self.blob_store = blob_store
        self.strict_name_match = (
            settings.locator_strict_name_match if strict_name_match is None else strict_name_match
        )

    @staticmethod
    def _matches_timestamp(key: str, expected: datetime) -> bool:
        try:
            return extract_timestamp(key) == expected
        except ValueError:
            logger.debug(f"Ignorado (formato inválido): {key}")
            return False

    def select_blob(self, keys: List[str], expected: datetime, subject_name: str) -> Optional[str]:
        """
        Escolhe a melhor chave entre as listadas.

        Prioridade: data/hora exata + nome normalizado igual; sem nome igual,
        a última chave com data/hora exata (a menos que strict_name_match).
        """
        normalized_subject = normalize_name(subject_name)
        fallback: Optional[str] = None

        for key in keys:
            if not key.endswith(WAV_EXTENSION):
                continue
            if not self._matches_timestamp(key, expected):
                continue
            if normalize_name(extract_subject_name(key)) == normalized_subject:
                logger.debug(f"Gravação correspondente: {key}")
                return key
            fallback = key

        if fallback is not None and not self.strict_name_match:
            logger.warning(
                f"Nome '{subject_name}' sem correspondência exata; usando {fallback}"
            )
            return fallback

        return None

    async def locate(self, opco: str, timestamp: datetime, subject_name: str) -> str:
        """
        Obtém a chave do blob da gravação.

        Raises:
            RecordingNotFoundError: nenhuma chave qualificada
            ProcessingError: falha ao listar o object store
        """
        prefix = build_day_prefix(opco, timestamp.date())
        try:
            keys = await self.blob_store.list_blobs(prefix)
        except BlobStoreError as e:
            raise ProcessingError("Falha ao listar gravações", detail=str(e)) from e

        key = self.select_blob(keys, timestamp, subject_name)
        if key is None:
            logger.warning(f"Nenhum blob encontrado em {prefix} para '{subject_name}' às {timestamp}")
            raise RecordingNotFoundError(
                f"Gravação não encontrada com OPCO='{opco}' e nome='{subject_name}' para a data '{timestamp}'"
            )

        return key
