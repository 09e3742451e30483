"""
Módulo core com configurações, banco de dados, OPCOs, exceções e segurança.
"""
from app.core.config import settings
from app.core.database import Base, session_scope
from app.core.exceptions import (
    RecordingsAPIError,
    InvalidRequestError,
    RecordingNotFoundError,
    ProcessingError,
    TranscodeTimeoutError
)
from app.core.security import decode_token, get_current_user

__all__ = [
    "settings",
    "Base",
    "session_scope",
    "RecordingsAPIError",
    "InvalidRequestError",
    "RecordingNotFoundError",
    "ProcessingError",
    "TranscodeTimeoutError",
    "decode_token",
    "get_current_user"
]
