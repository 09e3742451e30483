"""
Configurações da aplicação FastAPI.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional
import os


class Settings(BaseSettings):
    """Configurações gerais da aplicação."""

    # Bancos de dados por OPCO (URL ausente = OPCO desabilitada)
    cmp_database_url: Optional[str] = os.getenv("CMP_DATABASE_URL")
    nyseg_database_url: Optional[str] = os.getenv("NYSEG_DATABASE_URL")
    rge_database_url: Optional[str] = os.getenv("RGE_DATABASE_URL")

    # OPCOs conhecidas
    allowed_opcos: List[str] = ["CMP", "NYSEG", "RGE"]

    # Pesquisa
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))

    # Storage de gravações (local ou s3)
    storage_backend: str = os.getenv("STORAGE_BACKEND", "local")
    storage_base_path: str = os.getenv("STORAGE_BASE_PATH", "/var/vpi/recordings")
    s3_bucket_name: Optional[str] = os.getenv("S3_BUCKET_NAME")
    aws_access_key_id: Optional[str] = os.getenv("AWS_ACCESS_KEY_ID")
    aws_secret_access_key: Optional[str] = os.getenv("AWS_SECRET_ACCESS_KEY")
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")

    # Localização de gravações
    locator_strict_name_match: bool = os.getenv("LOCATOR_STRICT_NAME_MATCH", "False").lower() == "true"

    # FFmpeg
    ffmpeg_path: str = os.getenv("FFMPEG_PATH", "ffmpeg")
    conversion_timeout_seconds: float = float(os.getenv("CONVERSION_TIMEOUT_SECONDS", "60"))
    mp3_bitrate: str = os.getenv("MP3_BITRATE", "128k")
    mp3_sample_rate: int = int(os.getenv("MP3_SAMPLE_RATE", "44100"))
    mp3_channels: int = int(os.getenv("MP3_CHANNELS", "2"))

    # JWT (validação do token emitido pelo identity provider)
    auth_enabled: bool = os.getenv("AUTH_ENABLED", "True").lower() == "true"
    jwt_secret_key: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    jwt_audience: Optional[str] = os.getenv("JWT_AUDIENCE")
    jwt_issuer: Optional[str] = os.getenv("JWT_ISSUER")

    # API
    api_title: str = os.getenv("API_TITLE", "VPI Recordings API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    api_description: str = os.getenv(
        "API_DESCRIPTION",
        "API FastAPI para pesquisa e download de gravações VPI por OPCO"
    )
    debug: bool = os.getenv("DEBUG", "False").lower() == "true"

    # CORS
    allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000"
    ]

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def database_url_for(self, opco: str) -> Optional[str]:
        """Retorna a URL do banco de dados de uma OPCO (ou None se desabilitada)."""
        return getattr(self, f"{opco.lower()}_database_url", None)

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
