"""
Configuração do pytest e fixtures partilhadas.
"""
import os
import sys
import uuid
from datetime import datetime
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Variáveis de ambiente de teste antes de importar a aplicação
os.environ["AUTH_ENABLED"] = "False"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["LOCATOR_STRICT_NAME_MATCH"] = "False"
os.environ["DEFAULT_PAGE_SIZE"] = "20"
for _key in ("CMP_DATABASE_URL", "NYSEG_DATABASE_URL", "RGE_DATABASE_URL"):
    os.environ.pop(_key, None)

from app.core.database import Base  # noqa: E402
from app.core.tenants import TenantBinding, TenantRegistry, get_tenant_registry  # noqa: E402
from app.models.capture import TENANT_MODELS  # noqa: E402
from app.routers.recordings import get_transcoder  # noqa: E402
from app.utils.ffmpeg_wrapper import FFmpegTranscoder  # noqa: E402
from app.utils.storage_manager import BlobStoreError, LocalBlobStore, get_blob_store  # noqa: E402
from main import app as fastapi_app  # noqa: E402

ENABLED_OPCOS = ("CMP", "NYSEG")

# Script que devolve o stdin tal como recebido (substitui o FFmpeg)
ECHO_SCRIPT = "import sys; sys.stdout.buffer.write(sys.stdin.buffer.read())"

WAV_BYTES = b"RIFF\x24\x00\x00\x00WAVEfmt " + b"\x00" * 64


def recording_file_name(timestamp: datetime, subject: str, prefix: str = "call_") -> str:
    """Nome de ficheiro no formato do storage: <5 chars><data>_<hora><nome>.wav"""
    return f"{prefix}{timestamp:%Y-%m-%d}_{timestamp:%H-%M-%S}{subject}.wav"


def recording_key(opco: str, timestamp: datetime, subject: str) -> str:
    """Chave completa OPCO/ANO/MES/DIA/<ficheiro>."""
    return (
        f"{opco}/{timestamp.year}/{timestamp.month}/{timestamp.day}/"
        f"{recording_file_name(timestamp, subject)}"
    )


class TenantSeeder:
    """Insere utilizadores e capturas nas bases de teste das OPCOs."""

    def __init__(self, registry: TenantRegistry):
        self.registry = registry

    def user(self, opco: str, fullname: Optional[str]):
        binding = self.registry.resolve(opco)
        user = binding.user_model(user_id=uuid.uuid4(), fullname=fullname)
        self._save(binding, user)
        return user.user_id

    def capture(self, opco: str, date_added: datetime, user_id=None, **fields):
        binding = self.registry.resolve(opco)
        record = binding.capture_model(
            object_id=fields.pop("object_id", uuid.uuid4()),
            date_added=date_added,
            start_time=fields.pop("start_time", date_added),
            user_id=user_id,
            **fields
        )
        self._save(binding, record)
        return record.object_id

    @staticmethod
    def _save(binding: TenantBinding, instance):
        db = binding.session_factory(expire_on_commit=False)
        try:
            db.add(instance)
            db.commit()
        finally:
            db.close()


@pytest.fixture(scope="function")
def registry() -> TenantRegistry:
    """Registo com CMP e NYSEG em SQLite em memória e RGE desabilitada."""
    bindings: Dict[str, Optional[TenantBinding]] = {"RGE": None}
    engines = []

    for code in ENABLED_OPCOS:
        engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=engine)
        engines.append(engine)

        capture_model, user_model = TENANT_MODELS[code]
        bindings[code] = TenantBinding(
            code=code,
            session_factory=sessionmaker(autocommit=False, autoflush=False, bind=engine),
            capture_model=capture_model,
            user_model=user_model
        )

    yield TenantRegistry(["CMP", "NYSEG", "RGE"], bindings)

    for engine in engines:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def seeder(registry) -> TenantSeeder:
    return TenantSeeder(registry)


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    """Object store local num diretório temporário."""
    return LocalBlobStore(str(tmp_path / "recordings"))


@pytest.fixture
def make_key():
    return recording_key


@pytest.fixture
def wav_bytes() -> bytes:
    return WAV_BYTES


@pytest.fixture
def put_recording(blob_store):
    """Escreve um WAV no object store local e devolve a chave."""

    def _put(opco: str, timestamp: datetime, subject: str, content: bytes = WAV_BYTES) -> str:
        key = recording_key(opco, timestamp, subject)
        path = blob_store.base_path / key
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return key

    return _put


@pytest.fixture
def echo_transcoder() -> FFmpegTranscoder:
    """Conversor que corre um script Python no lugar do FFmpeg."""
    return FFmpegTranscoder(command=[sys.executable, "-c", ECHO_SCRIPT], timeout_seconds=10)


@pytest.fixture(scope="function")
def client(registry, blob_store, echo_transcoder) -> TestClient:
    """Cliente de teste com OPCOs, object store e conversor de teste."""
    fastapi_app.dependency_overrides[get_tenant_registry] = lambda: registry
    fastapi_app.dependency_overrides[get_blob_store] = lambda: blob_store
    fastapi_app.dependency_overrides[get_transcoder] = lambda: echo_transcoder

    with TestClient(fastapi_app) as test_client:
        yield test_client

    fastapi_app.dependency_overrides.clear()


class FailingBlobStore(LocalBlobStore):
    """Object store local que falha para certos prefixos ou chaves."""

    def __init__(self, base_path: str, failing_prefixes=(), failing_keys=()):
        super().__init__(base_path)
        self.failing_prefixes = tuple(failing_prefixes)
        self.failing_keys = set(failing_keys)

    async def list_blobs(self, prefix: str):
        if prefix.startswith(self.failing_prefixes):
            raise BlobStoreError(f"Listagem indisponível: {prefix}")
        return await super().list_blobs(prefix)

    async def get_stream(self, key: str, chunk_size: int = 8192):
        if key in self.failing_keys:
            raise BlobStoreError(f"Leitura interrompida: {key}")
        async for chunk in super().get_stream(key, chunk_size):
            yield chunk


@pytest.fixture
def failing_store(blob_store):
    """Cria um FailingBlobStore sobre o mesmo diretório de blob_store."""

    def _create(failing_prefixes=(), failing_keys=()) -> FailingBlobStore:
        return FailingBlobStore(str(blob_store.base_path), failing_prefixes, failing_keys)

    return _create
