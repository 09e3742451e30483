"""
Storage Manager - acesso ao object store das gravações (local ou S3).

As chaves seguem o formato OPCO/ANO/MES/DIA/<ficheiro>.wav.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import AsyncIterator, List, Optional
import aiofiles
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from app.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


class BlobStoreError(Exception):
    """Falha de acesso ao object store."""
    pass


class BlobStore(ABC):
    """Capacidades do object store usadas pela aplicação."""

    @abstractmethod
    async def list_blobs(self, prefix: str) -> List[str]:
        """
        Lista as chaves sob um prefixo.

        Args:
            prefix: Prefixo (ex: "CMP/2024/1/15/")

        Returns:
            Lista de chaves completas
        """
        pass

    @abstractmethod
    async def get_bytes(self, key: str) -> bytes:
        """Lê o conteúdo completo de um blob."""
        pass

    @abstractmethod
    def get_stream(self, key: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Lê um blob em blocos."""
        pass


class LocalBlobStore(BlobStore):
    """Object store sobre um diretório local (a árvore de diretórios espelha as chaves)."""

    def __init__(self, base_path: str):
        self.base_path = Path(base_path)

    def _resolve(self, key: str) -> Path:
        path = (self.base_path / key).resolve()
        if self.base_path.resolve() not in path.parents:
            raise BlobStoreError(f"Chave fora do storage: {key}")
        return path

    async def list_blobs(self, prefix: str) -> List[str]:
        directory = self.base_path / prefix
        if not directory.is_dir():
            return []

        def _scan() -> List[str]:
            return sorted(
                path.relative_to(self.base_path).as_posix()
                for path in directory.rglob("*")
                if path.is_file()
            )

        keys = await asyncio.to_thread(_scan)
        logger.debug(f"{len(keys)} blobs sob {prefix}")
        return keys

    async def get_bytes(self, key: str) -> bytes:
        path = self._resolve(key)
        try:
            async with aiofiles.open(path, "rb") as src:
                return await src.read()
        except OSError as e:
            raise BlobStoreError(f"Erro ao ler blob {key}: {e}") from e

    async def get_stream(self, key: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        path = self._resolve(key)
        try:
            async with aiofiles.open(path, "rb") as src:
                while True:
                    chunk = await src.read(chunk_size)
                    if not chunk:
                        break
                    yield chunk
        except OSError as e:
            raise BlobStoreError(f"Erro ao ler blob {key}: {e}") from e


class S3BlobStore(BlobStore):
    """Object store sobre um bucket S3 (boto3 executado fora do event loop)."""

    def __init__(self, bucket_name: str, client=None):
        self.bucket_name = bucket_name
        self.client = client or boto3.client(
            "s3",
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )

    async def list_blobs(self, prefix: str) -> List[str]:
        def _list() -> List[str]:
            keys = []
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                keys.extend(item["Key"] for item in page.get("Contents", []))
            return keys

        try:
            return await asyncio.to_thread(_list)
        except (BotoCoreError, ClientError) as e:
            raise BlobStoreError(f"Erro ao listar {prefix}: {e}") from e

    async def get_bytes(self, key: str) -> bytes:
        def _get() -> bytes:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
            return response["Body"].read()

        try:
            return await asyncio.to_thread(_get)
        except (BotoCoreError, ClientError) as e:
            raise BlobStoreError(f"Erro ao ler blob {key}: {e}") from e

    async def get_stream(self, key: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        try:
            response = await asyncio.to_thread(
                self.client.get_object, Bucket=self.bucket_name, Key=key
            )
            body = response["Body"]
            try:
                while True:
                    chunk = await asyncio.to_thread(body.read, chunk_size)
                    if not chunk:
                        break
                    yield chunk
            finally:
                body.close()
        except (BotoCoreError, ClientError) as e:
            raise BlobStoreError(f"Erro ao ler blob {key}: {e}") from e


def create_blob_store() -> BlobStore:
    """Cria o object store configurado em STORAGE_BACKEND."""
    if settings.storage_backend == "s3":
        if not settings.s3_bucket_name:
            raise ValueError("S3_BUCKET_NAME é obrigatório com STORAGE_BACKEND=s3")
        logger.info(f"Object store S3: bucket {settings.s3_bucket_name}")
        return S3BlobStore(settings.s3_bucket_name)

    logger.info(f"Object store local: {settings.storage_base_path}")
    return LocalBlobStore(settings.storage_base_path)


_blob_store: Optional[BlobStore] = None


def get_blob_store() -> BlobStore:
    """Dependency que devolve o object store (criado no primeiro uso)."""
    global _blob_store
    if _blob_store is None:
        _blob_store = create_blob_store()
    return _blob_store
