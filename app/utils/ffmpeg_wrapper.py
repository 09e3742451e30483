"""
Wrapper para FFmpeg - conversão WAV -> MP3 por pipes (stdin/stdout/stderr).
COMPATÍVEL COM WINDOWS
"""
import asyncio
import subprocess
import logging
import sys
from typing import List, Optional, Sequence
from app.core.config import settings
from app.core.exceptions import InvalidRequestError, ProcessingError, TranscodeTimeoutError

logger = logging.getLogger(__name__)


class FFmpegProcess:
    """Representa um processo FFmpeg ativo."""

    def __init__(self, process: asyncio.subprocess.Process, command: str):
        self.process = process
        self.command = command

    @property
    def is_running(self) -> bool:
        return self.process.returncode is None

    async def kill(self):
        """Força o término do processo e aguarda a sua recolha."""
        if self.is_running:
            try:
                self.process.kill()
            except ProcessLookupError:
                pass
            await self.process.wait()
            logger.warning(f"Processo FFmpeg forçado a terminar (PID: {self.process.pid})")

    async def wait(self) -> int:
        """Aguarda o término do processo."""
        return await self.process.wait()


class FFmpegTranscoder:
    """Converte áudio em memória através de um processo FFmpeg."""

    def __init__(
        self,
        ffmpeg_path: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        command: Optional[Sequence[str]] = None
    ):
        self.ffmpeg_path = ffmpeg_path or settings.ffmpeg_path
        self.timeout_seconds = timeout_seconds or settings.conversion_timeout_seconds
        self._command = list(command) if command else None

    def build_command(self) -> List[str]:
        """Comando FFmpeg: lê de pipe:0 e escreve MP3 em pipe:1."""
        if self._command:
            return list(self._command)

        return [
            self.ffmpeg_path,
            "-hide_banner",
            "-loglevel", "warning",
            "-i", "pipe:0",
            "-vn",
            "-acodec", "libmp3lame",
            "-ab", settings.mp3_bitrate,
            "-ac", str(settings.mp3_channels),
            "-ar", str(settings.mp3_sample_rate),
            "-f", "mp3",
            "pipe:1"
        ]

    @staticmethod
    async def _write_input(process: asyncio.subprocess.Process, data: bytes):
        """Escreve todo o input no stdin e fecha-o."""
        try:
            process.stdin.write(data)
            await process.stdin.drain()
            process.stdin.close()
            await process.stdin.wait_closed()
        except (BrokenPipeError, ConnectionResetError):
            # O processo fechou o stdin antes do fim; o exit code decide.
            logger.debug("FFmpeg fechou o stdin antes de receber todo o input")

    @staticmethod
    async def _drain(stream: asyncio.StreamReader) -> bytes:
        """Lê um stream até EOF."""
        return await stream.read()

    async def transcode(self, data: bytes) -> bytes:
        """
        Converte o áudio recebido.

        Args:
            data: Bytes do ficheiro de entrada (WAV)

        Returns:
            Bytes do MP3

        Raises:
            InvalidRequestError: input vazio (nenhum processo é iniciado)
            TranscodeTimeoutError: conversão excedeu timeout_seconds
            ProcessingError: exit code != 0 ou falha de I/O nos pipes
        """
        if not data:
            raise InvalidRequestError("Dados de áudio vazios")

        cmd = self.build_command()

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                creationflags=subprocess.CREATE_NO_WINDOW if sys.platform == "win32" else 0
            )
        except OSError as e:
            logger.error(f"❌ Erro ao iniciar FFmpeg: {type(e).__name__}: {e}")
            raise ProcessingError("Falha ao iniciar o processo FFmpeg", detail=str(e)) from e

        ffmpeg_proc = FFmpegProcess(process, " ".join(cmd))
        logger.debug(f"Processo FFmpeg iniciado (PID: {process.pid})")

        tasks = [
            asyncio.create_task(self._write_input(process, data)),
            asyncio.create_task(self._drain(process.stdout)),
            asyncio.create_task(self._drain(process.stderr)),
        ]

        try:
            try:
                _, output, diagnostics = await asyncio.wait_for(
                    asyncio.gather(*tasks),
                    timeout=self.timeout_seconds
                )
            except asyncio.TimeoutError:
                await ffmpeg_proc.kill()
                raise TranscodeTimeoutError(
                    f"Conversão excedeu {self.timeout_seconds:g} segundos",
                    timeout_seconds=self.timeout_seconds,
                    pid=process.pid
                )
            except OSError as e:
                raise ProcessingError("Falha de I/O na conversão", detail=str(e)) from e

            exit_code = await ffmpeg_proc.wait()
            errors = diagnostics.decode("utf-8", errors="replace").strip()

            if exit_code != 0:
                logger.error(f"Conversão FFmpeg falhou ({ffmpeg_proc.command}). Exit code: {exit_code}, Erros: {errors}")
                raise ProcessingError(
                    f"FFmpeg falhou (exit {exit_code})",
                    detail=errors
                )

            if errors:
                logger.warning(f"Avisos do FFmpeg: {errors}")

            logger.info(f"✓ Conversão concluída: {len(data)} bytes WAV -> {len(output)} bytes MP3")
            return output

        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await ffmpeg_proc.kill()


# Instância global
ffmpeg_transcoder = FFmpegTranscoder()
