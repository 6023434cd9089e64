import logging
from pathlib import Path

import aiofiles
from fastapi import UploadFile

from .config import UPLOAD_DIR, MAX_UPLOAD_SIZE
from .utils import generate_audio_filename, cleanup_temp_files

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

# Extensões aceitas e o media type usado ao servir o arquivo
AUDIO_MEDIA_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    ".aac": "audio/aac",
    ".flac": "audio/flac",
}

class InvalidUploadError(Exception):
    pass

class MusicService:
    def __init__(self, upload_dir: str = UPLOAD_DIR, max_size: int = MAX_UPLOAD_SIZE):
        self.upload_dir = Path(upload_dir)
        self.max_size = max_size
        self.upload_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"✅ MusicService inicializado")
        logger.info(f"   Upload Dir: {self.upload_dir}")

    @staticmethod
    def url_for(filename: str) -> str:
        return f"/uploads/{filename}"

    async def save_music(self, upload_file: UploadFile) -> str:
        """
        Grava um arquivo de áudio enviado pelo usuário e devolve a URL pública.
        Rejeita tipos que não sejam audio/*, extensões fora de AUDIO_MEDIA_TYPES
        e arquivos acima do limite.
        """
        content_type = upload_file.content_type or ""
        if not content_type.startswith("audio/"):
            raise InvalidUploadError("Apenas arquivos de áudio são permitidos")

        extension = Path(upload_file.filename or "").suffix.lower()
        if extension not in AUDIO_MEDIA_TYPES:
            raise InvalidUploadError(
                f"Extensão não suportada: {extension or '(nenhuma)'}. Use {', '.join(AUDIO_MEDIA_TYPES)}"
            )

        filename = generate_audio_filename(upload_file.filename)
        destination = self.upload_dir / filename

        written = 0
        try:
            async with aiofiles.open(destination, "wb") as out_file:
                while True:
                    chunk = await upload_file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_size:
                        raise InvalidUploadError(
                            f"Arquivo excede o limite de {self.max_size // (1024 * 1024)}MB"
                        )
                    await out_file.write(chunk)
        except InvalidUploadError:
            cleanup_temp_files(str(destination))
            raise
        finally:
            await upload_file.close()

        if written == 0:
            cleanup_temp_files(str(destination))
            raise InvalidUploadError("Arquivo vazio")

        logger.info(f"🎵 Música salva: {destination} ({written} bytes)")
        return self.url_for(filename)

    @staticmethod
    def media_type_for(path: Path) -> str:
        return AUDIO_MEDIA_TYPES.get(path.suffix.lower(), "application/octet-stream")

    def resolve(self, filename: str) -> Path:
        """Caminho local de um upload, sem permitir sair do diretório"""
        return self.upload_dir / Path(filename).name
