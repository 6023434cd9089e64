import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import io
import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.music_service import MusicService, InvalidUploadError, AUDIO_MEDIA_TYPES

def make_upload(content: bytes, filename: str = "song.mp3", content_type: str = "audio/mpeg") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type})
    )

# ========== Testes para MusicService ==========

@pytest.mark.asyncio
async def test_save_music_success(music_service):
    url = await music_service.save_music(make_upload(b"ID3 fake audio"))

    assert url.startswith("/uploads/audio-")
    assert url.endswith(".mp3")

    saved = music_service.resolve(url.rsplit("/", 1)[-1])
    assert saved.read_bytes() == b"ID3 fake audio"

@pytest.mark.asyncio
async def test_save_music_rejects_non_audio(music_service):
    with pytest.raises(InvalidUploadError):
        await music_service.save_music(make_upload(b"texto", "notes.txt", "text/plain"))

    assert list(music_service.upload_dir.iterdir()) == []

@pytest.mark.asyncio
async def test_save_music_rejects_oversized(music_service):
    """Arquivo acima do limite é rejeitado e removido do disco"""
    with pytest.raises(InvalidUploadError):
        await music_service.save_music(make_upload(b"x" * (music_service.max_size + 1)))

    assert list(music_service.upload_dir.iterdir()) == []

@pytest.mark.asyncio
async def test_save_music_rejects_empty(music_service):
    with pytest.raises(InvalidUploadError):
        await music_service.save_music(make_upload(b""))

    assert list(music_service.upload_dir.iterdir()) == []

@pytest.mark.asyncio
async def test_generated_names_are_unique(music_service):
    url1 = await music_service.save_music(make_upload(b"a"))
    url2 = await music_service.save_music(make_upload(b"b"))
    assert url1 != url2

def test_resolve_stays_inside_upload_dir(music_service):
    path = music_service.resolve("../../etc/passwd")
    assert path.parent == music_service.upload_dir
    assert path.name == "passwd"

def test_upload_dir_created(tmp_path):
    target = tmp_path / "novo" / "uploads"
    MusicService(upload_dir=str(target))
    assert target.is_dir()

@pytest.mark.asyncio
@pytest.mark.parametrize("filename", ["evil.html", "script.js", "sem_extensao"])
async def test_save_music_rejects_non_audio_extension(music_service, filename):
    """O content-type audio/* não basta: a extensão também precisa ser de áudio"""
    with pytest.raises(InvalidUploadError):
        await music_service.save_music(make_upload(b"<script>alert(1)</script>", filename, "audio/mpeg"))

    assert list(music_service.upload_dir.iterdir()) == []

@pytest.mark.asyncio
async def test_save_music_accepts_uppercase_extension(music_service):
    url = await music_service.save_music(make_upload(b"RIFF", "Musica.WAV", "audio/wav"))
    assert url.endswith(".wav")

def test_media_type_for():
    from pathlib import Path

    assert MusicService.media_type_for(Path("audio-1.mp3")) == "audio/mpeg"
    assert MusicService.media_type_for(Path("audio-1.FLAC")) == AUDIO_MEDIA_TYPES[".flac"]
    assert MusicService.media_type_for(Path("audio-1.html")) == "application/octet-stream"
