import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from datetime import datetime
from pathlib import Path
import tempfile
from app.utils import (
    generate_unique_id,
    count_words,
    utc_now_iso,
    generate_audio_filename,
    cleanup_temp_files,
    render_video_page
)

# ========== Testes para Utils ==========

def test_generate_unique_id():
    """Testa geração de ID único"""
    id1 = generate_unique_id()
    id2 = generate_unique_id()

    assert id1 != id2
    assert len(id1) == 13
    assert id1.isalnum()
    assert id1 == id1.lower()

@pytest.mark.parametrize("text,expected", [
    ("Hi", 1),
    ("  Te   amo  muito ", 3),
    ("linha\num\tdois", 3),
    ("", 0),
    ("   ", 0),
])
def test_count_words(text, expected):
    assert count_words(text) == expected

def test_utc_now_iso():
    value = utc_now_iso()

    assert value.endswith("Z")
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    assert parsed.tzinfo is not None

def test_generate_audio_filename():
    name = generate_audio_filename("Minha Música.MP3")

    assert name.startswith("audio-")
    assert name.endswith(".mp3")
    assert " " not in name

def test_generate_audio_filename_without_extension():
    assert Path(generate_audio_filename("")).suffix == ""
    assert Path(generate_audio_filename(None)).suffix == ""

def test_cleanup_temp_files():
    """Testa limpeza de arquivos temporários"""
    with tempfile.TemporaryDirectory() as temp_dir:
        test_file = Path(temp_dir) / "test.txt"
        test_file.write_text("test content")

        test_dir = Path(temp_dir) / "test_dir"
        test_dir.mkdir()
        (test_dir / "nested.txt").write_text("nested content")

        cleanup_temp_files(str(test_file), str(test_dir))

        assert not test_file.exists()
        assert not test_dir.exists()

def test_cleanup_nonexistent_files():
    """Testa limpeza de arquivos que não existem"""
    # Não deve lançar exceção
    cleanup_temp_files("/path/that/does/not/exist")

def test_render_video_page_escapes_content():
    html = render_video_page("Alice & Co", "Bob", 'Diga "sim" <3', "romantic")

    assert "Alice &amp; Co" in html
    assert "&lt;3" in html
    assert "&quot;sim&quot;" in html
    assert "🎶 Música: romantic" in html
