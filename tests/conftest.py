import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from pathlib import Path
from fastapi.testclient import TestClient

from app.main import app, get_storage, get_processor, get_music_service
from app.storage import JsonStorage
from app.video_processor import VideoProcessor
from app.music_service import MusicService
from app.schemas import CreateVideoRequest

# ========== Fixtures Compartilhadas ==========

@pytest.fixture
def storage(tmp_path):
    """JsonStorage gravando em um diretório temporário"""
    return JsonStorage(str(tmp_path / "data" / "requests.json"))

@pytest.fixture
def music_service(tmp_path):
    return MusicService(upload_dir=str(tmp_path / "uploads"), max_size=1024)

@pytest.fixture
def processor(storage):
    return VideoProcessor(storage=storage, mode="instant", stage_delay=0)

@pytest.fixture
def staged_processor(storage):
    return VideoProcessor(storage=storage, mode="staged", stage_delay=0)

@pytest.fixture
def sample_input():
    return CreateVideoRequest(
        sender_name="Alice",
        receiver_name="Bob",
        message="Hi",
        music="romantic"
    )

def _client_with(storage, processor, music_service, **kwargs):
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_processor] = lambda: processor
    app.dependency_overrides[get_music_service] = lambda: music_service
    return TestClient(app, **kwargs)

@pytest.fixture
def client(storage, processor, music_service):
    """TestClient com serviços injetados (lifespan não é executado)"""
    yield _client_with(storage, processor, music_service)
    app.dependency_overrides.clear()

@pytest.fixture
def staged_client(storage, staged_processor, music_service):
    yield _client_with(storage, staged_processor, music_service)
    app.dependency_overrides.clear()
