from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from enum import Enum

from .utils import count_words

MAX_MESSAGE_WORDS = 1000

class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ProcessingStatus.COMPLETED, ProcessingStatus.FAILED)

class MusicChoice(str, Enum):
    ROMANTIC = "romantic"
    ACOUSTIC = "acoustic"
    CUSTOM = "custom"

class CamelModel(BaseModel):
    """Base dos schemas da API: campos snake_case, JSON em camelCase"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class CreateVideoRequest(CamelModel):
    sender_name: str
    receiver_name: str
    message: str
    music: MusicChoice = MusicChoice.ROMANTIC
    custom_music_url: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("sender_name", "receiver_name", "message")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Campo obrigatório")
        return value

    @field_validator("message")
    @classmethod
    def max_words(cls, value: str) -> str:
        if count_words(value) > MAX_MESSAGE_WORDS:
            raise ValueError(f"A mensagem não deve ultrapassar {MAX_MESSAGE_WORDS} palavras")
        return value

    @field_validator("custom_music_url")
    @classmethod
    def custom_music_requires_url(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        # music inválida já falhou antes e não aparece em info.data
        if info.data.get("music") == MusicChoice.CUSTOM and not value:
            raise ValueError("URL obrigatória para música personalizada")
        return value

class RequestStatusResponse(CamelModel):
    status: ProcessingStatus
    progress: int
    video_url: Optional[str] = None

class UploadMusicResponse(BaseModel):
    url: str
