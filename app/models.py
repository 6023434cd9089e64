from pydantic import Field
from typing import Optional

from .schemas import CamelModel, MusicChoice, ProcessingStatus

class VideoRequest(CamelModel):
    id: str
    sender_name: str
    receiver_name: str
    message: str
    music: MusicChoice = MusicChoice.ROMANTIC
    custom_music_url: str = ""
    status: ProcessingStatus = ProcessingStatus.PENDING
    progress: int = Field(default=0, ge=0, le=100)
    video_url: Optional[str] = None
    created_at: str

    def to_json(self) -> dict:
        """Representação gravada no arquivo JSON e devolvida pela API"""
        return self.model_dump(by_alias=True, mode="json")
