import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from .schemas import ProcessingStatus

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = {ProcessingStatus.COMPLETED.value, ProcessingStatus.FAILED.value}

class PollingTimeoutError(Exception):
    pass

class VideoRequestClient:
    """
    Cliente HTTP da API de solicitações.
    Faz o papel do hook de polling do front: consulta o status até um estado terminal.
    """

    def __init__(self, base_url: str, timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def create_request(self, sender_name: str, receiver_name: str, message: str,
                             music: str = "romantic", custom_music_url: Optional[str] = None) -> Dict[str, Any]:
        payload = {
            "senderName": sender_name,
            "receiverName": receiver_name,
            "message": message,
            "music": music,
        }
        if custom_music_url:
            payload["customMusicUrl"] = custom_music_url

        async with self._client() as client:
            response = await client.post("/api/requests", json=payload)
        response.raise_for_status()
        return response.json()

    async def get_request(self, request_id: str) -> Optional[Dict[str, Any]]:
        """Detalhes da solicitação, ou None se ela não existir"""
        async with self._client() as client:
            response = await client.get(f"/api/requests/{request_id}")
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    async def get_status(self, request_id: str) -> Dict[str, Any]:
        async with self._client() as client:
            response = await client.get(f"/api/requests/{request_id}/status")
        response.raise_for_status()
        return response.json()

    async def upload_music(self, filename: str, content: bytes, content_type: str = "audio/mpeg") -> str:
        files = {"file": (filename, content, content_type)}
        async with self._client() as client:
            response = await client.post("/api/upload-music", files=files)
        response.raise_for_status()
        return response.json()["url"]

    async def wait_for_completion(self, request_id: str, interval: float = 1.0,
                                  max_polls: Optional[int] = None) -> Dict[str, Any]:
        """Consulta o status a cada `interval` segundos até completed ou failed"""
        polls = 0
        while True:
            status = await self.get_status(request_id)
            polls += 1

            if status.get("status") in TERMINAL_STATUSES:
                logger.info(f"🏁 {request_id} finalizado: {status['status']} após {polls} consulta(s)")
                return status

            if max_polls is not None and polls >= max_polls:
                raise PollingTimeoutError(
                    f"{request_id} ainda em {status.get('status')} após {polls} consultas"
                )

            logger.debug(f"⏳ {request_id}: {status.get('status')} ({status.get('progress')}%)")
            await asyncio.sleep(interval)
