import asyncio
import logging
from typing import Optional, Set

from .storage import JsonStorage, StorageError
from .models import VideoRequest
from .schemas import ProcessingStatus
from .config import PROCESSING_MODE, STAGE_DELAY_SECONDS

logger = logging.getLogger(__name__)

# Progresso reportado durante o processamento em etapas
PROCESSING_STAGES = (10, 40, 80)

def video_url_for(request_id: str) -> str:
    return f"/api/requests/{request_id}/video"

class VideoProcessor:
    """
    Conduz o ciclo de vida de uma solicitação.
    Nenhum vídeo real é codificado: o modo "instant" conclui na hora e o modo
    "staged" simula etapas de progresso.
    """

    def __init__(self, storage: JsonStorage, mode: str = PROCESSING_MODE,
                 stage_delay: float = STAGE_DELAY_SECONDS):
        self.storage = storage
        self.mode = mode
        self.stage_delay = stage_delay
        self._in_flight: Set[str] = set()

        logger.info(f"🎬 VideoProcessor inicializado")
        logger.info(f"🔧 Modo: {self.mode}")

    @property
    def is_staged(self) -> bool:
        return self.mode == "staged"

    def is_processing(self, request_id: str) -> bool:
        return request_id in self._in_flight

    def complete_immediately(self, request_id: str) -> VideoRequest:
        """Leva a solicitação direto para completed, sem processamento real"""
        logger.info(f"⚡ Conclusão imediata: {request_id}")
        try:
            return self.storage.update_status(
                request_id, ProcessingStatus.COMPLETED, 100, video_url_for(request_id)
            )
        except StorageError as e:
            logger.error(f"❌ Falha na conclusão imediata de {request_id}: {e}")
            self._mark_failed(request_id)
            raise

    async def process_staged(self, request_id: str) -> Optional[VideoRequest]:
        """
        Simula o processamento assíncrono: processing 10 -> 40 -> 80 -> completed 100.
        Qualquer exceção marca a solicitação como failed com progresso 0.
        """
        if request_id in self._in_flight:
            logger.warning(f"⚠️ Processamento já em andamento: {request_id}")
            return None

        request = self.storage.get_request(request_id)
        if request is None:
            logger.error(f"❌ Solicitação não encontrada para processamento: {request_id}")
            return None

        if request.status.is_terminal:
            logger.info(f"ℹ️ Solicitação já finalizada ({request.status.value}): {request_id}")
            return request

        self._in_flight.add(request_id)
        try:
            logger.info(f"🚀 Iniciando processamento: {request_id}")
            for progress in PROCESSING_STAGES:
                self.storage.update_status(request_id, ProcessingStatus.PROCESSING, progress)
                await asyncio.sleep(self.stage_delay)

            result = self.storage.update_status(
                request_id, ProcessingStatus.COMPLETED, 100, video_url_for(request_id)
            )
            logger.info(f"✅ Processamento concluído: {request_id}")
            return result

        except asyncio.CancelledError:
            logger.warning(f"⚠️ Processamento cancelado: {request_id}")
            self._mark_failed(request_id)
            raise

        except Exception as e:
            logger.error(f"❌ Falha no processamento de {request_id}: {e}")
            return self._mark_failed(request_id)

        finally:
            self._in_flight.discard(request_id)

    def _mark_failed(self, request_id: str) -> Optional[VideoRequest]:
        try:
            return self.storage.update_status(request_id, ProcessingStatus.FAILED, 0)
        except Exception as e:
            logger.error(f"❌ Não foi possível marcar {request_id} como failed: {e}")
            return None
