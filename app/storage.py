import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from .config import REQUESTS_FILE
from .models import VideoRequest
from .schemas import CreateVideoRequest, MusicChoice, ProcessingStatus
from .utils import generate_unique_id, utc_now_iso

logger = logging.getLogger(__name__)

# Transições permitidas; estados terminais não têm saída
ALLOWED_TRANSITIONS = {
    ProcessingStatus.PENDING: {
        ProcessingStatus.PROCESSING,
        ProcessingStatus.COMPLETED,
        ProcessingStatus.FAILED,
    },
    ProcessingStatus.PROCESSING: {
        ProcessingStatus.PROCESSING,
        ProcessingStatus.COMPLETED,
        ProcessingStatus.FAILED,
    },
    ProcessingStatus.COMPLETED: set(),
    ProcessingStatus.FAILED: set(),
}

class StorageError(Exception):
    pass

class RequestNotFoundError(StorageError):
    def __init__(self, request_id: str):
        super().__init__(f"Solicitação não encontrada: {request_id}")
        self.request_id = request_id

class InvalidTransitionError(StorageError):
    pass

def check_transition(current: VideoRequest, status: ProcessingStatus, progress: int):
    """Valida a mudança de status/progresso de uma solicitação"""
    if status not in ALLOWED_TRANSITIONS[current.status]:
        raise InvalidTransitionError(
            f"Transição inválida para {current.id}: {current.status.value} -> {status.value}"
        )

    if not 0 <= progress <= 100:
        raise InvalidTransitionError(f"Progresso fora do intervalo 0-100: {progress}")

    # Na falha o progresso pode voltar a 0
    if status != ProcessingStatus.FAILED and progress < current.progress:
        raise InvalidTransitionError(
            f"Progresso não pode regredir para {current.id}: {current.progress} -> {progress}"
        )

class JsonStorage:
    """
    Persistência das solicitações em um único documento JSON {id: solicitação}.
    Cada mutação relê e regrava o arquivo inteiro.
    """

    def __init__(self, file_path: str = REQUESTS_FILE):
        self.file_path = Path(file_path)
        self._lock = threading.Lock()

        logger.info(f"✅ JsonStorage inicializado")
        logger.info(f"   Arquivo: {self.file_path}")

    def _ensure_data_dir(self):
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

    def _read_requests(self) -> Dict[str, dict]:
        self._ensure_data_dir()
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Arquivo de solicitações ilegível, tratando como vazio: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning("⚠️ Conteúdo inesperado no arquivo de solicitações, tratando como vazio")
            return {}
        return data

    def _write_requests(self, requests: Dict[str, dict]):
        self._ensure_data_dir()
        try:
            with open(self.file_path, "w", encoding="utf-8") as f:
                json.dump(requests, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"❌ Erro ao gravar {self.file_path}: {e}")
            raise StorageError(f"Falha ao gravar solicitações: {e}") from e

    def create_request(self, data: CreateVideoRequest) -> VideoRequest:
        """Cria uma solicitação pendente e a persiste"""
        with self._lock:
            requests = self._read_requests()

            request_id = generate_unique_id()
            while request_id in requests:
                request_id = generate_unique_id()

            request = VideoRequest(
                id=request_id,
                sender_name=data.sender_name,
                receiver_name=data.receiver_name,
                message=data.message,
                music=data.music,
                custom_music_url=(data.custom_music_url or "") if data.music == MusicChoice.CUSTOM else "",
                status=ProcessingStatus.PENDING,
                progress=0,
                created_at=utc_now_iso(),
            )
            requests[request_id] = request.to_json()
            self._write_requests(requests)

        logger.info(f"📝 Solicitação criada: {request_id}")
        return request

    def get_request(self, request_id: str) -> Optional[VideoRequest]:
        raw = self._read_requests().get(request_id)
        if raw is None:
            return None
        return VideoRequest.model_validate(raw)

    def list_requests(self) -> List[VideoRequest]:
        return [VideoRequest.model_validate(raw) for raw in self._read_requests().values()]

    def update_status(self, request_id: str, status: ProcessingStatus, progress: int,
                      video_url: Optional[str] = None) -> VideoRequest:
        """Atualiza status e progresso; sem URL mantém a anterior"""
        status = ProcessingStatus(status)
        with self._lock:
            requests = self._read_requests()
            raw = requests.get(request_id)
            if raw is None:
                raise RequestNotFoundError(request_id)

            current = VideoRequest.model_validate(raw)
            check_transition(current, status, progress)

            updated = current.model_copy(update={
                "status": status,
                "progress": progress,
                "video_url": video_url or current.video_url,
            })
            requests[request_id] = updated.to_json()
            self._write_requests(requests)

        logger.info(f"🔄 {request_id}: {status.value} ({progress}%)")
        return updated
