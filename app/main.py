from fastapi import FastAPI, HTTPException, BackgroundTasks, Depends, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic.alias_generators import to_camel
from typing import Optional
from contextlib import asynccontextmanager
import logging
from urllib.parse import unquote

from .storage import JsonStorage, RequestNotFoundError, InvalidTransitionError
from .video_processor import VideoProcessor
from .music_service import MusicService, InvalidUploadError
from .models import VideoRequest
from .schemas import CreateVideoRequest, RequestStatusResponse, UploadMusicResponse, ProcessingStatus
from .utils import render_video_page
from .config import (
    REQUESTS_FILE, UPLOAD_DIR, PROCESSING_MODE, LOG_LEVEL, CORS_ORIGINS,
    print_config, validate_config
)

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

SERVICE_NAME = "Video Message Service"
SERVICE_VERSION = "1.0.0"

# Dicionário global para manter as instâncias dos serviços
services = {}

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gerenciador de ciclo de vida da aplicação.
    Monta armazenamento, processador e uploads antes da app começar.
    """
    try:
        validate_config()
        print_config()

        storage = JsonStorage(REQUESTS_FILE)
        services["storage"] = storage
        services["processor"] = VideoProcessor(storage=storage, mode=PROCESSING_MODE)
        services["music"] = MusicService(UPLOAD_DIR)

        logger.info("✅ Serviços inicializados e dependências injetadas")

        yield # A aplicação roda aqui

    except Exception as e:
        logger.error(f"❌ Erro fatal na inicialização: {e}")
        raise e

    finally:
        services.clear()
        logger.info("🛑 Aplicação finalizada")

app = FastAPI(
    title=SERVICE_NAME,
    version=SERVICE_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ========== Dependências ==========

def get_storage() -> JsonStorage:
    storage = services.get("storage")
    if not storage:
        raise HTTPException(500, "Armazenamento indisponível")
    return storage

def get_processor() -> VideoProcessor:
    processor = services.get("processor")
    if not processor:
        raise HTTPException(500, "Processor indisponível")
    return processor

def get_music_service() -> MusicService:
    music = services.get("music")
    if not music:
        raise HTTPException(500, "Serviço de upload indisponível")
    return music

# ========== Tratamento de erros ==========

def _first_error_field(loc) -> Optional[str]:
    parts = [p for p in loc if p != "body"]
    # JSON malformado aponta só para a posição no corpo
    if all(isinstance(p, int) for p in parts):
        return None
    # Erros de valores default chegam com o nome snake_case do campo
    return ".".join(to_camel(p) if isinstance(p, str) and "_" in p else str(p) for p in parts)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0]
    message = first.get("msg", "Dados inválidos").removeprefix("Value error, ")
    field = _first_error_field(first.get("loc", ()))
    logger.info(f"⚠️ Validação falhou em {request.url.path}: {field} - {message}")
    return JSONResponse(status_code=400, content={"message": message, "field": field})

@app.exception_handler(RequestNotFoundError)
async def not_found_handler(request: Request, exc: RequestNotFoundError):
    return JSONResponse(status_code=404, content={"message": "Solicitação não encontrada"})

@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    logger.warning(f"⚠️ {exc}")
    return JSONResponse(status_code=409, content={"message": str(exc)})

@app.exception_handler(InvalidUploadError)
async def invalid_upload_handler(request: Request, exc: InvalidUploadError):
    return JSONResponse(status_code=400, content={"message": str(exc)})

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})

@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.error(f"❌ Erro inesperado em {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"message": "Erro interno do servidor"})

# ========== Endpoints ==========

@app.get("/")
async def root():
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "running",
        "mode": PROCESSING_MODE,
        "endpoints": {
            "POST /api/requests": "Cria uma solicitação de vídeo",
            "GET /api/requests/{id}": "Detalhes da solicitação",
            "GET /api/requests/{id}/status": "Status e progresso (polling)",
            "GET /api/requests/{id}/video": "Prévia do vídeo gerado",
            "POST /api/upload-music": "Upload de música personalizada",
            "GET /health": "Status do serviço",
            "GET /": "Esta página"
        }
    }

@app.get("/health")
async def health_check():
    storage = services.get("storage")
    processor = services.get("processor")
    return {
        "status": "healthy" if storage and processor else "unhealthy",
        "storage": {
            "ready": storage is not None,
            "requests": len(storage.list_requests()) if storage else 0,
        },
        "mode": processor.mode if processor else None,
    }

@app.post("/api/requests", status_code=201, response_model=VideoRequest)
async def create_request(
    payload: CreateVideoRequest,
    background_tasks: BackgroundTasks,
    storage: JsonStorage = Depends(get_storage),
    processor: VideoProcessor = Depends(get_processor),
):
    request = storage.create_request(payload)

    if processor.is_staged:
        background_tasks.add_task(processor.process_staged, request.id)
        return request

    return processor.complete_immediately(request.id)

@app.get("/api/requests/{request_id}", response_model=VideoRequest)
async def get_request(request_id: str, storage: JsonStorage = Depends(get_storage)):
    request = storage.get_request(request_id)
    if request is None:
        raise RequestNotFoundError(request_id)
    return request

@app.get("/api/requests/{request_id}/status", response_model=RequestStatusResponse)
async def get_request_status(request_id: str, storage: JsonStorage = Depends(get_storage)):
    request = storage.get_request(request_id)
    if request is None:
        raise RequestNotFoundError(request_id)
    return RequestStatusResponse(
        status=request.status,
        progress=request.progress,
        video_url=request.video_url,
    )

@app.get("/api/requests/{request_id}/video", response_class=HTMLResponse)
async def get_request_video(request_id: str, storage: JsonStorage = Depends(get_storage)):
    request = storage.get_request(request_id)
    if request is None or request.status != ProcessingStatus.COMPLETED:
        raise HTTPException(404, "Vídeo não encontrado")

    return HTMLResponse(render_video_page(
        sender_name=request.sender_name,
        receiver_name=request.receiver_name,
        message=request.message,
        music=request.music.value,
    ))

@app.post("/api/upload-music", status_code=201, response_model=UploadMusicResponse)
async def upload_music(
    file: Optional[UploadFile] = File(None),
    music: MusicService = Depends(get_music_service),
):
    if file is None:
        raise InvalidUploadError("Nenhum arquivo enviado")

    url = await music.save_music(file)
    return UploadMusicResponse(url=url)

@app.get("/uploads/{filename}")
async def download_music(filename: str, music: MusicService = Depends(get_music_service)):
    file_path = music.resolve(unquote(filename))

    if not file_path.is_file():
        raise HTTPException(404, "Arquivo não encontrado")

    return FileResponse(
        path=file_path,
        filename=file_path.name,
        media_type=music.media_type_for(file_path),
        headers={"X-Content-Type-Options": "nosniff"}
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
