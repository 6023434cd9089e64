import os

# Persistência
DATA_DIR = os.getenv("DATA_DIR", "data")
REQUESTS_FILE = os.getenv("REQUESTS_FILE", os.path.join(DATA_DIR, "requests.json"))

# Upload de músicas
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", str(10 * 1024 * 1024)))

# Application Settings
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PROCESSING_MODE = os.getenv("PROCESSING_MODE", "instant")
STAGE_DELAY_SECONDS = float(os.getenv("STAGE_DELAY_SECONDS", "1.0"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

PROCESSING_MODES = ("instant", "staged")

def validate_config():
    """Valida configurações mínimas"""
    errors = []

    if not REQUESTS_FILE:
        errors.append("REQUESTS_FILE não configurado")

    if PROCESSING_MODE not in PROCESSING_MODES:
        errors.append(f"PROCESSING_MODE inválido: {PROCESSING_MODE}")

    if MAX_UPLOAD_SIZE <= 0:
        errors.append(f"MAX_UPLOAD_SIZE inválido: {MAX_UPLOAD_SIZE}")

    if STAGE_DELAY_SECONDS < 0:
        errors.append(f"STAGE_DELAY_SECONDS inválido: {STAGE_DELAY_SECONDS}")

    if errors:
        raise ValueError(" | ".join(errors))

def print_config():
    """Imprime configurações (útil para debug)"""
    print("=" * 50)
    print("CONFIGURAÇÕES DO SISTEMA")
    print("=" * 50)
    print(f"💾 Requests File: {REQUESTS_FILE}")
    print(f"📁 Upload Dir: {UPLOAD_DIR}")
    print(f"📏 Upload máximo: {MAX_UPLOAD_SIZE // (1024 * 1024)}MB")

    if PROCESSING_MODE == "staged":
        print(f"🔧 Modo: Em etapas ({STAGE_DELAY_SECONDS}s por etapa)")
    else:
        print(f"🔧 Modo: Instantâneo")

    print(f"🌐 CORS: {', '.join(CORS_ORIGINS) or 'nenhuma origem'}")
    print(f"🌍 Environment: {os.getenv('ENVIRONMENT', 'production')}")
    print("=" * 50)
