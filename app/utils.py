import os
import secrets
import string
import time
from datetime import datetime, timezone
from html import escape
from pathlib import Path

ID_ALPHABET = string.ascii_lowercase + string.digits

def generate_unique_id(length: int = 13) -> str:
    """Gera um ID opaco em base36 para uma solicitação"""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))

def count_words(text: str) -> int:
    """Conta palavras separadas por espaços em branco"""
    return len(text.split())

def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

def generate_audio_filename(original_name: str) -> str:
    """Nome único para o upload, preservando a extensão original"""
    ext = Path(original_name or "").suffix.lower()
    unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
    return f"audio-{unique_suffix}{ext}"

def cleanup_temp_files(*paths):
    """Remove arquivos temporários"""
    for path in paths:
        if os.path.exists(path):
            if os.path.isdir(path):
                import shutil
                shutil.rmtree(path)
            else:
                os.remove(path)

def render_video_page(sender_name: str, receiver_name: str, message: str, music: str) -> str:
    """
    Página HTML que simula a prévia do vídeo.
    Nenhum MP4 é gerado: a página apenas apresenta o conteúdo da mensagem.
    """
    return f"""<html>
  <head><meta charset="utf-8"><title>Vídeo para {escape(receiver_name)}</title></head>
  <body style="background: black; color: white; display: flex; flex-direction: column; align-items: center; justify-content: center; height: 100vh; font-family: sans-serif;">
    <h1>Vídeo de {escape(sender_name)} para {escape(receiver_name)}</h1>
    <p style="font-size: 1.5rem; max-width: 600px; text-align: center; font-style: italic;">"{escape(message)}"</p>
    <div style="margin-top: 2rem; border: 2px solid pink; padding: 2rem; border-radius: 1rem;">
      🎶 Música: {escape(music)}
    </div>
    <p style="margin-top: 2rem; color: #666;">Esta é uma prévia gerada para a sua demonstração.</p>
  </body>
</html>
"""
