# schooldesk/services/storage.py
"""
Хранилище сгенерированных PDF.

Файлы лежат в STORAGE_DIR, наружу отдаются только по подписанной
ссылке с ограниченным сроком жизни (/api/pdf/files/{key}?token=...).
"""
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from schooldesk.core.config import settings
from schooldesk.core.exceptions import NotFoundError, StorageNotConfigured, ValidationError
from schooldesk.core.security import create_download_token

logger = logging.getLogger(__name__)

SAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class UploadResult:
    key: str
    url: str
    size: int


class BlobStore:
    """Интерфейс хранилища: upload / download_url / read / delete"""

    def upload(self, buffer: bytes, file_name: str, metadata: Optional[dict] = None) -> UploadResult:
        raise NotImplementedError

    def download_url(self, key: str, expires_in: Optional[int] = None) -> str:
        raise NotImplementedError

    def read(self, key: str) -> bytes:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class LocalBlobStore(BlobStore):
    def __init__(self, root: str, base_url: str, expires_in: int = 3600):
        if not root:
            raise StorageNotConfigured("Хранилище PDF не настроено")
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.expires_in = expires_in

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        # Ключ не должен выводить за пределы каталога хранилища
        if self.root.resolve() not in path.parents:
            raise ValidationError("Некорректный ключ файла")
        return path

    def upload(self, buffer: bytes, file_name: str, metadata: Optional[dict] = None) -> UploadResult:
        safe_name = SAFE_NAME_RE.sub("_", file_name) or "file.pdf"
        key = f"pdfs/{datetime.utcnow().strftime('%Y%m%d%H%M%S%f')}_{safe_name}"
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(buffer)
        logger.info(f"📦 [Storage] Загружен файл {key} ({len(buffer)} байт)")
        return UploadResult(key=key, url=self.download_url(key), size=len(buffer))

    def download_url(self, key: str, expires_in: Optional[int] = None) -> str:
        token = create_download_token(key, expires_in or self.expires_in)
        return f"{self.base_url}/api/pdf/files/{key}?token={token}"

    def read(self, key: str) -> bytes:
        path = self._path(key)
        if not path.is_file():
            raise NotFoundError("Файл не найден")
        return path.read_bytes()

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.is_file():
            path.unlink()
            logger.info(f"🗑️ [Storage] Удалён файл {key}")


def get_blob_store() -> BlobStore:
    return LocalBlobStore(settings.STORAGE_DIR, settings.PUBLIC_BASE_URL, settings.STORAGE_URL_EXPIRES)
