from __future__ import annotations

import time
from pathlib import Path
from typing import Mapping

from loguru import logger
from nanoid import generate

from helpdesk.core.config import get_settings
from helpdesk.core.errors import NotFoundError, ValidationError

MEDIA_URL_PREFIX = "/users_data"

# upload field -> (file suffix, extension, record attribute)
MEDIA_FIELDS: dict[str, tuple[str, str, str]] = {
    "voice_note": ("voice", ".mp3", "voice_note_url"),
    "audio": ("voice", ".mp3", "voice_note_url"),
    "video": ("video", ".mp4", "video_url"),
    "image": ("image", ".jpg", "image_url"),
}


class MediaStore:
    """Turns uploaded bytes into served URLs and back."""

    def __init__(self, root: Path, base_url: str | None = None) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/") if base_url else None

    def save(self, field: str, data: bytes, *, base_url: str | None = None) -> str:
        if field not in MEDIA_FIELDS:
            raise ValidationError(f"Unsupported media field '{field}'.", fields=[field])
        suffix, extension, _ = MEDIA_FIELDS[field]

        self.root.mkdir(parents=True, exist_ok=True)
        filename = f"{int(time.time() * 1000)}_{generate(size=8)}_{suffix}{extension}"
        path = self.root / filename
        path.write_bytes(data)
        logger.info("Stored {field} upload as {filename} ({size} bytes)", field=field, filename=filename, size=len(data))

        host = self.base_url or (base_url or "").rstrip("/")
        return f"{host}{MEDIA_URL_PREFIX}/{filename}"

    def save_all(self, uploads: Mapping[str, bytes | None], *, base_url: str | None = None) -> dict[str, str]:
        """Store every non-empty upload; returns record attribute -> URL."""
        refs: dict[str, str] = {}
        for field, data in uploads.items():
            if not data:
                continue
            url = self.save(field, data, base_url=base_url)
            refs[MEDIA_FIELDS[field][2]] = url
        return refs

    def resolve(self, filename: str) -> Path:
        name = Path(filename).name
        if not filename or name != filename or name in {".", ".."}:
            raise NotFoundError("File not found.")
        path = self.root / name
        if not path.is_file():
            raise NotFoundError("File not found.")
        return path


def get_media_store() -> MediaStore:
    settings = get_settings()
    return MediaStore(root=settings.media_root, base_url=settings.media_base_url)
