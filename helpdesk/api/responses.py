from __future__ import annotations

from typing import Any

from fastapi import Request, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from helpdesk.core.errors import ValidationError
from helpdesk.utils.time import day_range, parse_day


def dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, dict):
        return {k: dump(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [dump(v) for v in value]
    return value


def ok(data: Any = None, *, message: str | None = None, status_code: int = status.HTTP_200_OK, **extra: Any) -> JSONResponse:
    content: dict[str, Any] = {"success": True}
    if message:
        content["message"] = message
    content["data"] = dump(data)
    content.update({k: dump(v) for k, v in extra.items()})
    return JSONResponse(status_code=status_code, content=content)


def read_uploads(**files: UploadFile | None) -> dict[str, bytes | None]:
    """Read multipart media fields; empty or missing parts become ``None``."""
    out: dict[str, bytes | None] = {}
    for field, upload in files.items():
        if upload is None or not upload.filename:
            out[field] = None
            continue
        data = upload.file.read()
        out[field] = data or None
    return out


def request_base_url(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def parse_range(start: str | None, end: str | None):
    """Turn ``from``/``to`` query strings into inclusive UTC day bounds."""
    bad = [name for name, value in (("from", start), ("to", end)) if value and parse_day(value) is None]
    if bad:
        raise ValidationError(f"Invalid date for {', '.join(bad)}.", fields=bad)
    return day_range(parse_day(start), parse_day(end))
