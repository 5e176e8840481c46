import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional
from uuid import uuid4

from fastapi import UploadFile, status
from loguru import logger

from app.core.exceptions import ValidationError

CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class StagedFile:
    path: Path
    filename: str
    content_type: Optional[str]
    size: int


def _sanitize_filename(filename: str) -> str:
    name = Path(filename).name
    return re.sub(r"[^A-Za-z0-9._-]", "_", name) or "upload"


@asynccontextmanager
async def staged_upload(
    file: Optional[UploadFile],
    temp_dir: str,
    max_bytes: int,
) -> AsyncIterator[Optional[StagedFile]]:
    """Write an uploaded file to a temporary local path for the duration of the block.

    Yields ``None`` when no file was sent. The local copy is removed on every
    exit path, including validation and storage failures.
    """
    if file is None or not file.filename:
        yield None
        return

    filename = _sanitize_filename(file.filename)
    directory = Path(temp_dir)
    directory.mkdir(parents=True, exist_ok=True)
    destination = directory / f"{uuid4().hex}-{filename}"

    total_size = 0
    try:
        with destination.open("wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                total_size += len(chunk)
                if total_size > max_bytes:
                    raise ValidationError(
                        f"File too large. Max upload size is {max_bytes // CHUNK_SIZE}MB",
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    )
                out.write(chunk)

        yield StagedFile(
            path=destination,
            filename=filename,
            content_type=file.content_type,
            size=total_size,
        )
    finally:
        await file.close()
        destination.unlink(missing_ok=True)
        logger.debug(f"Removed staged upload {destination.name}")
