from __future__ import annotations

from fastapi import File, HTTPException, UploadFile

from talentspal.config import get_settings
from talentspal.utils.log import logger


def _upload_size(file: UploadFile) -> int:
    if file.size is not None:
        return int(file.size)
    f = file.file
    pos = f.tell()
    f.seek(0, 2)
    size = f.tell()
    f.seek(pos)
    return int(size)


async def validate_image_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Dependency for image upload routes: allowed MIME prefix and size cap.
    """
    s = get_settings()
    mime = str(file.content_type or "").lower()
    if not any(mime.startswith(p) for p in s.upload_mime_prefix_list()):
        logger.warning("upload_rejected", reason="mime", mime=mime)
        raise HTTPException(status_code=400, detail="Only image files are allowed!")
    limit = int(s.max_upload_mb) * 1024 * 1024
    size = _upload_size(file)
    if size > limit:
        logger.warning("upload_rejected", reason="size", size=size, limit=limit)
        raise HTTPException(status_code=413, detail="File too large")
    return file
