import logging
from fastapi import APIRouter, Depends, File, Form, Header, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from kimage.auth import check_key
from kimage.config import Config, get_config
from kimage.errors import AuthFailed, DecodeFailed, PayloadTooLarge
from kimage.models import UploadResponse
from kimage.storage import detect_image_ext, save_image

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)


async def _read_limited(file: UploadFile, max_bytes: int) -> bytes:
    buf = bytearray()
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise PayloadTooLarge(f"file too large (max {max_bytes // (1024 * 1024)}MB)")
    return bytes(buf)


@router.post("/upload", response_model=UploadResponse)
async def api_upload(
    file: UploadFile | None = File(default=None),
    key: str | None = Form(default=None),
    authorization: str | None = Header(default=None),
    config: Config = Depends(get_config),
):
    try:
        check_key(key if key is not None else authorization, config.api_key)
    except AuthFailed:
        logger.info("rejected upload with invalid key")
        raise
    if file is None:
        raise HTTPException(status_code=400, detail="missing file field")

    data = await _read_limited(file, config.max_upload_bytes)
    try:
        ext = await run_in_threadpool(detect_image_ext, data)
    except DecodeFailed:
        logger.warning("rejected upload '%s': not an image (%d bytes)", file.filename, len(data))
        raise
    name = await run_in_threadpool(save_image, config.storage_path, data, ext)
    url = f"{config.server_url}/{name}"
    logger.info("stored upload '%s' as %s (%d bytes)", file.filename, name, len(data))
    return UploadResponse(url=url)
