"""Serve stored images.

Routes:
  GET /{name}  — raw bytes of an uploaded image, Content-Type from its suffix

Only plain names directly inside the storage directory are served.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from kimage.auth import safe_name
from kimage.config import Config, get_config
from kimage.storage import mime_for, resolve_stored

router = APIRouter(tags=["files"])


@router.get("/{name}")
def serve_image(name: str, config: Config = Depends(get_config)):
    name = safe_name(name)
    f = resolve_stored(config.storage_path, name)
    if f is None:
        raise HTTPException(status_code=404, detail="file not found")
    return FileResponse(f, media_type=mime_for(f))
