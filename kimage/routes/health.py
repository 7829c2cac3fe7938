"""Health check endpoint."""
from fastapi import APIRouter, Depends
from kimage.config import Config, get_config
from kimage.storage import check_writable

router = APIRouter()


@router.get("/health")
async def health(config: Config = Depends(get_config)):
    checks = {"app": "ok"}

    # Check storage directory is writable
    try:
        check_writable(config.storage_path)
        checks["storage"] = "ok"
    except OSError as e:
        checks["storage"] = f"error: {e}"
        return {"status": "unhealthy", "checks": checks}

    return {"status": "ok", "checks": checks}
