import re
import secrets

from fastapi import HTTPException

from kimage.errors import AuthFailed

SAFE_NAME_RE = re.compile(r"^[^/\\\x00-\x1f\x7f]{1,120}$")


def safe_name(name: str) -> str:
    if not SAFE_NAME_RE.match(name) or name in (".", "..") or name.startswith("."):
        raise HTTPException(status_code=400, detail="invalid filename")
    return name


def check_key(supplied: str | None, expected: str):
    if supplied is None or not secrets.compare_digest(
        supplied.encode("utf-8"), expected.encode("utf-8")
    ):
        raise AuthFailed("invalid key")
