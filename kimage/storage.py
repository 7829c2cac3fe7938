"""On-disk image store.

Every upload lives flat under the configured storage directory as
``{identifier}.{ext}``. The filename is the only identity; there is no
index or sidecar metadata.
"""

import io
import logging
import os
import secrets
import string
import tempfile
from pathlib import Path

from PIL import Image

from kimage.errors import DecodeFailed, StorageFailed

logger = logging.getLogger(__name__)

ID_ALPHABET = string.ascii_letters + string.digits
ID_LENGTH = 16
STORED_MODE = 0o644

_FORMAT_EXT = {
    "PNG": "png",
    "JPEG": "jpg",
    "MPO": "jpg",
    "GIF": "gif",
    "WEBP": "webp",
    "BMP": "bmp",
    "TIFF": "tiff",
    "ICO": "ico",
}

# Map suffix to MIME type for explicit Content-Type
MIME = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".ico": "image/x-icon",
}


def generate_identifier() -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def _ext_for_format(fmt: str) -> str:
    if fmt in _FORMAT_EXT:
        return _FORMAT_EXT[fmt]
    # first suffix Pillow registers for the format, so mime_for can map it back
    for suffix, registered in Image.registered_extensions().items():
        if registered == fmt:
            return suffix.lstrip(".")
    return fmt.lower()


def detect_image_ext(data: bytes) -> str:
    """Decode ``data`` and return the extension for its real format.

    The claimed filename is never consulted. Raises DecodeFailed when the
    bytes are not an image Pillow can fully load.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
            img.load()
    except Exception as e:
        raise DecodeFailed("not a decodable image") from e
    if not fmt:
        raise DecodeFailed("not a decodable image")
    return _ext_for_format(fmt)


def save_image(storage_dir: Path, data: bytes, ext: str) -> str:
    """Write ``data`` under a fresh name and return that name.

    The bytes go to a hidden temp file in the same directory first and are
    renamed into place, so a reader never sees a partial file.
    """
    name = f"{generate_identifier()}.{ext}"
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            dir=storage_dir, prefix=".upload-", suffix=".part", delete=False
        ) as tmp:
            tmp_path = Path(tmp.name)
            os.fchmod(tmp.fileno(), STORED_MODE)
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, storage_dir / name)
    except OSError as e:
        logger.error("failed to store %s in %s: %s", name, storage_dir, e)
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise StorageFailed("failed to store image") from e
    return name


def resolve_stored(storage_dir: Path, name: str) -> Path | None:
    base = storage_dir.resolve()
    f = (base / name).resolve()
    if not f.is_relative_to(base) or not f.is_file():
        return None
    return f


def mime_for(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in MIME:
        return MIME[suffix]
    fmt = Image.registered_extensions().get(suffix)
    return Image.MIME.get(fmt, "application/octet-stream")


def check_writable(storage_dir: Path, create: bool = False):
    """Raise OSError unless a file can be created in ``storage_dir``."""
    if create:
        storage_dir.mkdir(parents=True, exist_ok=True)
    probe = storage_dir / ".health_check"
    probe.write_text("ok")
    probe.unlink()
