import io
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from kimage.config import Config
from kimage.main import create_app


TEST_API_KEY = "secret123"
TEST_SERVER_URL = "https://img.example.com"


def _image_bytes(fmt: str = "PNG", size=(10, 10), color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def storage_dir(tmp_path: Path) -> Path:
    d = tmp_path / "images"
    d.mkdir(parents=True, exist_ok=True)
    return d


@pytest.fixture()
def config(storage_dir: Path) -> Config:
    return Config(
        server_url=TEST_SERVER_URL,
        port=8001,
        api_key=TEST_API_KEY,
        storage_path=storage_dir,
    )


@pytest.fixture()
def app(config: Config):
    return create_app(config)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def api_key() -> str:
    return TEST_API_KEY


@pytest.fixture()
def image_bytes():
    return _image_bytes


@pytest.fixture()
def png_bytes() -> bytes:
    return _image_bytes("PNG")
