import logging
import tomllib
from pathlib import Path

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from kimage.errors import ConfigMalformed, ConfigNotFound

CONFIG_PATH = Path.home() / ".config" / "kimage.toml"
DEFAULT_MAX_MB = 25

logger = logging.getLogger(__name__)


class Config(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    server_url: str
    port: int = Field(ge=1, le=65535)
    api_key: str
    storage_path: Path
    max_upload_mb: int = Field(default=DEFAULT_MAX_MB, ge=1)

    @field_validator("server_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("storage_path")
    @classmethod
    def _absolute_storage(cls, v: Path) -> Path:
        v = v.expanduser()
        if not v.is_absolute():
            v = Path.home() / v
        return v

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def _describe(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        field = ".".join(str(x) for x in err["loc"]) or "<root>"
        if err["type"] == "missing":
            parts.append(f"missing field '{field}'")
        else:
            parts.append(f"invalid field '{field}': {err['msg']}")
    return "; ".join(parts)


def load_config(path: Path | None = None) -> Config:
    """Load and validate the kimage TOML config.

    Raises ConfigNotFound when the file cannot be read and ConfigMalformed
    when it is not valid TOML or a required field is missing or mistyped.
    """
    path = Path(path) if path is not None else CONFIG_PATH
    logger.info("loading config from %s", path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError as e:
        raise ConfigNotFound(f"config file not found: {path}") from e
    except OSError as e:
        raise ConfigNotFound(f"cannot read config file {path}: {e}") from e

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigMalformed(f"invalid TOML in {path}: {e}") from e

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigMalformed(f"bad config in {path}: {_describe(e)}") from e


def get_config(request: Request) -> Config:
    return request.app.state.config
