"""Configuration helpers for MongoDB connections used by db_core.

Applications can create a new ``MongoSettings`` instance at startup and pass
it to ``configure`` before the first client is requested to
override the defaults. Values are read from the environment, with the nearest
``.env`` file loaded first.
"""
import os

from bson.binary import UuidRepresentation
from bson.codec_options import CodecOptions
from dotenv import find_dotenv, load_dotenv
from loguru import logger
from pydantic import BaseModel, Field

load_dotenv(find_dotenv(usecwd=True))


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class MongoSettings(BaseModel):
    """Basic MongoDB configuration shared by read-model repositories."""

    uri: str = Field(
        default_factory=lambda: os.getenv("MONGO_URI", "mongodb://localhost:27017")
    )
    db_name: str = Field(default_factory=lambda: os.getenv("MONGO_DB_NAME", "read_models"))
    server_selection_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000"))
    )
    # BSON dates are UTC instants.
    tz_aware: bool = Field(default_factory=lambda: _env_flag("MONGO_TZ_AWARE", "true"))

    def client_kwargs(self) -> dict:
        """Keyword arguments shared by the pymongo and motor clients."""

        return {
            "serverSelectionTimeoutMS": self.server_selection_timeout_ms,
            "tz_aware": self.tz_aware,
            "uuidRepresentation": "standard",
        }

    def codec_options(self) -> CodecOptions:
        """Codec options equivalent to ``client_kwargs``, for encoding documents directly."""

        return CodecOptions(
            tz_aware=self.tz_aware, uuid_representation=UuidRepresentation.STANDARD
        )


def _default_settings() -> "MongoSettings":
    return MongoSettings()


settings: MongoSettings = _default_settings()
logger.debug(f"MongoSettings initialized with uri={settings.uri} db_name={settings.db_name}")


def current_settings() -> MongoSettings:
    return settings


def configure(new_settings: MongoSettings) -> MongoSettings:
    """Replace the process-wide settings; call before the first client is created."""

    global settings
    settings = new_settings
    return settings
