# pinmap/core/config.py
from __future__ import annotations
from pathlib import Path
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from starlette.middleware.cors import CORSMiddleware

PACKAGE_ROOT = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    # Pydantic Settings
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",          # ignore unknown env keys safely
        case_sensitive=False,
    )

    # --- App ---
    app_name: str = "PinMap"
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(3000, alias="PORT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    static_dir: Path = Field(PACKAGE_ROOT / "static", alias="STATIC_DIR")

    # --- Database ---
    # No default: the service must not start without a store to talk to.
    database_url: str = Field(..., alias="DATABASE_URL")

    # --- Limits ---
    max_image_bytes: int = Field(2_000_000, alias="MAX_IMAGE_BYTES")
    max_body_bytes: int = Field(6_000_000, alias="MAX_BODY_BYTES")

    # --- Validation ---
    enforce_subtype_match: bool = Field(False, alias="ENFORCE_SUBTYPE_MATCH")

    # --- CORS ---
    # "*" or comma-separated origins in .env
    cors_origin: Annotated[List[str], NoDecode] = Field(["*"], alias="CORS_ORIGIN")

    @field_validator("cors_origin", mode="before")
    @classmethod
    def _parse_origins(cls, v):
        # Accept "a,b,c" or JSON array; pass lists through.
        if v is None:
            return ["*"]
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()] or ["*"]
        return v

    @field_validator("database_url")
    @classmethod
    def _require_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("DATABASE_URL must not be empty")
        return v


settings = Settings()


def configure_cors(app):
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin,
        allow_methods=["*"],
        allow_headers=["*"],
    )
