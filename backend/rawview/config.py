"""Runtime configuration for the raw volume slice server.

Values come from the environment (or a local ``.env``). Only fields used by
the application, services and CLI live here.
"""

import os
from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    # Application info
    app_name: str = "Raw Volume Slice API"
    app_version: str = "1.0.0"
    app_description: str = "API for slicing and windowing headerless raw volume files"
    app_api_version: str = "v1"
    debug: bool = False

    # Server / network
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8080",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8080",
    ]
    gzip_minimum_size: int = 1024

    # Data root (raw volume files)
    data_root_path: Path = Field(default_factory=
        lambda: Path(os.getenv("DATA_ROOT_PATH", "data")))
    supported_extensions: List[str] = [".raw", ".bin"]

    # File cache; 1024 MB cap per file to keep a whole volume in memory
    max_file_size: int = 1024 * 1024 * 1024
    max_cached_files: int = 8

    # Viewer defaults
    default_data_type: str = "float32"
    default_little_endian: bool = True
    default_plane: str = "axial"
    histogram_bins: int = 256

    # Elements decoded per step when scanning a whole volume for min/max
    extrema_chunk_elements: int = 4 * 1024 * 1024

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
