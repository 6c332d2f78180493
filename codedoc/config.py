from __future__ import annotations

import logging
import sys
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	"""Service settings loaded from environment variables and ``.env``."""

	model_config = SettingsConfigDict(
		env_file=".env",
		env_file_encoding="utf-8",
		case_sensitive=False,
		extra="ignore",
	)

	host: str = "127.0.0.1"
	port: int = 3000
	# Uploaded archives are extracted under <upload_path>/<job_id>
	upload_path: str = "./uploads"
	output_path: str = "./output"
	max_file_size: int = 100 * 1024 * 1024
	log_level: str = "INFO"
	cors_origins: List[str] = ["*"]


settings = Settings()


def setup_logging(level: str = "INFO") -> None:
	logging.basicConfig(
		level=level.upper(),
		format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
		datefmt="%H:%M:%S",
		stream=sys.stderr,
		force=True,
	)
	logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
