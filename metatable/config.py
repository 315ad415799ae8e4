from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from metatable.services.selection import DEFAULT_ALLOWED_EXTENSIONS


ENV_UPLOAD_DIR = "METATABLE_UPLOAD_DIR"
ENV_WORKERS = "METATABLE_WORKERS"
ENV_LOG_LEVEL = "METATABLE_LOG_LEVEL"
ENV_HOST = "METATABLE_HOST"
ENV_PORT = "METATABLE_PORT"
ENV_ALLOWED_EXTENSIONS = "METATABLE_ALLOWED_EXTENSIONS"


@dataclass(frozen=True)
class Settings:
	upload_dir: Path = Path("uploads")
	workers: int = 1
	log_level: str = "INFO"
	host: str = "0.0.0.0"
	port: int = 8081
	allowed_extensions: Tuple[str, ...] = DEFAULT_ALLOWED_EXTENSIONS


def _int(env: Mapping[str, str], key: str, default: int) -> int:
	raw = env.get(key)
	if raw is None or not raw.strip():
		return default
	try:
		return int(raw)
	except ValueError:
		raise ValueError(f"{key} must be an integer, got {raw!r}")


def _extensions(raw: str) -> Tuple[str, ...]:
	exts = []
	for part in raw.split(","):
		part = part.strip().lower()
		if not part:
			continue
		exts.append(part if part.startswith(".") else "." + part)
	return tuple(exts)


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
	"""Build Settings from METATABLE_* environment variables, falling back to defaults."""
	env = os.environ if env is None else env
	defaults = Settings()
	allowed = env.get(ENV_ALLOWED_EXTENSIONS)
	return Settings(
		upload_dir=Path(env.get(ENV_UPLOAD_DIR) or defaults.upload_dir),
		workers=max(1, _int(env, ENV_WORKERS, defaults.workers)),
		log_level=(env.get(ENV_LOG_LEVEL) or defaults.log_level).upper(),
		host=env.get(ENV_HOST) or defaults.host,
		port=_int(env, ENV_PORT, defaults.port),
		allowed_extensions=_extensions(allowed) if allowed else defaults.allowed_extensions,
	)
