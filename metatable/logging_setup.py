from __future__ import annotations

import logging


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
	logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
	# basicConfig does nothing once the root logger has handlers
	logging.getLogger("metatable").setLevel(getattr(logging, level.upper(), logging.INFO))
	# Pillow logs every plugin it tries at DEBUG
	logging.getLogger("PIL").setLevel(logging.INFO)
