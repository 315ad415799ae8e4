from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from metatable.config import Settings, load_settings
from metatable.logging_setup import configure_logging
from metatable.routers.upload_folder import router as upload_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
	settings = settings or load_settings()
	configure_logging(settings.log_level)

	app = FastAPI(title="Metatable - Image Metadata Report", version="0.1.0")
	app.state.settings = settings

	# CORS (adjust origins in production)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=["*"],
		allow_credentials=False,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	# Routers
	app.include_router(upload_router)

	return app


app = create_app()


def serve() -> None:
	import uvicorn

	settings = app.state.settings
	uvicorn.run("metatable.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
	# Local dev server: uvicorn metatable.main:app --reload
	serve()
