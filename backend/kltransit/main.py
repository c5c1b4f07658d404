import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from dotenv import load_dotenv

load_dotenv()  # Load .env before any other imports that read env vars

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from kltransit.config import STATIC_DIRS, Settings
from kltransit.fare_store import FareModelStore, load_fare_model
from kltransit.fare_trainer import FareModelTrainer
from kltransit.llm_client import LLMCollaborator, create_collaborator
from kltransit.normalize import load_line_aliases

logger = logging.getLogger("kltransit")
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())


def create_app(settings: Optional[Settings] = None, collaborator: Optional[LLMCollaborator] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load the persisted fare model and set up the LLM collaborator."""
        store = FareModelStore(load_fare_model(settings.fare_model_path))
        app.state.fare_store = store
        if store.get() is None:
            logger.info("No fare model yet. POST /ai/train-fare-model to train one")

        aliases = load_line_aliases(settings.line_aliases_path)
        app.state.line_aliases = aliases

        # Shared httpx client for connection pooling across LLM calls
        http_client = httpx.AsyncClient(timeout=settings.llm_timeout_seconds)
        app.state.http_client = http_client

        app.state.collaborator = collaborator or create_collaborator(settings, http_client)
        app.state.trainer = FareModelTrainer(
            store=store,
            collaborator=app.state.collaborator,
            fares_path=settings.fares_path,
            stations_path=settings.stations_path,
            model_path=settings.fare_model_path,
            aliases=aliases,
        )

        yield

        logger.info("Shutting down...")
        await http_client.aclose()

    app = FastAPI(title="KL Transit AI API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from kltransit.routes import router

    app.include_router(router)

    for name in STATIC_DIRS:
        directory = settings.data_root / name
        if directory.is_dir():
            app.mount(f"/{name}", StaticFiles(directory=directory), name=name)
            logger.info(f"Serving /{name} from {directory}")

    return app


app = create_app()


def run() -> None:
    settings = app.state.settings
    logger.info(f"AI estimation server starting on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
