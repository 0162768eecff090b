from __future__ import annotations  # FastAPI server exposing the interview hub

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.hub import router as hub_router
from api.routes import router as results_router
from config import COMPLETION_KEY, bind_model, is_bound, route_for, settings
from llm_gateway import GatewayCompleter
from storage.migrate import migrate


logger = logging.getLogger(__name__)


def _bind_default_completer() -> None:  # Keep an already bound completer (tests bind fakes)
    if is_bound(COMPLETION_KEY):
        return
    route = route_for(COMPLETION_KEY)
    bind_model(COMPLETION_KEY, GatewayCompleter(route))
    logger.info("Bound text completion to route '%s' (%s)", route.name, route.model)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:  # Prepare storage and the model before serving
    migrate(settings.DB_PATH)
    _bind_default_completer()
    yield


def create_app() -> FastAPI:  # Application factory
    application = FastAPI(title="Interview Coach API", lifespan=lifespan)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.include_router(hub_router)
    application.include_router(results_router)
    return application


app = create_app()
