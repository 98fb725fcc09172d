# recorder/app/factory.py
from __future__ import annotations
import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from recorder.app.globals import config, initConfig
from recorder.app.web import createRouter
from recorder.core.logging import clearLogContext, configureLogging, setLogContext
from recorder.service import BlueprintRecorder

__all__ = ["createApp"]



def createApp(recorder: BlueprintRecorder, *, setupLogging: bool = True) -> FastAPI:
    initConfig()
    if setupLogging:
        configureLogging()

    logger = logging.getLogger(__name__)

    app = FastAPI(title="Blueprint Recorder")

    # ----- CORS: Playground reads the blueprint with credentials -----
    corsOrigins = config("http.cors.allowOrigins", ["https://playground.wordpress.net"])
    if not isinstance(corsOrigins, list):
        corsOrigins = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=corsOrigins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def requestLogContext(request: Request, callNext):
        setLogContext(requestId=uuid.uuid4().hex[:12])
        try:
            return await callNext(request)
        finally:
            clearLogContext()

    prefix = str(config("http.routePrefix", "/playground/v1"))
    app.include_router(createRouter(recorder, prefix=prefix))
    logger.info("Blueprint endpoint mounted at %s/blueprint", prefix)
    return app
