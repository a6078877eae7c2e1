import logging
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from vidrelay.api import health, info, download
from vidrelay.config.settings import Config, config as default_config
from vidrelay.core.errors import install_exception_handlers, install_request_id
from vidrelay.core.logging import setup_logging
from vidrelay.core.state import RuntimeState
from vidrelay.infra.rate_limit import InMemoryRateLimiter
from vidrelay.infra.storage import purge_download_dir
from vidrelay.services.ytdlp import YtDlpClient

logger = logging.getLogger(__name__)

def create_app(
    cfg: Optional[Config] = None,
    extractor: Optional[YtDlpClient] = None,
    rate_limiter: Optional[InMemoryRateLimiter] = None
) -> FastAPI:
    cfg = cfg or default_config
    setup_logging(cfg.logging)

    app = FastAPI(
        title=cfg.api.title,
        description=cfg.api.description,
        version=cfg.api.version,
        docs_url="/docs" if cfg.api.debug else None,
        redoc_url=None
    )
    app.state.runtime = RuntimeState(
        config=cfg,
        extractor=extractor or YtDlpClient(cfg),
        rate_limiter=rate_limiter or InMemoryRateLimiter.from_config(cfg.rate_limit)
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.api.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )
    install_request_id(app)
    install_exception_handlers(app)

    # Routes
    app.include_router(health.router, tags=["Health"])
    app.include_router(info.router, tags=["Info"])
    app.include_router(download.router, tags=["Download"])

    @app.on_event("startup")
    async def startup_event():
        # Files left behind by an ungraceful shutdown
        purge_download_dir(cfg.download.directory)
        logger.info(f"Listening on port {cfg.port}")

    return app

app = create_app()

def run() -> None:
    import uvicorn
    uvicorn.run(app, host=default_config.host, port=default_config.port, log_level=default_config.logging.level.lower())
