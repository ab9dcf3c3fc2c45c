from dotenv import load_dotenv
load_dotenv()

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import config
from errors import AccountError
from routes import account, pages
from sessions import SessionRegistry
from store import CredentialStore

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    # No-op when the root logger already has handlers
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Optional[config.Settings] = None) -> FastAPI:
    configure_logging()
    settings = settings or config.Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Compact and index the users file, then open a fresh session registry."""
        store = CredentialStore(settings.users_file)
        store.compact()
        store.load()

        app.state.store = store
        app.state.sessions = SessionRegistry(ttl=timedelta(seconds=settings.session_ttl_seconds))

        yield

        app.state.sessions.clear()

    app = FastAPI(title="Frontdesk", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings

    @app.exception_handler(AccountError)
    async def account_error_handler(request: Request, exc: AccountError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message},
        )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "frontdesk"}

    app.include_router(account.router)
    # Catch-all static route, must come last
    app.include_router(pages.router)

    return app


app = create_app()


if __name__ == "__main__":
    logger.info("Serving %s on http://localhost:%d", config.PUBLIC_DIR, config.PORT)
    uvicorn.run(app, host=config.HOST, port=config.PORT)
