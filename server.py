"""
server.py — HTTP API for the GitHub summarizer.

Startup: connects the cache store (optional), opens the GitHub and model clients.
    GET /api/lookup/{username}?force=true|false
    GET /health

Run:
    python server.py
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import DATABASE_URL, GITHUB_TOKEN, HF_TOKEN, PORT
from core.cache import CacheStore
from core.github_client import GitHubClient
from core.lookup import LookupOrchestrator, UpstreamUnavailableError
from core.summary_engine import SummaryEngine
from utils.utils import validate_github_username

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("server")


async def _build_orchestrator() -> LookupOrchestrator:
    store = CacheStore(DATABASE_URL)
    await store.connect()
    return LookupOrchestrator(
        store=store,
        github=GitHubClient(token=GITHUB_TOKEN or None),
        summarizer=SummaryEngine(api_key=HF_TOKEN),
    )


async def _close_orchestrator(orchestrator: LookupOrchestrator) -> None:
    await orchestrator.github.close()
    await orchestrator.summarizer.close()
    await orchestrator.store.close()


def create_app(orchestrator: LookupOrchestrator | None = None) -> FastAPI:
    """Build the API. An injected orchestrator is used as-is and not closed on shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = orchestrator is None
        app.state.orchestrator = await _build_orchestrator() if owned else orchestrator
        log.info(f"Backend ready (cache ready: {app.state.orchestrator.store.is_ready()})")
        yield
        log.info("Shutting down...")
        if owned:
            await _close_orchestrator(app.state.orchestrator)

    app = FastAPI(
        title="GitHub Summarizer API",
        description="GitHub profile + recent repositories + AI summary, cached per username.",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/api/lookup/{username}")
    async def lookup(username: str, request: Request, force: bool = False):
        is_valid, err_msg = validate_github_username(username)
        if not is_valid:
            return JSONResponse(status_code=500, content={"error": err_msg})

        try:
            result = await request.app.state.orchestrator.lookup(username, force_refresh=force)
        except UpstreamUnavailableError as exc:
            log.error(f"Lookup failed for {username}: {exc}")
            return JSONResponse(status_code=500, content={"error": str(exc)})
        except Exception:
            log.exception(f"Unexpected error looking up {username}")
            return JSONResponse(status_code=500, content={"error": "Internal server error"})

        return result.to_response()

    @app.get("/health")
    async def health(request: Request):
        return {
            "status":      "ok",
            "cache_ready": request.app.state.orchestrator.store.is_ready(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=PORT)
