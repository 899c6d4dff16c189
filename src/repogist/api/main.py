# Description: FastAPI application exposing the repository ingestion pipeline.
#              POST /ingest fetches a repository archive, renders its tree and
#              concatenated text, and returns both plus a combined document.
#              Each request runs on a worker thread under a deadline; on expiry
#              every workspace is swept and 504 is returned.
# Core Lib Links:
# - FastAPI: https://fastapi.tiangolo.com/
# - Uvicorn: https://www.uvicorn.org/
# Sample I/O:
#   POST /ingest {"url": "https://github.com/acme/widgets", "ignorePatterns": ["**/*.md"]}
#   -> 200 {"message": "Repository ingested successfully", "data": {"tree": ..., "content": ..., "normalized": ...}}

import asyncio
from functools import partial
from typing import Optional, Tuple

import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from repogist import __version__
from repogist.api.schemas import ErrorResponse, IngestData, IngestRequest, IngestResponse
from repogist.config import CONFIG
from repogist.core.archive_fetcher import ArchiveFetcher
from repogist.core.errors import IngestionError
from repogist.core.pipeline import build_components, ingest_repository
from repogist.core.supervisor import RequestSupervisor, supervised
from repogist.core.url_normalizer import is_git_url
from repogist.core.workspace import WorkspaceManager
from repogist.log_utils import configure_logging

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


# --- Dependencies ---
def get_components() -> Tuple[WorkspaceManager, ArchiveFetcher]:
    """Workspace manager and fetcher built from CONFIG for each request."""
    return build_components(CONFIG)


def get_request_timeout() -> float:
    return CONFIG["server"]["request_timeout_seconds"]


def _error(status_code: int, error: str, message: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


def _log_abandoned(task: "asyncio.Future") -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.warning(f"Abandoned ingestion finished with error: {error}")


async def read_ingest_request(request: Request) -> IngestRequest:
    """
    Parse an /ingest body sent as JSON or as an HTML form.

    A missing, malformed or non-object JSON body reads as an empty request,
    so the handler answers it with "URL is required".

    Raises:
        ValidationError: ignorePatterns is neither a string nor a list of strings
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        patterns = form.getlist("ignorePatterns") or form.getlist("ignorePatterns[]")
        data = {"url": form.get("url"), "ignorePatterns": [str(p) for p in patterns]}
    else:
        try:
            data = await request.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
    return IngestRequest.model_validate(data)


# --- Application factory ---
def create_app() -> FastAPI:
    app = FastAPI(
        title="repogist",
        version=__version__,
        description="Turns a Git repository URL into a directory tree and concatenated file contents.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CONFIG["server"]["cors_origins"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    @app.get("/")
    async def health():
        return {"status": "ok", "service": "repogist", "version": __version__}

    @app.post(
        "/ingest",
        response_model=IngestResponse,
        openapi_extra={
            "requestBody": {
                "content": {
                    "application/json": {"schema": IngestRequest.model_json_schema()},
                    "application/x-www-form-urlencoded": {"schema": IngestRequest.model_json_schema()},
                },
            },
        },
    )
    async def ingest(
        request: Request,
        components: Tuple[WorkspaceManager, ArchiveFetcher] = Depends(get_components),
        timeout: float = Depends(get_request_timeout),
    ):
        try:
            payload = await read_ingest_request(request)
        except ValidationError as e:
            return _error(400, "Invalid ignorePatterns", e.errors()[0]["msg"])

        url = payload.url.strip() if payload.url else ""
        if not url:
            return _error(400, "URL is required")
        if not is_git_url(url):
            return _error(400, "Invalid Git repository URL")

        manager, fetcher = components
        supervisor = RequestSupervisor(manager, timeout)
        work = supervised(
            partial(ingest_repository, url, payload.ignorePatterns, manager, fetcher),
            supervisor,
        )
        task = asyncio.ensure_future(asyncio.to_thread(work))

        logger.info(f"Ingesting {url} (timeout {timeout}s)")
        try:
            try:
                result = await asyncio.wait_for(asyncio.shield(task), timeout)
            except asyncio.TimeoutError:
                if await asyncio.to_thread(supervisor.expire):
                    task.add_done_callback(_log_abandoned)
                    return _error(504, "Request timed out", f"Processing exceeded {timeout} seconds")
                # Finished while the deadline was being handled
                result = await task
        except IngestionError as e:
            logger.error(f"Ingestion of {url} failed: {e}")
            return _error(500, "Failed to process repository", str(e))
        except Exception as e:
            logger.exception(f"Unexpected failure ingesting {url}")
            return _error(500, "Failed to process repository", str(e))

        return IngestResponse(data=IngestData(**result.to_dict()))

    return app


app = create_app()


def main() -> None:
    configure_logging(CONFIG["logging"]["level"], log_file="logs/repogist_api.log")
    host = CONFIG["server"]["host"]
    port = CONFIG["server"]["port"]
    logger.info(f"Server is running on {host}:{port} ({CONFIG['server']['environment']})")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
