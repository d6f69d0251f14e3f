"""
Main API module for urlshort.

Responsibilities:
    - Expose the shortening engine over HTTP (POST /shorten, GET /{short_url})
    - Report service version/region on GET /_health
    - Map engine errors to status codes (400 / 404 / 500)

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - Storage chosen by the storage factory (memory by default) unless injected.
    - The engine owns dedupe, id allocation, encoding and persistence; routes
      only translate requests and errors.
"""

import logging
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from urlshort.config import settings
from urlshort.engine.shortening_engine import ShorteningEngine
from urlshort.errors import InvalidInputError, NotFoundError, ShortenerError
from urlshort.storage.base import BaseStorage
from urlshort.storage.storage_factory import get_storage

INVALID_BODY_ERROR = "invalid URL shorten request"
SHORTEN_URL_ERROR = "failed to generate shortenedURL"
REDIRECT_ERROR = "shortUrl mapping not found in database"
RESOLVE_ERROR = "failed to retrieve original URL"
SHORT_URL_PARAM_ERROR = "shortUrl parameter is missing"


class ShortenRequest(BaseModel):
    """Request payload for creating a new short link."""
    original_url: str


class ShortenResponse(BaseModel):
    shortened_url: str


def create_app(storage: Optional[BaseStorage] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage (Optional[BaseStorage]): Backend to use; the storage factory
            picks one from the environment when omitted.

    Returns:
        FastAPI: A configured application with its own engine instance.

    Why an app factory?
        - Enables per-test isolation in pytest.
        - Encourages dependency injection and easy swapping of implementations.
        - Avoids accidental global state across workers/processes.
    """
    app = FastAPI(
        title="urlshort",
        description="Counter-based URL shortener with Base62 tokens",
        docs_url="/docs",
    )
    log = logging.getLogger("urlshort.api")

    # basic console logging (optional)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO)

    engine = ShorteningEngine(storage=storage if storage is not None else get_storage())
    app.state.engine = engine

    @app.get("/_health")
    def health_check() -> Dict[str, str]:
        log.info("retrieving details for health check")
        return {"version": settings.API_VERSION, "region": settings.ENVIRONMENT}

    @app.post("/shorten", response_model=ShortenResponse)
    def shorten_url(req: ShortenRequest) -> ShortenResponse:
        """
        Create (or return the existing) short token for a URL.

        Raises:
            HTTPException: 400 for an empty URL, 500 when the store fails.
        """
        log.info("creating shortenedURL from originalURL %s", req.original_url)
        try:
            token = engine.shorten(req.original_url)
        except InvalidInputError:
            raise HTTPException(status_code=400, detail=INVALID_BODY_ERROR)
        except ShortenerError:
            log.exception("failed to create shortened URL")
            raise HTTPException(status_code=500, detail=SHORTEN_URL_ERROR)
        return ShortenResponse(shortened_url=token)

    @app.get("/")
    def missing_short_url() -> None:
        log.error("shortUrl parameter is missing in the request")
        raise HTTPException(status_code=400, detail=SHORT_URL_PARAM_ERROR)

    @app.get("/{short_url}")
    def redirect(short_url: str) -> RedirectResponse:
        """
        Redirect (302) to the original URL stored for `short_url`.

        Raises:
            HTTPException: 404 if the token is unknown, 500 when the store fails.
        """
        log.info("redirecting from shortUrl %s", short_url)
        try:
            original_url = engine.resolve(short_url)
        except InvalidInputError:
            raise HTTPException(status_code=400, detail=SHORT_URL_PARAM_ERROR)
        except NotFoundError:
            log.warning("no mapping for shortUrl %s", short_url)
            raise HTTPException(status_code=404, detail=REDIRECT_ERROR)
        except ShortenerError:
            log.exception("failed to retrieve original URL")
            raise HTTPException(status_code=500, detail=RESOLVE_ERROR)
        return RedirectResponse(url=original_url, status_code=302)

    return app


# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
