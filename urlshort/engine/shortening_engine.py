"""
ShorteningEngine module for urlshort.

Responsibilities:
    - Dedupe resubmitted URLs (same URL -> same token, no new id consumed)
    - Allocate exactly one id per distinct URL from the store counter
    - Encode the id into a Base62 token and persist the mapping
    - Resolve tokens back to the stored original URL

Design notes:
    - Storage is an injected dependency (any BaseStorage implementation).
    - The counter lives in the store; the engine only calls `next_id()`.
    - A single lock serializes `shorten` and `resolve` inside one process.
      It is not a distributed lock: two processes sharing a store can still
      both miss on `find_by_url` for a brand-new URL and each write a mapping.
    - An id issued by `next_id()` is lost if `insert()` fails afterwards.
      Nothing is retried or compensated; a gap is safer than reuse.
    - No retries. Any collaborator failure surfaces as StoreError.

LLM Prompt Example:
    "Explain why a counter-based id plus Base62 encoding yields collision-free
    tokens, and why a process-local lock cannot replace a unique constraint
    when several instances share one store."
"""

import contextlib
import logging
import threading
from typing import Iterator, Optional

from ..errors import InvalidInputError, NotFoundError, StoreError
from ..storage.base import BaseStorage
from .encoder import encode

log = logging.getLogger("urlshort.engine")


@contextlib.contextmanager
def _store_call(operation: str) -> Iterator[None]:
    """Wrap anything a store raises (other than StoreError) into StoreError."""
    try:
        yield
    except StoreError:
        raise
    except Exception as exc:
        raise StoreError(f"{operation} failed: {exc}") from exc


class ShorteningEngine:
    """
    Coordinates dedupe, id allocation, encoding and persistence of short links.

    LLM Prompt Example:
        "Show how DI of a narrow storage contract lets the same engine run on
        an in-memory map, PostgreSQL or DynamoDB without code changes."
    """

    def __init__(self, storage: BaseStorage, lock: Optional[threading.Lock] = None):
        """
        Args:
            storage (BaseStorage): Backend providing lookups, counter and insert.
            lock (Optional[threading.Lock]): Coordination lock; a fresh one if omitted.
        """
        self.storage = storage
        self._lock = lock if lock is not None else threading.Lock()

    def shorten(self, original_url: str) -> str:
        """
        Return the token for `original_url`, minting one on first sight.

        Rules:
            - Empty URL -> InvalidInputError, no store calls.
            - Existing mapping (exact, case-sensitive match) -> its token.
            - Otherwise: next_id -> encode -> insert -> new token.

        Raises:
            InvalidInputError: If `original_url` is empty.
            StoreError: On any storage failure, or a record missing its token.
        """
        if not original_url:
            raise InvalidInputError("original URL must be non-empty")

        with self._lock:
            with _store_call("find_by_url"):
                existing = self.storage.find_by_url(original_url)
            if existing is not None:
                if not existing.token:
                    raise StoreError("stored mapping is missing its token")
                log.debug("dedupe hit for %s -> %s", original_url, existing.token)
                return existing.token

            log.info("shortening original URL: %s", original_url)
            with _store_call("next_id"):
                ident = self.storage.next_id()
            if ident == 0:
                # 0 encodes to the reserved "0" token; counters start at 1
                raise StoreError("counter returned reserved id 0")
            token = encode(ident)

            with _store_call("insert"):
                self.storage.insert(ident, token, original_url)
            log.info("generated token %s for id %d", token, ident)
            return token

    def resolve(self, token: str) -> str:
        """
        Return the original URL stored for `token`, verbatim.

        Raises:
            InvalidInputError: If `token` is empty.
            NotFoundError: If no mapping exists or it has no original URL.
            StoreError: On any storage failure.
        """
        if not token:
            raise InvalidInputError("token must be non-empty")

        with self._lock:
            log.info("resolving token %s", token)
            with _store_call("find_by_token"):
                mapping = self.storage.find_by_token(token)
            if mapping is None or not mapping.original_url:
                raise NotFoundError(f"no mapping for token {token!r}")
            return mapping.original_url
