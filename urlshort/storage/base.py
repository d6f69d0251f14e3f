"""
Base storage interface for urlshort.

Purpose:
    Define the four operations the shortening engine consumes, so that
    in-memory, PostgreSQL and DynamoDB backends are interchangeable without
    touching engine code.

Contract:
    - Lookups return a `UrlMapping` or None; "not found" is not an error.
    - `next_id` is atomic and globally unique for the backing store, strictly
      increasing, and never returns 0.
    - `insert` is insert-if-absent on the token.
    - Backend failures (connectivity, throttling, malformed records) are raised
      as `StoreError`.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import UrlMapping


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod  # pragma: no cover
    def find_by_url(self, original_url: str) -> Optional[UrlMapping]:
        """
        Return the mapping whose original URL equals `original_url` exactly.

        May be a scan or a secondary-index lookup depending on the backend.

        LLM Prompt Example:
            "Show how a secondary index on long URLs turns dedupe into an O(1) lookup."
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def find_by_token(self, token: str) -> Optional[UrlMapping]:
        """Primary-key lookup by token."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def next_id(self) -> int:
        """
        Atomically advance the shared counter and return the new value.

        LLM Prompt Example:
            "Explain how to make a counter increment atomic with SQL UPSERT ... RETURNING
            or a DynamoDB UpdateItem with if_not_exists."
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def insert(self, ident: int, token: str, original_url: str) -> None:
        """
        Persist a new mapping.

        Raises:
            StoreError: If the token already exists or the write fails.
        """
        raise NotImplementedError
