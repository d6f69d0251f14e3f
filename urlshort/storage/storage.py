"""
Storage module for urlshort (in-memory implementation).

Responsibilities:
    - Keep token -> mapping and original URL -> mapping indexes
    - Hand out ids from a process-local monotonic counter
    - Reject inserts that would reuse a token

Design:
    - Reference implementation of the BaseStorage contract, used by default and
      in tests. Ids are unique only within this process and reset on restart;
      use DBStorage or DynamoStorage when several instances share data.
    - All state changes happen under one lock so the store stays consistent
      even when it is driven without the engine's own lock.
"""

import itertools
import logging
import threading
from typing import Dict, Optional

from ..config import settings
from ..errors import StoreError
from ..models import UrlMapping
from .base import BaseStorage

log = logging.getLogger("urlshort.storage")


class Storage(BaseStorage):
    def __init__(self, start: Optional[int] = None):
        """
        Initialize empty indexes and the id counter.

        Args:
            start (Optional[int]): First id to issue; defaults to settings.COUNTER_START.
                Values below 1 are raised to 1.

        Internal schema:
            self.by_token = {token: UrlMapping}
            self.by_url   = {original_url: UrlMapping}   # first mapping wins
        """
        first = settings.COUNTER_START if start is None else start
        self.by_token: Dict[str, UrlMapping] = {}
        self.by_url: Dict[str, UrlMapping] = {}
        self.last_id = max(1, first) - 1
        self._counter = itertools.count(max(1, first))
        self._lock = threading.Lock()

    def find_by_url(self, original_url: str) -> Optional[UrlMapping]:
        return self.by_url.get(original_url)

    def find_by_token(self, token: str) -> Optional[UrlMapping]:
        return self.by_token.get(token)

    def next_id(self) -> int:
        with self._lock:
            self.last_id = next(self._counter)
            return self.last_id

    def insert(self, ident: int, token: str, original_url: str) -> None:
        """
        Save a new mapping.

        Raises:
            StoreError: If `token` is already taken.
        """
        with self._lock:
            if token in self.by_token:
                raise StoreError(f"token {token!r} already exists")
            mapping = UrlMapping(id=ident, token=token, original_url=original_url)
            self.by_token[token] = mapping
            self.by_url.setdefault(original_url, mapping)
        log.info("stored mapping id=%d token=%s url=%s", ident, token, original_url)
