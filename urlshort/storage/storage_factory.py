"""
Storage factory – switch storage backend from config (lazy env version)
======================================================================

Centralizes selection of the storage backend (in-memory, PostgreSQL or
DynamoDB) so the rest of the app stays ignorant of where data lives.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the psycopg / boto3 backends **only if** selected.

Environment variables
---------------------
- URLSHORT_STORAGE_BACKEND: "memory" (default), "postgres" or "dynamodb"
- URLSHORT_DB_DSN:          DSN string if backend=="postgres"
- URLSHORT_DYNAMO_TABLE:    table name if backend=="dynamodb" (default "url-mapping")
- URLSHORT_DYNAMO_REGION:   AWS region if backend=="dynamodb" (default "us-east-1")
"""

from typing import Optional
import logging
import os

from .base import BaseStorage
from .storage import Storage

log = logging.getLogger("urlshort.storage")


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a BaseStorage implementation based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory", "postgres" or "dynamodb". If omitted, reads URLSHORT_STORAGE_BACKEND.
    kwargs : dict
        Extra args for the backend constructor: dsn="..." for postgres;
        table_name=..., region=..., table=... for dynamodb; start=... for any backend.

    Raises
    ------
    ValueError
        Unknown backend, or postgres selected without a DSN.
    """
    be = (backend or os.getenv("URLSHORT_STORAGE_BACKEND", "memory")).strip().lower()
    log.info("Selected storage backend: %r", be)
    start = kwargs.get("start")

    if be == "memory":
        return Storage(start=start)

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("URLSHORT_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env URLSHORT_DB_DSN)")
        from .db_storage import DBStorage
        return DBStorage(dsn=dsn, start=start)

    if be == "dynamodb":
        from .dynamo_storage import DynamoStorage
        return DynamoStorage(
            table_name=kwargs.get("table_name") or os.getenv("URLSHORT_DYNAMO_TABLE"),
            region=kwargs.get("region") or os.getenv("URLSHORT_DYNAMO_REGION"),
            table=kwargs.get("table"),
            start=start,
        )

    raise ValueError(f"Unknown storage backend: {be!r}")
