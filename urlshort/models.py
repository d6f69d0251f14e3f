"""
Record types shared by the engine and the storage backends.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UrlMapping:
    """
    One persisted short-link mapping.

    Attributes:
        id (int): Identifier issued by the store counter (>= 1, never reused).
        token (str): Base62 encoding of `id`.
        original_url (Optional[str]): The long URL, stored verbatim. None only
            when a backend returned a record without the URL attribute.
    """
    id: int
    token: str
    original_url: Optional[str]
