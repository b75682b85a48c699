"""
catalog/models.py -- Domain dataclass for catalog articles.

Pure data container with zero logic. Articles have no owner: any
authenticated caller may list them, and who may create them is decided by
the auth layer before the store is ever called.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Article:
    """A catalog entry.

    id is None before the record is written to the database.
    """

    title: str
    description: str
    price: float
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
