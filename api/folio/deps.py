from __future__ import annotations

from dataclasses import dataclass
from typing import Generator

from fastapi import Query
from sqlalchemy.orm import Session

from .db import get_session
from .settings import FOLIO_DEFAULT_PAGE_SIZE


def get_db() -> Generator[Session, None, None]:
    yield from get_session()


@dataclass
class Paging:
    page: int
    limit: int


def get_paging(
    page: int = Query(1, description="1-based page number"),
    limit: int = Query(FOLIO_DEFAULT_PAGE_SIZE, description="Items per page"),
) -> Paging:
    # Bounds are checked by the listing services so errors share one format
    return Paging(page=page, limit=limit)
