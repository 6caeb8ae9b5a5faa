from dataclasses import dataclass
from typing import Generic, Iterator, List, Optional, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of an ordered result set plus what a prev/next control needs."""

    items: List[T]
    page: int
    per_page: int
    total: int

    @property
    def pages(self) -> int:
        if self.total == 0:
            return 1
        return (self.total + self.per_page - 1) // self.per_page

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def prev_num(self) -> Optional[int]:
        return self.page - 1 if self.has_prev else None

    @property
    def next_num(self) -> Optional[int]:
        return self.page + 1 if self.has_next else None

    def iter_pages(self) -> Iterator[int]:
        return iter(range(1, self.pages + 1))

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def paginate(db: Session, stmt: Select, page: int = 1, per_page: int = 30) -> Page:
    """Run ``stmt`` with LIMIT/OFFSET.

    ``stmt`` must already carry an ORDER BY so pages are stable. A page past
    the end comes back empty rather than raising.
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    if per_page < 1:
        raise ValueError("per_page must be >= 1")

    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    offset = (page - 1) * per_page
    items = list(db.scalars(stmt.limit(per_page).offset(offset)).all())
    return Page(items=items, page=page, per_page=per_page, total=total or 0)
