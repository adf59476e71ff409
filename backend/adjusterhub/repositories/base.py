"""Generic base repository with reusable CRUD and pagination helpers."""

from typing import Generic, List, Optional, Tuple, Type, TypeVar

from sqlalchemy.orm import Query, Session

from adjusterhub.database import Base

T = TypeVar("T", bound=Base)

LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """Substring pattern with LIKE wildcards in ``term`` escaped (pair with ``escape=LIKE_ESCAPE``)."""
    escaped = term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class BaseRepository(Generic[T]):
    """Thin data-access layer over SQLAlchemy.

    Subclasses add domain-specific queries.
    Repositories only modify the session (add/delete/flush); the caller
    decides when to commit or roll back.
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model

    # ── reads ────────────────────────────────────────────────────────

    def get(self, id: int) -> Optional[T]:
        return self.db.get(self.model, id)

    def count(self) -> int:
        return self.db.query(self.model).count()

    @staticmethod
    def paginate(query: Query, page: int, limit: int) -> Tuple[List[T], int]:
        """Return one page of ``query`` and the unpaginated total."""
        total = query.order_by(None).count()
        items = query.offset((page - 1) * limit).limit(limit).all()
        return items, total

    # ── writes ───────────────────────────────────────────────────────

    def create(self, obj: T) -> T:
        """Add object to session (caller must commit)."""
        self.db.add(obj)
        self.db.flush()
        return obj

    def update(self, obj: T) -> T:
        """Flush pending changes on an attached object to surface constraint errors."""
        self.db.flush()
        return obj

    def delete(self, id: int) -> bool:
        """Mark object for deletion (caller must commit)."""
        obj = self.get(id)
        if obj:
            self.db.delete(obj)
            self.db.flush()
            return True
        return False
