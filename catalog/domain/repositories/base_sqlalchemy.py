from __future__ import annotations

from typing import Any, Generic, Sequence, Type

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from catalog.domain.repositories.base import ID, IRepository, T


class SQLAlchemyRepository(Generic[T, ID], IRepository[T, ID]):
    """Repository over one session. Subclasses set ``order_by`` for listings."""

    order_by: Sequence[Any] = ()

    def __init__(self, model: Type[T], db: Session):
        self.model = model
        self.db = db

    def add(self, obj: T) -> T:
        self.db.add(obj)
        return obj

    def get(self, id_: ID) -> T | None:
        return self.db.get(self.model, id_)

    def exists(self, id_: ID) -> bool:
        return id_ is not None and self.get(id_) is not None

    def get_all(self) -> Sequence[T]:
        return self.db.scalars(select(self.model).order_by(*self.order_by)).all()

    def filter_by(self, *criteria: Any) -> Sequence[T]:
        stmt = select(self.model).where(*criteria).order_by(*self.order_by)
        return self.db.scalars(stmt).all()

    def count(self, *criteria: Any) -> int:
        stmt = select(func.count()).select_from(self.model).where(*criteria)
        return self.db.scalar(stmt) or 0

    def delete(self, obj: T) -> None:
        self.db.delete(obj)

    def flush(self) -> None:
        self.db.flush()
