"""Chainable query helpers exposed on models as `Model.objects`."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import func
from sqlmodel import col, select

if TYPE_CHECKING:
    from sqlmodel import SQLModel
    from sqlmodel.ext.asyncio.session import AsyncSession

ModelT = TypeVar("ModelT", bound="SQLModel")


@dataclass(frozen=True)
class QuerySet(Generic[ModelT]):
    """Immutable query description; each method returns a narrowed copy."""

    model: type[ModelT]
    criteria: tuple[Any, ...] = ()
    ordering: tuple[Any, ...] = ()
    offset_value: int | None = None
    limit_value: int | None = None
    options: dict[str, Any] = field(default_factory=dict)

    def filter(self, *criteria: Any) -> QuerySet[ModelT]:
        return replace(self, criteria=self.criteria + criteria)

    def filter_by(self, **kwargs: Any) -> QuerySet[ModelT]:
        clauses = tuple(col(getattr(self.model, key)) == value for key, value in kwargs.items())
        return self.filter(*clauses)

    def order_by(self, *clauses: Any) -> QuerySet[ModelT]:
        return replace(self, ordering=self.ordering + clauses)

    def offset(self, value: int) -> QuerySet[ModelT]:
        return replace(self, offset_value=value)

    def limit(self, value: int) -> QuerySet[ModelT]:
        return replace(self, limit_value=value)

    def fresh(self) -> QuerySet[ModelT]:
        """Bypass identity-map values so rows reflect the latest committed state."""
        return replace(self, options={**self.options, "populate_existing": True})

    def statement(self) -> Any:
        stmt = select(self.model)
        if self.criteria:
            stmt = stmt.where(*self.criteria)
        if self.ordering:
            stmt = stmt.order_by(*self.ordering)
        if self.offset_value is not None:
            stmt = stmt.offset(self.offset_value)
        if self.limit_value is not None:
            stmt = stmt.limit(self.limit_value)
        if self.options:
            stmt = stmt.execution_options(**self.options)
        return stmt

    async def all(self, session: AsyncSession) -> list[ModelT]:
        result = await session.exec(self.statement())
        return list(result.all())

    async def first(self, session: AsyncSession) -> ModelT | None:
        result = await session.exec(self.limit(1).statement())
        return result.first()

    async def count(self, session: AsyncSession) -> int:
        stmt = select(func.count()).select_from(self.model)
        if self.criteria:
            stmt = stmt.where(*self.criteria)
        result = await session.exec(stmt)
        return int(result.one())


class ModelManager(Generic[ModelT]):
    """Entry point for building querysets for one model class."""

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    def all(self) -> QuerySet[ModelT]:
        return QuerySet(self.model)

    def filter(self, *criteria: Any) -> QuerySet[ModelT]:
        return self.all().filter(*criteria)

    def filter_by(self, **kwargs: Any) -> QuerySet[ModelT]:
        return self.all().filter_by(**kwargs)

    def by_id(self, record_id: Any) -> QuerySet[ModelT]:
        return self.filter_by(id=record_id)


class ManagerDescriptor:
    """Class-level descriptor returning a manager bound to the owner model."""

    def __get__(self, instance: object, owner: type[Any]) -> ModelManager[Any]:
        return ModelManager(owner)
