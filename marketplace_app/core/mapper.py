import math
from typing import Iterable, Type, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)
P = TypeVar("P", bound=BaseModel)


class ORMMapper:
    @staticmethod
    def one(item, schema: Type[T]) -> T:
        return schema.model_validate(item)

    @staticmethod
    def many(items: Iterable, schema: Type[T]) -> list[T]:
        return [schema.model_validate(item) for item in items]

    @classmethod
    def page(
        cls,
        items: Iterable,
        schema: Type[T],
        page_schema: Type[P],
        *,
        total: int,
        page: int,
        per_page: int,
    ) -> P:
        return page_schema(
            items=cls.many(items, schema),
            total=total,
            page=page,
            per_page=per_page,
            pages=math.ceil(total / per_page) if total else 0,
        )
