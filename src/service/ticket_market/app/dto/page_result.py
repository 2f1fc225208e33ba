"""Pagination DTO."""

import math
from typing import Generic, TypeVar

import attrs


_T = TypeVar('_T')


@attrs.define(frozen=True)
class PageResult(Generic[_T]):
    items: list[_T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self, *, total_key: str = 'total_items') -> dict[str, int | bool]:
        return {
            'current_page': self.page,
            'total_pages': self.total_pages,
            total_key: self.total,
            'has_next_page': self.page < self.total_pages,
            'has_prev_page': self.page > 1,
        }
