import math
from dataclasses import dataclass, replace

from .config import PAGE_SIZE


@dataclass(frozen=True)
class PaginationState:
    """Offset-based pagination derived from the last applied total."""
    offset: int = 0
    page_size: int = PAGE_SIZE
    total: int = 0

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")
        if self.offset < 0 or self.offset % self.page_size:
            raise ValueError("offset must be a non-negative multiple of page_size")
        if self.total < 0:
            raise ValueError("total must be >= 0")

    @property
    def can_prev(self) -> bool:
        return self.offset > 0

    @property
    def can_next(self) -> bool:
        return self.offset + self.page_size < self.total

    @property
    def page_number(self) -> int:
        return self.offset // self.page_size + 1

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))

    def advance(self) -> "PaginationState":
        if not self.can_next:
            return self
        return replace(self, offset=self.offset + self.page_size)

    def retreat(self) -> "PaginationState":
        if not self.can_prev:
            return self
        return replace(self, offset=max(0, self.offset - self.page_size))

    def as_dict(self) -> dict:
        return {
            "offset": self.offset,
            "page_size": self.page_size,
            "total": self.total,
            "page_number": self.page_number,
            "page_count": self.page_count,
            "can_prev": self.can_prev,
            "can_next": self.can_next,
        }
