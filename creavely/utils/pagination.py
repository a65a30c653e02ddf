# creavely/utils/pagination.py — Pagination helpers

from pydantic import BaseModel

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10


class PaginationParams(BaseModel):
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def normalized(cls, page: int | None, page_size: int | None) -> "PaginationParams":
        """Replace missing or non-positive values with the defaults."""
        return cls(
            page=page if page and page > 0 else DEFAULT_PAGE,
            page_size=page_size if page_size and page_size > 0 else DEFAULT_PAGE_SIZE,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    def total_pages(self, total: int) -> int:
        return (total + self.page_size - 1) // self.page_size
