"""Cursor Pagination.

Coinbase Pro pages list endpoints with opaque ``before``/``after`` cursors.
The request side sends them as query params; the response side returns
them out-of-band in the ``CB-BEFORE`` and ``CB-AFTER`` headers, so the
page is attached to the decoded result after JSON decoding.
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, runtime_checkable

from src.coinbasepro.exceptions import ValidationError

MAX_LIMIT = 100

HEADER_BEFORE = "CB-BEFORE"
HEADER_AFTER = "CB-AFTER"


@dataclass
class Pagination:
    """Page cursors returned by the server."""
    before: str = ""
    after: str = ""

    def not_empty(self) -> bool:
        return self.before != "" and self.after != ""

    def to_api(self) -> dict:
        return {"before": self.before, "after": self.after}

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> Optional["Pagination"]:
        """Extract a page when both cursor headers are present.

        ``headers`` is expected to be case-insensitive (httpx.Headers).
        """
        before = headers.get(HEADER_BEFORE, "")
        after = headers.get(HEADER_AFTER, "")
        if before and after:
            return cls(before=before, after=after)
        return None


@runtime_checkable
class Paged(Protocol):
    """Result types that accept header-derived pagination."""
    page: Optional[Pagination]


@dataclass
class PaginationParams:
    """Request-side paging: one cursor and an optional limit.

    A limit of 0 means "use the server default" (100).
    """
    before: str = ""
    after: str = ""
    limit: int = 0

    def validate(self) -> None:
        if self.before and self.after:
            raise ValidationError(
                "only one of 'before' or 'after' allowed", field="before"
            )
        if self.limit < 0 or self.limit > MAX_LIMIT:
            raise ValidationError(
                f"'limit' {self.limit} is outside of allowed range [0,{MAX_LIMIT}]",
                field="limit",
            )

    def params(self) -> list[str]:
        params = []
        if self.before:
            params.append(f"before={self.before}")
        if self.after:
            params.append(f"after={self.after}")
        if self.limit:
            params.append(f"limit={self.limit}")
        return params


def apply_page(result: object, page: Optional[Pagination]) -> None:
    """Attach ``page`` to ``result`` if it participates in paging."""
    if page is not None and isinstance(result, Paged):
        result.page = page


def query(params: list[str]) -> str:
    if not params:
        return ""
    return "?" + "&".join(params)
