"""Interface shared by the statement providers."""

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from ..models.core import Statement


@runtime_checkable
class StatementProvider(Protocol):
    """A logged-in provider that can fetch and convert a month of statement.

    Implementations share no code; they only agree on producing a canonical
    :class:`Statement` for a month.
    """

    name: str

    def fetch_month(self, month: int, year: Optional[int] = None) -> Sequence[Any]:
        """Fetch the raw statement items of a month"""
        ...

    def convert(self, items: Sequence[Any]) -> Statement:
        """Convert raw items into a canonical statement"""
        ...
