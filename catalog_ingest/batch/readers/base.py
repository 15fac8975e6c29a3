"""
Row reader contract.
"""

from typing import Any, Protocol, runtime_checkable

from catalog_ingest.core.models import Row


@runtime_checkable
class RowReader(Protocol):
    """Turns raw input into validated rows, raising ParseError otherwise."""

    def parse(self, raw: Any) -> list[Row]:
        ...
