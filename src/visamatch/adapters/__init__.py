"""Board-specific posting adapters."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

from ..schemas import BoardType
from .alba import AlbaPostingAdapter
from .base import board_of
from .fulltime import FulltimePostingAdapter


@runtime_checkable
class PostingAdapter(Protocol):
    """Board-specific posting adapter contract.

    Implementations transform board-native posting payloads into
    ``JobConstraints`` field dictionaries.
    """

    board_type: BoardType

    def can_handle(self, blob: bytes | str | Mapping[str, Any], metadata: dict[str, Any]) -> bool:
        """Return True when the adapter can parse the given posting payload."""

    def parse_posting(self, blob: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
        """Parse a posting and return ``JobConstraints`` fields."""


class AdapterRegistry:
    """Registry mapping board types to posting adapters."""

    def __init__(self, adapters: Iterable[PostingAdapter]):
        self._adapters = {BoardType(adapter.board_type): adapter for adapter in adapters}

    def get(self, board_type: str | BoardType) -> PostingAdapter:
        key = board_type.value if isinstance(board_type, BoardType) else str(board_type).upper()
        try:
            return self._adapters[BoardType(key)]
        except (KeyError, ValueError) as exc:
            raise KeyError(f"Unsupported board type: {board_type!r}") from exc

    def resolve(
        self,
        blob: bytes | str | Mapping[str, Any],
        metadata: dict[str, Any] | None = None,
    ) -> PostingAdapter:
        """Return the first adapter whose ``can_handle`` accepts the payload."""
        metadata = metadata or {}
        for adapter in self._adapters.values():
            if adapter.can_handle(blob, metadata):
                return adapter
        board = metadata.get("boardType")
        if board is None and isinstance(blob, Mapping):
            board = board_of(blob)
        raise KeyError(f"Unsupported board type: {board!r}")

    def board_types(self) -> list[BoardType]:
        return list(self._adapters.keys())


def default_adapter_registry() -> AdapterRegistry:
    """Return the adapter registry covering both job boards."""
    return AdapterRegistry(adapters=[AlbaPostingAdapter(), FulltimePostingAdapter()])


__all__ = [
    "AdapterRegistry",
    "AlbaPostingAdapter",
    "FulltimePostingAdapter",
    "PostingAdapter",
    "default_adapter_registry",
]
