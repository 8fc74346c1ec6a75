"""
Field marker for nested-path serialization.

FlatPath enables generation-time discovery of fields that must be encoded at the
end of a nested key path. Uses Annotated pattern (Pydantic v2 recommended approach).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class FlatPath:
    """
    Mark a field as living at the end of a nested key path on the wire.

    Example:
        class Item(pydantic.BaseModel):
            x: Annotated[int, FlatPath(path=['a', 'b', 'c'])]

        # Item(x=5) <-> {"a": {"b": {"c": 5}}}

    Args:
        path: Ordered keys, outermost first. Keys are used verbatim.
    """

    path: Sequence[str]

    def __post_init__(self) -> None:
        # Stored as a tuple so the marker stays hashable inside Annotated[...]
        if not isinstance(self.path, str):
            object.__setattr__(self, 'path', tuple(self.path))

    def __repr__(self) -> str:
        return f'FlatPath(path={list(self.path)!r})'
