"""
Generation-time diagnostics for flat_path.

Every error is raised while a type is being rewritten, never while a value is
encoded or decoded. A failed rewrite leaves the input type untouched.

Exception Hierarchy:
    FlatPathError (base)
    ├── DuplicateAnnotationError (more than one FlatPath on a field)
    ├── EmptyPathError (FlatPath with zero keys)
    ├── InvalidPathKeyError (FlatPath key that is not a string)
    ├── ConflictingAliasError (explicit alias on a flattened field)
    ├── UnnamedFieldNotSupportedError (FlatPath on a positional/tuple element)
    └── UnsupportedShapeError (decorator applied to a non-record/non-union)
"""

from __future__ import annotations


class FlatPathError(Exception):
    """Base exception for all flat_path generation errors."""

    def __init__(self, location: str, message: str) -> None:
        self.location = location
        super().__init__(f'{location}: {message}')


class DuplicateAnnotationError(FlatPathError):
    """Raised when a field carries more than one FlatPath marker."""

    def __init__(self, location: str, index: int) -> None:
        self.index = index
        super().__init__(
            location,
            f'FlatPath can only be applied once (second occurrence at metadata index {index})',
        )


class EmptyPathError(FlatPathError):
    """Raised when a FlatPath marker has no keys."""

    def __init__(self, location: str) -> None:
        super().__init__(location, 'FlatPath requires at least one key')


class InvalidPathKeyError(FlatPathError):
    """Raised when a FlatPath key is not a string."""

    def __init__(self, location: str, key: object) -> None:
        self.key = key
        super().__init__(location, f'FlatPath keys must be strings, got {key!r}')


class ConflictingAliasError(FlatPathError):
    """Raised when a flattened field also declares its own alias."""

    def __init__(self, location: str, alias: object) -> None:
        self.alias = alias
        super().__init__(
            location,
            f'alias {alias!r} conflicts with FlatPath, the path already names every serialized key',
        )


class UnnamedFieldNotSupportedError(FlatPathError):
    """Raised when FlatPath is attached to a positional (tuple) element."""

    def __init__(self, location: str) -> None:
        super().__init__(location, 'Unable to apply FlatPath to unnamed tuple fields')


class UnsupportedShapeError(FlatPathError):
    """Raised when flat_path is applied to something that is not a model or a union of models."""

    def __init__(self, location: str, reason: str = 'Can not be applied to this type of member') -> None:
        super().__init__(location, reason)
