"""
flat_path decorator - entry point of generation.

Dispatches a type definition by shape:

- pydantic.BaseModel             -> record handler
- RootModel over a union         -> union handler (one namespace per variant)
- RootModel over a tuple / None  -> positional record, only checked
- anything else                  -> UnsupportedShapeError

Generation never mutates its input. An error propagates before anything is
returned, so the original type is left exactly as it was.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar, get_origin

import pydantic

from flat_path.config import settings
from flat_path.exceptions import UnsupportedShapeError
from flat_path.handlers import check_positional, is_union, rewrite_record, rewrite_union
from flat_path.markers import FlatPath

__all__ = ['flat_path']

logger = logging.getLogger(__name__)

T = TypeVar('T')


def flat_path(item: T) -> T:
    """
    Rewrite a model so that FlatPath-annotated fields serialize at nested paths.

    Example:
        @flat_path
        class Item(pydantic.BaseModel):
            x: Annotated[int, FlatPath(path=['a', 'b', 'c'])]

        Item(x=5).model_dump()  # {'a': {'b': {'c': 5}}}

    Args:
        item: A pydantic model, or a RootModel whose root is a union of models

    Returns:
        The rewritten type, or `item` itself when nothing is annotated

    Raises:
        UnsupportedShapeError: item is not a record or a union of records
        DuplicateAnnotationError: A field carries more than one FlatPath
        EmptyPathError: A FlatPath has no keys
        InvalidPathKeyError: A FlatPath key is not a string
        ConflictingAliasError: A flattened field declares its own alias
        UnnamedFieldNotSupportedError: FlatPath on a positional element
    """
    if not isinstance(item, type) or not issubclass(item, pydantic.BaseModel):
        raise UnsupportedShapeError(_location(item))

    location = item.__qualname__
    # Fields are complete even for defer_build models, which is all generation needs
    if not getattr(item, '__pydantic_fields_complete__', item.__pydantic_complete__):
        raise UnsupportedShapeError(location, 'model is not fully defined, call model_rebuild() first')

    prefix = settings.NAMESPACE_PREFIX

    if issubclass(item, pydantic.RootModel):
        root_info = item.model_fields['root']
        if any(isinstance(entry, FlatPath) for entry in root_info.metadata):
            raise UnsupportedShapeError(location, 'FlatPath can not be applied to the root of a RootModel')

        annotation = root_info.annotation
        if is_union(annotation):
            return rewrite_union(item, prefix)
        if annotation is None or annotation is type(None):
            return item
        if _is_tuple(annotation):
            check_positional(item, location)
            return item
        raise UnsupportedShapeError(location, f'RootModel over {annotation!r} has no fields to flatten')

    rewritten, namespace = rewrite_record(item, f'{prefix}{item.__name__}')
    if namespace is None:
        logger.debug('%s has no FlatPath fields, left unchanged', location)
    return rewritten


def _is_tuple(annotation: Any) -> bool:
    return annotation is tuple or get_origin(annotation) is tuple


def _location(item: Any) -> str:
    return getattr(item, '__qualname__', None) or repr(item)
