"""
Nested-path serialization for pydantic models.

Declare that a field lives at the end of a nested key path on the wire while
the model keeps it as a single flat attribute:

    @flat_path
    class Item(pydantic.BaseModel):
        x: Annotated[int, FlatPath(path=['a', 'b', 'c'])]

    Item(x=5).model_dump()                               # {'a': {'b': {'c': 5}}}
    Item.model_validate({'a': {'b': {'c': 5}}}).x        # 5
"""

from flat_path.chain import FieldChain
from flat_path.config import FlatPathSettings, get_settings, settings
from flat_path.driver import flat_path
from flat_path.exceptions import (
    ConflictingAliasError,
    DuplicateAnnotationError,
    EmptyPathError,
    FlatPathError,
    InvalidPathKeyError,
    UnnamedFieldNotSupportedError,
    UnsupportedShapeError,
)
from flat_path.introspection import get_flat_path_fields, get_namespace, model_summary, print_model_summary
from flat_path.markers import FlatPath
from flat_path.namespace import FlatPathNamespace

__all__ = [
    'flat_path',
    'FlatPath',
    'FlatPathNamespace',
    'FieldChain',
    'FlatPathError',
    'DuplicateAnnotationError',
    'EmptyPathError',
    'InvalidPathKeyError',
    'ConflictingAliasError',
    'UnnamedFieldNotSupportedError',
    'UnsupportedShapeError',
    'FlatPathSettings',
    'get_settings',
    'settings',
    'get_flat_path_fields',
    'get_namespace',
    'model_summary',
    'print_model_summary',
]
