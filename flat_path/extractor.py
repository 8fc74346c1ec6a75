"""
Annotation extraction for flattened fields.

Reads a pydantic field's Annotated metadata, pulls out the single FlatPath
marker and splits the remaining field customizations into the ones that
follow the value to the innermost link (leaf) and the ones that stay on the
in-memory field.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, get_args, get_origin

from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined

from flat_path.exceptions import (
    ConflictingAliasError,
    DuplicateAnnotationError,
    EmptyPathError,
    InvalidPathKeyError,
)
from flat_path.markers import FlatPath

__all__ = [
    'ExtractedField',
    'LeafCustomizations',
    'default_attributes',
    'extract_field',
    'has_flat_path',
    'positional_elements',
]

# Attributes that change how the value itself is encoded/decoded
LEAF_ATTRIBUTES = ('exclude', 'exclude_if', 'discriminator', 'validate_default')

# Attributes that describe the in-memory field
FIELD_ATTRIBUTES = ('title', 'description', 'examples', 'json_schema_extra', 'deprecated', 'frozen', 'repr')


@dataclass(frozen=True)
class LeafCustomizations:
    """Customizations relocated onto the innermost link's field."""

    metadata: tuple[Any, ...] = ()
    attributes: dict[str, Any] = field(default_factory=dict)

    def annotate(self, annotation: Any) -> Any:
        """Re-attach metadata to a bare value type."""
        if not self.metadata:
            return annotation
        return Annotated[annotation, *self.metadata]


@dataclass(frozen=True)
class ExtractedField:
    """A field whose FlatPath annotation was found and parsed."""

    name: str
    location: str
    path: tuple[str, ...]
    annotation: Any
    leaf: LeafCustomizations
    default_attributes: dict[str, Any]
    field_attributes: dict[str, Any]


def has_flat_path(annotation: Any) -> bool:
    """Check whether a raw annotation carries a FlatPath marker at its top level."""
    if get_origin(annotation) is not Annotated:
        return False
    return any(isinstance(item, FlatPath) for item in annotation.__metadata__)


def extract_field(owner: str, name: str, field_info: FieldInfo) -> ExtractedField | None:
    """
    Extract the FlatPath annotation of a single field.

    Args:
        owner: Qualified name of the model (or Type.Variant) declaring the field
        name: Field name
        field_info: The field's pydantic FieldInfo

    Returns:
        ExtractedField if exactly one FlatPath is present, None if there is none

    Raises:
        DuplicateAnnotationError: More than one FlatPath on the field
        EmptyPathError: FlatPath with no keys
        InvalidPathKeyError: FlatPath key that is not a string
        ConflictingAliasError: The field also declares an explicit alias
    """
    location = f'{owner}.{name}'

    markers = [(index, item) for index, item in enumerate(field_info.metadata) if isinstance(item, FlatPath)]
    if not markers:
        return None
    if len(markers) > 1:
        raise DuplicateAnnotationError(location, markers[1][0])

    path = _parse_path(location, markers[0][1])

    # Aliases set by an alias_generator have priority 1 and are simply replaced
    if field_info.alias_priority is not None and field_info.alias_priority >= 2:
        alias = field_info.alias or field_info.serialization_alias or field_info.validation_alias
        if alias is not None:
            raise ConflictingAliasError(location, alias)

    leaf_metadata = tuple(item for item in field_info.metadata if not isinstance(item, FlatPath))
    leaf_attributes = {
        attr: getattr(field_info, attr) for attr in LEAF_ATTRIBUTES if getattr(field_info, attr, None) is not None
    }

    return ExtractedField(
        name=name,
        location=location,
        path=path,
        annotation=field_info.annotation,
        leaf=LeafCustomizations(metadata=leaf_metadata, attributes=leaf_attributes),
        default_attributes=default_attributes(field_info),
        field_attributes={
            attr: getattr(field_info, attr) for attr in FIELD_ATTRIBUTES if getattr(field_info, attr, None) is not None
        },
    )


def _parse_path(location: str, marker: FlatPath) -> tuple[str, ...]:
    if isinstance(marker.path, str):
        raise InvalidPathKeyError(location, marker.path)
    for key in marker.path:
        if not isinstance(key, str):
            raise InvalidPathKeyError(location, key)
    if not marker.path:
        raise EmptyPathError(location)
    return tuple(marker.path)


def default_attributes(field_info: FieldInfo) -> dict[str, Any]:
    """Default or default factory of a field, as Field() keyword arguments."""
    if field_info.default_factory is not None:
        return {'default_factory': field_info.default_factory}
    if field_info.default is not PydanticUndefined:
        return {'default': field_info.default}
    return {}


def positional_elements(annotation: Any) -> tuple[Any, ...]:
    """Element annotations of a tuple type, without the trailing Ellipsis."""
    return tuple(arg for arg in get_args(annotation) if arg is not Ellipsis)
