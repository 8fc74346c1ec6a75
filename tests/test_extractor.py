"""
Tests for FlatPath annotation extraction.

Extraction runs against the FieldInfo pydantic builds for a plain (not yet
rewritten) model, so these tests never apply the decorator.
"""

from __future__ import annotations

from typing import Annotated

import pydantic
import pytest

from flat_path import (
    ConflictingAliasError,
    DuplicateAnnotationError,
    EmptyPathError,
    FlatPath,
    InvalidPathKeyError,
)
from flat_path.extractor import extract_field, has_flat_path


def _field(model: type[pydantic.BaseModel], name: str = 'x') -> pydantic.fields.FieldInfo:
    return model.model_fields[name]


def test_marker_path_is_stored_as_tuple() -> None:
    """Markers stay hashable when given a list."""
    marker = FlatPath(path=['a', 'b'])
    assert marker.path == ('a', 'b')
    assert hash(marker) == hash(FlatPath(path=('a', 'b')))
    assert repr(marker) == "FlatPath(path=['a', 'b'])"


def test_extract_returns_none_without_marker() -> None:
    class Plain(pydantic.BaseModel):
        x: Annotated[int, pydantic.Field(ge=0)]

    assert extract_field('Plain', 'x', _field(Plain)) is None


def test_extract_path_and_location() -> None:
    class Source(pydantic.BaseModel):
        x: Annotated[int, FlatPath(path=['a', 'b', 'c'])]

    extracted = extract_field('Source', 'x', _field(Source))
    assert extracted is not None
    assert extracted.path == ('a', 'b', 'c')
    assert extracted.location == 'Source.x'
    assert extracted.annotation is int
    assert extracted.default_attributes == {}


def test_marker_is_removed_from_leaf_metadata() -> None:
    """Everything except the marker itself follows the value to the leaf."""
    strip = pydantic.BeforeValidator(str.strip)

    class Source(pydantic.BaseModel):
        x: Annotated[str, FlatPath(path=['a', 'b']), strip]

    extracted = extract_field('Source', 'x', _field(Source))
    assert extracted is not None
    assert extracted.leaf.metadata == (strip,)
    assert not any(isinstance(item, FlatPath) for item in extracted.leaf.metadata)


def test_leaf_and_field_attributes_are_split() -> None:
    class Source(pydantic.BaseModel):
        x: Annotated[int, FlatPath(path=['a', 'b'])] = pydantic.Field(
            3,
            description='counter',
            exclude_if=lambda v: v == 3,
        )

    extracted = extract_field('Source', 'x', _field(Source))
    assert extracted is not None
    assert extracted.default_attributes == {'default': 3}
    assert extracted.field_attributes['description'] == 'counter'
    assert 'exclude_if' not in extracted.field_attributes
    assert set(extracted.leaf.attributes) == {'exclude_if'}


def test_default_factory_is_kept() -> None:
    class Source(pydantic.BaseModel):
        x: Annotated[list[int], FlatPath(path=['a', 'b'])] = pydantic.Field(default_factory=list)

    extracted = extract_field('Source', 'x', _field(Source))
    assert extracted is not None
    assert extracted.default_attributes == {'default_factory': list}


def test_duplicate_marker_reports_second_index() -> None:
    class Source(pydantic.BaseModel):
        x: Annotated[int, FlatPath(path=['a']), pydantic.Field(ge=0), FlatPath(path=['b'])]

    with pytest.raises(DuplicateAnnotationError) as exc_info:
        extract_field('Source', 'x', _field(Source))

    assert exc_info.value.location == 'Source.x'
    markers = [index for index, item in enumerate(_field(Source).metadata) if isinstance(item, FlatPath)]
    assert exc_info.value.index == markers[1]


def test_empty_path() -> None:
    class Source(pydantic.BaseModel):
        x: Annotated[int, FlatPath(path=[])]

    with pytest.raises(EmptyPathError, match='Source.x'):
        extract_field('Source', 'x', _field(Source))


@pytest.mark.parametrize(
    'path',
    [['a', 1], 'abc', [None]],
    ids=['int-key', 'bare-string', 'none-key'],
)
def test_invalid_path_key(path: object) -> None:
    class Source(pydantic.BaseModel):
        x: Annotated[int, FlatPath(path=path)]  # type: ignore[arg-type]

    with pytest.raises(InvalidPathKeyError):
        extract_field('Source', 'x', _field(Source))


@pytest.mark.parametrize(
    'field',
    [
        pydantic.Field(alias='z'),
        pydantic.Field(serialization_alias='z'),
        pydantic.Field(validation_alias='z'),
    ],
    ids=['alias', 'serialization-alias', 'validation-alias'],
)
def test_explicit_alias_conflicts(field: object) -> None:
    class Source(pydantic.BaseModel):
        x: Annotated[int, FlatPath(path=['a'])] = field

    with pytest.raises(ConflictingAliasError) as exc_info:
        extract_field('Source', 'x', _field(Source))

    assert exc_info.value.alias == 'z'


def test_alias_generator_does_not_conflict() -> None:
    """Generated aliases are replaced by the path, not reported."""

    class Source(pydantic.BaseModel):
        model_config = pydantic.ConfigDict(alias_generator=str.upper)

        x: Annotated[int, FlatPath(path=['a', 'b'])]

    extracted = extract_field('Source', 'x', _field(Source))
    assert extracted is not None
    assert extracted.path == ('a', 'b')


@pytest.mark.parametrize(
    ('annotation', 'expected'),
    [
        (Annotated[int, FlatPath(path=['a'])], True),
        (Annotated[int, 'other'], False),
        (int, False),
    ],
    ids=['marked', 'other-metadata', 'bare'],
)
def test_has_flat_path(annotation: object, expected: bool) -> None:
    assert has_flat_path(annotation) is expected
