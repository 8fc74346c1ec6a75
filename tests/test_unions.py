"""
Tests for rewritten tagged unions.

A union is a RootModel over a union of models. Every variant is rewritten in
its own namespace, so variants may use identical paths.
"""

from __future__ import annotations

from typing import Annotated, Literal

import pydantic
import pytest

from flat_path import FlatPath, UnnamedFieldNotSupportedError, flat_path
from flat_path.introspection import get_namespace


class Circle(pydantic.BaseModel):
    kind: Literal['circle'] = 'circle'
    x: Annotated[int, FlatPath(path=['p', 'q'])]


class Square(pydantic.BaseModel):
    kind: Literal['square'] = 'square'
    x: Annotated[str, FlatPath(path=['p', 'q'])]


class Unmarked(pydantic.BaseModel):
    kind: Literal['unmarked'] = 'unmarked'
    value: int = 0


ShapeUnion = Annotated[Circle | Square | Unmarked, pydantic.Field(discriminator='kind')]


@flat_path
class Shape(pydantic.RootModel[ShapeUnion]):
    """A shape, tagged by kind."""


@flat_path
class MaybeCircle(pydantic.RootModel[Circle | None]):
    pass


class PlainShape(pydantic.RootModel[Unmarked | int]):
    pass


@pytest.mark.parametrize(
    ('wire', 'variant', 'value'),
    [
        ({'kind': 'circle', 'p': {'q': 1}}, 'Circle', 1),
        ({'kind': 'square', 'p': {'q': 'one'}}, 'Square', 'one'),
    ],
    ids=['circle', 'square'],
)
def test_variants_with_identical_paths_round_trip(wire: dict[str, object], variant: str, value: object) -> None:
    shape = Shape.model_validate(wire)

    assert isinstance(shape.root, getattr(Shape, variant))
    assert shape.root.x == value
    assert shape.model_dump() == wire
    assert Shape.model_validate_json(shape.model_dump_json()) == shape


def test_variants_are_exposed_on_the_union() -> None:
    assert Shape.Circle.__qualname__ == 'Shape.Circle'
    assert Shape(Shape.Circle(x=2)).model_dump() == {'kind': 'circle', 'p': {'q': 2}}


def test_variants_get_separate_namespaces() -> None:
    namespace = get_namespace(Shape)

    assert namespace is not None
    assert set(namespace.variants) == {'Circle', 'Square'}
    circle = namespace.variants['Circle']
    square = namespace.variants['Square']
    assert circle.name == '__flat_path_Shape.Circle'
    assert square.name == '__flat_path_Shape.Square'
    assert circle.chains['x'].links[0] is not square.chains['x'].links[0]


def test_unmarked_variant_is_kept() -> None:
    shape = Shape.model_validate({'kind': 'unmarked', 'value': 3})

    assert type(shape.root) is Unmarked
    assert not hasattr(Shape, 'Unmarked')


def test_union_keeps_identity() -> None:
    assert Shape.__name__ == 'Shape'
    assert Shape.__doc__ == 'A shape, tagged by kind.'


def test_unit_variant() -> None:
    assert MaybeCircle(None).model_dump() is None
    assert MaybeCircle.model_validate({'kind': 'circle', 'p': {'q': 4}}).root.x == 4


def test_union_without_flattened_variants_is_unchanged() -> None:
    assert flat_path(PlainShape) is PlainShape


def test_decode_error_in_variant() -> None:
    with pytest.raises(pydantic.ValidationError):
        Shape.model_validate({'kind': 'circle', 'p': {'q': 'not-an-int'}})


def test_positional_variant_with_marker_is_rejected() -> None:
    class Pair(pydantic.RootModel[Circle | tuple[int, Annotated[int, FlatPath(path=['a'])]]]):
        pass

    with pytest.raises(UnnamedFieldNotSupportedError) as exc_info:
        flat_path(Pair)

    assert exc_info.value.location.endswith('.1')
    assert 'Circle' not in Pair.__dict__
