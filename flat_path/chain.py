"""
Path chain generation for flattened fields.

For a field annotated with path ['a', 'b', 'c'], the record field itself is
renamed to 'a' and two link models are generated:

    class Link1(BaseModel):          # {"b": ...}
        field: Link2 = Field(alias='b')

    class Link2(BaseModel):          # {"c": <value>}
        field: Annotated[T, *leaf_metadata] = Field(alias='c', **leaf_attributes)

Encoding wraps the bare value into Link2 then Link1 with model_construct (no
validation, no copy of the value) and lets pydantic's model serializer produce
{"b": {"c": ...}} under the record's 'a' key. Decoding validates the wire value
as Link1 and reads `.field` once per link.

Every link is a single-field model whose only field is named `field`, so the
wrap on the encode side and the unwrap on the decode side are the exact inverse
of each other for any path length.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Annotated, Any

import pydantic

from flat_path.config import settings
from flat_path.extractor import ExtractedField

__all__ = ['FieldChain', 'generate_chain']

logger = logging.getLogger(__name__)

# Owner config keys copied onto links so nested levels decode with the owner's strictness
INHERITED_CONFIG_KEYS = ('strict', 'extra')


@dataclass(frozen=True)
class FieldChain:
    """
    Generated wrapper chain and adapters for one flattened field.

    Attributes:
        extracted: The parsed field annotation
        links: Link models for path[1:], outermost first (empty for one-key paths)
    """

    extracted: ExtractedField
    links: tuple[type[pydantic.BaseModel], ...]

    @property
    def name(self) -> str:
        return self.extracted.name

    @property
    def path(self) -> tuple[str, ...]:
        return self.extracted.path

    @property
    def key(self) -> str:
        """Serialized key of the record field (first path segment)."""
        return self.extracted.path[0]

    def serialize(self, value: Any) -> Any:
        """Wrap a bare value into the outermost link without validating or copying it."""
        for link in reversed(self.links):
            value = link.model_construct(field=value)
        return value

    def deserialize(self, raw: Any, context: Any | None = None) -> Any:
        """
        Decode the value found under the record's first path key.

        Args:
            raw: Wire value found under path[0]
            context: Validation context forwarded to the link models

        Returns:
            The bare value, after unwrapping every link

        Raises:
            pydantic.ValidationError: Any link failed to validate (propagated unchanged)
        """
        if not self.links:
            return raw

        value = self.links[0].model_validate(raw, context=context)
        for _ in self.links:
            value = value.field
        return value

    def rewritten_field(self) -> tuple[Any, Any]:
        """
        Field definition replacing the original one on the record.

        Returns:
            (annotation, FieldInfo) tuple, as accepted by pydantic.create_model
        """
        extracted = self.extracted
        kwargs: dict[str, Any] = {
            'serialization_alias': self.key,
            **extracted.default_attributes,
            **extracted.field_attributes,
        }

        if not self.links:
            # One-key path: the record field is the leaf, customizations stay on it
            kwargs.update(extracted.leaf.attributes)
            return extracted.leaf.annotate(extracted.annotation), pydantic.Field(**kwargs)

        annotation = Annotated[
            extracted.annotation,
            pydantic.PlainSerializer(self.serialize, return_type=self.links[0], when_used='always'),
        ]
        return annotation, pydantic.Field(**kwargs)


def generate_chain(
    extracted: ExtractedField,
    namespace: str,
    module: str,
    owner_config: Mapping[str, Any] | None = None,
) -> FieldChain:
    """
    Generate the link models for one flattened field.

    Args:
        extracted: Parsed field annotation
        namespace: Name of the generated namespace holding this chain
        module: Module the generated link models are attributed to
        owner_config: model_config of the record declaring the field

    Returns:
        FieldChain with links ordered outermost first
    """
    owner_config = owner_config or {}
    inherited = {key: owner_config[key] for key in INHERITED_CONFIG_KEYS if key in owner_config}

    path = extracted.path
    links: list[type[pydantic.BaseModel]] = []
    inner: type[pydantic.BaseModel] | None = None

    # Innermost first: each link wraps the one generated before it
    for index in range(len(path) - 1, 0, -1):
        if inner is None:
            annotation = extracted.leaf.annotate(extracted.annotation)
            field_info = pydantic.Field(
                alias=path[index],
                **extracted.default_attributes,
                **extracted.leaf.attributes,
            )
        else:
            annotation = inner
            field_info = pydantic.Field(alias=path[index])

        link_name = f'{settings.LINK_NAME}{index}'
        qualname = f'{namespace}.{extracted.name}.{link_name}'
        link = pydantic.create_model(
            link_name,
            __config__=pydantic.ConfigDict(title=qualname, serialize_by_alias=True, **inherited),
            __module__=module,
            field=(annotation, field_info),
        )
        link.__qualname__ = qualname
        links.append(link)
        inner = link

    links.reverse()
    logger.debug('Generated %d link(s) for %s along %r', len(links), extracted.location, list(path))
    return FieldChain(extracted=extracted, links=tuple(links))
