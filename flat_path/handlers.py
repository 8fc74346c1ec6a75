"""
Record and union rewriting.

A record is rewritten by subclassing it: the subclass keeps the name, module,
docstring, methods, validators and config of the original and redefines only
the flattened fields. Decoding goes through a 'before' model validator that
replaces each wire key (path[0]) with the decoded bare value under the key the
field validates from, so constructing by field name keeps working:

    Item(x=5)                                   # in-memory
    Item.model_validate({'a': {'b': {'c': 5}}})  # wire

A union is a RootModel whose root is a union of models. Each model variant is
rewritten as a record inside its own namespace (<Type>.<Variant>), then a
subclass of the RootModel is built over the rewritten variants.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
import types
import typing
from collections.abc import Callable, Iterable, Mapping
from typing import Annotated, Any, ForwardRef, get_args, get_origin

import pydantic

from flat_path.chain import FieldChain, generate_chain
from flat_path.exceptions import UnnamedFieldNotSupportedError
from flat_path.extractor import FIELD_ATTRIBUTES, default_attributes, extract_field, has_flat_path, positional_elements
from flat_path.namespace import FlatPathNamespace

__all__ = ['check_positional', 'is_positional', 'is_union', 'replace_type', 'rewrite_record', 'rewrite_union']

logger = logging.getLogger(__name__)

NAMESPACE_ATTRIBUTE = '__flat_path__'

# Stands in for the rewritten model inside its own annotations until it exists
SELF_REFERENCE = '__flat_path_self__'


# ==============================================================================
# Shape Helpers
# ==============================================================================


def is_union(annotation: Any) -> bool:
    """Check for typing.Union[...] / X | Y."""
    return get_origin(annotation) in (typing.Union, types.UnionType)


def is_positional(annotation: Any) -> bool:
    """Check for a tuple type or a RootModel over a tuple (a record without named fields)."""
    if get_origin(annotation) is tuple or annotation is tuple:
        return True
    if isinstance(annotation, type) and issubclass(annotation, pydantic.RootModel):
        root_info = annotation.model_fields.get('root')
        return root_info is not None and get_origin(root_info.annotation) is tuple
    return False


def replace_type(annotation: Any, old: Any, new: Any) -> Any:
    """
    Replace every occurrence of a type inside an annotation.

    Handles Annotated, unions and subscripted generics. Returns the annotation
    itself when `old` does not occur in it.

    Example:
        replace_type(list[Node] | None, Node, Other)  # list[Other] | None
    """
    if annotation is old:
        return new

    args = get_args(annotation)
    if not args:
        return annotation

    origin = get_origin(annotation)
    if origin is Annotated:
        inner = replace_type(args[0], old, new)
        return annotation if inner is args[0] else Annotated[inner, *annotation.__metadata__]

    replaced = tuple(replace_type(arg, old, new) for arg in args)
    if all(new_arg is arg for new_arg, arg in zip(replaced, args)):
        return annotation
    if origin in (typing.Union, types.UnionType):
        return typing.Union[replaced]
    if isinstance(annotation, types.GenericAlias):
        return types.GenericAlias(origin, replaced)
    return annotation.copy_with(replaced)


def check_positional(annotation: Any, location: str) -> None:
    """
    Reject FlatPath on positional elements.

    Raises:
        UnnamedFieldNotSupportedError: A tuple element carries FlatPath
    """
    if isinstance(annotation, type) and issubclass(annotation, pydantic.RootModel):
        annotation = annotation.model_fields['root'].annotation

    for index, element in enumerate(positional_elements(annotation)):
        if has_flat_path(element):
            raise UnnamedFieldNotSupportedError(f'{location}.{index}')


# ==============================================================================
# Record Handler
# ==============================================================================


def rewrite_record(
    model: type[pydantic.BaseModel],
    namespace_name: str,
    *,
    qualname: str | None = None,
    module: str | None = None,
) -> tuple[type[pydantic.BaseModel], FlatPathNamespace | None]:
    """
    Rewrite the flattened fields of a model.

    Args:
        model: Model declaring the fields
        namespace_name: Name of the namespace to generate
        qualname: Qualified name of the rewritten model (defaults to the model's)
        module: Module of the rewritten model (defaults to the model's)

    Returns:
        (rewritten model, namespace). The model itself and None when no field
        carries FlatPath.
    """
    qualname = qualname or model.__qualname__
    module = module or model.__module__

    extracted = [
        item
        for name, field_info in model.model_fields.items()
        if (item := extract_field(qualname, name, field_info)) is not None
    ]
    if not extracted:
        return model, None

    # References to the model itself must point at the rewritten model, resolved once it exists
    self_reference = ForwardRef(SELF_REFERENCE)
    resolved = [
        dataclasses.replace(item, annotation=replace_type(item.annotation, model, self_reference))
        for item in extracted
    ]
    self_referencing = any(new.annotation is not old.annotation for new, old in zip(resolved, extracted))

    chains = {item.name: generate_chain(item, namespace_name, module, model.model_config) for item in resolved}
    namespace = FlatPathNamespace(name=namespace_name, chains=chains)

    annotations: dict[str, Any] = {}
    fields: dict[str, Any] = {}
    for name, chain in chains.items():
        annotations[name], fields[name] = chain.rewritten_field()

    for name, field_info in model.model_fields.items():
        if name in chains:
            continue
        annotation = replace_type(field_info.annotation, model, self_reference)
        if annotation is not field_info.annotation:
            annotations[name], fields[name] = annotation, copy.copy(field_info)
            self_referencing = True

    body: dict[str, Any] = {
        '__module__': module,
        '__qualname__': qualname,
        '__doc__': model.__doc__,
        '__annotations__': annotations,
        NAMESPACE_ATTRIBUTE: namespace,
        '_flat_path_decode': pydantic.model_validator(mode='before')(_wire_decoder(chains.values())),
        # Path keys are the wire names; dumping by field name has no decodable form
        'model_config': pydantic.ConfigDict(serialize_by_alias=True),
        **fields,
    }

    rewritten = _subclass(model, body)
    if self_referencing:
        _resolve_self_reference(rewritten, chains.values())

    logger.debug('Rewrote %s with %d flattened field(s) in %s', qualname, len(chains), namespace_name)
    return rewritten, namespace


def _resolve_self_reference(rewritten: type[pydantic.BaseModel], chains: Iterable[FieldChain]) -> None:
    types_namespace = {SELF_REFERENCE: rewritten}
    for chain in chains:
        # Innermost first: outer links can only complete once the link they wrap has
        for link in reversed(chain.links):
            link.model_rebuild(force=True, _types_namespace=types_namespace)
    rewritten.model_rebuild(force=True, _types_namespace=types_namespace)


def _input_key(cls: type[pydantic.BaseModel], name: str) -> str:
    """Key under which a decoded value validates: the field's validation alias if it has a plain one."""
    if cls.model_config.get('validate_by_alias', True) is False:
        return name

    alias = cls.model_fields[name].validation_alias
    if isinstance(alias, str):
        return alias
    if isinstance(alias, pydantic.AliasChoices):
        return next((choice for choice in alias.choices if isinstance(choice, str)), name)
    return name


def _is_wire_value(cls: type[pydantic.BaseModel], chain: FieldChain, value: Any) -> bool:
    if chain.key not in (chain.name, _input_key(cls, chain.name)):
        return True
    # path[0] doubles as the in-memory key: only a mapping can hold the nested levels
    return bool(chain.links) and isinstance(value, Mapping)


def _wire_decoder(chains: Iterable[FieldChain]) -> Callable[..., Any]:
    chains = tuple(chains)

    def decode_flat_paths(cls: type[pydantic.BaseModel], data: Any, info: pydantic.ValidationInfo) -> Any:
        if not isinstance(data, Mapping):
            return data

        present = [chain for chain in chains if chain.key in data and _is_wire_value(cls, chain, data[chain.key])]
        if not present:
            return data

        # Decode everything before removing keys: overlapping paths share path[0]
        decoded = {
            _input_key(cls, chain.name): chain.deserialize(data[chain.key], context=info.context) for chain in present
        }
        wire_keys = {chain.key for chain in present}
        data = {key: value for key, value in data.items() if key not in wire_keys}
        data.update(decoded)
        return data

    return decode_flat_paths


# ==============================================================================
# Union Handler
# ==============================================================================


def rewrite_union(model: type[pydantic.RootModel], prefix: str) -> type[pydantic.RootModel]:
    """
    Rewrite every model variant of a RootModel over a union.

    Each rewritten variant gets its own namespace '<prefix><Type>.<Variant>' and
    is reachable as a nested attribute of the rewritten RootModel (Shape.Circle).
    Variants without named fields (primitives, None, literals) are left alone.

    Args:
        model: RootModel whose root annotation is a union
        prefix: Namespace name prefix

    Returns:
        The rewritten RootModel, or the model itself when no variant is flattened

    Raises:
        UnnamedFieldNotSupportedError: A tuple variant carries FlatPath
    """
    root_info = model.model_fields['root']
    namespace_name = f'{prefix}{model.__name__}'

    members: list[Any] = []
    variants: dict[str, type[pydantic.BaseModel]] = {}
    variant_namespaces: dict[str, FlatPathNamespace] = {}

    for member in get_args(root_info.annotation):
        if is_positional(member):
            check_positional(member, f'{model.__qualname__}.{_member_name(member)}')
            members.append(member)
            continue

        if not _is_record(member):
            members.append(member)
            continue

        rewritten, namespace = rewrite_record(
            member,
            f'{namespace_name}.{member.__name__}',
            qualname=f'{model.__qualname__}.{member.__name__}',
            module=model.__module__,
        )
        members.append(rewritten)
        if namespace is not None:
            variants[member.__name__] = rewritten
            variant_namespaces[member.__name__] = namespace

    if not variant_namespaces:
        return model

    union = typing.Union[tuple(members)]
    annotation = Annotated[union, *root_info.metadata] if root_info.metadata else union

    field_kwargs: dict[str, Any] = {**default_attributes(root_info)}
    if root_info.discriminator is not None:
        field_kwargs['discriminator'] = root_info.discriminator
    field_kwargs.update(
        {attr: getattr(root_info, attr) for attr in FIELD_ATTRIBUTES if getattr(root_info, attr, None) is not None}
    )

    body: dict[str, Any] = {
        '__module__': model.__module__,
        '__qualname__': model.__qualname__,
        '__doc__': model.__doc__,
        '__annotations__': {'root': annotation},
        'root': pydantic.Field(**field_kwargs),
        NAMESPACE_ATTRIBUTE: FlatPathNamespace(name=namespace_name, variants=variant_namespaces),
    }
    # Nested names are only exposed when they don't shadow the model's own attributes
    body.update({name: variant for name, variant in variants.items() if not hasattr(model, name)})

    rewritten = _subclass(model, body)
    logger.debug('Rewrote union %s: %d flattened variant(s)', model.__qualname__, len(variant_namespaces))
    return rewritten


def _is_record(member: Any) -> bool:
    return (
        isinstance(member, type)
        and issubclass(member, pydantic.BaseModel)
        and not issubclass(member, pydantic.RootModel)
    )


def _member_name(member: Any) -> str:
    return getattr(member, '__name__', None) or repr(member)


def _subclass(model: type[pydantic.BaseModel], body: dict[str, Any]) -> Any:
    # Same path pydantic.create_model takes, with a config override allowed alongside the base
    return type(model)(model.__name__, (model,), body, __pydantic_reset_parent_namespace__=False)
