"""
Introspection utilities for flat_path models.

Enables inspection of generated namespaces: which fields were flattened, along
which paths, and what the generated chain looks like.
"""

from __future__ import annotations

from typing import Any

import pydantic

from flat_path.handlers import NAMESPACE_ATTRIBUTE
from flat_path.namespace import FlatPathNamespace


def get_namespace(model: type[pydantic.BaseModel]) -> FlatPathNamespace | None:
    """
    Get the namespace generated for a rewritten model.

    Only the model's own namespace counts: a subclass of a rewritten model
    inherits the attribute but was not itself generated.

    Args:
        model: Model class returned by flat_path

    Returns:
        The namespace, or None if flat_path did not rewrite this model
    """
    namespace = model.__dict__.get(NAMESPACE_ATTRIBUTE)
    return namespace if isinstance(namespace, FlatPathNamespace) else None


def get_flat_path_fields(model: type[pydantic.BaseModel]) -> dict[str, tuple[str, ...]]:
    """
    Find all flattened fields of a model and their paths.

    For a rewritten union, fields are keyed as 'Variant.field'.

    Args:
        model: Model class returned by flat_path

    Returns:
        Dict mapping field name to its key path

    Example:
        >>> get_flat_path_fields(Item)
        {'x': ('a', 'b', 'c')}
    """
    namespace = get_namespace(model)
    if namespace is None:
        return {}

    fields = {name: chain.path for name, chain in namespace.chains.items()}
    for variant_name, variant in namespace.variants.items():
        for name, chain in variant.chains.items():
            fields[f'{variant_name}.{name}'] = chain.path
    return fields


def model_summary(model: type[pydantic.BaseModel]) -> dict[str, Any]:
    """
    Generate a summary of a model's flattening metadata.

    Args:
        model: Model class to inspect

    Returns:
        Dict with namespace name, flattened fields, link count and rendering
    """
    namespace = get_namespace(model)
    flat_fields = get_flat_path_fields(model)

    return {
        'model_name': model.__name__,
        'namespace': namespace.name if namespace else None,
        'flat_path_fields': flat_fields,
        'variants': list(namespace.variants) if namespace else [],
        'total_links': sum(len(chain.links) for chain in namespace) if namespace else 0,
        'rendered': namespace.render() if namespace else None,
    }


def print_model_summary(model: type[pydantic.BaseModel]) -> None:
    """
    Print a human-readable summary of a model.

    Args:
        model: Model class to inspect
    """
    summary = model_summary(model)

    print(f'Model: {summary["model_name"]}')
    if summary['namespace'] is None:
        print('  No flattened fields')
        return

    print(f'  Namespace: {summary["namespace"]}')
    print(f'  Generated links: {summary["total_links"]}')
    for field, path in summary['flat_path_fields'].items():
        print(f'    {field}: {" -> ".join(path)}')
    print()
    print(summary['rendered'])
