"""
Generated namespaces.

One namespace is created per rewritten record, and one per rewritten variant of
a union (nested under the union's namespace). A namespace owns the chains of
the fields declared in its record or variant and nothing else, so identical
paths in different variants never share generated models.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from flat_path.chain import FieldChain

__all__ = ['FlatPathNamespace']


@dataclass(frozen=True)
class FlatPathNamespace:
    """
    Implementation-private container of generated chains.

    Attributes:
        name: Namespace name, e.g. '__flat_path_Item' or '__flat_path_Shape.Circle'
        chains: Field name -> chain, for the fields of this record/variant
        variants: Variant name -> namespace (unions only)
    """

    name: str
    chains: dict[str, FieldChain] = field(default_factory=dict)
    variants: dict[str, FlatPathNamespace] = field(default_factory=dict)

    def __iter__(self) -> Iterator[FieldChain]:
        """Iterate over every chain, including the chains of nested variants."""
        yield from self.chains.values()
        for variant in self.variants.values():
            yield from variant

    def render(self) -> str:
        """
        Render the generated structure as indented text.

        Example:
            __flat_path_Item
              x: 'a' -> Link1 'b' -> Link2 'c'
        """
        lines = [self.name]
        for name, chain in self.chains.items():
            steps = [repr(chain.key)]
            for link, key in zip(chain.links, chain.path[1:]):
                steps.append(f'{link.__name__} {key!r}')
            lines.append(f'  {name}: ' + ' -> '.join(steps))
        for variant in self.variants.values():
            lines.extend(f'  {line}' for line in variant.render().splitlines())
        return '\n'.join(lines)
