"""Scope tree mirroring the nesting of the declared types in one file.

The tree is built once per build from the type model and is read-only afterwards.
Its synthetic root stands for the file itself: the root's children are the file's
top-level types, each of which holds its directly nested types, and so on.

Key Components:
    - ScopeNode: one declared type (or the file root) and its direct children
    - build_scope_tree: construct the tree from top-level TypeSpecs
    - visible_scopes / resolve_simple_name: the lexical lookup used by the resolver

Name lookup only ever consults the direct children of each visible scope. A name
nested two or more levels below a visible scope is not in scope there.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from source_emitter.models import QualifiedName
from source_emitter.specs import TypeSpec


@dataclass(eq=False)
class ScopeNode:
    """A declared type, or the file root when qualified_name is None."""

    simple_name: str
    qualified_name: QualifiedName | None
    parent: "ScopeNode | None" = None
    children: dict[str, "ScopeNode"] = field(default_factory=dict)  # declaration order

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def child(self, simple_name: str) -> "ScopeNode":
        """Return the direct child with this simple name.

        Raises:
            KeyError: If no such child was declared
        """
        return self.children[simple_name]

    def __repr__(self) -> str:
        label = self.qualified_name.canonical_name if self.qualified_name else "<file>"
        return f"ScopeNode({label})"


def _add_children(node: ScopeNode, type_specs: Iterable[TypeSpec]) -> None:
    assert node.qualified_name is not None
    for spec in type_specs:
        child = ScopeNode(spec.name, node.qualified_name.nested(spec.name), parent=node)
        node.children[spec.name] = child
        _add_children(child, spec.type_specs)


def build_scope_tree(package_name: str, type_specs: Iterable[TypeSpec]) -> ScopeNode:
    """Build the scope tree for the top-level types of one file.

    Sibling types are expected to have distinct names; the builder API enforces
    this before a TypeSpec can exist.

    Args:
        package_name: Package of the file ("" for the default package)
        type_specs: Top-level declared types, in declaration order

    Returns:
        The file root node

    Example:
        For class A { class B { class Twin; class C }; class Twin { class D } }
        the root has child A; A has children B and Twin; B has Twin and C.
    """
    root = ScopeNode("", None)
    for spec in type_specs:
        child = ScopeNode(spec.name, QualifiedName.get(package_name, spec.name), parent=root)
        root.children[spec.name] = child
        _add_children(child, spec.type_specs)
    return root


def visible_scopes(scope: ScopeNode, *, in_header: bool) -> Iterator[ScopeNode]:
    """Yield the scopes whose direct children are visible from scope, innermost first.

    A type's declaration header (annotations, supertypes) is resolved outside its
    body, so the declaring type's own nested types are not visible there.

    Args:
        scope: The scope where a reference occurs
        in_header: Whether the reference sits in scope's declaration header

    Returns:
        Iterator from the innermost visible scope out to the file root
    """
    node = scope.parent if in_header and scope.parent is not None else scope
    current: ScopeNode | None = node
    while current is not None:
        yield current
        current = current.parent


def resolve_simple_name(scope: ScopeNode, simple_name: str, *, in_header: bool) -> ScopeNode | None:
    """Find the declared type a simple name denotes at scope, if any.

    Inner scopes shadow outer ones: the first visible scope with a direct child of
    that name wins.

    Args:
        scope: The scope where the name is used
        simple_name: The simple name to look up, e.g. "Twin"
        in_header: Whether the use sits in scope's declaration header

    Returns:
        The declared type's node, or None if no visible declaration has that name
    """
    for node in visible_scopes(scope, in_header=in_header):
        child = node.children.get(simple_name)
        if child is not None:
            return child
    return None
