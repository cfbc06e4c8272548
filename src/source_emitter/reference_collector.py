"""Reference stream: every type and static-member use discovered in one file.

References are discovered by running the emitter once with a ReferenceCollector
as its reference handler. The collecting pass walks the declarations in exactly
the order the final pass will, so the discovery index of a reference is also the
position at which the final pass asks for its rendering.

The text produced by the collecting pass is discarded; the collector answers every
request with the canonical spelling.
"""

from dataclasses import dataclass
from typing import TypeAlias

from source_emitter.models import FullyQualified, QualifiedName, RenderingDecision
from source_emitter.scope_tree import ScopeNode


@dataclass(frozen=True)
class TypeReference:
    """A use of a type at a specific point of the file."""

    index: int  # discovery order
    name: QualifiedName
    scope: ScopeNode  # occurrence scope
    in_header: bool  # inside scope's declaration header rather than its body


@dataclass(frozen=True)
class StaticMemberReference:
    """A "Owner.member" access whose owner is a type argument of a code fragment."""

    index: int
    owner: QualifiedName
    member: str
    scope: ScopeNode
    in_header: bool


Reference: TypeAlias = TypeReference | StaticMemberReference


class ReferenceCollector:
    """Reference handler for the collecting pass.

    Attributes:
        references: All references discovered so far, in discovery order
    """

    def __init__(self) -> None:
        self.references: list[Reference] = []

    def type_reference(self, name: QualifiedName, scope: ScopeNode, *, in_header: bool) -> RenderingDecision:
        self.references.append(TypeReference(len(self.references), name, scope, in_header))
        return FullyQualified(name)

    def static_reference(
        self, owner: QualifiedName, member: str, scope: ScopeNode, *, in_header: bool
    ) -> RenderingDecision:
        self.references.append(StaticMemberReference(len(self.references), owner, member, scope, in_header))
        return FullyQualified(owner)
