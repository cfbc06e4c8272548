"""Name resolution: decide how every reference in a file is spelled.

The resolver consumes the scope tree and the reference stream of one file and
produces a rendering decision per reference plus the import tables to emit.

Resolution of a type reference Q occurring in scope S:

1. Suffix search. For each type in Q's enclosing chain (Q itself, then each
   enclosing class out to the top-level one), look its simple name up among the
   direct children of the scopes visible from S. If the lookup lands on that very
   type, Q is spelled as the suffix starting there ("Twin.D", "A.Twin.D").
2. Structural shadow. If the top-level segment of Q resolves to a *different*
   declared type, a nested declaration shadows it: Q is fully qualified and never
   touches the import table, whatever order references were discovered in.
3. Implicitly visible types. Default-package types and types in the file's own
   package are never imported. They claim their simple name for the whole file,
   default-package types first, then same-package types in discovery order. The
   claimant is spelled by its simple name; any other type of that name is fully
   qualified.
4. First use wins. Otherwise Q competes for the import slot of its top-level simple
   name. The earliest reference claims it; later references to a different type of
   that name are fully qualified.

Static member references are spelled as the bare member when the static import
table covers them, and otherwise resolve their owner as an ordinary type reference.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from source_emitter.import_registry import StaticImportTable, TypeImportTable
from source_emitter.models import (
    FullyQualified,
    QualifiedName,
    QualifiedSuffix,
    RenderingDecision,
    StaticallyImported,
    Unqualified,
)
from source_emitter.reference_collector import Reference, StaticMemberReference, TypeReference
from source_emitter.scope_tree import ScopeNode, resolve_simple_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Frozen outcome of resolving one file.

    Attributes:
        references: The reference stream, in discovery order
        decisions: One rendering decision per reference, indexed by discovery index
        type_imports: Types bound in the first-use table, in binding order
        static_imports: The explicit static imports of the file
        excluded_import_packages: Packages whose types get no import line
    """

    references: tuple[Reference, ...]
    decisions: tuple[RenderingDecision, ...]
    type_imports: tuple[QualifiedName, ...]
    static_imports: StaticImportTable
    excluded_import_packages: frozenset[str]

    def decision_for(self, reference: Reference) -> RenderingDecision:
        return self.decisions[reference.index]

    def type_import_lines(self) -> tuple[str, ...]:
        """Canonical names to emit as "import x.Y", sorted, excluded packages dropped."""
        return tuple(
            sorted(
                name.canonical_name
                for name in self.type_imports
                if name.package not in self.excluded_import_packages
            )
        )

    def static_import_lines(self) -> tuple[str, ...]:
        return self.static_imports.import_lines()


class Resolver:
    """Resolves the references of a single build.

    A Resolver owns its import table; construct one per build.
    """

    def __init__(
        self,
        package_name: str,
        static_imports: StaticImportTable,
        excluded_import_packages: frozenset[str] = frozenset(),
    ) -> None:
        self._package_name = package_name
        self._static_imports = static_imports
        self._excluded_import_packages = excluded_import_packages
        self._type_imports = TypeImportTable()
        self._implicit_names: dict[str, QualifiedName] = {}

    def resolve(self, references: Sequence[Reference]) -> Resolution:
        """Decide the spelling of every reference and collect the imports.

        Args:
            references: The reference stream, in discovery order

        Returns:
            The frozen Resolution for this build
        """
        type_uses = [
            (ref, name)
            for ref in references
            if (name := self._type_use(ref)) is not None
        ]

        # Implicitly visible names are claimed before first use is decided. A
        # default-package type has no qualified spelling, so it claims first.
        implicit = [
            name.top_level()
            for ref, name in type_uses
            if self._implicitly_visible(name) and self._structural_decision(ref, name) is None
        ]
        for top_level in sorted(implicit, key=lambda n: bool(n.package)):
            self._implicit_names.setdefault(top_level.simple_name, top_level)

        decisions: list[RenderingDecision] = []
        for ref in references:
            assert ref.index == len(decisions), f"Reference {ref} out of discovery order"
            decisions.append(self._decide(ref))

        logger.debug(
            "Resolved %d references with %d type imports and %d static imports",
            len(decisions),
            len(self._type_imports.entries),
            len(self._static_imports.entries),
        )
        return Resolution(
            references=tuple(references),
            decisions=tuple(decisions),
            type_imports=self._type_imports.imported(),
            static_imports=self._static_imports,
            excluded_import_packages=self._excluded_import_packages,
        )

    def _implicitly_visible(self, name: QualifiedName) -> bool:
        """Default-package and same-package types are in scope without an import."""
        return not name.package or name.package == self._package_name

    def _type_use(self, ref: Reference) -> QualifiedName | None:
        """The type a reference spells out, or None for a statically imported member."""
        if isinstance(ref, StaticMemberReference):
            if self._static_imports.covers(ref.owner, ref.member):
                return None
            return ref.owner
        return ref.name

    def _decide(self, ref: Reference) -> RenderingDecision:
        name = self._type_use(ref)
        if name is None:
            assert isinstance(ref, StaticMemberReference)
            return StaticallyImported(ref.member)
        return self._resolve_type(ref, name)

    def _structural_decision(self, ref: Reference, name: QualifiedName) -> RenderingDecision | None:
        """Resolve a type against the declared scopes only.

        Returns:
            QualifiedSuffix if a suffix of the name resolves to it, FullyQualified if its
            top-level simple name is shadowed by a different declaration, else None
        """
        shadowed = False
        for candidate in name.enclosing_chain():
            node = resolve_simple_name(ref.scope, candidate.simple_name, in_header=ref.in_header)
            if node is not None and node.qualified_name == candidate:
                return QualifiedSuffix(name.simple_names[len(candidate.simple_names) - 1 :])
            shadowed = node is not None
        if shadowed:
            return FullyQualified(name)
        return None

    def _resolve_type(self, ref: Reference, name: QualifiedName) -> RenderingDecision:
        structural = self._structural_decision(ref, name)
        if structural is not None:
            if isinstance(structural, FullyQualified):
                logger.debug("Qualifying %s: shadowed by a nested declaration", name)
            return structural

        top_level = name.top_level()
        claimed = self._implicit_names.get(top_level.simple_name)
        if claimed == top_level:
            return Unqualified(name.simple_names)
        if claimed is not None:
            logger.debug("Qualifying %s: %s is visible without an import", name, claimed)
            return FullyQualified(name)

        assert not self._implicitly_visible(name), f"{name} was not claimed before resolution"
        bound = self._type_imports.lookup(top_level.simple_name)
        if bound is None:
            self._type_imports.bind(top_level)
            logger.debug("Importing %s", top_level)
            return Unqualified(name.simple_names)
        if bound == top_level:
            return Unqualified(name.simple_names)

        logger.debug("Qualifying %s: %s is already imported", name, bound)
        return FullyQualified(name)


class DecisionReplay:
    """Reference handler for the final emission pass.

    Hands out the resolved decisions in discovery order. The final pass must request
    exactly the references the collecting pass discovered, in the same order.
    """

    def __init__(self, resolution: Resolution) -> None:
        self._resolution = resolution
        self._cursor = 0

    def _next(self) -> tuple[Reference, RenderingDecision]:
        assert self._cursor < len(self._resolution.references), "More references emitted than collected"
        ref = self._resolution.references[self._cursor]
        self._cursor += 1
        return ref, self._resolution.decision_for(ref)

    def type_reference(self, name: QualifiedName, scope: ScopeNode, *, in_header: bool) -> RenderingDecision:
        ref, decision = self._next()
        assert isinstance(ref, TypeReference), f"Expected {ref}, emitted type {name}"
        assert ref.name == name and ref.scope is scope and ref.in_header == in_header, (
            f"Expected {ref}, emitted type {name}"
        )
        return decision

    def static_reference(
        self, owner: QualifiedName, member: str, scope: ScopeNode, *, in_header: bool
    ) -> RenderingDecision:
        ref, decision = self._next()
        assert isinstance(ref, StaticMemberReference), f"Expected {ref}, emitted {owner}.{member}"
        assert ref.owner == owner and ref.member == member and ref.scope is scope and ref.in_header == in_header, (
            f"Expected {ref}, emitted {owner}.{member}"
        )
        return decision

    def finish(self) -> None:
        assert self._cursor == len(self._resolution.references), (
            f"Only {self._cursor} of {len(self._resolution.references)} references were emitted"
        )
