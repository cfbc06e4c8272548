"""Import tables for one emitted file.

This module provides the two independent namespaces the resolver works with:
type imports, filled by first use while references are resolved, and static
imports, supplied explicitly by the build configuration.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from source_emitter.errors import InvalidNameError, StaticImportConflictError
from source_emitter.models import WILDCARD, QualifiedName


@dataclass
class TypeImportTable:
    """Mutable first-use table mapping a top-level simple name to the type it imports.

    Only top-level types are imported; a nested type is reached through its
    imported top-level class (e.g. import Message, then write Message.Builder).
    """

    entries: dict[str, QualifiedName] = field(default_factory=dict)

    def lookup(self, simple_name: str) -> QualifiedName | None:
        return self.entries.get(simple_name)

    def bind(self, name: QualifiedName) -> None:
        """Bind a top-level type to its simple name.

        Raises:
            AssertionError: If the name is nested or the slot is already taken
        """
        assert name.enclosing() is None, f"Only top-level types are imported, got {name}"
        assert name.simple_name not in self.entries, f"{name.simple_name} is already imported"
        self.entries[name.simple_name] = name

    def imported(self) -> tuple[QualifiedName, ...]:
        return tuple(self.entries.values())


@dataclass(frozen=True)
class StaticImportTable:
    """Explicit static imports: owner types carrying a member name or "*".

    Examples:
        import static java.util.concurrent.TimeUnit.SECONDS
            -> QualifiedName("java.util.concurrent", ("TimeUnit",), member="SECONDS")
        import static java.lang.System.*
            -> QualifiedName("java.lang", ("System",), member="*")
    """

    entries: frozenset[QualifiedName] = frozenset()

    @classmethod
    def of(cls, entries: Iterable[QualifiedName]) -> "StaticImportTable":
        """Validate and freeze a set of static imports.

        Two explicit imports of the same member name from different owners would make
        the bare member ambiguous, so they are rejected here rather than guessed at.

        Raises:
            InvalidNameError: If an entry carries no member
            StaticImportConflictError: If a member name is explicitly imported from two owners
        """
        frozen = frozenset(entries)
        explicit_owners: dict[str, QualifiedName] = {}
        for entry in sorted(frozen):
            if entry.member is None:
                msg = f"Static import of {entry} needs a member name or {WILDCARD!r}"
                raise InvalidNameError(msg)
            if entry.member == WILDCARD:
                continue
            owner = entry.without_member()
            previous = explicit_owners.setdefault(entry.member, owner)
            if previous != owner:
                msg = f"{entry.member} is statically imported from both {previous} and {owner}"
                raise StaticImportConflictError(msg)
        return cls(frozen)

    def covers(self, owner: QualifiedName, member: str) -> bool:
        """Whether owner.member may be written as the bare member name.

        An explicit import of the member wins. A wildcard import of the owner covers
        the member unless the same member name is explicitly imported from another owner.
        """
        if owner.member_of(member) in self.entries:
            return True
        if owner.member_of(WILDCARD) not in self.entries:
            return False
        # Any remaining explicit entry for this member belongs to a different owner.
        return not any(entry.member == member for entry in self.entries)

    def import_lines(self) -> tuple[str, ...]:
        """Rendered "import static" targets, sorted by their literal text."""
        return tuple(sorted(entry.canonical_name for entry in self.entries))
