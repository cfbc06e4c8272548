"""Core data models for source emission.

Key Components:
    - QualifiedName: package + nested simple-name path (+ optional static member)
    - ParameterizedTypeName: a raw type applied to type arguments
    - Modifier, TypeKind: declaration vocabulary
    - Rendering decisions: how a single reference is spelled in the output
"""

import functools
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

from source_emitter.errors import InvalidNameError

WILDCARD = "*"


def _check_identifier(value: str, what: str) -> None:
    if not value.isidentifier():
        msg = f"{what} is not a valid identifier: {value!r}"
        raise InvalidNameError(msg)


@functools.total_ordering
@dataclass(frozen=True, eq=True)
class QualifiedName:
    """Fully qualified name of a declared type, optionally naming one of its static members.

    Examples:
        java.util.Date -> QualifiedName("java.util", ("Date",))
        com.mattel.Hoverboard.Boards -> QualifiedName("com.mattel", ("Hoverboard", "Boards"))
        java.util.concurrent.TimeUnit.SECONDS (static)
            -> QualifiedName("java.util.concurrent", ("TimeUnit",), member="SECONDS")
    """

    package: str  # "" for the default package
    simple_names: tuple[str, ...]  # outermost first
    member: str | None = None  # static member name or "*"

    def __post_init__(self) -> None:
        """Reject malformed identifiers at construction time."""
        if self.package:
            for segment in self.package.split("."):
                _check_identifier(segment, "Package segment")
        if not self.simple_names:
            msg = f"Qualified name in package {self.package!r} needs at least one simple name"
            raise InvalidNameError(msg)
        for name in self.simple_names:
            _check_identifier(name, "Simple name")
        if self.member is not None and self.member != WILDCARD:
            _check_identifier(self.member, "Member name")

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, QualifiedName):
            return NotImplemented
        return self.canonical_name < other.canonical_name

    @classmethod
    def get(cls, package: str, simple_name: str, *nested: str) -> "QualifiedName":
        """Build a type name from a package, a top-level simple name and nested names."""
        return cls(package, (simple_name, *nested))

    @classmethod
    def best_guess(cls, text: str) -> "QualifiedName":
        """Guess the package/class split of a dotted name.

        Segments before the first capitalized segment form the package; that segment
        and everything after it are simple names.

        Args:
            text: Dotted name such as "java.util.Map.Entry"

        Returns:
            The guessed QualifiedName

        Raises:
            InvalidNameError: If no segment is capitalized, or a package segment is
                capitalized

        Example:
            >>> QualifiedName.best_guess("java.util.Map.Entry")
            QualifiedName(package='java.util', simple_names=('Map', 'Entry'), member=None)
        """
        segments = text.split(".")
        for i, segment in enumerate(segments):
            if segment[:1].isupper():
                return cls(".".join(segments[:i]), tuple(segments[i:]))
            if not segment[:1].islower():
                break
        msg = f"Couldn't make a guess for {text!r}"
        raise InvalidNameError(msg)

    @property
    def simple_name(self) -> str:
        return self.simple_names[-1]

    @property
    def canonical_name(self) -> str:
        """Dotted form: package (if any), simple names, then member (if any)."""
        parts = [*self.simple_names]
        if self.member is not None:
            parts.append(self.member)
        if self.package:
            parts.insert(0, self.package)
        return ".".join(parts)

    def nested(self, name: str) -> "QualifiedName":
        """Return the name of a type nested directly inside this one."""
        return QualifiedName(self.package, (*self.simple_names, name))

    def member_of(self, member: str) -> "QualifiedName":
        """Return a static member reference owned by this type."""
        return QualifiedName(self.package, self.simple_names, member)

    def without_member(self) -> "QualifiedName":
        if self.member is None:
            return self
        return QualifiedName(self.package, self.simple_names)

    def enclosing(self) -> "QualifiedName | None":
        """Return the directly enclosing type, or None for a top-level type."""
        if len(self.simple_names) == 1:
            return None
        return QualifiedName(self.package, self.simple_names[:-1])

    def top_level(self) -> "QualifiedName":
        return QualifiedName(self.package, self.simple_names[:1])

    def enclosing_chain(self) -> Iterator["QualifiedName"]:
        """Yield this type, then each enclosing type out to the top-level one.

        Example:
            For a.B.C.D yields a.B.C.D, a.B.C, a.B
        """
        current: QualifiedName | None = self.without_member()
        while current is not None:
            yield current
            current = current.enclosing()

    def __str__(self) -> str:
        return self.canonical_name


@dataclass(frozen=True)
class ParameterizedTypeName:
    """A raw type applied to type arguments, e.g. List<Hoverboard>."""

    raw_type: QualifiedName
    type_arguments: tuple["TypeName", ...]

    def __post_init__(self) -> None:
        if not self.type_arguments:
            msg = f"No type arguments given for {self.raw_type}"
            raise InvalidNameError(msg)
        if self.raw_type.member is not None:
            msg = f"Raw type cannot name a static member: {self.raw_type}"
            raise InvalidNameError(msg)
        for argument in self.type_arguments:
            if isinstance(argument, QualifiedName) and argument.member is not None:
                msg = f"Type argument cannot name a static member: {argument}"
                raise InvalidNameError(msg)

    @classmethod
    def get(cls, raw_type: QualifiedName, *type_arguments: "TypeName") -> "ParameterizedTypeName":
        return cls(raw_type, tuple(type_arguments))

    def __str__(self) -> str:
        return f"{self.raw_type}<{', '.join(str(a) for a in self.type_arguments)}>"


TypeName: TypeAlias = QualifiedName | ParameterizedTypeName

ANY = QualifiedName.get("kotlin", "Any")
UNIT = QualifiedName.get("kotlin", "Unit")
BOOLEAN = QualifiedName.get("kotlin", "Boolean")
BYTE = QualifiedName.get("kotlin", "Byte")
SHORT = QualifiedName.get("kotlin", "Short")
INT = QualifiedName.get("kotlin", "Int")
LONG = QualifiedName.get("kotlin", "Long")
CHAR = QualifiedName.get("kotlin", "Char")
FLOAT = QualifiedName.get("kotlin", "Float")
DOUBLE = QualifiedName.get("kotlin", "Double")
STRING = QualifiedName.get("kotlin", "String")
ARRAY = QualifiedName.get("kotlin", "Array")

PRIMITIVES: dict[str, QualifiedName] = {
    "boolean": BOOLEAN,
    "byte": BYTE,
    "short": SHORT,
    "int": INT,
    "long": LONG,
    "char": CHAR,
    "float": FLOAT,
    "double": DOUBLE,
    "void": UNIT,
}


def array_of(component: TypeName) -> ParameterizedTypeName:
    """Return the array type of a component type (rendered as Array<component>)."""
    return ParameterizedTypeName(ARRAY, (component,))


def is_array(type_name: TypeName) -> bool:
    return isinstance(type_name, ParameterizedTypeName) and type_name.raw_type == ARRAY


class Modifier(Enum):
    """Declaration modifiers, emitted in the order they are declared here."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    ABSTRACT = "abstract"
    STATIC = "static"
    FINAL = "final"
    OPEN = "open"
    OVERRIDE = "override"


class TypeKind(Enum):
    CLASS = "class"
    INTERFACE = "interface"


@dataclass(frozen=True)
class Unqualified:
    """Rendered through an import, the file's own package, or the default package."""

    simple_names: tuple[str, ...]

    def render(self) -> str:
        return ".".join(self.simple_names)


@dataclass(frozen=True)
class QualifiedSuffix:
    """Rendered as the shortest suffix that resolves through an enclosing declared type."""

    path: tuple[str, ...]

    def render(self) -> str:
        return ".".join(self.path)


@dataclass(frozen=True)
class FullyQualified:
    """Rendered with its canonical, package-qualified name."""

    name: QualifiedName

    def render(self) -> str:
        return self.name.canonical_name


@dataclass(frozen=True)
class StaticallyImported:
    """A static member access rendered as the bare member name."""

    member: str

    def render(self) -> str:
        return self.member


RenderingDecision: TypeAlias = Unqualified | QualifiedSuffix | FullyQualified | StaticallyImported
