"""Emitter: lays out declarations and code fragments as text.

CodeWriter streams text to a TextIO, handling indentation, comment prefixes and
multi-line statements. Every type it encounters is handed to a ReferenceHandler
together with the scope it occurs in; the handler answers with the rendering
decision to write. The same walk therefore serves both the collecting pass
(ReferenceCollector) and the final pass (DecisionReplay).
"""

from collections.abc import Iterable
from typing import Protocol, TextIO

from source_emitter.code_block import CodeBlock, string_literal_with_double_quotes
from source_emitter.models import (
    UNIT,
    Modifier,
    ParameterizedTypeName,
    QualifiedName,
    RenderingDecision,
    StaticallyImported,
    TypeKind,
    TypeName,
)
from source_emitter.scope_tree import ScopeNode
from source_emitter.specs import AnnotationSpec, MethodSpec, ParameterSpec, PropertySpec, TypeSpec


class ReferenceHandler(Protocol):
    """Decides how each type and static-member reference is written."""

    def type_reference(self, name: QualifiedName, scope: ScopeNode, *, in_header: bool) -> RenderingDecision: ...

    def static_reference(
        self, owner: QualifiedName, member: str, scope: ScopeNode, *, in_header: bool
    ) -> RenderingDecision: ...


def extract_member_name(part: str) -> str:
    """Return the longest identifier prefix of part.

    Example:
        >>> extract_member_name("SECONDS.convert(minutes, ")
        'SECONDS'
    """
    end = 1
    while end < len(part) and part[: end + 1].isidentifier():
        end += 1
    return part[:end]


def _static_member_of(part: str) -> str | None:
    """The member named by literal text like ".member..." following a type, if any."""
    if not part.startswith(".") or not part[1:2].isidentifier():
        return None
    return extract_member_name(part[1:])


def _format_literal(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class CodeWriter:
    """Writes one file's declarations, asking a ReferenceHandler how to spell types."""

    def __init__(self, out: TextIO, references: ReferenceHandler, scope_root: ScopeNode, indent: str = "  ") -> None:
        self._out = out
        self._references = references
        self._indent = indent
        self._indent_level = 0
        self._comment = False
        self._trailing_newline = False
        self._statement_line = -1
        # (scope, in_header) frames; the root frame stands for file-level text.
        self._scopes: list[tuple[ScopeNode, bool]] = [(scope_root, False)]

    def indent(self, levels: int = 1) -> "CodeWriter":
        self._indent_level += levels
        return self

    def unindent(self, levels: int = 1) -> "CodeWriter":
        assert self._indent_level - levels >= 0, f"cannot unindent {levels} from {self._indent_level}"
        self._indent_level -= levels
        return self

    def emit_comment(self, code_block: CodeBlock) -> None:
        """Emit a code block as "//" line comments, one per line of its text."""
        self._trailing_newline = True  # Force the '//' prefix for the comment.
        self._comment = True
        try:
            self.emit_code(code_block)
            self.emit("\n")
        finally:
            self._comment = False

    def emit(self, format_string: str, *args: object) -> "CodeWriter":
        return self.emit_code(CodeBlock.of(format_string, *args))

    def emit_code(self, code_block: CodeBlock) -> "CodeWriter":  # noqa: C901
        """Emit a code block, resolving each $T through the reference handler.

        A type immediately followed by literal text of the form ".member" is a static
        member access; the handler decides whether it collapses to the bare member.
        """
        parts = code_block.format_parts
        args = iter(code_block.args)
        i = 0
        while i < len(parts):
            part = parts[i]
            match part:
                case "$L":
                    self._emit_literal(next(args))
                case "$N":
                    self.emit_and_indent(next(args))
                case "$S":
                    string = next(args)
                    self.emit_and_indent(
                        string_literal_with_double_quotes(string, self._indent) if string is not None else "null"
                    )
                case "$T":
                    type_name = next(args)
                    following = parts[i + 1] if i + 1 < len(parts) else ""
                    member = _static_member_of(following) if isinstance(type_name, QualifiedName) else None
                    if member is not None:
                        decision = self._static_reference(type_name, member)
                        if isinstance(decision, StaticallyImported):
                            self.emit_and_indent(following[1:])
                            i += 1
                        else:
                            self.emit_and_indent(decision.render())
                    else:
                        self.emit_type(type_name)
                case "$$":
                    self.emit_and_indent("$")
                case "$>":
                    self.indent()
                case "$<":
                    self.unindent()
                case "$[":
                    assert self._statement_line == -1, "statement enter $[ followed by statement enter $["
                    self._statement_line = 0
                case "$]":
                    assert self._statement_line != -1, "statement exit $] has no matching statement enter $["
                    if self._statement_line > 0:
                        self.unindent(2)  # End a multi-line statement. Decrease the indentation level.
                    self._statement_line = -1
                case _:
                    self.emit_and_indent(part)
            i += 1
        return self

    def emit_and_indent(self, text: str) -> "CodeWriter":
        """Emit text, indenting every new line and prefixing comment lines."""
        first = True
        for line in text.split("\n"):
            # Emit a newline character. Make sure blank lines in comments look good.
            if not first:
                if self._comment and self._trailing_newline:
                    self._emit_indentation()
                    self._out.write("//")
                self._out.write("\n")
                self._trailing_newline = True
                if self._statement_line != -1:
                    if self._statement_line == 0:
                        self.indent(2)  # Begin multiple-line statement. Increase the indentation level.
                    self._statement_line += 1
            first = False
            if not line:
                continue  # Don't indent empty lines.

            if self._trailing_newline:
                self._emit_indentation()
                if self._comment:
                    self._out.write("// ")
            self._out.write(line)
            self._trailing_newline = False
        return self

    def _emit_indentation(self) -> None:
        self._out.write(self._indent * self._indent_level)

    def _emit_literal(self, value: object) -> None:
        if isinstance(value, CodeBlock):
            self.emit_code(value)
        else:
            self.emit_and_indent(_format_literal(value))

    def _static_reference(self, owner: QualifiedName, member: str) -> RenderingDecision:
        scope, in_header = self._scopes[-1]
        return self._references.static_reference(owner, member, scope, in_header=in_header)

    def emit_type(self, type_name: TypeName) -> "CodeWriter":
        """Emit a type, resolving every class name in it."""
        if isinstance(type_name, ParameterizedTypeName):
            self.emit_type(type_name.raw_type)
            self.emit_and_indent("<")
            for i, argument in enumerate(type_name.type_arguments):
                if i > 0:
                    self.emit_and_indent(", ")
                self.emit_type(argument)
            self.emit_and_indent(">")
            return self
        scope, in_header = self._scopes[-1]
        decision = self._references.type_reference(type_name, scope, in_header=in_header)
        return self.emit_and_indent(decision.render())

    def emit_annotations(self, annotations: Iterable[AnnotationSpec], *, inline: bool) -> None:
        for annotation in annotations:
            self.emit_annotation(annotation)
            self.emit(" " if inline else "\n")

    def emit_annotation(self, annotation: AnnotationSpec) -> None:
        self.emit("@$T", annotation.type)
        if not annotation.members:
            return
        self.emit("(")
        if len(annotation.members) == 1 and annotation.members[0][0] == "value":
            self.emit_code(annotation.members[0][1])
        else:
            for i, (name, value) in enumerate(annotation.members):
                if i > 0:
                    self.emit(", ")
                self.emit("$L = ", name)
                self.emit_code(value)
        self.emit(")")

    def emit_modifiers(self, modifiers: Iterable[Modifier]) -> None:
        present = set(modifiers)
        for modifier in Modifier:
            if modifier in present:
                self.emit_and_indent(modifier.value)
                self.emit_and_indent(" ")

    def emit_property(self, prop: PropertySpec) -> None:
        self.emit_annotations(prop.annotations, inline=False)
        self.emit_modifiers(prop.modifiers)
        self.emit("$L: $T", prop.name, prop.type)
        if prop.initializer is not None:
            self.emit(" = ")
            self.emit_code(prop.initializer)
        self.emit(";\n")

    def emit_parameter(self, parameter: ParameterSpec, *, varargs: bool) -> None:
        self.emit_annotations(parameter.annotations, inline=True)
        parameter_type = parameter.type
        if varargs:
            assert isinstance(parameter_type, ParameterizedTypeName)
            parameter_type = parameter_type.type_arguments[0]
            self.emit("vararg ")
        self.emit("$L: $T", parameter.name, parameter_type)

    def emit_method(self, method: MethodSpec) -> None:
        """Emit "fun name(params): Return { body }" or "constructor(params) { body }"."""
        self.emit_annotations(method.annotations, inline=False)
        self.emit_modifiers(method.modifiers)
        if method.is_constructor:
            self.emit("constructor(")
        else:
            self.emit("fun $L(", method.name)
        for i, parameter in enumerate(method.parameters):
            if i > 0:
                self.emit(", ")
            last = i == len(method.parameters) - 1
            self.emit_parameter(parameter, varargs=method.varargs and last)
        self.emit(")")
        if method.returns is not None and method.returns != UNIT:
            self.emit(": $T", method.returns)

        if Modifier.ABSTRACT in method.modifiers:
            self.emit("\n")
            return

        self.emit(" {\n")
        self.indent()
        self.emit_code(method.code)
        self.unindent()
        self.emit("}\n")

    def emit_type_spec(self, spec: TypeSpec) -> None:  # noqa: C901
        """Emit a type declaration and its members.

        The header is resolved with the type itself on the scope stack but without
        its nested types; the body sees the nested types too.
        """
        previous_statement_line = self._statement_line
        self._statement_line = -1
        parent, _ = self._scopes[-1]
        node = parent.child(spec.name)
        try:
            self._scopes.append((node, True))
            self.emit_annotations(spec.annotations, inline=False)
            self.emit_modifiers(spec.modifiers)
            self.emit("$L $L", spec.kind.value, spec.name)
            if spec.superclass is not None:
                self.emit(" extends $T", spec.superclass)
            if spec.superinterfaces:
                keyword = " extends" if spec.kind is TypeKind.INTERFACE else " implements"
                self.emit(keyword)
                for i, superinterface in enumerate(spec.superinterfaces):
                    self.emit(" $T" if i == 0 else ", $T", superinterface)
            self._scopes.pop()
            self.emit(" {\n")

            self._scopes.append((node, False))
            self.indent()
            first_member = True
            for prop in spec.properties:
                if not first_member:
                    self.emit("\n")
                self.emit_property(prop)
                first_member = False

            if not spec.static_block.is_empty():
                if not first_member:
                    self.emit("\n")
                self.emit("static {\n")
                self.indent()
                self.emit_code(spec.static_block)
                self.unindent()
                self.emit("}\n")
                first_member = False

            constructors = [m for m in spec.methods if m.is_constructor]
            methods = [m for m in spec.methods if not m.is_constructor]
            for method in (*constructors, *methods):
                if not first_member:
                    self.emit("\n")
                self.emit_method(method)
                first_member = False

            for nested in spec.type_specs:
                if not first_member:
                    self.emit("\n")
                self.emit_type_spec(nested)
                first_member = False

            self.unindent()
            self._scopes.pop()
            self.emit("}\n")
        finally:
            self._statement_line = previous_statement_line
