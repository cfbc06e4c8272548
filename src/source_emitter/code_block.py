"""Code fragments with placeholders for literals, strings, names and types.

A CodeBlock is an immutable list of format parts plus the arguments they consume.
Format parts are either literal text or one of the placeholders below:

    $L  literal, emitted as-is (nested CodeBlocks are emitted recursively)
    $S  string, emitted as a quoted and escaped string literal
    $N  name of a declaration (or a plain string)
    $T  type; every $T becomes a reference the resolver decides how to spell
    $$  a literal dollar sign
    $>  increase the indentation level
    $<  decrease the indentation level
    $[  begin a statement
    $]  end a statement

Arguments are consumed either relatively ("$T $T") or by 1-based index
("$1T $2L $1T"), never both in one format string.
"""

from dataclasses import dataclass
from typing import Any

from source_emitter.errors import FormatError
from source_emitter.models import ParameterizedTypeName, QualifiedName, TypeName

NO_ARG_PLACEHOLDERS = frozenset("$><[]")
ARG_PLACEHOLDERS = frozenset("LSNT")


def _arg_to_name(arg: object) -> str:
    if isinstance(arg, str):
        return arg
    name = getattr(arg, "name", None)
    if isinstance(name, str):
        return name
    msg = f"expected name but was {arg!r}"
    raise FormatError(msg)


def _arg_to_string(arg: object) -> str | None:
    return None if arg is None else str(arg)


def _arg_to_type(arg: object) -> TypeName:
    if isinstance(arg, QualifiedName) and arg.member is not None:
        msg = f"expected type but was static member {arg}; write $T.{arg.member} with the owner type"
        raise FormatError(msg)
    if isinstance(arg, QualifiedName | ParameterizedTypeName):
        return arg
    msg = f"expected type but was {arg!r}"
    raise FormatError(msg)


def _convert_argument(format_string: str, placeholder: str, arg: object) -> object:
    match placeholder:
        case "N":
            return _arg_to_name(arg)
        case "L":
            return arg
        case "S":
            return _arg_to_string(arg)
        case "T":
            return _arg_to_type(arg)
        case _:
            msg = f"invalid format string: {format_string!r}"
            raise FormatError(msg)


@dataclass(frozen=True)
class CodeBlock:
    """An immutable code fragment: format parts and the arguments they consume."""

    format_parts: tuple[str, ...]
    args: tuple[Any, ...]

    @staticmethod
    def of(format_string: str, *args: object) -> "CodeBlock":
        return CodeBlock.builder().add(format_string, *args).build()

    @staticmethod
    def builder() -> "CodeBlockBuilder":
        return CodeBlockBuilder()

    @staticmethod
    def empty() -> "CodeBlock":
        return CodeBlock((), ())

    def is_empty(self) -> bool:
        return not self.format_parts

    def to_builder(self) -> "CodeBlockBuilder":
        builder = CodeBlockBuilder()
        builder.format_parts.extend(self.format_parts)
        builder.args.extend(self.args)
        return builder


class CodeBlockBuilder:
    """Mutable builder for CodeBlock; every method returns the builder for chaining."""

    def __init__(self) -> None:
        self.format_parts: list[str] = []
        self.args: list[Any] = []

    def add(self, format_string: str, *args: object) -> "CodeBlockBuilder":  # noqa: C901, PLR0912
        """Parse a format string and append its parts and converted arguments.

        Args:
            format_string: Text with $-placeholders
            args: Arguments consumed by the placeholders

        Returns:
            This builder

        Raises:
            FormatError: On dangling or unknown placeholders, out-of-range indexes,
                mixed indexed/relative arguments, or unused arguments
        """
        has_relative = False
        has_indexed = False
        relative_count = 0
        indexed_counts = [0] * len(args)

        p = 0
        while p < len(format_string):
            if format_string[p] != "$":
                next_p = format_string.find("$", p + 1)
                if next_p == -1:
                    next_p = len(format_string)
                self.format_parts.append(format_string[p:next_p])
                p = next_p
                continue

            p += 1  # '$'
            # Consume zero or more digits, leaving c as the first non-digit after the '$'.
            index_start = p
            while True:
                if p >= len(format_string):
                    msg = f"dangling format characters in {format_string!r}"
                    raise FormatError(msg)
                c = format_string[p]
                p += 1
                if not c.isdigit():
                    break
            index_end = p - 1

            if c in NO_ARG_PLACEHOLDERS:
                if index_start != index_end:
                    msg = "$$, $>, $<, $[ and $] may not have an index"
                    raise FormatError(msg)
                self.format_parts.append("$" + c)
                continue

            if c not in ARG_PLACEHOLDERS:
                msg = f"invalid format string: {format_string!r}"
                raise FormatError(msg)

            if index_start < index_end:
                index = int(format_string[index_start:index_end]) - 1
                has_indexed = True
                if 0 <= index < len(args):
                    indexed_counts[index] += 1
            else:
                index = relative_count
                has_relative = True
                relative_count += 1

            if not 0 <= index < len(args):
                placeholder = format_string[index_start - 1 : index_end + 1]
                msg = f"index {index + 1} for {placeholder!r} not in range (received {len(args)} arguments)"
                raise FormatError(msg)
            if has_indexed and has_relative:
                msg = "cannot mix indexed and positional parameters"
                raise FormatError(msg)

            self.args.append(_convert_argument(format_string, c, args[index]))
            self.format_parts.append("$" + c)

        if has_relative and relative_count < len(args):
            msg = f"unused arguments: expected {relative_count}, received {len(args)}"
            raise FormatError(msg)
        if has_indexed:
            unused = [f"${i + 1}" for i, count in enumerate(indexed_counts) if count == 0]
            if unused:
                s = "" if len(unused) == 1 else "s"
                msg = f"unused argument{s}: {', '.join(unused)}"
                raise FormatError(msg)
        if not has_relative and not has_indexed and args:
            msg = f"unused arguments: expected 0, received {len(args)}"
            raise FormatError(msg)
        return self

    def add_statement(self, format_string: str, *args: object) -> "CodeBlockBuilder":
        """Add a single statement; continuation lines are indented twice."""
        self.add("$[")
        self.add(format_string, *args)
        self.add("\n$]")
        return self

    def begin_control_flow(self, control_flow: str, *args: object) -> "CodeBlockBuilder":
        """Open a block such as "if (x)" and indent its body.

        Args:
            control_flow: The control flow construct and its code, like "if (foo == 5)".
                Shouldn't contain braces or newline characters.
            args: Arguments for the control flow format string
        """
        self.add(control_flow + " {\n", *args)
        self.indent()
        return self

    def next_control_flow(self, control_flow: str, *args: object) -> "CodeBlockBuilder":
        """Close the current block and open a sibling such as "else"."""
        self.unindent()
        self.add("} " + control_flow + " {\n", *args)
        self.indent()
        return self

    def end_control_flow(self, control_flow: str | None = None, *args: object) -> "CodeBlockBuilder":
        """Close the current block, optionally with a trailer such as "while (x)"."""
        self.unindent()
        if control_flow is None:
            self.add("}\n")
        else:
            self.add("} " + control_flow + "\n", *args)
        return self

    def add_code(self, code_block: CodeBlock) -> "CodeBlockBuilder":
        self.format_parts.extend(code_block.format_parts)
        self.args.extend(code_block.args)
        return self

    def indent(self) -> "CodeBlockBuilder":
        self.format_parts.append("$>")
        return self

    def unindent(self) -> "CodeBlockBuilder":
        self.format_parts.append("$<")
        return self

    def build(self) -> CodeBlock:
        return CodeBlock(tuple(self.format_parts), tuple(self.args))


def _character_literal_without_single_quotes(c: str) -> str:
    match c:
        case "\b":
            return "\\b"
        case "\t":
            return "\\t"
        case "\n":
            return "\\n"
        case "\f":
            return "\\f"
        case "\r":
            return "\\r"
        case '"':
            return '"'
        case "'":
            return "\\'"
        case "\\":
            return "\\\\"
        case _:
            if ord(c) < 0x20 or 0x7F <= ord(c) <= 0x9F:
                return f"\\u{ord(c):04x}"
            return c


def string_literal_with_double_quotes(value: str, indent: str) -> str:
    """Quote and escape a string; embedded newlines continue on a new "+ " line."""
    result = ['"']
    for i, c in enumerate(value):
        if c == "'":
            result.append("'")
            continue
        if c == '"':
            result.append('\\"')
            continue
        result.append(_character_literal_without_single_quotes(c))
        if c == "\n" and i + 1 < len(value):
            result.append(f'"\n{indent}{indent}+ "')
    result.append('"')
    return "".join(result)
