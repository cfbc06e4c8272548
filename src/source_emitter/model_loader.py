"""Load a declaration model from JSON.

The JSON document describes one source file:

    {
      "package": "com.example",
      "file_comment": "Generated. DO NOT EDIT!",
      "static_imports": ["java.util.concurrent.TimeUnit.SECONDS", "java.lang.System.*"],
      "skip_java_lang_imports": true,
      "types": [
        {
          "name": "Util",
          "kind": "class",
          "properties": [{"name": "created", "type": "java.util.Date"}],
          "methods": [
            {
              "name": "now",
              "returns": "long",
              "code": [{"statement": "return $T.currentTimeMillis()", "args": [{"type": "java.lang.System"}]}]
            }
          ]
        }
      ]
    }

The document shape is validated by the pydantic models below. Declaration rules
are enforced by the builders the validated model is fed into.

Type strings accept primitives ("long"), arrays ("java.lang.String[]"), generics
("java.util.List<com.mattel.Hoverboard>") and dotted names, whose package/class
split is guessed from capitalization.
"""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, model_validator

from source_emitter.code_block import CodeBlock, CodeBlockBuilder
from source_emitter.errors import ModelLoadError, SourceEmitterError
from source_emitter.models import PRIMITIVES, Modifier, ParameterizedTypeName, QualifiedName, TypeName, array_of
from source_emitter.source_file import SourceFile
from source_emitter.specs import (
    AnnotationSpec,
    MethodSpec,
    ParameterSpec,
    PropertySpec,
    TypeSpec,
    TypeSpecBuilder,
)

CODE_ACTIONS = ("statement", "code", "begin_control_flow", "next_control_flow", "end_control_flow")
ARGUMENT_KINDS = ("type", "literal", "string", "name")


def parse_type(text: str) -> TypeName:
    """Parse a type string into a TypeName.

    Args:
        text: e.g. "long", "java.lang.String[]", "java.util.Map<java.lang.String, kotlin.Int>"

    Returns:
        The parsed TypeName

    Raises:
        ModelLoadError: If the string is not a well-formed type
    """
    type_name, rest = _parse_type_prefix(text.strip())
    if rest.strip():
        msg = f"Unexpected {rest.strip()!r} after type in {text!r}"
        raise ModelLoadError(msg)
    return type_name


def _parse_type_prefix(text: str) -> tuple[TypeName, str]:
    end = 0
    while end < len(text) and (text[end].isalnum() or text[end] in "._"):
        end += 1
    raw = text[:end]
    rest = text[end:].lstrip()
    if not raw:
        msg = f"Expected a type name at {text!r}"
        raise ModelLoadError(msg)

    type_name: TypeName
    try:
        type_name = PRIMITIVES.get(raw) or QualifiedName.best_guess(raw)
    except SourceEmitterError as e:
        raise ModelLoadError(str(e)) from e

    if rest.startswith("<"):
        assert isinstance(type_name, QualifiedName)
        arguments: list[TypeName] = []
        rest = rest[1:]
        while True:
            argument, rest = _parse_type_prefix(rest.lstrip())
            arguments.append(argument)
            rest = rest.lstrip()
            if rest.startswith(","):
                rest = rest[1:]
                continue
            if rest.startswith(">"):
                rest = rest[1:].lstrip()
                break
            msg = f"Unterminated type arguments in {text!r}"
            raise ModelLoadError(msg)
        type_name = ParameterizedTypeName(type_name, tuple(arguments))

    while rest.startswith("[]"):
        type_name = array_of(type_name)
        rest = rest[2:].lstrip()
    return type_name, rest


def _single_key(fields_set: set[str], keys: tuple[str, ...], what: str) -> None:
    if len(fields_set & set(keys)) != 1:
        msg = f"{what} needs exactly one of {', '.join(keys)}"
        raise ValueError(msg)


class CodeArgument(BaseModel):
    """One code argument, keyed by the placeholder that consumes it: {"type": "java.util.Date"}."""

    model_config = {"extra": "forbid"}

    literal: Any = None
    string: str | None = None
    name: str | None = None
    type: str | None = None

    @model_validator(mode="after")
    def validate_single_kind(self) -> "CodeArgument":
        _single_key(self.model_fields_set, ARGUMENT_KINDS, "code argument")
        return self

    def to_argument(self) -> object:
        (kind,) = self.model_fields_set
        if kind == "type":
            assert self.type is not None
            return parse_type(self.type)
        return getattr(self, kind)


class CodeEntry(BaseModel):
    """One code action with its format string: {"statement": "return $L", "args": [{"literal": 0}]}."""

    model_config = {"extra": "forbid"}

    statement: str | None = None
    code: str | None = None
    begin_control_flow: str | None = None
    next_control_flow: str | None = None
    end_control_flow: str | None = None
    args: list[CodeArgument] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_single_action(self) -> "CodeEntry":
        _single_key(self.model_fields_set, CODE_ACTIONS, "code entry")
        if self.format_string is None and self.action != "end_control_flow":
            msg = f"{self.action} needs a format string"
            raise ValueError(msg)
        return self

    @property
    def action(self) -> str:
        return next(action for action in CODE_ACTIONS if action in self.model_fields_set)

    @property
    def format_string(self) -> str | None:
        return getattr(self, self.action)


class AnnotationDeclaration(BaseModel):
    """An annotation with members; a bare annotation may be given as its type string instead."""

    model_config = {"extra": "forbid"}

    members: dict[str, Any] = Field(default_factory=dict)
    type: str


class InitializerDeclaration(BaseModel):
    model_config = {"extra": "forbid"}

    format: str
    args: list[CodeArgument] = Field(default_factory=list)


class ParameterDeclaration(BaseModel):
    model_config = {"extra": "forbid"}

    name: str
    annotations: list[str | AnnotationDeclaration] = Field(default_factory=list)
    type: str


class PropertyDeclaration(BaseModel):
    model_config = {"extra": "forbid"}

    name: str
    modifiers: list[Modifier] = Field(default_factory=list)
    annotations: list[str | AnnotationDeclaration] = Field(default_factory=list)
    initializer: InitializerDeclaration | None = None
    type: str


class MethodDeclaration(BaseModel):
    """A method, or a constructor when "constructor" is true."""

    model_config = {"extra": "forbid"}

    name: str | None = None
    constructor: bool = False
    modifiers: list[Modifier] = Field(default_factory=list)
    annotations: list[str | AnnotationDeclaration] = Field(default_factory=list)
    parameters: list[ParameterDeclaration] = Field(default_factory=list)
    returns: str | None = None
    varargs: bool = False
    code: list[CodeEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_name(self) -> "MethodDeclaration":
        """Validate that every method except a constructor is named."""
        if self.constructor and self.name is not None:
            msg = f"constructor cannot be named {self.name!r}"
            raise ValueError(msg)
        if not self.constructor and self.name is None:
            msg = "method needs a name unless it is a constructor"
            raise ValueError(msg)
        return self


class TypeDeclaration(BaseModel):
    model_config = {"extra": "forbid"}

    name: str
    kind: Literal["class", "interface"] = "class"
    modifiers: list[Modifier] = Field(default_factory=list)
    annotations: list[str | AnnotationDeclaration] = Field(default_factory=list)
    superclass: str | None = None
    superinterfaces: list[str] = Field(default_factory=list)
    properties: list[PropertyDeclaration] = Field(default_factory=list)
    static_block: list[CodeEntry] | None = None
    methods: list[MethodDeclaration] = Field(default_factory=list)
    types: list["TypeDeclaration"] = Field(default_factory=list)


class SourceFileDeclaration(BaseModel):
    """The whole JSON document: one file, its types and its build options."""

    model_config = {"extra": "forbid"}

    package: str = ""
    file_comment: str | None = None
    static_imports: list[str] = Field(default_factory=list)
    skip_java_lang_imports: bool = False
    exclude_from_imports: list[str] = Field(default_factory=list)
    indent: str | None = None
    types: list[TypeDeclaration] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_types(self) -> "SourceFileDeclaration":
        if not self.types:
            msg = "model declares no types"
            raise ValueError(msg)
        return self


def _build_code(entries: list[CodeEntry]) -> CodeBlock:
    builder = CodeBlockBuilder()
    for entry in entries:
        format_string = entry.format_string
        args = [arg.to_argument() for arg in entry.args]
        match entry.action:
            case "statement":
                builder.add_statement(format_string, *args)
            case "code":
                builder.add(format_string, *args)
            case "begin_control_flow":
                builder.begin_control_flow(format_string, *args)
            case "next_control_flow":
                builder.next_control_flow(format_string, *args)
            case "end_control_flow":
                builder.end_control_flow(format_string or None, *args)
    return builder.build()


def _build_annotation(declaration: str | AnnotationDeclaration) -> AnnotationSpec:
    if isinstance(declaration, str):
        return AnnotationSpec.of(QualifiedName.best_guess(declaration))
    builder = AnnotationSpec.builder(QualifiedName.best_guess(declaration.type))
    for name, value in declaration.members.items():
        builder.add_member(name, "$L", value)
    return builder.build()


def _build_property(declaration: PropertyDeclaration) -> PropertySpec:
    builder = PropertySpec.builder(parse_type(declaration.type), declaration.name)
    builder.add_modifiers(*declaration.modifiers)
    for annotation in declaration.annotations:
        builder.add_annotation(_build_annotation(annotation))
    if declaration.initializer is not None:
        initializer = declaration.initializer
        builder.initializer(initializer.format, *[arg.to_argument() for arg in initializer.args])
    return builder.build()


def _build_parameter(declaration: ParameterDeclaration) -> ParameterSpec:
    builder = ParameterSpec.builder(parse_type(declaration.type), declaration.name)
    for annotation in declaration.annotations:
        builder.add_annotation(_build_annotation(annotation))
    return builder.build()


def _build_method(declaration: MethodDeclaration) -> MethodSpec:
    if declaration.constructor:
        builder = MethodSpec.constructor_builder()
    else:
        assert declaration.name is not None
        builder = MethodSpec.method_builder(declaration.name)
    builder.add_modifiers(*declaration.modifiers)
    for annotation in declaration.annotations:
        builder.add_annotation(_build_annotation(annotation))
    for parameter in declaration.parameters:
        builder.add_parameter(_build_parameter(parameter))
    if declaration.returns is not None:
        builder.returns(parse_type(declaration.returns))
    builder.set_varargs(declaration.varargs)
    builder.add_code_block(_build_code(declaration.code))
    return builder.build()


def _build_type_spec(declaration: TypeDeclaration) -> TypeSpec:
    builder: TypeSpecBuilder
    if declaration.kind == "class":
        builder = TypeSpec.class_builder(declaration.name)
    else:
        builder = TypeSpec.interface_builder(declaration.name)

    builder.add_modifiers(*declaration.modifiers)
    for annotation in declaration.annotations:
        builder.add_annotation(_build_annotation(annotation))
    if declaration.superclass is not None:
        builder.superclass(parse_type(declaration.superclass))
    for superinterface in declaration.superinterfaces:
        builder.add_superinterface(parse_type(superinterface))
    for prop in declaration.properties:
        builder.add_property(_build_property(prop))
    if declaration.static_block is not None:
        builder.add_static_block(_build_code(declaration.static_block))
    for method in declaration.methods:
        builder.add_method(_build_method(method))
    for nested in declaration.types:
        builder.add_type(_build_type_spec(nested))
    return builder.build()


def _parse_static_import(text: str) -> QualifiedName:
    owner, _, member = text.rpartition(".")
    if not owner or not member:
        msg = f"Static import needs an owner and a member: {text!r}"
        raise ModelLoadError(msg)
    return QualifiedName.best_guess(owner).member_of(member)


def _build_source_file(declaration: SourceFileDeclaration) -> SourceFile:
    type_specs = [_build_type_spec(t) for t in declaration.types]
    builder = SourceFile.builder(declaration.package, type_specs[0])
    for spec in type_specs[1:]:
        builder.add_type(spec)
    if declaration.file_comment:
        builder.add_file_comment("$L", declaration.file_comment)
    for text in declaration.static_imports:
        builder.add_static_import(_parse_static_import(text))
    builder.skip_java_lang_imports(declaration.skip_java_lang_imports)
    for package_name in declaration.exclude_from_imports:
        builder.exclude_from_imports(package_name)
    if declaration.indent is not None:
        builder.indent(declaration.indent)
    return builder.build()


def _describe_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into "types.0.name: Field required; ..."."""
    return "; ".join(
        f"{'.'.join(str(part) for part in detail['loc']) or 'model'}: {detail['msg']}" for detail in error.errors()
    )


def source_file_from_dict(data: Mapping[str, Any]) -> SourceFile:
    """Build a SourceFile from a decoded JSON model.

    Raises:
        ModelLoadError: If the model is malformed or violates a declaration rule
    """
    try:
        declaration = SourceFileDeclaration.model_validate(data)
    except ValidationError as e:
        msg = f"Malformed model: {_describe_validation_error(e)}"
        raise ModelLoadError(msg) from e

    try:
        return _build_source_file(declaration)
    except ModelLoadError:
        raise
    except SourceEmitterError as e:
        raise ModelLoadError(str(e)) from e


def load_source_file(file_path: Path) -> SourceFile:
    """Read a JSON model file and build its SourceFile.

    Args:
        file_path: Path to the JSON model

    Returns:
        The configured SourceFile

    Raises:
        ModelLoadError: If the file cannot be read, is not valid JSON, or is malformed
    """
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        msg = f"Cannot read {file_path}: {e}"
        raise ModelLoadError(msg) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"{file_path} is not valid JSON: {e}"
        raise ModelLoadError(msg) from e

    if not isinstance(data, Mapping):
        msg = f"{file_path} must contain a JSON object"
        raise ModelLoadError(msg)
    return source_file_from_dict(data)
