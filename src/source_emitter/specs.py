"""Declaration model: annotations, parameters, properties, methods and types.

Each declaration is a frozen dataclass assembled through a mutable, chainable
builder. Builders validate eagerly so that a built declaration is always
well-formed: names are identifiers, nested type names are unique within their
enclosing type, and varargs methods end in an array parameter.
"""

from dataclasses import dataclass

from source_emitter.code_block import CodeBlock, CodeBlockBuilder
from source_emitter.errors import DuplicateTypeError, InvalidNameError, SpecError
from source_emitter.models import Modifier, QualifiedName, TypeKind, TypeName, is_array

CONSTRUCTOR = "<init>"


def _check_name(name: str, what: str) -> None:
    if not name.isidentifier():
        msg = f"{what} name is not a valid identifier: {name!r}"
        raise InvalidNameError(msg)


def _check_type(type_name: TypeName, what: str) -> None:
    if isinstance(type_name, QualifiedName) and type_name.member is not None:
        msg = f"{what} type cannot name a static member: {type_name}"
        raise SpecError(msg)


@dataclass(frozen=True)
class AnnotationSpec:
    """An annotation such as @Component or @Named("x")."""

    type: QualifiedName
    members: tuple[tuple[str, CodeBlock], ...] = ()

    def __post_init__(self) -> None:
        _check_type(self.type, "Annotation")

    @staticmethod
    def of(annotation_type: QualifiedName) -> "AnnotationSpec":
        return AnnotationSpec(annotation_type)

    @staticmethod
    def builder(annotation_type: QualifiedName) -> "AnnotationSpecBuilder":
        return AnnotationSpecBuilder(annotation_type)


class AnnotationSpecBuilder:
    def __init__(self, annotation_type: QualifiedName) -> None:
        self._type = annotation_type
        self._members: list[tuple[str, CodeBlock]] = []

    def add_member(self, name: str, format_string: str, *args: object) -> "AnnotationSpecBuilder":
        _check_name(name, "Annotation member")
        self._members.append((name, CodeBlock.of(format_string, *args)))
        return self

    def build(self) -> AnnotationSpec:
        return AnnotationSpec(self._type, tuple(self._members))


def _to_annotation(annotation: AnnotationSpec | QualifiedName) -> AnnotationSpec:
    if isinstance(annotation, AnnotationSpec):
        return annotation
    return AnnotationSpec(annotation)


@dataclass(frozen=True)
class ParameterSpec:
    """A method or constructor parameter."""

    name: str
    type: TypeName
    annotations: tuple[AnnotationSpec, ...] = ()

    @staticmethod
    def of(parameter_type: TypeName, name: str) -> "ParameterSpec":
        return ParameterSpec.builder(parameter_type, name).build()

    @staticmethod
    def builder(parameter_type: TypeName, name: str) -> "ParameterSpecBuilder":
        return ParameterSpecBuilder(parameter_type, name)


class ParameterSpecBuilder:
    def __init__(self, parameter_type: TypeName, name: str) -> None:
        _check_name(name, "Parameter")
        _check_type(parameter_type, "Parameter")
        self._type = parameter_type
        self._name = name
        self._annotations: list[AnnotationSpec] = []

    def add_annotation(self, annotation: AnnotationSpec | QualifiedName) -> "ParameterSpecBuilder":
        self._annotations.append(_to_annotation(annotation))
        return self

    def build(self) -> ParameterSpec:
        return ParameterSpec(self._name, self._type, tuple(self._annotations))


@dataclass(frozen=True)
class PropertySpec:
    """A property declared in a type body, rendered as "name: Type;"."""

    name: str
    type: TypeName
    annotations: tuple[AnnotationSpec, ...] = ()
    modifiers: frozenset[Modifier] = frozenset()
    initializer: CodeBlock | None = None

    @staticmethod
    def of(property_type: TypeName, name: str, *modifiers: Modifier) -> "PropertySpec":
        return PropertySpec.builder(property_type, name).add_modifiers(*modifiers).build()

    @staticmethod
    def builder(property_type: TypeName, name: str) -> "PropertySpecBuilder":
        return PropertySpecBuilder(property_type, name)


class PropertySpecBuilder:
    def __init__(self, property_type: TypeName, name: str) -> None:
        _check_name(name, "Property")
        _check_type(property_type, "Property")
        self._type = property_type
        self._name = name
        self._annotations: list[AnnotationSpec] = []
        self._modifiers: set[Modifier] = set()
        self._initializer: CodeBlock | None = None

    def add_annotation(self, annotation: AnnotationSpec | QualifiedName) -> "PropertySpecBuilder":
        self._annotations.append(_to_annotation(annotation))
        return self

    def add_modifiers(self, *modifiers: Modifier) -> "PropertySpecBuilder":
        self._modifiers.update(modifiers)
        return self

    def initializer(self, format_string: str, *args: object) -> "PropertySpecBuilder":
        if self._initializer is not None:
            msg = f"initializer was already set on {self._name}"
            raise SpecError(msg)
        self._initializer = CodeBlock.of(format_string, *args)
        return self

    def build(self) -> PropertySpec:
        return PropertySpec(
            name=self._name,
            type=self._type,
            annotations=tuple(self._annotations),
            modifiers=frozenset(self._modifiers),
            initializer=self._initializer,
        )


@dataclass(frozen=True)
class MethodSpec:
    """A method or constructor with its signature and body."""

    name: str
    annotations: tuple[AnnotationSpec, ...]
    modifiers: frozenset[Modifier]
    parameters: tuple[ParameterSpec, ...]
    returns: TypeName | None
    code: CodeBlock
    varargs: bool

    @property
    def is_constructor(self) -> bool:
        return self.name == CONSTRUCTOR

    @staticmethod
    def method_builder(name: str) -> "MethodSpecBuilder":
        _check_name(name, "Method")
        return MethodSpecBuilder(name)

    @staticmethod
    def constructor_builder() -> "MethodSpecBuilder":
        return MethodSpecBuilder(CONSTRUCTOR)


class MethodSpecBuilder:
    def __init__(self, name: str) -> None:
        self._name = name
        self._annotations: list[AnnotationSpec] = []
        self._modifiers: set[Modifier] = set()
        self._parameters: list[ParameterSpec] = []
        self._returns: TypeName | None = None
        self._code = CodeBlockBuilder()
        self._varargs = False

    def add_annotation(self, annotation: AnnotationSpec | QualifiedName) -> "MethodSpecBuilder":
        self._annotations.append(_to_annotation(annotation))
        return self

    def add_modifiers(self, *modifiers: Modifier) -> "MethodSpecBuilder":
        self._modifiers.update(modifiers)
        return self

    def add_parameter(self, parameter: ParameterSpec | TypeName, name: str | None = None) -> "MethodSpecBuilder":
        """Add a parameter, either a built ParameterSpec or a type plus a name."""
        if isinstance(parameter, ParameterSpec):
            self._parameters.append(parameter)
        else:
            if name is None:
                msg = f"parameter of type {parameter} needs a name"
                raise SpecError(msg)
            self._parameters.append(ParameterSpec.of(parameter, name))
        return self

    def returns(self, return_type: TypeName) -> "MethodSpecBuilder":
        if self._name == CONSTRUCTOR:
            msg = "constructor cannot have return type."
            raise SpecError(msg)
        _check_type(return_type, "Return")
        self._returns = return_type
        return self

    def set_varargs(self, varargs: bool = True) -> "MethodSpecBuilder":  # noqa: FBT001, FBT002
        self._varargs = varargs
        return self

    def add_code(self, format_string: str, *args: object) -> "MethodSpecBuilder":
        self._code.add(format_string, *args)
        return self

    def add_code_block(self, code_block: CodeBlock) -> "MethodSpecBuilder":
        self._code.add_code(code_block)
        return self

    def add_statement(self, format_string: str, *args: object) -> "MethodSpecBuilder":
        self._code.add_statement(format_string, *args)
        return self

    def begin_control_flow(self, control_flow: str, *args: object) -> "MethodSpecBuilder":
        self._code.begin_control_flow(control_flow, *args)
        return self

    def next_control_flow(self, control_flow: str, *args: object) -> "MethodSpecBuilder":
        self._code.next_control_flow(control_flow, *args)
        return self

    def end_control_flow(self, control_flow: str | None = None, *args: object) -> "MethodSpecBuilder":
        self._code.end_control_flow(control_flow, *args)
        return self

    def build(self) -> MethodSpec:
        if self._varargs and (not self._parameters or not is_array(self._parameters[-1].type)):
            msg = f"last parameter of varargs method {self._name} must be an array"
            raise SpecError(msg)
        code = self._code.build()
        if Modifier.ABSTRACT in self._modifiers and not code.is_empty():
            msg = f"abstract method {self._name} cannot have code"
            raise SpecError(msg)
        return MethodSpec(
            name=self._name,
            annotations=tuple(self._annotations),
            modifiers=frozenset(self._modifiers),
            parameters=tuple(self._parameters),
            returns=self._returns,
            code=code,
            varargs=self._varargs,
        )


@dataclass(frozen=True)
class TypeSpec:
    """A declared class or interface and everything nested inside it."""

    kind: TypeKind
    name: str
    annotations: tuple[AnnotationSpec, ...]
    modifiers: frozenset[Modifier]
    superclass: TypeName | None
    superinterfaces: tuple[TypeName, ...]
    properties: tuple[PropertySpec, ...]
    static_block: CodeBlock
    methods: tuple[MethodSpec, ...]
    type_specs: tuple["TypeSpec", ...]

    @staticmethod
    def class_builder(name: str) -> "TypeSpecBuilder":
        return TypeSpecBuilder(TypeKind.CLASS, name)

    @staticmethod
    def interface_builder(name: str) -> "TypeSpecBuilder":
        return TypeSpecBuilder(TypeKind.INTERFACE, name)


class TypeSpecBuilder:
    def __init__(self, kind: TypeKind, name: str) -> None:
        _check_name(name, "Type")
        self._kind = kind
        self._name = name
        self._annotations: list[AnnotationSpec] = []
        self._modifiers: set[Modifier] = set()
        self._superclass: TypeName | None = None
        self._superinterfaces: list[TypeName] = []
        self._properties: list[PropertySpec] = []
        self._static_block = CodeBlockBuilder()
        self._methods: list[MethodSpec] = []
        self._type_specs: list[TypeSpec] = []

    def add_annotation(self, annotation: AnnotationSpec | QualifiedName) -> "TypeSpecBuilder":
        self._annotations.append(_to_annotation(annotation))
        return self

    def add_modifiers(self, *modifiers: Modifier) -> "TypeSpecBuilder":
        self._modifiers.update(modifiers)
        return self

    def superclass(self, superclass: TypeName) -> "TypeSpecBuilder":
        if self._kind is not TypeKind.CLASS:
            msg = f"only classes have super classes, not {self._kind.value} {self._name}"
            raise SpecError(msg)
        if self._superclass is not None:
            msg = f"superclass already set to {self._superclass}"
            raise SpecError(msg)
        _check_type(superclass, "Superclass")
        self._superclass = superclass
        return self

    def add_superinterface(self, superinterface: TypeName) -> "TypeSpecBuilder":
        _check_type(superinterface, "Superinterface")
        self._superinterfaces.append(superinterface)
        return self

    def add_property(self, prop: PropertySpec | TypeName, name: str | None = None) -> "TypeSpecBuilder":
        """Add a property, either a built PropertySpec or a type plus a name."""
        if isinstance(prop, PropertySpec):
            self._properties.append(prop)
        else:
            if name is None:
                msg = f"property of type {prop} needs a name"
                raise SpecError(msg)
            self._properties.append(PropertySpec.of(prop, name))
        return self

    def add_static_block(self, block: CodeBlock) -> "TypeSpecBuilder":
        if self._kind is TypeKind.INTERFACE:
            msg = f"interface {self._name} cannot have a static block"
            raise SpecError(msg)
        self._static_block.add_code(block)
        return self

    def add_method(self, method: MethodSpec) -> "TypeSpecBuilder":
        self._methods.append(method)
        return self

    def add_type(self, type_spec: "TypeSpec") -> "TypeSpecBuilder":
        if any(existing.name == type_spec.name for existing in self._type_specs):
            msg = f"{self._name} already declares a nested type named {type_spec.name}"
            raise DuplicateTypeError(msg)
        self._type_specs.append(type_spec)
        return self

    def build(self) -> TypeSpec:
        return TypeSpec(
            kind=self._kind,
            name=self._name,
            annotations=tuple(self._annotations),
            modifiers=frozenset(self._modifiers),
            superclass=self._superclass,
            superinterfaces=tuple(self._superinterfaces),
            properties=tuple(self._properties),
            static_block=self._static_block.build(),
            methods=tuple(self._methods),
            type_specs=tuple(self._type_specs),
        )
