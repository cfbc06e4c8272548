"""Integration tests for whole-file emission: imports, static imports and qualification."""

from collections.abc import Callable
from pathlib import Path

import pytest

from source_emitter.code_block import CodeBlock
from source_emitter.errors import DuplicateTypeError, StaticImportConflictError
from source_emitter.models import INT, LONG, Modifier, ParameterizedTypeName, QualifiedName, array_of
from source_emitter.models import STRING as STRING_TYPE
from source_emitter.source_file import SourceFile
from source_emitter.specs import AnnotationSpec, MethodSpec, ParameterSpec, PropertySpec, TypeSpec

DATE = QualifiedName.get("java.util", "Date")
COLLECTIONS = QualifiedName.get("java.util", "Collections")
TIME_UNIT = QualifiedName.get("java.util.concurrent", "TimeUnit")
SYSTEM = QualifiedName.get("java.lang", "System")
RUNTIME = QualifiedName.get("java.lang", "Runtime")
THREAD_STATE = QualifiedName.get("java.lang", "Thread", "State")
STRING = QualifiedName.get("java.lang", "String")


def _static_import_type_spec(name: str) -> TypeSpec:
    method = (
        MethodSpec.method_builder("minutesToSeconds")
        .add_modifiers(Modifier.PUBLIC, Modifier.STATIC)
        .returns(LONG)
        .add_parameter(LONG, "minutes")
        .add_statement("$T.gc()", SYSTEM)
        .add_statement("return $1T.SECONDS.convert(minutes, $1T.MINUTES)", TIME_UNIT)
        .build()
    )
    return TypeSpec.class_builder(name).add_method(method).build()


def test_import_static_readme_example() -> None:
    """Test static imports of explicit members and wildcards side by side."""
    hoverboard = QualifiedName.get("com.mattel", "Hoverboard")
    named_boards = QualifiedName.get("com.mattel", "Hoverboard", "Boards")
    array_list = QualifiedName.get("java.util", "ArrayList")
    list_of_hoverboards = ParameterizedTypeName.get(QualifiedName.get("java.util", "List"), hoverboard)
    beyond = (
        MethodSpec.method_builder("beyond")
        .returns(list_of_hoverboards)
        .add_statement("$T result = new $T<>()", list_of_hoverboards, array_list)
        .add_statement("result.add($T.createNimbus(2000))", hoverboard)
        .add_statement('result.add($T.createNimbus("2001"))', hoverboard)
        .add_statement("result.add($T.createNimbus($T.THUNDERBOLT))", hoverboard, named_boards)
        .add_statement("$T.sort(result)", COLLECTIONS)
        .add_statement("return result.isEmpty() ? $T.emptyList() : result", COLLECTIONS)
        .build()
    )
    hello = TypeSpec.class_builder("HelloWorld").add_method(beyond).build()
    example = (
        SourceFile.builder("com.example.helloworld", hello)
        .add_static_import(hoverboard, "createNimbus")
        .add_static_import(named_boards, "*")
        .add_static_import(COLLECTIONS, "*")
        .build()
    )

    assert str(example) == (
        "package com.example.helloworld\n"
        "\n"
        "import static com.mattel.Hoverboard.Boards.*\n"
        "import static com.mattel.Hoverboard.createNimbus\n"
        "import static java.util.Collections.*\n"
        "\n"
        "import com.mattel.Hoverboard\n"
        "import java.util.ArrayList\n"
        "import java.util.List\n"
        "\n"
        "class HelloWorld {\n"
        "  fun beyond(): List<Hoverboard> {\n"
        "    List<Hoverboard> result = new ArrayList<>()\n"
        "    result.add(createNimbus(2000))\n"
        '    result.add(createNimbus("2001"))\n'
        "    result.add(createNimbus(THUNDERBOLT))\n"
        "    sort(result)\n"
        "    return result.isEmpty() ? emptyList() : result\n"
        "  }\n"
        "}\n"
    )


def test_import_static_for_crazy_formats_works() -> None:
    """Test that unusual placeholder sequences next to a wildcard static import still emit."""
    method = MethodSpec.method_builder("method").build()
    source = (
        SourceFile.builder(
            "com.squareup.tacos",
            TypeSpec.class_builder("Taco")
            .add_static_block(
                CodeBlock.builder()
                .add_statement("$T", RUNTIME)
                .add_statement("$T.a()", RUNTIME)
                .add_statement("$T.X", RUNTIME)
                .add_statement("$T$T", RUNTIME, RUNTIME)
                .add_statement("$T.$T", RUNTIME, RUNTIME)
                .add_statement("$1T$1T", RUNTIME)
                .add_statement("$1T$2L$1T", RUNTIME, "?")
                .add_statement("$1T$2L$2S$1T", RUNTIME, "?")
                .add_statement("$1T$2L$2S$1T$3N$1T", RUNTIME, "?", method)
                .add_statement("$T$L", RUNTIME, "?")
                .add_statement("$T$S", RUNTIME, "?")
                .add_statement("$T$N", RUNTIME, method)
                .build()
            )
            .build(),
        )
        .add_static_import(RUNTIME, "*")
        .build()
    )

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "import static java.lang.Runtime.*\n"
        "\n"
        "import java.lang.Runtime\n"
        "\n"
        "class Taco {\n"
        "  static {\n"
        "    Runtime\n"
        "    a()\n"
        "    X\n"
        "    RuntimeRuntime\n"
        "    Runtime.Runtime\n"
        "    RuntimeRuntime\n"
        "    Runtime?Runtime\n"
        '    Runtime?"?"Runtime\n'
        '    Runtime?"?"RuntimemethodRuntime\n'
        "    Runtime?\n"
        '    Runtime"?"\n'
        "    Runtimemethod\n"
        "  }\n"
        "}\n"
    )


def test_import_static_mixed() -> None:
    """Test explicit and wildcard static imports of nested and top-level owners."""
    source = (
        SourceFile.builder(
            "com.squareup.tacos",
            TypeSpec.class_builder("Taco")
            .add_static_block(
                CodeBlock.builder()
                .add_statement('assert $1T.valueOf("BLOCKED") == $1T.BLOCKED', THREAD_STATE)
                .add_statement("$T.gc()", SYSTEM)
                .add_statement("$1T.out.println($1T.nanoTime())", SYSTEM)
                .build()
            )
            .add_method(
                MethodSpec.constructor_builder()
                .add_parameter(array_of(THREAD_STATE), "states")
                .set_varargs()
                .build()
            )
            .build(),
        )
        .add_static_import(THREAD_STATE.member_of("BLOCKED"))
        .add_static_import(SYSTEM, "*")
        .add_static_import(THREAD_STATE, "valueOf")
        .build()
    )

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "import static java.lang.System.*\n"
        "import static java.lang.Thread.State.BLOCKED\n"
        "import static java.lang.Thread.State.valueOf\n"
        "\n"
        "import java.lang.Thread\n"
        "\n"
        "class Taco {\n"
        "  static {\n"
        '    assert valueOf("BLOCKED") == BLOCKED\n'
        "    gc()\n"
        "    out.println(nanoTime())\n"
        "  }\n"
        "\n"
        "  constructor(vararg states: Thread.State) {\n"
        "  }\n"
        "}\n"
    )


def test_import_static_none() -> None:
    """Test that without static imports the owners are imported as types."""
    source = SourceFile.builder("readme", _static_import_type_spec("Util")).build()

    assert str(source) == (
        "package readme\n"
        "\n"
        "import java.lang.System\n"
        "import java.util.concurrent.TimeUnit\n"
        "import kotlin.Long\n"
        "\n"
        "class Util {\n"
        "  public static fun minutesToSeconds(minutes: Long): Long {\n"
        "    System.gc()\n"
        "    return TimeUnit.SECONDS.convert(minutes, TimeUnit.MINUTES)\n"
        "  }\n"
        "}\n"
    )


def test_import_static_once() -> None:
    """Test that one static import leaves the other member access qualified."""
    source = (
        SourceFile.builder("readme", _static_import_type_spec("Util"))
        .add_static_import(TIME_UNIT.member_of("SECONDS"))
        .build()
    )

    assert str(source) == (
        "package readme\n"
        "\n"
        "import static java.util.concurrent.TimeUnit.SECONDS\n"
        "\n"
        "import java.lang.System\n"
        "import java.util.concurrent.TimeUnit\n"
        "import kotlin.Long\n"
        "\n"
        "class Util {\n"
        "  public static fun minutesToSeconds(minutes: Long): Long {\n"
        "    System.gc()\n"
        "    return SECONDS.convert(minutes, TimeUnit.MINUTES)\n"
        "  }\n"
        "}\n"
    )


def test_import_static_twice() -> None:
    """Test that an owner used only through static imports is not imported as a type."""
    source = (
        SourceFile.builder("readme", _static_import_type_spec("Util"))
        .add_static_import(TIME_UNIT.member_of("SECONDS"))
        .add_static_import(TIME_UNIT.member_of("MINUTES"))
        .build()
    )

    assert str(source) == (
        "package readme\n"
        "\n"
        "import static java.util.concurrent.TimeUnit.MINUTES\n"
        "import static java.util.concurrent.TimeUnit.SECONDS\n"
        "\n"
        "import java.lang.System\n"
        "import kotlin.Long\n"
        "\n"
        "class Util {\n"
        "  public static fun minutesToSeconds(minutes: Long): Long {\n"
        "    System.gc()\n"
        "    return SECONDS.convert(minutes, MINUTES)\n"
        "  }\n"
        "}\n"
    )


def test_import_static_using_wildcards() -> None:
    """Test that wildcard static imports cover every member of their owners."""
    source = (
        SourceFile.builder("readme", _static_import_type_spec("Util"))
        .add_static_import(TIME_UNIT, "*")
        .add_static_import(SYSTEM, "*")
        .build()
    )

    assert str(source) == (
        "package readme\n"
        "\n"
        "import static java.lang.System.*\n"
        "import static java.util.concurrent.TimeUnit.*\n"
        "\n"
        "import kotlin.Long\n"
        "\n"
        "class Util {\n"
        "  public static fun minutesToSeconds(minutes: Long): Long {\n"
        "    gc()\n"
        "    return SECONDS.convert(minutes, MINUTES)\n"
        "  }\n"
        "}\n"
    )


def test_no_imports() -> None:
    """Test a file without references."""
    source = SourceFile.builder("com.squareup.tacos", TypeSpec.class_builder("Taco").build()).build()

    assert str(source) == ("package com.squareup.tacos\n\nclass Taco {\n}\n")


def test_single_import() -> None:
    """Test that a property type is imported and written by its simple name."""
    source = SourceFile.builder(
        "com.squareup.tacos",
        TypeSpec.class_builder("Taco").add_property(DATE, "madeFreshDate").build(),
    ).build()

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "import java.util.Date\n"
        "\n"
        "class Taco {\n"
        "  madeFreshDate: Date;\n"
        "}\n"
    )


def test_conflicting_imports() -> None:
    """Test that the first Date wins the import and the second is fully qualified."""
    source = SourceFile.builder(
        "com.squareup.tacos",
        TypeSpec.class_builder("Taco")
        .add_property(DATE, "madeFreshDate")
        .add_property(QualifiedName.get("java.sql", "Date"), "madeFreshDatabaseDate")
        .build(),
    ).build()

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "import java.util.Date\n"
        "\n"
        "class Taco {\n"
        "  madeFreshDate: Date;\n"
        "\n"
        "  madeFreshDatabaseDate: java.sql.Date;\n"
        "}\n"
    )


def test_skip_java_lang_imports_with_conflicting_class_last() -> None:
    """Test that a skipped java.lang type still claims its simple name when used first."""
    source = (
        SourceFile.builder(
            "com.squareup.tacos",
            TypeSpec.class_builder("Taco")
            .add_property(QualifiedName.get("java.lang", "Float"), "litres")
            .add_property(QualifiedName.get("com.squareup.soda", "Float"), "beverage")
            .build(),
        )
        .skip_java_lang_imports(True)
        .build()
    )

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "class Taco {\n"
        "  litres: Float;\n"
        "\n"
        "  beverage: com.squareup.soda.Float;\n"
        "}\n"
    )


def test_skip_java_lang_imports_with_conflicting_class_first() -> None:
    """Test that whatever is used first wins, even against java.lang."""
    source = (
        SourceFile.builder(
            "com.squareup.tacos",
            TypeSpec.class_builder("Taco")
            .add_property(QualifiedName.get("com.squareup.soda", "Float"), "beverage")
            .add_property(QualifiedName.get("java.lang", "Float"), "litres")
            .build(),
        )
        .skip_java_lang_imports(True)
        .build()
    )

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "import com.squareup.soda.Float\n"
        "\n"
        "class Taco {\n"
        "  beverage: Float;\n"
        "\n"
        "  litres: java.lang.Float;\n"
        "}\n"
    )


def test_conflicting_parent_name() -> None:
    """Test that a sibling nested Twin forces the path from the top-level class."""
    source = SourceFile.builder(
        "com.squareup.tacos",
        TypeSpec.class_builder("A")
        .add_type(
            TypeSpec.class_builder("B")
            .add_type(TypeSpec.class_builder("Twin").build())
            .add_type(
                TypeSpec.class_builder("C")
                .add_property(QualifiedName.get("com.squareup.tacos", "A", "Twin", "D"), "d")
                .build()
            )
            .build()
        )
        .add_type(TypeSpec.class_builder("Twin").add_type(TypeSpec.class_builder("D").build()).build())
        .build(),
    ).build()

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "class A {\n"
        "  class B {\n"
        "    class Twin {\n"
        "    }\n"
        "\n"
        "    class C {\n"
        "      d: A.Twin.D;\n"
        "    }\n"
        "  }\n"
        "\n"
        "  class Twin {\n"
        "    class D {\n"
        "    }\n"
        "  }\n"
        "}\n"
    )


def test_conflicting_child_name() -> None:
    """Test that a Twin nested in the occurrence scope itself shadows A.Twin."""
    source = SourceFile.builder(
        "com.squareup.tacos",
        TypeSpec.class_builder("A")
        .add_type(
            TypeSpec.class_builder("B")
            .add_type(
                TypeSpec.class_builder("C")
                .add_property(QualifiedName.get("com.squareup.tacos", "A", "Twin", "D"), "d")
                .add_type(TypeSpec.class_builder("Twin").build())
                .build()
            )
            .build()
        )
        .add_type(TypeSpec.class_builder("Twin").add_type(TypeSpec.class_builder("D").build()).build())
        .build(),
    ).build()

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "class A {\n"
        "  class B {\n"
        "    class C {\n"
        "      d: A.Twin.D;\n"
        "\n"
        "      class Twin {\n"
        "      }\n"
        "    }\n"
        "  }\n"
        "\n"
        "  class Twin {\n"
        "    class D {\n"
        "    }\n"
        "  }\n"
        "}\n"
    )


def test_conflicting_name_out_of_scope() -> None:
    """Test that a Twin nested two levels down does not shadow A.Twin."""
    source = SourceFile.builder(
        "com.squareup.tacos",
        TypeSpec.class_builder("A")
        .add_type(
            TypeSpec.class_builder("B")
            .add_type(
                TypeSpec.class_builder("C")
                .add_property(QualifiedName.get("com.squareup.tacos", "A", "Twin", "D"), "d")
                .add_type(TypeSpec.class_builder("Nested").add_type(TypeSpec.class_builder("Twin").build()).build())
                .build()
            )
            .build()
        )
        .add_type(TypeSpec.class_builder("Twin").add_type(TypeSpec.class_builder("D").build()).build())
        .build(),
    ).build()

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "class A {\n"
        "  class B {\n"
        "    class C {\n"
        "      d: Twin.D;\n"
        "\n"
        "      class Nested {\n"
        "        class Twin {\n"
        "        }\n"
        "      }\n"
        "    }\n"
        "  }\n"
        "\n"
        "  class Twin {\n"
        "    class D {\n"
        "    }\n"
        "  }\n"
        "}\n"
    )


def test_nested_class_and_superclass_share_name() -> None:
    """Test that a nested Builder extending Message.Builder is spelled through the import."""
    source = SourceFile.builder(
        "com.squareup.tacos",
        TypeSpec.class_builder("Taco")
        .superclass(QualifiedName.get("com.squareup.wire", "Message"))
        .add_type(
            TypeSpec.class_builder("Builder")
            .superclass(QualifiedName.get("com.squareup.wire", "Message", "Builder"))
            .build()
        )
        .build(),
    ).build()

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "import com.squareup.wire.Message\n"
        "\n"
        "class Taco extends Message {\n"
        "  class Builder extends Message.Builder {\n"
        "  }\n"
        "}\n"
    )


def test_annotation_is_nested_class() -> None:
    """Test that an annotation naming a nested class is spelled through its import."""
    source = SourceFile.builder(
        "com.squareup.tacos",
        TypeSpec.class_builder("TestComponent")
        .add_annotation(QualifiedName.get("dagger", "Component"))
        .add_type(
            TypeSpec.class_builder("Builder").add_annotation(QualifiedName.get("dagger", "Component", "Builder")).build()
        )
        .build(),
    ).build()

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "import dagger.Component\n"
        "\n"
        "@Component\n"
        "class TestComponent {\n"
        "  @Component.Builder\n"
        "  class Builder {\n"
        "  }\n"
        "}\n"
    )


def test_default_package() -> None:
    """Test that a default-package file has no package line but still imports."""
    source = SourceFile.builder(
        "",
        TypeSpec.class_builder("HelloWorld")
        .add_method(
            MethodSpec.method_builder("main")
            .add_modifiers(Modifier.PUBLIC, Modifier.STATIC)
            .add_parameter(array_of(STRING), "args")
            .add_code("$T.out.println($S);\n", SYSTEM, "Hello World!")
            .build()
        )
        .build(),
    ).build()

    assert str(source) == (
        "import java.lang.String\n"
        "import java.lang.System\n"
        "import kotlin.Array\n"
        "\n"
        "class HelloWorld {\n"
        "  public static fun main(args: Array<String>) {\n"
        '    System.out.println("Hello World!");\n'
        "  }\n"
        "}\n"
    )


def test_default_package_types_are_not_imported() -> None:
    """Test that default-package types never produce an import line."""
    source = SourceFile.builder(
        "hello",
        TypeSpec.class_builder("World").add_superinterface(QualifiedName.get("", "Test")).build(),
    ).build()

    assert str(source) == ("package hello\n\nclass World implements Test {\n}\n")


def test_top_of_file_comment() -> None:
    """Test a single-line file comment."""
    source = (
        SourceFile.builder("com.squareup.tacos", TypeSpec.class_builder("Taco").build())
        .add_file_comment("Generated $L by JavaPoet. DO NOT EDIT!", "2015-01-13")
        .build()
    )

    assert str(source) == (
        "// Generated 2015-01-13 by JavaPoet. DO NOT EDIT!\n"
        "package com.squareup.tacos\n"
        "\n"
        "class Taco {\n"
        "}\n"
    )


def test_empty_lines_in_top_of_file_comment() -> None:
    """Test that empty comment lines are bare "//" without trailing spaces."""
    source = (
        SourceFile.builder("com.squareup.tacos", TypeSpec.class_builder("Taco").build())
        .add_file_comment("\nGENERATED FILE:\n\nDO NOT EDIT!\n")
        .build()
    )

    assert str(source) == (
        "//\n"
        "// GENERATED FILE:\n"
        "//\n"
        "// DO NOT EDIT!\n"
        "//\n"
        "package com.squareup.tacos\n"
        "\n"
        "class Taco {\n"
        "}\n"
    )


def test_package_class_conflicts_with_nested_class() -> None:
    """Test that a nested A shadows the same-package A, which must be fully qualified."""
    source = SourceFile.builder(
        "com.squareup.tacos",
        TypeSpec.class_builder("Taco")
        .add_property(QualifiedName.get("com.squareup.tacos", "A"), "a")
        .add_type(TypeSpec.class_builder("A").build())
        .build(),
    ).build()

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "class Taco {\n"
        "  a: com.squareup.tacos.A;\n"
        "\n"
        "  class A {\n"
        "  }\n"
        "}\n"
    )


def test_multiple_top_level_types() -> None:
    """Test that top-level types are separated by a blank line and share one import block."""
    source = (
        SourceFile.builder("com.example", TypeSpec.class_builder("First").add_property(DATE, "created").build())
        .add_type(TypeSpec.class_builder("Second").add_property(DATE, "updated").build())
        .build()
    )

    assert str(source) == (
        "package com.example\n"
        "\n"
        "import java.util.Date\n"
        "\n"
        "class First {\n"
        "  created: Date;\n"
        "}\n"
        "\n"
        "class Second {\n"
        "  updated: Date;\n"
        "}\n"
    )


def test_same_package_type_reserves_its_simple_name() -> None:
    """Test that a same-package type keeps its simple name even when used second."""
    source = SourceFile.builder(
        "com.squareup.tacos",
        TypeSpec.class_builder("Taco")
        .add_property(QualifiedName.get("com.other", "Sauce"), "other")
        .add_property(QualifiedName.get("com.squareup.tacos", "Sauce"), "mine")
        .build(),
    ).build()

    assert str(source) == (
        "package com.squareup.tacos\n"
        "\n"
        "class Taco {\n"
        "  other: com.other.Sauce;\n"
        "\n"
        "  mine: Sauce;\n"
        "}\n"
    )


def test_default_and_same_package_types_with_one_name() -> None:
    """Test that a same-package type sharing a default-package type's name is fully qualified."""
    source = SourceFile.builder(
        "hello",
        TypeSpec.class_builder("World")
        .add_property(QualifiedName.get("", "Test"), "a")
        .add_property(QualifiedName.get("hello", "Test"), "b")
        .build(),
    ).build()

    assert str(source) == (
        "package hello\n"
        "\n"
        "class World {\n"
        "  a: Test;\n"
        "\n"
        "  b: hello.Test;\n"
        "}\n"
    )


def test_header_does_not_see_own_nested_types() -> None:
    """Test that a supertype is resolved outside the body that declares a same-named nested type."""
    inner = QualifiedName.get("com.lib", "Inner")
    source = SourceFile.builder(
        "com.example",
        TypeSpec.class_builder("Outer")
        .superclass(inner)
        .add_property(inner, "delegate")
        .add_type(TypeSpec.class_builder("Inner").build())
        .build(),
    ).build()

    assert str(source) == (
        "package com.example\n"
        "\n"
        "import com.lib.Inner\n"
        "\n"
        "class Outer extends Inner {\n"
        "  delegate: com.lib.Inner;\n"
        "\n"
        "  class Inner {\n"
        "  }\n"
        "}\n"
    )


def test_members_and_control_flow() -> None:
    """Test property modifiers and initializers plus nested control flow in a method body."""
    source = SourceFile.builder(
        "com.example",
        TypeSpec.class_builder("Counter")
        .add_property(
            PropertySpec.builder(INT, "limit").add_modifiers(Modifier.FINAL, Modifier.PRIVATE).initializer("$L", 10).build()
        )
        .add_method(
            MethodSpec.method_builder("describe")
            .add_parameter(INT, "count")
            .returns(STRING_TYPE)
            .begin_control_flow("if (count > $L)", 1)
            .add_statement("return $S", "many")
            .next_control_flow("else")
            .add_statement("return $S", "few")
            .end_control_flow()
            .build()
        )
        .build(),
    ).build()

    assert str(source) == (
        "package com.example\n"
        "\n"
        "import kotlin.Int\n"
        "import kotlin.String\n"
        "\n"
        "class Counter {\n"
        "  private final limit: Int = 10;\n"
        "\n"
        "  fun describe(count: Int): String {\n"
        "    if (count > 1) {\n"
        '      return "many"\n'
        "    } else {\n"
        '      return "few"\n'
        "    }\n"
        "  }\n"
        "}\n"
    )


def test_interface_with_abstract_method_and_annotated_parameter() -> None:
    """Test an interface header, an abstract method and an inline parameter annotation."""
    named = AnnotationSpec.builder(QualifiedName.get("javax.inject", "Named")).add_member("value", "$S", "db").build()
    source = SourceFile.builder(
        "com.example",
        TypeSpec.interface_builder("Store")
        .add_modifiers(Modifier.PUBLIC)
        .add_superinterface(QualifiedName.get("java.io", "Closeable"))
        .add_method(
            MethodSpec.method_builder("open")
            .add_modifiers(Modifier.ABSTRACT, Modifier.PUBLIC)
            .add_parameter(ParameterSpec.builder(STRING_TYPE, "url").add_annotation(named).build())
            .build()
        )
        .build(),
    ).build()

    assert str(source) == (
        "package com.example\n"
        "\n"
        "import java.io.Closeable\n"
        "import javax.inject.Named\n"
        "import kotlin.String\n"
        "\n"
        "public interface Store extends Closeable {\n"
        '  public abstract fun open(@Named("db") url: String)\n'
        "}\n"
    )


def test_custom_indent() -> None:
    """Test that the configured indent string is used for every level."""
    source = (
        SourceFile.builder(
            "com.example",
            TypeSpec.class_builder("Outer").add_type(TypeSpec.class_builder("Inner").add_property(DATE, "at").build()).build(),
        )
        .indent("    ")
        .build()
    )

    assert str(source) == (
        "package com.example\n"
        "\n"
        "import java.util.Date\n"
        "\n"
        "class Outer {\n"
        "    class Inner {\n"
        "        at: Date;\n"
        "    }\n"
        "}\n"
    )


def test_duplicate_top_level_type_rejected() -> None:
    """Test that two top-level types of the same name are rejected."""
    builder = SourceFile.builder("com.example", TypeSpec.class_builder("Taco").build())

    with pytest.raises(DuplicateTypeError):
        builder.add_type(TypeSpec.class_builder("Taco").build())


def test_conflicting_static_imports_rejected() -> None:
    """Test that one member explicitly imported from two owners fails at build time."""
    builder = (
        SourceFile.builder("com.example", TypeSpec.class_builder("Taco").build())
        .add_static_import(TIME_UNIT, "SECONDS")
        .add_static_import(QualifiedName.get("com.example", "Units"), "SECONDS")
    )

    with pytest.raises(StaticImportConflictError):
        builder.build()


def test_explicit_static_import_beats_wildcard() -> None:
    """Test that a wildcard does not cover a member explicitly imported from another owner."""
    units = QualifiedName.get("com.example.units", "Units")
    source = (
        SourceFile.builder(
            "com.example",
            TypeSpec.class_builder("Clock")
            .add_static_block(
                CodeBlock.builder().add_statement("$T.SECONDS", TIME_UNIT).add_statement("$T.SECONDS", units).build()
            )
            .build(),
        )
        .add_static_import(TIME_UNIT, "*")
        .add_static_import(units, "SECONDS")
        .build()
    )

    assert str(source) == (
        "package com.example\n"
        "\n"
        "import static com.example.units.Units.SECONDS\n"
        "import static java.util.concurrent.TimeUnit.*\n"
        "\n"
        "import java.util.concurrent.TimeUnit\n"
        "\n"
        "class Clock {\n"
        "  static {\n"
        "    TimeUnit.SECONDS\n"
        "    SECONDS\n"
        "  }\n"
        "}\n"
    )


def test_resolve_matches_written_text() -> None:
    """Test that resolve() reports the imports the written file carries."""
    source = SourceFile.builder(
        "com.squareup.tacos",
        TypeSpec.class_builder("Taco")
        .add_property(DATE, "madeFreshDate")
        .add_property(QualifiedName.get("java.sql", "Date"), "madeFreshDatabaseDate")
        .build(),
    ).build()

    resolution = source.resolve()

    assert resolution.type_import_lines() == ("java.util.Date",)
    assert [decision.render() for decision in resolution.decisions] == ["Date", "java.sql.Date"]


def test_write_to_creates_package_directories(tmp_path: Path) -> None:
    """Test that write_to places the file under its package directories."""
    source = SourceFile.builder("com.squareup.tacos", TypeSpec.class_builder("Taco").build()).build()

    path = source.write_to(tmp_path)

    assert path == tmp_path / "com" / "squareup" / "tacos" / "Taco.kt"
    assert path.read_text(encoding="utf-8") == str(source)


def test_write_to_default_package(tmp_path: Path) -> None:
    """Test that a default-package file is written directly into the output directory."""
    source = SourceFile.builder("", TypeSpec.class_builder("Main").build()).build()

    assert source.write_to(tmp_path) == tmp_path / "Main.kt"


def _conflicting_dates_file() -> SourceFile:
    return SourceFile.builder(
        "com.squareup.tacos",
        TypeSpec.class_builder("Taco")
        .add_property(DATE, "madeFreshDate")
        .add_property(QualifiedName.get("java.sql", "Date"), "madeFreshDatabaseDate")
        .build(),
    ).build()


def _readme_static_import_file() -> SourceFile:
    return (
        SourceFile.builder("readme", _static_import_type_spec("Util"))
        .add_static_import(TIME_UNIT, "SECONDS", "MINUTES")
        .build()
    )


@pytest.mark.parametrize("build", [_readme_static_import_file, _conflicting_dates_file])
def test_repeated_builds_are_identical(build: Callable[[], SourceFile]) -> None:
    """Test that the same model and configuration always produce the same text and decisions."""
    first = build()
    second = build()

    assert str(first) == str(second)
    assert str(first) == str(first)
    assert first.resolve().decisions == second.resolve().decisions
    assert first.resolve().type_import_lines() == second.resolve().type_import_lines()
    assert first.resolve().static_import_lines() == second.resolve().static_import_lines()
