"""A complete source file: header comment, package, imports and type declarations.

Building the text is a two-pass pipeline:

1. Build the scope tree from the declared types.
2. Collecting pass: emit the whole file into a throwaway buffer with a
   ReferenceCollector, which records every reference in discovery order.
3. Resolve: compute the import tables and one rendering decision per reference.
4. Final pass: emit again, replaying the decisions, with the import blocks
   written ahead of the type bodies.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from source_emitter.code_block import CodeBlock, CodeBlockBuilder
from source_emitter.code_writer import CodeWriter
from source_emitter.errors import DuplicateTypeError, InvalidNameError
from source_emitter.import_registry import StaticImportTable
from source_emitter.models import QualifiedName
from source_emitter.reference_collector import ReferenceCollector
from source_emitter.resolver import DecisionReplay, Resolution, Resolver
from source_emitter.scope_tree import ScopeNode, build_scope_tree
from source_emitter.specs import TypeSpec

logger = logging.getLogger(__name__)

JAVA_LANG = "java.lang"
FILE_EXTENSION = ".kt"


@dataclass(frozen=True)
class SourceFile:
    """An immutable, fully configured source file ready to be written."""

    package_name: str
    type_specs: tuple[TypeSpec, ...]
    file_comment: CodeBlock
    static_imports: StaticImportTable
    excluded_import_packages: frozenset[str]
    indent: str

    @staticmethod
    def builder(package_name: str, type_spec: TypeSpec) -> "SourceFileBuilder":
        return SourceFileBuilder(package_name, type_spec)

    def _resolve_in(self, scope_root: ScopeNode) -> Resolution:
        # The collecting pass writes no import blocks: they hold no references.
        collector = ReferenceCollector()
        self._emit(CodeWriter(io.StringIO(), collector, scope_root, self.indent), static_lines=(), type_lines=())
        resolver = Resolver(self.package_name, self.static_imports, self.excluded_import_packages)
        return resolver.resolve(collector.references)

    def resolve(self) -> Resolution:
        """Collect every reference of the file and decide how each one is spelled."""
        return self._resolve_in(build_scope_tree(self.package_name, self.type_specs))

    def write(self, out: TextIO) -> None:
        """Write the complete file text to out."""
        scope_root = build_scope_tree(self.package_name, self.type_specs)
        resolution = self._resolve_in(scope_root)

        replay = DecisionReplay(resolution)
        self._emit(
            CodeWriter(out, replay, scope_root, self.indent),
            static_lines=resolution.static_import_lines(),
            type_lines=resolution.type_import_lines(),
        )
        replay.finish()
        logger.debug("Wrote %s with %d references", self.path_name(), len(resolution.references))

    def _emit(self, writer: CodeWriter, *, static_lines: tuple[str, ...], type_lines: tuple[str, ...]) -> None:
        if not self.file_comment.is_empty():
            writer.emit_comment(self.file_comment)

        if self.package_name:
            writer.emit("package $L\n", self.package_name)
            writer.emit("\n")

        if static_lines:
            for line in static_lines:
                writer.emit("import static $L\n", line)
            writer.emit("\n")

        if type_lines:
            for line in type_lines:
                writer.emit("import $L\n", line)
            writer.emit("\n")

        for i, spec in enumerate(self.type_specs):
            if i > 0:
                writer.emit("\n")
            writer.emit_type_spec(spec)

    def __str__(self) -> str:
        out = io.StringIO()
        self.write(out)
        return out.getvalue()

    def path_name(self) -> str:
        """Relative path of the file: package directories plus the first type's name."""
        parts = [*self.package_name.split("."), self.type_specs[0].name + FILE_EXTENSION]
        return "/".join(part for part in parts if part)

    def write_to(self, directory: Path) -> Path:
        """Write the file below directory, creating package directories as needed.

        Args:
            directory: Root output directory

        Returns:
            Path of the written file
        """
        output_path = directory / self.path_name()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(str(self), encoding="utf-8")
        return output_path


class SourceFileBuilder:
    def __init__(self, package_name: str, type_spec: TypeSpec) -> None:
        if package_name:
            for segment in package_name.split("."):
                if not segment.isidentifier():
                    msg = f"Invalid package name: {package_name!r}"
                    raise InvalidNameError(msg)
        self._package_name = package_name
        self._type_specs: list[TypeSpec] = [type_spec]
        self._file_comment = CodeBlockBuilder()
        self._static_imports: list[QualifiedName] = []
        self._excluded_import_packages: set[str] = set()
        self._indent = "  "

    def add_file_comment(self, format_string: str, *args: object) -> "SourceFileBuilder":
        self._file_comment.add(format_string, *args)
        return self

    def add_type(self, type_spec: TypeSpec) -> "SourceFileBuilder":
        """Add another top-level type to the file."""
        if any(existing.name == type_spec.name for existing in self._type_specs):
            msg = f"File already declares a top-level type named {type_spec.name}"
            raise DuplicateTypeError(msg)
        self._type_specs.append(type_spec)
        return self

    def add_static_import(self, owner: QualifiedName, *members: str) -> "SourceFileBuilder":
        """Add static imports of members of owner ("*" imports all of them).

        owner may already name its member, e.g. TimeUnit.member_of("SECONDS"), in which
        case no further members are needed.
        """
        if owner.member is not None:
            self._static_imports.append(owner)
        elif not members:
            msg = f"members of {owner} to statically import are required"
            raise InvalidNameError(msg)
        for member in members:
            self._static_imports.append(owner.without_member().member_of(member))
        return self

    def skip_java_lang_imports(self, skip: bool) -> "SourceFileBuilder":  # noqa: FBT001
        if skip:
            self._excluded_import_packages.add(JAVA_LANG)
        else:
            self._excluded_import_packages.discard(JAVA_LANG)
        return self

    def exclude_from_imports(self, package_name: str) -> "SourceFileBuilder":
        """Never write import lines for types of package_name (they still claim their simple names)."""
        self._excluded_import_packages.add(package_name)
        return self

    def indent(self, indent: str) -> "SourceFileBuilder":
        self._indent = indent
        return self

    def build(self) -> SourceFile:
        return SourceFile(
            package_name=self._package_name,
            type_specs=tuple(self._type_specs),
            file_comment=self._file_comment.build(),
            static_imports=StaticImportTable.of(self._static_imports),
            excluded_import_packages=frozenset(self._excluded_import_packages),
            indent=self._indent,
        )
