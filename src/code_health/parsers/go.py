"""Go fact extractor built on tree-sitter."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from loguru import logger

from ..config.defaults import GO_FILE_SUFFIX, GO_TEST_FILE_SUFFIX
from ..config.thresholds import MethodClusteringConfig
from ..core.exceptions import ParsingError
from ..core.facts import (
    DecisionPoints,
    FieldUsage,
    FunctionFacts,
    MethodFacts,
    PackageFacts,
    StructFacts,
    is_private_name,
    is_utility_method,
)

# Node types contributing one decision point each
_IF_NODES = {"if_statement"}
_LOOP_NODES = {"for_statement"}
_SWITCH_NODES = {"expression_switch_statement", "type_switch_statement"}
_CASE_NODES = {"expression_case", "type_case"}
_SELECT_CASE_NODES = {"communication_case"}
_LOGICAL_OPERATORS = {"&&", "||"}

_TYPE_WRAPPERS = {"pointer_type", "parenthesized_type"}


@dataclass
class _GoFile:
    """One parsed source file of a package."""

    file_path: str
    source: bytes
    root: Any
    package_name: str = ""
    aliases: dict[str, str] = field(default_factory=dict)
    imports: set[str] = field(default_factory=set)

    def text(self, node: Any) -> str:
        return self.source[node.start_byte : node.end_byte].decode(
            "utf-8", errors="replace"
        )


@dataclass
class _MethodDecl:
    """A method declaration waiting for its struct to be known."""

    file: _GoFile
    struct_name: str
    receiver_name: str
    name: str
    body: Any


def _walk(node: Any):
    """Yield nodes of a subtree in pre-order without recursion."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _strip_quotes(literal: str) -> str:
    return literal.strip().strip('"`')


class GoFactExtractor:
    """Extract package facts from Go source directories.

    One extractor is shared by the whole run; the tree-sitter parser is
    created lazily on first use.
    """

    def __init__(self, clustering_config: MethodClusteringConfig | None = None) -> None:
        """Initialize extractor.

        Args:
            clustering_config: Settings used to flag utility methods
        """
        self.clustering_config = clustering_config or MethodClusteringConfig()
        self._parser = None

    def _ensure_parser_initialized(self) -> None:
        """Create the tree-sitter Go parser (lazy loading)."""
        if self._parser is None:
            from tree_sitter_language_pack import get_parser

            self._parser = get_parser("go")
            logger.debug("Go tree-sitter parser initialized")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract_package(self, directory: Path, rel_path: str) -> PackageFacts | None:
        """Extract the facts of the Go package in one directory.

        Args:
            directory: Directory holding the package's ``.go`` files
            rel_path: Project-relative, slash-normalized directory path
                ("" for the project root)

        Returns:
            PackageFacts, or None if the directory has no Go source files

        Raises:
            ParsingError: If a file cannot be read or has syntax errors
        """
        go_files = sorted(
            p
            for p in directory.iterdir()
            if p.is_file()
            and p.name.endswith(GO_FILE_SUFFIX)
            and not p.name.endswith(GO_TEST_FILE_SUFFIX)
        )
        if not go_files:
            return None

        self._ensure_parser_initialized()
        files = [self._parse_file(p, rel_path) for p in go_files]
        return self._build_package(files, rel_path)

    def parse_source(self, source: str, file_path: str = "main.go") -> PackageFacts:
        """Extract facts from a single in-memory Go file.

        Args:
            source: Go source text
            file_path: Path recorded in the facts

        Returns:
            PackageFacts for the file's package

        Raises:
            ParsingError: If the source has syntax errors
        """
        self._ensure_parser_initialized()
        go_file = self._parse_bytes(source.encode("utf-8"), file_path)
        return self._build_package([go_file], "")

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def _parse_file(self, path: Path, rel_path: str) -> _GoFile:
        try:
            source = path.read_bytes()
        except OSError as e:
            raise ParsingError(
                f"Cannot read {path}: {e}", context={"file": str(path)}
            ) from e

        file_path = str(PurePosixPath(rel_path, path.name)) if rel_path else path.name
        return self._parse_bytes(source, file_path)

    def _parse_bytes(self, source: bytes, file_path: str) -> _GoFile:
        tree = self._parser.parse(source)
        root = tree.root_node
        if root.has_error:
            line = self._first_error_line(root)
            raise ParsingError(
                f"Syntax error in {file_path} near line {line}",
                context={"file": file_path, "line": line},
            )

        go_file = _GoFile(file_path=file_path, source=source, root=root)
        for child in root.named_children:
            if child.type == "package_clause":
                for sub in child.named_children:
                    if sub.type == "package_identifier":
                        go_file.package_name = go_file.text(sub)
            elif child.type == "import_declaration":
                self._collect_imports(child, go_file)
        return go_file

    @staticmethod
    def _first_error_line(root: Any) -> int:
        for node in _walk(root):
            if node.type == "ERROR" or node.is_missing:
                return node.start_point[0] + 1
        return root.start_point[0] + 1

    @staticmethod
    def _collect_imports(declaration: Any, go_file: _GoFile) -> None:
        for node in _walk(declaration):
            if node.type != "import_spec":
                continue
            path_node = node.child_by_field_name("path")
            if path_node is None:
                continue
            import_path = _strip_quotes(go_file.text(path_node))
            go_file.imports.add(import_path)

            name_node = node.child_by_field_name("name")
            if name_node is not None:
                alias = go_file.text(name_node)
                if alias in ("_", "."):
                    continue
            else:
                alias = import_path.rsplit("/", 1)[-1]
            go_file.aliases[alias] = import_path

    # ------------------------------------------------------------------
    # Package assembly
    # ------------------------------------------------------------------

    def _build_package(self, files: list[_GoFile], rel_path: str) -> PackageFacts:
        names = Counter(f.package_name for f in files if f.package_name)
        if names:
            package_name, _ = min(names.items(), key=lambda item: (-item[1], item[0]))
        else:
            package_name = PurePosixPath(rel_path).name if rel_path else "main"

        struct_fields: dict[str, tuple[str, tuple[str, ...]]] = {}
        method_decls: list[_MethodDecl] = []
        functions: list[FunctionFacts] = []
        imports: set[str] = set()
        line_counts: dict[str, int] = {}

        for go_file in files:
            imports |= go_file.imports
            line_counts[go_file.file_path] = self._file_line_count(go_file.root)

            for node in go_file.root.named_children:
                if node.type == "type_declaration":
                    for name, fields in self._struct_types(node, go_file):
                        struct_fields.setdefault(name, (go_file.file_path, fields))
                elif node.type == "function_declaration":
                    functions.append(self._function_facts(node, go_file))
                elif node.type == "method_declaration":
                    decl = self._method_decl(node, go_file)
                    method_decls.append(decl)
                    functions.append(self._function_facts(node, go_file, decl))

        structs = []
        for struct_name, (file_path, fields) in struct_fields.items():
            own = [d for d in method_decls if d.struct_name == struct_name]
            method_names = {d.name for d in own}
            structs.append(
                StructFacts(
                    name=struct_name,
                    file_path=file_path,
                    fields=fields,
                    methods=tuple(
                        self._method_facts(d, set(fields), method_names) for d in own
                    ),
                )
            )

        logger.debug(
            f"Extracted package '{package_name}' ({rel_path or '.'}): "
            f"{len(structs)} struct(s), {len(functions)} function(s)"
        )

        return PackageFacts(
            name=package_name,
            path=rel_path,
            structs=tuple(structs),
            functions=tuple(functions),
            imports=frozenset(imports),
            file_line_counts=line_counts,
        )

    @staticmethod
    def _file_line_count(root: Any) -> int:
        """Lines from the package clause to the end of the last declaration."""
        nodes = [n for n in root.named_children if n.type != "comment"]
        if not nodes:
            return 0
        return nodes[-1].end_point[0] - nodes[0].start_point[0] + 1

    def _struct_types(self, declaration: Any, go_file: _GoFile):
        """Yield (name, fields) for each struct type spec in a declaration."""
        for spec in declaration.named_children:
            if spec.type != "type_spec":
                continue
            name_node = spec.child_by_field_name("name")
            type_node = spec.child_by_field_name("type")
            if name_node is None or type_node is None:
                continue
            if type_node.type != "struct_type":
                continue
            yield go_file.text(name_node), self._struct_fields(type_node, go_file)

    @staticmethod
    def _struct_fields(struct_type: Any, go_file: _GoFile) -> tuple[str, ...]:
        fields: list[str] = []
        for node in struct_type.named_children:
            if node.type != "field_declaration_list":
                continue
            for declaration in node.named_children:
                if declaration.type != "field_declaration":
                    continue
                # Embedded fields carry no name
                for name_node in declaration.children_by_field_name("name"):
                    name = go_file.text(name_node)
                    if name != "_" and name not in fields:
                        fields.append(name)
        return tuple(fields)

    def _receiver(self, method: Any, go_file: _GoFile) -> tuple[str, str]:
        """Return (receiver type name, receiver binding) of a method."""
        receiver = method.child_by_field_name("receiver")
        if receiver is None:
            return "", ""

        for param in receiver.named_children:
            if param.type != "parameter_declaration":
                continue
            name_node = param.child_by_field_name("name")
            type_node = param.child_by_field_name("type")
            binding = go_file.text(name_node) if name_node is not None else ""
            return self._base_type_name(type_node, go_file), binding

        return "", ""

    @staticmethod
    def _base_type_name(type_node: Any, go_file: _GoFile) -> str:
        node = type_node
        while node is not None and node.type in _TYPE_WRAPPERS:
            node = node.named_children[0] if node.named_children else None
        if node is not None and node.type == "generic_type":
            node = node.child_by_field_name("type")
        if node is None or node.type != "type_identifier":
            return ""
        return go_file.text(node)

    def _method_decl(self, node: Any, go_file: _GoFile) -> _MethodDecl:
        struct_name, binding = self._receiver(node, go_file)
        name_node = node.child_by_field_name("name")
        return _MethodDecl(
            file=go_file,
            struct_name=struct_name,
            receiver_name=binding if binding != "_" else "",
            name=go_file.text(name_node) if name_node is not None else "",
            body=node.child_by_field_name("body"),
        )

    # ------------------------------------------------------------------
    # Per-declaration facts
    # ------------------------------------------------------------------

    def _method_facts(
        self, decl: _MethodDecl, fields: set[str], method_names: set[str]
    ) -> MethodFacts:
        usage: dict[str, int] = {}
        calls: Counter[str] = Counter()

        if decl.body is not None and decl.receiver_name:
            usage = self._field_usage(decl.body, decl.file, decl.receiver_name, fields)
            for node in _walk(decl.body):
                if node.type != "call_expression":
                    continue
                callee = self._receiver_member(
                    node.child_by_field_name("function"), decl.file, decl.receiver_name
                )
                if callee is not None and callee in method_names:
                    calls[f"{decl.struct_name}.{callee}"] += 1

        return MethodFacts(
            qualified_name=f"{decl.struct_name}.{decl.name}",
            receiver_name=decl.receiver_name,
            is_private=is_private_name(decl.name),
            is_utility=is_utility_method(decl.name, self.clustering_config),
            field_usage=usage,
            calls=dict(calls),
        )

    @staticmethod
    def _receiver_member(node: Any, go_file: _GoFile, receiver: str) -> str | None:
        """Return ``member`` if node is the selector ``receiver.member``."""
        if node is None or node.type != "selector_expression":
            return None
        operand = node.child_by_field_name("operand")
        member = node.child_by_field_name("field")
        if operand is None or member is None or operand.type != "identifier":
            return None
        if go_file.text(operand) != receiver:
            return None
        return go_file.text(member)

    def _field_usage(
        self, body: Any, go_file: _GoFile, receiver: str, fields: set[str]
    ) -> dict[str, int]:
        """Weighted usage of the struct's fields inside a method body.

        A receiver field on the left side of an assignment is a write, an
        increment or decrement is a read and a write, every other receiver
        field selector is a read.
        """
        usage: dict[str, FieldUsage] = {}

        def mark(name: str, access: FieldUsage) -> None:
            usage[name] = usage.get(name, FieldUsage.UNUSED).combine(access)

        def field_of(node: Any) -> str | None:
            name = self._receiver_member(node, go_file, receiver)
            return name if name in fields else None

        stack = [body]
        while stack:
            node = stack.pop()

            if node.type == "assignment_statement":
                left = node.child_by_field_name("left")
                right = node.child_by_field_name("right")
                targets = left.named_children if left is not None else []
                for target in targets:
                    name = field_of(target)
                    if name is not None:
                        mark(name, FieldUsage.WRITE)
                    else:
                        stack.append(target)
                if right is not None:
                    stack.append(right)
                continue

            if node.type in ("inc_statement", "dec_statement"):
                target = node.named_children[0] if node.named_children else None
                name = field_of(target)
                if name is not None:
                    mark(name, FieldUsage.READ_WRITE)
                elif target is not None:
                    stack.append(target)
                continue

            name = field_of(node)
            if name is not None:
                mark(name, FieldUsage.READ)
                continue

            stack.extend(node.children)

        return {name: int(weight) for name, weight in usage.items() if weight}

    def _function_facts(
        self, node: Any, go_file: _GoFile, method: _MethodDecl | None = None
    ) -> FunctionFacts:
        name_node = node.child_by_field_name("name")
        name = go_file.text(name_node) if name_node is not None else ""
        if method is not None and method.struct_name:
            name = f"{method.struct_name}.{name}"

        body = node.child_by_field_name("body")
        if body is None:
            return FunctionFacts(
                qualified_name=name, file_path=go_file.file_path, has_body=False
            )

        receiver = method.receiver_name if method is not None else ""
        counts: Counter[str] = Counter()
        used_imports: set[str] = set()
        calls: set[str] = set()

        for child in _walk(body):
            kind = child.type
            if kind in _IF_NODES:
                counts["if"] += 1
            elif kind in _LOOP_NODES:
                counts["loop"] += 1
            elif kind in _SWITCH_NODES:
                counts["switch"] += 1
            elif kind in _CASE_NODES:
                counts["case"] += 1
            elif kind in _SELECT_CASE_NODES:
                counts["select"] += 1
            elif kind == "binary_expression":
                operator = child.child_by_field_name("operator")
                if operator is not None and operator.type in _LOGICAL_OPERATORS:
                    counts["logical"] += 1
            elif kind == "selector_expression":
                operand = child.child_by_field_name("operand")
                if operand is not None and operand.type == "identifier":
                    alias = go_file.text(operand)
                    if alias != receiver and alias in go_file.aliases:
                        used_imports.add(go_file.aliases[alias])
            elif kind == "call_expression":
                target = self._call_target(child, go_file, method)
                if target:
                    calls.add(target)

        return FunctionFacts(
            qualified_name=name,
            file_path=go_file.file_path,
            body_line_count=body.end_point[0] - body.start_point[0],
            decision_points=DecisionPoints(
                if_statements=counts["if"],
                loops=counts["loop"],
                switches=counts["switch"],
                case_clauses=counts["case"],
                select_cases=counts["select"],
                logical_operators=counts["logical"],
            ),
            imported_packages_used=frozenset(used_imports),
            calls=frozenset(calls),
        )

    @staticmethod
    def _call_target(
        call: Any, go_file: _GoFile, method: _MethodDecl | None
    ) -> str | None:
        """Syntactic target of a call: ``f``, ``Type.m`` or ``X.F``."""
        function = call.child_by_field_name("function")
        if function is None:
            return None
        if function.type == "identifier":
            return go_file.text(function)
        if function.type != "selector_expression":
            return None

        operand = function.child_by_field_name("operand")
        member = function.child_by_field_name("field")
        if operand is None or member is None or operand.type != "identifier":
            return None

        head = go_file.text(operand)
        if method is not None and method.receiver_name and head == method.receiver_name:
            head = method.struct_name
        return f"{head}.{go_file.text(member)}"
