"""
TypeScript / JavaScript extraction.

Tree-sitter first (tsx grammar for .tsx/.jsx, typescript otherwise), with a
line-oriented regex extractor when the AST path raises. CommonJS exports are
picked up by a separate regex pass in both cases.
"""

import logging
import re
from pathlib import Path

from tree_sitter import Node

from .models import Definition, ImportDeclaration, ParsedFile
from .parse import (
    LanguageParser,
    dedupe,
    find_nodes,
    is_external_import,
    node_line,
    node_text,
    parse_source,
    read_source,
    string_literal,
    walk_tree,
)

log = logging.getLogger(__name__)

_JS_EXTENSIONS = {".js", ".jsx", ".mjs", ".cjs"}
_JSX_EXTENSIONS = {".tsx", ".jsx"}

_DECLARATION_KINDS: dict[str, str] = {
    "function_declaration": "function",
    "generator_function_declaration": "function",
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "interface_declaration": "interface",
    "type_alias_declaration": "type",
    "enum_declaration": "type",
}

_STRING_TYPES = ("string", "template_string")


# ── AST ──────────────────────────────────────────────────────────────────────

def _first_string(node: Node | None) -> str | None:
    if node is None:
        return None
    for child in walk_tree(node):
        if child.type in _STRING_TYPES:
            return string_literal(child)
    return None


def _import_from_statement(node: Node) -> ImportDeclaration | None:
    source = string_literal(node.child_by_field_name("source"))
    names: list[str] = []
    is_default = False
    is_namespace = False

    for child in node.named_children:
        if child.type == "import_require_clause":
            # import fs = require('./fs')
            source = source or _first_string(child)
            names.append(node_text(child.named_children[0]) if child.named_children else "")
        elif child.type == "import_clause":
            for part in child.named_children:
                if part.type == "named_imports":
                    for spec in find_nodes(part, "import_specifier"):
                        name = spec.child_by_field_name("name")
                        if name is not None:
                            names.append(node_text(name))
                elif part.type == "identifier":
                    names.append(node_text(part))
                    is_default = True
                elif part.type == "namespace_import":
                    ident = part.named_children[0] if part.named_children else None
                    if ident is not None:
                        names.append(node_text(ident))
                        is_namespace = True

    if not source:
        return None
    return ImportDeclaration(
        source=source,
        names=[n for n in names if n],
        is_default=is_default,
        is_namespace=is_namespace,
        line=node_line(node),
    )


def _reexport_from_statement(node: Node) -> ImportDeclaration | None:
    source = string_literal(node.child_by_field_name("source"))
    if not source:
        return None
    names: list[str] = []
    clause = next((c for c in node.named_children if c.type == "export_clause"), None)
    if clause is not None:
        for spec in find_nodes(clause, "export_specifier"):
            name = spec.child_by_field_name("name")
            if name is not None:
                names.append(node_text(name))
    elif node_text(node).startswith("export *"):
        names.append("*")
    return ImportDeclaration(source=source, names=names, line=node_line(node))


def _require_call(node: Node) -> ImportDeclaration | None:
    func = node.child_by_field_name("function")
    if func is None or node_text(func) != "require":
        return None
    args = node.child_by_field_name("arguments")
    if args is None or not args.named_children:
        return None
    first = args.named_children[0]
    if first.type not in _STRING_TYPES:
        return None
    source = string_literal(first)
    if not source:
        return None
    return ImportDeclaration(source=source, names=[], line=node_line(node))


def _declarator_names(node: Node) -> list[Node]:
    """Identifier-named variable_declarators of a lexical/variable declaration."""
    out = []
    for decl in node.named_children:
        if decl.type != "variable_declarator":
            continue
        name = decl.child_by_field_name("name")
        if name is not None and name.type == "identifier":
            out.append(name)
    return out


def _exported_names(node: Node) -> list[str]:
    names: list[str] = []
    declaration = node.child_by_field_name("declaration")
    if declaration is not None:
        if declaration.type in ("lexical_declaration", "variable_declaration"):
            names.extend(node_text(n) for n in _declarator_names(declaration))
        else:
            name = declaration.child_by_field_name("name")
            if name is not None:
                names.append(node_text(name))

    for child in node.named_children:
        if child.type == "export_clause":
            for spec in find_nodes(child, "export_specifier"):
                exported = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                if exported is not None:
                    names.append(node_text(exported))

    if any(c.type == "default" for c in node.children):
        names.append("default")
    return names


def _definitions(node: Node) -> list[Definition]:
    exported = node.parent is not None and node.parent.type == "export_statement"
    kind = _DECLARATION_KINDS.get(node.type)
    if kind is not None:
        name = node.child_by_field_name("name")
        if name is None:
            return []
        return [Definition(name=node_text(name), kind=kind, line=node_line(node), exported=exported)]

    if node.type == "lexical_declaration":
        kind = "const" if node.children and node.children[0].type == "const" else "variable"
    else:
        kind = "variable"
    return [
        Definition(name=node_text(n), kind=kind, line=node_line(n), exported=exported)
        for n in _declarator_names(node)
    ]


def _extract_ast(root: Node) -> tuple[list[ImportDeclaration], list[str], list[Definition]]:
    imports: list[ImportDeclaration] = []
    exports: list[str] = []
    definitions: list[Definition] = []

    for node in walk_tree(root):
        if node.type == "import_statement":
            imp = _import_from_statement(node)
            if imp:
                imports.append(imp)
        elif node.type == "export_statement":
            if node.child_by_field_name("source") is not None:
                imp = _reexport_from_statement(node)
                if imp:
                    imports.append(imp)
            exports.extend(_exported_names(node))
        elif node.type == "call_expression":
            imp = _require_call(node)
            if imp:
                imports.append(imp)
        elif node.type in _DECLARATION_KINDS or node.type in ("lexical_declaration", "variable_declaration"):
            definitions.extend(_definitions(node))

    return imports, exports, definitions


# ── Regex fallback ───────────────────────────────────────────────────────────

_IMPORT_FROM_RE = re.compile(r"""^\s*import\s+(?:type\s+)?(.*?)\s+from\s+['"]([^'"]+)['"]""")
_IMPORT_BARE_RE = re.compile(r"""^\s*import\s+['"]([^'"]+)['"]""")
_REQUIRE_RE = re.compile(r"""require\(\s*['"`]([^'"`]+)['"`]\s*\)""")
_EXPORT_STAR_RE = re.compile(r"""^\s*export\s+\*(?:\s+as\s+\w+)?\s+from\s+['"]([^'"]+)['"]""")
_EXPORT_NAMED_FROM_RE = re.compile(r"""^\s*export\s+(?:type\s+)?\{([^}]+)\}\s+from\s+['"]([^'"]+)['"]""")
_EXPORT_LOCAL_CLAUSE_RE = re.compile(r"^\s*export\s+(?:type\s+)?\{([^}]+)\}\s*;?\s*$")
_EXPORT_DECL_RE = re.compile(
    r"^\s*export\s+(?:declare\s+)?(?:abstract\s+)?(?:async\s+)?"
    r"(?:const|let|var|function\*?|class|type|interface|enum)\s+([A-Za-z0-9_$]+)"
)
_EXPORT_DEFAULT_RE = re.compile(r"^\s*export\s+default\b")
_DEF_RE = re.compile(
    r"^(export\s+(?:default\s+)?)?(?:declare\s+)?(?:abstract\s+)?(?:async\s+)?"
    r"(function\*?|class|interface|type|enum|const|let|var)\s+([A-Za-z0-9_$]+)"
)

_REGEX_KINDS = {
    "function": "function",
    "function*": "function",
    "class": "class",
    "interface": "interface",
    "type": "type",
    "enum": "type",
    "const": "const",
}


def _clause_names(clause: str) -> tuple[list[str], bool, bool]:
    """Split an import clause like "Foo, { a, b as c }" into (names, is_default, is_namespace)."""
    names: list[str] = []
    is_default = False
    is_namespace = False
    braces = re.search(r"\{([^}]*)\}", clause)
    if braces:
        names.extend(
            part.split(" as ")[0].strip()
            for part in braces.group(1).split(",")
            if part.strip()
        )
        clause = clause[:braces.start()] + clause[braces.end():]
    star = re.search(r"\*\s+as\s+([A-Za-z0-9_$]+)", clause)
    if star:
        names.append(star.group(1))
        is_namespace = True
        clause = clause[:star.start()] + clause[star.end():]
    default = clause.strip().strip(",").strip()
    if default:
        names.insert(0, default)
        is_default = True
    return names, is_default, is_namespace


def _extract_fallback(content: str) -> tuple[list[ImportDeclaration], list[str], list[Definition]]:
    imports: list[ImportDeclaration] = []
    exports: list[str] = []
    definitions: list[Definition] = []

    for idx, line in enumerate(content.split("\n"), start=1):
        m = _IMPORT_FROM_RE.match(line)
        if m:
            names, is_default, is_namespace = _clause_names(m.group(1))
            imports.append(ImportDeclaration(
                source=m.group(2),
                names=names,
                is_default=is_default,
                is_namespace=is_namespace,
                line=idx,
            ))
        else:
            m = _IMPORT_BARE_RE.match(line)
            if m:
                imports.append(ImportDeclaration(source=m.group(1), line=idx))

        for req in _REQUIRE_RE.finditer(line):
            imports.append(ImportDeclaration(source=req.group(1), line=idx))

        m = _EXPORT_STAR_RE.match(line)
        if m:
            imports.append(ImportDeclaration(source=m.group(1), names=["*"], line=idx))

        m = _EXPORT_NAMED_FROM_RE.match(line)
        if m:
            names = [n.strip() for n in m.group(1).split(",") if n.strip()]
            imports.append(ImportDeclaration(
                source=m.group(2),
                names=[n.split(" as ")[0].strip() for n in names],
                line=idx,
            ))
            exports.extend(n.split(" as ")[-1].strip() for n in names)

        m = _EXPORT_LOCAL_CLAUSE_RE.match(line)
        if m:
            # export { a, b as c };
            exports.extend(
                n.split(" as ")[-1].strip()
                for n in m.group(1).split(",")
                if n.strip()
            )

        m = _EXPORT_DECL_RE.match(line)
        if m:
            exports.append(m.group(1))
        if _EXPORT_DEFAULT_RE.match(line):
            exports.append("default")

        m = _DEF_RE.match(line)
        if m:
            definitions.append(Definition(
                name=m.group(3),
                kind=_REGEX_KINDS.get(m.group(2), "variable"),
                line=idx,
                exported=bool(m.group(1)),
            ))

    return imports, exports, definitions


# ── CommonJS ─────────────────────────────────────────────────────────────────

_MODULE_EXPORTS_OBJECT_RE = re.compile(r"module\.exports\s*=\s*\{([^}]+)\}")
_MODULE_EXPORTS_ASSIGN_RE = re.compile(r"module\.exports\s*=\s*([A-Za-z0-9_$]+)")
_EXPORTS_PROPERTY_RE = re.compile(r"(?<![\w$])exports\.([A-Za-z0-9_$]+)\s*=")


def _extract_commonjs(content: str) -> tuple[list[str], list[Definition]]:
    exports: list[str] = []
    definitions: list[Definition] = []

    for idx, line in enumerate(content.split("\n"), start=1):
        m = _MODULE_EXPORTS_OBJECT_RE.search(line)
        if m:
            exports.extend(
                part.split(":")[0].strip()
                for part in m.group(1).split(",")
                if part.split(":")[0].strip()
            )

        m = _MODULE_EXPORTS_ASSIGN_RE.search(line)
        if m:
            exports.append("default")
            if m.group(1) not in ("function", "class"):
                definitions.append(Definition(name=m.group(1), kind="variable", line=idx))

        for prop in _EXPORTS_PROPERTY_RE.finditer(line):
            exports.append(prop.group(1))

    return exports, definitions


class TypeScriptParser(LanguageParser):
    language = "typescript"

    def parse(self, file_path: str) -> ParsedFile:
        content = read_source(file_path)
        ext = Path(file_path).suffix.lower()
        grammar = "tsx" if ext in _JSX_EXTENSIONS else "typescript"

        try:
            tree = parse_source(content, grammar)
            imports, exports, definitions = _extract_ast(tree.root_node)
        except Exception as e:
            log.warning("TypeScript parser fallback for %s: %s", file_path, e)
            imports, exports, definitions = _extract_fallback(content)

        cjs_exports, cjs_definitions = _extract_commonjs(content)

        return ParsedFile(
            file_path=file_path,
            language="javascript" if ext in _JS_EXTENSIONS else "typescript",
            imports=[imp for imp in imports if not is_external_import(imp.source)],
            exports=dedupe(exports + cjs_exports),
            definitions=definitions + cjs_definitions,
        )
