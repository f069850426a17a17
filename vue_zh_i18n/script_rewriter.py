# -*- coding: utf-8 -*-
"""
CJK literal rewriting for script sources (JS / TS / JSX / TSX).

The source is parsed with tree-sitter and every qualifying node is turned into
a byte-range edit; edits never overlap and are applied back to front, so code
outside the rewritten literals is left exactly as written.

Rules
- string literal containing CJK -> $t("<namespace>.<text>")
  (skipped when it already is an argument of $t, or where a call is not legal:
  property keys, module sources, TS literal types)
- template literal -> each CJK run of its static text becomes ${$t("...")}
- JSX text -> each CJK run becomes {$t("...")}

``BindingRewriter`` applies the string rule to a single template binding
expression, falling back to wrapping template literal text when no string
literal qualified. It never raises: an expression that does not parse is
returned unchanged.
"""
from __future__ import annotations

import dataclasses
import functools
import logging
import re
from typing import Iterable, Iterator, List, Optional, Tuple

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from vue_zh_i18n.errors import ScriptParseError
from vue_zh_i18n.registry import LocaleRegistry

logger = logging.getLogger(__name__)

HAN_RE = re.compile(r"[\u4e00-\u9fa5]")
HAN_RUN_RE = re.compile(r"[\u4e00-\u9fa5]+")
# leftover runs in binding code may carry CJK punctuation after the first ideograph
HAN_PHRASE_RE = re.compile(r"[\u4e00-\u9fa5][\u4e00-\u9fa5：，。！]*")

TRANSLATE_FN = "$t"
DIALECTS = ("javascript", "typescript", "tsx")

# a string in one of these fields names something; a call expression is not allowed there
NAME_FIELDS = ("key", "name", "property", "source")
NON_VALUE_PARENTS = {"literal_type", "enum_body"}


@functools.lru_cache(maxsize=None)
def get_parser(dialect: str) -> Parser:
    if dialect == "javascript":
        language = Language(tree_sitter_javascript.language())
    elif dialect == "typescript":
        language = Language(tree_sitter_typescript.language_typescript())
    elif dialect == "tsx":
        language = Language(tree_sitter_typescript.language_tsx())
    else:
        raise ValueError(f"Unknown script dialect: {dialect!r}")
    return Parser(language)


# ── JS string literal helpers ─────────────────────────────────────────────────
_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|.)", re.S)
_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}
_LINE_CONTINUATIONS = {"\n", "\r\n", "\r", "\u2028", "\u2029"}


def cook_js_string(body: str) -> str:
    """Value of a JS string literal body (quotes already stripped)."""

    def repl(m: re.Match) -> str:
        esc = m.group(1)
        if esc in _LINE_CONTINUATIONS:
            return ""
        try:
            if esc.startswith("u{"):
                return chr(int(esc[2:-1], 16))
            if len(esc) > 1 and esc[0] in "ux":
                return chr(int(esc[1:], 16))
        except ValueError:
            return m.group(0)
        return _SIMPLE_ESCAPES.get(esc, esc)

    return _ESCAPE_RE.sub(repl, body)


def js_string(value: str, quote: str = '"') -> str:
    body = (
        value.replace("\\", "\\\\")
        .replace(quote, "\\" + quote)
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )
    return f"{quote}{body}{quote}"


def translation_call(key: str, translate_fn: str = TRANSLATE_FN, quote: str = '"') -> str:
    return f"{translate_fn}({js_string(key, quote)})"


# ── Edits ─────────────────────────────────────────────────────────────────────
@dataclasses.dataclass(frozen=True)
class Edit:
    start: int
    end: int
    text: str


def apply_edits(source: bytes, edits: Iterable[Edit]) -> bytes:
    # Sort by start offset in reverse so earlier offsets stay valid
    out = source
    last_start = len(source) + 1
    for edit in sorted(edits, key=lambda e: e.start, reverse=True):
        if edit.end > last_start:
            raise ValueError(f"Overlapping edits at byte {edit.start}")
        out = out[: edit.start] + edit.text.encode("utf-8") + out[edit.end :]
        last_start = edit.start
    return out


# ── Node helpers ──────────────────────────────────────────────────────────────
def _text(src: bytes, node: Node) -> str:
    return src[node.start_byte : node.end_byte].decode("utf-8")


def _same(a: Optional[Node], b: Optional[Node]) -> bool:
    return (
        a is not None
        and b is not None
        and a.type == b.type
        and a.start_byte == b.start_byte
        and a.end_byte == b.end_byte
    )


def _in_field(node: Node, parent: Node, fields: Iterable[str]) -> bool:
    return any(_same(parent.child_by_field_name(f), node) for f in fields)


def is_translation_call(node: Node, src: bytes, translate_fn: str = TRANSLATE_FN) -> bool:
    """``$t(...)`` or ``<obj>.$t(...)``."""
    if node.type != "call_expression":
        return False
    callee = node.child_by_field_name("function")
    if callee is None:
        return False
    if callee.type == "member_expression":
        callee = callee.child_by_field_name("property")
        if callee is None:
            return False
    return _text(src, callee) == translate_fn


def contains_translation_call(root: Node, src: bytes, translate_fn: str = TRANSLATE_FN) -> bool:
    stack = [root]
    while stack:
        node = stack.pop()
        if is_translation_call(node, src, translate_fn):
            return True
        stack.extend(node.children)
    return False


def _is_translation_argument(node: Node, src: bytes, translate_fn: str) -> bool:
    parent = node.parent
    return (
        parent is not None
        and parent.type == "arguments"
        and parent.parent is not None
        and is_translation_call(parent.parent, src, translate_fn)
    )


def _first_error(root: Node) -> Node:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return root


def _template_static_ranges(node: Node) -> Iterator[Tuple[int, int]]:
    """Byte ranges of a template literal's static text, between the backticks."""
    cursor = node.start_byte + 1
    for child in node.children:
        if child.type == "template_substitution":
            yield cursor, child.start_byte
            cursor = child.end_byte
    yield cursor, node.end_byte - 1


def _is_tagged_template(node: Node) -> bool:
    parent = node.parent
    return parent is not None and parent.type == "call_expression" and _in_field(node, parent, ("arguments",))


def _split_runs(raw: str, wrap, pattern: re.Pattern = HAN_RUN_RE, escapes: bool = False) -> str:
    """Replace every CJK run of ``raw`` by ``wrap(run)``."""
    pieces: List[str] = []
    pos = 0
    for m in pattern.finditer(raw):
        before = raw[pos : m.start()]
        # in template text "\中" is just an escaped "中"; the backslash would escape the "${"
        trailing = len(before) - len(before.rstrip("\\"))
        if escapes and trailing % 2:
            before = before[:-1]
        pieces.append(before)
        pieces.append(wrap(m.group(0)))
        pos = m.end()
    pieces.append(raw[pos:])
    return "".join(pieces)


# ── Script rewriter ───────────────────────────────────────────────────────────
class ScriptRewriter:
    """Rewrites the CJK literals of one script unit into translation calls."""

    def __init__(
        self,
        registry: LocaleRegistry,
        namespace: str,
        dialect: str = "typescript",
        translate_fn: str = TRANSLATE_FN,
        quote: str = '"',
        rewrite_templates: bool = True,
        rewrite_jsx: bool = True,
    ) -> None:
        if dialect not in DIALECTS:
            raise ValueError(f"Unknown script dialect: {dialect!r}")
        self.registry = registry
        self.namespace = namespace
        self.dialect = dialect
        self.translate_fn = translate_fn
        self.quote = quote
        self.rewrite_templates = rewrite_templates
        self.rewrite_jsx = rewrite_jsx and dialect != "typescript"
        self.extracted = 0

    def rewrite(self, source: str) -> str:
        src = source.encode("utf-8")
        tree = get_parser(self.dialect).parse(src)
        root = tree.root_node
        if root.has_error:
            bad = _first_error(root)
            row, column = bad.start_point[0], bad.start_point[1]
            raise ScriptParseError(
                f"Failed to parse {self.dialect} source",
                line=row + 1,
                column=column + 1,
                dialect=self.dialect,
            )
        edits = list(self.collect_edits(root, src))
        if not edits:
            return source
        return apply_edits(src, edits).decode("utf-8")

    def collect_edits(self, root: Node, src: bytes) -> Iterator[Edit]:
        stack = [root]
        while stack:
            node = stack.pop()
            kind = node.type
            if kind == "string":
                edit = self._string_edit(node, src)
                if edit is not None:
                    yield edit
                continue
            if kind == "template_string" and self.rewrite_templates:
                yield from self._template_edits(node, src)
                # substitutions are ordinary expressions and may hold literals too
                subs = [c for c in node.children if c.type == "template_substitution"]
                stack.extend(reversed(subs))
                continue
            if kind == "jsx_text" and self.rewrite_jsx:
                edit = self._jsx_text_edit(node, src)
                if edit is not None:
                    yield edit
                continue
            stack.extend(reversed(node.children))

    def _call(self, text: str) -> str:
        key = self.registry.record(self.namespace, text)
        self.extracted += 1
        return translation_call(key, self.translate_fn, self.quote)

    def _string_edit(self, node: Node, src: bytes) -> Optional[Edit]:
        raw = _text(src, node)
        if len(raw) < 2:
            return None
        value = cook_js_string(raw[1:-1])
        if not HAN_RE.search(value):
            return None
        parent = node.parent
        if parent is not None:
            if _is_translation_argument(node, src, self.translate_fn):
                return None
            if parent.type in NON_VALUE_PARENTS or _in_field(node, parent, NAME_FIELDS):
                return None
        call = self._call(value.strip())
        if parent is not None and parent.type == "jsx_attribute":
            call = "{" + call + "}"
        return Edit(node.start_byte, node.end_byte, call)

    def _template_edits(self, node: Node, src: bytes) -> List[Edit]:
        if _is_tagged_template(node):
            # the tag function receives the raw strings
            return []
        edits: List[Edit] = []
        for start, end in _template_static_ranges(node):
            raw = src[start:end].decode("utf-8")
            if not HAN_RE.search(raw):
                continue
            new = _split_runs(raw, lambda run: "${" + self._call(run) + "}", escapes=True)
            edits.append(Edit(start, end, new))
        return edits

    def _jsx_text_edit(self, node: Node, src: bytes) -> Optional[Edit]:
        raw = _text(src, node)
        if not HAN_RE.search(raw):
            return None
        new = _split_runs(raw, lambda run: "{" + self._call(run) + "}")
        return Edit(node.start_byte, node.end_byte, new)


# ── Binding expressions ───────────────────────────────────────────────────────
class BindingRewriter:
    """Rewrites a single expression from a dynamic template attribute."""

    PREFIX = "const __temp = "
    SUFFIX = ";"

    def __init__(
        self,
        registry: LocaleRegistry,
        namespace: str,
        translate_fn: str = TRANSLATE_FN,
        quote: str = "'",
    ) -> None:
        self.registry = registry
        self.namespace = namespace
        self.translate_fn = translate_fn
        self.quote = quote
        self._literals = ScriptRewriter(
            registry,
            namespace,
            dialect="typescript",
            translate_fn=translate_fn,
            quote=quote,
            rewrite_templates=False,
            rewrite_jsx=False,
        )

    def _parse(self, expression: str) -> Optional[Tuple[bytes, Node]]:
        """Parse ``expression`` as the initializer of a throwaway declaration.

        Returns the synthetic source and the initializer node, or None when the
        fragment is not exactly one expression.
        """
        src = (self.PREFIX + expression + self.SUFFIX).encode("utf-8")
        root = get_parser("typescript").parse(src).root_node
        if root.has_error or root.named_child_count != 1:
            return None
        decl = root.named_children[0]
        if decl.type != "lexical_declaration":
            return None
        declarators = [c for c in decl.named_children if c.type == "variable_declarator"]
        if len(declarators) != 1:
            return None
        value = declarators[0].child_by_field_name("value")
        if value is None:
            return None
        start = len(self.PREFIX.encode("utf-8"))
        end = len(src) - len(self.SUFFIX.encode("utf-8"))
        if src[start : value.start_byte].strip() or src[value.end_byte : end].strip():
            return None
        return src, value

    def contains_translation_call(self, expression: str) -> bool:
        parsed = self._parse(expression)
        if parsed is None:
            return False
        src, value = parsed
        return contains_translation_call(value, src, self.translate_fn)

    def rewrite(self, expression: str) -> str:
        parsed = self._parse(expression)
        if parsed is None:
            logger.warning("Could not parse binding expression, left unchanged: %s", expression)
            return expression
        src, value = parsed
        if contains_translation_call(value, src, self.translate_fn):
            return expression

        edits = list(self._literals.collect_edits(value, src))
        if not edits:
            edits = self._leftover_run_edits(value, src)
        if not edits:
            return expression
        new_src = apply_edits(src, edits)
        start = len(self.PREFIX.encode("utf-8"))
        return new_src[start : len(new_src) - len(self.SUFFIX.encode("utf-8"))].decode("utf-8")

    def _leftover_run_edits(self, value: Node, src: bytes) -> List[Edit]:
        """Wrap the CJK runs the literal rule cannot reach: template literal text.

        Runs are scanned by character class and may carry CJK punctuation.
        """

        def wrap(run: str) -> str:
            key = self.registry.record(self.namespace, run.strip())
            return "${" + translation_call(key, self.translate_fn, self.quote) + "}"

        edits: List[Edit] = []
        stack = [value]
        while stack:
            node = stack.pop()
            if node.type == "template_string" and not _is_tagged_template(node):
                for start, end in _template_static_ranges(node):
                    raw = src[start:end].decode("utf-8")
                    if HAN_RE.search(raw):
                        edits.append(Edit(start, end, _split_runs(raw, wrap, HAN_PHRASE_RE, escapes=True)))
            stack.extend(reversed(node.children))
        return edits
