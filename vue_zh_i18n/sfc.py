# -*- coding: utf-8 -*-
"""
Unit processing: one source file in, rewritten text out.

Combined units (.vue) are split into their top-level blocks. The template and
the <script setup> block are rewritten; every other block (plain <script>,
<style>, custom blocks) is left byte-for-byte as it was, attributes included.
Script-only units (.ts, .tsx, .jsx) go straight to the script rewriter.

Texts are recorded in a forked registry that is merged into the caller's one
only when the whole unit has been rewritten, so a unit that fails to parse
contributes no keys.
"""
from __future__ import annotations

import dataclasses
import logging
import pathlib
import re
from typing import Dict, List, Optional, Tuple, Union

from vue_zh_i18n.markup_rewriter import MarkupRewriter
from vue_zh_i18n.registry import LocaleRegistry
from vue_zh_i18n.script_rewriter import TRANSLATE_FN, ScriptRewriter

logger = logging.getLogger(__name__)

VUE_EXTENSION = ".vue"
SCRIPT_EXTENSIONS = {
    ".ts": "typescript",
    ".tsx": "tsx",
    ".jsx": "javascript",
}
UNIT_EXTENSIONS = (VUE_EXTENSION,) + tuple(SCRIPT_EXTENSIONS)

SCRIPT_LANGS = {
    None: "javascript",
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "tsx",
}

_TAG_BODY = r"((?:[^>\"']|\"[^\"]*\"|'[^']*')*)"
BLOCK_OPEN_RE = re.compile(r"<!--.*?-->|<(template|script|style)(?=[\s/>])" + _TAG_BODY + r">", re.S | re.I)
TEMPLATE_TAG_RE = re.compile(r"<!--.*?-->|<(/?)template(?=[\s/>])" + _TAG_BODY + r">", re.S | re.I)
ATTR_RE = re.compile(r"""([^\s"'<>/=]+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+)))?""")


@dataclasses.dataclass
class SfcBlock:
    kind: str
    attrs: Dict[str, Union[str, bool]]
    content: str
    start: int  # offsets of the content inside the document
    end: int

    @property
    def lang(self) -> Optional[str]:
        lang = self.attrs.get("lang")
        return lang.lower() if isinstance(lang, str) else None

    @property
    def setup(self) -> bool:
        return "setup" in self.attrs


@dataclasses.dataclass
class SfcDescriptor:
    source: str
    template: Optional[SfcBlock] = None
    scripts: List[SfcBlock] = dataclasses.field(default_factory=list)
    styles: List[SfcBlock] = dataclasses.field(default_factory=list)

    @property
    def script_setup(self) -> Optional[SfcBlock]:
        return next((s for s in self.scripts if s.setup), None)


def parse_attrs(raw: str) -> Dict[str, Union[str, bool]]:
    attrs: Dict[str, Union[str, bool]] = {}
    for m in ATTR_RE.finditer(raw.rstrip("/")):
        name = m.group(1)
        values = [v for v in m.group(2, 3, 4) if v is not None]
        attrs[name] = values[0] if values else True
    return attrs


def _template_close(text: str, pos: int) -> Tuple[int, int]:
    """(start, end) of the </template> closing the block whose content starts at ``pos``."""
    depth = 1
    for m in TEMPLATE_TAG_RE.finditer(text, pos):
        if m.group(1) is None:
            continue  # comment
        if m.group(1) == "/":
            depth -= 1
            if depth == 0:
                return m.start(), m.end()
        elif not m.group(2).rstrip().endswith("/"):
            depth += 1
    return len(text), len(text)


def split_sfc(text: str) -> SfcDescriptor:
    """Locate the top-level blocks of a single-file component."""
    sfc = SfcDescriptor(source=text)
    pos = 0
    while True:
        m = BLOCK_OPEN_RE.search(text, pos)
        if m is None:
            break
        kind = m.group(1)
        if kind is None or m.group(2).rstrip().endswith("/"):
            pos = m.end()
            continue
        kind = kind.lower()
        if kind == "template":
            close_start, close_end = _template_close(text, m.end())
        else:
            close = re.compile(rf"</{kind}\s*>", re.I).search(text, m.end())
            close_start, close_end = (close.start(), close.end()) if close else (len(text), len(text))

        block = SfcBlock(kind, parse_attrs(m.group(2)), text[m.end() : close_start], m.end(), close_start)
        if kind == "template":
            if sfc.template is None:
                sfc.template = block
            else:
                logger.warning("Ignoring extra top-level <template> block at offset %d", m.start())
        elif kind == "script":
            sfc.scripts.append(block)
        else:
            sfc.styles.append(block)
        pos = close_end
    return sfc


def dialect_for_path(path: Union[str, pathlib.Path]) -> str:
    suffix = pathlib.Path(path).suffix
    try:
        return SCRIPT_EXTENSIONS[suffix]
    except KeyError:
        raise ValueError(f"Not a script unit: {path}") from None


def dialect_for_lang(lang: Optional[str]) -> Optional[str]:
    return SCRIPT_LANGS.get(lang)


def _splice(text: str, replacements: List[Tuple[int, int, str]]) -> str:
    out = text
    for start, end, new in sorted(replacements, reverse=True):
        out = out[:start] + new + out[end:]
    return out


def process_vue_source(
    text: str,
    namespace: str,
    registry: LocaleRegistry,
    translate_fn: str = TRANSLATE_FN,
) -> str:
    """Rewrite the template and <script setup> block of a combined unit.

    Raises ScriptParseError when the script block does not parse.
    """
    sfc = split_sfc(text)
    scratch = registry.fork()
    replacements: List[Tuple[int, int, str]] = []

    setup = sfc.script_setup
    if setup is not None and setup.content.strip():
        dialect = dialect_for_lang(setup.lang)
        if dialect is None:
            logger.warning("Leaving <script setup lang=%r> untouched: unsupported language", setup.lang)
        else:
            new = ScriptRewriter(scratch, namespace, dialect, translate_fn).rewrite(setup.content)
            replacements.append((setup.start, setup.end, new))

    tpl = sfc.template
    if tpl is not None and tpl.content.strip():
        if tpl.lang not in (None, "html"):
            logger.warning("Leaving <template lang=%r> untouched: only HTML templates are rewritten", tpl.lang)
        else:
            new = MarkupRewriter(scratch, namespace, translate_fn).rewrite(tpl.content)
            replacements.append((tpl.start, tpl.end, new))

    registry.merge(scratch)
    return _splice(text, replacements)


def process_script_source(
    text: str,
    namespace: str,
    registry: LocaleRegistry,
    dialect: str = "typescript",
    translate_fn: str = TRANSLATE_FN,
) -> str:
    """Rewrite a script-only unit. Raises ScriptParseError when it does not parse."""
    scratch = registry.fork()
    out = ScriptRewriter(scratch, namespace, dialect, translate_fn).rewrite(text)
    registry.merge(scratch)
    return out


def process_unit(
    path: Union[str, pathlib.Path],
    text: str,
    namespace: str,
    registry: LocaleRegistry,
    translate_fn: str = TRANSLATE_FN,
) -> str:
    """Dispatch on the file extension."""
    if pathlib.Path(path).suffix == VUE_EXTENSION:
        return process_vue_source(text, namespace, registry, translate_fn)
    return process_script_source(text, namespace, registry, dialect_for_path(path), translate_fn)
