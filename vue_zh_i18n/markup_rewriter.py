# -*- coding: utf-8 -*-
"""
CJK text rewriting for Vue template markup.

The template is treated as text: a small tokenizer separates comments, tags
and text (respecting quoted attribute values and {{ }} interpolations), and
four passes run in order, each over the output of the previous one:

1. attributes   title="你好"          -> :title="$t('ns.你好')"
                :title="ok ? '是' : x" -> :title="ok ? $t('ns.是') : x"
2. tag text     <p>你好{{ n }}</p>     -> <p>{{ $t('ns.你好') }}{{ n }}</p>
3. interpolation {{ ok ? '是' : '否' }} -> {{ ok ? $t('ns.是') : $t('ns.否') }}
4. tag text again, until nothing changes

Rewritten text only ever holds CJK inside a $t(...) argument or an
interpolation, so every pass leaves already rewritten markup alone.
"""
from __future__ import annotations

import re
import string
from typing import Callable, Dict, List, Tuple

from vue_zh_i18n.registry import LocaleRegistry
from vue_zh_i18n.script_rewriter import (
    HAN_RE,
    HAN_RUN_RE,
    TRANSLATE_FN,
    BindingRewriter,
    cook_js_string,
    translation_call,
)

MAX_TEXT_PASSES = 5

COMMENT, TAG, TEXT = "comment", "tag", "text"

_TAG_START_CHARS = frozenset(string.ascii_letters + "/!")

# name="value" / name='value' inside an opening tag
ATTR_RE = re.compile(r"""(\s)([^\s"'<>/=]+)(\s*=\s*)(?:"([^"]*)"|'([^']*)')""")
DYNAMIC_ATTR_PREFIXES = (":", "@", "#", "v-")

INTERP_SPLIT_RE = re.compile(r"({{.*?}})", re.S)
INTERP_RE = re.compile(r"{{(.*?)}}", re.S)
QUOTED_RE = re.compile(r"""(['"])((?:\\.|(?!\1)[^\\\n])*)\1""")


def tokenize(markup: str) -> List[Tuple[str, str]]:
    """Split markup into (kind, chunk) tokens; joining the chunks gives back the input."""
    tokens: List[Tuple[str, str]] = []
    buf: List[str] = []
    i, n = 0, len(markup)

    def flush() -> None:
        if buf:
            tokens.append((TEXT, "".join(buf)))
            buf.clear()

    while i < n:
        if markup.startswith("<!--", i):
            flush()
            end = markup.find("-->", i + 4)
            end = n if end < 0 else end + 3
            tokens.append((COMMENT, markup[i:end]))
            i = end
            continue
        if markup.startswith("{{", i):
            end = markup.find("}}", i + 2)
            if end >= 0:
                buf.append(markup[i : end + 2])
                i = end + 2
                continue
        ch = markup[i]
        if ch == "<" and i + 1 < n and markup[i + 1] in _TAG_START_CHARS:
            flush()
            # scan to the closing '>' that is not inside a quoted attribute value
            j = i + 1
            quote = None
            while j < n:
                c = markup[j]
                if quote:
                    if c == quote:
                        quote = None
                elif c in ('"', "'"):
                    quote = c
                elif c == ">":
                    break
                j += 1
            end = min(j + 1, n)
            tokens.append((TAG, markup[i:end]))
            i = end
            continue
        buf.append(ch)
        i += 1
    flush()
    return tokens


def is_dynamic_attr(name: str) -> bool:
    return name.startswith(DYNAMIC_ATTR_PREFIXES)


class MarkupRewriter:
    """Rewrites the CJK text of one template."""

    def __init__(
        self,
        registry: LocaleRegistry,
        namespace: str,
        translate_fn: str = TRANSLATE_FN,
    ) -> None:
        self.registry = registry
        self.namespace = namespace
        self.translate_fn = translate_fn
        self._bindings: Dict[str, BindingRewriter] = {}
        self._call_open_re = re.compile(re.escape(translate_fn) + r"\(\s*$")

    def rewrite(self, template: str) -> str:
        out = self.attribute_pass(template)
        out = self.text_pass(out)
        out = self.interpolation_pass(out)
        for _ in range(MAX_TEXT_PASSES):
            new = self.text_pass(out)
            if new == out:
                break
            out = new
        return out

    # ── helpers ───────────────────────────────────────────────────────────
    def _call(self, text: str, quote: str = "'") -> str:
        key = self.registry.record(self.namespace, text)
        return translation_call(key, self.translate_fn, quote)

    def binding(self, quote: str = "'") -> BindingRewriter:
        """Binding rewriter emitting keys with ``quote`` (opposite of the attribute's quote)."""
        if quote not in self._bindings:
            self._bindings[quote] = BindingRewriter(self.registry, self.namespace, self.translate_fn, quote)
        return self._bindings[quote]

    @staticmethod
    def _map_tokens(markup: str, kind: str, fn: Callable[[str], str]) -> str:
        return "".join(fn(chunk) if k == kind else chunk for k, chunk in tokenize(markup))

    # ── pass 1: attributes ────────────────────────────────────────────────
    def attribute_pass(self, template: str) -> str:
        def on_tag(tag: str) -> str:
            if tag.startswith(("</", "<!")) or not HAN_RE.search(tag):
                return tag
            return ATTR_RE.sub(self._rewrite_attr, tag)

        return self._map_tokens(template, TAG, on_tag)

    def _rewrite_attr(self, m: re.Match) -> str:
        ws, name, eq, dq, sq = m.groups()
        outer = '"' if dq is not None else "'"
        value = dq if dq is not None else sq
        inner = "'" if outer == '"' else '"'
        if not HAN_RE.search(value):
            return m.group(0)

        if is_dynamic_attr(name):
            binding = self.binding(inner)
            if binding.contains_translation_call(value):
                return m.group(0)
            return f"{ws}{name}{eq}{outer}{binding.rewrite(value)}{outer}"

        text = value.strip()
        return f"{ws}:{name}={outer}{self._call(text, inner)}{outer}"

    # ── pass 2/4: tag body text ───────────────────────────────────────────
    def text_pass(self, template: str) -> str:
        return self._map_tokens(template, TEXT, self._rewrite_text)

    def _rewrite_text(self, text: str) -> str:
        if not text.strip() or not HAN_RE.search(text):
            return text
        parts = INTERP_SPLIT_RE.split(text)
        out = []
        for i, part in enumerate(parts):
            # odd indices are the {{ }} captures
            if i % 2:
                out.append(part)
            else:
                out.append(HAN_RUN_RE.sub(lambda r: "{{ " + self._call(r.group(0)) + " }}", part))
        return "".join(out)

    # ── pass 3: quoted literals inside {{ }} ──────────────────────────────
    def interpolation_pass(self, template: str) -> str:
        def on_text(text: str) -> str:
            if "{{" not in text or not HAN_RE.search(text):
                return text
            return INTERP_RE.sub(self._rewrite_interpolation, text)

        return self._map_tokens(template, TEXT, on_text)

    def _rewrite_interpolation(self, m: re.Match) -> str:
        expr = m.group(1)

        def repl(q: re.Match) -> str:
            body = q.group(2)
            if not HAN_RE.search(body):
                return q.group(0)
            if self._call_open_re.search(expr, 0, q.start()):
                return q.group(0)
            return self._call(cook_js_string(body).strip())

        return "{{" + QUOTED_RE.sub(repl, expr) + "}}"
