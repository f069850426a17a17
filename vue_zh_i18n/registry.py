# -*- coding: utf-8 -*-
"""Accumulator for extracted text, keyed by dictionary namespace.

A ``LocaleRegistry`` holds the frozen set of common terms and the texts
recorded so far. Every rewriter receives the registry explicitly; the tree
walker forks a scratch registry per unit and merges it back once the unit has
been rewritten completely.
"""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Tuple

COMMON_NAMESPACE = "common"


class LocaleRegistry:
    """Namespace -> {text: text} accumulator with common-term promotion."""

    def __init__(
        self,
        common_terms: Optional[Iterable[str]] = None,
        common_namespace: str = COMMON_NAMESPACE,
    ) -> None:
        self.common_terms = frozenset(t.strip() for t in (common_terms or ()))
        self.common_namespace = common_namespace
        self._entries: Dict[str, Dict[str, str]] = {}

    def is_common(self, text: str) -> bool:
        return text.strip() in self.common_terms

    def resolve(self, namespace: str, text: str) -> str:
        """Namespace the text is filed under: common terms win."""
        return self.common_namespace if self.is_common(text) else namespace

    def key_for(self, namespace: str, text: str) -> str:
        return f"{self.resolve(namespace, text)}.{text}"

    def record(self, namespace: str, text: str) -> str:
        """File ``text`` under its resolved namespace and return its key.

        Re-recording a known text is a no-op.
        """
        target = self.resolve(namespace, text)
        bucket = self._entries.setdefault(target, {})
        bucket.setdefault(text, text)
        return f"{target}.{text}"

    def fork(self) -> "LocaleRegistry":
        """Empty registry sharing this one's common terms."""
        return LocaleRegistry(self.common_terms, self.common_namespace)

    def merge(self, other: "LocaleRegistry") -> None:
        for namespace, text in other.items():
            self._entries.setdefault(namespace, {}).setdefault(text, text)

    def items(self) -> Iterator[Tuple[str, str]]:
        for namespace, bucket in self._entries.items():
            for text in bucket:
                yield namespace, text

    def namespaces(self) -> list:
        return sorted(self._entries)

    def entries(self, namespace: str) -> Dict[str, str]:
        return dict(self._entries.get(namespace, {}))

    def serialize_all(self) -> Dict[str, Dict[str, str]]:
        """Per-namespace tables with keys in lexicographic order."""
        return {
            namespace: {text: bucket[text] for text in sorted(bucket)}
            for namespace, bucket in sorted(self._entries.items())
        }

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._entries.values())

    def __contains__(self, item: Tuple[str, str]) -> bool:
        namespace, text = item
        return text in self._entries.get(namespace, {})

    def __repr__(self) -> str:
        return f"<LocaleRegistry namespaces={self.namespaces()} entries={len(self)}>"
