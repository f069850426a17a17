# -*- coding: utf-8 -*-
"""Reading the common-term overrides and writing the per-namespace dictionaries."""
from __future__ import annotations

import json
import logging
import pathlib
from typing import List, Union

from vue_zh_i18n.registry import LocaleRegistry
from vue_zh_i18n.utils.fileio import atomic_write

logger = logging.getLogger(__name__)


def load_common_terms(path: Union[str, pathlib.Path, None]) -> frozenset:
    """Return the keys of the override document at ``path``.

    The file is optional: a missing, unreadable or malformed document is logged
    and an empty set is returned, so every text stays in its own namespace.
    """
    if not path:
        return frozenset()
    p = pathlib.Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Common terms file not found: %s", p)
        return frozenset()
    except (OSError, ValueError) as e:
        logger.warning("Failed to read common terms from %s: %s", p, e)
        return frozenset()

    if not isinstance(data, dict):
        logger.warning("Common terms file %s is not a JSON object; ignoring it", p)
        return frozenset()

    terms = frozenset(str(k).strip() for k in data if str(k).strip())
    logger.info("Loaded %d common terms from %s", len(terms), p)
    return terms


def render_locale_document(namespace: str, table: dict) -> str:
    return json.dumps({namespace: table}, indent=2, ensure_ascii=False) + "\n"


def write_locale_files(registry: LocaleRegistry, out_dir: Union[str, pathlib.Path]) -> List[pathlib.Path]:
    """Write ``<namespace>.json`` for every namespace in ``registry``.

    Each document holds a single top-level key (the namespace) mapping to the
    sorted text -> text table. Returns the written paths.
    """
    target = pathlib.Path(out_dir)
    target.mkdir(parents=True, exist_ok=True)
    written: List[pathlib.Path] = []
    for namespace, table in registry.serialize_all().items():
        path = target / f"{namespace}.json"
        atomic_write(path, render_locale_document(namespace, table))
        logger.info("Wrote %d keys to %s", len(table), path)
        written.append(path)
    return written

