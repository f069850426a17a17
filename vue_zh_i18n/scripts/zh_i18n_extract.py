#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
zh_i18n_extract.py — CJK text extractor for Vue + TS/TSX/JSX sources.

Key points
- Walks an input tree, rewrites every CJK literal to $t("<module>.<text>") and mirrors
  the result into an output tree; files are never modified in place.
- .vue: <template> markup and the <script setup> block are rewritten; other blocks pass through.
- .ts / .tsx / .jsx: the whole file is rewritten.
- Texts listed in the common terms file (common.json) are filed under the "common" namespace.
- After the walk, one dictionary per namespace is written: <locale-dir>/<namespace>.json.
- Re-running on already converted output changes nothing.

Usage Examples
--------------

1. Convert a module (dictionaries land in the output root):
   python3 zh_i18n_extract.py --src ./testFile --out ./testResult --module test

2. Preview the changes without writing anything:
   python3 zh_i18n_extract.py --src ./src/views/order --out ./out --module order --dry-run --diff

3. Separate dictionary directory and shared terms:
   python3 zh_i18n_extract.py --src ./src --out ./out -m order \\
     --common ./locales/common.json --locale-dir ./locales/zh-CN

Exit codes: 0 ok, 1 some files failed to parse (copied unchanged), 2 run aborted.
"""

from __future__ import annotations
import argparse
import dataclasses
import logging
import pathlib
import sys
from typing import List, Optional

from vue_zh_i18n.errors import ScriptParseError, SourceTreeError
from vue_zh_i18n.locale_files import load_common_terms, write_locale_files
from vue_zh_i18n.registry import LocaleRegistry
from vue_zh_i18n.sfc import UNIT_EXTENSIONS, process_unit
from vue_zh_i18n.utils.config import ExtractConfig, load_config
from vue_zh_i18n.utils.fileio import atomic_write, is_ignored, unified_diff
from vue_zh_i18n.utils.logging import compact_json, get_extract_logger

logger = logging.getLogger(__name__)


# ── Main processing ──────────────────────────────────────────────────────────
@dataclasses.dataclass
class ProcessStats:
    scanned: int = 0
    changed: int = 0
    failed: int = 0
    skipped: int = 0
    extracted: int = 0


@dataclasses.dataclass
class WalkOptions:
    namespace: str
    translate_fn: str = "$t"
    ignore_globs: List[str] = dataclasses.field(default_factory=list)
    dry: bool = False
    emit_diff: bool = False
    fail_fast: bool = False
    max_file_size: Optional[int] = None


def process_file(
    src_path: pathlib.Path,
    out_path: pathlib.Path,
    registry: LocaleRegistry,
    opts: WalkOptions,
    stats: ProcessStats,
    diffs: List[str],
) -> None:
    """Rewrite one unit into ``out_path``.

    A unit whose script does not parse is logged and mirrored unchanged; with
    ``fail_fast`` the ScriptParseError propagates and aborts the run.
    """
    stats.scanned += 1
    try:
        if opts.max_file_size and src_path.stat().st_size > opts.max_file_size:
            logger.warning("Skipping large file (> %d bytes): %s", opts.max_file_size, src_path)
            stats.skipped += 1
            return
        text = src_path.read_text(encoding="utf-8")
    except (UnicodeDecodeError, OSError) as e:
        logger.error("Failed to read %s: %s", src_path, e)
        stats.failed += 1
        return

    before = len(registry)
    try:
        new_text = process_unit(src_path, text, opts.namespace, registry, opts.translate_fn)
    except ScriptParseError as e:
        stats.failed += 1
        logger.error("Failed to transform %s: %s", src_path, e)
        if opts.fail_fast:
            raise
        new_text = text
    stats.extracted += len(registry) - before

    if new_text != text:
        stats.changed += 1
        if opts.emit_diff:
            diffs.append(unified_diff(text, new_text, src_path))

    if opts.dry:
        return
    atomic_write(out_path, new_text)
    logger.info("Converted %s => %s", src_path, out_path)


def walk_dir(
    src_dir: pathlib.Path,
    out_dir: pathlib.Path,
    base: pathlib.Path,
    registry: LocaleRegistry,
    opts: WalkOptions,
    stats: ProcessStats,
    diffs: List[str],
) -> None:
    """Depth-first walk of ``src_dir``; entries are visited in name order."""
    try:
        entries = sorted(src_dir.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise SourceTreeError(f"Failed to list {src_dir}: {e}") from e

    for entry in entries:
        if is_ignored(base, entry, opts.ignore_globs):
            continue
        out_path = out_dir / entry.name
        if entry.is_symlink():
            logger.warning("Skipping symlink: %s", entry)
            continue
        if entry.is_dir():
            walk_dir(entry, out_path, base, registry, opts, stats, diffs)
        elif entry.is_file() and entry.suffix in UNIT_EXTENSIONS:
            process_file(entry, out_path, registry, opts, stats, diffs)


def run(args: argparse.Namespace) -> int:
    cfg: ExtractConfig = load_config(pathlib.Path(args.config) if args.config else None).with_overrides(
        namespace=args.module,
        common_file=args.common,
        log_level=args.log_level,
        log_file=args.log_file,
        max_file_size=args.max_file_size,
    )
    get_extract_logger(level=cfg.log_level, log_file=cfg.log_file)

    src = pathlib.Path(args.src).resolve()
    out = pathlib.Path(args.out).resolve()
    if not src.is_dir():
        logger.error("Input root not found or not a directory: %s", src)
        return 2
    if out == src:
        logger.error("Output root must differ from the input root: %s", out)
        return 2

    ignore_globs = list(cfg.ignore) + list(args.ignore or [])
    try:
        # never walk into our own output
        rel_out = out.relative_to(src).as_posix()
        ignore_globs += [rel_out, f"{rel_out}/*"]
    except ValueError:
        pass

    registry = LocaleRegistry(load_common_terms(cfg.common_file), cfg.common_namespace)
    opts = WalkOptions(
        namespace=cfg.namespace,
        translate_fn=cfg.translate_fn,
        ignore_globs=ignore_globs,
        dry=args.dry_run,
        emit_diff=args.diff,
        fail_fast=args.fail_fast,
        max_file_size=cfg.max_file_size or None,
    )
    stats = ProcessStats()
    diffs: List[str] = []

    try:
        walk_dir(src, out, src, registry, opts, stats, diffs)
    except (SourceTreeError, ScriptParseError, OSError) as e:
        logger.error("Aborting run, no dictionary written: %s", e)
        return 2

    if args.diff and diffs:
        sys.stdout.write("\n".join(d for d in diffs if d))

    locale_dir = pathlib.Path(args.locale_dir).resolve() if args.locale_dir else out
    if args.dry_run:
        logger.info("Dry run: would write %s to %s", ", ".join(f"{ns}.json" for ns in registry.namespaces()) or "nothing", locale_dir)
    else:
        try:
            write_locale_files(registry, locale_dir)
        except OSError as e:
            logger.error("Failed to write dictionaries to %s: %s", locale_dir, e)
            return 2

    logger.info("Done. %s", compact_json(dataclasses.asdict(stats)))
    return 1 if stats.failed else 0


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Extract CJK text from Vue/TS sources into $t() calls and locale dictionaries")
    ap.add_argument("--src", required=True, help="Input root directory")
    ap.add_argument("--out", required=True, help="Output root directory (mirrors --src)")
    ap.add_argument("--module", "-m", help="Namespace for every extracted text (default from config: test)")
    ap.add_argument("--common", help="JSON file whose keys are common terms (default: common.json)")
    ap.add_argument("--locale-dir", help="Where <namespace>.json dictionaries are written (default: --out)")
    ap.add_argument("--config", help="Config file (default: ./i18n_config.json when present)")
    ap.add_argument("--ignore", action="append", default=[], help="Glob patterns to exclude (repeatable)")
    ap.add_argument("--dry-run", action="store_true", help="Report only; no writes")
    ap.add_argument("--diff", action="store_true", help="Print unified diff for changes")
    ap.add_argument("--fail-fast", action="store_true", help="Abort the run on the first file that fails to parse")
    ap.add_argument("--max-file-size", type=int, help="Skip files larger than this many bytes (0 to disable)")
    ap.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    ap.add_argument("--log-file", help="Also log to this rotating file")
    return ap


def main():
    args = build_arg_parser().parse_args()
    sys.exit(run(args))


if __name__ == "__main__":
    main()
