# -*- coding: utf-8 -*-
"""
Tests for the locale registry and the dictionary files it is written to.
"""
from __future__ import annotations

import json
import pathlib
import tempfile
import unittest

from vue_zh_i18n.locale_files import load_common_terms, render_locale_document, write_locale_files
from vue_zh_i18n.registry import COMMON_NAMESPACE, LocaleRegistry


class TestLocaleRegistry(unittest.TestCase):
    """Namespace resolution and recording."""

    def test_record_returns_namespaced_key(self):
        reg = LocaleRegistry()
        self.assertEqual(reg.record("order", "你好"), "order.你好")
        self.assertIn(("order", "你好"), reg)
        self.assertEqual(reg.entries("order"), {"你好": "你好"})

    def test_common_term_goes_to_common_namespace(self):
        reg = LocaleRegistry(["确定"])
        self.assertEqual(reg.record("order", "确定"), "common.确定")
        self.assertIn((COMMON_NAMESPACE, "确定"), reg)
        self.assertNotIn(("order", "确定"), reg)

    def test_common_term_match_ignores_surrounding_whitespace(self):
        reg = LocaleRegistry([" 取消 "])
        self.assertTrue(reg.is_common("取消"))
        self.assertEqual(reg.resolve("order", " 取消"), COMMON_NAMESPACE)

    def test_record_is_idempotent(self):
        reg = LocaleRegistry()
        reg.record("test", "你好")
        reg.record("test", "你好")
        self.assertEqual(len(reg), 1)

    def test_same_text_in_two_namespaces(self):
        reg = LocaleRegistry()
        reg.record("a", "名称")
        reg.record("b", "名称")
        self.assertEqual(reg.namespaces(), ["a", "b"])
        self.assertEqual(len(reg), 2)

    def test_key_for_does_not_record(self):
        reg = LocaleRegistry()
        self.assertEqual(reg.key_for("test", "你好"), "test.你好")
        self.assertEqual(len(reg), 0)

    def test_fork_and_merge(self):
        reg = LocaleRegistry(["确定"])
        reg.record("test", "甲")
        scratch = reg.fork()
        self.assertEqual(len(scratch), 0)
        self.assertTrue(scratch.is_common("确定"))
        scratch.record("test", "乙")
        scratch.record("test", "确定")
        self.assertNotIn(("test", "乙"), reg)
        reg.merge(scratch)
        self.assertIn(("test", "乙"), reg)
        self.assertIn(("common", "确定"), reg)
        self.assertEqual(len(reg), 3)

    def test_serialize_all_sorts_keys(self):
        reg = LocaleRegistry()
        for text in ["乙", "甲", "丙"]:
            reg.record("test", text)
        reg.record("alpha", "好")
        data = reg.serialize_all()
        self.assertEqual(list(data), ["alpha", "test"])
        self.assertEqual(list(data["test"]), sorted(["乙", "甲", "丙"]))
        self.assertEqual(data["test"]["甲"], "甲")


class TestLocaleFiles(unittest.TestCase):
    """Reading common terms and writing <namespace>.json documents."""

    def test_load_common_terms_keys_only(self):
        with tempfile.TemporaryDirectory() as td:
            path = pathlib.Path(td) / "common.json"
            path.write_text(json.dumps({"确定": "OK", "取消": ""}, ensure_ascii=False), encoding="utf-8")
            self.assertEqual(load_common_terms(path), frozenset({"确定", "取消"}))

    def test_load_common_terms_missing_file(self):
        with tempfile.TemporaryDirectory() as td:
            with self.assertLogs("vue_zh_i18n.locale_files", level="WARNING"):
                terms = load_common_terms(pathlib.Path(td) / "nope.json")
            self.assertEqual(terms, frozenset())

    def test_load_common_terms_malformed(self):
        with tempfile.TemporaryDirectory() as td:
            path = pathlib.Path(td) / "common.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertLogs("vue_zh_i18n.locale_files", level="WARNING"):
                self.assertEqual(load_common_terms(path), frozenset())
            path.write_text('["确定"]', encoding="utf-8")
            with self.assertLogs("vue_zh_i18n.locale_files", level="WARNING"):
                self.assertEqual(load_common_terms(path), frozenset())

    def test_load_common_terms_none(self):
        self.assertEqual(load_common_terms(None), frozenset())

    def test_render_document_shape(self):
        doc = render_locale_document("test", {"你好": "你好"})
        self.assertEqual(doc, '{\n  "test": {\n    "你好": "你好"\n  }\n}\n')

    def test_write_locale_files(self):
        reg = LocaleRegistry(["确定"])
        reg.record("test", "乙")
        reg.record("test", "甲")
        reg.record("test", "确定")
        with tempfile.TemporaryDirectory() as td:
            out = pathlib.Path(td) / "locales"
            written = write_locale_files(reg, out)
            self.assertEqual(sorted(p.name for p in written), ["common.json", "test.json"])

            test_doc = json.loads((out / "test.json").read_text(encoding="utf-8"))
            self.assertEqual(list(test_doc), ["test"])
            self.assertEqual(list(test_doc["test"]), sorted(["乙", "甲"]))
            common_doc = json.loads((out / "common.json").read_text(encoding="utf-8"))
            self.assertEqual(common_doc, {"common": {"确定": "确定"}})

    def test_write_nothing_for_empty_registry(self):
        with tempfile.TemporaryDirectory() as td:
            self.assertEqual(write_locale_files(LocaleRegistry(), td), [])
            self.assertEqual(list(pathlib.Path(td).iterdir()), [])


if __name__ == "__main__":
    unittest.main(verbosity=2)
