# -*- coding: utf-8 -*-
"""
Tests for sfc.py: block splitting and whole-unit processing.
"""
from __future__ import annotations

import textwrap
import unittest

from vue_zh_i18n.errors import ScriptParseError
from vue_zh_i18n.registry import LocaleRegistry
from vue_zh_i18n.sfc import (
    dialect_for_lang,
    dialect_for_path,
    parse_attrs,
    process_script_source,
    process_unit,
    process_vue_source,
    split_sfc,
)

SFC = textwrap.dedent(
    """\
    <template>
      <div class="box" title="标题">
        <template v-if="ok"><span>你好</span></template>
        <p>{{ ok ? '是' : '否' }}</p>
      </div>
    </template>

    <script>
    export default { name: "演示" }
    </script>

    <script setup lang="ts">
    const msg = "消息";
    </script>

    <style scoped>
    .box::after { content: "样式"; }
    </style>
    """
)


class TestSplitSfc(unittest.TestCase):
    """Top-level block detection."""

    def test_blocks_found(self):
        sfc = split_sfc(SFC)
        self.assertIsNotNone(sfc.template)
        self.assertEqual(len(sfc.scripts), 2)
        self.assertEqual(len(sfc.styles), 1)
        self.assertTrue(sfc.script_setup.setup)
        self.assertEqual(sfc.script_setup.lang, "ts")
        self.assertEqual(sfc.script_setup.content.strip(), 'const msg = "消息";')

    def test_nested_template_does_not_close_block(self):
        sfc = split_sfc(SFC)
        self.assertIn("<template v-if=\"ok\">", sfc.template.content)
        self.assertIn("</template>", sfc.template.content)
        self.assertTrue(sfc.template.content.rstrip().endswith("</div>"))

    def test_offsets_point_at_content(self):
        sfc = split_sfc(SFC)
        for block in [sfc.template] + sfc.scripts + sfc.styles:
            self.assertEqual(SFC[block.start : block.end], block.content)

    def test_commented_block_ignored(self):
        sfc = split_sfc("<!-- <script setup>const a = 1</script> -->\n<template><p>x</p></template>")
        self.assertEqual(sfc.scripts, [])
        self.assertEqual(sfc.template.content, "<p>x</p>")

    def test_parse_attrs(self):
        self.assertEqual(parse_attrs(' setup lang="ts"'), {"setup": True, "lang": "ts"})
        self.assertEqual(parse_attrs(" lang='tsx' "), {"lang": "tsx"})


class TestDialects(unittest.TestCase):

    def test_dialect_for_path(self):
        self.assertEqual(dialect_for_path("a/b.ts"), "typescript")
        self.assertEqual(dialect_for_path("a/b.tsx"), "tsx")
        self.assertEqual(dialect_for_path("a/b.jsx"), "javascript")
        with self.assertRaises(ValueError):
            dialect_for_path("a/b.py")

    def test_dialect_for_lang(self):
        self.assertEqual(dialect_for_lang(None), "javascript")
        self.assertEqual(dialect_for_lang("ts"), "typescript")
        self.assertEqual(dialect_for_lang("tsx"), "tsx")
        self.assertIsNone(dialect_for_lang("coffee"))


class TestProcessVueSource(unittest.TestCase):
    """Combined units."""

    def test_template_and_setup_rewritten(self):
        reg = LocaleRegistry()
        out = process_vue_source(SFC, "test", reg)
        self.assertIn("<div class=\"box\" :title=\"$t('test.标题')\">", out)
        self.assertIn("<span>{{ $t('test.你好') }}</span>", out)
        self.assertIn("<p>{{ ok ? $t('test.是') : $t('test.否') }}</p>", out)
        self.assertIn('const msg = $t("test.消息");', out)
        self.assertEqual(sorted(reg.entries("test")), sorted(["标题", "你好", "是", "否", "消息"]))

    def test_other_blocks_untouched(self):
        out = process_vue_source(SFC, "test", LocaleRegistry())
        self.assertIn('<script>\nexport default { name: "演示" }\n</script>', out)
        self.assertIn('<style scoped>\n.box::after { content: "样式"; }\n</style>', out)
        self.assertIn('<script setup lang="ts">', out)
        self.assertTrue(out.endswith("</style>\n"))

    def test_idempotent(self):
        once = process_vue_source(SFC, "test", LocaleRegistry())
        twice = process_vue_source(once, "test", LocaleRegistry())
        self.assertEqual(once, twice)

    def test_script_error_records_nothing(self):
        src = '<template><p>你好</p></template>\n<script setup>\nconst = ;\n</script>\n'
        reg = LocaleRegistry()
        with self.assertRaises(ScriptParseError):
            process_vue_source(src, "test", reg)
        self.assertEqual(len(reg), 0)

    def test_unsupported_template_lang_untouched(self):
        src = '<template lang="pug">\np 你好\n</template>\n'
        with self.assertLogs("vue_zh_i18n.sfc", level="WARNING"):
            self.assertEqual(process_vue_source(src, "test", LocaleRegistry()), src)

    def test_template_only(self):
        out = process_vue_source("<template><p>你好</p></template>", "test", LocaleRegistry())
        self.assertEqual(out, "<template><p>{{ $t('test.你好') }}</p></template>")


class TestProcessUnit(unittest.TestCase):
    """Dispatch on the extension."""

    def test_script_unit(self):
        reg = LocaleRegistry()
        out = process_unit("src/api.ts", 'export const msg = "失败";\n', "order", reg)
        self.assertEqual(out, 'export const msg = $t("order.失败");\n')
        self.assertIn(("order", "失败"), reg)

    def test_tsx_unit(self):
        out = process_unit("src/App.tsx", "export const A = () => <div>你好</div>;\n", "test", LocaleRegistry())
        self.assertEqual(out, 'export const A = () => <div>{$t("test.你好")}</div>;\n')

    def test_vue_unit(self):
        out = process_unit("src/A.vue", "<template><b>加粗</b></template>", "test", LocaleRegistry())
        self.assertEqual(out, "<template><b>{{ $t('test.加粗') }}</b></template>")

    def test_script_error_records_nothing(self):
        reg = LocaleRegistry()
        with self.assertRaises(ScriptParseError):
            process_script_source('const a = "好";\nconst = ;', "test", reg)
        self.assertEqual(len(reg), 0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
