from __future__ import annotations

import json
import unittest
from pathlib import Path

import pytest

from muse_prep.core.characters import NBSP
from muse_prep.core.config import PreprocessConfig
from muse_prep.core.diagnostics import FootnoteMismatchError
from muse_prep.core.io import normalize_text, save_text_atomic, split_lines
from muse_prep.core.pipelines import (
    preprocess_dir_pipeline,
    preprocess_file,
    preprocess_text,
)

GOOD_DOC = 'He said "hi" see http://example.org [4]\n\n[4] note\n'
BAD_DOC = "Text [1] [1]\n\n[1] only one\n"


class PreprocessTextTests(unittest.TestCase):
    def test_all_fixes_in_order(self):
        self.assertEqual(
            preprocess_text(GOOD_DOC),
            "He said “hi” see [[http://example.org][example.org]] [1]\n\n[1] note\n",
        )

    def test_toggles(self):
        cfg = PreprocessConfig(fix_links=False, fix_typography=False, fix_footnotes=False)
        self.assertEqual(preprocess_text(GOOD_DOC, cfg), GOOD_DOC)

    def test_language_selection(self):
        cfg = PreprocessConfig(lang="es", fix_links=False)
        self.assertTrue(preprocess_text(GOOD_DOC, cfg).startswith("He said «hi»"))

    def test_unknown_language_skips_typography(self):
        cfg = PreprocessConfig(lang="xx", fix_links=False, fix_footnotes=False)
        self.assertEqual(preprocess_text(GOOD_DOC, cfg), GOOD_DOC)

    def test_mismatch_raises(self):
        with self.assertRaises(FootnoteMismatchError) as ctx:
            preprocess_text(BAD_DOC)
        self.assertEqual(ctx.exception.mismatch.references, 2)
        self.assertEqual(ctx.exception.mismatch.footnotes, 1)

    def test_mismatch_ignored_without_footnote_fix(self):
        cfg = PreprocessConfig(fix_footnotes=False)
        self.assertEqual(preprocess_text(BAD_DOC, cfg), BAD_DOC)

    def test_nbsp_options(self):
        shown = PreprocessConfig(lang="ru", show_nbsp=True)
        self.assertEqual(preprocess_text("в дом\n", shown), "в~~дом\n")

        no_fix = PreprocessConfig(lang="ru", fix_nbsp=False)
        self.assertEqual(preprocess_text("в дом\n", no_fix), "в дом\n")

        removed = PreprocessConfig(lang="en", remove_nbsp=True)
        self.assertEqual(preprocess_text(f"a{NBSP}b~~c\n", removed), "a b c\n")

    def test_line_endings_normalized(self):
        self.assertEqual(normalize_text("a \r\nb\t\r\nc  "), "a\nb\nc  ")
        self.assertEqual(preprocess_text("Text [2]\r\n\r\n[2] n\r\n"), "Text [1]\n\n[1] n\n")

    def test_definition_on_unterminated_last_line(self):
        self.assertEqual(preprocess_text("Body [2]\n\n[2] "), "Body [1]\n\n[1] ")

    def test_unicode_line_separators(self):
        text = "Body text\x85[1] cited here.\n\n[1] Note\n"
        self.assertEqual(preprocess_text(text), text)
        self.assertEqual(split_lines("a\u2028b\nc"), ["a\u2028b\n", "c"])
        self.assertEqual(split_lines(""), [])


def test_preprocess_file_writes_output(tmp_path: Path):
    src = tmp_path / "doc.muse"
    src.write_text(GOOD_DOC, encoding="utf-8")
    out = preprocess_file(src, tmp_path / "out" / "doc.muse")
    assert out.read_text(encoding="utf-8").endswith("[1] note\n")


def test_preprocess_file_keeps_old_output_on_mismatch(tmp_path: Path):
    src = tmp_path / "doc.muse"
    dst = tmp_path / "fixed.muse"
    src.write_text(BAD_DOC, encoding="utf-8")
    dst.write_text("old", encoding="utf-8")

    with pytest.raises(FootnoteMismatchError) as excinfo:
        preprocess_file(src, dst)

    assert excinfo.value.mismatch.source == str(src)
    assert dst.read_text(encoding="utf-8") == "old"


def test_preprocess_file_missing_input(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        preprocess_file(tmp_path / "nope.muse", tmp_path / "out.muse")


def test_save_text_atomic_leaves_no_temp_files(tmp_path: Path):
    target = save_text_atomic("x\n", tmp_path / "a" / "b.muse")
    assert target.read_text(encoding="utf-8") == "x\n"
    assert [p.name for p in target.parent.iterdir()] == ["b.muse"]


def test_dir_pipeline_skips_broken_documents(tmp_path: Path):
    in_dir = tmp_path / "in"
    (in_dir / "sub").mkdir(parents=True)
    (in_dir / "good.muse").write_text(GOOD_DOC, encoding="utf-8")
    (in_dir / "sub" / "bad.muse").write_text(BAD_DOC, encoding="utf-8")
    (in_dir / "notes.txt").write_text(BAD_DOC, encoding="utf-8")
    reports = tmp_path / "reports"

    cfg = PreprocessConfig(report_dir=reports)
    result = preprocess_dir_pipeline(in_dir, tmp_path / "out", cfg)

    assert not result.ok
    assert result.produced == [tmp_path / "out" / "good.muse"]
    assert not (tmp_path / "out" / "sub" / "bad.muse").exists()
    assert [m.source for m in result.failed] == [str(in_dir / "sub" / "bad.muse")]

    logs = list(reports.glob("footnotes-*.jsonl"))
    assert len(logs) == 1
    row = json.loads(logs[0].read_text(encoding="utf-8").splitlines()[0])
    assert row["references"] == 2
    assert row["footnotes"] == 1
