from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from muse_prep.core.config import load_preprocess_config
from muse_prep.interfaces.cli import EXIT_MISMATCH, EXIT_USAGE, app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("LANG", "FIX_LINKS", "FIX_TYPOGRAPHY", "FIX_FOOTNOTES", "FIX_NBSP"):
        monkeypatch.delenv(f"MUSEPREP_{name}", raising=False)


def test_missing_config_gives_defaults(tmp_path: Path):
    cfg = load_preprocess_config(tmp_path / "missing.yaml")
    assert cfg.lang == "en"
    assert cfg.fix_links and cfg.fix_typography and cfg.fix_footnotes
    assert cfg.report_dir is None


def test_yaml_section_is_read(tmp_path: Path):
    path = tmp_path / "preprocess.yaml"
    path.write_text("preprocess:\n  lang: ru\n  fix_links: false\n  log_level: debug\n", encoding="utf-8")
    cfg = load_preprocess_config(path)
    assert cfg.lang == "ru"
    assert cfg.fix_links is False
    assert cfg.log_level == "DEBUG"


def test_env_overrides_yaml(tmp_path: Path, monkeypatch):
    path = tmp_path / "preprocess.yaml"
    path.write_text("lang: ru\nfix_footnotes: true\n", encoding="utf-8")
    monkeypatch.setenv("MUSEPREP_LANG", "es")
    monkeypatch.setenv("MUSEPREP_FIX_FOOTNOTES", "false")
    cfg = load_preprocess_config(path)
    assert cfg.lang == "es"
    assert cfg.fix_footnotes is False


def test_cli_fix_to_stdout(tmp_path: Path):
    doc = tmp_path / "doc.muse"
    doc.write_text('"hola" [7]\n\n[7] nota\n', encoding="utf-8")
    result = runner.invoke(app, ["fix", str(doc), "--lang", "es", "--config", str(tmp_path / "none.yaml")])
    assert result.exit_code == 0, result.output
    assert "«hola» [1]" in result.output
    assert "[1] nota" in result.output


def test_cli_fix_writes_file(tmp_path: Path):
    doc = tmp_path / "doc.muse"
    out = tmp_path / "fixed.muse"
    doc.write_text("see http://example.org\n", encoding="utf-8")
    result = runner.invoke(app, ["fix", str(doc), "-o", str(out), "--config", str(tmp_path / "none.yaml")])
    assert result.exit_code == 0, result.output
    assert out.read_text(encoding="utf-8") == "see [[http://example.org][example.org]]\n"


def test_cli_fix_mismatch(tmp_path: Path):
    doc = tmp_path / "doc.muse"
    out = tmp_path / "fixed.muse"
    doc.write_text("Text [1] [1]\n\n[1] one\n", encoding="utf-8")
    result = runner.invoke(app, ["fix", str(doc), "-o", str(out), "--config", str(tmp_path / "none.yaml")])
    assert result.exit_code == EXIT_MISMATCH
    assert not out.exists()


def test_cli_footnotes_dry_run(tmp_path: Path):
    doc = tmp_path / "doc.muse"
    doc.write_text("Text [3]\n\n[3] one\n", encoding="utf-8")
    result = runner.invoke(app, ["footnotes", str(doc)])
    assert result.exit_code == 0, result.output
    assert "Footnotes OK" in result.output
    assert doc.read_text(encoding="utf-8") == "Text [3]\n\n[3] one\n"


def test_cli_footnotes_mismatch_report(tmp_path: Path):
    doc = tmp_path / "doc.muse"
    doc.write_text("Text [1] [1] [1]\n\n[1] one\n\n[1] two\n", encoding="utf-8")
    result = runner.invoke(app, ["footnotes", str(doc)])
    assert result.exit_code == EXIT_MISMATCH
    assert "references" in result.output
    assert "+[1]" in result.output


def test_cli_missing_input(tmp_path: Path):
    result = runner.invoke(app, ["footnotes", str(tmp_path / "nope.muse")])
    assert result.exit_code == EXIT_USAGE


def test_cli_batch(tmp_path: Path):
    in_dir = tmp_path / "in"
    in_dir.mkdir()
    (in_dir / "a.muse").write_text("Text [2]\n\n[2] n\n", encoding="utf-8")
    result = runner.invoke(
        app, ["batch", str(in_dir), str(tmp_path / "out"), "--config", str(tmp_path / "none.yaml")]
    )
    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "a.muse").read_text(encoding="utf-8") == "Text [1]\n\n[1] n\n"


def test_cli_langs():
    result = runner.invoke(app, ["langs"])
    assert result.exit_code == 0
    assert "ru" in result.output
    assert "ordinals" in result.output
