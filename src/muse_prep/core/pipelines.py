"""
================================================================================
EN: Preprocessing pipelines for Muse documents
RU: Конвейеры предобработки документов Muse
================================================================================

EN: A document goes through the enabled fixes in a fixed order:
RU: Документ проходит включённые исправления в фиксированном порядке:

    links → (remove nbsp) → typography (+ nbsp) → footnotes → (show nbsp)

EN: Links and typography are best-effort rewrites and never fail. The
    footnote step fails hard on a reference/footnote count mismatch, and
    then nothing is written.
RU: Ссылки и типографика исправляются «как получится» и никогда не падают.
    Сноски при несовпадении счётчиков дают ошибку, и тогда ничего не пишется.
================================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .characters import get_profile
from .config import PreprocessConfig
from .diagnostics import FootnoteMismatch, FootnoteMismatchError, write_mismatch_log
from .footnotes import renumber_text
from .io import iter_documents, normalize_text, read_text, save_text_atomic
from .links import linkify
from .typography import remove_nbsp, show_nbsp, typography_filter

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of a directory run."""

    produced: List[Path] = field(default_factory=list)
    failed: List[FootnoteMismatch] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def preprocess_text(text: str, config: Optional[PreprocessConfig] = None) -> str:
    """
    EN: Run the enabled fixes over a whole document.
    RU: Применяет включённые исправления ко всему документу.

    Raises FootnoteMismatchError when footnote fixing is enabled and the
    document's references and footnotes do not match.
    """
    cfg = config or PreprocessConfig()
    text = normalize_text(text)

    if cfg.fix_links:
        logger.debug("Fixing links")
        text = linkify(text)

    if cfg.remove_nbsp:
        logger.debug("Removing non-breaking spaces")
        text = remove_nbsp(text)

    if cfg.fix_typography:
        if get_profile(cfg.lang) is None:
            logger.warning("No typography rules for language %r, skipping", cfg.lang)
        else:
            logger.debug("Fixing typography (%s)", cfg.lang)
            text = typography_filter(cfg.lang, text, nbsp=cfg.fix_nbsp)

    if cfg.fix_footnotes:
        logger.debug("Fixing footnotes")
        text = renumber_text(text)

    if cfg.show_nbsp:
        text = show_nbsp(text)

    return text


def preprocess_file(
    in_path: str | Path,
    out_path: str | Path,
    config: Optional[PreprocessConfig] = None,
) -> Path:
    """
    EN: Preprocess one file. The output is written only after every step
        succeeded; on a footnote mismatch an existing output stays untouched.
    RU: Обрабатывает один файл. Результат пишется только после успеха всех
        шагов; при несовпадении сносок существующий файл не трогается.
    """
    cfg = config or PreprocessConfig()
    in_p = Path(in_path)
    text = read_text(in_p, encoding=cfg.encoding)
    try:
        fixed = preprocess_text(text, cfg)
    except FootnoteMismatchError as exc:
        exc.mismatch.source = str(in_p)
        raise
    out_p = save_text_atomic(fixed, out_path, encoding=cfg.encoding)
    logger.info("%s -> %s", in_p, out_p)
    return out_p


def preprocess_dir_pipeline(
    in_dir: str | Path,
    out_dir: str | Path,
    config: Optional[PreprocessConfig] = None,
    *,
    pattern: str = "*.muse",
) -> BatchResult:
    """
    EN: Preprocess every matching file under ``in_dir`` into ``out_dir``,
        keeping the relative layout. A footnote mismatch skips that file,
        is logged (and written to ``report_dir`` when configured) and the
        run goes on.
    RU: Обрабатывает все подходящие файлы из ``in_dir`` в ``out_dir``,
        сохраняя структуру. Файл с несовпадением сносок пропускается.
    """
    cfg = config or PreprocessConfig()
    in_p = Path(in_dir)
    out_p = Path(out_dir)
    out_p.mkdir(parents=True, exist_ok=True)

    result = BatchResult()
    for doc in iter_documents(in_p, pattern):
        target = out_p / doc.relative_to(in_p)
        try:
            result.produced.append(preprocess_file(doc, target, cfg))
        except FootnoteMismatchError as exc:
            logger.error("%s: %s", doc, exc)
            result.failed.append(exc.mismatch)
            if cfg.report_dir is not None:
                write_mismatch_log(exc.mismatch, cfg.report_dir)

    logger.info(
        "Batch done: %d written, %d failed", len(result.produced), len(result.failed)
    )
    return result
