"""
Input/Output helpers for the Muse preprocessor.
Модуль ввода/вывода препроцессора Muse.

This module handles:
Этот модуль обрабатывает:
- Reading documents as UTF-8 text / Чтение документов в UTF-8
- Light cleanup of line endings and trailing spaces / Лёгкая очистка концов строк
- Atomic writes, so a failed run never leaves a half-written file
  Атомарная запись: неудачный запуск не оставляет полузаписанный файл
"""
from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Iterable, List


# Control characters that have no business in a text document (tab, LF and
# CR are kept)
# Управляющие символы, которым не место в тексте (кроме табуляции и переводов строк)
_RE_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# A line is everything up to and including "\n"; U+2028, U+2029 and NEL are
# ordinary characters here
# Строка заканчивается только на "\n"
_RE_LINE = re.compile(r"[^\n]*\n|[^\n]+")


def read_text(path: str | Path, *, encoding: str = "utf-8") -> str:
    """
    Read a whole document.
    Читает документ целиком.

    Raises FileNotFoundError with the offending path when the file is missing.
    """
    in_p = Path(path)
    if not in_p.is_file():
        raise FileNotFoundError(f"Input file not found: {in_p}")
    return in_p.read_text(encoding=encoding)


def split_lines(text: str) -> List[str]:
    """
    Lines of ``text`` with their terminators kept, split on "\\n" only.
    Делит текст на строки только по "\\n", сохраняя окончания.
    """
    return _RE_LINE.findall(text)


def normalize_text(text: str) -> str:
    """
    Light-weight cleanup before the filters run.
    Лёгкая нормализация перед фильтрами.

    Operations / Операции:
    - Unify newlines / Унифицирует символы новой строки
    - Drop stray control characters / Удаляет управляющие символы
    - Trim trailing spaces and tabs on terminated lines / Удаляет конечные пробелы

    Blank lines are left alone: in Muse they separate paragraphs and close
    footnote blocks.
    """
    if not text:
        return text

    # Step 1: Unix line endings / Шаг 1: окончания строк в стиле Unix
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    # Step 2: Control characters / Шаг 2: управляющие символы
    text = _RE_CONTROL_CHARS.sub("", text)

    # Step 3: Trailing spaces and tabs before a newline (not NBSP). An
    # unterminated last line keeps them: "[1] " there is still a definition.
    # Шаг 3: конечные пробелы перед переводом строки
    return re.sub(r"[ \t]+\n", "\n", text)


def save_text_atomic(text: str, out_path: str | Path, *, encoding: str = "utf-8") -> Path:
    """
    Write ``text`` to ``out_path`` through a temporary file in the same
    directory, then replace the target in one step.
    Записывает через временный файл и атомарно заменяет целевой.
    """
    out_p = Path(out_path)
    # Create parent directories if they don't exist
    # Создаем родительские директории, если их нет
    out_p.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{out_p.name}.", suffix=".tmp", dir=out_p.parent)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as fh:
            fh.write(text)
        os.replace(tmp_name, out_p)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return out_p


def iter_documents(in_dir: str | Path, pattern: str = "*.muse") -> Iterable[Path]:
    """Documents under ``in_dir`` matching ``pattern``, sorted for a stable order."""
    in_p = Path(in_dir)
    return sorted(p for p in in_p.rglob(pattern) if p.is_file())
