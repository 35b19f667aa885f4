"""
Typography fixes for Muse documents.
Типографская правка документов Muse.

The filter works line by line. Every rule is a small function taking the
line and the language profile; ``build_rules`` picks the chain for a
language from its profile, so languages differ both in the glyphs they
write and in which rules run.

Order matters: each rule sees the output of the previous one, e.g. the
apostrophe before digits ('99) has to be settled before a quote after a
space is classified as opening.
"""
from __future__ import annotations

import logging
import re
from functools import partial
from typing import Callable, List, Optional

from .characters import HYPHEN, NBSP, LanguageProfile, get_profile
from .io import split_lines

logger = logging.getLogger(__name__)

LineFilter = Callable[[str], str]

# Visible non-breaking space in Muse markup
NBSP_MARKUP = "~~"


# =============================================================================
# LANGUAGE-INDEPENDENT RULES / ОБЩИЕ ПРАВИЛА
# =============================================================================

_LIGATURES = {
    "ﬀ": "ff",
    "ﬁ": "fi",
    "ﬂ": "fl",
    "ﬃ": "ffi",
    "ﬄ": "ffl",
}
_LIGATURES_TABLE = str.maketrans(_LIGATURES)


def fold_ligatures(line: str) -> str:
    """
    Expand typographic ligatures: 'ﬃ' → 'ffi'.
    Раскрывает лигатуры: 'ﬃ' → 'ffi'.
    """
    return line.translate(_LIGATURES_TABLE)


# =============================================================================
# QUOTES AND DASHES / КАВЫЧКИ И ТИРЕ
# =============================================================================

_RE_LINE_START_DASH = re.compile(r"^-(?=\s)")
_RE_SPACED_DASH = re.compile(r"(?<=\S)\s+-{1,3}\s+(?=\S)")
_RE_INLINE_DASHES = re.compile(r"(?<=\S)\s+-(\w.+?\w)-(?=\s)")
_RE_APOS_BEFORE_DIGITS = re.compile(r"'(?=\d\d\b)")
_RE_DIGIT_RANGE = re.compile(r"(?<![\-/])\b(\d+)-(\d+)\b(?![\-/])")


def fix_backticks(line: str, profile: LanguageProfile) -> str:
    """`` → opening double, ` → opening single, '' → " (classified later)."""
    line = line.replace("``", profile.ldouble)
    line = line.replace("`", profile.lsingle)
    return line.replace("''", '"')


def fix_dashes(line: str, profile: LanguageProfile) -> str:
    """
    Dialogue dash at line start, spaced hyphens and -inline asides-.
    Тире в начале реплики, дефисы между пробелами и -вставки-.
    """
    line = _RE_LINE_START_DASH.sub(profile.dash, line)
    line = _RE_SPACED_DASH.sub(f" {profile.emdash} ", line)
    return _RE_INLINE_DASHES.sub(
        lambda m: f" {profile.emdash} {m.group(1)} {profile.emdash}", line
    )


def fix_apostrophe_before_digits(line: str, profile: LanguageProfile) -> str:
    # '99 is an apostrophe, not an opening quote
    return _RE_APOS_BEFORE_DIGITS.sub(profile.apos, line)


def fix_quotes(line: str, profile: LanguageProfile) -> str:
    """
    Classify the remaining ASCII quotes as opening, closing or apostrophe.

    Every substitution runs on the partially rewritten line, so a quote
    claimed by an earlier pattern is no longer a candidate for the later
    ones. Whatever is left at the end is a closing quote.
    """
    ldouble, rdouble = profile.ldouble, profile.rdouble
    lsingle, rsingle = profile.lsingle, profile.rsingle

    # word on the right, no word on the left: opening
    line = re.sub(r'(?<=\W)"(?=\w)', ldouble, line)
    line = re.sub(r"(?<=\W)'(?=\w)", lsingle, line)

    # space on the left: opening
    line = re.sub(r'(?<=\s)"', ldouble, line)
    line = re.sub(r"(?<=\s)'", lsingle, line)

    # beginning of the line: opening
    line = re.sub(r'^"', ldouble, line)
    line = re.sub(r"^'", lsingle, line)

    # between two words: apostrophe
    line = re.sub(r"(?<=\w)'(?=\w)", profile.apos, line)

    # or a word followed by an opening quote
    line = re.sub(
        r"(?<=\w)'(" + re.escape(lsingle) + "|" + re.escape(ldouble) + ")",
        lambda m: profile.apos + m.group(1),
        line,
    )

    # word on the left: closing
    line = re.sub(r'(?<=\w)"(?=\W)', rdouble, line)
    line = re.sub(r"(?<=\w)'(?=\W)", rsingle, line)

    # everything else
    line = line.replace('"', rdouble)
    return line.replace("'", rsingle)


def fix_digit_ranges(line: str, profile: LanguageProfile) -> str:
    """1914-1918 → 1914–1918, but not 2001-02-03 or 1/2-3."""
    if profile.endash == HYPHEN:
        return line
    return _RE_DIGIT_RANGE.sub(lambda m: f"{m.group(1)}{profile.endash}{m.group(2)}", line)


# =============================================================================
# LANGUAGE-SPECIFIC RULES / ЯЗЫКОВЫЕ ПРАВИЛА
# =============================================================================

_RE_ORDINAL = re.compile(r"\b(\d+)(th|rd|st|nd)\b")
_RE_SPACED_ELLIPSIS = re.compile(r"(\. ){2,3}\.")


def fix_ordinals(line: str) -> str:
    """2nd → 2<sup>nd</sup>"""
    return _RE_ORDINAL.sub(r"\1<sup>\2</sup>", line)


def fix_ellipsis(line: str) -> str:
    """'. . .' → '...'"""
    return _RE_SPACED_ELLIPSIS.sub("...", line)


def fix_nbsp(line: str, profile: LanguageProfile) -> str:
    """
    Insert non-breaking spaces around the profile's short words.
    Расставляет неразрывные пробелы вокруг коротких слов.

    - before-words stick to the preceding word ("сказал бы");
    - after-digit-before-words stick to a preceding number ("5 км");
    - after-words stick to the following word ("в доме").
    """
    for token in profile.nbsp_before_words:
        line = re.sub(r"(?<=\S)\s+" + re.escape(token) + r"(?=\W)", NBSP + token, line)
    for token in profile.nbsp_after_digit_before_words:
        line = re.sub(r"(?<=\d)\s+" + re.escape(token) + r"(?=\W)", NBSP + token, line)
    for token in profile.nbsp_after_words:
        line = re.sub(r"\b" + re.escape(token) + r"\s+(?=\S)", token + NBSP, line)
    return line


def remove_nbsp(text: str) -> str:
    """Turn every non-breaking space (char or ~~ markup) into a plain space."""
    return text.replace(NBSP, " ").replace(NBSP_MARKUP, " ")


def show_nbsp(text: str) -> str:
    """Make non-breaking spaces visible as Muse ~~ markup."""
    return text.replace(NBSP, NBSP_MARKUP)


# =============================================================================
# RULE CHAINS / ЦЕПОЧКИ ПРАВИЛ
# =============================================================================

def build_rules(profile: LanguageProfile, *, nbsp: bool = True) -> List[LineFilter]:
    """
    Ordered list of line rules for ``profile``.
    Упорядоченный список правил для языка.
    """
    rules: List[LineFilter] = [
        fold_ligatures,
        partial(fix_backticks, profile=profile),
        partial(fix_dashes, profile=profile),
        partial(fix_apostrophe_before_digits, profile=profile),
        partial(fix_quotes, profile=profile),
        partial(fix_digit_ranges, profile=profile),
    ]
    if profile.ordinals:
        rules.append(fix_ordinals)
    if profile.ellipsis:
        rules.append(fix_ellipsis)
    if nbsp and profile.has_nbsp_rules:
        rules.append(partial(fix_nbsp, profile=profile))
    return rules


def get_filter(lang: Optional[str], *, nbsp: bool = True) -> Optional[LineFilter]:
    """
    Line filter for ``lang``, or None if the language is not supported.
    Фильтр строки для языка или None, если язык не поддерживается.
    """
    profile = get_profile(lang)
    if profile is None:
        return None
    rules = build_rules(profile, nbsp=nbsp)

    def _filter(line: str) -> str:
        for rule in rules:
            line = rule(line)
        return line

    return _filter


def typography_filter(lang: Optional[str], text: str, *, nbsp: bool = True) -> str:
    """
    Apply the typography rules of ``lang`` to every line of ``text``.
    Применяет типографские правила языка к каждой строке текста.

    Unknown languages leave the text untouched. Line terminators stay
    attached to their lines while filtering, so rules looking ahead for a
    non-word character see the newline.
    """
    line_filter = get_filter(lang, nbsp=nbsp)
    if line_filter is None:
        logger.debug("No typography rules for language %r", lang)
        return text
    return "".join(line_filter(line) for line in split_lines(text))
