"""
Per-language punctuation tables.
Таблицы типографских символов по языкам.

Each language code maps to an immutable ``LanguageProfile``: the quote and
dash glyphs the typography filter writes, which optional rules are on
(ordinal superscripts, ellipsis), and the word lists used to place
non-breaking spaces.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

NBSP = "\u00a0"

# Typographic glyphs / Типографские символы
EM_DASH = "—"
EN_DASH = "–"
MINUS = "−"
HYPHEN = "-"


@dataclass(frozen=True)
class LanguageProfile:
    """
    Punctuation characters and rule switches for one language.
    Набор символов и переключатели правил для одного языка.

    ``endash`` equal to a plain hyphen means digit ranges are left alone.
    """

    code: str
    ldouble: str
    rdouble: str
    lsingle: str
    rsingle: str
    apos: str
    emdash: str
    endash: str
    dash: str
    ordinals: bool = False
    ellipsis: bool = False
    nbsp_before_words: Tuple[str, ...] = ()
    nbsp_after_digit_before_words: Tuple[str, ...] = ()
    nbsp_after_words: Tuple[str, ...] = ()

    @property
    def has_nbsp_rules(self) -> bool:
        return bool(
            self.nbsp_before_words
            or self.nbsp_after_digit_before_words
            or self.nbsp_after_words
        )


# Russian non-breaking space lists / Списки для неразрывных пробелов (рус.)
# before: the token sticks to the previous word
_RU_BEFORE_WORDS = (
    EN_DASH, EM_DASH, MINUS,
    "б", "ж", "ли", "же", "ль", "бы", "бы,", "же,",
)

# after a number: units and months
_RU_AFTER_DIGIT_BEFORE_WORDS = (
    "января", "февраля", "марта", "апреля", "мая", "июня", "июля",
    "августа", "сентября", "октября", "ноября", "декабря",
    "г", "кг", "мм", "дм", "см", "м", "км", "л", "В", "А", "ВТ", "W", "°C",
)

# after: short prepositions and conjunctions stick to the next word
_RU_AFTER_WORDS = (
    "в", "к", "о", "с", "у",
    "В", "К", "О", "С", "У",
    "на", "от", "об", "из", "за", "по", "до", "во",
    "та", "ту", "то", "те", "ко", "со",
    "На", "От", "Об", "Из", "За", "По", "До", "Во",
    "Ко", "Та", "Ту", "То", "Те", "Со",
    "А", "А,", "а", "а,",
    "И", "И,", "и", "и,",
    "но", "но,", "Но", "Но,",
    "да", "да,", "Да", "Да,",
    "не", "ни", "Не", "Ни",
    "ну", "ну,", "Ну", "Ну,",
    "с.", "ч.", "см.", "См.",
    "им.", "Им.", "т.", "п.",
)


_PROFILES = (
    LanguageProfile(
        code="en",
        ldouble="“", rdouble="”",
        lsingle="‘", rsingle="’",
        apos="’",
        emdash=EM_DASH, endash=EN_DASH, dash=EM_DASH,
        ordinals=True,
        ellipsis=True,
    ),
    LanguageProfile(
        code="es",
        ldouble="«", rdouble="»",
        lsingle="‘", rsingle="’",
        apos="’",
        emdash=EM_DASH, endash=HYPHEN, dash=EM_DASH,
    ),
    # Finnish uses the same glyph on both sides and the short dash
    LanguageProfile(
        code="fi",
        ldouble="”", rdouble="”",
        lsingle="’", rsingle="’",
        apos="’",
        emdash=EN_DASH, endash=HYPHEN, dash=EN_DASH,
    ),
    # „članak o ‚svicima‘“
    LanguageProfile(
        code="sr",
        ldouble="„", rdouble="“",
        lsingle="‚", rsingle="‘",
        apos="’",
        emdash=EN_DASH, endash=EN_DASH, dash=EM_DASH,
    ),
    # „...” and ‚...’
    LanguageProfile(
        code="hr",
        ldouble="„", rdouble="”",
        lsingle="‚", rsingle="’",
        apos="’",
        emdash=EN_DASH, endash=EN_DASH, dash=EM_DASH,
    ),
    LanguageProfile(
        code="ru",
        ldouble="«", rdouble="»",
        lsingle="‘", rsingle="’",
        apos="’",
        emdash=EM_DASH, endash=HYPHEN, dash=EM_DASH,
        ellipsis=True,
        nbsp_before_words=_RU_BEFORE_WORDS,
        nbsp_after_digit_before_words=_RU_AFTER_DIGIT_BEFORE_WORDS,
        nbsp_after_words=_RU_AFTER_WORDS,
    ),
    LanguageProfile(
        code="it",
        ldouble="“", rdouble="”",
        lsingle="‘", rsingle="’",
        apos="’",
        emdash=EN_DASH, endash=HYPHEN, dash=EM_DASH,
    ),
    # Macedonian: the single quotes are reversed
    LanguageProfile(
        code="mk",
        ldouble="„", rdouble="“",
        lsingle="‘", rsingle="‚",
        apos="’",
        emdash=EN_DASH, endash=EN_DASH, dash=EM_DASH,
    ),
)

LANGUAGE_PROFILES: Mapping[str, LanguageProfile] = MappingProxyType(
    {profile.code: profile for profile in _PROFILES}
)


def get_profile(lang: str | None) -> LanguageProfile | None:
    """Profile for ``lang`` or None when the code is unknown or empty."""
    if not lang:
        return None
    return LANGUAGE_PROFILES.get(lang)


def available_languages() -> list[str]:
    return sorted(LANGUAGE_PROFILES)
