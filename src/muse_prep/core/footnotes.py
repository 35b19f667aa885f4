"""
Footnote renumbering for Muse documents.
Перенумерация сносок в документах Muse.

Only the order of the markers matters, never their numbers. Given

    Hello [1] There [1] Test [1]

    [1] first

    [1] second

    [1] third

the body becomes ``Hello [1] There [2] Test [3]`` and the footnotes
``[1] first``, ``[2] second``, ``[3] third``.

Two passes run one after the other: primary footnotes ``[n]``, then
secondary footnotes ``{n}`` on the output of the first pass. A pass
whose reference count differs from its footnote count fails, and the
document is not rewritten at all: renumbering a broken document would
scramble it beyond repair.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .diagnostics import FootnoteMismatch, FootnoteMismatchError
from .io import read_text, save_text_atomic, split_lines

logger = logging.getLogger(__name__)

# A number this far above the running counter is not taken for a footnote
FOREIGN_NUMBER_GAP = 100

# Minimum indentation of a footnote continuation line
CONTINUATION_INDENT = 4


@dataclass(frozen=True)
class Delimiters:
    """Marker delimiters of one footnote channel."""

    name: str
    open: str
    close: str

    def marker(self, number: Union[int, str]) -> str:
        return f"{self.open}{number}{self.close}"


PRIMARY = Delimiters("primary", "[", "]")
SECONDARY = Delimiters("secondary", "{", "}")

_DELIMITERS = {d.name: d for d in (PRIMARY, SECONDARY)}

_RE_BLANK = re.compile(r"\A\s*\Z")
_RE_CONTINUATION = re.compile(r"\A\s{%d,}" % CONTINUATION_INDENT)
_RE_SECONDARY_START = re.compile(r"^(\{[0-9]+\})(?=\s)")


@dataclass
class RenumberingState:
    """Counter and original numbers for one stream (definitions or references)."""

    counter: int = 0
    found: List[int] = field(default_factory=list)

    def take(self, number: int) -> int:
        """
        Next sequential number for ``number``.

        Numbers far ahead of the counter are left as they are and not
        counted: they are most likely bracketed numbers in the text, not
        footnotes.
        """
        if number < self.counter + FOREIGN_NUMBER_GAP:
            self.found.append(number)
            self.counter += 1
            return self.counter
        return number


@dataclass
class RenumberResult:
    lines: List[str]
    error: Optional[FootnoteMismatch] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        return "".join(self.lines)


def rewrite_pass(lines: Iterable[str], delimiters: Delimiters) -> RenumberResult:
    """
    One top-to-bottom renumbering pass for ``delimiters``.
    Один проход перенумерации для заданных скобок.

    ``lines`` should keep their terminators (``io.split_lines``),
    so that a definition with no text on its line, ``[1]\\n``, is still seen
    as a definition.

    Per line, first match wins:

    1. ``[n]`` + whitespace at column 0: a footnote definition. It gets the
       next definition number and opens a footnote block.
    2. primary pass only, ``{n}`` + whitespace at column 0: a secondary
       footnote. Left alone, but its continuation lines belong to it.
    3. blank line: kept, the block stays open.
    4. inside a block and indented by 4+ whitespace: a continuation line,
       re-indented to the width of the current marker.
    5. anything else: body text. The block is closed and every marker on
       the line is renumbered as a reference.
    """
    open_, close = re.escape(delimiters.open), re.escape(delimiters.close)
    re_definition = re.compile(r"^" + open_ + r"([0-9]+)" + close + r"(?=\s)")
    re_reference = re.compile(open_ + r"([0-9]+)" + close)
    check_secondary = delimiters == PRIMARY

    definitions = RenumberingState()
    references = RenumberingState()
    indent = 0
    output: List[str] = []

    def _replace_definition(m: re.Match[str]) -> str:
        nonlocal indent
        number = definitions.take(int(m.group(1)))
        indent = len(str(number)) + 3
        return delimiters.marker(number)

    def _replace_reference(m: re.Match[str]) -> str:
        return delimiters.marker(references.take(int(m.group(1))))

    for line in lines:
        new_line, replaced = re_definition.subn(_replace_definition, line, count=1)
        secondary = _RE_SECONDARY_START.match(line) if check_secondary else None
        if replaced:
            line = new_line
        elif secondary:
            indent = len(secondary.group(1)) + 1
        elif _RE_BLANK.match(line):
            pass
        elif indent and _RE_CONTINUATION.match(line):
            line = _RE_CONTINUATION.sub(" " * indent, line, count=1)
        else:
            indent = 0
            line = re_reference.sub(_replace_reference, line)
        output.append(line)

    logger.debug(
        "%s pass: %d references, %d footnotes",
        delimiters.name, references.counter, definitions.counter,
    )
    if references.counter == definitions.counter:
        return RenumberResult(lines=output)

    mismatch = FootnoteMismatch.from_found(
        kind=delimiters.name,
        open_=delimiters.open,
        close=delimiters.close,
        references=references.counter,
        footnotes=definitions.counter,
        references_found=references.found,
        footnotes_found=definitions.found,
    )
    logger.warning(mismatch.summary())
    return RenumberResult(lines=[], error=mismatch)


def renumber_footnotes(lines: Iterable[str]) -> RenumberResult:
    """
    Primary pass, then secondary pass on its output.

    The first failing pass stops the run; the result then carries the
    mismatch report and no lines.
    """
    result = rewrite_pass(lines, PRIMARY)
    if not result.ok:
        return result
    return rewrite_pass(result.lines, SECONDARY)


def renumber_text(text: str) -> str:
    """
    Renumber the footnotes of a whole document.

    Raises FootnoteMismatchError when references and footnotes disagree.
    """
    result = renumber_footnotes(split_lines(text))
    if result.error is not None:
        raise FootnoteMismatchError(result.error)
    return result.text


class FootnoteFixer:
    """
    File-level footnote renumbering.

    Reads ``input``; if both passes succeed writes the result to ``output``,
    or just reports success when no output is given (dry run). The output
    file is never touched when a pass fails; the report is then available
    as ``error``.
    """

    def __init__(
        self,
        input: Union[str, Path],
        output: Optional[Union[str, Path]] = None,
        *,
        debug: bool = False,
        encoding: str = "utf-8",
    ) -> None:
        if input is None:
            raise ValueError("Missing input")
        self.input = Path(input)
        self.output = Path(output) if output is not None else None
        self.debug = debug
        self.encoding = encoding
        self.error: Optional[FootnoteMismatch] = None

    def rewrite(self, kind: str, lines: Iterable[str]) -> RenumberResult:
        """Run a single pass, ``kind`` being 'primary' or 'secondary'."""
        try:
            delimiters = _DELIMITERS[kind]
        except KeyError:
            raise ValueError(f"{kind!r} can only be 'primary' or 'secondary'") from None
        result = rewrite_pass(lines, delimiters)
        self._set_error(result.error)
        return result

    def _set_error(self, error: Optional[FootnoteMismatch]) -> None:
        if error is not None:
            error.source = str(self.input)
            self.error = error

    def process(self) -> Union[Path, bool, None]:
        """
        Returns the output path, True for a successful dry run, None on failure.
        """
        self.error = None
        text = read_text(self.input, encoding=self.encoding)
        lines = split_lines(text)

        primary = self.rewrite(PRIMARY.name, lines)
        if not primary.ok:
            return None
        secondary = self.rewrite(SECONDARY.name, primary.lines)
        if not secondary.ok:
            return None

        if self.debug:
            logger.info("%s: footnotes consistent", self.input)
        if self.output is None:
            return True
        save_text_atomic(secondary.text, self.output, encoding=self.encoding)
        return self.output
