from __future__ import annotations

import pytest

from muse_prep.core.links import linkify


@pytest.mark.parametrize(
    "text, expected",
    [
        (
            "Visit http://example.org now",
            "Visit [[http://example.org][example.org]] now",
        ),
        (
            "see https://www.example.com:8080/path/to?a=1&b=2 ok",
            "see [[https://www.example.com:8080/path/to?a=1&b=2][www.example.com]] ok",
        ),
        (
            "(see http://example.org/page).",
            "(see [[http://example.org/page][example.org]]).",
        ),
        (
            "end http://example.org.",
            "end [[http://example.org][example.org]].",
        ),
        (
            "dir http://example.org/docs/",
            "dir [[http://example.org/docs/][example.org]]",
        ),
    ],
)
def test_bare_urls_are_wrapped(text, expected):
    assert linkify(text) == expected


def test_several_urls_on_one_line():
    assert linkify("a http://one.org b https://two.net/x c") == (
        "a [[http://one.org][one.org]] b [[https://two.net/x][two.net]] c"
    )


def test_existing_links_are_left_alone():
    wrapped = "[[http://x.org/][x.org]]"
    assert linkify(wrapped) == wrapped
    text = "see http://example.org/a/b.html."
    assert linkify(linkify(text)) == linkify(text)


def test_other_schemes_untouched():
    assert linkify("ftp://example.org/file") == "ftp://example.org/file"
    assert linkify("no links here") == "no links here"


def test_none_passes_through():
    assert linkify(None) is None
