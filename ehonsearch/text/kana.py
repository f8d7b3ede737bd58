"""
Kana group classification.

Books are sectioned by the gojūon row of the first character of their
title. Katakana (full- and half-width) folds to hiragana first; voiced,
semi-voiced and small kana belong to their base row. A leading kanji is
classified by its reading (pykakasi) and a leading romaji word by its
kana spelling (jaconv), so 大きなかぶ is あ and Guri to Gura is か.
Digits, symbols and unreadable characters fall into 他.
"""

import re
import unicodedata
from functools import lru_cache

import jaconv
import pykakasi

from ehonsearch.domain.models import KanaGroup


_ROWS: dict[KanaGroup, str] = {
    KanaGroup.A: "ぁあぃいぅうゔぇえぉお",
    KanaGroup.KA: "かがきぎくぐけげこごゕゖ",
    KanaGroup.SA: "さざしじすずせぜそぞ",
    KanaGroup.TA: "ただちぢっつづてでとど",
    KanaGroup.NA: "なにぬねの",
    KanaGroup.HA: "はばぱひびぴふぶぷへべぺほぼぽ",
    KanaGroup.MA: "まみむめも",
    KanaGroup.YA: "ゃやゅゆょよ",
    KanaGroup.RA: "らりるれろ",
    KanaGroup.WA: "ゎわゐゑをん",
}

_GROUP_BY_CHAR: dict[str, KanaGroup] = {
    char: group for group, chars in _ROWS.items() for char in chars
}

# Leading characters skipped before classification
_LEADING_MARKS = "「『【〔(（\"'“‘〈《"

_KATAKANA_START = 0x30A1
_KATAKANA_END = 0x30F6
_KATAKANA_OFFSET = 0x60


def _to_hiragana(char: str) -> str:
    code = ord(char)
    if _KATAKANA_START <= code <= _KATAKANA_END:
        return chr(code - _KATAKANA_OFFSET)
    return char


@lru_cache(maxsize=1)
def _kakasi() -> pykakasi.kakasi:
    return pykakasi.kakasi()


_LATIN_WORD = re.compile(r"[a-z]+")


def _is_kanji(char: str) -> bool:
    return unicodedata.name(char, "").startswith("CJK")


def _reading(text: str) -> str:
    """Hiragana reading of the leading kanji or romaji word, "" if none."""
    first = text[0]

    if _is_kanji(first):
        segments = _kakasi().convert(text)
        return segments[0]["hira"] if segments else ""

    word = _LATIN_WORD.match(text.lower())
    if word:
        return jaconv.alphabet2kana(word.group())

    return ""


def kana_group_for(title: str) -> KanaGroup:
    """
    Classify a title into its kana group.

    Args:
        title: Book title as stored

    Returns:
        KanaGroup of the first meaningful character, OTHER when none
    """
    text = (title or "").lstrip().lstrip(_LEADING_MARKS).lstrip()
    if not text:
        return KanaGroup.OTHER

    # NFKC folds half-width katakana; it may expand to base + combining mark
    first = unicodedata.normalize("NFKC", text[0])[:1]
    group = _GROUP_BY_CHAR.get(_to_hiragana(first))
    if group is not None:
        return group

    reading = _reading(unicodedata.normalize("NFKC", text))
    if not reading:
        return KanaGroup.OTHER

    return _GROUP_BY_CHAR.get(_to_hiragana(reading[0]), KanaGroup.OTHER)
