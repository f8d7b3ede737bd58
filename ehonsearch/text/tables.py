"""
Character tables used by the Japanese text normalizer.

All maps are single character to single character so they can be compiled
into ``str.translate`` tables.
"""

# Full-width Latin letters and digits (U+FF10-FF19, U+FF21-FF3A, U+FF41-FF5A)
FULL_WIDTH_ALNUM: dict[str, str] = {
    **{chr(0xFF10 + i): chr(ord("0") + i) for i in range(10)},
    **{chr(0xFF21 + i): chr(ord("A") + i) for i in range(26)},
    **{chr(0xFF41 + i): chr(ord("a") + i) for i in range(26)},
}

# Characters that separate words in operator input
SEPARATORS: frozenset[str] = frozenset({
    " ",
    "　",  # ideographic space
    "\t",
    "\n",
    "\r",
    "・",  # katakana middle dot
    "･",  # half-width middle dot
    "·",  # middle dot
})

# Dash family, unified to ASCII hyphen. The long vowel mark ー (U+30FC) is
# part of katakana words and must stay out of this table.
DASHES: dict[str, str] = {
    "—": "-",  # em dash
    "–": "-",  # en dash
    "―": "-",  # horizontal bar
    "‐": "-",  # hyphen
    "−": "-",  # minus sign
    "－": "-",  # full-width hyphen-minus
    "〜": "-",  # wave dash
    "～": "-",  # full-width tilde
}

PARENTHESES: dict[str, str] = {
    "（": "(",
    "）": ")",
}

# Legacy and variant kanji seen in author names, mapped to the form the
# catalog indexes.
VARIANT_KANJI: dict[str, str] = {
    "髙": "高",
    "﨑": "崎",
    "嵜": "崎",
    "德": "徳",
    "濵": "浜",
    "濱": "浜",
    "凜": "凛",
    "邊": "辺",
    "邉": "辺",
    "齋": "斎",
    "齊": "斎",
    "澤": "沢",
    "櫻": "桜",
    "廣": "広",
    "國": "国",
}

# Contributor roles appended to a personal name
KANJI_ROLE_DESCRIPTORS: tuple[str, ...] = ("作", "文", "絵", "著", "画", "訳", "編")
KANA_ROLE_DESCRIPTORS: tuple[str, ...] = ("さく", "ぶん", "ちょ", "やく", "へん", "え")

# Brackets that may wrap a role descriptor, after parenthesis unification
ROLE_OPEN_BRACKETS = "([〔【"
ROLE_CLOSE_BRACKETS = ")]〕】"
