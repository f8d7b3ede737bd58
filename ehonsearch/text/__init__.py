"""
Text Module

Japanese text normalization and kana group classification.
"""

from ehonsearch.text.normalizer import (
    StringNormalizer,
    NormalizationRules,
    SeparatorPolicy,
    STANDARD,
    API_OPTIMIZED,
)
from ehonsearch.text.kana import kana_group_for

__all__ = [
    "StringNormalizer",
    "NormalizationRules",
    "SeparatorPolicy",
    "STANDARD",
    "API_OPTIMIZED",
    "kana_group_for",
]
