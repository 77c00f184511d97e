"""Türkçe metin normalize yardımcıları."""
from __future__ import annotations

import re
from typing import Dict

# Büyük harfler str.lower()'dan önce eşlenir: "İ".lower() birleşik nokta bırakır
TURKISH_FOLD_TABLE: Dict[str, str] = {
    "İ": "i",
    "I": "i",
    "ı": "i",
    "Ğ": "g",
    "ğ": "g",
    "Ü": "u",
    "ü": "u",
    "Ş": "s",
    "ş": "s",
    "Ö": "o",
    "ö": "o",
    "Ç": "c",
    "ç": "c",
}

_FOLD = str.maketrans(TURKISH_FOLD_TABLE)


def fold_turkish(text: str) -> str:
    """Türkçe'ye özgü harfleri temel Latin karşılıklarına indir."""
    if not text:
        return ""
    return text.translate(_FOLD)


def normalize_query(text: str) -> str:
    """Kalıp eşleştirme için: katla + küçük harf + boşlukları sadeleştir."""
    if not text:
        return ""
    text = fold_turkish(text).lower()
    text = re.sub(r"\s+", " ", text)
    return text.strip()
