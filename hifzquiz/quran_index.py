# hifzquiz/quran_index.py
"""
Static surah metadata and verse-key navigation.

A verse key is the string "surah:ayah" (e.g. "2:255"). Keys are ordered by
surah first, then by ayah. Everything in this module is pure and works
from the hand-authored tables below; no dataset needs to be loaded.
"""
import math
from typing import List, Optional, Tuple

from .models import SurahInfo

TOTAL_SURAHS = 114
TOTAL_JUZ = 30
FIRST_KEY = "1:1"
LAST_KEY = "114:6"

MASK = "..."

SURAH_NAMES = {
    1: "Al-Fatihah", 2: "Al-Baqarah", 3: "Ali 'Imran", 4: "An-Nisa", 5: "Al-Ma'idah",
    6: "Al-An'am", 7: "Al-A'raf", 8: "Al-Anfal", 9: "At-Tawbah", 10: "Yunus",
    11: "Hud", 12: "Yusuf", 13: "Ar-Ra'd", 14: "Ibrahim", 15: "Al-Hijr",
    16: "An-Nahl", 17: "Al-Isra", 18: "Al-Kahf", 19: "Maryam", 20: "Taha",
    21: "Al-Anbya", 22: "Al-Hajj", 23: "Al-Mu'minun", 24: "An-Nur", 25: "Al-Furqan",
    26: "Ash-Shu'ara", 27: "An-Naml", 28: "Al-Qasas", 29: "Al-'Ankabut", 30: "Ar-Rum",
    31: "Luqman", 32: "As-Sajdah", 33: "Al-Ahzab", 34: "Saba", 35: "Fatir",
    36: "Ya-Sin", 37: "As-Saffat", 38: "Sad", 39: "Az-Zumar", 40: "Ghafir",
    41: "Fussilat", 42: "Ash-Shuraa", 43: "Az-Zukhruf", 44: "Ad-Dukhan", 45: "Al-Jathiyah",
    46: "Al-Ahqaf", 47: "Muhammad", 48: "Al-Fath", 49: "Al-Hujurat", 50: "Qaf",
    51: "Adh-Dhariyat", 52: "At-Tur", 53: "An-Najm", 54: "Al-Qamar", 55: "Ar-Rahman",
    56: "Al-Waqi'ah", 57: "Al-Hadid", 58: "Al-Mujadila", 59: "Al-Hashr", 60: "Al-Mumtahanah",
    61: "As-Saf", 62: "Al-Jumu'ah", 63: "Al-Munafiqun", 64: "At-Taghabun", 65: "At-Talaq",
    66: "At-Tahrim", 67: "Al-Mulk", 68: "Al-Qalam", 69: "Al-Haqqah", 70: "Al-Ma'arij",
    71: "Nuh", 72: "Al-Jinn", 73: "Al-Muzzammil", 74: "Al-Muddaththir", 75: "Al-Qiyamah",
    76: "Al-Insan", 77: "Al-Mursalat", 78: "An-Naba", 79: "An-Nazi'at", 80: "'Abasa",
    81: "At-Takwir", 82: "Al-Infitar", 83: "Al-Mutaffifin", 84: "Al-Inshiqaq", 85: "Al-Buruj",
    86: "At-Tariq", 87: "Al-A'la", 88: "Al-Ghashiyah", 89: "Al-Fajr", 90: "Al-Balad",
    91: "Ash-Shams", 92: "Al-Layl", 93: "Ad-Duhaa", 94: "Ash-Sharh", 95: "At-Tin",
    96: "Al-'Alaq", 97: "Al-Qadr", 98: "Al-Bayyinah", 99: "Az-Zalzalah", 100: "Al-'Adiyat",
    101: "Al-Qari'ah", 102: "At-Takathur", 103: "Al-'Asr", 104: "Al-Humazah", 105: "Al-Fil",
    106: "Quraysh", 107: "Al-Ma'un", 108: "Al-Kawthar", 109: "Al-Kafirun", 110: "An-Nasr",
    111: "Al-Masad", 112: "Al-Ikhlas", 113: "Al-Falaq", 114: "An-Nas",
}

AYAH_COUNTS = {
    1: 7, 2: 286, 3: 200, 4: 176, 5: 120, 6: 165, 7: 206, 8: 75, 9: 129, 10: 109,
    11: 123, 12: 111, 13: 43, 14: 52, 15: 99, 16: 128, 17: 111, 18: 110, 19: 98, 20: 135,
    21: 112, 22: 78, 23: 118, 24: 64, 25: 77, 26: 227, 27: 93, 28: 88, 29: 69, 30: 60,
    31: 34, 32: 30, 33: 73, 34: 54, 35: 45, 36: 83, 37: 182, 38: 88, 39: 75, 40: 85,
    41: 54, 42: 53, 43: 89, 44: 59, 45: 37, 46: 35, 47: 38, 48: 29, 49: 18, 50: 45,
    51: 60, 52: 49, 53: 62, 54: 55, 55: 78, 56: 96, 57: 29, 58: 22, 59: 24, 60: 13,
    61: 14, 62: 11, 63: 11, 64: 18, 65: 12, 66: 12, 67: 30, 68: 52, 69: 52, 70: 44,
    71: 28, 72: 28, 73: 20, 74: 56, 75: 40, 76: 31, 77: 50, 78: 40, 79: 46, 80: 42,
    81: 29, 82: 19, 83: 36, 84: 25, 85: 22, 86: 17, 87: 19, 88: 26, 89: 30, 90: 20,
    91: 15, 92: 21, 93: 11, 94: 8, 95: 8, 96: 19, 97: 5, 98: 8, 99: 8, 100: 11,
    101: 11, 102: 8, 103: 3, 104: 9, 105: 5, 106: 4, 107: 7, 108: 3, 109: 6, 110: 3,
    111: 5, 112: 4, 113: 5, 114: 6,
}


# --- Static lookups ---

def surah_name(surah: int) -> str:
    return SURAH_NAMES.get(surah, f"Surah {surah}")


def ayah_count(surah: int) -> int:
    return AYAH_COUNTS.get(surah, 0)


def surah_info(surah: int) -> SurahInfo:
    return SurahInfo(number=surah, name=surah_name(surah), ayah_count=ayah_count(surah))


def all_surahs() -> List[SurahInfo]:
    """All 114 surahs in order, e.g. for a selection list."""
    return [surah_info(n) for n in range(1, TOTAL_SURAHS + 1)]


# --- Verse keys ---

def verse_key(surah: int, ayah: int) -> str:
    return f"{surah}:{ayah}"


def parse_verse_key(key: str) -> Tuple[int, int]:
    surah, ayah = key.split(":")
    return int(surah), int(ayah)


def key_order(key: str) -> Tuple[int, int]:
    """Sort key for verse keys; same as parse_verse_key, named for intent."""
    return parse_verse_key(key)


def is_after(key: str, other: str) -> bool:
    """True when `key` comes strictly after `other`."""
    return key_order(key) > key_order(other)


def get_next(key: str) -> Optional[str]:
    """Next verse key, crossing into the next surah. None at the end of the Quran."""
    surah, ayah = parse_verse_key(key)
    if ayah >= ayah_count(surah):
        if surah >= TOTAL_SURAHS:
            return None
        return verse_key(surah + 1, 1)
    return verse_key(surah, ayah + 1)


def get_prev(key: str) -> Optional[str]:
    """Previous verse key, crossing into the previous surah. None at 1:1."""
    surah, ayah = parse_verse_key(key)
    if ayah <= 1:
        if surah <= 1:
            return None
        return verse_key(surah - 1, ayah_count(surah - 1))
    return verse_key(surah, ayah - 1)


def keys_in_range(start: str, end: str) -> List[str]:
    """
    All verse keys from `start` to `end`, inclusive.

    Stops as soon as the walk passes `end`, so a range whose end cannot be
    reached exactly still terminates. An empty list is never returned:
    `start` itself is always included.
    """
    keys = []
    current = start
    while current:
        keys.append(current)
        if current == end:
            break
        current = get_next(current)
        if current and is_after(current, end):
            break
    return keys


def consecutive(key: str, count: int, max_key: Optional[str] = None) -> List[str]:
    """
    Up to `count` consecutive keys starting at `key`.

    Crosses surah boundaries freely; stops early at the end of the Quran or
    before the first key that would come after `max_key`.
    """
    if count < 1:
        return []
    result = [key]
    current = key
    for _ in range(1, count):
        nxt = get_next(current)
        if not nxt:
            break
        if max_key and is_after(nxt, max_key):
            break
        result.append(nxt)
        current = nxt
    return result


# --- Word masking ---

def split_words(text: str) -> List[str]:
    return text.split()


def mask_text(text: str, portion: str, fraction: float = 0.25) -> str:
    """
    Hide the first (portion='beginning') or last (portion='ending') words of a verse.

    ceil(fraction * word_count) words are replaced by the '...' placeholder.
    """
    if portion not in ("beginning", "ending"):
        raise ValueError(f"Unknown mask portion: {portion!r}")
    words = split_words(text)
    mask_count = math.ceil(len(words) * fraction)
    masked = [MASK] * mask_count
    if portion == "beginning":
        return " ".join(masked + words[mask_count:])
    return " ".join(words[:len(words) - mask_count] + masked)
