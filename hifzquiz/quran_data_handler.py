# hifzquiz/quran_data_handler.py
import asyncio
import csv
import io
import json
import random
from typing import Dict, List, Optional, Tuple, Union

from .models import AudioSegment, AyahRange, FullScope, JuzRange, JuzScope, Scope, SurahScope, VerseData
from .quran_api_client import (
    ARABIC_DATASET,
    JUZ_DATASET,
    SEGMENTS_DATASET,
    SURAH_AUDIO_DATASET,
    TRANSLATION_DATASET,
)
from .quran_cache import QuranCache
from .quran_index import FIRST_KEY, LAST_KEY, ayah_count, keys_in_range, parse_verse_key, verse_key


class NotFound(LookupError):
    """A requested juz or verse has no data"""


def parse_mapping(raw: str) -> Dict[str, dict]:
    """Parse a JSON object keyed by verse key or surah number."""
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def parse_juz_csv(raw: str) -> List[JuzRange]:
    """
    Parse the juz breakdown table.

    The first row is a header; every other non-empty row is
    juz,start_surah,start_ayah,end_surah,end_ayah.
    """
    rows = list(csv.reader(io.StringIO(raw.strip())))[1:]
    ranges = []
    for line_no, row in enumerate(rows, start=2):
        if not row or not any(cell.strip() for cell in row):
            continue
        if len(row) < 5:
            raise ValueError(f"line {line_no}: expected 5 columns, got {len(row)}")
        juz, start_surah, start_ayah, end_surah, end_ayah = (int(cell) for cell in row[:5])
        ranges.append(JuzRange(
            juz=juz,
            start=verse_key(start_surah, start_ayah),
            end=verse_key(end_surah, end_ayah),
        ))
    return ranges


class QuranDataHandler:
    """
    Verse text, translations, juz boundaries and recitation timings.

    All datasets are loaded lazily through the shared QuranCache, so the
    first call that needs one waits for it and later calls are served from memory.
    """

    def __init__(self, cache: QuranCache, rng: Optional[random.Random] = None):
        self.cache = cache
        self.rng = rng or random.Random()

    # --- Dataset loaders ---

    async def load_arabic_data(self) -> Dict[str, dict]:
        return await self.cache.load(ARABIC_DATASET, parse_mapping)

    async def load_translation_data(self) -> Dict[str, dict]:
        return await self.cache.load(TRANSLATION_DATASET, parse_mapping)

    async def load_juz_ranges(self) -> List[JuzRange]:
        return await self.cache.load(JUZ_DATASET, parse_juz_csv)

    async def load_surah_audio(self) -> Dict[str, dict]:
        return await self.cache.load(SURAH_AUDIO_DATASET, parse_mapping)

    async def load_segments(self) -> Dict[str, dict]:
        return await self.cache.load(SEGMENTS_DATASET, parse_mapping)

    # --- Verses ---

    async def get_verse(self, key: str) -> Optional[VerseData]:
        """Arabic text joined with its translation. None if the Arabic text is missing."""
        arabic, translation = await asyncio.gather(self.load_arabic_data(), self.load_translation_data())

        ar_verse = arabic.get(key)
        if not ar_verse:
            return None
        en_verse = translation.get(key) or {}

        surah, ayah = parse_verse_key(key)
        return VerseData(
            ar=ar_verse.get("text", ""),
            en=en_verse.get("t") or "",
            surah=ar_verse.get("surah", surah),
            ayah=ar_verse.get("ayah", ayah),
        )

    async def get_verses(self, keys: List[str]) -> List[Optional[VerseData]]:
        return list(await asyncio.gather(*(self.get_verse(k) for k in keys)))

    # --- Juz and scopes ---

    async def juz_range(self, juz: int) -> Tuple[str, str]:
        ranges = await self.load_juz_ranges()
        for r in ranges:
            if r.juz == juz:
                return r.start, r.end
        raise NotFound(f"Juz {juz} not found")

    async def scope_bounds(
        self,
        scope: Scope,
        ayah_range: Union[AyahRange, Tuple[int, int], None] = None,
    ) -> Tuple[str, str, Optional[str]]:
        """
        Resolve a scope to (start, end, ceiling).

        The ceiling is only set for a surah scope narrowed by an ayah range;
        consecutive-verse lookups must not run past it.
        """
        if isinstance(scope, FullScope):
            return FIRST_KEY, LAST_KEY, None
        if isinstance(scope, JuzScope):
            start, end = await self.juz_range(scope.juz)
            return start, end, None
        if isinstance(scope, SurahScope):
            surah = scope.surah
            total = ayah_count(surah)
            if ayah_range is None:
                return verse_key(surah, 1), verse_key(surah, total), None
            if not isinstance(ayah_range, AyahRange):
                ayah_range = AyahRange(start=ayah_range[0], end=ayah_range[1])
            if ayah_range.end > total:
                raise ValueError(f"Ayah range {ayah_range.start}-{ayah_range.end} exceeds the {total} ayat of surah {surah}")
            end = verse_key(surah, ayah_range.end)
            return verse_key(surah, ayah_range.start), end, end
        raise TypeError(f"Unknown scope: {scope!r}")

    async def random_verse(
        self,
        scope: Scope,
        ayah_range: Union[AyahRange, Tuple[int, int], None] = None,
        rng: Optional[random.Random] = None,
    ) -> str:
        """Uniformly chosen verse key within the scope (and ayah range, if given)."""
        start, end, _ = await self.scope_bounds(scope, ayah_range)
        return (rng or self.rng).choice(keys_in_range(start, end))

    # --- Recitation audio ---

    async def audio_segment(self, key: str) -> Optional[AudioSegment]:
        """Where `key` is recited, or None if the surah has no audio or the ayah no timing."""
        surah_audio, segments = await asyncio.gather(self.load_surah_audio(), self.load_segments())

        surah, _ = parse_verse_key(key)
        audio_url = (surah_audio.get(str(surah)) or {}).get("audio_url")
        segment = segments.get(key) or {}
        start, end = segment.get("timestamp_from"), segment.get("timestamp_to")
        if not audio_url or start is None or end is None:
            return None
        return AudioSegment(start=start, end=end, audio_url=audio_url)
