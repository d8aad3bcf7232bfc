"""
Tests for dataset parsing, verse joins, scopes and audio lookups.
"""
import asyncio
import random

import pytest

from hifzquiz.models import AyahRange, FullScope, JuzScope, SurahScope
from hifzquiz.quran_api_client import (
    ARABIC_DATASET,
    JUZ_DATASET,
    SEGMENTS_DATASET,
    SURAH_AUDIO_DATASET,
    TRANSLATION_DATASET,
    DataLoadFailure,
)
from hifzquiz.quran_cache import QuranCache
from hifzquiz.quran_data_handler import NotFound, QuranDataHandler, parse_juz_csv, parse_mapping
from hifzquiz.quran_index import parse_verse_key

from conftest import FakeClient, arabic_text, juz_csv, synthetic_datasets, translation_text


def make_handler(**overrides):
    return QuranDataHandler(QuranCache(FakeClient(synthetic_datasets(**overrides))), rng=random.Random(5))


class TestParsers:

    def test_juz_csv_skips_header_and_blank_lines(self):
        ranges = parse_juz_csv("juz,ss,sa,es,ea\n1,1,1,2,141\n\n2,2,142,2,252\n")
        assert [(r.juz, r.start, r.end) for r in ranges] == [(1, "1:1", "2:141"), (2, "2:142", "2:252")]

    def test_standard_juz_table(self):
        ranges = parse_juz_csv(juz_csv())
        assert len(ranges) == 30
        assert ranges[0].end == "2:141"
        assert ranges[-1].start == "78:1" and ranges[-1].end == "114:6"

    def test_short_row_rejected(self):
        with pytest.raises(ValueError):
            parse_juz_csv("header\n1,1,1\n")

    def test_mapping_must_be_object(self):
        with pytest.raises(ValueError):
            parse_mapping("[1, 2]")


class TestVerses:

    def test_verse_joins_arabic_and_translation(self, handler):
        verse = asyncio.run(handler.get_verse("2:255"))
        assert verse.ar == arabic_text("2:255")
        assert verse.en == translation_text("2:255")
        assert (verse.surah, verse.ayah) == (2, 255)

    def test_missing_translation_gives_empty_string(self):
        data_handler = make_handler(**{TRANSLATION_DATASET: {}})
        verse = asyncio.run(data_handler.get_verse("1:1"))
        assert verse.ar == arabic_text("1:1")
        assert verse.en == ""

    def test_missing_arabic_gives_none(self):
        data_handler = make_handler(**{ARABIC_DATASET: {}})
        assert asyncio.run(data_handler.get_verse("1:1")) is None

    def test_get_verses_keeps_order(self, handler):
        verses = asyncio.run(handler.get_verses(["3:1", "1:1", "2:1"]))
        assert [(v.surah, v.ayah) for v in verses] == [(3, 1), (1, 1), (2, 1)]

    def test_load_failure_propagates(self):
        client = FakeClient(fail={ARABIC_DATASET})
        data_handler = QuranDataHandler(QuranCache(client))
        with pytest.raises(DataLoadFailure):
            asyncio.run(data_handler.get_verse("1:1"))


class TestScopes:

    def test_full_scope(self, handler):
        assert asyncio.run(handler.scope_bounds(FullScope())) == ("1:1", "114:6", None)

    def test_juz_scope(self, handler):
        assert asyncio.run(handler.scope_bounds(JuzScope(juz=2))) == ("2:142", "2:252", None)

    def test_missing_juz(self):
        data_handler = make_handler(**{JUZ_DATASET: "juz,ss,sa,es,ea\n1,1,1,2,141\n"})
        with pytest.raises(NotFound):
            asyncio.run(data_handler.juz_range(5))

    def test_surah_scope(self, handler):
        assert asyncio.run(handler.scope_bounds(SurahScope(surah=1))) == ("1:1", "1:7", None)

    def test_ayah_range_sets_ceiling(self, handler):
        bounds = asyncio.run(handler.scope_bounds(SurahScope(surah=2), AyahRange(start=10, end=20)))
        assert bounds == ("2:10", "2:20", "2:20")

    def test_ayah_range_as_tuple(self, handler):
        bounds = asyncio.run(handler.scope_bounds(SurahScope(surah=2), (5, 6)))
        assert bounds == ("2:5", "2:6", "2:6")

    def test_ayah_range_beyond_surah(self, handler):
        with pytest.raises(ValueError):
            asyncio.run(handler.scope_bounds(SurahScope(surah=1), (1, 8)))

    def test_inverted_ayah_range(self):
        with pytest.raises(ValueError):
            AyahRange(start=5, end=2)

    def test_random_verse_stays_in_surah(self, handler):
        async def sample():
            return [await handler.random_verse(SurahScope(surah=36)) for _ in range(200)]

        assert all(parse_verse_key(k)[0] == 36 for k in asyncio.run(sample()))

    def test_random_verse_stays_in_juz(self, handler):
        async def sample():
            return [await handler.random_verse(JuzScope(juz=30)) for _ in range(200)]

        assert all(parse_verse_key(k)[0] >= 78 for k in asyncio.run(sample()))

    def test_random_verse_stays_in_ayah_range(self, handler):
        async def sample():
            return {await handler.random_verse(SurahScope(surah=2), (3, 5)) for _ in range(100)}

        assert asyncio.run(sample()) <= {"2:3", "2:4", "2:5"}

    def test_random_verse_uses_given_rng(self, handler):
        a = asyncio.run(handler.random_verse(FullScope(), rng=random.Random(9)))
        b = asyncio.run(handler.random_verse(FullScope(), rng=random.Random(9)))
        assert a == b


class TestAudio:

    def test_segment_joins_surah_url(self, handler):
        segment = asyncio.run(handler.audio_segment("2:3"))
        assert segment.audio_url == "https://audio.test/002.mp3"
        assert (segment.start, segment.end) == (3000, 3900)

    def test_missing_timing(self):
        data_handler = make_handler(**{SEGMENTS_DATASET: {}})
        assert asyncio.run(data_handler.audio_segment("2:3")) is None

    def test_missing_surah_audio(self):
        data_handler = make_handler(**{SURAH_AUDIO_DATASET: {"1": {"audio_url": "x"}}})
        assert asyncio.run(data_handler.audio_segment("2:3")) is None
