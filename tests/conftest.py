"""
Shared fixtures: an in-memory dataset client serving a synthetic Quran.

Every verse key in the static table gets Arabic text "ayah <s> <a> alif ba ta tha"
(seven words) and translation "translation of <s>:<a>". Juz boundaries are the
standard 30; every ayah has recitation timings unless a test overrides them.
"""
import asyncio
import functools
import json
import random
from collections import Counter

import pytest

from hifzquiz.quiz_engine import QuizGenerator
from hifzquiz.quran_api_client import (
    ARABIC_DATASET,
    JUZ_DATASET,
    SEGMENTS_DATASET,
    SURAH_AUDIO_DATASET,
    TRANSLATION_DATASET,
    DataLoadFailure,
)
from hifzquiz.quran_cache import QuranCache
from hifzquiz.quran_data_handler import QuranDataHandler
from hifzquiz.quran_index import AYAH_COUNTS, LAST_KEY, get_prev, keys_in_range, parse_verse_key, verse_key
from hifzquiz.settings import QuizSettings

JUZ_STARTS = [
    (1, 1), (2, 142), (2, 253), (3, 93), (4, 24), (4, 148), (5, 82), (6, 111), (7, 88), (8, 41),
    (9, 93), (11, 6), (12, 53), (15, 1), (17, 1), (18, 75), (21, 1), (23, 1), (25, 21), (27, 56),
    (29, 46), (33, 31), (36, 28), (39, 32), (41, 47), (46, 1), (51, 31), (58, 1), (67, 1), (78, 1),
]


def arabic_text(key):
    surah, ayah = parse_verse_key(key)
    return f"ayah {surah} {ayah} alif ba ta tha"


def translation_text(key):
    return f"translation of {key}"


def juz_csv(starts=JUZ_STARTS):
    rows = ["juz,start_surah,start_ayah,end_surah,end_ayah"]
    for i, (surah, ayah) in enumerate(starts):
        if i + 1 < len(starts):
            end = get_prev(verse_key(*starts[i + 1]))
        else:
            end = LAST_KEY
        end_surah, end_ayah = parse_verse_key(end)
        rows.append(f"{i + 1},{surah},{ayah},{end_surah},{end_ayah}")
    return "\n".join(rows) + "\n"


def segments_for(keys):
    return {
        k: {"timestamp_from": parse_verse_key(k)[1] * 1000, "timestamp_to": parse_verse_key(k)[1] * 1000 + 900}
        for k in keys
    }


@functools.lru_cache(maxsize=1)
def _synthetic_datasets():
    all_keys = keys_in_range("1:1", LAST_KEY)
    arabic = {}
    for i, key in enumerate(all_keys, start=1):
        surah, ayah = parse_verse_key(key)
        arabic[key] = {"id": i, "verse_key": key, "surah": surah, "ayah": ayah, "text": arabic_text(key)}
    return {
        ARABIC_DATASET: json.dumps(arabic),
        TRANSLATION_DATASET: json.dumps({k: {"t": translation_text(k)} for k in all_keys}),
        JUZ_DATASET: juz_csv(),
        SURAH_AUDIO_DATASET: json.dumps({str(s): {"audio_url": f"https://audio.test/{s:03}.mp3"} for s in AYAH_COUNTS}),
        SEGMENTS_DATASET: json.dumps(segments_for(all_keys)),
    }


def synthetic_datasets(**overrides):
    """Dataset name -> raw text. Overrides are python objects, dumped to JSON unless already text."""
    datasets = dict(_synthetic_datasets())
    for name, value in overrides.items():
        datasets[name] = value if isinstance(value, str) else json.dumps(value)
    return datasets


class FakeClient:
    """Serves raw dataset text from memory and counts fetches."""

    def __init__(self, datasets=None, fail=()):
        self.datasets = datasets if datasets is not None else synthetic_datasets()
        self.fail = set(fail)
        self.calls = Counter()

    async def fetch(self, name):
        self.calls[name] += 1
        await asyncio.sleep(0)
        if name in self.fail or name not in self.datasets:
            raise DataLoadFailure(f"{name} unavailable")
        return self.datasets[name]


class ScriptedHandler(QuranDataHandler):
    """Returns scripted verse keys from random_verse before falling back to real sampling."""

    def __init__(self, cache, script=(), rng=None):
        super().__init__(cache, rng)
        self.script = list(script)

    async def random_verse(self, scope, ayah_range=None, rng=None):
        if self.script:
            return self.script.pop(0)
        return await super().random_verse(scope, ayah_range, rng)


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def handler(fake_client):
    return QuranDataHandler(QuranCache(fake_client), rng=random.Random(1))


@pytest.fixture
def make_generator():
    def _make(script=(), datasets=None, seed=7, **settings):
        client = FakeClient(datasets)
        data_handler = ScriptedHandler(QuranCache(client), script, rng=random.Random(seed))
        quiz_settings = QuizSettings(data_dir=None, cache_dir=None, **settings)
        return QuizGenerator(data_handler, quiz_settings, rng=random.Random(seed))
    return _make
