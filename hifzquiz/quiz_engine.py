# hifzquiz/quiz_engine.py
"""
Question generation for all quiz modes.

Every mode starts from one verse key sampled uniformly from the chosen scope.
When the sample cannot carry the mode's question (too close to the end of the
ayah range, at a Quran boundary, no recitation timing, ...) the builder raises
InfeasibleSample and generate() draws a fresh sample instead of nudging the
old one. The number of samples per question is capped by
QuizSettings.max_attempts.
"""
import asyncio
import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

from .models import (
    AyahRange,
    QuestionMetadata,
    QuizMode,
    QuizQuestion,
    Scope,
    SurahScope,
    VerseData,
)
from .quran_data_handler import QuranDataHandler
from .quran_index import (
    MASK,
    TOTAL_SURAHS,
    ayah_count,
    consecutive,
    get_next,
    get_prev,
    is_after,
    keys_in_range,
    mask_text,
    parse_verse_key,
    split_words,
    surah_name,
    verse_key,
)
from .settings import QuizSettings
from .utils import ordinal

PARTIAL_MASK = "…"
HELP_IMAM_PROMPT = "Listen to the ayat. What 2 ayat come next?"


class InfeasibleSample(Exception):
    """The sampled verse cannot carry a question of this mode"""


class ModeFallback(Exception):
    """The requested mode does not apply to the scope; generate `mode` instead"""

    def __init__(self, mode: QuizMode):
        super().__init__(f"falling back to {mode.value}")
        self.mode = mode


class QuizGenerationError(Exception):
    """No question could be generated within the attempt budget"""


@dataclass
class Sample:
    key: str
    verse: VerseData
    scope: Scope
    ayah_range: Optional[AyahRange]
    ceiling: Optional[str]    # last key consecutive lookups may reach


_BUILDERS: Dict[QuizMode, Callable] = {}


def builds(*modes: QuizMode):
    def register(func):
        for mode in modes:
            _BUILDERS[mode] = func
        return func
    return register


class QuizGenerator:
    def __init__(
        self,
        data_handler: QuranDataHandler,
        settings: Optional[QuizSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.data_handler = data_handler
        self.settings = settings or QuizSettings()
        self.rng = rng or data_handler.rng

    async def generate(
        self,
        mode: Union[QuizMode, str],
        scope: Scope,
        ayah_range: Union[AyahRange, Tuple[int, int], None] = None,
    ) -> QuizQuestion:
        """
        Build one question.

        Raises:
            DataLoadFailure: a dataset could not be loaded.
            NotFound: the scope's juz is missing from the juz table.
            ValueError: the ayah range does not fit the surah.
            QuizGenerationError: every sample in the attempt budget was infeasible.
        """
        mode = QuizMode(mode)
        if not isinstance(scope, SurahScope):
            ayah_range = None
        elif ayah_range is not None and not isinstance(ayah_range, AyahRange):
            ayah_range = AyahRange(start=ayah_range[0], end=ayah_range[1])

        _, _, ceiling = await self.data_handler.scope_bounds(scope, ayah_range)

        for _ in range(self.settings.max_attempts):
            key = await self.data_handler.random_verse(scope, ayah_range, rng=self.rng)
            verse = await self.data_handler.get_verse(key)
            if verse is None:
                continue
            sample = Sample(key=key, verse=verse, scope=scope, ayah_range=ayah_range, ceiling=ceiling)
            try:
                return await _BUILDERS[mode](self, sample, mode)
            except InfeasibleSample:
                continue
            except ModeFallback as fallback:
                mode = fallback.mode

        raise QuizGenerationError(
            f"Could not generate a {mode.value} question after {self.settings.max_attempts} attempts"
        )

    # --- Helpers ---

    def _run_of(self, sample: Sample, count: int) -> List[str]:
        keys = consecutive(sample.key, count, sample.ceiling)
        if len(keys) < count:
            raise InfeasibleSample(f"only {len(keys)} of {count} ayat available from {sample.key}")
        return keys

    async def _verses(self, keys: List[str]) -> List[VerseData]:
        verses = await self.data_handler.get_verses(keys)
        if any(v is None for v in verses):
            raise InfeasibleSample(f"missing verse text among {keys}")
        return verses

    # --- Builders, one per mode ---

    @builds(QuizMode.BEGINNING, QuizMode.ENDING)
    async def _masked(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        portion = "beginning" if mode is QuizMode.BEGINNING else "ending"
        return QuizQuestion(
            mode=mode,
            verse_key=sample.key,
            display_text=mask_text(sample.verse.ar, portion, self.settings.mask_fraction),
            answer=sample.verse.ar,
            metadata=QuestionMetadata(translation=sample.verse.en, verse_range=sample.key),
        )

    @builds(QuizMode.MISSING)
    async def _missing(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        keys = self._run_of(sample, 4)
        verses = await self._verses(keys)
        blank = self.rng.randrange(len(keys))
        lines = [MASK if i == blank else v.ar for i, v in enumerate(verses)]
        return QuizQuestion(
            mode=mode,
            verse_key=keys[blank],
            display_text="\n\n".join(lines),
            answer=verses[blank].ar,
            options=keys,
            metadata=QuestionMetadata(
                translation=verses[blank].en,
                verse_range=f"{keys[0]} - {keys[-1]}",
            ),
        )

    @builds(QuizMode.REORDER)
    async def _reorder(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        keys = self._run_of(sample, 5)
        verses = await self._verses(keys)
        correct = [v.ar for v in verses]
        shuffled = list(correct)
        self.rng.shuffle(shuffled)
        name = surah_name(parse_verse_key(keys[0])[0])
        return QuizQuestion(
            mode=mode,
            verse_key=sample.key,
            display_text="\n\n".join(shuffled),
            answer="\n\n".join(correct),
            options=keys,
            display_items=shuffled,
            answer_items=correct,
            metadata=QuestionMetadata(surah_name=name, verse_range=f"{name}, {keys[0]} – {keys[-1]}"),
        )

    @builds(QuizMode.NEXT, QuizMode.PREVIOUS)
    async def _adjacent(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        adjacent = get_next(sample.key) if mode is QuizMode.NEXT else get_prev(sample.key)
        if not adjacent:
            raise InfeasibleSample(f"no {mode.value} ayah for {sample.key}")
        (adjacent_verse,) = await self._verses([adjacent])
        return QuizQuestion(
            mode=mode,
            verse_key=sample.key,
            display_text=sample.verse.ar,
            answer=adjacent_verse.ar,
            metadata=QuestionMetadata(
                translation=sample.verse.en,
                verse_range=f"Question: {sample.key}, Answer: {adjacent}",
            ),
        )

    @builds(QuizMode.PARTIAL)
    async def _partial(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        words = split_words(sample.verse.ar)
        hidden = set(self.rng.sample(range(len(words)), math.ceil(len(words) * self.settings.partial_fraction)))
        display = " ".join(PARTIAL_MASK if i in hidden else word for i, word in enumerate(words))
        return QuizQuestion(
            mode=mode,
            verse_key=sample.key,
            display_text=display,
            answer=sample.verse.ar,
            metadata=QuestionMetadata(translation=sample.verse.en, verse_range=sample.key),
        )

    @builds(QuizMode.NEXT_THREE)
    async def _next_three(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        keys = self._run_of(sample, 4)
        verses = await self._verses(keys)
        name = surah_name(parse_verse_key(sample.key)[0])
        return QuizQuestion(
            mode=mode,
            verse_key=sample.key,
            display_text=sample.verse.ar,
            answer="\n\n".join(v.ar for v in verses[1:]),
            metadata=QuestionMetadata(
                translation=sample.verse.en,
                surah_name=name,
                verse_range=f"{name}, {keys[1]} – {keys[3]}",
            ),
        )

    @builds(QuizMode.TRANSLATION)
    async def _translation(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        if not sample.verse.en:
            raise InfeasibleSample(f"no translation for {sample.key}")
        return QuizQuestion(
            mode=mode,
            verse_key=sample.key,
            display_text=sample.verse.ar,
            answer=sample.verse.en,
            metadata=QuestionMetadata(verse_range=sample.key),
        )

    @builds(QuizMode.GUESS_SURAH)
    async def _guess_surah(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        keys = self._run_of(sample, 3)
        verses = await self._verses(keys)
        name = surah_name(parse_verse_key(sample.key)[0])
        return QuizQuestion(
            mode=mode,
            verse_key=sample.key,
            display_text="\n\n".join(v.ar for v in verses),
            answer=name,
            options=keys,
            metadata=QuestionMetadata(surah_name=name, verse_range=f"{name}, {keys[0]} – {keys[-1]}"),
        )

    @builds(QuizMode.HELP_IMAM)
    async def _help_imam(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        # Up to 3 recited ayat, possibly running into the next surah
        candidates = consecutive(sample.key, 3, sample.ceiling)
        segments = await asyncio.gather(*(self.data_handler.audio_segment(k) for k in candidates))
        audio_keys = [k for k, seg in zip(candidates, segments) if seg]
        audio = [seg for seg in segments if seg]
        if not audio:
            raise InfeasibleSample(f"no recitation timing around {sample.key}")

        last_surah, last_ayah = parse_verse_key(audio_keys[-1])
        if last_ayah == ayah_count(last_surah) and last_surah < TOTAL_SURAHS:
            # Recitation ended a surah: the answer opens the next one
            answer_keys = [verse_key(last_surah + 1, 1), verse_key(last_surah + 1, 2)]
        else:
            answer_keys = consecutive(audio_keys[-1], 3, sample.ceiling)[1:3]
            if len(answer_keys) < 2:
                raise InfeasibleSample(f"fewer than 2 ayat follow {audio_keys[-1]}")
        answer_verses = await self._verses(answer_keys)

        first_surah = parse_verse_key(audio_keys[0])[0]
        answer_surah = parse_verse_key(answer_keys[1])[0]
        if first_surah == answer_surah:
            name = surah_name(first_surah)
        else:
            name = f"{surah_name(first_surah)} – {surah_name(answer_surah)}"
        if len(audio_keys) == 1:
            audio_range = audio_keys[0]
        else:
            audio_range = f"{audio_keys[0]} – {audio_keys[-1]}"

        return QuizQuestion(
            mode=mode,
            verse_key=sample.key,
            display_text=HELP_IMAM_PROMPT,
            answer="\n\n".join(v.ar for v in answer_verses),
            options=answer_keys,
            metadata=QuestionMetadata(
                surah_name=name,
                verse_range=f"{answer_keys[0]} – {answer_keys[1]}",
                audio_range=audio_range,
                translation="\n\n".join(v.en for v in answer_verses),
            ),
            audio=audio,
        )

    @builds(QuizMode.CHAINING_SURAH)
    async def _chaining_surah(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        surah = parse_verse_key(sample.key)[0]
        if surah >= TOTAL_SURAHS:
            raise InfeasibleSample("the last surah has no next surah")
        last_key = verse_key(surah, ayah_count(surah))
        first_next_key = verse_key(surah + 1, 1)
        last_verse, first_next_verse = await self._verses([last_key, first_next_key])
        return QuizQuestion(
            mode=mode,
            verse_key=last_key,
            display_text=last_verse.ar,
            answer=first_next_verse.ar,
            metadata=QuestionMetadata(
                translation=last_verse.en,
                verse_range=(
                    f"Question: {surah_name(surah)} {last_key}, "
                    f"Answer: {surah_name(surah + 1)} {first_next_key}"
                ),
            ),
        )

    @builds(QuizMode.CHAINING_SURAH_REVERSE)
    async def _chaining_surah_reverse(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        surah = parse_verse_key(sample.key)[0]
        if surah <= 1:
            raise InfeasibleSample("the first surah has no previous surah")
        first_key = verse_key(surah, 1)
        last_prev_key = verse_key(surah - 1, ayah_count(surah - 1))
        first_verse, last_prev_verse = await self._verses([first_key, last_prev_key])
        return QuizQuestion(
            mode=mode,
            verse_key=first_key,
            display_text=first_verse.ar,
            answer=last_prev_verse.ar,
            metadata=QuestionMetadata(
                translation=first_verse.en,
                verse_range=(
                    f"Question: {surah_name(surah)} {first_key}, "
                    f"Answer: {surah_name(surah - 1)} {last_prev_key}"
                ),
            ),
        )

    @builds(QuizMode.AYAH_NUMBER)
    async def _ayah_number(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        surah, ayah = parse_verse_key(sample.key)
        return QuizQuestion(
            mode=mode,
            verse_key=sample.key,
            display_text=sample.verse.ar,
            answer=str(ayah),
            metadata=QuestionMetadata(
                verse_range=f"{surah_name(surah)}, {sample.key}",
                translation=sample.verse.en,
            ),
        )

    @builds(QuizMode.WHAT_DOESNT_BELONG)
    async def _what_doesnt_belong(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        surah = parse_verse_key(sample.key)[0]

        # Two more ayat from the same surah
        own_keys = keys_in_range(verse_key(surah, 1), verse_key(surah, ayah_count(surah)))
        if sample.ceiling:
            own_keys = [k for k in own_keys if not is_after(k, sample.ceiling)]
        others = [k for k in own_keys if k != sample.key]
        if len(others) < 2:
            raise InfeasibleSample(f"surah {surah} has too few ayat in range")
        companions = self.rng.sample(others, 2)

        # One ayah from a different surah within the scope
        foreign_key = None
        for _ in range(self.settings.foreign_verse_attempts):
            candidate = await self.data_handler.random_verse(sample.scope, rng=self.rng)
            if parse_verse_key(candidate)[0] != surah:
                foreign_key = candidate
                break
        if foreign_key is None:
            raise InfeasibleSample(f"no ayah outside surah {surah} found in scope")

        correct_keys = [sample.key] + companions
        all_keys = correct_keys + [foreign_key]
        verses = await self._verses(all_keys)
        foreign_verse = verses[-1]

        order = list(range(len(all_keys)))
        self.rng.shuffle(order)
        display_keys = [all_keys[i] for i in order]
        display_texts = [verses[i].ar for i in order]
        mistaken_index = display_keys.index(foreign_key)

        correct_info = " | ".join(f"{surah_name(parse_verse_key(k)[0])}, {k}" for k in correct_keys)
        foreign_name = surah_name(parse_verse_key(foreign_key)[0])

        return QuizQuestion(
            mode=mode,
            verse_key=sample.key,
            display_text="\n\n".join(f"{i + 1}. {text}" for i, text in enumerate(display_texts)),
            answer=f"Ayah {mistaken_index + 1} doesn't belong\n\n{foreign_verse.ar}",
            options=display_keys,
            display_items=display_texts,
            distractors=[foreign_key],
            metadata=QuestionMetadata(
                verse_range=f"Mistaken ayah: {foreign_name}, {foreign_key}",
                translation=foreign_verse.en,
                correct_ayahs_info=correct_info,
            ),
        )

    @builds(QuizMode.WHAT_IS_X)
    async def _what_is_x(self, sample: Sample, mode: QuizMode) -> QuizQuestion:
        if not isinstance(sample.scope, SurahScope):
            raise ModeFallback(QuizMode.BEGINNING)
        surah, ayah = parse_verse_key(sample.key)
        name = surah_name(surah)
        return QuizQuestion(
            mode=mode,
            verse_key=sample.key,
            display_text=f"What is the {ordinal(ayah)} ayah of {name}",
            answer=sample.verse.ar,
            metadata=QuestionMetadata(verse_range=f"{name}, {sample.key}", translation=sample.verse.en),
        )


_unbuilt = set(QuizMode) - set(_BUILDERS)
if _unbuilt:
    raise ImportError(f"Quiz modes without a builder: {sorted(m.value for m in _unbuilt)}")
