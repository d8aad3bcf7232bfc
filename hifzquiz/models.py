# hifzquiz/models.py
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class QuizMode(str, Enum):
    BEGINNING = "beginning"
    ENDING = "ending"
    MISSING = "missing"
    REORDER = "reorder"
    NEXT = "next"
    PREVIOUS = "previous"
    PARTIAL = "partial"
    NEXT_THREE = "next-three"
    TRANSLATION = "translation"
    GUESS_SURAH = "guess-surah"
    HELP_IMAM = "help-imam"
    CHAINING_SURAH = "chaining-surah"
    CHAINING_SURAH_REVERSE = "chaining-surah-reverse"
    AYAH_NUMBER = "ayah-number"
    WHAT_DOESNT_BELONG = "what-doesnt-belong"
    WHAT_IS_X = "what-is-x"

    @property
    def label(self) -> str:
        return MODE_LABELS[self]

    @property
    def instruction(self) -> str:
        return MODE_INSTRUCTIONS[self]


MODE_LABELS = {
    QuizMode.BEGINNING: "Beginning Completion",
    QuizMode.ENDING: "Ending Completion",
    QuizMode.MISSING: "Missing Verse",
    QuizMode.REORDER: "Order Rearrange",
    QuizMode.NEXT: "Next Ayah",
    QuizMode.PREVIOUS: "Previous Ayah",
    QuizMode.PARTIAL: "Partial Reveal",
    QuizMode.NEXT_THREE: "Next 3 Ayat",
    QuizMode.TRANSLATION: "Translation",
    QuizMode.GUESS_SURAH: "Guess Surah",
    QuizMode.HELP_IMAM: "Help the Imam",
    QuizMode.CHAINING_SURAH: "Chaining Surah",
    QuizMode.CHAINING_SURAH_REVERSE: "Chaining Surah Reverse",
    QuizMode.AYAH_NUMBER: "Ayah Number Guess",
    QuizMode.WHAT_DOESNT_BELONG: "What Doesn't Belong",
    QuizMode.WHAT_IS_X: "What is X Ayah?",
}

MODE_INSTRUCTIONS = {
    QuizMode.BEGINNING: "Complete the beginning of this verse from memory",
    QuizMode.ENDING: "Complete the ending of this verse from memory",
    QuizMode.MISSING: "Identify which verse is missing from this sequence",
    QuizMode.REORDER: "Arrange these verses in the correct order",
    QuizMode.NEXT: "What is the next ayah after this verse?",
    QuizMode.PREVIOUS: "What is the previous ayah before this verse?",
    QuizMode.PARTIAL: "Complete the concealed parts of this verse from memory",
    QuizMode.NEXT_THREE: "What are the next three ayat after this verse?",
    QuizMode.TRANSLATION: "What is the English translation of this verse?",
    QuizMode.GUESS_SURAH: "Which Surah do these verses come from?",
    QuizMode.HELP_IMAM: (
        "Listen carefully to the recitation and recall what comes next. "
        "If the audio ends at the final ayah(s) of a surah, the answer continues "
        "from the beginning of the next surah."
    ),
    QuizMode.CHAINING_SURAH: "This is the last ayah of a surah. What is the first ayah of the next surah?",
    QuizMode.CHAINING_SURAH_REVERSE: "This is the first ayah of a surah. What is the last ayah of the previous surah?",
    QuizMode.AYAH_NUMBER: "What is the ayah number of this verse within its surah?",
    QuizMode.WHAT_DOESNT_BELONG: "One of these four ayat doesn't belong to this surah. Which one is it?",
    QuizMode.WHAT_IS_X: "Recall the requested ayah from the surah",
}


class SurahInfo(BaseModel):
    number: int
    name: str               # e.g., "Al-Fatihah"
    ayah_count: int


class JuzRange(BaseModel):
    juz: int
    start: str              # verse key, e.g. "2:142"
    end: str


class VerseData(BaseModel):
    ar: str                 # Arabic text
    en: str                 # English translation ("" when missing)
    surah: int
    ayah: int


class AudioSegment(BaseModel):
    start: int              # milliseconds into the surah recording
    end: int
    audio_url: str


# --- Scopes: the sampling universe for a question ---

class FullScope(BaseModel):
    type: Literal["full"] = "full"


class JuzScope(BaseModel):
    type: Literal["juz"] = "juz"
    juz: int = Field(ge=1, le=30)


class SurahScope(BaseModel):
    type: Literal["surah"] = "surah"
    surah: int = Field(ge=1, le=114)


Scope = Union[FullScope, JuzScope, SurahScope]


class AyahRange(BaseModel):
    """Inclusive ayah sub-range inside a single surah."""
    start: int = Field(ge=1)
    end: int = Field(ge=1)

    @model_validator(mode="after")
    def _check_order(self):
        if self.start > self.end:
            raise ValueError(f"Ayah range start {self.start} is after end {self.end}")
        return self


# --- Question record ---

class QuestionMetadata(BaseModel):
    surah_name: Optional[str] = None
    verse_range: Optional[str] = None
    translation: Optional[str] = None
    audio_range: Optional[str] = None
    correct_ayahs_info: Optional[str] = None


class QuizQuestion(BaseModel):
    mode: QuizMode
    verse_key: str                              # source reference
    display_text: str                           # what the user sees (masked/shuffled)
    answer: str                                 # correct answer
    options: Optional[List[str]] = None         # verse keys involved, in display order
    display_items: Optional[List[str]] = None   # shuffled texts (reorder, what-doesnt-belong)
    answer_items: Optional[List[str]] = None    # correct order (reorder)
    distractors: Optional[List[str]] = None     # foreign verse keys (what-doesnt-belong)
    metadata: QuestionMetadata = Field(default_factory=QuestionMetadata)
    audio: Optional[List[AudioSegment]] = None  # help-imam
