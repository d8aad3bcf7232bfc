# hifzquiz/quiz_session.py
import sys
from typing import List, Optional, Tuple, Union

from colorama import Fore, Style

from .models import AyahRange, QuizMode, QuizQuestion, Scope, SurahScope
from .quiz_engine import QuizGenerator

# Modes whose question is built from whole-surah structure, so an ayah range does not narrow them
_RANGELESS_MODES = {
    QuizMode.HELP_IMAM,
    QuizMode.CHAINING_SURAH,
    QuizMode.CHAINING_SURAH_REVERSE,
    QuizMode.WHAT_DOESNT_BELONG,
    QuizMode.WHAT_IS_X,
}


def mode_available(mode: Union[QuizMode, str], scope: Scope) -> bool:
    mode = QuizMode(mode)
    if mode is QuizMode.GUESS_SURAH:
        return not isinstance(scope, SurahScope)
    if mode is QuizMode.WHAT_IS_X:
        return isinstance(scope, SurahScope)
    return True


def supports_ayah_range(mode: Union[QuizMode, str]) -> bool:
    return QuizMode(mode) not in _RANGELESS_MODES


def check_order(user_order: List[str], correct_order: List[str]) -> List[bool]:
    """Per-position correctness of a reorder answer."""
    return [
        i < len(user_order) and user_order[i] == expected
        for i, expected in enumerate(correct_order)
    ]


class SessionScore:
    """Running tally of self-marked answers."""

    def __init__(self):
        self.correct = 0
        self.wrong = 0

    @property
    def total(self) -> int:
        return self.correct + self.wrong

    @property
    def accuracy(self) -> int:
        """Percentage of correct answers, rounded; 0 before any answer."""
        if not self.total:
            return 0
        return round(self.correct / self.total * 100)

    def mark_correct(self):
        self.correct += 1

    def mark_wrong(self):
        self.wrong += 1

    def reset(self):
        self.correct = 0
        self.wrong = 0


class QuizSession:
    """
    The one active quiz: current question plus revealed/loading flags.

    `loading` stays true while any generation is outstanding. When generations
    overlap only the most recently started one may replace the question.
    """

    def __init__(self, generator: QuizGenerator):
        self.generator = generator
        self.question: Optional[QuizQuestion] = None
        self.revealed = False
        self._in_flight = 0
        self._latest = 0

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    async def generate(
        self,
        mode: Union[QuizMode, str],
        scope: Scope,
        ayah_range: Union[AyahRange, Tuple[int, int], None] = None,
    ) -> Optional[QuizQuestion]:
        """
        Generate a question and make it current.

        Returns the question, or None if a newer generation superseded this one.
        On failure the previous question is kept and the error is re-raised.
        """
        self._latest += 1
        token = self._latest
        self._in_flight += 1
        self.revealed = False
        try:
            question = await self.generator.generate(mode, scope, ayah_range)
        except Exception as e:
            print(f"{Fore.RED}Error generating question: {e}{Style.RESET_ALL}", file=sys.stderr)
            raise
        finally:
            self._in_flight -= 1

        if token != self._latest:
            return None
        self.question = question
        return question

    def reveal(self):
        self.revealed = True

    def reset(self):
        self.question = None
        self.revealed = False
