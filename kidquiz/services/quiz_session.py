"""Screen state machine for one client: generation, answering, scoring."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from kidquiz.models import (
    UNANSWERED, Question, QuizData, QuizResult, Subject, now_utc, to_epoch_ms,
)
from kidquiz.services.scoring import compute_score

logger = logging.getLogger(__name__)

GENERATION_FAILED_MESSAGE = "Có lỗi xảy ra khi tạo đề. Bé hãy thử lại nhé!"


class Screen(str, Enum):
    HOME = "home"
    GENERATING = "generating"
    TAKING = "taking"
    RESULT = "result"
    HISTORY = "history"


@dataclass
class QuizSession:
    """
    Holds the current screen, the quiz in progress and its answers.

    Every transition method returns a falsy value and leaves the session
    unchanged when the trigger is not valid for the current screen.

    Generation is tagged with a token: begin_generation() increments it, and a
    completion or failure is applied only if it carries the current token while
    the session is still on the Generating screen.
    """
    screen: Screen = Screen.HOME
    subject: Optional[Subject] = None
    quiz: Optional[QuizData] = None
    answers: list[int] = field(default_factory=list)
    result: Optional[QuizResult] = None
    error: Optional[str] = None
    generation_token: int = 0

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def begin_generation(self, subject: Subject) -> Optional[int]:
        """Home -> Generating. Returns the token the response must carry."""
        if self.screen is not Screen.HOME:
            return None
        return self._start(subject)

    def request_new_quiz(self) -> Optional[int]:
        """Result -> Generating with the same subject."""
        if self.screen is not Screen.RESULT or self.subject is None:
            return None
        return self._start(self.subject)

    def _start(self, subject: Subject) -> int:
        self.generation_token += 1
        self.screen = Screen.GENERATING
        self.subject = subject
        self.error = None
        self._discard_quiz()
        return self.generation_token

    def is_current(self, token: int) -> bool:
        return self.screen is Screen.GENERATING and token == self.generation_token

    def complete_generation(
        self, token: int, questions: Sequence[Question], now: Optional[datetime] = None
    ) -> bool:
        """Generating -> Taking with a fresh, all-unanswered answer set."""
        if not self.is_current(token):
            logger.info("Discarding stale generation response (token %d)", token)
            return False
        if not questions:
            raise ValueError("Generated quiz has no questions")

        created_at = now or now_utc()
        self.quiz = QuizData(
            id=str(to_epoch_ms(created_at)),
            subject=self.subject,
            questions=tuple(questions),
            created_at=created_at,
        )
        self.answers = [UNANSWERED] * len(questions)
        self.screen = Screen.TAKING
        return True

    def fail_generation(self, token: int, message: str = GENERATION_FAILED_MESSAGE) -> bool:
        """Generating -> Home with a user-visible error."""
        if not self.is_current(token):
            logger.info("Discarding stale generation failure (token %d)", token)
            return False
        self.error = message
        self.screen = Screen.HOME
        return True

    # ------------------------------------------------------------------
    # Answering
    # ------------------------------------------------------------------

    def select_answer(self, question_index: int, option_index: int) -> bool:
        if self.screen is not Screen.TAKING or self.quiz is None:
            return False
        if not 0 <= question_index < len(self.quiz.questions):
            return False
        if not 0 <= option_index < len(self.quiz.questions[question_index].options):
            return False
        self.answers[question_index] = option_index
        return True

    @property
    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a != UNANSWERED)

    @property
    def all_answered(self) -> bool:
        return bool(self.answers) and UNANSWERED not in self.answers

    @property
    def can_submit(self) -> bool:
        return self.screen is Screen.TAKING and self.all_answered

    def submit(self, now: Optional[datetime] = None) -> Optional[QuizResult]:
        """Taking -> Result. No-op while any question is unanswered."""
        if not self.can_submit:
            return None

        self.result = QuizResult(
            quiz_id=self.quiz.id,
            subject=self.quiz.subject,
            score=compute_score(self.quiz.questions, self.answers),
            total_questions=len(self.quiz.questions),
            date=now or now_utc(),
            user_answers=tuple(self.answers),
        )
        self.screen = Screen.RESULT
        return self.result

    def exit_quiz(self) -> bool:
        """Taking -> Home; the quiz and its answers are dropped."""
        if self.screen is not Screen.TAKING:
            return False
        self._discard_quiz()
        self.screen = Screen.HOME
        return True

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def return_home(self) -> bool:
        """Result/History -> Home. From Generating the pending request is abandoned."""
        if self.screen is Screen.GENERATING:
            self.generation_token += 1
        elif self.screen not in (Screen.RESULT, Screen.HISTORY):
            return False
        self._discard_quiz()
        self.screen = Screen.HOME
        return True

    def open_history(self) -> bool:
        if self.screen is not Screen.HOME:
            return False
        self.screen = Screen.HISTORY
        return True

    def _discard_quiz(self):
        self.quiz = None
        self.answers = []
        self.result = None
