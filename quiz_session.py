"""
Quiz session - the mutable state of one player's run through the question store.
"""

import threading

from quiz import (
    QuestionLoadError,
    answer_feedback,
    load_questions,
    select_next_question,
    validate_answer,
)


CORRECT_MESSAGE = "Correct! Well done!"
INCORRECT_MESSAGE = "Incorrect. Review the correct answers highlighted in green."


class QuizError(Exception):
    """Base class for requests the session cannot serve."""


class QuizUnavailableError(QuizError):
    """The question store failed to load; the quiz is disabled."""


class NoActiveQuestionError(QuizError):
    pass


class AlreadySubmittedError(QuizError):
    pass


class QuizSession:
    def __init__(self, store=None, load_error=None, rng=None):
        if store is None and load_error is None:
            load_error = "No questions loaded"
        self.store = store
        self.load_error = load_error
        self.rng = rng
        self.history = []
        self.current_question = None
        self.is_answer_submitted = False
        self.score = 0
        self.answered = 0
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, filepath=None, rng=None):
        """Load the store once; a failed load leaves the session in its error state."""
        try:
            store = load_questions(filepath)
        except QuestionLoadError as e:
            print(f"[Quiz] Error loading questions: {e}")
            return cls(load_error=str(e), rng=rng)
        return cls(store=store, rng=rng)

    @property
    def is_ready(self) -> bool:
        return self.store is not None and self.load_error is None

    @property
    def total(self) -> int:
        return len(self.store) if self.store is not None else 0

    def category_name(self, question) -> str:
        return self.store.category_name(question.category_id)

    def _check_ready(self):
        if not self.is_ready:
            raise QuizUnavailableError(self.load_error)

    def next_question(self):
        """Select and show the next question."""
        self._check_ready()
        with self._lock:
            question, self.history = select_next_question(
                self.store.questions, self.history, rng=self.rng
            )
            self.current_question = question
            self.is_answer_submitted = False
        return question

    def submit(self, selected_ids) -> dict:
        """
        Grade the current question. Each question can be submitted once;
        the selection is locked in afterwards.
        """
        self._check_ready()
        with self._lock:
            question = self.current_question
            if question is None:
                raise NoActiveQuestionError("No question is being shown")
            if self.is_answer_submitted:
                raise AlreadySubmittedError("This question was already answered")

            selected_ids = set(selected_ids)
            is_correct = validate_answer(selected_ids, question.correct_ids)

            self.is_answer_submitted = True
            self.answered += 1
            if is_correct:
                self.score += 1

            return {
                "question_id": question.id,
                "correct": is_correct,
                "message": CORRECT_MESSAGE if is_correct else INCORRECT_MESSAGE,
                "correct_ids": sorted(question.correct_ids),
                "answers": answer_feedback(question, selected_ids),
                "score": self.score,
                "answered": self.answered
            }
