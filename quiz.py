"""
Quiz logic module - handles question loading, recency-aware random selection, and grading.
"""

import json
import random
from dataclasses import dataclass
from pathlib import Path


MAX_HISTORY_CAP = 5
UNKNOWN_CATEGORY = "Unknown"


class QuestionLoadError(Exception):
    """Raised when the question file cannot be read or is not usable."""


@dataclass(frozen=True)
class Answer:
    id: int
    text: str
    is_correct: bool


@dataclass(frozen=True)
class Question:
    id: int
    category_id: int
    text: str
    answers: tuple

    @property
    def correct_ids(self) -> set:
        return {a.id for a in self.answers if a.is_correct}


@dataclass(frozen=True)
class Category:
    id: int
    name: str


@dataclass(frozen=True)
class QuestionStore:
    """All questions and categories, loaded once and never modified."""

    questions: tuple
    categories: tuple = ()

    def __len__(self) -> int:
        return len(self.questions)

    def category_name(self, category_id: int) -> str:
        for category in self.categories:
            if category.id == category_id:
                return category.name
        return UNKNOWN_CATEGORY


# ========================================
# Loading
# ========================================

def _require(entry: dict, key: str, kind, where: str):
    """Fetch a field from a raw JSON object, checking its type."""
    if not isinstance(entry, dict):
        raise QuestionLoadError(f"{where} is not an object")
    if key not in entry:
        raise QuestionLoadError(f"{where} is missing '{key}'")
    value = entry[key]
    # bool is an int subclass; ids must be real integers
    if kind is int and isinstance(value, bool):
        raise QuestionLoadError(f"{where} field '{key}' must be int")
    if not isinstance(value, kind):
        raise QuestionLoadError(f"{where} field '{key}' must be {kind.__name__}")
    return value


def _parse_question(entry: dict, index: int) -> Question:
    where = f"questions[{index}]"
    question_id = _require(entry, "id", int, where)
    category_id = _require(entry, "categoryId", int, where)
    text = _require(entry, "text", str, where)
    raw_answers = _require(entry, "answers", list, where)

    answers = []
    seen = set()
    for i, raw in enumerate(raw_answers):
        answer_where = f"{where}.answers[{i}]"
        answer = Answer(
            id=_require(raw, "id", int, answer_where),
            text=_require(raw, "text", str, answer_where),
            is_correct=_require(raw, "isCorrect", bool, answer_where),
        )
        if answer.id in seen:
            raise QuestionLoadError(f"{where} has duplicate answer id {answer.id}")
        seen.add(answer.id)
        answers.append(answer)

    if not any(a.is_correct for a in answers):
        raise QuestionLoadError(f"{where} has no correct answer")

    return Question(id=question_id, category_id=category_id, text=text, answers=tuple(answers))


def parse_question_data(data) -> QuestionStore:
    """
    Build a QuestionStore from the decoded JSON document.
    Raises QuestionLoadError if the document has no usable questions.
    """
    if not isinstance(data, dict):
        raise QuestionLoadError("Question data must be a JSON object")

    raw_questions = data.get("questions")
    if not isinstance(raw_questions, list) or len(raw_questions) == 0:
        raise QuestionLoadError("No questions found in data file")

    raw_categories = data.get("categories")
    if raw_categories is None:
        raw_categories = []
    if not isinstance(raw_categories, list):
        raise QuestionLoadError("Field 'categories' must be a list")

    categories = tuple(
        Category(
            id=_require(c, "id", int, f"categories[{i}]"),
            name=_require(c, "name", str, f"categories[{i}]"),
        )
        for i, c in enumerate(raw_categories)
    )

    questions = []
    seen = set()
    for index, entry in enumerate(raw_questions):
        question = _parse_question(entry, index)
        if question.id in seen:
            raise QuestionLoadError(f"Duplicate question id {question.id}")
        seen.add(question.id)
        questions.append(question)

    return QuestionStore(questions=tuple(questions), categories=categories)


def load_questions(filepath=None) -> QuestionStore:
    """Load the question store from a JSON file."""
    if filepath is None:
        filepath = Path(__file__).parent / "questions.json"

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (IOError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise QuestionLoadError(f"Could not read {filepath}: {e}") from e

    store = parse_question_data(data)
    print(f"[Quiz] Loaded {len(store)} questions")
    return store


# ========================================
# Selection
# ========================================

def max_history_size(total: int) -> int:
    """How many recent question ids are remembered for a store of this size."""
    return min(MAX_HISTORY_CAP, total // 2)


def candidate_pool(questions, history) -> list:
    """Questions not served recently, or every question if none are left."""
    recent = set(history)
    available = [q for q in questions if q.id not in recent]
    return available if available else list(questions)


def select_next_question(questions, history, rng=None) -> tuple:
    """
    Pick a random question, avoiding recently served ones.
    Returns the question and the updated history; the given history is not modified.
    """
    total = len(questions)
    if total == 0:
        raise ValueError("Cannot select from an empty question set")
    rng = rng or random

    history = list(history)
    # Nearly everything was seen recently; allow repeats again
    if len(history) >= total - 1:
        history = []

    selected = rng.choice(candidate_pool(questions, history))

    history.append(selected.id)
    if len(history) > max_history_size(total):
        history.pop(0)

    return selected, history


# ========================================
# Grading
# ========================================

def validate_answer(selected_ids, correct_ids) -> bool:
    """Check that exactly the correct answers were selected."""
    return set(selected_ids) == set(correct_ids)


def answer_feedback(question: Question, selected_ids) -> list:
    """
    Per-answer highlighting after a submit.
    Correct answers are always marked correct, even if not selected,
    so the learner sees the full correct set.
    """
    selected = set(selected_ids)
    feedback = []
    for answer in question.answers:
        is_selected = answer.id in selected
        if answer.is_correct:
            highlight = "correct"
        elif is_selected:
            highlight = "incorrect"
        else:
            highlight = None
        feedback.append({
            "id": answer.id,
            "selected": is_selected,
            "is_correct": answer.is_correct,
            "highlight": highlight
        })
    return feedback
