import json
import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from quiz import parse_question_data  # noqa: E402
from quiz_session import QuizSession  # noqa: E402


def make_question_data(count=10):
    """Question document with `count` questions spread over two categories."""
    questions = []
    for i in range(1, count + 1):
        questions.append({
            "id": i,
            "categoryId": 1 if i % 2 else 2,
            "text": f"Question {i}?",
            "answers": [
                {"id": 1, "text": "A", "isCorrect": True},
                {"id": 2, "text": "B", "isCorrect": i % 3 == 0},
                {"id": 3, "text": "C", "isCorrect": False}
            ]
        })
    return {
        "categories": [
            {"id": 1, "name": "Biology"},
            {"id": 2, "name": "Chemistry"}
        ],
        "questions": questions
    }


class RecordingRandom:
    """Stands in for `random`, remembering every pool it was asked to choose from."""

    def __init__(self):
        self.pools = []

    def choice(self, seq):
        self.pools.append(list(seq))
        return seq[0]


@pytest.fixture
def question_data():
    return make_question_data()


@pytest.fixture
def store(question_data):
    return parse_question_data(question_data)


@pytest.fixture
def write_questions(tmp_path):
    def _write(data, name="questions.json"):
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def session(store):
    return QuizSession(store=store, rng=random.Random(1234))


@pytest.fixture
def client(monkeypatch, session):
    import app as quiz_app
    monkeypatch.setattr(quiz_app, "quiz_session", session)
    quiz_app.app.config["TESTING"] = True
    with quiz_app.app.test_client() as test_client:
        yield test_client
