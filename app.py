"""
MUDR Quiz - medical university entrance exam practice.
A Flask app that serves one multiple-choice question at a time and grades multi-select answers.
"""

import os
import sys
import threading
import webbrowser
from pathlib import Path

from flask import Flask, jsonify, render_template, request
from waitress import serve

from quiz_session import (
    AlreadySubmittedError,
    NoActiveQuestionError,
    QuizError,
    QuizSession,
    QuizUnavailableError,
)

# Determine base path (works for both dev and PyInstaller exe)
if getattr(sys, 'frozen', False):
    BASE_DIR = Path(sys.executable).parent
else:
    BASE_DIR = Path(__file__).parent

QUESTIONS_FILE = BASE_DIR / "questions.json"
HOST = '127.0.0.1'
PORT = 5000
SERVER_THREADS = 4

app = Flask(__name__,
            template_folder=str(BASE_DIR / "templates"),
            static_folder=str(BASE_DIR / "static"))

# Single player, so one in-memory session loaded at startup
quiz_session = QuizSession.from_file(QUESTIONS_FILE)

ERROR_STATUS = {
    QuizUnavailableError: 503,
    NoActiveQuestionError: 409,
    AlreadySubmittedError: 409,
}


def no_cache(response):
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"
    return response


def question_payload(question) -> dict:
    """Question as sent to the browser, without correctness flags."""
    return {
        "id": question.id,
        "category": quiz_session.category_name(question),
        "text": question.text,
        "answers": [{"id": a.id, "text": a.text} for a in question.answers]
    }


def parse_answer_ids(data):
    """Return the submitted answer ids as a set of ints, or None if malformed."""
    if not isinstance(data, dict):
        return None
    raw = data.get('answer_ids')
    if not isinstance(raw, list):
        return None

    answer_ids = set()
    for value in raw:
        if isinstance(value, bool):
            return None
        try:
            answer_ids.add(int(value))
        except (TypeError, ValueError):
            return None
    return answer_ids


@app.errorhandler(QuizError)
def handle_quiz_error(error):
    status = ERROR_STATUS.get(type(error), 400)
    return jsonify({"success": False, "error": str(error)}), status


@app.route('/')
def index():
    """Render the quiz page."""
    return render_template('index.html')


# ========================================
# Quiz API Routes
# ========================================

@app.route('/api/quiz/status', methods=['GET'])
def quiz_status():
    """Report whether questions loaded, so the page can show the error state."""
    return jsonify({
        "success": True,
        "ready": quiz_session.is_ready,
        "error": quiz_session.load_error,
        "total": quiz_session.total
    })


@app.route('/api/quiz/question', methods=['GET'])
def quiz_next_question():
    """Select the next question, avoiding recently shown ones."""
    question = quiz_session.next_question()
    return no_cache(jsonify({
        "success": True,
        "question": question_payload(question)
    }))


@app.route('/api/quiz/answer', methods=['POST'])
def quiz_check_answer():
    """Grade the selected answers for the current question."""
    answer_ids = parse_answer_ids(request.get_json(silent=True))
    if answer_ids is None:
        return jsonify({
            "success": False,
            "error": "answer_ids must be a list of integers"
        }), 400

    result = quiz_session.submit(answer_ids)
    return jsonify({"success": True, **result})


def open_browser():
    """Open the browser after a short delay."""
    webbrowser.open(f'http://{HOST}:{PORT}')


def main():
    print("MUDR Quiz starting...")
    print(f"Process ID: {os.getpid()}")
    print(f"Questions file: {QUESTIONS_FILE}")
    if not quiz_session.is_ready:
        print(f"[Quiz] Quiz disabled: {quiz_session.load_error}")
    print()

    threading.Timer(1.5, open_browser).start()

    print(f"[Server] Starting server at http://{HOST}:{PORT}")
    print("[Server] Press Ctrl+C to stop")
    serve(app, host=HOST, port=PORT, threads=SERVER_THREADS)


if __name__ == '__main__':
    main()
