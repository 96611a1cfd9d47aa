#!/usr/bin/env python3
"""
FlashLingo - Flask Web Application
JSON API for managing a personal word list, browsing flip-cards and taking
typed-answer quizzes in both translation directions.
"""

import os
import socket
import threading
import traceback
from typing import Any, Dict, Tuple

from flask import Flask, request, session, jsonify

from flashlingo import db
from flashlingo.errors import EmptyDeck, NotFound, PreconditionViolation
from flashlingo.library import build_library_view
from flashlingo.models import ALL_TOPICS, Direction, VocabEntry
from flashlingo.quiz import QuizSession
from flashlingo.review import ReviewDeck

# Check for debug mode
DEBUG = os.environ.get("DEBUG", "0") == "1"

app = Flask(__name__)
app.secret_key = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

# Live review decks and quiz sessions, one of each per user. Never persisted.
_review_decks: Dict[str, ReviewDeck] = {}
_quiz_sessions: Dict[str, QuizSession] = {}
_state_lock = threading.Lock()


@app.before_request
def initialize_app() -> None:
    """Initialize the database if needed."""
    if not hasattr(app, '_database_initialized'):
        try:
            if not db.is_db_initialized():
                db.init_db()
                print("✅ Database initialized on startup")
        except Exception as e:
            print(f"❌ Database startup check failed: {str(e)}")
        setattr(app, "_database_initialized", True)


@app.before_request
def ensure_username() -> None:
    """Ensure username is set in session."""
    if 'username' not in session:
        session['username'] = 'default_user'


def _error(e: Exception) -> Tuple[Any, int]:
    """Map an error to a JSON body and HTTP status."""
    if isinstance(e, NotFound):
        code = 404
    elif isinstance(e, (EmptyDeck, PreconditionViolation)):
        code = 409
    elif isinstance(e, ValueError):
        # includes ValidationError and unknown quiz directions
        code = 400
    else:
        code = 500
    if DEBUG or code == 500:
        print(f"❌ {request.method} {request.path} failed: {e} ({type(e).__name__})")
        if DEBUG:
            traceback.print_exc()
    return jsonify({'status': 'error', 'message': f'Error: {str(e)}'}), code


def _payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _entry_json(entry: VocabEntry) -> Dict[str, Any]:
    return {
        'id': entry.id,
        'source_text': entry.source_text,
        'target_text': entry.target_text,
        'topic': entry.topic,
        'created_at': entry.created_at.isoformat(),
        'mastered': entry.mastered,
    }


def _deck_json(deck: ReviewDeck) -> Dict[str, Any]:
    if deck.is_empty:
        return {'state': deck.state, 'topic': deck.topic, 'size': 0}
    number, size = deck.position
    card = deck.current
    return {
        'state': deck.state,
        'topic': deck.topic,
        'number': number,
        'size': size,
        'flipped': deck.flipped,
        'card': {
            'id': card.id,
            'topic': card.topic,
            'source_text': card.source_text,
            # Hidden until the card is flipped
            'target_text': card.target_text if deck.flipped else None,
        },
    }


def _quiz_json(quiz: QuizSession) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        'state': quiz.state,
        'topic': quiz.topic,
        'direction': quiz.direction.value,
        'score': quiz.score,
        'total': quiz.total,
    }
    if quiz.is_finished:
        if quiz.report is not None:
            data['report'] = {'score': quiz.report.score, 'total': quiz.report.total, 'percent': quiz.report.percent}
        return data
    question = quiz.current_question
    data.update({
        'number': question.number,
        'prompt': question.prompt,
        'prompt_label': question.prompt_label,
        'answer_label': question.answer_label,
        'last_outcome': quiz.last_outcome.value,
        'revealed_answer': quiz.revealed_answer,
    })
    return data


# ----------------------------------------------------------------------
# Library
# ----------------------------------------------------------------------
@app.route('/api/dashboard')
def api_dashboard() -> Any:
    """Word totals and per-topic counts for the start screen."""
    try:
        view = build_library_view(db.list_entries(session['username']))
        return jsonify({
            'status': 'success',
            'username': session['username'],
            'total': view.total,
            'mastered': view.mastered,
            'topics': [{'topic': topic, 'count': count} for topic, count in view.topic_counts.items()],
        })
    except Exception as e:
        return _error(e)


@app.route('/api/topics')
def api_topics() -> Any:
    try:
        view = build_library_view(db.list_entries(session['username']))
        return jsonify({'status': 'success', 'topics': list(view.topics)})
    except Exception as e:
        return _error(e)


@app.route('/api/vocab', methods=['GET', 'POST'])
def api_vocab() -> Any:
    """List words newest first, or add one."""
    try:
        if request.method == 'POST':
            data = _payload()
            entry = db.create_entry(
                session['username'],
                str(data.get('source_text') or ''),
                str(data.get('target_text') or ''),
                str(data.get('topic') or ''),
            )
            return jsonify({'status': 'success', 'entry': _entry_json(entry)}), 201

        view = build_library_view(db.list_entries(session['username']))
        return jsonify({'status': 'success', 'entries': [_entry_json(entry) for entry in view.entries]})
    except Exception as e:
        return _error(e)


@app.route('/api/vocab/<entry_id>', methods=['PUT', 'DELETE'])
def api_vocab_entry(entry_id: str) -> Any:
    try:
        if request.method == 'DELETE':
            db.delete_entry(session['username'], entry_id)
        else:
            data = _payload()
            db.update_entry(
                session['username'],
                entry_id,
                str(data.get('source_text') or ''),
                str(data.get('target_text') or ''),
                str(data.get('topic') or ''),
            )
        return jsonify({'status': 'success'})
    except Exception as e:
        return _error(e)


# ----------------------------------------------------------------------
# Flip-card review
# ----------------------------------------------------------------------
@app.route('/api/review/start', methods=['POST'])
def api_review_start() -> Any:
    """Build a fresh deck for the chosen topic (an empty deck is returned as-is)."""
    try:
        topic = str(_payload().get('topic') or ALL_TOPICS)
        view = build_library_view(db.list_entries(session['username']))
        deck = ReviewDeck.from_entries(view.entries, topic)
        with _state_lock:
            _review_decks[session['username']] = deck
            body = _deck_json(deck)
        if deck.is_empty:
            body['message'] = f"No words for topic '{topic}'."
        return jsonify({'status': 'success', 'deck': body})
    except Exception as e:
        return _error(e)


@app.route('/api/review/exit', methods=['POST'])
def api_review_exit() -> Any:
    with _state_lock:
        _review_decks.pop(session['username'], None)
    return jsonify({'status': 'success'})


@app.route('/api/review', defaults={'action': None})
@app.route('/api/review/<action>', methods=['POST'])
def api_review(action: Any) -> Any:
    try:
        with _state_lock:
            deck = _review_decks.get(session['username'])
            if deck is None:
                raise PreconditionViolation("No review deck started.")
            if action == 'next':
                deck.next()
            elif action == 'prev':
                deck.prev()
            elif action == 'flip':
                deck.toggle_flip()
            elif action is not None:
                return jsonify({'status': 'error', 'message': f'Unknown action: {action}'}), 404
            body = _deck_json(deck)
        return jsonify({'status': 'success', 'deck': body})
    except Exception as e:
        return _error(e)


# ----------------------------------------------------------------------
# Quiz
# ----------------------------------------------------------------------
@app.route('/api/quiz/start', methods=['POST'])
def api_quiz_start() -> Any:
    try:
        data = _payload()
        topic = str(data.get('topic') or ALL_TOPICS)
        direction = Direction(data.get('direction') or Direction.SOURCE_TO_TARGET.value)
        quiz = QuizSession.start(db.list_entries(session['username']), topic=topic, direction=direction)
        with _state_lock:
            _quiz_sessions[session['username']] = quiz
            body = _quiz_json(quiz)
        return jsonify({'status': 'success', 'quiz': body})
    except Exception as e:
        return _error(e)


def _current_quiz() -> QuizSession:
    quiz = _quiz_sessions.get(session['username'])
    if quiz is None:
        raise PreconditionViolation("No quiz started.")
    return quiz


@app.route('/api/quiz')
def api_quiz() -> Any:
    try:
        with _state_lock:
            body = _quiz_json(_current_quiz())
        return jsonify({'status': 'success', 'quiz': body})
    except Exception as e:
        return _error(e)


@app.route('/api/quiz/answer', methods=['POST'])
def api_quiz_answer() -> Any:
    """Check one typed answer. Blank answers are ignored."""
    try:
        answer = str(_payload().get('answer') or '')
        with _state_lock:
            quiz = _current_quiz()
            outcome = quiz.submit_answer(answer)
            body = _quiz_json(quiz)
        return jsonify({'status': 'success', 'outcome': outcome.value, 'quiz': body})
    except Exception as e:
        return _error(e)


@app.route('/api/quiz/advance', methods=['POST'])
def api_quiz_advance() -> Any:
    try:
        with _state_lock:
            quiz = _current_quiz()
            quiz.advance()
            body = _quiz_json(quiz)
            if quiz.is_finished:
                # finished quizzes are not kept
                _quiz_sessions.pop(session['username'], None)
        return jsonify({'status': 'success', 'quiz': body})
    except Exception as e:
        return _error(e)


@app.route('/api/quiz/exit', methods=['POST'])
def api_quiz_exit() -> Any:
    with _state_lock:
        _quiz_sessions.pop(session['username'], None)
    return jsonify({'status': 'success'})


@app.route('/settings', methods=['POST'])
def settings() -> Any:
    """Switch the active user."""
    username = str(_payload().get('username', '')).strip()
    if not username:
        return jsonify({'status': 'error', 'message': 'Username is required'}), 400
    session['username'] = username
    return jsonify({'status': 'success', 'username': username})


def get_local_ip() -> str:
    """Get the local IP address of the machine."""
    try:
        # Connect to an external server (doesn't actually send data)
        # to determine the interface used for internet access
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        local_ip = s.getsockname()[0]
        s.close()
        return local_ip
    except Exception:
        return "127.0.0.1"


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='FlashLingo')
    parser.add_argument('--host', help='Host IP to bind to (default: auto-detect local IP)')
    parser.add_argument('--port', type=int, default=5000, help='Port to bind to (default: 5000)')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    args = parser.parse_args()

    if args.debug:
        DEBUG = True

    # Initialize database
    try:
        if not db.is_db_initialized():
            db.init_db()
            print("✅ Database initialized")
    except Exception as e:
        print(f"❌ Database initialization failed: {str(e)}")

    host = args.host or get_local_ip()
    print(f"🚀 Starting server on http://{host}:{args.port}")
    app.run(debug=DEBUG, host=host, port=args.port)
