"""
API Routes
JSON endpoints for test-taking, results and analytics
"""
from flask import Blueprint, current_app, jsonify, request, url_for

from examprep.errors import BadRequest
from examprep.extensions import socketio
from examprep.models import Answer
from examprep.services import AttemptService, ResultService, AnalyticsService
from examprep.utils import get_current_student_id, require_student

api_bp = Blueprint('api', __name__)


def get_json_body():
    """Request body as a dict, or 400"""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise BadRequest('Request body must be a JSON object')
    return body


def get_answers(body):
    answers = body.get('answers') or []
    if not isinstance(answers, list):
        raise BadRequest('answers must be a list')
    return answers


def broadcast_test_stats(test_id):
    """Push submitted count and class average to the test room"""
    socketio.emit(
        'attempt_submitted',
        ResultService.live_test_stats(test_id),
        room=f'test_{test_id}'
    )


@api_bp.route('/health')
def health():
    return jsonify({'status': 'ok'})


@api_bp.route('/tests/<int:test_id>/start', methods=['POST'])
@require_student
def start_test(test_id):
    """
    Create the attempt on first visit, or resume it

    A submitted attempt is never reopened; the client is pointed at
    its result instead.
    """
    student_id = get_current_student_id()
    attempt, created = AttemptService.start_attempt(test_id, student_id)

    if attempt.is_submitted:
        return jsonify({
            'attemptId': attempt.id,
            'isSubmitted': True,
            'redirect': url_for('api.attempt_result', attempt_id=attempt.id),
        })

    questions = AttemptService.ordered_questions(attempt)
    answers = Answer.query.filter_by(attempt_id=attempt.id).all()

    return jsonify({
        'attemptId': attempt.id,
        'isSubmitted': False,
        'created': created,
        'test': attempt.test.to_dict(),
        'questions': [q.to_dict() for q in questions],
        'answers': [a.to_dict() for a in answers],
        'timeSpent': attempt.time_spent_seconds,
        'autosaveInterval': current_app.config['AUTOSAVE_INTERVAL_SECONDS'],
    }), 201 if created else 200


@api_bp.route('/tests/<int:test_id>/save', methods=['POST'])
@require_student
def save_test(test_id):
    """Autosave: upsert answers and accumulate time spent"""
    body = get_json_body()
    attempt = AttemptService.get_owned_attempt(
        body.get('attemptId'), get_current_student_id(), test_id=test_id
    )

    saved = AttemptService.save_progress(
        attempt, get_answers(body), body.get('timeSpent', 0)
    )

    return jsonify({
        'success': True,
        'staleQuestionIds': saved['stale'],
        'versions': {str(qid): version for qid, version in saved['versions'].items()},
    })


@api_bp.route('/tests/<int:test_id>/submit', methods=['POST'])
@require_student
def submit_test(test_id):
    """Grade all questions and close the attempt"""
    body = get_json_body()
    attempt = AttemptService.get_owned_attempt(
        body.get('attemptId'), get_current_student_id(), test_id=test_id
    )

    was_submitted = attempt.is_submitted
    attempt = AttemptService.submit_attempt(attempt, get_answers(body))

    if not was_submitted:
        broadcast_test_stats(test_id)

    return jsonify({
        'success': True,
        'totalMarks': attempt.total_marks,
        'obtainedMarks': attempt.obtained_marks,
        'percentage': attempt.percentage,
    })


@api_bp.route('/attempts/<int:attempt_id>/result')
@require_student
def attempt_result(attempt_id):
    """Graded attempt with section / question breakdown and percentile"""
    attempt = AttemptService.get_owned_attempt(attempt_id, get_current_student_id())
    return jsonify(ResultService.build_attempt_result(attempt))


@api_bp.route('/analytics/performance')
@require_student
def performance():
    """Aggregate history across the student's submitted attempts"""
    return jsonify(AnalyticsService.build_performance(get_current_student_id()))
