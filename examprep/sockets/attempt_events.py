"""
Socket.IO Event Handlers
Test rooms and the autosave channel
"""
from flask_socketio import emit, join_room, leave_room

from examprep.errors import ExamPrepError
from examprep.extensions import socketio
from examprep.services import AttemptService
from examprep.utils import get_current_student_id


def register_socket_events():
    """Register all Socket.IO event handlers"""

    @socketio.on('join_test')
    def join_test(data):
        """Student joins a test room for live stats"""
        test_id = (data or {}).get('testId')
        if test_id is None:
            return
        join_room(f'test_{test_id}')

    @socketio.on('leave_test')
    def leave_test(data):
        test_id = (data or {}).get('testId')
        if test_id is None:
            return
        leave_room(f'test_{test_id}')

    @socketio.on('autosave')
    def autosave(data):
        """
        Same as POST /tests/<id>/save, over the socket

        The return value is sent back as the event acknowledgement.
        """
        data = data or {}
        student_id = get_current_student_id()
        if student_id is None:
            return {'success': False, 'error': 'Unauthorized'}

        try:
            test_id = int(data.get('testId'))
        except (TypeError, ValueError):
            return {'success': False, 'error': 'Test not found'}

        try:
            attempt = AttemptService.get_owned_attempt(
                data.get('attemptId'), student_id, test_id=test_id
            )
            saved = AttemptService.save_progress(
                attempt, data.get('answers') or [], data.get('timeSpent', 0)
            )
        except ExamPrepError as exc:
            emit('autosave_failed', {'error': exc.message})
            return {'success': False, 'error': exc.message}

        return {
            'success': True,
            'staleQuestionIds': saved['stale'],
            'versions': {str(qid): v for qid, v in saved['versions'].items()},
        }
