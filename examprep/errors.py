"""
API Errors
Exceptions raised by services and turned into JSON responses
"""
from flask import jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException


class ExamPrepError(Exception):
    """Base error carrying the HTTP status it maps to"""
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class BadRequest(ExamPrepError):
    status_code = 400
    message = 'Invalid request'


class Unauthorized(ExamPrepError):
    status_code = 401
    message = 'Unauthorized'


class NotFound(ExamPrepError):
    status_code = 404
    message = 'Not found'


class AttemptClosed(ExamPrepError):
    status_code = 409
    message = 'Attempt already submitted'


class UnknownQuestionType(ExamPrepError):
    status_code = 500
    message = 'Unknown question type'


class PersistenceError(ExamPrepError):
    """Database write failed; message is safe to show the client"""
    status_code = 500


def error_response(message, status_code):
    return jsonify({'error': message}), status_code


def register_error_handlers(app):
    """Attach JSON error handlers to the app"""

    @app.errorhandler(ExamPrepError)
    def handle_exam_prep_error(exc):
        if exc.status_code >= 500:
            current_app.logger.error('%s: %s', type(exc).__name__, exc.message)
        return error_response(exc.message, exc.status_code)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(exc):
        from examprep.extensions import db
        db.session.rollback()
        current_app.logger.exception('Database error')
        return error_response('Internal server error', 500)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return error_response(exc.description or exc.name, exc.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        current_app.logger.exception('Unhandled error')
        return error_response('Internal server error', 500)
