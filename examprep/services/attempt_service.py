"""
Attempt Service
Attempt lifecycle: start (or resume), autosave, submit
"""
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import random

from examprep.errors import AttemptClosed, BadRequest, NotFound, PersistenceError
from examprep.extensions import db
from examprep.models import Answer, Attempt, Question, Test, SECTIONS
from examprep.services import grading
from examprep.utils import now_utc


def shuffle_within_sections(questions, rng=None):
    """
    Question order for a new attempt

    Sections stay in their fixed order; questions are shuffled inside
    each section only.
    """
    rng = rng or random.Random()
    ordered = []
    for section in SECTIONS:
        section_questions = sorted(
            (q for q in questions if q.section == section),
            key=lambda q: (q.order_index or 0, q.id)
        )
        rng.shuffle(section_questions)
        ordered.extend(section_questions)

    # Anything outside the known sections goes last, unshuffled
    known = set(SECTIONS)
    ordered.extend(q for q in questions if q.section not in known)
    return ordered


def parse_answer_payload(raw):
    """Validate one client answer dict into plain Python values"""
    if not isinstance(raw, dict):
        raise BadRequest('Each answer must be an object')
    try:
        question_id = int(raw.get('questionId'))
    except (TypeError, ValueError):
        raise BadRequest('Answer is missing a valid questionId')

    selected = raw.get('selectedAnswers') or []
    if not isinstance(selected, list):
        selected = [selected]

    try:
        time_spent = max(0, int(raw.get('timeSpent') or 0))
    except (TypeError, ValueError):
        raise BadRequest('timeSpent must be a number')

    version = raw.get('version')
    if version is not None:
        try:
            version = int(version)
        except (TypeError, ValueError):
            raise BadRequest('version must be an integer')

    return {
        'question_id': question_id,
        'selected': [str(s) for s in selected if s is not None],
        'is_marked_for_review': bool(raw.get('isMarkedForReview', False)),
        'time_spent': time_spent,
        'version': version,
    }


class AttemptService:
    """Attempt state machine: uncreated -> in_progress -> submitted"""

    @staticmethod
    def get_owned_attempt(attempt_id, student_id, test_id=None):
        """Fetch an attempt owned by the student, or raise NotFound"""
        try:
            attempt_id = int(attempt_id)
        except (TypeError, ValueError):
            raise NotFound('Attempt not found')

        query = Attempt.query.filter_by(id=attempt_id, student_id=student_id)
        if test_id is not None:
            query = query.filter_by(test_id=test_id)

        attempt = query.first()
        if not attempt:
            raise NotFound('Attempt not found')
        return attempt

    @staticmethod
    def start_attempt(test_id, student_id, rng=None):
        """
        Return the student's attempt for a test, creating it on first visit

        Returns:
            tuple: (attempt, created)
        """
        test = db.session.get(Test, test_id)
        if not test or not test.is_active:
            raise NotFound('Test not found')

        attempt = Attempt.query.filter_by(test_id=test_id, student_id=student_id).first()
        if attempt:
            return attempt, False

        questions = Question.query.filter_by(test_id=test_id).all()
        if not questions:
            raise NotFound('Test has no questions')

        attempt = Attempt(
            test_id=test_id,
            student_id=student_id,
            total_marks=sum(q.marks or 0 for q in questions),
            started_at=now_utc(),
            updated_at=now_utc(),
        )
        attempt.set_question_order(q.id for q in shuffle_within_sections(questions, rng))

        db.session.add(attempt)
        try:
            db.session.commit()
        except IntegrityError:
            # Another request created it first
            db.session.rollback()
            attempt = Attempt.query.filter_by(test_id=test_id, student_id=student_id).first()
            if not attempt:
                raise
            return attempt, False

        current_app.logger.info(
            'Created attempt %s for test %s (student %s, %d questions)',
            attempt.id, test_id, student_id, len(questions)
        )
        return attempt, True

    @staticmethod
    def ordered_questions(attempt):
        """Questions in the attempt's snapshot order"""
        questions = {q.id: q for q in Question.query.filter_by(test_id=attempt.test_id).all()}
        ordered = [questions.pop(qid) for qid in attempt.get_question_order() if qid in questions]
        # Questions added after the snapshot are appended
        ordered.extend(sorted(questions.values(), key=lambda q: (q.order_index or 0, q.id)))
        return ordered

    @staticmethod
    def save_progress(attempt, answers, time_spent=0):
        """
        Upsert answers and accumulate time on an in-progress attempt

        Returns:
            dict: stale (question ids whose write was skipped) and
            versions (question id -> stored version after the save)
        """
        if attempt.is_submitted:
            raise AttemptClosed()

        payloads = [parse_answer_payload(raw) for raw in (answers or [])]
        try:
            time_spent = max(0, int(time_spent or 0))
        except (TypeError, ValueError):
            raise BadRequest('timeSpent must be a number')

        question_ids = {
            qid for (qid,) in db.session.query(Question.id).filter_by(test_id=attempt.test_id)
        }
        existing = {a.question_id: a for a in Answer.query.filter_by(attempt_id=attempt.id).all()}

        stale = []
        now = now_utc()
        try:
            for payload in payloads:
                question_id = payload['question_id']
                if question_id not in question_ids:
                    raise NotFound(f'Question {question_id} not found')

                answer = existing.get(question_id)
                if answer is None:
                    answer = Answer(attempt_id=attempt.id, question_id=question_id, version=0)
                    db.session.add(answer)
                    existing[question_id] = answer
                elif payload['version'] is not None and payload['version'] < answer.version:
                    stale.append(question_id)
                    continue

                answer.set_selected_answers(payload['selected'])
                answer.is_marked_for_review = payload['is_marked_for_review']
                answer.time_spent_seconds = payload['time_spent']
                answer.answered_at = now if grading.is_attempted(payload['selected']) else None
                answer.updated_at = now
                answer.version = (answer.version or 0) + 1

            attempt.time_spent_seconds = (attempt.time_spent_seconds or 0) + time_spent
            attempt.updated_at = now
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception('Error saving answers for attempt %s', attempt.id)
            raise PersistenceError('Failed to save answer')
        except NotFound:
            db.session.rollback()
            raise

        if stale:
            current_app.logger.info(
                'Skipped stale answers %s for attempt %s', stale, attempt.id
            )
        return {
            'stale': stale,
            'versions': {qid: answer.version for qid, answer in existing.items()},
        }

    @staticmethod
    def submit_attempt(attempt, answers=None):
        """
        Grade every question and close the attempt

        Submitting an already submitted attempt returns the stored result
        without grading again.
        """
        if attempt.is_submitted:
            current_app.logger.info('Attempt %s already submitted, not re-grading', attempt.id)
            return attempt

        payloads = {}
        for raw in (answers or []):
            payload = parse_answer_payload(raw)
            payloads[payload['question_id']] = payload

        questions = Question.query.filter_by(test_id=attempt.test_id).all()
        if not questions:
            raise NotFound('Questions not found')

        question_ids = {q.id for q in questions}
        for question_id in payloads:
            if question_id not in question_ids:
                raise NotFound(f'Question {question_id} not found')

        stored = {a.question_id: a for a in Answer.query.filter_by(attempt_id=attempt.id).all()}

        # Submitted payload wins over autosaved state
        selections = {}
        for question in questions:
            if question.id in payloads:
                selections[question.id] = payloads[question.id]['selected']
            elif question.id in stored:
                selections[question.id] = stored[question.id].get_selected_answers()

        result = grading.grade_attempt(
            questions, selections,
            tolerance=current_app.config.get('NUMERIC_TOLERANCE', grading.NUMERIC_TOLERANCE)
        )

        now = now_utc()
        try:
            for question in questions:
                grade = result.grades[question.id]
                answer = stored.get(question.id)
                if answer is None:
                    answer = Answer(attempt_id=attempt.id, question_id=question.id, version=0)
                    db.session.add(answer)

                payload = payloads.get(question.id)
                if payload is not None:
                    answer.set_selected_answers(payload['selected'])
                    answer.is_marked_for_review = payload['is_marked_for_review']
                    answer.time_spent_seconds = payload['time_spent']

                answer.is_correct = grade.is_correct
                answer.marks_awarded = grade.marks_awarded
                if grade.attempted and answer.answered_at is None:
                    answer.answered_at = now
                answer.updated_at = now
                answer.version = (answer.version or 0) + 1

            attempt.is_submitted = True
            attempt.submitted_at = now
            attempt.updated_at = now
            attempt.total_marks = result.total_marks
            attempt.obtained_marks = result.obtained_marks
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception('Error submitting attempt %s', attempt.id)
            raise PersistenceError('Failed to submit test')

        current_app.logger.info(
            'Submitted attempt %s for test %s: %s/%s (%s%%)',
            attempt.id, attempt.test_id, result.obtained_marks,
            result.total_marks, result.percentage
        )
        return attempt

    @staticmethod
    def submitted_marks(test_id):
        """obtained_marks of every submitted attempt of a test"""
        rows = db.session.query(Attempt.obtained_marks).filter_by(
            test_id=test_id, is_submitted=True
        ).all()
        return [row.obtained_marks or 0 for row in rows]
