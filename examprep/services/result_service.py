"""
Result Service
Graded attempt breakdown: sections, questions, percentile, class average
"""
from examprep.models import Answer
from examprep.services import grading
from examprep.services.attempt_service import AttemptService


class ResultService:
    """Builds the result payload for one attempt"""

    @staticmethod
    def question_breakdown(questions, answers):
        """
        Question-wise results in attempt order

        Only questions with a stored answer row are listed; after
        submission that is every question of the test.
        """
        rows = []
        for question in questions:
            answer = answers.get(question.id)
            if answer is None:
                continue
            rows.append({
                'questionId': question.id,
                'section': question.section,
                'questionType': question.question_type,
                'questionText': question.question_text,
                'isCorrect': bool(answer.is_correct),
                'marksAwarded': answer.marks_awarded or 0,
                'timeSpent': answer.time_spent_seconds or 0,
                'selectedAnswers': answer.get_selected_answers(),
                'correctAnswers': question.get_correct_answers(),
                'isMarkedForReview': bool(answer.is_marked_for_review),
            })
        return rows

    @staticmethod
    def build_attempt_result(attempt):
        """
        Build full result payload for an attempt

        Returns:
            dict: attempt, test, sectionWiseResults, questionWiseResults,
            percentile, averageScore
        """
        questions = AttemptService.ordered_questions(attempt)
        answers = {
            a.question_id: a
            for a in Answer.query.filter_by(attempt_id=attempt.id).all()
        }
        submitted = AttemptService.submitted_marks(attempt.test_id)

        attempt_payload = attempt.to_dict()
        attempt_payload['percentage'] = attempt.percentage

        return {
            'attempt': attempt_payload,
            'test': attempt.test.to_dict() if attempt.test else None,
            'sectionWiseResults': grading.section_breakdown(questions, answers),
            'questionWiseResults': ResultService.question_breakdown(questions, answers),
            'percentile': grading.percentile(attempt.obtained_marks or 0, submitted),
            'averageScore': grading.class_average(submitted),
        }

    @staticmethod
    def live_test_stats(test_id):
        """Submitted count and class average, broadcast after submissions"""
        submitted = AttemptService.submitted_marks(test_id)
        return {
            'testId': test_id,
            'submittedCount': len(submitted),
            'averageScore': grading.class_average(submitted),
        }
