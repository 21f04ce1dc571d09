"""
Grading
Pure answer validation and score aggregation

Nothing here touches the database: every function takes question-like
objects (section, question_type, marks, negative_marks,
get_correct_answers()) and plain selections, so submission, results and
tests all share one set of rules.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
import math

from examprep.errors import UnknownQuestionType
from examprep.models.question import SECTIONS

NUMERIC_TOLERANCE = 0.01


@dataclass
class QuestionGrade:
    question_id: int
    attempted: bool
    is_correct: bool
    marks_awarded: float


@dataclass
class AttemptGrade:
    total_marks: float
    raw_marks: float
    obtained_marks: float
    percentage: int
    grades: dict = field(default_factory=dict)


def round_half_up(value):
    """Round .5 upwards, matching what the client shows"""
    return int(math.floor(value + 0.5))


def raw_percentage_of(obtained, total):
    """Unrounded percentage; 0 when the test carries no marks"""
    if not total:
        return 0
    return obtained / total * 100


def percentage_of(obtained, total):
    return round_half_up(raw_percentage_of(obtained, total))


def normalize_selection(selected):
    """Selections as a list of stripped strings with blanks dropped"""
    if selected is None:
        return []
    if not isinstance(selected, (list, tuple)):
        selected = [selected]
    return [str(s).strip() for s in selected if s is not None and str(s).strip()]


def is_attempted(selected):
    return len(normalize_selection(selected)) > 0


def _parse_number(value):
    """Decimal so that a difference of exactly the tolerance compares equal"""
    try:
        number = Decimal(str(value).strip())
    except (TypeError, ValueError, InvalidOperation):
        return None
    if not number.is_finite():
        return None
    return number


def check_answer(question, selected, tolerance=NUMERIC_TOLERANCE):
    """
    Check if a selection is correct for the question's type

    Returns False for unattempted selections; callers that need to tell
    unattempted from wrong should use is_attempted() first.
    """
    raw_selected = selected if isinstance(selected, (list, tuple)) else [selected]
    selected = normalize_selection(selected)
    if not selected:
        return False

    correct = [str(ans).strip() for ans in question.get_correct_answers()]
    question_type = question.question_type

    if question_type == 'mcq_single':
        # Blank entries still count towards the single-selection rule
        raw_count = len([s for s in raw_selected if s is not None])
        return raw_count == 1 and selected[0] in correct

    elif question_type in ('mcq_multiple', 'comprehension'):
        # Same cardinality and same members, in any order
        return len(selected) == len(correct) and set(selected) == set(correct)

    elif question_type == 'numeric':
        if not correct:
            return False
        student_value = _parse_number(selected[0])
        correct_value = _parse_number(correct[0])
        if student_value is None or correct_value is None:
            return False
        return abs(student_value - correct_value) < Decimal(str(tolerance))

    raise UnknownQuestionType(f'Unknown question type: {question_type}')


def grade_question(question, selected, tolerance=NUMERIC_TOLERANCE):
    """+marks if correct, -negative_marks if wrong, 0 if unattempted"""
    if not is_attempted(selected):
        return QuestionGrade(question.id, False, False, 0)

    is_correct = check_answer(question, selected, tolerance)
    if is_correct:
        marks_awarded = question.marks or 0
    else:
        marks_awarded = -(question.negative_marks or 0)
    return QuestionGrade(question.id, True, is_correct, marks_awarded)


def grade_attempt(questions, selections, tolerance=NUMERIC_TOLERANCE):
    """
    Grade every question of a test

    Args:
        questions: all questions of the test, answered or not
        selections: dict question_id -> list of selected answers

    Returns:
        AttemptGrade; obtained_marks is floored at zero for the attempt
        as a whole, individual marks_awarded may stay negative
    """
    grades = {}
    total_marks = 0
    raw_marks = 0

    for question in questions:
        total_marks += question.marks or 0
        grade = grade_question(question, selections.get(question.id), tolerance)
        grades[question.id] = grade
        raw_marks += grade.marks_awarded

    obtained_marks = max(0, raw_marks)

    return AttemptGrade(
        total_marks=total_marks,
        raw_marks=raw_marks,
        obtained_marks=obtained_marks,
        percentage=percentage_of(obtained_marks, total_marks),
        grades=grades,
    )


def section_breakdown(questions, answers):
    """
    Per-section rollup in the fixed section order

    Args:
        questions: all questions of the test
        answers: dict question_id -> Answer row (graded or not)
    """
    results = []
    for section in SECTIONS:
        section_questions = [q for q in questions if q.section == section]
        attempted = correct = 0
        marks = 0
        time_spent = 0

        for question in section_questions:
            answer = answers.get(question.id)
            if answer is None:
                continue
            if is_attempted(answer.get_selected_answers()):
                attempted += 1
            if answer.is_correct:
                correct += 1
            marks += answer.marks_awarded or 0
            time_spent += answer.time_spent_seconds or 0

        results.append({
            'section': section,
            'totalQuestions': len(section_questions),
            'attempted': attempted,
            'correct': correct,
            'incorrect': attempted - correct,
            'marks': marks,
            'timeSpent': time_spent,
        })
    return results


def percentile(obtained_marks, submitted_marks):
    """
    Share of submitted attempts scoring strictly lower, as 0-100

    Defaults to 50 when fewer than two attempts have been submitted.
    """
    submitted_marks = list(submitted_marks)
    if len(submitted_marks) < 2:
        return 50
    lower = sum(1 for marks in submitted_marks if marks < obtained_marks)
    return round_half_up(lower / len(submitted_marks) * 100)


def class_average(submitted_marks):
    submitted_marks = list(submitted_marks)
    if not submitted_marks:
        return 0
    return round_half_up(sum(submitted_marks) / len(submitted_marks))
