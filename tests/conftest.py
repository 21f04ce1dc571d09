import pytest

from examprep import create_app
from examprep.extensions import db
from examprep.models import Course, Test, Question


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, student_id):
    with client.session_transaction() as sess:
        sess['user_id'] = student_id
        sess['role'] = 'student'


@pytest.fixture
def student_client(client):
    login(client, 'student-1')
    return client


@pytest.fixture
def make_test(app):
    """
    Create a test from (section, type, correct, marks, negative) tuples
    """
    def _make_test(specs, title='Mock Test', is_active=True):
        course = Course(title='Course')
        db.session.add(course)
        db.session.flush()

        test = Test(course_id=course.id, title=title, is_active=is_active)
        db.session.add(test)
        db.session.flush()

        for index, (section, qtype, correct, marks, negative) in enumerate(specs):
            question = Question(
                test_id=test.id,
                order_index=index,
                section=section,
                question_type=qtype,
                question_text=f'Question {index + 1}',
                marks=marks,
                negative_marks=negative,
            )
            if qtype != 'numeric':
                question.set_options({'A': 'a', 'B': 'b', 'C': 'c', 'D': 'd'})
            question.set_correct_answers(correct)
            db.session.add(question)

        db.session.commit()
        return test

    return _make_test


@pytest.fixture
def three_question_test(make_test):
    """Marks [4, 4, 4], negative [1, 1, 1]"""
    return make_test([
        ('Physics', 'mcq_single', ['A'], 4, 1),
        ('Chemistry', 'mcq_single', ['B'], 4, 1),
        ('Mathematics', 'mcq_single', ['C'], 4, 1),
    ])


def question_ids(test):
    return [q.id for q in sorted(test.questions, key=lambda q: q.order_index)]
