# seed_db.py
"""Create tables and a demo course / test with questions in every section"""
from examprep import create_app
from examprep.extensions import db
from examprep.models import Course, Test, Question

DEMO_QUESTIONS = [
    ('Physics', 'mcq_single', 'A body in uniform circular motion has constant...',
     {'A': 'velocity', 'B': 'speed', 'C': 'acceleration', 'D': 'momentum'}, ['B']),
    ('Physics', 'numeric', 'Acceleration due to gravity at the surface (m/s^2, 2 d.p.)',
     None, ['9.81']),
    ('Chemistry', 'mcq_multiple', 'Which of these are noble gases?',
     {'A': 'Neon', 'B': 'Nitrogen', 'C': 'Argon', 'D': 'Oxygen'}, ['A', 'C']),
    ('Chemistry', 'mcq_single', 'pH of pure water at 25 C is',
     {'A': '0', 'B': '7', 'C': '14', 'D': '1'}, ['B']),
    ('Mathematics', 'numeric', 'Value of the integral of 2x from 0 to 3',
     None, ['9']),
    ('Mathematics', 'comprehension', 'Based on the passage, pick every prime',
     {'A': '2', 'B': '4', 'C': '5', 'D': '9'}, ['A', 'C']),
]


def seed_database():
    app = create_app()

    with app.app_context():
        print(f"\n{'='*50}")
        print("SEEDING DEMO DATA")
        print(f"{'='*50}")

        if Test.query.filter_by(title='Demo JEE Mock 1').first():
            print("  - demo test exists, nothing to do")
            return

        course = Course(title='JEE Main Crash Course')
        db.session.add(course)
        db.session.flush()

        test = Test(course_id=course.id, title='Demo JEE Mock 1', duration_minutes=60)
        db.session.add(test)
        db.session.flush()

        for index, (section, qtype, text, options, correct) in enumerate(DEMO_QUESTIONS):
            question = Question(
                test_id=test.id,
                order_index=index,
                section=section,
                question_type=qtype,
                question_text=text,
                comprehension_passage=(
                    'A prime has exactly two divisors.' if qtype == 'comprehension' else None
                ),
                marks=4,
                negative_marks=1,
            )
            question.set_options(options)
            question.set_correct_answers(correct)
            db.session.add(question)

        db.session.commit()
        print(f"  ✅ Added test {test.id} with {len(DEMO_QUESTIONS)} questions")


if __name__ == '__main__':
    seed_database()
