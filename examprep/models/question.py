"""
Question Model
Options and correct answers are stored as JSON text
"""
from examprep.extensions import db
import json

SECTIONS = ('Physics', 'Chemistry', 'Mathematics')
QUESTION_TYPES = ('mcq_single', 'mcq_multiple', 'numeric', 'comprehension')


class Question(db.Model):
    """Question model"""
    __tablename__ = 'question'

    id = db.Column(db.Integer, primary_key=True)
    test_id = db.Column(db.Integer, db.ForeignKey('test.id'), nullable=False, index=True)
    order_index = db.Column(db.Integer, default=0)

    # Physics, Chemistry or Mathematics
    section = db.Column(db.String(20), nullable=False)

    # mcq_single, mcq_multiple, numeric, comprehension
    question_type = db.Column(db.String(20), nullable=False, default='mcq_single')

    question_text = db.Column(db.Text, nullable=False)
    comprehension_passage = db.Column(db.Text)

    # {"A": "...", "B": "..."}; NULL for numeric questions
    options = db.Column(db.Text)

    # ["A", "C"] or ["9.81"] for numeric questions
    correct_answers = db.Column(db.Text, nullable=False, default='[]')

    # Scoring
    marks = db.Column(db.Float, nullable=False, default=4.0)
    negative_marks = db.Column(db.Float, nullable=False, default=1.0)

    def __repr__(self):
        return f'<Question {self.id} [{self.section}/{self.question_type}]>'

    def get_options(self):
        """Get options as a key -> text dict"""
        if not self.options:
            return {}
        try:
            return json.loads(self.options)
        except ValueError:
            return {}

    def set_options(self, options):
        self.options = json.dumps(options) if options else None

    def get_correct_answers(self):
        """Get correct answers as list"""
        if not self.correct_answers:
            return []
        try:
            answers = json.loads(self.correct_answers)
        except ValueError:
            return []
        if not isinstance(answers, list):
            answers = [answers]
        return [str(ans) for ans in answers]

    def set_correct_answers(self, answers):
        if not isinstance(answers, (list, tuple)):
            answers = [answers]
        self.correct_answers = json.dumps([str(ans) for ans in answers])

    def to_dict(self):
        """Question payload for the test-taking client (no correct answers)"""
        return {
            'id': self.id,
            'section': self.section,
            'question_type': self.question_type,
            'question_text': self.question_text,
            'comprehension_passage': self.comprehension_passage,
            'options': self.get_options() or None,
            'marks': self.marks,
            'negative_marks': self.negative_marks,
            'order_index': self.order_index,
        }
