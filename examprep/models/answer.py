"""
Answer Model
Stores the student's selection for one question of an attempt
"""
from examprep.extensions import db
from examprep.utils.helpers import now_utc
import json


class Answer(db.Model):
    """Answer model"""
    __tablename__ = 'answer'

    id = db.Column(db.Integer, primary_key=True)
    attempt_id = db.Column(db.Integer, db.ForeignKey('attempt.id'), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey('question.id'), nullable=False, index=True)

    selected_answers = db.Column(db.Text, nullable=False, default='[]')
    is_correct = db.Column(db.Boolean, nullable=False, default=False)
    marks_awarded = db.Column(db.Float, nullable=False, default=0)
    is_marked_for_review = db.Column(db.Boolean, nullable=False, default=False)
    time_spent_seconds = db.Column(db.Integer, nullable=False, default=0)
    answered_at = db.Column(db.DateTime)
    updated_at = db.Column(db.DateTime, default=now_utc)

    # Bumped on every accepted write; stale writes are rejected
    version = db.Column(db.Integer, nullable=False, default=0)

    question = db.relationship('Question', lazy=True)

    __table_args__ = (
        db.UniqueConstraint(
            'attempt_id', 'question_id',
            name='unique_answer_per_question'
        ),
    )

    def __repr__(self):
        return f'<Answer Q{self.question_id} in attempt {self.attempt_id}>'

    def get_selected_answers(self):
        try:
            selected = json.loads(self.selected_answers or '[]')
        except ValueError:
            return []
        if not isinstance(selected, list):
            selected = [selected]
        return [str(s) for s in selected]

    def set_selected_answers(self, selected):
        self.selected_answers = json.dumps([str(s) for s in (selected or [])])

    def to_dict(self):
        """Resumable answer state in the client's shape"""
        return {
            'questionId': self.question_id,
            'selectedAnswers': self.get_selected_answers(),
            'isMarkedForReview': self.is_marked_for_review,
            'timeSpent': self.time_spent_seconds,
            'version': self.version,
        }
