"""
Attempt Model
One attempt per (test, student); read-only once submitted
"""
from examprep.extensions import db
from examprep.utils.helpers import now_utc
import json


class Attempt(db.Model):
    """Attempt model"""
    __tablename__ = 'attempt'

    id = db.Column(db.Integer, primary_key=True)
    test_id = db.Column(db.Integer, db.ForeignKey('test.id'), nullable=False, index=True)
    student_id = db.Column(db.String(64), nullable=False, index=True)

    # Snapshot of question ids, fixed at creation
    question_order = db.Column(db.Text, nullable=False, default='[]')

    is_submitted = db.Column(db.Boolean, nullable=False, default=False)
    total_marks = db.Column(db.Float, nullable=False, default=0)
    obtained_marks = db.Column(db.Float, nullable=False, default=0)
    time_spent_seconds = db.Column(db.Integer, nullable=False, default=0)

    started_at = db.Column(db.DateTime, default=now_utc)
    updated_at = db.Column(db.DateTime, default=now_utc)
    submitted_at = db.Column(db.DateTime)

    # Relationships
    test = db.relationship('Test', lazy=True)
    answers = db.relationship(
        'Answer', backref='attempt', lazy=True,
        cascade='all, delete-orphan'
    )

    __table_args__ = (
        db.UniqueConstraint(
            'test_id', 'student_id',
            name='unique_attempt_per_student'
        ),
    )

    def __repr__(self):
        return f'<Attempt {self.id} T{self.test_id} by {self.student_id}>'

    def get_question_order(self):
        try:
            return [int(qid) for qid in json.loads(self.question_order or '[]')]
        except (TypeError, ValueError):
            return []

    def set_question_order(self, question_ids):
        self.question_order = json.dumps([int(qid) for qid in question_ids])

    @property
    def percentage(self):
        from examprep.services.grading import percentage_of
        return percentage_of(self.obtained_marks, self.total_marks)

    def to_dict(self):
        return {
            'id': self.id,
            'test_id': self.test_id,
            'student_id': self.student_id,
            'question_order': self.get_question_order(),
            'is_submitted': self.is_submitted,
            'total_marks': self.total_marks,
            'obtained_marks': self.obtained_marks,
            'time_spent_seconds': self.time_spent_seconds,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'submitted_at': self.submitted_at.isoformat() if self.submitted_at else None,
        }
