"""
Test Model
A timed, multi-section paper inside a course
"""
from examprep.extensions import db
from examprep.utils.helpers import now_utc


class Test(db.Model):
    """Test model"""
    __tablename__ = 'test'
    __test__ = False  # keep pytest from collecting the model

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey('course.id'), nullable=True)
    title = db.Column(db.String(200), nullable=False)
    duration_minutes = db.Column(db.Integer, nullable=False, default=180)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=now_utc)

    # Relationships
    questions = db.relationship(
        'Question', backref='test', lazy=True,
        order_by='Question.order_index'
    )

    def __repr__(self):
        return f'<Test {self.title}>'

    @property
    def total_marks(self):
        """Sum of marks over every question of the test"""
        return sum(q.marks or 0 for q in self.questions)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'duration_minutes': self.duration_minutes,
            'total_marks': self.total_marks,
            'course': {'title': self.course.title} if self.course else None,
        }
