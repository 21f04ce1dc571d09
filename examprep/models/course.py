"""
Course Model
Courses group the tests a student can enroll into
"""
from examprep.extensions import db
from examprep.utils.helpers import now_utc


class Course(db.Model):
    """Course model"""
    __tablename__ = 'course'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=now_utc)

    # Relationships
    tests = db.relationship('Test', backref='course', lazy=True)

    def __repr__(self):
        return f'<Course {self.title}>'
