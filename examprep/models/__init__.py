"""
Models Package
Exports all database models
"""
from examprep.models.course import Course
from examprep.models.test import Test
from examprep.models.question import Question, SECTIONS, QUESTION_TYPES
from examprep.models.attempt import Attempt
from examprep.models.answer import Answer

__all__ = ['Course', 'Test', 'Question', 'Attempt', 'Answer', 'SECTIONS', 'QUESTION_TYPES']
