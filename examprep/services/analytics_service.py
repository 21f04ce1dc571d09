"""
Analytics Service
Performance history across a student's submitted attempts
"""
from flask import current_app

from examprep.extensions import db
from examprep.models import Answer, Attempt, Question, SECTIONS, QUESTION_TYPES
from examprep.services.grading import percentage_of, raw_percentage_of, round_half_up
from examprep.utils import format_local_date

STRENGTH_THRESHOLD = 80
WEAKNESS_THRESHOLD = 60
DECLINE_THRESHOLD = -5


def _mean(values):
    values = list(values)
    if not values:
        return 0
    return sum(values) / len(values)


def empty_performance():
    return {
        'overallStats': {
            'totalTests': 0,
            'averageScore': 0,
            'bestScore': 0,
            'totalTimeSpent': 0,
            'improvementTrend': 0,
        },
        'sectionWisePerformance': [],
        'recentTests': [],
        'timeAnalysis': [],
        'strengthsWeaknesses': {
            'strengths': [],
            'weaknesses': [],
            'recommendations': [],
        },
    }


class AnalyticsService:
    """Student performance analytics"""

    @staticmethod
    def improvement_trend(percentages):
        """
        Mean of the 3 newest percentages minus the mean of the 3 before them

        percentages must be ordered newest first; 0 with fewer than 6.
        """
        if len(percentages) < 6:
            return 0
        recent = _mean(percentages[:3])
        previous = _mean(percentages[3:6])
        return round_half_up(recent - previous)

    @staticmethod
    def section_performance(rows):
        """rows: (Answer, Question) pairs"""
        performance = []
        for section in SECTIONS:
            section_rows = [(a, q) for a, q in rows if q.section == section]
            total = len(section_rows)
            correct = sum(1 for a, _ in section_rows if a.is_correct)
            performance.append({
                'section': section,
                'averageScore': round_half_up(correct / total * 100) if total else 0,
                'totalQuestions': total,
                'correctAnswers': correct,
                'averageTime': round_half_up(
                    _mean(a.time_spent_seconds or 0 for a, _ in section_rows)
                ),
            })
        return performance

    @staticmethod
    def time_analysis(rows):
        analysis = []
        for question_type in QUESTION_TYPES:
            type_rows = [(a, q) for a, q in rows if q.question_type == question_type]
            total = len(type_rows)
            correct = sum(1 for a, _ in type_rows if a.is_correct)
            analysis.append({
                'questionType': question_type.replace('_', ' ').upper(),
                'averageTime': round_half_up(
                    _mean(a.time_spent_seconds or 0 for a, _ in type_rows)
                ),
                'accuracy': round_half_up(correct / total * 100) if total else 0,
            })
        return analysis

    @staticmethod
    def strengths_weaknesses(section_performance, average_score, trend,
                             average_time_per_question, slow_seconds=120):
        strengths = []
        weaknesses = []
        recommendations = []

        for section in section_performance:
            if section['averageScore'] >= STRENGTH_THRESHOLD:
                strengths.append(f"Strong performance in {section['section']}")
            elif section['averageScore'] < WEAKNESS_THRESHOLD:
                weaknesses.append(f"Needs improvement in {section['section']}")
                recommendations.append(f"Focus more practice on {section['section']} concepts")

        if average_score >= STRENGTH_THRESHOLD:
            strengths.append('Consistently high performance across tests')

        if trend > 0:
            strengths.append('Showing positive improvement trend')
        elif trend < DECLINE_THRESHOLD:
            weaknesses.append('Recent performance decline')
            recommendations.append('Review recent test mistakes and practice more')

        if average_time_per_question > slow_seconds:
            weaknesses.append('Taking too much time per question')
            recommendations.append('Practice time management and quick problem-solving techniques')

        return {
            'strengths': strengths or ['Keep practicing to build strengths'],
            'weaknesses': weaknesses or ['No major weaknesses identified'],
            'recommendations': recommendations or ['Continue regular practice'],
        }

    @staticmethod
    def build_performance(student_id):
        """Aggregate history across all of a student's submitted attempts"""
        attempts = Attempt.query.filter_by(
            student_id=student_id, is_submitted=True
        ).order_by(Attempt.submitted_at.desc(), Attempt.id.desc()).all()

        if not attempts:
            return empty_performance()

        # Averages and trend use unrounded percentages and round once
        raw_percentages = [raw_percentage_of(a.obtained_marks or 0, a.total_marks) for a in attempts]
        percentages = [percentage_of(a.obtained_marks or 0, a.total_marks) for a in attempts]
        total_tests = len(attempts)
        average_score = round_half_up(_mean(raw_percentages))
        best_score = max(percentages)
        total_time = sum(a.time_spent_seconds or 0 for a in attempts)
        trend = AnalyticsService.improvement_trend(raw_percentages)

        rows = db.session.query(Answer, Question).join(
            Question, Answer.question_id == Question.id
        ).filter(
            Answer.attempt_id.in_([a.id for a in attempts])
        ).all()

        section_performance = AnalyticsService.section_performance(rows)

        tz_name = current_app.config.get('TIMEZONE', 'Asia/Kolkata')
        recent_tests = [
            {
                'attemptId': attempt.id,
                'testTitle': attempt.test.title if attempt.test else 'Test',
                'score': attempt.obtained_marks or 0,
                'percentage': percentage,
                'date': format_local_date(attempt.submitted_at, tz_name),
                'timeSpent': attempt.time_spent_seconds or 0,
            }
            for attempt, percentage in list(zip(attempts, percentages))[:10]
        ]

        average_time_per_question = total_time / len(rows) if rows else 0

        return {
            'overallStats': {
                'totalTests': total_tests,
                'averageScore': average_score,
                'bestScore': best_score,
                'totalTimeSpent': total_time,
                'improvementTrend': trend,
            },
            'sectionWisePerformance': section_performance,
            'recentTests': recent_tests,
            'timeAnalysis': AnalyticsService.time_analysis(rows),
            'strengthsWeaknesses': AnalyticsService.strengths_weaknesses(
                section_performance,
                average_score,
                trend,
                average_time_per_question,
                slow_seconds=current_app.config.get('SLOW_QUESTION_SECONDS', 120),
            ),
        }
