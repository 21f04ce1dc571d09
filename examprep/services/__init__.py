"""
Services Package
"""
from examprep.services.attempt_service import AttemptService
from examprep.services.result_service import ResultService
from examprep.services.analytics_service import AnalyticsService

__all__ = ['AttemptService', 'ResultService', 'AnalyticsService']
