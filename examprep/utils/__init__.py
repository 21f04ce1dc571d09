"""
Utils Package
"""
from examprep.utils.helpers import (
    now_utc,
    utc_to_local,
    format_local_date,
    get_current_student_id,
    require_student
)

__all__ = [
    'now_utc',
    'utc_to_local',
    'format_local_date',
    'get_current_student_id',
    'require_student'
]
