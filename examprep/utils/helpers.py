"""
Helper Functions
Utility functions used across the application
"""
from datetime import datetime, timezone
from flask import session
from functools import wraps
import pytz

from examprep.errors import Unauthorized


def now_utc():
    """Get current UTC timestamp"""
    return datetime.now(timezone.utc)


def utc_to_local(utc_dt, tz_name='Asia/Kolkata'):
    """Convert a UTC datetime to the exam timezone for display"""
    if not utc_dt:
        return None
    local_tz = pytz.timezone(tz_name)
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=pytz.utc)
    return utc_dt.astimezone(local_tz)


def format_local_date(utc_dt, tz_name='Asia/Kolkata'):
    """Date string (YYYY-MM-DD) in the exam timezone"""
    local_dt = utc_to_local(utc_dt, tz_name)
    return local_dt.strftime('%Y-%m-%d') if local_dt else None


def get_current_student_id():
    """Student id placed in the session by the identity provider"""
    user_id = session.get('user_id')
    if user_id in (None, '', -1):
        return None
    return str(user_id)


# Decorators
def require_student(f):
    """
    Decorator to require an authenticated session
    Raises Unauthorized (401 JSON) instead of redirecting
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if get_current_student_id() is None:
            raise Unauthorized()
        return f(*args, **kwargs)
    return decorated_function
