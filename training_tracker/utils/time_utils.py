import pytz
from datetime import datetime

from training_tracker.config import Config

def get_local_time():
    """
    Returns the current time in the configured timezone (Config.TIMEZONE) as a naive datetime.
    """
    return datetime.now(pytz.timezone(Config.TIMEZONE)).replace(tzinfo=None)

def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to the configured timezone and drop tzinfo; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(pytz.timezone(Config.TIMEZONE)).replace(tzinfo=None)
