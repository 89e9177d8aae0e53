from datetime import timedelta

from django.utils import timezone


def today():
    """Current calendar date in the configured time zone."""
    return timezone.localdate()


def days_from(start, days: int):
    return start + timedelta(days=days)


def local_date(dt):
    return timezone.localdate(dt)
