"""Conversions to and from the remote API's local time zone."""
from datetime import datetime, timezone as dt_timezone
from zoneinfo import ZoneInfo

from django.conf import settings

API_DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S.000'


def api_timezone() -> ZoneInfo:
    return ZoneInfo(getattr(settings, 'INTEGRITYADVOCATE_API_TIMEZONE', 'America/Edmonton'))


def to_api_timezone(value: datetime) -> str:
    """Format an aware datetime as the API expects, e.g. '2024-03-01 09:15:00.000'."""
    if value.tzinfo is None:
        raise ValueError('to_api_timezone() needs an aware datetime')
    return value.astimezone(api_timezone()).strftime(API_DATETIME_FORMAT)


def from_api_timezone(value) -> datetime:
    """
    Parse a datetime the API sent back into an aware UTC datetime.
    Accepts unix timestamps as well as API-zone strings with or without fractional seconds.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=dt_timezone.utc)
    text = str(value).strip()
    if text.isdigit():
        return datetime.fromtimestamp(int(text), tz=dt_timezone.utc)
    text = text.replace('T', ' ')
    for fmt in ('%Y-%m-%d %H:%M:%S.%f', '%Y-%m-%d %H:%M:%S'):
        try:
            parsed = datetime.strptime(text, fmt)
            break
        except ValueError:
            continue
    else:
        raise ValueError(f"Unrecognised API datetime {value!r}")
    return parsed.replace(tzinfo=api_timezone()).astimezone(dt_timezone.utc)
