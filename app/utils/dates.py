import math
from datetime import datetime, timezone, timedelta

from app.errors import InvalidInput

DAY = timedelta(days=1)


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every datetime column is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_date(value, field='date') -> datetime:
    """
    Parse an API date ('YYYY-MM-DD' or full ISO 8601) into naive UTC.
    Plain dates resolve to midnight UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        if not value or not isinstance(value, str):
            raise InvalidInput(f"Invalid {field}. Please use YYYY-MM-DD format")
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidInput(f"Invalid {field}. Please use YYYY-MM-DD format")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_stay(check_in, check_out):
    """Parse and validate a [check_in, check_out) stay."""
    check_in_dt = parse_date(check_in, 'checkIn')
    check_out_dt = parse_date(check_out, 'checkOut')
    if check_in_dt >= check_out_dt:
        raise InvalidInput("Check-in date must be before check-out date")
    return check_in_dt, check_out_dt


def count_nights(check_in: datetime, check_out: datetime) -> int:
    return math.ceil((check_out - check_in) / DAY)
