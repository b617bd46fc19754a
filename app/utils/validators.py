import re

from app.errors import InvalidInput

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$')
PHONE_RE = re.compile(r'^\+?\d{9,15}$')
OBJECT_ID_RE = re.compile(r'^[0-9a-fA-F]{24}$')


def validate_email(email):
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        raise InvalidInput("Invalid email address")
    return email.strip()


def validate_phone(phone):
    if not isinstance(phone, str):
        raise InvalidInput("Invalid phone number")
    # Allow common separators, e.g. "0901 234-567"
    compact = re.sub(r'[\s\-().]', '', phone)
    if not PHONE_RE.match(compact):
        raise InvalidInput("Invalid phone number")
    return compact


def validate_choice(value, choices, field):
    if value not in choices:
        raise InvalidInput(f"Invalid {field}. Must be one of: {', '.join(choices)}")
    return value


def is_object_id(value) -> bool:
    return isinstance(value, str) and bool(OBJECT_ID_RE.match(value))


def parse_positive_number(value, field, cast=float):
    try:
        number = cast(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be a number")
    if number <= 0:
        raise InvalidInput(f"{field} must be greater than 0")
    return number


def parse_pagination(args, default_limit):
    """Read ?page&limit, falling back to defaults on junk values."""
    try:
        page = int(args.get('page', 1))
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(args.get('limit', default_limit))
    except (TypeError, ValueError):
        limit = default_limit
    return max(page, 1), max(limit, 1)
