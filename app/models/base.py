import secrets

from app.extensions import db
from app.utils.dates import utcnow


def new_object_id() -> str:
    """24-char hex id, the same shape the payment callback accepts as an orderId."""
    return secrets.token_hex(12)


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)


def isoformat(value):
    return value.isoformat() if value else None
