from app.extensions import db
from app.models.base import new_object_id, isoformat
from app.utils.dates import utcnow

class PaymentAuditLog(db.Model):
    """Gateway events that were acknowledged but could not be applied."""
    __tablename__ = 'payment_audit_logs'

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    source = db.Column(db.String(20), nullable=False)  # callback, query
    order_id = db.Column(db.String(64))
    zp_transaction_id = db.Column(db.String(64))
    reason = db.Column(db.String(255), nullable=False)
    payload = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'source': self.source,
            'orderId': self.order_id,
            'zpTransactionId': self.zp_transaction_id,
            'reason': self.reason,
            'payload': self.payload,
            'createdAt': isoformat(self.created_at)
        }
