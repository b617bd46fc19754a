from app.extensions import db
from app.models.base import TimestampMixin, new_object_id, isoformat

BOOKING_STATUSES = ('pending', 'confirmed', 'cancelled')
PAYMENT_STATUSES = ('pending', 'processing', 'paid', 'failed')

class Booking(TimestampMixin, db.Model):
    __tablename__ = 'bookings'

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    user_id = db.Column(db.String(24), db.ForeignKey('users.id'), nullable=False, index=True)
    room_id = db.Column(db.String(24), db.ForeignKey('rooms.id'), nullable=False, index=True)

    check_in = db.Column(db.DateTime, nullable=False, index=True)
    check_out = db.Column(db.DateTime, nullable=False, index=True)  # exclusive
    total_price = db.Column(db.Float, nullable=False)

    status = db.Column(db.String(20), default='confirmed', nullable=False)
    payment_status = db.Column(db.String(20), default='pending', nullable=False)

    full_name = db.Column(db.String(128))
    phone_number = db.Column(db.String(32))
    email = db.Column(db.String(255))
    notes = db.Column(db.Text)

    # Filled in by payment reconciliation
    zp_transaction_id = db.Column(db.String(64))
    paid_amount = db.Column(db.Float)
    discount_amount = db.Column(db.Float)
    payment_error = db.Column(db.String(255))

    user = db.relationship('User', backref=db.backref('bookings', lazy=True, cascade='all, delete-orphan'))
    room = db.relationship('Room', backref=db.backref('bookings', lazy=True, cascade='all, delete-orphan'))

    __table_args__ = (
        db.CheckConstraint('check_in < check_out', name='check_booking_range'),
    )

    @property
    def is_active(self):
        return self.status != 'cancelled'

    def to_dict(self):
        return {
            'id': self.id,
            'user': {
                'id': self.user.id,
                'name': self.user.name,
                'email': self.user.email
            } if self.user else self.user_id,
            'room': self.room.summary() if self.room else self.room_id,
            'checkIn': isoformat(self.check_in),
            'checkOut': isoformat(self.check_out),
            'totalPrice': self.total_price,
            'status': self.status,
            'paymentStatus': self.payment_status,
            'fullName': self.full_name,
            'phoneNumber': self.phone_number,
            'email': self.email,
            'notes': self.notes,
            'zpTransactionId': self.zp_transaction_id,
            'paidAmount': self.paid_amount,
            'discountAmount': self.discount_amount,
            'paymentError': self.payment_error,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at)
        }
