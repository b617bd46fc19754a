from app.models.user import User
from app.models.room import Room
from app.models.booking import Booking, BOOKING_STATUSES, PAYMENT_STATUSES
from app.models.hotel import Hotel, HOTEL_ID
from app.models.payment_audit_log import PaymentAuditLog

__all__ = ['User', 'Room', 'Booking', 'Hotel', 'PaymentAuditLog',
           'BOOKING_STATUSES', 'PAYMENT_STATUSES', 'HOTEL_ID']
