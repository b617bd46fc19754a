import logging
from datetime import datetime

from flask import current_app

from app.extensions import db
from app.models import Room, Booking, BOOKING_STATUSES, PAYMENT_STATUSES
from app.errors import InvalidInput, NotFound, Conflict, Forbidden
from app.services.availability_service import AvailabilityService
from app.utils.dates import utcnow, parse_date, parse_stay, count_nights
from app.utils.validators import validate_email, validate_phone, validate_choice
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)

# API field -> model attribute, for everything an update may touch
UPDATABLE_FIELDS = {
    'checkIn': 'check_in',
    'checkOut': 'check_out',
    'status': 'status',
    'paymentStatus': 'payment_status',
    'fullName': 'full_name',
    'phoneNumber': 'phone_number',
    'email': 'email',
    'notes': 'notes',
}

CONTACT_FIELDS = ('fullName', 'phoneNumber', 'email', 'notes')


class BookingService:

    @staticmethod
    def calculate_total_price(room: Room, check_in: datetime, check_out: datetime) -> float:
        return count_nights(check_in, check_out) * room.price

    @staticmethod
    def clean_contact_info(data: dict) -> dict:
        """Validate the optional contact block and map it onto model attributes."""
        contact = {}
        for field in CONTACT_FIELDS:
            value = data.get(field)
            if value is None or value == '':
                continue
            if field == 'email':
                value = validate_email(value)
            elif field == 'phoneNumber':
                value = validate_phone(value)
            contact[UPDATABLE_FIELDS[field]] = value
        return contact

    @staticmethod
    def get_booking(booking_id) -> Booking:
        booking = db.session.get(Booking, booking_id) if booking_id else None
        if not booking:
            raise NotFound(f"No booking found with ID: {booking_id}")
        return booking

    @staticmethod
    def create_booking(user, room_id, check_in, check_out, contact_info=None, now: datetime = None):
        """
        Main entry point to book a room.

        The room row is locked for the duration of the overlap check and the
        insert, so two requests for the same room are serialized.
        """
        # 1. Dates
        check_in, check_out = parse_stay(check_in, check_out)
        contact = BookingService.clean_contact_info(contact_info or {})

        if not room_id:
            raise InvalidInput("roomId is required")

        # 2. Room
        room = db.session.get(Room, room_id, with_for_update=True)
        if not room:
            raise NotFound("Room not found")
        if not room.is_available:
            db.session.rollback()
            raise Conflict("This room is not available for booking")

        # 3. Overlap
        if not AvailabilityService.is_room_free(room.id, check_in, check_out):
            db.session.rollback()
            raise Conflict("Room is already booked for the selected dates")

        # 4. Transaction
        booking = Booking(
            user_id=user.id,
            room_id=room.id,
            check_in=check_in,
            check_out=check_out,
            total_price=BookingService.calculate_total_price(room, check_in, check_out),
            status='confirmed',
            payment_status='pending',
            **contact
        )
        db.session.add(booking)
        room.is_available = False
        db.session.commit()
        logger.info("Booking %s created for room %s (%s -> %s)",
                    booking.id, room.number, check_in.date(), check_out.date())

        # 5. Housekeeping; a failure here does not undo the booking
        if current_app.config.get('SWEEP_ON_CREATE', True):
            try:
                AvailabilityService.release_expired_rooms(now=now)
            except Exception:
                db.session.rollback()
                logger.exception("Room availability sweep failed after booking %s", booking.id)

        return booking

    @staticmethod
    def update_booking(booking_id, updates: dict, now: datetime = None):
        """Admin update. Unknown fields are dropped."""
        updates = {k: v for k, v in (updates or {}).items() if k in UPDATABLE_FIELDS}

        if 'status' in updates:
            validate_choice(updates['status'], BOOKING_STATUSES, 'status')
        if 'paymentStatus' in updates:
            validate_choice(updates['paymentStatus'], PAYMENT_STATUSES, 'payment status')
        contact = BookingService.clean_contact_info(updates)

        booking = BookingService.get_booking(booking_id)
        # Serialize with bookings being created for the same room
        db.session.get(Room, booking.room_id, with_for_update=True)

        new_status = updates.get('status', booking.status)
        if booking.status == 'cancelled' and new_status != 'cancelled':
            raise Conflict("Cancelled bookings cannot be reactivated")

        fields = dict(contact)
        if 'status' in updates:
            fields['status'] = new_status
        if 'paymentStatus' in updates:
            fields['payment_status'] = updates['paymentStatus']

        if 'checkIn' in updates or 'checkOut' in updates:
            check_in = parse_date(updates['checkIn'], 'checkIn') if 'checkIn' in updates else booking.check_in
            check_out = parse_date(updates['checkOut'], 'checkOut') if 'checkOut' in updates else booking.check_out
            if check_in >= check_out:
                raise InvalidInput("Check-in date must be before check-out date")

            if new_status != 'cancelled' and not AvailabilityService.is_room_free(
                    booking.room_id, check_in, check_out, exclude_booking_id=booking.id):
                db.session.rollback()
                raise Conflict("Room is not available for the selected dates")

            fields['check_in'] = check_in
            fields['check_out'] = check_out
            # Priced at the room's current rate
            fields['total_price'] = BookingService.calculate_total_price(booking.room, check_in, check_out)

        for attr, value in fields.items():
            setattr(booking, attr, value)
        db.session.commit()
        logger.info("Booking %s updated: %s", booking.id, ', '.join(sorted(fields)) or 'no changes')

        AvailabilityService.refresh_room_availability(booking.room_id, now=now)
        return booking

    @staticmethod
    def cancel_booking(booking_id, user_id, now: datetime = None):
        """Cancel a booking on behalf of its owner, before the stay starts."""
        now = now or utcnow()
        booking = BookingService.get_booking(booking_id)

        if booking.user_id != user_id:
            raise Forbidden("You are not allowed to cancel this booking")
        if booking.status == 'cancelled':
            raise Conflict("Booking is already cancelled")
        if now >= booking.check_in:
            raise Conflict("Cannot cancel a booking after the check-in date")

        booking.status = 'cancelled'
        db.session.commit()
        logger.info("Booking %s cancelled by user %s", booking.id, user_id)

        AvailabilityService.refresh_room_availability(booking.room_id, now=now)
        return booking

    @staticmethod
    def delete_booking(booking_id, now: datetime = None):
        booking = BookingService.get_booking(booking_id)
        room_id = booking.room_id

        db.session.delete(booking)
        db.session.commit()
        logger.info("Booking %s deleted", booking_id)

        AvailabilityService.refresh_room_availability(room_id, now=now)

    @staticmethod
    def list_bookings(page=1, limit=10):
        """All bookings, newest first, with a pagination block."""
        return paginate(db.select(Booking).order_by(Booking.created_at.desc()), page, limit)

    @staticmethod
    def get_user_bookings(user_id):
        return Booking.query.filter(Booking.user_id == user_id) \
            .order_by(Booking.created_at.desc()).all()
