import logging
from datetime import datetime

from app.extensions import db
from app.models import Room, Booking
from app.errors import InvalidInput
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)

class AvailabilityService:

    @staticmethod
    def overlapping(room_id, check_in: datetime, check_out: datetime, exclude_booking_id=None):
        """Query for active bookings on the room overlapping [check_in, check_out)."""
        # (StartA < EndB) and (EndA > StartB)
        query = Booking.query.filter(
            Booking.room_id == room_id,
            Booking.status != 'cancelled',
            Booking.check_in < check_out,
            Booking.check_out > check_in
        )
        if exclude_booking_id is not None:
            query = query.filter(Booking.id != exclude_booking_id)
        return query

    @staticmethod
    def is_room_free(room_id, check_in: datetime, check_out: datetime, exclude_booking_id=None) -> bool:
        """Check if room is free during the stay."""
        if check_in is None or check_out is None or check_in >= check_out:
            raise InvalidInput("Check-in date must be before check-out date")

        conflict = AvailabilityService.overlapping(
            room_id, check_in, check_out, exclude_booking_id
        ).first()
        return conflict is None

    @staticmethod
    def room_is_occupied(room_id, now: datetime = None) -> bool:
        """True if an active booking on the room covers ``now``."""
        now = now or utcnow()
        occupied = Booking.query.filter(
            Booking.room_id == room_id,
            Booking.status != 'cancelled',
            Booking.check_in <= now,
            Booking.check_out >= now
        ).first()
        return occupied is not None

    @staticmethod
    def refresh_room_availability(room_id, now: datetime = None, commit=True):
        """Re-derive room.is_available from the bookings covering ``now``."""
        room = db.session.get(Room, room_id)
        if room is None:
            return None

        available = not AvailabilityService.room_is_occupied(room_id, now)
        if room.is_available != available:
            logger.debug("Room %s availability %s -> %s", room.number, room.is_available, available)
            room.is_available = available
        if commit:
            db.session.commit()
        return available

    @staticmethod
    def release_expired_rooms(now: datetime = None, commit=True):
        """
        Sweep: free every room whose confirmed bookings have all ended.

        A room stays unavailable while any confirmed booking on it has not
        checked out yet. Returns the ids of the rooms that were released.
        """
        now = now or utcnow()

        ended_room_ids = [
            row[0] for row in db.session.query(Booking.room_id).filter(
                Booking.status == 'confirmed',
                Booking.check_out < now
            ).distinct()
        ]

        released = []
        for room_id in ended_room_ids:
            still_booked = Booking.query.filter(
                Booking.room_id == room_id,
                Booking.status == 'confirmed',
                Booking.check_out > now
            ).first()
            if still_booked:
                continue

            room = db.session.get(Room, room_id)
            if room is not None and not room.is_available:
                room.is_available = True
                released.append(room_id)

        if released:
            logger.info("Released %d room(s) with ended bookings", len(released))
        if commit:
            db.session.commit()
        return released

    @staticmethod
    def find_available_rooms(check_in: datetime, check_out: datetime, capacity=None,
                             min_price=None, max_price=None):
        """Rooms marked available with no active booking overlapping the stay."""
        if check_in >= check_out:
            raise InvalidInput("Check-in date must be before check-out date")

        booked_room_ids = db.select(Booking.room_id).where(
            Booking.status != 'cancelled',
            Booking.check_in < check_out,
            Booking.check_out > check_in
        ).distinct()

        query = Room.query.filter(
            Room.is_available.is_(True),
            Room.id.notin_(booked_room_ids)
        )
        if capacity:
            query = query.filter(Room.capacity >= capacity)
        if min_price is not None:
            query = query.filter(Room.price >= min_price)
        if max_price is not None:
            query = query.filter(Room.price <= max_price)

        # Best fit first
        return query.order_by(Room.capacity, Room.price).all()
