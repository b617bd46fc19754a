import pytest
from datetime import datetime
from app import db
from app.models import Room
from app.services.availability_service import AvailabilityService
from app.errors import InvalidInput

@pytest.mark.parametrize('check_in, check_out', [
    (datetime(2024, 1, 3), datetime(2024, 1, 3)),
    (datetime(2024, 1, 4), datetime(2024, 1, 3)),
])
def test_degenerate_range_rejected(app, init_data, check_in, check_out):
    room = init_data[3]
    with pytest.raises(InvalidInput):
        AvailabilityService.is_room_free(room.id, check_in, check_out)

def test_overlap_is_half_open(app, init_data, make_booking):
    user, _, _, room, _ = init_data
    make_booking(user, room, datetime(2024, 1, 1), datetime(2024, 1, 4))

    assert AvailabilityService.is_room_free(room.id, datetime(2024, 1, 4), datetime(2024, 1, 6))
    assert AvailabilityService.is_room_free(room.id, datetime(2023, 12, 28), datetime(2024, 1, 1))
    assert not AvailabilityService.is_room_free(room.id, datetime(2024, 1, 3), datetime(2024, 1, 5))
    assert not AvailabilityService.is_room_free(room.id, datetime(2023, 12, 30), datetime(2024, 1, 10))

def test_cancelled_and_excluded_bookings_do_not_block(app, init_data, make_booking):
    user, _, _, room, _ = init_data
    make_booking(user, room, datetime(2024, 1, 1), datetime(2024, 1, 4), status='cancelled')
    own = make_booking(user, room, datetime(2024, 2, 1), datetime(2024, 2, 4))

    assert AvailabilityService.is_room_free(room.id, datetime(2024, 1, 2), datetime(2024, 1, 3))
    assert not AvailabilityService.is_room_free(room.id, datetime(2024, 2, 2), datetime(2024, 2, 3))
    assert AvailabilityService.is_room_free(room.id, datetime(2024, 2, 2), datetime(2024, 2, 3),
                                            exclude_booking_id=own.id)

def test_refresh_room_availability(app, init_data, make_booking):
    user, _, _, room, _ = init_data
    make_booking(user, room, datetime(2024, 1, 1), datetime(2024, 1, 4))

    assert AvailabilityService.refresh_room_availability(room.id, now=datetime(2024, 1, 2)) is False
    assert db.session.get(Room, room.id).is_available is False

    # Check-out day still counts as covered
    assert AvailabilityService.refresh_room_availability(room.id, now=datetime(2024, 1, 4)) is False
    assert AvailabilityService.refresh_room_availability(room.id, now=datetime(2024, 1, 5)) is True
    assert db.session.get(Room, room.id).is_available is True

def test_release_expired_rooms_keeps_rooms_with_future_stays(app, init_data, make_booking):
    user, _, _, room, suite = init_data
    now = datetime(2024, 3, 1)
    make_booking(user, room, datetime(2024, 1, 1), datetime(2024, 1, 4))
    make_booking(user, suite, datetime(2024, 1, 1), datetime(2024, 1, 4))
    make_booking(user, suite, datetime(2024, 3, 10), datetime(2024, 3, 12))
    room.is_available = False
    suite.is_available = False
    db.session.commit()

    released = AvailabilityService.release_expired_rooms(now=now)

    assert released == [room.id]
    assert db.session.get(Room, room.id).is_available is True
    assert db.session.get(Room, suite.id).is_available is False

def test_find_available_rooms(app, init_data, make_booking):
    user, _, _, room, suite = init_data
    make_booking(user, room, datetime(2024, 1, 1), datetime(2024, 1, 4))

    free = AvailabilityService.find_available_rooms(datetime(2024, 1, 2), datetime(2024, 1, 3))
    assert [r.id for r in free] == [suite.id]

    free = AvailabilityService.find_available_rooms(datetime(2024, 1, 5), datetime(2024, 1, 6), capacity=3)
    assert [r.id for r in free] == [suite.id]

    free = AvailabilityService.find_available_rooms(datetime(2024, 1, 5), datetime(2024, 1, 6), max_price=150)
    assert [r.id for r in free] == [room.id]

    suite.is_available = False
    db.session.commit()
    assert AvailabilityService.find_available_rooms(datetime(2024, 1, 2), datetime(2024, 1, 3)) == []
