import json
import threading
import time
from datetime import datetime
from unittest.mock import patch, MagicMock

from app import db
from app.models import User, Room, Booking
from app.errors import Conflict
from app.services.availability_service import AvailabilityService
from app.services.booking_service import BookingService
from app.services.payment_service import PaymentService
from app.services.zalopay_client import sign

NOW = datetime(2029, 12, 1)


def seed(app):
    user = User(name='Guest', email='guest@test.com', role='user')
    other = User(name='Other', email='other@test.com', role='user')
    room = Room(type='Standard', number='101', price=100, capacity=2, amenities=[], images=[])
    db.session.add_all([user, other, room])
    db.session.commit()
    ids = user.id, other.id, room.id
    # Release the connection so worker threads are not blocked behind it
    db.session.remove()
    return ids


def run_in_threads(app, *targets, stagger=0.0):
    errors = []

    def runner(target):
        with app.app_context():
            try:
                target()
            except Exception as e:
                errors.append(e)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=runner, args=(t,)) for t in targets]
    for thread in threads:
        thread.start()
        time.sleep(stagger)
    for thread in threads:
        thread.join(timeout=30)
    return errors


def test_concurrent_bookings_for_same_room(file_app):
    user_id, other_id, room_id = seed(file_app)
    outcomes = []
    original = AvailabilityService.is_room_free

    def slow_is_room_free(*args, **kwargs):
        # Hold the check open long enough for the other request to arrive
        time.sleep(0.2)
        return original(*args, **kwargs)

    def book(who):
        def _book():
            user = db.session.get(User, who)
            try:
                BookingService.create_booking(user, room_id, '2030-01-10', '2030-01-13', now=NOW)
                outcomes.append('created')
            except Conflict:
                outcomes.append('conflict')
        return _book

    with patch.object(AvailabilityService, 'is_room_free', side_effect=slow_is_room_free):
        errors = run_in_threads(file_app, book(user_id), book(other_id))

    assert errors == []
    assert sorted(outcomes) == ['conflict', 'created']
    assert Booking.query.filter(Booking.room_id == room_id, Booking.status != 'cancelled').count() == 1

def test_update_cannot_move_into_booked_dates_concurrently(file_app):
    user_id, other_id, room_id = seed(file_app)
    existing = Booking(user_id=other_id, room_id=room_id, check_in=datetime(2030, 2, 1),
                       check_out=datetime(2030, 2, 3), total_price=200)
    db.session.add(existing)
    db.session.commit()
    existing_id = existing.id
    db.session.remove()

    outcomes = []
    original = AvailabilityService.is_room_free

    def slow_is_room_free(*args, **kwargs):
        time.sleep(0.2)
        return original(*args, **kwargs)

    def move_existing():
        try:
            BookingService.update_booking(existing_id, {'checkIn': '2030-01-10', 'checkOut': '2030-01-13'}, now=NOW)
            outcomes.append('moved')
        except Conflict:
            outcomes.append('conflict')

    def book():
        user = db.session.get(User, user_id)
        try:
            BookingService.create_booking(user, room_id, '2030-01-11', '2030-01-12', now=NOW)
            outcomes.append('created')
        except Conflict:
            outcomes.append('conflict')

    with patch.object(AvailabilityService, 'is_room_free', side_effect=slow_is_room_free):
        errors = run_in_threads(file_app, move_existing, book)

    assert errors == []
    assert 'conflict' in outcomes
    stays = Booking.query.filter(Booking.room_id == room_id,
                                 Booking.check_in < datetime(2030, 1, 13),
                                 Booking.check_out > datetime(2030, 1, 10)).count()
    assert stays == 1

@patch('app.services.zalopay_client.requests.post')
def test_callback_and_status_poll_race_keeps_paid(mock_post, file_app):
    user_id, _, room_id = seed(file_app)
    booking = Booking(user_id=user_id, room_id=room_id, check_in=datetime(2030, 1, 10),
                      check_out=datetime(2030, 1, 13), total_price=300)
    db.session.add(booking)
    db.session.commit()
    booking_id = booking.id
    db.session.remove()

    response = MagicMock()
    response.json.return_value = {
        'return_code': 3, 'is_processing': True, 'return_message': 'processing',
        'amount': 300, 'embed_data': json.dumps({'orderId': booking_id})
    }
    mock_post.return_value = response

    data = json.dumps({'zp_trans_id': 555, 'amount': 300, 'embed_data': json.dumps({'orderId': booking_id})})
    body = {'data': data, 'mac': sign('test-key-two', data), 'type': 1}

    original = PaymentService.apply_gateway_status

    def slow_apply(booking, payment_status, result, source='query'):
        # The poll holds its 'processing' write while the callback lands
        if payment_status == 'processing':
            time.sleep(0.3)
        return original(booking, payment_status, result, source)

    with patch.object(PaymentService, 'apply_gateway_status', side_effect=slow_apply):
        errors = run_in_threads(
            file_app,
            lambda: PaymentService.handle_status_query('240101_abcd1234'),
            lambda: PaymentService.handle_callback(body),
            stagger=0.05
        )

    assert errors == []
    assert db.session.get(Booking, booking_id).payment_status == 'paid'
