import pytest
import jwt
from datetime import datetime

from app import create_app, db
from app.models import User, Room, Booking
from app.config import TestingConfig

@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def init_data(app):
    user = User(name='Guest', email='guest@test.com', role='user')
    other = User(name='Other', email='other@test.com', role='user')
    admin = User(name='Admin', email='admin@test.com', role='admin')
    room = Room(type='Standard', number='101', price=100, capacity=2, amenities=['wifi'], images=[])
    suite = Room(type='Suite', number='301', price=250, capacity=4, amenities=['wifi', 'bathtub'], images=[])
    db.session.add_all([user, other, admin, room, suite])
    db.session.commit()
    return user, other, admin, room, suite

@pytest.fixture
def make_booking(app):
    """Insert a booking row directly, bypassing the lifecycle rules."""
    def _make(user, room, check_in, check_out, status='confirmed', payment_status='pending',
              created_at=None, total_price=None):
        booking = Booking(
            user_id=user.id,
            room_id=room.id,
            check_in=check_in,
            check_out=check_out,
            total_price=total_price if total_price is not None else room.price,
            status=status,
            payment_status=payment_status
        )
        if created_at is not None:
            booking.created_at = created_at
        db.session.add(booking)
        db.session.commit()
        return booking
    return _make

@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token = jwt.encode({'user_id': user.id}, app.config['SECRET_KEY'], algorithm="HS256")
        return {'Authorization': f'Bearer {token}'}
    return _headers

@pytest.fixture
def before_2024():
    return datetime(2023, 12, 1)

@pytest.fixture
def file_app(tmp_path):
    """App on a SQLite file, so each thread gets its own connection."""
    class FileConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'hotel.db'}"

    app = create_app(FileConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
        db.engine.dispose()
