from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import IntegrityError
from app.models import Hotel, HOTEL_ID
from app.extensions import db
from app.errors import InvalidInput, NotFound, Conflict
from app.utils.decorators import token_required, admin_required

hotel_bp = Blueprint('hotel', __name__)

HOTEL_FIELDS = ('name', 'description', 'address', 'city', 'images', 'rating', 'amenities')
REQUIRED_FIELDS = ('name', 'description', 'address', 'city')


def get_hotel_or_404():
    hotel = Hotel.get()
    if not hotel:
        raise NotFound("Hotel information not found")
    return hotel


def apply_hotel_fields(hotel, data):
    for field in HOTEL_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field == 'rating':
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise InvalidInput("rating must be a number")
            if not 0 <= value <= 5:
                raise InvalidInput("rating must be between 0 and 5")
        elif field in ('images', 'amenities'):
            if not isinstance(value, list):
                raise InvalidInput(f"{field} must be a list")
        elif not value:
            raise InvalidInput(f"{field} cannot be empty")
        setattr(hotel, field, value)


@hotel_bp.route('/', methods=['GET'])
def get_hotel_info():
    return jsonify({'success': True, 'data': get_hotel_or_404().to_dict()})

@hotel_bp.route('/setup', methods=['POST'])
@token_required
@admin_required
def setup_hotel(current_user):
    if Hotel.get():
        raise Conflict("Hotel is already configured")

    data = request.get_json(silent=True) or {}
    missing = [f for f in REQUIRED_FIELDS if not data.get(f)]
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(missing)}")

    hotel = Hotel(id=HOTEL_ID, images=[], amenities=[], rating=0, is_configured=True)
    apply_hotel_fields(hotel, data)
    db.session.add(hotel)
    try:
        db.session.commit()
    except IntegrityError:
        # Another setup request got there first
        db.session.rollback()
        raise Conflict("Hotel is already configured")

    current_app.logger.info("Hotel configured by %s", current_user.id)
    return jsonify({'success': True, 'data': hotel.to_dict()}), 201

@hotel_bp.route('/', methods=['PUT'])
@token_required
@admin_required
def update_hotel_info(current_user):
    hotel = get_hotel_or_404()
    apply_hotel_fields(hotel, request.get_json(silent=True) or {})
    db.session.commit()
    return jsonify({'success': True, 'data': hotel.to_dict()})
