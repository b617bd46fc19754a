from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import IntegrityError
from app.utils.decorators import token_required, admin_required
from app.models import Room
from app.extensions import db
from app.errors import InvalidInput, NotFound, Conflict
from app.services.availability_service import AvailabilityService
from app.utils.dates import parse_stay
from app.utils.validators import parse_positive_number, parse_pagination
from app.utils.pagination import paginate

rooms_bp = Blueprint('rooms', __name__)

ROOM_FIELDS = ('type', 'number', 'price', 'capacity', 'description', 'amenities', 'images', 'isAvailable')


def get_room_or_404(room_id):
    room = db.session.get(Room, room_id)
    if not room:
        raise NotFound("Room not found")
    return room


def apply_room_fields(room, data):
    for field in ROOM_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field == 'price':
            room.price = parse_positive_number(value, 'price')
        elif field == 'capacity':
            room.capacity = parse_positive_number(value, 'capacity', cast=int)
        elif field in ('amenities', 'images'):
            if not isinstance(value, list):
                raise InvalidInput(f"{field} must be a list")
            # amenities behave as a set
            setattr(room, field, list(dict.fromkeys(value)) if field == 'amenities' else value)
        elif field == 'isAvailable':
            room.is_available = bool(value)
        else:
            setattr(room, field, value)


def commit_room(room):
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("Room number already exists")
    return room


@rooms_bp.route('/available', methods=['GET'])
def search_available_rooms():
    args = request.args
    if not args.get('checkIn') or not args.get('checkOut'):
        raise InvalidInput("Please provide both checkIn and checkOut dates")
    check_in, check_out = parse_stay(args['checkIn'], args['checkOut'])

    capacity = args.get('capacity', type=int)
    rooms = AvailabilityService.find_available_rooms(
        check_in, check_out,
        capacity=capacity if capacity and capacity > 0 else None,
        min_price=args.get('minPrice', type=float),
        max_price=args.get('maxPrice', type=float)
    )
    return jsonify({'success': True, 'count': len(rooms), 'data': [r.to_dict() for r in rooms]})


@rooms_bp.route('/', methods=['GET'])
def get_rooms():
    page, limit = parse_pagination(request.args, current_app.config['DEFAULT_PAGE_SIZE'])
    rooms, pagination = paginate(db.select(Room).order_by(Room.number), page, limit)
    return jsonify({'success': True, 'data': [r.to_dict() for r in rooms], 'pagination': pagination})


@rooms_bp.route('/<room_id>', methods=['GET'])
def get_room(room_id):
    return jsonify({'success': True, 'data': get_room_or_404(room_id).to_dict()})


# --- ADMIN ---

@rooms_bp.route('/', methods=['POST'])
@token_required
@admin_required
def create_room(current_user):
    data = request.get_json(silent=True) or {}
    missing = [f for f in ('type', 'number', 'price', 'capacity') if data.get(f) in (None, '')]
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(missing)}")

    room = Room(amenities=[], images=[], is_available=True)
    apply_room_fields(room, data)
    db.session.add(room)
    commit_room(room)
    current_app.logger.info("Room %s created by %s", room.number, current_user.id)
    return jsonify({'success': True, 'data': room.to_dict()}), 201


@rooms_bp.route('/<room_id>', methods=['PUT'])
@token_required
@admin_required
def update_room(current_user, room_id):
    room = get_room_or_404(room_id)
    apply_room_fields(room, request.get_json(silent=True) or {})
    commit_room(room)
    return jsonify({'success': True, 'data': room.to_dict()})


@rooms_bp.route('/<room_id>', methods=['DELETE'])
@token_required
@admin_required
def delete_room(current_user, room_id):
    room = get_room_or_404(room_id)
    db.session.delete(room)
    db.session.commit()
    current_app.logger.info("Room %s deleted by %s", room.number, current_user.id)
    return jsonify({'success': True, 'message': 'Room deleted successfully'})
