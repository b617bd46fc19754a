from flask import Blueprint, request, jsonify, current_app
from app.models import User
from app.extensions import db
from app.errors import InvalidInput, NotFound, Conflict
from app.services.availability_service import AvailabilityService
from app.utils.decorators import token_required, admin_required
from app.utils.pagination import paginate
from app.utils.validators import validate_email, validate_choice, parse_pagination

users_bp = Blueprint('users', __name__)

USER_ROLES = ('user', 'admin')


def get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFound(f"No user found with ID: {user_id}")
    return user


def apply_user_fields(user, data, allow_role=False):
    """Copy name, email, password (and role for admins) onto the user."""
    if data.get('name'):
        user.name = str(data['name']).strip()
    if data.get('email'):
        email = validate_email(data['email'])
        if email != user.email and User.query.filter_by(email=email).first():
            raise Conflict("Email already exists")
        user.email = email
    if allow_role and 'role' in data:
        user.role = validate_choice(data['role'], USER_ROLES, 'role')
    password = data.get('password')
    if isinstance(password, str) and password.strip():
        user.set_password(password)


# --- PROFILE ---

@users_bp.route('/profile', methods=['GET'])
@token_required
def get_profile(current_user):
    return jsonify({'success': True, 'data': current_user.to_dict()})

@users_bp.route('/profile', methods=['PUT'])
@token_required
def update_profile(current_user):
    apply_user_fields(current_user, request.get_json(silent=True) or {})
    db.session.commit()
    return jsonify({'success': True, 'data': current_user.to_dict()})


# --- ADMIN ---

@users_bp.route('/', methods=['GET'])
@token_required
@admin_required
def get_users(current_user):
    page, limit = parse_pagination(request.args, current_app.config['DEFAULT_PAGE_SIZE'])
    users, pagination = paginate(db.select(User).order_by(User.created_at), page, limit)
    return jsonify({'success': True, 'data': [u.to_dict() for u in users], 'pagination': pagination})

@users_bp.route('/<user_id>', methods=['PUT'])
@token_required
@admin_required
def update_user(current_user, user_id):
    user = get_user_or_404(user_id)
    data = request.get_json(silent=True) or {}
    if user.id == current_user.id and data.get('role', user.role) != user.role:
        raise InvalidInput("You cannot change your own role")

    apply_user_fields(user, data, allow_role=True)
    db.session.commit()
    current_app.logger.info("User %s updated by %s", user.id, current_user.id)
    return jsonify({'success': True, 'message': 'User updated successfully', 'data': user.to_dict()})

@users_bp.route('/<user_id>', methods=['DELETE'])
@token_required
@admin_required
def delete_user(current_user, user_id):
    user = get_user_or_404(user_id)

    # Prevent deleting yourself
    if user.id == current_user.id:
        raise InvalidInput("You cannot delete your own account")

    # The user's bookings go with them, which may free their rooms
    room_ids = {b.room_id for b in user.bookings}
    db.session.delete(user)
    db.session.commit()
    for room_id in room_ids:
        AvailabilityService.refresh_room_availability(room_id)

    current_app.logger.info("User %s deleted by %s", user_id, current_user.id)
    return jsonify({'success': True, 'message': 'User deleted successfully'})
