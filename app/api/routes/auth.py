from flask import Blueprint, request, jsonify, current_app
from app.models import User
from app.extensions import db
from app.errors import InvalidInput, Conflict
from app.utils.decorators import token_required
from app.utils.validators import validate_email
import jwt
from datetime import datetime, timedelta, timezone

auth_bp = Blueprint('auth', __name__)


def issue_token(user):
    return jwt.encode({
        'user_id': user.id,
        'role': user.role,
        'exp': datetime.now(timezone.utc) + timedelta(hours=current_app.config['JWT_EXPIRES_HOURS'])
    }, current_app.config['SECRET_KEY'], algorithm="HS256")


@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    password = data.get('password')
    if not name or not password:
        raise InvalidInput("Name, email and password are required")
    email = validate_email(data.get('email'))

    if User.query.filter_by(email=email).first():
        raise Conflict("Email already exists")

    # Roles are granted by admins, never at sign-up
    user = User(name=name, email=email, role='user')
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("User %s registered", user.id)

    return jsonify({'success': True, 'data': {'token': issue_token(user), 'user': user.to_dict()}}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(email=data.get('email')).first()

    if not user or not user.check_password(data.get('password') or ''):
        return jsonify({'success': False, 'message': 'Invalid credentials'}), 401

    return jsonify({'success': True, 'data': {'token': issue_token(user), 'user': user.to_dict()}})


@auth_bp.route('/me', methods=['GET'])
@token_required
def me(current_user):
    return jsonify({'success': True, 'data': current_user.to_dict()})
