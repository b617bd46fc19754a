from functools import wraps
from flask import request, jsonify, current_app
import jwt
from app.extensions import db
from app.models.user import User

def token_required(f):
    """Resolve the bearer token to a user and pass it to the view as first argument."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = None
        if 'Authorization' in request.headers:
            # Bearer <token>
            auth_header = request.headers['Authorization']
            if auth_header.startswith("Bearer "):
                token = auth_header.split(" ", 1)[1]

        if not token:
            return jsonify({'success': False, 'message': 'Not authorized, no token'}), 401

        try:
            data = jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=["HS256"])
        except jwt.PyJWTError as e:
            return jsonify({'success': False, 'message': 'Not authorized, token failed', 'error': str(e)}), 401

        current_user = db.session.get(User, data['user_id']) if data.get('user_id') else None
        if not current_user:
            return jsonify({'success': False, 'message': 'Not authorized, user not found'}), 401

        return f(current_user, *args, **kwargs)

    return decorated

def admin_required(f):
    # Must be stacked under @token_required, which passes current_user first
    @wraps(f)
    def decorated(*args, **kwargs):
        current_user = args[0]
        if not current_user.is_admin:
            return jsonify({'success': False, 'message': 'Admin privilege required'}), 403
        return f(*args, **kwargs)
    return decorated
