import logging

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from app.config import DevelopmentConfig
from app.errors import ApiError, InternalError
from app.extensions import db, migrate, use_immediate_transactions

def create_app(config_class=DevelopmentConfig):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Module loggers under "app." propagate to app.logger
    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    with app.app_context():
        use_immediate_transactions(db.engine)

    from app import models  # noqa: F401  (register tables with the metadata)

    # Register Blueprints
    from app.api.routes.auth import auth_bp
    from app.api.routes.rooms import rooms_bp
    from app.api.routes.bookings import bookings_bp
    from app.api.routes.payments import payments_bp
    from app.api.routes.users import users_bp
    from app.api.routes.hotel import hotel_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(rooms_bp, url_prefix='/api/rooms')
    app.register_blueprint(bookings_bp, url_prefix='/api/bookings')
    app.register_blueprint(payments_bp, url_prefix='/api/payments')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(hotel_bp, url_prefix='/api/hotel')

    register_error_handlers(app)
    register_commands(app)

    @app.route('/health')
    def health():
        return {"status": "ok", "app": "HotelBooking"}

    return app

def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(error):
        db.session.rollback()
        if error.status_code >= 500:
            app.logger.error("%s: %s (%s)", error.__class__.__name__, error.message, error.detail)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        app.logger.exception("Unhandled error")
        return jsonify(InternalError(detail=str(error)).to_dict()), 500

def register_commands(app):
    @app.cli.command('release-expired-rooms')
    def release_expired_rooms():
        """Mark rooms available again once all their bookings have ended."""
        from app.services.availability_service import AvailabilityService
        released = AvailabilityService.release_expired_rooms()
        click.echo(f"Released {len(released)} room(s).")

__all__ = ['create_app', 'db']
