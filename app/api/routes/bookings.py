from flask import Blueprint, request, jsonify, current_app
from app.services.booking_service import BookingService
from app.services.statistics_service import StatisticsService
from app.utils.decorators import token_required, admin_required
from app.utils.validators import parse_pagination

bookings_bp = Blueprint('bookings', __name__)

@bookings_bp.route('/', methods=['POST'])
@token_required
def create_booking(current_user):
    data = request.get_json(silent=True) or {}
    booking = BookingService.create_booking(
        user=current_user,
        room_id=data.get('roomId'),
        check_in=data.get('checkIn'),
        check_out=data.get('checkOut'),
        contact_info=data
    )
    return jsonify({'success': True, 'data': booking.to_dict()}), 201

@bookings_bp.route('/', methods=['GET'])
@token_required
@admin_required
def get_all_bookings(current_user):
    page, limit = parse_pagination(request.args, current_app.config['DEFAULT_PAGE_SIZE'])
    bookings, pagination = BookingService.list_bookings(page, limit)
    return jsonify({
        'success': True,
        'data': [b.to_dict() for b in bookings],
        'pagination': pagination
    })

@bookings_bp.route('/my-bookings', methods=['GET'])
@token_required
def get_my_bookings(current_user):
    bookings = BookingService.get_user_bookings(current_user.id)
    return jsonify({'success': True, 'data': [b.to_dict() for b in bookings]})

@bookings_bp.route('/statistics', methods=['GET'])
@token_required
@admin_required
def get_statistics(current_user):
    return jsonify({'success': True, 'data': StatisticsService.get_statistics()})

@bookings_bp.route('/<booking_id>', methods=['PUT'])
@token_required
@admin_required
def update_booking(current_user, booking_id):
    booking = BookingService.update_booking(booking_id, request.get_json(silent=True) or {})
    return jsonify({
        'success': True,
        'message': 'Booking updated successfully',
        'data': booking.to_dict()
    })

@bookings_bp.route('/<booking_id>', methods=['DELETE'])
@token_required
@admin_required
def delete_booking(current_user, booking_id):
    BookingService.delete_booking(booking_id)
    return jsonify({'success': True, 'message': 'Booking deleted successfully'})

@bookings_bp.route('/<booking_id>/cancel', methods=['PATCH'])
@token_required
def cancel_booking(current_user, booking_id):
    booking = BookingService.cancel_booking(booking_id, current_user.id)
    return jsonify({
        'success': True,
        'message': 'Booking cancelled successfully',
        'data': booking.to_dict()
    })
