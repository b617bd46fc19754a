from flask import Blueprint, request, jsonify
from app.services.payment_service import PaymentService
from app.utils.decorators import token_required

payments_bp = Blueprint('payments', __name__)

@payments_bp.route('/create-payment', methods=['POST'])
@token_required
def create_payment(current_user):
    data = request.get_json(silent=True) or {}
    order = PaymentService.create_payment(
        current_user,
        amount=data.get('amount'),
        order_id=data.get('orderId'),
        description=data.get('description')
    )
    return jsonify({'success': True, 'data': order})

@payments_bp.route('/callback', methods=['POST'])
def callback():
    # Invoked by the gateway; authenticity comes from the MAC, not a token
    body = request.get_json(silent=True)
    if body is None:
        body = request.form.to_dict()
    response, status = PaymentService.handle_callback(body)
    return jsonify(response), status

@payments_bp.route('/order-status/<app_trans_id>', methods=['GET', 'POST'])
def order_status(app_trans_id):
    return jsonify({'success': True, 'data': PaymentService.handle_status_query(app_trans_id)})
