import json
import logging

from flask import current_app

from app.extensions import db
from app.models import Booking, PaymentAuditLog
from app.errors import InvalidInput, NotFound, Conflict, Forbidden
from app.services.zalopay_client import ZaloPayClient, parse_amount
from app.utils.dates import utcnow
from app.utils.validators import is_object_id

logger = logging.getLogger(__name__)

ACK = {'return_code': 1, 'return_message': 'success'}


def _load_json(value):
    """embed_data arrives as a JSON string, but tolerate an already decoded dict."""
    if isinstance(value, dict):
        return value
    return json.loads(value)


class PaymentService:

    @staticmethod
    def get_client() -> ZaloPayClient:
        return ZaloPayClient.from_config(current_app.config)

    @staticmethod
    def create_payment(user, amount, order_id, description):
        """Open a gateway order for a booking and return the hosted payment URL."""
        if not amount or not order_id or not description:
            raise InvalidInput("Missing required fields")

        booking = db.session.get(Booking, order_id) if is_object_id(order_id) else None
        if not booking:
            raise NotFound(f"No booking found with ID: {order_id}")
        if booking.user_id != user.id and not user.is_admin:
            raise Forbidden("You are not allowed to pay for this booking")
        if booking.status == 'cancelled':
            raise Conflict("Cannot pay for a cancelled booking")
        if booking.payment_status == 'paid':
            raise Conflict("Booking is already paid")

        amount = parse_amount(amount)
        if amount != booking.total_price:
            raise InvalidInput(f"amount must equal the booking total of {booking.total_price:.15g}")

        return PaymentService.get_client().create_order(
            amount, order_id, description, app_user=user.id
        )

    # --- reconciliation ---

    @staticmethod
    def apply_gateway_status(booking: Booking, payment_status, result: dict, source='query') -> bool:
        """
        Write a gateway outcome onto the booking. Paid is sticky: once a booking
        is paid, a late 'processing' or 'failed' result is ignored.
        A paid amount that differs from the booking total is still applied, but
        is logged and added to the audit table for follow-up; the caller commits.
        Returns True if the booking changed.
        """
        if booking.payment_status == 'paid' and payment_status != 'paid':
            logger.info("Ignoring '%s' for booking %s, already paid", payment_status, booking.id)
            return False

        booking.payment_status = payment_status
        if payment_status == 'paid':
            PaymentService.flag_amount_mismatch(booking, result, source)
            if result.get('zp_trans_id') is not None:
                booking.zp_transaction_id = str(result['zp_trans_id'])
            if result.get('amount') is not None:
                booking.paid_amount = result['amount']
            if result.get('discount_amount') is not None:
                booking.discount_amount = result['discount_amount']
            booking.payment_error = None
        elif payment_status == 'failed':
            booking.payment_error = result.get('return_message')
        booking.updated_at = utcnow()
        return True

    @staticmethod
    def flag_amount_mismatch(booking: Booking, result: dict, source):
        amount = result.get('amount')
        if amount is None or amount == booking.total_price:
            return
        logger.warning("Booking %s paid %s but totals %s (%s)", booking.id, amount, booking.total_price, source)
        db.session.add(PaymentAuditLog(
            source=source,
            order_id=booking.id,
            zp_transaction_id=str(result['zp_trans_id']) if result.get('zp_trans_id') is not None else None,
            reason=f"amount mismatch: paid {amount}, booking total {booking.total_price:.15g}",
            payload=json.dumps(result, default=str)
        ))

    @staticmethod
    def record_failure(source, reason, order_id=None, zp_trans_id=None, payload=None):
        """Dead-letter for gateway events we acknowledged but could not apply."""
        try:
            db.session.add(PaymentAuditLog(
                source=source,
                order_id=str(order_id)[:64] if order_id is not None else None,
                zp_transaction_id=str(zp_trans_id) if zp_trans_id is not None else None,
                reason=reason[:255],
                payload=payload
            ))
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.exception("Could not write payment audit record (%s: %s)", source, reason)

    @staticmethod
    def handle_callback(body: dict):
        """
        Gateway push notification. Returns (response body, HTTP status).

        Once the MAC checks out the gateway always gets return_code 1, since
        anything else makes it retry; failures go to the log and audit table.
        """
        if not isinstance(body, dict):
            body = {}
        data = body.get('data')
        if not data:
            logger.error("No data received in payment callback")
            return {'success': False, 'return_code': -1, 'return_message': 'missing data'}, 400

        if not PaymentService.get_client().verify_callback(data, body.get('mac')):
            logger.warning("Payment callback MAC verification failed")
            return {'return_code': -1, 'return_message': 'mac not equal'}, 400

        if str(body.get('type')) != '1':
            logger.info("Payment callback type %s acknowledged without changes", body.get('type'))
            return dict(ACK), 200

        order_id = None
        zp_trans_id = None
        try:
            callback_data = json.loads(data)
            zp_trans_id = callback_data.get('zp_trans_id')
            order_id = _load_json(callback_data.get('embed_data') or '{}').get('orderId')

            if not order_id:
                raise ValueError("OrderId not found in callback data")
            if not is_object_id(order_id):
                raise ValueError(f"Invalid OrderId format: {order_id}")

            booking = db.session.get(Booking, order_id, with_for_update=True)
            if not booking:
                raise LookupError(f"Booking not found with ID: {order_id}")

            PaymentService.apply_gateway_status(
                booking, 'paid',
                {'zp_trans_id': zp_trans_id, 'amount': callback_data.get('amount')},
                source='callback'
            )
            db.session.commit()
            logger.info("Booking %s marked paid by callback (zp_trans_id=%s)", order_id, zp_trans_id)
        except Exception as e:
            db.session.rollback()
            logger.exception("Error processing payment callback")
            PaymentService.record_failure('callback', str(e) or e.__class__.__name__,
                                          order_id=order_id, zp_trans_id=zp_trans_id, payload=data)

        return dict(ACK), 200

    @staticmethod
    def handle_status_query(app_trans_id):
        """Poll the gateway and reconcile the booking named in its embed_data."""
        result = PaymentService.get_client().query_order_status(app_trans_id)

        order_id = None
        if result.get('embed_data'):
            try:
                order_id = _load_json(result['embed_data']).get('orderId')
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Could not parse embed_data for %s: %s", app_trans_id, e)

        return_code = result.get('return_code')
        is_processing = bool(result.get('is_processing'))
        if return_code == 1:
            payment_status = 'paid'
        elif return_code == 3 or is_processing:
            payment_status = 'processing'
        elif return_code == 2:
            payment_status = 'failed'
        else:
            payment_status = None

        booking_updated = False
        if order_id and payment_status and is_object_id(order_id):
            booking = db.session.get(Booking, order_id, with_for_update=True)
            if booking:
                booking_updated = PaymentService.apply_gateway_status(booking, payment_status, result)
                db.session.commit()
                if booking_updated:
                    logger.info("Booking %s payment status -> %s (query %s)",
                                order_id, payment_status, app_trans_id)
            else:
                logger.warning("Status query %s names unknown booking %s", app_trans_id, order_id)

        return {
            'return_code': return_code,
            'return_message': result.get('return_message'),
            'sub_return_code': result.get('sub_return_code'),
            'sub_return_message': result.get('sub_return_message'),
            'is_processing': is_processing,
            'amount': result.get('amount'),
            'discount_amount': result.get('discount_amount'),
            'zp_trans_id': result.get('zp_trans_id'),
            'app_trans_id': app_trans_id,
            'order_id': order_id,
            'payment_status': payment_status,
            'booking_updated': booking_updated,
        }
