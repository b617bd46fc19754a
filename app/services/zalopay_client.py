"""
ZaloPay gateway integration.

Builds signed order-creation and order-status requests. Every request MAC
is HMAC-SHA256 over pipe-joined fields: key1 signs what we send, key2 is the
gateway's key for signing callbacks back to us.
"""

import hashlib
import hmac
import json
import logging
import secrets
import time
from datetime import datetime
from decimal import Decimal, InvalidOperation

import requests

from app.errors import InvalidInput, UpstreamError

logger = logging.getLogger(__name__)


def sign(key: str, data: str) -> str:
    return hmac.new(key.encode('utf-8'), data.encode('utf-8'), hashlib.sha256).hexdigest()


def parse_amount(amount) -> int:
    """Gateway amounts are whole VND; 100.5 is rejected rather than truncated."""
    if isinstance(amount, bool):
        raise InvalidInput("amount must be an integer")
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise InvalidInput("amount must be an integer")
    if not value.is_finite() or value != value.to_integral_value():
        raise InvalidInput("amount must be an integer")
    if value <= 0:
        raise InvalidInput("amount must be greater than 0")
    return int(value)


def new_app_trans_id(now: datetime = None) -> str:
    """<yymmdd>_<random hex>, the app-scoped transaction id the gateway expects."""
    now = now or datetime.now()
    return f"{now.strftime('%y%m%d')}_{secrets.token_hex(4)}"


class ZaloPayClient:

    def __init__(self, app_id, key1, key2, endpoint, query_endpoint,
                 callback_url=None, redirect_url=None, timeout=10, retries=1):
        self.app_id = str(app_id)
        self.key1 = key1
        self.key2 = key2
        self.endpoint = endpoint
        self.query_endpoint = query_endpoint
        self.callback_url = callback_url
        self.redirect_url = redirect_url
        self.timeout = timeout
        self.retries = retries

    @classmethod
    def from_config(cls, config):
        return cls(
            app_id=config['ZALOPAY_APP_ID'],
            key1=config['ZALOPAY_KEY1'],
            key2=config['ZALOPAY_KEY2'],
            endpoint=config['ZALOPAY_ENDPOINT'],
            query_endpoint=config['ZALOPAY_QUERY_ENDPOINT'],
            callback_url=config.get('ZALOPAY_CALLBACK_URL'),
            redirect_url=config.get('ZALOPAY_REDIRECT_URL'),
            timeout=config.get('ZALOPAY_TIMEOUT', 10),
            retries=config.get('ZALOPAY_RETRIES', 1),
        )

    # --- signatures ---

    def order_mac(self, order: dict) -> str:
        data = '|'.join(str(order[field]) for field in (
            'app_id', 'app_trans_id', 'app_user', 'amount', 'app_time', 'embed_data', 'item'
        ))
        return sign(self.key1, data)

    def query_mac(self, app_trans_id: str) -> str:
        return sign(self.key1, f"{self.app_id}|{app_trans_id}|{self.key1}")

    def verify_callback(self, data: str, mac: str) -> bool:
        if not isinstance(data, str) or not isinstance(mac, str):
            return False
        return hmac.compare_digest(sign(self.key2, data), mac)

    # --- requests ---

    def build_order(self, amount, order_id, description, app_user='guest', now: datetime = None):
        if not amount or not order_id or not description:
            raise InvalidInput("Missing required fields")
        amount = parse_amount(amount)

        embed_data = {
            'merchantinfo': 'Hotel Booking',
            'orderId': order_id,
            'redirecturl': self.redirect_url,
            'callbackurl': self.callback_url,
        }
        items = [{
            'itemid': order_id,
            'itemname': 'Payment for order',
            'itemprice': amount,
            'itemquantity': 1,
        }]

        order = {
            'app_id': self.app_id,
            'app_trans_id': new_app_trans_id(now),
            'app_user': app_user,
            'app_time': int(time.time() * 1000),
            'item': json.dumps(items),
            'embed_data': json.dumps(embed_data),
            'amount': amount,
            'description': f"Payment for booking {order_id}: {description}",
            'bank_code': 'zalopayapp',
            'callback_url': self.callback_url,
        }
        order['mac'] = self.order_mac(order)
        return order

    def create_order(self, amount, order_id, description, app_user='guest'):
        """Register an order with the gateway and return its hosted payment URL."""
        order = self.build_order(amount, order_id, description, app_user=app_user)
        logger.info("Creating ZaloPay order %s for booking %s, amount %s",
                    order['app_trans_id'], order_id, order['amount'])

        try:
            response = requests.post(self.endpoint, params=order, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("ZaloPay order creation failed for booking %s: %s", order_id, e)
            raise UpstreamError("Payment creation failed", detail=str(e))

        if result.get('return_code', 1) != 1:
            logger.error("ZaloPay rejected order %s: %s", order['app_trans_id'], result)
            raise UpstreamError("Payment creation failed",
                                detail=result.get('sub_return_message') or result.get('return_message'))

        return {
            'order_url': result.get('order_url'),
            'qr_code': result.get('order_url'),
            'zp_trans_token': result.get('zp_trans_token'),
            'order_token': result.get('order_token'),
            'app_trans_id': order['app_trans_id'],
        }

    def query_order_status(self, app_trans_id):
        """Raw gateway status for a transaction; retried once on network errors."""
        if not app_trans_id:
            raise InvalidInput("app_trans_id is required")

        payload = {
            'app_id': self.app_id,
            'app_trans_id': app_trans_id,
            'mac': self.query_mac(app_trans_id),
        }

        last_error = None
        for attempt in range(self.retries + 1):
            try:
                response = requests.post(self.query_endpoint, data=payload, timeout=self.timeout)
                response.raise_for_status()
                return response.json()
            except (requests.ConnectionError, requests.Timeout) as e:
                last_error = e
                logger.warning("ZaloPay status query for %s failed (attempt %d): %s",
                               app_trans_id, attempt + 1, e)
            except (requests.RequestException, ValueError) as e:
                last_error = e
                break

        logger.error("ZaloPay status query for %s failed: %s", app_trans_id, last_error)
        raise UpstreamError("Failed to query order status", detail=str(last_error))
