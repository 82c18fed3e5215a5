"""
Razorpay Orders API client
https://razorpay.com/docs/api/orders/

Orders are created server-side with the key secret; the browser only ever
sees the public key id. Payment confirmations coming back from Checkout are
checked with an HMAC-SHA256 over "order_id|payment_id".
"""
import hashlib
import hmac
import logging
from typing import Any, Dict, Optional

import requests
from requests.exceptions import RequestException

from .errors import GatewayError

logger = logging.getLogger(__name__)


def payment_signature(order_id: str, payment_id: str, key_secret: str) -> str:
    """Signature Razorpay attaches to a successful Checkout payment."""
    message = f"{order_id}|{payment_id}".encode('utf-8')
    return hmac.new(key_secret.encode('utf-8'), message, hashlib.sha256).hexdigest()


class RazorpayGateway:
    BASE_URL = "https://api.razorpay.com/v1"
    TIMEOUT = 10.0

    def __init__(self, key_id: Optional[str], key_secret: Optional[str], base_url: Optional[str] = None,
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = (base_url or self.BASE_URL).rstrip('/')
        self.timeout = timeout or self.TIMEOUT
        self.session = session or requests.Session()
        self.session.auth = (key_id or '', key_secret or '')
        self.session.headers.update({"User-Agent": "ChaviWebsite/1.0"})

    @property
    def configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        if not self.configured:
            raise GatewayError(detail="Razorpay credentials are not configured")
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except RequestException as e:
            # no retry: creating an order twice would mint two orders
            logger.error("Razorpay %s %s failed: %s", method, path, e)
            raise GatewayError(detail=str(e)) from e
        except ValueError as e:
            logger.error("Razorpay %s %s returned invalid JSON: %s", method, path, e)
            raise GatewayError(detail="invalid JSON from gateway") from e

    def create_order(self, amount: int, currency: str, receipt: Optional[str] = None,
                     notes: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        Create an auto-captured order for `amount` minor units (paise).
        Returns the gateway's order object; its "id" is what Checkout needs.
        """
        payload = {
            "amount": amount,
            "currency": currency,
            "payment_capture": 1,
        }
        if receipt:
            payload["receipt"] = receipt
        if notes:
            payload["notes"] = notes
        order = self._request("POST", "/orders", json=payload)
        if not order.get("id"):
            raise GatewayError(detail="order response without id")
        logger.info("Razorpay order %s created (amount=%d %s)", order["id"], amount, currency)
        return order

    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        if not self.key_secret:
            raise GatewayError(detail="Razorpay key secret is not configured")
        expected = payment_signature(order_id, payment_id, self.key_secret)
        return hmac.compare_digest(expected, signature)
