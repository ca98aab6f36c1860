# backend/utils/signature.py
import hashlib
import hmac

from config import settings


def compute_payment_signature(gateway_order_id: str, gateway_payment_id: str, secret: str = None) -> str:
    """HMAC-SHA256 over "order_id|payment_id", hex encoded, as the gateway signs its callback."""
    key = (secret if secret is not None else settings.RAZORPAY_KEY_SECRET).encode("utf-8")
    body = f"{gateway_order_id}|{gateway_payment_id}".encode("utf-8")
    return hmac.new(key, body, hashlib.sha256).hexdigest()


def verify_payment_signature(gateway_order_id: str, gateway_payment_id: str, signature: str, secret: str = None) -> bool:
    """Verifies the signature sent back by the checkout widget after payment."""
    if not signature:
        return False
    expected = compute_payment_signature(gateway_order_id, gateway_payment_id, secret)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
