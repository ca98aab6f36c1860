# backend/utils/razorpay_client.py
import httpx
import logging
from typing import Optional
from urllib.parse import urljoin

from config import settings
from exceptions import GatewayError
from schemas.payment import PaymentIntent

logger = logging.getLogger(__name__)

class RazorpayClient:
    def __init__(self, api_url: str = None, key_id: str = None, key_secret: str = None, timeout: float = 10.0,
                 transport: httpx.AsyncBaseTransport = None):
        # Credentials default to the application settings
        self.api_url = api_url or settings.RAZORPAY_API_URL
        self.key_id = key_id or settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret or settings.RAZORPAY_KEY_SECRET
        self.timeout = timeout
        self.transport = transport

    async def create_intent(self, amount_minor: int, currency: str, metadata: Optional[dict] = None) -> PaymentIntent:
        # Create a gateway order the customer then pays through the checkout widget
        metadata = metadata or {}
        order_url = urljoin(self.api_url, "/v1/orders")
        payload = {
            "amount": amount_minor,
            "currency": currency,
            "receipt": metadata.get("receipt"),
            "notes": {k: str(v) for k, v in metadata.items() if k != "receipt"},
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(order_url, json=payload, auth=(self.key_id, self.key_secret))
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as e:
                # Log the provider's answer before re-raising
                logger.error("Razorpay create order error: %s %s", e.response.status_code, e.response.text)
                raise GatewayError("Payment gateway rejected the order", status_code=e.response.status_code) from e
            except httpx.RequestError as e:
                logger.error("Razorpay create order request failed: %s", e)
                raise

        intent_id = data.get("id")
        if not intent_id:
            logger.error("Razorpay create order returned no id: %s", data)
            raise GatewayError("Payment gateway returned no order id")

        return PaymentIntent(
            intent_id=intent_id,
            amount=data.get("amount", amount_minor),
            currency=data.get("currency", currency),
            status=data.get("status", "created"),
        )

razorpay_client = RazorpayClient()

def get_payment_gateway() -> RazorpayClient:
    # Dependency hook so tests can substitute the gateway
    return razorpay_client
