import asyncio
import base64
import json

import httpx
import pytest

from exceptions import GatewayError
from utils.razorpay_client import RazorpayClient


def _client(handler):
    return RazorpayClient(
        api_url="https://api.razorpay.test",
        key_id="rzp_key",
        key_secret="rzp_secret",
        transport=httpx.MockTransport(handler),
    )


def test_create_intent_posts_order():
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "order_ABC", "amount": 10000, "currency": "INR", "status": "created"})

    intent = asyncio.run(_client(handler).create_intent(10000, "INR", {"receipt": "rcpt_1", "customer_id": 7}))

    assert intent.intent_id == "order_ABC"
    assert intent.amount == 10000
    assert seen["url"] == "https://api.razorpay.test/v1/orders"
    assert seen["auth"] == "Basic " + base64.b64encode(b"rzp_key:rzp_secret").decode()
    assert seen["body"] == {"amount": 10000, "currency": "INR", "receipt": "rcpt_1", "notes": {"customer_id": "7"}}


def test_create_intent_rejected_by_gateway():
    def handler(request):
        return httpx.Response(400, json={"error": {"description": "amount too small"}})

    with pytest.raises(GatewayError) as exc:
        asyncio.run(_client(handler).create_intent(10, "INR"))
    assert exc.value.status_code == 400


def test_create_intent_without_id():
    def handler(request):
        return httpx.Response(200, json={"status": "created"})

    with pytest.raises(GatewayError):
        asyncio.run(_client(handler).create_intent(100, "INR"))


def test_create_intent_network_error_propagates():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(httpx.HTTPError):
        asyncio.run(_client(handler).create_intent(100, "INR"))
