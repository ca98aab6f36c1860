from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

# Delivery address as submitted; completeness is checked at checkout
class DeliveryAddressIn(BaseModel):
    full_name: Optional[str] = Field(default=None, alias="fullName")
    address_line1: Optional[str] = Field(default=None, alias="addressLine1")
    address_line2: Optional[str] = Field(default=None, alias="addressLine2")
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(default=None, alias="zipCode")
    phone: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

# Complete delivery address, staged with the payment intent and copied onto the order
class DeliveryAddress(BaseModel):
    full_name: str = Field(min_length=1)
    address_line1: str = Field(min_length=1)
    address_line2: Optional[str] = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    phone: str = Field(min_length=1)

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("address_line2")
    @classmethod
    def _blank_to_none(cls, v):
        return v or None

# Request schema for starting checkout; a missing address is rejected by the checkout itself
class CheckoutRequest(BaseModel):
    delivery_address: Optional[DeliveryAddressIn] = Field(default=None, alias="deliveryAddress")

    model_config = ConfigDict(populate_by_name=True)

# Response returned to the client to open the gateway checkout widget
class CheckoutStarted(BaseModel):
    gateway_order_id: str
    amount: int
    currency: str
    key_id: str

# Request schema for the signed payment callback
class PaymentVerifyRequest(BaseModel):
    gateway_order_id: str = Field(alias="gatewayOrderId", min_length=1)
    gateway_payment_id: str = Field(alias="gatewayPaymentId", min_length=1)
    signature: str = Field(min_length=1)
    # Accepted for client compatibility; the address staged at checkout is used
    delivery_address: Optional[DeliveryAddressIn] = Field(default=None, alias="deliveryAddress")

    model_config = ConfigDict(populate_by_name=True)

# Payment intent as reported by the gateway adapter
class PaymentIntent(BaseModel):
    intent_id: str
    amount: int
    currency: str
    status: str = "created"
