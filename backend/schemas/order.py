from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    medicine_id: int
    medicine_name: str
    quantity: int
    price_at_purchase: float
    line_total: float


# Output schema for the delivery address stored on an order
class OrderAddressOut(BaseModel):
    full_name: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    zip_code: str
    phone: str


# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    customer_id: int
    total_price: float
    payment_status: str
    delivery_status: str
    gateway_order_id: str
    gateway_payment_id: str
    created_at: Optional[datetime] = None
    expected_delivery_date: Optional[datetime] = None
    delivery_address: OrderAddressOut
    items: List[OrderItemOut]

# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int

# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: str
