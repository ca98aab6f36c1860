# backend/schemas/stock.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional

# Schema for a pharmacy restock or correction
class StockAdjust(BaseModel):
    medicine_id: int = Field(alias="medicineId")
    qty: int = Field(alias="quantityChange")
    reason: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

# Schema for returning stock movement details
class StockMovementResponse(BaseModel):
    id: int
    created_at: Optional[datetime] = None
    medicine_id: int
    medicine_name: str
    qty: int
    type: str
    reason: Optional[str] = None
    order_id: Optional[int] = None
    user_id: int
    stock_quantity: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

# Paginated response for stock movement history
class StockMovementPage(BaseModel):
    items: List[StockMovementResponse]
    total: int
    page: int
    page_size: int
