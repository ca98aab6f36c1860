from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

# Request schema for adding a medicine to the cart
class CartAddItem(BaseModel):
    item_id: int = Field(alias="itemId")
    quantity: int = Field(default=1, gt=0)

    model_config = ConfigDict(populate_by_name=True)

# Request schema for overwriting a cart line quantity; bounds are checked by the cart store
class CartUpdateItem(BaseModel):
    item_id: int = Field(alias="itemId")
    quantity: int

    model_config = ConfigDict(populate_by_name=True)

# Response schema for a single cart line joined with the live medicine snapshot
class CartItemOut(BaseModel):
    medicine_id: int
    name: str
    image: Optional[str] = None
    price: float
    quantity: int
    line_total: float

# Response schema for the entire cart summary
class CartOut(BaseModel):
    items: List[CartItemOut]
    total: float
