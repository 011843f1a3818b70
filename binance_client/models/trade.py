"""
Order models

Parameters of a new order and the part of the exchange's answer we keep.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrderSide(str, Enum):
    """Order direction"""
    BUY = "BUY"
    SELL = "SELL"


class OrderType(str, Enum):
    """Order type"""
    LIMIT = "LIMIT"
    MARKET = "MARKET"
    STOP_LOSS = "STOP_LOSS"
    STOP_LOSS_LIMIT = "STOP_LOSS_LIMIT"
    TAKE_PROFIT = "TAKE_PROFIT"
    TAKE_PROFIT_LIMIT = "TAKE_PROFIT_LIMIT"
    LIMIT_MAKER = "LIMIT_MAKER"


class TimeInForce(str, Enum):
    GTC = "GTC"
    IOC = "IOC"
    FOK = "FOK"


class OrderCreateResponseType(str, Enum):
    """Verbosity of the order creation answer"""
    ACK = "ACK"
    RESULT = "RESULT"
    FULL = "FULL"


# Query parameter name for each OrderCreate field, in the order they are sent
_QUERY_NAMES = (
    ("symbol", "symbol"),
    ("side", "side"),
    ("type", "type"),
    ("time_in_force", "timeInForce"),
    ("quantity", "quantity"),
    ("price", "price"),
    ("new_client_order_id", "newClientOrderId"),
    ("stop_price", "stopPrice"),
    ("iceberg_qty", "icebergQty"),
    ("new_order_resp_type", "newOrderRespType"),
)


def _render(value) -> str:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


class OrderCreate(BaseModel):
    """Parameters of a new order"""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., description="Symbol, e.g. BTCUSDT")
    side: OrderSide
    type: OrderType
    quantity: Decimal = Field(..., gt=0)
    time_in_force: Optional[TimeInForce] = None
    price: Optional[Decimal] = Field(None, gt=0)
    new_client_order_id: Optional[str] = None
    stop_price: Optional[Decimal] = Field(None, gt=0)
    iceberg_qty: Optional[Decimal] = Field(None, gt=0)
    new_order_resp_type: Optional[OrderCreateResponseType] = None

    @field_validator('symbol')
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        if not v or not v.isalnum():
            raise ValueError("Symbol must be a non-empty alphanumeric string")
        return v.upper()

    def to_query(self) -> List[Tuple[str, str]]:
        """Set fields as ordered (name, value) pairs; unset fields are omitted"""
        pairs = []
        for attr, name in _QUERY_NAMES:
            value = getattr(self, attr)
            if value is not None:
                pairs.append((name, _render(value)))
        return pairs


class CreateOrderResponse(BaseModel):
    """Order creation answer; only the id is needed"""

    model_config = ConfigDict(extra="ignore")

    symbol: str
    order_id: int = Field(..., alias="orderId")
    client_order_id: Optional[str] = Field(None, alias="clientOrderId")
