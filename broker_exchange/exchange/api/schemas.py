"""Pydantic request models for the exchange API."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...utils.config import Config

PRICE_PATTERN = r"^\$\d+(\.\d{1,2})?$"
SYMBOL_PATTERN = r"^[A-Z][A-Z0-9.\-]{0,9}$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='forbid')


class HistoricalDataItem(CamelModel):
    date: str
    open: str = Field(..., pattern=PRICE_PATTERN)


class CreateStockRequest(CamelModel):
    symbol: str = Field(..., pattern=SYMBOL_PATTERN)
    company_name: str
    is_active: bool = False
    current_price: str = Field(default="$0.00", pattern=PRICE_PATTERN)
    historical_data: List[HistoricalDataItem] = Field(default_factory=list)


class UpdateStockRequest(CamelModel):
    company_name: Optional[str] = None
    is_active: Optional[bool] = None
    current_price: Optional[str] = Field(default=None, pattern=PRICE_PATTERN)
    historical_data: Optional[List[HistoricalDataItem]] = None


class CreateBrokerRequest(CamelModel):
    name: str = Field(..., min_length=1)
    balance: Decimal = Field(default=Decimal("0"), ge=0)


class UpdateBrokerRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    balance: Optional[Decimal] = Field(default=None, ge=0)


class TradingSettingsRequest(CamelModel):
    start_date: datetime
    speed_factor: float = Field(..., ge=Config.MIN_SPEED_FACTOR)
    is_active: Optional[bool] = None
