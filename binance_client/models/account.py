"""
Account models
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class Balance(BaseModel):
    """Free and locked amount of one asset"""

    model_config = ConfigDict(frozen=True)

    free: Decimal = Field(..., description="Available")
    locked: Decimal = Field(..., description="Held by open orders")

    @property
    def total(self) -> Decimal:
        return self.free + self.locked


class AssetBalance(Balance):
    asset: str


class AccountBalances(BaseModel):
    """Relevant part of the /api/v3/account answer"""

    model_config = ConfigDict(extra="ignore")

    balances: List[AssetBalance] = Field(default_factory=list)

    def by_asset(self) -> Dict[str, Balance]:
        return {
            b.asset: Balance(free=b.free, locked=b.locked)
            for b in self.balances
        }
