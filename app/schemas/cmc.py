"""CoinMarketCap listing payloads (``/v1/cryptocurrency/listings/latest``)."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CMCPlatform(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    name: str
    symbol: Optional[str] = None
    slug: Optional[str] = None


class CMCQuote(BaseModel):
    model_config = ConfigDict(extra="ignore")

    price: Optional[float] = None
    volume_24h: Optional[float] = None
    market_cap: Optional[float] = None


class CMCListing(BaseModel):
    """One ranked entry of the listing, as of the provider's snapshot moment."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    symbol: str
    slug: str
    cmc_rank: int = Field(ge=1)
    circulating_supply: Optional[float] = None
    date_added: Optional[datetime] = None
    tags: list[str] = Field(default_factory=list)
    platform: Optional[CMCPlatform] = None
    quote: dict[str, CMCQuote]

    @field_validator("tags", mode="before")
    @classmethod
    def _unique_tags(cls, value):
        # null from the API means no tags; duplicates collapse, first occurrence wins
        if value is None:
            return []
        return list(dict.fromkeys(value))

    @property
    def usd(self) -> CMCQuote:
        return self.quote.get("USD") or CMCQuote()


class CMCStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    timestamp: Optional[datetime] = None
    error_code: int = 0
    error_message: Optional[str] = None
    elapsed: Optional[int] = None
    credit_count: Optional[int] = None
    total_count: Optional[int] = None


class CMCListingsResponse(BaseModel):
    """Response envelope. Entries stay raw; each is parsed on its own by the caller."""

    model_config = ConfigDict(extra="ignore")

    status: CMCStatus
    data: list[dict[str, Any]]
