from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class Hotel:
    id: int
    name: str = field(compare=False)
    city_id: int | None = field(compare=False)
    # user feedback score, 0-100
    rating: int = field(compare=False)
    # 1-5
    stars: int = field(compare=False)


@dataclass(frozen=True)
class Advertiser:
    id: int
    name: str = field(compare=False)


@dataclass(frozen=True)
class Offer:
    advertiser: Advertiser
    price_in_euro: int
    # cost per click the advertiser pays for this offer
    cpc: int

    def __post_init__(self) -> None:
        if self.price_in_euro < 0 or self.cpc < 0:
            raise ValueError(f"Offer amounts must be non-negative, got price={self.price_in_euro} cpc={self.cpc}")


@dataclass(frozen=True)
class DateRange:
    start: dt.date
    end: dt.date

    @property
    def nights(self) -> int:
        return (self.end - self.start).days


@dataclass
class HotelWithOffers:
    hotel: Hotel
    offers: list[Offer] = field(default_factory=list)


AdvertiserAvailability = Mapping[int, frozenset[int]]
CityDirectory = Mapping[int, str]


class OfferPayload(BaseModel):
    advertiser_id: int
    advertiser_name: str
    price_in_euro: int
    cpc: int


class HotelPayload(BaseModel):
    hotel_id: int
    name: str
    city_id: int | None = None
    rating: int
    stars: int


class HotelWithOffersPayload(BaseModel):
    hotel: HotelPayload
    offers: list[OfferPayload] = Field(default_factory=list)
    offer_count: int = 0
    from_price_in_euro: int | None = None

    @classmethod
    def from_result(cls, result: HotelWithOffers) -> "HotelWithOffersPayload":
        hotel = result.hotel
        offers = [
            OfferPayload(
                advertiser_id=offer.advertiser.id,
                advertiser_name=offer.advertiser.name,
                price_in_euro=offer.price_in_euro,
                cpc=offer.cpc,
            )
            for offer in result.offers
        ]
        return cls(
            hotel=HotelPayload(
                hotel_id=hotel.id,
                name=hotel.name,
                city_id=hotel.city_id,
                rating=hotel.rating,
                stars=hotel.stars,
            ),
            offers=offers,
            offer_count=len(offers),
            from_price_in_euro=min((offer.price_in_euro for offer in offers), default=None),
        )


class SearchHotelsResponse(BaseModel):
    provider: str = "remote"
    query: dict
    metadata: dict = Field(default_factory=dict)
    hotels: list[HotelWithOffersPayload] = Field(default_factory=list)


class ApiError(BaseModel):
    code: str
    message: str
    retryable: bool = False
    details: dict | None = None


class ErrorEnvelope(BaseModel):
    ok: Literal[False] = False
    error: ApiError
