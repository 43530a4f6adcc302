from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from hotel_search.errors import DataLoadError
from hotel_search.models import Advertiser, AdvertiserAvailability, CityDirectory, Hotel

HOTELS_FILE = "hotels.csv"
ADVERTISERS_FILE = "advertisers.csv"
HOTEL_ADVERTISER_FILE = "hotel_advertiser.csv"
CITIES_FILE = "cities.csv"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceDataStore:
    """Read-only view over the hotels, advertisers, availability and cities of one load."""

    hotels: tuple[Hotel, ...]
    advertisers: tuple[Advertiser, ...]
    availability: AdvertiserAvailability
    cities: CityDirectory
    _hotels_by_id: Mapping[int, Hotel] = field(init=False, repr=False, compare=False)
    _advertisers_by_id: Mapping[int, Advertiser] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_hotels_by_id", _index_by_id(self.hotels, HOTELS_FILE))
        object.__setattr__(self, "_advertisers_by_id", _index_by_id(self.advertisers, ADVERTISERS_FILE))
        object.__setattr__(
            self,
            "availability",
            MappingProxyType({advertiser_id: frozenset(ids) for advertiser_id, ids in self.availability.items()}),
        )
        object.__setattr__(self, "cities", MappingProxyType(dict(self.cities)))

    def hotel_by_id(self, hotel_id: int) -> Hotel | None:
        return self._hotels_by_id.get(hotel_id)

    def advertiser_by_id(self, advertiser_id: int) -> Advertiser | None:
        return self._advertisers_by_id.get(advertiser_id)


def _index_by_id(records: Iterable[Hotel] | Iterable[Advertiser], source: str) -> Mapping[int, Any]:
    index: dict[int, Any] = {}
    for record in records:
        if record.id in index:
            raise DataLoadError(source, f"duplicate id {record.id}")
        index[record.id] = record
    return MappingProxyType(index)


class HotelRow(BaseModel):
    id: int
    name: str
    city_id: int | None = None
    rating: int = Field(ge=0, le=100)
    stars: int = Field(ge=1, le=5)

    @field_validator("city_id", mode="before")
    @classmethod
    def _blank_city_is_unknown(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AdvertiserRow(BaseModel):
    id: int
    advertiser_name: str


class HotelAdvertiserRow(BaseModel):
    advertiser_id: int
    hotel_id: int


class CityRow(BaseModel):
    id: int
    city_name: str


def load_reference_data(data_dir: str | Path) -> ReferenceDataStore:
    """Load the four CSV datasets under ``data_dir`` into a ``ReferenceDataStore``.

    Raises ``DataLoadError`` when a file is missing, lacks a column, holds an
    invalid row or repeats a hotel/advertiser id.
    """
    base = Path(data_dir)

    hotels = tuple(
        Hotel(id=row.id, name=row.name, city_id=row.city_id, rating=row.rating, stars=row.stars)
        for row in _read_rows(base / HOTELS_FILE, HotelRow)
    )
    advertisers = tuple(
        Advertiser(id=row.id, name=row.advertiser_name)
        for row in _read_rows(base / ADVERTISERS_FILE, AdvertiserRow)
    )

    availability: dict[int, set[int]] = {}
    for row in _read_rows(base / HOTEL_ADVERTISER_FILE, HotelAdvertiserRow):
        availability.setdefault(row.advertiser_id, set()).add(row.hotel_id)

    cities: dict[int, str] = {}
    for row in _read_rows(base / CITIES_FILE, CityRow):
        if row.id in cities:
            raise DataLoadError(CITIES_FILE, f"duplicate id {row.id}")
        cities[row.id] = row.city_name

    store = ReferenceDataStore(
        hotels=hotels,
        advertisers=advertisers,
        availability=availability,
        cities=cities,
    )
    logger.info(
        "reference_data_loaded",
        extra={
            "data_dir": str(base),
            "hotels": len(hotels),
            "advertisers": len(advertisers),
            "availability_pairs": sum(len(ids) for ids in availability.values()),
            "cities": len(cities),
        },
    )
    return store


def _read_rows(path: Path, row_model: type[BaseModel]) -> list[Any]:
    required = set(row_model.model_fields)
    try:
        with path.open(newline="", encoding="utf-8-sig") as handle:
            reader = csv.DictReader(handle)
            columns = set(reader.fieldnames or ())
            missing = required - columns
            # city_id may be absent from the header altogether
            missing.discard("city_id")
            if missing:
                raise DataLoadError(path.name, f"missing columns {sorted(missing)}")

            rows = []
            for line_number, raw in enumerate(reader, start=2):
                values = {key: value for key, value in raw.items() if key in required}
                try:
                    rows.append(row_model.model_validate(values))
                except ValidationError as exc:
                    raise DataLoadError(path.name, f"invalid row at line {line_number}: {exc.errors()}") from exc
            return rows
    except OSError as exc:
        raise DataLoadError(path.name, str(exc)) from exc
