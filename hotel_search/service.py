from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any

from hotel_search.engine import HotelSearchEngine
from hotel_search.errors import NotInitializedError, OfferProviderError, UnknownHotelError
from hotel_search.models import ApiError, DateRange, ErrorEnvelope, HotelWithOffersPayload, SearchHotelsResponse
from hotel_search.providers.base import OfferProvider
from hotel_search.providers.remote import RemoteOfferProvider

logger = logging.getLogger(__name__)


class HotelSearchService:
    """JSON-facing wrapper around ``HotelSearchEngine`` used by the server and scripts."""

    def __init__(self, engine: HotelSearchEngine | None = None, provider: OfferProvider | None = None):
        if engine is None:
            engine = HotelSearchEngine()
            engine.initialize()
        self.engine = engine
        self.provider: OfferProvider = provider or RemoteOfferProvider()

    def search_hotels(
        self,
        city_name: str,
        check_in: str | None = None,
        check_out: str | None = None,
    ) -> dict[str, Any]:
        date_range, date_metadata = _normalize_or_default_dates(check_in, check_out)
        if date_range is None:
            return error_envelope(
                code="INVALID_DATES",
                message="check_in and check_out must be dates such as 2026-11-01 or 01.11.2026",
                retryable=False,
                details={
                    "invalid_fields": date_metadata["invalid_fields"],
                    "check_in": check_in,
                    "check_out": check_out,
                },
            )
        try:
            outcome = self.engine.run_search(city_name, date_range, self.provider)
        except NotInitializedError as exc:
            return error_envelope(
                code="ENGINE_NOT_INITIALIZED",
                message=str(exc),
                retryable=False,
            )
        except OfferProviderError as exc:
            logger.error("search_offer_provider_failed", extra={"city_name": city_name, "error": str(exc)})
            return error_envelope(
                code="OFFER_PROVIDER_FAILED",
                message=str(exc),
                retryable=True,
                details={"advertiser_id": exc.advertiser_id, "city_name": city_name},
            )
        except UnknownHotelError as exc:
            logger.error("search_unknown_hotel", extra={"city_name": city_name, "hotel_id": exc.hotel_id})
            return error_envelope(
                code="UNKNOWN_HOTEL",
                message=str(exc),
                retryable=False,
                details={"hotel_id": exc.hotel_id},
            )

        hotels = [HotelWithOffersPayload.from_result(result) for result in outcome.results]
        response = SearchHotelsResponse(
            provider=getattr(self.provider, "provider_name", type(self.provider).__name__),
            query={
                "city_name": city_name,
                "check_in": date_range.start.isoformat(),
                "check_out": date_range.end.isoformat(),
            },
            metadata=_build_metadata(
                raw_city_name=city_name,
                raw_check_in=check_in,
                raw_check_out=check_out,
                date_range=date_range,
                city_id=outcome.city_id,
                hotels=hotels,
                date_metadata=date_metadata,
            ),
            hotels=hotels,
        )
        payload = response.model_dump(mode="json")
        payload["metadata"]["contract_version"] = "v1"
        return payload

    def plan_hotel_search(self, query: str) -> dict[str, Any]:
        parsed = _parse_natural_query(query)
        result = self.search_hotels(
            city_name=parsed["city_name"],
            check_in=parsed.get("check_in"),
            check_out=parsed.get("check_out"),
        )
        if "metadata" in result:
            result["metadata"]["interpreted_from_query"] = True
            result["metadata"]["query_parse"] = {"raw_query": query, **parsed}
        return result


def _normalize_or_default_dates(check_in: str | None, check_out: str | None) -> tuple[DateRange | None, dict[str, Any]]:
    """Parse the stay dates, defaulting only the ones that were not given.

    Returns ``None`` as the range when a given date does not parse; the
    offending fields are listed under ``invalid_fields``.
    """
    metadata: dict[str, Any] = {"used_default_dates": False, "normalized_dates": False, "invalid_fields": []}
    parsed_in = _parse_date(check_in) if check_in else None
    parsed_out = _parse_date(check_out) if check_out else None
    if check_in and parsed_in is None:
        metadata["invalid_fields"].append("check_in")
    if check_out and parsed_out is None:
        metadata["invalid_fields"].append("check_out")
    if metadata["invalid_fields"]:
        return None, metadata

    if parsed_in is None:
        parsed_in = dt.date.today() + dt.timedelta(days=1)
        metadata["used_default_dates"] = True
    if parsed_out is None:
        parsed_out = parsed_in + dt.timedelta(days=1)
        metadata["used_default_dates"] = True

    metadata["normalized_dates"] = bool(
        (check_in and check_in != parsed_in.isoformat()) or (check_out and check_out != parsed_out.isoformat())
    )
    if parsed_out <= parsed_in:
        parsed_out = parsed_in + dt.timedelta(days=1)
        metadata["normalized_dates"] = True
    return DateRange(parsed_in, parsed_out), metadata


def _parse_date(raw: str) -> dt.date | None:
    value = raw.strip()
    for fmt in ("%Y-%m-%d", "%d.%m.%Y", "%m/%d/%Y", "%Y/%m/%d"):
        try:
            return dt.datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def _parse_natural_query(query: str) -> dict[str, Any]:
    # the city ends at a keyword or where the first date starts
    city_match = re.search(r"\bin\s+([^\W\d_][^\d]*?)(?:\s+(?:for|from|on|between)\b|\s+\d|$)", query, re.IGNORECASE)
    city_name = city_match.group(1).strip(" .,!?\t") if city_match else query.strip()

    check_in = check_out = None
    date_match = re.search(
        r"\b(\d{4}-\d{2}-\d{2}|\d{1,2}\.\d{1,2}\.\d{4})\s*(?:to|until|-)\s*(\d{4}-\d{2}-\d{2}|\d{1,2}\.\d{1,2}\.\d{4})\b",
        query,
        re.IGNORECASE,
    )
    if date_match:
        check_in, check_out = date_match.group(1), date_match.group(2)
    return {"city_name": city_name, "check_in": check_in, "check_out": check_out}


def _build_metadata(
    raw_city_name: str,
    raw_check_in: str | None,
    raw_check_out: str | None,
    date_range: DateRange,
    city_id: int | None,
    hotels: list[HotelWithOffersPayload],
    date_metadata: dict[str, Any],
) -> dict[str, Any]:
    warnings: list[str] = []
    defaults_applied: list[str] = []
    if date_metadata.get("used_default_dates"):
        defaults_applied.append("dates")
        warnings.append("Dates were missing; default dates were applied.")
    if city_id is None:
        warnings.append(f"City '{raw_city_name}' is unknown; no hotels were searched.")

    return {
        "interpreted_from_query": False,
        "raw_input": {
            "city_name": raw_city_name,
            "check_in": raw_check_in,
            "check_out": raw_check_out,
        },
        "normalized_input": {
            "city_id": city_id,
            "check_in": date_range.start.isoformat(),
            "check_out": date_range.end.isoformat(),
            "nights": date_range.nights,
        },
        "defaults_applied": defaults_applied,
        "normalized_dates": date_metadata.get("normalized_dates", False),
        "warnings": warnings,
        "hotel_count": len(hotels),
        "offer_count": sum(hotel.offer_count for hotel in hotels),
    }


def error_envelope(code: str, message: str, retryable: bool = False, details: dict[str, Any] | None = None) -> dict[str, Any]:
    return ErrorEnvelope(
        error=ApiError(code=code, message=message, retryable=retryable, details=details),
    ).model_dump(mode="json")
