from __future__ import annotations


class HotelSearchError(Exception):
    """Base class for all hotel search failures."""


class DataLoadError(HotelSearchError):
    def __init__(self, source: str, reason: str):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class NotInitializedError(HotelSearchError):
    def __init__(self, message: str = "Hotel search engine is not initialized"):
        super().__init__(message)


class UnknownHotelError(HotelSearchError):
    def __init__(self, hotel_id: int):
        super().__init__(f"Hotel {hotel_id} is not part of the reference data")
        self.hotel_id = hotel_id


class OfferProviderError(HotelSearchError):
    def __init__(self, advertiser_id: int, message: str):
        super().__init__(f"Offer provider failed for advertiser {advertiser_id}: {message}")
        self.advertiser_id = advertiser_id


class UpstreamCallError(HotelSearchError):
    def __init__(self, tool: str, message: str):
        super().__init__(f"{tool}: {message}")
        self.tool = tool
