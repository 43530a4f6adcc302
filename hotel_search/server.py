from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

from mcp.server.fastmcp import FastMCP  # noqa: E402
from starlette.requests import Request  # noqa: E402
from starlette.responses import JSONResponse, Response  # noqa: E402

from hotel_search.engine import DATA_DIR  # noqa: E402
from hotel_search.service import HotelSearchService  # noqa: E402

MCP_HOST = os.getenv("MCP_HOST", "0.0.0.0")
MCP_PORT = int(os.getenv("MCP_PORT", "8000"))
APP_ENV = os.getenv("APP_ENV", "dev")
APP_VERSION = os.getenv("APP_VERSION", "0.1.0")
OFFER_PROVIDER_URL = os.getenv("OFFER_PROVIDER_URL")

mcp = FastMCP("Hotel_Search_Node", host=MCP_HOST, port=MCP_PORT)
service = HotelSearchService()


@mcp.custom_route("/healthz", methods=["GET"], include_in_schema=False)
async def healthz(_request: Request) -> Response:
    return JSONResponse(
        {
            "status": "ok",
            "service": "hotel-search-mcp",
            "env": APP_ENV,
            "version": APP_VERSION,
        },
        status_code=200,
    )


@mcp.custom_route("/readyz", methods=["GET"], include_in_schema=False)
async def readyz(_request: Request) -> Response:
    issues: list[str] = []
    if not service.engine.is_initialized:
        issues.append(f"Reference data could not be loaded from {DATA_DIR}")
    if not OFFER_PROVIDER_URL:
        issues.append("OFFER_PROVIDER_URL is not set")

    if issues:
        return JSONResponse(
            {
                "status": "not_ready",
                "service": "hotel-search-mcp",
                "issues": issues,
            },
            status_code=503,
        )

    store = service.engine.store
    return JSONResponse(
        {
            "status": "ready",
            "service": "hotel-search-mcp",
            "upstream": OFFER_PROVIDER_URL,
            "hotels": len(store.hotels),
            "advertisers": len(store.advertisers),
            "cities": len(store.cities),
        },
        status_code=200,
    )


@mcp.tool()
def search_hotels(city_name: str, check_in: str | None = None, check_out: str | None = None) -> dict:
    """Hotels in a city with every advertiser offer (price in EUR and cost per click) for the stay."""
    return service.search_hotels(city_name=city_name, check_in=check_in, check_out=check_out)


@mcp.tool()
def plan_hotel_search(query: str) -> dict:
    """Natural-language entrypoint. Example: 'Hotels in Hamburg from 2026-11-01 to 2026-11-03'."""
    return service.plan_hotel_search(query=query)


if __name__ == "__main__":
    mcp.run(transport="sse")
