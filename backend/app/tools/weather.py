"""Weather lookup against Open-Meteo."""

import logging

import httpx
from pydantic import BaseModel, Field

from app.tools.base import Tool, ToolContext

logger = logging.getLogger(__name__)


class WeatherArgs(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class WeatherTool(Tool):
    name = "get_weather"
    description = "Get the current weather at a location"
    parameters = WeatherArgs

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    async def execute(self, args: WeatherArgs, ctx: ToolContext) -> dict:
        logger.info("Fetching weather for %.4f, %.4f", args.latitude, args.longitude)
        params = {
            "latitude": args.latitude,
            "longitude": args.longitude,
            "current": "temperature_2m",
            "hourly": "temperature_2m",
            "daily": "sunrise,sunset",
            "timezone": "auto",
        }
        async with httpx.AsyncClient(
            transport=self._transport, timeout=ctx.settings.weather_timeout_seconds
        ) as client:
            response = await client.get(ctx.settings.weather_api_url, params=params)
            response.raise_for_status()
            return response.json()
