from datetime import datetime, timezone

import httpx

from core.config import settings
from core.logger import log
from schemas.audit import LogisticsSignals


BARIKOI_TRAFFIC_URL = "https://barikoi.xyz/v1/api/search/traffic"
TERMINAL49_SHIPMENTS_URL = "https://api.terminal49.com/v2/shipments"
OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"

# Chattogram port
PORT_LAT = 22.3569
PORT_LON = 91.7832

STORM_WIND_MS = 15.0


class LogisticsSensorClient:
    """
    Live road / port / weather feeds.
    A missing key or any transport/parse failure reads as "Unknown";
    sensor trouble never fails an audit.
    """

    def __init__(self) -> None:
        self.enabled = settings.SENSORS_ENABLED
        self.timeout = settings.SENSOR_TIMEOUT_SECONDS

    async def fetch_signals(self) -> LogisticsSignals:
        if not self.enabled:
            return LogisticsSignals()

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            road, delay = await self._road(client)
            sea = await self._sea(client)
            weather = await self._weather(client)

        return LogisticsSignals(road=road, sea=sea, weather=weather, road_delay_hours=delay)

    async def _road(self, client: httpx.AsyncClient) -> tuple[str, float | None]:
        if not settings.BARIKOI_API_KEY:
            return "Unknown", None
        try:
            r = await client.get(
                BARIKOI_TRAFFIC_URL,
                params={"key": settings.BARIKOI_API_KEY, "q": "Chittagong Highway"},
            )
            r.raise_for_status()
            data = r.json() or {}
            delay_min = data.get("delay_minutes")
            delay = round(float(delay_min) / 60, 2) if delay_min is not None else None
            return ("Congested" if data.get("traffic_status") == "Heavy" else "Clear"), delay
        except Exception as e:
            log.warning("road feed unavailable: %s", e)
            return "Unknown", None

    async def _sea(self, client: httpx.AsyncClient) -> str:
        if not settings.TERMINAL49_API_KEY:
            return "Unknown"
        try:
            r = await client.get(
                TERMINAL49_SHIPMENTS_URL,
                params={"limit": 1},
                headers={"Authorization": f"Token {settings.TERMINAL49_API_KEY}"},
            )
            r.raise_for_status()
            now = datetime.now(timezone.utc).isoformat()
            rows = (r.json() or {}).get("data") or []
            at_anchor = any(
                (s.get("attributes") or {}).get("pod_status") == "vessel_arrived"
                and str((s.get("attributes") or {}).get("pod_arrival_date") or "") < now
                for s in rows
            )
            return "At Anchor" if at_anchor else "Smooth"
        except Exception as e:
            log.warning("port feed unavailable: %s", e)
            return "Unknown"

    async def _weather(self, client: httpx.AsyncClient) -> str:
        if not settings.OPENWEATHER_API_KEY:
            return "Unknown"
        try:
            r = await client.get(
                OPENWEATHER_URL,
                params={"lat": PORT_LAT, "lon": PORT_LON, "appid": settings.OPENWEATHER_API_KEY},
            )
            r.raise_for_status()
            return classify_weather(r.json() or {})
        except Exception as e:
            log.warning("weather feed unavailable: %s", e)
            return "Unknown"


def classify_weather(data: dict) -> str:
    """Thunderstorm..rain (OpenWeather ids 200-599) or wind > 15 m/s is a storm."""
    conditions = data.get("weather") or []
    stormy = any(200 <= int(w.get("id") or 0) < 600 for w in conditions)
    windy = float((data.get("wind") or {}).get("speed") or 0) > STORM_WIND_MS
    return "Storm" if stormy or windy else "Safe"
