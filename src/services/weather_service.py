import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

import httpx

from services.weather_codes import describe_weather_code

logger = logging.getLogger(__name__)

REALTIME_URL = "https://api.tomorrow.io/v4/weather/realtime"

# Values shipped in sample .env files; treated the same as an unset key
PLACEHOLDER_API_KEYS = frozenset({"your_openweathermap_api_key", "your_tomorrow_io_api_key"})

_COUNTRY_SUFFIXES = (
    (re.compile(r"\s*,\s*UK\s*$", re.IGNORECASE), ",GB"),
    (re.compile(r"\s*,\s*USA\s*$", re.IGNORECASE), ",US"),
    (re.compile(r"\s*,\s*United Kingdom\s*$", re.IGNORECASE), ",GB"),
)

MSG_NOT_CONFIGURED = "API key not set. Add your Tomorrow.io API key to the .env file."
MSG_INVALID_KEY = "Invalid API key. Check your .env file or get a key from tomorrow.io"
MSG_NOT_FOUND = "Location not found. Try a different spelling or add country code (e.g. London, GB)."
MSG_RATE_LIMITED = "Too many requests. Please try again later."
MSG_UNAVAILABLE = "Could not fetch weather."


class FailureKind(str, Enum):
    """Why a lookup failed."""

    NOT_CONFIGURED = "not_configured"
    INVALID_CREDENTIAL = "invalid_credential"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_UNEXPECTED = "upstream_unexpected"


@dataclass(frozen=True)
class WeatherSuccess:
    """
    Normalized summary of the current weather at a location.

    Attributes
    ----------
    city : str
        Resolved place name.
    temperature : str
        Temperature with two decimals and unit, e.g. ``"18.46°C"``.
    description : str
        Human-readable conditions.
    """

    city: str
    temperature: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        """Return the JSON body sent to the browser."""
        return {"city": self.city, "temperature": self.temperature, "description": self.description}


@dataclass(frozen=True)
class WeatherFailure:
    """User-facing error produced by a failed lookup."""

    message: str
    kind: FailureKind = FailureKind.UPSTREAM_UNEXPECTED

    def to_dict(self) -> Dict[str, str]:
        """Return the ``{"error": ...}`` JSON body."""
        return {"error": self.message}


WeatherResult = WeatherSuccess | WeatherFailure


class InvalidResponseError(Exception):
    """Provider answered 2xx but without the expected ``data.values`` object."""

    def __init__(self) -> None:
        super().__init__("Invalid response")


def normalize_location(location: str) -> str:
    """
    Normalize a user-provided location string.

    Parameters
    ----------
    location : str
        Raw location input, e.g. ``"London, UK"``.

    Returns
    -------
    str
        Trimmed location with trailing country names rewritten to ISO codes
        (``UK``/``United Kingdom`` to ``GB``, ``USA`` to ``US``).
    """
    query = (location or "").strip()
    for pattern, code in _COUNTRY_SUFFIXES:
        query = pattern.sub(code, query)
    return query


def city_part(query: str) -> str:
    """Return the trimmed portion of ``query`` before the first comma."""
    return query.split(",", 1)[0].strip()


def format_temperature(value: Any) -> str:
    """Format a Celsius value with two decimals, or ``"—°C"`` when it is missing."""
    if value is None:
        return "—°C"
    return f"{float(value):.2f}°C"


def is_configured(api_key: str | None) -> bool:
    """Tell whether ``api_key`` is set to something other than a sample placeholder."""
    return bool(api_key) and api_key not in PLACEHOLDER_API_KEYS


def _provider_message(response: httpx.Response | None) -> str | None:
    """Extract the provider's error text (``message``, then ``error``) if it is a string."""
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    for key in ("message", "error"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def parse_realtime(payload: Any, query: str) -> WeatherSuccess:
    """
    Map a realtime weather payload into a :class:`WeatherSuccess`.

    Parameters
    ----------
    payload : Any
        Decoded JSON body returned by the provider.
    query : str
        Query that produced the payload, used when the provider does not name
        the place.

    Returns
    -------
    WeatherSuccess
        Summary built from ``data.values`` and ``location``.

    Raises
    ------
    InvalidResponseError
        If the payload has no ``data.values`` object.
    """
    payload = payload if isinstance(payload, dict) else {}
    data = payload.get("data")
    values = data.get("values") if isinstance(data, dict) else None
    if not isinstance(values, dict):
        raise InvalidResponseError()
    location = payload.get("location")
    if not isinstance(location, dict):
        location = {}

    temp = values.get("temperature")
    if temp is None:
        temp = values.get("temperatureApparent")
    city = location.get("name") or location.get("address") or city_part(query) or query
    return WeatherSuccess(
        city=city,
        temperature=format_temperature(temp),
        description=describe_weather_code(values.get("weatherCode")),
    )


class WeatherLookup:
    """Realtime weather lookup against Tomorrow.io with a single city-only fallback."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str = REALTIME_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the lookup.

        Args:
            api_key: Tomorrow.io API key; empty or placeholder values mean "not configured"
            base_url: Realtime endpoint URL
            transport: Optional httpx transport, mainly for tests
        """
        self.api_key = api_key
        self.base_url = base_url
        self._transport = transport

    @property
    def configured(self) -> bool:
        """Whether a usable API key was provided."""
        return is_configured(self.api_key)

    async def _fetch_once(self, client: httpx.AsyncClient, query: str) -> WeatherSuccess:
        response = await client.get(
            self.base_url,
            params={"location": query, "apikey": self.api_key, "units": "metric"},
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as exc:
            raise InvalidResponseError() from exc
        return parse_realtime(payload, query)

    def _error_text(self, exc: Exception) -> str:
        """Describe a failed attempt without the request URL, which carries the API key."""
        if isinstance(exc, httpx.HTTPStatusError):
            return f"Request failed with status code {exc.response.status_code}"
        text = str(exc)
        if self.api_key:
            text = text.replace(self.api_key, "***")
        return text

    async def fetch(self, location: str) -> WeatherResult:
        """
        Look up the current weather for a location.

        Parameters
        ----------
        location : str
            Free-form location, e.g. ``"London, UK"``.

        Returns
        -------
        WeatherResult
            :class:`WeatherSuccess` on success, otherwise a :class:`WeatherFailure`
            carrying a user-facing message.
        """
        if not self.configured:
            return WeatherFailure(MSG_NOT_CONFIGURED, FailureKind.NOT_CONFIGURED)

        query = normalize_location(location)
        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                return await self._fetch_once(client, query)
            except (httpx.HTTPError, InvalidResponseError) as exc:
                response = exc.response if isinstance(exc, httpx.HTTPStatusError) else None
                status = response.status_code if response is not None else None
                api_message = _provider_message(response)

                if status == 401:
                    return WeatherFailure(MSG_INVALID_KEY, FailureKind.INVALID_CREDENTIAL)
                if status in (400, 404):
                    city_only = city_part(query)
                    if city_only != query:
                        try:
                            return await self._fetch_once(client, city_only)
                        except (httpx.HTTPError, InvalidResponseError):
                            # fall through to the not-found failure of the first attempt
                            pass
                    return WeatherFailure(api_message or MSG_NOT_FOUND, FailureKind.NOT_FOUND)
                if status == 429:
                    return WeatherFailure(MSG_RATE_LIMITED, FailureKind.RATE_LIMITED)

                error_text = self._error_text(exc)
                logger.error("Tomorrow.io error: %s %s", status, api_message or error_text)
                return WeatherFailure(
                    api_message or error_text or MSG_UNAVAILABLE, FailureKind.UPSTREAM_UNEXPECTED
                )
