from types import MappingProxyType
from typing import Mapping

# Tomorrow.io weatherCode values (common codes only)
WEATHER_CODES: Mapping[int, str] = MappingProxyType(
    {
        1000: "Clear",
        1100: "Mostly Clear",
        1101: "Partly Cloudy",
        1102: "Mostly Cloudy",
        1001: "Cloudy",
        2000: "Fog",
        2100: "Light Fog",
        4000: "Drizzle",
        4001: "Rain",
        4200: "Light Rain",
        4201: "Heavy Rain",
        5000: "Snow",
        5001: "Flurries",
        5100: "Light Snow",
        5101: "Heavy Snow",
        6000: "Freezing Drizzle",
        6001: "Freezing Rain",
        6200: "Light Freezing Rain",
        6201: "Heavy Freezing Rain",
        7000: "Ice Pellets",
        7101: "Heavy Ice Pellets",
        7102: "Light Ice Pellets",
        8000: "Thunderstorm",
    }
)


def describe_weather_code(code: int | None) -> str:
    """
    Translate a provider weather code into a human-readable description.

    Parameters
    ----------
    code : int | None
        Weather code as returned by the provider, if any.

    Returns
    -------
    str
        Known description, ``"Weather code N"`` for unknown codes, or ``"N/A"``
        when the provider sent no code at all.
    """
    if code is None:
        return "N/A"
    return WEATHER_CODES.get(code) or f"Weather code {code}"
