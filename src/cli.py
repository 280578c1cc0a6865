"""Command-line demo client for the weather front-end.

Reads environment variables (and an optional location from the command line)
and prints the current weather returned by a running server.
"""

from typing import List, Optional
import os
import sys

import requests
from dotenv import load_dotenv

from client import WeatherClientError, WeatherHttpClient


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Helper to read environment variables with a default value."""
    val = os.getenv(name)
    return val if val is not None and val != "" else default


def main(argv: Optional[List[str]] = None) -> int:
    """Entrypoint for the demo client."""
    load_dotenv()
    args = sys.argv[1:] if argv is None else argv
    endpoint = _get_env("WEATHER_BASE_URL", "http://localhost:3000") or "http://localhost:3000"
    location = " ".join(args).strip() or _get_env("WEATHER_LOCATION", "London, UK") or "London, UK"

    client = WeatherHttpClient(endpoint)
    try:
        data = client.get_weather(location)
    except WeatherClientError as e:
        print(f"Error ({e.status_code}): {e.message}", file=sys.stderr)
        return 1
    except requests.RequestException as e:
        print(f"Unable to reach {endpoint}: {e}", file=sys.stderr)
        return 2

    print(f"Weather in {data.get('city')}: {data.get('temperature')}, {data.get('description')}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
