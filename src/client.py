"""Minimal HTTP client to interact with the weather front-end.

Exposes a small programmatic client for the ``/`` page and the ``/weather``
JSON endpoint.
"""

from typing import Any, Dict
import requests


class WeatherClientError(Exception):
    """Error answer (``{"error": ...}``) returned by the ``/weather`` endpoint."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class WeatherHttpClient:
    """Very small client targeting the /weather endpoint."""

    def __init__(self, base_url: str, timeout: float = 20):
        """Initialize the weather HTTP client.

        Parameters
        ----------
        base_url : str
            Base URL where the server is listening (e.g., http://localhost:3000)
        timeout : float
            Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        """Build default headers for JSON requests."""
        return {"Accept": "application/json"}

    def get_weather(self, location: str) -> Dict[str, Any]:
        """Fetch the weather summary for a location.

        Raises
        ------
        WeatherClientError
            If the server answered with a JSON error body.
        requests.HTTPError
            For any other non-2xx response.
        """
        r = requests.get(
            f"{self.base_url}/weather",
            params={"location": location},
            headers=self._headers(),
            timeout=self.timeout,
        )
        if r.ok:
            return r.json()
        try:
            data = r.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("error"):
            raise WeatherClientError(r.status_code, str(data["error"]))
        r.raise_for_status()
        return {}

    def get_index(self) -> str:
        """Return the HTML page served at ``/``."""
        r = requests.get(f"{self.base_url}/", timeout=self.timeout)
        r.raise_for_status()
        return r.text
