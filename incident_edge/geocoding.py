# ================================
# FILE: incident_edge/geocoding.py
# ================================
import logging
import httpx

log = logging.getLogger("uvicorn.error").getChild("geocoding")

ADDRESS_FIELDS = ("country", "city", "county", "state", "street", "postcode", "village")


class GeocodingError(Exception):
    pass


class GeoapifyGeocoder:
    def __init__(self, api_key: str, url: str, timeout: float = 10.0,
                 transport: httpx.BaseTransport | None = None):
        self.api_key = api_key
        self.url = url
        self.timeout = timeout
        self.transport = transport

    def reverse(self, latitude: float, longitude: float) -> list[dict]:
        """
        Candidate addresses for a coordinate pair, best match first. Each
        candidate holds exactly ADDRESS_FIELDS (missing ones as None).
        Error messages leave out the request URL: it carries the API key.
        """
        params = {"lat": latitude, "lon": longitude, "format": "json", "apiKey": self.api_key}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                r = client.get(self.url, params=params)
        except httpx.HTTPError as e:
            raise GeocodingError(f"reverse lookup failed: {type(e).__name__}") from e
        if r.status_code >= 400:
            raise GeocodingError(f"reverse lookup failed: status={r.status_code}")
        try:
            results = r.json().get("results") or []
        except (ValueError, AttributeError) as e:
            raise GeocodingError("reverse lookup returned invalid JSON") from e

        log.info("[geocode] %d candidate(s) for lat=%s lon=%s", len(results), latitude, longitude)
        return [{f: res.get(f) for f in ADDRESS_FIELDS} for res in results]
