#Purpose: Google Directions adapter.
#Sole responsibility: call the Directions API over HTTP and hand back
#routes[0].overview_polyline.points. Every non-OK answer (OVER_QUERY_LIMIT,
#ZERO_RESULTS, REQUEST_DENIED, ...) becomes a RouteProviderError.

from dotenv import load_dotenv
import logging
import os

import requests

from routing.models import Coordinate
from routing.provider import ProviderRoute, RouteProviderError, optional_number, require_polyline

# Example in .env:
# GOOGLE_MAPS_API_KEY=...
# GOOGLE_DIRECTIONS_URL=https://maps.googleapis.com/maps/api/directions/json
load_dotenv()
API_KEY = os.getenv("GOOGLE_MAPS_API_KEY")
DIRECTIONS_URL = os.getenv(
    "GOOGLE_DIRECTIONS_URL",
    "https://maps.googleapis.com/maps/api/directions/json",
)

logger = logging.getLogger(__name__)


class GoogleDirectionsClient:
    """
    Google Directions Adapter

    - formats coordinates as 'lat,lng'
    - validates the JSON status field
    - returns the overview polyline of the first route
    """
    def __init__(self, api_key: str = None, timeout: int = 10, url: str = None):
        self.api_key = api_key or API_KEY
        self.url = url or DIRECTIONS_URL
        self.timeout = timeout

        if not self.api_key:
            raise ValueError("Google Maps API key not set. Please set GOOGLE_MAPS_API_KEY in the .env file.")

    @staticmethod
    def format_coordinate(coordinate: Coordinate) -> str:
        return f"{coordinate.latitude},{coordinate.longitude}"

    def fetch_route(self, origin: Coordinate, destination: Coordinate) -> ProviderRoute:
        """
        Returns the encoded overview polyline from origin to destination together
        with the first leg's duration and distance.

        Raises:
            RouteProviderError: on HTTP errors, network failures, malformed JSON,
            a status other than OK or an empty routes list
        """
        try:
            response = requests.get(
                self.url,
                params={
                    "origin": self.format_coordinate(origin),
                    "destination": self.format_coordinate(destination),
                    "key": self.api_key,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise RouteProviderError(f"Directions request failed: {e}") from e
        except ValueError as e:
            raise RouteProviderError(f"Directions returned malformed JSON: {e}") from e

        if not isinstance(data, dict):
            raise RouteProviderError("Directions returned an unexpected payload")

        status = data.get("status")
        logger.debug(f"Directions response status: {status}")
        if status != "OK":
            raise RouteProviderError(
                f"Directions error: {data.get('error_message', status)}",
                status=status,
            )

        routes = data.get("routes") or []
        try:
            route = routes[0]
            points = route["overview_polyline"]["points"]
        except (IndexError, KeyError, TypeError) as e:
            raise RouteProviderError("Directions response has no overview polyline", status=status) from e
        encoded = require_polyline(points, status, "Directions")

        #duration/distance only from the first leg; origin -> destination has no waypoints
        legs = route.get("legs") or []
        leg = legs[0] if isinstance(legs, list) and legs and isinstance(legs[0], dict) else {}
        duration = leg.get("duration") if isinstance(leg.get("duration"), dict) else {}
        distance = leg.get("distance") if isinstance(leg.get("distance"), dict) else {}
        return ProviderRoute(
            encoded=encoded,
            duration_s=optional_number(duration.get("value")),
            distance_m=optional_number(distance.get("value")),
        )
