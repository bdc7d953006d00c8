#Purpose: The OSRM "adapter/client".
#Sole responsibility: talk to OSRM via HTTP and return the route geometry
#as an encoded polyline string.
#Encapsulates OSRM-specific details:
#coordinate formatting (lon,lat)
#URL construction (/route)
#timeouts and error handling
#It should not contain fallback rules or tracking logic.


from dotenv import load_dotenv
import logging
import os
from typing import List

import requests

from routing.models import Coordinate
from routing.provider import ProviderRoute, RouteProviderError, optional_number, require_polyline

# Read OSRM base URL from environment
# Example in .env:
# OSRM_BASE_URL=http://router.project-osrm.org
load_dotenv()
BASE_URL = os.getenv("OSRM_BASE_URL")

logger = logging.getLogger(__name__)


class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal Coordinate -> OSRM (lon,lat)
    - Return the encoded polyline of the first route

    """
    def __init__(self, profile: str = "driving", timeout: int = 5, base_url: str = None):
        self.base_url = base_url or BASE_URL
        self.timeout = timeout #the time to wait for a response from OSRM before giving up
        self.profile = profile #the mode of transportation (driving, walking, cycling)

        if not self.base_url:
            raise ValueError("OSRM base URL not set. Please set OSRM_BASE_URL in the .env file.")

    #----------------
    # Internal helpers
    #----------------
    def format_coordinates(self, coords: List[Coordinate]) -> str:
        """Convert list of Coordinates to OSRM format 'lon,lat;lon,lat;...'"""
        return ';'.join([f"{c.longitude},{c.latitude}" for c in coords])

    #----------------
    # RouteProvider
    #----------------
    def fetch_route(self, origin: Coordinate, destination: Coordinate) -> ProviderRoute:
        """
        Calls the OSRM /route endpoint and returns the full-overview geometry
        encoded as a precision-5 polyline, with the route duration and distance.

        Raises:
            RouteProviderError: network failure, HTTP error, bad JSON or a non-Ok code
        """
        coordinates = self.format_coordinates([origin, destination])
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinates}"

        try:
            response = requests.get(
                url,
                params={
                    "overview": "full", # whole route geometry, not simplified
                    "geometries": "polyline", # precision 5, same format as Google
                },
                timeout=self.timeout,
            )
            data = response.json() #OSRM sends a JSON body for errors too (code/message)
        except requests.RequestException as e:
            raise RouteProviderError(f"OSRM request failed: {e}") from e
        except ValueError as e:
            raise RouteProviderError(f"OSRM returned malformed JSON: {e}") from e

        #validating OSRM response
        code = data.get("code") if isinstance(data, dict) else None
        if code != "Ok":
            message = data.get("message", "Unknown error") if isinstance(data, dict) else "Unknown error"
            raise RouteProviderError(f"OSRM error: {message}", status=code)

        routes = data.get("routes") or []
        route = routes[0] if isinstance(routes, list) and routes else None #take the first route (OSRM may return alternatives)
        if not isinstance(route, dict):
            raise RouteProviderError("OSRM response has no route geometry", status=code)

        geometry = require_polyline(route.get("geometry"), code, "OSRM")
        logger.debug(
            f"OSRM route {origin} -> {destination}: "
            f"{route.get('distance')} m, {route.get('duration')} s"
        )
        return ProviderRoute(
            encoded=geometry,
            duration_s=optional_number(route.get("duration")),
            distance_m=optional_number(route.get("distance")),
        )
