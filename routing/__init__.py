#Marks routing as a package.
#Re-exports the public API (Coordinate, distance_km, decode/encode, compute_route,
#the HTTP route providers) so other modules import from routing without knowing
#internal file names.
#No business logic.

from .models import Coordinate, Route
from .geomath import distance_km, step_toward, offset_km, degree_distance
from .polyline import decode, encode, MalformedPolylineError
from .provider import ProviderRoute, RouteProvider, RouteProviderError
from .route_service import compute_route, RouteResult
from .osrm_client import OSRMClient
from .google_directions_client import GoogleDirectionsClient

__all__ = [
           "Coordinate",
           "Route",
             "distance_km",
             "step_toward",
             "offset_km",
             "degree_distance",
             "decode",
             "encode",
             "MalformedPolylineError",
             "ProviderRoute",
             "RouteProvider",
             "RouteProviderError",
             "compute_route",
             "RouteResult",
             "OSRMClient",
             "GoogleDirectionsClient",
             ]
