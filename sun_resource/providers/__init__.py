"""
Providers package for Sun Resource

Data sources for monthly irradiance summaries:

1. NREL Solar Resource - developer.nrel.gov solar_resource/v1.json
   (DNI, GHI and latitude-tilt monthly averages)
"""

from sun_resource.providers.nrel import (
    SolarResourceProvider,
    FetchResponse,
    redact,
    redact_url,
)

__all__ = [
    "SolarResourceProvider",
    "FetchResponse",
    "redact",
    "redact_url",
]
