"""
Sun Resource: Monthly Solar Irradiance Charts

Fetches the NREL Solar Resource summary for a single coordinate pair and
turns the monthly averages into a table and a line chart.

The whole run is one straight line:
- Request the summary from developer.nrel.gov (providers/)
- Decode the JSON into typed structures (decoder.py)
- Flatten the series into one row per month (reshaper.py)
- Plot one line per irradiance type (renderer.py)

Architecture:
    providers/     - NREL Solar Resource API (nrel.py)
    config.py      - Settings loaded from .env / environment
    errors.py      - Error taxonomy shared by every stage
    months.py      - Canonical Jan..Dec ordering
    decoder.py     - Strict JSON -> ApiResponse deserialization
    reshaper.py    - outputs -> MonthlyTable (pandas DataFrame)
    renderer.py    - MonthlyTable -> LongTable -> matplotlib chart
    pipeline.py    - Stage orchestration and artifact writing

Entry Points:
    main.py                       - Command-line run (recommended)
    python -m sun_resource.pipeline  - Run with settings from the environment
"""

__version__ = "1.0.0"
__author__ = "Sun Resource"
