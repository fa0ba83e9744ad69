"""kmoni User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the decoder behavior. Expert defaults live in kmoni.schemas.param.

Usage:
    kmoni analyze scripts/user_config.py
    kmoni analyze scripts/user_config.py --time 2024-01-01T16:10:30+09:00
    kmoni analyze scripts/user_config.py --mode historical --output results.parquet
"""

CONFIG = {
    # ========================================================================
    # MODE & REGISTRY
    # ========================================================================
    "MODE": "realtime",             # "realtime" or "historical"
    "REGISTRY_PATH": "data/ShindoObsPoints.pbf",
    "REGISTRY_FORMAT": None,        # "csv", "pbf", "json" (None = from suffix)
    "REGISTRY_ENCODING": "utf-8",   # CSV/JSON text encoding

    # ========================================================================
    # IMAGE SETTINGS
    # ========================================================================
    "DATA_KIND": "jma",             # jma, acmap, vcmap, dcmap, rsp0125 ... rsp4000
    "INCLUDE_SUBSURFACE": False,    # borehole sensor map instead of surface
    "MAX_COLOR_DISTANCE": 24,       # RGB distance still treated as on-scale

    # ========================================================================
    # REALTIME MODE SETTINGS
    # ========================================================================
    "INTERVAL_SEC": 1,              # Seconds between polls
    "DELAY_SEC": 2,                 # Lag behind wall clock

    # ========================================================================
    # HISTORICAL MODE SETTINGS
    # ========================================================================
    "START_TIME": None,             # ISO format: "2024-01-01T16:10:00+09:00"
    "END_TIME": None,               # ISO format: "2024-01-01T16:12:00+09:00"

    # ========================================================================
    # OUTPUT
    # ========================================================================
    "RESULTS_PATH": None,           # .parquet or .csv
    "LOG_LEVEL": "INFO",
}
