"""`kmoni` - Kyoshin MONItor map decoding.

Turns rendered realtime seismic-intensity map images back into per-station
intensity values using a registry of observation points.

Subpackages:
- points: Observation point records and the sorted registry
- codec: CSV, protobuf-wire and JSON registry formats
- image: Pixel grids, color classification, per-station decoding
- web: Map image client
- pipeline: Fetch-then-decode monitor and result export
- contracts: Fail-fast stage invariants
- schemas: Layered pydantic configuration
- cli: Command runners behind the `kmoni` console script
"""

__version__ = "0.1.0"
