"""Kyoshin monitor map image client.

Fetches the rendered realtime map for one second of data. This is the only
blocking call in a decoding cycle: the image is fully downloaded before any
pixel is classified.

Image URLs follow the service layout::

    {base_url}/data/map_img/RealTimeImg/{kind}_{s|b}/{YYYYMMDD}/{YYYYMMDDhhmmss}.{kind}_{s|b}.gif

where ``s`` is the surface sensor and ``b`` the borehole (subsurface) sensor,
and timestamps are Japan Standard Time.
"""

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union

import requests

__all__ = ['RealTimeDataType', 'KmoniImageClient', 'FetchError', 'JST', 'DEFAULT_BASE_URL', 'to_jst']

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://www.kmoni.bosai.go.jp"
JST = timezone(timedelta(hours=9), name="JST")


class RealTimeDataType(str, Enum):
    """Map products served by the realtime image endpoint."""
    SHINDO = "jma"
    PGA = "acmap"
    PGV = "vcmap"
    PGD = "dcmap"
    RSP0125 = "rsp0125"
    RSP0250 = "rsp0250"
    RSP0500 = "rsp0500"
    RSP1000 = "rsp1000"
    RSP2000 = "rsp2000"
    RSP4000 = "rsp4000"


class FetchError(RuntimeError):
    """The map image could not be retrieved."""
    pass


def to_jst(timestamp: datetime) -> datetime:
    """Convert to JST. Naive datetimes are taken to be JST already."""
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=JST)
    return timestamp.astimezone(JST)


class KmoniImageClient:
    """HTTP client for realtime map images.

    Parameters
    ----------
    base_url : str, optional
        Service root (default: public kyoshin monitor host).
    timeout : float, optional
        Request timeout in seconds.
    session : requests.Session, optional
        Session for connection reuse; injectable for testing.

    Examples
    --------
    >>> client = KmoniImageClient()
    >>> data = client.fetch(datetime(2024, 1, 1, 16, 10, 30, tzinfo=JST))
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_url(self, timestamp: datetime,
                  data_kind: Union[RealTimeDataType, str] = RealTimeDataType.SHINDO,
                  include_subsurface: bool = False) -> str:
        """Construct the image URL for one second of data (no request made)."""
        kind = RealTimeDataType(data_kind).value
        sensor = "b" if include_subsurface else "s"
        t = to_jst(timestamp)
        return (
            f"{self.base_url}/data/map_img/RealTimeImg/{kind}_{sensor}/"
            f"{t:%Y%m%d}/{t:%Y%m%d%H%M%S}.{kind}_{sensor}.gif"
        )

    def fetch(self, timestamp: datetime,
              data_kind: Union[RealTimeDataType, str] = RealTimeDataType.SHINDO,
              include_subsurface: bool = False) -> bytes:
        """Download the rendered map image.

        Returns
        -------
        bytes
            Raw image bytes (GIF).

        Raises
        ------
        FetchError
            On connection errors, timeouts, non-200 responses or empty bodies.
        """
        url = self.build_url(timestamp, data_kind, include_subsurface)
        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"Request failed for {url}: {e}") from e

        if r.status_code != 200 or not r.content:
            raise FetchError(f"Image request failed: {r.status_code} for {url}")

        logger.debug("Fetched %d bytes from %s", len(r.content), url)
        return r.content

    def close(self) -> None:
        self.session.close()
