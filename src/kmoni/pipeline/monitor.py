"""Fetch-then-decode orchestration and the polling monitor thread.

One decoding cycle is: fetch the rendered map for a timestamp (the only
blocking call), decode the image bytes into a pixel grid, then run the
per-station pipeline. A cycle whose fetch or decode fails produces no
results; the pipeline is never invoked on a partial image.
"""

import logging
import queue
import threading
import time
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple, Union

from kmoni.image.analysis import AnalysisResult, parse_intensity_from_image
from kmoni.image.classifier import ColorClassifier
from kmoni.image.grid import ImageDecodeError, decode_image
from kmoni.points.observation_point import ObservationPoint
from kmoni.web.client import JST, FetchError, KmoniImageClient, RealTimeDataType, to_jst

if TYPE_CHECKING:
    from kmoni.schemas import InternalConfig

__all__ = [
    'parse_intensity_from_parameter',
    'classifier_from_config',
    'client_from_config',
    'IntensityMonitor',
]

logger = logging.getLogger(__name__)

Entries = Sequence[Union[ObservationPoint, AnalysisResult]]


def parse_intensity_from_parameter(
    client: KmoniImageClient,
    entries: Entries,
    timestamp: datetime,
    include_subsurface: bool = False,
    data_kind: Union[RealTimeDataType, str] = RealTimeDataType.SHINDO,
    classifier: Optional[ColorClassifier] = None,
) -> List[AnalysisResult]:
    """Fetch the map for ``timestamp`` and decode every station on it.

    Parameters
    ----------
    client : KmoniImageClient
        Image source. Anything with a compatible ``fetch`` method works.
    entries : sequence of ObservationPoint or AnalysisResult
        Stations to decode, passed through to ``parse_intensity_from_image``.
    timestamp : datetime
        Second of data to fetch (naive values are taken as JST).
    include_subsurface : bool, optional
        Use the borehole sensor map instead of the surface one.
    data_kind : RealTimeDataType or str, optional
        Map product (default: JMA seismic intensity).
    classifier : ColorClassifier, optional
        Color classifier (default: realtime shindo palette).

    Returns
    -------
    list of AnalysisResult
        One result per entry, in input order.

    Raises
    ------
    FetchError
        If the image could not be downloaded.
    ImageDecodeError
        If the downloaded bytes are not a readable image.
    """
    data = client.fetch(timestamp, data_kind, include_subsurface)
    grid = decode_image(data, attrs={
        "timestamp": to_jst(timestamp).isoformat(),
        "data_kind": RealTimeDataType(data_kind).value,
        "include_subsurface": int(include_subsurface),
    })
    return parse_intensity_from_image(entries, grid, classifier)


def classifier_from_config(config: "InternalConfig") -> ColorClassifier:
    """Build the color classifier described by ``config.classifier``."""
    return ColorClassifier(
        max_distance=config.classifier.max_color_distance,
        interpolate=config.classifier.interpolate,
        decimals=config.classifier.decimals,
    )


def client_from_config(config: "InternalConfig") -> KmoniImageClient:
    """Build the image client described by ``config.client``."""
    return KmoniImageClient(
        base_url=config.client.base_url,
        timeout=config.client.timeout_sec,
    )


class IntensityMonitor(threading.Thread):
    """Polls the map service and decodes each image in the background.

    **Realtime Mode:** Every ``interval_sec`` seconds, decodes the image for
    ``clock() - delay_sec`` (truncated to the second). The delay gives the
    service time to publish the image. Runs until ``stop()`` is called.

    **Historical Mode:** Walks ``start_time`` to ``end_time`` inclusive in
    ``step_sec`` steps, then exits on its own.

    **Queue Communication:** Each successful cycle puts
    ``(timestamp, results)`` on ``result_queue``. A cycle whose fetch or
    decode fails is logged and skipped; nothing is queued for it.

    **Registry Sharing:** The monitor only reads ``points``. Callers that
    mutate the registry while the monitor runs must synchronize themselves.

    Example usage::

        monitor = IntensityMonitor(config, registry, result_queue=q)
        monitor.start()
        ...
        monitor.stop()
        monitor.join(timeout=10)
    """

    def __init__(self, config: "InternalConfig", points: Entries,
                 result_queue: Optional[queue.Queue] = None,
                 client: Optional[KmoniImageClient] = None,
                 classifier: Optional[ColorClassifier] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 sleeper: Optional[Callable[[float], None]] = None,
                 name: str = "IntensityMonitor"):
        """Initialize monitor.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.
        points : sequence of ObservationPoint
            Stations to decode each cycle (a registry works).
        result_queue : queue.Queue, optional
            Receives ``(timestamp, results)`` tuples. If None, results are
            only logged.
        client : KmoniImageClient, optional
            Image source. If None, one is built from ``config.client``.
            Allows injection for testing.
        classifier : ColorClassifier, optional
            If None, one is built from ``config.classifier``.
        clock : callable, optional
            Function returning the current datetime (for testing). If None,
            uses ``datetime.now(JST)``.
        sleeper : callable, optional
            Function to sleep (for testing). If None, uses ``time.sleep``.
        name : str, optional
            Thread name for logging.
        """
        super().__init__(daemon=True, name=name)

        self.config = config
        self.points = points
        self.result_queue = result_queue
        self.client = client or client_from_config(config)
        self.classifier = classifier or classifier_from_config(config)

        self.data_kind = config.client.data_kind
        self.include_subsurface = config.client.include_subsurface
        self.interval_sec = config.monitor.interval_sec
        self.delay = timedelta(seconds=config.monitor.delay_sec)
        self.step = timedelta(seconds=config.monitor.step_sec)

        # injectable time helpers for testing
        self._clock = clock or (lambda: datetime.now(JST))
        self._sleep = sleeper or time.sleep

        self._stop_event = threading.Event()
        self._cycles = 0
        self._failed_cycles = 0

    # ========================================================================
    # Thread control
    # ========================================================================

    def stop(self):
        """Signal the monitor thread to stop after the current cycle."""
        self._stop_event.set()

    def stopped(self) -> bool:
        """Check if a stop request has been issued."""
        return self._stop_event.is_set()

    def is_historical_mode(self) -> bool:
        return self.config.mode == "historical"

    def get_progress(self) -> Tuple[int, int]:
        """Return ``(cycles_run, cycles_failed)``."""
        return self._cycles, self._failed_cycles

    def run(self):
        """Main thread loop - invoked by ``start()``."""
        mode = "historical" if self.is_historical_mode() else "realtime"
        logger.info("Starting %s in %s mode (%s)", self.name, mode, self.data_kind)

        if self.is_historical_mode():
            self._run_historical()
        else:
            self._run_realtime()

        cycles, failed = self.get_progress()
        logger.info("Stopped %s after %d cycles (%d failed)", self.name, cycles, failed)

    def _run_realtime(self):
        while not self.stopped():
            target = self._clock() - self.delay
            self.poll_once(target.replace(microsecond=0))
            self._interruptible_sleep(self.interval_sec)

    def _run_historical(self):
        for timestamp in self.iter_timestamps():
            if self.stopped():
                break
            self.poll_once(timestamp)
        logger.info("Historical range complete")

    def _interruptible_sleep(self, seconds: float):
        """Sleep that can be interrupted by stop event."""
        remaining = seconds
        while remaining > 0 and not self.stopped():
            chunk = min(remaining, 0.5)
            self._sleep(chunk)
            remaining -= chunk

    # ========================================================================
    # Cycles
    # ========================================================================

    def iter_timestamps(self):
        """Yield historical timestamps from start_time to end_time inclusive."""
        current = to_jst(self.config.monitor.start_time)
        end = to_jst(self.config.monitor.end_time)
        while current <= end:
            yield current
            current += self.step

    def poll_once(self, timestamp: datetime) -> Optional[List[AnalysisResult]]:
        """Run one fetch-decode cycle for ``timestamp``.

        Returns
        -------
        list of AnalysisResult or None
            None if the image could not be fetched or decoded.
        """
        self._cycles += 1
        try:
            results = parse_intensity_from_parameter(
                self.client, self.points, timestamp,
                include_subsurface=self.include_subsurface,
                data_kind=self.data_kind,
                classifier=self.classifier,
            )
        except (FetchError, ImageDecodeError) as e:
            self._failed_cycles += 1
            logger.warning("Skipping %s: %s", timestamp.isoformat(), e)
            return None

        classified = sum(1 for r in results if r.intensity is not None)
        logger.info("%s: %d/%d stations classified", timestamp.isoformat(), classified, len(results))

        if self.result_queue is not None:
            self.result_queue.put((timestamp, results))
        return results
