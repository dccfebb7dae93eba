"""
Visibility Scanner

Finds the intervals during which a debris object is above a ground
station's minimum elevation.

The scan samples look angles at a fixed step (default 1 minute). A pass
opens on the first sample above the threshold and closes on the first
sample back at or below it; passes of 30 s or less are discarded. A pass
still open when the horizon ends cannot be measured, so it is dropped and
counted as truncated.

Several stations are scanned in parallel, one private propagator per
worker, and the passes are merged into a single timeline. A propagation
failure ends that station's scan and is reported alongside the passes.
"""

import math
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from laser_deorbit.config import MIN_PASS_DURATION_S
from laser_deorbit.models import (
    GroundStation,
    ScanParameters,
    StationScanFailure,
    VisibilityPass,
)
from laser_deorbit.propagation import PropagationError, Propagator

logger = logging.getLogger(__name__)


class ScanCancelled(RuntimeError):
    """Raised when a scan is aborted through its cancellation event."""


class PassDetector:
    """
    Incremental pass detector fed one elevation sample at a time.

    Holds the open pass (if any) between samples; ``update`` returns a
    completed VisibilityPass when a pass closes and is long enough.
    """

    def __init__(
        self,
        station_name: str,
        station_index: int = 0,
        min_elevation_deg: float = 20.0,
        min_duration_s: float = MIN_PASS_DURATION_S,
    ):
        self.station_name = station_name
        self.station_index = station_index
        self.min_elevation_deg = min_elevation_deg
        self.min_duration_s = min_duration_s

        self.in_pass = False
        self.truncated = 0
        self._start_time: Optional[datetime] = None
        self._start_azimuth = 0.0
        self._max_elevation = -90.0

    def update(self, timestamp: datetime, elevation_deg: float, azimuth_deg: float) -> Optional[VisibilityPass]:
        if elevation_deg > self.min_elevation_deg:
            if not self.in_pass:
                self.in_pass = True
                self._start_time = timestamp
                self._start_azimuth = azimuth_deg
                self._max_elevation = elevation_deg
            else:
                self._max_elevation = max(self._max_elevation, elevation_deg)
            return None

        if not self.in_pass:
            return None

        self.in_pass = False
        duration = (timestamp - self._start_time).total_seconds()
        if duration <= self.min_duration_s:
            return None

        return VisibilityPass(
            station_name=self.station_name,
            station_index=self.station_index,
            start_time=self._start_time,
            end_time=timestamp,
            duration_s=duration,
            max_elevation_deg=self._max_elevation,
            start_azimuth_deg=self._start_azimuth,
        )

    def finish(self) -> bool:
        """
        Close the scan at the horizon.

        Returns:
            True if a pass was still open (and is therefore discarded)
        """
        if not self.in_pass:
            return False
        self.in_pass = False
        self.truncated += 1
        logger.warning(
            f"Pass over {self.station_name} starting {self._start_time.isoformat()} "
            f"is still open at the scan horizon and was discarded"
        )
        return True


def detect_passes(
    samples: Iterable[Tuple[datetime, float, float]],
    station_name: str = "Station",
    min_elevation_deg: float = 20.0,
    min_duration_s: float = MIN_PASS_DURATION_S,
) -> Tuple[List[VisibilityPass], int]:
    """
    Run the pass detector over (timestamp, elevation, azimuth) samples.

    Returns:
        Tuple of (passes, truncated pass count)
    """
    detector = PassDetector(station_name, 0, min_elevation_deg, min_duration_s)
    passes = []
    for timestamp, elevation, azimuth in samples:
        completed = detector.update(timestamp, elevation, azimuth)
        if completed is not None:
            passes.append(completed)
    detector.finish()
    return passes, detector.truncated


@dataclass
class StationScan:
    """Passes found for one station, with its scan diagnostics"""

    station: GroundStation
    passes: List[VisibilityPass] = field(default_factory=list)
    truncated_passes: int = 0
    failure: Optional[StationScanFailure] = None


@dataclass
class ScanResult:
    """Merged multi-station scan"""

    passes: List[VisibilityPass]
    station_scans: List[StationScan]

    @property
    def truncated_passes(self) -> int:
        return sum(scan.truncated_passes for scan in self.station_scans)

    @property
    def failures(self) -> List[StationScanFailure]:
        return [scan.failure for scan in self.station_scans if scan.failure is not None]


class VisibilityScanner:
    """
    Visibility scanner for one debris target.

    Args:
        propagator: Propagator for the target; each station scan in
            ``scan_stations`` works on its own clone
        params: Scan window and thresholds
        chunk_samples: Samples evaluated per propagator batch; the
            cancellation event is checked between batches
        max_workers: Thread pool size for multi-station scans
        cancel_event: Optional event that aborts the scan when set
    """

    def __init__(
        self,
        propagator: Propagator,
        params: Optional[ScanParameters] = None,
        chunk_samples: int = 1440,
        max_workers: int = 4,
        cancel_event: Optional[threading.Event] = None,
    ):
        if chunk_samples < 1:
            raise ValueError("chunk_samples must be at least 1")
        self.propagator = propagator
        self.params = params or ScanParameters()
        self.chunk_samples = chunk_samples
        self.max_workers = max_workers
        self.cancel_event = cancel_event

    def _start_time(self, start: Optional[datetime]) -> datetime:
        if start is None:
            start = self.params.start_time
        if start is None:
            start = self.propagator.epoch
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        return start

    def scan(
        self,
        station: GroundStation,
        start: Optional[datetime] = None,
        horizon_days: Optional[float] = None,
        min_elevation_deg: Optional[float] = None,
        step_minutes: Optional[float] = None,
    ) -> List[VisibilityPass]:
        """
        Scan a single station.

        Unset arguments fall back to the scanner's ScanParameters; the
        default start is the target's epoch.

        Returns:
            Passes in chronological order

        Raises:
            PropagationError: If the target cannot be propagated
            ScanCancelled: If the cancellation event is set
        """
        return self.scan_station(
            station, 0, self.propagator, start, horizon_days, min_elevation_deg, step_minutes
        ).passes

    def scan_station(
        self,
        station: GroundStation,
        station_index: int,
        propagator: Propagator,
        start: Optional[datetime] = None,
        horizon_days: Optional[float] = None,
        min_elevation_deg: Optional[float] = None,
        step_minutes: Optional[float] = None,
    ) -> StationScan:
        start = self._start_time(start)
        horizon_days = self.params.horizon_days if horizon_days is None else horizon_days
        min_elevation_deg = self.params.min_elevation_deg if min_elevation_deg is None else min_elevation_deg
        step_minutes = self.params.step_minutes if step_minutes is None else step_minutes

        step_s = step_minutes * 60.0
        n_samples = int(math.floor(horizon_days * 86400.0 / step_s + 1e-9)) + 1

        detector = PassDetector(
            station.name, station_index, min_elevation_deg, self.params.min_pass_duration_s
        )
        result = StationScan(station=station)

        logger.debug(f"Scanning {station.name}: {n_samples} samples from {start.isoformat()}")

        for chunk_start in range(0, n_samples, self.chunk_samples):
            if self.cancel_event is not None and self.cancel_event.is_set():
                raise ScanCancelled(f"Scan of {station.name} cancelled")

            indices = np.arange(chunk_start, min(chunk_start + self.chunk_samples, n_samples))
            offsets = indices * step_s
            azimuth, elevation, _ = propagator.look_angles_batch(station, start, offsets)

            for offset, el, az in zip(offsets, elevation, azimuth):
                completed = detector.update(start + timedelta(seconds=float(offset)), float(el), float(az))
                if completed is not None:
                    result.passes.append(completed)

        detector.finish()
        result.truncated_passes = detector.truncated

        logger.info(f"{station.name}: {len(result.passes)} passes found")
        return result

    def _scan_isolated(self, station: GroundStation, station_index: int) -> StationScan:
        propagator = self.propagator.clone()
        try:
            return self.scan_station(station, station_index, propagator)
        except PropagationError as e:
            logger.error(f"Scan of {station.name} stopped: {e}")
            return StationScan(
                station=station,
                failure=StationScanFailure(
                    station_name=station.name,
                    error_code=e.error_code,
                    message=e.error_message,
                    failed_at=e.timestamp,
                ),
            )

    def scan_stations(self, stations: Sequence[GroundStation]) -> ScanResult:
        """
        Scan all stations in parallel and merge their passes.

        Passes are ordered by start time; simultaneous passes keep station
        order. A station whose propagation fails contributes no passes and
        a StationScanFailure instead.

        Raises:
            ScanCancelled: If the cancellation event is set
        """
        if not stations:
            return ScanResult(passes=[], station_scans=[])

        workers = max(1, min(self.max_workers, len(stations)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._scan_isolated, station, index)
                for index, station in enumerate(stations)
            ]
            station_scans = [future.result() for future in futures]

        passes = [p for scan in station_scans for p in scan.passes]
        passes.sort(key=lambda p: p.start_time)

        logger.info(f"Visibility scan complete: {len(passes)} passes across {len(stations)} stations")
        return ScanResult(passes=passes, station_scans=station_scans)
