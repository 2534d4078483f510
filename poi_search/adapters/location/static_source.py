"""Fixed-position device location source.

Stands in for a platform location service: on a desktop or server host
the "device" position is whatever the caller provides (CLI flags,
configuration). Also the location double used throughout the tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ...domain.errors import LocationPermissionError
from ...domain.models import Coordinate


@dataclass
class StaticLocationSource:
    """DeviceLocationSourcePort returning a preset coordinate.

    Attributes:
        coordinate: Position to report, None for "no fix"
        permission_granted: When False every lookup raises
            LocationPermissionError
    """

    coordinate: Optional[Coordinate] = None
    permission_granted: bool = True

    updates_active: bool = field(default=False, init=False)
    lookups: int = field(default=0, init=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def get_current_location(self) -> Optional[Coordinate]:
        self.lookups += 1
        if not self.permission_granted:
            raise LocationPermissionError("Location permission not granted")
        return self.coordinate

    def start_updates(self) -> None:
        self.updates_active = True
        self._logger.debug("Location updates started")

    def stop_updates(self) -> None:
        self.updates_active = False
        self._logger.debug("Location updates stopped")

    def move_to(self, coordinate: Optional[Coordinate]) -> None:
        """Change the reported position (a new fix arrived)."""
        self.coordinate = coordinate
