# travel_logs.py
#
# Description: Travel logs and the destinations pinned to them. Every
#              operation is scoped to the calling owner; a log or destination
#              that belongs to someone else is reported as not found.

from __future__ import annotations

import itertools
import logging
import threading
import time
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from store import require_owner

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------- #
# errors
# --------------------------------------------------------------------------- #
class TravelLogError(Exception):
    """Base exception for travel log failures."""

class TravelLogNotFound(TravelLogError):
    """Raised when a log is missing or owned by another user."""

class DestinationNotFound(TravelLogError):
    """Raised when a destination is missing or owned by another user."""

# --------------------------------------------------------------------------- #
# records
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class TravelLog:
    id: str
    owner: str
    title: str
    description: Optional[str] = None
    start_date: Optional[float] = None
    end_date: Optional[float] = None
    is_active: bool = True
    created_at: float = 0.0
    seq: int = 0


@dataclass(frozen=True)
class Destination:
    id: str
    travel_log_id: str
    owner: str
    name: str
    latitude: float
    longitude: float
    notes: Optional[str] = None
    visited_date: Optional[float] = None
    photos: Tuple[str, ...] = ()
    category: Optional[str] = None


@dataclass(frozen=True)
class TravelLogDetail:
    """A travel log together with its destinations."""
    log: TravelLog
    destinations: List[Destination]


def validate_coordinates(latitude: float, longitude: float) -> None:
    if not -90.0 <= latitude <= 90.0:
        raise ValueError(f"Latitude out of range: {latitude}")
    if not -180.0 <= longitude <= 180.0:
        raise ValueError(f"Longitude out of range: {longitude}")


SAMPLE_DESTINATIONS = (
    {
        "name": "Hadimba Temple",
        "latitude": 32.2435,
        "longitude": 77.1887,
        "category": "Temple",
        "notes": "Ancient cedar wood temple in the middle of the forest.",
    },
    {
        "name": "Solang Valley",
        "latitude": 32.3164,
        "longitude": 77.1556,
        "category": "Adventure",
        "notes": "Paragliding and zorbing with amazing mountain views.",
    },
    {
        "name": "Old Manali",
        "latitude": 32.257,
        "longitude": 77.1893,
        "category": "Neighborhood",
        "notes": "Chill cafes, live music, and relaxed vibe.",
    },
)

# --------------------------------------------------------------------------- #
# in-memory store
# --------------------------------------------------------------------------- #
class InMemoryTravelLogStore:
    """Owner-scoped travel logs; at most one log per owner is active."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._logs: Dict[str, TravelLog] = {}
        self._destinations: Dict[str, Destination] = {}
        self._seq = itertools.count(1)

    # -- helpers -------------------------------------------------------------
    def _owned_log(self, owner: str, log_id: str) -> TravelLog:
        log = self._logs.get(log_id)
        if log is None or log.owner != owner:
            raise TravelLogNotFound("Travel log not found or access denied")
        return log

    def _owned_destination(self, owner: str, destination_id: str) -> Destination:
        destination = self._destinations.get(destination_id)
        if destination is None or destination.owner != owner:
            raise DestinationNotFound("Destination not found or access denied")
        return destination

    def _destinations_of(self, log_id: str) -> List[Destination]:
        return [d for d in self._destinations.values() if d.travel_log_id == log_id]

    # -- travel logs ---------------------------------------------------------
    def list_logs(self, owner: Optional[str]) -> List[TravelLog]:
        """The owner's logs, newest first."""
        owner = require_owner(owner)
        with self._lock:
            logs = [log for log in self._logs.values() if log.owner == owner]
        return sorted(logs, key=lambda log: (log.created_at, log.seq), reverse=True)

    def get_log(self, owner: Optional[str], log_id: str) -> TravelLogDetail:
        owner = require_owner(owner)
        with self._lock:
            log = self._owned_log(owner, log_id)
            return TravelLogDetail(log=log, destinations=self._destinations_of(log_id))

    def create_log(
        self,
        owner: Optional[str],
        title: str,
        description: Optional[str] = None,
        start_date: Optional[float] = None,
        end_date: Optional[float] = None,
    ) -> TravelLog:
        """Create a new active log; the owner's other logs become inactive."""
        owner = require_owner(owner)
        if not title or not title.strip():
            raise ValueError("Title must not be empty.")

        with self._lock:
            for log_id, log in list(self._logs.items()):
                if log.owner == owner and log.is_active:
                    self._logs[log_id] = replace(log, is_active=False)

            log = TravelLog(
                id=uuid.uuid4().hex,
                owner=owner,
                title=title.strip(),
                description=description,
                start_date=start_date,
                end_date=end_date,
                is_active=True,
                created_at=self._clock(),
                seq=next(self._seq),
            )
            self._logs[log.id] = log

        logger.info("Travel log created", extra={"extra": {"owner": owner, "log_id": log.id}})
        return log

    def update_log(self, owner: Optional[str], log_id: str, /, **changes) -> TravelLog:
        """
        Apply the given fields; fields left as None are not touched.
        Activating a log deactivates the owner's other logs.
        """
        owner = require_owner(owner)
        allowed = {"title", "description", "start_date", "end_date", "is_active"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown travel log fields: {sorted(unknown)}")

        updates = {k: v for k, v in changes.items() if v is not None}
        if "title" in updates:
            if not updates["title"].strip():
                raise ValueError("Title must not be empty.")
            updates["title"] = updates["title"].strip()

        with self._lock:
            log = replace(self._owned_log(owner, log_id), **updates)
            if log.is_active:
                for other_id, other in list(self._logs.items()):
                    if other_id != log_id and other.owner == owner and other.is_active:
                        self._logs[other_id] = replace(other, is_active=False)
            self._logs[log_id] = log
        return log

    def delete_log(self, owner: Optional[str], log_id: str) -> None:
        """Delete a log and every destination pinned to it."""
        owner = require_owner(owner)
        with self._lock:
            self._owned_log(owner, log_id)
            for destination in self._destinations_of(log_id):
                del self._destinations[destination.id]
            del self._logs[log_id]
        logger.info("Travel log deleted", extra={"extra": {"owner": owner, "log_id": log_id}})

    # -- destinations --------------------------------------------------------
    def add_destination(
        self,
        owner: Optional[str],
        travel_log_id: str,
        name: str,
        latitude: float,
        longitude: float,
        notes: Optional[str] = None,
        visited_date: Optional[float] = None,
        category: Optional[str] = None,
        photos: Optional[Iterable[str]] = None,
    ) -> Destination:
        owner = require_owner(owner)
        if not name or not name.strip():
            raise ValueError("Destination name must not be empty.")
        validate_coordinates(latitude, longitude)

        with self._lock:
            self._owned_log(owner, travel_log_id)
            destination = Destination(
                id=uuid.uuid4().hex,
                travel_log_id=travel_log_id,
                owner=owner,
                name=name.strip(),
                latitude=latitude,
                longitude=longitude,
                notes=notes,
                visited_date=visited_date,
                photos=tuple(photos or ()),
                category=category,
            )
            self._destinations[destination.id] = destination
        return destination

    def update_destination(self, owner: Optional[str], destination_id: str, /, **changes) -> Destination:
        owner = require_owner(owner)
        allowed = {"name", "notes", "visited_date", "category", "photos"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown destination fields: {sorted(unknown)}")

        updates = {k: v for k, v in changes.items() if v is not None}
        if "photos" in updates:
            updates["photos"] = tuple(updates["photos"])
        with self._lock:
            destination = replace(self._owned_destination(owner, destination_id), **updates)
            self._destinations[destination_id] = destination
        return destination

    def delete_destination(self, owner: Optional[str], destination_id: str) -> None:
        owner = require_owner(owner)
        with self._lock:
            self._owned_destination(owner, destination_id)
            del self._destinations[destination_id]

    def list_destinations(self, owner: Optional[str], travel_log_id: str) -> List[Destination]:
        owner = require_owner(owner)
        with self._lock:
            self._owned_log(owner, travel_log_id)
            return self._destinations_of(travel_log_id)

    # -- sample data ---------------------------------------------------------
    def create_sample_data(self, owner: Optional[str]) -> TravelLog:
        """Create a week-long 'Manali Adventure' log with three destinations."""
        now = self._clock()
        log = self.create_log(
            owner,
            title="Manali Adventure",
            description="A week exploring valleys, temples, and cafes in Manali.",
            start_date=now - 7 * 24 * 60 * 60,
            end_date=now,
        )
        for sample in SAMPLE_DESTINATIONS:
            self.add_destination(owner, log.id, visited_date=now, **sample)
        return log
