"""
Commitment counting over the two booking sources.

Scheduled jobs and bookings both reserve crew capacity. A job created from a
booking represents the same commitment as that booking, so each commitment
is keyed by its origin and the scheduled job wins when both exist.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from sqlalchemy.orm import Session

from .repository import AvailabilityRepository

SLOTS = ("morning", "afternoon")


@dataclass(frozen=True)
class Commitment:
    day: date
    slot: str
    origin: tuple  # ("booking", id) or ("job", id)


def _expand_slots(time_slot: str) -> tuple:
    if time_slot in SLOTS:
        return (time_slot,)
    # full_day jobs occupy both half days
    return SLOTS


class ScheduledJobSource:
    def __init__(self, db: Session, repo: AvailabilityRepository):
        self.db = db
        self.repo = repo

    def commitments(self, business_id: int, start: date, end: date) -> Iterable[Commitment]:
        for job in self.repo.get_active_jobs(self.db, business_id, start, end):
            origin = ("booking", job.booking_id) if job.booking_id else ("job", job.id)
            for slot in _expand_slots(job.time_slot):
                yield Commitment(job.job_date, slot, origin)


class BookingSource:
    def __init__(self, db: Session, repo: AvailabilityRepository):
        self.db = db
        self.repo = repo

    def commitments(self, business_id: int, start: date, end: date) -> Iterable[Commitment]:
        bookings = self.repo.get_active_bookings(self.db, business_id, start, end)
        scheduled = self.repo.get_linked_job_booking_ids(self.db, [b.id for b in bookings])
        for booking in bookings:
            if booking.id in scheduled:
                continue
            for slot in _expand_slots(booking.time_slot):
                yield Commitment(booking.requested_date, slot, ("booking", booking.id))


class CommitmentQuery:
    """Count commitments per (date, slot) across every source"""

    def __init__(self, db: Session, sources=None):
        repo = AvailabilityRepository()
        self.sources = sources or [ScheduledJobSource(db, repo), BookingSource(db, repo)]

    def counts(self, business_id: int, start: date, end: date) -> Counter:
        seen = set()
        counts = Counter()
        for source in self.sources:
            for commitment in source.commitments(business_id, start, end):
                key = (commitment.day, commitment.slot, commitment.origin)
                if key in seen:
                    continue
                seen.add(key)
                counts[(commitment.day, commitment.slot)] += 1
        return counts
