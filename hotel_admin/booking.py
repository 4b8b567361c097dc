"""
Booking engine.

Every write re-checks the booking invariants against the current store:
dates in order, guests within the option's capacity, and for every night
of the stay fewer overlapping bookings than the option's vacant count.
The check and the write share one transaction but take no row locks, so
two concurrent requests for the last vacancy can both pass on backends
without serializable isolation.
"""

import logging
from dataclasses import dataclass, fields
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from hotel_admin import db
from hotel_admin.catalog import get_hotel, get_room, tax_rate_for
from hotel_admin.errors import Conflict, NotFound, ValidationFailed
from hotel_admin.models import Booking, RoomOption, User
from hotel_admin.schemas import apply_patch, patch_changes
from hotel_admin.security import require_owner_or_admin

logger = logging.getLogger(__name__)

BOOKING_FIELDS = {
    'Hotel': 'hotel_id',
    'Room': 'room_id',
    'RoomOption': 'room_option_id',
    'CheckInDate': 'check_in',
    'CheckOutDate': 'check_out',
    'NumberOfGuests': 'guests',
}

CENT = Decimal('0.01')


@dataclass
class BookingDraft:
    """Proposed booking values, validated before they touch a ``Booking`` row."""

    user_id: int
    hotel_id: int
    room_id: int
    room_option_id: Optional[int]
    check_in: date
    check_out: date
    guests: int

    @classmethod
    def from_booking(cls, booking):
        return cls(**{f.name: getattr(booking, f.name) for f in fields(cls)})

    def copy_to(self, booking):
        for f in fields(self):
            setattr(booking, f.name, getattr(self, f.name))

    @property
    def nights(self):
        return (self.check_out - self.check_in).days


def quote_total(price, nights, tax_rate):
    """nights x nightly price x (1 + tax rate), rounded to cents."""
    total = Decimal(str(price)) * nights * (1 + Decimal(str(tax_rate)))
    return float(total.quantize(CENT, rounding=ROUND_HALF_UP))


def peak_occupancy(bookings, start, end):
    """Highest number of ``bookings`` occupying a single night in [start, end).

    Sweeps the clamped check-in/check-out points instead of walking every
    night, so the cost depends on the bookings and not on the range length.
    A check-out sorts before a check-in on the same day.
    """
    events = []
    for b in bookings:
        first, last = max(b.check_in, start), min(b.check_out, end)
        if first < last:
            events.append((first, 1))
            events.append((last, -1))
    events.sort()

    peak = occupied = 0
    for _, delta in events:
        occupied += delta
        peak = max(peak, occupied)
    return peak


def overlapping_bookings(option_id, start, end, exclude_id=None):
    query = Booking.query.filter(
        Booking.room_option_id == option_id,
        Booking.check_in < end,
        Booking.check_out > start,
    )
    if exclude_id is not None:
        query = query.filter(Booking.id != exclude_id)
    return query.all()


def _select_option(room, option_id):
    if option_id is not None:
        option = db.session.get(RoomOption, option_id)
        if option is None or option.room_id != room.id:
            raise NotFound('Room option not found in this room.')
        return option
    if len(room.options) == 1:
        return room.options[0]
    if not room.options:
        raise ValidationFailed('Room has no bookable options.')
    raise ValidationFailed('RoomOption is required when the room has several options.')


def _validate(draft, exclude_id=None):
    """Check ``draft`` against the store and return its total price."""
    if draft.check_in >= draft.check_out:
        raise ValidationFailed('Check-out date must be after check-in date.')
    if draft.guests < 1:
        raise ValidationFailed('A booking needs at least one guest.')

    if db.session.get(User, draft.user_id) is None:
        raise NotFound('User not found.')
    hotel = get_hotel(draft.hotel_id)
    room = get_room(draft.room_id)
    if hotel.rooms and room not in hotel.rooms:
        raise ValidationFailed('Room is not listed by this hotel.')

    option = _select_option(room, draft.room_option_id)
    draft.room_option_id = option.id
    if draft.guests > option.guest_capacity:
        raise ValidationFailed(
            f'{option.name} accepts at most {option.guest_capacity} guests.')

    taken = peak_occupancy(
        overlapping_bookings(option.id, draft.check_in, draft.check_out, exclude_id),
        draft.check_in, draft.check_out)
    if taken >= option.vacant_count:
        logger.info('No vacancy for option %s between %s and %s',
                    option.id, draft.check_in, draft.check_out)
        raise Conflict(f'{option.name} is not available for the selected dates.')

    return quote_total(option.price, draft.nights, tax_rate_for(hotel))


def create_booking(principal, payload):
    user_id = payload.user if payload.user is not None else principal.subject_id
    require_owner_or_admin(principal, user_id)

    draft = BookingDraft(
        user_id=user_id,
        hotel_id=payload.hotel,
        room_id=payload.room,
        room_option_id=payload.room_option,
        check_in=payload.check_in,
        check_out=payload.check_out,
        guests=payload.guests,
    )
    total = _validate(draft)

    booking = Booking(total_price=total)
    draft.copy_to(booking)
    db.session.add(booking)
    db.session.commit()
    logger.info('Created booking %s for user %s', booking.id, booking.user_id)
    return booking


def get_booking(booking_id):
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise NotFound('Booking not found.')
    return booking


def view_booking(principal, booking_id):
    booking = get_booking(booking_id)
    require_owner_or_admin(principal, booking.user_id)
    return booking


def list_bookings():
    return Booking.query.order_by(Booking.id).all()


def list_user_bookings(principal, user_id):
    require_owner_or_admin(principal, user_id)
    return Booking.query.filter_by(user_id=user_id).order_by(Booking.id).all()


def update_booking(principal, booking_id, patch):
    """Merge the present fields of ``patch`` and re-check every invariant."""
    booking = get_booking(booking_id)
    require_owner_or_admin(principal, booking.user_id)

    draft = BookingDraft.from_booking(booking)
    changes = patch_changes(patch)
    # a new room invalidates the old option unless one is given
    if 'Room' in changes and 'RoomOption' not in changes:
        draft.room_option_id = None
    apply_patch(draft, changes, BOOKING_FIELDS)

    total = _validate(draft, exclude_id=booking.id)
    draft.copy_to(booking)
    booking.total_price = total
    db.session.commit()
    logger.info('Updated booking %s', booking.id)
    return booking


def cancel_booking(principal, booking_id):
    booking = get_booking(booking_id)
    require_owner_or_admin(principal, booking.user_id)
    db.session.delete(booking)
    db.session.commit()
    logger.info('Cancelled booking %s', booking_id)


def option_availability(room, start, end):
    """Free units per option of ``room`` over [start, end)."""
    if start >= end:
        raise ValidationFailed('checkOut must be after checkIn.')
    availability = []
    for option in room.options:
        taken = peak_occupancy(overlapping_bookings(option.id, start, end), start, end)
        availability.append({
            '_id': option.id,
            'RoomName': option.name,
            'NumOfEmptyRooms': option.vacant_count,
            'Available': max(option.vacant_count - taken, 0),
        })
    return availability
