"""
Hotels, rooms and taxes.

Hotels hold weak references to rooms: a room may be listed by several hotels
or by none, and deleting a hotel never deletes a room.
"""

import logging

from sqlalchemy.exc import IntegrityError

from hotel_admin import db
from hotel_admin.errors import Conflict, NotFound, ValidationFailed
from hotel_admin.models import Booking, Hotel, HotelReview, Room, RoomOption, Tax, User
from hotel_admin.schemas import apply_patch, patch_changes

logger = logging.getLogger(__name__)

HOTEL_SEARCH_COLUMNS = {
    'country': Hotel.country,
    'city': Hotel.city,
    'province': Hotel.province,
}

ROOM_AMENITY_COLUMNS = {
    'Wifi': RoomOption.wifi,
    'CableTv': RoomOption.cable_tv,
    'AirCondition': RoomOption.air_condition,
    'FreeCancellation': RoomOption.free_cancellation,
    'NonSmoking': RoomOption.non_smoking,
}

BED_TYPE_COLUMNS = {
    'SingleBed': RoomOption.single_bed,
    'TwinBed': RoomOption.twin_bed,
    'QueenBed': RoomOption.queen_bed,
    'KingBed': RoomOption.king_bed,
}


def _like_pattern(text):
    """Case-insensitive substring pattern with LIKE wildcards escaped."""
    escaped = text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f'%{escaped}%'


### Hoteles ###

def list_hotels():
    return Hotel.query.order_by(Hotel.id).all()


def get_hotel(hotel_id):
    hotel = db.session.get(Hotel, hotel_id)
    if hotel is None:
        raise NotFound('Cannot find hotel')
    return hotel


def _resolve_rooms(room_ids):
    rooms = []
    for room_id in dict.fromkeys(room_ids):
        room = db.session.get(Room, room_id)
        if room is None:
            raise NotFound(f'Room {room_id} not found')
        rooms.append(room)
    return rooms


def _build_reviews(reviews):
    built = []
    for review in reviews:
        if db.session.get(User, review['userId']) is None:
            raise NotFound('User not found.')
        built.append(HotelReview(user_id=review['userId'], rating=review['rating'],
                                 review_text=review.get('reviewText')))
    return built


def _assign_hotel(hotel, changes):
    reviews = changes.pop('HotelReviews', None)
    room_ids = changes.pop('Rooms', None)
    apply_patch(hotel, changes, Hotel.WIRE_FIELDS)
    if reviews is not None:
        hotel.reviews = _build_reviews(reviews)
    if room_ids is not None:
        hotel.rooms = _resolve_rooms(room_ids)


def create_hotel(payload):
    hotel = Hotel()
    _assign_hotel(hotel, payload.model_dump(by_alias=True))
    db.session.add(hotel)
    db.session.commit()
    logger.info('Created hotel %s (%s)', hotel.id, hotel.name)
    return hotel


def update_hotel(hotel_id, patch):
    """Overwrite only the fields present in ``patch``."""
    hotel = get_hotel(hotel_id)
    _assign_hotel(hotel, patch_changes(patch))
    db.session.commit()
    return hotel


def delete_hotel(hotel_id):
    hotel = get_hotel(hotel_id)
    if Booking.query.filter_by(hotel_id=hotel.id).first() is not None:
        raise Conflict('Hotel has bookings and cannot be deleted')
    # reviews go with the hotel, rooms only lose the reference
    db.session.delete(hotel)
    db.session.commit()
    logger.info('Deleted hotel %s', hotel_id)


def search_hotels_by_name(name):
    return (Hotel.query.filter(Hotel.name.ilike(_like_pattern(name), escape='\\'))
            .order_by(Hotel.id)
            .all())


def search_hotels_by(field, value):
    column = HOTEL_SEARCH_COLUMNS[field]
    return Hotel.query.filter(column == value).order_by(Hotel.id).all()


def add_review(hotel_id, payload):
    """Append a review; both the author and the hotel must exist."""
    if db.session.get(User, payload.user_id) is None:
        raise NotFound('User not found.')
    hotel = db.session.get(Hotel, hotel_id)
    if hotel is None:
        raise NotFound('Hotel not found.')

    review = HotelReview(user_id=payload.user_id, rating=payload.rating,
                         review_text=payload.review_text)
    hotel.reviews.append(review)
    db.session.commit()
    return review


### Habitaciones ###

def list_rooms():
    return Room.query.order_by(Room.id).all()


def get_room(room_id):
    room = db.session.get(Room, room_id)
    if room is None:
        raise NotFound('Room not found.')
    return room


def rooms_for_hotel(hotel_id):
    return list(get_hotel(hotel_id).rooms)


def _new_option(data):
    option = RoomOption()
    apply_patch(option, data, RoomOption.WIRE_FIELDS)
    return option


def create_room(payload):
    room = Room(options=[_new_option(option) for option in payload.model_dump(by_alias=True)['RoomOptions']])
    db.session.add(room)
    db.session.commit()
    logger.info('Created room %s with %d options', room.id, len(room.options))
    return room


def _replace_options(room, options):
    existing = {option.id: option for option in room.options}
    kept = []
    for data in options:
        option_id = data.get('_id')
        if option_id is None:
            kept.append(_new_option(data))
            continue
        option = existing.pop(option_id, None)
        if option is None:
            raise NotFound(f'Room option {option_id} not found in this room')
        apply_patch(option, data, RoomOption.WIRE_FIELDS)
        kept.append(option)

    for option in existing.values():
        if Booking.query.filter_by(room_option_id=option.id).first() is not None:
            raise Conflict(f'Room option {option.id} has bookings and cannot be removed')
    room.options = kept


def update_room(room_id, patch):
    room = get_room(room_id)
    changes = patch_changes(patch)
    if 'RoomOptions' in changes:
        with db.session.no_autoflush:
            _replace_options(room, changes['RoomOptions'])
    db.session.commit()
    return room


def delete_room(room_id):
    room = get_room(room_id)
    if Booking.query.filter_by(room_id=room.id).first() is not None:
        raise Conflict('Room has bookings and cannot be deleted')
    db.session.delete(room)
    db.session.commit()
    logger.info('Deleted room %s', room_id)


def _rooms_with_options(*criteria):
    return (Room.query.join(RoomOption)
            .filter(*criteria)
            .distinct()
            .order_by(Room.id)
            .all())


def search_rooms_by_name(name):
    return _rooms_with_options(RoomOption.name.ilike(_like_pattern(name), escape='\\'))


def search_rooms_by_price(price):
    return _rooms_with_options(RoomOption.price == price)


def search_rooms_by_amenities(args):
    """Filter on ``roomAmenities.<Flag>`` query args; unknown flags are ignored."""
    criteria = []
    for key, value in args.items():
        if not key.startswith('roomAmenities.'):
            continue
        column = ROOM_AMENITY_COLUMNS.get(key.split('.', 1)[1])
        if column is not None:
            criteria.append(column == (value == 'true'))
    if not criteria:
        return list_rooms()
    return _rooms_with_options(*criteria)


def search_rooms_by_bed_type(args):
    criteria = [column == True for key, column in BED_TYPE_COLUMNS.items()  # noqa: E712
                if args.get(key) == 'true']
    if not criteria:
        raise ValidationFailed('Invalid bed type provided.')
    return _rooms_with_options(*criteria)


### Impuestos ###

def list_taxes():
    return Tax.query.order_by(Tax.id).all()


def create_tax(payload):
    # NULL provinces never collide in the unique constraint
    if Tax.query.filter_by(country=payload.country, province=payload.province).first() is not None:
        raise Conflict('A tax rate for this region already exists')
    tax = Tax(country=payload.country, province=payload.province, rate=payload.rate)
    db.session.add(tax)
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise Conflict('A tax rate for this region already exists') from e
    logger.info('Created tax %s for %s/%s', tax.id, tax.country, tax.province)
    return tax


def tax_rate_for(hotel):
    """Rate for the hotel's province, falling back to a country-wide rate, else 0."""
    if not hotel.country:
        return 0.0
    tax = Tax.query.filter_by(country=hotel.country, province=hotel.province).first()
    if tax is None and hotel.province is not None:
        tax = Tax.query.filter_by(country=hotel.country, province=None).first()
    return tax.rate if tax is not None else 0.0
