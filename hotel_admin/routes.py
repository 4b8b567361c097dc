import logging
from datetime import date

from flask import Blueprint, g, jsonify, request

from hotel_admin import booking, catalog, credentials
from hotel_admin.errors import NotFound, ValidationFailed
from hotel_admin.schemas import (
    BookingCreate, BookingPatch, HotelCreate, HotelPatch, LoginRequest, ReviewRequest,
    RoomCreate, RoomPatch, SignupRequest, TaxCreate, UserPatch,
)
from hotel_admin.security import admin_required, auth_required, token_service

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__)


def _payload(model):
    return model.model_validate(request.get_json(silent=True) or {})


def _non_empty(items, message):
    if not items:
        raise NotFound(message)
    return jsonify([item.to_dict() for item in items]), 200


def _query_date(name):
    value = request.args.get(name)
    if not value:
        raise ValidationFailed(f'Please provide {name}.')
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationFailed(f'{name} must be an ISO date (YYYY-MM-DD).') from None


### RUTAS DE AUTENTICACION ###

@api.route('/auth/signup', methods=['POST'])
def signup():
    credentials.register(_payload(SignupRequest))
    return jsonify({'message': 'User created successfully'}), 201


@api.route('/auth/login', methods=['POST'])
def login():
    data = _payload(LoginRequest)
    user = credentials.authenticate(data.email, data.password)
    token = token_service().issue(user.id, user.role)
    return jsonify({'token': token, 'role': user.role.value}), 200


@api.route('/auth/logout', methods=['POST'])
def logout():
    # tokens are stateless; the client just drops it
    logger.info('User logged out')
    return jsonify({'message': 'Logout successful'}), 200


### RUTAS PARA ADMINISTRADORES: USUARIOS ###

@api.route('/admin/dashboard', methods=['GET'])
@admin_required
def admin_dashboard():
    return jsonify({'message': 'Admin Dashboard - Access Granted'}), 200


@api.route('/admin/allUsers', methods=['GET'])
@admin_required
def get_users():
    return jsonify([user.to_dict() for user in credentials.list_users()]), 200


@api.route('/admin/<int:user_id>', methods=['GET'])
@admin_required
def get_user(user_id):
    return jsonify(credentials.get_user(user_id).to_dict()), 200


@api.route('/admin/<int:user_id>', methods=['PUT'])
@admin_required
def update_user(user_id):
    user = credentials.update_user(user_id, _payload(UserPatch))
    return jsonify(user.to_dict()), 200


@api.route('/admin/<int:user_id>', methods=['DELETE'])
@admin_required
def delete_user(user_id):
    credentials.delete_user(user_id)
    return jsonify({'message': 'User deleted successfully'}), 200


### RUTAS DE HOTELES ###

@api.route('/admin/hotel/all-hotels', methods=['GET'])
def get_hotels():
    return jsonify([hotel.to_dict() for hotel in catalog.list_hotels()]), 200


@api.route('/admin/hotel/newHotel', methods=['POST'])
@admin_required
def create_hotel():
    hotel = catalog.create_hotel(_payload(HotelCreate))
    return jsonify(hotel.to_dict()), 201


@api.route('/admin/hotel/searchByName', methods=['GET'])
def search_hotels_by_name():
    name = request.args.get('name')
    if not name:
        raise ValidationFailed('Please provide a hotel name for the search.')
    return _non_empty(catalog.search_hotels_by_name(name),
                      'No hotels found with the specified name.')


@api.route('/admin/hotel/searchByCountry', methods=['GET'])
def search_hotels_by_country():
    country = request.args.get('country')
    if not country:
        raise ValidationFailed('Please provide a country name for the search.')
    return _non_empty(catalog.search_hotels_by('country', country),
                      'No hotels found in the specified country.')


@api.route('/admin/hotel/searchByCity', methods=['GET'])
def search_hotels_by_city():
    city = request.args.get('city')
    if not city:
        raise ValidationFailed('Please provide a city name for the search.')
    return _non_empty(catalog.search_hotels_by('city', city),
                      'No hotels found in the specified city.')


@api.route('/admin/hotel/searchByProvince', methods=['GET'])
def search_hotels_by_province():
    province = request.args.get('province')
    if not province:
        raise ValidationFailed('Please provide a province name for the search.')
    return _non_empty(catalog.search_hotels_by('province', province),
                      'No hotels found in the specified province.')


@api.route('/admin/hotel/<int:hotel_id>', methods=['GET'])
@auth_required
def get_hotel(hotel_id):
    return jsonify(catalog.get_hotel(hotel_id).to_dict()), 200


@api.route('/admin/hotel/<int:hotel_id>', methods=['PATCH'])
@admin_required
def update_hotel(hotel_id):
    hotel = catalog.update_hotel(hotel_id, _payload(HotelPatch))
    return jsonify(hotel.to_dict()), 200


@api.route('/admin/hotel/<int:hotel_id>', methods=['DELETE'])
@admin_required
def delete_hotel(hotel_id):
    catalog.delete_hotel(hotel_id)
    return jsonify({'message': 'Deleted Hotel'}), 200


@api.route('/admin/hotel/<int:hotel_id>/reviews', methods=['POST'])
def post_review(hotel_id):
    catalog.add_review(hotel_id, _payload(ReviewRequest))
    return jsonify({'message': 'Review posted successfully.'}), 201


### RUTAS DE HABITACIONES ###

@api.route('/admin/room/newRoom', methods=['POST'])
@admin_required
def create_room():
    room = catalog.create_room(_payload(RoomCreate))
    return jsonify(room.to_dict()), 201


@api.route('/admin/room/allRooms', methods=['GET'])
def get_rooms():
    return jsonify([room.to_dict() for room in catalog.list_rooms()]), 200


@api.route('/admin/room/searchRoomByName', methods=['GET'])
def search_rooms_by_name():
    name = request.args.get('roomName')
    if not name:
        raise ValidationFailed('Please provide a room name for the search.')
    return _non_empty(catalog.search_rooms_by_name(name),
                      'No rooms found with the specified name.')


@api.route('/admin/room/searchRoomByPrice', methods=['GET'])
def search_rooms_by_price():
    price = request.args.get('price')
    if not price:
        raise ValidationFailed('Please provide a price for the search.')
    try:
        price = float(price)
    except ValueError:
        raise ValidationFailed('Price must be a number.') from None
    return _non_empty(catalog.search_rooms_by_price(price),
                      'No rooms found with the specified price.')


@api.route('/admin/room/searchRoomByAmenities', methods=['GET'])
def search_rooms_by_amenities():
    return _non_empty(catalog.search_rooms_by_amenities(request.args),
                      'No rooms found with the specified amenities.')


@api.route('/admin/room/searchRoomByBedType', methods=['GET'])
def search_rooms_by_bed_type():
    return _non_empty(catalog.search_rooms_by_bed_type(request.args),
                      'No rooms found with the specified bed type.')


@api.route('/admin/room/byHotel/<int:hotel_id>', methods=['GET'])
def get_rooms_by_hotel(hotel_id):
    return _non_empty(catalog.rooms_for_hotel(hotel_id), 'No rooms found for this hotel.')


@api.route('/admin/room/<int:room_id>', methods=['GET'])
def get_room(room_id):
    return jsonify(catalog.get_room(room_id).to_dict()), 200


@api.route('/admin/room/<int:room_id>/availability', methods=['GET'])
def get_room_availability(room_id):
    room = catalog.get_room(room_id)
    start, end = _query_date('checkIn'), _query_date('checkOut')
    return jsonify({
        '_id': room.id,
        'CheckInDate': start.isoformat(),
        'CheckOutDate': end.isoformat(),
        'RoomOptions': booking.option_availability(room, start, end),
    }), 200


@api.route('/admin/room/<int:room_id>', methods=['PATCH'])
@admin_required
def update_room(room_id):
    room = catalog.update_room(room_id, _payload(RoomPatch))
    return jsonify(room.to_dict()), 200


@api.route('/admin/room/<int:room_id>', methods=['DELETE'])
@admin_required
def delete_room(room_id):
    catalog.delete_room(room_id)
    return jsonify({'message': 'Deleted Room'}), 200


### RUTAS DE IMPUESTOS ###

@api.route('/admin/tax/newTax', methods=['POST'])
@admin_required
def create_tax():
    tax = catalog.create_tax(_payload(TaxCreate))
    return jsonify(tax.to_dict()), 201


@api.route('/admin/tax/allTaxes', methods=['GET'])
def get_taxes():
    return jsonify([tax.to_dict() for tax in catalog.list_taxes()]), 200


### RUTAS DE RESERVAS ###

@api.route('/allBookings', methods=['GET'])
@auth_required
def get_bookings():
    return jsonify([b.to_dict() for b in booking.list_bookings()]), 200


@api.route('/newBooking', methods=['POST'])
@auth_required
def create_booking():
    new_booking = booking.create_booking(g.principal, _payload(BookingCreate))
    return jsonify(new_booking.to_dict()), 201


@api.route('/user/<int:user_id>', methods=['GET'])
@auth_required
def get_user_bookings(user_id):
    return jsonify([b.to_dict() for b in booking.list_user_bookings(g.principal, user_id)]), 200


@api.route('/<int:booking_id>', methods=['GET'])
@auth_required
def get_booking(booking_id):
    return jsonify(booking.view_booking(g.principal, booking_id).to_dict()), 200


@api.route('/updateBooking/<int:booking_id>', methods=['PATCH'])
@auth_required
def update_booking(booking_id):
    updated = booking.update_booking(g.principal, booking_id, _payload(BookingPatch))
    return jsonify({'message': 'Booking updated successfully.', 'booking': updated.to_dict()}), 200


@api.route('/cancelBooking/<int:booking_id>', methods=['DELETE'])
@auth_required
def cancel_booking(booking_id):
    booking.cancel_booking(g.principal, booking_id)
    return jsonify({'message': 'Booking cancelled successfully.'}), 200
