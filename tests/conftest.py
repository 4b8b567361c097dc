import pytest

from hotel_admin import create_app, db
from hotel_admin.models import Role, User
from hotel_admin.security import hash_password

HOTEL = {
    'HotelName': 'Grand Palace',
    'HotelAddress': {'Country': 'Canada', 'City': 'Toronto', 'Province': 'Ontario', 'PostalCode': 'M5V 2T6'},
    'HotelRating': 3,
    'HotelAmenities': {'Pool': True, 'Gym': False, 'AirportShuttle': True, 'Pets': False},
    'HotelDescription': {'Images': ['lobby.jpg'], 'Description': 'Downtown classic'},
    'HotelDetails': {'AirportDistance': 22.5, 'DowntownDistance': 0.5, 'SeaDistance': 3},
}

ROOM_OPTION = {
    'RoomName': 'Deluxe King',
    'SquareFeet': 320,
    'RoomMeals': {'Breakfast': True},
    'RoomAmenities': {'Wifi': True, 'AirCondition': True, 'NonSmoking': True},
    'RoomImages': ['king.jpg'],
    'NumberOfBeds': 1,
    'NumOfEmptyRooms': 1,
    'Price': 100,
    'NumberOfGuests': 2,
    'BedType': {'KingBed': True},
}


@pytest.fixture
def app():
    return create_app('hotel_admin.config.TestingConfig')


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def create_user(app):
    """Insert a user directly and return its id."""

    def _factory(username='alice', password='secret123', role=Role.USER, email=None):
        with app.app_context():
            user = User(
                username=username,
                email=email or f'{username}@example.com',
                password=hash_password(password),
                first_name=username.title(),
                role=role,
            )
            db.session.add(user)
            db.session.commit()
            return user.id

    return _factory


@pytest.fixture
def auth_headers(app):
    def _headers(user_id, role=Role.USER):
        with app.app_context():
            token = app.extensions['token_service'].issue(user_id, role)
        return {'Authorization': f'Bearer {token}'}

    return _headers


@pytest.fixture
def admin_id(create_user):
    return create_user('admin', role=Role.ADMIN)


@pytest.fixture
def admin_headers(admin_id, auth_headers):
    return auth_headers(admin_id, Role.ADMIN)


@pytest.fixture
def user_id(create_user):
    return create_user('alice')


@pytest.fixture
def user_headers(user_id, auth_headers):
    return auth_headers(user_id)


@pytest.fixture
def create_room(client, admin_headers):
    def _factory(*options):
        payload = {'RoomOptions': [dict(ROOM_OPTION, **option) for option in options or ({},)]}
        response = client.post('/admin/room/newRoom', json=payload, headers=admin_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    return _factory


@pytest.fixture
def create_hotel(client, admin_headers):
    def _factory(**overrides):
        response = client.post('/admin/hotel/newHotel', json=dict(HOTEL, **overrides),
                               headers=admin_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    return _factory
