# hotel_admin/models.py
import enum

from hotel_admin import db


class Role(str, enum.Enum):
    USER = 'user'
    ADMIN = 'admin'


class ColumnGroup:
    """Exposes several flat columns as one nested object keyed by wire names.

    Assigning a mapping replaces the whole group: keys missing from the
    mapping reset their column to ``default``.
    """

    def __init__(self, default=None, **columns):
        self.default = default
        self.columns = columns

    def __get__(self, obj, owner):
        if obj is None:
            return self
        return {key: getattr(obj, attr) for key, attr in self.columns.items()}

    def __set__(self, obj, value):
        value = value or {}
        for key, attr in self.columns.items():
            setattr(obj, attr, value.get(key, self.default))


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.String(128), nullable=False)  # hash bcrypt
    first_name = db.Column(db.String(80))
    last_name = db.Column(db.String(80))
    phone_number = db.Column(db.String(30))
    role = db.Column(
        db.Enum(Role, name='user_role', values_callable=lambda roles: [r.value for r in roles]),
        nullable=False, default=Role.USER)

    def to_dict(self):
        return {
            '_id': self.id,
            'username': self.username,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'phoneNumber': self.phone_number,
            'role': self.role.value,
        }


hotel_rooms = db.Table(
    'hotel_rooms',
    db.Column('hotel_id', db.Integer, db.ForeignKey('hotels.id', ondelete='CASCADE'), primary_key=True),
    db.Column('room_id', db.Integer, db.ForeignKey('rooms.id', ondelete='CASCADE'), primary_key=True),
)


class Hotel(db.Model):
    __tablename__ = 'hotels'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    country = db.Column(db.String(100))
    city = db.Column(db.String(100))
    province = db.Column(db.String(100))
    postal_code = db.Column(db.String(20))
    rating = db.Column(db.Float)
    pool = db.Column(db.Boolean, default=False)
    gym = db.Column(db.Boolean, default=False)
    airport_shuttle = db.Column(db.Boolean, default=False)
    pets = db.Column(db.Boolean, default=False)
    images = db.Column(db.JSON, default=list)
    description = db.Column(db.Text)
    airport_distance = db.Column(db.Float)
    downtown_distance = db.Column(db.Float)
    sea_distance = db.Column(db.Float)

    reviews = db.relationship('HotelReview', backref='hotel', lazy=True,
                              cascade='all, delete-orphan', order_by='HotelReview.id')
    rooms = db.relationship('Room', secondary=hotel_rooms, lazy='select',
                            backref=db.backref('hotels', lazy=True), order_by='Room.id')

    address = ColumnGroup(Country='country', City='city', Province='province', PostalCode='postal_code')
    amenities = ColumnGroup(False, Pool='pool', Gym='gym', AirportShuttle='airport_shuttle', Pets='pets')
    details = ColumnGroup(AirportDistance='airport_distance', DowntownDistance='downtown_distance',
                          SeaDistance='sea_distance')

    @property
    def description_block(self):
        return {'Images': list(self.images or []), 'Description': self.description}

    @description_block.setter
    def description_block(self, value):
        value = value or {}
        self.images = list(value.get('Images') or [])
        self.description = value.get('Description')

    # wire key -> attribute, for create and patch payloads
    WIRE_FIELDS = {
        'HotelName': 'name',
        'HotelAddress': 'address',
        'HotelRating': 'rating',
        'HotelAmenities': 'amenities',
        'HotelDescription': 'description_block',
        'HotelDetails': 'details',
    }

    def to_dict(self):
        return {
            '_id': self.id,
            'HotelName': self.name,
            'HotelAddress': self.address,
            'HotelRating': self.rating,
            'HotelAmenities': self.amenities,
            'HotelDescription': self.description_block,
            'HotelReviews': [review.to_dict() for review in self.reviews],
            'HotelDetails': self.details,
            'Rooms': [room.id for room in self.rooms],
        }


class HotelReview(db.Model):
    __tablename__ = 'hotel_reviews'

    id = db.Column(db.Integer, primary_key=True)
    hotel_id = db.Column(db.Integer, db.ForeignKey('hotels.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))
    rating = db.Column(db.Integer, nullable=False)
    review_text = db.Column(db.Text)

    def to_dict(self):
        return {
            '_id': self.id,
            'userId': self.user_id,
            'rating': self.rating,
            'reviewText': self.review_text,
        }


class Room(db.Model):
    __tablename__ = 'rooms'

    id = db.Column(db.Integer, primary_key=True)
    options = db.relationship('RoomOption', backref='room', lazy=True,
                              cascade='all, delete-orphan', order_by='RoomOption.id')

    def to_dict(self):
        return {
            '_id': self.id,
            'RoomOptions': [option.to_dict() for option in self.options],
        }


class RoomOption(db.Model):
    __tablename__ = 'room_options'

    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, db.ForeignKey('rooms.id', ondelete='CASCADE'), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    square_feet = db.Column(db.Integer)
    breakfast = db.Column(db.Boolean, default=False)
    dinner = db.Column(db.Boolean, default=False)
    breakfast_and_dinner = db.Column(db.Boolean, default=False)
    wifi = db.Column(db.Boolean, default=False)
    cable_tv = db.Column(db.Boolean, default=False)
    air_condition = db.Column(db.Boolean, default=False)
    free_cancellation = db.Column(db.Boolean, default=False)
    non_smoking = db.Column(db.Boolean, default=False)
    images = db.Column(db.JSON, default=list)
    number_of_beds = db.Column(db.Integer)
    vacant_count = db.Column(db.Integer, nullable=False, default=1)
    price = db.Column(db.Float, nullable=False)
    guest_capacity = db.Column(db.Integer, nullable=False, default=1)
    single_bed = db.Column(db.Boolean, default=False)
    twin_bed = db.Column(db.Boolean, default=False)
    queen_bed = db.Column(db.Boolean, default=False)
    king_bed = db.Column(db.Boolean, default=False)

    meals = ColumnGroup(False, Breakfast='breakfast', Dinner='dinner', BreakfastAndDinner='breakfast_and_dinner')
    amenities = ColumnGroup(False, Wifi='wifi', CableTv='cable_tv', AirCondition='air_condition',
                            FreeCancellation='free_cancellation', NonSmoking='non_smoking')
    bed_type = ColumnGroup(False, SingleBed='single_bed', TwinBed='twin_bed', QueenBed='queen_bed',
                           KingBed='king_bed')

    WIRE_FIELDS = {
        'RoomName': 'name',
        'SquareFeet': 'square_feet',
        'RoomMeals': 'meals',
        'RoomAmenities': 'amenities',
        'RoomImages': 'images',
        'NumberOfBeds': 'number_of_beds',
        'NumOfEmptyRooms': 'vacant_count',
        'Price': 'price',
        'NumberOfGuests': 'guest_capacity',
        'BedType': 'bed_type',
    }

    def to_dict(self):
        return {
            '_id': self.id,
            'RoomName': self.name,
            'SquareFeet': self.square_feet,
            'RoomMeals': self.meals,
            'RoomAmenities': self.amenities,
            'RoomImages': list(self.images or []),
            'NumberOfBeds': self.number_of_beds,
            'NumOfEmptyRooms': self.vacant_count,
            'Price': self.price,
            'NumberOfGuests': self.guest_capacity,
            'BedType': self.bed_type,
        }


class Tax(db.Model):
    __tablename__ = 'taxes'

    id = db.Column(db.Integer, primary_key=True)
    country = db.Column(db.String(100), nullable=False)
    province = db.Column(db.String(100))
    rate = db.Column(db.Float, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('country', 'province', name='unique_tax_per_region'),
    )

    def to_dict(self):
        return {
            '_id': self.id,
            'Country': self.country,
            'Province': self.province,
            'TaxRate': self.rate,
        }


class Booking(db.Model):
    __tablename__ = 'bookings'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    hotel_id = db.Column(db.Integer, db.ForeignKey('hotels.id'), nullable=False)
    room_id = db.Column(db.Integer, db.ForeignKey('rooms.id'), nullable=False)
    room_option_id = db.Column(db.Integer, db.ForeignKey('room_options.id'), nullable=False)
    check_in = db.Column(db.Date, nullable=False)
    check_out = db.Column(db.Date, nullable=False)
    guests = db.Column(db.Integer, nullable=False)
    total_price = db.Column(db.Float, nullable=False)

    user = db.relationship('User')
    hotel = db.relationship('Hotel')
    room = db.relationship('Room')
    room_option = db.relationship('RoomOption')

    @property
    def nights(self):
        return (self.check_out - self.check_in).days

    def to_dict(self, expand=True):
        """Serialize the booking; ``expand`` embeds the referenced user, hotel and room."""
        return {
            '_id': self.id,
            'User': self.user.to_dict() if expand else self.user_id,
            'Hotel': self.hotel.to_dict() if expand else self.hotel_id,
            'Room': self.room.to_dict() if expand else self.room_id,
            'RoomOption': self.room_option_id,
            'CheckInDate': self.check_in.isoformat(),
            'CheckOutDate': self.check_out.isoformat(),
            'NumberOfGuests': self.guests,
            'TotalPrice': self.total_price,
        }
