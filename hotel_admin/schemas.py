"""
Request payload schemas.

Create models declare the mandatory fields; patch models make every field
optional so that ``patch_changes`` only reports what the client sent.
"""

from datetime import date
from typing import ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from hotel_admin.models import Role


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


class PatchModel(WireModel):
    # fields that may be omitted but never explicitly set to null
    NOT_NULL: ClassVar[tuple] = ()

    @model_validator(mode='after')
    def _reject_nulls(self):
        for name in self.NOT_NULL:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f'{type(self).model_fields[name].alias or name} cannot be null')
        return self


def patch_changes(model):
    """Fields present in the payload, keyed by wire name."""
    return model.model_dump(by_alias=True, exclude_unset=True)


def apply_patch(target, changes, fields):
    """Copy each present wire key of ``changes`` onto ``target``.

    ``fields`` maps wire keys to attribute names; unknown keys are skipped.
    Returns the attribute names that were written.
    """
    applied = []
    for key, value in changes.items():
        attr = fields.get(key)
        if attr is None:
            continue
        setattr(target, attr, value)
        applied.append(attr)
    return applied


### Identidad ###

class SignupRequest(WireModel):
    username: str = Field(min_length=1, max_length=80)
    email: EmailStr
    password: str = Field(min_length=1)
    first_name: Optional[str] = Field(None, alias='firstName')
    last_name: Optional[str] = Field(None, alias='lastName')
    phone_number: Optional[str] = Field(None, alias='phoneNumber')


class LoginRequest(WireModel):
    email: str
    password: str


class UserPatch(PatchModel):
    NOT_NULL: ClassVar[tuple] = ('username', 'email', 'password', 'role')

    username: Optional[str] = Field(None, min_length=1, max_length=80)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1)
    first_name: Optional[str] = Field(None, alias='firstName')
    last_name: Optional[str] = Field(None, alias='lastName')
    phone_number: Optional[str] = Field(None, alias='phoneNumber')
    role: Optional[Role] = None


### Hoteles ###

class HotelAddress(WireModel):
    country: Optional[str] = Field(None, alias='Country')
    city: Optional[str] = Field(None, alias='City')
    province: Optional[str] = Field(None, alias='Province')
    postal_code: Optional[str] = Field(None, alias='PostalCode')


class HotelAmenities(WireModel):
    pool: bool = Field(False, alias='Pool')
    gym: bool = Field(False, alias='Gym')
    airport_shuttle: bool = Field(False, alias='AirportShuttle')
    pets: bool = Field(False, alias='Pets')


class HotelDescription(WireModel):
    images: List[str] = Field(default_factory=list, alias='Images')
    description: Optional[str] = Field(None, alias='Description')


class HotelDetails(WireModel):
    airport_distance: Optional[float] = Field(None, ge=0, alias='AirportDistance')
    downtown_distance: Optional[float] = Field(None, ge=0, alias='DowntownDistance')
    sea_distance: Optional[float] = Field(None, ge=0, alias='SeaDistance')


class ReviewRequest(WireModel):
    user_id: int = Field(alias='userId')
    rating: int = Field(ge=1, le=5)
    review_text: Optional[str] = Field(None, alias='reviewText')


class HotelCreate(WireModel):
    name: str = Field(min_length=1, alias='HotelName')
    address: HotelAddress = Field(default_factory=HotelAddress, alias='HotelAddress')
    rating: Optional[float] = Field(None, ge=0, le=5, alias='HotelRating')
    amenities: HotelAmenities = Field(default_factory=HotelAmenities, alias='HotelAmenities')
    description: HotelDescription = Field(default_factory=HotelDescription, alias='HotelDescription')
    details: HotelDetails = Field(default_factory=HotelDetails, alias='HotelDetails')
    reviews: List[ReviewRequest] = Field(default_factory=list, alias='HotelReviews')
    rooms: List[int] = Field(default_factory=list, alias='Rooms')


class HotelPatch(PatchModel):
    NOT_NULL: ClassVar[tuple] = ('name', 'reviews', 'rooms')

    name: Optional[str] = Field(None, min_length=1, alias='HotelName')
    address: Optional[HotelAddress] = Field(None, alias='HotelAddress')
    rating: Optional[float] = Field(None, ge=0, le=5, alias='HotelRating')
    amenities: Optional[HotelAmenities] = Field(None, alias='HotelAmenities')
    description: Optional[HotelDescription] = Field(None, alias='HotelDescription')
    details: Optional[HotelDetails] = Field(None, alias='HotelDetails')
    reviews: Optional[List[ReviewRequest]] = Field(None, alias='HotelReviews')
    rooms: Optional[List[int]] = Field(None, alias='Rooms')


### Habitaciones ###

class RoomMeals(WireModel):
    breakfast: bool = Field(False, alias='Breakfast')
    dinner: bool = Field(False, alias='Dinner')
    breakfast_and_dinner: bool = Field(False, alias='BreakfastAndDinner')


class RoomAmenities(WireModel):
    wifi: bool = Field(False, alias='Wifi')
    cable_tv: bool = Field(False, alias='CableTv')
    air_condition: bool = Field(False, alias='AirCondition')
    free_cancellation: bool = Field(False, alias='FreeCancellation')
    non_smoking: bool = Field(False, alias='NonSmoking')


class BedType(WireModel):
    single_bed: bool = Field(False, alias='SingleBed')
    twin_bed: bool = Field(False, alias='TwinBed')
    queen_bed: bool = Field(False, alias='QueenBed')
    king_bed: bool = Field(False, alias='KingBed')


class RoomOptionRequest(WireModel):
    id: Optional[int] = Field(None, alias='_id')
    name: str = Field(min_length=1, alias='RoomName')
    square_feet: Optional[int] = Field(None, ge=0, alias='SquareFeet')
    meals: RoomMeals = Field(default_factory=RoomMeals, alias='RoomMeals')
    amenities: RoomAmenities = Field(default_factory=RoomAmenities, alias='RoomAmenities')
    images: List[str] = Field(default_factory=list, alias='RoomImages')
    number_of_beds: Optional[int] = Field(None, ge=0, alias='NumberOfBeds')
    vacant_count: int = Field(1, ge=0, alias='NumOfEmptyRooms')
    price: float = Field(ge=0, alias='Price')
    guest_capacity: int = Field(ge=1, alias='NumberOfGuests')
    bed_type: BedType = Field(default_factory=BedType, alias='BedType')


class RoomCreate(WireModel):
    options: List[RoomOptionRequest] = Field(default_factory=list, alias='RoomOptions')


class RoomPatch(PatchModel):
    NOT_NULL: ClassVar[tuple] = ('options',)

    options: Optional[List[RoomOptionRequest]] = Field(None, alias='RoomOptions')


class TaxCreate(WireModel):
    country: str = Field(min_length=1, alias='Country')
    province: Optional[str] = Field(None, alias='Province')
    rate: float = Field(ge=0, le=1, alias='TaxRate')


### Reservas ###

class BookingCreate(WireModel):
    user: Optional[int] = Field(None, alias='User')
    hotel: int = Field(alias='Hotel')
    room: int = Field(alias='Room')
    room_option: Optional[int] = Field(None, alias='RoomOption')
    check_in: date = Field(alias='CheckInDate')
    check_out: date = Field(alias='CheckOutDate')
    guests: int = Field(ge=1, alias='NumberOfGuests')


class BookingPatch(PatchModel):
    NOT_NULL: ClassVar[tuple] = ('hotel', 'room', 'check_in', 'check_out', 'guests')

    hotel: Optional[int] = Field(None, alias='Hotel')
    room: Optional[int] = Field(None, alias='Room')
    room_option: Optional[int] = Field(None, alias='RoomOption')
    check_in: Optional[date] = Field(None, alias='CheckInDate')
    check_out: Optional[date] = Field(None, alias='CheckOutDate')
    guests: Optional[int] = Field(None, ge=1, alias='NumberOfGuests')
