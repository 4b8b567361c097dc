import logging

from sqlalchemy.exc import IntegrityError

from hotel_admin import db
from hotel_admin.errors import Conflict, InvalidCredentials, NotFound
from hotel_admin.models import Booking, HotelReview, Role, User
from hotel_admin.schemas import apply_patch, patch_changes
from hotel_admin.security import check_password, hash_password

logger = logging.getLogger(__name__)

USER_FIELDS = {
    'username': 'username',
    'email': 'email',
    'firstName': 'first_name',
    'lastName': 'last_name',
    'phoneNumber': 'phone_number',
    'role': 'role',
}


def _ensure_unique(username=None, email=None, exclude_id=None):
    for column, value in (('username', username), ('email', email)):
        if value is None:
            continue
        query = User.query.filter(getattr(User, column) == value)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first() is not None:
            raise Conflict(f'A user with this {column} already exists')


def _commit():
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise Conflict('A user with this username or email already exists') from e


def register(payload):
    _ensure_unique(payload.username, payload.email)

    user = User(
        username=payload.username,
        email=payload.email,
        password=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone_number=payload.phone_number,
        role=Role.USER,
    )
    db.session.add(user)
    _commit()
    logger.info('Registered user %s (%s)', user.id, user.username)
    return user


def authenticate(email, password):
    """Return the user for these credentials; never says which part was wrong."""
    user = User.query.filter_by(email=email).first()
    if user is None or not check_password(password, user.password):
        logger.info('Rejected login for %s', email)
        raise InvalidCredentials()
    logger.info('User %s logged in', user.id)
    return user


def list_users():
    return User.query.order_by(User.id).all()


def get_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound('User not found')
    return user


def update_user(user_id, patch):
    user = get_user(user_id)
    changes = patch_changes(patch)
    password = changes.pop('password', None)

    _ensure_unique(changes.get('username'), changes.get('email'), exclude_id=user.id)
    if password is not None:
        user.password = hash_password(password)
    apply_patch(user, changes, USER_FIELDS)
    _commit()
    logger.info('Updated user %s', user.id)
    return user


def delete_user(user_id):
    """Delete a user together with their bookings; their reviews stay, unattributed."""
    user = get_user(user_id)
    Booking.query.filter_by(user_id=user.id).delete()
    HotelReview.query.filter_by(user_id=user.id).update({'user_id': None})
    db.session.delete(user)
    db.session.commit()
    logger.info('Deleted user %s', user_id)
