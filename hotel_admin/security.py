"""
Authentication and authorization helpers.

``TokenService`` issues and checks signed bearer tokens; the guard functions
and decorators below resolve the caller of a request and gate views on it.
Tokens are stateless: logging out does not revoke them.
"""

from collections import namedtuple
from functools import wraps

import bcrypt
from flask import current_app, g, request
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from hotel_admin.errors import Forbidden, InvalidToken, Unauthenticated, ValidationFailed
from hotel_admin.models import Role

Principal = namedtuple('Principal', ['subject_id', 'role'])

# bcrypt ignores (or rejects) anything past 72 bytes
MAX_PASSWORD_BYTES = 72


class TokenService:

    def __init__(self, expires_delta):
        self.expires_delta = expires_delta

    def issue(self, subject_id, role):
        return create_access_token(
            identity=str(subject_id),
            additional_claims={'role': Role(role).value},
            expires_delta=self.expires_delta,
        )

    def verify(self, token):
        """Return the token's ``Principal`` or raise ``InvalidToken``.

        Bad signatures, expired tokens and malformed payloads all fail the
        same way.
        """
        try:
            claims = decode_token(token)
            return Principal(int(claims['sub']), Role(claims['role']))
        except (JWTExtendedException, PyJWTError, KeyError, TypeError, ValueError) as e:
            raise InvalidToken() from e


def token_service():
    return current_app.extensions['token_service']


def hash_password(password):
    encoded = password.encode('utf-8')
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationFailed('Password is too long')
    rounds = current_app.config['BCRYPT_LOG_ROUNDS']
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode('utf-8')


def check_password(password, hashed):
    encoded = password.encode('utf-8')
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(encoded, hashed.encode('utf-8'))


def require_authenticated():
    header = request.headers.get('Authorization', '').strip()
    scheme, _, token = header.partition(' ')
    token = token.strip()
    if scheme != 'Bearer' or not token:
        raise Unauthenticated('Missing bearer token')

    principal = token_service().verify(token)
    g.principal = principal
    return principal


def require_role(principal, role):
    """Exact role match; unknown or missing roles never pass."""
    try:
        actual = Role(getattr(principal, 'role', None))
    except ValueError:
        raise Forbidden('Insufficient role') from None
    if actual is not Role(role):
        raise Forbidden('Insufficient role')


def require_owner_or_admin(principal, user_id):
    if principal.role is Role.ADMIN:
        return
    if principal.subject_id != user_id:
        raise Forbidden('Not allowed to act on behalf of another user')


def auth_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        require_authenticated()
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        principal = require_authenticated()
        require_role(principal, Role.ADMIN)
        return fn(*args, **kwargs)
    return wrapper
