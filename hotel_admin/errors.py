import logging

from flask import jsonify
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from hotel_admin import db

logger = logging.getLogger(__name__)


class HotelAdminError(Exception):
    """Base error; carries the HTTP status and a short machine-readable kind."""

    status_code = 500
    kind = 'internal'
    default_message = 'Internal server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(HotelAdminError):
    """No credential, or a credential in the wrong format."""

    status_code = 401
    kind = 'unauthenticated'
    default_message = 'Authentication required'


class Forbidden(HotelAdminError):
    status_code = 403
    kind = 'forbidden'
    default_message = 'Forbidden'


class InvalidToken(Forbidden):
    """Malformed, tampered or expired token. The reason is not exposed."""

    default_message = 'Invalid or expired token'


class NotFound(HotelAdminError):
    status_code = 404
    kind = 'not_found'
    default_message = 'Resource not found'


class ValidationFailed(HotelAdminError):
    status_code = 400
    kind = 'validation'
    default_message = 'Invalid request'


class InvalidCredentials(ValidationFailed):
    kind = 'invalid_credentials'
    default_message = 'Invalid credentials'


class Conflict(HotelAdminError):
    status_code = 409
    kind = 'conflict'
    default_message = 'Resource conflict'


class InternalError(HotelAdminError):
    pass


def error_response(message, kind, status_code):
    return jsonify({'message': message, 'kind': kind}), status_code


def _describe_validation_error(error):
    parts = []
    for err in error.errors():
        location = '.'.join(str(part) for part in err['loc'])
        parts.append(f'{location}: {err["msg"]}' if location else err['msg'])
    return '; '.join(parts)


def register_error_handlers(app):
    @app.errorhandler(HotelAdminError)
    def handle_domain_error(e):
        return error_response(e.message, e.kind, e.status_code)

    @app.errorhandler(ValidationError)
    def handle_payload_error(e):
        return error_response(_describe_validation_error(e), ValidationFailed.kind, 400)

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(e):
        db.session.rollback()
        logger.exception('Unexpected store failure')
        return error_response(InternalError.default_message, InternalError.kind, 500)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return error_response(e.description, e.name.lower().replace(' ', '_'), e.code)
