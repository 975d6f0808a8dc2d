from functools import wraps

from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from filmmania.dao import user_dao
from filmmania.errors import ForbiddenError


def admin_required(fn):
    """
    Require a valid access token belonging to an active admin.

    The is_admin claim is only a hint; the user row is re-read so that a
    revoked admin flag takes effect before the token expires.
    """

    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        if not get_jwt().get("is_admin"):
            raise ForbiddenError()
        user = user_dao.get_by_id(get_jwt_identity())
        if not user or not user.is_admin or not user.is_active:
            raise ForbiddenError()
        return fn(*args, **kwargs)

    return wrapper
