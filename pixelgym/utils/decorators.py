# pixelgym/utils/decorators.py
from functools import wraps
from flask_jwt_extended import get_jwt_identity, jwt_required
from pixelgym.domain.users.services import is_fully_functional, login_block_reason
from pixelgym.errors import Forbidden, Unauthorized
from pixelgym.services import get_record_store
from pixelgym.utils.records import load_users


def require_account(functional=False):
    """
    Verify the bearer token, load the caller's profile and pass it to the view
    as ``current_user``.

    Disabled accounts and pending coaches are rejected. With ``functional=True``
    students must also be active and linked to a coach that is not disabled.
    """
    def decorator(view_func):
        @wraps(view_func)
        @jwt_required()
        def wrapper(*args, **kwargs):
            user_id = get_jwt_identity()
            user = get_record_store().get(f"user:{user_id}")
            if not user:
                raise Unauthorized("User profile not found")

            reason = login_block_reason(user)
            if reason:
                raise Forbidden("Account is not allowed to sign in", code=reason)

            if functional and not is_fully_functional(user, load_users()):
                raise Forbidden("Waiting for a coach to be assigned", code="waiting_for_coach")

            kwargs['current_user'] = user
            return view_func(*args, **kwargs)
        return wrapper
    return decorator
