from functools import wraps

from flask import request, jsonify, g

from trustnest.auth.jwt_handler import verify_token
from trustnest.errors import ForbiddenError
from trustnest.extensions import db
from trustnest.models.user import User


def require_auth(roles=None):
    """Authentication decorator"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            auth_header = request.headers.get('Authorization', '')
            if not auth_header.startswith('Bearer '):
                return jsonify({'error': 'Invalid authorization header', 'code': 'UNAUTHORIZED'}), 401

            token = auth_header[len('Bearer '):]
            payload = verify_token(token)

            if not payload or 'user_id' not in payload:
                return jsonify({'error': 'Invalid or expired token', 'code': 'UNAUTHORIZED'}), 401

            user = db.session.get(User, payload['user_id'])
            if not user or not user.is_active:
                return jsonify({'error': 'User not found or inactive', 'code': 'UNAUTHORIZED'}), 401

            if roles and user.role not in roles:
                raise ForbiddenError('Insufficient permissions')

            request.current_user = user
            g.user_id = user.id

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def ensure_admin(user):
    if user is None or not user.is_admin or not user.is_active:
        raise ForbiddenError('Only administrators can perform this action')
    return user


def admin_only(method):
    """
    Authorization gate for admin service methods.

    The wrapped method takes the acting user as its first argument. The role
    check runs before the method body, so a refused call reads nothing,
    writes nothing and produces no audit entry.
    """
    @wraps(method)
    def wrapper(self, admin, *args, **kwargs):
        ensure_admin(admin)
        return method(self, admin, *args, **kwargs)
    return wrapper
