from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app


def generate_token(user_id, expires_in=None):
    """Generate JWT token for user"""
    if expires_in is None:
        expires_in = current_app.config['JWT_EXPIRATION_HOURS']
    now = datetime.now(timezone.utc)
    payload = {
        'user_id': user_id,
        'exp': now + timedelta(hours=expires_in),
        'iat': now
    }
    return jwt.encode(
        payload,
        current_app.config['SECRET_KEY'],
        algorithm=current_app.config['JWT_ALGORITHM']
    )


def verify_token(token):
    """Verify and decode JWT token"""
    try:
        return jwt.decode(
            token,
            current_app.config['SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']]
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
