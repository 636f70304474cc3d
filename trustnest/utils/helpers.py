"""
General helper utilities
"""
import re
import secrets
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP


def utcnow():
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(dt):
    return dt.isoformat() if dt else None


def round_half_up(value):
    """Round to the nearest integer, halves away from zero"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def clean_phone_number(phone):
    """Clean phone number to digits only, keeping a leading +"""
    if not phone:
        return None
    digits = re.sub(r'\D', '', phone)
    return f"+{digits}" if phone.strip().startswith('+') else digits


def generate_storage_key(*parts):
    """Unique, time-ordered blob key under the given path parts"""
    timestamp = int(datetime.now(timezone.utc).timestamp() * 1000)
    prefix = '/'.join(str(part) for part in parts)
    return f"{prefix}/{timestamp}-{secrets.token_hex(8)}"


def parse_int_arg(args, name, default):
    """Read an integer query argument, leaving validation to the caller"""
    value = args.get(name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return value
