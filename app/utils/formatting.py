"""
Display formatting helpers shared by the API schemas.
Dates, money, file sizes, slugs and legacy YES/NO flags.
"""
import re
import unicodedata
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation


YES = 'YES'
NO = 'NO'
_TRUTHY = (True, 1, '1', 'true')


def utcnow():
    """Naive UTC timestamp for DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_date(value):
    """Format a date/datetime as 'Jan 05, 2026'."""
    if not value:
        return None
    return value.strftime('%b %d, %Y')


def format_datetime(value):
    """Format a datetime as 'Jan 05, 2026 14:30'."""
    if not value:
        return None
    return value.strftime('%b %d, %Y %H:%M')


def number_format(value, decimals=2):
    """Format a number with thousands separators: 12500 -> '12,500.00'."""
    if value is None or value == '':
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return f'{amount:,.{decimals}f}'


def format_file_size(size):
    """Human readable size: 1536 -> '1.5 KB'."""
    if not size:
        return None
    units = ['B', 'KB', 'MB', 'GB']
    size = float(size)
    index = 0
    while size > 1024 and index < len(units) - 1:
        size /= 1024
        index += 1
    return f'{round(size, 2):g} {units[index]}'


def slugify(text):
    """Generate a URL-safe slug from text."""
    slug = unicodedata.normalize('NFKD', text or '').encode('ascii', 'ignore').decode('ascii')
    slug = re.sub(r'[^a-z0-9]+', '-', slug.lower()).strip('-')
    return slug


def humanize_tour_type(tour_type):
    """'day_tour' -> 'Day tour'; empty -> 'Standard'."""
    if not tour_type:
        return 'Standard'
    text = tour_type.replace('_', ' ')
    return text[:1].upper() + text[1:]


def ucfirst(value):
    if not value:
        return value
    return value[:1].upper() + value[1:]


def to_yes_no(value):
    """Map a boolean-ish input onto the legacy YES/NO flag columns."""
    if value in (YES, NO):
        return value
    if isinstance(value, str):
        value = value.strip().lower()
    return YES if value in _TRUTHY else NO


def parse_bool(value, default=None):
    """Parse query/form booleans ('true', '1', 'false', '0')."""
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')
