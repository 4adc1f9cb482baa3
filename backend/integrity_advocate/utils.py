import base64
import binascii
import re

from django.conf import settings

GUID_RE = re.compile(r'^[a-f\d]{8}-?(?:[a-f\d]{4}-){3}[a-f\d]{12}$', re.IGNORECASE)


def is_guid(value) -> bool:
    return isinstance(value, str) and bool(GUID_RE.match(value))


def is_base64(value) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


def feature_enabled(name: str) -> bool:
    return bool(getattr(settings, 'INTEGRITYADVOCATE_FEATURES', {}).get(name, False))
