import base64
import hashlib
import hmac
import json
import logging
import time
from urllib.parse import quote_plus

from django.conf import settings
from django.core.cache import cache

from .exceptions import IntegrityAdvocateAPIError, IntegrityAdvocateConfigError
from .participants import parse_participant
from .status import ParticipantStatus
from .utils import feature_enabled, is_base64, is_guid
# Import requests lazily inside methods to avoid hard dependency at module import time

log = logging.getLogger(__name__)

HTTP_SUCCESS_CODES = (200, 201, 202)
CACHE_PREFIX = 'integrity_advocate:api:'


class IntegrityAdvocateAPI:
    """Client for the Integrity Advocate REST API. Configure INTEGRITYADVOCATE_BASE_URL in settings."""

    ENDPOINT_PARTICIPANTS = '/participants'
    ENDPOINT_PARTICIPANTSESSIONS = '/participantsessions'

    @staticmethod
    def _api_url(endpoint: str) -> str:
        base = getattr(settings, 'INTEGRITYADVOCATE_BASE_URL', None)
        if not base:
            raise IntegrityAdvocateConfigError('INTEGRITYADVOCATE_BASE_URL not configured')
        path = getattr(settings, 'INTEGRITYADVOCATE_API_PATH', '/api')
        return f"{base.rstrip('/')}/{path.strip('/')}{endpoint}"

    @staticmethod
    def _timeout() -> float:
        return getattr(settings, 'INTEGRITYADVOCATE_REQUEST_TIMEOUT', 30.0)

    @staticmethod
    def _check_credentials(api_key: str, app_id: str):
        if not api_key or not app_id:
            raise IntegrityAdvocateConfigError('Both api_key and app_id are required')
        if not is_base64(api_key) or not is_guid(app_id):
            raise IntegrityAdvocateConfigError('api_key must be base64 and app_id must be a GUID')

    @staticmethod
    def make_nonce() -> str:
        # Unix seconds followed by six digits of microseconds
        return str(time.time_ns() // 1000)

    @staticmethod
    def get_request_signature(request_url: str, method: str, timestamp: int, nonce: str, api_key: str, app_id: str) -> str:
        """
        HMAC-SHA256 signature the API expects in the Authorization header.
        request_url must not carry a querystring.
        """
        if '?' in request_url:
            raise ValueError('The request_url should not contain a querystring')
        if len(method) < 3 or timestamp < 0 or not nonce:
            raise ValueError('Invalid signature parameters')
        raw = f"{app_id}{method.upper()}{quote_plus(request_url, safe='').lower()}{timestamp}{nonce}"
        secret = base64.b64decode(api_key)
        digest = hmac.new(secret, raw.encode('utf-8'), hashlib.sha256).digest()
        return base64.b64encode(digest).decode('ascii')

    @staticmethod
    def _auth_headers(request_url: str, method: str, api_key: str, app_id: str) -> dict:
        timestamp = int(time.time())
        nonce = IntegrityAdvocateAPI.make_nonce()
        signature = IntegrityAdvocateAPI.get_request_signature(request_url, method, timestamp, nonce, api_key, app_id)
        return {'Authorization': f"amx {app_id}:{signature}:{nonce}:{timestamp}"}

    @staticmethod
    def _cache_key(endpoint: str, app_id: str, params: dict) -> str:
        raw = endpoint + app_id + json.dumps(params, sort_keys=True, default=str)
        return CACHE_PREFIX + hashlib.sha1(raw.encode()).hexdigest()

    @staticmethod
    def get(endpoint: str, api_key: str, app_id: str, params: dict = None):
        """Signed GET. Returns the decoded JSON body, or None for an empty body."""
        IntegrityAdvocateAPI._check_credentials(api_key, app_id)
        params = dict(params or {})
        use_cache = feature_enabled('CACHE')
        cache_key = IntegrityAdvocateAPI._cache_key(endpoint, app_id, params)
        if use_cache:
            cached = cache.get(cache_key)
            if cached is not None:
                log.debug('Using cached response for %s', endpoint)
                return cached

        url = IntegrityAdvocateAPI._api_url(endpoint)
        headers = IntegrityAdvocateAPI._auth_headers(url, 'GET', api_key, app_id)
        import requests
        try:
            resp = requests.get(url, params=params, headers=headers, timeout=IntegrityAdvocateAPI._timeout())
        except requests.RequestException as e:
            raise IntegrityAdvocateAPIError(f"GET {url} failed: {e}", url=url) from e

        if resp.status_code not in HTTP_SUCCESS_CODES:
            raise IntegrityAdvocateAPIError(
                f"Request to the IA server failed: GET {url} returned http_code={resp.status_code}",
                status_code=resp.status_code, url=url)

        if not resp.content:
            return None
        try:
            data = resp.json()
        except ValueError as e:
            raise IntegrityAdvocateAPIError(f"Failed to decode JSON from {url}: {e}", status_code=resp.status_code, url=url) from e

        if use_cache:
            cache.set(cache_key, data, getattr(settings, 'INTEGRITYADVOCATE_CACHE_TTL', 60))
        return data

    @staticmethod
    def get_participants_since(api_key: str, app_id: str, lastmodified: str) -> list:
        """
        Fetch participants changed since `lastmodified` (a string in the API time zone),
        following NextToken pagination. Returns a list of RemoteParticipantRecord.
        """
        if not lastmodified:
            raise ValueError('lastmodified is required')
        max_pages = getattr(settings, 'INTEGRITYADVOCATE_MAX_PAGES', 250)
        params = {'lastmodified': lastmodified}
        records = []
        next_token = None

        for page in range(max_pages):
            if next_token:
                params['nexttoken'] = next_token
            data = IntegrityAdvocateAPI.get(IntegrityAdvocateAPI.ENDPOINT_PARTICIPANTS, api_key, app_id, params)
            if not data:
                break
            if isinstance(data, list):
                raw_participants, token = data, None
            elif isinstance(data, dict):
                raw_participants, token = data.get('Participants') or [], data.get('NextToken')
            else:
                raise IntegrityAdvocateAPIError(
                    f"Unexpected participants response of type {type(data).__name__}: {str(data)[:100]!r}")
            if not isinstance(raw_participants, list):
                raise IntegrityAdvocateAPIError(
                    f"Participants must be a list, got {type(raw_participants).__name__}")

            for raw in raw_participants:
                try:
                    records.append(parse_participant(raw))
                except ValueError as e:
                    log.warning('Skipping unparseable participant from app_id=%s: %s', app_id, e)

            # The API sends the literal string 'null' on the last page
            if not token or token == 'null' or token == next_token:
                break
            next_token = token
        else:
            raise IntegrityAdvocateAPIError(f"Maximum page limit ({max_pages}) reached fetching participants")

        log.debug('Got %d participants for app_id=%s since %s', len(records), app_id, lastmodified)
        return records

    @staticmethod
    def set_override_session(api_key: str, app_id: str, status: int, reason: str, target_user_id: int,
                             override_user, course_id: int, module_id: int) -> bool:
        """Override a participant's session status remotely. Returns True when the API accepted it."""
        IntegrityAdvocateAPI._check_credentials(api_key, app_id)
        if override_user is None or getattr(override_user, 'pk', None) is None:
            raise ValueError('override_user is required')
        if not ParticipantStatus.is_override_status(status):
            raise ValueError(f"Status={status} not an overridable value")

        url = IntegrityAdvocateAPI._api_url(IntegrityAdvocateAPI.ENDPOINT_PARTICIPANTSESSIONS)
        params = {
            'courseid': course_id,
            'activityid': module_id,
            'participantidentifier': target_user_id,
        }
        body = {
            'Override_Date': int(time.time()),
            'Override_Status': ParticipantStatus.get_status_string(status),
            'Override_Reason': reason,
            'Override_LMSUser_FirstName': override_user.first_name,
            'Override_LMSUser_LastName': override_user.last_name,
            'Override_LMSUser_Id': override_user.pk,
        }
        headers = IntegrityAdvocateAPI._auth_headers(url, 'PATCH', api_key, app_id)
        import requests
        try:
            resp = requests.patch(url, params=params, json=body, headers=headers, timeout=IntegrityAdvocateAPI._timeout())
        except requests.RequestException as e:
            raise IntegrityAdvocateAPIError(f"PATCH {url} failed: {e}", url=url) from e

        if resp.status_code not in HTTP_SUCCESS_CODES:
            log.warning('Request to the IA server failed: PATCH %s returned http_code=%s', url, resp.status_code)
            return False
        return True
