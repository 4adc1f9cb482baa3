"""Remote participant records and the identifiers used to address them."""
import binascii
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .timeutils import from_api_timezone

log = logging.getLogger(__name__)


def encode_participant_identifier(course_id: int, user_id: int) -> str:
    """Hex-encode "{course_id}-{user_id}", which is what the remote side stores."""
    if not str(user_id).isdigit() or not str(course_id).isdigit():
        raise ValueError('course_id and user_id must be non-negative integers')
    return f"{int(course_id)}-{int(user_id)}".encode('ascii').hex()


def decode_participant_identifier(identifier: str):
    """
    Reverse encode_participant_identifier().
    Returns (course_id, user_id) or None if the identifier is not one of ours.
    """
    if not identifier or not isinstance(identifier, str) or not (identifier.isascii() and identifier.isalnum()):
        return None
    # hex of '0-0' is the shortest valid value
    if len(identifier) < 6 or len(identifier) % 2:
        return None
    try:
        decoded = binascii.unhexlify(identifier).decode('ascii')
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    if len(decoded) < 3 or '-' not in decoded:
        return None
    course_part, _, user_part = decoded.partition('-')
    if not course_part.isdigit() or not user_part.isdigit():
        return None
    return int(course_part), int(user_part)


@dataclass
class ParticipantFlag:
    id: str
    flag_type_id: Optional[int] = None
    flag_type_name: str = ''
    comment: str = ''
    created: Optional[int] = None

    def __str__(self):
        text = self.flag_type_name or 'Flag'
        return f"{text}: {self.comment}" if self.comment else text


@dataclass
class RemoteParticipantRecord:
    """One participant as returned by the participants endpoint."""

    participant_identifier: str
    review_status: str = ''
    first_name: str = ''
    last_name: str = ''
    email: str = ''
    application: str = ''
    modified: Optional[datetime] = None
    resubmit_url: str = ''
    flags: list = field(default_factory=list)
    override_status: str = ''
    override_reason: str = ''
    override_lms_user_id: Optional[int] = None
    override_lms_user_first_name: str = ''
    override_lms_user_last_name: str = ''
    override_date: Optional[datetime] = None

    @property
    def effective_status(self) -> str:
        """The override status wins over the reviewer's status when present."""
        return self.override_status or self.review_status

    def decoded_identifier(self):
        return decode_participant_identifier(self.participant_identifier)


def _text(data, key):
    value = data.get(key)
    return str(value).strip() if value is not None else ''


def _int_or_none(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _datetime_or_none(value):
    if value in (None, ''):
        return None
    try:
        return from_api_timezone(value)
    except ValueError:
        log.warning('Could not parse API datetime %r', value)
        return None


def parse_flag(data):
    if not isinstance(data, dict) or not data.get('Id'):
        return None
    return ParticipantFlag(
        id=str(data['Id']),
        flag_type_id=_int_or_none(data.get('FlagType_Id')),
        flag_type_name=_text(data, 'FlagType_Name'),
        comment=_text(data, 'Comment'),
        created=_int_or_none(data.get('Created')),
    )


def parse_participant(data: dict) -> RemoteParticipantRecord:
    """Build a RemoteParticipantRecord from API JSON. Status strings are kept raw."""
    if not isinstance(data, dict):
        raise ValueError(f"Participant data must be an object, got {type(data).__name__}")

    raw_flags = data.get('Flags') or []
    if not isinstance(raw_flags, list):
        raise ValueError(f"Participant Flags must be a list, got {type(raw_flags).__name__}")
    flags = [f for f in (parse_flag(item) for item in raw_flags) if f is not None]

    return RemoteParticipantRecord(
        participant_identifier=_text(data, 'ParticipantIdentifier'),
        review_status=_text(data, 'ReviewStatus') or _text(data, 'Status'),
        first_name=_text(data, 'FirstName'),
        last_name=_text(data, 'LastName'),
        email=_text(data, 'Email'),
        application=_text(data, 'Application'),
        modified=_datetime_or_none(data.get('Modified')),
        resubmit_url=_text(data, 'ResubmitUrl'),
        flags=flags,
        override_status=_text(data, 'Override_Status'),
        override_reason=_text(data, 'Override_Reason'),
        override_lms_user_id=_int_or_none(data.get('Override_LMSUser_Id')),
        override_lms_user_first_name=_text(data, 'Override_LMSUser_FirstName'),
        override_lms_user_last_name=_text(data, 'Override_LMSUser_LastName'),
        override_date=_datetime_or_none(data.get('Override_Date')),
    )
