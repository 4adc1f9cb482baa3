"""Participant review statuses as the remote API reports them."""
from .exceptions import InvalidStatusError


class ParticipantStatus:
    VALID = 'Valid'
    VALID_INT = 0

    INPROGRESS = 'In Progress'
    INPROGRESS_INT = -1

    # Photo ID could not be verified; the participant may resubmit it
    INVALID_ID = 'Invalid (ID)'
    INVALID_ID_INT = 1

    # Rules were broken during the session
    INVALID_RULES = 'Invalid (Rules)'
    INVALID_RULES_INT = 2

    # An instructor overrode the result to invalid
    INVALID_OVERRIDE = 'Invalid (Override)'
    INVALID_OVERRIDE_INT = 3

    STATUSES = {
        VALID: VALID_INT,
        INPROGRESS: INPROGRESS_INT,
        INVALID_ID: INVALID_ID_INT,
        INVALID_RULES: INVALID_RULES_INT,
        INVALID_OVERRIDE: INVALID_OVERRIDE_INT,
    }
    OVERRIDE_STATUSES = (VALID_INT, INVALID_OVERRIDE_INT)

    @classmethod
    def parse_status_string(cls, status: str) -> int:
        """Map an API status string to its integer. Raises InvalidStatusError if unknown."""
        cleaned = (status or '').strip()
        # The override endpoint reports a plain "Invalid"
        if cleaned.lower() == 'invalid':
            return cls.INVALID_OVERRIDE_INT
        for name, value in cls.STATUSES.items():
            if cleaned.lower() == name.lower():
                return value
        raise InvalidStatusError(f"Invalid participant review status value={status!r}")

    @classmethod
    def is_status_int(cls, value) -> bool:
        return isinstance(value, int) and not isinstance(value, bool) and value in cls.STATUSES.values()

    @classmethod
    def get_status_string(cls, value: int) -> str:
        for name, status_int in cls.STATUSES.items():
            if status_int == value:
                return name
        raise InvalidStatusError(f"Invalid participant status int={value!r}")

    @classmethod
    def is_valid_status(cls, value: int) -> bool:
        return value == cls.VALID_INT

    @classmethod
    def is_inprogress_status(cls, value: int) -> bool:
        return value == cls.INPROGRESS_INT

    @classmethod
    def is_invalid_status(cls, value: int) -> bool:
        return value in (cls.INVALID_ID_INT, cls.INVALID_RULES_INT, cls.INVALID_OVERRIDE_INT)

    @classmethod
    def is_override_status(cls, value) -> bool:
        return cls.is_status_int(value) and value in cls.OVERRIDE_STATUSES
