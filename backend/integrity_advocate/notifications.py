import logging

from django.conf import settings
from django.core.mail import send_mail

from .status import ParticipantStatus
from .utils import feature_enabled

log = logging.getLogger(__name__)

SUBJECTS = {
    ParticipantStatus.VALID_INT: 'Integrity Advocate: your session was approved',
    ParticipantStatus.INVALID_ID_INT: 'Integrity Advocate: please resubmit your photo ID',
    ParticipantStatus.INVALID_RULES_INT: 'Integrity Advocate: your session did not meet the rules',
    ParticipantStatus.INVALID_OVERRIDE_INT: 'Integrity Advocate: your session was marked invalid',
}


def _display_name(user, record):
    name = user.get_full_name() if hasattr(user, 'get_full_name') else ''
    if not name:
        name = f"{record.first_name} {record.last_name}".strip()
    return name or user.get_username()


def build_status_message(user, record, course):
    """Return (subject, body) for the participant's status, or None if nothing should be sent."""
    try:
        status = ParticipantStatus.parse_status_string(record.effective_status)
    except ValueError:
        return None
    if status == ParticipantStatus.INPROGRESS_INT:
        return None

    application = record.application or course.fullname
    lines = [f"Hello {_display_name(user, record)},", '']

    if status == ParticipantStatus.VALID_INT:
        lines.append(f"Your Integrity Advocate session for {application} was reviewed and is valid.")
        lines.append('No further action is needed.')
    elif status == ParticipantStatus.INVALID_ID_INT:
        lines.append(f"We could not verify the photo ID you provided for {application}.")
        lines.extend(f"  - {flag}" for flag in record.flags)
        if record.resubmit_url:
            lines.append(f"You can resubmit your ID here: {record.resubmit_url}")
    elif status == ParticipantStatus.INVALID_RULES_INT:
        lines.append(f"Your Integrity Advocate session for {application} did not meet the participation rules.")
        lines.extend(f"  - {flag}" for flag in record.flags)
        lines.append('Please contact your instructor if you have questions.')
    else:
        lines.append(f"Your Integrity Advocate session for {application} was marked invalid by an instructor.")
        if record.override_reason:
            lines.append(f"Reason: {record.override_reason}")

    return SUBJECTS[status], '\n'.join(lines)


def email_user_status_update(user, record, course) -> bool:
    """
    Tell the participant their status changed.
    Returns True if a message was sent. Mail errors are logged, not raised.
    """
    if not feature_enabled('STATUS_EMAILS'):
        return False
    if not user.email:
        log.info('Not emailing user=%s: no email address', user.pk)
        return False
    message = build_status_message(user, record, course)
    if message is None:
        return False

    subject, body = message
    mail_from = getattr(settings, 'INTEGRITYADVOCATE_MAIL_FROM', None) or settings.DEFAULT_FROM_EMAIL
    try:
        send_mail(subject, body, mail_from, [user.email], fail_silently=False)
    except Exception:
        log.exception('Failed to send status email to user=%s', user.pk)
        return False
    return True
