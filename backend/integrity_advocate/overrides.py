import logging
import re

from django.contrib.auth import get_user_model

from lms_core.models import CourseModule

from .api import IntegrityAdvocateAPI
from .exceptions import IntegrityAdvocateException
from .models import IntegrityAdvocateBlock
from .status import ParticipantStatus
from .utils import feature_enabled

log = logging.getLogger(__name__)

REASON_MAX_LENGTH = 32
REASON_DISALLOWED_RE = re.compile(r'[^a-zA-Z0-9 .,_-]')
NO_REASON = 'No reason given'
OVERRIDE_PERMISSION = 'integrity_advocate.override_session'


def clean_override_reason(reason) -> str:
    cleaned = REASON_DISALLOWED_RE.sub('', reason or '').strip()[:REASON_MAX_LENGTH].strip()
    return cleaned or NO_REASON


def set_override(status, reason, target_user_id, override_user_id, block_instance_id, module_id, requesting_user) -> dict:
    """
    Override a participant's Integrity Advocate session status.

    Checks run in order and the first failure is reported as a warning;
    nothing is sent to the remote API unless all of them pass.
    Returns {'submitted': bool, 'success': bool, 'warnings': [..]}.
    """
    result = {'submitted': False, 'success': True, 'warnings': []}

    def fail(message):
        result['success'] = False
        result['warnings'].append(message)
        log.info('Override rejected: %s', message)
        return result

    User = get_user_model()

    if not feature_enabled('SESSION_STATUS_OVERRIDE'):
        return fail('Session status override is disabled')

    if requesting_user is None or requesting_user.pk != override_user_id:
        return fail('You may only submit overrides as yourself')

    if not ParticipantStatus.is_override_status(status):
        return fail(f"Status={status} is not an overridable value")

    block = IntegrityAdvocateBlock.objects.select_related('course', 'module').filter(pk=block_instance_id).first()
    if block is None:
        return fail(f"Block instance {block_instance_id} not found")
    config_errors = block.get_config_errors()
    if config_errors:
        return fail('Block is not configured: ' + '; '.join(config_errors))
    if not block.visible:
        return fail('Block is hidden')

    course = block.module.course if block.module_id else block.course
    target_user = User.objects.filter(pk=target_user_id).first()
    if target_user is None:
        return fail(f"Target user {target_user_id} not found")
    if course is None or not course.is_enrolled(target_user):
        return fail(f"Target user {target_user_id} is not enrolled in the course")

    override_user = User.objects.filter(pk=override_user_id).first()
    if override_user is None:
        return fail(f"Overriding user {override_user_id} not found")

    module = CourseModule.objects.filter(pk=module_id, course=course).first()
    if module is None:
        return fail(f"Module {module_id} is not in the course")
    if not module.integrity_advocate_blocks.exists():
        return fail(f"Module {module_id} has no Integrity Advocate block")

    if not override_user.has_perm(OVERRIDE_PERMISSION):
        return fail('You do not have permission to override session status')

    cleaned_reason = clean_override_reason(reason)
    result['submitted'] = True
    try:
        result['success'] = IntegrityAdvocateAPI.set_override_session(
            block.api_key, block.app_id, status, cleaned_reason, target_user.pk,
            override_user, course.pk, module.pk)
    except IntegrityAdvocateException as e:
        log.warning('Override request for user=%s module=%s failed: %s', target_user.pk, module.pk, e)
        result['success'] = False
        result['warnings'].append('The Integrity Advocate server could not be reached')
    return result
