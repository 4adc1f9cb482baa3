"""
Periodic sync of Integrity Advocate results into activity completion.

For every IA block the job checks whether it should run, works out the
"changed since" checkpoint, fetches participants from the remote API and
applies each one's status to the user's completion state on the module.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone

from lms_core.completion import CompletionInfo
from lms_core.models import CourseModule, ModuleCompletion, Site
from lms_core.scheduler import get_last_run_time

from .api import IntegrityAdvocateAPI
from .exceptions import IntegrityAdvocateException, InvalidStatusError
from .models import IntegrityAdvocateBlock
from .notifications import email_user_status_update
from .status import ParticipantStatus
from .timeutils import to_api_timezone

log = logging.getLogger(__name__)

TASK_NAME = 'integrity_advocate.process_integrityadvocate'

COMPLETION_STATE_BY_STATUS = {
    ParticipantStatus.INPROGRESS_INT: ModuleCompletion.INCOMPLETE,
    ParticipantStatus.VALID_INT: ModuleCompletion.COMPLETE,
    # Stays pending until the participant resubmits their ID
    ParticipantStatus.INVALID_ID_INT: ModuleCompletion.INCOMPLETE,
    ParticipantStatus.INVALID_RULES_INT: ModuleCompletion.COMPLETE_FAIL,
    ParticipantStatus.INVALID_OVERRIDE_INT: ModuleCompletion.COMPLETE_FAIL,
}


def status_to_completion_state(status: str) -> int:
    return COMPLETION_STATE_BY_STATUS[ParticipantStatus.parse_status_string(status)]


class ProcessIntegrityAdvocateTask:
    """Runs one sync pass. Call execute(); exceptions propagate to the scheduler."""

    name = TASK_NAME

    def __init__(self, api=None):
        self.api = api or IntegrityAdvocateAPI
        self.now = None

    def execute(self) -> dict:
        self.now = timezone.now()
        summary = {'instances': 0, 'processed': 0, 'skipped': 0, 'updated': 0}

        site = Site.current()
        if site is None or not site.enable_completion:
            log.info('Completion tracking is not enabled for the site; nothing to do')
            return summary

        since = self.compute_global_checkpoint(get_last_run_time(self.name), site)

        blocks = self.get_instances()
        summary['instances'] = len(blocks)
        if not blocks:
            log.info('No Integrity Advocate block instances found')
            return summary
        log.info('Found %d block instances; processing those configured on an activity', len(blocks))

        for block in blocks:
            reason = self.get_skip_reason(block)
            if reason:
                log.info('Skipping block=%s: %s', block.pk, reason)
                summary['skipped'] += 1
                continue

            lastmodified = self.compute_checkpoint(since, block)
            log.info('Getting remote IA data for course=%s module=%s block=%s since %s',
                     block.module.course_id, block.module_id, block.pk, lastmodified)
            records = self.fetch(block, lastmodified)
            summary['processed'] += 1
            if not records:
                log.info('No remote IA participant data returned for block=%s', block.pk)
                continue

            updated = self.reconcile(block, records)
            summary['updated'] += updated
            log.info('Updated %d completion items for block=%s', updated, block.pk)

        return summary

    def get_instances(self) -> list:
        """All IA blocks, visible or not."""
        return list(
            IntegrityAdvocateBlock.objects
            .select_related('course', 'module', 'module__course')
            .order_by('id')
        )

    def get_skip_reason(self, block):
        """Return why the block should not be processed this run, or None."""
        course = block.module.course if block.module_id else block.course
        if course is None:
            return 'not attached to a course'

        stale_days = getattr(settings, 'INTEGRITYADVOCATE_STALE_COURSE_DAYS', 7)
        last_access = course.last_accessed()
        if last_access is None or last_access < self.now - timedelta(days=stale_days):
            return f"course {course.pk} not accessed in the last {stale_days} days"

        if not course.enable_completion:
            return f"completion is disabled for course {course.pk}"

        if block.context_level != IntegrityAdvocateBlock.CONTEXT_MODULE or block.module_id is None:
            return f"block is at {block.context_level} level, not module level"

        if not block.has_credentials():
            return 'api_key or app_id is missing'

        if block.module.completion == CourseModule.COMPLETION_TRACKING_NONE:
            return f"completion tracking is off for module {block.module_id}"

        return None

    @staticmethod
    def compute_global_checkpoint(last_run_time, site):
        if last_run_time is None:
            return site.created_at
        return max(last_run_time, site.created_at)

    @staticmethod
    def compute_checkpoint(since, block) -> str:
        """Per-instance 'lastmodified' string, in the API time zone."""
        course = block.module.course if block.module_id else block.course
        return to_api_timezone(max(since, block.created_at, course.created_at))

    def fetch(self, block, lastmodified: str) -> list:
        try:
            return self.api.get_participants_since(block.api_key, block.app_id, lastmodified)
        except IntegrityAdvocateException as e:
            log.warning('Failed to get participants for block=%s: %s', block.pk, e)
            return []

    def reconcile(self, block, records) -> int:
        module = block.module
        course = module.course
        completion = CompletionInfo(course)
        User = get_user_model()
        updated = 0

        for record in records:
            identifier = record.participant_identifier
            if not identifier or not (identifier.isascii() and identifier.isalnum()):
                log.debug('Skipping participant with bad identifier %r', identifier)
                continue

            decoded = record.decoded_identifier()
            if decoded is None:
                log.debug('Could not decode participant identifier %r', identifier)
                continue
            course_id, user_id = decoded
            if course_id != course.pk:
                continue

            user = User.objects.filter(pk=user_id).first()
            if user is None:
                log.info('Participant user=%s not found locally', user_id)
                continue
            if not course.is_enrolled(user):
                log.info('User=%s is not enrolled in course=%s', user_id, course.pk)
                continue

            try:
                state = status_to_completion_state(record.effective_status)
            except InvalidStatusError as e:
                log.warning('user=%s block=%s: %s', user_id, block.pk, e)
                continue

            if completion.set_state(module, user, state, remote_modified=record.modified):
                updated += 1
                email_user_status_update(user, record, course)

        return updated
