"""Single-user activity completion updates.

This is the write side of activity completion that other apps use to record
a user's state on a course module. Updates are idempotent and never move a
record back to a state produced by an older remote change.
"""
import logging

from django.db import transaction
from django.utils import timezone

from .models import CourseModule, ModuleCompletion

log = logging.getLogger(__name__)


class CompletionInfo:
    """Completion operations scoped to a single course."""

    def __init__(self, course):
        self.course = course

    def is_enabled(self, module: CourseModule = None) -> bool:
        if not self.course.enable_completion:
            return False
        if module is not None:
            return module.completion != CourseModule.COMPLETION_TRACKING_NONE
        return True

    def get_state(self, module: CourseModule, user) -> int:
        record = ModuleCompletion.objects.filter(module=module, user=user).first()
        return record.completion_state if record else ModuleCompletion.INCOMPLETE

    def set_state(self, module: CourseModule, user, state: int, remote_modified=None, override_by=None) -> bool:
        """
        Record `state` for the user on the module.
        Returns True only when the stored completion state actually changed.
        A record whose remote_modified is older than the stored one is ignored.
        """
        if module.course_id != self.course.id:
            raise ValueError(f"Module {module.id} does not belong to course {self.course.id}")
        if state not in dict(ModuleCompletion.STATE_CHOICES):
            raise ValueError(f"Invalid completion state {state!r}")

        with transaction.atomic():
            record, created = ModuleCompletion.objects.select_for_update().get_or_create(
                module=module,
                user=user,
                defaults={
                    'completion_state': state,
                    'remote_modified': remote_modified,
                    'override_by': override_by,
                    'time_modified': timezone.now(),
                },
            )
            if created:
                # No row means the user was implicitly incomplete
                return state != ModuleCompletion.INCOMPLETE

            if remote_modified and record.remote_modified and remote_modified < record.remote_modified:
                log.debug(
                    'Ignoring stale completion for user=%s module=%s: %s < %s',
                    user.pk, module.pk, remote_modified, record.remote_modified,
                )
                return False

            if record.completion_state == state:
                if remote_modified and (record.remote_modified is None or remote_modified > record.remote_modified):
                    record.remote_modified = remote_modified
                    record.save(update_fields=['remote_modified'])
                return False

            record.completion_state = state
            record.remote_modified = remote_modified or record.remote_modified
            record.override_by = override_by
            record.time_modified = timezone.now()
            record.save()
            return True
