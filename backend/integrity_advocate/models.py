from django.db import models
from django.utils import timezone
from lms_core.models import Course, CourseModule
from .utils import is_base64, is_guid


class IntegrityAdvocateBlock(models.Model):
    """
    An Integrity Advocate integration instance.
    Holds the remote credentials and the place it is attached to (site, course or module).
    Only module-level instances are synced.
    """

    CONTEXT_SITE = 'site'
    CONTEXT_COURSE = 'course'
    CONTEXT_MODULE = 'module'
    CONTEXT_CHOICES = [
        (CONTEXT_SITE, 'Site'),
        (CONTEXT_COURSE, 'Course'),
        (CONTEXT_MODULE, 'Course module'),
    ]

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='integrity_advocate_blocks')
    module = models.ForeignKey(
        CourseModule,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='integrity_advocate_blocks')
    context_level = models.CharField(max_length=20, choices=CONTEXT_CHOICES, default=CONTEXT_MODULE)

    api_key = models.CharField(max_length=255, blank=True, default='')
    app_id = models.CharField(max_length=64, blank=True, default='')

    visible = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['id']
        permissions = [
            ('override_session', 'Can override Integrity Advocate session status'),
        ]

    def __str__(self):
        return f"IA block {self.pk} ({self.context_level})"

    def has_credentials(self) -> bool:
        return bool(self.api_key) and bool(self.app_id)

    def get_config_errors(self) -> list:
        errors = []
        if not self.api_key:
            errors.append('API key is missing')
        elif not is_base64(self.api_key):
            errors.append('API key is not valid base64')
        if not self.app_id:
            errors.append('Application id is missing')
        elif not is_guid(self.app_id):
            errors.append('Application id is not a GUID')
        if self.context_level == self.CONTEXT_MODULE:
            if self.module_id is None:
                errors.append('Module-level block has no course module')
            elif self.course_id is not None and self.module.course_id != self.course_id:
                errors.append('Course module belongs to a different course')
        return errors
