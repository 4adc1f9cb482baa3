from django.conf import settings
from django.db import models
from django.utils import timezone


class Site(models.Model):
    """The platform itself. There is normally exactly one row."""

    fullname = models.CharField(max_length=255)
    enable_completion = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return self.fullname

    @classmethod
    def current(cls):
        return cls.objects.order_by('id').first()


class Course(models.Model):
    shortname = models.CharField(max_length=100)
    fullname = models.CharField(max_length=255)
    enable_completion = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"{self.shortname} - {self.fullname}"

    def is_enrolled(self, user) -> bool:
        return self.enrollments.filter(user=user, active=True).exists()

    def last_accessed(self):
        """Most recent access by any user, or None if nobody has visited."""
        latest = self.last_accesses.order_by('-time_access').first()
        return latest.time_access if latest else None


class CourseModule(models.Model):
    """An activity inside a course (quiz, assignment, page...)."""

    COMPLETION_TRACKING_NONE = 0
    COMPLETION_TRACKING_MANUAL = 1
    COMPLETION_TRACKING_AUTOMATIC = 2
    COMPLETION_TRACKING_CHOICES = [
        (COMPLETION_TRACKING_NONE, 'None'),
        (COMPLETION_TRACKING_MANUAL, 'Manual'),
        (COMPLETION_TRACKING_AUTOMATIC, 'Automatic'),
    ]

    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='modules')
    name = models.CharField(max_length=255)
    module_type = models.CharField(max_length=50, default='quiz')
    completion = models.IntegerField(choices=COMPLETION_TRACKING_CHOICES, default=COMPLETION_TRACKING_NONE)
    visible = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"{self.module_type}:{self.name}"


class Enrollment(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='enrollments')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='enrollments')
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = ('user', 'course')


class UserLastAccess(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='course_accesses')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='last_accesses')
    time_access = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = ('user', 'course')


class ModuleCompletion(models.Model):
    """
    Per-user completion state for one course module.
    Created lazily the first time a state is recorded for the pair.
    """

    INCOMPLETE = 0
    COMPLETE = 1
    COMPLETE_PASS = 2
    COMPLETE_FAIL = 3
    STATE_CHOICES = [
        (INCOMPLETE, 'Incomplete'),
        (COMPLETE, 'Complete'),
        (COMPLETE_PASS, 'Complete (pass)'),
        (COMPLETE_FAIL, 'Complete (fail)'),
    ]

    module = models.ForeignKey(CourseModule, on_delete=models.CASCADE, related_name='completions')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='module_completions')
    completion_state = models.IntegerField(choices=STATE_CHOICES, default=INCOMPLETE)
    # Remote modified time of the record that produced completion_state
    remote_modified = models.DateTimeField(null=True, blank=True)
    override_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+')
    time_modified = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = ('module', 'user')

    def __str__(self):
        return f"{self.user} / {self.module}: {self.get_completion_state_display()}"


class ScheduledTask(models.Model):
    """Bookkeeping for periodic jobs: last successful run and failure backoff."""

    name = models.CharField(max_length=255, unique=True)
    last_run_time = models.DateTimeField(null=True, blank=True)
    next_run_time = models.DateTimeField(null=True, blank=True)
    fail_delay = models.IntegerField(default=0, help_text='Seconds to wait before retrying after a failure')

    def __str__(self):
        return self.name
