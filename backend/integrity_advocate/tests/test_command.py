import base64
from datetime import timedelta
from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.utils import timezone

from lms_core.models import Site, Course, CourseModule, UserLastAccess, ScheduledTask
from django.contrib.auth import get_user_model
from ..models import IntegrityAdvocateBlock
from ..tasks import TASK_NAME

User = get_user_model()


class ProcessCommandTests(TestCase):
    def setUp(self):
        Site.objects.create(fullname='LMS', created_at=timezone.now() - timedelta(days=10))
        course = Course.objects.create(shortname='C1', fullname='Course 1')
        module = CourseModule.objects.create(course=course, name='Quiz', completion=CourseModule.COMPLETION_TRACKING_AUTOMATIC)
        UserLastAccess.objects.create(user=User.objects.create_user(username='u1'), course=course)
        IntegrityAdvocateBlock.objects.create(
            course=course, module=module,
            api_key=base64.b64encode(b'k').decode(), app_id='0b7bb2c4-5f3e-4d3c-9a2a-1d2f3e4a5b6c')

    @patch('integrity_advocate.tasks.IntegrityAdvocateAPI')
    def test_run_records_last_run_time(self, mock_api):
        mock_api.get_participants_since.return_value = []
        out = StringIO()
        call_command('process_integrityadvocate', stdout=out)
        self.assertIn('Sync complete: 1 instances, 1 processed', out.getvalue())
        self.assertIsNotNone(ScheduledTask.objects.get(name=TASK_NAME).last_run_time)

    @patch('integrity_advocate.tasks.ProcessIntegrityAdvocateTask.get_instances', side_effect=RuntimeError('db gone'))
    def test_enumeration_failure_is_fatal(self, mock_instances):
        with self.assertRaises(CommandError):
            call_command('process_integrityadvocate', stdout=StringIO())
        task = ScheduledTask.objects.get(name=TASK_NAME)
        self.assertIsNone(task.last_run_time)
        self.assertEqual(task.fail_delay, 60)

        out = StringIO()
        call_command('process_integrityadvocate', stdout=out)
        self.assertIn('backing off', out.getvalue())
