from datetime import timedelta
from unittest.mock import patch
from django.test import TestCase
from django.utils import timezone
from ..models import ScheduledTask
from ..scheduler import run_scheduled_task, get_last_run_time


class SchedulerTests(TestCase):
    def test_success_records_start_time(self):
        start = timezone.now()
        with patch('lms_core.scheduler.timezone.now', return_value=start):
            result = run_scheduled_task('demo.task', lambda: 'done')
        self.assertEqual(result, 'done')
        self.assertEqual(get_last_run_time('demo.task'), start)

    def test_failure_backs_off_and_reraises(self):
        def boom():
            raise RuntimeError('enumeration failed')

        with self.assertRaises(RuntimeError):
            run_scheduled_task('demo.task', boom)
        task = ScheduledTask.objects.get(name='demo.task')
        self.assertEqual(task.fail_delay, 60)
        self.assertIsNone(task.last_run_time)
        self.assertIsNotNone(task.next_run_time)

        with self.assertRaises(RuntimeError):
            run_scheduled_task('demo.task', boom, force=True)
        task.refresh_from_db()
        self.assertEqual(task.fail_delay, 120)

    def test_backoff_window_skips_unless_forced(self):
        ScheduledTask.objects.create(name='demo.task', fail_delay=60, next_run_time=timezone.now() + timedelta(minutes=5))
        calls = []
        self.assertIsNone(run_scheduled_task('demo.task', lambda: calls.append(1)))
        self.assertEqual(calls, [])
        run_scheduled_task('demo.task', lambda: calls.append(1), force=True)
        self.assertEqual(calls, [1])
        task = ScheduledTask.objects.get(name='demo.task')
        self.assertEqual(task.fail_delay, 0)
        self.assertIsNone(task.next_run_time)
