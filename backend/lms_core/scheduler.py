"""Runs periodic jobs and keeps their ScheduledTask bookkeeping."""
import logging
from datetime import timedelta

from django.utils import timezone

from .models import ScheduledTask

log = logging.getLogger(__name__)

MIN_FAIL_DELAY = 60
MAX_FAIL_DELAY = 86400


def get_last_run_time(name: str):
    task = ScheduledTask.objects.filter(name=name).first()
    return task.last_run_time if task else None


def run_scheduled_task(name: str, job, force: bool = False):
    """
    Run `job` (a zero-argument callable) as the task called `name`.

    On success the task's last_run_time becomes the time the run *started*, so
    anything modified while the job was running is picked up next time.
    On failure the retry delay doubles and the exception propagates.
    Returns the job's result, or None when the task is still backing off.
    """
    task, _ = ScheduledTask.objects.get_or_create(name=name)
    started = timezone.now()

    if not force and task.next_run_time and started < task.next_run_time:
        log.info('Task %s is backing off until %s; not running', name, task.next_run_time)
        return None

    log.info('Starting task %s', name)
    try:
        result = job()
    except Exception:
        task.fail_delay = min(max(MIN_FAIL_DELAY, task.fail_delay * 2), MAX_FAIL_DELAY)
        task.next_run_time = started + timedelta(seconds=task.fail_delay)
        task.save(update_fields=['fail_delay', 'next_run_time'])
        log.exception('Task %s failed; retrying in %ss', name, task.fail_delay)
        raise

    task.last_run_time = started
    task.fail_delay = 0
    task.next_run_time = None
    task.save(update_fields=['last_run_time', 'fail_delay', 'next_run_time'])
    log.info('Finished task %s', name)
    return result
