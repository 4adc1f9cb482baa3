from django.core.management.base import BaseCommand, CommandError
from lms_core.scheduler import run_scheduled_task
from integrity_advocate.tasks import ProcessIntegrityAdvocateTask, TASK_NAME


class Command(BaseCommand):
    help = 'Sync Integrity Advocate participant results into activity completion'

    def add_arguments(self, parser):
        parser.add_argument('--force', action='store_true', help='Run even if the task is backing off after a failure')

    def handle(self, *args, **options):
        task = ProcessIntegrityAdvocateTask()
        try:
            summary = run_scheduled_task(TASK_NAME, task.execute, force=options['force'])
        except Exception as e:
            raise CommandError(f'Integrity Advocate sync failed: {e}') from e

        if summary is None:
            self.stdout.write(self.style.WARNING('Task is backing off after a failure; use --force to run now'))
            return

        self.stdout.write(
            self.style.SUCCESS(
                f"Sync complete: {summary['instances']} instances, {summary['processed']} processed, "
                f"{summary['skipped']} skipped, {summary['updated']} completion items updated"
            )
        )
