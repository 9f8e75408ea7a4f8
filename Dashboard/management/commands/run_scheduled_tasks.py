from django.core.management.base import BaseCommand, CommandError

from Dashboard.tasks import ScheduledTaskService


class Command(BaseCommand):
    help = "Run periodic jobs: daily, weekly, monthly or a single task by name"

    def add_arguments(self, parser):
        parser.add_argument("target", help="daily | weekly | monthly | <task name>")

    def handle(self, *args, **options):
        target = options["target"]

        runners = {
            "daily": ScheduledTaskService.run_daily,
            "weekly": ScheduledTaskService.run_weekly,
            "monthly": ScheduledTaskService.run_monthly,
        }

        if target in runners:
            results = runners[target]()
        elif target in ScheduledTaskService.task_map():
            results = {target: ScheduledTaskService.run(target)}
        else:
            available = ", ".join(sorted(ScheduledTaskService.task_map()))
            raise CommandError(f"Unknown task '{target}'. Available: daily, weekly, monthly, {available}")

        for name, result in results.items():
            self.stdout.write(self.style.SUCCESS(f"{name}: {result}"))
