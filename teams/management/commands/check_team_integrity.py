from django.core.management.base import BaseCommand, CommandError

from teams.services import find_membership_inconsistencies


class Command(BaseCommand):
    help = "Reports users and teams whose membership records disagree"

    def handle(self, *args, **options):
        problems = find_membership_inconsistencies()
        if not problems:
            self.stdout.write(self.style.SUCCESS("Team memberships are consistent."))
            return

        for problem in problems:
            details = ", ".join(f"{k}={v}" for k, v in problem.items() if k != "kind")
            self.stdout.write(f"{problem['kind']}: {details}")
        raise CommandError(f"{len(problems)} inconsistencies found.")
