from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from teams.models import Team, JoinRequest, TeamInvite

User = get_user_model()


class ManagementCommandTests(TestCase):
    def test_seed_teams_builds_consistent_data(self):
        call_command("seed_teams", stdout=StringIO())
        self.assertEqual(Team.objects.count(), 2)
        alpha = Team.objects.get(name="Team Alpha")
        self.assertEqual(alpha.current_size, 2)
        self.assertEqual(JoinRequest.objects.filter(status=JoinRequest.STATUS_PENDING).count(), 1)
        self.assertEqual(TeamInvite.objects.filter(status=TeamInvite.STATUS_PENDING).count(), 1)

        # Second run leaves the data alone
        call_command("seed_teams", stdout=StringIO())
        self.assertEqual(Team.objects.count(), 2)

        out = StringIO()
        call_command("check_team_integrity", stdout=out)
        self.assertIn("consistent", out.getvalue())

    def test_integrity_check_fails_on_drift(self):
        call_command("seed_teams", stdout=StringIO())
        User.objects.filter(username="carol").update(current_team=Team.objects.get(name="Team Alpha"))
        out = StringIO()
        with self.assertRaises(CommandError):
            call_command("check_team_integrity", stdout=out)
        self.assertIn("user_pointer", out.getvalue())
