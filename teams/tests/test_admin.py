from django.contrib import admin
from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase

from teams import services
from teams.admin import TeamAdmin, TeamMemberAdmin, TeamMemberInline, JoinRequestAdmin
from teams.models import Team, TeamMember, JoinRequest
from .utils import make_leader

User = get_user_model()


class TeamAdminTests(TestCase):
    def setUp(self):
        self.operator = User.objects.create_superuser("operator", "op@example.com", "pass1234")
        self.leader = make_leader()
        self.team = services.create_team(self.leader, name="Alpha", skills_needed=["Frontend"])
        self.request = RequestFactory().get("/admin/")
        self.request.user = self.operator

    def test_state_and_creator_are_read_only(self):
        model_admin = TeamAdmin(Team, admin.site)
        readonly = model_admin.get_readonly_fields(self.request, self.team)
        self.assertIn("state", readonly)
        self.assertIn("creator", readonly)
        self.assertFalse(model_admin.has_add_permission(self.request))
        self.assertFalse(model_admin.has_delete_permission(self.request, self.team))

    def test_roster_cannot_be_edited_from_admin(self):
        inline = TeamMemberInline(Team, admin.site)
        self.assertFalse(inline.has_add_permission(self.request, self.team))
        self.assertFalse(inline.has_delete_permission(self.request, self.team))
        self.assertIn("user", inline.get_readonly_fields(self.request, self.team))

        member_admin = TeamMemberAdmin(TeamMember, admin.site)
        membership = TeamMember.objects.get(user=self.leader)
        self.assertFalse(member_admin.has_add_permission(self.request))
        self.assertFalse(member_admin.has_change_permission(self.request, membership))
        self.assertFalse(member_admin.has_delete_permission(self.request, membership))

    def test_request_status_cannot_be_edited_from_admin(self):
        request_admin = JoinRequestAdmin(JoinRequest, admin.site)
        self.assertFalse(request_admin.has_change_permission(self.request))
        self.assertTrue(request_admin.has_view_permission(self.request))

    def test_current_team_is_read_only_on_users(self):
        user_admin = admin.site._registry[User]
        self.assertIn("current_team", user_admin.get_readonly_fields(self.request, self.leader))

    def test_lock_action_goes_through_services(self):
        self.client.force_login(self.operator)
        response = self.client.post(
            "/admin/teams/team/",
            {"action": "lock_teams", admin.helpers.ACTION_CHECKBOX_NAME: [self.team.pk]},
        )
        self.assertEqual(response.status_code, 302)
        self.team.refresh_from_db()
        self.assertEqual(self.team.state, Team.STATE_LOCKED)
