from unittest import mock

from django.db import DatabaseError
from django.test import TestCase, override_settings

from core.exceptions import ErrorKind
from notifications.models import Notification
from teams import services, workflow
from teams.models import Team, JoinRequest, TeamInvite
from .utils import RefusalAssertions, make_leader, make_participant


class JoinRequestTests(RefusalAssertions, TestCase):
    def setUp(self):
        self.leader = make_leader()
        self.team = services.create_team(self.leader, name="Alpha", skills_needed=["Frontend"])
        self.joiner = make_participant("joiner", primary=("Frontend", "Cloud"))

    def test_request_snapshots_requester(self):
        join_request = workflow.create_join_request(self.joiner, self.team, note="  I build UIs  ")
        self.assertEqual(join_request.status, JoinRequest.STATUS_PENDING)
        self.assertEqual(join_request.note, "I build UIs")
        self.assertEqual(join_request.team_name, "Alpha")
        self.assertEqual(join_request.user_name, "Joiner")
        self.assertEqual(join_request.user_skills, ["Frontend", "Cloud"])

    def test_snapshot_does_not_follow_profile_edits(self):
        join_request = workflow.create_join_request(self.joiner, self.team)
        self.joiner.display_name = "Renamed"
        self.joiner.primary_skills = ["Blockchain"]
        self.joiner.save()
        join_request.refresh_from_db()
        self.assertEqual(join_request.user_name, "Joiner")
        self.assertEqual(join_request.user_skills, ["Frontend", "Cloud"])

    def test_creator_is_notified_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            workflow.create_join_request(self.joiner, self.team)
        self.assertEqual(len(callbacks), 1)
        notification = Notification.objects.get(user=self.leader)
        self.assertEqual(notification.type, Notification.TYPE_JOIN_REQUEST_RECEIVED)
        self.assertEqual(notification.team_id, self.team.id)

    def test_duplicate_pending_request(self):
        workflow.create_join_request(self.joiner, self.team)
        with self.assertRefused("DUPLICATE_REQUEST", ErrorKind.VALIDATION):
            workflow.create_join_request(self.joiner, self.team)
        self.assertEqual(JoinRequest.objects.count(), 1)

    def test_no_new_request_after_rejection(self):
        join_request = workflow.create_join_request(self.joiner, self.team)
        workflow.reject_join_request(join_request, self.leader)
        with self.assertRefused("REQUEST_ALREADY_RESOLVED", ErrorKind.WRONG_STATE):
            workflow.create_join_request(self.joiner, self.team)

    def test_pending_request_cap(self):
        for i in range(3):
            leader = make_leader(f"leader{i}")
            team = services.create_team(leader, name=f"Team {i}", skills_needed=["Cloud"])
            workflow.create_join_request(self.joiner, team)
        with self.assertRefused("RATE_LIMITED", ErrorKind.RATE_LIMITED):
            workflow.create_join_request(self.joiner, self.team)
        self.assertEqual(JoinRequest.objects.filter(user=self.joiner).count(), 3)

    @override_settings(TEAM_RULES={"MAX_PENDING_REQUESTS": 1})
    def test_pending_request_cap_is_configurable(self):
        other = services.create_team(make_leader("other"), name="Other", skills_needed=["Cloud"])
        workflow.create_join_request(self.joiner, other)
        with self.assertRefused("RATE_LIMITED"):
            workflow.create_join_request(self.joiner, self.team)

    def test_note_length(self):
        with self.assertRefused("NOTE_TOO_LONG"):
            workflow.create_join_request(self.joiner, self.team, note="x" * 121)

    def test_create_intent_cannot_request(self):
        with self.assertRefused("WRONG_INTENT"):
            workflow.create_join_request(make_leader("boss"), self.team)

    def test_closed_team_refuses_requests(self):
        Team.objects.filter(pk=self.team.pk).update(state=Team.STATE_FINALIZED)
        with self.assertRefused("TEAM_CLOSED"):
            workflow.create_join_request(self.joiner, self.team)

    def test_accept_adds_member(self):
        join_request = workflow.create_join_request(self.joiner, self.team)
        with self.captureOnCommitCallbacks(execute=True):
            accepted = workflow.accept_join_request(join_request.id, self.leader)
        self.joiner.refresh_from_db()
        self.assertEqual(accepted.status, JoinRequest.STATUS_ACCEPTED)
        self.assertEqual(accepted.resolved_by_id, self.leader.id)
        self.assertIsNotNone(accepted.resolved_at)
        self.assertEqual(self.joiner.current_team_id, self.team.id)
        self.assertTrue(
            Notification.objects.filter(user=self.joiner, type=Notification.TYPE_JOIN_REQUEST_ACCEPTED).exists()
        )

    def test_only_creator_accepts(self):
        join_request = workflow.create_join_request(self.joiner, self.team)
        with self.assertRefused("NOT_AUTHORIZED"):
            workflow.accept_join_request(join_request, self.joiner)

    def test_accept_on_full_team_leaves_request_pending(self):
        join_request = workflow.create_join_request(self.joiner, self.team)
        for i in range(4):
            services.add_member(self.team, make_participant(f"member{i}"))

        with self.captureOnCommitCallbacks(execute=True):
            with self.assertRefused("TEAM_FULL", ErrorKind.CAPACITY_EXCEEDED):
                workflow.accept_join_request(join_request, self.leader)

        join_request.refresh_from_db()
        self.joiner.refresh_from_db()
        self.assertEqual(join_request.status, JoinRequest.STATUS_PENDING)
        self.assertIsNone(self.joiner.current_team_id)
        self.assertFalse(Notification.objects.filter(user=self.joiner).exists())

    def test_two_accepts_for_last_seat(self):
        for i in range(3):
            services.add_member(self.team, make_participant(f"member{i}"))
        second = make_participant("second")
        first_request = workflow.create_join_request(self.joiner, self.team)
        second_request = workflow.create_join_request(second, self.team)

        workflow.accept_join_request(first_request, self.leader)
        with self.assertRefused("TEAM_FULL", ErrorKind.CAPACITY_EXCEEDED):
            workflow.accept_join_request(second_request, self.leader)

        second_request.refresh_from_db()
        second.refresh_from_db()
        self.assertTrue(second_request.is_pending)
        self.assertIsNone(second.current_team_id)
        self.assertEqual(self.team.memberships.count(), 5)

    def test_accept_when_requester_joined_elsewhere(self):
        join_request = workflow.create_join_request(self.joiner, self.team)
        other = services.create_team(make_leader("other"), name="Other", skills_needed=["Cloud"])
        services.add_member(other, self.joiner)
        with self.assertRefused("ALREADY_ON_A_TEAM"):
            workflow.accept_join_request(join_request, self.leader)
        join_request.refresh_from_db()
        self.assertTrue(join_request.is_pending)

    def test_reject_is_idempotent(self):
        join_request = workflow.create_join_request(self.joiner, self.team)
        with self.captureOnCommitCallbacks(execute=True):
            workflow.reject_join_request(join_request, self.leader)
            again = workflow.reject_join_request(join_request, self.leader)
        self.assertEqual(again.status, JoinRequest.STATUS_REJECTED)
        self.assertEqual(
            Notification.objects.filter(user=self.joiner, type=Notification.TYPE_JOIN_REQUEST_REJECTED).count(), 1
        )

    def test_accept_after_reject(self):
        join_request = workflow.create_join_request(self.joiner, self.team)
        workflow.reject_join_request(join_request, self.leader)
        with self.assertRefused("ALREADY_RESOLVED", ErrorKind.WRONG_STATE):
            workflow.accept_join_request(join_request, self.leader)

    def test_reject_after_accept(self):
        join_request = workflow.create_join_request(self.joiner, self.team)
        workflow.accept_join_request(join_request, self.leader)
        with self.assertRefused("ALREADY_RESOLVED"):
            workflow.reject_join_request(join_request, self.leader)

    def test_missing_request(self):
        with self.assertRefused("REQUEST_NOT_FOUND", ErrorKind.NOT_FOUND):
            workflow.accept_join_request(999999, self.leader)

    def test_reads(self):
        join_request = workflow.create_join_request(self.joiner, self.team)
        self.assertEqual(list(workflow.pending_requests_for_team(self.team)), [join_request])
        self.assertEqual(list(workflow.requests_for_user(self.joiner)), [join_request])
        workflow.reject_join_request(join_request, self.leader)
        self.assertEqual(list(workflow.pending_requests_for_team(self.team)), [])


class TeamInviteTests(RefusalAssertions, TestCase):
    def setUp(self):
        self.leader = make_leader()
        self.team = services.create_team(self.leader, name="Alpha", skills_needed=["Frontend"])
        self.invitee = make_participant("invitee")

    def test_send_invite(self):
        with self.captureOnCommitCallbacks(execute=True):
            invite = workflow.send_invite(self.team, self.leader, self.invitee)
        self.assertEqual(invite.status, TeamInvite.STATUS_PENDING)
        self.assertEqual(invite.team_name, "Alpha")
        self.assertEqual(invite.invited_by_name, "Leader")
        self.assertEqual(invite.invited_user_name, "Invitee")
        self.assertTrue(
            Notification.objects.filter(user=self.invitee, type=Notification.TYPE_INVITE_RECEIVED).exists()
        )

    def test_duplicate_invite(self):
        workflow.send_invite(self.team, self.leader, self.invitee)
        with self.assertRefused("DUPLICATE_INVITE"):
            workflow.send_invite(self.team, self.leader, self.invitee.id)

    def test_cannot_invite_self_or_creators(self):
        with self.assertRefused("INVALID_INVITE"):
            workflow.send_invite(self.team, self.leader, self.leader)
        with self.assertRefused("NOT_LOOKING_FOR_TEAM"):
            workflow.send_invite(self.team, self.leader, make_leader("boss"))

    def test_cannot_invite_team_member(self):
        services.add_member(self.team, self.invitee)
        with self.assertRefused("ALREADY_ON_A_TEAM"):
            workflow.send_invite(self.team, self.leader, self.invitee)

    def test_only_creator_invites(self):
        member = make_participant("member")
        services.add_member(self.team, member)
        with self.assertRefused("NOT_AUTHORIZED"):
            workflow.send_invite(self.team, member, self.invitee)

    def test_accept_joins_and_declines_other_invites(self):
        other = services.create_team(make_leader("other"), name="Other", skills_needed=["Cloud"])
        invite = workflow.send_invite(self.team, self.leader, self.invitee)
        sibling = workflow.send_invite(other, other.creator, self.invitee)

        workflow.accept_invite(invite, self.invitee)

        invite.refresh_from_db()
        sibling.refresh_from_db()
        self.invitee.refresh_from_db()
        self.assertEqual(invite.status, TeamInvite.STATUS_ACCEPTED)
        self.assertEqual(sibling.status, TeamInvite.STATUS_DECLINED)
        self.assertEqual(self.invitee.current_team_id, self.team.id)

    def test_only_invited_user_accepts(self):
        invite = workflow.send_invite(self.team, self.leader, self.invitee)
        with self.assertRefused("NOT_AUTHORIZED"):
            workflow.accept_invite(invite, make_participant("stranger"))

    def test_accept_on_finalized_team(self):
        invite = workflow.send_invite(self.team, self.leader, self.invitee)
        for i in range(2):
            services.add_member(self.team, make_participant(f"member{i}"))
        services.finalize_team(self.team, self.leader)
        with self.assertRefused("TEAM_CLOSED", ErrorKind.WRONG_STATE):
            workflow.accept_invite(invite, self.invitee)
        invite.refresh_from_db()
        self.assertTrue(invite.is_pending)

    def test_accept_on_deleted_team(self):
        invite = workflow.send_invite(self.team, self.leader, self.invitee)
        services.delete_team(self.team, self.leader)
        with self.assertRefused("INVITE_NOT_FOUND", ErrorKind.NOT_FOUND):
            workflow.accept_invite(invite, self.invitee)

    def test_decline_is_idempotent(self):
        invite = workflow.send_invite(self.team, self.leader, self.invitee)
        with self.captureOnCommitCallbacks(execute=True):
            workflow.decline_invite(invite, self.invitee)
            workflow.decline_invite(invite, self.invitee)
        invite.refresh_from_db()
        self.assertEqual(invite.status, TeamInvite.STATUS_DECLINED)
        self.assertEqual(
            Notification.objects.filter(user=self.leader, type=Notification.TYPE_INVITE_DECLINED).count(), 1
        )

    def test_accept_after_decline(self):
        invite = workflow.send_invite(self.team, self.leader, self.invitee)
        workflow.decline_invite(invite, self.invitee)
        with self.assertRefused("ALREADY_RESOLVED"):
            workflow.accept_invite(invite, self.invitee)

    def test_reads(self):
        invite = workflow.send_invite(self.team, self.leader, self.invitee)
        self.assertEqual(list(workflow.pending_invites_for_user(self.invitee)), [invite])
        self.assertEqual(list(workflow.pending_invites_for_team(self.team)), [invite])

    def test_accept_survives_failed_invite_cleanup(self):
        other = services.create_team(make_leader("other"), name="Other", skills_needed=["Cloud"])
        invite = workflow.send_invite(self.team, self.leader, self.invitee)
        sibling = workflow.send_invite(other, other.creator, self.invitee)

        original_filter = TeamInvite.objects.filter

        def failing_filter(*args, **kwargs):
            if "invited_user_id" in kwargs:
                raise DatabaseError("connection dropped")
            return original_filter(*args, **kwargs)

        with mock.patch.object(TeamInvite.objects, "filter", side_effect=failing_filter):
            with self.assertLogs("hackteam.teams", level="WARNING") as logs:
                accepted = workflow.accept_invite(invite, self.invitee)

        self.assertEqual(accepted.status, TeamInvite.STATUS_ACCEPTED)
        self.assertIn("connection dropped", "\n".join(logs.output))
        self.invitee.refresh_from_db()
        sibling.refresh_from_db()
        self.assertEqual(self.invitee.current_team_id, self.team.id)
        self.assertTrue(sibling.is_pending)

    def test_decline_other_invites_counts_rows_changed(self):
        for name in ("other1", "other2"):
            team = services.create_team(make_leader(name), name=name, skills_needed=["Cloud"])
            workflow.send_invite(team, team.creator, self.invitee)
        self.assertEqual(workflow.decline_other_invites(self.invitee), 2)
        self.assertEqual(workflow.decline_other_invites(self.invitee), 0)
