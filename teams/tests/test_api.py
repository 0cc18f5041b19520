from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from teams import services, workflow
from teams.models import Team, JoinRequest
from .utils import make_leader, make_participant


class TeamApiTests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.leader = make_leader(primary=("Backend",))
        self.joiner = make_participant("joiner", primary=("Frontend",))
        self.base_api = "/api/teams/"

    def _create_team(self, **overrides):
        payload = {"name": "Alpha", "skills_needed": ["Frontend", "ML/AI"], "goal": "win"}
        payload.update(overrides)
        self.client.force_authenticate(user=self.leader)
        return self.client.post(self.base_api, payload, format="json")

    def test_create_team(self):
        resp = self._create_team(whatsapp_link="https://chat.whatsapp.com/abc")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        data = resp.json()
        self.assertEqual(data["state"], Team.STATE_OPEN)
        self.assertEqual(data["current_size"], 1)
        self.assertEqual(data["max_size"], 5)
        self.assertEqual(data["skill_coverage"], 0)
        self.assertEqual(data["missing_skills"], ["Frontend", "ML/AI"])
        self.assertEqual(data["whatsapp_link"], "https://chat.whatsapp.com/abc")
        self.assertTrue(data["permissions"]["is_creator"])
        self.assertTrue(data["permissions"]["can_delete"])
        self.assertFalse(data["permissions"]["can_finalize"])
        self.assertTrue(data["permissions"]["can_respond_to_requests"])

    def test_refusal_uses_error_envelope(self):
        self._create_team()
        resp = self._create_team(name="Second")
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        body = resp.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["status_code"], 409)
        self.assertEqual(body["errors"]["code"], "ALREADY_ON_A_TEAM")
        self.assertEqual(body["errors"]["kind"], "ALREADY_ON_A_TEAM")

    def test_requires_authentication(self):
        resp = self.client.get(self.base_api)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_feed_lists_open_teams_without_links(self):
        team_id = self._create_team(whatsapp_link="https://chat.whatsapp.com/abc").json()["id"]

        self.client.force_authenticate(user=self.joiner)
        resp = self.client.get(self.base_api)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        (team,) = resp.json()
        self.assertEqual(team["id"], team_id)
        self.assertIsNone(team["whatsapp_link"])
        self.assertTrue(team["permissions"]["can_join"])

    def test_join_request_flow(self):
        team_id = self._create_team().json()["id"]

        self.client.force_authenticate(user=self.joiner)
        resp = self.client.post(f"{self.base_api}{team_id}/requests/", {"note": "hi"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        request_id = resp.json()["id"]

        # Non-creators cannot list requests
        resp = self.client.get(f"{self.base_api}{team_id}/requests/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        resp = self.client.get(f"{self.base_api}requests/me/")
        self.assertEqual([r["id"] for r in resp.json()], [request_id])

        self.client.force_authenticate(user=self.leader)
        resp = self.client.get(f"{self.base_api}{team_id}/requests/")
        self.assertEqual([r["user_name"] for r in resp.json()], ["Joiner"])

        resp = self.client.post(f"{self.base_api}requests/{request_id}/accept/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)
        self.assertEqual(resp.json()["status"], JoinRequest.STATUS_ACCEPTED)

        resp = self.client.get(f"{self.base_api}{team_id}/")
        self.assertEqual(resp.json()["current_size"], 2)
        self.assertEqual(resp.json()["skill_coverage"], 50)

    def test_rate_limited_request_is_429(self):
        for i in range(3):
            team = services.create_team(make_leader(f"leader{i}"), name=f"T{i}", skills_needed=["Cloud"])
            workflow.create_join_request(self.joiner, team)
        team_id = self._create_team().json()["id"]

        self.client.force_authenticate(user=self.joiner)
        resp = self.client.post(f"{self.base_api}{team_id}/requests/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(resp.json()["errors"]["code"], "RATE_LIMITED")

    def test_invite_flow(self):
        team_id = self._create_team().json()["id"]

        resp = self.client.post(f"{self.base_api}{team_id}/invites/", {"user_id": self.joiner.id}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        invite_id = resp.json()["id"]

        self.client.force_authenticate(user=self.joiner)
        resp = self.client.get(f"{self.base_api}invites/me/")
        self.assertEqual([i["id"] for i in resp.json()], [invite_id])

        resp = self.client.post(f"{self.base_api}invites/{invite_id}/accept/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)

        resp = self.client.get(f"{self.base_api}mine/")
        self.assertEqual(resp.json()["id"], team_id)

    def test_matches(self):
        self._create_team(skills_needed=["Frontend"])
        other = make_leader("other")
        services.create_team(other, name="Cloudy", skills_needed=["Cloud"])

        self.client.force_authenticate(user=self.joiner)
        resp = self.client.get(f"{self.base_api}matches/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([m["score"] for m in resp.json()], [100])

    def test_leave_and_remove_member(self):
        team_id = self._create_team().json()["id"]
        team = Team.objects.get(pk=team_id)
        other = make_participant("other")
        services.add_member(team, self.joiner)
        services.add_member(team, other)

        resp = self.client.delete(f"{self.base_api}{team_id}/members/{other.id}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)
        self.assertEqual(resp.json()["current_size"], 2)

        resp = self.client.post(f"{self.base_api}{team_id}/leave/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["errors"]["code"], "MUST_PROMOTE_FIRST")

        resp = self.client.post(
            f"{self.base_api}{team_id}/leave/", {"promoted_creator_id": self.joiner.id}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        team.refresh_from_db()
        self.assertEqual(team.creator_id, self.joiner.id)

    def test_finalize_and_delete(self):
        team_id = self._create_team().json()["id"]
        team = Team.objects.get(pk=team_id)
        services.add_member(team, self.joiner)

        resp = self.client.post(f"{self.base_api}{team_id}/finalize/")
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.json()["errors"]["code"], "TEAM_SIZE_OUT_OF_RANGE")

        services.add_member(team, make_participant("third"))
        resp = self.client.post(f"{self.base_api}{team_id}/finalize/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["state"], Team.STATE_FINALIZED)
        self.assertFalse(resp.json()["permissions"]["can_respond_to_requests"])
        self.assertTrue(resp.json()["permissions"]["can_manage_members"])

        resp = self.client.delete(f"{self.base_api}{team_id}/")
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)

    def test_delete_team(self):
        team_id = self._create_team().json()["id"]
        resp = self.client.delete(f"{self.base_api}{team_id}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Team.objects.filter(pk=team_id).exists())
        self.leader.refresh_from_db()
        self.assertIsNone(self.leader.current_team_id)

    def test_links_and_activity(self):
        team_id = self._create_team().json()["id"]
        resp = self.client.patch(
            f"{self.base_api}{team_id}/links/", {"discord_link": "https://discord.gg/alpha"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)
        self.assertEqual(resp.json()["discord_link"], "https://discord.gg/alpha")

        resp = self.client.get(f"{self.base_api}{team_id}/activity/")
        self.assertEqual(
            [a["verb"] for a in resp.json()], ["team.links_updated", "team.created"]
        )

        self.client.force_authenticate(user=self.joiner)
        resp = self.client.get(f"{self.base_api}{team_id}/activity/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
