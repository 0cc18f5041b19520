from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from core.exceptions import ErrorKind, TeamActionError
from teams.tests.utils import make_leader


class HealthCheckTests(APITestCase):
    def test_health_is_public(self):
        resp = APIClient().get("/api/health/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["status"], "ok")
        self.assertTrue(resp.json()["db"])


class ErrorEnvelopeTests(APITestCase):
    def test_validation_errors_are_wrapped(self):
        client = APIClient()
        client.force_authenticate(user=make_leader())
        resp = client.post("/api/teams/", {"skills_needed": []}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        body = resp.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["status_code"], 400)
        self.assertIn("name", body["errors"])

    def test_kinds_map_to_http_status(self):
        cases = {
            ErrorKind.NOT_FOUND: 404,
            ErrorKind.NOT_AUTHORIZED: 403,
            ErrorKind.WRONG_STATE: 409,
            ErrorKind.CAPACITY_EXCEEDED: 409,
            ErrorKind.ALREADY_ON_A_TEAM: 409,
            ErrorKind.RATE_LIMITED: 429,
            ErrorKind.VALIDATION: 400,
        }
        for kind, expected in cases.items():
            error = TeamActionError(kind, "CODE", "message")
            self.assertEqual(error.status_code, expected)
            self.assertEqual(error.as_dict(), {"detail": "message", "code": "CODE", "kind": kind})
