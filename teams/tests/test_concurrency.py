import threading

from django.db import connection
from django.test import TransactionTestCase

from core.exceptions import TeamActionError
from teams import services, workflow
from teams.models import JoinRequest
from .utils import make_leader, make_participant


class ConcurrentAcceptTests(TransactionTestCase):
    """Accepts running in parallel threads, each on its own connection."""

    def _accept_in_threads(self, request_ids, acting_user):
        barrier = threading.Barrier(len(request_ids))
        outcomes = []
        outcomes_lock = threading.Lock()

        def accept(request_id):
            try:
                barrier.wait()
                workflow.accept_join_request(request_id, acting_user)
                result = "ok"
            except TeamActionError as exc:
                result = exc.code
            except Exception as exc:
                result = f"{type(exc).__name__}: {exc}"
            finally:
                connection.close()
            with outcomes_lock:
                outcomes.append(result)

        threads = [threading.Thread(target=accept, args=(pk,)) for pk in request_ids]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)
        return outcomes

    def test_last_seat_goes_to_exactly_one_accept(self):
        leader = make_leader()
        team = services.create_team(leader, name="Alpha", skills_needed=["Frontend"])
        for i in range(3):
            services.add_member(team, make_participant(f"member{i}"))
        requests = [
            workflow.create_join_request(make_participant(f"joiner{i}"), team)
            for i in range(2)
        ]

        outcomes = self._accept_in_threads([r.id for r in requests], leader)

        self.assertEqual(sorted(outcomes), ["TEAM_FULL", "ok"])
        self.assertEqual(team.memberships.count(), 5)
        statuses = sorted(JoinRequest.objects.filter(team=team).values_list("status", flat=True))
        self.assertEqual(statuses, [JoinRequest.STATUS_ACCEPTED, JoinRequest.STATUS_PENDING])
        self.assertEqual(services.find_membership_inconsistencies(), [])
