from contextlib import contextmanager

from django.contrib.auth import get_user_model

from core.constants import GOAL_WIN, TIME_FULL
from core.exceptions import TeamActionError

User = get_user_model()


def make_participant(username, intent="join", primary=("Frontend",), secondary=(), goal=GOAL_WIN,
                     time_availability=TIME_FULL, **extra):
    """An onboarded user ready to create or join a team."""
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="pass1234",
        display_name=username.capitalize(),
        intent=intent,
        primary_skills=list(primary),
        secondary_skills=list(secondary),
        goal=goal,
        time_availability=time_availability,
        profile_completed=True,
        **extra,
    )


def make_leader(username="leader", **kwargs):
    kwargs.setdefault("primary", ("Backend",))
    return make_participant(username, intent="create", **kwargs)


class RefusalAssertions:
    @contextmanager
    def assertRefused(self, code, kind=None):
        with self.assertRaises(TeamActionError) as ctx:
            yield ctx
        self.assertEqual(ctx.exception.code, code)
        if kind is not None:
            self.assertEqual(ctx.exception.kind, kind)
