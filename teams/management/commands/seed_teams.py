from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from core.constants import GOAL_BUILD, GOAL_WIN, TIME_FULL, TIME_PARTIAL
from teams import services, workflow
from teams.models import Team

User = get_user_model()

PARTICIPANTS = [
    # username, intent, primary, secondary, goal, time
    ("alice", User.INTENT_CREATE, ["Backend", "DevOps"], ["Cloud"], GOAL_WIN, TIME_FULL),
    ("bob", User.INTENT_JOIN, ["Frontend", "UI/UX Design"], ["Testing/QA"], GOAL_WIN, TIME_FULL),
    ("carol", User.INTENT_JOIN, ["ML/AI", "Data Science"], ["Backend"], GOAL_BUILD, TIME_PARTIAL),
    ("dave", User.INTENT_JOIN, ["Mobile Dev"], ["Frontend"], GOAL_WIN, TIME_PARTIAL),
    ("erin", User.INTENT_CREATE, ["Product Management"], ["Marketing"], GOAL_BUILD, TIME_PARTIAL),
]


class Command(BaseCommand):
    help = "Seeds the database with sample participants, teams, requests and invites"

    def handle(self, *args, **options):
        self.stdout.write("Seeding teams...")

        users = {}
        for username, intent, primary, secondary, goal, time in PARTICIPANTS:
            user, _ = User.objects.get_or_create(
                username=username,
                defaults={"email": f"{username}@example.com"},
            )
            user.set_password("password")
            user.display_name = username.capitalize()
            user.intent = intent
            user.primary_skills = primary
            user.secondary_skills = secondary
            user.goal = goal
            user.time_availability = time
            user.profile_completed = True
            user.save()
            users[username] = user

        if Team.objects.filter(creator=users["alice"]).exists():
            self.stdout.write(self.style.WARNING("Sample teams already exist, skipping."))
            return

        alpha = services.create_team(
            users["alice"],
            name="Team Alpha",
            skills_needed=["Frontend", "ML/AI", "UI/UX Design"],
            goal=GOAL_WIN,
            time_commitment=TIME_FULL,
        )
        services.create_team(
            users["erin"],
            name="Build Club",
            skills_needed=["Mobile Dev", "Backend"],
            goal=GOAL_BUILD,
            time_commitment=TIME_PARTIAL,
        )

        request = workflow.create_join_request(users["bob"], alpha, note="Happy to own the UI")
        workflow.accept_join_request(request, users["alice"])
        workflow.create_join_request(users["dave"], alpha)
        workflow.send_invite(alpha, users["alice"], users["carol"])

        self.stdout.write(self.style.SUCCESS(f"Seeded {len(users)} users and {Team.objects.count()} teams."))
