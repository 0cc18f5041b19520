# core/constants.py

# --- Activity Verbs (Standard Registry) ---

# Team Lifecycle
ACTIVITY_TEAM_CREATED = "team.created"
ACTIVITY_TEAM_FINALIZED = "team.finalized"
ACTIVITY_TEAM_LOCKED = "team.locked"
ACTIVITY_TEAM_DELETED = "team.deleted"
ACTIVITY_TEAM_LINKS_UPDATED = "team.links_updated"

# Membership
ACTIVITY_MEMBER_JOINED = "team.member_joined"
ACTIVITY_MEMBER_LEFT = "team.member_left"
ACTIVITY_MEMBER_REMOVED = "team.member_removed"
ACTIVITY_CREATOR_PROMOTED = "team.creator_promoted"

# Requests & Invites
ACTIVITY_REQUEST_SENT = "request.sent"
ACTIVITY_REQUEST_ACCEPTED = "request.accepted"
ACTIVITY_REQUEST_REJECTED = "request.rejected"
ACTIVITY_INVITE_SENT = "invite.sent"
ACTIVITY_INVITE_ACCEPTED = "invite.accepted"
ACTIVITY_INVITE_DECLINED = "invite.declined"


# --- Profile Catalog ---

# Top 20 hackathon skills
SKILLS = [
    "Frontend",
    "Backend",
    "Full Stack",
    "UI/UX Design",
    "Mobile Dev",
    "DevOps",
    "ML/AI",
    "Data Science",
    "Blockchain",
    "Cybersecurity",
    "Game Dev",
    "AR/VR",
    "Cloud",
    "Testing/QA",
    "Product Management",
    "Content Writing",
    "Marketing",
    "Video Editing",
    "3D Design",
    "Business/Strategy",
]

ROLES = [
    "Developer",
    "Designer",
    "Product Manager",
    "Data Scientist",
    "DevOps Engineer",
    "Marketing",
    "Other",
]

GOAL_WIN = "win"
GOAL_LEARN = "learn"
GOAL_BUILD = "build"

GOAL_CHOICES = [
    (GOAL_WIN, "Win"),
    (GOAL_LEARN, "Learn"),
    (GOAL_BUILD, "Build"),
]

TIME_FULL = "full-time"
TIME_PARTIAL = "partial"

TIME_CHOICES = [
    (TIME_FULL, "Full-time"),
    (TIME_PARTIAL, "Partial"),
]
