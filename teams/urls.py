# teams/urls.py

from rest_framework.routers import SimpleRouter
from .views import TeamViewSet, JoinRequestViewSet, TeamInviteViewSet

router = SimpleRouter()
# Registered before the team routes so "requests"/"invites" never hit the team lookup
router.register(r'requests', JoinRequestViewSet, basename='join-requests')
router.register(r'invites', TeamInviteViewSet, basename='team-invites')
router.register(r'', TeamViewSet, basename='teams')

urlpatterns = router.urls
