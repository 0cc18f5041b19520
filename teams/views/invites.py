# teams/views/invites.py - Invite responses

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from teams import workflow
from teams.models import TeamInvite
from teams.serializers import TeamInviteSerializer


class TeamInviteViewSet(viewsets.GenericViewSet):
    """
    GET  /api/teams/invites/me/             pending invites for the caller
    POST /api/teams/invites/<id>/accept/    join the inviting team
    POST /api/teams/invites/<id>/decline/
    """
    serializer_class = TeamInviteSerializer
    permission_classes = [IsAuthenticated]
    queryset = TeamInvite.objects.all()
    lookup_value_regex = r'\d+'

    @action(detail=False, methods=['get'], url_path='me')
    def me(self, request):
        invites = workflow.pending_invites_for_user(request.user)
        return Response(self.get_serializer(invites, many=True).data)

    @action(detail=True, methods=['post'], url_path='accept')
    def accept(self, request, pk=None):
        invite = workflow.accept_invite(int(pk), request.user)
        return Response(self.get_serializer(invite).data)

    @action(detail=True, methods=['post'], url_path='decline')
    def decline(self, request, pk=None):
        invite = workflow.decline_invite(int(pk), request.user)
        return Response(self.get_serializer(invite).data)
