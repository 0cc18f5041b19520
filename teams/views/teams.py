# teams/views/teams.py - Team Formation API Views

from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from core.serializers import DomainActivitySerializer
from core.services import ActivityService
from teams import matching, rules, services, workflow
from teams.models import Team
from teams.policies import TeamPolicy
from teams.serializers import (
    with_members,
    JoinRequestCreateSerializer,
    JoinRequestSerializer,
    LeaveTeamSerializer,
    MatchSerializer,
    TeamCreateSerializer,
    TeamInviteCreateSerializer,
    TeamInviteSerializer,
    TeamLinksSerializer,
    TeamSerializer,
)
from .generics import api_error


class TeamViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    API for creating, browsing and managing hackathon teams

    GET    /api/teams/                      open teams (feed)
    POST   /api/teams/                      create a team
    GET    /api/teams/<id>/                 team detail
    DELETE /api/teams/<id>/                 delete (leader, DRAFT/OPEN only)
    """
    serializer_class = TeamSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        queryset = with_members(Team.objects.all())
        if self.action == 'list':
            state = self.request.query_params.get('state', Team.STATE_OPEN)
            queryset = queryset.filter(state=state)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = TeamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        team = services.create_team(request.user, **serializer.validated_data)

        team = with_members(Team.objects.filter(pk=team.pk)).get()
        return Response(
            TeamSerializer(team, context={'request': request}).data,
            status=status.HTTP_201_CREATED,
        )

    def destroy(self, request, pk=None):
        team = self.get_object()
        services.delete_team(team, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _fresh(self, team):
        return with_members(Team.objects.filter(pk=team.pk)).get()

    @action(detail=False, methods=['get'], url_path='mine')
    def mine(self, request):
        """The caller's current team"""
        team_id = request.user.current_team_id
        if team_id is None:
            return api_error("You are not in a team yet.", status.HTTP_404_NOT_FOUND)
        team = with_members(Team.objects.filter(pk=team_id)).get()
        return Response(self.get_serializer(team).data)

    @action(detail=False, methods=['get'], url_path='matches')
    def matches(self, request):
        """
        Best matching open teams for the caller's skills

        GET /api/teams/matches/?limit=3
        """
        try:
            limit = int(request.query_params.get('limit', rules.top_matches()))
        except ValueError:
            return api_error("limit must be an integer")

        user = request.user
        teams = list(
            Team.objects.filter(state=Team.STATE_OPEN)
            .exclude(memberships__user=user)
            .order_by('-created_at', '-id')
        )
        top = matching.top_matches(user.primary_skills, user.secondary_skills, teams, top_n=limit)
        return Response(MatchSerializer([m.as_dict() for m in top], many=True).data)

    @action(detail=True, methods=['post'], url_path='finalize')
    def finalize(self, request, pk=None):
        """Lock the roster (team leader only, 3 to 5 members)"""
        team = services.finalize_team(self.get_object(), request.user)
        return Response(self.get_serializer(self._fresh(team)).data)

    @action(detail=True, methods=['post'], url_path='leave')
    def leave(self, request, pk=None):
        """
        Leave the team

        POST /api/teams/<id>/leave/
        Body: {"promoted_creator_id": 12}   # required when the leader leaves
        """
        serializer = LeaveTeamSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        services.leave_team(
            self.get_object(),
            request.user,
            promoted_creator_id=serializer.validated_data.get('promoted_creator_id'),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['delete'], url_path=r'members/(?P<user_id>\d+)')
    def remove_member(self, request, pk=None, user_id=None):
        """Remove a member (team leader only)"""
        team = services.remove_member(self.get_object(), int(user_id), request.user)
        return Response(self.get_serializer(self._fresh(team)).data)

    @action(detail=True, methods=['patch'], url_path='links')
    def links(self, request, pk=None):
        """Set WhatsApp / Discord links (team leader only)"""
        team = self.get_object()
        serializer = TeamLinksSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        team = services.update_links(
            team,
            request.user,
            whatsapp_link=data.get('whatsapp_link', team.whatsapp_link),
            discord_link=data.get('discord_link', team.discord_link),
        )
        return Response(self.get_serializer(self._fresh(team)).data)

    @action(detail=True, methods=['get', 'post'], url_path='requests')
    def join_requests(self, request, pk=None):
        """
        GET  pending join requests (team leader only)
        POST ask to join this team; body: {"note": "..."}
        """
        team = self.get_object()

        if request.method == 'GET':
            if not TeamPolicy.is_creator(team, request.user):
                return api_error("Only the team leader can view join requests.", status.HTTP_403_FORBIDDEN)
            pending = workflow.pending_requests_for_team(team)
            return Response(JoinRequestSerializer(pending, many=True).data)

        serializer = JoinRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        join_request = workflow.create_join_request(request.user, team, note=serializer.validated_data['note'])
        return Response(JoinRequestSerializer(join_request).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get', 'post'], url_path='invites')
    def invites(self, request, pk=None):
        """
        GET  pending invites sent by this team (team leader only)
        POST invite a user; body: {"user_id": 7}
        """
        team = self.get_object()

        if request.method == 'GET':
            if not TeamPolicy.is_creator(team, request.user):
                return api_error("Only the team leader can view sent invites.", status.HTTP_403_FORBIDDEN)
            pending = workflow.pending_invites_for_team(team)
            return Response(TeamInviteSerializer(pending, many=True).data)

        serializer = TeamInviteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invite = workflow.send_invite(team, request.user, serializer.validated_data['user_id'])
        return Response(TeamInviteSerializer(invite).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'], url_path='activity')
    def activity(self, request, pk=None):
        """Audit trail of the team (members only)"""
        team = self.get_object()
        if not team.has_member(request.user.id):
            return api_error("Only team members can view team activity.", status.HTTP_403_FORBIDDEN)
        history = ActivityService.history_for(team)[:50]
        return Response(DomainActivitySerializer(history, many=True).data)
