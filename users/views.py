# users/views.py - Profile & Candidate API

from django.contrib.auth import get_user_model
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from teams import matching
from teams.models import Team, TeamInvite
from teams.policies import TeamPolicy
from teams.views.generics import api_error
from .serializers import (
    OnboardingSerializer,
    PublicUserSerializer,
    RegisterSerializer,
    UpdateProfileSerializer,
    UserSerializer,
)

User = get_user_model()


class RegisterView(APIView):
    # allow unauthenticated
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class UserViewSet(viewsets.GenericViewSet):
    """
    Profile API

    GET   /api/users/me/              current user
    PATCH /api/users/me/              edit profile
    POST  /api/users/me/onboarding/   complete onboarding (once)
    GET   /api/users/candidates/      ranked join-intent users (team leader only)
    """
    queryset = User.objects.all()
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=['get', 'patch'])
    def me(self, request):
        user = request.user
        if request.method == 'PATCH':
            serializer = UpdateProfileSerializer(user, data=request.data, partial=True)
            serializer.is_valid(raise_exception=True)
            serializer.save()
        return Response(UserSerializer(user).data)

    @action(detail=False, methods=['post'], url_path='me/onboarding')
    def onboarding(self, request):
        serializer = OnboardingSerializer(request.user, data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserSerializer(user).data)

    @action(detail=False, methods=['get'])
    def candidates(self, request):
        """
        Users looking for a team, ranked for the caller's team

        GET /api/users/candidates/?skill=Backend   exact skill
        GET /api/users/candidates/?q=front         name, role or skill substring
        """
        user = request.user
        team = Team.objects.filter(pk=user.current_team_id).first() if user.current_team_id else None
        if team is None or not TeamPolicy.is_creator(team, user):
            return api_error("Only a team leader can browse candidates.", status.HTTP_403_FORBIDDEN)

        queryset = User.objects.filter(
            intent=User.INTENT_JOIN,
            profile_completed=True,
            current_team__isnull=True,
        ).exclude(pk=user.pk).order_by('date_joined', 'id')

        skill = request.query_params.get('skill')
        candidates = list(queryset)
        if skill:
            candidates = [
                c for c in candidates
                if skill in (c.primary_skills or []) or skill in (c.secondary_skills or [])
            ]

        query = request.query_params.get('q')
        if query:
            candidates = [c for c in candidates if matching.candidate_matches_query(c, query)]

        invited_ids = set(
            TeamInvite.objects.filter(team=team, status=TeamInvite.STATUS_PENDING)
            .values_list('invited_user_id', flat=True)
        )

        results = []
        for candidate, score in matching.rank_candidates(candidates, team):
            data = PublicUserSerializer(candidate).data
            data['score'] = score
            data['top_match'] = score >= matching.TOP_CANDIDATE_SCORE
            data['already_invited'] = candidate.pk in invited_ids
            results.append(data)
        return Response(results)
