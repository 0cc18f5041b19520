# teams/views/requests.py - Join request resolution

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from teams import workflow
from teams.models import JoinRequest
from teams.serializers import JoinRequestSerializer


class JoinRequestViewSet(viewsets.GenericViewSet):
    """
    GET  /api/teams/requests/me/            the caller's own requests
    POST /api/teams/requests/<id>/accept/   team leader accepts
    POST /api/teams/requests/<id>/reject/   team leader rejects
    """
    serializer_class = JoinRequestSerializer
    permission_classes = [IsAuthenticated]
    queryset = JoinRequest.objects.all()
    lookup_value_regex = r'\d+'

    @action(detail=False, methods=['get'], url_path='me')
    def me(self, request):
        status_filter = request.query_params.get('status')
        qs = workflow.requests_for_user(request.user)
        if status_filter:
            qs = qs.filter(status=status_filter)
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=True, methods=['post'], url_path='accept')
    def accept(self, request, pk=None):
        join_request = workflow.accept_join_request(int(pk), request.user)
        return Response(self.get_serializer(join_request).data)

    @action(detail=True, methods=['post'], url_path='reject')
    def reject(self, request, pk=None):
        join_request = workflow.reject_join_request(int(pk), request.user)
        return Response(self.get_serializer(join_request).data)
