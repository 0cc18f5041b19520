from .teams import TeamViewSet
from .requests import JoinRequestViewSet
from .invites import TeamInviteViewSet
from .generics import api_error
