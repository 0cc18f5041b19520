from django.contrib import admin, messages

from core.exceptions import TeamActionError
from . import services
from .models import Team, TeamMember, JoinRequest, TeamInvite


class ReadOnlyAdminMixin:
    """Rows are written through teams.services / teams.workflow only."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class TeamMemberInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = TeamMember
    extra = 0
    can_delete = False
    fields = ('user', 'joined_at')
    readonly_fields = ('user', 'joined_at')


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ('name', 'state', 'creator_name', 'goal', 'time_commitment', 'created_at')
    list_filter = ('state', 'goal', 'time_commitment', 'created_at')
    search_fields = ('name', 'creator__username', 'creator_name')
    # State and roster only move through the lock action below
    readonly_fields = ('state', 'creator', 'creator_name', 'created_at', 'updated_at')
    inlines = [TeamMemberInline]
    actions = ['lock_teams']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description="Lock selected teams for judging")
    def lock_teams(self, request, queryset):
        locked = 0
        for team in queryset:
            try:
                services.lock_team_for_event(team, request.user)
                locked += 1
            except TeamActionError as exc:
                self.message_user(request, f"{team.name}: {exc.message}", messages.WARNING)
        self.message_user(request, f"{locked} team(s) locked.")


@admin.register(TeamMember)
class TeamMemberAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ('user', 'team', 'joined_at')
    search_fields = ('user__username', 'team__name')


@admin.register(JoinRequest)
class JoinRequestAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ('user_name', 'team_name', 'status', 'created_at', 'resolved_at')
    list_filter = ('status', 'created_at')
    search_fields = ('user_name', 'team_name', 'user__username')


@admin.register(TeamInvite)
class TeamInviteAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ('invited_user_name', 'team_name', 'invited_by_name', 'status', 'created_at')
    list_filter = ('status', 'created_at')
    search_fields = ('invited_user_name', 'team_name', 'invited_user__username')
