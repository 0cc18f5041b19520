from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User

@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('username', 'email', 'display_name', 'intent', 'profile_completed', 'current_team', 'is_staff')
    list_filter = ('intent', 'profile_completed', 'goal', 'time_availability', 'is_staff', 'is_active')
    search_fields = ('username', 'email', 'display_name')
    # Membership pointer is owned by teams.services
    readonly_fields = UserAdmin.readonly_fields + ('current_team',)
    fieldsets = UserAdmin.fieldsets + (
        ('Hackathon Profile', {'fields': (
            'display_name', 'bio', 'intent', 'primary_skills', 'secondary_skills',
            'role', 'goal', 'time_availability', 'profile_completed', 'current_team',
        )}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Hackathon Profile', {'fields': ('display_name', 'email')}),
    )
