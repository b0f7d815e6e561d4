"""
Django Admin configuration for user profiles.
"""
from django.contrib import admin
from .models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'role', 'created_at']
    list_filter = ['role']
    search_fields = ['user__username', 'user__email']
    raw_id_fields = ['user']
