"""
Django Admin configuration for notifications.
"""
from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'type', 'title', 'read', 'created_at']
    list_filter = ['type', 'read', 'created_at']
    search_fields = ['title', 'message', 'user__username']
    ordering = ['-created_at']
    raw_id_fields = ['user']
    readonly_fields = ['type', 'title', 'message', 'reference_id', 'reference_type', 'created_at']
