"""
Notification API Views.

Implements:
- GET /notifications/ - Current user's notifications, newest first
- GET /notifications/unread-count/ - Unread badge count
- POST /notifications/{id}/read/ - Mark one notification read
- POST /notifications/read-all/ - Mark all notifications read
"""
from rest_framework import generics
from rest_framework.response import Response
from rest_framework.views import APIView

from core.context import ActorContext
from core.exceptions import ServiceError, error_response
from . import services
from .serializers import NotificationSerializer


class NotificationListView(generics.ListAPIView):
    """
    GET: List notifications addressed to the current user.

    Query Parameters:
        - unread: Only unread notifications (true/false)
    """
    serializer_class = NotificationSerializer

    def get_queryset(self):
        queryset = services.notifications_for(ActorContext.from_request(self.request))
        if self.request.query_params.get('unread', '').lower() == 'true':
            queryset = queryset.filter(read=False)
        return queryset


class UnreadCountView(APIView):
    """GET: Number of unread notifications for the current user."""

    def get(self, request):
        return Response({'unread': services.unread_count(ActorContext.from_request(request))})


class MarkReadView(APIView):
    """POST: Mark a single notification as read."""

    def post(self, request, pk):
        try:
            notification = services.mark_as_read(ActorContext.from_request(request), pk)
        except ServiceError as e:
            return error_response(e)
        return Response(NotificationSerializer(notification).data)


class MarkAllReadView(APIView):
    """POST: Mark every unread notification of the current user as read."""

    def post(self, request):
        updated = services.mark_all_as_read(ActorContext.from_request(request))
        return Response({'updated': updated})
