from django.utils.dateparse import parse_datetime
from rest_framework import generics
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAdminUser
from .models import AuditLog
from .serializers import AuditLogSerializer

class AuditLogListView(generics.ListAPIView):
    # Select related avoids N+1 queries when fetching users
    queryset = AuditLog.objects.select_related('actor').all()
    serializer_class = AuditLogSerializer
    permission_classes = [IsAdminUser]

    def get_queryset(self):
        queryset = super().get_queryset()
        action = self.request.query_params.get('action')
        if action:
            queryset = queryset.filter(action=action)
        since = self.request.query_params.get('since')
        if since:
            since_dt = parse_datetime(since)
            if since_dt is None:
                raise ValidationError({'since': 'Expected an ISO 8601 timestamp.'})
            queryset = queryset.filter(timestamp__gte=since_dt)
        return queryset
