from django.utils.dateparse import parse_datetime
from rest_framework import serializers
from rest_framework.decorators import api_view
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from .models import Application


class ApplicationStatusSerializer(serializers.ModelSerializer):
    status_label = serializers.CharField(source="get_status_display")

    class Meta:
        model = Application
        fields = ["id", "application_number", "status", "status_label", "staff_notes", "updated_at"]


@api_view(["GET"])
def status_feed(request):
    """Statuses of the caller's applications; ?since=<iso datetime> limits to later changes."""
    qs = Application.objects.filter(applicant=request.user).order_by("updated_at", "id")
    since = request.query_params.get("since")
    if since:
        try:
            parsed = parse_datetime(since)
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationError({"since": "must be an ISO 8601 datetime"})
        qs = qs.filter(updated_at__gt=parsed)
    return Response({"applications": ApplicationStatusSerializer(qs, many=True).data})
