from django.shortcuts import get_object_or_404
from rest_framework import serializers
from rest_framework.decorators import api_view
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.response import Response

from accounts.permissions import can_view_ticket
from .models import Ticket, TicketMessage
from .services import conversation


class TicketMessageSerializer(serializers.ModelSerializer):
    sender = serializers.CharField(source="sender.display_name")
    sender_role = serializers.CharField(source="sender.role")

    class Meta:
        model = TicketMessage
        fields = ["id", "sender", "sender_role", "body", "is_internal", "created_at"]


@api_view(["GET"])
def ticket_feed(request, pk: int):
    """Messages newer than ?after=<id>, plus the ticket's current status."""
    ticket = get_object_or_404(Ticket, pk=pk)
    if not can_view_ticket(request.user, ticket):
        raise PermissionDenied("Not authorized")
    after = request.query_params.get("after") or 0
    try:
        after = int(after)
    except ValueError:
        raise ValidationError({"after": "must be an integer"})
    msgs = conversation(ticket, request.user, after=after)
    return Response(
        {
            "ticket": ticket.pk,
            "status": ticket.status,
            "assigned_to": ticket.assigned_to_id,
            "messages": TicketMessageSerializer(msgs, many=True).data,
        }
    )
