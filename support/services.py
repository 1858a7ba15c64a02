import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q

from jobs.dispatch import enqueue_after_commit
from jobs.tasks import notify_ticket_reply
from .models import Ticket, TicketMessage

logger = logging.getLogger(__name__)


def open_ticket(applicant, subject: str, priority: str, message: str, application=None) -> Ticket:
    subject = (subject or "").strip()
    message = (message or "").strip()
    if not subject or not message:
        raise ValidationError("Subject and message are required.")
    if priority not in dict(Ticket.PRIORITY_CHOICES):
        raise ValidationError(f"Invalid priority: {priority}")
    if application is not None and application.applicant_id != applicant.pk:
        raise ValidationError("Invalid application.")
    with transaction.atomic():
        ticket = Ticket.objects.create(
            applicant=applicant,
            application=application,
            subject=subject,
            priority=priority,
            status=Ticket.OPEN,
        )
        TicketMessage.objects.create(ticket=ticket, sender=applicant, body=message)
    logger.info("Ticket %s opened by user %s", ticket.ticket_number, applicant.pk)
    return ticket


def post_message(ticket: Ticket, sender, body: str, internal: bool = False) -> TicketMessage:
    body = (body or "").strip()
    if not body:
        raise ValidationError("Message cannot be empty.")
    if internal and not sender.is_portal_staff:
        raise ValidationError("Only staff can post internal notes.")
    if ticket.status == Ticket.CLOSED:
        raise ValidationError("This ticket is closed.")
    msg = TicketMessage.objects.create(ticket=ticket, sender=sender, body=body, is_internal=internal)
    # updated_at tracks the last activity on the ticket
    ticket.save(update_fields=["updated_at"])
    if sender.is_portal_staff and not internal:
        enqueue_after_commit(notify_ticket_reply, msg.pk)
    return msg


def set_status(ticket: Ticket, status: str) -> Ticket:
    if status not in dict(Ticket.STATUS_CHOICES):
        raise ValidationError(f"Invalid status: {status}")
    previous = ticket.status
    ticket.status = status
    ticket.save(update_fields=["status", "updated_at"])
    logger.info("Ticket %s status %s -> %s", ticket.ticket_number, previous, status)
    return ticket


def assign(ticket: Ticket, staff_user=None) -> Ticket:
    if staff_user is not None and not staff_user.is_portal_staff:
        raise ValidationError("Tickets can only be assigned to staff.")
    ticket.assigned_to = staff_user
    ticket.status = Ticket.IN_PROGRESS if staff_user else Ticket.OPEN
    ticket.save(update_fields=["assigned_to", "status", "updated_at"])
    logger.info(
        "Ticket %s assigned to %s",
        ticket.ticket_number,
        getattr(staff_user, "pk", None),
    )
    return ticket


def conversation(ticket: Ticket, viewer, after: int | None = None):
    qs = ticket.messages.select_related("sender", "sender__profile").order_by("created_at", "id")
    if not viewer.is_portal_staff:
        qs = qs.filter(is_internal=False)
    if after:
        qs = qs.filter(id__gt=after)
    return qs


def ticket_counts(queryset) -> dict:
    return queryset.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(status__in=[Ticket.OPEN, Ticket.IN_PROGRESS])),
        high_priority=Count("id", filter=Q(priority__in=[Ticket.HIGH, Ticket.URGENT])),
        resolved=Count("id", filter=Q(status=Ticket.RESOLVED)),
        closed=Count("id", filter=Q(status=Ticket.CLOSED)),
    )
