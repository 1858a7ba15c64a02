import logging

from django.conf import settings
from django.urls import reverse
from django_rq import job

from mailer.sending import send_notification

logger = logging.getLogger(__name__)


def _absolute(path: str) -> str:
    return f"{settings.SITE_URL.rstrip('/')}{path}"


def _stamp(dt) -> int:
    return int(dt.timestamp()) if dt else 0


@job("mail")
def notify_application_status(application_id: int):
    from applications.models import Application

    app = (
        Application.objects.select_related("applicant", "university", "program")
        .filter(pk=application_id)
        .first()
    )
    if not app:
        logger.warning("notify_application_status: application %s not found", application_id)
        return
    context = {
        "application": app,
        "status_label": app.get_status_display(),
        "link": _absolute(reverse("applications:detail", args=[app.pk])),
        "subject_vars": {
            "number": app.application_number,
            "status": app.get_status_display(),
        },
    }
    send_notification(
        app.applicant,
        "application_status",
        context,
        ref=f"application:{app.pk}:{app.status}:{_stamp(app.updated_at)}",
    )


@job("mail")
def notify_document_review(document_id: int):
    from applications.models import ApplicationDocument

    doc = (
        ApplicationDocument.objects.select_related(
            "application__applicant", "document_type"
        )
        .filter(pk=document_id)
        .first()
    )
    if not doc:
        logger.warning("notify_document_review: document %s not found", document_id)
        return
    app = doc.application
    context = {
        "application": app,
        "document": doc,
        "status_label": doc.get_status_display(),
        "link": _absolute(reverse("applications:detail", args=[app.pk])),
        "subject_vars": {
            "document": doc.document_type.name,
            "status": doc.get_status_display(),
        },
    }
    send_notification(
        app.applicant,
        "document_review",
        context,
        ref=f"document:{doc.pk}:{doc.status}:{_stamp(doc.verified_at or doc.uploaded_at)}",
    )


@job("mail")
def notify_ticket_reply(message_id: int):
    from support.models import TicketMessage

    msg = (
        TicketMessage.objects.select_related("ticket__applicant", "sender")
        .filter(pk=message_id)
        .first()
    )
    if not msg or msg.is_internal:
        return
    ticket = msg.ticket
    context = {
        "ticket": ticket,
        "message": msg,
        "link": _absolute(reverse("support:detail", args=[ticket.pk])),
        "subject_vars": {"number": ticket.ticket_number, "subject": ticket.subject},
    }
    send_notification(ticket.applicant, "ticket_reply", context, ref=f"ticket_message:{msg.pk}")
