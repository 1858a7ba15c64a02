import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.http import HttpResponseBadRequest, HttpResponseForbidden
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from accounts.decorators import applicant_required, staff_required
from accounts.permissions import can_view_ticket
from . import services
from .forms import AssignForm, MessageForm, TicketFilterForm, TicketForm, TicketStatusForm
from .models import Ticket

logger = logging.getLogger(__name__)


@applicant_required
def index(request):
    form = TicketForm(request.POST or None, applicant=request.user)
    if request.method == "POST":
        if not form.is_valid():
            messages.error(request, "Subject and message are required.")
        else:
            data = form.cleaned_data
            try:
                ticket = services.open_ticket(
                    request.user,
                    data["subject"],
                    data["priority"],
                    data["message"],
                    application=data.get("application"),
                )
            except ValidationError as e:
                messages.error(request, " ".join(e.messages))
            except DatabaseError:
                logger.exception("Creating ticket failed for user %s", request.user.pk)
                messages.error(request, "Failed to create ticket. Please try again.")
            else:
                messages.success(request, f"Ticket {ticket.ticket_number} created.")
                return redirect("support:detail", pk=ticket.pk)
    tickets = Ticket.objects.filter(applicant=request.user).select_related("application")
    ctx = {
        "form": form,
        "tickets": tickets,
        "counts": services.ticket_counts(tickets),
        "active_nav": "support",
    }
    return render(request, "support/index.html", ctx)


@staff_required
def staff_list(request):
    tickets = Ticket.objects.select_related("applicant__profile", "assigned_to")
    form = TicketFilterForm(request.GET or None)
    if form.is_valid():
        status = form.cleaned_data.get("status")
        priority = form.cleaned_data.get("priority")
        if status and status != "all":
            tickets = tickets.filter(status=status)
        if priority and priority != "all":
            tickets = tickets.filter(priority=priority)
    ctx = {
        "form": form,
        "tickets": tickets,
        "counts": services.ticket_counts(tickets),
        "active_nav": "tickets",
    }
    return render(request, "support/staff_list.html", ctx)


def _ticket_for(request, pk):
    ticket = get_object_or_404(
        Ticket.objects.select_related("applicant__profile", "application__university", "assigned_to"),
        pk=pk,
    )
    if not can_view_ticket(request.user, ticket):
        return None
    return ticket


@login_required
def detail(request, pk: int):
    ticket = _ticket_for(request, pk)
    if ticket is None:
        return HttpResponseForbidden("Not authorized")
    msgs = list(services.conversation(ticket, request.user))
    ctx = {
        "ticket": ticket,
        "conversation": msgs,
        "last_message_id": msgs[-1].pk if msgs else 0,
        "message_form": MessageForm(),
        "active_nav": "tickets" if request.user.is_portal_staff else "support",
    }
    if request.user.is_portal_staff:
        ctx["status_form"] = TicketStatusForm(initial={"status": ticket.status})
        ctx["assign_form"] = AssignForm(initial={"assigned_to": ticket.assigned_to_id})
    return render(request, "support/detail.html", ctx)


@login_required
@require_POST
def post_message(request, pk: int):
    ticket = _ticket_for(request, pk)
    if ticket is None:
        return HttpResponseForbidden("Not authorized")
    form = MessageForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Message cannot be empty.")
        return redirect("support:detail", pk=ticket.pk)
    try:
        services.post_message(
            ticket,
            request.user,
            form.cleaned_data["body"],
            internal=form.cleaned_data.get("is_internal", False),
        )
    except ValidationError as e:
        messages.error(request, " ".join(e.messages))
    except DatabaseError:
        logger.exception("Posting to ticket %s failed", ticket.pk)
        messages.error(request, "Failed to send message.")
    return redirect("support:detail", pk=ticket.pk)


@staff_required
@require_POST
def update_status(request, pk: int):
    ticket = get_object_or_404(Ticket, pk=pk)
    form = TicketStatusForm(request.POST)
    if not form.is_valid():
        return HttpResponseBadRequest("invalid status")
    services.set_status(ticket, form.cleaned_data["status"])
    messages.success(request, f"Ticket marked {ticket.get_status_display().lower()}.")
    return redirect("support:detail", pk=ticket.pk)


@staff_required
@require_POST
def assign(request, pk: int):
    ticket = get_object_or_404(Ticket, pk=pk)
    form = AssignForm(request.POST)
    if not form.is_valid():
        return HttpResponseBadRequest("invalid assignee")
    services.assign(ticket, form.cleaned_data.get("assigned_to"))
    return redirect("support:detail", pk=ticket.pk)
