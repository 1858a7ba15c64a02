"""Tickets and their conversations."""

from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings
from django.urls import reverse

from accounts.tests.utils import make_applicant, make_staff
from applications.models import Application
from catalog.tests.utils import make_program
from jobs import tasks
from support import services
from support.models import ImmutableMessageError, Ticket, TicketMessage


class OpenTicketTest(TestCase):
    def setUp(self):
        self.applicant = make_applicant()

    def test_creates_ticket_and_first_message(self):
        ticket = services.open_ticket(self.applicant, " Fee refund ", Ticket.HIGH, "Paid twice")
        self.assertEqual(ticket.status, Ticket.OPEN)
        self.assertEqual(ticket.subject, "Fee refund")
        self.assertRegex(ticket.ticket_number, r"^TKT\d{8}$")
        self.assertEqual(ticket.ticket_number, f"TKT{ticket.pk:08d}")
        self.assertEqual([m.body for m in ticket.messages.all()], ["Paid twice"])

    def test_blank_fields_rejected(self):
        with self.assertRaises(ValidationError):
            services.open_ticket(self.applicant, "  ", Ticket.LOW, "body")
        with self.assertRaises(ValidationError):
            services.open_ticket(self.applicant, "subject", Ticket.LOW, "")
        self.assertFalse(Ticket.objects.exists())

    def test_invalid_priority(self):
        with self.assertRaises(ValidationError):
            services.open_ticket(self.applicant, "s", "critical", "m")

    def test_application_must_be_own(self):
        program = make_program()
        other_app = Application.objects.create(
            applicant=make_applicant("other@example.com"), university=program.university, program=program
        )
        with self.assertRaises(ValidationError):
            services.open_ticket(self.applicant, "s", Ticket.LOW, "m", application=other_app)


class ConversationTest(TestCase):
    def setUp(self):
        self.applicant = make_applicant()
        self.staff = make_staff()
        self.ticket = services.open_ticket(self.applicant, "Hostel", Ticket.MEDIUM, "Is hostel included?")

    def test_messages_in_creation_order(self):
        services.post_message(self.ticket, self.staff, "Yes, for first years.")
        services.post_message(self.ticket, self.applicant, "Thanks!")
        bodies = [m.body for m in services.conversation(self.ticket, self.applicant)]
        self.assertEqual(bodies, ["Is hostel included?", "Yes, for first years.", "Thanks!"])

    def test_internal_notes_hidden_from_applicant(self):
        services.post_message(self.ticket, self.staff, "Check with warden", internal=True)
        self.assertEqual(services.conversation(self.ticket, self.applicant).count(), 1)
        self.assertEqual(services.conversation(self.ticket, self.staff).count(), 2)

    def test_applicant_cannot_post_internal_note(self):
        with self.assertRaises(ValidationError):
            services.post_message(self.ticket, self.applicant, "psst", internal=True)

    def test_closed_ticket_rejects_messages(self):
        services.set_status(self.ticket, Ticket.CLOSED)
        with self.assertRaises(ValidationError):
            services.post_message(self.ticket, self.applicant, "Hello?")

    def test_after_filter(self):
        first = self.ticket.messages.get()
        reply = services.post_message(self.ticket, self.staff, "Reply")
        self.assertEqual(list(services.conversation(self.ticket, self.applicant, after=first.pk)), [reply])

    def test_messages_are_immutable(self):
        msg = self.ticket.messages.get()
        msg.body = "edited"
        with self.assertRaises(ImmutableMessageError):
            msg.save()
        self.assertEqual(TicketMessage.objects.get(pk=msg.pk).body, "Is hostel included?")

    @override_settings(NOTIFICATIONS_ENABLED=True)
    def test_only_public_staff_replies_notify(self):
        with mock.patch.object(tasks.notify_ticket_reply, "delay") as delay:
            with self.captureOnCommitCallbacks(execute=True):
                services.post_message(self.ticket, self.applicant, "Any update?")
                services.post_message(self.ticket, self.staff, "internal", internal=True)
                reply = services.post_message(self.ticket, self.staff, "Done")
        delay.assert_called_once_with(reply.pk)


class AssignmentTest(TestCase):
    def setUp(self):
        self.ticket = services.open_ticket(make_applicant(), "Docs", Ticket.URGENT, "Upload fails")
        self.staff = make_staff()

    def test_assign_and_unassign(self):
        services.assign(self.ticket, self.staff)
        self.ticket.refresh_from_db()
        self.assertEqual(self.ticket.assigned_to, self.staff)
        self.assertEqual(self.ticket.status, Ticket.IN_PROGRESS)

        services.assign(self.ticket, None)
        self.ticket.refresh_from_db()
        self.assertIsNone(self.ticket.assigned_to)
        self.assertEqual(self.ticket.status, Ticket.OPEN)

    def test_cannot_assign_to_applicant(self):
        with self.assertRaises(ValidationError):
            services.assign(self.ticket, make_applicant("x@example.com"))

    def test_invalid_status(self):
        with self.assertRaises(ValidationError):
            services.set_status(self.ticket, "escalated")

    def test_counts(self):
        services.open_ticket(self.ticket.applicant, "Other", Ticket.LOW, "m")
        services.set_status(self.ticket, Ticket.RESOLVED)
        counts = services.ticket_counts(Ticket.objects.all())
        self.assertEqual(counts, {"total": 2, "active": 1, "high_priority": 1, "resolved": 1, "closed": 0})


class TicketViewsTest(TestCase):
    def setUp(self):
        self.applicant = make_applicant()
        self.staff = make_staff()

    def test_applicant_creates_ticket(self):
        self.client.force_login(self.applicant)
        response = self.client.post(
            reverse("support:index"), {"subject": "Fees", "priority": "low", "message": "How much?"}
        )
        ticket = Ticket.objects.get()
        self.assertRedirects(response, reverse("support:detail", args=[ticket.pk]))
        self.assertEqual(ticket.applicant, self.applicant)

    def test_cannot_link_someone_elses_application(self):
        program = make_program()
        other_app = Application.objects.create(
            applicant=make_applicant("other@example.com"), university=program.university, program=program
        )
        self.client.force_login(self.applicant)
        response = self.client.post(
            reverse("support:index"),
            {"subject": "Fees", "priority": "low", "message": "?", "application": other_app.pk},
        )
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Ticket.objects.exists())

    def test_other_applicant_forbidden(self):
        ticket = services.open_ticket(self.applicant, "Mine", Ticket.LOW, "private")
        self.client.force_login(make_applicant("nosy@example.com"))
        self.assertEqual(self.client.get(reverse("support:detail", args=[ticket.pk])).status_code, 403)
        response = self.client.post(reverse("support:post_message", args=[ticket.pk]), {"body": "hi"})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(ticket.messages.count(), 1)

    def test_staff_workflow(self):
        ticket = services.open_ticket(self.applicant, "Mine", Ticket.LOW, "help")
        self.client.force_login(self.staff)
        self.client.post(reverse("support:assign", args=[ticket.pk]), {"assigned_to": self.staff.pk})
        self.client.post(reverse("support:post_message", args=[ticket.pk]), {"body": "note", "is_internal": "on"})
        self.client.post(reverse("support:update_status", args=[ticket.pk]), {"status": "resolved"})
        ticket.refresh_from_db()
        self.assertEqual(ticket.assigned_to, self.staff)
        self.assertEqual(ticket.status, Ticket.RESOLVED)
        self.assertTrue(ticket.messages.filter(is_internal=True).exists())

        response = self.client.get(reverse("support:staff_list"), {"status": "resolved", "priority": "all"})
        self.assertEqual(list(response.context["tickets"]), [ticket])

    def test_feed_hides_internal_notes(self):
        ticket = services.open_ticket(self.applicant, "Mine", Ticket.LOW, "help")
        first = ticket.messages.get()
        services.post_message(ticket, self.staff, "secret", internal=True)
        reply = services.post_message(ticket, self.staff, "On it")
        services.set_status(ticket, Ticket.IN_PROGRESS)

        self.client.force_login(self.applicant)
        url = reverse("support:ticket_feed", args=[ticket.pk])
        data = self.client.get(url, {"after": first.pk}).json()
        self.assertEqual(data["status"], "in_progress")
        self.assertEqual([m["id"] for m in data["messages"]], [reply.pk])
        self.assertEqual(data["messages"][0]["sender_role"], "staff")

        self.client.force_login(self.staff)
        data = self.client.get(url, {"after": first.pk}).json()
        self.assertEqual(len(data["messages"]), 2)

    def test_feed_access_control(self):
        ticket = services.open_ticket(self.applicant, "Mine", Ticket.LOW, "help")
        url = reverse("support:ticket_feed", args=[ticket.pk])
        self.assertEqual(self.client.get(url).status_code, 403)
        self.client.force_login(make_applicant("nosy@example.com"))
        self.assertEqual(self.client.get(url).status_code, 403)
        self.client.force_login(self.applicant)
        self.assertEqual(self.client.get(url, {"after": "abc"}).status_code, 400)
