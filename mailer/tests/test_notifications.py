"""Notification emails, unsubscribe links and delivery tracking."""

from anymail.signals import AnymailTrackingEvent, tracking
from django.core import mail
from django.core.signing import TimestampSigner
from django.test import TestCase
from django.urls import reverse

from accounts.tests.utils import make_applicant, make_staff
from applications.models import Application, ApplicationDocument
from applications.tests.utils import TempMediaMixin, pdf
from applications import services as application_services
from catalog.tests.utils import make_document_type, make_program, require
from jobs.tasks import notify_application_status, notify_document_review, notify_ticket_reply
from mailer.models import EmailEvent, MessageLog
from mailer.sending import send_notification, unsubscribe_link
from support import services as support_services
from support.models import Ticket


class SendNotificationTest(TestCase):
    def setUp(self):
        self.user = make_applicant(full_name="Asha Rao")
        program = make_program()
        self.app = Application.objects.create(
            applicant=self.user, university=program.university, program=program, status=Application.APPROVED
        )
        self.context = {
            "application": self.app,
            "status_label": "Approved",
            "link": "http://testserver/x",
            "subject_vars": {"number": self.app.application_number, "status": "Approved"},
        }

    def test_sends_once_per_ref(self):
        self.assertTrue(send_notification(self.user, "application_status", self.context, ref="r1"))
        self.assertFalse(send_notification(self.user, "application_status", self.context, ref="r1"))
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, [self.user.email])
        self.assertEqual(message.subject, f"Application {self.app.application_number}: Approved")
        self.assertIn("Asha Rao", message.body)
        self.assertIn("/unsubscribe/?t=", message.body)
        self.assertEqual(MessageLog.objects.get().kind, "application_status")

    def test_opted_out_users_are_skipped(self):
        self.user.email_pref.notify_by_email = False
        self.user.email_pref.save()
        self.assertFalse(send_notification(self.user, "application_status", self.context, ref="r1"))
        self.assertEqual(mail.outbox, [])

    def test_inactive_users_are_skipped(self):
        self.user.is_active = False
        self.user.save()
        self.assertFalse(send_notification(self.user, "application_status", self.context, ref="r1"))
        self.assertEqual(mail.outbox, [])


class TaskTest(TempMediaMixin, TestCase):
    def setUp(self):
        self.applicant = make_applicant()
        self.staff = make_staff()
        self.program = make_program()
        self.transcript = require(self.program, make_document_type("transcript", "Transcript", ["pdf"]))
        self.app = application_services.create_application(
            self.applicant, self.program, academic={}, uploads={self.transcript: pdf()}
        )

    def test_application_status_email(self):
        application_services.update_status(self.app, Application.DOCS_PENDING, "Upload a clearer scan", self.staff)
        notify_application_status(self.app.pk)
        notify_application_status(self.app.pk)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("Documents pending", mail.outbox[0].subject)
        self.assertIn("Upload a clearer scan", mail.outbox[0].body)
        self.assertIn(reverse("applications:detail", args=[self.app.pk]), mail.outbox[0].body)

    def test_missing_application_is_logged(self):
        with self.assertLogs("jobs.tasks", level="WARNING"):
            notify_application_status(999999)
        self.assertEqual(mail.outbox, [])

    def test_document_review_email(self):
        doc = self.app.documents.get()
        application_services.review_document(doc, ApplicationDocument.REJECTED, "Blurry", self.staff)
        notify_document_review(doc.pk)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "Transcript: Rejected")
        self.assertIn("Blurry", mail.outbox[0].body)

    def test_ticket_reply_email_skips_internal_notes(self):
        ticket = support_services.open_ticket(self.applicant, "Fees", Ticket.LOW, "How much?")
        note = support_services.post_message(ticket, self.staff, "check ledger", internal=True)
        reply = support_services.post_message(ticket, self.staff, "It is 500.")
        notify_ticket_reply(note.pk)
        self.assertEqual(mail.outbox, [])
        notify_ticket_reply(reply.pk)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(ticket.ticket_number, mail.outbox[0].subject)
        self.assertIn("It is 500.", mail.outbox[0].body)


class UnsubscribeTest(TestCase):
    def setUp(self):
        self.user = make_applicant()

    def test_signed_link_turns_notifications_off(self):
        link = unsubscribe_link(self.user)
        token = link.split("?t=", 1)[1]
        response = self.client.get(reverse("mailer:unsubscribe"), {"t": token})
        self.assertEqual(response.status_code, 200)
        self.user.email_pref.refresh_from_db()
        self.assertFalse(self.user.email_pref.notify_by_email)
        self.assertEqual(self.user.email_pref.consent_source, "unsubscribe")

    def test_bad_tokens(self):
        url = reverse("mailer:unsubscribe")
        self.assertEqual(self.client.get(url).status_code, 400)
        self.assertEqual(self.client.get(url, {"t": "tampered"}).status_code, 400)
        token = TimestampSigner().sign("999999")
        self.assertEqual(self.client.get(url, {"t": token}).status_code, 400)


class TrackingTest(TestCase):
    def test_bounce_disables_notifications(self):
        user = make_applicant()
        event = AnymailTrackingEvent(
            event_type="bounced",
            event_id="evt-1",
            recipient=user.email,
            metadata={"user_id": user.pk, "kind": "ticket_reply"},
            esp_event={"event": "bounce"},
        )
        tracking.send(sender=object, event=event, esp_name="SendGrid")
        stored = EmailEvent.objects.get()
        self.assertEqual(stored.event, "bounced")
        self.assertEqual(stored.user, user)
        user.email_pref.refresh_from_db()
        self.assertFalse(user.email_pref.notify_by_email)

    def test_delivered_event_is_only_recorded(self):
        user = make_applicant()
        event = AnymailTrackingEvent(event_type="delivered", recipient=user.email, metadata={"user_id": user.pk})
        tracking.send(sender=object, event=event, esp_name="SendGrid")
        self.assertEqual(EmailEvent.objects.count(), 1)
        user.email_pref.refresh_from_db()
        self.assertTrue(user.email_pref.notify_by_email)
