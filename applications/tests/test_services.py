"""Application lifecycle: creation, drafts, uploads, review and statistics."""

import os
import shutil
import tempfile
from decimal import Decimal
from unittest import mock

from django.core.exceptions import ValidationError
from django.core.files.storage import default_storage
from django.db import DatabaseError, IntegrityError, transaction
from django.test import TestCase, override_settings

from accounts.tests.utils import make_applicant, make_staff
from applications import services
from applications.models import Application, ApplicationDocument
from catalog.tests.utils import make_document_type, make_program, make_university, require
from jobs import tasks
from support.models import Ticket
from .utils import TempMediaMixin, jpg, pdf


class CreateApplicationTest(TempMediaMixin, TestCase):
    def setUp(self):
        self.applicant = make_applicant()
        self.program = make_program(fee="750.00")
        self.transcript = require(self.program, make_document_type("transcript", "Transcript", ["pdf"]))
        self.photo = require(self.program, make_document_type("photo", "Photograph", ["jpg"]), is_required=False)

    def test_submit_with_documents(self):
        app = services.create_application(
            self.applicant,
            self.program,
            academic={"tenth_school": "KV Pune", "tenth_percentage": Decimal("91.50")},
            profile_data={"full_name": "Asha Rao", "city": "Pune"},
            uploads={self.transcript: pdf(), self.photo: jpg()},
        )
        app.refresh_from_db()
        self.assertEqual(app.status, Application.SUBMITTED)
        self.assertIsNotNone(app.submission_date)
        self.assertEqual(app.university, self.program.university)
        self.assertEqual(app.application_fee, Decimal("750.00"))
        self.assertEqual(app.tenth_school, "KV Pune")
        self.assertRegex(app.application_number, r"^APP\d{4}\d{6}$")
        self.assertTrue(app.application_number.startswith(f"APP{app.created_at:%Y}"))

        docs = list(app.documents.all())
        self.assertEqual(len(docs), 2)
        self.assertTrue(all(d.status == ApplicationDocument.PENDING for d in docs))
        self.assertTrue(docs[0].file.name.startswith(f"documents/{self.applicant.pk}/{app.pk}/"))

        self.applicant.profile.refresh_from_db()
        self.assertEqual(self.applicant.profile.full_name, "Asha Rao")

    def test_missing_required_document_blocks_submit(self):
        with self.assertRaises(ValidationError) as ctx:
            services.create_application(self.applicant, self.program, academic={}, uploads={self.photo: jpg()})
        self.assertIn("Transcript is required.", ctx.exception.messages)
        self.assertFalse(Application.objects.exists())

    def test_invalid_upload_blocks_everything(self):
        with self.assertRaises(ValidationError):
            services.create_application(
                self.applicant,
                self.program,
                academic={},
                profile_data={"full_name": "Changed"},
                uploads={self.transcript: jpg("transcript.jpg")},
            )
        self.assertFalse(Application.objects.exists())
        self.applicant.profile.refresh_from_db()
        self.assertEqual(self.applicant.profile.full_name, "")

    def test_failure_mid_write_rolls_back_and_removes_files(self):
        media = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, media, True)
        real_store = services._store_document

        def store_then_fail(doc, upload, stored):
            if stored:
                raise DatabaseError("disk quota exceeded")
            real_store(doc, upload, stored)

        with override_settings(MEDIA_ROOT=media), mock.patch(
            "applications.services._store_document", side_effect=store_then_fail
        ):
            with self.assertRaises(DatabaseError):
                services.create_application(
                    self.applicant,
                    self.program,
                    academic={},
                    profile_data={"full_name": "Changed"},
                    uploads={self.transcript: pdf(), self.photo: jpg()},
                )
            stored_files = [f for _, _, files in os.walk(media) for f in files]

        self.assertEqual(stored_files, [])
        self.assertFalse(Application.objects.exists())
        self.assertFalse(ApplicationDocument.objects.exists())
        self.applicant.profile.refresh_from_db()
        self.assertEqual(self.applicant.profile.full_name, "")

    def test_staff_cannot_apply(self):
        with self.assertRaises(ValidationError):
            services.create_application(make_staff(), self.program, academic={}, submit=False)

    def test_unrequested_document_type_rejected(self):
        passport = make_document_type("passport", "Passport")
        with self.assertRaises(ValidationError) as ctx:
            services.create_application(
                self.applicant, self.program, academic={}, uploads={passport: pdf()}, submit=False
            )
        self.assertIn("Passport is not requested for this program.", ctx.exception.messages)
        self.assertFalse(Application.objects.exists())

    def test_draft_then_submit(self):
        app = services.create_application(self.applicant, self.program, academic={}, submit=False)
        self.assertEqual(app.status, Application.DRAFT)
        self.assertIsNone(app.submission_date)

        with self.assertRaises(ValidationError):
            services.submit_draft(app)

        services.add_document(app, self.transcript, pdf())
        services.submit_draft(app)
        app.refresh_from_db()
        self.assertEqual(app.status, Application.SUBMITTED)
        self.assertIsNotNone(app.submission_date)

        with self.assertRaises(ValidationError):
            services.submit_draft(app)


class DocumentTest(TempMediaMixin, TestCase):
    def setUp(self):
        self.applicant = make_applicant()
        self.staff = make_staff()
        self.program = make_program()
        self.transcript = require(self.program, make_document_type("transcript", "Transcript", ["pdf"]))
        self.app = services.create_application(
            self.applicant, self.program, academic={}, uploads={self.transcript: pdf()}
        )
        self.doc = self.app.documents.get()

    def test_reject_requires_note(self):
        with self.assertRaises(ValidationError):
            services.review_document(self.doc, ApplicationDocument.REJECTED, "  ", self.staff)
        self.doc.refresh_from_db()
        self.assertEqual(self.doc.status, ApplicationDocument.PENDING)

    def test_verify_stamps_reviewer(self):
        services.review_document(self.doc, ApplicationDocument.VERIFIED, "", self.staff)
        self.doc.refresh_from_db()
        self.assertEqual(self.doc.status, ApplicationDocument.VERIFIED)
        self.assertEqual(self.doc.verified_by, self.staff)
        self.assertIsNotNone(self.doc.verified_at)

    def test_unknown_review_status(self):
        with self.assertRaises(ValidationError):
            services.review_document(self.doc, ApplicationDocument.PENDING, "", self.staff)

    def test_replacement_resets_to_pending_and_removes_old_file(self):
        services.review_document(self.doc, ApplicationDocument.REJECTED, "Blurry scan", self.staff)
        old_name = self.doc.file.name
        with self.captureOnCommitCallbacks(execute=True):
            doc = services.add_document(self.app, self.transcript, pdf("rescan.pdf"))
        doc.refresh_from_db()
        self.assertEqual(doc.pk, self.doc.pk)
        self.assertEqual(doc.status, ApplicationDocument.PENDING)
        self.assertEqual(doc.staff_notes, "")
        self.assertIsNone(doc.verified_by)
        self.assertEqual(doc.file_name, "rescan.pdf")
        self.assertFalse(default_storage.exists(old_name))

    def test_no_uploads_after_decision(self):
        services.update_status(self.app, Application.APPROVED, "", self.staff)
        with self.assertRaises(ValidationError):
            services.add_document(self.app, self.transcript, pdf())

    def test_unrequested_type_cannot_be_added(self):
        passport = make_document_type("passport", "Passport")
        with self.assertRaises(ValidationError):
            services.add_document(self.app, passport, pdf())
        self.assertEqual(self.app.documents.count(), 1)

    def test_document_summary(self):
        self.assertEqual(
            services.document_summary(self.app),
            {"total": 1, "verified": 0, "pending": 1, "rejected": 0},
        )


@override_settings(NOTIFICATIONS_ENABLED=True)
class StatusUpdateTest(TempMediaMixin, TestCase):
    def setUp(self):
        self.staff = make_staff()
        self.program = make_program()
        self.app = services.create_application(make_applicant(), self.program, academic={})

    def test_valid_transition(self):
        services.update_status(self.app, Application.UNDER_REVIEW, "Looks complete", self.staff)
        self.app.refresh_from_db()
        self.assertEqual(self.app.status, Application.UNDER_REVIEW)
        self.assertEqual(self.app.staff_notes, "Looks complete")

    def test_unknown_and_draft_statuses_rejected(self):
        for status in ("bogus", Application.DRAFT):
            with self.assertRaises(ValidationError):
                services.update_status(self.app, status, "", self.staff)
        self.app.refresh_from_db()
        self.assertEqual(self.app.status, Application.SUBMITTED)

    def test_drafts_cannot_be_reviewed(self):
        draft = services.create_application(make_applicant("d@example.com"), self.program, academic={}, submit=False)
        with self.assertRaises(ValidationError):
            services.update_status(draft, Application.APPROVED, "", self.staff)

    def test_notification_enqueued_only_on_change(self):
        with mock.patch.object(tasks.notify_application_status, "delay") as delay:
            with self.captureOnCommitCallbacks(execute=True):
                services.update_status(self.app, Application.UNDER_REVIEW, "", self.staff)
            delay.assert_called_once_with(self.app.pk)
            with self.captureOnCommitCallbacks(execute=True):
                services.update_status(self.app, Application.UNDER_REVIEW, "note only", self.staff)
            self.assertEqual(delay.call_count, 1)

    @override_settings(NOTIFICATIONS_ENABLED=False)
    def test_notifications_can_be_switched_off(self):
        with mock.patch.object(tasks.notify_application_status, "delay") as delay:
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                services.update_status(self.app, Application.APPROVED, "", self.staff)
        self.assertEqual(callbacks, [])
        delay.assert_not_called()

    def test_database_rejects_unknown_status(self):
        with self.assertRaises(IntegrityError), transaction.atomic():
            Application.objects.filter(pk=self.app.pk).update(status="archived")


class ModelRulesTest(TestCase):
    def test_program_must_belong_to_university(self):
        program = make_program()
        other = make_university("OTHER", "Other University")
        app = Application(applicant=make_applicant(), university=other, program=program)
        with self.assertRaises(ValidationError):
            app.clean()


class StatsTest(TestCase):
    def setUp(self):
        self.applicant = make_applicant()
        program = make_program(fee="100.00")
        statuses = [
            Application.DRAFT,
            Application.SUBMITTED,
            Application.UNDER_REVIEW,
            Application.APPROVED,
            Application.REJECTED,
            Application.DOCS_PENDING,
        ]
        for status in statuses:
            Application.objects.create(
                applicant=self.applicant,
                university=program.university,
                program=program,
                status=status,
                application_fee=program.application_fee,
            )
        Ticket.objects.create(applicant=self.applicant, subject="a")
        Ticket.objects.create(applicant=self.applicant, subject="b", status=Ticket.CLOSED)

    def test_applicant_stats(self):
        self.assertEqual(
            services.applicant_stats(self.applicant),
            {"total": 6, "under_review": 1, "approved": 1, "docs_pending": 1},
        )

    def test_staff_stats(self):
        stats = services.staff_stats()
        self.assertEqual(stats["total"], 6)
        self.assertEqual(stats["rejected"], 1)
        self.assertEqual(stats["revenue"], Decimal("500.00"))
        self.assertEqual(stats["open_tickets"], 1)

    def test_status_counts_include_every_status(self):
        counts = services.status_counts(Application.objects.none())
        self.assertEqual(set(counts), {value for value, _ in Application.STATUS_CHOICES})
        self.assertFalse(any(counts.values()))
