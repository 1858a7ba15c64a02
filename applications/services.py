import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from accounts.models import Profile
from catalog.services import required_document_types, validate_upload
from jobs.dispatch import enqueue_after_commit
from jobs.tasks import notify_application_status, notify_document_review
from support.models import Ticket
from .models import Application, ApplicationDocument

logger = logging.getLogger(__name__)

ACADEMIC_FIELDS = [
    "tenth_school",
    "tenth_board",
    "tenth_year",
    "tenth_percentage",
    "twelfth_school",
    "twelfth_board",
    "twelfth_year",
    "twelfth_percentage",
    "graduation_college",
    "graduation_university",
    "graduation_degree",
    "graduation_year",
    "graduation_percentage",
]


def missing_required_documents(program, uploaded_type_ids) -> list:
    uploaded = set(uploaded_type_ids)
    return [
        dt for dt in required_document_types(program)
        if dt.required_for_program and dt.pk not in uploaded
    ]


def _validate_uploads(program, uploads: dict) -> list[str]:
    errors = []
    requested = {dt.pk for dt in required_document_types(program)}
    for doc_type, upload in uploads.items():
        if doc_type.pk not in requested:
            errors.append(f"{doc_type.name} is not requested for this program.")
            continue
        try:
            validate_upload(doc_type, upload)
        except ValidationError as e:
            errors.extend(e.messages)
    return errors


def _store_document(doc: ApplicationDocument, upload, stored: list) -> None:
    doc.file_name = upload.name
    doc.file_size = upload.size or 0
    doc.file.save(upload.name, upload, save=False)
    stored.append((doc.file.storage, doc.file.name))
    doc.save()


def create_application(applicant, program, academic: dict, profile_data: dict | None = None,
                       uploads: dict | None = None, submit: bool = True) -> Application:
    """
    Create an application with its documents and the applicant's profile
    changes in one transaction.

    `uploads` maps DocumentType -> uploaded file. When submitting, every
    document the program requires must be present. If anything fails, no
    rows are written and files already stored are removed.
    """
    uploads = uploads or {}
    if not applicant.is_applicant:
        raise ValidationError("Only applicants can create applications.")
    errors = _validate_uploads(program, uploads)
    if submit:
        missing = missing_required_documents(program, [dt.pk for dt in uploads])
        errors.extend(f"{dt.name} is required." for dt in missing)
    if errors:
        raise ValidationError(errors)

    stored = []
    try:
        with transaction.atomic():
            app = Application(
                applicant=applicant,
                university=program.university,
                program=program,
                application_fee=program.application_fee,
                status=Application.SUBMITTED if submit else Application.DRAFT,
                submission_date=timezone.now() if submit else None,
            )
            for field in ACADEMIC_FIELDS:
                if field in academic:
                    setattr(app, field, academic[field])
            app.save()

            if profile_data:
                profile, _ = Profile.objects.get_or_create(user=applicant)
                for field, value in profile_data.items():
                    setattr(profile, field, value)
                profile.save()

            for doc_type, upload in uploads.items():
                _store_document(ApplicationDocument(application=app, document_type=doc_type), upload, stored)
    except Exception:
        for storage, name in stored:
            storage.delete(name)
        raise

    logger.info(
        "Application %s created by user %s (status=%s, documents=%d)",
        app.application_number,
        applicant.pk,
        app.status,
        len(uploads),
    )
    if submit:
        enqueue_after_commit(notify_application_status, app.pk)
    return app


def submit_draft(application: Application) -> Application:
    if not application.is_draft:
        raise ValidationError("Only draft applications can be submitted.")
    missing = missing_required_documents(
        application.program,
        application.documents.values_list("document_type_id", flat=True),
    )
    if missing:
        raise ValidationError([f"{dt.name} is required." for dt in missing])
    application.status = Application.SUBMITTED
    application.submission_date = timezone.now()
    application.save(update_fields=["status", "submission_date", "updated_at"])
    logger.info("Application %s submitted", application.application_number)
    enqueue_after_commit(notify_application_status, application.pk)
    return application


def add_document(application: Application, document_type, upload) -> ApplicationDocument:
    """Upload a document later, or replace one; a replacement goes back to pending."""
    if not application.accepts_uploads:
        raise ValidationError("Documents can no longer be changed for this application.")
    if not any(dt.pk == document_type.pk for dt in required_document_types(application.program)):
        raise ValidationError(f"{document_type.name} is not requested for this program.")
    validate_upload(document_type, upload)
    doc = ApplicationDocument.objects.filter(application=application, document_type=document_type).first()
    previous = (doc.file.storage, doc.file.name) if doc and doc.file else None
    if doc is None:
        doc = ApplicationDocument(application=application, document_type=document_type)
    doc.status = ApplicationDocument.PENDING
    doc.staff_notes = ""
    doc.verified_at = None
    doc.verified_by = None
    stored = []
    try:
        with transaction.atomic():
            _store_document(doc, upload, stored)
    except Exception:
        for storage, name in stored:
            storage.delete(name)
        raise
    if previous and previous[1] != doc.file.name:
        storage, name = previous
        transaction.on_commit(lambda: storage.delete(name))
    logger.info(
        "Document %s (%s) uploaded for application %s",
        doc.pk,
        document_type.code,
        application.application_number,
    )
    return doc


def update_status(application: Application, status: str, notes: str, actor) -> Application:
    if status not in Application.REVIEW_STATUSES:
        raise ValidationError(f"Invalid status: {status}")
    if application.is_draft:
        raise ValidationError("Draft applications have not been submitted yet.")
    previous = application.status
    application.status = status
    application.staff_notes = notes or ""
    application.save(update_fields=["status", "staff_notes", "updated_at"])
    logger.info(
        "Application %s status %s -> %s by user %s",
        application.application_number,
        previous,
        status,
        getattr(actor, "pk", None),
    )
    if previous != status:
        enqueue_after_commit(notify_application_status, application.pk)
    return application


def review_document(document: ApplicationDocument, status: str, note: str, actor) -> ApplicationDocument:
    if status not in (ApplicationDocument.VERIFIED, ApplicationDocument.REJECTED):
        raise ValidationError(f"Invalid document status: {status}")
    note = (note or "").strip()
    if status == ApplicationDocument.REJECTED and not note:
        raise ValidationError("Please give a reason for rejecting the document.")
    document.status = status
    document.staff_notes = note
    document.verified_at = timezone.now()
    document.verified_by = actor
    document.save(update_fields=["status", "staff_notes", "verified_at", "verified_by"])
    logger.info("Document %s marked %s by user %s", document.pk, status, getattr(actor, "pk", None))
    enqueue_after_commit(notify_document_review, document.pk)
    return document


def status_counts(queryset) -> dict:
    counts = {value: 0 for value, _ in Application.STATUS_CHOICES}
    for row in queryset.order_by().values("status").annotate(n=Count("id")):
        counts[row["status"]] = row["n"]
    return counts


def applicant_stats(user) -> dict:
    counts = status_counts(Application.objects.filter(applicant=user))
    return {
        "total": sum(counts.values()),
        "under_review": counts[Application.UNDER_REVIEW],
        "approved": counts[Application.APPROVED],
        "docs_pending": counts[Application.DOCS_PENDING],
    }


def staff_stats() -> dict:
    counts = status_counts(Application.objects.all())
    # revenue counts submitted applications only
    revenue = (
        Application.objects.exclude(status=Application.DRAFT)
        .aggregate(total=Sum("application_fee"))["total"]
    )
    return {
        "total": sum(counts.values()),
        "under_review": counts[Application.UNDER_REVIEW],
        "approved": counts[Application.APPROVED],
        "rejected": counts[Application.REJECTED],
        "revenue": revenue or 0,
        "open_tickets": Ticket.objects.exclude(status=Ticket.CLOSED).count(),
    }


def document_summary(application: Application) -> dict:
    rows = application.documents.order_by().values("status").annotate(n=Count("id"))
    counts = {r["status"]: r["n"] for r in rows}
    return {
        "total": sum(counts.values()),
        "verified": counts.get(ApplicationDocument.VERIFIED, 0),
        "pending": counts.get(ApplicationDocument.PENDING, 0),
        "rejected": counts.get(ApplicationDocument.REJECTED, 0),
    }
