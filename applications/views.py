import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.db.models import Prefetch, Q
from django.http import FileResponse, Http404, HttpResponseForbidden
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from accounts.decorators import applicant_required, staff_required
from accounts.forms import ApplicantDetailsForm, ProfileForm
from accounts.models import Profile
from accounts.permissions import can_view_application
from catalog.models import Program, University
from catalog.services import required_document_types
from support.models import Ticket
from . import services
from .forms import (
    AcademicForm,
    ApplicationFilterForm,
    DocumentReviewForm,
    DocumentUploadForm,
    SingleUploadForm,
    StatusUpdateForm,
)
from .models import Application, ApplicationDocument

logger = logging.getLogger(__name__)


def _universities():
    return University.objects.prefetch_related(
        Prefetch("programs", queryset=Program.objects.order_by("name"))
    )


@applicant_required
def dashboard(request):
    applications = (
        Application.objects.filter(applicant=request.user)
        .select_related("university", "program")
    )
    ctx = {
        "stats": services.applicant_stats(request.user),
        "applications": applications,
        "universities": _universities(),
        "active_nav": "dashboard",
    }
    return render(request, "applications/dashboard.html", ctx)


@staff_required
def staff_dashboard(request):
    ctx = {
        "stats": services.staff_stats(),
        "recent_applications": Application.objects.exclude(status=Application.DRAFT)
        .select_related("applicant__profile", "university", "program")[:8],
        "recent_tickets": Ticket.objects.select_related("applicant__profile")[:5],
        "active_nav": "dashboard",
    }
    return render(request, "applications/staff_dashboard.html", ctx)


@applicant_required
def create(request):
    program_id = request.POST.get("program") or request.GET.get("program")
    if not program_id or not str(program_id).isdigit():
        return render(
            request,
            "applications/choose_program.html",
            {"universities": _universities(), "active_nav": "apply"},
        )
    program = get_object_or_404(Program.objects.select_related("university"), pk=program_id)
    document_types = required_document_types(program)
    profile, _ = Profile.objects.get_or_create(user=request.user)

    if request.method == "POST":
        submit = request.POST.get("action") != "draft"
        details_class = ApplicantDetailsForm if submit else ProfileForm
        details = details_class(request.POST, instance=profile, prefix="details")
        academic = AcademicForm(request.POST, prefix="academic")
        docs = DocumentUploadForm(
            request.POST, request.FILES, document_types=document_types, prefix="docs"
        )
        if details.is_valid() and academic.is_valid() and docs.is_valid():
            try:
                app = services.create_application(
                    request.user,
                    program,
                    academic=academic.cleaned_data,
                    profile_data={f: details.cleaned_data[f] for f in details.Meta.fields},
                    uploads=docs.uploads(),
                    submit=submit,
                )
            except ValidationError as e:
                for msg in e.messages:
                    messages.error(request, msg)
            except DatabaseError:
                logger.exception("Creating application failed for user %s", request.user.pk)
                messages.error(request, "Failed to save the application. Please try again.")
            else:
                if submit:
                    messages.success(request, f"Application {app.application_number} submitted.")
                else:
                    messages.success(request, f"Draft {app.application_number} saved.")
                return redirect("applications:detail", pk=app.pk)
        else:
            messages.error(request, "Please correct the errors below.")
    else:
        details = ApplicantDetailsForm(instance=profile, prefix="details")
        academic = AcademicForm(prefix="academic")
        docs = DocumentUploadForm(document_types=document_types, prefix="docs")

    ctx = {
        "program": program,
        "details_form": details,
        "academic_form": academic,
        "documents_form": docs,
        "active_nav": "apply",
    }
    return render(request, "applications/create.html", ctx)


def _checklist(application):
    uploaded = {d.document_type_id: d for d in application.documents.select_related("document_type")}
    items = required_document_types(application.program)
    for dt in items:
        dt.upload = uploaded.get(dt.pk)
    return items


@login_required
def detail(request, pk: int):
    application = get_object_or_404(
        Application.objects.select_related("applicant__profile", "university", "program"), pk=pk
    )
    if not can_view_application(request.user, application):
        return HttpResponseForbidden("Not authorized")
    is_owner = application.applicant_id == request.user.pk
    ctx = {
        "application": application,
        "checklist": _checklist(application),
        "documents": application.documents.select_related("document_type", "verified_by"),
        "document_summary": services.document_summary(application),
        "tickets": application.tickets.all(),
        "can_upload": is_owner and application.accepts_uploads,
        "can_submit": is_owner and application.is_draft,
        "active_nav": "applications" if request.user.is_portal_staff else "dashboard",
    }
    return render(request, "applications/detail.html", ctx)


def _own_application(request, pk):
    return get_object_or_404(
        Application.objects.select_related("program"), pk=pk, applicant=request.user
    )


@applicant_required
@require_POST
def upload_document(request, pk: int):
    application = _own_application(request, pk)
    form = SingleUploadForm(request.POST, request.FILES)
    if not form.is_valid():
        messages.error(request, "Please choose a file to upload.")
        return redirect("applications:detail", pk=application.pk)
    types = {dt.pk: dt for dt in required_document_types(application.program)}
    document_type = types.get(form.cleaned_data["document_type"])
    if document_type is None:
        messages.error(request, "That document is not requested for this program.")
        return redirect("applications:detail", pk=application.pk)
    try:
        services.add_document(application, document_type, form.cleaned_data["file"])
    except ValidationError as e:
        messages.error(request, " ".join(e.messages))
    except DatabaseError:
        logger.exception("Upload failed for application %s", application.pk)
        messages.error(request, "Upload failed. Please try again.")
    else:
        messages.success(request, f"{document_type.name} uploaded.")
    return redirect("applications:detail", pk=application.pk)


@login_required
def document_file(request, pk: int, document_pk: int):
    document = get_object_or_404(
        ApplicationDocument.objects.select_related("application"), pk=document_pk, application_id=pk
    )
    if not can_view_application(request.user, document.application):
        return HttpResponseForbidden("Not authorized")
    try:
        fh = document.file.open("rb")
    except FileNotFoundError:
        raise Http404("File not found")
    return FileResponse(fh, filename=document.file_name)


@applicant_required
@require_POST
def submit(request, pk: int):
    application = _own_application(request, pk)
    try:
        services.submit_draft(application)
    except ValidationError as e:
        for msg in e.messages:
            messages.error(request, msg)
    else:
        messages.success(request, f"Application {application.application_number} submitted.")
    return redirect("applications:detail", pk=application.pk)


@staff_required
def staff_list(request):
    applications = Application.objects.select_related("applicant__profile", "university", "program")
    form = ApplicationFilterForm(request.GET or None)
    if form.is_valid():
        status = form.cleaned_data.get("status")
        term = (form.cleaned_data.get("q") or "").strip()
        if status and status != "all":
            applications = applications.filter(status=status)
        if term:
            applications = applications.filter(
                Q(application_number__icontains=term)
                | Q(applicant__email__icontains=term)
                | Q(applicant__profile__full_name__icontains=term)
            )
    ctx = {
        "form": form,
        "applications": applications,
        "counts": services.status_counts(Application.objects.all()),
        "active_nav": "applications",
    }
    return render(request, "applications/staff_list.html", ctx)


@staff_required
def review(request, pk: int):
    application = get_object_or_404(
        Application.objects.select_related("applicant__profile", "university", "program"), pk=pk
    )
    if request.method == "POST":
        form = StatusUpdateForm(request.POST)
        if form.is_valid():
            try:
                services.update_status(
                    application, form.cleaned_data["status"], form.cleaned_data["notes"], request.user
                )
            except ValidationError as e:
                messages.error(request, " ".join(e.messages))
            except DatabaseError:
                logger.exception("Status update failed for application %s", application.pk)
                messages.error(request, "Failed to update status.")
            else:
                messages.success(request, "Application status updated successfully.")
                return redirect("applications:review", pk=application.pk)
    else:
        form = StatusUpdateForm(initial={"status": application.status, "notes": application.staff_notes})
    ctx = {
        "application": application,
        "form": form,
        "checklist": _checklist(application),
        "document_summary": services.document_summary(application),
        "review_form": DocumentReviewForm(),
        "active_nav": "applications",
    }
    return render(request, "applications/review.html", ctx)


@staff_required
@require_POST
def review_document(request, pk: int, document_pk: int):
    document = get_object_or_404(
        ApplicationDocument.objects.select_related("document_type"), pk=document_pk, application_id=pk
    )
    form = DocumentReviewForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Invalid review action.")
        return redirect("applications:review", pk=pk)
    try:
        services.review_document(document, form.cleaned_data["status"], form.cleaned_data["note"], request.user)
    except ValidationError as e:
        messages.error(request, " ".join(e.messages))
    else:
        messages.success(request, f"{document.document_type.name} marked {document.get_status_display().lower()}.")
    return redirect("applications:review", pk=pk)
