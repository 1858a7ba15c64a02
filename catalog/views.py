import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.db.models import Count, Prefetch
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from accounts.decorators import staff_required
from .forms import DocumentTypeForm, ProgramForm, RequestDocumentsForm, UniversityForm
from .models import DocumentType, Program, University
from .services import catalog_summary, programs_requiring, request_documents

logger = logging.getLogger(__name__)


def _universities_with_programs():
    return University.objects.prefetch_related(
        Prefetch("programs", queryset=Program.objects.order_by("name"))
    ).annotate(program_count=Count("programs"))


@login_required
def browse(request):
    ctx = {"universities": _universities_with_programs(), "active_nav": "catalog"}
    return render(request, "catalog/browse.html", ctx)


@staff_required
def university_list(request):
    ctx = {
        "universities": _universities_with_programs(),
        "summary": catalog_summary(),
        "active_nav": "universities",
    }
    return render(request, "catalog/university_list.html", ctx)


def _edit(request, form_class, instance, template, success_url, ctx=None, **save_kwargs):
    form = form_class(request.POST or None, instance=instance)
    if request.method == "POST" and form.is_valid():
        try:
            obj = form.save(commit=False)
            for k, v in save_kwargs.items():
                setattr(obj, k, v)
            obj.save()
        except DatabaseError:
            logger.exception("Saving %s failed", form_class.__name__)
            messages.error(request, "Could not save changes. Please try again.")
        else:
            messages.success(request, "Saved.")
            return redirect(success_url)
    return render(request, template, {"form": form, "object": instance, **(ctx or {})})


@staff_required
def university_edit(request, pk: int | None = None):
    uni = get_object_or_404(University, pk=pk) if pk else None
    return _edit(
        request,
        UniversityForm,
        uni,
        "catalog/university_form.html",
        "catalog:university_list",
        {"active_nav": "universities"},
    )


@staff_required
@require_POST
def university_delete(request, pk: int):
    uni = get_object_or_404(University, pk=pk)
    try:
        uni.delete()
    except DatabaseError:
        # applications reference the catalog with PROTECT
        logger.exception("Deleting university %s failed", pk)
        messages.error(request, "This university has applications and cannot be deleted.")
    else:
        messages.success(request, f"Deleted {uni.name} and its programs.")
    return redirect("catalog:university_list")


@staff_required
def program_edit(request, university_pk: int, pk: int | None = None):
    uni = get_object_or_404(University, pk=university_pk)
    prog = get_object_or_404(Program, pk=pk, university=uni) if pk else None
    return _edit(
        request,
        ProgramForm,
        prog,
        "catalog/program_form.html",
        "catalog:university_list",
        {"university": uni, "active_nav": "universities"},
        university=uni,
    )


@staff_required
@require_POST
def program_delete(request, university_pk: int, pk: int):
    prog = get_object_or_404(Program, pk=pk, university_id=university_pk)
    try:
        prog.delete()
    except DatabaseError:
        logger.exception("Deleting program %s failed", pk)
        messages.error(request, "This program has applications and cannot be deleted.")
    else:
        messages.success(request, f"Deleted {prog.name}.")
    return redirect("catalog:university_list")


@staff_required
def document_type_list(request):
    doc_types = list(DocumentType.objects.all())
    for dt in doc_types:
        dt.required_by = list(programs_requiring(dt))
    ctx = {
        "document_types": doc_types,
        "request_form": RequestDocumentsForm(),
        "active_nav": "documents",
    }
    return render(request, "catalog/document_type_list.html", ctx)


@staff_required
def document_type_edit(request, pk: int | None = None):
    dt = get_object_or_404(DocumentType, pk=pk) if pk else None
    return _edit(
        request,
        DocumentTypeForm,
        dt,
        "catalog/document_type_form.html",
        "catalog:document_type_list",
        {"active_nav": "documents"},
    )


@staff_required
@require_POST
def document_type_delete(request, pk: int):
    dt = get_object_or_404(DocumentType, pk=pk)
    try:
        dt.delete()
    except DatabaseError:
        logger.exception("Deleting document type %s failed", pk)
        messages.error(request, "Uploaded documents use this type; it cannot be deleted.")
    else:
        messages.success(request, f"Deleted {dt.name}.")
    return redirect("catalog:document_type_list")


@staff_required
@require_POST
def document_request(request):
    form = RequestDocumentsForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Invalid selection.")
        return redirect("catalog:document_type_list")
    try:
        created = request_documents(form.cleaned_data["program"], form.cleaned_data["document_types"])
    except ValidationError as e:
        messages.error(request, " ".join(e.messages))
    else:
        messages.success(request, f"Document requirements added successfully ({created} new).")
    return redirect("catalog:document_type_list")
