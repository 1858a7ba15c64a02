import logging
from pathlib import PurePath

from django.core.exceptions import ValidationError

from .models import DocumentType, Program, ProgramDocument, University

logger = logging.getLogger(__name__)


def parse_list(raw: str, lower: bool = False) -> list[str]:
    """Comma-separated text to a clean list; empty entries are dropped."""
    items = []
    for part in (raw or "").split(","):
        part = part.strip()
        if lower:
            part = part.lower().lstrip(".")
        if part and part not in items:
            items.append(part)
    return items


def file_extension(name: str) -> str:
    return PurePath(name or "").suffix.lower().lstrip(".")


def validate_upload(document_type: DocumentType, upload) -> None:
    formats = [f.lower().lstrip(".") for f in (document_type.allowed_formats or [])]
    ext = file_extension(getattr(upload, "name", ""))
    if formats and ext not in formats:
        raise ValidationError(
            "%(doc)s must be one of: %(formats)s (got %(ext)s).",
            code="invalid_format",
            params={
                "doc": document_type.name,
                "formats": ", ".join(formats),
                "ext": ext or "no extension",
            },
        )
    size = getattr(upload, "size", 0) or 0
    if size > document_type.max_size_bytes:
        raise ValidationError(
            "%(doc)s exceeds the %(limit)s MB limit.",
            code="too_large",
            params={"doc": document_type.name, "limit": document_type.max_size_mb},
        )


def required_document_types(program: Program) -> list[DocumentType]:
    """
    Document types configured for a program, in name order.
    Each carries `required_for_program` from the program-level flag.
    """
    links = (
        ProgramDocument.objects.select_related("document_type")
        .filter(program=program)
        .order_by("document_type__name")
    )
    result = []
    for link in links:
        dt = link.document_type
        dt.required_for_program = link.is_required
        result.append(dt)
    return result


def request_documents(program: Program, document_types) -> int:
    """Attach document types to a program; returns how many links were new."""
    document_types = list(document_types)
    if program is None or not document_types:
        raise ValidationError("Please select a program and at least one document type.")
    created = 0
    for dt in document_types:
        _, was_created = ProgramDocument.objects.get_or_create(
            program=program, document_type=dt, defaults={"is_required": True}
        )
        created += int(was_created)
    logger.info(
        "Program %s: %d document requirement(s) added, %d already present",
        program.pk,
        created,
        len(document_types) - created,
    )
    return created


def programs_requiring(document_type: DocumentType):
    return (
        Program.objects.filter(requirements__document_type=document_type)
        .select_related("university")
        .order_by("university__name", "name")
    )


def catalog_summary() -> dict:
    return {
        "universities": University.objects.count(),
        "programs": Program.objects.count(),
        "top_ranked": University.objects.filter(rank__isnull=False, rank__lte=100).count(),
    }
