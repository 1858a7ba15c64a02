import json
import logging

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from catalog.models import DocumentType, Program, University
from catalog.services import request_documents

logger = logging.getLogger(__name__)

UNIVERSITY_FIELDS = ("name", "city", "state", "rank", "description", "website")
PROGRAM_FIELDS = (
    "department",
    "duration_years",
    "total_fees",
    "application_fee",
    "description",
    "eligibility",
)
DOCUMENT_FIELDS = ("name", "description", "is_required", "max_size_mb", "allowed_formats", "extraction_fields")


class Command(BaseCommand):
    help = (
        "Loads universities, programs and document types from a JSON file. "
        "Rows are matched by code (programs by university, name and degree) and updated in place."
    )

    def add_arguments(self, parser):
        parser.add_argument("path", help="JSON file with 'universities' and 'document_types' lists")

    def handle(self, *args, **options):
        try:
            with open(options["path"], encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            raise CommandError(f"Could not read {options['path']}: {e}")

        counts = {"document_types": 0, "universities": 0, "programs": 0}
        with transaction.atomic():
            doc_types = {dt.code: dt for dt in DocumentType.objects.all()}
            for row in data.get("document_types", []):
                if not row.get("code"):
                    continue
                dt, _ = DocumentType.objects.update_or_create(
                    code=row["code"],
                    defaults={k: row[k] for k in DOCUMENT_FIELDS if k in row},
                )
                doc_types[dt.code] = dt
                counts["document_types"] += 1

            for row in data.get("universities", []):
                if not row.get("code"):
                    continue
                uni, _ = University.objects.update_or_create(
                    code=row["code"],
                    defaults={k: row[k] for k in UNIVERSITY_FIELDS if k in row},
                )
                counts["universities"] += 1
                for prow in row.get("programs", []):
                    if not prow.get("name"):
                        raise CommandError(f"{uni.code}: program row without a name")
                    program, _ = Program.objects.update_or_create(
                        university=uni,
                        name=prow["name"],
                        degree=prow.get("degree", ""),
                        defaults={k: prow[k] for k in PROGRAM_FIELDS if k in prow},
                    )
                    counts["programs"] += 1
                    codes = prow.get("documents") or []
                    unknown = [c for c in codes if c not in doc_types]
                    if unknown:
                        raise CommandError(f"{program}: unknown document type(s) {', '.join(unknown)}")
                    if codes:
                        request_documents(program, [doc_types[c] for c in codes])

        logger.info("Catalog import: %s", counts)
        self.stdout.write(
            self.style.SUCCESS(
                f"Imported {counts['universities']} universities, {counts['programs']} programs, "
                f"{counts['document_types']} document types."
            )
        )
