import applications.models
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Application",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("application_number", models.CharField(blank=True, max_length=20, null=True, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("submitted", "Submitted"),
                            ("under_review", "Under review"),
                            ("docs_pending", "Documents pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        db_index=True,
                        default="draft",
                        max_length=16,
                    ),
                ),
                ("application_fee", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("submission_date", models.DateTimeField(blank=True, null=True)),
                ("tenth_school", models.CharField(blank=True, max_length=200)),
                ("tenth_board", models.CharField(blank=True, max_length=100)),
                ("tenth_year", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("tenth_percentage", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("twelfth_school", models.CharField(blank=True, max_length=200)),
                ("twelfth_board", models.CharField(blank=True, max_length=100)),
                ("twelfth_year", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("twelfth_percentage", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("graduation_college", models.CharField(blank=True, max_length=200)),
                ("graduation_university", models.CharField(blank=True, max_length=200)),
                ("graduation_degree", models.CharField(blank=True, max_length=100)),
                ("graduation_year", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("graduation_percentage", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("staff_notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "applicant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="applications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "program",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="applications",
                        to="catalog.program",
                    ),
                ),
                (
                    "university",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="applications",
                        to="catalog.university",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("status__in", ["draft", "submitted", "under_review", "docs_pending", "approved", "rejected"])
                        ),
                        name="application_status_valid",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="ApplicationDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("file", models.FileField(max_length=255, upload_to=applications.models.document_upload_to)),
                ("file_name", models.CharField(max_length=255)),
                ("file_size", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending verification"),
                            ("verified", "Verified"),
                            ("rejected", "Rejected"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("extracted_data", models.JSONField(blank=True, default=dict)),
                ("staff_notes", models.TextField(blank=True)),
                ("uploaded_at", models.DateTimeField(auto_now_add=True)),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
                (
                    "application",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="documents",
                        to="applications.application",
                    ),
                ),
                (
                    "document_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="uploads",
                        to="catalog.documenttype",
                    ),
                ),
                (
                    "verified_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="verified_documents",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["document_type__name"],
                "unique_together": {("application", "document_type")},
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("status__in", ["pending", "verified", "rejected"])),
                        name="application_document_status_valid",
                    )
                ],
            },
        ),
    ]
