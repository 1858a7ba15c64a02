from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Application(models.Model):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    DOCS_PENDING = "docs_pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    STATUS_CHOICES = [
        (DRAFT, "Draft"),
        (SUBMITTED, "Submitted"),
        (UNDER_REVIEW, "Under review"),
        (DOCS_PENDING, "Documents pending"),
        (APPROVED, "Approved"),
        (REJECTED, "Rejected"),
    ]
    # statuses staff may set from the review screen
    REVIEW_STATUSES = [SUBMITTED, UNDER_REVIEW, DOCS_PENDING, APPROVED, REJECTED]

    application_number = models.CharField(max_length=20, unique=True, blank=True, null=True)
    applicant = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="applications"
    )
    university = models.ForeignKey("catalog.University", on_delete=models.PROTECT, related_name="applications")
    program = models.ForeignKey("catalog.Program", on_delete=models.PROTECT, related_name="applications")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=DRAFT, db_index=True)
    application_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    submission_date = models.DateTimeField(blank=True, null=True)

    tenth_school = models.CharField(max_length=200, blank=True)
    tenth_board = models.CharField(max_length=100, blank=True)
    tenth_year = models.PositiveSmallIntegerField(blank=True, null=True)
    tenth_percentage = models.DecimalField(max_digits=5, decimal_places=2, blank=True, null=True)
    twelfth_school = models.CharField(max_length=200, blank=True)
    twelfth_board = models.CharField(max_length=100, blank=True)
    twelfth_year = models.PositiveSmallIntegerField(blank=True, null=True)
    twelfth_percentage = models.DecimalField(max_digits=5, decimal_places=2, blank=True, null=True)
    graduation_college = models.CharField(max_length=200, blank=True)
    graduation_university = models.CharField(max_length=200, blank=True)
    graduation_degree = models.CharField(max_length=100, blank=True)
    graduation_year = models.PositiveSmallIntegerField(blank=True, null=True)
    graduation_percentage = models.DecimalField(max_digits=5, decimal_places=2, blank=True, null=True)

    staff_notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(
                    status__in=["draft", "submitted", "under_review", "docs_pending", "approved", "rejected"]
                ),
                name="application_status_valid",
            ),
        ]

    def __str__(self):
        return self.application_number or f"Application {self.pk}"

    def clean(self):
        if self.program_id and self.university_id and self.program.university_id != self.university_id:
            raise ValidationError({"program": "Program does not belong to the selected university."})

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        if not self.application_number:
            self.application_number = f"APP{self.created_at:%Y}{self.pk:06d}"
            type(self).objects.filter(pk=self.pk).update(application_number=self.application_number)

    @property
    def is_draft(self) -> bool:
        return self.status == self.DRAFT

    @property
    def accepts_uploads(self) -> bool:
        return self.status in (self.DRAFT, self.SUBMITTED, self.DOCS_PENDING)


def document_upload_to(instance, filename):
    app = instance.application
    return f"documents/{app.applicant_id}/{app.pk}/{filename}"


class ApplicationDocument(models.Model):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    STATUS_CHOICES = [
        (PENDING, "Pending verification"),
        (VERIFIED, "Verified"),
        (REJECTED, "Rejected"),
    ]

    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name="documents")
    document_type = models.ForeignKey("catalog.DocumentType", on_delete=models.PROTECT, related_name="uploads")
    file = models.FileField(upload_to=document_upload_to, max_length=255)
    file_name = models.CharField(max_length=255)
    file_size = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=PENDING)
    extracted_data = models.JSONField(default=dict, blank=True)
    staff_notes = models.TextField(blank=True)
    uploaded_at = models.DateTimeField(auto_now_add=True)
    verified_at = models.DateTimeField(blank=True, null=True)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="verified_documents",
    )

    class Meta:
        ordering = ["document_type__name"]
        unique_together = [("application", "document_type")]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(status__in=["pending", "verified", "rejected"]),
                name="application_document_status_valid",
            ),
        ]

    def __str__(self):
        return f"{self.document_type} for {self.application}"
