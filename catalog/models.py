from django.db import models
from django.db.models import F


def default_formats():
    return ["pdf", "jpg", "png"]


class University(models.Model):
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=32, unique=True)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    rank = models.PositiveIntegerField(blank=True, null=True)
    description = models.TextField(blank=True)
    website = models.URLField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = [F("rank").asc(nulls_last=True), "name"]
        verbose_name_plural = "universities"

    def __str__(self):
        return self.name


class Program(models.Model):
    university = models.ForeignKey(University, on_delete=models.CASCADE, related_name="programs")
    name = models.CharField(max_length=200)
    degree = models.CharField(max_length=64)
    department = models.CharField(max_length=128, blank=True)
    duration_years = models.PositiveSmallIntegerField(default=4)
    total_fees = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    application_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    description = models.TextField(blank=True)
    eligibility = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    document_types = models.ManyToManyField(
        "DocumentType", through="ProgramDocument", related_name="programs", blank=True
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.degree})"


class DocumentType(models.Model):
    name = models.CharField(max_length=128)
    code = models.SlugField(max_length=64, unique=True)
    description = models.TextField(blank=True)
    is_required = models.BooleanField(default=True)
    max_size_mb = models.PositiveIntegerField(default=5)
    allowed_formats = models.JSONField(default=default_formats)
    # Field names an extraction step may fill in; stored as metadata only.
    extraction_fields = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024


class ProgramDocument(models.Model):
    program = models.ForeignKey(Program, on_delete=models.CASCADE, related_name="requirements")
    document_type = models.ForeignKey(DocumentType, on_delete=models.CASCADE, related_name="requirements")
    is_required = models.BooleanField(default=True)

    class Meta:
        unique_together = [("program", "document_type")]
