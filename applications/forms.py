from django import forms

from catalog.models import Program
from .models import Application, ApplicationDocument
from .services import ACADEMIC_FIELDS


class ProgramChoiceForm(forms.Form):
    program = forms.ModelChoiceField(queryset=Program.objects.select_related("university"))


class AcademicForm(forms.ModelForm):
    class Meta:
        model = Application
        fields = ACADEMIC_FIELDS

    def clean(self):
        data = super().clean()
        for field in ("tenth_percentage", "twelfth_percentage", "graduation_percentage"):
            value = data.get(field)
            if value is not None and not 0 <= value <= 100:
                self.add_error(field, "Enter a percentage between 0 and 100.")
        return data


class DocumentUploadForm(forms.Form):
    """One file field per document type configured for the program."""

    def __init__(self, *args, document_types=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.document_types = list(document_types)
        for dt in self.document_types:
            label = dt.name
            if getattr(dt, "required_for_program", False):
                label += " *"
            self.fields[self.field_name(dt)] = forms.FileField(
                label=label,
                required=False,
                help_text=f"{', '.join(dt.allowed_formats or [])} up to {dt.max_size_mb} MB",
            )

    @staticmethod
    def field_name(document_type) -> str:
        return f"doc_{document_type.pk}"

    def uploads(self) -> dict:
        result = {}
        for dt in self.document_types:
            upload = self.cleaned_data.get(self.field_name(dt))
            if upload:
                result[dt] = upload
        return result


class SingleUploadForm(forms.Form):
    document_type = forms.IntegerField(widget=forms.HiddenInput)
    file = forms.FileField()


class StatusUpdateForm(forms.Form):
    status = forms.ChoiceField(
        choices=[c for c in Application.STATUS_CHOICES if c[0] in Application.REVIEW_STATUSES]
    )
    notes = forms.CharField(widget=forms.Textarea(attrs={"rows": 3}), required=False)


class DocumentReviewForm(forms.Form):
    status = forms.ChoiceField(
        choices=[
            (ApplicationDocument.VERIFIED, "Verify"),
            (ApplicationDocument.REJECTED, "Reject"),
        ]
    )
    note = forms.CharField(required=False, max_length=500)


class ApplicationFilterForm(forms.Form):
    status = forms.ChoiceField(choices=[("all", "All Status")] + Application.STATUS_CHOICES, required=False)
    q = forms.CharField(required=False, max_length=100)
