from django import forms
from .models import DocumentType, Program, University
from .services import parse_list


class UniversityForm(forms.ModelForm):
    class Meta:
        model = University
        fields = ["name", "code", "city", "state", "rank", "description", "website"]


class ProgramForm(forms.ModelForm):
    class Meta:
        model = Program
        fields = [
            "name",
            "degree",
            "department",
            "duration_years",
            "total_fees",
            "application_fee",
            "description",
            "eligibility",
        ]


class DocumentTypeForm(forms.ModelForm):
    # Lists are edited as comma-separated text.
    allowed_formats = forms.CharField(initial="pdf,jpg,png", help_text="Comma-separated extensions")
    extraction_fields = forms.CharField(required=False, help_text="Comma-separated field names")

    class Meta:
        model = DocumentType
        fields = ["name", "code", "description", "allowed_formats", "max_size_mb", "extraction_fields", "is_required"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk:
            self.initial["allowed_formats"] = ",".join(self.instance.allowed_formats or [])
            self.initial["extraction_fields"] = ",".join(self.instance.extraction_fields or [])

    def clean_allowed_formats(self):
        formats = parse_list(self.cleaned_data.get("allowed_formats"), lower=True)
        if not formats:
            raise forms.ValidationError("At least one format is required.")
        return formats

    def clean_extraction_fields(self):
        return parse_list(self.cleaned_data.get("extraction_fields"))

    def clean_max_size_mb(self):
        size = self.cleaned_data.get("max_size_mb")
        if not size:
            raise forms.ValidationError("Size limit must be at least 1 MB.")
        return size


class RequestDocumentsForm(forms.Form):
    program = forms.ModelChoiceField(
        queryset=Program.objects.select_related("university").order_by("university__name", "name"),
        required=False,
        empty_label="Choose a program...",
    )
    document_types = forms.ModelMultipleChoiceField(
        queryset=DocumentType.objects.all(),
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )
