from allauth.account.forms import SignupForm as AllauthSignupForm
from django import forms
from django.utils import timezone
from .models import EmailPreference, Profile


class SignupForm(AllauthSignupForm):
    full_name = forms.CharField(max_length=200, label="Full name")
    notify_by_email = forms.BooleanField(
        required=False, initial=True, label="Email me when my applications or tickets change"
    )

    def save(self, request):
        user = super().save(request)
        profile, _ = Profile.objects.get_or_create(user=user)
        profile.full_name = self.cleaned_data["full_name"].strip()
        profile.save(update_fields=["full_name", "updated_at"])
        ep, _ = EmailPreference.objects.get_or_create(user=user)
        ep.notify_by_email = bool(self.cleaned_data.get("notify_by_email"))
        ep.consent_source = "signup"
        ep.consent_timestamp = timezone.now()
        ep.save()
        return user


class ProfileForm(forms.ModelForm):
    """Personal details; also embedded in the application wizard."""

    class Meta:
        model = Profile
        fields = [
            "full_name",
            "phone",
            "date_of_birth",
            "gender",
            "nationality",
            "address",
            "city",
            "state",
            "pincode",
            "father_name",
            "mother_name",
            "emergency_contact",
        ]
        widgets = {
            "date_of_birth": forms.DateInput(attrs={"type": "date"}),
        }


class ApplicantDetailsForm(ProfileForm):
    """Wizard variant: the fields the admissions office needs are mandatory."""

    REQUIRED = ("full_name", "phone", "date_of_birth", "gender", "address", "city", "state", "pincode")

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in self.REQUIRED:
            self.fields[name].required = True


class ApplicantSearchForm(forms.Form):
    q = forms.CharField(required=False, max_length=100)
