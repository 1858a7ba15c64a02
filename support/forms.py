from django import forms

from accounts.models import User
from applications.models import Application
from .models import Ticket


class TicketForm(forms.Form):
    subject = forms.CharField(max_length=200)
    priority = forms.ChoiceField(choices=Ticket.PRIORITY_CHOICES, initial=Ticket.MEDIUM)
    application = forms.ModelChoiceField(queryset=Application.objects.none(), required=False, empty_label="None")
    message = forms.CharField(widget=forms.Textarea)

    def __init__(self, *args, applicant=None, **kwargs):
        super().__init__(*args, **kwargs)
        if applicant is not None:
            self.fields["application"].queryset = (
                Application.objects.filter(applicant=applicant).select_related("university")
            )


class MessageForm(forms.Form):
    body = forms.CharField(widget=forms.Textarea(attrs={"rows": 3}))
    is_internal = forms.BooleanField(required=False, label="Internal note (staff only)")


class TicketFilterForm(forms.Form):
    status = forms.ChoiceField(choices=[("all", "All Status")] + Ticket.STATUS_CHOICES, required=False)
    priority = forms.ChoiceField(choices=[("all", "All Priority")] + Ticket.PRIORITY_CHOICES, required=False)


class TicketStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Ticket.STATUS_CHOICES)


class AssignForm(forms.Form):
    assigned_to = forms.ModelChoiceField(
        queryset=User.objects.portal_staff(), required=False, empty_label="Unassigned"
    )
