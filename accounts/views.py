from datetime import timedelta

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone

from applications.models import Application
from support.models import Ticket
from .decorators import staff_required
from .forms import ApplicantSearchForm, ProfileForm
from .models import EmailPreference, Profile, User


def home(request):
    if not request.user.is_authenticated:
        return redirect("account_login")
    if request.user.is_portal_staff:
        return redirect("applications:staff_dashboard")
    return redirect("applications:dashboard")


@login_required
def profile(request):
    prof, _ = Profile.objects.get_or_create(user=request.user)
    if request.method == "POST":
        form = ProfileForm(request.POST, instance=prof)
        if form.is_valid():
            form.save()
            messages.success(request, "Profile updated.")
            return redirect("accounts:profile")
    else:
        form = ProfileForm(instance=prof)
    return render(request, "accounts/profile.html", {"form": form, "active_nav": "profile"})


@login_required
def preferences(request):
    if request.method == "POST":
        ep, _ = EmailPreference.objects.get_or_create(user=request.user)
        ep.notify_by_email = bool(request.POST.get("notify_by_email"))
        ep.consent_source = "preferences"
        ep.consent_timestamp = timezone.now()
        ep.save()
        messages.success(request, "Notification preferences saved.")
        return redirect("accounts:preferences")
    checked = bool(getattr(request.user, "email_pref", None) and request.user.email_pref.notify_by_email)
    return render(
        request,
        "accounts/preferences.html",
        {"notify_checked": checked, "active_nav": "preferences"},
    )


def search_applicants(term: str):
    qs = (
        User.objects.applicants()
        .select_related("profile")
        .annotate(application_count=Count("applications", distinct=True))
        .order_by("-date_joined")
    )
    term = (term or "").strip()
    if term:
        qs = qs.filter(
            Q(profile__full_name__icontains=term)
            | Q(email__icontains=term)
            | Q(profile__phone__icontains=term)
        )
    return qs


def applicant_counts():
    qs = User.objects.applicants()
    since = timezone.now() - timedelta(days=30)
    return {
        "total": qs.count(),
        "recent": qs.filter(date_joined__gt=since).count(),
        "with_email": qs.exclude(email="").count(),
        "with_phone": qs.exclude(profile__phone="").count(),
    }


@staff_required
def applicant_list(request):
    form = ApplicantSearchForm(request.GET or None)
    term = form.cleaned_data.get("q", "") if form.is_valid() else ""
    ctx = {
        "form": form,
        "applicants": search_applicants(term),
        "counts": applicant_counts(),
        "active_nav": "applicants",
    }
    return render(request, "accounts/applicant_list.html", ctx)


@staff_required
def applicant_detail(request, pk: int):
    applicant = get_object_or_404(User.objects.applicants().select_related("profile"), pk=pk)
    applications = (
        Application.objects.filter(applicant=applicant)
        .select_related("university", "program")
        .order_by("-created_at")
    )
    tickets = Ticket.objects.filter(applicant=applicant).order_by("-created_at")
    ctx = {
        "applicant": applicant,
        "applications": applications,
        "tickets": tickets,
        "active_nav": "applicants",
    }
    return render(request, "accounts/applicant_detail.html", ctx)
