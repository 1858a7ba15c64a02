import logging

from django.core.signing import BadSignature, SignatureExpired, TimestampSigner
from django.http import HttpResponseBadRequest
from django.shortcuts import render
from django.utils import timezone
from django.views.decorators.http import require_GET

from accounts.models import EmailPreference, User

logger = logging.getLogger(__name__)

# unsubscribe links stay valid for a year
LINK_MAX_AGE = 60 * 60 * 24 * 365


@require_GET
def unsubscribe(request):
    token = request.GET.get("t")
    if not token:
        return HttpResponseBadRequest("missing token")
    try:
        user_id = int(TimestampSigner().unsign(token, max_age=LINK_MAX_AGE))
    except (BadSignature, SignatureExpired, ValueError):
        return HttpResponseBadRequest("invalid token")
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        return HttpResponseBadRequest("invalid user")
    EmailPreference.objects.update_or_create(
        user=user,
        defaults={
            "notify_by_email": False,
            "consent_source": "unsubscribe",
            "consent_timestamp": timezone.now(),
        },
    )
    logger.info("User %s unsubscribed from notification emails", user.pk)
    return render(request, "mailer/unsubscribed.html", {"email": user.email})
