import logging

from anymail.message import AnymailMessage
from django.conf import settings
from django.core.signing import TimestampSigner
from django.urls import reverse

from .models import MessageLog
from .rendering import render_email

logger = logging.getLogger(__name__)


def unsubscribe_link(user):
    signer = TimestampSigner()
    token = signer.sign(str(user.pk))
    return f"{settings.SITE_URL}{reverse('mailer:unsubscribe')}?t={token}"


def wants_email(user) -> bool:
    if not user.is_active or not user.email:
        return False
    pref = getattr(user, "email_pref", None)
    return pref is None or pref.notify_by_email


def send_notification(user, kind, context, ref) -> bool:
    """
    Send one notification email. `ref` identifies the change being reported;
    a (user, ref) pair is only ever sent once.
    """
    if not wants_email(user):
        logger.info("Skipping %s for user %s: notifications off", kind, user.pk)
        return False
    if MessageLog.objects.filter(user=user, ref=ref).exists():
        return False
    context = {**context, "user": user, "unsubscribe_url": unsubscribe_link(user)}
    subject, text, html = render_email(kind, context)
    msg = AnymailMessage(subject=subject, body=text, to=[user.email])
    msg.attach_alternative(html, "text/html")
    msg.metadata = {"user_id": user.pk, "kind": kind}
    msg.tags = [kind]
    msg.send()
    status = getattr(msg, "anymail_status", None)
    provider_id = getattr(status, "message_id", None) if status else None
    MessageLog.objects.get_or_create(
        user=user, ref=ref, defaults={"kind": kind, "subject": subject, "provider_id": provider_id}
    )
    logger.info("Sent %s to user %s (%s)", kind, user.pk, ref)
    return True
