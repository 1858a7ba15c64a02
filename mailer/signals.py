import logging

from anymail.signals import tracking
from django.dispatch import receiver

from .models import EmailEvent

logger = logging.getLogger(__name__)


@receiver(tracking)
def handle_tracking(sender, event, esp_name, **kwargs):
    metadata = event.metadata or {}
    EmailEvent.objects.create(
        user_id=metadata.get("user_id"),
        kind=metadata.get("kind") or "",
        event=event.event_type,
        provider_id=event.event_id,
        email=event.recipient or "",
        payload=event.esp_event if isinstance(event.esp_event, dict) else {},
    )
    if event.event_type in {"bounced", "complained"}:
        from accounts.models import EmailPreference

        user_id = metadata.get("user_id")
        if user_id:
            updated = EmailPreference.objects.filter(user_id=user_id).update(
                notify_by_email=False, consent_source=event.event_type
            )
            if updated:
                logger.warning("Notifications disabled for user %s after %s", user_id, event.event_type)
