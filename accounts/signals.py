import logging
from urllib.parse import urlparse

from allauth.account.models import EmailAddress
from allauth.account.signals import user_logged_in
from django.conf import settings
from django.contrib.sites.models import Site
from django.db.models.signals import post_migrate, post_save
from django.dispatch import receiver

from .models import EmailPreference, Profile, User

logger = logging.getLogger(__name__)


@receiver(user_logged_in)
def on_user_logged_in(sender, request, user, **kwargs):
    site = getattr(settings, "SITE_URL", "")
    if site.startswith("http://localhost:8000"):
        EmailAddress.objects.update_or_create(
            user=user,
            email=user.email,
            defaults={"verified": True, "primary": True},
        )
        EmailAddress.objects.filter(user=user).exclude(
            email=user.email
        ).update(primary=False)


@receiver(post_save, sender=User)
def ensure_profile(sender, instance, created, **kwargs):
    if created:
        Profile.objects.get_or_create(user=instance)
        EmailPreference.objects.get_or_create(user=instance)


@receiver(post_migrate)
def sync_site_domain(sender, **kwargs):
    if sender.name != "accounts":
        return
    site_url = getattr(settings, "SITE_URL", "")
    host = urlparse(site_url).hostname if site_url else None
    if not host:
        return
    sid = getattr(settings, "SITE_ID", 1)
    Site.objects.update_or_create(id=sid, defaults={"domain": host, "name": host})
    logger.info("Site %s synced to %s", sid, host)
