import logging

logger = logging.getLogger(__name__)


def can_view_application(user, application) -> bool:
    if not getattr(user, "is_authenticated", False):
        return False
    if user.is_portal_staff:
        return True
    allowed = application.applicant_id == user.pk
    if not allowed:
        logger.warning(
            "Permission denied: user %s is not the owner of application %s",
            user.pk,
            application.pk,
        )
    return allowed


def can_view_ticket(user, ticket) -> bool:
    if not getattr(user, "is_authenticated", False):
        return False
    if user.is_portal_staff:
        return True
    allowed = ticket.applicant_id == user.pk
    if not allowed:
        logger.warning(
            "Permission denied: user %s is not the owner of ticket %s",
            user.pk,
            ticket.pk,
        )
    return allowed
