import logging

from studysync.models.badge import BadgeUnlocked

logger = logging.getLogger(__name__)


class BadgeNotifier:
    """Receives badge-unlocked events. The default just logs them."""

    def badge_unlocked(self, user_id: str, event: BadgeUnlocked) -> None:
        logger.info("User %s unlocked badge %s (%s)", user_id, event.badge_id, event.badge_name)


# Dependency for getting the notifier
def get_notifier() -> BadgeNotifier:
    return BadgeNotifier()
