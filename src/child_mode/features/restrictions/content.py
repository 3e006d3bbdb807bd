"""
Allow-list based content approval filtering.

The allow-list held by the configuration is the single source of truth; the
``approved`` flag on content items is only a mirror kept for display.
"""

import logging
from typing import List, Optional, Sequence, TypeVar

from ...core.protocols import ContentItem, RestrictionSettings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=ContentItem)


class ContentApprovalFilter:
    """Filters content by the allow-list while restricted mode is on."""

    def __init__(self, configuration: RestrictionSettings):
        self.configuration = configuration

    def is_filtering(self) -> bool:
        """Whether restricted mode and approval filtering are both active."""
        return bool(
            self.configuration.restricted_mode
            and self.configuration.content_approval_restricted
        )

    def filter_allowed(self, items: Sequence[T]) -> Sequence[T]:
        """Return the approved items in input order, or ``items`` itself when not filtering.

        Repeated ids are kept as separate entries.
        """
        if not self.is_filtering():
            return items

        allowed = [
            item for item in items if self.configuration.is_content_allowed(item.content_id)
        ]
        logger.debug(f"Filtered content: {len(allowed)}/{len(items)} allowed")
        return allowed

    def can_add(self) -> bool:
        return not self.configuration.restricted_mode

    def can_delete(self) -> bool:
        return not self.configuration.restricted_mode

    def can_modify_approval(self) -> bool:
        return not self.configuration.restricted_mode

    def toggle_approval(self, item: ContentItem) -> Optional[bool]:
        """Flip the approval of ``item``.

        Returns the new approval state, or None when modification is not
        allowed in the current mode.
        """
        if not self.can_modify_approval():
            return None

        if self.configuration.is_content_allowed(item.content_id):
            self.configuration.revoke_content_approval(item.content_id)
            approved = False
        else:
            self.configuration.approve_content(item.content_id)
            approved = True

        self._mirror(item, approved)
        return approved

    def sync_approval_flags(self, items: Sequence[T]) -> List[T]:
        """Refresh each item's ``approved`` mirror from the allow-list."""
        for item in items:
            self._mirror(item, self.configuration.is_content_allowed(item.content_id))
        return list(items)

    @staticmethod
    def _mirror(item: ContentItem, approved: bool) -> None:
        try:
            item.approved = approved
        except AttributeError:
            # Read-only items keep their own flag
            logger.debug(f"Cannot mirror approval onto {item.content_id}")
