from typing import Iterable, List
import logging
from sqlalchemy.orm import Session
from sqlalchemy import and_
from timekeeper.notifications.models import Notification
from timekeeper.employees.models import Profile, Role, ADMIN_ROLES
from timekeeper.core.service_base import BaseService
from timekeeper.core.exceptions import ResourceNotFoundError
from timekeeper.core.redis_service import redis_service

logger = logging.getLogger(__name__)


class NotificationService(BaseService):
    """Per-user inbox.

    ``notify`` and ``notify_company_admins`` only add rows to the session; the
    calling service commits them together with the change they describe and
    then calls ``invalidate_unread`` for the returned recipients.
    """

    def __init__(self, db: Session):
        super().__init__(db)

    def notify(
        self,
        user_id,
        title: str,
        message: str,
        notification_type: str,
        related_id=None,
        company_id=None
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            company_id=company_id,
            title=title,
            message=message,
            type=notification_type,
            related_id=related_id
        )
        self.db.add(notification)
        return notification

    def notify_company_admins(
        self,
        company_id,
        title: str,
        message: str,
        notification_type: str,
        related_id=None,
        exclude_id=None
    ) -> List:
        """Notify the company's admins; legacy rows without a company go to super admins."""
        query = self.db.query(Profile).filter(Profile.is_active.is_(True))
        if company_id is None:
            query = query.filter(Profile.role == Role.SUPER_ADMIN.value)
        else:
            query = query.filter(
                and_(Profile.company_id == company_id, Profile.role.in_(ADMIN_ROLES))
            )

        recipients = [admin.id for admin in query.all() if admin.id != exclude_id]
        for admin_id in recipients:
            self.notify(admin_id, title, message, notification_type, related_id, company_id)
        return recipients

    def invalidate_unread(self, user_ids: Iterable) -> None:
        keys = [redis_service.unread_key(user_id) for user_id in user_ids]
        if keys:
            redis_service.invalidate(*keys)

    def list_notifications(
        self,
        user: Profile,
        unread_only: bool = False,
        skip: int = 0,
        limit: int = 50
    ) -> List[Notification]:
        query = self.db.query(Notification).filter(Notification.user_id == user.id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        query = query.order_by(Notification.created_at.desc())
        return self.paginate_query(query, skip, limit).all()

    def unread_count(self, user: Profile) -> int:
        """Unread notification count; cached because clients poll it."""
        cache_key = redis_service.unread_key(user.id)
        cached = redis_service.get_json(cache_key)
        if cached is not None:
            return int(cached)

        count = self.db.query(Notification).filter(
            and_(Notification.user_id == user.id, Notification.is_read.is_(False))
        ).count()
        redis_service.set_json(cache_key, count)
        return count

    def mark_read(self, notification_id, user: Profile) -> Notification:
        notification = self._get_own(notification_id, user)

        notification.is_read = True
        self.safe_commit("Error updating notification")
        self.db.refresh(notification)
        self.invalidate_unread([user.id])
        return notification

    def mark_all_read(self, user: Profile) -> int:
        updated = self.db.query(Notification).filter(
            and_(Notification.user_id == user.id, Notification.is_read.is_(False))
        ).update({Notification.is_read: True}, synchronize_session=False)
        self.safe_commit("Error updating notifications")
        self.invalidate_unread([user.id])

        self.log_service_action("mark_all_read", "Notification", extra_data={"user_id": str(user.id), "updated": updated})
        return updated

    def delete_notification(self, notification_id, user: Profile) -> bool:
        notification = self._get_own(notification_id, user)

        self.db.delete(notification)
        self.safe_commit("Error deleting notification")
        self.invalidate_unread([user.id])
        return True

    def _get_own(self, notification_id, user: Profile) -> Notification:
        notification = self.get_or_404(Notification, notification_id, "Notification")
        # Other users' notifications look exactly like missing ones
        if notification.user_id != user.id:
            raise ResourceNotFoundError("Notification", str(notification_id))
        return notification
