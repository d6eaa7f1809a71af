from fastapi import BackgroundTasks

from auth.domain.entities import User
from documents.application.services import deliver_share_notice
from documents.domain.entities import Document, SharePermission
from documents.domain.repository import ShareNotifier


class BackgroundShareNotifier:
    """Queues share notices to run after the response has been sent."""

    def __init__(self, notifier: ShareNotifier, tasks: BackgroundTasks):
        self.notifier = notifier
        self.tasks = tasks

    async def share_created(
        self,
        document: Document,
        target: User,
        shared_by: User | None,
        permission: SharePermission,
    ) -> None:
        self.tasks.add_task(
            deliver_share_notice, self.notifier, document, target, shared_by, permission
        )
