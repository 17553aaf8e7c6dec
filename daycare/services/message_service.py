# daycare/services/message_service.py
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select, update as sql_update

from daycare.core.exceptions import ValidationError
from daycare.core.identity import Actor
from daycare.core.logging import logger
from daycare.core.permissions import Action, ResourceKind, authorize
from daycare.core.scoping import Page, search_clause
from daycare.models import Child, Message, User
from daycare.schemas.enums import MessageBox
from daycare.schemas.message import (
    MessageCreate,
    MessageFilters,
    MessageResponse,
    MessageThread,
    MessageUpdate,
    ReplyCreate,
)
from daycare.services.base_service import BaseService

REPLY_PREFIX = "Re: "


class MessageService(BaseService):
    model = Message
    kind = ResourceKind.MESSAGE
    label = "Message"
    json_fields = ("attachments",)

    async def list(
        self,
        actor: Optional[Actor],
        filters: Optional[MessageFilters] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page:
        filters = filters or MessageFilters()
        clauses = [search_clause(filters.search, Message.subject, Message.content)]
        if actor is not None and filters.box == MessageBox.INBOX:
            clauses.append(Message.recipient_id == actor.id)
        elif actor is not None and filters.box == MessageBox.SENT:
            clauses.append(Message.sender_id == actor.id)
        if filters.is_read is not None:
            clauses.append(Message.is_read == filters.is_read)
        if filters.message_type is not None:
            clauses.append(Message.message_type == filters.message_type)
        if filters.priority is not None:
            clauses.append(Message.priority == filters.priority)
        if filters.child_id is not None:
            clauses.append(Message.child_id == filters.child_id)
        return await self.scoped_page(
            actor, clauses, (Message.created_at.desc(), Message.id.desc()), page, page_size
        )

    async def get(self, actor: Optional[Actor], message_id: int) -> Message:
        """Reading a message addressed to you marks it read"""
        message = await self.fetch_authorized(actor, message_id, Action.READ)
        if message.recipient_id == actor.id and not message.is_read:
            async with self.transaction():
                self._mark_read(message)
        return message

    @staticmethod
    def _mark_read(message: Message) -> None:
        message.is_read = True
        if message.read_at is None:
            message.read_at = datetime.now(timezone.utc)

    async def _validate_references(self, values: dict) -> None:
        recipient = await self.db.get(User, values["recipient_id"])
        if recipient is None or not recipient.is_active:
            raise ValidationError("Recipient not found", details={"recipient_id": values["recipient_id"]})
        if values.get("child_id") is not None and await self.db.get(Child, values["child_id"]) is None:
            raise ValidationError("Child not found", details={"child_id": values["child_id"]})
        if values.get("parent_message_id") is not None:
            if await self.db.get(Message, values["parent_message_id"]) is None:
                raise ValidationError(
                    "Parent message not found", details={"parent_message_id": values["parent_message_id"]}
                )

    async def send(self, actor: Optional[Actor], data: MessageCreate) -> Message:
        values = self.dump(data)
        values["sender_id"] = actor.id if actor is not None else None
        self.authorize(actor, Action.CREATE, values)
        async with self.transaction():
            await self._validate_references(values)
            message = Message(**values)
            self.db.add(message)
            await self.db.flush()
            message_id = message.id
        logger.info(
            f"Message {message_id} sent to user {data.recipient_id}",
            extra={"actor_id": actor.id},
        )
        return await self.fetch(message_id)

    create = send

    async def reply(self, actor: Optional[Actor], message_id: int, data: ReplyCreate) -> Message:
        original = await self.fetch_authorized(actor, message_id, Action.READ)
        recipient_id = original.sender_id if actor.id == original.recipient_id else original.recipient_id
        subject = original.subject
        if not subject.startswith(REPLY_PREFIX):
            subject = f"{REPLY_PREFIX}{subject}"
        reply = MessageCreate(
            recipient_id=recipient_id,
            child_id=original.child_id,
            subject=subject[:200],
            content=data.content,
            message_type=original.message_type,
            priority=data.priority or original.priority,
            attachments=data.attachments,
            parent_message_id=original.id,
        )
        return await self.send(actor, reply)

    async def mark_read(self, actor: Optional[Actor], message_id: int) -> Message:
        """Idempotent; the read timestamp is only set the first time"""
        async with self.transaction():
            message = await self.fetch_authorized(actor, message_id, Action.UPDATE, lock=True)
            self._mark_read(message)
        return await self.fetch(message_id)

    async def update(self, actor: Optional[Actor], message_id: int, data: MessageUpdate) -> Message:
        """Recipients may toggle the read flag; content is immutable once sent"""
        async with self.transaction():
            message = await self.fetch_authorized(actor, message_id, Action.UPDATE, lock=True)
            if data.is_read:
                self._mark_read(message)
            elif data.is_read is False:
                message.is_read = False
        return await self.fetch(message_id)

    async def delete(self, actor: Optional[Actor], message_id: int) -> None:
        async with self.transaction():
            await self.fetch_authorized(actor, message_id, Action.DELETE, lock=True)
            await self.db.execute(
                sql_update(Message)
                .where(Message.parent_message_id == message_id)
                .values(parent_message_id=None)
            )
            message = await self.fetch(message_id)
            await self.db.delete(message)
        logger.info(f"Deleted message {message_id}", extra={"actor_id": actor.id})

    async def unread_count(self, actor: Optional[Actor]) -> int:
        self.authorize(actor, Action.READ_LIST)
        result = await self.db.execute(
            select(func.count(Message.id)).where(
                Message.recipient_id == actor.id,
                Message.is_read.is_(False),
            )
        )
        return result.scalar_one()

    async def conversation(
        self,
        actor: Optional[Actor],
        child_id: int,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page:
        """Messages about one child, oldest first"""
        self.authorize(actor, Action.READ_LIST)
        await self.fetch(child_id, model=Child, label="Child")
        return await self.scoped_page(
            actor, [Message.child_id == child_id], (Message.created_at, Message.id), page, page_size
        )

    async def thread(self, actor: Optional[Actor], message_id: int) -> MessageThread:
        """The reply tree containing ``message_id``, from its highest visible ancestor"""
        message = await self.fetch_authorized(actor, message_id, Action.READ)
        scope = authorize(actor, Action.READ, self.kind).scope

        root = message
        seen = {root.id}
        while root.parent_message_id is not None and root.parent_message_id not in seen:
            parent = await self.db.get(Message, root.parent_message_id)
            if parent is None or not scope.matches(parent):
                break
            seen.add(parent.id)
            root = parent

        nodes = {root.id: MessageThread(message=MessageResponse.model_validate(root))}
        frontier = [root.id]
        while frontier:
            result = await self.db.execute(
                select(Message)
                .where(Message.parent_message_id.in_(frontier))
                .order_by(Message.created_at, Message.id)
            )
            frontier = []
            for child in result.scalars().all():
                if child.id in nodes or not scope.matches(child):
                    continue
                node = MessageThread(message=MessageResponse.model_validate(child))
                nodes[child.parent_message_id].replies.append(node)
                nodes[child.id] = node
                frontier.append(child.id)
        return nodes[root.id]
