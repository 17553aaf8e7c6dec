"""
Tests for parent/staff messaging.
"""

import pytest

from daycare.core.exceptions import ForbiddenError, NotFoundError, UnauthenticatedError, ValidationError
from daycare.models import Message
from daycare.schemas.enums import MessageBox, Priority, UserRole
from daycare.schemas.message import MessageCreate, MessageFilters, MessageUpdate, ReplyCreate
from daycare.services import MessageService
from tests.helpers import as_actor


def note(recipient_id, **overrides) -> MessageCreate:
    data = {"recipient_id": recipient_id, "subject": "Pickup", "content": "Grandma collects today"}
    data.update(overrides)
    return MessageCreate(**data)


class TestSend:

    async def test_sender_is_the_actor(self, db, parent, teacher):
        message = await MessageService(db).send(as_actor(parent), note(teacher.id))
        assert message.sender_id == parent.id
        assert message.recipient_id == teacher.id
        assert message.is_read is False
        assert message.read_at is None

    async def test_unknown_recipient(self, db, parent):
        with pytest.raises(ValidationError):
            await MessageService(db).send(as_actor(parent), note(999))

    async def test_inactive_recipient(self, db, parent, make_user):
        gone = await make_user(UserRole.TEACHER, is_active=False)
        with pytest.raises(ValidationError):
            await MessageService(db).send(as_actor(parent), note(gone.id))

    async def test_unknown_child(self, db, parent, teacher):
        with pytest.raises(ValidationError):
            await MessageService(db).send(as_actor(parent), note(teacher.id, child_id=31337))


class TestReading:

    async def test_mark_read_is_idempotent(self, db, parent, teacher):
        service = MessageService(db)
        message = await service.send(as_actor(parent), note(teacher.id))

        first = await service.mark_read(as_actor(teacher), message.id)
        stamped = first.read_at
        assert first.is_read is True
        assert stamped is not None

        second = await service.mark_read(as_actor(teacher), message.id)
        assert second.is_read is True
        assert second.read_at == stamped

    async def test_sender_cannot_mark_read(self, db, parent, teacher):
        service = MessageService(db)
        message = await service.send(as_actor(parent), note(teacher.id))
        with pytest.raises(ForbiddenError):
            await service.mark_read(as_actor(parent), message.id)

    async def test_recipient_opening_marks_read(self, db, parent, teacher):
        service = MessageService(db)
        message = await service.send(as_actor(parent), note(teacher.id))

        seen_by_sender = await service.get(as_actor(parent), message.id)
        assert seen_by_sender.is_read is False

        opened = await service.get(as_actor(teacher), message.id)
        assert opened.is_read is True

    async def test_recipient_may_mark_unread(self, db, parent, teacher):
        service = MessageService(db)
        message = await service.send(as_actor(parent), note(teacher.id))
        await service.mark_read(as_actor(teacher), message.id)
        updated = await service.update(as_actor(teacher), message.id, MessageUpdate(is_read=False))
        assert updated.is_read is False

    async def test_third_party_cannot_read(self, db, parent, teacher, staff):
        service = MessageService(db)
        message = await service.send(as_actor(parent), note(teacher.id))
        with pytest.raises(ForbiddenError):
            await service.get(as_actor(staff), message.id)

    async def test_unread_count(self, db, parent, teacher):
        service = MessageService(db)
        first = await service.send(as_actor(parent), note(teacher.id))
        await service.send(as_actor(parent), note(teacher.id, subject="Nap"))
        await service.mark_read(as_actor(teacher), first.id)
        assert await service.unread_count(as_actor(teacher)) == 1
        assert await service.unread_count(as_actor(parent)) == 0


class TestBoxes:

    async def test_inbox_and_sent(self, db, parent, teacher, staff):
        service = MessageService(db)
        await service.send(as_actor(parent), note(teacher.id, subject="to teacher"))
        await service.send(as_actor(teacher), note(parent.id, subject="to parent"))
        await service.send(as_actor(staff), note(teacher.id, subject="staff only"))

        everything = await service.list(as_actor(parent))
        assert everything.total == 2

        inbox = await service.list(as_actor(parent), MessageFilters(box=MessageBox.INBOX))
        assert [m.subject for m in inbox.items] == ["to parent"]

        sent = await service.list(as_actor(parent), MessageFilters(box=MessageBox.SENT))
        assert [m.subject for m in sent.items] == ["to teacher"]

    async def test_conversation_about_a_child(self, db, parent, teacher, make_child):
        child = await make_child(teacher, [parent])
        service = MessageService(db)
        await service.send(as_actor(parent), note(teacher.id, child_id=child.id, subject="first"))
        await service.send(as_actor(teacher), note(parent.id, child_id=child.id, subject="second"))
        await service.send(as_actor(parent), note(teacher.id, subject="unrelated"))

        page = await service.conversation(as_actor(parent), child.id)
        assert [m.subject for m in page.items] == ["first", "second"]

    async def test_conversation_for_missing_child(self, db, parent):
        with pytest.raises(NotFoundError):
            await MessageService(db).conversation(as_actor(parent), 5150)

    async def test_conversation_checks_credentials_before_the_child(self, db, make_child, teacher, parent):
        child = await make_child(teacher, [parent])
        service = MessageService(db)
        for child_id in (child.id, 5150):
            with pytest.raises(UnauthenticatedError):
                await service.conversation(None, child_id)


class TestReplies:

    async def test_reply_goes_back_to_sender(self, db, parent, teacher):
        service = MessageService(db)
        original = await service.send(as_actor(parent), note(teacher.id, priority=Priority.HIGH))
        reply = await service.reply(as_actor(teacher), original.id, ReplyCreate(content="Noted"))

        assert reply.sender_id == teacher.id
        assert reply.recipient_id == parent.id
        assert reply.subject == "Re: Pickup"
        assert reply.priority == Priority.HIGH
        assert reply.parent_message_id == original.id

        again = await service.reply(as_actor(parent), reply.id, ReplyCreate(content="Thanks"))
        assert again.subject == "Re: Pickup"
        assert again.recipient_id == teacher.id

    async def test_thread(self, db, parent, teacher):
        service = MessageService(db)
        root = await service.send(as_actor(parent), note(teacher.id))
        reply = await service.reply(as_actor(teacher), root.id, ReplyCreate(content="Noted"))
        await service.reply(as_actor(parent), reply.id, ReplyCreate(content="Thanks"))

        thread = await service.thread(as_actor(teacher), reply.id)
        assert thread.message.id == root.id
        assert len(thread.replies) == 1
        assert thread.replies[0].message.id == reply.id
        assert thread.replies[0].replies[0].message.content == "Thanks"

    async def test_delete_detaches_replies(self, db, parent, teacher):
        service = MessageService(db)
        root = await service.send(as_actor(parent), note(teacher.id))
        reply = await service.reply(as_actor(teacher), root.id, ReplyCreate(content="Noted"))
        root_id, reply_id = root.id, reply.id

        await service.delete(as_actor(parent), root_id)

        assert await db.get(Message, root_id) is None
        survivor = await service.get(as_actor(teacher), reply_id)
        assert survivor.parent_message_id is None
