# daycare/services/integrity.py
"""Writes that span more than one record.

Nothing in here commits: every method runs inside the calling service's
``transaction()``, so a failure at any step rolls back the whole sequence.
"""
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.core.exceptions import (
    CapacityExceededError,
    DaycareError,
    DuplicateParticipantError,
    ImmutableError,
    InactiveError,
    NotFoundError,
    NotParticipatingError,
    ValidationError,
)
from daycare.core.identity import Actor
from daycare.core.logging import logger
from daycare.models import (
    Activity,
    CalendarEvent,
    Child,
    Message,
    ProgressReport,
    Transaction,
    User,
    activity_assistants,
    activity_participants,
)
from daycare.schemas.enums import ActivityStatus, TransactionStatus, UserRole


def _dedupe(ids: Iterable[int]) -> List[int]:
    seen = {}
    for value in ids or ():
        seen.setdefault(value, None)
    return list(seen)


class IntegrityCoordinator:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _reject(self, error: DaycareError) -> DaycareError:
        logger.info(f"Integrity check failed: {error.message}", extra={"reason": error.reason})
        return error

    async def _users_by_id(self, ids: List[int]) -> Dict[int, User]:
        if not ids:
            return {}
        result = await self.db.execute(select(User).where(User.id.in_(ids)))
        return {user.id: user for user in result.scalars().all()}

    # Parent/child linkage

    async def validate_parents(self, parent_ids: Iterable[int]) -> List[User]:
        ids = _dedupe(parent_ids)
        if not ids:
            raise self._reject(ValidationError("A child must have at least one parent"))

        users = await self._users_by_id(ids)
        missing = [pid for pid in ids if pid not in users]
        if missing:
            raise self._reject(ValidationError("Parent not found", details={"parent_ids": missing}))

        invalid = [pid for pid in ids if users[pid].role != UserRole.PARENT or not users[pid].is_active]
        if invalid:
            raise self._reject(ValidationError(
                "Every parent must be an active user with the parent role",
                details={"parent_ids": invalid},
            ))
        return [users[pid] for pid in ids]

    async def validate_staff_member(self, user_id: int, roles: Iterable[UserRole], field: str) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise self._reject(ValidationError(f"{field} does not resolve to a user", details={field: user_id}))
        allowed = set(roles)
        if user.role not in allowed or not user.is_active:
            names = ", ".join(sorted(role.value for role in allowed))
            raise self._reject(ValidationError(
                f"{field} must reference an active user with role: {names}",
                details={field: user_id},
            ))
        return user

    async def validate_teacher(self, teacher_id: int) -> User:
        return await self.validate_staff_member(teacher_id, (UserRole.TEACHER,), "teacher_id")

    @staticmethod
    def _link(parent: User, child_id: int) -> None:
        current = list(parent.child_ids or [])
        if child_id not in current:
            # Reassign so the JSON column is flagged dirty
            parent.child_ids = current + [child_id]

    @staticmethod
    def _unlink(parent: User, child_id: int) -> None:
        current = list(parent.child_ids or [])
        if child_id in current:
            parent.child_ids = [cid for cid in current if cid != child_id]

    async def create_child(self, fields: dict, parent_ids: Iterable[int]) -> Child:
        """Validate every reference, persist the child, then link it to its parents"""
        parents = await self.validate_parents(parent_ids)
        await self.validate_teacher(fields["teacher_id"])

        child = Child(**fields)
        child.parents = parents
        self.db.add(child)
        await self.db.flush()

        for parent in parents:
            self._link(parent, child.id)
        await self.db.flush()
        logger.info(f"Created child {child.id} linked to parents {[p.id for p in parents]}")
        return child

    async def replace_child_parents(self, child: Child, parent_ids: Iterable[int]) -> None:
        parents = await self.validate_parents(parent_ids)
        new_ids = {parent.id for parent in parents}

        for parent in child.parents:
            if parent.id not in new_ids:
                self._unlink(parent, child.id)
        for parent in parents:
            self._link(parent, child.id)

        child.parents = parents
        await self.db.flush()

    async def delete_child(self, child: Child) -> None:
        """Unlink the child from every parent, drop its reports, then delete it"""
        for parent in list(child.parents):
            self._unlink(parent, child.id)
        await self.db.flush()

        await self.db.execute(
            delete(activity_participants).where(activity_participants.c.child_id == child.id)
        )
        await self.db.execute(delete(ProgressReport).where(ProgressReport.child_id == child.id))
        await self.db.execute(update(Message).where(Message.child_id == child.id).values(child_id=None))
        await self.db.execute(
            update(Transaction).where(Transaction.related_child_id == child.id).values(related_child_id=None)
        )
        await self.db.delete(child)
        await self.db.flush()
        logger.info(f"Deleted child {child.id}")

    # Activity participants

    async def add_participant(self, activity: Activity, child_id: int) -> Activity:
        """``activity`` must already be locked by the caller"""
        child = await self.db.get(Child, child_id)
        if child is None:
            raise self._reject(NotFoundError("Child not found", details={"child_id": child_id}))
        if not child.is_active:
            raise self._reject(InactiveError("Child is not active", details={"child_id": child_id}))
        if child_id in activity.participant_ids:
            raise self._reject(DuplicateParticipantError(details={"child_id": child_id}))
        if len(activity.participants) >= activity.max_participants:
            raise self._reject(CapacityExceededError(details={
                "max_participants": activity.max_participants,
            }))

        activity.participants.append(child)
        await self.db.flush()
        return activity

    async def remove_participant(self, activity: Activity, child_id: int) -> Activity:
        for child in activity.participants:
            if child.id == child_id:
                activity.participants.remove(child)
                await self.db.flush()
                return activity
        raise self._reject(NotParticipatingError(details={"child_id": child_id}))

    async def validate_participants(self, child_ids: List[int], max_participants: int) -> List[Child]:
        if len(set(child_ids)) != len(child_ids):
            raise self._reject(DuplicateParticipantError("Participant list contains duplicates"))

        if child_ids:
            result = await self.db.execute(select(Child).where(Child.id.in_(child_ids)))
            found = {child.id: child for child in result.scalars().all()}
        else:
            found = {}
        invalid = [cid for cid in child_ids if cid not in found or not found[cid].is_active]
        if invalid:
            raise self._reject(ValidationError(
                "Participants must be existing active children",
                details={"participant_ids": invalid},
            ))

        if len(child_ids) > max_participants:
            raise self._reject(CapacityExceededError(details={"max_participants": max_participants}))
        return [found[cid] for cid in child_ids]

    async def validate_assistants(self, user_ids: List[int]) -> List[User]:
        ids = _dedupe(user_ids)
        return [
            await self.validate_staff_member(uid, (UserRole.TEACHER, UserRole.STAFF), "assistant_ids")
            for uid in ids
        ]

    def check_capacity(self, activity: Activity, max_participants: int) -> None:
        if max_participants < len(activity.participants):
            raise self._reject(CapacityExceededError(
                "Maximum participants cannot be lower than the current participant count",
                details={"participants": len(activity.participants)},
            ))

    def ensure_activity_deletable(self, actor: Actor, activity: Activity) -> None:
        if activity.status == ActivityStatus.COMPLETED and not actor.is_admin:
            raise self._reject(ImmutableError("Completed activities can only be deleted by an admin"))

    # Finance approval workflow

    def ensure_transaction_mutable(self, actor: Actor, transaction: Transaction) -> None:
        if transaction.status == TransactionStatus.APPROVED and not actor.is_admin:
            raise self._reject(ImmutableError("Cannot modify an approved transaction"))

    async def validate_transaction_links(
        self,
        related_child_id: Optional[int] = None,
        related_parent_id: Optional[int] = None,
        related_employee_id: Optional[int] = None,
    ) -> None:
        if related_child_id is not None and await self.db.get(Child, related_child_id) is None:
            raise self._reject(ValidationError(
                "Related child not found", details={"related_child_id": related_child_id}
            ))
        if related_parent_id is not None:
            parent = await self.db.get(User, related_parent_id)
            if parent is None or parent.role != UserRole.PARENT:
                raise self._reject(ValidationError(
                    "Related parent must be a user with the parent role",
                    details={"related_parent_id": related_parent_id},
                ))
        if related_employee_id is not None and await self.db.get(User, related_employee_id) is None:
            raise self._reject(ValidationError(
                "Related employee not found", details={"related_employee_id": related_employee_id}
            ))

    async def decide_transaction(
        self,
        transaction: Transaction,
        approver_id: int,
        approved: bool,
        notes: Optional[str] = None,
    ) -> Transaction:
        """Status, approver and timestamp change together in one flush"""
        transaction.status = TransactionStatus.APPROVED if approved else TransactionStatus.REJECTED
        transaction.approved_by = approver_id
        transaction.approved_at = datetime.now(timezone.utc)
        if notes is not None:
            transaction.approval_notes = notes
        await self.db.flush()
        logger.info(f"Transaction {transaction.id} {transaction.status.value} by user {approver_id}")
        return transaction

    # Users

    async def ensure_role_change_allowed(self, user: User, new_role: UserRole) -> None:
        """A parent with children stays a parent; a teacher with a class stays a teacher"""
        if user.role == new_role:
            return
        if user.role == UserRole.PARENT and user.child_ids:
            raise self._reject(ValidationError(
                "Cannot change the role of a parent who is linked to children",
                details={"child_ids": list(user.child_ids)},
            ))
        if user.role == UserRole.TEACHER:
            taught = await self.db.execute(select(Child.id).where(Child.teacher_id == user.id).limit(1))
            leading = await self.db.execute(select(Activity.id).where(Activity.teacher_id == user.id).limit(1))
            if taught.first() is not None or leading.first() is not None:
                raise self._reject(ValidationError(
                    "Cannot change the role of a teacher with assigned children or activities"
                ))

    async def delete_user(self, user: User) -> None:
        """Refuse while the user anchors a child, activity or progress report; otherwise detach and delete"""
        taught = await self.db.execute(select(Child.id).where(Child.teacher_id == user.id).limit(1))
        if taught.first() is not None:
            raise self._reject(ValidationError("User is the assigned teacher of a child"))

        leading = await self.db.execute(select(Activity.id).where(Activity.teacher_id == user.id).limit(1))
        if leading.first() is not None:
            raise self._reject(ValidationError("User is the assigned teacher of an activity"))

        authored = await self.db.execute(
            select(ProgressReport.id).where(ProgressReport.teacher_id == user.id).limit(1)
        )
        if authored.first() is not None:
            raise self._reject(ValidationError("User is the author of progress reports"))

        result = await self.db.execute(select(Child).where(Child.parents.any(User.id == user.id)))
        children = list(result.scalars().all())
        sole = [child.id for child in children if len(child.parents) == 1]
        if sole:
            raise self._reject(ValidationError(
                "User is the only parent of a child", details={"child_ids": sole}
            ))

        for child in children:
            child.parents = [parent for parent in child.parents if parent.id != user.id]
        await self.db.execute(delete(activity_assistants).where(activity_assistants.c.user_id == user.id))

        # Messages go with their sender or recipient; replies elsewhere lose the link
        own = select(Message.id).where(or_(Message.sender_id == user.id, Message.recipient_id == user.id))
        await self.db.execute(
            update(Message).where(Message.parent_message_id.in_(own)).values(parent_message_id=None)
        )
        await self.db.execute(
            delete(Message).where(or_(Message.sender_id == user.id, Message.recipient_id == user.id))
        )
        await self.db.execute(
            update(CalendarEvent).where(CalendarEvent.organizer_id == user.id).values(organizer_id=None)
        )
        await self.db.execute(
            update(Transaction).where(Transaction.related_parent_id == user.id).values(related_parent_id=None)
        )
        await self.db.execute(
            update(Transaction).where(Transaction.related_employee_id == user.id).values(related_employee_id=None)
        )
        await self.db.delete(user)
        await self.db.flush()
        logger.info(f"Deleted user {user.id}")
