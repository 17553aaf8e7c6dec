# daycare/core/permissions.py
"""Role-based access policy.

``authorize`` answers one question: may this actor perform this action on
this kind of resource, and if so, which records does the permission cover?
The answer's ``scope`` is a declarative ``ScopeFilter`` that is checked in
memory against a single record here, and translated into a SQL predicate
for list queries by ``daycare.core.scoping``.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple
import logging

from daycare.core.exceptions import (
    DaycareError,
    ForbiddenError,
    UnauthenticatedError,
)
from daycare.core.identity import Actor
from daycare.schemas.enums import UserRole

logger = logging.getLogger("daycare.permissions")


class Action(str, Enum):
    READ = "read"
    READ_LIST = "read_list"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"
    REPORT = "report"
    LOOKUP = "lookup"


class ResourceKind(str, Enum):
    USER = "user"
    CHILD = "child"
    ACTIVITY = "activity"
    TRANSACTION = "transaction"
    MESSAGE = "message"
    CALENDAR_EVENT = "calendar_event"
    INVENTORY_ITEM = "inventory_item"
    PROGRESS_REPORT = "progress_report"


class ScopeOp(str, Enum):
    EQ = "eq"                  # field == value
    IN = "in"                  # field in value (a collection)
    CONTAINS = "contains"      # collection field holds value
    INTERSECTS = "intersects"  # collection field shares a member with value


class MatchMode(str, Enum):
    ALL = "all"
    ANY = "any"


def _member_id(item: Any) -> Any:
    return getattr(item, "id", item)


def _field_value(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


@dataclass(frozen=True)
class Condition:
    field: str
    op: ScopeOp
    value: Any

    def evaluate(self, record: Any) -> bool:
        current = _field_value(record, self.field)
        match self.op:
            case ScopeOp.EQ:
                return current == self.value
            case ScopeOp.IN:
                return current in set(self.value)
            case ScopeOp.CONTAINS:
                return self.value in {_member_id(item) for item in (current or ())}
            case ScopeOp.INTERSECTS:
                members = {_member_id(item) for item in (current or ())}
                return not members.isdisjoint(self.value)
            case _:
                raise ValueError(f"Invalid scope operator: {self.op}")


@dataclass(frozen=True)
class ScopeFilter:
    """Conjunction or disjunction of conditions; no conditions means unrestricted"""
    conditions: Tuple[Condition, ...] = ()
    match: MatchMode = MatchMode.ALL

    @classmethod
    def all_of(cls, *conditions: Condition) -> "ScopeFilter":
        return cls(tuple(conditions), MatchMode.ALL)

    @classmethod
    def any_of(cls, *conditions: Condition) -> "ScopeFilter":
        return cls(tuple(conditions), MatchMode.ANY)

    @property
    def is_unrestricted(self) -> bool:
        return not self.conditions

    def matches(self, record: Any) -> bool:
        if self.is_unrestricted:
            return True
        results = (condition.evaluate(record) for condition in self.conditions)
        return all(results) if self.match == MatchMode.ALL else any(results)


UNRESTRICTED = ScopeFilter()


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None
    message: Optional[str] = None
    scope: Optional[ScopeFilter] = None

    def raise_for_deny(self) -> "Decision":
        """Raise the structured error for a denial; returns self when allowed"""
        if self.allowed:
            return self
        if self.reason == UnauthenticatedError.reason:
            raise UnauthenticatedError(self.message)
        if self.reason == ForbiddenError.reason:
            raise ForbiddenError(self.message)
        raise DaycareError(self.message)


# Rule functions map (actor, action) to the scope the permission covers,
# or None when the role has no such permission.
Rule = Callable[[Actor, Action], Optional[ScopeFilter]]

_READS = (Action.READ, Action.READ_LIST)


def _eq(name: str, value: Any) -> ScopeFilter:
    return ScopeFilter.all_of(Condition(name, ScopeOp.EQ, value))


def _child_rule(actor: Actor, action: Action) -> Optional[ScopeFilter]:
    match actor.role:
        case UserRole.PARENT if action in (*_READS, Action.UPDATE):
            return ScopeFilter.all_of(Condition("parents", ScopeOp.CONTAINS, actor.id))
        case UserRole.TEACHER if action in (*_READS, Action.UPDATE, Action.REPORT):
            return _eq("teacher_id", actor.id)
        case UserRole.TEACHER if action == Action.CREATE:
            return UNRESTRICTED
        case UserRole.STAFF if action in _READS:
            return UNRESTRICTED
    return None


def _activity_rule(actor: Actor, action: Action) -> Optional[ScopeFilter]:
    match actor.role:
        case UserRole.TEACHER if action != Action.APPROVE:
            return _eq("teacher_id", actor.id)
        case UserRole.PARENT if action in _READS:
            return ScopeFilter.all_of(
                Condition("participants", ScopeOp.INTERSECTS, actor.child_ids)
            )
        case UserRole.STAFF if action in _READS:
            return UNRESTRICTED
    return None


def _transaction_rule(actor: Actor, action: Action) -> Optional[ScopeFilter]:
    if actor.role == UserRole.FINANCE and action in (
        *_READS, Action.CREATE, Action.UPDATE, Action.REPORT
    ):
        return UNRESTRICTED
    return None


def _message_rule(actor: Actor, action: Action) -> Optional[ScopeFilter]:
    match action:
        case Action.READ | Action.READ_LIST | Action.DELETE:
            return ScopeFilter.any_of(
                Condition("sender_id", ScopeOp.EQ, actor.id),
                Condition("recipient_id", ScopeOp.EQ, actor.id),
            )
        case Action.CREATE:
            return _eq("sender_id", actor.id)
        case Action.UPDATE:
            return _eq("recipient_id", actor.id)
    return None


def _calendar_rule(actor: Actor, action: Action) -> Optional[ScopeFilter]:
    if action in _READS:
        return UNRESTRICTED
    if actor.role == UserRole.TEACHER:
        if action == Action.CREATE:
            return UNRESTRICTED
        if action == Action.UPDATE:
            return _eq("organizer_id", actor.id)
    return None


def _inventory_rule(actor: Actor, action: Action) -> Optional[ScopeFilter]:
    match actor.role:
        case UserRole.TEACHER if action in _READS:
            return UNRESTRICTED
        case UserRole.STAFF if action in (*_READS, Action.CREATE, Action.UPDATE, Action.REPORT):
            return UNRESTRICTED
    return None


def _progress_rule(actor: Actor, action: Action) -> Optional[ScopeFilter]:
    match actor.role:
        case UserRole.TEACHER if action in (*_READS, Action.CREATE, Action.UPDATE, Action.DELETE):
            return _eq("teacher_id", actor.id)
        case UserRole.PARENT if action in (*_READS, Action.UPDATE):
            return ScopeFilter.all_of(
                Condition("child_id", ScopeOp.IN, actor.child_ids),
                Condition("shared_with_parents", ScopeOp.EQ, True),
            )
    return None


def _user_rule(actor: Actor, action: Action) -> Optional[ScopeFilter]:
    if action in (Action.READ, Action.UPDATE):
        return _eq("id", actor.id)
    if action == Action.LOOKUP:
        # Directory of names and roles for addressing messages and assignments
        return _eq("is_active", True)
    return None


RULES: Dict[ResourceKind, Rule] = {
    ResourceKind.CHILD: _child_rule,
    ResourceKind.ACTIVITY: _activity_rule,
    ResourceKind.TRANSACTION: _transaction_rule,
    ResourceKind.MESSAGE: _message_rule,
    ResourceKind.CALENDAR_EVENT: _calendar_rule,
    ResourceKind.INVENTORY_ITEM: _inventory_rule,
    ResourceKind.PROGRESS_REPORT: _progress_rule,
    ResourceKind.USER: _user_rule,
}

_KIND_LABELS = {
    ResourceKind.USER: "users",
    ResourceKind.CHILD: "children",
    ResourceKind.ACTIVITY: "activities",
    ResourceKind.TRANSACTION: "finance transactions",
    ResourceKind.MESSAGE: "messages",
    ResourceKind.CALENDAR_EVENT: "calendar events",
    ResourceKind.INVENTORY_ITEM: "inventory items",
    ResourceKind.PROGRESS_REPORT: "progress reports",
}

_ACTION_VERBS = {
    Action.READ: "view",
    Action.READ_LIST: "list",
    Action.CREATE: "create",
    Action.UPDATE: "update",
    Action.DELETE: "delete",
    Action.APPROVE: "approve",
    Action.REPORT: "report on",
    Action.LOOKUP: "look up",
}

_OWNERSHIP_MESSAGES = {
    ResourceKind.USER: "Access denied. You can only access your own account.",
    ResourceKind.CHILD: "Access denied. You can only access children assigned to you.",
    ResourceKind.ACTIVITY: "Access denied. You can only access your own activities.",
    ResourceKind.MESSAGE: "Access denied. You can only access your own messages.",
    ResourceKind.CALENDAR_EVENT: "Access denied. You can only modify events you organize.",
    ResourceKind.PROGRESS_REPORT: "Access denied. You can only access progress reports you are entitled to.",
}


def _deny(reason: str, message: str, actor: Optional[Actor], action: Action, kind: ResourceKind) -> Decision:
    logger.warning(
        f"Policy denied {action.value} on {kind.value}: {message}",
        extra={"actor_id": actor.id if actor else None, "reason": reason},
    )
    return Decision(False, reason, message)


def authorize(
    actor: Optional[Actor],
    action: Action,
    kind: ResourceKind,
    resource: Any = None,
) -> Decision:
    """
    Decide whether ``actor`` may perform ``action`` on ``kind``.

    Precedence: missing actor, inactive actor, admin, role rule, resource
    ownership. ``resource`` may be an ORM record or a plain dict (used for
    create payloads); when given it must fall inside the rule's scope.
    """
    if actor is None:
        return _deny(UnauthenticatedError.reason, "Not authorized, no valid credentials", None, action, kind)

    if not actor.is_active:
        return _deny(ForbiddenError.reason, "Account is deactivated", actor, action, kind)

    if actor.is_admin:
        return Decision(True, scope=UNRESTRICTED)

    scope = RULES[kind](actor, action)
    if scope is None:
        message = (
            f"User role '{actor.role.value}' is not authorized to "
            f"{_ACTION_VERBS[action]} {_KIND_LABELS[kind]}"
        )
        return _deny(ForbiddenError.reason, message, actor, action, kind)

    if resource is not None and not scope.matches(resource):
        message = _OWNERSHIP_MESSAGES.get(kind, "Operation not permitted")
        return _deny(ForbiddenError.reason, message, actor, action, kind)

    return Decision(True, scope=scope)


@dataclass(frozen=True)
class FieldPolicy:
    """Fields a role may write on a kind; ``allow=None`` means any field not denied"""
    allow: Optional[FrozenSet[str]] = None
    deny: FrozenSet[str] = field(default_factory=frozenset)

    def permits(self, name: str) -> bool:
        if name in self.deny:
            return False
        return self.allow is None or name in self.allow


# Written only by the system, never through an update payload
PROTECTED_FIELDS: FrozenSet[str] = frozenset({
    "id",
    "created_at",
    "updated_at",
    "created_by",
    "last_updated_by",
    "approved_by",
    "approved_at",
    "child_ids",
    "is_low_stock",
    "read_at",
})

ANY_FIELD = FieldPolicy()

UPDATE_FIELDS: Dict[Tuple[UserRole, ResourceKind], FieldPolicy] = {
    (UserRole.PARENT, ResourceKind.CHILD): FieldPolicy(allow=frozenset({
        "emergency_contacts", "medical_info", "dietary_restrictions", "special_needs",
    })),
    (UserRole.TEACHER, ResourceKind.CHILD): FieldPolicy(allow=frozenset({
        "classroom", "schedule", "notes", "special_needs", "dietary_restrictions",
    })),
    (UserRole.TEACHER, ResourceKind.ACTIVITY): FieldPolicy(deny=frozenset({"teacher_id"})),
    (UserRole.TEACHER, ResourceKind.CALENDAR_EVENT): FieldPolicy(deny=frozenset({"organizer_id"})),
    (UserRole.TEACHER, ResourceKind.PROGRESS_REPORT): FieldPolicy(deny=frozenset({
        "teacher_id", "child_id", "parent_feedback",
    })),
    (UserRole.PARENT, ResourceKind.PROGRESS_REPORT): FieldPolicy(allow=frozenset({"parent_feedback"})),
    (UserRole.FINANCE, ResourceKind.TRANSACTION): FieldPolicy(deny=frozenset({
        "status", "approval_notes",
    })),
    (UserRole.STAFF, ResourceKind.INVENTORY_ITEM): ANY_FIELD,
}

_SELF_UPDATE_FIELDS = FieldPolicy(allow=frozenset({"first_name", "last_name", "phone", "address"}))


def field_policy(actor: Actor, kind: ResourceKind) -> FieldPolicy:
    if actor.is_admin:
        return ANY_FIELD
    if kind == ResourceKind.USER:
        return _SELF_UPDATE_FIELDS
    return UPDATE_FIELDS.get((actor.role, kind), FieldPolicy(allow=frozenset()))


def project_update(actor: Actor, kind: ResourceKind, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the payload fields the actor may write; drop the rest silently"""
    policy = field_policy(actor, kind)
    projected = {}
    dropped = []
    for name, value in payload.items():
        if name not in PROTECTED_FIELDS and policy.permits(name):
            projected[name] = value
        else:
            dropped.append(name)
    if dropped:
        logger.debug(
            f"Dropped fields {sorted(dropped)} from {kind.value} update",
            extra={"actor_id": actor.id},
        )
    return projected
