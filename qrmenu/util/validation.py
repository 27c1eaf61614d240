"""
Enumerations shared across the API and the JSON codecs used for text columns.

Raw strings from tokens and request bodies are normalised exactly once,
through parse_enum / parse_user_role, so the rest of the code compares enum
members instead of spellings like 'super-admin' vs 'SUPER_ADMIN'.
"""
import json
from enum import Enum as PyEnum
from typing import TypeVar

from qrmenu.errors import InvalidArgument

class UserRole(PyEnum):
    SUPER_ADMIN = "SUPER_ADMIN"
    TENANT_ADMIN = "TENANT_ADMIN"
    TENANT_MANAGER = "TENANT_MANAGER"
    TENANT_STAFF = "TENANT_STAFF"

    @property
    def is_tenant_role(self) -> bool:
        return self is not UserRole.SUPER_ADMIN

class TenantRole(PyEnum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    STAFF = "STAFF"

    @property
    def user_role(self) -> UserRole:
        return UserRole[f"TENANT_{self.value}"]

class SubscriptionStatus(PyEnum):
    ACTIVE = "ACTIVE"
    GRACE_PERIOD = "GRACE_PERIOD"
    SUSPENDED = "SUSPENDED"
    CANCELLED = "CANCELLED"

class SubscriptionPlan(PyEnum):
    BASIC = "BASIC"
    PREMIUM = "PREMIUM"
    ENTERPRISE = "ENTERPRISE"

class PaymentMethod(PyEnum):
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    CREDIT_CARD = "CREDIT_CARD"
    DIGITAL_WALLET = "DIGITAL_WALLET"
    CHECK = "CHECK"
    OTHER = "OTHER"

class PaymentStatus(PyEnum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"

class AuditAction(PyEnum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"
    ROLE_CHANGE = "ROLE_CHANGE"
    SUSPEND = "SUSPEND"
    ACTIVATE = "ACTIVATE"
    PAYMENT_UPDATE = "PAYMENT_UPDATE"

E = TypeVar("E", bound=PyEnum)

def parse_enum(enum_cls: type[E], raw) -> E:
    """Case-insensitive lookup; '-' and spaces count as '_'."""
    if isinstance(raw, enum_cls):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidArgument(f"invalid {enum_cls.__name__}: {raw!r}")
    key = raw.strip().upper().replace("-", "_").replace(" ", "_")
    try:
        return enum_cls[key]
    except KeyError:
        raise InvalidArgument(f"invalid {enum_cls.__name__}: {raw!r}")

def parse_user_role(raw) -> UserRole:
    return parse_enum(UserRole, raw)

# ── JSON-in-text-column codecs ──────────────────────────────────────────────

def string_list_to_json(items) -> str:
    return json.dumps([str(i) for i in (items or [])], ensure_ascii=False)

def json_to_string_list(text: str | None) -> list[str]:
    """Never raises: None, malformed JSON or a non-list all decode to []."""
    if not text:
        return []
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return []
    if not isinstance(parsed, list):
        return []
    return [i for i in parsed if isinstance(i, str)]

def object_to_json(obj) -> str:
    return json.dumps(obj, ensure_ascii=False, default=str)

def json_to_object(text: str | None, default):
    if not text:
        return default
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return default
    if default is not None and not isinstance(parsed, type(default)):
        return default
    return parsed
