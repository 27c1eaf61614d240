from sqlalchemy import (
    String, ForeignKey, Boolean, Numeric, Enum, Text, DateTime, Date
)
from sqlalchemy.orm import Mapped, mapped_column
from datetime import date, datetime
from decimal import Decimal
from qrmenu.db import Base
from qrmenu.models.common import IdMixin, TSMMixin
from qrmenu.util.validation import (
    UserRole, SubscriptionPlan, SubscriptionStatus, PaymentMethod, PaymentStatus,
)

# ── Tenants ─────────────────────────────────────────────────────────────────
class Tenant(Base, IdMixin, TSMMixin):
    __tablename__ = "tenant"
    slug: Mapped[str] = mapped_column(String(80), unique=True)
    business_name: Mapped[str] = mapped_column(String(160))
    business_name_ar: Mapped[str | None] = mapped_column(String(160))
    owner_name: Mapped[str] = mapped_column(String(160))
    owner_email: Mapped[str] = mapped_column(String(160))
    owner_phone: Mapped[str | None] = mapped_column(String(20))
    address: Mapped[str | None] = mapped_column(Text)
    subscription_plan: Mapped[SubscriptionPlan] = mapped_column(Enum(SubscriptionPlan), default=SubscriptionPlan.BASIC)
    subscription_status: Mapped[SubscriptionStatus] = mapped_column(Enum(SubscriptionStatus), default=SubscriptionStatus.ACTIVE)
    monthly_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    currency: Mapped[str] = mapped_column(String(3))
    default_language: Mapped[str] = mapped_column(String(5), default="en")   # en | ar
    joined_on: Mapped[date] = mapped_column(Date)
    next_payment_date: Mapped[date | None] = mapped_column(Date)
    created_by_id: Mapped[str | None] = mapped_column(String(36))

# ── Identity ────────────────────────────────────────────────────────────────
class User(Base, IdMixin, TSMMixin):
    __tablename__ = "user"
    # NULL for platform users (super admins)
    tenant_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("tenant.id"))
    email: Mapped[str] = mapped_column(String(160), unique=True)
    first_name: Mapped[str] = mapped_column(String(80))
    last_name: Mapped[str] = mapped_column(String(80), default="")
    pass_hash: Mapped[str] = mapped_column(String(200))
    role: Mapped[UserRole] = mapped_column(Enum(UserRole))
    active: Mapped[bool] = mapped_column(Boolean, default=True)

# ── Billing ─────────────────────────────────────────────────────────────────
class PaymentRecord(Base, IdMixin, TSMMixin):
    __tablename__ = "payment_record"
    tenant_id: Mapped[str] = mapped_column(String(36), ForeignKey("tenant.id"), index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    currency: Mapped[str] = mapped_column(String(3))
    method: Mapped[PaymentMethod] = mapped_column(Enum(PaymentMethod))
    status: Mapped[PaymentStatus] = mapped_column(Enum(PaymentStatus), default=PaymentStatus.PENDING)
    description: Mapped[str | None] = mapped_column(Text)
    invoice_number: Mapped[str] = mapped_column(String(60), unique=True)
    due_date: Mapped[date] = mapped_column(Date)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)
    created_by_id: Mapped[str | None] = mapped_column(String(36))

# ── Settings & audit ────────────────────────────────────────────────────────
class SystemSettings(Base, IdMixin, TSMMixin):
    __tablename__ = "system_settings"
    data: Mapped[str | None] = mapped_column(Text)   # JSON of PlatformSettings
    updated_by_id: Mapped[str | None] = mapped_column(String(36))

class AuditLog(Base, IdMixin, TSMMixin):
    __tablename__ = "audit_log"
    actor_user_id: Mapped[str] = mapped_column(String(36))
    entity: Mapped[str] = mapped_column(String(60))
    entity_id: Mapped[str] = mapped_column(String(36))
    action: Mapped[str] = mapped_column(String(60))
    reason: Mapped[str | None] = mapped_column(Text)
    before: Mapped[str | None] = mapped_column(Text)
    after: Mapped[str | None] = mapped_column(Text)
