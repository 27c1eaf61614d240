# Importing the module registers tables with Base for create_all()
from .core import (  # noqa: F401
    Tenant, User, PaymentRecord, SystemSettings, AuditLog,
)

__all__ = ["Tenant", "User", "PaymentRecord", "SystemSettings", "AuditLog"]
