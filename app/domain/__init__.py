"""Domain package — all ORM models are imported here so create_all sees them.

Folder intent:
  vendor.py        — Vendor records (natural key: phone)
  bank_account.py  — Bank account records (natural key: account_number)
  audit.py         — Immutable audit trail (never updated or deleted)
  mixins.py        — Shared TimestampMixin
"""

from app.domain.audit import AuditTrail
from app.domain.bank_account import BankAccount
from app.domain.vendor import Vendor

__all__ = [
    "AuditTrail",
    "BankAccount",
    "Vendor",
]
