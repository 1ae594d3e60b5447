"""SQLAlchemy ORM model for vendor bank accounts."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.mixins import TimestampMixin


class BankAccount(Base, TimestampMixin):
    __tablename__ = "bank_accounts"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    account_number: Mapped[str] = mapped_column(
        String(34), nullable=False, unique=True, index=True
    )

    account_holder_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ifsc_code: Mapped[Optional[str]] = mapped_column(String(11), nullable=True)
    bank_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    branch_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    upi_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Attachment URL ({user_id}/bank/passbook.jpg)
    passbook_photo: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
