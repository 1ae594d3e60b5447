"""SQLAlchemy ORM model for Vendors.

A vendor is identified by the caller-supplied ``user_id`` and must have a
unique ``phone``. The three photo columns hold public URLs of attachments
stored at ``{user_id}/vendor/<slot>.jpg``.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.mixins import TimestampMixin


class Vendor(Base, TimestampMixin):
    __tablename__ = "vendors"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    phone: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True)

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    business_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    pincode: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    aadhar_number: Mapped[Optional[str]] = mapped_column(String(12), nullable=True)

    # Attachment URLs
    personal_photo: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    aadhar_photo: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    cart_photo: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
