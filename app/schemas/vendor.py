"""Vendor Pydantic schemas (form bodies and response model).

Photo fields normally arrive as file parts and are stored as URLs. A plain
text value for a photo field is accepted as the URL itself; a file sent for
the same field wins.
"""


from datetime import datetime

from pydantic import Field

from app.core.attachments import USER_ID_PATTERN
from app.schemas.common import RecordForm, RecordOut

class VendorCreate(RecordForm):
    user_id: str = Field(pattern=USER_ID_PATTERN)
    phone: str = Field(min_length=1, max_length=20)
    name: str | None = None
    business_name: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = Field(default=None, max_length=10)
    aadhar_number: str | None = Field(default=None, max_length=12)
    personal_photo: str | None = Field(default=None, max_length=1024)
    aadhar_photo: str | None = Field(default=None, max_length=1024)
    cart_photo: str | None = Field(default=None, max_length=1024)

class VendorUpdate(RecordForm):
    user_id: str | None = None  # accepted but ignored; the path identifies the record
    phone: str | None = Field(default=None, min_length=1, max_length=20)
    name: str | None = None
    business_name: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = Field(default=None, max_length=10)
    aadhar_number: str | None = Field(default=None, max_length=12)
    personal_photo: str | None = Field(default=None, max_length=1024)
    aadhar_photo: str | None = Field(default=None, max_length=1024)
    cart_photo: str | None = Field(default=None, max_length=1024)

class VendorOut(RecordOut):
    user_id: str
    phone: str
    name: str | None = None
    business_name: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    aadhar_number: str | None = None
    personal_photo: str | None = None
    aadhar_photo: str | None = None
    cart_photo: str | None = None
    created_at: datetime
    updated_at: datetime
