"""Bank account Pydantic schemas (form bodies and response model)."""


from datetime import datetime

from pydantic import Field

from app.core.attachments import USER_ID_PATTERN
from app.schemas.common import RecordForm, RecordOut

class BankAccountCreate(RecordForm):
    user_id: str = Field(pattern=USER_ID_PATTERN)
    account_number: str = Field(min_length=1, max_length=34)
    account_holder_name: str | None = None
    ifsc_code: str | None = Field(default=None, max_length=11)
    bank_name: str | None = None
    branch_name: str | None = None
    upi_id: str | None = None
    passbook_photo: str | None = Field(default=None, max_length=1024)

class BankAccountUpdate(RecordForm):
    user_id: str | None = None  # accepted but ignored; the path identifies the record
    account_number: str | None = Field(default=None, min_length=1, max_length=34)
    account_holder_name: str | None = None
    ifsc_code: str | None = Field(default=None, max_length=11)
    bank_name: str | None = None
    branch_name: str | None = None
    upi_id: str | None = None
    passbook_photo: str | None = Field(default=None, max_length=1024)

class BankAccountOut(RecordOut):
    user_id: str
    account_number: str
    account_holder_name: str | None = None
    ifsc_code: str | None = None
    bank_name: str | None = None
    branch_name: str | None = None
    upi_id: str | None = None
    passbook_photo: str | None = None
    created_at: datetime
    updated_at: datetime
