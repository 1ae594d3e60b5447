"""Bank account registration router.

Pattern:
  1. Declare the multipart body (form fields + passbook photo) so it is validated and documented
  2. Instantiate the service with the DB session and the shared attachment store
  3. Call the service and return the stored row
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Path, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.attachments import USER_ID_PATTERN
from app.db.base import get_db
from app.routers.deps import get_attachment_store, present, read_record_form
from app.schemas.bank_account import BankAccountCreate, BankAccountOut, BankAccountUpdate
from app.services.bank_account import BankAccountService
from app.storage.base import AttachmentStore

router = APIRouter(prefix="/bank-accounts", tags=["Bank Accounts"])


# ------------------------------------------------------------------
# Helper: instantiate service with session + shared store
# ------------------------------------------------------------------

def _svc(
    session: AsyncSession = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store),
) -> BankAccountService:
    return BankAccountService(session, store)


# ------------------------------------------------------------------
# Form bodies
# ------------------------------------------------------------------

def _account_fields(
    account_holder_name: str | None = Form(None),
    ifsc_code: str | None = Form(None),
    bank_name: str | None = Form(None),
    branch_name: str | None = Form(None),
    upi_id: str | None = Form(None),
) -> dict[str, str]:
    return present(
        account_holder_name=account_holder_name,
        ifsc_code=ifsc_code,
        bank_name=bank_name,
        branch_name=branch_name,
        upi_id=upi_id,
    )


def _create_fields(
    user_id: str = Form(...),
    account_number: str = Form(...),
    details: dict[str, str] = Depends(_account_fields),
) -> dict[str, str]:
    return {"user_id": user_id, "account_number": account_number, **details}


def _update_fields(
    user_id: str | None = Form(None, description="Ignored; the path identifies the account"),
    account_number: str | None = Form(None),
    details: dict[str, str] = Depends(_account_fields),
) -> dict[str, str]:
    return {**present(user_id=user_id, account_number=account_number), **details}


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("", response_model=BankAccountOut)
async def create_bank_account(
    request: Request,
    fields: dict[str, str] = Depends(_create_fields),
    passbook_photo: UploadFile | str | None = File(None),
    svc: BankAccountService = Depends(_svc),
):
    """Register a bank account with an optional passbook photo."""
    body, files = await read_record_form(
        request, BankAccountCreate, fields, {"passbook_photo": passbook_photo}
    )
    account = await svc.create(body.model_dump(exclude_none=True), files)
    return BankAccountOut.model_validate(account)


@router.get("", response_model=list[BankAccountOut])
async def list_bank_accounts(svc: BankAccountService = Depends(_svc)):
    return [BankAccountOut.model_validate(a) for a in await svc.list_all()]


@router.get("/{user_id}", response_model=BankAccountOut)
async def get_bank_account(
    user_id: str = Path(pattern=USER_ID_PATTERN),
    svc: BankAccountService = Depends(_svc),
):
    return BankAccountOut.model_validate(await svc.get(user_id))


@router.put("/{user_id}", response_model=BankAccountOut)
async def update_bank_account(
    request: Request,
    user_id: str = Path(pattern=USER_ID_PATTERN),
    fields: dict[str, str] = Depends(_update_fields),
    passbook_photo: UploadFile | str | None = File(None),
    svc: BankAccountService = Depends(_svc),
):
    """Update a bank account. Without a new passbook file the stored URL is kept."""
    body, files = await read_record_form(
        request, BankAccountUpdate, fields, {"passbook_photo": passbook_photo}
    )
    account = await svc.update(user_id, body.model_dump(exclude_unset=True), files)
    return BankAccountOut.model_validate(account)
