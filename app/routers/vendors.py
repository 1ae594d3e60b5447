"""Vendor registration router.

Pattern:
  1. Declare the multipart body (form fields + photo files) so it is validated and documented
  2. Instantiate the service with the DB session and the shared attachment store
  3. Call the service and return the stored row
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Path, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.attachments import USER_ID_PATTERN
from app.db.base import get_db
from app.routers.deps import get_attachment_store, present, read_record_form
from app.schemas.vendor import VendorCreate, VendorOut, VendorUpdate
from app.services.vendor import VendorService
from app.storage.base import AttachmentStore

router = APIRouter(prefix="/vendors", tags=["Vendors"])


# ------------------------------------------------------------------
# Helper: instantiate service with session + shared store
# ------------------------------------------------------------------

def _svc(
    session: AsyncSession = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store),
) -> VendorService:
    return VendorService(session, store)


# ------------------------------------------------------------------
# Form bodies
# ------------------------------------------------------------------

def _profile_fields(
    name: str | None = Form(None),
    business_name: str | None = Form(None),
    email: str | None = Form(None),
    address: str | None = Form(None),
    city: str | None = Form(None),
    state: str | None = Form(None),
    pincode: str | None = Form(None),
    aadhar_number: str | None = Form(None),
) -> dict[str, str]:
    return present(
        name=name,
        business_name=business_name,
        email=email,
        address=address,
        city=city,
        state=state,
        pincode=pincode,
        aadhar_number=aadhar_number,
    )


def _create_fields(
    user_id: str = Form(...),
    phone: str = Form(...),
    profile: dict[str, str] = Depends(_profile_fields),
) -> dict[str, str]:
    return {"user_id": user_id, "phone": phone, **profile}


def _update_fields(
    user_id: str | None = Form(None, description="Ignored; the path identifies the vendor"),
    phone: str | None = Form(None),
    profile: dict[str, str] = Depends(_profile_fields),
) -> dict[str, str]:
    return {**present(user_id=user_id, phone=phone), **profile}


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("", response_model=VendorOut)
async def create_vendor(
    request: Request,
    fields: dict[str, str] = Depends(_create_fields),
    personal_photo: UploadFile | str | None = File(None),
    aadhar_photo: UploadFile | str | None = File(None),
    cart_photo: UploadFile | str | None = File(None),
    svc: VendorService = Depends(_svc),
):
    """Register a vendor with optional personal, Aadhaar and cart photos."""
    body, files = await read_record_form(
        request,
        VendorCreate,
        fields,
        {"personal_photo": personal_photo, "aadhar_photo": aadhar_photo, "cart_photo": cart_photo},
    )
    vendor = await svc.create(body.model_dump(exclude_none=True), files)
    return VendorOut.model_validate(vendor)


@router.get("", response_model=list[VendorOut])
async def list_vendors(svc: VendorService = Depends(_svc)):
    return [VendorOut.model_validate(v) for v in await svc.list_all()]


@router.get("/{user_id}", response_model=VendorOut)
async def get_vendor(
    user_id: str = Path(pattern=USER_ID_PATTERN),
    svc: VendorService = Depends(_svc),
):
    return VendorOut.model_validate(await svc.get(user_id))


@router.put("/{user_id}", response_model=VendorOut)
async def update_vendor(
    request: Request,
    user_id: str = Path(pattern=USER_ID_PATTERN),
    fields: dict[str, str] = Depends(_update_fields),
    personal_photo: UploadFile | str | None = File(None),
    aadhar_photo: UploadFile | str | None = File(None),
    cart_photo: UploadFile | str | None = File(None),
    svc: VendorService = Depends(_svc),
):
    """Update a vendor. Photos without a new file keep their current URL."""
    body, files = await read_record_form(
        request,
        VendorUpdate,
        fields,
        {"personal_photo": personal_photo, "aadhar_photo": aadhar_photo, "cart_photo": cart_photo},
    )
    vendor = await svc.update(user_id, body.model_dump(exclude_unset=True), files)
    return VendorOut.model_validate(vendor)
