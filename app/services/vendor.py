"""Vendor service."""


from app.core.attachments import VENDOR_CATEGORY
from app.domain.vendor import Vendor
from app.repositories.vendor import VendorRepository
from app.services.registrar import RecordRegistrar


class VendorService(RecordRegistrar[Vendor]):
    entity_name = "Vendor"
    repository_class = VendorRepository
    natural_key = "phone"
    category = VENDOR_CATEGORY
    duplicate_message = "Phone number already exists for another vendor"
