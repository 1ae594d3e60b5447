"""Services package — all business logic lives here, never in routers.

Files:
  registrar.py     — create/update protocol shared by every record kind
  uniqueness.py    — natural-key pre-check used by the registrar
  uploader.py      — attachment uploads and orphan handling
  vendor.py        — VendorService (natural key: phone)
  bank_account.py  — BankAccountService (natural key: account_number)

Rule: routers call services, services call repositories and the attachment
      store. No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
