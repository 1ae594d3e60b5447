"""Pydantic schemas package.

Folder intent:
  common.py        — RecordForm / RecordOut bases + HealthResponse
  vendor.py        — Vendor form bodies and response model
  bank_account.py  — Bank account form bodies and response model
"""
