"""Routers package — HTTP endpoint definitions.

Files:
  vendors.py        — /vendors (create, list, get, update)
  bank_accounts.py  — /bank-accounts (create, list, get, update)
  deps.py           — shared store dependency + multipart parsing

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to app/services/.
"""
