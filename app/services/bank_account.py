"""Bank account service — registration of payout accounts and passbook photos."""


from app.core.attachments import BANK_CATEGORY
from app.domain.bank_account import BankAccount
from app.repositories.bank_account import BankAccountRepository
from app.services.registrar import RecordRegistrar


class BankAccountService(RecordRegistrar[BankAccount]):
    entity_name = "Bank account"
    repository_class = BankAccountRepository
    natural_key = "account_number"
    category = BANK_CATEGORY
    duplicate_message = "Account number already exists"
