"""Bank account repository."""


from app.domain.bank_account import BankAccount
from app.repositories.base import BaseRepository


class BankAccountRepository(BaseRepository[BankAccount]):
    model = BankAccount
