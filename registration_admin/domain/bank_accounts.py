"""Bank account reference data with the registration link guard"""

from typing import Any, Dict, List

from registration_admin.domain.exceptions import StoreError
from registration_admin.domain.models import Record, Tables
from registration_admin.domain.ports import EntityStore
from registration_admin.domain.results import CoordinatorError, Result

REQUIRED_FIELDS = ("account_name", "account_holder_name", "account_number", "ifsc_code", "bank")
ACCOUNT_TYPES = ("Savings", "Current", "Other")


class BankAccountService:
    """Single-table access to bank accounts"""

    def __init__(self, store: EntityStore):
        self.store = store

    async def list_accounts(self) -> Result[List[Record]]:
        try:
            accounts = await self.store.find(Tables.BANK_ACCOUNTS, order_by="created_at", descending=True)
        except StoreError as e:
            return Result.failure(CoordinatorError.store(str(e)))
        return Result.success(accounts)

    async def create_account(self, fields: Dict[str, Any]) -> Result[Record]:
        missing = [name for name in REQUIRED_FIELDS if not fields.get(name)]
        if missing:
            return Result.failure(CoordinatorError.validation(f"Missing required fields: {', '.join(missing)}"))

        account_type = fields.get("account_type")
        if account_type and account_type not in ACCOUNT_TYPES:
            return Result.failure(CoordinatorError.validation("Account type must be Savings, Current, or Other"))

        try:
            account = await self.store.insert(Tables.BANK_ACCOUNTS, dict(fields))
        except StoreError as e:
            return Result.failure(CoordinatorError.store(str(e)))
        return Result.success(account)

    async def delete_account(self, account_id: Any) -> Result[None]:
        """
        Delete a bank account unless a registration still points at it.

        The check and the delete are two separate store calls; a registration
        created in between is not detected.
        """
        try:
            linked = await self.store.find(Tables.REGISTRATION, filters={"bank_id": account_id})
            if linked:
                return Result.failure(
                    CoordinatorError.validation("Cannot delete bank account as it is linked to registrations")
                )
            await self.store.delete(Tables.BANK_ACCOUNTS, account_id)
        except StoreError as e:
            return Result.failure(CoordinatorError.store(str(e)))
        return Result.success()
