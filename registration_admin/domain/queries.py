"""Read-side queries over registrations and transactions"""

from typing import Any, Dict, List

from registration_admin.domain.exceptions import StoreError
from registration_admin.domain.models import Record, Tables
from registration_admin.domain.ports import EntityStore
from registration_admin.domain.results import CoordinatorError, Result
from registration_admin.domain.status import RegistrationStatus


class RegistrationQueries:
    """Listing and detail lookups; single reads, no coordination"""

    def __init__(self, store: EntityStore):
        self.store = store

    async def list_registrations(self) -> Result[Dict[str, Any]]:
        """All registrations, newest first, each with its transaction"""
        try:
            registrations = await self.store.find(Tables.REGISTRATION, order_by="created_at", descending=True)
            items = [await self._with_transaction(reg) for reg in registrations]
        except StoreError as e:
            return Result.failure(CoordinatorError.store(str(e)))
        return Result.success({"total": len(items), "items": items})

    async def get_registration(self, registration_id: Any) -> Result[Record]:
        """One registration with its transaction, prospectus and bank account"""
        try:
            registration = await self.store.get(Tables.REGISTRATION, registration_id)
            if registration is None:
                return Result.failure(CoordinatorError.not_found("Registration not found"))

            detail = await self._with_transaction(registration)
            detail["prospectus"] = await self._lookup(Tables.PROSPECTUS, registration.get("prospectus_id"))
            detail["bank_account"] = await self._lookup(Tables.BANK_ACCOUNTS, registration.get("bank_id"))
        except StoreError as e:
            return Result.failure(CoordinatorError.store(str(e)))
        return Result.success(detail)

    async def list_assigned(self, staff_id: Any) -> Result[List[Record]]:
        """Registered registrations handed to a staff member"""
        try:
            registrations = await self.store.find(
                Tables.REGISTRATION,
                filters={"assigned_to": staff_id, "status": RegistrationStatus.REGISTERED.value},
                order_by="created_at",
                descending=True,
            )
            items = []
            for registration in registrations:
                item = dict(registration)
                item["prospectus"] = await self._lookup(Tables.PROSPECTUS, registration.get("prospectus_id"))
                items.append(item)
        except StoreError as e:
            return Result.failure(CoordinatorError.store(str(e)))
        return Result.success(items)

    async def list_by_entity(self, entity_id: Any) -> Result[List[Record]]:
        """
        Registrations for every prospectus owned by one staff member (``prospectus.entity_id``).

        Each item carries its prospectus, bank account and transaction. Newest first
        across all of the owner's prospectuses.
        """
        try:
            prospectuses = await self.store.find(Tables.PROSPECTUS, filters={"entity_id": entity_id})
            items = []
            for prospectus in prospectuses:
                registrations = await self.store.find(Tables.REGISTRATION, filters={"prospectus_id": prospectus["id"]})
                for registration in registrations:
                    item = await self._with_transaction(registration)
                    item["prospectus"] = prospectus
                    item["bank_account"] = await self._lookup(Tables.BANK_ACCOUNTS, registration.get("bank_id"))
                    items.append(item)
        except StoreError as e:
            return Result.failure(CoordinatorError.store(str(e)))
        items.sort(key=lambda item: (item["created_at"], item["id"]), reverse=True)
        return Result.success(items)

    async def list_transactions(self) -> Result[List[Record]]:
        """All transactions, latest transaction date first"""
        try:
            transactions = await self.store.find(Tables.TRANSACTIONS, order_by="transaction_date", descending=True)
        except StoreError as e:
            return Result.failure(CoordinatorError.store(str(e)))
        return Result.success(transactions)

    async def _with_transaction(self, registration: Record) -> Record:
        item = dict(registration)
        item["transaction"] = await self._lookup(Tables.TRANSACTIONS, registration.get("transaction_id"))
        return item

    async def _lookup(self, table: str, record_id: Any):
        if record_id is None:
            return None
        return await self.store.get(table, record_id)
