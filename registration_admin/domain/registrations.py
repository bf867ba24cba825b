"""Registration saga coordinator - keeps registration, transaction and prospectus consistent"""

import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from registration_admin.domain.models import RegistrationBundle, Tables
from registration_admin.domain.ports import EntityStore
from registration_admin.domain.results import CoordinatorError, Result
from registration_admin.domain.saga import SagaOutcome, SagaRunner, SagaState, SagaStep
from registration_admin.domain.status import (
    INITIAL_STATUS,
    approval_patch,
    assignment_patch,
    can_set_admin_assigned,
    can_transition,
    parse_status,
    prospectus_flag_patch,
)
from registration_admin.infrastructure.observability.logging import log_saga_outcome
from registration_admin.infrastructure.observability.metrics import record_saga

AMOUNT_FIELDS = ("init_amount", "accept_amount", "discount", "total_amount")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def validate_creation(transaction_fields: Dict[str, Any], registration_fields: Dict[str, Any]) -> Optional[CoordinatorError]:
    """
    Check a create request before any store call.

    Requirements:
    - prospectus_id present
    - total_amount present
    - amounts numeric when given
    - status, when given, a known status
    """
    if registration_fields.get("prospectus_id") in (None, ""):
        return CoordinatorError.validation("prospectus_id is required")
    if registration_fields.get("total_amount") is None:
        return CoordinatorError.validation("total_amount is required")

    error = _validate_amounts(transaction_fields, registration_fields)
    if error:
        return error

    status = registration_fields.get("status")
    if status is not None and parse_status(status) is None:
        return CoordinatorError.validation(f"Unknown registration status: {status}")
    return None


def _validate_amounts(transaction_fields: Dict[str, Any], registration_fields: Dict[str, Any]) -> Optional[CoordinatorError]:
    for name in AMOUNT_FIELDS:
        value = registration_fields.get(name)
        if value is not None and not _is_number(value):
            return CoordinatorError.validation(f"{name} must be a number")
    amount = transaction_fields.get("amount")
    if amount is not None and not _is_number(amount):
        return CoordinatorError.validation("amount must be a number")
    return None


def _transaction_record(fields: Dict[str, Any]) -> Dict[str, Any]:
    record = dict(fields)
    if record.get("amount") is None:
        record["amount"] = 0
    return record


class RegistrationCoordinator:
    """
    Runs the create/update/delete/approve/assign sagas against an entity store.

    The store is injected and owned by the application bootstrap. Every
    operation returns a ``Result``; store failures never escape as exceptions.
    """

    def __init__(self, store: EntityStore):
        self.store = store

    async def create(
        self,
        transaction_fields: Dict[str, Any],
        registration_fields: Dict[str, Any],
    ) -> Result[RegistrationBundle]:
        """
        Create a transaction, then the registration that owns it, then flag the prospectus.

        Flow:
        1. Validate (no store call on failure)
        2. Insert transaction
        3. Insert registration linked to it; on failure delete the transaction
        4. Set prospectus.isregistered (best-effort)
        """
        started = time.time()
        error = validate_creation(transaction_fields, registration_fields)
        if error:
            return self._finish("create", None, Result.failure(error), started)

        transaction_record = _transaction_record(transaction_fields)
        registration_record = dict(registration_fields)
        if registration_record.get("status") is None:
            registration_record["status"] = INITIAL_STATUS.value
        prospectus_id = registration_record["prospectus_id"]

        async def insert_transaction(state: SagaState) -> None:
            state.data["transaction"] = await self.store.insert(Tables.TRANSACTIONS, transaction_record)

        async def delete_transaction(state: SagaState) -> None:
            await self.store.delete(Tables.TRANSACTIONS, state.data["transaction"]["id"])

        async def insert_registration(state: SagaState) -> None:
            record = {**registration_record, "transaction_id": state.data["transaction"]["id"]}
            state.data["registration"] = await self.store.insert(Tables.REGISTRATION, record)

        async def flag_prospectus(state: SagaState) -> Optional[CoordinatorError]:
            updated = await self.store.update(Tables.PROSPECTUS, prospectus_id, prospectus_flag_patch(True))
            if updated is None:
                return CoordinatorError.not_found(f"Prospectus {prospectus_id} not found")
            return None

        outcome = await SagaRunner("create_registration").run([
            SagaStep("insert_transaction", insert_transaction, compensation=delete_transaction),
            SagaStep("insert_registration", insert_registration),
            SagaStep("flag_prospectus", flag_prospectus, best_effort=True),
        ])

        registration = outcome.state.data.get("registration")
        if not outcome.ok:
            result = Result.failure(outcome.error, degraded=outcome.state.degraded)
        else:
            bundle = RegistrationBundle(registration, outcome.state.data["transaction"])
            result = Result.success(bundle, degraded=outcome.state.degraded)
        return self._finish("create", registration["id"] if registration else None, result, started, outcome)

    async def delete(self, registration_id: Any) -> Result[None]:
        """
        Delete the transaction, then the registration, then clear the prospectus flag.

        The transaction goes first so a registration is never left pointing at
        nothing. If the registration delete then fails the transaction stays
        deleted; it cannot be rebuilt.
        """
        started = time.time()

        async def fetch_registration(state: SagaState) -> Optional[CoordinatorError]:
            current = await self.store.get(
                Tables.REGISTRATION, registration_id, select=("transaction_id", "prospectus_id")
            )
            if current is None:
                return CoordinatorError.not_found("Registration not found")
            state.data["current"] = current
            return None

        async def delete_transaction(state: SagaState) -> None:
            transaction_id = state.data["current"].get("transaction_id")
            if transaction_id is not None:
                await self.store.delete(Tables.TRANSACTIONS, transaction_id)
                state.data["transaction_deleted"] = True

        async def delete_registration(state: SagaState) -> None:
            await self.store.delete(Tables.REGISTRATION, registration_id)

        async def reset_prospectus(state: SagaState) -> Optional[CoordinatorError]:
            prospectus_id = state.data["current"].get("prospectus_id")
            if prospectus_id is None:
                return None
            updated = await self.store.update(Tables.PROSPECTUS, prospectus_id, prospectus_flag_patch(False))
            if updated is None:
                return CoordinatorError.not_found(f"Prospectus {prospectus_id} not found")
            return None

        outcome = await SagaRunner("delete_registration").run([
            SagaStep("fetch_registration", fetch_registration),
            SagaStep("delete_transaction", delete_transaction),
            SagaStep("delete_registration", delete_registration),
            SagaStep("reset_prospectus", reset_prospectus, best_effort=True),
        ])

        if outcome.failed_step == "delete_registration" and outcome.state.data.get("transaction_deleted"):
            logging.warning(
                "Registration kept after its transaction was deleted",
                extra={
                    "registration_id": registration_id,
                    "transaction_id": outcome.state.data["current"].get("transaction_id"),
                    "step": "delete_registration",
                },
            )

        if outcome.ok:
            result: Result[None] = Result.success(degraded=outcome.state.degraded)
        else:
            result = Result.failure(outcome.error, degraded=outcome.state.degraded)
        return self._finish("delete", registration_id, result, started, outcome)

    async def update(
        self,
        registration_id: Any,
        registration_fields: Dict[str, Any],
        transaction_fields: Dict[str, Any],
    ) -> Result[RegistrationBundle]:
        """
        Patch the registration, then its transaction.

        The two writes are independent: if the transaction patch fails the
        registration keeps its new values and the result carries both the
        updated registration and the error.
        """
        started = time.time()
        error = _validate_amounts(transaction_fields, registration_fields)
        if error:
            return self._finish("update", registration_id, Result.failure(error), started)

        requested_status = registration_fields.get("status")
        if requested_status is not None and parse_status(requested_status) is None:
            error = CoordinatorError.validation(f"Unknown registration status: {requested_status}")
            return self._finish("update", registration_id, Result.failure(error), started)

        async def fetch_registration(state: SagaState) -> Optional[CoordinatorError]:
            current = await self.store.get(
                Tables.REGISTRATION, registration_id, select=("transaction_id", "status", "admin_assigned")
            )
            if current is None:
                return CoordinatorError.not_found("Registration not found")
            if requested_status is not None and not can_transition(current.get("status"), requested_status):
                return CoordinatorError.validation(
                    f"Cannot move registration from {current.get('status')} to {requested_status}"
                )
            if "admin_assigned" in registration_fields and not can_set_admin_assigned(
                current.get("admin_assigned"), registration_fields["admin_assigned"]
            ):
                return CoordinatorError.validation("admin_assigned cannot be cleared once set")
            state.data["current"] = current
            return None

        async def update_registration(state: SagaState) -> Optional[CoordinatorError]:
            patch = {**registration_fields, "updated_at": _now()}
            updated = await self.store.update(Tables.REGISTRATION, registration_id, patch)
            if updated is None:
                return CoordinatorError.not_found("Registration not found")
            state.data["registration"] = updated
            return None

        outcome = await SagaRunner("update_registration").run([
            SagaStep("fetch_registration", fetch_registration),
            SagaStep("update_registration", update_registration),
            SagaStep("update_transaction", self._transaction_updater(transaction_fields)),
        ])
        return self._finish("update", registration_id, self._bundle_result(outcome), started, outcome)

    async def approve(
        self,
        registration_id: Any,
        transaction_fields: Dict[str, Any],
        assigned_to: Optional[Any] = None,
    ) -> Result[RegistrationBundle]:
        """
        Move a registration to ``registered`` and apply transaction corrections.

        Same two-write shape as ``update``: a failed transaction patch does
        not undo the status change.
        """
        started = time.time()
        error = _validate_amounts(transaction_fields, {})
        if error:
            return self._finish("approve", registration_id, Result.failure(error), started)

        async def fetch_registration(state: SagaState) -> Optional[CoordinatorError]:
            current = await self.store.get(Tables.REGISTRATION, registration_id, select=("transaction_id",))
            if current is None:
                return CoordinatorError.not_found("Registration not found")
            state.data["current"] = current
            return None

        async def mark_registered(state: SagaState) -> Optional[CoordinatorError]:
            updated = await self.store.update(Tables.REGISTRATION, registration_id, approval_patch(assigned_to))
            if updated is None:
                return CoordinatorError.not_found("Registration not found")
            state.data["registration"] = updated
            return None

        outcome = await SagaRunner("approve_registration").run([
            SagaStep("fetch_registration", fetch_registration),
            SagaStep("mark_registered", mark_registered),
            SagaStep("update_transaction", self._transaction_updater(transaction_fields)),
        ])
        return self._finish("approve", registration_id, self._bundle_result(outcome), started, outcome)

    async def assign(self, registration_id: Any, assigned_to: Any) -> Result[Dict[str, Any]]:
        """Hand a registration to a staff member with a single registration write"""
        started = time.time()
        if assigned_to is None or assigned_to == "":
            error = CoordinatorError.validation("assigned_to is required")
            return self._finish("assign", registration_id, Result.failure(error), started)

        async def assign_registration(state: SagaState) -> Optional[CoordinatorError]:
            updated = await self.store.update(Tables.REGISTRATION, registration_id, assignment_patch(assigned_to))
            if updated is None:
                return CoordinatorError.not_found("Registration not found")
            state.data["registration"] = updated
            return None

        outcome = await SagaRunner("assign_registration").run([
            SagaStep("assign_registration", assign_registration),
        ])
        if outcome.ok:
            result = Result.success(outcome.state.data["registration"])
        else:
            result = Result.failure(outcome.error)
        return self._finish("assign", registration_id, result, started, outcome)

    def _transaction_updater(self, transaction_fields: Dict[str, Any]):
        """Build the step that patches the transaction fetched in step one"""

        async def update_transaction(state: SagaState) -> Optional[CoordinatorError]:
            transaction_id = state.data["current"].get("transaction_id")
            if transaction_id is None:
                return CoordinatorError.not_found("Transaction not found")
            patch = {**transaction_fields, "updated_at": _now()}
            if "amount" in patch and patch["amount"] is None:
                patch["amount"] = 0
            updated = await self.store.update(Tables.TRANSACTIONS, transaction_id, patch)
            if updated is None:
                return CoordinatorError.not_found("Transaction not found")
            state.data["transaction"] = updated
            return None

        return update_transaction

    @staticmethod
    def _bundle_result(outcome: SagaOutcome) -> Result[RegistrationBundle]:
        registration = outcome.state.data.get("registration")
        bundle = RegistrationBundle(registration, outcome.state.data.get("transaction"))
        if outcome.ok:
            return Result.success(bundle)
        # Partial write: hand back whatever was written alongside the error
        return Result.failure(outcome.error, value=bundle if registration else None)

    @staticmethod
    def _finish(
        operation: str,
        registration_id: Any,
        result: Result,
        started: float,
        outcome: Optional[SagaOutcome] = None,
    ) -> Result:
        duration_ms = (time.time() - started) * 1000
        record_saga(operation, result.ok)
        log_saga_outcome(
            operation,
            registration_id,
            "success" if result.ok else result.error.kind.value,
            outcome.failed_step if outcome else None,
            duration_ms,
            degraded=result.degraded,
        )
        return result
