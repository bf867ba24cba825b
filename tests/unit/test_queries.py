"""Unit tests for read-side queries and the bank account guard"""

from datetime import date

from registration_admin.domain.bank_accounts import BankAccountService
from registration_admin.domain.models import Tables
from registration_admin.domain.queries import RegistrationQueries
from registration_admin.domain.registrations import RegistrationCoordinator
from registration_admin.domain.results import ErrorKind
from registration_admin.infrastructure.database.models import PaymentTransaction, Prospectus, Registration


async def test_get_registration_includes_related_rows(store, existing_registration):
    result = await RegistrationQueries(store).get_registration(42)

    assert result.ok
    assert result.value["transaction"]["id"] == 9
    assert result.value["prospectus"]["client_name"] == "Northwind"
    assert result.value["bank_account"] is None


async def test_get_registration_not_found(store):
    result = await RegistrationQueries(store).get_registration(404)

    assert result.error.kind is ErrorKind.NOT_FOUND


async def test_list_registrations_newest_first(store, transaction_fields, prospectus, existing_registration):
    await RegistrationCoordinator(store).create(transaction_fields, {"prospectus_id": prospectus, "total_amount": 10})

    result = await RegistrationQueries(store).list_registrations()

    assert result.value["total"] == 2
    assert all(item["transaction"] is not None for item in result.value["items"])


async def test_list_assigned_only_returns_registered(store, existing_registration, transaction_fields, prospectus):
    coordinator = RegistrationCoordinator(store)
    created = await coordinator.create(
        transaction_fields, {"prospectus_id": prospectus, "total_amount": 10, "assigned_to": 3}
    )
    await coordinator.assign(42, 3)

    result = await RegistrationQueries(store).list_assigned(3)

    assert [item["id"] for item in result.value] == [42]
    assert created.value.registration["id"] != 42


async def test_list_queries_report_store_errors(store):
    store.fail_on("find", Tables.TRANSACTIONS)

    result = await RegistrationQueries(store).list_transactions()

    assert result.error.kind is ErrorKind.STORE


async def test_bank_account_delete_blocked_while_linked(store, bank_account, existing_registration):
    await RegistrationCoordinator(store).update(42, {"bank_id": bank_account}, {})

    result = await BankAccountService(store).delete_account(bank_account)

    assert result.error.kind is ErrorKind.VALIDATION
    assert await store.inner.get(Tables.BANK_ACCOUNTS, bank_account) is not None


async def test_bank_account_delete_when_unlinked(store, bank_account):
    result = await BankAccountService(store).delete_account(bank_account)

    assert result.ok
    assert await store.inner.get(Tables.BANK_ACCOUNTS, bank_account) is None


async def test_bank_account_create_validates_required_fields(store):
    result = await BankAccountService(store).create_account({"account_name": "Ops"})

    assert result.error.kind is ErrorKind.VALIDATION
    assert store.calls == []


async def test_bank_account_create_rejects_unknown_type(store):
    result = await BankAccountService(store).create_account({
        "account_name": "Ops",
        "account_holder_name": "Acme",
        "account_number": "1",
        "ifsc_code": "X",
        "bank": "HDFC",
        "account_type": "Crypto",
    })

    assert result.error.kind is ErrorKind.VALIDATION


async def test_list_by_entity_returns_owned_registrations_with_related_rows(store, seed, bank_account, existing_registration):
    seed(
        Prospectus(id=20, entity_id=5, client_name="Initech"),
        Prospectus(id=21, entity_id=5, client_name="Umbrella"),
        Prospectus(id=22, entity_id=6, client_name="Hooli"),
        PaymentTransaction(id=30, transaction_type="upi", amount=100, transaction_date=date(2024, 4, 1)),
        PaymentTransaction(id=31, transaction_type="upi", amount=200, transaction_date=date(2024, 4, 2)),
        PaymentTransaction(id=32, transaction_type="upi", amount=300, transaction_date=date(2024, 4, 3)),
    )
    seed(
        Registration(id=60, prospectus_id=20, transaction_id=30, bank_id=bank_account, status="pending"),
        Registration(id=61, prospectus_id=21, transaction_id=31, status="pending"),
        Registration(id=62, prospectus_id=22, transaction_id=32, status="pending"),
    )

    result = await RegistrationQueries(store).list_by_entity(5)

    assert result.ok
    assert [item["id"] for item in result.value] == [61, 60]
    first_owned = result.value[1]
    assert first_owned["prospectus"]["client_name"] == "Initech"
    assert first_owned["bank_account"]["id"] == bank_account
    assert first_owned["transaction"]["amount"] == 100


async def test_list_by_entity_without_prospectuses_is_empty(store, existing_registration):
    result = await RegistrationQueries(store).list_by_entity(99)

    assert result.ok
    assert result.value == []
