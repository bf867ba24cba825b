"""Reference data endpoints - transactions listing and bank accounts"""

from fastapi import APIRouter, Depends, Request

from registration_admin.api.v1.schemas import BankAccountCreateRequest
from registration_admin.api.dependencies import get_bank_accounts, get_queries, get_request_id
from registration_admin.api.responses import result_response, unexpected_error
from registration_admin.domain.bank_accounts import BankAccountService
from registration_admin.domain.queries import RegistrationQueries

router = APIRouter()


@router.get("/transactions")
async def list_transactions(request: Request, queries: RegistrationQueries = Depends(get_queries)):
    try:
        return result_response(await queries.list_transactions())
    except Exception as e:
        return unexpected_error("list_transactions", e, get_request_id(request))


@router.get("/bank-accounts")
async def list_bank_accounts(request: Request, accounts: BankAccountService = Depends(get_bank_accounts)):
    try:
        return result_response(await accounts.list_accounts())
    except Exception as e:
        return unexpected_error("list_bank_accounts", e, get_request_id(request))


@router.post("/bank-accounts", status_code=201)
async def create_bank_account(
    body: BankAccountCreateRequest,
    request: Request,
    accounts: BankAccountService = Depends(get_bank_accounts),
):
    try:
        result = await accounts.create_account(body.model_dump(exclude_none=True))
        return result_response(result, success_status=201)
    except Exception as e:
        return unexpected_error("create_bank_account", e, get_request_id(request))


@router.delete("/bank-accounts/{account_id}")
async def delete_bank_account(
    account_id: int,
    request: Request,
    accounts: BankAccountService = Depends(get_bank_accounts),
):
    """Refused while any registration still references the account"""
    try:
        result = await accounts.delete_account(account_id)
        message = "Bank account deleted successfully" if result.ok else None
        return result_response(result, message=message)
    except Exception as e:
        return unexpected_error("delete_bank_account", e, get_request_id(request))
