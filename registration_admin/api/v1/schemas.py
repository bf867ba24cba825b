"""Pydantic schemas for API request validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from typing import Any, Optional


class TransactionFields(BaseModel):
    """Transaction part of a registration request body"""

    model_config = ConfigDict(extra="ignore")

    transaction_type: Optional[str] = None
    transaction_id: Optional[str] = Field(None, description="External payment reference")
    amount: Optional[float] = None
    transaction_date: Optional[date] = None
    additional_info: Optional[str] = None
    entity_id: Optional[int] = Field(None, description="Staff member who recorded the payment")


class RegistrationUpdateRequest(TransactionFields):
    """Request body for PUT /registration/{id}"""

    services: Optional[Any] = None
    init_amount: Optional[float] = None
    accept_amount: Optional[float] = None
    discount: Optional[float] = None
    total_amount: Optional[float] = None
    accept_period: Optional[str] = None
    pub_period: Optional[str] = None
    bank_id: Optional[int] = None
    status: Optional[str] = None
    month: Optional[str] = None
    year: Optional[str] = None
    notes: Optional[str] = None


class RegistrationCreateRequest(RegistrationUpdateRequest):
    """Request body for POST /registration; required fields are checked by the coordinator"""

    prospectus_id: Optional[int] = None
    assigned_to: Optional[int] = None
    registered_by: Optional[int] = None
    client_id: Optional[str] = None


class ApproveRequest(TransactionFields):
    """Request body for PUT /registration/approve/{id}"""

    assigned_to: Optional[int] = None


class AssignRequest(BaseModel):
    """Request body for PUT /registration/{id}/assign"""

    assigned_to: Optional[int] = None


class BankAccountCreateRequest(BaseModel):
    """Request body for POST /bank-accounts"""

    account_name: Optional[str] = None
    account_holder_name: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    account_type: Optional[str] = None
    bank: Optional[str] = None
    upi_id: Optional[str] = None
    branch: Optional[str] = None
