"""Registration endpoints - create, update, delete, approve, assign and lookups"""

from fastapi import APIRouter, Depends, Request

from registration_admin.api.v1.schemas import (
    ApproveRequest,
    AssignRequest,
    RegistrationCreateRequest,
    RegistrationUpdateRequest,
)
from registration_admin.api.dependencies import get_coordinator, get_queries, get_request_id
from registration_admin.api.responses import result_response, unexpected_error
from registration_admin.domain.models import REGISTRATION_UPDATE_FIELDS, TRANSACTION_FIELDS, split_payload
from registration_admin.domain.queries import RegistrationQueries
from registration_admin.domain.registrations import RegistrationCoordinator

router = APIRouter()


@router.post("/registration", status_code=201)
async def create_registration(
    body: RegistrationCreateRequest,
    request: Request,
    coordinator: RegistrationCoordinator = Depends(get_coordinator),
):
    """
    Create a registration together with its transaction.

    Flow:
    1. Insert the transaction
    2. Insert the registration pointing at it (transaction removed on failure)
    3. Mark the prospectus as registered (failure logged, request still succeeds)
    """
    try:
        transaction_fields, registration_fields = split_payload(body.model_dump(exclude_unset=True))
        result = await coordinator.create(transaction_fields, registration_fields)
        return result_response(result, success_status=201)
    except Exception as e:
        return unexpected_error("create_registration", e, get_request_id(request))


@router.put("/registration/approve/{registration_id}")
async def approve_registration(
    registration_id: int,
    body: ApproveRequest,
    request: Request,
    coordinator: RegistrationCoordinator = Depends(get_coordinator),
):
    """Mark a registration as registered and apply transaction corrections"""
    try:
        payload = body.model_dump(exclude_unset=True)
        transaction_fields = {k: v for k, v in payload.items() if k in TRANSACTION_FIELDS}
        result = await coordinator.approve(registration_id, transaction_fields, assigned_to=body.assigned_to)
        message = "Registration approved successfully" if result.ok else None
        return result_response(result, message=message)
    except Exception as e:
        return unexpected_error("approve_registration", e, get_request_id(request))


@router.put("/registration/{registration_id}/assign")
async def assign_registration(
    registration_id: int,
    body: AssignRequest,
    request: Request,
    coordinator: RegistrationCoordinator = Depends(get_coordinator),
):
    """Administrative hand-off to a staff member"""
    try:
        result = await coordinator.assign(registration_id, body.assigned_to)
        message = "Registration assigned successfully" if result.ok else None
        return result_response(result, message=message)
    except Exception as e:
        return unexpected_error("assign_registration", e, get_request_id(request))


@router.put("/registration/{registration_id}")
async def update_registration(
    registration_id: int,
    body: RegistrationUpdateRequest,
    request: Request,
    coordinator: RegistrationCoordinator = Depends(get_coordinator),
):
    """
    Update a registration and then its transaction.

    A failed transaction update is reported with the already-updated
    registration in ``data``.
    """
    try:
        transaction_fields, registration_fields = split_payload(
            body.model_dump(exclude_unset=True), REGISTRATION_UPDATE_FIELDS
        )
        result = await coordinator.update(registration_id, registration_fields, transaction_fields)
        return result_response(result)
    except Exception as e:
        return unexpected_error("update_registration", e, get_request_id(request))


@router.delete("/registration/{registration_id}")
async def delete_registration(
    registration_id: int,
    request: Request,
    coordinator: RegistrationCoordinator = Depends(get_coordinator),
):
    """Delete a registration, its transaction, and clear the prospectus flag"""
    try:
        result = await coordinator.delete(registration_id)
        message = "Registration and associated transaction deleted successfully" if result.ok else None
        return result_response(result, message=message)
    except Exception as e:
        return unexpected_error("delete_registration", e, get_request_id(request))


@router.get("/registration")
async def list_registrations(request: Request, queries: RegistrationQueries = Depends(get_queries)):
    try:
        return result_response(await queries.list_registrations())
    except Exception as e:
        return unexpected_error("list_registrations", e, get_request_id(request))


@router.get("/registration/assigned/{staff_id}")
async def list_assigned_registrations(
    staff_id: int,
    request: Request,
    queries: RegistrationQueries = Depends(get_queries),
):
    """Registered registrations handed to one staff member"""
    try:
        return result_response(await queries.list_assigned(staff_id))
    except Exception as e:
        return unexpected_error("list_assigned_registrations", e, get_request_id(request))


@router.get("/registrations/{entity_id}")
async def list_registrations_by_entity(
    entity_id: int,
    request: Request,
    queries: RegistrationQueries = Depends(get_queries),
):
    """Registrations for the prospectuses one staff member owns"""
    try:
        result = await queries.list_by_entity(entity_id)
        message = "No registrations found for this staff member" if result.ok and not result.value else None
        return result_response(result, message=message)
    except Exception as e:
        return unexpected_error("list_registrations_by_entity", e, get_request_id(request))


@router.get("/registration/{registration_id}")
async def get_registration(
    registration_id: int,
    request: Request,
    queries: RegistrationQueries = Depends(get_queries),
):
    try:
        return result_response(await queries.get_registration(registration_id))
    except Exception as e:
        return unexpected_error("get_registration", e, get_request_id(request))
