"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from registration_admin.config import Settings, settings
from registration_admin.domain.bank_accounts import BankAccountService
from registration_admin.domain.ports import EntityStore
from registration_admin.domain.queries import RegistrationQueries
from registration_admin.domain.registrations import RegistrationCoordinator
from registration_admin.infrastructure.clients.rest_store import RestEntityStore
from registration_admin.infrastructure.database.session import build_engine, build_session_factory
from registration_admin.infrastructure.database.store import SqlEntityStore


def build_store(config: Settings = settings) -> EntityStore:
    """Create the process-wide entity store from configuration"""
    if config.store_backend == "rest":
        return RestEntityStore(
            base_url=config.rest_store_url,
            api_key=config.rest_store_api_key,
            timeout=config.http_timeout_seconds,
        )
    if config.store_backend == "sql":
        return SqlEntityStore(build_session_factory(build_engine(config.database_url)))
    raise ValueError(f"Unknown store backend: {config.store_backend}")


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_store(request: Request) -> EntityStore:
    """Store owned by the application bootstrap"""
    return request.app.state.store


def get_coordinator(request: Request) -> RegistrationCoordinator:
    return RegistrationCoordinator(get_store(request))


def get_queries(request: Request) -> RegistrationQueries:
    return RegistrationQueries(get_store(request))


def get_bank_accounts(request: Request) -> BankAccountService:
    return BankAccountService(get_store(request))
