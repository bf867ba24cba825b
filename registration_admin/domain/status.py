"""Registration status state machine: pending -> registered, admin_assigned one-way"""

from enum import Enum
from typing import Any, Dict, FrozenSet, Optional


class RegistrationStatus(str, Enum):
    PENDING = "pending"
    REGISTERED = "registered"


INITIAL_STATUS = RegistrationStatus.PENDING

TRANSITIONS: Dict[RegistrationStatus, FrozenSet[RegistrationStatus]] = {
    RegistrationStatus.PENDING: frozenset({RegistrationStatus.PENDING, RegistrationStatus.REGISTERED}),
    RegistrationStatus.REGISTERED: frozenset({RegistrationStatus.REGISTERED}),
}


def parse_status(value: Any) -> Optional[RegistrationStatus]:
    """Return the matching status, or None for an unknown value"""
    if isinstance(value, RegistrationStatus):
        return value
    try:
        return RegistrationStatus(value)
    except ValueError:
        return None


def can_transition(current: Any, target: Any) -> bool:
    """
    Check whether ``current -> target`` is a legal status move.

    A row with no stored status is treated as ``pending``. Unknown values on
    either side are never legal.
    """
    source = INITIAL_STATUS if current is None else parse_status(current)
    destination = parse_status(target)
    if source is None or destination is None:
        return False
    return destination in TRANSITIONS[source]


def can_set_admin_assigned(current: Any, target: Any) -> bool:
    """admin_assigned is one-way: once true it stays true"""
    return bool(target) or not bool(current)


def approval_patch(assigned_to: Optional[Any] = None) -> Dict[str, Any]:
    """Registration patch for the approval workflow"""
    patch: Dict[str, Any] = {"status": RegistrationStatus.REGISTERED.value}
    if assigned_to is not None:
        patch["assigned_to"] = assigned_to
    return patch


def assignment_patch(assigned_to: Any) -> Dict[str, Any]:
    """Registration patch for the administrative hand-off"""
    return {
        "assigned_to": assigned_to,
        "admin_assigned": True,
        "status": RegistrationStatus.REGISTERED.value,
    }


def prospectus_flag_patch(registered: bool) -> Dict[str, bool]:
    """Prospectus patch mirroring registration existence"""
    return {"isregistered": registered}
