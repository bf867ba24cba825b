"""Domain models - table names, field sets and the registration/transaction pair"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

Record = Dict[str, Any]


class Tables:
    """Logical table names in the entity store"""

    PROSPECTUS = "prospectus"
    REGISTRATION = "registration"
    TRANSACTIONS = "transactions"
    BANK_ACCOUNTS = "bank_accounts"
    SERVICES = "services"


# Request keys that belong to the Transaction row. "transaction_id" here is the
# external payment reference, not the registration's foreign key.
TRANSACTION_FIELDS: Tuple[str, ...] = (
    "transaction_type",
    "transaction_id",
    "amount",
    "transaction_date",
    "additional_info",
    "entity_id",
)

REGISTRATION_CREATE_FIELDS: Tuple[str, ...] = (
    "prospectus_id",
    "services",
    "init_amount",
    "accept_amount",
    "discount",
    "total_amount",
    "accept_period",
    "pub_period",
    "assigned_to",
    "bank_id",
    "status",
    "month",
    "year",
    "notes",
    "registered_by",
    "client_id",
)

# prospectus_id is immutable and assignment has its own workflows
REGISTRATION_UPDATE_FIELDS: Tuple[str, ...] = (
    "services",
    "init_amount",
    "accept_amount",
    "discount",
    "total_amount",
    "accept_period",
    "pub_period",
    "bank_id",
    "status",
    "month",
    "year",
    "notes",
)


@dataclass
class RegistrationBundle:
    """A registration row together with the transaction row it owns"""

    registration: Optional[Record] = None
    transaction: Optional[Record] = None

    def as_dict(self) -> Dict[str, Optional[Record]]:
        return {"registration": self.registration, "transaction": self.transaction}


def split_payload(
    payload: Dict[str, Any],
    registration_fields: Tuple[str, ...] = REGISTRATION_CREATE_FIELDS,
) -> Tuple[Record, Record]:
    """Split a flat request body into (transaction_fields, registration_fields).

    Keys outside both field sets are dropped.
    """
    transaction = {k: v for k, v in payload.items() if k in TRANSACTION_FIELDS}
    registration = {k: v for k, v in payload.items() if k in registration_fields}
    return transaction, registration
