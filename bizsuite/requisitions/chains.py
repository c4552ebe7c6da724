"""
Approval chains per requisition type.

Chains are kept in a versioned table so that a change to the workflow rules
adds a new version instead of rewriting the rules existing requisitions were
created under. The final role of each chain is the issuing role: it does
not approve, it disburses (cash) or delivers (material).
"""

from django.conf import settings

from bizsuite.requisitions.models import Requisition
from bizsuite.users.models import Role

RequestType = Requisition.RequestType

APPROVAL_CHAINS = {
    "v1": {
        RequestType.CASH: (Role.GENERAL_MANAGER, Role.MANAGING_DIRECTOR, Role.CASHIER),
        RequestType.MATERIAL: (
            Role.GENERAL_MANAGER,
            Role.MANAGING_DIRECTOR,
            Role.STORE_MANAGER,
        ),
    },
}

ISSUED_STATUS = {
    RequestType.CASH: Requisition.Status.ISSUED,
    RequestType.MATERIAL: Requisition.Status.DELIVERED,
}

# roles that fulfil requests never raise them
NON_REQUESTING_ROLES = (Role.CASHIER, Role.STORE_MANAGER, Role.FACTORY_MANAGER)


def active_chain_version() -> str:
    return getattr(settings, "APPROVAL_CHAIN_VERSION", "v1")


def build_approval_chain(request_type, version=None) -> tuple:
    version = version or active_chain_version()
    try:
        table = APPROVAL_CHAINS[version]
    except KeyError:
        raise ValueError(f"unknown approval chain version: {version}")
    try:
        return table[RequestType(request_type)]
    except ValueError:
        raise ValueError(f"unknown request type: {request_type}")


def issuing_role(request_type, version=None) -> str:
    return build_approval_chain(request_type, version)[-1]


def issued_status(request_type) -> str:
    return ISSUED_STATUS[RequestType(request_type)]
