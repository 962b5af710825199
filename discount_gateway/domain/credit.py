"""Credit line capacity checks and client eligibility"""

from typing import Dict, Optional

from discount_gateway.domain.enums import ClientStatus, CreditLineRole
from discount_gateway.domain.models import Client, ClientValidation, CreditCapacity, CreditLine


def check_credit_capacity(
    credit_lines: Dict[CreditLineRole, CreditLine],
    role: CreditLineRole,
    requested: float,
) -> CreditCapacity:
    """
    Evaluate one credit line against a requested exposure.

    Available capacity is ceiling - utilized and is NOT clamped: an
    over-utilized line reports a negative value and never has capacity.
    A role with no configured line behaves as a zero ceiling.
    """
    line = credit_lines.get(role) or CreditLine()
    ceiling = line.ceiling or 0.0
    available = ceiling - (line.utilized or 0.0)

    sufficient = available >= 0 and requested <= available

    return CreditCapacity(sufficient_capacity=sufficient, available=available, ceiling=ceiling)


def validate_client(
    client: Client,
    role: Optional[CreditLineRole] = None,
    requested: Optional[float] = None,
) -> ClientValidation:
    """
    Assess whether a client may take on new exposure.

    Failure reasons accumulate:
    - every restriction flag on the client
    - "Cliente com status: <STATUS>" when not ACTIVE
    - insufficient capacity on `role` when a requested amount is given
    """
    reasons = []
    valid = True

    if client.restrictions:
        valid = False
        reasons.extend(client.restrictions)

    if client.status != ClientStatus.ACTIVE:
        valid = False
        reasons.append(f"Cliente com status: {client.status.value}")

    capacity = {
        line_role: check_credit_capacity(client.credit_lines, line_role, requested or 0.0)
        for line_role in CreditLineRole
    }

    if role is not None and requested is not None and not capacity[role].sufficient_capacity:
        valid = False
        reasons.append(
            f"Linha de crédito {role.value} insuficiente: disponível {capacity[role].available:.2f}"
        )

    return ClientValidation(
        valid=valid,
        reasons=reasons,
        capacity=capacity,
        has_bank_account=bool(client.bank_account and client.bank_account.number),
        insurance_enabled=client.insurance_enabled,
    )
