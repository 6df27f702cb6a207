"""
Fair-Share Settlement Calculator (Domain Logic).

Splits a vehicle's fuel spend between co-owners in proportion to the
distance each one drove:

    expected = owner_km * total_spent / total_km   (0 when total_km == 0)
    balance  = amount_paid - expected

The next payer is the co-owner with the lowest balance. When nobody is in
debt the owner with the smallest surplus is still named, so a payer is
always designated once the vehicle has any history. Ties go to the lowest
owner id. The expected cost of the next refueling is the mean of all past
refueling totals.

Monetary values are rounded per owner on output, so the serialized balances
sum to zero only within half a cent per owner; the unrounded balances sum to
zero, up to Decimal precision, whenever the vehicle has any recorded distance.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carshare.app.domain.settlement.usage_ledger import UsageLedger, ZERO, aggregate
from carshare.app.models.user import User
from carshare.app.schemas.settlement import NextPayer, OwnerBalanceResponse, SettlementResponse

logger = logging.getLogger("carshare.settlement")

TWO_PLACES = Decimal("0.01")
SHARE_PLACES = Decimal("0.0001")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass
class OwnerBalance:
    owner_id: int
    km_driven: Decimal
    km_share: Decimal
    expected_contribution: Decimal
    actual_contribution: Decimal

    @property
    def balance(self) -> Decimal:
        return self.actual_contribution - self.expected_contribution


def compute_balances(ledger: UsageLedger) -> List[OwnerBalance]:
    """Unrounded balances of every owner with at least one trip or refueling, by owner id."""
    balances = []
    for owner_id in sorted(ledger.owners):
        usage = ledger.owners[owner_id]
        if ledger.total_km > 0:
            km_share = usage.km_driven / ledger.total_km
            expected = usage.km_driven * ledger.total_spent / ledger.total_km
        else:
            km_share = ZERO
            expected = ZERO
        balances.append(OwnerBalance(
            owner_id=owner_id,
            km_driven=usage.km_driven,
            km_share=km_share,
            expected_contribution=expected,
            actual_contribution=usage.amount_paid,
        ))
    return balances


def select_next_payer(balances: List[OwnerBalance]) -> Optional[OwnerBalance]:
    """Owner with the minimum balance, lowest owner id on ties; None without history."""
    if not balances:
        return None
    return min(balances, key=lambda b: (b.balance, b.owner_id))


def expected_refueling_cost(ledger: UsageLedger) -> Decimal:
    if ledger.refueling_count == 0:
        return ZERO
    return ledger.total_spent / ledger.refueling_count


class SettlementCalculator:

    @staticmethod
    def calculate(ledger: UsageLedger, users: dict) -> SettlementResponse:
        """
        Build the settlement for a ledger.

        Args:
            ledger: Aggregated usage of the vehicle
            users: Mapping of owner id to User, used for identities

        Returns:
            SettlementResponse with rounded monetary values
        """
        balances = compute_balances(ledger)
        payer = select_next_payer(balances)

        next_payer = None
        if payer is not None:
            user = users.get(payer.owner_id)
            if user is not None:
                next_payer = NextPayer(id=user.id, username=user.username, email=user.email)

        return SettlementResponse(
            vehicle_id=ledger.vehicle_id,
            next_payer=next_payer,
            per_owner_balance=[
                OwnerBalanceResponse(
                    owner_id=b.owner_id,
                    username=users[b.owner_id].username if b.owner_id in users else None,
                    km_driven=float(round_money(b.km_driven)),
                    km_share=float(b.km_share.quantize(SHARE_PLACES, rounding=ROUND_HALF_UP)),
                    expected_contribution=float(round_money(b.expected_contribution)),
                    actual_contribution=float(round_money(b.actual_contribution)),
                    balance=float(round_money(b.balance)),
                )
                for b in balances
            ],
            expected_contribution=float(round_money(expected_refueling_cost(ledger))),
            total_km=float(round_money(ledger.total_km)),
            total_spent=float(round_money(ledger.total_spent)),
        )

    @staticmethod
    async def settle(db: AsyncSession, vehicle_id: int) -> SettlementResponse:
        """
        Compute the settlement of a vehicle from its full history.

        Never fails on an empty history: the result then has no next payer
        and an expected contribution of 0.
        """
        ledger = await aggregate(db, vehicle_id)

        users = {}
        if not ledger.is_empty:
            result = await db.execute(select(User).where(User.id.in_(list(ledger.owners))))
            users = {user.id: user for user in result.scalars()}

        settlement = SettlementCalculator.calculate(ledger, users)
        logger.debug(
            "Settled vehicle %s: next payer %s, expected contribution %s",
            vehicle_id,
            settlement.next_payer.id if settlement.next_payer else None,
            settlement.expected_contribution
        )
        return settlement
