
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional
from .utils import ScenarioInput, COLLECTION_COST_EUR_PER_T
from .finance import saf_production, compute_scenario

logger = logging.getLogger(__name__)

MAX_MONTHS = 120


@dataclass(frozen=True)
class PartnershipStructure:
    id: str
    name: str
    description: str
    capital_split: Dict[str, float]  # % by investor / operator / government
    revenue_share: Dict[str, float]  # % by investor / operator / government
    fixed_costs: float  # EUR/yr
    risk_profile: str


PARTNERSHIP_STRUCTURES: Dict[str, PartnershipStructure] = {
    'joint-venture': PartnershipStructure(
        'joint-venture', 'Joint-Venture Public-Privé', 'Partenariat équilibré avec collectivités locales',
        {'investor': 45, 'operator': 35, 'government': 20},
        {'investor': 40, 'operator': 45, 'government': 15},
        3_200_000, 'medium'),
    'private-led': PartnershipStructure(
        'private-led', 'Initiative Privée', 'Financement majoritairement privé',
        {'investor': 70, 'operator': 25, 'government': 5},
        {'investor': 65, 'operator': 30, 'government': 5},
        2_800_000, 'high'),
    'cooperative': PartnershipStructure(
        'cooperative', 'Coopérative Viticole', 'Modèle coopératif avec vignerons',
        {'investor': 25, 'operator': 60, 'government': 15},
        {'investor': 20, 'operator': 65, 'government': 15},
        3_600_000, 'low'),
    'concession': PartnershipStructure(
        'concession', 'Concession Publique', 'Délégation de service public',
        {'investor': 60, 'operator': 20, 'government': 20},
        {'investor': 50, 'operator': 30, 'government': 20},
        3_400_000, 'medium'),
}


def operator_capital(p: ScenarioInput, structure: PartnershipStructure) -> float:
    return p.capex_initial * structure.capital_split['operator'] / 100


def monthly_profit(p: ScenarioInput, structure: PartnershipStructure) -> float:
    """Operator profit per month.

    The operator bears collection and processing costs in proportion to its
    revenue share, and the structure's fixed costs in full.
    """
    production = saf_production(p)
    margin = (production * p.saf_price
              - p.biomass_tonnes * COLLECTION_COST_EUR_PER_T
              - production * p.opex_per_liter)
    return (margin * structure.revenue_share['operator'] / 100 - structure.fixed_costs) / 12


def monthly_cumulative(p: ScenarioInput, structure: PartnershipStructure, months: int = 60) -> List[float]:
    profit = monthly_profit(p, structure)
    cumulative = -operator_capital(p, structure)
    out = []
    for _ in range(months):
        cumulative += profit
        out.append(cumulative)
    return out


def breakeven_months(p: ScenarioInput, structure: PartnershipStructure,
                     max_months: int = MAX_MONTHS) -> Optional[int]:
    """First month at which the operator's cumulative profit is >= 0, or None."""
    for month, cum in enumerate(monthly_cumulative(p, structure, max_months), start=1):
        if cum >= 0:
            return month
    return None


def breakeven_price(p: ScenarioInput, target_npv=0.0, tol=1e-4, max_iter=100):
    # Bisection on SAF price
    low, high = 0.0, max(5*p.saf_price, 1e-6)
    mid = high
    for _ in range(max_iter):
        mid = 0.5*(low+high)
        npv = compute_scenario(replace(p, saf_price=mid)).npv
        if abs(npv-target_npv) < tol:
            return mid
        if npv < target_npv:
            low = mid
        else:
            high = mid
    logger.warning('breakeven_price did not converge after %d iterations (last price %.4f EUR/L)', max_iter, mid)
    return mid
