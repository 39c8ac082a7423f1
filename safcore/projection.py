
from typing import List, Dict, Optional, Tuple
import numpy as np
import numpy_financial as npf
from .utils import ScenarioInput, NO_PAYBACK, check_years
from .finance import saf_production, waterfall

FIRST_YEAR_CAPACITY = 0.6
CAPACITY_GROWTH = 0.03


def capacity_factor(t: int) -> float:
    """Share of nominal production in year index t (0 = construction)."""
    if t <= 0:
        return 0.0
    if t == 1:
        return FIRST_YEAR_CAPACITY
    return (1.0 + CAPACITY_GROWTH) ** (t - 2)


def build_projection(p: ScenarioInput, base_year: int = 2024,
                     years: Optional[int] = None) -> Tuple[List[float], List[Dict]]:
    """Cash flows and annual rows over construction + `years` operating years."""
    p.validate()
    n = p.years if years is None else years
    check_years(n)

    nominal = saf_production(p)
    cash_flows = [-p.capex_initial]
    cumulative = -p.capex_initial
    rows = [{
        'year': base_year,
        'capacity': 0.0,
        'production': 0.0,
        'revenue': 0.0,
        'opex': 0.0,
        'ebitda': 0.0,
        'depreciation': 0.0,
        'ebit': 0.0,
        'debt_service': 0.0,
        'ebt': 0.0,
        'taxes': 0.0,
        'net_income': 0.0,
        'cash_flow': -p.capex_initial,
        'cumulative_cash_flow': cumulative,
    }]
    for t in range(1, n+1):
        factor = capacity_factor(t)
        year = waterfall(p, nominal * factor)
        cumulative += year['cash_flow']
        cash_flows.append(year['cash_flow'])
        rows.append({'year': base_year + t, 'capacity': factor, **year,
                     'cumulative_cash_flow': cumulative})
    return cash_flows, rows


def cash_flow_metrics(cash_flows: List[float], discount_rate: float):
    """NPV (index 0 undiscounted), IRR as a fraction and interpolated payback."""
    years = list(range(len(cash_flows)))
    discounts = [(1/(1+discount_rate))**t for t in years]
    npv = sum(cf * d for cf, d in zip(cash_flows, discounts))
    irr = float(npf.irr(cash_flows))
    if not np.isfinite(irr):
        irr = float('nan')
    cumulative = []
    cum = 0.0
    for cf in cash_flows:
        cum += cf
        cumulative.append(cum)
    return npv, irr, interpolated_payback(cumulative)


def interpolated_payback(cumulative: List[float]) -> float:
    """Years from index 0 until the cumulative (undiscounted) cash flow crosses zero."""
    for i in range(1, len(cumulative)):
        prev, cur = cumulative[i-1], cumulative[i]
        if prev < 0 <= cur:
            # linear interpolation in year i
            return (i-1) + (-prev) / (cur - prev)
    return NO_PAYBACK


def payback_from_rows(rows: List[Dict]) -> float:
    """Payback in years since the construction year, from cumulative rows."""
    return interpolated_payback([r['cumulative_cash_flow'] for r in rows])


def projection_summary(rows: List[Dict]) -> Dict[str, float]:
    operating = rows[1:]
    return {
        'total_revenue': sum(r['revenue'] for r in operating),
        'total_net_income': sum(r['net_income'] for r in operating),
        'total_cash_flow': sum(r['cash_flow'] for r in rows),
        'final_cumulative_cash_flow': rows[-1]['cumulative_cash_flow'],
        'payback_year': payback_from_rows(rows),
    }
