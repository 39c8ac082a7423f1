
from typing import List, Dict
from .utils import ScenarioInput, CO2_KG_PER_LITER
from .finance import saf_production


def annual_carbon(p: ScenarioInput, credit_price: float = 85.0, credit_growth: float = 0.0):
    """Return list of dict per year with production, CO2 avoided and credit value."""
    rows = []
    prod = saf_production(p)
    avoided = prod * CO2_KG_PER_LITER / 1000  # t
    for t in range(1, p.years+1):
        credit_price_t = credit_price * ((1.0 + credit_growth) ** (t-1))
        rows.append({
            'year': t,
            'production': prod,
            'avoided_tCO2e': avoided,
            'carbon_price': credit_price_t,
            'credit_value': avoided * credit_price_t,
        })
    return rows


def totals(rows: List[Dict]):
    co2e_avoided_total = sum(r['avoided_tCO2e'] for r in rows)
    carbon_credit_value_total = sum(r['credit_value'] for r in rows)
    return co2e_avoided_total, carbon_credit_value_total
