
from typing import Dict
from .utils import (
    ScenarioInput, ScenarioOutput, NO_PAYBACK, IRR_CAP_PCT, IRR_TERMINAL_FRACTION,
    IRR_TOLERANCE, IRR_MAX_ITER, IRR_MIN_RATE, IRR_MAX_RATE,
)


def saf_production(p: ScenarioInput) -> float:
    """Litres of SAF per year at nominal capacity."""
    return p.biomass_tonnes * p.conversion_rate * (p.process_efficiency / 100)


def waterfall(p: ScenarioInput, production: float) -> Dict[str, float]:
    """Income statement for one year at the given production (L).

    Depreciation and interest are driven by capex only, so they do not move
    with production. Losses are not taxed and not carried forward.
    """
    revenue = production * p.saf_price
    opex = production * p.opex_per_liter
    ebitda = revenue - opex
    depreciation = p.capex_initial * p.depreciation_rate
    ebit = ebitda - depreciation
    debt_service = p.capex_initial * p.debt_ratio * p.interest_rate
    ebt = ebit - debt_service
    taxes = ebt * p.tax_rate if ebt > 0 else 0.0
    net_income = ebt - taxes
    return {
        'production': production,
        'revenue': revenue,
        'opex': opex,
        'ebitda': ebitda,
        'depreciation': depreciation,
        'ebit': ebit,
        'debt_service': debt_service,
        'ebt': ebt,
        'taxes': taxes,
        'net_income': net_income,
        # depreciation is non-cash
        'cash_flow': net_income + depreciation,
    }


def payback_years(capex: float, cash_flow: float) -> float:
    if cash_flow > 0:
        return capex / cash_flow
    return NO_PAYBACK


def project_npv(cash_flow: float, capex: float, discount_rate: float, years: int,
                terminal_value_fraction: float) -> float:
    if cash_flow <= 0:
        return -capex
    npv = -capex
    for t in range(1, years+1):
        npv += cash_flow / ((1 + discount_rate) ** t)
    terminal = capex * terminal_value_fraction
    npv += terminal / ((1 + discount_rate) ** years)
    return npv


def project_irr(cash_flow: float, capex: float, years: int) -> float:
    """IRR in percent by Newton-Raphson on a level annuity plus terminal value.

    Best effort: returns the last clamped rate when it does not converge,
    and never more than IRR_CAP_PCT.
    """
    if cash_flow <= 0:
        return 0.0
    if capex / cash_flow > years:
        return 0.0

    rate = max(0.01, (cash_flow / capex) * 0.8)
    terminal = capex * IRR_TERMINAL_FRACTION
    for _ in range(IRR_MAX_ITER):
        npv = -capex
        derivative = 0.0
        for t in range(1, years+1):
            discount = (1 + rate) ** t
            npv += cash_flow / discount
            derivative -= (t * cash_flow) / (discount * (1 + rate))
        discount = (1 + rate) ** years
        npv += terminal / discount
        derivative -= (years * terminal) / (discount * (1 + rate))

        if abs(npv) < IRR_TOLERANCE:
            return min(rate * 100, IRR_CAP_PCT)
        if abs(derivative) > IRR_TOLERANCE:
            rate = rate - npv / derivative
        else:
            break
        rate = min(max(rate, IRR_MIN_RATE), IRR_MAX_RATE)
    return min(rate * 100, IRR_CAP_PCT)


def compute_scenario(p: ScenarioInput) -> ScenarioOutput:
    p.validate()
    year = waterfall(p, saf_production(p))
    cf = year['cash_flow']
    return ScenarioOutput(
        saf_production=year['production'],
        revenue=year['revenue'],
        opex=year['opex'],
        ebitda=year['ebitda'],
        depreciation=year['depreciation'],
        ebit=year['ebit'],
        debt_service=year['debt_service'],
        ebt=year['ebt'],
        taxes=year['taxes'],
        net_income=year['net_income'],
        cash_flow=cf,
        roi_pct=(cf / p.capex_initial) * 100,
        payback_year=payback_years(p.capex_initial, cf),
        npv=project_npv(cf, p.capex_initial, p.discount_rate, p.years, p.terminal_value_fraction),
        irr_pct=project_irr(cf, p.capex_initial, p.years),
    )
