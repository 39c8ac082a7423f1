
from typing import List, Dict
from .utils import ScenarioInput, TONNES_PER_JOB
from .finance import compute_scenario
from .carbon import annual_carbon
from .scenarios import RegionalBaseline


def pct_change(new: float, old: float) -> float:
    """((new - old) / |old|) * 100, 100 when there was nothing before."""
    if old == 0:
        return 100.0
    return (new - old) / abs(old) * 100


def saf_jobs(p: ScenarioInput) -> int:
    return round(p.biomass_tonnes / TONNES_PER_JOB)


def _row(category: str, traditional: float, saf: float) -> Dict:
    return {
        'category': category,
        'traditional': traditional,
        'saf': saf,
        'difference': saf - traditional,
        'percentage': pct_change(saf, traditional),
    }


def compare_valorization(p: ScenarioInput, baseline: RegionalBaseline) -> List[Dict]:
    """Traditional pomace valorisation against the SAF scenario, one row per category."""
    out = compute_scenario(p)
    co2 = annual_carbon(p)[0]['avoided_tCO2e']
    return [
        _row('Revenus', baseline.revenue, out.revenue),
        _row('Coûts opérationnels', baseline.costs, out.opex),
        _row('Bénéfice brut', baseline.revenue - baseline.costs, out.ebitda),
        _row('Emplois', baseline.jobs, saf_jobs(p)),
        _row('CO₂ évité (t/an)', 0.0, co2),
    ]
