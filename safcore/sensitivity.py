
import logging
from dataclasses import replace
from typing import List, Dict
import numpy as np
from .utils import ScenarioInput
from .finance import compute_scenario

logger = logging.getLogger(__name__)

DRIVERS = {
    'saf_price': 'Prix SAF',
    'biomass_tonnes': 'Biomasse disponible',
    'process_efficiency': 'Efficacité ATJ',
    'opex_per_liter': 'Coûts opérationnels',
    'capex_initial': 'Investissement capital',
}


def _bumped(p: ScenarioInput, name: str, step: float) -> ScenarioInput:
    value = getattr(p, name) * (1.0 + step)
    if name == 'process_efficiency':
        value = min(value, 100.0)
    return replace(p, **{name: value})


def sensitivity_impacts(p: ScenarioInput, step: float = 0.10) -> List[Dict]:
    """Relative change of ROI (%) when each driver is raised by `step`, largest first."""
    base = compute_scenario(p).roi_pct
    rows = []
    for name, label in DRIVERS.items():
        roi = compute_scenario(_bumped(p, name, step)).roi_pct
        impact = (roi - base) / abs(base) * 100 if base != 0 else 0.0
        rows.append({'variable': name, 'label': label, 'roi_pct': roi, 'impact': impact})
    rows.sort(key=lambda r: abs(r['impact']), reverse=True)
    return rows


def monte_carlo(p: ScenarioInput, n: int = 2000, price_sigma=0.15, capex_sigma=0.15, opex_sigma=0.10,
                rate_sigma=0.02, seed: int = 42):
    rng = np.random.default_rng(seed)
    logger.debug('monte_carlo: %d runs, seed %d', n, seed)
    results = []
    for _ in range(n):
        p_mc = replace(
            p,
            saf_price=p.saf_price * rng.lognormal(mean=0, sigma=price_sigma),
            capex_initial=p.capex_initial * rng.lognormal(mean=0, sigma=capex_sigma),
            opex_per_liter=p.opex_per_liter * rng.lognormal(mean=0, sigma=opex_sigma),
            discount_rate=min(max(0.0, rng.normal(p.discount_rate, rate_sigma)), 1.0),
        )
        results.append(compute_scenario(p_mc).npv)
    return np.array(results)
