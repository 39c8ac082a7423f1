
import logging
from dataclasses import replace
from typing import Tuple
from sklearn.preprocessing import MinMaxScaler
import numpy as np
from .utils import ScenarioInput
from .finance import compute_scenario
from .carbon import annual_carbon, totals

logger = logging.getLogger(__name__)


def optimize_config(base_inputs: ScenarioInput, weights: Tuple[float, float] = (0.5, 0.5)):
    """Choose among discrete options: biomass scale, ATJ efficiency, WACC.
    Maximize weighted normalized (NPV, CO2e avoided). Returns chosen option and all combos.
    """
    scales = [0.8, 1.0, 1.2]
    efficiencies = [base_inputs.process_efficiency, min(base_inputs.process_efficiency + 5, 100.0)]
    waccs = [max(base_inputs.discount_rate-0.02, 0.01), base_inputs.discount_rate,
             min(base_inputs.discount_rate+0.02, 1.0)]

    combos = []
    for s in scales:
        for eff in efficiencies:
            for r in waccs:
                p = replace(base_inputs, biomass_tonnes=base_inputs.biomass_tonnes * s,
                            process_efficiency=eff, discount_rate=r)
                out = compute_scenario(p)
                co2_total, _ = totals(annual_carbon(p))
                combos.append({'scale': s, 'efficiency': eff, 'wacc': r, 'npv': out.npv,
                               'irr_pct': out.irr_pct, 'co2': co2_total})

    npvs = np.array([c['npv'] for c in combos]).reshape(-1, 1)
    co2s = np.array([c['co2'] for c in combos]).reshape(-1, 1)
    npvs_n = MinMaxScaler().fit_transform(npvs).flatten()
    co2s_n = MinMaxScaler().fit_transform(co2s).flatten()

    w1, w2 = weights
    scores = w1*npvs_n + w2*co2s_n
    best_idx = int(np.argmax(scores))
    logger.info('optimize_config: best of %d combos is %s', len(combos), combos[best_idx])
    return combos[best_idx], combos
