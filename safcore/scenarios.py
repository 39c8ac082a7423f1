
"""Regional presets for the Languedoc-Roussillon and Champagne cases.

Tonnages are the pomace volumes left after protected and negotiable flows
(about 30 % of total marc production). Monetary values in EUR.
"""
from dataclasses import dataclass, field
from typing import Dict
from .utils import ScenarioInput

SCENARIO_LABELS = {
    'pessimiste': 'Pessimiste',
    'realiste': 'Réaliste',
    'optimiste': 'Optimiste',
}


@dataclass(frozen=True)
class RegionalBaseline:
    """Current valorisation of pomace (distilleries, compost, methanisation)."""
    revenue: float
    costs: float
    jobs: int


@dataclass(frozen=True)
class Region:
    id: str
    name: str
    total_biomass: float  # t/yr
    available_biomass: float  # t/yr
    baseline: RegionalBaseline
    scenarios: Dict[str, ScenarioInput] = field(default_factory=dict)


LANGUEDOC = Region(
    id='languedoc',
    name='Languedoc-Roussillon',
    total_biomass=266_000,
    available_biomass=80_000,
    baseline=RegionalBaseline(revenue=15_200_000, costs=8_500_000, jobs=12),
    scenarios={
        'pessimiste': ScenarioInput(
            biomass_tonnes=60_000, process_efficiency=65, saf_price=1.40, opex_per_liter=0.85,
            capex_initial=120_000_000, discount_rate=0.09,
        ),
        'realiste': ScenarioInput(
            biomass_tonnes=80_000, process_efficiency=72, saf_price=1.60, opex_per_liter=0.75,
            capex_initial=95_000_000,
        ),
        'optimiste': ScenarioInput(
            biomass_tonnes=88_000, process_efficiency=78, saf_price=1.85, opex_per_liter=0.68,
            capex_initial=95_000_000, discount_rate=0.07,
        ),
    },
)

CHAMPAGNE = Region(
    id='champagne',
    name='Champagne',
    total_biomass=24_000,
    available_biomass=7_000,
    baseline=RegionalBaseline(revenue=1_200_000, costs=700_000, jobs=3),
    scenarios={
        'pessimiste': ScenarioInput(
            biomass_tonnes=5_250, process_efficiency=65, saf_price=1.40, opex_per_liter=0.85,
            capex_initial=25_000_000, discount_rate=0.09,
        ),
        'realiste': ScenarioInput(
            biomass_tonnes=7_000, process_efficiency=72, saf_price=1.60, opex_per_liter=0.75,
            capex_initial=25_000_000,
        ),
        'optimiste': ScenarioInput(
            biomass_tonnes=7_700, process_efficiency=78, saf_price=1.85, opex_per_liter=0.68,
            capex_initial=25_000_000, discount_rate=0.07,
        ),
    },
)

REGIONS: Dict[str, Region] = {r.id: r for r in (LANGUEDOC, CHAMPAGNE)}


def get_region(region_id: str) -> Region:
    # unknown ids fall back to Languedoc, the reference case
    return REGIONS.get(region_id, LANGUEDOC)


def get_scenario(region_id: str, name: str) -> ScenarioInput:
    region = get_region(region_id)
    if name not in region.scenarios:
        raise KeyError(f"unknown scenario {name!r} for {region.id}; expected one of {sorted(region.scenarios)}")
    return region.scenarios[name]
