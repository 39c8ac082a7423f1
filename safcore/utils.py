
from dataclasses import dataclass, asdict
from typing import Dict, Any

# L of SAF per tonne of pomace (ATJ route)
CONVERSION_RATE_L_PER_T = 280.0
DEFAULT_YEARS = 15
DEFAULT_TERMINAL_FRACTION = 0.5

# payback reported when the project never pays back
NO_PAYBACK = 99.0

# IRR solver settings. The IRR terminal value uses its own fraction of capex,
# which is not the terminal_value_fraction used for NPV.
IRR_CAP_PCT = 50.0
IRR_TERMINAL_FRACTION = 0.3
IRR_TOLERANCE = 1e-4
IRR_MAX_ITER = 100
IRR_MIN_RATE = 0.001
IRR_MAX_RATE = 0.5

CO2_KG_PER_LITER = 2.75
COLLECTION_COST_EUR_PER_T = 40.0
TONNES_PER_JOB = 444.0


class InvalidInput(ValueError):
    """Raised when a scenario parameter is outside its valid range."""


def _check(cond: bool, field: str, value, rule: str):
    if not cond:
        raise InvalidInput(f"{field}={value!r}: must be {rule}")


def check_years(years, field: str = 'years'):
    _check(isinstance(years, int) and not isinstance(years, bool) and years > 0,
           field, years, 'a positive integer')


@dataclass(frozen=True)
class ScenarioInput:
    biomass_tonnes: float  # pomace available, t/yr
    process_efficiency: float  # %
    saf_price: float  # EUR/L
    opex_per_liter: float  # EUR/L
    capex_initial: float  # EUR
    debt_ratio: float = 0.5
    interest_rate: float = 0.045
    tax_rate: float = 0.25
    discount_rate: float = 0.08  # WACC
    depreciation_rate: float = 0.05
    years: int = DEFAULT_YEARS
    terminal_value_fraction: float = DEFAULT_TERMINAL_FRACTION
    conversion_rate: float = CONVERSION_RATE_L_PER_T  # L/t

    def __post_init__(self):
        self.validate()

    def validate(self):
        _check(self.capex_initial > 0, 'capex_initial', self.capex_initial, '> 0')
        _check(self.biomass_tonnes >= 0, 'biomass_tonnes', self.biomass_tonnes, '>= 0')
        _check(0 <= self.process_efficiency <= 100, 'process_efficiency', self.process_efficiency, 'within [0, 100]')
        _check(self.conversion_rate > 0, 'conversion_rate', self.conversion_rate, '> 0')
        _check(self.saf_price > 0, 'saf_price', self.saf_price, '> 0')
        _check(self.opex_per_liter >= 0, 'opex_per_liter', self.opex_per_liter, '>= 0')
        for name in ('debt_ratio', 'interest_rate', 'tax_rate', 'discount_rate', 'depreciation_rate'):
            value = getattr(self, name)
            _check(0 <= value <= 1, name, value, 'within [0, 1]')
        check_years(self.years)
        _check(self.terminal_value_fraction >= 0, 'terminal_value_fraction', self.terminal_value_fraction, '>= 0')

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScenarioOutput:
    saf_production: float  # L/yr
    revenue: float
    opex: float
    ebitda: float  # gross profit
    depreciation: float
    ebit: float
    debt_service: float
    ebt: float
    taxes: float
    net_income: float
    cash_flow: float
    roi_pct: float
    payback_year: float
    npv: float
    irr_pct: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
