"""
Envelope scenario models: window state, glazing and shading choices.

Every option is a closed enumeration with its numeric factors kept in
lookup tables next to it, so a new glazing or shading option is added by
extending the enum and its table entries.
"""

import math
from enum import Enum
from typing import Dict, List
from dataclasses import dataclass, field

from utils.errors import ConfigurationError


class WindowState(str, Enum):
    OPEN = 'open'
    CLOSED = 'closed'


class GlazingType(str, Enum):
    SINGLE = 'single'
    DOUBLE = 'double'
    TRIPLE = 'triple'
    LOW_E = 'low-e'


class InteriorShading(str, Enum):
    NONE = 'none'
    BLINDS = 'blinds'
    CURTAINS = 'curtains'
    HEAVY_CURTAINS = 'heavy-curtains'


class ExteriorShading(str, Enum):
    NONE = 'none'
    AWNING = 'awning'
    LOUVERS = 'louvers'
    TREES = 'trees'


# Solar transmittance of the glass (fraction of incident solar heat passed through)
GLAZING_TRANSMITTANCE: Dict[GlazingType, float] = {
    GlazingType.SINGLE: 0.87,
    GlazingType.DOUBLE: 0.76,
    GlazingType.TRIPLE: 0.68,
    GlazingType.LOW_E: 0.42,
}

# Comfort score adjustment per glazing type
GLAZING_COMFORT_BONUS: Dict[GlazingType, int] = {
    GlazingType.SINGLE: -5,
    GlazingType.DOUBLE: 2,
    GlazingType.TRIPLE: 5,
    GlazingType.LOW_E: 8,
}

# Fraction of solar heat let through by each shading device
INTERIOR_SHADING_FACTOR: Dict[InteriorShading, float] = {
    InteriorShading.NONE: 1.0,
    InteriorShading.BLINDS: 0.75,
    InteriorShading.CURTAINS: 0.60,
    InteriorShading.HEAVY_CURTAINS: 0.35,
}

EXTERIOR_SHADING_FACTOR: Dict[ExteriorShading, float] = {
    ExteriorShading.NONE: 1.0,
    ExteriorShading.AWNING: 0.55,
    ExteriorShading.LOUVERS: 0.45,
    ExteriorShading.TREES: 0.70,
}

# Ventilation factor applied when windows are opened
OPEN_WINDOW_VENTILATION = 0.8


def _check_fraction(name: str, value: float, allow_zero: bool = False) -> float:
    value = float(value)
    lower_ok = value >= 0.0 if allow_zero else value > 0.0
    if not math.isfinite(value) or not lower_ok or value > 1.0:
        bounds = '[0, 1]' if allow_zero else '(0, 1]'
        raise ConfigurationError(f"{name} must be in {bounds}, got {value}")
    return value


@dataclass(frozen=True)
class WindowConfig:
    state: WindowState = WindowState.CLOSED
    ventilation_factor: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'state', WindowState(self.state))
        object.__setattr__(
            self, 'ventilation_factor',
            _check_fraction('ventilation_factor', self.ventilation_factor, allow_zero=True)
        )

    @classmethod
    def opened(cls) -> 'WindowConfig':
        return cls(WindowState.OPEN, OPEN_WINDOW_VENTILATION)

    @property
    def is_open(self) -> bool:
        return self.state is WindowState.OPEN


@dataclass(frozen=True)
class GlazingConfig:
    type: GlazingType = GlazingType.DOUBLE
    solar_transmittance: float = GLAZING_TRANSMITTANCE[GlazingType.DOUBLE]

    def __post_init__(self):
        object.__setattr__(self, 'type', GlazingType(self.type))
        object.__setattr__(
            self, 'solar_transmittance',
            _check_fraction('solar_transmittance', self.solar_transmittance)
        )

    @classmethod
    def for_type(cls, glazing_type: GlazingType) -> 'GlazingConfig':
        """Glazing with the tabulated transmittance for its type."""
        glazing_type = GlazingType(glazing_type)
        return cls(glazing_type, GLAZING_TRANSMITTANCE[glazing_type])

    @property
    def comfort_bonus(self) -> int:
        return GLAZING_COMFORT_BONUS[self.type]


@dataclass(frozen=True)
class ShadingConfig:
    interior: InteriorShading = InteriorShading.NONE
    exterior: ExteriorShading = ExteriorShading.NONE
    reduction_factor: float = 1.0  # fraction of heat let through, 1.0 = no shading

    def __post_init__(self):
        object.__setattr__(self, 'interior', InteriorShading(self.interior))
        object.__setattr__(self, 'exterior', ExteriorShading(self.exterior))
        object.__setattr__(
            self, 'reduction_factor',
            _check_fraction('reduction_factor', self.reduction_factor)
        )

    @classmethod
    def for_devices(
        cls,
        interior: InteriorShading = InteriorShading.NONE,
        exterior: ExteriorShading = ExteriorShading.NONE
    ) -> 'ShadingConfig':
        """Shading whose reduction factor combines both devices' table values."""
        interior = InteriorShading(interior)
        exterior = ExteriorShading(exterior)
        factor = INTERIOR_SHADING_FACTOR[interior] * EXTERIOR_SHADING_FACTOR[exterior]
        return cls(interior, exterior, factor)

    @property
    def has_interior(self) -> bool:
        return self.interior is not InteriorShading.NONE


@dataclass(frozen=True)
class Scenario:
    """Named bundle of envelope choices applied to one analysis run."""

    id: str
    name: str
    window: WindowConfig = field(default_factory=WindowConfig)
    glazing: GlazingConfig = field(default_factory=GlazingConfig)
    shading: ShadingConfig = field(default_factory=ShadingConfig)
    is_active: bool = True

    @property
    def envelope_factor(self) -> float:
        """Combined multiplier applied to raw irradiance."""
        return self.glazing.solar_transmittance * self.shading.reduction_factor

    @classmethod
    def from_dict(cls, data: dict) -> 'Scenario':
        """Build a scenario from a plain mapping (e.g. parsed YAML)."""
        window = data.get('window', {})
        glazing = data.get('glazing', {})
        shading = data.get('shading', {})
        return cls(
            id=str(data.get('id', data.get('name', 'scenario'))),
            name=str(data.get('name', data.get('id', 'Scenario'))),
            window=WindowConfig(**window),
            glazing=GlazingConfig(**glazing),
            shading=ShadingConfig(**shading),
            is_active=bool(data.get('is_active', True)),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'is_active': self.is_active,
            'window': {
                'state': self.window.state.value,
                'ventilation_factor': self.window.ventilation_factor,
            },
            'glazing': {
                'type': self.glazing.type.value,
                'solar_transmittance': self.glazing.solar_transmittance,
            },
            'shading': {
                'interior': self.shading.interior.value,
                'exterior': self.shading.exterior.value,
                'reduction_factor': self.shading.reduction_factor,
            },
        }


DEFAULT_SCENARIO = Scenario(id='default', name='Default')

SCENARIO_PRESETS: List[Scenario] = [
    Scenario(
        id='no-protection',
        name='No Protection',
        glazing=GlazingConfig(GlazingType.SINGLE, 0.85),
        shading=ShadingConfig(InteriorShading.NONE, ExteriorShading.NONE, 1.0),
    ),
    Scenario(
        id='with-blinds',
        name='With Blinds',
        glazing=GlazingConfig(GlazingType.DOUBLE, 0.65),
        shading=ShadingConfig(InteriorShading.BLINDS, ExteriorShading.NONE, 0.6),
    ),
    Scenario(
        id='low-e-awning',
        name='Low-E Glass + Awning',
        glazing=GlazingConfig(GlazingType.LOW_E, 0.35),
        shading=ShadingConfig(InteriorShading.NONE, ExteriorShading.AWNING, 0.4),
    ),
    Scenario(
        id='maximum-protection',
        name='Maximum Protection',
        glazing=GlazingConfig(GlazingType.LOW_E, 0.35),
        shading=ShadingConfig(InteriorShading.HEAVY_CURTAINS, ExteriorShading.LOUVERS, 0.2),
    ),
]
