"""
Clear-sky irradiance model.

Air mass from the Kasten-Young approximation, Beer-Lambert attenuation
for direct normal irradiance and a fixed diffuse share of the global
horizontal value. Scenario factors (glazing transmittance and shading
reduction) scale both the direct and the diffuse component.
"""

import math
from dataclasses import dataclass

SOLAR_CONSTANT = 1361.0  # W/m²
EXTINCTION_COEFFICIENT = 0.14
DIFFUSE_RATIO = 0.15


@dataclass(frozen=True)
class IrradianceComponents:
    """Unmodified clear-sky values in W/m²."""

    dni: float = 0.0
    ghi: float = 0.0
    dhi: float = 0.0


@dataclass(frozen=True)
class IrradianceBreakdown:
    """Irradiance reaching the target after shadow and envelope factors, W/m²."""

    direct: float = 0.0
    diffuse: float = 0.0
    total: float = 0.0


def air_mass(altitude_degrees: float) -> float:
    """
    Relative optical air mass (Kasten & Young, 1989).

    Args:
        altitude_degrees: Sun altitude above the horizon, must be > 0

    Returns:
        Air mass, 1.0 at zenith
    """
    altitude = math.radians(altitude_degrees)
    return 1.0 / (math.sin(altitude) + 0.50572 * math.pow(6.07995 + altitude_degrees, -1.6364))


class ClearSkyModel:
    """Clear-sky irradiance for a given sun altitude."""

    def __init__(
        self,
        solar_constant: float = SOLAR_CONSTANT,
        extinction_coefficient: float = EXTINCTION_COEFFICIENT,
        diffuse_ratio: float = DIFFUSE_RATIO
    ):
        self.solar_constant = solar_constant
        self.extinction_coefficient = extinction_coefficient
        self.diffuse_ratio = diffuse_ratio

    def components(self, altitude_degrees: float) -> IrradianceComponents:
        """DNI, GHI and DHI for a sun altitude in degrees; zeros when the sun is down."""
        if altitude_degrees <= 0:
            return IrradianceComponents()

        transmittance = math.exp(-self.extinction_coefficient * air_mass(altitude_degrees))
        dni = self.solar_constant * transmittance
        ghi = dni * math.sin(math.radians(altitude_degrees))
        return IrradianceComponents(dni=dni, ghi=ghi, dhi=ghi * self.diffuse_ratio)

    def calculate(
        self,
        altitude_degrees: float,
        in_shadow: bool,
        glazing_factor: float = 1.0,
        shading_factor: float = 1.0
    ) -> IrradianceBreakdown:
        """
        Effective irradiance at the target.

        Args:
            altitude_degrees: Sun altitude in degrees
            in_shadow: Whether the direct beam is blocked
            glazing_factor: Glazing solar transmittance
            shading_factor: Shading reduction factor

        Returns:
            IrradianceBreakdown; only the diffuse part contributes in shadow
        """
        sky = self.components(altitude_degrees)
        envelope = glazing_factor * shading_factor

        diffuse = sky.dhi * envelope
        direct = 0.0 if in_shadow else sky.ghi * envelope
        return IrradianceBreakdown(direct=direct, diffuse=diffuse, total=direct + diffuse)
