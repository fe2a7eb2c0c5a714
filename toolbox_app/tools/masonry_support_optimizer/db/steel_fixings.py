from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

from ..models import FixingMethod, SectionType

EDGE_DISTANCE_FACTOR = 1.2


class FixingCapacityNotFoundError(RuntimeError):
    pass


@dataclass(frozen=True)
class SteelFixingCapacity:
    """Design resistance of one steel fixing (per bolt)."""

    method: FixingMethod
    bolt_size: str
    tension_kn: float
    shear_kn: float
    hole_diameter_mm: float

    @property
    def min_edge_distance_mm(self) -> float:
        return EDGE_DISTANCE_FACTOR * self.hole_diameter_mm


_HOLE_DIAMETER_MM: Mapping[str, float] = MappingProxyType({"M10": 11.0, "M12": 13.0, "M16": 18.0})

# (tension, shear) kN
_CAPACITIES: Mapping[Tuple[FixingMethod, str], Tuple[float, float]] = MappingProxyType(
    {
        (FixingMethod.BLIND_BOLT, "M10"): (12.7, 19.5),
        (FixingMethod.BLIND_BOLT, "M12"): (22.0, 28.3),
        (FixingMethod.BLIND_BOLT, "M16"): (42.9, 52.8),
        (FixingMethod.SET_SCREW, "M10"): (20.9, 18.0),
        (FixingMethod.SET_SCREW, "M12"): (30.3, 26.2),
        (FixingMethod.SET_SCREW, "M16"): (56.5, 48.7),
    }
)


def get_available_bolt_sizes() -> Tuple[str, ...]:
    return tuple(_HOLE_DIAMETER_MM)


def resolve_fixing_method(
    section_type: Union[SectionType, str], preferred_method: Optional[Union[FixingMethod, str]] = None
) -> FixingMethod:
    """Hollow sections have no internal access, so they always take blind bolts."""
    st = str(getattr(section_type, "value", section_type)).strip().upper()
    if st in (SectionType.RHS.value, SectionType.SHS.value):
        return FixingMethod.BLIND_BOLT
    if st == SectionType.I_BEAM.value:
        if preferred_method is None:
            return FixingMethod.SET_SCREW
        try:
            return FixingMethod(str(getattr(preferred_method, "value", preferred_method)).strip().upper())
        except ValueError:
            raise FixingCapacityNotFoundError(f"Unknown steel fixing method: {preferred_method}") from None
    return FixingMethod.BLIND_BOLT


def get_steel_fixing_capacity(
    section_type: Union[SectionType, str],
    bolt_size: str,
    preferred_method: Optional[Union[FixingMethod, str]] = None,
) -> SteelFixingCapacity:
    method = resolve_fixing_method(section_type, preferred_method)
    size = str(bolt_size).strip().upper()
    rec = _CAPACITIES.get((method, size))
    if rec is None:
        raise FixingCapacityNotFoundError(f"No steel fixing capacity for {method.value} {bolt_size}.")
    return SteelFixingCapacity(
        method=method,
        bolt_size=size,
        tension_kn=rec[0],
        shear_kn=rec[1],
        hole_diameter_mm=_HOLE_DIAMETER_MM[size],
    )
