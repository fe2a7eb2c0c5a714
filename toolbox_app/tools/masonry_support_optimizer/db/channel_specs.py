from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from ..models import ChannelType


@dataclass(frozen=True)
class ChannelSpec:
    """Cast-in channel resistance at one bracket centres / slab thickness combination.

    max_tension_kn / max_shear_kn are design resistances per bracket.
    utilization_factor is the manufacturer's combined utilisation basis (1.0 = 100%).
    """

    channel_type: ChannelType
    slab_thickness: int
    bracket_centres: int
    edge_top: float
    edge_bottom: float
    max_tension_kn: float
    max_shear_kn: float
    utilization_factor: float = 1.0

    @property
    def id(self) -> str:
        return f"{self.channel_type.value}_{self.slab_thickness}_{self.bracket_centres}"

    def as_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "channel_type": self.channel_type.value,
            "slab_thickness": self.slab_thickness,
            "bracket_centres": self.bracket_centres,
            "edge_top": self.edge_top,
            "edge_bottom": self.edge_bottom,
            "max_tension_kn": self.max_tension_kn,
            "max_shear_kn": self.max_shear_kn,
            "utilization_factor": self.utilization_factor,
        }


_CENTRES: Tuple[int, ...] = (200, 250, 300, 350, 400, 450, 500)

# Tension resistance by centres (kN); independent of slab thickness within the tabulated range.
_TENSION: Mapping[ChannelType, Tuple[float, ...]] = MappingProxyType(
    {
        ChannelType.CPRO38: (7.75, 9.45, 10.75, 13.00, 13.50, 13.90, 14.25),
        ChannelType.CPRO50: (9.60, 11.55, 13.35, 14.75, 14.75, 14.75, 14.75),
        # R-HPTIII rows are representative values pending the manufacturer's published table.
        ChannelType.R_HPTIII_70: (11.00, 13.20, 15.20, 16.80, 17.50, 17.50, 17.50),
        ChannelType.R_HPTIII_90: (13.50, 16.00, 18.20, 19.80, 20.50, 20.50, 20.50),
    }
)

# Shear resistance by slab thickness then centres (kN)
_CPRO_SHEAR: Mapping[int, Tuple[float, ...]] = MappingProxyType(
    {
        200: (7.45, 8.55, 10.35, 11.90, 13.50, 15.00, 16.50),
        225: (8.60, 9.70, 11.55, 13.20, 15.00, 16.60, 16.60),
        250: (9.90, 10.90, 12.60, 14.60, 16.40, 16.60, 16.60),
    }
)
_RHPT_SHEAR: Mapping[ChannelType, Tuple[float, ...]] = MappingProxyType(
    {
        ChannelType.R_HPTIII_70: (9.00, 10.50, 12.50, 14.20, 16.00, 17.50, 18.00),
        ChannelType.R_HPTIII_90: (10.50, 12.00, 14.00, 16.00, 18.00, 19.50, 20.00),
    }
)

_UTILIZATION_FACTOR: Mapping[ChannelType, float] = MappingProxyType(
    {
        ChannelType.CPRO38: 1.0,
        ChannelType.CPRO50: 1.0,
        ChannelType.R_HPTIII_70: 2.0,
        ChannelType.R_HPTIII_90: 2.0,
    }
)

EDGE_TOP = 75.0
_EDGE_BOTTOM: Mapping[int, float] = MappingProxyType({200: 125.0, 225: 150.0, 250: 175.0})


def _build_specs() -> Mapping[str, ChannelSpec]:
    specs: Dict[str, ChannelSpec] = {}
    for ct in ChannelType:
        for slab, edge_bottom in _EDGE_BOTTOM.items():
            shear = _RHPT_SHEAR.get(ct, _CPRO_SHEAR[slab])
            for i, centres in enumerate(_CENTRES):
                spec = ChannelSpec(
                    channel_type=ct,
                    slab_thickness=slab,
                    bracket_centres=centres,
                    edge_top=EDGE_TOP,
                    edge_bottom=edge_bottom,
                    max_tension_kn=_TENSION[ct][i],
                    max_shear_kn=shear[i],
                    utilization_factor=_UTILIZATION_FACTOR[ct],
                )
                specs[spec.id] = spec
    return MappingProxyType(specs)


CHANNEL_SPECS: Mapping[str, ChannelSpec] = _build_specs()


def _tabulated_slab(channel_type: ChannelType, slab_thickness: float) -> Optional[int]:
    """Nearest tabulated slab thickness at or below the requested one (smallest if none)."""
    slabs = sorted({s.slab_thickness for s in CHANNEL_SPECS.values() if s.channel_type == channel_type})
    if not slabs:
        return None
    chosen = slabs[0]
    for s in slabs:
        if s <= slab_thickness:
            chosen = s
    return chosen


def get_channel_spec(
    channel_type: ChannelType, slab_thickness: float, bracket_centres: float
) -> Optional[ChannelSpec]:
    slab = _tabulated_slab(channel_type, slab_thickness)
    if slab is None:
        return None
    return CHANNEL_SPECS.get(f"{channel_type.value}_{slab}_{int(bracket_centres)}")


def valid_bracket_centres(channel_type: ChannelType, slab_thickness: float) -> Tuple[int, ...]:
    slab = _tabulated_slab(channel_type, slab_thickness)
    if slab is None:
        return ()
    return tuple(
        sorted(
            s.bracket_centres
            for s in CHANNEL_SPECS.values()
            if s.channel_type == channel_type and s.slab_thickness == slab
        )
    )
