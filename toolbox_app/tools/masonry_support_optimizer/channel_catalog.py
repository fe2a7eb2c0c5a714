from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from loguru import logger

from .models import ChannelType

_HIGH_MARGIN = frozenset({ChannelType.R_HPTIII_70, ChannelType.R_HPTIII_90})
_CPRO = frozenset({ChannelType.CPRO38, ChannelType.CPRO50})

RHPTIII_UTILIZATION_PCT = 200


@dataclass(frozen=True)
class ProductCharacteristics:
    family_name: str
    design_standard: str
    has_high_utilization: bool
    utilization_warning: Optional[str]
    notes: Tuple[str, ...]


def _coerce(channel_type: Union[ChannelType, str, None]) -> Optional[ChannelType]:
    if channel_type is None:
        return None
    try:
        return ChannelType(str(getattr(channel_type, "value", channel_type)).strip().upper())
    except ValueError:
        return None


def get_available_channel_types() -> Tuple[ChannelType, ...]:
    """The closed channel catalog, in catalog order."""
    return tuple(ChannelType)


def is_high_margin_channel(channel_type: Union[ChannelType, str, None]) -> bool:
    """True for the R-HPTIII sub-family (elevated combined utilisation basis)."""
    return _coerce(channel_type) in _HIGH_MARGIN


def embedment_depth_mm(channel_type: Union[ChannelType, str, None]) -> Optional[int]:
    ct = _coerce(channel_type)
    if ct == ChannelType.R_HPTIII_70:
        return 70
    if ct == ChannelType.R_HPTIII_90:
        return 90
    return None


def resolve_allowed_channel_types(allowed: Optional[Iterable[str]]) -> Tuple[ChannelType, ...]:
    """Intersect a user filter with the catalog.

    Unknown identifiers are dropped; an empty or fully-unknown filter means the whole catalog.
    """
    catalog = get_available_channel_types()
    if not allowed:
        return catalog

    requested = [str(a) for a in allowed]
    keep = {ct for ct in (_coerce(a) for a in requested) if ct is not None}
    unknown = [a for a in requested if _coerce(a) is None]
    if unknown:
        logger.debug(f"Ignoring unknown channel types: {unknown}")

    resolved = tuple(ct for ct in catalog if ct in keep)
    if not resolved:
        logger.debug("No recognised channel types in filter; using full catalog")
        return catalog
    return resolved


def get_product_family_name(channel_type: Union[ChannelType, str]) -> str:
    ct = _coerce(channel_type)
    if ct in _HIGH_MARGIN:
        return f"R-HPTIII A4 M12 ({embedment_depth_mm(ct)}mm embedment)"
    if ct in _CPRO:
        return f"{ct.value} - MOSOCON"
    return str(channel_type)


def get_product_characteristics(channel_type: Union[ChannelType, str]) -> ProductCharacteristics:
    ct = _coerce(channel_type)
    if ct in _HIGH_MARGIN:
        return ProductCharacteristics(
            family_name=get_product_family_name(ct),
            design_standard="R-HPTIII A4 M12 Standard",
            has_high_utilization=True,
            utilization_warning=(
                f"R-HPTIII products show {RHPTIII_UTILIZATION_PCT}% combined utilization factors. "
                "Please verify design requirements with structural engineer."
            ),
            notes=(
                f"{RHPTIII_UTILIZATION_PCT}% combined utilization factor may indicate special design methodology",
                "Embedment depth affects capacity characteristics",
                "Requires C32 concrete grade or higher",
                "Special consideration required for seismic design",
            ),
        )
    if ct in _CPRO:
        return ProductCharacteristics(
            family_name=get_product_family_name(ct),
            design_standard="CPRO - MOSOCON Standard",
            has_high_utilization=False,
            utilization_warning=None,
            notes=(
                "Standard masonry support channel",
                "Well-established design methodology",
                "Variable utilization factors based on load conditions",
            ),
        )
    return ProductCharacteristics(
        family_name=str(channel_type),
        design_standard="Unknown",
        has_high_utilization=False,
        utilization_warning="Unknown channel type - please verify specifications",
        notes=("Channel type not recognized in current system",),
    )


def requires_engineering_review(channel_type: Union[ChannelType, str]) -> bool:
    return get_product_characteristics(channel_type).has_high_utilization
