from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple, Union

from ..models import SectionType


class SectionSizeError(ValueError):
    pass


# Standard size labels "<height>x<width>" (mm), smallest first.
_SECTION_SIZES: Mapping[SectionType, Tuple[str, ...]] = MappingProxyType(
    {
        SectionType.RHS: (
            "50x25", "50x30", "60x40", "80x40", "80x60", "90x50", "100x40", "100x50", "100x60", "100x80",
            "120x40", "120x60", "120x80", "150x100", "160x80", "200x100", "250x150", "300x200", "400x200",
            "450x250",
        ),
        SectionType.SHS: (
            "20x20", "25x25", "30x30", "40x40", "50x50", "60x60", "70x70", "80x80", "90x90", "100x100",
            "120x120", "150x150", "180x180", "200x200", "250x250", "300x300",
        ),
        SectionType.I_BEAM: (
            "127x76", "152x89", "178x102", "203x102", "203x133", "254x102", "254x146", "305x102", "305x127",
            "305x165", "356x127", "356x171", "406x140", "406x178", "457x152", "457x191", "533x210", "610x229",
            "610x305", "686x254", "762x267", "838x292", "914x305", "914x419",
        ),
    }
)


def _section_type(section_type: Union[SectionType, str]) -> SectionType:
    try:
        return SectionType(str(getattr(section_type, "value", section_type)).strip().upper())
    except ValueError:
        supported = ", ".join(t.value for t in SectionType)
        raise SectionSizeError(f"Unsupported steel section type '{section_type}'. Supported: {supported}") from None


def get_section_sizes(section_type: Union[SectionType, str]) -> Tuple[str, ...]:
    """Return the standard size labels for a section type."""
    return _SECTION_SIZES[_section_type(section_type)]


def is_valid_standard_size(section_type: Union[SectionType, str], size: str) -> bool:
    try:
        sizes = get_section_sizes(section_type)
    except SectionSizeError:
        return False
    return str(size).strip().lower() in sizes


def get_section_height(section_type: Union[SectionType, str], size: str) -> int:
    """Governing section height (mm): the first token of an 'AxB' size label.

    section_type is accepted for call-site symmetry; the label alone decides the height.
    """
    first = str(size).strip().lower().split("x")[0].strip()
    if not first.isdigit():
        raise SectionSizeError(f"Cannot parse section height from size '{size}' ({section_type}).")
    return int(first)
