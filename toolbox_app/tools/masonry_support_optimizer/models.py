from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

BracketType = Literal["Standard", "Inverted"]
AngleOrientation = Literal["Standard", "Inverted"]
FrameFixingType = Literal["concrete", "steel"]


class ChannelType(str, Enum):
    CPRO38 = "CPRO38"
    CPRO50 = "CPRO50"
    R_HPTIII_70 = "R-HPTIII-70"
    R_HPTIII_90 = "R-HPTIII-90"


class FixingMethod(str, Enum):
    BLIND_BOLT = "BLIND_BOLT"
    SET_SCREW = "SET_SCREW"


class SectionType(str, Enum):
    RHS = "RHS"
    SHS = "SHS"
    I_BEAM = "I-BEAM"


class DesignInputs(BaseModel):
    """
    Inputs for the masonry support bracket search.

    Coordinates:
      - support_level is the bracket support level relative to top of slab (SSL),
        0 at SSL and negative downward.
      - fixing_position is measured down from top of slab to the fixing centreline.

    All dimensions are mm, loads kN/m unless noted. When characteristic_load is left
    empty the line load is derived from the masonry density, thickness and height.
    """

    model_config = ConfigDict(frozen=True)

    # --- Geometry
    support_level: float = Field(-250.0, ge=-500.0, le=500.0, description="Bracket support level relative to SSL (mm).")
    cavity_width: float = Field(100.0, ge=50.0, le=200.0, description="Cavity width (mm).")
    slab_thickness: float = Field(225.0, ge=150.0, le=300.0, description="Slab thickness (mm).")
    top_critical_edge: float = Field(
        75.0, ge=0.0, description="Top critical edge distance (mm). Shallowest fixing position searched."
    )
    bottom_critical_edge: float = Field(125.0, ge=0.0, description="Bottom critical edge distance (mm).")
    notch_height: float = Field(0.0, ge=0.0, description="Bracket notch height (mm).")
    notch_depth: float = Field(0.0, ge=0.0, description="Bracket notch depth (mm). Recorded with the inputs only.")

    # --- Loading
    characteristic_load: Optional[float] = Field(
        None, ge=0.0, description="Characteristic line load (kN/m). Empty to derive from masonry properties."
    )
    masonry_density: float = Field(2000.0, ge=1500.0, le=2500.0, description="Masonry density (kg/m3).")
    masonry_thickness: float = Field(102.5, ge=50.0, le=250.0, description="Masonry leaf thickness (mm).")
    masonry_height: float = Field(3.0, ge=1.0, le=10.0, description="Masonry height supported (m).")
    facade_thickness: float = Field(102.5, gt=0.0, description="Facade thickness used for load eccentricity (mm).")
    load_position: float = Field(1.0 / 3.0, ge=0.0, le=1.0, description="Load position as a fraction of facade thickness.")

    # --- Fixing
    fixing_position: float = Field(75.0, gt=0.0, description="Fixing position below top of slab (mm).")
    use_custom_fixing_position: bool = Field(False, description="Search only the given fixing position.")
    enable_fixing_optimization: bool = Field(False, description="Search fixing positions in 5 mm steps.")
    concrete_grade: float = Field(30.0, ge=20.0, le=60.0, description="Concrete characteristic strength f_ck (N/mm2).")
    allowed_channel_types: Optional[List[str]] = Field(
        None, description="Channel types to consider. Empty for the full catalog."
    )

    # --- Steel frame fixing
    frame_fixing_type: FrameFixingType = Field("concrete", description="Fix into a concrete slab or a steel section.")
    steel_section_type: Optional[SectionType] = Field(None, description="Steel section type for steel frame fixing.")
    steel_section_size: Optional[str] = Field(None, description="Steel section size label, e.g. 200x100.")
    steel_fixing_method: Optional[Literal["SET_SCREW", "BLIND_BOLT", "both"]] = Field(
        None, description="Steel fixing method (I-beam only; RHS/SHS always use blind bolts)."
    )
    steel_bolt_size: Literal["M10", "M12", "M16", "all"] = Field("all", description="Steel fixing bolt size.")

    @field_validator("allowed_channel_types")
    @classmethod
    def _normalize_channel_types(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        return [str(x).strip().upper() for x in v if str(x).strip()]

    @field_validator("steel_section_size")
    @classmethod
    def _normalize_section_size(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else v.strip().lower()

    @model_validator(mode="after")
    def _cross_checks(self):
        if self.top_critical_edge >= self.slab_thickness:
            raise ValueError("top_critical_edge must be less than slab_thickness.")
        if self.fixing_position >= self.slab_thickness:
            raise ValueError("fixing_position must be less than slab_thickness.")
        if self.notch_height >= 490.0:
            raise ValueError("notch_height must be less than the maximum bracket height (490 mm).")
        if self.frame_fixing_type == "steel":
            from .db.steel_sections import is_valid_standard_size

            if self.steel_section_type is None or not self.steel_section_size:
                raise ValueError("steel frame fixing requires steel_section_type and steel_section_size.")
            if not is_valid_standard_size(self.steel_section_type, self.steel_section_size):
                raise ValueError(
                    f"{self.steel_section_size} is not a standard {self.steel_section_type.value} size."
                )
        return self

    @property
    def is_steel_frame(self) -> bool:
        return self.frame_fixing_type == "steel"
