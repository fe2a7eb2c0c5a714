from __future__ import annotations

TOOL_ID = "masonry_support_optimizer"
DEFAULT_UNITS_SYSTEM = "SI"

GRAVITY = 9.81  # m/s2
STEEL_DENSITY_KG_M3 = 7850.0

# Load factor
DEAD_LOAD_FACTOR = 1.35

# Concrete design strength f_cd = alpha_cc * f_ck / gamma_c
CONCRETE_GRADE = 30.0
ALPHA_CC = 0.85
GAMMA_C = 1.5

# Stainless steel (angle and bracket)
F_Y = 210.0  # N/mm2
GAMMA_M0 = 1.1
EPSILON = 1.058
BRACKET_PLATES = 2  # n_p

# Angle-to-bracket bolts
F_UB = 700.0  # N/mm2
GAMMA_M2 = 1.25
BOLT_TENSION_ALPHA = 0.9
BOLT_STRESS_AREA_MM2 = {10: 58.0, 12: 84.3}

# Serviceability deflection
E_STEEL = 200000.0  # N/mm2
SECANT_MODULUS_EXPONENT = 8  # nonlinear stainless stress-strain curve
MAX_ANGLE_DEFLECTION = 1.5  # mm
MAX_SYSTEM_DEFLECTION = 2.0  # mm
# Angle second moment of area over the span between brackets, by thickness (mm4)
ANGLE_SPAN_IXX = {3: 139727.0, 4: 180849.0, 5: 218359.0, 6: 255683.0, 8: 617257.0, 10: 741102.0}

# Packing between the angle and the bracket (mm)
PACKER_THICKNESS = 10.0

# Fixing equilibrium
EQUILIBRIUM_TOLERANCE = 1e-5
CHANNEL_INTERACTION_EXPONENT = 1.5
CHANNEL_INTERACTION_LINEAR_LIMIT = 1.2
STEEL_FIXING_TENSION_FACTOR = 1.4

# System geometry defaults (mm)
BRACKET_TOP_TO_FIXING = 40.0
WORST_CASE_SLOT_ADJUSTMENT = 15.0
BASELINE_FIXING_POINT_FROM_SSL = -75.0
MIN_FIXING_EDGE = 75.0
FIXING_POSITION_STEP = 5.0
HORIZONTAL_LEG = 90.0
BASE_PLATE_WIDTH = 56.0
ISOLATION_SHIM_THICKNESS = 3.0
DESIGN_CAVITY_ALLOWANCE = 20.0
PROJECTION_CAVITY_OFFSET = 10.0
MIN_RISE_TO_BOLTS = 10.0
ANGLE_RISE_DEDUCTION = 16.5

BRACKET_SPINE_WIDTH = {3: 43.17, 4: 40.55}

# Enumerations searched by the combination generator
BRACKET_THICKNESSES = (3, 4)
ANGLE_THICKNESSES = (3, 4, 5, 6, 8)
BOLT_DIAMETERS = (10, 12)
STEEL_BRACKET_CENTRES = tuple(range(200, 501, 25))

# Validation ranges for generated geometry (mm)
BRACKET_HEIGHT_MIN = 100.0
BRACKET_HEIGHT_MAX = 490.0
BRACKET_PROJECTION_MIN = 65.0
BRACKET_PROJECTION_MAX = 250.0

# Bracket thickness rule: 4 mm only when heavily loaded and supported well clear of the slab
THICK_BRACKET_LOAD_THRESHOLD = 4.0  # kN/m
THICK_BRACKET_SLAB_CLEARANCE = 50.0  # mm

# Bracket centres cap
HIGH_LOAD_CENTRES_THRESHOLD = 5.0  # kN/m
MAX_CENTRES_HIGH_LOAD = 500
MAX_CENTRES_NORMAL = 600


def vertical_leg_for(angle_thickness: int) -> float:
    return 75.0 if int(angle_thickness) == 8 else 60.0
