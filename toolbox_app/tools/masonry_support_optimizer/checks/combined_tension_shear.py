from __future__ import annotations

import math
from dataclasses import dataclass

from ..constants import F_Y, GAMMA_M0
from ..precision import round12


@dataclass(frozen=True)
class CombinedTensionShearResult:
    tau_ed: float  # N/mm2
    sigma_ed: float  # N/mm2
    f_yd: float  # N/mm2
    utilization_pct: float
    passes: bool


def verify_combined_tension_shear(n_ed: float, v_ed: float, area: float, shear_area: float) -> CombinedTensionShearResult:
    """
    Von Mises yield check for coincident tension and shear.

      tau   = V_ed * 1000 / A_v
      sigma = N_ed * 1000 / A
      U     = 100 * sqrt((sigma/f_yd)^2 + 3 (tau/f_yd)^2)   with f_yd = F_y / gamma_M0
    """
    f_yd = round12(F_Y / GAMMA_M0)
    if area <= 0.0 or shear_area <= 0.0:
        return CombinedTensionShearResult(
            tau_ed=math.inf, sigma_ed=math.inf, f_yd=f_yd, utilization_pct=math.inf, passes=False
        )

    tau = round12(float(v_ed) * 1000.0 / float(shear_area))
    sigma = round12(float(n_ed) * 1000.0 / float(area))
    u = round12(100.0 * math.sqrt((sigma / f_yd) ** 2 + 3.0 * (tau / f_yd) ** 2))
    return CombinedTensionShearResult(tau_ed=tau, sigma_ed=sigma, f_yd=f_yd, utilization_pct=u, passes=u <= 100.0)
