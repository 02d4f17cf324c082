"""
Physical constants and model coefficients for EPMA quantification.

Energies are in eV unless the name says otherwise; mass depths in g/cm^2 and
mass absorption coefficients in cm^2/g.
"""

import numpy as np

# ============================================================================
# Conversion Factors
# ============================================================================

EV_PER_KEV = 1000.0  # eV/keV
CM_PER_NM = 1.0e-7  # cm/nm
CM_PER_UM = 1.0e-4  # cm/um
CM_PER_M = 100.0  # cm/m
RAD_PER_DEG = np.pi / 180.0

# ============================================================================
# Electron Transport
# ============================================================================

# Heinrich's modified Lenard coefficient: sigma = 4.5e5 / (E0^1.65 - Ec^1.65)
LENARD_COEFFICIENT = 4.5e5  # keV^1.65 cm^2/g
LENARD_EXPONENT = 1.65

# Bethe mean-energy factor in ln(1.166 E / J)
BETHE_FACTOR = 1.166

# Philibert-Duncumb-Heinrich h = PDH_H_FACTOR * A / Z^2
PDH_H_FACTOR = 1.2

# ============================================================================
# Fluorescence
# ============================================================================

# Reed (1965) relative ionization exponent (U - 1)^1.67
REED_EXPONENT = 1.67

# Relative efficiency of a line family exciting a target shell family
REED_SHELL_FACTORS = {
    ("K", "K"): 1.0,
    ("L", "L"): 1.0,
    ("K", "L"): 4.2,  # K line exciting an L shell
    ("L", "K"): 0.24,  # L line exciting a K shell
}

# ============================================================================
# Numerics
# ============================================================================

# Relative guard used where two nearly equal quantities are differenced
EPSILON = 1.0e-12
