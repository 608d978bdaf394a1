'''Chemical reference data and RDKit-facing helpers used when ranking substituents'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

from .core import *
from .stereo import (
    has_tetrahedral_tag,
    is_stereo_double_bond,
    is_atropisomeric_bond,
    oriented_stereo_atoms,
    atropisomer_reference_atoms,
)
