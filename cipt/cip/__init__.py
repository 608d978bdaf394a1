'''Cahn-Ingold-Prelog (CIP) ranking of ligands and assignment of stereodescriptors'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

from .descriptor import Descriptor
from .control import (
    CIPLabelingError,
    MaxIterationsExceeded,
    LabelingCancelled,
    ResolutionControl,
    DEFAULT_MAX_ITERATIONS,
)
from .labeller import assign_cip_labels
