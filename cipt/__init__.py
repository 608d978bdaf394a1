"""Cahn-Ingold-Prelog stereodescriptor assignment for RDKit molecules (cipt)"""

from .cip import assign_cip_labels, Descriptor
from ._version import __version__

TOOLKIT_NAME : str = 'CIP Toolkit (cipt)'
