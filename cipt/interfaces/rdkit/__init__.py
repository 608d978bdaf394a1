'''Interfaces between cipt and RDKit'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

from .rdprops import *
