'''Enumeration of the stereodescriptors CIP ranking can assign to a stereogenic unit'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

from typing import Optional
from enum import Enum


class Descriptor(Enum):
    '''
    Outcome of labelling a stereogenic unit
    
    Uppercase letters are the descriptors of true stereocenters, lowercase letters 
    are their pseudo-asymmetric counterparts; NONE, UNKNOWN and NS (not stereogenic)
    are non-results which are never written onto a molecule
    '''
    NONE    = 'none'
    UNKNOWN = 'unknown'
    NS      = 'ns'
    # tetrahedral
    R = 'R'
    S = 'S'
    r = 'r'
    s = 's'
    # axial
    M = 'M'
    P = 'P'
    m = 'm'
    p = 'p'
    # double bond
    E = 'E'
    Z = 'Z'

    @property
    def is_specified(self) -> bool:
        '''Whether this descriptor is an actual stereochemical label'''
        return self not in (Descriptor.NONE, Descriptor.UNKNOWN, Descriptor.NS)
    
    @property
    def is_pseudo_asymmetric(self) -> bool:
        return self in _PSEUDO_ASYMMETRIC
    
    @property
    def pairing_class(self) -> Optional[str]:
        '''
        The class a descriptor belongs to for like/unlike pairing, namely
        "A" for {R, M}, "B" for {S, P}, and None for descriptors which do not pair
        '''
        return _PAIRING_CLASSES.get(self, None)
    
    @property
    def inverted(self) -> 'Descriptor':
        '''The descriptor of the mirror-image arrangement (non-results and E/Z are their own inverses)'''
        return _INVERSES.get(self, self)

    def as_pseudo_asymmetric(self) -> 'Descriptor':
        '''The lowercase counterpart of a chiral descriptor (others are returned unchanged)'''
        return _PSEUDO_COUNTERPARTS.get(self, self)


_PSEUDO_ASYMMETRIC = frozenset({Descriptor.r, Descriptor.s, Descriptor.m, Descriptor.p})
_PAIRING_CLASSES = {
    Descriptor.R : 'A',
    Descriptor.M : 'A',
    Descriptor.S : 'B',
    Descriptor.P : 'B',
}
_INVERSES = {
    Descriptor.R : Descriptor.S,
    Descriptor.S : Descriptor.R,
    Descriptor.r : Descriptor.s,
    Descriptor.s : Descriptor.r,
    Descriptor.M : Descriptor.P,
    Descriptor.P : Descriptor.M,
    Descriptor.m : Descriptor.p,
    Descriptor.p : Descriptor.m,
}
_PSEUDO_COUNTERPARTS = {
    Descriptor.R : Descriptor.r,
    Descriptor.S : Descriptor.s,
    Descriptor.M : Descriptor.m,
    Descriptor.P : Descriptor.p,
}
