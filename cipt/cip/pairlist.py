'''Bookkeeping for the like/unlike pairing of descriptors along a branch, as ranked by sequence rule 4b'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

import logging
LOGGER = logging.getLogger(__name__)

from typing import Optional

from .descriptor import Descriptor

NUM_PAIRING_BITS : int = 64 # NOTE: most significant bit is never set, so at most 63 pairings are recorded


class PairList:
    '''
    Accumulates whether each of a sequence of descriptors is "like" or "unlike" 
    the first (reference) descriptor which was accepted
    
    Pairings are packed most-significant-bit first into a fixed-width integer, with
    like=1 and unlike=0, so that comparing two PairLists of equal length amounts to
    comparing integers (like ranks ahead of unlike at the first point of difference)
    '''
    def __init__(self, ref : Optional[Descriptor]=None) -> None:
        self._descriptors : list[Descriptor] = []
        self._ref_class : Optional[str] = None
        self._pairing : int = 0
        
        if ref is not None:
            self.add(ref)
            
    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self!s})'
    
    def __str__(self) -> str:
        if not self._descriptors:
            return ''
        
        ref = self._descriptors[0]
        pairings = ''.join(
            'l' if (descriptor.pairing_class == self._ref_class) else 'u'
                for descriptor in self._descriptors[1:]
        )
        return f'{ref.value}:{pairings}'

    @property
    def ref(self) -> Optional[Descriptor]:
        '''The descriptor against which all subsequent descriptors are paired'''
        if not self._descriptors:
            return None
        return self._descriptors[0]
    
    @property
    def descriptors(self) -> tuple[Descriptor, ...]:
        return tuple(self._descriptors)
    
    @property
    def pairing(self) -> int:
        '''The emitted like (1) / unlike (0) bits, most significant first and zero-padded'''
        return self._pairing
    
    def __len__(self) -> int:
        return len(self._descriptors)
    
    def add(self, descriptor : Descriptor) -> bool:
        '''
        Record a descriptor, pairing it against the reference if one has already been set
        Returns whether the descriptor was accepted (only R, S, M, and P participate in pairing)
        '''
        desc_class : Optional[str] = descriptor.pairing_class
        if desc_class is None:
            return False
        
        if self._ref_class is None:
            self._ref_class = desc_class # first accepted descriptor sets the reference and emits no bit
        else:
            shift = NUM_PAIRING_BITS - 1 - len(self._descriptors)
            if shift < 0:
                LOGGER.debug(f'Pairing capacity of {NUM_PAIRING_BITS - 1} exceeded; pairing of {descriptor.value} not recorded')
            elif desc_class == self._ref_class:
                self._pairing |= (1 << shift)
        self._descriptors.append(descriptor)
        
        return True
    
    def compare(self, other : 'PairList') -> int:
        '''
        Three-way comparison against another PairList (positive if this one ranks higher)
        Longer lists rank higher; lists of equal length rank by their pairing bits
        '''
        if len(self) != len(other):
            return (len(self) > len(other)) - (len(self) < len(other))
        return (self.pairing > other.pairing) - (self.pairing < other.pairing)
