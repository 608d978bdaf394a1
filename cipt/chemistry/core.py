'''Reference for fundamental chemical units consulted during ranking, namely elements and bond types'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

import logging
LOGGER = logging.getLogger(__name__)

from typing import Union
from fractions import Fraction

from rdkit.Chem.rdmolfiles import MolFromSmiles
from rdkit.Chem.rdchem import BondType

from periodictable import elements
from periodictable.core import Element
ELEMENTS = elements

from .rdloggers import suppress_rdkit_logs


def _compile_bond_order_reference() -> dict[BondType, float]:
    '''
    Generate reference table of BondType to corresponding electronic bond order 
    (e.g. aromatic = 1.5, double = 2, etc.), consistent with RDKit's definition
    '''
    dummy = MolFromSmiles('*-*')
    bond = dummy.GetBondWithIdx(0) # DEV: can't directly initialize Bond from Python, so using this hacky aprroach to setup instead

    bond_orders_by_bond_type : dict[BondType, float] = dict()
    for bondtype in BondType.names.values():
        bond.SetBondType(bondtype)
        with suppress_rdkit_logs('rdApp.error'):
            try:
                # N.B.: these values are NOT the same as the keys of BondType.values; those are arbitrary indices, 
                # whereas the bond order here conveys info loosely about the number of electrons per bond
                bond_orders_by_bond_type[bondtype] = bond.GetBondTypeAsDouble()
            except RuntimeError:
                LOGGER.debug(f'RDKit BondType {bondtype!s} does not have a double-valued bond order defined')

    return bond_orders_by_bond_type
BOND_ORDER : dict[BondType, float] = _compile_bond_order_reference()

def integer_bond_order(bond_type : BondType) -> int:
    '''
    The number of edges a bond of the given type contributes to a hierarchical digraph
    
    Fractional orders (e.g. aromatic) are floored, and bonds without a meaningful order 
    (zero-order, dative, unspecified) still count as a single connection
    '''
    return max(int(BOND_ORDER.get(bond_type, 1.0)), 1)

def element_symbol(atomic_num : Union[int, Fraction]) -> str:
    '''
    Elemental symbol for an atomic number, with "*" for dummy atoms (atomic number 0)
    Fractional (averaged) atomic numbers are shown verbatim, as they correspond to no single element
    '''
    if isinstance(atomic_num, Fraction):
        if atomic_num.denominator != 1:
            return f'[{atomic_num}]'
        atomic_num = atomic_num.numerator
        
    if atomic_num == 0:
        return '*' # periodictable would otherwise interpret this as a neutron
    element : Element = ELEMENTS[atomic_num]
    return element.symbol
