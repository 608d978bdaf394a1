'''Read-only view of an RDKit Mol exposing exactly the atom and bond properties which CIP ranking consults'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

import logging
LOGGER = logging.getLogger(__name__)

from typing import Union
from fractions import Fraction

from rdkit.Chem.rdchem import Atom, Bond, Mol
from rdkit.Chem.rdmolops import FastFindRings

from .descriptor import Descriptor
from .mancude import mancude_duplicate_atomic_nums, DEFAULT_MAX_KEKULE_STRUCTURES
from ..chemistry.core import integer_bond_order
from ..chemistry.sanitization import kekulized_mol
from ..interfaces.rdkit.rdprops import (
    CIP_CODE_PROP,
    assign_property_to_rdobj,
    clear_property_from_rdobj,
)

AtomLike = Union[Atom, int]
BondLike = Union[Bond, int]


class CIPMol:
    '''
    Adapter over an RDKit Mol for CIP labelling
    
    Bond orders are read from a Kekulized copy of the molecule, so that aromatic
    bonds contribute whole single or double bonds to hierarchical digraphs, and
    duplicate atoms generated across aromatic double bonds are given atomic numbers
    averaged over all Kekule structures of their ring system
    '''
    def __init__(self, mol : Mol, max_kekule_structures : int=DEFAULT_MAX_KEKULE_STRUCTURES) -> None:
        self.mol = mol
        self.mol.UpdatePropertyCache(strict=False) # ensure implicit hydrogen counts are available, even for unsanitized Mols
        FastFindRings(self.mol) # ring membership is left unperceived on unsanitized Mols and SMARTS queries

        self._bond_orders : list[int] = self._compute_bond_orders(mol)
        self._mancude_atomic_nums : dict[int, Fraction] = mancude_duplicate_atomic_nums(mol, max_structures=max_kekule_structures)
        
    def __repr__(self) -> str:
        return f'{self.__class__.__name__}(num_atoms={self.num_atoms}, num_bonds={self.num_bonds})'
        
    @staticmethod
    def _compute_bond_orders(mol : Mol) -> list[int]:
        '''Integer orders of every bond in a Mol, taken from a Kekule structure where one exists'''
        kekmol = mol
        if any(bond.GetIsAromatic() for bond in mol.GetBonds()):
            kekmol = kekulized_mol(mol) or mol
            
        return [
            integer_bond_order(bond.GetBondType())
                for bond in kekmol.GetBonds()
        ]
    
    # LOOKUP
    @property
    def num_atoms(self) -> int:
        return self.mol.GetNumAtoms()
    
    @property
    def num_bonds(self) -> int:
        return self.mol.GetNumBonds()

    def atom(self, atom : AtomLike) -> Atom:
        '''Fetch an atom by index (or pass through an Atom); out-of-range indices raise IndexError'''
        if isinstance(atom, Atom):
            return atom
        
        if not (0 <= atom < self.num_atoms):
            raise IndexError(f'Atom index {atom} out of range for molecule with {self.num_atoms} atoms')
        return self.mol.GetAtomWithIdx(atom)

    def bond(self, bond : BondLike) -> Bond:
        '''Fetch a bond by index (or pass through a Bond); out-of-range indices raise IndexError'''
        if isinstance(bond, Bond):
            return bond
        
        if not (0 <= bond < self.num_bonds):
            raise IndexError(f'Bond index {bond} out of range for molecule with {self.num_bonds} bonds')
        return self.mol.GetBondWithIdx(bond)
    
    def bonds(self, atom : AtomLike) -> list[Bond]:
        '''Bonds incident to an atom, in the neighbor order RDKit chiral tags refer to'''
        return list(self.atom(atom).GetBonds())
    
    # ATOMIC PROPERTIES
    def atomic_num(self, atom : AtomLike) -> Fraction:
        return Fraction(self.atom(atom).GetAtomicNum())
    
    def duplicate_atomic_num(self, host : AtomLike, duplicated : AtomLike, bond : BondLike) -> Fraction:
        '''
        Atomic number of the duplicate of one atom attached to another across a multiple bond
        Averaged over Kekule structures when the bond belongs to a mancude ring system
        '''
        bond = self.bond(bond)
        host_idx = self.atom(host).GetIdx()
        if bond.GetIsAromatic() and bond.IsInRing() and (host_idx in self._mancude_atomic_nums):
            return self._mancude_atomic_nums[host_idx]
        return self.atomic_num(duplicated)

    def mass_num(self, atom : AtomLike) -> int:
        '''Isotopic mass number of an atom, 0 if unspecified'''
        return self.atom(atom).GetIsotope()

    def num_hydrogens(self, atom : AtomLike) -> int:
        '''Number of hydrogens on an atom which are not explicitly present as atoms'''
        return self.atom(atom).GetTotalNumHs()
    
    def in_ring(self, atom : AtomLike) -> bool:
        return self.atom(atom).IsInRing()
    
    # BOND PROPERTIES
    def bond_order(self, bond : BondLike) -> int:
        return self._bond_orders[self.bond(bond).GetIdx()]

    # LABEL WRITEBACK
    def write_label(self, rdobj : Union[Atom, Bond], descriptor : Descriptor) -> None:
        '''Attach a CIP descriptor to an atom or bond of the underlying Mol'''
        if not descriptor.is_specified:
            raise ValueError(f'Cannot write non-descriptor {descriptor} as a CIP label')
        assign_property_to_rdobj(rdobj, CIP_CODE_PROP, descriptor.value)

    def clear_label(self, rdobj : Union[Atom, Bond]) -> bool:
        '''Remove any CIP descriptor from an atom or bond of the underlying Mol'''
        return clear_property_from_rdobj(rdobj, CIP_CODE_PROP)
