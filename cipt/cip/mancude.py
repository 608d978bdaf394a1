'''
Averaged atomic numbers for duplicate atoms in mancude ring systems 
(rings with the maximum number of non-cumulative double bonds, e.g. aromatic rings)

A mancude ring lacks one fixed arrangement of double bonds, so the duplicate atom an 
atom receives for "its" double bond is taken to have the mean atomic number of all
the partners it is double-bonded to across every Kekule structure of the ring system
'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

import logging
LOGGER = logging.getLogger(__name__)

from collections import Counter
from fractions import Fraction

import networkx as nx
from rdkit.Chem.rdchem import BondType, Mol, ResonanceMolSupplier, ResonanceFlags

from ..chemistry.rdloggers import suppress_rdkit_logs

DEFAULT_MAX_KEKULE_STRUCTURES : int = 1000


def mancude_bond_idxs(mol : Mol) -> frozenset[int]:
    '''Indices of all bonds which belong to an aromatic ring'''
    return frozenset(
        bond.GetIdx()
            for bond in mol.GetBonds()
                if bond.GetIsAromatic() and bond.IsInRing()
    )

def mancude_ring_systems(mol : Mol) -> list[frozenset[int]]:
    '''
    Partition the atoms of all aromatic rings in a Mol into fused (i.e. bond-connected) ring systems
    
    Returns
    -------
    ring_systems : list[frozenset[int]]
        The atom indices of each ring system, sorted by smallest member atom index
    '''
    aromatic_graph = nx.Graph()
    for bond in mol.GetBonds():
        if bond.GetIsAromatic() and bond.IsInRing():
            aromatic_graph.add_edge(bond.GetBeginAtomIdx(), bond.GetEndAtomIdx(), bond_idx=bond.GetIdx())
    
    return sorted(
        (frozenset(component) for component in nx.connected_components(aromatic_graph)),
        key=min,
    )

def mancude_duplicate_atomic_nums(
    mol : Mol,
    max_structures : int=DEFAULT_MAX_KEKULE_STRUCTURES,
) -> dict[int, Fraction]:
    '''
    Compute the averaged atomic number of the duplicate atom hosted by each atom in a mancude ring system
    
    Parameters
    ----------
    mol : Mol
        An RDKit Mol with aromaticity perceived
    max_structures : int, default=DEFAULT_MAX_KEKULE_STRUCTURES
        The maximum number of Kekule structures to enumerate
        
    Returns
    -------
    duplicate_atomic_nums : dict[int, Fraction]
        Maps the index of each atom which is double-bonded within a ring system in at least one Kekule
        structure to the mean atomic number of its double bond partners over all Kekule structures
        Empty if the molecule has no aromatic rings, or if its Kekule structures could not be enumerated
    '''
    ring_bond_idxs = mancude_bond_idxs(mol)
    if not ring_bond_idxs:
        return {}

    partner_sums : Counter[int] = Counter()
    num_contributions : Counter[int] = Counter()
    with suppress_rdkit_logs('rdApp.error'):
        try:
            structures = ResonanceMolSupplier(mol, ResonanceFlags.KEKULE_ALL, max_structures)
            for structure in structures:
                if structure is None:
                    continue

                for bond_idx in ring_bond_idxs:
                    bond = structure.GetBondWithIdx(bond_idx)
                    if bond.GetBondType() != BondType.DOUBLE:
                        continue
                    
                    begin, end = bond.GetBeginAtom(), bond.GetEndAtom()
                    partner_sums[begin.GetIdx()] += end.GetAtomicNum()
                    partner_sums[end.GetIdx()] += begin.GetAtomicNum()
                    num_contributions[begin.GetIdx()] += 1
                    num_contributions[end.GetIdx()] += 1
        except (RuntimeError, ValueError) as err:
            LOGGER.warning(f'Could not enumerate Kekule structures; duplicate atoms in aromatic rings will use integer atomic numbers ({err})')
            return {}
    
    return {
        atom_idx : Fraction(partner_sums[atom_idx], num_contributions[atom_idx])
            for atom_idx in num_contributions
    }
