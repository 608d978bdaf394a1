'''Utilities for reading the stereochemical annotations RDKit places on atoms and bonds'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

from rdkit.Chem.rdchem import (
    Atom,
    Bond,
    BondStereo,
    BondType,
    ChiralType,
)

TETRAHEDRAL_CHIRAL_TAGS : frozenset[ChiralType] = frozenset({
    ChiralType.CHI_TETRAHEDRAL_CW,
    ChiralType.CHI_TETRAHEDRAL_CCW,
})
# whether the stereo atoms of a double bond lie on the same side of it
DOUBLE_BOND_STEREO_IS_CIS : dict[BondStereo, bool] = {
    BondStereo.STEREOZ     : True,
    BondStereo.STEREOCIS   : True,
    BondStereo.STEREOE     : False,
    BondStereo.STEREOTRANS : False,
}
# whether the stereo atoms of an atropisomeric bond are arranged clockwise when viewed along it
ATROPISOMER_STEREO_IS_CW : dict[BondStereo, bool] = {
    BondStereo.STEREOATROPCW  : True,
    BondStereo.STEREOATROPCCW : False,
}


def has_tetrahedral_tag(atom : Atom) -> bool:
    '''Whether an atom is annotated with a specified tetrahedral parity'''
    return atom.GetChiralTag() in TETRAHEDRAL_CHIRAL_TAGS

def is_stereo_double_bond(bond : Bond) -> bool:
    '''Whether a bond is a double bond with specified cis/trans stereochemistry and both reference atoms set'''
    return (
        bond.GetBondType() == BondType.DOUBLE
        and bond.GetStereo() in DOUBLE_BOND_STEREO_IS_CIS
        and len(bond.GetStereoAtoms()) == 2
    )

def _atropisomer_ligand_bonds(bond : Bond, atom : Atom) -> list[Bond]:
    '''Bonds of one end of an axis other than the axis itself, in the order RDKit iterates over them'''
    return [other for other in atom.GetBonds() if other.GetIdx() != bond.GetIdx()]

def is_atropisomeric_bond(bond : Bond) -> bool:
    '''Whether a bond is a stereogenic axis of restricted rotation, with one or two ligands on either end'''
    if bond.GetStereo() not in ATROPISOMER_STEREO_IS_CW:
        return False

    return all(
        1 <= len(_atropisomer_ligand_bonds(bond, atom)) <= 2
            for atom in (bond.GetBeginAtom(), bond.GetEndAtom())
    )

def atropisomer_reference_atoms(bond : Bond) -> tuple[int, int]:
    '''
    Indices of the atoms a bond's atropisomeric parity is expressed relative to,
    the first bonded to the bond's begin atom and the second to its end atom

    RDKit leaves the stereo atoms of an atropisomeric bond unset, in which case the
    reference on either end is the atom across its first bond other than the axis
    '''
    if len(bond.GetStereoAtoms()) == 2:
        return oriented_stereo_atoms(bond)

    references : list[int] = []
    for atom in (bond.GetBeginAtom(), bond.GetEndAtom()):
        ligand_bonds = _atropisomer_ligand_bonds(bond, atom)
        if not ligand_bonds:
            raise ValueError(f'Atom {atom.GetIdx()} at the end of bond {bond.GetIdx()} has no ligands to orient the axis by')
        references.append(ligand_bonds[0].GetOtherAtomIdx(atom.GetIdx()))

    return tuple(references)

def oriented_stereo_atoms(bond : Bond) -> tuple[int, int]:
    '''
    Indices of the two stereo reference atoms of a bond, ordered such that 
    the first is bonded to the bond's begin atom and the second to its end atom
    '''
    stereo_atoms = tuple(bond.GetStereoAtoms())
    if len(stereo_atoms) != 2:
        raise ValueError(f'Bond {bond.GetIdx()} has {len(stereo_atoms)} stereo atoms set (expected 2)')
    
    mol = bond.GetOwningMol()
    begin_idx, end_idx = bond.GetBeginAtomIdx(), bond.GetEndAtomIdx()
    first, second = stereo_atoms
    if (mol.GetBondBetweenAtoms(begin_idx, first) is not None) and (mol.GetBondBetweenAtoms(end_idx, second) is not None):
        return first, second
    if (mol.GetBondBetweenAtoms(begin_idx, second) is not None) and (mol.GetBondBetweenAtoms(end_idx, first) is not None):
        return second, first
    raise ValueError(f'Stereo atoms {stereo_atoms} are not neighbors of the respective ends of bond {bond.GetIdx()}')
