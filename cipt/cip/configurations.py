'''
Stereogenic units (tetrahedral centers, stereogenic double bonds, and atropisomeric bonds)
and the conversion of their ligand rankings and spatial parities into descriptors
'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

import logging
LOGGER = logging.getLogger(__name__)

from typing import Hashable, Optional, Sequence, Union
from abc import ABC, abstractmethod

from rdkit.Chem.rdchem import Atom, Bond, ChiralType

from .cipmol import CIPMol, AtomLike, BondLike
from .control import ResolutionControl
from .descriptor import Descriptor
from .digraph import Digraph, Edge, Node
from .rules import RULE_6
from .sorting import Priority, Sorter
from ..chemistry.stereo import (
    has_tetrahedral_tag,
    is_stereo_double_bond,
    is_atropisomeric_bond,
    oriented_stereo_atoms,
    atropisomer_reference_atoms,
    DOUBLE_BOND_STEREO_IS_CIS,
    ATROPISOMER_STEREO_IS_CW,
)

# placeholder carriers for ligands which are not atoms of the molecule
IMPLICIT_HYDROGEN : int = -1
LONE_PAIR : int = -2


def permutation_parity(reference : Sequence[Hashable], permuted : Sequence[Hashable]) -> int:
    '''
    Parity of the permutation which rearranges one ordering of distinct items into another
    Returns 0 for an even permutation and 1 for an odd one; raises ValueError if the two are not rearrangements of each other
    '''
    positions = {item : i for i, item in enumerate(reference)}
    if (len(positions) != len(reference)) or (len(permuted) != len(reference)) or (set(permuted) != set(positions)):
        raise ValueError(f'{permuted!r} is not a rearrangement of distinct items {reference!r}')

    mapping = [positions[item] for item in permuted]
    parity = 0
    seen = [False] * len(mapping)
    for start in range(len(mapping)):
        cycle_len = 0
        i = start
        while not seen[i]:
            seen[i] = True
            i = mapping[i]
            cycle_len += 1
        if cycle_len:
            parity += cycle_len - 1

    return parity % 2


class Configuration(ABC):
    '''
    A stereogenic unit whose descriptor is determined by ranking the ligands around its focal atom(s)

    Attributes
    ----------
    cipmol : CIPMol
        The molecule the unit belongs to
    foci : tuple[int, ...]
        Indices of the focal atoms (one for a center, two for a bond)
    carriers : tuple[int, ...]
        The ligands the unit's spatial parity is expressed relative to
    control : ResolutionControl
        Budget and cancellation state which any digraph built for this unit counts against
    '''
    def __init__(
        self,
        cipmol : CIPMol,
        foci : tuple[int, ...],
        carriers : tuple[int, ...],
        control : Optional[ResolutionControl]=None,
    ) -> None:
        self.cipmol = cipmol
        self.foci = foci
        self.carriers = carriers
        self.control = control if (control is not None) else ResolutionControl()
        self._digraph : Optional[Digraph] = None

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}(foci={self.foci}, carriers={self.carriers})'

    @property
    def focus(self) -> int:
        '''Index of the atom the unit's digraph is rooted at'''
        return self.foci[0]

    @property
    def digraph(self) -> Digraph:
        '''The hierarchical digraph rooted at the unit's focus, built on first access'''
        if self._digraph is None:
            self._digraph = Digraph(self.cipmol, self.focus, control=self.control)
        return self._digraph

    def release_digraph(self) -> None:
        '''Discard the digraph built for this unit'''
        self._digraph = None

    @property
    @abstractmethod
    def rdobj(self) -> Union[Atom, Bond]:
        '''The RDKit Atom or Bond the unit's descriptor is attached to'''
        ...

    @abstractmethod
    def is_selected(self, atom_idxs : Optional[set[int]], bond_idxs : Optional[set[int]]) -> bool:
        '''Whether the unit is among the atoms or bonds requested for labelling (None selects everything)'''
        ...

    @abstractmethod
    def label_node(self, node : Node, sorter : Sorter) -> Descriptor:
        '''Determine the descriptor of the occurrence of the unit at a node of some digraph, re-rooting it there'''
        ...

    def label(self, sorter : Sorter) -> Descriptor:
        '''Determine the descriptor of the unit, as seen from its own digraph'''
        digraph = self.digraph
        digraph.change_root(digraph.original_root)

        return self.label_node(digraph.original_root, sorter)

    def aux_node(self, node : Node) -> Optional[Node]:
        '''
        The node on which the auxiliary descriptor of an occurrence of this
        unit's focus is stored (None if the occurrence can't carry one)
        '''
        return node

    def write_label(self, descriptor : Descriptor) -> None:
        self.cipmol.write_label(self.rdobj, descriptor)

    def clear_label(self) -> bool:
        return self.cipmol.clear_label(self.rdobj)


class Tetrahedral(Configuration):
    '''A stereogenic center with (up to) four ligands, one of which may be a lone pair'''
    def __init__(self, cipmol : CIPMol, atom : AtomLike, control : Optional[ResolutionControl]=None) -> None:
        focus_atom = cipmol.atom(atom)
        if not self.is_eligible(cipmol, focus_atom):
            raise ValueError(f'Atom {focus_atom.GetIdx()} is not a tetrahedral stereocenter')

        carriers = [bond.GetOtherAtomIdx(focus_atom.GetIdx()) for bond in cipmol.bonds(focus_atom)]
        carriers.extend([IMPLICIT_HYDROGEN] * cipmol.num_hydrogens(focus_atom))
        if len(carriers) == 3:
            carriers.append(LONE_PAIR)
        super().__init__(cipmol, foci=(focus_atom.GetIdx(),), carriers=tuple(carriers), control=control)

        self.chiral_tag : ChiralType = focus_atom.GetChiralTag()

    @staticmethod
    def is_eligible(cipmol : CIPMol, atom : Atom) -> bool:
        '''Whether an atom has a tetrahedral parity and 3 or 4 distinct ligand positions'''
        if not has_tetrahedral_tag(atom):
            return False

        num_hydrogens = cipmol.num_hydrogens(atom)
        return (num_hydrogens <= 1) and (3 <= (atom.GetDegree() + num_hydrogens) <= 4)

    @property
    def rdobj(self) -> Atom:
        return self.cipmol.atom(self.focus)

    def is_selected(self, atom_idxs : Optional[set[int]], bond_idxs : Optional[set[int]]) -> bool:
        return (atom_idxs is None) or (self.focus in atom_idxs)

    def _rank_with_reference(self, digraph : Digraph, edges : list[Edge], priority : Priority, sorter : Sorter) -> Optional[Priority]:
        '''Break ties between otherwise-equivalent ligands by designating reference ligands (Rule 6)'''
        if len(priority.groups) == 2:
            with digraph.rule6_reference(priority.ordered[1].end.atom_idx):
                return sorter.prioritize(edges)
        elif len(priority.groups) == 1:
            with digraph.rule6_reference(priority.ordered[0].end.atom_idx):
                first = sorter.prioritize(edges).ordered
            with digraph.rule6_reference(first[1].end.atom_idx):
                second = sorter.prioritize(edges)
            if permutation_parity(first, second.ordered) == 1:
                return None
            return second
        return None

    def label_node(self, node : Node, sorter : Sorter) -> Descriptor:
        digraph = node.digraph
        digraph.change_root(node)

        # duplicates of multiple bonds to the center are not ligands of their own (e.g. the oxo of a phosphonate)
        edges = [edge for edge in node.out_edges if not edge.end.is_bond_duplicate]
        if len(edges) < 3:
            return Descriptor.UNKNOWN

        priority = sorter.prioritize(edges)
        if not priority.unique:
            if (len(edges) != 4) or (RULE_6 not in sorter):
                return Descriptor.UNKNOWN
            priority = self._rank_with_reference(digraph, edges, priority, sorter)
            if (priority is None) or (not priority.unique):
                return Descriptor.UNKNOWN

        ranked_carriers : list[int] = [
            IMPLICIT_HYDROGEN if edge.end.is_implicit_hydrogen else edge.end.atom_idx
                for edge in priority.ordered
        ]
        if len(ranked_carriers) == 3:
            ranked_carriers.append(LONE_PAIR)

        try:
            parity = permutation_parity(self.carriers, ranked_carriers)
        except ValueError:
            LOGGER.debug(f'Ranked ligands {ranked_carriers} of atom {self.focus} do not match its carriers {self.carriers}')
            return Descriptor.UNKNOWN

        clockwise = (self.chiral_tag == ChiralType.CHI_TETRAHEDRAL_CW)
        if parity == 1:
            clockwise = not clockwise
        descriptor = Descriptor.R if clockwise else Descriptor.S

        if priority.pseudo_asymmetric:
            return descriptor.as_pseudo_asymmetric()
        return descriptor


class BondConfiguration(Configuration):
    '''A stereogenic unit whose foci are the two ends of a bond'''
    def __init__(
        self,
        cipmol : CIPMol,
        bond : BondLike,
        carriers : Optional[tuple[int, int]]=None,
        control : Optional[ResolutionControl]=None,
    ) -> None:
        focus_bond = cipmol.bond(bond)
        if carriers is None:
            carriers = oriented_stereo_atoms(focus_bond)
        super().__init__(
            cipmol,
            foci=(focus_bond.GetBeginAtomIdx(), focus_bond.GetEndAtomIdx()),
            carriers=carriers,
            control=control,
        )
        self.bond_idx : int = focus_bond.GetIdx()

    @property
    def rdobj(self) -> Bond:
        return self.cipmol.bond(self.bond_idx)

    def is_selected(self, atom_idxs : Optional[set[int]], bond_idxs : Optional[set[int]]) -> bool:
        return (bond_idxs is None) or (self.bond_idx in bond_idxs)

    def _partner(self, node : Node, partner_idx : int) -> Optional[Node]:
        '''The (non-duplicate) node adjacent to the given one which represents the other end of the bond'''
        for edge in node.edges:
            other = edge.other(node)
            if (other.atom_idx == partner_idx) and not (other.is_duplicate or other.is_implicit_hydrogen):
                return other
        return None

    def aux_node(self, node : Node) -> Optional[Node]:
        '''The deeper of the two nodes spanning an occurrence of the bond'''
        partner = self._partner(node, self.foci[1])
        if partner is None:
            return None
        return partner if (partner.distance > node.distance) else node

    @staticmethod
    def _ligand_edges(node : Node, axis_partner : int) -> list[Edge]:
        '''Outgoing edges of an end of the bond, excluding the bond itself and the duplicates of any multiple bonds'''
        return [
            edge
                for edge in node.out_edges
                    if edge.end.is_implicit_hydrogen or not (edge.end.is_bond_duplicate or (edge.end.atom_idx == axis_partner))
        ]

    def _flip_parity(self, node : Node, sorter : Sorter) -> tuple[Optional[bool], bool]:
        '''
        Rank the ligands at either end of the bond, re-rooting at each end in turn

        Returns
        -------
        flipped : Optional[bool]
            Whether the top-ranked ligands lie on opposite sides relative to the stereo atoms
            (i.e. whether the stored parity must be inverted), or None if either end cannot be ranked uniquely
        pseudo_asymmetric : bool
            Whether either ranking was decided by a pseudo-asymmetric rule
        '''
        near_idx, far_idx = self.foci
        near_carrier, far_carrier = self.carriers
        if node.atom_idx != near_idx:
            near_idx, far_idx = far_idx, near_idx
            near_carrier, far_carrier = far_carrier, near_carrier

        digraph = node.digraph
        digraph.change_root(node)
        partner = self._partner(node, far_idx)
        if partner is None:
            return None, False

        near_priority = sorter.prioritize(self._ligand_edges(node, far_idx))
        if (not near_priority.unique) or (len(near_priority) == 0):
            return None, False

        digraph.change_root(partner)
        far_priority = sorter.prioritize(self._ligand_edges(partner, near_idx))
        if (not far_priority.unique) or (len(far_priority) == 0):
            return None, False

        near_top, far_top = near_priority.ordered[0].end, far_priority.ordered[0].end
        flipped = (
            (near_top.is_implicit_hydrogen or (near_top.atom_idx != near_carrier))
            ^ (far_top.is_implicit_hydrogen or (far_top.atom_idx != far_carrier))
        )
        return flipped, (near_priority.pseudo_asymmetric or far_priority.pseudo_asymmetric)


class Sp2Bond(BondConfiguration):
    '''A double bond whose substituents may lie on the same (Z) or opposite (E) sides'''
    def __init__(self, cipmol : CIPMol, bond : BondLike, control : Optional[ResolutionControl]=None) -> None:
        focus_bond = cipmol.bond(bond)
        if not is_stereo_double_bond(focus_bond):
            raise ValueError(f'Bond {focus_bond.GetIdx()} is not a stereogenic double bond')
        super().__init__(cipmol, focus_bond, control=control)
        self.cis : bool = DOUBLE_BOND_STEREO_IS_CIS[focus_bond.GetStereo()]

    def label_node(self, node : Node, sorter : Sorter) -> Descriptor:
        flipped, _ = self._flip_parity(node, sorter)
        if flipped is None:
            return Descriptor.UNKNOWN

        return Descriptor.Z if (self.cis ^ flipped) else Descriptor.E


class AtropisomerBond(BondConfiguration):
    '''A single bond about which rotation is restricted, whose ligands spiral clockwise (P) or counterclockwise (M)'''
    def __init__(self, cipmol : CIPMol, bond : BondLike, control : Optional[ResolutionControl]=None) -> None:
        focus_bond = cipmol.bond(bond)
        if not is_atropisomeric_bond(focus_bond):
            raise ValueError(f'Bond {focus_bond.GetIdx()} is not an atropisomeric bond')
        super().__init__(cipmol, focus_bond, carriers=atropisomer_reference_atoms(focus_bond), control=control)
        self.clockwise : bool = ATROPISOMER_STEREO_IS_CW[focus_bond.GetStereo()]

    def label_node(self, node : Node, sorter : Sorter) -> Descriptor:
        flipped, pseudo_asymmetric = self._flip_parity(node, sorter)
        if flipped is None:
            return Descriptor.UNKNOWN

        descriptor = Descriptor.P if (self.clockwise ^ flipped) else Descriptor.M
        if pseudo_asymmetric:
            return descriptor.as_pseudo_asymmetric()
        return descriptor


def find_configurations(cipmol : CIPMol, control : Optional[ResolutionControl]=None) -> list[Configuration]:
    '''Every stereogenic unit annotated on a molecule, centers first (in atom order) then bonds (in bond order)'''
    configs : list[Configuration] = []
    for atom in cipmol.mol.GetAtoms():
        if not has_tetrahedral_tag(atom):
            continue
        if Tetrahedral.is_eligible(cipmol, atom):
            configs.append(Tetrahedral(cipmol, atom, control=control))
        else:
            LOGGER.debug(f'Atom {atom.GetIdx()} has a tetrahedral parity but not 3 or 4 distinct ligand positions; skipping')

    for bond in cipmol.mol.GetBonds():
        if is_stereo_double_bond(bond):
            configs.append(Sp2Bond(cipmol, bond, control=control))
        elif is_atropisomeric_bond(bond):
            configs.append(AtropisomerBond(cipmol, bond, control=control))

    return configs
