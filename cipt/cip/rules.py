'''
The CIP sequence rules, in order of precedence (per the 2013 IUPAC recommendations, P-92.1.4):

    1a : higher atomic number precedes lower
    1b : a duplicate atom whose corresponding atom is closer to the root precedes one further away
    2  : higher atomic mass number precedes lower
    3  : seqCis (Z) precedes seqTrans (E), which precedes non-stereogenic double bonds
    4a : chiral stereogenic units precede pseudo-asymmetric ones, which precede non-stereogenic ones
    4b : like descriptor pairs precede unlike ones
    4c : "r" precedes "s" (and "m" precedes "p")
    5  : "R" precedes "S" (and "M" precedes "P")

with rule 6 (an arbitrarily-designated reference ligand precedes its peers) appended
to resolve centers whose ligands are otherwise constitutionally and stereochemically identical
'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

from typing import Sequence
from collections import deque

from .descriptor import Descriptor
from .digraph import Edge, Node
from .pairlist import PairList
from .sorting import SequenceRule, Sorter, three_way


# RULE 1 - CONSTITUTION
def compare_atomic_numbers(a : Edge, b : Edge) -> int:
    '''Rule 1a: higher (possibly averaged) atomic number first'''
    return three_way(a.end.atomic_num, b.end.atomic_num)

def compare_duplicate_root_distances(a : Edge, b : Edge) -> int:
    '''Rule 1b: of two ring duplicates, the one duplicating an atom nearer the root first'''
    a_end, b_end = a.end, b.end
    if not (a_end.is_ring_duplicate and b_end.is_ring_duplicate):
        return 0
    return three_way(b_end.ring_closure.distance, a_end.ring_closure.distance)

# RULE 2 - ISOTOPES
def compare_mass_numbers(a : Edge, b : Edge) -> int:
    '''Rule 2: higher mass number first, taking unspecified isotopes as 0'''
    return three_way(a.end.mass_num, b.end.mass_num)

# RULE 3 - DOUBLE BOND GEOMETRY
_DOUBLE_BOND_RANKS : dict[Descriptor, int] = {
    Descriptor.Z : 2,
    Descriptor.E : 1,
}
def compare_double_bond_configurations(a : Edge, b : Edge) -> int:
    '''Rule 3: seqCis (Z) before seqTrans (E) before anything else'''
    return three_way(_DOUBLE_BOND_RANKS.get(a.end.aux, 0), _DOUBLE_BOND_RANKS.get(b.end.aux, 0))

# RULE 4 - STEREOGENICITY AND PAIRING
def _stereogenicity(descriptor : Descriptor) -> int:
    if descriptor.is_pseudo_asymmetric:
        return 1
    elif descriptor.is_specified:
        return 2
    return 0

def compare_stereogenicity(a : Edge, b : Edge) -> int:
    '''Rule 4a: chiral stereogenic units before pseudo-asymmetric ones before non-stereogenic ones'''
    return three_way(_stereogenicity(a.end.aux), _stereogenicity(b.end.aux))

_PSEUDO_ASYMMETRY_RANKS : dict[Descriptor, int] = {
    Descriptor.r : 2,
    Descriptor.m : 2,
    Descriptor.s : 1,
    Descriptor.p : 1,
}
def compare_pseudo_asymmetry(a : Edge, b : Edge) -> int:
    '''Rule 4c: r before s (and m before p)'''
    return three_way(_PSEUDO_ASYMMETRY_RANKS.get(a.end.aux, 0), _PSEUDO_ASYMMETRY_RANKS.get(b.end.aux, 0))

def reference_descriptors(node : Node) -> tuple[Descriptor, ...]:
    '''
    The distinct pairable descriptors (R, S, M, P) found in the nearest sphere of
    a branch which contains any, in a stable order; empty if the branch has none
    '''
    sphere : list[Node] = [node]
    while sphere:
        found = {
            member.aux
                for member in sphere
                    if member.aux.pairing_class is not None
        }
        if found:
            return tuple(sorted(found, key=lambda descriptor : descriptor.value))
        sphere = [
            edge.end
                for member in sphere
                    for edge in member.out_edges
        ]

    return ()

def fill_pairs(node : Node, pairlist : PairList, sorter : Sorter) -> PairList:
    '''
    Record the descriptors of a branch into a PairList, visiting nodes breadth-first
    in order of priority (as ranked by the given Sorter); ties are visited with branches
    like the reference ahead of unlike ones
    '''
    def likeness(descriptor : Descriptor) -> int:
        desc_class = descriptor.pairing_class
        if desc_class is None:
            return 0
        return 2 if (pairlist.ref is not None and desc_class == pairlist.ref.pairing_class) else 1

    control = node.digraph.control
    queue = deque([node])
    while queue:
        control.tick()
        current = queue.popleft()
        pairlist.add(current.aux)

        priority = sorter.prioritize(current.out_edges)
        for group in priority.groups:
            for edge in sorted(group, key=lambda edge : likeness(edge.end.aux), reverse=True):
                if not edge.end.is_terminal:
                    queue.append(edge.end)

    return pairlist

def pairing_rule(preceding : Sequence[SequenceRule]) -> SequenceRule:
    '''
    Build Rule 4b, whose breadth-first traversal of each branch
    follows the ranking imposed by the rules which precede it
    '''
    sorter = Sorter(preceding)
    def compare_pairings(a : Edge, b : Edge) -> int:
        '''Rule 4b: like descriptor pairs before unlike ones, compared at the first point of difference'''
        a_refs, b_refs = reference_descriptors(a.end), reference_descriptors(b.end)
        if not (a_refs and b_refs):
            return 0 # presence or absence of stereogenic units is settled by rule 4a

        a_lists = sorted(
            (fill_pairs(a.end, PairList(ref), sorter) for ref in a_refs),
            key=lambda pairlist : (len(pairlist), pairlist.pairing),
            reverse=True,
        )
        b_lists = sorted(
            (fill_pairs(b.end, PairList(ref), sorter) for ref in b_refs),
            key=lambda pairlist : (len(pairlist), pairlist.pairing),
            reverse=True,
        )
        for a_list, b_list in zip(a_lists, b_lists):
            cmp = a_list.compare(b_list)
            if cmp != 0:
                return cmp
        return 0

    return SequenceRule('4b', compare_pairings, explores=False)

# RULE 5 - CHIRALITY
_CHIRALITY_RANKS : dict[Descriptor, int] = {
    Descriptor.R : 2,
    Descriptor.M : 2,
    Descriptor.S : 1,
    Descriptor.P : 1,
}
def compare_chirality(a : Edge, b : Edge) -> int:
    '''Rule 5: R before S (and M before P); a center distinguished this way is pseudo-asymmetric'''
    return three_way(_CHIRALITY_RANKS.get(a.end.aux, 0), _CHIRALITY_RANKS.get(b.end.aux, 0))

# RULE 6 - REFERENCE LIGAND
def _is_rule6_reference(node : Node) -> bool:
    ref = node.digraph.rule6_ref
    return (ref is not None) and (node.atom_idx == ref) and not node.is_implicit_hydrogen

def compare_rule6_reference(a : Edge, b : Edge) -> int:
    '''Rule 6: the designated reference ligand before all others'''
    return three_way(_is_rule6_reference(a.end), _is_rule6_reference(b.end))


RULE_1A = SequenceRule('1a', compare_atomic_numbers)
RULE_1B = SequenceRule('1b', compare_duplicate_root_distances)
RULE_2  = SequenceRule('2' , compare_mass_numbers)
RULE_3  = SequenceRule('3' , compare_double_bond_configurations)
RULE_4A = SequenceRule('4a', compare_stereogenicity)
RULE_4C = SequenceRule('4c', compare_pseudo_asymmetry)
RULE_5  = SequenceRule('5' , compare_chirality, pseudo_asymmetric=True)
RULE_6  = SequenceRule('6' , compare_rule6_reference, explores=False)

CONSTITUTIONAL_RULES : tuple[SequenceRule, ...] = (RULE_1A, RULE_1B, RULE_2)

def default_rule_cascade() -> tuple[SequenceRule, ...]:
    '''The complete sequence of rules, in order of precedence'''
    preceding = CONSTITUTIONAL_RULES + (RULE_3, RULE_4A)
    return preceding + (pairing_rule(preceding), RULE_4C, RULE_5, RULE_6)
