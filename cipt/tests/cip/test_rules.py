'''Unit tests for individual CIP sequence rules and their composition into Sorters'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

import pytest

from rdkit import Chem

from cipt.cip.cipmol import CIPMol
from cipt.cip.descriptor import Descriptor
from cipt.cip.digraph import Digraph, Edge
from cipt.cip.sorting import Sorter
from cipt.cip.rules import (
    RULE_1A,
    RULE_1B,
    RULE_2,
    RULE_3,
    RULE_4A,
    RULE_4C,
    RULE_5,
    RULE_6,
    CONSTITUTIONAL_RULES,
    pairing_rule,
    reference_descriptors,
    default_rule_cascade,
)


# HELPER FUNCTIONS
def root_edges(smiles : str, root_idx : int) -> tuple[Digraph, list[Edge]]:
    '''Build a digraph from a SMILES string and fetch the edges leaving its root'''
    cipmol = CIPMol(Chem.MolFromSmiles(smiles))
    digraph = Digraph(cipmol, root_idx)

    return digraph, digraph.original_root.out_edges


# TESTS
def test_rule1a_equal() -> None:
    '''Test that ligands of equal atomic number compare equal'''
    _, edges = root_edges('COC', 1)
    assert len(edges) == 2
    assert edges[0] is not edges[1]
    assert RULE_1A(edges[0], edges[1]) == 0
    assert not Sorter([RULE_1A]).prioritize(edges).unique

def test_rule1a_different() -> None:
    '''Test that higher atomic number takes priority'''
    _, edges = root_edges('CON', 1)
    assert RULE_1A(edges[0], edges[1]) < 0
    assert RULE_1A(edges[1], edges[0]) > 0

    priority = Sorter([RULE_1A]).prioritize(edges)
    assert priority.unique
    assert priority.ordered[0].end.atom_idx == 2 # nitrogen first

def test_rule1a_explores_branches() -> None:
    '''Test that ties in the first sphere are broken by exploring further out'''
    _, edges = root_edges('OCC(C)CCCCl', 2) # methyl-bearing carbon with hydroxymethyl and chlorobutyl branches
    priority = Sorter([RULE_1A]).prioritize(edges)
    ranked_atoms = [edge.end.atom_idx for edge in priority.ordered if not edge.end.is_implicit_hydrogen]

    assert ranked_atoms == [1, 4, 3] # CH2OH > CH2CH2... > CH3

def test_rule1b() -> None:
    '''Test that ring duplicates closer to the root take priority'''
    cipmol = CIPMol(Chem.MolFromSmiles('C1C2CC12')) # bicyclobutane
    digraph = Digraph(cipmol, 0)
    digraph.expand_all()

    closing_node = next( # bridgehead reached last, which closes both rings at once
        node
            for node in digraph.nodes()
                if sum(edge.end.is_ring_duplicate for edge in node.out_edges) == 2
    )
    near_edge, far_edge = sorted(
        (edge for edge in closing_node.out_edges if edge.end.is_ring_duplicate),
        key=lambda edge : edge.end.ring_closure.distance,
    )
    assert near_edge.end.ring_closure.distance < far_edge.end.ring_closure.distance

    assert RULE_1B(near_edge, far_edge) > 0
    assert RULE_1B(far_edge, near_edge) < 0
    assert RULE_1B(near_edge, near_edge) == 0

@pytest.mark.parametrize(
    'smiles,expected_sign',
    [
        ('CO[13C]', -1),
        ('[13C]O[14C]', -1),
        ('[14C]OC', 1),
        ('[13C]O[13C]', 0),
    ]
)
def test_rule2(smiles : str, expected_sign : int) -> None:
    '''Test that heavier isotopes take priority, with unspecified isotopes counting as 0'''
    _, edges = root_edges(smiles, 1)
    cmp = RULE_2(edges[0], edges[1])
    assert (cmp > 0) - (cmp < 0) == expected_sign
    assert Sorter([RULE_2]).prioritize(edges).unique == (expected_sign != 0)

def test_sorter_uniqueness_monotonic() -> None:
    '''Test that a cascade including a rule which alone gives a unique order is also unique, with a consistent order'''
    _, edges = root_edges('CO[13CH3]', 1)
    alone = Sorter([RULE_2]).prioritize(edges)
    for rules in ([RULE_1A, RULE_2], CONSTITUTIONAL_RULES, default_rule_cascade()):
        cascade = Sorter(rules).prioritize(edges)
        assert cascade.unique
        assert cascade.ordered == alone.ordered

def test_first_sphere_sorter() -> None:
    '''Test that a shallow sorter ranks by the ligands' own atoms, leaving ties which exploration would break'''
    _, edges = root_edges('ClC(CO)(CC)F', 1)
    shallow = Sorter([RULE_1A], deep=False).prioritize(edges)
    assert not shallow.unique
    assert [len(group) for group in shallow.groups] == [1, 1, 2]

    deep = Sorter([RULE_1A]).prioritize(edges)
    assert deep.unique
    assert Sorter([RULE_1A], deep=False).prioritize(edges, deep=True).ordered == deep.ordered
    assert [edge.end.atom_idx for edge in deep.ordered] == [0, 6, 2, 4]

def test_sorter_groups() -> None:
    '''Test that ties left by all rules are reported as groups'''
    _, edges = root_edges('ClC(C)(C)Br', 1)
    priority = Sorter(CONSTITUTIONAL_RULES).prioritize(edges)

    assert not priority.unique
    assert [len(group) for group in priority.groups] == [1, 1, 2]
    assert [group[0].end.atomic_num for group in priority.groups] == [35, 17, 6]

def test_sorter_empty() -> None:
    '''Test that ranking no edges trivially succeeds'''
    priority = Sorter(CONSTITUTIONAL_RULES).prioritize([])
    assert priority.unique
    assert priority.ordered == ()

@pytest.mark.parametrize(
    'rule,better,worse',
    [
        (RULE_3 , Descriptor.Z, Descriptor.E),
        (RULE_3 , Descriptor.E, Descriptor.NONE),
        (RULE_4A, Descriptor.S, Descriptor.r),
        (RULE_4A, Descriptor.s, Descriptor.NONE),
        (RULE_4C, Descriptor.r, Descriptor.s),
        (RULE_5 , Descriptor.R, Descriptor.S),
        (RULE_5 , Descriptor.M, Descriptor.P),
    ]
)
def test_stereo_rules(rule, better : Descriptor, worse : Descriptor) -> None:
    '''Test the precedence of auxiliary descriptors under each stereochemical rule'''
    _, edges = root_edges('CCOCC', 2)
    edges[0].end.aux, edges[1].end.aux = better, worse

    assert rule(edges[0], edges[1]) > 0
    assert rule(edges[1], edges[0]) < 0

def test_rule5_pseudo_asymmetric() -> None:
    '''Test that a distinction made by Rule 5 is flagged as pseudo-asymmetric'''
    _, edges = root_edges('CCOCC', 2)
    edges[0].end.aux, edges[1].end.aux = Descriptor.S, Descriptor.R

    priority = Sorter(default_rule_cascade()).prioritize(edges)
    assert priority.unique
    assert priority.pseudo_asymmetric
    assert priority.ordered[0] is edges[1]

def test_rule6() -> None:
    '''Test that the designated reference ligand takes priority'''
    digraph, edges = root_edges('CC(C)(C)C', 1)
    assert not Sorter(CONSTITUTIONAL_RULES).prioritize(edges).unique

    with digraph.rule6_reference(edges[2].end.atom_idx):
        assert RULE_6(edges[2], edges[0]) > 0
        priority = Sorter(CONSTITUTIONAL_RULES + (RULE_6,)).prioritize(edges)
    assert priority.ordered[0] is edges[2]
    assert RULE_6(edges[2], edges[0]) == 0

def test_reference_descriptors() -> None:
    '''Test that reference descriptors are taken from the nearest sphere bearing any'''
    digraph, edges = root_edges('CC(O)C(O)OC(O)C(C)O', 5)
    digraph.expand_all()
    for atom_idx, descriptor in ((1, Descriptor.S), (3, Descriptor.R), (6, Descriptor.r)):
        for node in digraph.get_nodes(atom_idx):
            node.aux = descriptor

    first_branch = next(edge for edge in edges if edge.end.atom_idx == 3)
    second_branch = next(edge for edge in edges if edge.end.atom_idx == 6)
    assert reference_descriptors(first_branch.end) == (Descriptor.R,)
    assert reference_descriptors(second_branch.end) == () # pseudo-asymmetric descriptors do not pair

def test_pairing_rule_alone_resolves() -> None:
    '''Test that branches identical up to like/unlike pairing are ranked by Rule 4b alone'''
    digraph, edges = root_edges('CC(O)C(O)OC(O)C(C)O', 5) # ether oxygen joining two 1,2-diol-like branches
    digraph.expand_all()
    for atom_idx, descriptor in ((1, Descriptor.R), (3, Descriptor.R), (6, Descriptor.R), (8, Descriptor.S)):
        for node in digraph.get_nodes(atom_idx):
            node.aux = descriptor

    like_branch = next(edge for edge in edges if edge.end.atom_idx == 3)
    unlike_branch = next(edge for edge in edges if edge.end.atom_idx == 6)

    assert not Sorter(CONSTITUTIONAL_RULES).prioritize(edges).unique

    rule4b = pairing_rule(CONSTITUTIONAL_RULES)
    assert rule4b(like_branch, unlike_branch) > 0
    assert rule4b(unlike_branch, like_branch) < 0

    priority = Sorter(CONSTITUTIONAL_RULES + (rule4b,)).prioritize(edges)
    assert priority.unique
    assert priority.ordered[0] is like_branch
    assert not priority.pseudo_asymmetric
