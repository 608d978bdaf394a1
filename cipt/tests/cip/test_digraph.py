'''Unit tests for construction, expansion, and re-rooting of hierarchical digraphs'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

import pytest

from rdkit import Chem

from cipt.cip.cipmol import CIPMol
from cipt.cip.digraph import Digraph, Node, NodeFlag
from cipt.cip.descriptor import Descriptor


POLYCYCLIC_SMILES : str = r'CC1(OC2=C(C=3NC[C@@]4(C3C=C2)C([C@@H]5C[C@@]67C(N([C@]5(C4)CN6CC[C@@]7(C)O)C)=O)(C)C)OC=C1)C'


# HELPER FUNCTIONS
def assert_tree_invariant(digraph : Digraph) -> None:
    '''Check that only the current root lacks an incoming edge, and that every other node has exactly one'''
    for node in digraph.nodes():
        num_incoming = sum(edge.is_end(node) for edge in node.edges)
        if node is digraph.current_root:
            assert num_incoming == 0
        else:
            assert num_incoming == 1

def deepest_occurrence(digraph : Digraph, atom_idx : int) -> Node:
    '''The non-duplicate occurrence of an atom furthest from the current root'''
    return max(
        (node for node in digraph.get_nodes(atom_idx) if not node.is_duplicate),
        key=lambda node : node.distance,
    )

# FIXTURES
@pytest.fixture
def polycyclic_digraph() -> Digraph:
    cipmol = CIPMol(Chem.MolFromSmiles(POLYCYCLIC_SMILES))
    return Digraph(cipmol, 1)


# TESTS
def test_root_construction() -> None:
    '''Test that a new digraph consists of only its root, at distance 0'''
    cipmol = CIPMol(Chem.MolFromSmiles('COC'))
    digraph = Digraph(cipmol, 1)

    root = digraph.original_root
    assert digraph.num_nodes == 1
    assert root is digraph.current_root
    assert root.atom_idx == 1
    assert root.distance == 0
    assert root.atomic_num == 8
    assert root.atomic_num.denominator == 1

def test_lazy_expansion() -> None:
    '''Test that children are only created once their parent's edges are requested'''
    cipmol = CIPMol(Chem.MolFromSmiles('CCCCCC'))
    digraph = Digraph(cipmol, 0)

    children = [edge.end for edge in digraph.original_root.out_edges]
    assert digraph.num_nodes == 1 + 4 # neighboring carbon plus 3 implicit hydrogens
    assert not any(child.is_expanded for child in children)

    assert digraph.expand_all() == 20 # 6 carbons and 14 hydrogens
    assert digraph.num_nodes == 20

@pytest.mark.parametrize(
    'smiles,root_idx,expected_flags',
    [
        ('C=O', 1, [NodeFlag.NONE, NodeFlag.BOND_DUPLICATE]),
        ('C#N', 1, [NodeFlag.NONE, NodeFlag.BOND_DUPLICATE, NodeFlag.BOND_DUPLICATE]),
        ('CO', 1, [NodeFlag.NONE, NodeFlag.IMPLICIT_HYDROGEN]),
    ]
)
def test_multiple_bond_duplicates(smiles : str, root_idx : int, expected_flags : list[NodeFlag]) -> None:
    '''Test that multiple bonds are represented by terminal duplicates of the far atom'''
    cipmol = CIPMol(Chem.MolFromSmiles(smiles))
    digraph = Digraph(cipmol, root_idx)

    children = [edge.end for edge in digraph.original_root.out_edges]
    assert [child.flags for child in children] == expected_flags
    for child in children:
        if child.is_duplicate:
            assert child.is_terminal
            assert child.out_edges == []

def test_double_bond_duplicated_on_both_sides() -> None:
    '''Test that the far end of a double bond also receives a duplicate of the atom it was reached from'''
    cipmol = CIPMol(Chem.MolFromSmiles('C=O'))
    digraph = Digraph(cipmol, 0)

    oxygen = next(edge.end for edge in digraph.original_root.out_edges if not edge.end.is_duplicate)
    grandchildren = [edge.end for edge in oxygen.out_edges]
    assert len(grandchildren) == 1
    assert grandchildren[0].is_bond_duplicate
    assert grandchildren[0].atom_idx == 0

def test_ring_closure_duplicates() -> None:
    '''Test that rings are unrolled into paths terminated by duplicates of the root'''
    cipmol = CIPMol(Chem.MolFromSmiles('C1CCC1'))
    digraph = Digraph(cipmol, 0)
    digraph.expand_all()

    ring_duplicates = [node for node in digraph.get_nodes(0) if node.is_ring_duplicate]
    assert len(ring_duplicates) == 2 # one per direction around the ring
    for duplicate in ring_duplicates:
        assert duplicate.distance == 4
        assert duplicate.ring_closure is digraph.original_root
    assert digraph.is_arborescence()

def test_implicit_hydrogens_not_indexed() -> None:
    '''Test that implicit hydrogens are not reported as occurrences of the atom bearing them'''
    cipmol = CIPMol(Chem.MolFromSmiles('CO'))
    digraph = Digraph(cipmol, 0)
    occurrences = digraph.get_nodes(0)

    assert occurrences == [digraph.original_root]

def test_tree_invariant(polycyclic_digraph : Digraph) -> None:
    '''Test that a fully-expanded polycyclic digraph is a tree directed away from its root'''
    polycyclic_digraph.expand_all()
    assert polycyclic_digraph.current_root.atom_idx == 1
    assert_tree_invariant(polycyclic_digraph)
    assert polycyclic_digraph.is_arborescence()

def test_partial_tree_invariant(polycyclic_digraph : Digraph) -> None:
    '''Test that the tree invariant holds for partially-expanded digraphs, before and after re-rooting'''
    for edge in polycyclic_digraph.original_root.out_edges:
        _ = edge.end.out_edges
    assert_tree_invariant(polycyclic_digraph)

    leaf = max(polycyclic_digraph.nodes(), key=lambda node : node.distance)
    polycyclic_digraph.change_root(leaf)
    assert_tree_invariant(polycyclic_digraph)

def test_change_root(polycyclic_digraph : Digraph) -> None:
    '''Test that re-rooting preserves node identities and count, and recomputes distances'''
    num_nodes = polycyclic_digraph.expand_all()
    assert num_nodes == 3819
    occurrences = polycyclic_digraph.get_nodes(24)
    assert len(occurrences) == 104 # atom is reachable along many paths through the ring system

    new_root = deepest_occurrence(polycyclic_digraph, 24)
    assert new_root.distance == 24
    polycyclic_digraph.change_root(new_root)

    assert polycyclic_digraph.current_root is new_root
    assert new_root.distance == 0
    assert new_root.in_edge is None
    assert polycyclic_digraph.num_nodes == num_nodes
    assert polycyclic_digraph.get_nodes(24) == occurrences
    assert polycyclic_digraph.expand_all() == num_nodes
    assert sum(1 for _ in polycyclic_digraph.nodes()) == num_nodes
    assert_tree_invariant(polycyclic_digraph)

    polycyclic_digraph.change_root(polycyclic_digraph.original_root)
    assert polycyclic_digraph.original_root.distance == 0
    assert_tree_invariant(polycyclic_digraph)

def test_reroot_before_expansion() -> None:
    '''Test that expanding fully after re-rooting at an unexpanded node yields the same node count as expanding from the root'''
    smiles = 'OC1CCC(C=C)CC1'
    full = Digraph(CIPMol(Chem.MolFromSmiles(smiles)), 0)
    num_nodes = full.expand_all()

    lazy = Digraph(CIPMol(Chem.MolFromSmiles(smiles)), 0)
    child = lazy.original_root.out_edges[0].end
    assert not child.is_expanded
    lazy.change_root(child)

    assert lazy.expand_all() == num_nodes
    assert_tree_invariant(lazy)

def test_change_root_foreign_node() -> None:
    '''Test that nodes cannot be used to re-root a digraph they don't belong to'''
    cipmol = CIPMol(Chem.MolFromSmiles('CCO'))
    digraph, other = Digraph(cipmol, 0), Digraph(cipmol, 2)
    with pytest.raises(ValueError):
        digraph.change_root(other.original_root)

def test_clear_aux() -> None:
    '''Test that auxiliary descriptors can be reset across a whole digraph'''
    cipmol = CIPMol(Chem.MolFromSmiles('CC(O)CC'))
    digraph = Digraph(cipmol, 0)
    digraph.expand_all()
    for node in digraph.get_nodes(1):
        node.aux = Descriptor.R

    digraph.clear_aux()
    assert all(node.aux == Descriptor.NONE for node in digraph.nodes())

def test_rule6_reference_restored() -> None:
    '''Test that Rule 6 reference designation is scoped to its context'''
    cipmol = CIPMol(Chem.MolFromSmiles('CC(O)CC'))
    digraph = Digraph(cipmol, 1)
    with digraph.rule6_reference(2):
        assert digraph.rule6_ref == 2
    assert digraph.rule6_ref is None

def test_invalid_root() -> None:
    '''Test that rooting at a nonexistent atom fails immediately'''
    cipmol = CIPMol(Chem.MolFromSmiles('CCO'))
    with pytest.raises(IndexError):
        _ = Digraph(cipmol, 3)

def test_visualize() -> None:
    '''Test that a partially-expanded digraph can be drawn'''
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    cipmol = CIPMol(Chem.MolFromSmiles('C[C@H](O)CC'))
    digraph = Digraph(cipmol, 1)
    digraph.expand_all()

    fig, ax = plt.subplots()
    digraph.visualize(ax=ax)
    plt.close(fig)
