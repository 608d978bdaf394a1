'''
Hierarchical digraphs: acyclic, lazily-expanded views of a molecule rooted at a chosen atom

Rings are unrolled by terminating any path which would revisit an atom with a "ring duplicate"
node, and multiple bonds are represented by "bond duplicate" nodes, both of which are terminal
(i.e. are never expanded). Hydrogens not present as explicit atoms also become terminal nodes
'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

import logging
LOGGER = logging.getLogger(__name__)

from typing import (
    Callable,
    Generator,
    Hashable,
    Optional,
    TypeAlias,
    Union,
)
from enum import IntFlag
from fractions import Fraction
from collections import defaultdict, deque
from contextlib import contextmanager

from numpy import ndarray
import networkx as nx
from matplotlib.axes import Axes
from rdkit.Chem.rdchem import Atom, Bond

from .cipmol import CIPMol, AtomLike
from .control import ResolutionControl
from .descriptor import Descriptor
from ..chemistry.core import element_symbol


GraphLayout : TypeAlias = Callable[[nx.Graph], dict[Hashable, ndarray]]

class NodeFlag(IntFlag):
    '''Markers for the kinds of node which are not ordinary, expandable atom occurrences'''
    NONE              = 0
    RING_DUPLICATE    = 1
    BOND_DUPLICATE    = 2
    IMPLICIT_HYDROGEN = 4
    DUPLICATE = RING_DUPLICATE | BOND_DUPLICATE
    TERMINAL  = DUPLICATE | IMPLICIT_HYDROGEN


class Node:
    '''One occurrence of an atom within a hierarchical digraph'''
    def __init__(
        self,
        digraph : 'Digraph',
        atom : Atom,
        atomic_num : Fraction,
        mass_num : int,
        distance : int,
        visited : frozenset[int],
        flags : NodeFlag=NodeFlag.NONE,
        parent : Optional['Node']=None,
        parent_bond_idx : Optional[int]=None,
        ring_closure : Optional['Node']=None,
    ) -> None:
        self.digraph = digraph
        self.atom = atom
        self.atom_idx : int = atom.GetIdx()
        self.atomic_num = atomic_num
        self.mass_num = mass_num
        self.distance = distance
        self.flags = flags
        self.ring_closure = ring_closure # for ring duplicates, the on-path node which was revisited
        self.aux : Descriptor = Descriptor.NONE

        # NOTE: these record how the node was first reached and are unaffected by re-rooting
        self._parent = parent
        self._parent_bond_idx = parent_bond_idx
        self._visited = visited

        self._edges : list[Edge] = []
        self._expanded : bool = False

    def __repr__(self) -> str:
        attrs = [f'{self.symbol}{self.atom_idx}', f'distance={self.distance}']
        if self.flags:
            attrs.append(f'flags={self.flags!r}')
        if self.aux != Descriptor.NONE:
            attrs.append(f'aux={self.aux.value}')
        return f'{self.__class__.__name__}({", ".join(attrs)})'

    @property
    def symbol(self) -> str:
        return element_symbol(self.atomic_num)

    # CLASSIFICATION
    @property
    def is_duplicate(self) -> bool:
        return bool(self.flags & NodeFlag.DUPLICATE)

    @property
    def is_ring_duplicate(self) -> bool:
        return bool(self.flags & NodeFlag.RING_DUPLICATE)

    @property
    def is_bond_duplicate(self) -> bool:
        return bool(self.flags & NodeFlag.BOND_DUPLICATE)

    @property
    def is_implicit_hydrogen(self) -> bool:
        return bool(self.flags & NodeFlag.IMPLICIT_HYDROGEN)

    @property
    def is_terminal(self) -> bool:
        '''Whether this node may never have children'''
        return bool(self.flags & NodeFlag.TERMINAL)

    @property
    def is_expanded(self) -> bool:
        return self._expanded

    # CONNECTIVITY
    @property
    def edges(self) -> list['Edge']:
        '''All edges touching this node, in either direction (expands the node if needed)'''
        if not self._expanded:
            self.digraph.expand(self)
        return list(self._edges)

    @property
    def out_edges(self) -> list['Edge']:
        '''Edges from this node to its children with respect to the current root'''
        return [edge for edge in self.edges if edge.beg is self]

    @property
    def in_edge(self) -> Optional['Edge']:
        '''The edge from this node's parent with respect to the current root (None for the root)'''
        for edge in self._edges: # NOTE: no expansion needed, as the incoming edge always exists from creation
            if edge.end is self:
                return edge
        return None


class Edge:
    '''A directed arc between two nodes in a hierarchical digraph, derived from a bond'''
    def __init__(self, beg : Node, end : Node, bond : Bond, order : int=1) -> None:
        self._beg = beg
        self._end = end
        self.bond = bond
        self.order = order

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self._beg!r} -> {self._end!r})'

    @property
    def beg(self) -> Node:
        return self._beg

    @property
    def end(self) -> Node:
        return self._end

    def is_beg(self, node : Node) -> bool:
        return self._beg is node

    def is_end(self, node : Node) -> bool:
        return self._end is node

    def other(self, node : Node) -> Node:
        '''The node at the opposite end of this edge from the given one'''
        if node is self._beg:
            return self._end
        elif node is self._end:
            return self._beg
        raise ValueError(f'{node!r} is not an endpoint of {self!r}')

    def flip(self) -> None:
        '''Reverse the direction of this edge in place'''
        self._beg, self._end = self._end, self._beg


class Digraph:
    '''
    A hierarchical digraph over a molecule, rooted at one of its atoms

    Nodes are created lazily, only once some comparison requests the edges of their parent,
    and re-rooting reorients the existing nodes rather than building a new tree
    '''
    def __init__(
        self,
        cipmol : CIPMol,
        root_atom : AtomLike,
        control : Optional[ResolutionControl]=None,
    ) -> None:
        self.cipmol = cipmol
        self.control = control if (control is not None) else ResolutionControl()
        self.rule6_ref : Optional[int] = None

        self._occurrences : defaultdict[int, list[Node]] = defaultdict(list)
        self._num_nodes : int = 0

        atom = cipmol.atom(root_atom)
        self.original_root : Node = self._create_node(
            atom,
            atomic_num=cipmol.atomic_num(atom),
            mass_num=cipmol.mass_num(atom),
            distance=0,
            visited=frozenset({atom.GetIdx()}),
        )
        self.current_root : Node = self.original_root

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}(root={self.current_root!r}, num_nodes={self._num_nodes})'

    @property
    def num_nodes(self) -> int:
        '''Number of nodes created so far'''
        return self._num_nodes

    # NODE CREATION AND EXPANSION
    def _create_node(self, atom : Atom, **node_kwargs) -> Node:
        self.control.tick()
        node = Node(self, atom, **node_kwargs)
        if not node.is_implicit_hydrogen:
            self._occurrences[node.atom_idx].append(node)
        self._num_nodes += 1

        return node

    def _attach(self, parent : Node, child : Node, bond : Bond, order : int=1) -> Edge:
        edge = Edge(parent, child, bond, order=order)
        parent._edges.append(edge)
        child._edges.append(edge)

        return edge

    def _attach_duplicate(self, parent : Node, atom : Atom, bond : Bond, flag : NodeFlag, ring_closure : Optional[Node]=None) -> None:
        '''Attach a terminal stand-in for an atom to a node'''
        if flag == NodeFlag.BOND_DUPLICATE:
            atomic_num = self.cipmol.duplicate_atomic_num(parent.atom, atom, bond)
        else:
            atomic_num = self.cipmol.atomic_num(atom)

        duplicate = self._create_node(
            atom,
            atomic_num=atomic_num,
            mass_num=self.cipmol.mass_num(atom),
            distance=parent.distance + 1,
            visited=parent._visited,
            flags=flag,
            parent=parent,
            parent_bond_idx=bond.GetIdx(),
            ring_closure=ring_closure,
        )
        self._attach(parent, duplicate, bond, order=self.cipmol.bond_order(bond))

    def _on_path_occurrence(self, node : Node, atom_idx : int) -> Optional[Node]:
        '''The ancestor of a node (as first reached) which represents the given atom'''
        ancestor = node
        while ancestor is not None:
            if ancestor.atom_idx == atom_idx:
                return ancestor
            ancestor = ancestor._parent
        return None

    def expand(self, node : Node) -> None:
        '''Create the children of a node, if this has not been done already'''
        if node._expanded:
            return
        node._expanded = True
        if node.is_terminal:
            return

        for bond in self.cipmol.bonds(node.atom):
            nbr = bond.GetOtherAtom(node.atom)
            order = self.cipmol.bond_order(bond)

            if bond.GetIdx() == node._parent_bond_idx: # the bond this node was reached through only contributes its duplicates
                for _ in range(order - 1):
                    self._attach_duplicate(node, nbr, bond, NodeFlag.BOND_DUPLICATE)
                continue

            if nbr.GetIdx() in node._visited:
                self._attach_duplicate(node, nbr, bond, NodeFlag.RING_DUPLICATE, ring_closure=self._on_path_occurrence(node, nbr.GetIdx()))
            else:
                child = self._create_node(
                    nbr,
                    atomic_num=self.cipmol.atomic_num(nbr),
                    mass_num=self.cipmol.mass_num(nbr),
                    distance=node.distance + 1,
                    visited=node._visited | {nbr.GetIdx()},
                    parent=node,
                    parent_bond_idx=bond.GetIdx(),
                )
                self._attach(node, child, bond, order=order)

            for _ in range(order - 1):
                self._attach_duplicate(node, nbr, bond, NodeFlag.BOND_DUPLICATE)

        for _ in range(self.cipmol.num_hydrogens(node.atom)):
            hydrogen = self._create_node(
                node.atom,
                atomic_num=Fraction(1),
                mass_num=0,
                distance=node.distance + 1,
                visited=node._visited,
                flags=NodeFlag.IMPLICIT_HYDROGEN,
                parent=node,
            )
            self._attach(node, hydrogen, bond=None)

    def expand_all(self) -> int:
        '''Expand every node reachable from the current root; returns the total number of nodes'''
        queue = deque([self.current_root])
        while queue:
            node = queue.popleft()
            for edge in node.out_edges:
                if not edge.end.is_terminal:
                    queue.append(edge.end)

        return self._num_nodes

    # TRAVERSAL
    def nodes(self) -> Generator[Node, None, None]:
        '''Breadth-first traversal of the nodes created so far, starting from the current root (expands nothing)'''
        queue = deque([self.current_root])
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(edge.end for edge in node._edges if edge.beg is node)

    def get_nodes(self, atom : AtomLike) -> list[Node]:
        '''Every occurrence of an atom in the fully-expanded digraph, including duplicates'''
        atom_idx = self.cipmol.atom(atom).GetIdx()
        self.expand_all()

        return list(self._occurrences.get(atom_idx, []))

    # RE-ROOTING
    def change_root(self, new_root : Node) -> None:
        '''Reorient the digraph in place such that the given node becomes its root'''
        if new_root.digraph is not self:
            raise ValueError(f'{new_root!r} does not belong to this digraph')
        if new_root is self.current_root:
            return

        # DEV: path must be collected in full before flipping, since flipping midway makes parents ambiguous
        path : list[Edge] = []
        node = new_root
        while (edge := node.in_edge) is not None:
            path.append(edge)
            node = edge.beg
        for edge in path:
            edge.flip()
        self.current_root = new_root

        new_root.distance = 0
        queue = deque([new_root])
        while queue:
            node = queue.popleft()
            for edge in node._edges:
                if edge.beg is node:
                    edge.end.distance = node.distance + 1
                    queue.append(edge.end)

    # AUXILIARY STATE
    def clear_aux(self) -> None:
        '''Reset the auxiliary descriptors of all nodes created so far'''
        for node in self.nodes():
            node.aux = Descriptor.NONE

    @contextmanager
    def rule6_reference(self, atom_idx : Optional[int]) -> Generator[None, None, None]:
        '''Temporarily designate the atom which Rule 6 ranks ahead of its otherwise-equivalent peers'''
        prev_ref = self.rule6_ref
        self.rule6_ref = atom_idx
        try:
            yield None
        finally:
            self.rule6_ref = prev_ref

    # EXPORT AND VISUALIZATION
    def as_networkx(self) -> nx.DiGraph:
        '''The nodes created so far as a networkx DiGraph with edges directed away from the current root'''
        tree = nx.DiGraph()
        for node in self.nodes():
            tree.add_node(node, symbol=node.symbol, distance=node.distance, flags=int(node.flags))
            for edge in node._edges:
                if edge.beg is node:
                    tree.add_edge(node, edge.end, order=edge.order)

        return tree

    def is_arborescence(self) -> bool:
        '''Whether the nodes created so far form a tree directed away from a single root'''
        return nx.is_arborescence(self.as_networkx())

    def visualize(
        self,
        ax : Optional[Axes]=None,
        layout : GraphLayout=nx.spring_layout,
        **draw_kwargs,
    ) -> None:
        '''
        Draw the nodes created so far, labelled by element symbol
        '''
        tree = self.as_networkx()
        if 'with_labels' not in draw_kwargs:
            draw_kwargs['with_labels'] = True
        if 'labels' not in draw_kwargs:
            draw_kwargs['labels'] = {node : node.symbol for node in tree.nodes}

        nx.draw(
            tree,
            ax=ax,
            pos=layout(tree),
            **draw_kwargs,
        )
