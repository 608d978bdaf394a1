'''Ranking of the edges leaving a digraph node by an ordered cascade of sequence rules'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

from typing import Callable, Iterable, Optional, Sequence, TypeAlias
from dataclasses import dataclass
from collections import deque
from functools import cmp_to_key
from itertools import chain

from .digraph import Edge, Node


EdgeComparator : TypeAlias = Callable[[Edge, Edge], int]

def three_way(a, b) -> int:
    '''Sign of the comparison between two values (1 if a > b, -1 if a < b, 0 otherwise)'''
    return (a > b) - (a < b)


@dataclass(frozen=True)
class SequenceRule:
    '''
    A single CIP sequence rule, comparing the end nodes of a pair of edges

    Attributes
    ----------
    name : str
        The conventional name of the rule (e.g. "1a")
    compare : EdgeComparator
        Three-way comparator, positive when the first edge has priority
    explores : bool, default=True
        Whether ties are broken by exploring the digraph outward sphere-by-sphere;
        rules which already consider a whole branch at once are not explored
    pseudo_asymmetric : bool, default=False
        Whether distinctions made by this rule render a center pseudo-asymmetric
    '''
    name : str
    compare : EdgeComparator
    explores : bool = True
    pseudo_asymmetric : bool = False

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.name})'

    def __call__(self, a : Edge, b : Edge) -> int:
        return self.compare(a, b)


def ranked_out_edges(rule : SequenceRule, node : Node, tie_break : bool=False) -> list[Edge]:
    '''
    The outgoing edges of a node, highest priority first, by a single rule
    If tie_break is set, edges tied at the first sphere are ordered by one level of hierarchical exploration
    '''
    def compare(a : Edge, b : Edge) -> int:
        cmp = rule.compare(a, b)
        if (cmp == 0) and tie_break:
            cmp = explore(rule, a, b, tie_break=False)
        return cmp

    return sorted(node.out_edges, key=cmp_to_key(compare), reverse=True)

def explore(rule : SequenceRule, a : Edge, b : Edge, tie_break : bool=True) -> int:
    '''
    Compare two edges by a rule hierarchically: first directly, then sphere by sphere
    along both branches (breadth-first), pairing up children in order of their rank
    '''
    cmp = rule.compare(a, b)
    if cmp != 0:
        return cmp

    control = a.beg.digraph.control
    a_queue, b_queue = deque([a]), deque([b])
    while a_queue and b_queue:
        control.tick()
        a_edge, b_edge = a_queue.popleft(), b_queue.popleft()
        a_children = ranked_out_edges(rule, a_edge.end, tie_break=tie_break)
        b_children = ranked_out_edges(rule, b_edge.end, tie_break=tie_break)

        for a_child, b_child in zip(a_children, b_children):
            cmp = rule.compare(a_child, b_child)
            if cmp != 0:
                return cmp
        if len(a_children) != len(b_children):
            return three_way(len(a_children), len(b_children))

        a_queue.extend(a_children)
        b_queue.extend(b_children)

    return 0

def compare_by_rule(rule : SequenceRule, a : Edge, b : Edge, deep : bool=True) -> int:
    '''Compare two edges by a rule, exploring beyond the first sphere only if the rule allows and deep is set'''
    if deep and rule.explores:
        return explore(rule, a, b)
    return rule.compare(a, b)


@dataclass(frozen=True)
class Priority:
    '''
    Ranking of a collection of edges, as groups of mutually-tied edges in descending priority

    Attributes
    ----------
    groups : tuple[tuple[Edge, ...], ...]
        The ranked groups; edges within a group could not be distinguished
    unique : bool
        Whether every edge could be distinguished (i.e. the ranking is a total order)
    pseudo_asymmetric : bool
        Whether exactly one distinction was made by a pseudo-asymmetric rule
    '''
    groups : tuple[tuple[Edge, ...], ...]
    unique : bool
    pseudo_asymmetric : bool = False

    @property
    def ordered(self) -> tuple[Edge, ...]:
        '''All edges in descending priority (tied edges in arbitrary but stable order)'''
        return tuple(chain.from_iterable(self.groups))

    def __len__(self) -> int:
        return sum(len(group) for group in self.groups)


class Sorter:
    '''
    Ranks edges by a cascade of sequence rules, applying each rule only to the edges left tied by its predecessors

    If deep is unset, rules compare only the edges' own end nodes, never exploring further out;
    the resulting ranking agrees with the deep one only where the first rule alone leaves no ties
    '''
    def __init__(self, rules : Iterable[SequenceRule], deep : bool=True) -> None:
        self.rules : tuple[SequenceRule, ...] = tuple(rules)
        self.deep = deep

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({", ".join(rule.name for rule in self.rules)}, deep={self.deep})'

    def __contains__(self, rule : SequenceRule) -> bool:
        return rule in self.rules

    @staticmethod
    def _partition(rule : SequenceRule, edges : Sequence[Edge], deep : bool=True) -> list[list[Edge]]:
        '''Split a collection of edges into groups of mutually-tied edges, in descending priority'''
        cache : dict[tuple[int, int], int] = {}
        def compare(a : Edge, b : Edge) -> int:
            key = (id(a), id(b))
            if key not in cache:
                cache[key] = compare_by_rule(rule, a, b, deep=deep)
                cache[(id(b), id(a))] = -cache[key]
            return cache[key]

        ranked = sorted(edges, key=cmp_to_key(compare), reverse=True)
        groups : list[list[Edge]] = [[ranked[0]]]
        for prev_edge, edge in zip(ranked[:-1], ranked[1:]):
            if compare(prev_edge, edge) == 0:
                groups[-1].append(edge)
            else:
                groups.append([edge])

        return groups

    def prioritize(self, edges : Iterable[Edge], deep : Optional[bool]=None) -> Priority:
        '''Rank a collection of edges, typically the outgoing edges of a single node (deep defaults to that of the Sorter)'''
        if deep is None:
            deep = self.deep
        groups : list[list[Edge]] = [list(edges)]
        if not groups[0]:
            return Priority(groups=(), unique=True)

        num_pseudo_asymmetric_splits : int = 0
        for rule in self.rules:
            if all(len(group) < 2 for group in groups):
                break

            refined : list[list[Edge]] = []
            for group in groups:
                if len(group) < 2:
                    refined.append(group)
                    continue

                subgroups = self._partition(rule, group, deep=deep)
                if rule.pseudo_asymmetric:
                    num_pseudo_asymmetric_splits += len(subgroups) - 1
                refined.extend(subgroups)
            groups = refined

        return Priority(
            groups=tuple(tuple(group) for group in groups),
            unique=all(len(group) == 1 for group in groups),
            pseudo_asymmetric=(num_pseudo_asymmetric_splits == 1),
        )
