'''
Assignment of CIP descriptors to every requested stereogenic unit of a molecule

Units are resolved in passes: the first ranks ligands by constitution alone, which settles
every unit whose descriptor does not depend on any other; each later pass first labels, within
the digraph of every still-unresolved unit, the occurrences of all other units (deepest first),
then ranks with the complete rule sequence. Passes repeat until no unit changes state
'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

import logging
LOGGER = logging.getLogger(__name__)

from typing import Iterable, Optional
from enum import Enum

from rdkit.Chem.rdchem import Mol

from .cipmol import CIPMol
from .control import Cancellable, ResolutionControl, DEFAULT_MAX_ITERATIONS
from .configurations import Configuration, find_configurations
from .descriptor import Descriptor
from .digraph import Node
from .rules import RULE_1A, CONSTITUTIONAL_RULES, default_rule_cascade
from .sorting import Sorter
from ..interfaces.rdkit.rdprops import CIP_COMPUTED_PROP, assign_property_to_rdobj


class ResolutionState(Enum):
    '''Progress of a single stereogenic unit through labelling'''
    PENDING      = 'pending'
    RESOLVING    = 'resolving'
    RESOLVED     = 'resolved'
    UNRESOLVABLE = 'unresolvable'


def _validated_selection(idxs : Optional[Iterable[int]], num_objs : int, obj_name : str) -> Optional[set[int]]:
    '''Check that requested atom or bond indices exist, returning them as a set (None requests all)'''
    if idxs is None:
        return None

    selection = set(idxs)
    for idx in selection:
        if not (0 <= idx < num_objs):
            raise IndexError(f'Cannot label {obj_name} {idx}; molecule only has {num_objs} {obj_name}s')
    return selection

def assign_auxiliary_descriptors(
    config : Configuration,
    contributors : Iterable[Configuration],
    sorter : Sorter,
) -> int:
    '''
    Label every occurrence of the other stereogenic units within a unit's digraph,
    storing the results as auxiliary descriptors on the digraph's nodes

    Occurrences are labelled deepest-first so that the descriptors of outer units
    can draw on those of the units nested within them. Returns the number of occurrences labelled
    '''
    digraph = config.digraph
    digraph.change_root(digraph.original_root)
    digraph.clear_aux()

    targets : list[tuple[Node, Node, Configuration]] = []
    for other in contributors:
        if other is config:
            continue

        for node in digraph.get_nodes(other.focus):
            if node.is_duplicate:
                continue
            aux_node = other.aux_node(node)
            if aux_node is not None:
                targets.append((node, aux_node, other))
    targets.sort(key=lambda target : target[1].distance, reverse=True) # NOTE: distances are taken w.r.t. the original root

    for node, aux_node, other in targets:
        aux_node.aux = other.label_node(node, sorter)
    digraph.change_root(digraph.original_root)

    return len(targets)

def _attempt_resolution(
    config : Configuration,
    sorter : Sorter,
    states : dict[Configuration, ResolutionState],
) -> bool:
    '''Try to label a unit, writing its descriptor back if one is found; returns whether this succeeded'''
    states[config] = ResolutionState.RESOLVING
    descriptor : Descriptor = config.label(sorter)
    if not descriptor.is_specified:
        states[config] = ResolutionState.PENDING
        return False

    config.write_label(descriptor)
    config.release_digraph()
    states[config] = ResolutionState.RESOLVED
    LOGGER.debug(f'Resolved {config!r} as {descriptor.value}')

    return True

def assign_cip_labels(
    mol : Mol,
    atoms : Optional[Iterable[int]]=None,
    bonds : Optional[Iterable[int]]=None,
    max_iterations : int=DEFAULT_MAX_ITERATIONS,
    cancel_event : Optional[Cancellable]=None,
) -> None:
    '''
    Assign CIP descriptors to the stereogenic atoms and bonds of an RDKit Mol

    Descriptors are written to the "_CIPCode" property of each resolved atom or bond;
    units whose descriptor cannot be determined are left without one

    Parameters
    ----------
    mol : Mol
        The molecule to label, with stereochemistry already perceived by RDKit
    atoms : Optional[Iterable[int]], default=None
        Indices of the atoms to label; if None, all tetrahedral stereocenters are labelled
    bonds : Optional[Iterable[int]], default=None
        Indices of the bonds to label; if None, all stereogenic double bonds and atropisomeric bonds are labelled
    max_iterations : int, default=DEFAULT_MAX_ITERATIONS
        Bound on the total work performed, 0 for no bound
    cancel_event : Optional[Cancellable], default=None
        Signal (e.g. a threading.Event) which, once set, causes labelling to be abandoned

    Raises
    ------
    MaxIterationsExceeded
        If labelling exceeds the iteration budget
    LabelingCancelled
        If cancellation is signalled; any descriptors already written remain in place
    IndexError
        If any requested atom or bond index is out of range
    '''
    control = ResolutionControl(max_iterations=max_iterations, cancel_event=cancel_event)
    cipmol = CIPMol(mol)
    atom_selection = _validated_selection(atoms, cipmol.num_atoms, 'atom')
    bond_selection = _validated_selection(bonds, cipmol.num_bonds, 'bond')

    configs : list[Configuration] = find_configurations(cipmol, control=control)
    requested : list[Configuration] = [
        config
            for config in configs
                if config.is_selected(atom_selection, bond_selection)
    ]
    for config in requested:
        config.clear_label()
    states : dict[Configuration, ResolutionState] = {config : ResolutionState.PENDING for config in requested}
    LOGGER.debug(f'Found {len(configs)} stereogenic units, {len(requested)} of which were requested')

    if requested:
        # pass 1: units distinguishable by constitution alone, settling those decided by their immediate
        # neighbors first so that they are labelled even if a costlier unit later exhausts the budget
        control.begin_pass()
        first_sphere_sorter = Sorter([RULE_1A], deep=False)
        for config in requested:
            _attempt_resolution(config, first_sphere_sorter, states)

        constitutional_sorter = Sorter(CONSTITUTIONAL_RULES)
        for config in requested:
            if states[config] == ResolutionState.PENDING:
                _attempt_resolution(config, constitutional_sorter, states)

        # later passes: units which depend on other units
        complete_sorter = Sorter(default_rule_cascade())
        excluded : set[Configuration] = set() # units found not to be resolvable no longer contribute auxiliary descriptors
        while (pending := [config for config in requested if states[config] == ResolutionState.PENDING]):
            control.begin_pass()
            contributors = [config for config in configs if config not in excluded]

            num_resolved : int = 0
            newly_failed : set[Configuration] = set()
            for config in pending:
                assign_auxiliary_descriptors(config, contributors, complete_sorter)
                if _attempt_resolution(config, complete_sorter, states):
                    num_resolved += 1
                elif config not in excluded:
                    newly_failed.add(config)
            excluded.update(newly_failed)

            if (num_resolved == 0) and not newly_failed:
                break # fixpoint reached

        for config in requested:
            if states[config] == ResolutionState.PENDING:
                states[config] = ResolutionState.UNRESOLVABLE
                config.release_digraph()
                LOGGER.debug(f'Could not determine a descriptor for {config!r}')

    assign_property_to_rdobj(mol, CIP_COMPUTED_PROP, True)
    LOGGER.info(
        f'Assigned CIP descriptors to {sum(state == ResolutionState.RESOLVED for state in states.values())} '
        f'of {len(requested)} requested stereogenic units in {control.passes} pass(es)'
    )
