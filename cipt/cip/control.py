'''Iteration budget and cooperative cancellation shared by every stage of one labelling invocation'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

import logging
LOGGER = logging.getLogger(__name__)

from typing import Optional, Protocol
from dataclasses import dataclass, field


DEFAULT_MAX_ITERATIONS : int = 0 # 0 means unbounded
CANCELLATION_CHECK_INTERVAL : int = 1024

class CIPLabelingError(Exception):
    '''Base class for conditions which abort the assignment of CIP labels'''
    def __init__(self, message : str, iterations : int=0) -> None:
        super().__init__(message)
        self.iterations = iterations
    
class MaxIterationsExceeded(CIPLabelingError):
    '''Raised when labelling performs more work than the iteration budget allows'''
    pass

class LabelingCancelled(CIPLabelingError):
    '''Raised when an external cancellation signal is observed during labelling'''
    pass

class Cancellable(Protocol):
    '''Anything which can signal cancellation, e.g. a threading.Event'''
    def is_set(self) -> bool:
        ...


@dataclass
class ResolutionControl:
    '''
    Parameter object carrying the iteration budget and cancellation signal for one labelling invocation
    
    Attributes
    ----------
    max_iterations : int, default=DEFAULT_MAX_ITERATIONS
        The number of units of work (node creations, hierarchical comparison steps,
        and resolution passes) permitted before MaxIterationsExceeded is raised; 0 for no bound
    cancel_event : Optional[Cancellable], default=None
        An object whose is_set() returns True once labelling should be abandoned
    check_interval : int, default=CANCELLATION_CHECK_INTERVAL
        How many units of work elapse between polls of the cancellation signal
    '''
    max_iterations : int = DEFAULT_MAX_ITERATIONS
    cancel_event : Optional[Cancellable] = None
    check_interval : int = CANCELLATION_CHECK_INTERVAL
    iterations : int = field(default=0, init=False)
    passes : int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.max_iterations < 0:
            raise ValueError(f'Iteration budget must be non-negative (0 for unbounded), not {self.max_iterations}')
        if self.check_interval < 1:
            raise ValueError(f'Cancellation check interval must be positive, not {self.check_interval}')

    @property
    def is_bounded(self) -> bool:
        return self.max_iterations > 0

    def reset(self) -> None:
        '''Discard all work counted so far'''
        self.iterations = 0
        self.passes = 0

    def tick(self, num_steps : int=1) -> None:
        '''Count units of work against the budget, periodically polling for cancellation'''
        prev_iterations = self.iterations
        self.iterations += num_steps
        if self.is_bounded and (self.iterations > self.max_iterations):
            raise MaxIterationsExceeded(
                f'Exceeded maximum of {self.max_iterations} iterations while assigning CIP labels',
                iterations=self.iterations,
            )
        
        if (self.iterations // self.check_interval) != (prev_iterations // self.check_interval):
            self.check_cancelled()

    def check_cancelled(self) -> None:
        '''Raise LabelingCancelled if cancellation has been requested'''
        if (self.cancel_event is not None) and self.cancel_event.is_set():
            raise LabelingCancelled(
                f'CIP labelling cancelled after {self.iterations} iterations',
                iterations=self.iterations,
            )

    def begin_pass(self) -> int:
        '''Mark the boundary of a resolution pass; returns the (1-based) number of the pass begun'''
        self.check_cancelled()
        self.passes += 1
        self.tick()
        LOGGER.debug(f'Beginning resolution pass {self.passes} ({self.iterations} iterations elapsed)')
        
        return self.passes
