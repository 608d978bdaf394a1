'''Unit tests for iteration budgets and cooperative cancellation'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

import pytest
from threading import Event

from cipt.cip.control import (
    ResolutionControl,
    MaxIterationsExceeded,
    LabelingCancelled,
    CIPLabelingError,
)


def test_unbounded_by_default() -> None:
    '''Test that the default control never exhausts its budget'''
    control = ResolutionControl()
    control.tick(10**6)
    assert control.iterations == 10**6

def test_budget_exceeded() -> None:
    '''Test that exceeding the budget raises a distinct, catchable condition'''
    control = ResolutionControl(max_iterations=5)
    control.tick(5)
    with pytest.raises(MaxIterationsExceeded) as exc_info:
        control.tick()
    assert isinstance(exc_info.value, CIPLabelingError)
    assert exc_info.value.iterations == 6

def test_reset() -> None:
    '''Test that resetting discards previously-counted work'''
    control = ResolutionControl(max_iterations=5)
    control.tick(5)
    control.reset()
    control.tick(5)
    assert control.iterations == 5

@pytest.mark.parametrize('max_iterations', [-1, -100])
def test_negative_budget_rejected(max_iterations : int) -> None:
    '''Test that nonsensical budgets are rejected'''
    with pytest.raises(ValueError):
        _ = ResolutionControl(max_iterations=max_iterations)

def test_cancellation_at_pass_boundary() -> None:
    '''Test that cancellation is observed when a new pass begins'''
    event = Event()
    control = ResolutionControl(cancel_event=event)
    assert control.begin_pass() == 1

    event.set()
    with pytest.raises(LabelingCancelled):
        control.begin_pass()

def test_cancellation_polled_periodically() -> None:
    '''Test that cancellation is polled during long stretches of work'''
    event = Event()
    event.set()
    control = ResolutionControl(cancel_event=event, check_interval=10)
    control.tick(9) # not yet polled
    with pytest.raises(LabelingCancelled):
        control.tick()
