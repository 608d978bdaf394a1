'''For intercepting and controlling RDKit logging (namely that which is not done in Python)'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

from typing import Generator

from rdkit.RDLogger import DisableLog, EnableLog, _levels as RDLoggerNames
from contextlib import contextmanager


@contextmanager
def suppress_rdkit_logs(spec : str='rdApp.error') -> Generator[None, None, None]:
    '''
    Temporarily suppress C++ based RDKit log output for the given log level
    
    Intended for wrapping RDKit calls whose failures are caught and handled in Python,
    where RDKit's own complaints would otherwise spill into stderr. Logging is re-enabled
    even if the wrapped block raises
    '''
    if spec not in RDLoggerNames:
        raise ValueError(f'Logging target must be one of {RDLoggerNames}')
    
    DisableLog(spec)
    try:
        yield None # execute "with" block code here
    finally:
        EnableLog(spec)
