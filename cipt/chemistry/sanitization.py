'''
Wrappers for RDKit Mol sanitization operations needed when ranking substituents, 
namely fixing a Kekule structure for aromatic systems
'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

import logging
LOGGER = logging.getLogger(__name__)

from typing import Optional

from rdkit.Chem.rdchem import Mol, KekulizeException
from rdkit.Chem.rdmolops import Kekulize

from .rdloggers import suppress_rdkit_logs


def kekulized_mol(mol : Mol, clear_aromatic_flags : bool=True) -> Optional[Mol]:
    '''
    Return a copy of an RDKit Mol with aromatic bonds assigned explicit alternating single and double bonds
    
    Parameters
    ----------
    mol : Mol
        The RDKit Mol to Kekulize; is not modified
    clear_aromatic_flags : bool, default=True
        Whether to also clear the aromaticity flags on atoms and bonds of the copy
        
    Returns
    -------
    kekmol : Optional[Mol]
        A Kekulized copy of the input molecule, or None if no valid Kekule structure could be found
    '''
    kekmol = Mol(mol)
    with suppress_rdkit_logs('rdApp.error'):
        try:
            Kekulize(kekmol, clearAromaticFlags=clear_aromatic_flags)
        except KekulizeException as err:
            LOGGER.warning(f'Could not Kekulize molecule; aromatic bonds will be treated as single bonds ({err})')
            return None
    
    return kekmol
