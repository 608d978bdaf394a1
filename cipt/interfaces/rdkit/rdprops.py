'''Reference and utilities for Prop attributes on RDKit objects (i.e. Atom, Bond, and Mol objects), namely those holding CIP labels'''

__author__ = 'Timotej Bernat'
__email__ = 'timotej.bernat@colorado.edu'

from typing import Any, Callable, Optional, Union

from rdkit.Chem.rdchem import Atom, Bond, Mol, RWMol
RDObj = Union[Atom, Bond, Mol, RWMol]


# "MAGIC" PROP KEYS WHICH CIP LABELLING READS FROM OR WRITES TO (https://www.rdkit.org/docs/RDKit_Book.html#atom)
CIP_CODE_PROP : str = '_CIPCode'
CIP_COMPUTED_PROP : str = '_CIPComputed'
CIP_RELATED_MAGIC_PROPS = {
    CIP_CODE_PROP       : 'the CIP descriptor of an atom (R/S/r/s) or bond (E/Z/M/P/m/p)',
    CIP_COMPUTED_PROP   : 'set on a Mol once CIP descriptors have been assigned to it',
    '_CIPRank'          : 'the integer (legacy) CIP rank of an atom',
    '_ChiralityPossible': 'set if an atom is a possible chiral center',
}

# REFERENCE TABLES FOR ENFORCING C++ TYPING THAT RDKit ENFORCES
RDPropType = Union[str, int, float, bool]
RDPROP_GETTERS = {
    str   : 'GetProp',
    bool  : 'GetBoolProp',
    int   : 'GetIntProp',
    float : 'GetDoubleProp'
}
RDPROP_SETTERS = {
    str   : 'SetProp',
    bool  : 'SetBoolProp',
    int   : 'SetIntProp',
    float : 'SetDoubleProp'
}

# PROPERTY INSPECTION AND ASSIGNMENT FUNCTIONS
def isrdobj(obj : Any) -> bool:
    '''Check if the given object is an RDKit object'''
    return isinstance(obj, RDObj.__args__)

def assign_property_to_rdobj(
    rdobj : RDObj,
    prop_name : str,
    prop_value : Any,
    preserve_type : bool=True,
) -> None:
    '''Assign a Python object to a property of an RDKit object in a type-respecting manner'''
    type_setter_name : Optional[str] = RDPROP_SETTERS.get(type(prop_value), None)
    if (type_setter_name is None) or (not preserve_type):
        rdobj.SetProp(prop_name, str(prop_value))
    else:
        type_setter : Callable[[str, Any], None] = getattr(rdobj, type_setter_name) # DEV: 2nd arg is actually same type as prop_value
        type_setter(prop_name, prop_value)

def clear_property_from_rdobj(rdobj : RDObj, prop_name : str) -> bool:
    '''Remove a property from an RDKit object, if present; returns whether anything was removed'''
    if not rdobj.HasProp(prop_name):
        return False

    rdobj.ClearProp(prop_name)
    return True

def cip_code(rdobj : Union[Atom, Bond]) -> Optional[str]:
    '''The CIP descriptor label assigned to an Atom or Bond, or None if it carries none'''
    if not rdobj.HasProp(CIP_CODE_PROP):
        return None
    return rdobj.GetProp(CIP_CODE_PROP)
