"""
Built-in functions available in all components, in the page shell, and in isolated renders.
"""

import json
from collections.abc import Mapping

from .errors import ArgumentError


########################################################################################################################################################

def to_json(value):
    """JSON representation of `value`; "{}" if the value can't be serialized."""
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return '{}'

def has_field(obj, field):
    """True if `obj` has an attribute or (for mappings) a key called `field` with a non-empty value."""
    if isinstance(obj, Mapping):
        return bool(obj.get(field))
    return bool(getattr(obj, field, None))

def make_dict(*pairs, **named):
    """
    Build a dict of named parameters from a flat list of key-value pairs: dict("title", x, "size", 3).
    Keyword arguments are accepted, too, and added on top of the pairs.
    """
    if len(pairs) % 2:
        raise ArgumentError("dict needs key and value pairs as arguments")

    params = {}
    for i in range(0, len(pairs), 2):
        key = pairs[i]
        if not isinstance(key, str): raise ArgumentError(f"dict keys must be strings, not {type(key).__name__}")
        params[key] = pairs[i + 1]

    params.update(named)
    return params


BUILTIN_FUNCS = {
    'add':          lambda a, b: a + b,
    'sub':          lambda a, b: a - b,
    'mul':          lambda a, b: a * b,
    'mod':          lambda a, b: a % b,
    'to_json':      to_json,
    'has_field':    has_field,
    'dict':         make_dict,
}
