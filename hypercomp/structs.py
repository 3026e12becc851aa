"""
Data structures of a single render: stack of call frames of nested component invocations,
and the set of components used.
"""

from collections.abc import Mapping

from .errors import ArgumentError


########################################################################################################################################################

class Frame:
    """
    Call frame of one active component invocation: the arguments as passed by the caller.
    For an invocation with named parameters, `args` is a 1-tuple with the mapping of parameters,
    and `named` is the same mapping; otherwise `named` is None.
    """
    name  = None            # name of the invoked component
    args  = ()              # positional arguments
    named = None            # dict of named parameters, or None

    def __init__(self, name, args = (), named = None):
        self.name = name
        self.args = tuple(args)
        self.named = named

    @staticmethod
    def create(name, args, kwargs):
        """
        Normalize arguments of an invocation and create a Frame. A single mapping argument, or keyword arguments,
        or both, are combined into named parameters. Mixing positional and named parameters is not allowed.
        """
        if len(args) == 1 and isinstance(args[0], Mapping):
            named = dict(args[0])
            named.update(kwargs)
        elif kwargs:
            if args: raise ArgumentError(f"component '{name}' invoked with both positional and named parameters")
            named = dict(kwargs)
        else:
            return Frame(name, args)

        return Frame(name, (named,), named)

    def param(self, index, default = None):
        """Positional argument no. `index`; `default` if missing or None."""
        if 0 <= index < len(self.args) and self.args[index] is not None:
            return self.args[index]
        return default

    def __repr__(self):
        return f"Frame({self.name!r}, {self.args})"


class Stack(list):
    """Stack of call frames. Implementation based on standard <list>."""

    @property
    def size(self):
        return len(self)

    @property
    def top(self):
        """The top-most frame, or None if the stack is empty."""
        return self[-1] if self else None

    def push(self, frame):
        """Append `frame` to the stack and return its position, to be passed to reset() later on."""
        self.append(frame)
        return len(self) - 1

    def reset(self, position):
        "If anything was added on top of the stack, reset the top position to a previous state and forget those elements."
        if len(self) < position:
            raise Exception("Stack.reset(), can't return to a point (%s) that is higher than the current size (%s)" % (position, len(self)))
        del self[position:]


class UsedSet:
    """Insertion-ordered set of names of components used during a render."""

    def __init__(self, names = ()):
        self._names = dict.fromkeys(names)

    def add(self, name):
        self._names[name] = None

    def clear(self):
        self._names.clear()

    def __contains__(self, name):
        return name in self._names

    def __iter__(self):
        return iter(list(self._names))

    def __len__(self):
        return len(self._names)

    def __repr__(self):
        return f"UsedSet({list(self._names)})"
