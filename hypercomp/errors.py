"""
Exceptions for Hypercomp.
"""

class HypercompError(Exception): pass

class ConfigError(HypercompError):
    """Structural configuration error: page shell missing, or missing a required anchor."""

class SourceError(HypercompError):
    """
    A component document cannot be read or compiled. When raised at the end of a bulk load,
    `errors` is a dict of {document: exception} for all the documents that failed.
    """
    def __init__(self, msg, name = None, errors = None):
        super().__init__(msg)
        self.name = name
        self.errors = errors or {}

class CompositionError(HypercompError): pass

class UndefinedComponent(CompositionError):
    """A component that is not present in the registry was invoked or rendered."""

class ArgumentError(CompositionError):
    """Incorrect arguments of a component invocation or of a named-arguments builder."""

class NestingError(CompositionError):
    """Component invocations nested too deeply, typically because of unbounded recursion."""
