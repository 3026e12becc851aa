"""
Composition runtime: rendering of components with Jinja2, nested component invocations, and tracking
of the components that contributed to a render, so that only their styles and scripts are emitted.

Functions available inside component markup, in addition to builtins:

    {{ comp("card", title, 3) }}            -- render component "card" with positional parameters
    {{ comp("card", title = title) }}       -- ... with named parameters, visible as variables inside "card"
    {{ comp("card", dict("title", x)) }}    -- ... with named parameters passed as a single mapping
    {{ param(0) }}                          -- positional parameter no. 0 of the current invocation, or None
    {{ param_or(1, "small") }}              -- positional parameter no. 1, or a default if missing or None

Every top-level render gets its own Render object: a stack of call frames and a set of used components.
The current Render is kept in a context variable, so concurrent renders in different threads never share state.
"""

import json, threading, logging
from collections.abc import Mapping
from contextvars import ContextVar

from jinja2 import Environment, BaseLoader, TemplateNotFound
from markupsafe import Markup

from .config import MAX_DEPTH, AUTOESCAPE, SHELL_VARS
from .errors import ConfigError, CompositionError, UndefinedComponent, NestingError
from .builtins import BUILTIN_FUNCS
from .component import component_name
from .structs import Frame, Stack, UsedSet

log = logging.getLogger(__name__)

USE_FUNC = '_use'           # internal function called at the beginning of every component to mark it as used


def context_of(data):
    """Convert `data` passed by a caller to a dict of template variables."""
    if data is None: return {}
    if isinstance(data, Mapping): return dict(data)
    raise TypeError(f"data passed for rendering must be a mapping, not {type(data).__name__}")


#####################################################################################################################################################
#####
#####  RENDER STATE
#####

_current = ContextVar('hypercomp_render', default = None)


class Render:
    """
    State of a single top-level render: the stack of call frames of nested invocations, and the set of used components.
    Activated with a `with` statement; only one Render is active at a time in a given thread.
    The stack and the set are guarded by separate locks.
    """

    stack = None            # Stack of Frames
    used  = None            # UsedSet of component names

    def __init__(self, max_depth = MAX_DEPTH):
        self.max_depth = max_depth
        self.stack = Stack()
        self.used = UsedSet()
        self._stack_lock = threading.Lock()
        self._used_lock = threading.Lock()
        self._token = None

    @staticmethod
    def current():
        """The Render active in the current thread/context, or None."""
        return _current.get()

    def __enter__(self):
        self._token = _current.set(self)
        return self

    def __exit__(self, *exc):
        _current.reset(self._token)
        self._token = None

    def use(self, name):
        with self._used_lock:
            self.used.add(name)

    def push(self, frame):
        with self._stack_lock:
            if self.stack.size >= self.max_depth:
                raise NestingError(f"maximum nesting depth ({self.max_depth}) of components exceeded when invoking '{frame.name}'")
            return self.stack.push(frame)

    def reset(self, position):
        with self._stack_lock:
            self.stack.reset(position)

    def param(self, index, default = None):
        with self._stack_lock:
            top = self.stack.top
        return top.param(index, default) if top else default

    def __repr__(self):
        return f"Render(depth={self.stack.size}, used={self.used})"


#####################################################################################################################################################
#####
#####  RUNTIME
#####

class ComponentLoader(BaseLoader):
    """Jinja2 loader that serves compiled markup of components from a Registry."""

    def __init__(self, registry):
        self.registry = registry

    def get_source(self, environment, template):
        name = component_name(template)
        component = self.registry.lookup(name)
        if component is None: raise TemplateNotFound(template)

        # the component registers itself as used whenever executed: invoked, included or imported
        source = '{{ %s(%s) }}' % (USE_FUNC, json.dumps(name)) + component.markup
        return source, None, lambda: self.registry.lookup(name) is component


class Runtime:
    """
    Execution environment of components from a given Registry. Holds a Jinja2 Environment whose globals
    include builtins, custom functions, and the composition functions: comp(), param(), param_or().
    The Registry must be fully loaded before rendering starts.
    """

    registry  = None
    env       = None            # Jinja2 Environment for components and the shell
    max_depth = MAX_DEPTH

    def __init__(self, registry, funcs = None, autoescape = AUTOESCAPE, max_depth = MAX_DEPTH):
        self.registry = registry
        self.max_depth = max_depth

        self.env = Environment(loader = ComponentLoader(registry), autoescape = autoescape)
        self.env.globals.update(BUILTIN_FUNCS)
        self.env.globals.update(funcs or {})
        self.env.globals.update({
            'comp':     self.invoke,
            'param':    self.param,
            'param_or': self.param_or,
            USE_FUNC:   self._use,
        })

        self._shell = None              # pair (Shell, compiled jinja2 Template) of the most recently rendered shell
        self._shell_lock = threading.Lock()

    ###  Functions exposed to markup

    def invoke(self, name, *args, **kwargs):
        """
        Render component `name` nested inside the currently rendered one, with given parameters.
        Return the rendered fragment as safe markup.
        """
        render = Render.current()
        if render is None: raise CompositionError(f"component '{name}' invoked outside of a render")

        name = component_name(name)
        if name not in self.registry: raise UndefinedComponent(f"component '{name}' not found")

        frame = Frame.create(name, args, kwargs)
        render.use(name)
        position = render.push(frame)
        log.debug("invoking component '%s' at depth %s", name, position + 1)
        try:
            variables = dict(frame.named) if frame.named is not None else {'args': frame.args}
            output = self.env.get_template(name).render(variables)
        finally:
            render.reset(position)

        return Markup(output)

    def param(self, index):
        render = Render.current()
        return render.param(index) if render else None

    def param_or(self, index, default):
        render = Render.current()
        return render.param(index, default) if render else default

    def _use(self, name):
        render = Render.current()
        if render: render.use(name)
        return ''

    ###  Rendering

    def shell_template(self, shell):
        with self._shell_lock:
            if self._shell is None or self._shell[0] is not shell:
                self._shell = (shell, self.env.from_string(shell.markup))
            return self._shell[1]

    def render(self, name, data = None):
        """
        Render component `name` as the content of the page shell. Styles and scripts of all components used
        during this render, including those referenced statically by the shell, are injected into the shell.
        """
        name = component_name(name)
        if name not in self.registry: raise UndefinedComponent(f"template {name} not found")

        shell = self.registry.shell
        if shell is None: raise ConfigError("layout template not defined")

        variables = context_of(data)

        with Render(self.max_depth) as render:
            render.use(name)
            for ref in self.registry.closure(shell.refs):       # components that the shell will render, directly or not
                render.use(ref)

            content = self.env.get_template(name).render(variables)
            css, js = self.registry.aggregate(render.used)

            values = (Markup(content), Markup(css), Markup(js), data)
            return self.shell_template(shell).render(dict(zip(SHELL_VARS, values)))

    def render_fragment(self, name, data = None):
        """Render component `name` alone, without the shell. Return a pair: (fragment, names of used components)."""
        name = component_name(name)
        if name not in self.registry: raise UndefinedComponent(f"template {name} not found")

        with Render(self.max_depth) as render:
            output = self.env.get_template(name).render(context_of(data))
            return output, list(render.used)
