"""
TemplateSet: the public entry point. Loads component documents and the page shell, compiles them
into a Registry, and renders pages and isolated fragments.

    ts = TemplateSet()
    ts.add_funcs(upper = str.upper)
    ts.parse_dirs('templates', 'components')
    html = ts.render('index', {'title': "Home"})

The document named `layout` (without extension) is the page shell.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from jinja2 import Environment

from .config import LAYOUT, AUTOESCAPE, MAX_DEPTH
from .errors import ConfigError, SourceError
from .builtins import BUILTIN_FUNCS
from .blocks import extract_markup
from .component import compile_component, compile_shell
from .registry import Registry
from .runtime import Runtime, context_of
from .loaders import FileLoader

log = logging.getLogger(__name__)


#####################################################################################################################################################
#####
#####  TEMPLATE SET
#####

class TemplateSet:

    layout   = LAYOUT           # name of the page shell document
    registry = None             # Registry of compiled components and the shell
    runtime  = None             # Runtime that renders components from `registry`
    loader   = None             # FileLoader with a cache of compiled templates for isolated rendering
    funcs    = None             # custom functions, {name: callable}
    workers  = None             # max. no. of threads used for compilation in bulk loads; None = default of ThreadPoolExecutor

    def __init__(self, layout = LAYOUT, loader = None, autoescape = AUTOESCAPE, max_depth = MAX_DEPTH, workers = None):
        self.layout = layout
        self.autoescape = autoescape
        self.workers = workers
        self.funcs = {}
        self.registry = Registry()
        self.runtime = Runtime(self.registry, autoescape = autoescape, max_depth = max_depth)
        self.loader = loader or FileLoader()
        self._isolated = None           # Jinja2 Environment for isolated rendering, created on first use
        self._loaded = False

    def add_funcs(self, mapping = None, **funcs):
        """Add custom functions, available in all components, in the shell and in isolated renders. Must precede loading."""
        if self._loaded: raise ConfigError("custom functions must be added before any document is loaded")
        funcs = dict(mapping or {}, **funcs)
        self.funcs.update(funcs)
        self.runtime.env.globals.update(funcs)
        if self._isolated is not None: self._isolated.globals.update(funcs)

    ###  Loading

    def _compile(self, name, text):
        """Compile document `text` as a component or as the shell, depending on `name`. Check syntax of the resulting template."""
        if name == self.layout:
            shell = compile_shell(name, text)
            self.runtime.env.parse(shell.markup)
            self.registry.set_shell(shell)
            return shell

        component = compile_component(name, text)
        self.runtime.env.parse(component.markup)
        self.registry.register(component)
        return component

    def parse_source(self, name, text):
        """Compile a document given as a string and register it under `name`."""
        self._loaded = True
        return self._compile(name, text)

    def parse_file(self, path):
        """Compile a single document file; its name is the file name without extension."""
        loader = FileLoader()
        fullname = loader.canonical(path)
        text, _ = loader.load(fullname)
        return self.parse_source(loader.docname(fullname), text)

    def parse_loader(self, loader, names = None):
        """
        Compile all documents available through `loader` (or only those listed in `names`) concurrently,
        and register them. A document that fails does not stop the others; all failures are reported together
        in a single SourceError afterwards. Raise ConfigError if the shell document was not among the documents.
        """
        self._loaded = True
        fullnames = list(names) if names is not None else loader.documents()

        def compile_one(fullname):
            text, _ = loader.load(fullname)
            return self._compile(loader.docname(fullname), text)

        errors = {}
        with ThreadPoolExecutor(max_workers = self.workers) as pool:
            futures = [(fullname, pool.submit(compile_one, fullname)) for fullname in fullnames]
            for fullname, future in futures:
                ex = future.exception()
                if ex is None: continue
                log.error("failed to compile document %s: %s", fullname, ex)
                errors[fullname] = ex

        for ex in errors.values():
            if isinstance(ex, ConfigError): raise ex                # broken shell is reported as such
        if errors:
            raise SourceError(f"{len(errors)} document(s) failed to compile: {', '.join(map(str, errors))}", errors = errors)

        if not any(loader.docname(fullname) == self.layout for fullname in fullnames):
            raise ConfigError(f"layout template '{self.layout}' not found among the documents loaded")

        log.info("loaded %s component(s), page shell '%s'", len(self.registry), self.layout)

    def parse_dirs(self, *dirs):
        """Compile all component documents found directly inside the given folders (not recursively)."""
        self.parse_loader(FileLoader(*dirs))

    def parse_dir(self, dir):
        self.parse_dirs(dir)

    ###  Rendering

    def render(self, name, data = None):
        """Render component `name` inside the page shell, with styles and scripts of all the components used."""
        return self.runtime.render(name, data)

    def execute(self, out, name, data = None):
        """Like render(), but write the output to a file-like object, `out`."""
        out.write(self.render(name, data))

    ###  Isolated rendering

    def _isolated_env(self):
        if self._isolated is None:
            env = Environment(autoescape = self.autoescape)
            env.globals.update(BUILTIN_FUNCS)
            env.globals.update(self.funcs)
            self._isolated = env
        return self._isolated

    def isolated_template(self, path):
        """Compiled template of the markup block of a document file, from cache if the file hasn't changed since."""
        fullname = self.loader.canonical(path)
        template = self.loader.get(fullname)
        if template is None:
            text, meta = self.loader.load(fullname)
            template = self._isolated_env().from_string(extract_markup(text))
            self.loader.cache(fullname, template, meta)
        return template

    def render_isolated(self, path, data = None):
        """
        Render the markup of a single document file (only the markup block, or the whole file if it has none),
        without the shell, styles or scripts, and without tracking of components. The file doesn't have to be loaded before.
        """
        return self.isolated_template(path).render(context_of(data))

    def execute_isolated(self, out, path, data = None):
        out.write(self.render_isolated(path, data))

    def __repr__(self):
        return f"TemplateSet(layout={self.layout!r}, components={self.registry.names()})"
