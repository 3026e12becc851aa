"""
Compilation of component documents and of the page shell.
"""

import re, logging

from .config import HEAD_ANCHOR, BODY_ANCHOR, STYLE_SLOT, SCRIPT_SLOT
from .errors import ConfigError
from .blocks import extract_blocks
from .structure import NORMAL, analyse
from .scope import scope_class, scope_styles, scope_markup

log = logging.getLogger(__name__)


def component_name(name):
    """Canonical name of a component, as used in invocations: a trailing ".html" is dropped."""
    return name[:-5] if name.endswith('.html') else name

# static invocations of components in a source text:  comp("name" ...
_invocation = re.compile(r'''\bcomp\(\s*(['"])(.+?)\1''')

def static_refs(text):
    """Names of components invoked with literal names in `text`, in order of first occurrence, without duplicates."""
    refs = []
    for m in _invocation.finditer(text):
        ref = component_name(m.group(2))
        if ref not in refs: refs.append(ref)
    return refs


#####################################################################################################################################################
#####
#####  COMPONENT
#####

class Component:
    """
    A compiled component: markup with the scope class attached, scoped CSS, and verbatim JS.
    Components are created by compile_component() and never modified afterwards.
    """
    name    = None          # unique name of the component, typically the document's filename without extension
    markup  = ''            # compiled markup, with unresolved template expressions; empty if the document had no markup block
    style   = ''            # scoped CSS; may be empty
    script  = ''            # JS code, verbatim; may be empty
    scope   = None          # scope class, a pure function of `name`
    kind    = NORMAL        # root kind of the original markup: NORMAL, SINGLE or CONTAINER
    tag     = None          # tag name of the root element, if any
    classes = frozenset()   # static classes of the root element
    unwrap  = False         # True if a non-rendering wrapper was requested by the markup block
    refs    = ()            # names of components invoked with literal names from the markup

    def __init__(self, name, markup = '', style = '', script = '', scope = None, kind = NORMAL, tag = None,
                 classes = frozenset(), unwrap = False, refs = ()):
        self.name = name
        self.markup = markup
        self.style = style
        self.script = script
        self.scope = scope or scope_class(name)
        self.kind = kind
        self.tag = tag
        self.classes = frozenset(classes)
        self.unwrap = unwrap
        self.refs = tuple(refs)

    def __repr__(self):
        return f"Component({self.name!r}, scope={self.scope!r}, kind={self.kind!r})"


def compile_component(name, source):
    """
    Compile a component document, `source`, into a Component called `name`.
    A document without a markup block is inert: its style and script are taken as they are, without scoping.
    """
    blocks = extract_blocks(source)
    scope = scope_class(name)

    if blocks.markup is None:
        log.debug("component '%s' has no markup block, styles left unscoped", name)
        return Component(name, style = blocks.style, script = blocks.script, scope = scope)

    root = analyse(blocks.markup)
    markup = scope_markup(root, scope, blocks.unwrap)
    style = scope_styles(blocks.style, scope, root.name, root.classes, root.kind)

    log.debug("compiled component '%s': scope=%s kind=%s unwrap=%s", name, scope, root.kind, blocks.unwrap)

    return Component(name, markup, style, blocks.script, scope, root.kind, root.name, root.classes, blocks.unwrap,
                     static_refs(blocks.markup))


#####################################################################################################################################################
#####
#####  PAGE SHELL
#####

class Shell:
    """
    Page shell: a layout document with injection points for aggregated styles (before </head>),
    aggregated scripts (before </body>), and a yield point for the rendered content: {{ content }}.
    """
    name    = None
    source  = None          # original source of the shell document
    markup  = None          # source with style & script placeholders inserted
    refs    = ()            # names of components invoked statically from the shell, in order of occurrence

    def __init__(self, name, source, markup, refs = ()):
        self.name = name
        self.source = source
        self.markup = markup
        self.refs = tuple(refs)

    def __repr__(self):
        return f"Shell({self.name!r}, refs={self.refs})"


def _insert_before(text, anchor, insertion, what):
    m = re.search(anchor, text, re.I)
    if m is None: raise ConfigError(f"page shell must contain a {what} tag")
    return text[:m.start()] + insertion + text[m.start():]


def compile_shell(name, source):
    """
    Compile a page shell document. Raise ConfigError if the document lacks </head> or </body>.
    Blocks of a component document are not recognized here: the whole document is the shell.
    """
    markup = _insert_before(source, HEAD_ANCHOR, STYLE_SLOT, '</head>')
    markup = _insert_before(markup, BODY_ANCHOR, SCRIPT_SLOT, '</body>')

    refs = static_refs(source)
    log.debug("compiled page shell '%s', static references: %s", name, refs)
    return Shell(name, source, markup, refs)
