"""
Hypercomp: single-file HTML components with scoped styles, composed at render time with Jinja2.

A component document consists of up to three blocks:

    <template> ... markup with Jinja2 expressions ... </template>
    <style> ... CSS, scoped to this component on load ... </style>
    <script> ... JS, emitted verbatim ... </script>

Only styles and scripts of the components that were actually used during a render are injected into the page.
"""

import logging

from hypercomp.errors import *
from hypercomp.component import Component, Shell, compile_component, compile_shell
from hypercomp.registry import Registry
from hypercomp.runtime import Runtime, Render
from hypercomp.loaders import Loader, DictLoader, FileLoader
from hypercomp.templates import TemplateSet


logging.getLogger(__name__).addHandler(logging.NullHandler())
