"""
Structure analysis of component markup: detection of a single root element and its kind.

Root kinds:
- SINGLE     the markup is a single element with no child elements inside, like <b>{{ x }}</b> or <input>
- CONTAINER  the markup is a single element that contains other elements, like <div><span/></div>
- NORMAL     there's no single root element: multiple top-level nodes, or text around elements, like <b/>Other<i/>

The analysis is performed on markup with template expressions masked (see grammar.Mask).
"""

import re

from .grammar import Mask, match_tag, unquote


#####################################################################################################################################################
#####
#####  ROOT
#####

NORMAL    = 'normal'
SINGLE    = 'single'
CONTAINER = 'container'

ROOT_KINDS = (NORMAL, SINGLE, CONTAINER)

# void HTML elements: have no closing tag and no contents, so a lone void element is a SINGLE root
VOID_TAGS = set("area base br col embed hr img input link meta param source track wbr".split())

_element_marker = re.compile(r'<[a-z/]', re.I)        # beginning of an opening or closing tag inside contents


class Root:
    """Description of the root structure of a markup text."""

    kind    = NORMAL
    tag     = None          # OpenTag of the root element, with positions relative to `mask.masked`; None for NORMAL markup
    mask    = None          # Mask of the analysed markup
    classes = ()            # static class names of the root element, as a frozenset; classes produced by expressions are skipped

    def __init__(self, mask, kind = NORMAL, tag = None):
        self.mask = mask
        self.kind = kind
        self.tag = tag
        self.classes = frozenset(self._static_classes()) if tag else frozenset()

    @property
    def name(self):
        """Tag name of the root element, or None."""
        return self.tag.name if self.tag else None

    def _static_classes(self):
        value = unquote(self.tag.attrs.get('class'))
        if not value: return
        for token in value.split():
            if not self.mask.is_dynamic(token):
                yield token

    def __repr__(self):
        return f"Root({self.kind}, tag={self.name!r}, classes={sorted(self.classes)})"


#####################################################################################################################################################
#####
#####  ANALYSIS
#####

def _closes_at_end(name, inner):
    """
    Check that an element <name> opened right before `inner` is not closed anywhere inside `inner`,
    so that the closing tag that follows `inner` is the matching one. Same-name elements nested inside are counted.
    """
    pattern = re.compile(rf'<(/?){re.escape(name)}(?=[\s/>])[^>]*?(/?)>', re.I)
    depth = 1
    for m in pattern.finditer(inner):
        closing, selfclosing = m.groups()
        if closing:
            depth -= 1
            if depth == 0: return False
        elif not selfclosing:
            depth += 1
    return True


def analyse(markup):
    """Analyse the root structure of a `markup` text. Return a Root."""

    mask = Mask(markup)
    text = mask.masked
    body = text.strip()
    offset = len(text) - len(text.lstrip())         # position of `body` inside `text`

    if not body.startswith('<'): return Root(mask)

    tag = match_tag(text, offset)
    if tag is None: return Root(mask)

    rest = text[tag.end : offset + len(body)]

    if tag.selfclosing or tag.name.lower() in VOID_TAGS:
        if rest.strip(): return Root(mask)          # more nodes follow the root candidate
        return Root(mask, SINGLE, tag)

    closing = re.search(rf'</{re.escape(tag.name)}\s*>$', rest, re.I)
    if closing is None: return Root(mask)

    inner = rest[:closing.start()]
    if not _closes_at_end(tag.name, inner): return Root(mask)

    kind = CONTAINER if _element_marker.search(inner) else SINGLE
    return Root(mask, kind, tag)
