"""
Block extraction: splitting of a component document into markup, style and script blocks.

A component document looks like this:

    <template unwrap>
        <button class="primary">{{ label }}</button>
    </template>

    <style>
        button { color: red }
    </style>

    <script>
        console.log("loaded")
    </script>

Any of the blocks may be missing. Only the 1st occurrence of every block type is honored.
<style> and <script> elements placed *inside* the markup block are part of the markup, not separate blocks.
"""

import re

from .config import TEMPLATE_BLOCK, STYLE_BLOCK, SCRIPT_BLOCK, UNWRAP_ATTR
from .grammar import Mask, match_tag, unquote


#####################################################################################################################################################
#####
#####  BLOCKS
#####

class Blocks:
    """Raw contents of the blocks of a component document. Bodies are returned verbatim, without stripping."""

    markup = None           # body of the markup block; None if the document has no markup block at all
    attrs  = None           # attributes of the markup block: {name: value}, with value=None for attributes without a value
    style  = ''             # body of the style block
    script = ''             # body of the script block

    def __init__(self, markup = None, attrs = None, style = '', script = ''):
        self.markup = markup
        self.attrs = attrs or {}
        self.style = style
        self.script = script

    @property
    def unwrap(self):
        """True if the markup block requests a non-rendering synthetic wrapper: <template unwrap>."""
        if UNWRAP_ATTR not in self.attrs: return False
        value = self.attrs[UNWRAP_ATTR]
        return value is None or value.strip().lower() not in ('false', '0', 'no')

    def __repr__(self):
        return f"Blocks(markup={self.markup!r}, attrs={self.attrs!r}, style={self.style!r}, script={self.script!r})"


#####################################################################################################################################################
#####
#####  EXTRACTION
#####

def _pattern_open(name):  return re.compile(rf'<{name}\b', re.I)
def _pattern_close(name): return re.compile(rf'</{name}\s*>', re.I)
def _pattern_block(name): return re.compile(rf'<{name}\b[^>]*>(.*?)</{name}\s*>', re.I | re.S)

_template_open  = _pattern_open(TEMPLATE_BLOCK)
_template_close = _pattern_close(TEMPLATE_BLOCK)
_template_any   = re.compile(rf'<(/?){TEMPLATE_BLOCK}\b', re.I)

_style_block    = _pattern_block(STYLE_BLOCK)
_script_block   = _pattern_block(SCRIPT_BLOCK)


def _extract_template(source):
    """
    Find the 1st markup block in `source`. Return a triple (body, attrs, rest) where `rest` is the `source`
    with the whole block cut out; or None if no markup block is present.
    Nested <template> elements inside the block are allowed and don't terminate the block.
    The scan runs over masked text, so tags that occur inside template expressions are ignored.
    """
    mask = Mask(source)
    masked = mask.masked

    for opening in _template_open.finditer(masked):
        tag = match_tag(masked, opening.start())
        if tag is None or tag.selfclosing: continue

        attrs = {name: mask.unmask(unquote(value)) if value is not None else None for name, value in tag.attrs.items()}
        depth = 1
        for m in _template_any.finditer(masked, tag.end):
            if m.group(1):
                depth -= 1
                if depth == 0:
                    close = _template_close.match(masked, m.start())
                    if close is None:
                        depth += 1          # malformed closing tag, keep searching
                        continue
                    body = mask.unmask(masked[tag.end : m.start()])
                    rest = mask.unmask(masked[:opening.start()] + masked[close.end():])
                    return body, attrs, rest
            else:
                depth += 1
        return None                         # unterminated block
    return None


def extract_blocks(source):
    """Split a component document `source` into blocks. Return a Blocks instance."""

    blocks = Blocks()
    rest = source

    template = _extract_template(source)
    if template:
        blocks.markup, blocks.attrs, rest = template    # style & script elements inside markup belong to the markup

    style = _style_block.search(rest)
    if style: blocks.style = style.group(1)

    script = _script_block.search(rest)
    if script: blocks.script = script.group(1)

    return blocks


def extract_markup(source):
    """Markup block of `source`, or the entire `source` if there's no markup block. For isolated rendering."""
    template = _extract_template(source)
    return template[0] if template else source
