"""
Scoping of component styles: generation of scope classes, rewriting of CSS selectors,
and injection of the scope class into component markup.

Selectors are rewritten one by one, according to the root structure of the component's markup.
For a root element <button class="primary"> of kind SINGLE and a scope class "s-abc123":

    button          ->  button.s-abc123             (root tag: the root itself carries the scope class)
    .primary        ->  .s-abc123.primary           (class of the root element, or any class in a SINGLE root)
    .label          ->  .s-abc123 .label            (any other class: a descendant, in CONTAINER roots)
    :hover          ->  button.s-abc123:hover       (pseudo-class: applies to the root element)
    .card h3, [x]   ->  .s-abc123 .card h3          (anything else: a descendant)

When the markup has no single root element, it gets wrapped in a synthetic container that carries the scope class,
and all selectors are scoped as descendants of this container.
"""

import re, hashlib

from .config import SCOPE_PREFIX, SCOPE_LENGTH, WRAPPER_TAG, WRAPPER_HIDDEN_STYLE
from .structure import NORMAL, SINGLE


#####################################################################################################################################################
#####
#####  SCOPE CLASS
#####

def scope_class(name):
    """
    Scope class of a component called `name`: a short, deterministic token derived from an MD5 hash of the name.
    The same name always produces the same class, also across process restarts. Collisions of hash prefixes
    between different names are possible and are not detected.
    """
    digest = hashlib.md5(name.encode('utf-8')).hexdigest()
    return (SCOPE_PREFIX + digest)[:SCOPE_LENGTH]


#####################################################################################################################################################
#####
#####  SELECTORS
#####

_class_selector  = re.compile(r'\.(-?[_a-zA-Z][-\w]*)')
_css_comment     = re.compile(r'/\*.*?\*/', re.S)
_at_keyword      = re.compile(r'@[-\w]*')

# at-rules whose body contains regular rules that must be scoped; bodies of other at-rules are left untouched
GROUP_RULES = {'@media', '@supports', '@container', '@layer', '@document'}


def scope_selector(selector, scope, tag = None, classes = (), kind = NORMAL):
    """
    Rewrite a single `selector` so that it only matches elements of a component with a given `scope` class.
    `tag`, `classes` and `kind` describe the root element of the component's markup (see structure.Root).
    """
    if kind == NORMAL:
        return f'.{scope} {selector}'

    if tag and selector.lower() == tag.lower():
        return f'{selector}.{scope}'

    cls = _class_selector.fullmatch(selector)
    if cls:
        if kind == SINGLE or cls.group(1) in classes:
            return f'.{scope}{selector}'
        return f'.{scope} {selector}'

    if selector.startswith(':'):
        if tag: return f'{tag}.{scope}{selector}'
        return f'.{scope}{selector}'

    return f'.{scope} {selector}'


def _split_rules(css):
    """
    Split a style sheet, `css`, into top-level rules. Generate (head, body) pairs, where `body` is the text
    between a block's braces, or None for a statement at-rule (@import, @charset, ...) or a trailing fragment without a block.
    """
    pos, size = 0, len(css)
    while pos < size:
        brace = css.find('{', pos)
        close = css.find('}', pos)
        semi  = css.find(';', pos)

        if close != -1 and (brace == -1 or close < brace) and (semi == -1 or close < semi):
            pos = close + 1                         # stray closing brace
            continue

        if semi != -1 and (brace == -1 or semi < brace) and css[pos:semi].strip().startswith('@'):
            yield css[pos:semi+1].strip(), None     # statement at-rule
            pos = semi + 1
            continue

        if brace == -1:
            tail = css[pos:].strip()
            if tail: yield tail, None
            return

        depth, end = 1, brace + 1
        while end < size and depth:
            if css[end] == '{':   depth += 1
            elif css[end] == '}': depth -= 1
            end += 1

        body = css[brace+1:end-1] if not depth else css[brace+1:]     # unterminated block runs to the end of text
        yield css[pos:brace].strip(), body
        pos = end


def scope_styles(css, scope, tag = None, classes = (), kind = NORMAL):
    """
    Rewrite all selectors in a style sheet, `css`, with scope_selector(). Declarations are left untouched.
    The style sheet is processed at the granularity of rule blocks and selector lists, without a full CSS parser:
    it is split into brace-balanced blocks, and every block into a selector list and declarations on the first '{'.
    Conditional at-rules (@media etc.) get their inner rules scoped, recursively; other at-rules
    (@keyframes, @font-face, @import, ...) are passed through unchanged. Comments are removed.
    """
    css = _css_comment.sub('', css)
    if not css.strip(): return ''

    def scope_list(selectors):
        selectors = [sel.strip() for sel in selectors.split(',')]
        return ', '.join(scope_selector(sel, scope, tag, classes, kind) for sel in selectors if sel)

    def scope_rules(text):
        rules = []
        for head, body in _split_rules(text):
            if body is None:
                rules.append(head)
            elif head.startswith('@'):
                keyword = _at_keyword.match(head).group(0).lower()
                if keyword in GROUP_RULES:
                    rules.append(head + '{' + '\n'.join(scope_rules(body)) + '\n}')
                else:
                    rules.append(head + '{' + body + '}')
            else:
                rules.append(scope_list(head) + '{' + body + '}')
        return rules

    return '\n'.join(scope_rules(css))


#####################################################################################################################################################
#####
#####  MARKUP
#####

def add_class(text, tag, cls):
    """
    Add a class name, `cls`, to the opening tag `tag` of an element located in `text`.
    If the element has a class attribute already, `cls` is appended to its value, which can be written
    in double quotes, single quotes, or without quotes (typically, a single masked expression);
    otherwise, a new class attribute is inserted right before the end of the tag.
    """
    if 'class' not in tag.attrs:
        pos = tag.attrs_end
        return text[:pos] + f' class="{cls}"' + text[pos:]

    value = tag.attrs['class']
    start, end = tag.spans['class']

    if value is None:
        value = f'="{cls}"'
    elif value[0] in '"\'' and len(value) >= 2 and value[-1] == value[0]:
        quote, names = value[0], value[1:-1].strip()
        value = quote + (f'{names} {cls}' if names else cls) + quote
    else:
        value = f'"{value} {cls}"'

    return text[:start] + value + text[end:]


def scope_markup(root, scope, unwrap = False):
    """
    Attach the `scope` class to markup whose structure was described by `root` (a structure.Root).
    A root element gets the class added to its opening tag. Markup without a single root element
    gets wrapped in a synthetic container carrying the class; with `unwrap`=True the container
    is styled so that its box is not rendered.
    """
    if root.kind == NORMAL:
        style = f' style="{WRAPPER_HIDDEN_STYLE}"' if unwrap else ''
        return f'<{WRAPPER_TAG} class="{scope}"{style}>{root.mask.text}</{WRAPPER_TAG}>'

    masked = add_class(root.mask.masked, root.tag, scope)
    return root.mask.unmask(masked)
