"""
Lightweight, tag-aware scanning of component markup.

Component markup is NOT parsed as a whole. Only the opening tag of a (candidate) root element is parsed,
with a small PEG grammar, to find out the tag name, its attributes and positions of attribute values.
Before scanning, template expressions are masked with placeholder tokens, so that operators and quotes
inside expressions, like in:

    <li class="{{ 'active' if i > 0 }}">

do not confuse detection of tag boundaries.
"""

import re

from parsimonious.grammar import Grammar
from parsimonious.exceptions import ParseError


#####################################################################################################################################################
#####
#####  EXPRESSION MASKING
#####

class Mask:
    """
    A text with all template expressions: {{...}}, {%...%}, {#...#} replaced with placeholder tokens of the form:

        <opening> index <closing>

    where <opening> and <closing> are special characters that don't occur anywhere in the original text.
    The masked text can be scanned and modified freely, as long as the tokens are left intact,
    and then converted back with unmask().
    """
    CHARS_DEFAULT = ['❨', '❩']        # special chars to be used for tokens, unless they occur in the text

    EXPRESSION = re.compile(r'\{\{.*?\}\}|\{%.*?%\}|\{#.*?#\}', re.S)

    text        = None          # original text
    masked      = None          # text with expressions replaced by tokens
    expressions = None          # list of original expressions, indexed by token numbers
    opening     = None
    closing     = None

    def __init__(self, text):
        self.text = text
        self.opening, self.closing = self._special_chars(text)
        self.expressions = []
        self.masked = self.EXPRESSION.sub(self._mask, text)
        self._token = re.compile(re.escape(self.opening) + r'(\d+)' + re.escape(self.closing))

    @classmethod
    def _special_chars(cls, text):
        """Find 2 unicode characters that are not present in `text`; start with CHARS_DEFAULT."""
        if not (set(cls.CHARS_DEFAULT) & set(text)):
            return cls.CHARS_DEFAULT

        chars = []
        code = ord(cls.CHARS_DEFAULT[0])
        for _ in range(2):
            while chr(code) in text:
                code += 1
            chars.append(chr(code))
            code += 1
        return chars

    def _mask(self, match):
        self.expressions.append(match.group())
        return f'{self.opening}{len(self.expressions) - 1}{self.closing}'

    def is_dynamic(self, fragment):
        """True if `fragment` of the masked text contains (part of) a template expression."""
        return self.opening in fragment or self.closing in fragment

    def is_expression(self, fragment):
        """True if `fragment` of the masked text consists of a single template expression and nothing else."""
        return self._token.fullmatch(fragment) is not None

    def unmask(self, masked):
        """Put original expressions back in place of tokens in `masked`, which must be derived from self.masked."""
        return self._token.sub(lambda m: self.expressions[int(m.group(1))], masked)


#####################################################################################################################################################
#####
#####  GRAMMAR
#####

grammar = Grammar(r"""

###  Opening tag of an element, with attributes. Template expressions must be masked before parsing.
###  Attribute values in braces {...} can be nested; the closing '>' is only recognized at brace depth zero
###  and outside of quotes.

tag_open         =  '<' name_tag attrs ws slash? '>'

attrs            =  attr*
attr             =  space name_attr (ws '=' ws value)?

value            =  value_dq / value_sq / value_braced / value_plain
value_dq         =  ~'"[^"]*"'
value_sq         =  ~"'[^']*'"
value_braced     =  '{' (value_braced / ~"[^{}]+")* '}'
value_plain      =  ~r"[^\s\"'=<>`]+"

name_tag         =  ~"[a-z][a-z0-9_:.-]*"i
name_attr        =  ~r"[^\s\"'<>/=]+"

slash            =  '/'
space            =  ~r"\s+"
ws               =  ~r"\s*"
""")


#####################################################################################################################################################
#####
#####  OPENING TAG
#####

class OpenTag:
    """Opening tag of an element, as found in a (masked) markup text. All positions are absolute in the scanned text."""

    name        = None          # tag name, as written in the markup
    attrs       = None          # {name: raw_value} where raw_value includes quotes, or is None for attributes without a value;
                                # names are lowercased
    spans       = None          # {name: (start, end)} positions of raw values of attributes; an empty span
                                # right after the name for attributes without a value
    start       = None          # position of the leading '<'
    end         = None          # position right after the trailing '>'
    attrs_end   = None          # position right after the last attribute, where a new attribute can be inserted
    selfclosing = False         # True if the tag is terminated with '/>'

    def __init__(self, node):
        bracket, name, attrs, _, slash, _ = node.children

        self.name = name.text
        self.start = node.start
        self.end = node.end
        self.attrs_end = attrs.end
        self.selfclosing = bool(slash.text)
        self.attrs = {}
        self.spans = {}

        for attr in attrs.children:
            _, attr_name, assignment = attr.children
            key = attr_name.text.lower()
            if key in self.attrs: continue                  # like in browsers, the 1st occurrence of an attribute wins
            if assignment.children:
                value = assignment.children[0].children[3]
                self.attrs[key] = value.text
                self.spans[key] = (value.start, value.end)
            else:
                self.attrs[key] = None
                self.spans[key] = (attr_name.end, attr_name.end)

    def __repr__(self):
        return f"<{self.name} {self.attrs}>"


def match_tag(text, pos = 0):
    """
    Parse the opening tag that starts exactly at position `pos` of `text`.
    Return an OpenTag, or None if there's no syntactically correct opening tag in this place.
    """
    try:
        node = grammar['tag_open'].match(text, pos)
    except ParseError:
        return None
    return OpenTag(node)


def unquote(value):
    """Raw attribute value without the surrounding quotes, if present."""
    if value and len(value) >= 2 and value[0] == value[-1] and value[0] in '"\'':
        return value[1:-1]
    return value
