import pytest

from hypercomp.grammar import Mask, match_tag, unquote
from hypercomp.structure import analyse, NORMAL, SINGLE, CONTAINER


#####################################################################################################################################################
#####
#####  MASKING & TAG SCANNING
#####

def test_001_mask():
    text = """<li class="{{ 'a' if i > 0 }}" {% if x %}hidden{% endif %}>{# note #}x</li>"""
    mask = Mask(text)
    assert '{' not in mask.masked
    assert mask.masked.count(mask.opening) == 4
    assert mask.unmask(mask.masked) == text
    assert mask.expressions[0] == "{{ 'a' if i > 0 }}"

    tag = match_tag(mask.masked)
    assert tag.name == 'li'
    assert mask.is_expression(unquote(tag.attrs['class']))
    assert mask.masked[tag.end:].endswith('x</li>')

def test_002_mask_special_chars():
    text = "❨❩ {{ x }}"
    mask = Mask(text)
    assert mask.opening not in text and mask.closing not in text
    assert mask.opening != mask.closing
    assert mask.unmask(mask.masked) == text

def test_003_match_tag():
    tag = match_tag('<div id="x" class=\'a b\' hidden data-v={a: {b: 1}}>rest')
    assert tag.name == 'div'
    assert tag.attrs == {'id': '"x"', 'class': "'a b'", 'hidden': None, 'data-v': '{a: {b: 1}}'}
    assert tag.end == len('<div id="x" class=\'a b\' hidden data-v={a: {b: 1}}>')
    assert not tag.selfclosing

    tag = match_tag('<img src="a.png" />')
    assert tag.name == 'img' and tag.selfclosing

    assert match_tag('text <b>', 0) is None
    assert match_tag('text <b>', 5).name == 'b'
    assert match_tag('<b class="x>') is None


#####################################################################################################################################################
#####
#####  ROOT KINDS
#####

def test_004_basic_kinds():
    assert analyse('<b>{{x}}</b>').kind == SINGLE
    assert analyse('<div><span/></div>').kind == CONTAINER
    assert analyse('<b/>Other<i/>').kind == NORMAL

def test_005_normal():
    assert analyse('Hello <b>{{name}}</b>!').kind == NORMAL
    assert analyse('<p>a</p><p>b</p>').kind == NORMAL
    assert analyse('<p>a</p> tail').kind == NORMAL
    assert analyse('{{ x }}').kind == NORMAL
    assert analyse('').kind == NORMAL
    assert analyse('<p>unclosed').kind == NORMAL
    assert analyse('<p>a</div>').kind == NORMAL

    root = analyse('<p>a</p><p>b</p>')
    assert root.tag is None and root.name is None and root.classes == frozenset()

def test_006_whitespace_and_case():
    root = analyse('\n    <p>x</p>\n  ')
    assert root.kind == SINGLE and root.name == 'p'

    root = analyse('<DIV><p>x</p></DIV>')
    assert root.kind == CONTAINER and root.name == 'DIV'

def test_007_nested_same_name():
    assert analyse('<div><div>x</div></div>').kind == CONTAINER
    assert analyse('<div>a</div><div>b</div>').kind == NORMAL
    assert analyse('<div><div/></div>').kind == CONTAINER

def test_008_void_root():
    root = analyse('<img src="{{ url }}" alt="x">')
    assert root.kind == SINGLE and root.name == 'img'
    assert analyse('<input type="text"> <b>x</b>').kind == NORMAL
    assert analyse('<br/>').kind == SINGLE

def test_009_expressions_are_masked():
    root = analyse("""<li class="item {{ 'active' if i > 0 }}">{{ '<b>' }}</li>""")
    assert root.kind == SINGLE
    assert root.name == 'li'
    assert root.classes == {'item'}

    # a statement inside the element is not an element marker
    assert analyse('<ul>{% for x in xs %}{{ x }}{% endfor %}</ul>').kind == SINGLE
    assert analyse('<ul>{% for x in xs %}<li>{{ x }}</li>{% endfor %}</ul>').kind == CONTAINER

def test_010_root_classes():
    assert analyse('<div class="card big">x</div>').classes == {'card', 'big'}
    assert analyse("<div class='card'>x</div>").classes == {'card'}
    assert analyse('<div class=card>x</div>').classes == {'card'}
    assert analyse('<div>x</div>').classes == frozenset()
    assert analyse('<div class>x</div>').classes == frozenset()

    # classes produced by expressions are not visible
    assert analyse('<div class="card {{ extra }}">x</div>').classes == {'card'}
    assert analyse('<div class="card-{{ size }}">x</div>').classes == frozenset()
    assert analyse('<div class={{ cls }}>x</div>').classes == frozenset()
