import io, os, time, pytest

from jinja2 import TemplateSyntaxError

from hypercomp.errors import ConfigError, SourceError
from hypercomp.scope import scope_class
from hypercomp.loaders import DictLoader
from hypercomp.templates import TemplateSet


#####################################################################################################################################################
#####
#####  UTILITIES
#####

LAYOUT = """<!DOCTYPE html>
<html>
<head><title>{{ data.title }}</title></head>
<body>{{ comp("nav") }}{{ content }}</body>
</html>"""

DOCS = {
    'layout.html':  LAYOUT,
    'nav.html':     """<template><nav>{{ comp("link", "/", "Home") }}</nav></template><style>nav{display:flex}</style>""",
    'link.html':    """<template><a href="{{ param(0) }}">{{ param_or(1, "link") }}</a></template><style>a:hover{color:red}</style>""",
    'index.html':   """<template><main>{{ comp("card", title = data_title) }}</main></template><script>start()</script>""",
    'card.tmpl':    """<template><div class="card"><h3>{{ shout(title) }}</h3></div></template><style>.card{border:1px}h3{margin:0}</style>""",
    'unused.html':  """<template><p>unused</p></template><style>p{color:green}</style><script>unused()</script>""",
}

def write(folder, files):
    os.makedirs(folder, exist_ok = True)
    for name, text in files.items():
        with open(os.path.join(folder, name), 'w', encoding = 'utf-8') as f:
            f.write(text)

def loaded(**kwargs):
    ts = TemplateSet(**kwargs)
    ts.add_funcs(shout = lambda s: s.upper() + '!')
    ts.parse_loader(DictLoader(DOCS))
    return ts


#####################################################################################################################################################
#####
#####  LOADING
#####

def test_001_parse_loader():
    ts = loaded()
    assert sorted(ts.registry.names()) == ['card', 'index', 'link', 'nav', 'unused']
    assert ts.registry.shell.name == 'layout'
    assert ts.registry.shell.refs == ('nav',)

def test_002_parse_dirs(tmp_path):
    write(tmp_path / 'pages', {'layout.html': LAYOUT, 'index.html': DOCS['index.html'], 'notes.txt': 'ignored'})
    write(tmp_path / 'components', {k: v for k, v in DOCS.items() if k not in ('layout.html', 'index.html')})
    write(tmp_path / 'components' / 'nested', {'deep.html': '<template><p/></template>'})

    ts = TemplateSet()
    ts.add_funcs({'shout': str.upper})
    ts.parse_dirs(tmp_path / 'pages', tmp_path / 'components')
    assert sorted(ts.registry.names()) == ['card', 'index', 'link', 'nav', 'unused']

    ts = TemplateSet()
    ts.parse_dir(tmp_path / 'pages')
    assert ts.registry.names() == ['index']

def test_003_missing_layout():
    ts = TemplateSet()
    with pytest.raises(ConfigError, match = 'layout'):
        ts.parse_loader(DictLoader({'index.html': "<template><p>x</p></template>"}))

    ts = TemplateSet(layout = 'base')
    ts.parse_loader(DictLoader({'base.html': LAYOUT, 'nav.html': '<nav></nav>'}))
    assert ts.registry.shell.name == 'base'

def test_004_broken_layout():
    ts = TemplateSet()
    with pytest.raises(ConfigError, match = '</head>'):
        ts.parse_loader(DictLoader({'layout.html': "<html><body>{{ content }}</body></html>"}))

def test_005_failing_documents(tmp_path):
    docs = {
        'layout.html':  LAYOUT,
        'good.html':    "<template><p>{{ x }}</p></template>",
        'bad.html':     "<template><p>{{ x </p></template>",
        'worse.html':   "<template><p>{% if %}</p></template>",
    }
    ts = TemplateSet(workers = 2)
    with pytest.raises(SourceError) as ex_info:
        ts.parse_loader(DictLoader(docs))

    errors = ex_info.value.errors
    assert sorted(errors) == ['bad.html', 'worse.html']
    assert all(isinstance(ex, TemplateSyntaxError) for ex in errors.values())
    assert 'good' in ts.registry                        # siblings are compiled anyway

    with pytest.raises(SourceError):
        ts.parse_dirs(tmp_path / 'missing')

def test_006_parse_source_and_file(tmp_path):
    ts = TemplateSet()
    ts.parse_source('layout', LAYOUT)
    ts.parse_source('nav', "<template><nav>menu</nav></template>")
    write(tmp_path, {'page.html': "<template><p>{{ x }}</p></template><style>p{a:b}</style>"})
    comp = ts.parse_file(tmp_path / 'page.html')
    assert comp.name == 'page'
    assert 'page' in ts.registry

    with pytest.raises(TemplateSyntaxError):
        ts.parse_source('bad', "<template>{{ x </template>")
    with pytest.raises(SourceError):
        ts.parse_file(tmp_path / 'missing.html')

    page = ts.render('page', {'x': 1})
    assert f'<p class="{scope_class("page")}">1</p>' in page

def test_007_add_funcs_after_loading():
    ts = loaded()
    with pytest.raises(ConfigError):
        ts.add_funcs(late = len)


#####################################################################################################################################################
#####
#####  RENDERING
#####

def test_008_render():
    ts = loaded()
    page = ts.render('index', {'title': 'Cards', 'data_title': 'hello'})

    assert '<title>Cards</title>' in page
    assert f'<div class="card {scope_class("card")}"><h3>HELLO!</h3></div>' in page
    assert f'<a href="/" class="{scope_class("link")}">Home</a>' in page
    assert f'<main class="{scope_class("index")}">' in page

    css = page.split('<style>')[1].split('</style>')[0]
    js = page.split('<script>')[1].split('</script>')[0]
    assert f'.{scope_class("card")}.card{{border:1px}}' in css
    assert f'.{scope_class("card")} h3{{margin:0}}' in css
    assert f'a.{scope_class("link")}:hover{{color:red}}' in css
    assert f'nav.{scope_class("nav")}{{display:flex}}' in css
    assert 'green' not in css
    assert js == 'start()\n'

def test_009_execute():
    ts = loaded()
    out = io.StringIO()
    ts.execute(out, 'index', {'title': 'T', 'data_title': 'x'})
    assert out.getvalue() == ts.render('index', {'title': 'T', 'data_title': 'x'})

def test_010_render_before_loading():
    ts = TemplateSet()
    ts.parse_source('index', "<template><p>x</p></template>")
    with pytest.raises(ConfigError):
        ts.render('index')


#####################################################################################################################################################
#####
#####  ISOLATED RENDERING
#####

def test_011_render_isolated(tmp_path):
    write(tmp_path, {
        'fragment.html':    """<template><li>{{ shout(item) }} {{ add(1, 2) }}</li></template><style>li{x:y}</style><script>f()</script>""",
        'raw.html':         """<p>{{ item }}</p>""",
    })
    ts = TemplateSet()
    ts.add_funcs(shout = str.upper)

    assert ts.render_isolated(tmp_path / 'fragment.html', {'item': 'a'}) == '<li>A 3</li>'
    assert ts.render_isolated(tmp_path / 'raw.html', {'item': '<b>'}) == '<p>&lt;b&gt;</p>'

    out = io.StringIO()
    ts.execute_isolated(out, tmp_path / 'fragment.html', {'item': 'b'})
    assert out.getvalue() == '<li>B 3</li>'

    with pytest.raises(SourceError):
        ts.render_isolated(tmp_path / 'missing.html')

def test_012_isolated_cache(tmp_path):
    path = tmp_path / 'frag.html'
    write(tmp_path, {'frag.html': "<template><p>v1</p></template>"})
    ts = TemplateSet()

    first = ts.isolated_template(path)
    assert ts.isolated_template(path) is first
    assert ts.isolated_template(str(path)) is first         # same document, same cache entry

    write(tmp_path, {'frag.html': "<template><p>v2</p></template>"})
    later = time.time() + 10
    os.utime(path, (later, later))

    assert ts.render_isolated(path) == '<p>v2</p>'
    assert ts.isolated_template(path) is not first
