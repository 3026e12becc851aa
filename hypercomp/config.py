"""
Global configuration.
"""

#####################################################################################################################################################
#####
#####  COMPONENT DOCUMENTS
#####

TEMPLATE_BLOCK = 'template'     # names of the three top-level blocks of a component document
STYLE_BLOCK    = 'style'
SCRIPT_BLOCK   = 'script'

UNWRAP_ATTR    = 'unwrap'       # attribute of the markup block that requests a non-rendering synthetic wrapper

EXTENSIONS     = ('.html', '.tmpl')         # file extensions of component documents

LAYOUT         = 'layout'       # default name of the document that serves as the page shell


#####################################################################################################################################################
#####
#####  SCOPING
#####

SCOPE_PREFIX   = 's-'           # scope classes look like "s-1a2b3c": prefix + leading hex digits of MD5 of the component name
SCOPE_LENGTH   = 8              # total length of a scope class, prefix included

WRAPPER_TAG          = 'div'                # synthetic container inserted around markup that has no single root element
WRAPPER_HIDDEN_STYLE = 'display: contents'  # inline style of the wrapper in "unwrap" mode: the wrapper box is not rendered


#####################################################################################################################################################
#####
#####  PAGE SHELL
#####

HEAD_ANCHOR  = r'</head\s*>'    # aggregated styles are injected right before this tag (case-insensitive)
BODY_ANCHOR  = r'</body\s*>'    # aggregated scripts are injected right before this tag

STYLE_SLOT   = '\n\t<style>{{ css }}</style>\n'
SCRIPT_SLOT  = '\n\t<script>{{ js }}</script>\n'

# variables that the shell receives during rendering: rendered content of the entry component,
# aggregated CSS and JS of all used components, and the original data passed to render()
SHELL_VARS   = ('content', 'css', 'js', 'data')


#####################################################################################################################################################
#####
#####  RUNTIME
#####

MAX_DEPTH    = 100              # max. depth of nested component invocations during a single render
AUTOESCAPE   = True             # HTML-escaping of expression values in the markup evaluator
