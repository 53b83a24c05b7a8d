"""
Custom Pygments lexer for setup-script syntax highlighting

Extends the Pygments JavaScript lexer so compile-time macros and the
reserved runtime names stand out when a script or its compiled module is
previewed.

Token types:
- Name.Builtin.Pseudo: Supported macros (defineProps, defineEmits, ...)
- Generic.Error: Macros that require a full compiler (defineModel, ...)
- Name.Variable.Magic: Reserved runtime names (__props__, __ctx__, ...)
"""

from pygments import highlight
from pygments.formatters import HtmlFormatter, TerminalFormatter
from pygments.lexer import inherit, words
from pygments.lexers import JavascriptLexer
from pygments.token import Generic, Name

from ..models.macros import MacroKind, unsupported_is


SUPPORTED_MACROS = tuple(kind.macro_name for kind in MacroKind if not unsupported_is(kind))
UNSUPPORTED_MACRO_NAMES = tuple(kind.macro_name for kind in MacroKind if unsupported_is(kind))
RESERVED_NAMES = ('__props__', '__ctx__', '__emit__', '__applyDefaults__', '__defaults__')


class ScriptSetupLexer(JavascriptLexer):
    """
    Lexer for setup scripts and the modules compiled from them

    Example:
        const props = defineProps(['title'])

    Tokens:
        const → Keyword.Declaration
        defineProps → Name.Builtin.Pseudo
        'title' → String.Single
    """

    name = 'ScriptSetup'
    aliases = ['scriptsetup', 'setupmini']
    filenames = []

    tokens = {
        'root': [
            (words(SUPPORTED_MACROS, prefix=r'(?<![\w$])', suffix=r'(?![\w$])'), Name.Builtin.Pseudo),
            (words(UNSUPPORTED_MACRO_NAMES, prefix=r'(?<![\w$])', suffix=r'(?![\w$])'), Generic.Error),
            (words(RESERVED_NAMES, prefix=r'(?<![\w$])', suffix=r'(?![\w$])'), Name.Variable.Magic),
            inherit,
        ],
    }


def get_lexer() -> ScriptSetupLexer:
    """
    Get the ScriptSetupLexer instance

    Returns:
        ScriptSetupLexer instance ready for use with Pygments
    """
    return ScriptSetupLexer()


def code_highlight(code: str, html: bool = False, style: str = 'monokai') -> str:
    """
    Render code with setup-script highlighting

    Args:
        code: Script or compiled module text
        html: Produce a standalone HTML page instead of terminal escapes
        style: Pygments style name for HTML output

    Returns:
        Highlighted text
    """
    if html:
        formatter = HtmlFormatter(style=style, full=True, linenos=True)
    else:
        formatter = TerminalFormatter()
    return highlight(code, get_lexer(), formatter)
