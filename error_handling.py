"""
Error handling for Calx with detailed parse diagnostics
Pure functional style - exception classes only where callers need to catch
"""

from typing import List, Optional, Dict
from pyparsing import ParseException
import re


class CalxError(Exception):
    """Base class for every error the Calx core raises"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    error_msg = f"line {error['line']}, column {error['column']}: {error['message']}"

    if error['got']:
        error_msg += f"\n  Got: {error['got']}"

    if error['context']:
        error_msg += f"\n{error['context']}"

    for suggestion in error['suggestions']:
        error_msg += f"\n  Hint: {suggestion}"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseException) -> List[str]:
    """Extract expected tokens from exception"""
    expected_match = re.search(r"Expected\s+(.+?)(?:,\s+found|\s+\(at|$)", str(exc))
    if expected_match:
        return [expected_match.group(1)]
    return ["valid syntax"]


def extract_got(source_text: str, location: int) -> str:
    """Extract what was actually found at the error location"""
    rest = source_text[location:].lstrip()
    if not rest:
        return "end of input"
    return f"'{rest.splitlines()[0][:10]}'"


def generate_suggestions(got: str, expected: List[str]) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if got == "end of input" and "')'" in str(expected):
        suggestions.append("A parenthesis is left open")

    if got.startswith("'="):
        suggestions.append("Bindings are written 'let name = expr' or 'def name(params) = expr'")

    if got.startswith("'in"):
        suggestions.append("'in' only follows 'let name = expr'")

    if got.startswith("')'") or got.startswith("')"):
        suggestions.append("There are more closing parentheses than opening ones")

    return suggestions


def enhance_parse_exception_dict(exc: ParseException, source_text: str) -> Dict:
    """Convert pyparsing exception to enhanced Calx error dict"""
    line_num = exc.lineno
    col_num = exc.column
    expected = extract_expected(exc)
    got = extract_got(source_text, exc.loc)

    return make_parse_error(
        message=f"expected {expected[0]}",
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=expected,
        got=got,
        context=get_context_lines(source_text, line_num, col_num),
        suggestions=generate_suggestions(got, expected)
    )


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class ParseError(CalxError):
    """Syntax error in otherwise well-lexed Calx source"""

    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None):
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        super().__init__(message)

    def __str__(self) -> str:
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.suggestions
        )
        return format_parse_error(error_dict)


def parse_error_from_exception(exc: ParseException, source_text: str) -> ParseError:
    """Convert pyparsing exception to an enhanced Calx ParseError"""
    error_dict = enhance_parse_exception_dict(exc, source_text)
    return ParseError(
        message=error_dict['message'],
        location=error_dict['location'],
        line=error_dict['line'],
        column=error_dict['column'],
        expected=error_dict['expected'],
        got=error_dict['got'],
        context=error_dict['context'],
        suggestions=error_dict['suggestions']
    )


def error_kind(error: CalxError) -> str:
    """Name of the error family, used as the prefix when reporting"""
    for cls in type(error).__mro__:
        if cls.__name__ in ("LexicalError", "ParseError", "EvalError"):
            return cls.__name__
    return "Error"
