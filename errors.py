import logging
import sys

from lexer import EOF

logger = logging.getLogger(__name__)


class ParseError(Exception):
    """Unwinds the parser to the nearest declaration so it can resynchronize."""

    def __init__(self, message, token):
        super().__init__(message)
        self.token = token
        self.line = token.line if token else -1

    def __str__(self):
        if self.token and self.token.type != EOF:
            return f"ParseError at line {self.line} (Token: {self.token.type} '{self.token.lexeme}'): {super().__str__()}"
        elif self.token and self.token.type == EOF:
            return f"ParseError at end of file: {super().__str__()}"
        else:
            return f"ParseError: {super().__str__()}"


class LoxRuntimeError(Exception):
    def __init__(self, token, message):
        super().__init__(message)
        self.token = token
        self.message = message

    def __str__(self):
        return f"{self.message}\n[line {self.token.line}]"


class Diagnostic:
    COMPILE = 'COMPILE'
    RUNTIME = 'RUNTIME'

    def __init__(self, kind, line, message, where=''):
        self.kind = kind
        self.line = line
        self.message = message
        self.where = where # " at 'x'", " at end" or ''

    def __str__(self):
        if self.kind == Diagnostic.RUNTIME:
            return f"{self.message}\n[line {self.line}]"
        return f"[line {self.line}] Error{self.where}: {self.message}"

    def __repr__(self):
        return f"Diagnostic({self.kind!r}, line={self.line}, message={self.message!r}, where={self.where!r})"


class ErrorReporter:
    """
    Collects diagnostics from every phase and prints each one as it is reported.

    `had_error` covers compile-time problems (scanning, parsing, resolution) and
    `had_runtime_error` covers execution. Both stay set until `reset()`.
    """

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stderr
        self.diagnostics = []
        self.had_error = False
        self.had_runtime_error = False

    def reset(self):
        self.diagnostics = []
        self.had_error = False
        self.had_runtime_error = False

    def error_at_line(self, line, message):
        self._report(Diagnostic(Diagnostic.COMPILE, line, message))

    def error(self, token, message):
        if token.type == EOF:
            where = " at end"
        else:
            where = f" at '{token.lexeme}'"
        self._report(Diagnostic(Diagnostic.COMPILE, token.line, message, where))

    def runtime_error(self, err: LoxRuntimeError):
        self._report(Diagnostic(Diagnostic.RUNTIME, err.token.line, err.message))

    def runtime_error_at_line(self, line, message):
        self._report(Diagnostic(Diagnostic.RUNTIME, line, message))

    def messages(self):
        return [d.message for d in self.diagnostics]

    def _report(self, diagnostic):
        if diagnostic.kind == Diagnostic.RUNTIME:
            self.had_runtime_error = True
        else:
            self.had_error = True
        self.diagnostics.append(diagnostic)
        logger.debug("Reported %r", diagnostic)
        print(diagnostic, file=self.stream)
