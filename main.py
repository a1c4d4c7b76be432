import argparse
import logging
import sys

from lexer import Lexer, Token, EOF, ERROR, SYM_SEMICOLON, SYM_RBRACE
from parser import Parser
from resolver import Resolver
from interpreter import Interpreter
from errors import ErrorReporter
from ast_nodes import ExpressionStatementNode, PrintStatementNode
from ast_printer import AstPrinter

logger = logging.getLogger(__name__)

# Exit codes (sysexits.h)
EX_OK = 0
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70


def get_ast(source: str, reporter: ErrorReporter):
    """
    Parses a string of Lox code into a list of statements.
    Syntax errors are printed by the reporter; check `reporter.had_error`.
    """
    tokens = Lexer(source).lex()
    parser = Parser(tokens, reporter)
    return parser.parse()


def terminate_expression_line(tokens):
    """
    Appends a ';' to a REPL line that ends in a bare expression.
    Returns the (possibly new) token list and whether a ';' was added.
    """
    meaningful = [t for t in tokens if t.type not in (EOF, ERROR)]
    if not meaningful or meaningful[-1].type in (SYM_SEMICOLON, SYM_RBRACE):
        return tokens, False
    last = meaningful[-1]
    semicolon = Token(SYM_SEMICOLON, ';', None, last.line, last.column + len(last.lexeme))
    return tokens[:-1] + [semicolon, tokens[-1]], True


class Lox:
    def __init__(self, out=None, err=None):
        self.out = out if out is not None else sys.stdout
        self.reporter = ErrorReporter(err)
        # One interpreter for the whole session so globals persist between REPL lines
        self.interpreter = Interpreter(self.reporter, self.out)
        self.printer = AstPrinter()

    def run(self, source, repl=False, check_only=False, print_ast=False):
        tokens = Lexer(source).lex()
        auto_print = False
        if repl:
            tokens, auto_print = terminate_expression_line(tokens)

        statements = Parser(tokens, self.reporter).parse()
        if self.reporter.had_error:
            return

        if auto_print and statements and isinstance(statements[-1], ExpressionStatementNode):
            last = statements[-1]
            statements[-1] = PrintStatementNode(expression=last.expression, location_info=last.location_info)

        depths = Resolver(self.reporter).resolve(statements)
        if self.reporter.had_error:
            return

        if print_ast:
            for stmt in statements:
                try:
                    print(self.printer.print(stmt), file=self.out)
                except RecursionError:
                    logger.warning("Syntax tree on line %d is too deep to print", stmt.location_info[0])
        if check_only:
            return

        self.interpreter.interpret(statements, depths)

    def run_file(self, path, check_only=False, print_ast=False):
        with open(path, "r", encoding="utf-8") as f:
            source = f.read()
        logger.debug("Running %s (%d characters)", path, len(source))
        self.run(source, check_only=check_only, print_ast=print_ast)

        if self.reporter.had_error:
            return EX_DATAERR
        if self.reporter.had_runtime_error:
            return EX_SOFTWARE
        return EX_OK

    def run_prompt(self, check_only=False, print_ast=False):
        while True:
            try:
                line = input("> ")
            except EOFError:
                print(file=self.out)
                break
            self.run(line, repl=True, check_only=check_only, print_ast=print_ast)
            # A mistake should not end the session
            self.reporter.reset()
        return EX_OK


def main(argv=None):
    parser = argparse.ArgumentParser(prog="lox", description="Run Lox scripts or start an interactive prompt.")
    parser.add_argument("script", nargs="?", help="Lox source file; omit to start the REPL")
    parser.add_argument("--check", action="store_true",
                        help="Parse + resolve only; do not execute.")
    parser.add_argument("--print-ast", action="store_true",
                        help="Print each statement's syntax tree before running.")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(name)s: %(levelname)s: %(message)s")

    lox = Lox()
    if args.script is None:
        return lox.run_prompt(check_only=args.check, print_ast=args.print_ast)

    try:
        return lox.run_file(args.script, check_only=args.check, print_ast=args.print_ast)
    except OSError as e:
        print(f"Could not read {args.script}: {e.strerror}", file=sys.stderr)
        return EX_NOINPUT


if __name__ == "__main__":
    sys.exit(main())
