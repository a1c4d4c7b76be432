import contextlib
import io
import os
import tempfile
import unittest
from unittest import mock

from lexer import Lexer, SYM_SEMICOLON, EOF
from main import Lox, main, get_ast, terminate_expression_line, EX_OK, EX_DATAERR, EX_NOINPUT, EX_SOFTWARE
from errors import ErrorReporter
from ast_nodes import PrintStatementNode

class TestGetAst(unittest.TestCase):

    def test_get_ast_returns_statements(self):
        reporter = ErrorReporter(io.StringIO())
        statements = get_ast("print 1; print 2;", reporter)
        self.assertEqual(len(statements), 2)
        self.assertIsInstance(statements[0], PrintStatementNode)
        self.assertFalse(reporter.had_error)

class TestTerminateExpressionLine(unittest.TestCase):

    def test_adds_semicolon_to_bare_expression(self):
        tokens, added = terminate_expression_line(Lexer("1 + 2").lex())
        self.assertTrue(added)
        self.assertEqual([t.type for t in tokens[-2:]], [SYM_SEMICOLON, EOF])

    def test_leaves_terminated_lines_alone(self):
        for line in ("print 1;", "{ print 1; }", ""):
            original = Lexer(line).lex()
            tokens, added = terminate_expression_line(original)
            self.assertFalse(added)
            self.assertEqual(tokens, original)

class TestRepl(unittest.TestCase):

    def run_session(self, lines):
        out = io.StringIO()
        err = io.StringIO()
        lox = Lox(out=out, err=err)
        with mock.patch("builtins.input", side_effect=list(lines) + [EOFError()]):
            code = lox.run_prompt()
        return code, out.getvalue().splitlines(), err.getvalue()

    def test_globals_persist_and_bare_expressions_print(self):
        code, lines, err = self.run_session(["var a = 1;", "a + 2", "fun twice(x) { return x * 2; }", "twice(a)"])
        self.assertEqual(code, EX_OK)
        self.assertEqual(lines, ["3", "2", ""])
        self.assertEqual(err, "")

    def test_errors_do_not_end_the_session(self):
        code, lines, err = self.run_session(["var = 1;", "1 / 0;", "print \"still here\";"])
        self.assertEqual(code, EX_OK)
        self.assertEqual(lines, ["still here", ""])
        self.assertIn("[line 1] Error at '=': Expect variable name.", err)
        self.assertIn("Division by zero.\n[line 1]", err)

    def test_expression_statement_with_semicolon_is_not_printed(self):
        code, lines, err = self.run_session(["1 + 2;"])
        self.assertEqual(lines, [""])

    def test_locals_resolved_across_lines(self):
        code, lines, err = self.run_session([
            "fun counter() { var n = 0; fun inc() { n = n + 1; return n; } return inc; }",
            "var c = counter();",
            "c()",
            "c()",
        ])
        self.assertEqual(lines, ["1", "2", ""])

    def test_session_survives_deep_nesting(self):
        code, lines, err = self.run_session(["print " + "-" * 700 + "1;", "print \"still here\";"])
        self.assertEqual(code, EX_OK)
        self.assertEqual(lines, ["still here", ""])
        self.assertIn("Stack overflow.", err)

class TestRunFile(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def write_script(self, source):
        path = os.path.join(self.tmpdir.name, "script.lox")
        with open(path, "w", encoding="utf-8") as f:
            f.write(source)
        return path

    def run_main(self, argv):
        out = io.StringIO()
        err = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_successful_script(self):
        path = self.write_script('var greeting = "hello"; print greeting + " world";')
        code, out, err = self.run_main([path])
        self.assertEqual(code, EX_OK)
        self.assertEqual(out, "hello world\n")
        self.assertEqual(err, "")

    def test_compile_error_exit_code(self):
        path = self.write_script("print 1;\nprint ;")
        code, out, err = self.run_main([path])
        self.assertEqual(code, EX_DATAERR)
        self.assertEqual(out, "")
        self.assertEqual(err, "[line 2] Error at ';': Expect expression.\n")

    def test_runtime_error_exit_code(self):
        path = self.write_script('print "start";\nprint nope;')
        code, out, err = self.run_main([path])
        self.assertEqual(code, EX_SOFTWARE)
        self.assertEqual(out, "start\n")
        self.assertEqual(err, "Undefined variable 'nope'.\n[line 2]\n")

    def test_bare_expression_in_script_is_an_error(self):
        path = self.write_script("1 + 2")
        code, out, err = self.run_main([path])
        self.assertEqual(code, EX_DATAERR)
        self.assertIn("Expect ';' after expression.", err)

    def test_missing_file(self):
        code, out, err = self.run_main([os.path.join(self.tmpdir.name, "absent.lox")])
        self.assertEqual(code, EX_NOINPUT)
        self.assertIn("Could not read", err)

    def test_check_only_does_not_execute(self):
        path = self.write_script('print "side effect";')
        code, out, err = self.run_main(["--check", path])
        self.assertEqual(code, EX_OK)
        self.assertEqual(out, "")

    def test_print_ast(self):
        path = self.write_script("print 1 + 2;")
        code, out, err = self.run_main(["--print-ast", path])
        self.assertEqual(code, EX_OK)
        self.assertEqual(out.splitlines(), ["(print (+ 1.0 2.0))", "3"])

if __name__ == '__main__':
    unittest.main()
