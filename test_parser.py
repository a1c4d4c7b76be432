import io
import unittest
from lexer import Lexer
from parser import Parser
from errors import ErrorReporter
from ast_printer import AstPrinter
from ast_nodes import * # Import all AST nodes

# Helper function to simplify AST generation for tests
def make_ast(code_string: str):
    reporter = ErrorReporter(io.StringIO())
    tokens = Lexer(code_string).lex()
    parser = Parser(tokens, reporter)
    return parser.parse(), reporter

class TestParserIntegration(unittest.TestCase):

    def parse_ok(self, code):
        statements, reporter = make_ast(code)
        self.assertFalse(reporter.had_error, f"Unexpected errors: {reporter.messages()}")
        return statements

    def _check_expr_stmt(self, code, expected_expr_type):
        statements = self.parse_ok(code)
        self.assertEqual(len(statements), 1)
        stmt = statements[0]
        self.assertIsInstance(stmt, ExpressionStatementNode)
        self.assertIsInstance(stmt.expression, expected_expr_type)
        return stmt.expression # Return the actual expression node for further checks

    def test_empty_program(self):
        statements = self.parse_ok("")
        self.assertEqual(statements, [])

    def test_var_declaration(self):
        statements = self.parse_ok("var x = 10;")
        stmt = statements[0]
        self.assertIsInstance(stmt, VarDeclarationNode)
        self.assertEqual(stmt.name.lexeme, "x")
        self.assertIsInstance(stmt.initializer, LiteralNode)
        self.assertEqual(stmt.initializer.value, 10.0)

    def test_var_declaration_without_initializer(self):
        stmt = self.parse_ok("var x;")[0]
        self.assertIsNone(stmt.initializer)

    def test_precedence(self):
        expr = self._check_expr_stmt("1 + 2 * 3 == 7 and !false;", LogicalOpNode)
        self.assertEqual(AstPrinter().print(expr), "(and (== (+ 1.0 (* 2.0 3.0)) 7.0) (! false))")

    def test_binary_is_left_associative(self):
        expr = self._check_expr_stmt("1 - 2 - 3;", BinaryOpNode)
        self.assertIsInstance(expr.left, BinaryOpNode)
        self.assertEqual(expr.right.value, 3.0)

    def test_assignment_is_right_associative(self):
        expr = self._check_expr_stmt("a = b = 1;", AssignmentNode)
        self.assertEqual(expr.name.lexeme, "a")
        self.assertIsInstance(expr.value, AssignmentNode)
        self.assertEqual(expr.value.name.lexeme, "b")

    def test_property_assignment(self):
        expr = self._check_expr_stmt("obj.prop = 1;", PropertyAssignmentNode)
        self.assertIsInstance(expr.object, VariableNode)
        self.assertEqual(expr.name.lexeme, "prop")

    def test_invalid_assignment_target_is_reported_without_cascade(self):
        statements, reporter = make_ast("1 + 2 = 3; print 4;")
        self.assertTrue(reporter.had_error)
        self.assertEqual(reporter.messages(), ["Invalid assignment target."])
        # Both statements survive since the parser never unwound
        self.assertEqual(len(statements), 2)
        self.assertIsInstance(statements[1], PrintStatementNode)

    def test_ternary(self):
        expr = self._check_expr_stmt("a ? b : c;", TernaryConditionalExpressionNode)
        self.assertEqual(expr.condition.name.lexeme, "a")
        self.assertEqual(expr.true_expr.name.lexeme, "b")
        self.assertEqual(expr.false_expr.name.lexeme, "c")

    def test_ternary_is_right_associative(self):
        expr = self._check_expr_stmt("a ? b : c ? d : e;", TernaryConditionalExpressionNode)
        self.assertIsInstance(expr.false_expr, TernaryConditionalExpressionNode)

    def test_ternary_binds_looser_than_or(self):
        expr = self._check_expr_stmt("a or b ? c : d;", TernaryConditionalExpressionNode)
        self.assertIsInstance(expr.condition, LogicalOpNode)

    def test_ternary_binds_tighter_than_assignment(self):
        expr = self._check_expr_stmt("x = a ? b : c;", AssignmentNode)
        self.assertIsInstance(expr.value, TernaryConditionalExpressionNode)

    def test_call_and_property_chain(self):
        expr = self._check_expr_stmt("a.b(1, 2).c;", PropertyAccessNode)
        self.assertEqual(expr.name.lexeme, "c")
        call = expr.object
        self.assertIsInstance(call, CallNode)
        self.assertEqual(len(call.arguments), 2)
        self.assertEqual(call.paren.lexeme, ")")
        self.assertIsInstance(call.callee, PropertyAccessNode)

    def test_this_expression(self):
        self._check_expr_stmt("this;", ThisNode)

    def test_grouping(self):
        expr = self._check_expr_stmt("(1);", GroupingNode)
        self.assertEqual(expr.expression.value, 1.0)

    def test_if_else(self):
        stmt = self.parse_ok("if (x) print 1; else print 2;")[0]
        self.assertIsInstance(stmt, IfStatementNode)
        self.assertIsInstance(stmt.then_branch, PrintStatementNode)
        self.assertIsInstance(stmt.else_branch, PrintStatementNode)

    def test_dangling_else_binds_to_nearest_if(self):
        stmt = self.parse_ok("if (a) if (b) print 1; else print 2;")[0]
        self.assertIsNone(stmt.else_branch)
        self.assertIsNotNone(stmt.then_branch.else_branch)

    def test_for_desugars_to_while(self):
        stmt = self.parse_ok("for (var i = 0; i < 3; i = i + 1) print i;")[0]
        self.assertIsInstance(stmt, BlockNode)
        self.assertIsInstance(stmt.statements[0], VarDeclarationNode)
        loop = stmt.statements[1]
        self.assertIsInstance(loop, WhileLoopNode)
        self.assertIsInstance(loop.condition, BinaryOpNode)
        self.assertIsInstance(loop.body, BlockNode)
        self.assertIsInstance(loop.body.statements[0], PrintStatementNode)
        self.assertIsInstance(loop.body.statements[1], ExpressionStatementNode)
        self.assertIsInstance(loop.body.statements[1].expression, AssignmentNode)

    def test_for_without_clauses_loops_on_true(self):
        stmt = self.parse_ok("for (;;) break;")[0]
        self.assertIsInstance(stmt, WhileLoopNode)
        self.assertIsInstance(stmt.condition, LiteralNode)
        self.assertIs(stmt.condition.value, True)
        self.assertIsInstance(stmt.body, BreakStatementNode)

    def test_break_and_continue_inside_loops(self):
        statements = self.parse_ok("while (true) { if (x) break; continue; }")
        body = statements[0].body
        self.assertIsInstance(body.statements[0].then_branch, BreakStatementNode)
        self.assertIsInstance(body.statements[1], ContinueStatementNode)

    def test_break_outside_loop_is_error(self):
        statements, reporter = make_ast("break;")
        self.assertEqual(reporter.messages(), ["'break' disallowed outside of loop."])
        self.assertEqual(statements, [])

    def test_continue_outside_loop_is_error(self):
        _, reporter = make_ast("if (true) continue;")
        self.assertEqual(reporter.messages(), ["'continue' disallowed outside of loop."])

    def test_break_in_function_inside_loop_is_error(self):
        _, reporter = make_ast("while (true) { fun f() { break; } }")
        self.assertEqual(reporter.messages(), ["'break' disallowed outside of loop."])

    def test_loop_nesting_restored_after_error_in_body(self):
        _, reporter = make_ast("while (true) { var = 1; } break;")
        self.assertEqual(reporter.messages(), ["Expect variable name.", "'break' disallowed outside of loop."])

    def test_function_declaration(self):
        stmt = self.parse_ok("fun add(a, b) { return a + b; }")[0]
        self.assertIsInstance(stmt, FunctionDefinitionNode)
        self.assertEqual(stmt.name.lexeme, "add")
        self.assertEqual([p.lexeme for p in stmt.params], ["a", "b"])
        self.assertIsInstance(stmt.body[0], ReturnStatementNode)

    def test_class_declaration(self):
        stmt = self.parse_ok("class Point { init(x) { this.x = x; } show() { print this.x; } }")[0]
        self.assertIsInstance(stmt, ClassDefinitionNode)
        self.assertEqual(stmt.name.lexeme, "Point")
        self.assertEqual([m.name.lexeme for m in stmt.methods], ["init", "show"])
        self.assertIsInstance(stmt.methods[0], FunctionDefinitionNode)

    def test_too_many_parameters_is_reported_but_not_fatal(self):
        params = ", ".join(f"p{i}" for i in range(256))
        statements, reporter = make_ast(f"fun f({params}) {{}}")
        self.assertEqual(reporter.messages(), ["Cannot have more than 255 parameters."])
        self.assertEqual(len(statements), 1)
        self.assertEqual(len(statements[0].params), 256)

    def test_too_many_arguments_is_reported(self):
        args = ", ".join("1" for _ in range(256))
        _, reporter = make_ast(f"f({args});")
        self.assertEqual(reporter.messages(), ["Cannot have more than 255 arguments."])

    def test_missing_semicolon_error_format(self):
        _, reporter = make_ast("print 1")
        self.assertEqual(str(reporter.diagnostics[0]), "[line 1] Error at end: Expect ';' after print value.")

    def test_error_at_token_format(self):
        _, reporter = make_ast("var 1 = 2;")
        self.assertEqual(str(reporter.diagnostics[0]), "[line 1] Error at '1': Expect variable name.")

    def test_synchronize_reports_multiple_independent_errors(self):
        code = "var = 1;\nprint 2;\nvar y = ;\nprint 3;"
        statements, reporter = make_ast(code)
        self.assertEqual(reporter.messages(), ["Expect variable name.", "Expect expression."])
        self.assertEqual([d.line for d in reporter.diagnostics], [1, 3])
        self.assertEqual(len(statements), 2)
        self.assertTrue(all(isinstance(s, PrintStatementNode) for s in statements))

    def test_synchronize_stops_at_statement_keyword(self):
        statements, reporter = make_ast("1 + ; fun f() {}")
        self.assertEqual(reporter.messages(), ["Expect expression."])
        self.assertIsInstance(statements[0], FunctionDefinitionNode)

    def test_scan_errors_are_reported_and_skipped(self):
        statements, reporter = make_ast("print 1 @ ;")
        self.assertEqual(str(reporter.diagnostics[0]), "[line 1] Error: Unexpected character.")
        self.assertEqual(len(statements), 1)

    def test_statement_error_messages(self):
        cases = [
            ("if (true print 1;", "Expect ')' after condition in 'if' statement."),
            ("while (true print 1;", "Expect ')' after condition in 'while' statement."),
            ("for (var i = 0; i < 1 print i;", "Expect ';' after for condition."),
            ("for (var i = 0; i < 1; i = i + 1 print i;", "Expect ')' after for increment."),
            ("fun f() { return 1 }", "Expect ';' after return statement."),
            ("print true ? 1 2;", "Expect ':' in ternary operator."),
            ("f(1;", "Expect ')' after argument list."),
            ("print (1;", "Expect ')' after expression in grouping."),
        ]
        for code, message in cases:
            with self.subTest(code=code):
                _, reporter = make_ast(code)
                self.assertEqual(reporter.messages()[0], message)

    def test_excessive_nesting_is_reported_and_skipped(self):
        code = "print " + "(" * 1000 + "1" + ")" * 1000 + ";\nprint 2;"
        statements, reporter = make_ast(code)
        self.assertEqual(reporter.messages(), ["Nesting too deep."])
        self.assertEqual(len(statements), 1)
        self.assertEqual(AstPrinter().print(statements[0]), "(print 2.0)")

if __name__ == '__main__':
    unittest.main()
