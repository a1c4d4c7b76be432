import logging

from lexer import (
    Token, EOF, IDENTIFIER, NUMBER, STRING, ERROR,
    KW_AND, KW_BREAK, KW_CLASS, KW_CONTINUE, KW_ELSE, KW_FALSE, KW_FOR, KW_FUN, KW_IF,
    KW_NIL, KW_OR, KW_PRINT, KW_RETURN, KW_THIS, KW_TRUE, KW_VAR, KW_WHILE,
    SYM_LPAREN, SYM_RPAREN, SYM_LBRACE, SYM_RBRACE, SYM_COMMA, SYM_DOT, SYM_MINUS,
    SYM_PLUS, SYM_SEMICOLON, SYM_SLASH, SYM_STAR, SYM_QUESTION, SYM_COLON, SYM_BANG,
    SYM_BANG_EQUAL, SYM_ASSIGN, SYM_EQUAL_EQUAL, SYM_GT, SYM_GTE, SYM_LT, SYM_LTE
)
from errors import ParseError

# Import all AST node classes
from ast_nodes import *

logger = logging.getLogger(__name__)

MAX_ARGUMENTS = 255

# Tokens that can begin a statement; synchronize() stops in front of them
STATEMENT_KEYWORDS = (KW_CLASS, KW_FUN, KW_VAR, KW_FOR, KW_IF, KW_WHILE, KW_PRINT, KW_RETURN)


class Parser:
    """
    Recursive-descent parser producing a list of statement nodes.

    Syntax errors are reported through the ErrorReporter and never escape
    `parse()`: the failing declaration is dropped and parsing resumes at the
    next statement boundary.

    program     := declaration* EOF
    declaration := classDecl | funDecl | varDecl | statement
    statement   := exprStmt | printStmt | block | ifStmt | whileStmt | forStmt
                 | breakStmt | continueStmt | returnStmt
    expression  := assignment -> ternary -> logic_or -> logic_and -> equality
                 -> comparison -> term -> factor -> unary -> call -> primary
    """

    def __init__(self, tokens, reporter):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type != EOF: # Make sure parsing always ends on EOF
            line = self.tokens[-1].line if self.tokens else 1
            self.tokens.append(Token(EOF, '', None, line))
        self.reporter = reporter
        self.pos = 0
        self.loop_nesting = 0
        self.current_token = self.tokens[self.pos]
        self._skip_error_tokens()

    def _skip_error_tokens(self):
        # Scan errors arrive as ERROR tokens; report them and carry on with the next real token
        while self.current_token.type == ERROR:
            self.reporter.error_at_line(self.current_token.line, self.current_token.literal)
            self.pos += 1
            self.current_token = self.tokens[self.pos]

    def advance(self):
        token = self.current_token
        if token.type != EOF:
            self.pos += 1
            self.current_token = self.tokens[self.pos]
            self._skip_error_tokens()
        return token

    def is_at_end(self):
        return self.current_token.type == EOF

    def check(self, token_type):
        return self.current_token.type == token_type

    def consume(self, expected_token_type, error_message):
        if self.check(expected_token_type):
            return self.advance()
        raise self.error(self.current_token, error_message)

    def consume_if(self, *token_types):
        if self.current_token.type in token_types:
            return self.advance()
        return None

    def error(self, token, message):
        # Report now; the caller decides whether the parser is confused enough to unwind
        self.reporter.error(token, message)
        return ParseError(message, token)

    def synchronize(self):
        previous = self.advance() # Skip the offending token
        while not self.is_at_end():
            if previous.type == SYM_SEMICOLON:
                return
            if self.current_token.type in STATEMENT_KEYWORDS:
                return
            previous = self.advance()

    def parse(self):
        statements = []
        while not self.is_at_end():
            try:
                stmt = self.declaration()
            except RecursionError:
                # Caught at the top level, where the stack has room to report
                self.error(self.current_token, "Nesting too deep.")
                self.loop_nesting = 0
                self.synchronize()
                continue
            if stmt is not None:
                statements.append(stmt)
        logger.debug("Parsed %d top-level statements", len(statements))
        return statements

    # Declarations
    def declaration(self):
        try:
            if self.consume_if(KW_CLASS):
                return self.parse_class_declaration()
            if self.consume_if(KW_FUN):
                return self.parse_function("function")
            if self.consume_if(KW_VAR):
                return self.parse_var_declaration()
            return self.statement()
        except ParseError as e:
            logger.debug("Recovering from %s", e)
            self.synchronize()
            return None

    def parse_class_declaration(self):
        name = self.consume(IDENTIFIER, "Expect class name.")
        self.consume(SYM_LBRACE, "Expect '{' before class body.")

        methods = []
        while not self.check(SYM_RBRACE) and not self.is_at_end():
            methods.append(self.parse_function("method"))

        self.consume(SYM_RBRACE, "Expect '}' after class body.")
        return ClassDefinitionNode(name=name, methods=methods, location_info=location_of(name))

    def parse_function(self, kind):
        name = self.consume(IDENTIFIER, f"Expect {kind} name.")
        self.consume(SYM_LPAREN, f"Expect '(' after {kind} name.")
        params = []
        if not self.check(SYM_RPAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self.error(self.current_token, f"Cannot have more than {MAX_ARGUMENTS} parameters.")
                params.append(self.consume(IDENTIFIER, "Expect parameter name."))
                if not self.consume_if(SYM_COMMA):
                    break
        self.consume(SYM_RPAREN, "Expect ')' after parameters.")

        self.consume(SYM_LBRACE, f"Expect '{{' before {kind} body.")
        # A function body starts outside of any loop, even when declared inside one
        enclosing_nesting = self.loop_nesting
        self.loop_nesting = 0
        try:
            body = self.parse_block()
        finally:
            self.loop_nesting = enclosing_nesting
        return FunctionDefinitionNode(name=name, params=params, body=body, location_info=location_of(name))

    def parse_var_declaration(self):
        name = self.consume(IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.consume_if(SYM_ASSIGN):
            initializer = self.expression()

        self.consume(SYM_SEMICOLON, "Expect ';' after variable declaration.")
        return VarDeclarationNode(name=name, initializer=initializer, location_info=location_of(name))

    # Statements
    def statement(self):
        keyword = self.current_token
        if self.consume_if(KW_PRINT): return self.parse_print_statement(keyword)
        if self.consume_if(KW_IF): return self.parse_if_statement(keyword)
        if self.consume_if(KW_FOR): return self.parse_for_statement(keyword)
        if self.consume_if(KW_WHILE): return self.parse_while_statement(keyword)
        if self.consume_if(KW_BREAK): return self.parse_break_statement(keyword)
        if self.consume_if(KW_CONTINUE): return self.parse_continue_statement(keyword)
        if self.consume_if(KW_RETURN): return self.parse_return_statement(keyword)
        if self.consume_if(SYM_LBRACE):
            return BlockNode(statements=self.parse_block(), location_info=location_of(keyword))
        return self.parse_expression_statement()

    def parse_block(self):
        statements = []
        while not self.check(SYM_RBRACE) and not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        self.consume(SYM_RBRACE, "Expect '}' after block.")
        return statements

    def parse_print_statement(self, keyword):
        value = self.expression()
        self.consume(SYM_SEMICOLON, "Expect ';' after print value.")
        return PrintStatementNode(expression=value, location_info=location_of(keyword))

    def parse_if_statement(self, keyword):
        self.consume(SYM_LPAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(SYM_RPAREN, "Expect ')' after condition in 'if' statement.")

        then_branch = self.statement()
        else_branch = None
        if self.consume_if(KW_ELSE): # Dangling else binds to the nearest if
            else_branch = self.statement()

        return IfStatementNode(condition=condition, then_branch=then_branch,
                               else_branch=else_branch, location_info=location_of(keyword))

    def parse_loop_body(self):
        self.loop_nesting += 1
        try:
            return self.statement()
        finally:
            self.loop_nesting -= 1

    def parse_while_statement(self, keyword):
        self.consume(SYM_LPAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(SYM_RPAREN, "Expect ')' after condition in 'while' statement.")
        body = self.parse_loop_body()
        return WhileLoopNode(condition=condition, body=body, location_info=location_of(keyword))

    def parse_for_statement(self, keyword):
        loc = location_of(keyword)
        self.consume(SYM_LPAREN, "Expect '(' after 'for'.")

        if self.consume_if(SYM_SEMICOLON):
            initializer = None
        elif self.consume_if(KW_VAR):
            initializer = self.parse_var_declaration()
        else:
            initializer = self.parse_expression_statement()

        condition = None
        if not self.check(SYM_SEMICOLON):
            condition = self.expression()
        self.consume(SYM_SEMICOLON, "Expect ';' after for condition.")

        increment = None
        if not self.check(SYM_RPAREN):
            increment = self.expression()
        self.consume(SYM_RPAREN, "Expect ')' after for increment.")

        body = self.parse_loop_body()

        # Desugar into while: { initializer; while (condition) { body; increment; } }
        if increment is not None:
            body = BlockNode(statements=[body, ExpressionStatementNode(expression=increment, location_info=increment.location_info)],
                             location_info=loc)
        if condition is None:
            condition = LiteralNode(True, location_info=loc)
        body = WhileLoopNode(condition=condition, body=body, location_info=loc)
        if initializer is not None:
            body = BlockNode(statements=[initializer, body], location_info=loc)
        return body

    def parse_break_statement(self, keyword):
        if self.loop_nesting <= 0:
            raise self.error(keyword, "'break' disallowed outside of loop.")
        self.consume(SYM_SEMICOLON, "Expect ';' after 'break'.")
        return BreakStatementNode(keyword=keyword, location_info=location_of(keyword))

    def parse_continue_statement(self, keyword):
        if self.loop_nesting <= 0:
            raise self.error(keyword, "'continue' disallowed outside of loop.")
        self.consume(SYM_SEMICOLON, "Expect ';' after 'continue'.")
        return ContinueStatementNode(keyword=keyword, location_info=location_of(keyword))

    def parse_return_statement(self, keyword):
        value = None
        if not self.check(SYM_SEMICOLON):
            value = self.expression()
        self.consume(SYM_SEMICOLON, "Expect ';' after return statement.")
        return ReturnStatementNode(keyword=keyword, value=value, location_info=location_of(keyword))

    def parse_expression_statement(self):
        expr = self.expression()
        self.consume(SYM_SEMICOLON, "Expect ';' after expression.")
        return ExpressionStatementNode(expression=expr, location_info=expr.location_info)

    # Expressions
    def expression(self):
        return self.parse_assignment()

    def parse_assignment(self):
        expr = self.parse_ternary()

        equals = self.consume_if(SYM_ASSIGN)
        if equals:
            value = self.parse_assignment() # Right-associative

            if isinstance(expr, VariableNode):
                return AssignmentNode(name=expr.name, value=value, location_info=expr.location_info)
            if isinstance(expr, PropertyAccessNode):
                return PropertyAssignmentNode(object=expr.object, name=expr.name, value=value,
                                              location_info=expr.location_info)
            # Not confused, so report without unwinding
            self.error(equals, "Invalid assignment target.")

        return expr

    def parse_ternary(self):
        expr = self.parse_logical_or_expression()

        question = self.consume_if(SYM_QUESTION)
        if question:
            true_expr = self.expression()
            colon = self.consume(SYM_COLON, "Expect ':' in ternary operator.")
            false_expr = self.parse_ternary()
            return TernaryConditionalExpressionNode(condition=expr, question=question, true_expr=true_expr,
                                                    colon=colon, false_expr=false_expr,
                                                    location_info=location_of(question))
        return expr

    def _parse_binary_expression(self, parse_higher_precedence_operand, operator_token_types, node_class=BinaryOpNode):
        left = parse_higher_precedence_operand()

        while self.current_token.type in operator_token_types:
            op_token = self.advance()
            right = parse_higher_precedence_operand()
            left = node_class(left=left, operator=op_token, right=right, location_info=location_of(op_token))
        return left

    def parse_logical_or_expression(self):
        return self._parse_binary_expression(self.parse_logical_and_expression, [KW_OR], LogicalOpNode)

    def parse_logical_and_expression(self):
        return self._parse_binary_expression(self.parse_equality_expression, [KW_AND], LogicalOpNode)

    def parse_equality_expression(self):
        return self._parse_binary_expression(self.parse_comparison_expression, [SYM_BANG_EQUAL, SYM_EQUAL_EQUAL])

    def parse_comparison_expression(self):
        comparison_ops = [SYM_GT, SYM_GTE, SYM_LT, SYM_LTE]
        return self._parse_binary_expression(self.parse_additive_expression, comparison_ops)

    def parse_additive_expression(self):
        return self._parse_binary_expression(self.parse_multiplicative_expression, [SYM_PLUS, SYM_MINUS])

    def parse_multiplicative_expression(self):
        return self._parse_binary_expression(self.parse_unary_expression, [SYM_STAR, SYM_SLASH])

    def parse_unary_expression(self):
        operator = self.consume_if(SYM_BANG, SYM_MINUS)
        if operator:
            operand = self.parse_unary_expression()
            return UnaryOpNode(operator=operator, operand=operand, location_info=location_of(operator))
        return self.parse_call_expression()

    def parse_call_expression(self):
        expr = self.parse_primary_expression()

        while True:
            if self.consume_if(SYM_LPAREN):
                expr = self.finish_call(expr)
            elif self.consume_if(SYM_DOT):
                name = self.consume(IDENTIFIER, "Expect property name after '.'.")
                expr = PropertyAccessNode(object=expr, name=name, location_info=location_of(name))
            else:
                break
        return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(SYM_RPAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(self.current_token, f"Cannot have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self.expression())
                if not self.consume_if(SYM_COMMA):
                    break

        paren = self.consume(SYM_RPAREN, "Expect ')' after argument list.")
        return CallNode(callee=callee, paren=paren, arguments=arguments, location_info=location_of(paren))

    def parse_primary_expression(self):
        token = self.current_token
        loc = location_of(token)

        if self.consume_if(KW_FALSE):
            return LiteralNode(False, location_info=loc)
        if self.consume_if(KW_TRUE):
            return LiteralNode(True, location_info=loc)
        if self.consume_if(KW_NIL):
            return LiteralNode(None, location_info=loc)
        if self.consume_if(NUMBER, STRING):
            return LiteralNode(token.literal, location_info=loc)
        if self.consume_if(KW_THIS):
            return ThisNode(keyword=token, location_info=loc)
        if self.consume_if(IDENTIFIER):
            return VariableNode(name=token, location_info=loc)
        if self.consume_if(SYM_LPAREN):
            expr = self.expression()
            self.consume(SYM_RPAREN, "Expect ')' after expression in grouping.")
            return GroupingNode(expression=expr, location_info=loc)

        raise self.error(token, "Expect expression.")
