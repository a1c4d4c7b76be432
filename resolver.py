import logging

import ast_nodes

logger = logging.getLogger(__name__)

# Function types
NONE = 'NONE'
FUNCTION = 'FUNCTION'
METHOD = 'METHOD'
INITIALIZER = 'INITIALIZER'

# Class types
NO_CLASS = 'NO_CLASS'
IN_CLASS = 'IN_CLASS'

# Scope entry states
DECLARED = False
DEFINED = True


class Resolver:
    """
    Static pass computing, for each variable reference, how many scopes
    separate it from its binding.

    Globals are never recorded; the interpreter looks those up by name at
    runtime so forward references to later top-level declarations work.
    """

    def __init__(self, reporter):
        self.reporter = reporter
        self.scopes = [] # stack of dict name -> DECLARED/DEFINED
        self.function_stack = [NONE]
        self.current_class = NO_CLASS
        self.locals = {} # expression node -> hop count
        self.initializing_globals = [] # top-level var names whose initializer is being resolved

    def resolve(self, statements):
        for stmt in statements:
            try:
                self._resolve_statement(stmt)
            except RecursionError:
                self.reporter.error_at_line(stmt.location_info[0], "Nesting too deep.")
                self.scopes = []
                self.function_stack = [NONE]
                self.current_class = NO_CLASS
                self.initializing_globals = []
        logger.debug("Resolved %d local references", len(self.locals))
        return self.locals

    # Scope handling
    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name_token):
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name_token.lexeme in scope:
            self.reporter.error(name_token, "Variable was already declared in this scope.")
        scope[name_token.lexeme] = DECLARED

    def define(self, name_token):
        if not self.scopes:
            return
        self.scopes[-1][name_token.lexeme] = DEFINED

    def resolve_local(self, expr, name_token):
        """Records the hop count for expr; returns False when the name is global."""
        for hops, scope in enumerate(reversed(self.scopes)):
            if name_token.lexeme in scope:
                self.locals[expr] = hops
                return True
        return False

    def resolve_function(self, function, function_type):
        self.function_stack.append(function_type)
        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        for stmt in function.body:
            self._resolve_statement(stmt)
        self.end_scope()
        self.function_stack.pop()

    # Statements
    def _resolve_statement(self, node):
        if isinstance(node, ast_nodes.BlockNode):
            self.begin_scope()
            for stmt in node.statements:
                self._resolve_statement(stmt)
            self.end_scope()
        elif isinstance(node, ast_nodes.VarDeclarationNode):
            self.declare(node.name)
            if node.initializer is not None:
                is_global = not self.scopes
                if is_global:
                    self.initializing_globals.append(node.name.lexeme)
                self._resolve_expression(node.initializer)
                if is_global:
                    self.initializing_globals.pop()
            self.define(node.name)
        elif isinstance(node, ast_nodes.FunctionDefinitionNode):
            # Defined before the body so the function can call itself
            self.declare(node.name)
            self.define(node.name)
            self.resolve_function(node, FUNCTION)
        elif isinstance(node, ast_nodes.ClassDefinitionNode):
            self._resolve_class(node)
        elif isinstance(node, (ast_nodes.ExpressionStatementNode, ast_nodes.PrintStatementNode)):
            self._resolve_expression(node.expression)
        elif isinstance(node, ast_nodes.IfStatementNode):
            self._resolve_expression(node.condition)
            self._resolve_statement(node.then_branch)
            if node.else_branch is not None:
                self._resolve_statement(node.else_branch)
        elif isinstance(node, ast_nodes.WhileLoopNode):
            self._resolve_expression(node.condition)
            self._resolve_statement(node.body)
        elif isinstance(node, ast_nodes.ReturnStatementNode):
            if self.function_stack[-1] == NONE:
                self.reporter.error(node.keyword, "Cannot return from top-level code.")
            if node.value is not None:
                self._resolve_expression(node.value)
        elif isinstance(node, (ast_nodes.BreakStatementNode, ast_nodes.ContinueStatementNode)):
            pass # Loop placement is checked by the parser
        else:
            raise NotImplementedError(f"Statement node type {type(node).__name__} not supported.")

    def _resolve_class(self, node):
        enclosing_class = self.current_class
        self.current_class = IN_CLASS

        self.declare(node.name)
        self.define(node.name)

        self.begin_scope()
        self.scopes[-1]["this"] = DEFINED
        for method in node.methods:
            function_type = INITIALIZER if method.name.lexeme == "init" else METHOD
            self.resolve_function(method, function_type)
        self.end_scope()

        self.current_class = enclosing_class

    # Expressions
    def _resolve_expression(self, node):
        if isinstance(node, ast_nodes.VariableNode):
            if self.scopes and self.scopes[-1].get(node.name.lexeme) is DECLARED:
                self.reporter.error(node.name, "Cannot read local variable in its own initializer.")
            is_local = self.resolve_local(node, node.name)
            if not is_local and node.name.lexeme in self.initializing_globals:
                self.reporter.error(node.name, "Cannot read local variable in its own initializer.")
        elif isinstance(node, ast_nodes.AssignmentNode):
            self._resolve_expression(node.value)
            self.resolve_local(node, node.name)
        elif isinstance(node, ast_nodes.ThisNode):
            if self.current_class == NO_CLASS:
                self.reporter.error(node.keyword, "Cannot use 'this' outside of a class.")
                return
            self.resolve_local(node, node.keyword)
        elif isinstance(node, (ast_nodes.BinaryOpNode, ast_nodes.LogicalOpNode)):
            self._resolve_expression(node.left)
            self._resolve_expression(node.right)
        elif isinstance(node, ast_nodes.UnaryOpNode):
            self._resolve_expression(node.operand)
        elif isinstance(node, ast_nodes.TernaryConditionalExpressionNode):
            self._resolve_expression(node.condition)
            self._resolve_expression(node.true_expr)
            self._resolve_expression(node.false_expr)
        elif isinstance(node, ast_nodes.GroupingNode):
            self._resolve_expression(node.expression)
        elif isinstance(node, ast_nodes.CallNode):
            self._resolve_expression(node.callee)
            for argument in node.arguments:
                self._resolve_expression(argument)
        elif isinstance(node, ast_nodes.PropertyAccessNode):
            self._resolve_expression(node.object)
        elif isinstance(node, ast_nodes.PropertyAssignmentNode):
            self._resolve_expression(node.value)
            self._resolve_expression(node.object)
        elif isinstance(node, ast_nodes.LiteralNode):
            pass
        else:
            raise NotImplementedError(f"Expression node type {type(node).__name__} not supported.")
