import logging
import sys

import ast_nodes
from environment import Environment
from errors import ErrorReporter, LoxRuntimeError
from lexer import (
    KW_OR, SYM_BANG, SYM_MINUS, SYM_PLUS, SYM_SLASH, SYM_STAR, SYM_GT, SYM_GTE, SYM_LT, SYM_LTE,
    SYM_EQUAL_EQUAL, SYM_BANG_EQUAL
)
from runtime import (
    Completion, BREAK_COMPLETION, CONTINUE_COMPLETION,
    LoxCallable, LoxFunction, LoxClass, LoxInstance, define_natives
)

logger = logging.getLogger(__name__)


def is_truthy(value):
    # Only nil and false are falsy
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    if left is None and right is None:
        return True
    if left is None or right is None:
        return False
    if type(left) is not type(right): # Python would happily say True == 1.0
        return False
    if isinstance(left, (bool, float, str)):
        return left == right
    return left is right


def kind_of(value):
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, LoxClass):
        return "class"
    if isinstance(value, LoxCallable):
        return "function"
    if isinstance(value, LoxInstance):
        return "instance"
    return type(value).__name__


def stringify(value):
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    return str(value)


class Interpreter:
    def __init__(self, reporter=None, out=None):
        self.reporter = reporter if reporter is not None else ErrorReporter()
        self.out = out if out is not None else sys.stdout
        self.globals = Environment()
        define_natives(self.globals)
        self.environment = self.globals
        self.locals = {} # expression node -> hop count, filled from the resolver

    def interpret(self, statements, depths=None):
        if depths:
            # Kept for the whole session: closures from earlier REPL lines still look up their nodes here
            self.locals.update(depths)
        logger.debug("Executing %d statements", len(statements))
        for stmt in statements:
            try:
                self.execute(stmt)
            except LoxRuntimeError as e:
                self.reporter.runtime_error(e)
                return
            except RecursionError:
                # Nesting outside any call; execute_block has already restored the environment
                self.reporter.runtime_error_at_line(stmt.location_info[0], "Stack overflow.")
                return

    # Statements
    def execute(self, node):
        """Runs one statement; returns None or the Completion that interrupted it."""
        if isinstance(node, ast_nodes.ExpressionStatementNode):
            self.evaluate(node.expression)
        elif isinstance(node, ast_nodes.PrintStatementNode):
            value = self.evaluate(node.expression)
            print(stringify(value), file=self.out)
        elif isinstance(node, ast_nodes.VarDeclarationNode):
            value = None
            if node.initializer is not None:
                value = self.evaluate(node.initializer)
            self.environment.define(node.name.lexeme, value)
        elif isinstance(node, ast_nodes.BlockNode):
            return self.execute_block(node.statements, Environment(self.environment))
        elif isinstance(node, ast_nodes.IfStatementNode):
            if is_truthy(self.evaluate(node.condition)):
                return self.execute(node.then_branch)
            elif node.else_branch is not None:
                return self.execute(node.else_branch)
        elif isinstance(node, ast_nodes.WhileLoopNode):
            return self._execute_while(node)
        elif isinstance(node, ast_nodes.BreakStatementNode):
            return BREAK_COMPLETION
        elif isinstance(node, ast_nodes.ContinueStatementNode):
            return CONTINUE_COMPLETION
        elif isinstance(node, ast_nodes.ReturnStatementNode):
            value = None
            if node.value is not None:
                value = self.evaluate(node.value)
            return Completion(Completion.RETURN, value)
        elif isinstance(node, ast_nodes.FunctionDefinitionNode):
            function = LoxFunction(node, self.environment)
            self.environment.define(node.name.lexeme, function)
        elif isinstance(node, ast_nodes.ClassDefinitionNode):
            self._execute_class(node)
        else:
            raise NotImplementedError(f"Statement node type {type(node).__name__} not supported.")
        return None

    def execute_block(self, statements, environment):
        previous = self.environment
        self.environment = environment
        try:
            for stmt in statements:
                completion = self.execute(stmt)
                if completion is not None:
                    return completion
            return None
        finally:
            self.environment = previous

    def _execute_while(self, node):
        while is_truthy(self.evaluate(node.condition)):
            completion = self.execute(node.body)
            if completion is None or completion.kind == Completion.CONTINUE:
                continue
            if completion.kind == Completion.BREAK:
                break
            return completion # RETURN belongs to the enclosing call
        return None

    def _execute_class(self, node):
        # Bind the name first so methods can refer to their own class
        self.environment.define(node.name.lexeme, None)
        methods = {}
        for method in node.methods:
            methods[method.name.lexeme] = LoxFunction(method, self.environment)
        klass = LoxClass(node.name.lexeme, methods)
        self.environment.assign(node.name, klass)

    # Expressions
    def evaluate(self, node):
        if isinstance(node, ast_nodes.LiteralNode):
            return node.value
        elif isinstance(node, ast_nodes.GroupingNode):
            return self.evaluate(node.expression)
        elif isinstance(node, ast_nodes.UnaryOpNode):
            return self._evaluate_unary(node)
        elif isinstance(node, ast_nodes.BinaryOpNode):
            return self._evaluate_binary(node)
        elif isinstance(node, ast_nodes.LogicalOpNode):
            left = self.evaluate(node.left)
            if node.operator.type == KW_OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(node.right)
        elif isinstance(node, ast_nodes.TernaryConditionalExpressionNode):
            if is_truthy(self.evaluate(node.condition)):
                return self.evaluate(node.true_expr)
            return self.evaluate(node.false_expr)
        elif isinstance(node, ast_nodes.VariableNode):
            return self._look_up_variable(node.name, node)
        elif isinstance(node, ast_nodes.AssignmentNode):
            value = self.evaluate(node.value)
            distance = self.locals.get(node)
            if distance is None:
                self.globals.assign(node.name, value)
            else:
                self.environment.assign_at(distance, node.name, value)
            return value
        elif isinstance(node, ast_nodes.ThisNode):
            return self._look_up_variable(node.keyword, node)
        elif isinstance(node, ast_nodes.CallNode):
            return self._evaluate_call(node)
        elif isinstance(node, ast_nodes.PropertyAccessNode):
            obj = self.evaluate(node.object)
            if isinstance(obj, LoxInstance):
                return obj.get(node.name)
            raise LoxRuntimeError(node.name, "Only instances have properties.")
        elif isinstance(node, ast_nodes.PropertyAssignmentNode):
            obj = self.evaluate(node.object)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(node.name, "Only instances have fields.")
            value = self.evaluate(node.value)
            obj.set(node.name, value)
            return value
        else:
            raise NotImplementedError(f"Expression node type {type(node).__name__} not supported.")

    def _look_up_variable(self, name_token, node):
        distance = self.locals.get(node)
        if distance is None:
            return self.globals.get(name_token)
        return self.environment.get_at(distance, name_token)

    def _evaluate_unary(self, node):
        operand = self.evaluate(node.operand)
        if node.operator.type == SYM_BANG:
            return not is_truthy(operand)
        if node.operator.type == SYM_MINUS:
            if not isinstance(operand, float):
                raise LoxRuntimeError(node.operator,
                                      f"Operand of '-' must be a number, got {kind_of(operand)}.")
            return -operand
        raise NotImplementedError(f"Unary operator {node.operator.lexeme!r} not supported.")

    def _check_number_operands(self, operator, left, right):
        if isinstance(left, float) and isinstance(right, float):
            return
        raise LoxRuntimeError(operator,
                              f"Operands of '{operator.lexeme}' must be numbers, "
                              f"got {kind_of(left)} and {kind_of(right)}.")

    def _evaluate_binary(self, node):
        left = self.evaluate(node.left)
        right = self.evaluate(node.right)
        op_type = node.operator.type

        if op_type == SYM_PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) or isinstance(right, str):
                return stringify(left) + stringify(right)
            raise LoxRuntimeError(node.operator,
                                  f"Operands of '+' must be two numbers or include a string, "
                                  f"got {kind_of(left)} and {kind_of(right)}.")
        if op_type == SYM_EQUAL_EQUAL:
            return is_equal(left, right)
        if op_type == SYM_BANG_EQUAL:
            return not is_equal(left, right)

        self._check_number_operands(node.operator, left, right)
        if op_type == SYM_MINUS:
            return left - right
        if op_type == SYM_STAR:
            return left * right
        if op_type == SYM_SLASH:
            if right == 0.0:
                raise LoxRuntimeError(node.operator, "Division by zero.")
            return left / right
        if op_type == SYM_GT:
            return left > right
        if op_type == SYM_GTE:
            return left >= right
        if op_type == SYM_LT:
            return left < right
        if op_type == SYM_LTE:
            return left <= right
        raise NotImplementedError(f"Binary operator {node.operator.lexeme!r} not supported.")

    def _evaluate_call(self, node):
        callee = self.evaluate(node.callee)
        arguments = [self.evaluate(argument) for argument in node.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(node.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(node.paren,
                                  f"Expected {callee.arity()} arguments but got {len(arguments)}.")
        try:
            return callee.call(self, arguments, node.paren)
        except RecursionError:
            raise LoxRuntimeError(node.paren, "Stack overflow.") from None
