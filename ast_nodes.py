# Base Node
class ASTNode:
    def __init__(self, location_info):
        self.location_info = location_info # (line, column) of the anchoring token

    def __repr__(self):
        return f"{self.__class__.__name__}(location={self.location_info})"


def location_of(token):
    return (token.line, token.column)


# Expressions
class LiteralNode(ASTNode):
    def __init__(self, value, location_info):
        super().__init__(location_info)
        self.value = value # None, bool, float or str

    def __repr__(self):
        return f"LiteralNode(value={self.value!r}, location={self.location_info})"

class GroupingNode(ASTNode):
    def __init__(self, expression, location_info):
        super().__init__(location_info)
        self.expression = expression # ExpressionNode

    def __repr__(self):
        return f"GroupingNode(expression={self.expression!r}, location={self.location_info})"

class UnaryOpNode(ASTNode):
    def __init__(self, operator, operand, location_info):
        super().__init__(location_info)
        self.operator = operator # Token, '!' or '-'
        self.operand = operand # ExpressionNode

    def __repr__(self):
        return f"UnaryOpNode(op={self.operator.lexeme!r}, operand={self.operand!r}, location={self.location_info})"

class BinaryOpNode(ASTNode):
    def __init__(self, left, operator, right, location_info):
        super().__init__(location_info)
        self.left = left # ExpressionNode
        self.operator = operator # Token
        self.right = right # ExpressionNode

    def __repr__(self):
        return (f"BinaryOpNode(left={self.left!r}, op={self.operator.lexeme!r}, right={self.right!r}, "
                f"location={self.location_info})")

class TernaryConditionalExpressionNode(ASTNode):
    def __init__(self, condition, question, true_expr, colon, false_expr, location_info):
        super().__init__(location_info)
        self.condition = condition # ExpressionNode
        self.question = question # Token '?'
        self.true_expr = true_expr # ExpressionNode
        self.colon = colon # Token ':'
        self.false_expr = false_expr # ExpressionNode

    def __repr__(self):
        return (f"TernaryConditionalExpressionNode(condition={self.condition!r}, "
                f"true_expr={self.true_expr!r}, false_expr={self.false_expr!r}, location={self.location_info})")

class LogicalOpNode(ASTNode):
    def __init__(self, left, operator, right, location_info):
        super().__init__(location_info)
        self.left = left # ExpressionNode
        self.operator = operator # Token, 'and' or 'or'
        self.right = right # ExpressionNode

    def __repr__(self):
        return (f"LogicalOpNode(left={self.left!r}, op={self.operator.lexeme!r}, right={self.right!r}, "
                f"location={self.location_info})")

class VariableNode(ASTNode):
    def __init__(self, name, location_info):
        super().__init__(location_info)
        self.name = name # Token

    def __repr__(self):
        return f"VariableNode(name={self.name.lexeme!r}, location={self.location_info})"

class AssignmentNode(ASTNode):
    def __init__(self, name, value, location_info):
        super().__init__(location_info)
        self.name = name # Token
        self.value = value # ExpressionNode

    def __repr__(self):
        return f"AssignmentNode(name={self.name.lexeme!r}, value={self.value!r}, location={self.location_info})"

class CallNode(ASTNode):
    def __init__(self, callee, paren, arguments, location_info):
        super().__init__(location_info)
        self.callee = callee # ExpressionNode
        self.paren = paren # Token ')', used for error locations
        self.arguments = arguments # list of ExpressionNode

    def __repr__(self):
        return (f"CallNode(callee={self.callee!r}, args_len={len(self.arguments)}, "
                f"location={self.location_info})")

class PropertyAccessNode(ASTNode):
    def __init__(self, object, name, location_info):
        super().__init__(location_info)
        self.object = object # ExpressionNode
        self.name = name # Token

    def __repr__(self):
        return (f"PropertyAccessNode(object={self.object!r}, name={self.name.lexeme!r}, "
                f"location={self.location_info})")

class PropertyAssignmentNode(ASTNode):
    def __init__(self, object, name, value, location_info):
        super().__init__(location_info)
        self.object = object # ExpressionNode
        self.name = name # Token
        self.value = value # ExpressionNode

    def __repr__(self):
        return (f"PropertyAssignmentNode(object={self.object!r}, name={self.name.lexeme!r}, "
                f"value={self.value!r}, location={self.location_info})")

class ThisNode(ASTNode):
    def __init__(self, keyword, location_info):
        super().__init__(location_info)
        self.keyword = keyword # Token 'this'

    def __repr__(self):
        return f"ThisNode(location={self.location_info})"


# Statements
class ExpressionStatementNode(ASTNode):
    def __init__(self, expression, location_info):
        super().__init__(location_info)
        self.expression = expression # ExpressionNode

    def __repr__(self):
        return f"ExpressionStatementNode(expression={self.expression!r}, location={self.location_info})"

class PrintStatementNode(ASTNode):
    def __init__(self, expression, location_info):
        super().__init__(location_info)
        self.expression = expression # ExpressionNode

    def __repr__(self):
        return f"PrintStatementNode(expression={self.expression!r}, location={self.location_info})"

class VarDeclarationNode(ASTNode):
    def __init__(self, name, initializer, location_info):
        super().__init__(location_info)
        self.name = name # Token
        self.initializer = initializer # ExpressionNode or None

    def __repr__(self):
        return (f"VarDeclarationNode(name={self.name.lexeme!r}, initializer={self.initializer!r}, "
                f"location={self.location_info})")

class BlockNode(ASTNode):
    def __init__(self, statements, location_info):
        super().__init__(location_info)
        self.statements = statements # list of StatementNodes

    def __repr__(self):
        return f"BlockNode(statements_len={len(self.statements)}, location={self.location_info})"

class IfStatementNode(ASTNode):
    def __init__(self, condition, then_branch, else_branch, location_info):
        super().__init__(location_info)
        self.condition = condition # ExpressionNode
        self.then_branch = then_branch # StatementNode
        self.else_branch = else_branch # StatementNode or None

    def __repr__(self):
        return (f"IfStatementNode(condition={self.condition!r}, "
                f"has_else={self.else_branch is not None}, location={self.location_info})")

class WhileLoopNode(ASTNode):
    def __init__(self, condition, body, location_info):
        super().__init__(location_info)
        self.condition = condition # ExpressionNode
        self.body = body # StatementNode

    def __repr__(self):
        return f"WhileLoopNode(condition={self.condition!r}, location={self.location_info})"

class BreakStatementNode(ASTNode):
    def __init__(self, keyword, location_info):
        super().__init__(location_info)
        self.keyword = keyword # Token

class ContinueStatementNode(ASTNode):
    def __init__(self, keyword, location_info):
        super().__init__(location_info)
        self.keyword = keyword # Token

class ReturnStatementNode(ASTNode):
    def __init__(self, keyword, value, location_info):
        super().__init__(location_info)
        self.keyword = keyword # Token
        self.value = value # ExpressionNode or None

    def __repr__(self):
        return f"ReturnStatementNode(value={self.value!r}, location={self.location_info})"

# Definitions
class FunctionDefinitionNode(ASTNode):
    def __init__(self, name, params, body, location_info):
        super().__init__(location_info)
        self.name = name # Token
        self.params = params # list of Token
        self.body = body # list of StatementNodes

    def __repr__(self):
        return (f"FunctionDefinitionNode(name={self.name.lexeme!r}, params_len={len(self.params)}, "
                f"location={self.location_info})")

class ClassDefinitionNode(ASTNode):
    def __init__(self, name, methods, location_info):
        super().__init__(location_info)
        self.name = name # Token
        self.methods = methods # list of FunctionDefinitionNode

    def __repr__(self):
        return (f"ClassDefinitionNode(name={self.name.lexeme!r}, methods_len={len(self.methods)}, "
                f"location={self.location_info})")
