import ast_nodes


class AstPrinter:
    """Renders nodes in a parenthesized prefix form, e.g. (+ 1 (group 2))."""

    def print(self, node):
        if isinstance(node, ast_nodes.LiteralNode):
            if node.value is None:
                return "nil"
            if isinstance(node.value, bool):
                return "true" if node.value else "false"
            if isinstance(node.value, str):
                return f'"{node.value}"'
            return str(node.value)
        elif isinstance(node, ast_nodes.GroupingNode):
            return self.parenthesize("group", node.expression)
        elif isinstance(node, ast_nodes.UnaryOpNode):
            return self.parenthesize(node.operator.lexeme, node.operand)
        elif isinstance(node, (ast_nodes.BinaryOpNode, ast_nodes.LogicalOpNode)):
            return self.parenthesize(node.operator.lexeme, node.left, node.right)
        elif isinstance(node, ast_nodes.TernaryConditionalExpressionNode):
            return self.parenthesize("?:", node.condition, node.true_expr, node.false_expr)
        elif isinstance(node, ast_nodes.VariableNode):
            return node.name.lexeme
        elif isinstance(node, ast_nodes.AssignmentNode):
            return self.parenthesize(f"= {node.name.lexeme}", node.value)
        elif isinstance(node, ast_nodes.CallNode):
            return self.parenthesize(f"call {self.print(node.callee)}", *node.arguments)
        elif isinstance(node, ast_nodes.PropertyAccessNode):
            return f"(. {self.print(node.object)} {node.name.lexeme})"
        elif isinstance(node, ast_nodes.PropertyAssignmentNode):
            return f"(.= {self.print(node.object)} {node.name.lexeme} {self.print(node.value)})"
        elif isinstance(node, ast_nodes.ThisNode):
            return "this"

        # Statements
        elif isinstance(node, ast_nodes.ExpressionStatementNode):
            return self.parenthesize(";", node.expression)
        elif isinstance(node, ast_nodes.PrintStatementNode):
            return self.parenthesize("print", node.expression)
        elif isinstance(node, ast_nodes.VarDeclarationNode):
            if node.initializer is None:
                return f"(var {node.name.lexeme})"
            return self.parenthesize(f"var {node.name.lexeme}", node.initializer)
        elif isinstance(node, ast_nodes.BlockNode):
            return self.parenthesize("block", *node.statements)
        elif isinstance(node, ast_nodes.IfStatementNode):
            if node.else_branch is None:
                return self.parenthesize("if", node.condition, node.then_branch)
            return self.parenthesize("if-else", node.condition, node.then_branch, node.else_branch)
        elif isinstance(node, ast_nodes.WhileLoopNode):
            return self.parenthesize("while", node.condition, node.body)
        elif isinstance(node, ast_nodes.BreakStatementNode):
            return "(break)"
        elif isinstance(node, ast_nodes.ContinueStatementNode):
            return "(continue)"
        elif isinstance(node, ast_nodes.ReturnStatementNode):
            if node.value is None:
                return "(return)"
            return self.parenthesize("return", node.value)
        elif isinstance(node, ast_nodes.FunctionDefinitionNode):
            params = " ".join(param.lexeme for param in node.params)
            return self.parenthesize(f"fun {node.name.lexeme}({params})", *node.body)
        elif isinstance(node, ast_nodes.ClassDefinitionNode):
            return self.parenthesize(f"class {node.name.lexeme}", *node.methods)
        raise NotImplementedError(f"Node type {type(node).__name__} not supported.")

    def parenthesize(self, name, *nodes):
        parts = [name] + [self.print(node) for node in nodes]
        return "(" + " ".join(parts) + ")"
