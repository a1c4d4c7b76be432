from errors import LoxRuntimeError


class Environment:
    """
    One lexical scope: a name->value table plus a link to the enclosing scope.

    Environments are shared by reference. A closure keeps the environment it
    was created in alive, and every holder sees the same mutations.
    """

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing # Environment or None for globals

    def define(self, name: str, value):
        # Redefinition is allowed and simply overwrites
        self.values[name] = value

    def get(self, name_token):
        if name_token.lexeme in self.values:
            return self.values[name_token.lexeme]
        raise LoxRuntimeError(name_token, f"Undefined variable '{name_token.lexeme}'.")

    def assign(self, name_token, value):
        if name_token.lexeme in self.values:
            self.values[name_token.lexeme] = value
            return
        raise LoxRuntimeError(name_token, f"Undefined variable '{name_token.lexeme}'.")

    def ancestor(self, distance: int) -> "Environment":
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance: int, name_token):
        return self.ancestor(distance).get(name_token)

    def assign_at(self, distance: int, name_token, value):
        self.ancestor(distance).assign(name_token, value)

    def __repr__(self):
        depth = 0
        environment = self.enclosing
        while environment is not None:
            depth += 1
            environment = environment.enclosing
        return f"Environment(names={sorted(self.values)}, depth={depth})"
