import time

from environment import Environment
from errors import LoxRuntimeError


class Completion:
    """
    How a statement finished when it did not simply fall through.

    Statement execution returns None for normal completion and one of these
    for break, continue or return. Blocks stop at the first non-None result
    and hand it outward; loops consume BREAK and CONTINUE; a function call
    consumes RETURN.
    """
    BREAK = 'BREAK'
    CONTINUE = 'CONTINUE'
    RETURN = 'RETURN'

    __slots__ = ('kind', 'value')

    def __init__(self, kind, value=None):
        self.kind = kind
        self.value = value

    def __repr__(self):
        return f"Completion({self.kind!r}, value={self.value!r})"


BREAK_COMPLETION = Completion(Completion.BREAK)
CONTINUE_COMPLETION = Completion(Completion.CONTINUE)


class LoxCallable:
    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter, arguments, paren):
        raise NotImplementedError


class NativeFunction(LoxCallable):
    def __init__(self, name, arity, function):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments, paren):
        return self.function(*arguments)

    def __str__(self):
        return "<native fn>"

    def __repr__(self):
        return f"NativeFunction(name={self.name!r}, arity={self._arity})"


class LoxFunction(LoxCallable):
    def __init__(self, declaration, closure: Environment):
        self.declaration = declaration # FunctionDefinitionNode, shared with the AST
        self.closure = closure

    def bind(self, instance):
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment)

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments, paren):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        completion = interpreter.execute_block(self.declaration.body, environment)
        if completion is not None and completion.kind == Completion.RETURN:
            return completion.value
        return None

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"

    def __repr__(self):
        return f"LoxFunction(name={self.declaration.name.lexeme!r}, arity={self.arity()})"


class LoxClass(LoxCallable):
    INITIALIZER = "init"

    def __init__(self, name, methods):
        self.name = name
        self.methods = methods # name -> unbound LoxFunction

    def find_method(self, name):
        return self.methods.get(name)

    def arity(self):
        initializer = self.find_method(self.INITIALIZER)
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter, arguments, paren):
        instance = LoxInstance(self)
        initializer = self.find_method(self.INITIALIZER)
        if initializer is not None:
            # Whatever init returns, construction yields the instance
            initializer.bind(instance).call(interpreter, arguments, paren)
        return instance

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"LoxClass(name={self.name!r}, methods={sorted(self.methods)})"


class LoxInstance:
    def __init__(self, klass: LoxClass):
        self.klass = klass
        self.fields = {}

    def get(self, name_token):
        if name_token.lexeme in self.fields:
            return self.fields[name_token.lexeme]

        method = self.klass.find_method(name_token.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name_token, f"Undefined property '{name_token.lexeme}'.")

    def set(self, name_token, value):
        self.fields[name_token.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"

    def __repr__(self):
        return f"LoxInstance(klass={self.klass.name!r}, fields={sorted(self.fields)})"


def define_natives(globals_env: Environment):
    globals_env.define("clock", NativeFunction("clock", 0, time.time))
