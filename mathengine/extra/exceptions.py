from typing import Literal


class EngineError(Exception):
    def __init__(self, message):
        super().__init__(message)


class ArithmeticDomainError(EngineError):
    def __init__(self, message, exc_type: Literal["division_by_zero", "factorial", "undefined", "overflow"]):
        super().__init__(message)
        self.exc_type = exc_type


class UndefinedVariableError(EngineError):
    def __init__(self, message, name: str):
        super().__init__(message)
        self.name = name


class MalformedExpressionError(EngineError):
    def __init__(self, message, exc_type: Literal["unbalanced", "empty", "stack_underflow", "missing_operator",
                                                   "missing_operand", "unexpected_token", "arity"]):
        super().__init__(message)
        self.exc_type = exc_type


class ArityMismatchError(MalformedExpressionError):
    def __init__(self, message, expected: int, given: int):
        super().__init__(message, exc_type="arity")
        self.expected = expected
        self.given = given


class UnsupportedFeatureError(EngineError):
    def __init__(self, message):
        super().__init__(message)
