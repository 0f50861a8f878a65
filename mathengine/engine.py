import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping, Sequence, Union

import mathengine.vars as vrs
from mathengine.extra.exceptions import MalformedExpressionError, UndefinedVariableError, UnsupportedFeatureError
from mathengine.extra.types import (Bracket, BracketToken, Comma, FactorialSign, Identifier, NumberToken, Operator,
                                    OperatorRule, OperatorToken, Token, Variable)
from mathengine.extra.utils import log_exception
from mathengine.number import Number
from mathengine.validator import TokenValidator, is_bracket, vertical_line_opens


class Engine(ABC):
    """
    Evaluation strategy: 'validate' checks the tokens without evaluating them, 'evaluate' computes the value
    of tokens that already passed 'validate'
    """

    @abstractmethod
    def validate(self, tokens: Sequence[Token], variables: Mapping[str, Variable] | None = None) -> None:
        ...

    @abstractmethod
    def evaluate(self, tokens: Sequence[Token], variables: Mapping[str, Variable] | None = None) -> Number:
        ...

    def execute(self, tokens: Sequence[Token], variables: Mapping[str, Variable] | None = None) -> Number:
        """
        Validates tokens and evaluates them
        :return: value of the expression
        """
        self.validate(tokens, variables)
        return self.evaluate(tokens, variables)


@dataclass
class PendingOperator:
    operator: Operator


@dataclass
class OpenParen:
    depth: int  # operands below the group
    commas: int = 0


@dataclass
class PendingCall:
    name: str
    variable: Variable


@dataclass
class OpenAbs:
    depth: int


Marker = Union[PendingOperator, OpenParen, PendingCall, OpenAbs]


class _YardState:
    """
    Operand and marker stacks of a single evaluation
    """
    def __init__(self, rules: Mapping[Operator, OperatorRule], logger: logging.Logger):
        self.rules = rules
        self.logger = logger
        self.operands: list[Number] = []
        self.markers: list[Marker] = []

    def floor(self) -> int:
        for marker in reversed(self.markers):
            if isinstance(marker, (OpenParen, OpenAbs)):
                return marker.depth
        return 0

    def pop_operand(self) -> Number:
        if len(self.operands) <= self.floor():
            raise MalformedExpressionError("Not enough operands", exc_type="stack_underflow")
        return self.operands.pop()

    def apply(self, operator: Operator) -> None:
        rhs = self.pop_operand()
        lhs = self.pop_operand()
        self.operands.append(self.rules[operator].callable_function(lhs, rhs))

    def push_operator(self, operator: Operator) -> None:
        """
        Applies every pending operator that binds at least as tight as 'operator', then stores 'operator'
        """
        rule = self.rules[operator]
        while self.markers and isinstance(self.markers[-1], PendingOperator):
            last_priority = self.rules[self.markers[-1].operator].priority
            if rule.priority > last_priority or (rule.priority == last_priority and rule.is_right):
                break
            self.apply(self.markers.pop().operator)  # type: ignore
        self.markers.append(PendingOperator(operator))

    def finalize(self) -> None:
        while self.markers and isinstance(self.markers[-1], PendingOperator):
            self.apply(self.markers.pop().operator)  # type: ignore

    def separate_argument(self) -> None:
        self.finalize()
        if (len(self.markers) < 2 or not isinstance(self.markers[-1], OpenParen)
                or not isinstance(self.markers[-2], PendingCall)):
            raise MalformedExpressionError("Comma outside of function call", exc_type="unexpected_token")
        self.markers[-1].commas += 1

    def close_paren(self) -> None:
        self.finalize()
        if not self.markers or not isinstance(self.markers[-1], OpenParen):
            raise MalformedExpressionError("Unbalanced parenthesis in expression", exc_type="unbalanced")
        group = self.markers.pop()
        supplied = len(self.operands) - group.depth  # type: ignore

        if self.markers and isinstance(self.markers[-1], PendingCall):
            call = self.markers.pop()
            expected = group.commas + 1 if group.commas or supplied else 0  # type: ignore
            if supplied != expected:
                raise MalformedExpressionError(
                    f"Arguments of {call.name} do not match its commas", exc_type="missing_operator")  # type: ignore
            argv = self.operands[group.depth:]  # type: ignore
            del self.operands[group.depth:]  # type: ignore
            self.logger.debug(f"Calling function {call.name}({', '.join(str(arg) for arg in argv)})")  # type: ignore
            self.operands.append(call.variable.calc(argv))  # type: ignore
        elif supplied == 0:
            raise MalformedExpressionError("Empty parenthesis", exc_type="empty")
        elif supplied > 1:
            raise MalformedExpressionError("Two operands without an operator", exc_type="missing_operator")

    def open_abs(self) -> None:
        self.markers.append(OpenAbs(len(self.operands)))

    def close_abs(self) -> None:
        self.finalize()
        if not self.markers or not isinstance(self.markers[-1], OpenAbs):
            raise MalformedExpressionError("Unbalanced '|' in expression", exc_type="unbalanced")
        group = self.markers.pop()
        supplied = len(self.operands) - group.depth
        if supplied != 1:
            raise MalformedExpressionError("'| |' must enclose exactly one value",
                                           exc_type="empty" if supplied == 0 else "missing_operator")
        self.operands.append(self.operands.pop().abs())

    def result(self) -> Number:
        self.finalize()
        if self.markers:
            raise MalformedExpressionError("Unclosed group in expression", exc_type="unbalanced")
        if len(self.operands) > 1:
            raise MalformedExpressionError(
                f"Two operands without an operator: {', '.join(str(x) for x in self.operands)}",
                exc_type="missing_operator")
        return self.operands.pop() if self.operands else Number()


class ShuntingYardEngine(Engine):
    """
    Modified shunting yard algorithm: evaluates infix tokens in one pass and resolves 'name(args)' as calls
    of variables with fixed amount of arguments.
    Keeps no state between calls, one instance may be reused or shared
    :param operators: map from Operator to OperatorRule, defaults to vars.OPERATORS
    :raises ValueError: some operator has no rule
    """
    def __init__(self, operators: Mapping[Operator, OperatorRule] | None = None):
        self.operators = dict(vrs.OPERATORS if operators is None else operators)
        missing = [op.value for op in Operator if op not in self.operators]
        if missing:
            raise ValueError(f"No rules for operators: {', '.join(missing)}")
        self.logger = logging.getLogger(__name__)

    @log_exception
    def validate(self, tokens: Sequence[Token], variables: Mapping[str, Variable] | None = None) -> None:
        """
        :raises MalformedExpressionError: structural error
        :raises UndefinedVariableError: unknown identifier
        :raises ArityMismatchError: call with wrong amount of arguments
        """
        TokenValidator(tokens, vrs.DEFAULT_VARIABLES if variables is None else variables)

    @log_exception
    def evaluate(self, tokens: Sequence[Token], variables: Mapping[str, Variable] | None = None) -> Number:
        """
        Calculates value of the tokens
        :return: value of expression, Number() for empty tokens
        :raises ArithmeticDomainError: operation is undefined for its operands
        :raises MalformedExpressionError: tokens did not pass 'validate'
        """
        variables = vrs.DEFAULT_VARIABLES if variables is None else variables
        tokens = list(tokens)
        self.logger.debug(f"{tokens=}")
        state = _YardState(self.operators, self.logger)
        previous: Token | None = None
        previous_opened = False

        for i, t in enumerate(tokens):
            opened = False
            if isinstance(t, NumberToken):
                state.operands.append(t.value)
            elif isinstance(t, OperatorToken):
                state.push_operator(t.operator)
            elif isinstance(t, FactorialSign):
                state.operands.append(state.pop_operand().factorial())
            elif isinstance(t, Identifier):
                variable = variables.get(t.name)
                if variable is None:
                    raise UndefinedVariableError(f"Unknown name: '{t.name}'", name=t.name)
                if i + 1 < len(tokens) and is_bracket(tokens[i + 1], Bracket.PAREN_LEFT):
                    state.markers.append(PendingCall(t.name, variable))
                else:
                    state.operands.append(variable.calc([]))
            elif isinstance(t, Comma):
                state.separate_argument()
            elif isinstance(t, BracketToken) and t.bracket is Bracket.PAREN_LEFT:
                state.markers.append(OpenParen(len(state.operands)))
            elif isinstance(t, BracketToken) and t.bracket is Bracket.PAREN_RIGHT:
                state.close_paren()
            elif isinstance(t, BracketToken) and t.bracket is Bracket.VERTICAL_LINE:
                if vertical_line_opens(previous, previous_opened):
                    state.open_abs()
                    opened = True
                else:
                    state.close_abs()
            else:
                raise UnsupportedFeatureError(f"Unknown token: {t!r}")
            previous, previous_opened = t, opened

        result = state.result()
        self.logger.debug(f"result: {result}")
        return result
