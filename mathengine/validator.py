from typing import Mapping, Sequence

from mathengine.extra.exceptions import (ArityMismatchError, MalformedExpressionError, UndefinedVariableError,
                                         UnsupportedFeatureError)
from mathengine.extra.types import (TOKEN_TYPES, Bracket, BracketToken, Comma, FactorialSign, Identifier,
                                    NumberToken, OperatorToken, Token, Variable)
from mathengine.extra.utils import CallAllMethods


def is_bracket(token: Token | None, bracket: Bracket) -> bool:
    return isinstance(token, BracketToken) and token.bracket is bracket


def vertical_line_opens(previous: Token | None, previous_opened: bool) -> bool:
    """
    Decides whether '|' opens an absolute value group: it does when an operand is expected
    :param previous: token before '|' (None at the start)
    :param previous_opened: whether 'previous' was itself an opening '|'
    """
    if previous is None or isinstance(previous, (OperatorToken, Comma)):
        return True
    if is_bracket(previous, Bracket.PAREN_LEFT):
        return True
    if is_bracket(previous, Bracket.VERTICAL_LINE):
        return previous_opened
    return False


def _describe(token: Token | None) -> str:
    if token is None:
        return "end of expression"
    if isinstance(token, NumberToken):
        return str(token.value)
    if isinstance(token, OperatorToken):
        return token.operator.value
    if isinstance(token, BracketToken):
        return token.bracket.value
    if isinstance(token, Identifier):
        return token.name
    if isinstance(token, FactorialSign):
        return "!"
    return ","


class _Scope:
    def __init__(self, kind: str, variable: Variable | None = None, name: str = ""):
        self.kind = kind
        self.variable = variable
        self.name = name
        self.commas = 0


class TokenValidator(CallAllMethods):
    """
    Structural validator of a token sequence. Never evaluates anything
    :param tokens: tokens to validate
    :param variables: map from name to Variable
    :raises UnsupportedFeatureError: unknown token object
    :raises MalformedExpressionError: unbalanced brackets, missing operand or operator, misplaced comma
    :raises UndefinedVariableError: identifier is not bound in 'variables'
    :raises ArityMismatchError: call supplies a different amount of arguments than 'argc'
    """
    def __init__(self, tokens: Sequence[Token], variables: Mapping[str, Variable]):
        self.tokens = list(tokens)
        self.variables = variables

        self.call_all_methods()

    def _check_tokens(self) -> None:
        for t in self.tokens:
            if not isinstance(t, TOKEN_TYPES):
                raise UnsupportedFeatureError(f"Unknown token: {t!r}")

    def _check_brackets(self) -> None:
        """
        Checks that parentheses are balanced and vertical lines are paired inside the same group
        :raises MalformedExpressionError: otherwise
        """
        stack: list[Bracket] = []
        previous: Token | None = None
        previous_opened = False
        for t in self.tokens:
            opened = False
            if is_bracket(t, Bracket.PAREN_LEFT):
                stack.append(Bracket.PAREN_LEFT)
            elif is_bracket(t, Bracket.PAREN_RIGHT):
                if not stack or stack.pop() is not Bracket.PAREN_LEFT:
                    raise MalformedExpressionError("Unbalanced parenthesis in expression", exc_type="unbalanced")
            elif is_bracket(t, Bracket.VERTICAL_LINE):
                if vertical_line_opens(previous, previous_opened):
                    stack.append(Bracket.VERTICAL_LINE)
                    opened = True
                elif not stack or stack.pop() is not Bracket.VERTICAL_LINE:
                    raise MalformedExpressionError("Unbalanced '|' in expression", exc_type="unbalanced")
            previous, previous_opened = t, opened
        if stack:
            raise MalformedExpressionError(f"Unbalanced '{stack[-1].value}' in expression", exc_type="unbalanced")

    def _check_names(self) -> None:
        for t in self.tokens:
            if isinstance(t, Identifier) and t.name not in self.variables:
                raise UndefinedVariableError(f"Unknown name: '{t.name}'", name=t.name)

    def _check_sequence(self) -> None:
        """
        Checks that operands and operators alternate and every call gets 'argc' arguments
        """
        expect_operand = True
        scopes: list[_Scope] = []
        call: _Scope | None = None
        previous: Token | None = None
        previous_opened = False

        for i, t in enumerate(self.tokens):
            following = self.tokens[i + 1] if i + 1 < len(self.tokens) else None
            opened = False

            if isinstance(t, NumberToken):
                if not expect_operand:
                    raise MalformedExpressionError(
                        f"Two operands without an operator: '{_describe(previous)}' '{t.value}'",
                        exc_type="missing_operator")
                expect_operand = False

            elif isinstance(t, Identifier):
                if not expect_operand:
                    raise MalformedExpressionError(
                        f"Two operands without an operator: '{_describe(previous)}' '{t.name}'",
                        exc_type="missing_operator")
                variable = self.variables[t.name]
                if is_bracket(following, Bracket.PAREN_LEFT):
                    call = _Scope("call", variable, t.name)
                elif variable.argc != 0:
                    raise ArityMismatchError(
                        f"{t.name} requires {variable.argc} arguments but 0 were given",
                        expected=variable.argc, given=0)
                expect_operand = False

            elif isinstance(t, OperatorToken):
                if expect_operand:
                    raise MalformedExpressionError(
                        f"Operation '{t.operator.value}' has no first operand", exc_type="missing_operand")
                expect_operand = True

            elif isinstance(t, FactorialSign):
                if expect_operand:
                    raise MalformedExpressionError("Operation '!' has no operand", exc_type="missing_operand")

            elif isinstance(t, Comma):
                if not scopes or scopes[-1].kind != "call":
                    raise MalformedExpressionError("Comma outside of function call", exc_type="unexpected_token")
                if expect_operand:
                    raise MalformedExpressionError(
                        f"Empty argument in call of {scopes[-1].name}", exc_type="missing_operand")
                scopes[-1].commas += 1
                expect_operand = True

            elif is_bracket(t, Bracket.PAREN_LEFT):
                if call is not None:
                    scopes.append(call)
                    call = None
                elif not expect_operand:
                    raise MalformedExpressionError(
                        f"Missed operation before '(' after '{_describe(previous)}'", exc_type="missing_operator")
                else:
                    scopes.append(_Scope("group"))
                expect_operand = True

            elif is_bracket(t, Bracket.PAREN_RIGHT):
                scope = scopes.pop()
                empty = is_bracket(previous, Bracket.PAREN_LEFT)
                if scope.kind == "call":
                    if expect_operand and not empty:
                        raise MalformedExpressionError(
                            f"Unfinished argument in call of {scope.name}", exc_type="missing_operand")
                    given = 0 if empty else scope.commas + 1
                    if given != scope.variable.argc:  # type: ignore
                        raise ArityMismatchError(
                            f"{scope.name} requires {scope.variable.argc} arguments but {given} were given",  # type: ignore
                            expected=scope.variable.argc, given=given)  # type: ignore
                elif empty:
                    raise MalformedExpressionError("Empty parenthesis", exc_type="empty")
                elif expect_operand:
                    raise MalformedExpressionError(
                        f"Unfinished line: operation '{_describe(previous)}' has no second operand",
                        exc_type="missing_operand")
                expect_operand = False

            elif is_bracket(t, Bracket.VERTICAL_LINE):
                if vertical_line_opens(previous, previous_opened):
                    scopes.append(_Scope("abs"))
                    opened = True
                else:
                    scopes.pop()
                    if expect_operand:
                        raise MalformedExpressionError(
                            f"Unfinished line: operation '{_describe(previous)}' has no second operand",
                            exc_type="missing_operand")
                    expect_operand = False

            previous, previous_opened = t, opened

        if self.tokens and expect_operand:
            raise MalformedExpressionError(
                f"Unfinished line: operation '{_describe(previous)}' has no second operand",
                exc_type="missing_operand")
