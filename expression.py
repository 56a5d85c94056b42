# expression.py
# Python 3.x, 표준 라이브러리만 사용
# PEP 8 준수, 문자열은 기본적으로 ' ' 사용

#             +------------+     +------------+     +-----------------+
# [input] >>> | tokenize() | >>> | evaluate() | >>> | format_result() | >>> [display]
#          |  +------------+  |  +------------+  |  +-----------------+  |
#        string         list of tokens        float                 string

import logging
import math
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

logger = logging.getLogger('calculator.expression')

OPERATOR_CHARS = '+-*/^%'


class CalcError(ValueError):
    """계산 오류의 공통 부모"""


class LexError(CalcError):
    pass


class ParseError(CalcError):
    pass


class CalcArithmeticError(CalcError, ArithmeticError):
    pass


class TokenType(Enum):
    NUMBER = 'number'
    PLUS = '+'
    MINUS = '-'
    MULTIPLY = '*'
    DIVIDE = '/'
    POWER = '^'
    MODULO = '%'
    LPAREN = '('
    RPAREN = ')'


class Token(NamedTuple):
    type: TokenType
    value: Optional[float] = None

    def __str__(self) -> str:
        if self.type is TokenType.NUMBER:
            return repr(self.value)
        return self.type.value


# 숫자 이외의 한 글자 토큰
_SYMBOLS = {t.value: t for t in TokenType if t is not TokenType.NUMBER}


def _to_number(literal: str) -> Token:
    try:
        return Token(TokenType.NUMBER, float(literal))
    except ValueError:
        raise ParseError(f'Invalid number: {literal}') from None


def tokenize(text: str) -> List[Token]:
    """문자열을 토큰 리스트로 변환한다(원문 순서 유지)."""
    tokens = []
    num_buf = ''

    for ch in text:
        if ch.isdigit() and ch.isascii() or ch == '.':
            num_buf += ch
        elif ch in _SYMBOLS:
            if num_buf:
                tokens.append(_to_number(num_buf))
                num_buf = ''
            tokens.append(Token(_SYMBOLS[ch]))
        elif ch.isspace():
            continue
        else:
            raise LexError(f'Invalid character: {ch}')

    if num_buf:
        tokens.append(_to_number(num_buf))

    return tokens


# IEEE-754 동작 보정: math 모듈은 오버플로/정의역 오류에서 예외를 던진다
def ieee_pow(base: float, exponent: float) -> float:
    odd_integer = exponent.is_integer() and exponent % 2 == 1
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and odd_integer:
            return -math.inf
        return math.inf
    except ValueError:
        if base == 0:
            # 0^음수
            return math.copysign(math.inf, base) if odd_integer else math.inf
        # 음수^분수
        return math.nan


def ieee_fmod(left: float, right: float) -> float:
    try:
        return math.fmod(left, right)
    except ValueError:
        # inf % x
        return math.nan


def _parse_expression(tokens: List[Token], pos: int) -> Tuple[float, int]:
    left, pos = _parse_term(tokens, pos)

    while pos < len(tokens):
        kind = tokens[pos].type
        if kind is TokenType.PLUS:
            right, pos = _parse_term(tokens, pos + 1)
            left += right
        elif kind is TokenType.MINUS:
            right, pos = _parse_term(tokens, pos + 1)
            left -= right
        else:
            break

    return left, pos


def _parse_term(tokens: List[Token], pos: int) -> Tuple[float, int]:
    left, pos = _parse_factor(tokens, pos)

    while pos < len(tokens):
        kind = tokens[pos].type
        if kind is TokenType.MULTIPLY:
            right, pos = _parse_factor(tokens, pos + 1)
            left *= right
        elif kind is TokenType.DIVIDE:
            right, pos = _parse_factor(tokens, pos + 1)
            if right == 0:
                raise CalcArithmeticError('Division by zero')
            left /= right
        elif kind is TokenType.MODULO:
            right, pos = _parse_factor(tokens, pos + 1)
            if right == 0:
                raise CalcArithmeticError('Modulo by zero')
            left = ieee_fmod(left, right)
        else:
            break

    return left, pos


def _parse_factor(tokens: List[Token], pos: int) -> Tuple[float, int]:
    # 왼쪽 결합: 2^3^2 == (2^3)^2
    base, pos = _parse_primary(tokens, pos)

    while pos < len(tokens) and tokens[pos].type is TokenType.POWER:
        exponent, pos = _parse_primary(tokens, pos + 1)
        base = ieee_pow(base, exponent)

    return base, pos


def _parse_primary(tokens: List[Token], pos: int) -> Tuple[float, int]:
    if pos >= len(tokens):
        raise ParseError('Unexpected end of expression')

    token = tokens[pos]
    if token.type is TokenType.NUMBER:
        return token.value, pos + 1
    if token.type is TokenType.MINUS:
        # 단항 마이너스는 바로 뒤 primary 하나에만 붙는다: -2^2 == 4
        value, pos = _parse_primary(tokens, pos + 1)
        return -value, pos
    if token.type is TokenType.LPAREN:
        value, pos = _parse_expression(tokens, pos + 1)
        if pos >= len(tokens) or tokens[pos].type is not TokenType.RPAREN:
            raise ParseError('Missing closing parenthesis')
        return value, pos + 1

    raise ParseError(f'Unexpected token: {token}')


def evaluate_tokens(tokens: List[Token]) -> float:
    """토큰을 한 번에 파싱하며 계산한다. 최상위 식 뒤의 남은 토큰은 무시한다."""
    if not tokens:
        return 0.0
    try:
        value, pos = _parse_expression(tokens, 0)
    except RecursionError:
        raise ParseError('Expression nested too deeply') from None
    if pos < len(tokens):
        logger.debug('[무시] 남은 토큰 %d개: %s', len(tokens) - pos,
                     ' '.join(str(t) for t in tokens[pos:]))
    return value


def evaluate(text: str) -> float:
    return evaluate_tokens(tokenize(text.strip()))


def format_result(value: float) -> str:
    """소수점 10자리로 맞춘 뒤 불필요한 0/소수점 제거"""
    if math.isinf(value):
        return 'Infinity'
    if math.isnan(value):
        return 'NaN'

    s = f'{value:.10f}'.rstrip('0').rstrip('.')
    if s == '-0':
        s = '0'
    return s
