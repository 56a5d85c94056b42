# calculator.py
# Python 3.x, PyQt5
# PEP 8 준수, 문자열은 기본적으로 ' ' 사용

import logging
import math
import re
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QFont
from PyQt5.QtWidgets import (
    QApplication,
    QWidget,
    QGridLayout,
    QVBoxLayout,
    QPushButton,
    QLineEdit,
)

from expression import (
    OPERATOR_CHARS,
    CalcArithmeticError,
    CalcError,
    evaluate,
    format_result,
)

logger = logging.getLogger('calculator')

MAX_EXPRESSION_LENGTH = 256  # 호스트 입력 길이 제한(재귀 깊이 보호)
DIGITS = '0123456789'
_NUMBER_RE = re.compile(r'-?[0-9]+(?:\.[0-9]+)?')


def setup_logger(log_path='calculator.log', level=logging.INFO):
    """콘솔과 파일(UTF-8)로 동시에 로그를 남기는 로거를 설정한다."""
    if logger.handlers:
        return logger

    logger.setLevel(level)
    formatter = logging.Formatter(
        fmt='%(asctime)s %(levelname)s %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # 콘솔
    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(formatter)
    logger.addHandler(sh)

    # 파일(UTF-8)
    if log_path:
        fh = logging.FileHandler(log_path, mode='a', encoding='utf-8')
        fh.setLevel(level)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger


class CalculatorMode(Enum):
    BASIC = 'Basic'
    SCIENTIFIC = 'Scientific'


@dataclass(frozen=True)
class HistoryEntry:
    expression: str
    result: str
    timestamp: datetime


def _reciprocal(x: float) -> float:
    if x == 0:
        raise CalcArithmeticError('Division by zero')
    return 1.0 / x


def _degrees(fn: Callable[[float], float]) -> Callable[[float], float]:
    def wrapper(x: float) -> float:
        try:
            return fn(math.radians(x))
        except ValueError:
            # sin(inf) 등
            return math.nan
    return wrapper


def _sqrt(x: float) -> float:
    return math.sqrt(x) if x >= 0 else math.nan


def _log(x: float, fn: Callable[[float], float]) -> float:
    if x == 0:
        return -math.inf
    if x < 0:
        return math.nan
    return fn(x)


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def _square(x: float) -> float:
    try:
        return math.pow(x, 2)
    except OverflowError:
        return math.inf


# 단항 함수 표: 삼각함수는 도(degree) 단위 입력
FUNCTIONS: Dict[str, Callable[[float], float]] = {
    'sin': _degrees(math.sin),
    'cos': _degrees(math.cos),
    'tan': _degrees(math.tan),
    'sqrt': _sqrt,
    'log': lambda x: _log(x, math.log10),
    'ln': lambda x: _log(x, math.log),
    'exp': _exp,
    'abs': abs,
    '1/x': _reciprocal,
    'x^2': _square,
}


def _parse_number(text: str) -> Optional[float]:
    # format_result 출력만 숫자로 본다('+5', '1e5', '1_0' 등은 거부)
    if text in ('Infinity', 'NaN') or _NUMBER_RE.fullmatch(text):
        return float(text)
    return None


class Calculator:
    """연산 세션: 입력 버퍼/실시간 미리보기/기록/연쇄 계산"""

    def __init__(self, history_limit: Optional[int] = None) -> None:
        if history_limit is not None and history_limit < 1:
            raise ValueError('history_limit must be positive')
        self._history_limit = history_limit
        self._history: List[HistoryEntry] = []
        self._mode = CalculatorMode.BASIC
        self.clear()

    # 조회용 속성
    @property
    def current_expression(self) -> str:
        return self._expression

    @property
    def current_result(self) -> str:
        return self._result

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def mode(self) -> CalculatorMode:
        return self._mode

    @property
    def history(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._history)

    def copy_result(self) -> str:
        return self._result

    # 편집
    def append_digit(self, d: str) -> None:
        if len(d) != 1 or d not in DIGITS:
            raise ValueError(f'not a digit: {d!r}')
        self._error = None
        self._expression += d
        self._update_preview()

    def append_operator(self, op: str) -> None:
        if len(op) != 1 or op not in OPERATOR_CHARS:
            raise ValueError(f'unknown operator: {op!r}')
        if not self._expression:
            return
        self._error = None
        if self._expression[-1] in OPERATOR_CHARS:
            # 5++ 방지: 직전 연산자 교체
            self._expression = self._expression[:-1]
        self._expression += op
        self._update_preview()

    def append_decimal(self) -> None:
        segment = self._trailing_segment()
        if '.' in segment:
            return
        self._error = None
        self._expression += '0.' if not segment else '.'
        self._update_preview()

    def append_parenthesis(self, p: str) -> None:
        if p not in ('(', ')'):
            raise ValueError(f'not a parenthesis: {p!r}')
        self._error = None
        self._expression += p
        self._update_preview()

    def load_expression(self, text: str) -> None:
        """버퍼를 식 전체로 교체한다(명령행/붙여넣기 입력)."""
        self._error = None
        self._expression = text.strip()
        self._update_preview()

    def backspace(self) -> None:
        if not self._expression:
            return
        self._error = None
        self._expression = self._expression[:-1]
        self._update_preview()

    def clear(self) -> None:
        self._expression = ''
        self._result = '0'
        self._error = None

    def clear_all(self) -> None:
        self.clear()
        self._history.clear()

    def toggle_mode(self) -> None:
        if self._mode is CalculatorMode.BASIC:
            self._mode = CalculatorMode.SCIENTIFIC
        else:
            self._mode = CalculatorMode.BASIC

    # 확정 계산
    def calculate(self) -> None:
        if not self._expression:
            return
        try:
            value = evaluate(self._expression)
        except CalcError as e:
            self._set_error(e)
            return
        self._commit(self._expression, format_result(value))

    def apply_function(self, name: str) -> None:
        func = FUNCTIONS.get(name)
        x = _parse_number(self._result)
        if func is None or x is None:
            return
        try:
            value = func(x)
        except CalcError as e:
            self._set_error(e)
            return
        self._commit(f'{name}({format_result(x)})', format_result(value))

    def recall_from_history(self, index: int) -> None:
        if not 0 <= index < len(self._history):
            return
        result = self._history[index].result
        self._expression = result
        self._result = result
        self._error = None

    # 내부 유틸
    def _trailing_segment(self) -> str:
        # 마지막 연산자/괄호 뒤의 숫자 부분
        for i in range(len(self._expression) - 1, -1, -1):
            if self._expression[i] in OPERATOR_CHARS + '()':
                return self._expression[i + 1:]
        return self._expression

    def _update_preview(self) -> None:
        if not self._expression:
            self._result = '0'
            return
        try:
            self._result = format_result(evaluate(self._expression))
        except CalcError as e:
            # 입력 중에는 오류를 보이지 않는다
            logger.debug('[미리보기] %r: %s', self._expression, e)
            self._result = self._expression

    def _commit(self, expression: str, result: str) -> None:
        self._history.append(HistoryEntry(expression, result, datetime.now()))
        if self._history_limit is not None and len(self._history) > self._history_limit:
            del self._history[:len(self._history) - self._history_limit]
        self._result = result
        self._expression = result
        self._error = None
        logger.info('[계산] %s = %s', expression, result)

    def _set_error(self, exc: CalcError) -> None:
        self._error = f'Error: {exc}'
        self._result = 'Error'
        logger.warning('[오류] %r: %s', self._expression, exc)


class CalculatorWindow(QWidget):
    """PyQt5 UI: 버튼 → Calculator 세션 연결"""

    BUTTONS = [
        ['AC', 'C', '⌫', '÷'],
        ['7',  '8', '9', '×'],
        ['4',  '5', '6', '−'],
        ['1',  '2', '3', '+'],
        ['0',  '.', '='],
    ]

    # UI 기호 → 내부 기호
    OPERATOR_LABELS = {'+': '+', '−': '-', '×': '*', '÷': '/', '^': '^', '%': '%'}

    def __init__(self, engine: Optional[Calculator] = None) -> None:
        super().__init__()
        self.engine = engine or Calculator()
        self._build_ui()
        self.refresh()

    def _build_ui(self) -> None:
        self.setWindowTitle('Calculator')
        root = QVBoxLayout()
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(8)
        self.setLayout(root)

        self.expression_display = QLineEdit()
        self.expression_display.setReadOnly(True)
        self.expression_display.setAlignment(Qt.AlignRight)
        root.addWidget(self.expression_display)

        self.display = QLineEdit()
        self.display.setReadOnly(True)
        self.display.setAlignment(Qt.AlignRight)
        font = QFont(self.display.font())
        font.setPointSize(28)
        self.display.setFont(font)
        root.addWidget(self.display)

        grid = QGridLayout()
        grid.setSpacing(6)
        root.addLayout(grid)
        self._add_buttons(grid, self.BUTTONS)

        self.resize(360, 520)

    def _add_buttons(self, grid: QGridLayout, rows: List[List[str]], first_row: int = 0) -> None:
        for r, row in enumerate(rows, start=first_row):
            for c, label in enumerate(row):
                btn = QPushButton(label)
                btn.setMinimumHeight(52)
                btn.setCursor(Qt.PointingHandCursor)
                # clicked는 checked(bool) 인자를 내보내므로 첫 인자를 흡수하도록 작성
                btn.clicked.connect(lambda checked=False, ch=label: self.on_button(ch))

                if label == '0':
                    grid.addWidget(btn, r, 0, 1, 2)
                elif label in ('.', '=') and len(row) == 3:
                    grid.addWidget(btn, r, c + 1)
                else:
                    grid.addWidget(btn, r, c)

    def on_button(self, ch: str) -> None:
        self.handle_key(ch)
        self.refresh()

    def handle_key(self, ch: str) -> bool:
        """공통 키 처리. 처리했으면 True"""
        if ch == 'AC':
            self.engine.clear_all()
        elif ch == 'C':
            self.engine.clear()
        elif ch == '⌫':
            self.engine.backspace()
        elif ch == '=':
            self.engine.calculate()
        elif ch in ('(', ')', '.') or ch in DIGITS or ch in self.OPERATOR_LABELS:
            if len(self.engine.current_expression) >= MAX_EXPRESSION_LENGTH:
                logger.warning('[입력 제한] 최대 %d자', MAX_EXPRESSION_LENGTH)
            elif ch in ('(', ')'):
                self.engine.append_parenthesis(ch)
            elif ch == '.':
                self.engine.append_decimal()
            elif ch in DIGITS:
                self.engine.append_digit(ch)
            else:
                self.engine.append_operator(self.OPERATOR_LABELS[ch])
        else:
            return False
        return True

    def keyPressEvent(self, event) -> None:
        key = event.key()
        if key in (Qt.Key_Return, Qt.Key_Enter):
            ch = '='
        elif key == Qt.Key_Backspace:
            ch = '⌫'
        elif key == Qt.Key_Escape:
            ch = 'C'
        else:
            ch = event.text()
            # 키보드 기호 → UI 기호
            ch = {'-': '−', '*': '×', '/': '÷'}.get(ch, ch)
        if len(ch) == 1 and self.handle_key(ch):
            self.refresh()
        else:
            super().keyPressEvent(event)

    def refresh(self) -> None:
        self.expression_display.setText(self.engine.current_expression)
        self.display.setText(self.engine.current_result)
        self.display.setToolTip(self.engine.error or '')


def main() -> None:
    setup_logger()
    app = QApplication(sys.argv)
    w = CalculatorWindow()
    w.show()
    sys.exit(app.exec())


if __name__ == '__main__':
    main()
