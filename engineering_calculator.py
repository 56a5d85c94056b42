# engineering_calculator.py
# Python 3.x, PyQt5
# PEP 8 준수, 문자열은 기본 ' ' 사용

import argparse
import logging
import sys
from typing import Iterable, Optional, TextIO

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QApplication,
    QGridLayout,
    QLabel,
    QListWidget,
    QPushButton,
)

# 기본 계산기의 세션과 UI를 재사용
from calculator import (
    Calculator,
    CalculatorWindow,
    HistoryEntry,
    logger,
    setup_logger,
)


class EngineeringCalculatorWindow(CalculatorWindow):
    """공학용 계산기 UI: 함수 키/모드 전환/기록 패널/복사"""

    SCIENTIFIC_BUTTONS = [
        ['sin', 'cos', 'tan', '^'],
        ['sqrt', 'log', 'ln', '%'],
        ['exp', 'abs', '1/x', 'x^2'],
        ['(', ')', 'Copy', 'Mode'],
    ]

    FUNCTION_LABELS = {'sin', 'cos', 'tan', 'sqrt', 'log', 'ln', 'exp', 'abs', '1/x', 'x^2'}

    def _build_ui(self) -> None:
        super()._build_ui()
        self.setWindowTitle('Engineering Calculator')
        root = self.layout()

        self.mode_label = QLabel()
        root.insertWidget(0, self.mode_label)

        self.scientific_grid = QGridLayout()
        self.scientific_grid.setSpacing(6)
        self._scientific_buttons = []
        for r, row in enumerate(self.SCIENTIFIC_BUTTONS):
            for c, label in enumerate(row):
                btn = QPushButton(label)
                btn.setMinimumHeight(44)
                btn.setCursor(Qt.PointingHandCursor)
                btn.clicked.connect(lambda checked=False, ch=label: self.on_button(ch))
                self.scientific_grid.addWidget(btn, r, c)
                self._scientific_buttons.append(btn)
        root.insertLayout(3, self.scientific_grid)

        self.history_list = QListWidget()
        self.history_list.itemActivated.connect(
            lambda item: self.recall(self.history_list.row(item)))
        root.addWidget(self.history_list)

        self.resize(420, 760)

    def handle_key(self, ch: str) -> bool:
        if ch in self.FUNCTION_LABELS:
            self.engine.apply_function(ch)
        elif ch == 'Mode':
            self.engine.toggle_mode()
        elif ch == 'Copy':
            self.copy_to_clipboard()
        else:
            return super().handle_key(ch)
        return True

    def recall(self, index: int) -> None:
        self.engine.recall_from_history(index)
        self.refresh()

    def copy_to_clipboard(self) -> None:
        text = self.engine.copy_result()
        QApplication.clipboard().setText(text)
        logger.info('[복사] %s', text)

    def refresh(self) -> None:
        super().refresh()
        # 모드는 표시 전용: 공학 키는 항상 보인다
        self.mode_label.setText(self.engine.mode.value)

        self.history_list.clear()
        self.history_list.addItems([_history_text(e) for e in self.engine.history])


def _history_text(entry: HistoryEntry) -> str:
    return f'{entry.timestamp:%H:%M:%S}  {entry.expression} = {entry.result}'


def run_headless(expressions: Iterable[str], out: Optional[TextIO] = None,
                 err: Optional[TextIO] = None) -> int:
    """창 없이 식을 계산한다. 하나라도 실패하면 1 반환"""
    out = out or sys.stdout
    err = err or sys.stderr
    engine = Calculator()
    status = 0
    for expr in expressions:
        engine.load_expression(expr)
        engine.calculate()
        if engine.error:
            print(f'{expr} : {engine.error}', file=err)
            status = 1
        else:
            print(f'{expr} = {engine.current_result}', file=out)
    return status


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='사칙연산/거듭제곱/나머지 식 계산기(PyQt5)'
    )
    parser.add_argument('-e', '--eval', dest='expressions', action='append', default=[],
                        metavar='EXPR', help='창 없이 식을 계산해 출력(여러 번 지정 가능)')
    parser.add_argument('--basic', action='store_true',
                        help='공학용 대신 기본 계산기 창을 연다')
    parser.add_argument('--mode', choices=('basic', 'scientific'), default='basic',
                        help='시작 모드(기본값: basic)')
    parser.add_argument('--log', default='calculator.log',
                        help='로그 파일 경로(기본값: calculator.log)')
    parser.add_argument('--log-level', default='INFO',
                        choices=('DEBUG', 'INFO', 'WARNING', 'ERROR'),
                        help='로그 레벨(기본값: INFO)')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logger(args.log, getattr(logging, args.log_level))

    if args.expressions:
        return run_headless(args.expressions)

    engine = Calculator()
    if args.mode == 'scientific':
        engine.toggle_mode()

    app = QApplication(sys.argv[:1])
    window_cls = CalculatorWindow if args.basic else EngineeringCalculatorWindow
    w = window_cls(engine)
    w.show()
    return app.exec()


if __name__ == '__main__':
    sys.exit(main())
