"""Translate keypad buttons and keyboard keys into session actions."""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional

from scicalc.editor import CalculatorSession

BUTTON_KINDS = (
    "digit", "operator", "paren", "const", "func", "dot", "postfix",
    "percent", "sign", "backspace", "clear", "memory", "equals", "mode",
)

# keyboard characters that differ from their display symbol
_KEY_OPERATORS = {"+": "+", "-": "-", "*": "×", "/": "÷", "^": "^"}

# words understood by feed(), mapped to (button kind, value)
NAMED_BUTTONS: Dict[str, tuple] = {
    "sin": ("func", "sin("), "cos": ("func", "cos("), "tan": ("func", "tan("),
    "ln": ("func", "ln("), "log": ("func", "log("),
    "sqrt": ("func", "√("), "√": ("func", "√("),
    "pi": ("const", "π"), "π": ("const", "π"), "e": ("const", "e"),
    "!": ("postfix", None),
    "MC": ("memory", "MC"), "MR": ("memory", "MR"), "M+": ("memory", "M+"), "M-": ("memory", "M-"),
    "DEG": ("mode", None), "RAD": ("mode", None), "mode": ("mode", None),
    "AC": ("clear", None), "C": ("clear", None),
    "±": ("sign", None), "+/-": ("sign", None),
    "%": ("percent", None), "=": ("equals", None),
    "×": ("operator", "×"), "÷": ("operator", "÷"),
}

_WORD_RE = re.compile(r"M[CR+\-]|[A-Za-z]+|\+/-|.", re.DOTALL)


def press_button(session: CalculatorSession, kind: str, value: Optional[str] = None) -> None:
    """Apply one keypad button press."""
    if kind in ("digit", "operator", "paren", "const", "func"):
        if not value: raise ValueError(f"{kind} button needs a value")
        session.append(value)
    elif kind == "dot": session.append(".")
    elif kind == "postfix": session.append_factorial()
    elif kind == "percent": session.percent()
    elif kind == "sign": session.toggle_sign()
    elif kind == "backspace": session.backspace()
    elif kind == "clear": session.clear()
    elif kind == "memory":
        if not value: raise ValueError("memory button needs an operation")
        session.memory_operation(value)
    elif kind == "equals": session.evaluate()
    elif kind == "mode": session.toggle_angle_mode()
    else:
        raise ValueError(f"unknown button kind: {kind!r}")


def _key_action(session: CalculatorSession, key: str) -> Optional[Callable[[], object]]:
    if len(key) == 1 and key.isdigit(): return lambda: session.append(key)
    if key == ".": return lambda: session.append(".")
    if key in _KEY_OPERATORS: return lambda: session.append(_KEY_OPERATORS[key])
    if key in ("(", ")"): return lambda: session.append(key)
    if key in ("Enter", "="): return session.evaluate
    if key == "Backspace": return session.backspace
    if key == "Delete": return session.clear
    if key == "%": return session.percent
    if key == "_": return session.toggle_sign  # Shift + '-' on most layouts
    return None


def press_key(session: CalculatorSession, key: str) -> bool:
    """Apply a keyboard key; returns False for keys the calculator ignores."""
    action = _key_action(session, key)
    if action is None: return False
    action()
    return True


def tokenize(text: str) -> List[str]:
    words = []
    for m in _WORD_RE.finditer(text):
        w = m.group(0)
        if w.isspace(): continue
        if w.isalpha() and w not in NAMED_BUTTONS and w.upper() in NAMED_BUTTONS:
            w = w.upper()
        words.append(w)
    return words


def feed(session: CalculatorSession, text: str) -> List[str]:
    """Feed a line of terminal input; returns the words that were ignored."""
    ignored = []
    for word in tokenize(text):
        if word in NAMED_BUTTONS:
            kind, value = NAMED_BUTTONS[word]
            press_button(session, kind, value)
        elif not press_key(session, word):
            ignored.append(word)
    return ignored
