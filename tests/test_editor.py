"""Tests for the expression editor session."""

import random

import pytest

from scicalc.editor import OPERATORS, CalculatorSession, trailing_number
from scicalc.settings import AngleMode, Settings


# --- appending numbers and operators ---

def test_digits_form_one_number(type_tokens):
    assert type_tokens("1", "2", "3") == "123"


def test_operator_rejected_on_empty(session):
    for op in ("+", "×", "÷", "^"):
        session.append(op)
    assert session.expression == ""


def test_unary_minus_allowed_on_empty(session):
    session.append("-")
    assert session.expression == "-"


def test_operator_replaces_operator(type_tokens):
    assert type_tokens("5", "+", "×") == "5×"


def test_unary_minus_after_operator(type_tokens):
    assert type_tokens("5", "×", "-") == "5×-"


def test_second_unary_minus_ignored(type_tokens):
    assert type_tokens("5", "×", "-", "-") == "5×-"


def test_operator_after_unary_minus_replaces_both(type_tokens):
    assert type_tokens("5", "×", "-", "+") == "5+"


def test_minus_after_minus(type_tokens):
    assert type_tokens("5", "-", "-") == "5--"


def test_only_minus_after_open_paren(type_tokens):
    assert type_tokens("(", "+") == "("
    assert type_tokens("-") == "(-"


def test_unsupported_token(session):
    with pytest.raises(ValueError):
        session.append("x")


def test_no_adjacent_binary_operators():
    rng = random.Random(1234)
    tokens = list("0123456789") + list(OPERATORS)
    for _ in range(200):
        session = CalculatorSession()
        for _ in range(30):
            session.append(rng.choice(tokens))
        expr = session.expression
        for prev, cur in zip(expr, expr[1:]):
            if prev in OPERATORS and cur in OPERATORS:
                assert cur == "-", expr


# --- decimal point ---

def test_second_point_rejected(type_tokens):
    assert type_tokens("1", ".", "5", ".") == "1.5"


def test_point_right_after_point_rejected(type_tokens):
    assert type_tokens("1", ".", ".") == "1."


def test_point_allowed_in_next_number(type_tokens):
    assert type_tokens("1", ".", "5", "+", "2", ".") == "1.5+2."


# --- implicit multiplication ---

@pytest.mark.parametrize("tokens,expected", [
    (("2", "("), "2×("),
    (("(", "1", ")", "3"), "(1)×3"),
    (("(", "1", ")", "("), "(1)×("),
    (("2", "π"), "2×π"),
    (("π", "2"), "π×2"),
    (("e", "π"), "e×π"),
    (("5", "sin("), "5×sin("),
    (("3", "!", "2"), "3!×2"),
    (("2", "√("), "2×√("),
])
def test_implicit_multiplication(type_tokens, tokens, expected):
    assert type_tokens(*tokens) == expected


def test_no_implicit_multiplication_after_operator(type_tokens):
    assert type_tokens("2", "+", "(") == "2+("


# --- backspace and clear ---

def test_backspace_single_char(type_tokens, session):
    type_tokens("1", "2")
    session.backspace()
    assert session.expression == "1"


@pytest.mark.parametrize("prefix", ["sin(", "cos(", "tan(", "ln(", "log(", "√("])
def test_backspace_removes_function_prefix(type_tokens, session, prefix):
    type_tokens("2", "+", prefix)
    session.backspace()
    assert session.expression == "2+"


def test_backspace_on_empty(session):
    session.backspace()
    assert session.expression == ""


def test_clear(type_tokens, session):
    type_tokens("1", "+", "2")
    session.evaluate()
    session.clear()
    assert session.expression == ""
    assert session.last_result is None
    assert session.display.result_text == "0"


# --- sign and percent ---

def test_trailing_number():
    assert trailing_number("3+42") == (2, "42")
    assert trailing_number("1.5") == (0, "1.5")
    assert trailing_number("sin(") == (-1, "")


def test_toggle_sign(type_tokens, session):
    type_tokens("3", "+", "4", "2")
    session.toggle_sign()
    assert session.expression == "3+(-42)"


def test_toggle_sign_decimal(type_tokens, session):
    type_tokens("1", ".", "2", "5")
    session.toggle_sign()
    assert session.expression == "(-1.25)"


def test_percent(type_tokens, session):
    type_tokens("3", "+", "4", "2")
    session.percent()
    assert session.expression == "3+(42/100)"


def test_sign_and_percent_without_number(type_tokens, session):
    session.toggle_sign()
    session.percent()
    assert session.expression == ""
    type_tokens("π")
    session.toggle_sign()
    assert session.expression == "π"


# --- factorial ---

def test_factorial_after_number_and_group(type_tokens):
    assert type_tokens("5", "!") == "5!"
    assert type_tokens("!") == "5!!"


def test_factorial_after_group(type_tokens):
    assert type_tokens("(", "3", "+", "2", ")", "!") == "(3+2)!"


def test_factorial_rejected(type_tokens, session):
    session.append_factorial()
    assert session.expression == ""
    assert type_tokens("5", "+", "!") == "5+"


# --- evaluation and display ---

def test_display_empty(session):
    assert session.display.expression_text == ""
    assert session.display.result_text == "0"


def test_display_mid_expression(type_tokens, session):
    type_tokens("1", "+")
    assert session.display.result_text == ""


def test_evaluate(type_tokens, session):
    type_tokens("3", "+", "4", "×", "(", "2", "-", "1", ")")
    result = session.evaluate()
    assert result.ok
    assert session.display.result_text == "7"
    assert session.display.expression_text == "7"
    assert session.last_result == 7


def test_evaluate_empty_is_noop(session):
    assert session.evaluate() is None
    assert session.display.result_text == "0"


def test_failed_evaluation_keeps_expression(type_tokens, session):
    type_tokens("1", "÷", "0")
    result = session.evaluate()
    assert not result.ok
    assert session.expression == "1÷0"
    assert session.display.result_text == "Error"
    assert session.last_result is None


def test_edit_after_error_clears_it(type_tokens, session):
    type_tokens("1", "÷", "0")
    session.evaluate()
    session.backspace()
    assert session.display.result_text == ""


def test_edit_clears_last_result(type_tokens, session):
    type_tokens("2", "+", "5")
    session.evaluate()
    type_tokens("+")
    assert session.last_result is None
    assert session.display.result_text == ""


def test_rejected_edit_keeps_last_result(type_tokens, session):
    type_tokens("1", "÷", "4")
    session.evaluate()
    type_tokens(".")
    assert session.display.result_text == "0.25"


def test_chaining(type_tokens, session):
    type_tokens("2", "+", "5")
    session.evaluate()
    type_tokens("×", "3")
    session.evaluate()
    assert session.display.result_text == "21"


def test_reevaluating_result_is_idempotent(type_tokens, session):
    type_tokens("1", "÷", "3")
    session.evaluate()
    first = session.last_result
    assert session.expression == "0.333333333333"
    session.evaluate()
    assert session.last_result == first
    assert session.expression == "0.333333333333"


def test_angle_mode_toggle(type_tokens, session):
    assert session.angle_mode is AngleMode.DEG
    type_tokens("sin(", "3", "0", ")")
    session.evaluate()
    assert session.last_result == pytest.approx(0.5)

    assert session.toggle_angle_mode() is AngleMode.RAD
    session.clear()
    type_tokens("sin(", "π", "÷", "2", ")")
    session.evaluate()
    assert session.last_result == pytest.approx(1.0)
    assert session.display.angle_mode is AngleMode.RAD


def test_session_with_radians():
    session = CalculatorSession(Settings(angle_mode="rad"))
    assert session.angle_mode is AngleMode.RAD


# --- memory ---

def test_memory_add_then_recall(type_tokens, session):
    type_tokens("5")
    session.evaluate()
    session.memory_operation("M+")
    assert session.memory == 5
    session.clear()
    type_tokens("2")
    session.memory_operation("MR")
    assert session.expression == "2×5"


def test_memory_recall_after_group_and_operator(type_tokens, session):
    session.memory = 3.0
    type_tokens("(", "1", ")")
    session.memory_recall()
    assert session.expression == "(1)×3"
    session.clear()
    type_tokens("1", "+")
    session.memory_recall()
    assert session.expression == "1+3"


def test_memory_add_evaluates_expression(type_tokens, session):
    type_tokens("2", "×", "3")
    session.memory_add()
    assert session.memory == 6
    assert session.expression == "2×3"


def test_memory_subtract(type_tokens, session):
    session.memory = 10.0
    type_tokens("4")
    session.memory_subtract()
    assert session.memory == 6


def test_memory_ignores_failed_evaluation(type_tokens, session):
    type_tokens("1", "÷", "0")
    session.memory_add()
    assert session.memory == 0


def test_memory_without_operand(session):
    session.memory_add()
    assert session.memory == 0


def test_memory_stays_finite(session):
    session.memory = 1.7e308
    session.last_result = 1.7e308
    session.memory_add()
    assert session.memory == 1.7e308


def test_memory_clear(session):
    session.memory = 4.0
    session.memory_operation("MC")
    assert session.memory == 0
    assert session.display.memory_text == "0"


def test_memory_unknown_operation(session):
    with pytest.raises(ValueError):
        session.memory_operation("M*")


def test_sessions_sharing_settings_keep_separate_angle_modes():
    settings = Settings(angle_mode=AngleMode.DEG)
    first, second = CalculatorSession(settings), CalculatorSession(settings)
    first.toggle_angle_mode()
    assert first.angle_mode is AngleMode.RAD
    assert second.angle_mode is AngleMode.DEG
    assert settings.angle_mode is AngleMode.DEG
