"""Tests for the runtime entry points (run_source, execute, run_code)."""

from __future__ import annotations

import logging

import pytest

from spemath import run_code, run_source
from spemath.core.errors import LexErrors, ParseErrors, UnknownVariable
from spemath.core.ir.expressions import format_number
from spemath.core.ir.values import NumberValue
from spemath.core.runtime import execute


class TestRunSource:
    def test_prints_each_value(self) -> None:
        assert run_source("1 + 2\n2 * 3") == "3\n6\n"

    def test_assignments_and_definitions_print_nothing(self) -> None:
        assert run_source("x = 5\nf(a) = a\nf(x)") == "5\n"

    def test_empty_program(self) -> None:
        assert run_source("") == ""

    def test_number_formatting(self) -> None:
        assert run_source("7 / 2\n10 / 2\n1 / 0\n-1 / 0\n0 / 0") == "3.5\n5\ninf\n-inf\nNaN\n"

    def test_function_value_output(self) -> None:
        assert run_source("f(x, y) = x\nf") == "<function (x, y)>\n"

    def test_runtime_error_does_not_stop_the_run(self) -> None:
        output = run_source("1\ny\n2")
        assert output == "1\nRuntime Error: Unknown variable: 'y'\n2\n"

    def test_space_between_operands_is_a_parse_error(self) -> None:
        source = """
// area of a circle
pi = 3.14159
area(r) = pi r^2
area(2)
"""
        with pytest.raises(ParseErrors):
            run_source(source)

    def test_implicit_product_program(self) -> None:
        source = "pi = 3\narea(r) = pi*r^2\narea(2)\nx = 3\n2x + 1\n"
        assert run_source(source) == "12\n7\n"

    def test_lex_errors_raise(self) -> None:
        with pytest.raises(LexErrors) as exc_info:
            run_source("1 @ 2")
        assert "Unexpected character '@' at line 1, column 3" in str(exc_info.value)

    def test_parse_errors_raise_before_evaluation(self) -> None:
        with pytest.raises(ParseErrors) as exc_info:
            run_source("x = 1\n5 = x\n)")
        assert len(exc_info.value.errors) == 2

    def test_custom_call_depth(self) -> None:
        output = run_source("f(x) = g(x)\ng(x) = x\nf(1)", max_call_depth=1)
        assert output == "Runtime Error: Maximum call depth of 1 exceeded\n"


class TestExecute:
    def test_report_separates_outputs_and_errors(self) -> None:
        report = execute("a = 2\na\nb\na^3")
        assert report.outputs == ["2", "8"]
        assert len(report.errors) == 1
        assert isinstance(report.errors[0], UnknownVariable)

    def test_report_keeps_environment(self) -> None:
        report = execute("a = 2; b = a + 1")
        assert report.environment.get("b") == NumberValue(value=3.0)

    def test_results_in_source_order(self) -> None:
        report = execute("1\nq\n3")
        assert [r.ok for r in report.results] == [True, False, True]
        assert report.results[1].render() == "Runtime Error: Unknown variable: 'q'"

    def test_unit_result_renders_nothing(self) -> None:
        report = execute("x = 1")
        assert report.results[0].render() is None
        assert report.render() == ""

    def test_runtime_errors_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="spemath.core.runtime"):
            execute("nope")
        assert "nope" in caplog.text

    def test_failure_in_long_statement_is_logged_and_isolated(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        source = "+".join(["1"] * 3000) + "+y\n2"
        with caplog.at_level(logging.WARNING, logger="spemath.core.runtime"):
            report = execute(source)
        assert report.outputs == ["2"]
        assert "Statement 1 failed: Unknown variable: 'y'" in caplog.text

    def test_injected_logger(self, caplog: pytest.LogCaptureFixture) -> None:
        log = logging.getLogger("embedding.host")
        with caplog.at_level(logging.DEBUG, logger="embedding.host"):
            execute("1 + 1", log=log)
        assert any(r.name == "embedding.host" for r in caplog.records)


class TestRunCode:
    def test_success(self) -> None:
        assert run_code("2 ^ 10") == "1024\n"

    @pytest.mark.parametrize(
        "source",
        [
            "(" * 600 + "1" + ")" * 600,
            "-" * 700 + "1",
            "^".join(["1"] * 600),
        ],
    )
    def test_deep_nesting_is_reported(self, source: str) -> None:
        assert run_code(source).startswith("Error: Expression nested too deeply")

    def test_long_sum(self) -> None:
        assert run_code("+".join(["1"] * 3000)) == "3000\n"

    def test_lex_error_is_reported(self) -> None:
        assert run_code("#") == "Error: Unexpected character '#' at line 1, column 1"

    def test_parse_error_is_reported(self) -> None:
        result = run_code("(1 + 2")
        assert result.startswith("Error: Unexpected end of input")

    def test_runtime_error_is_part_of_output(self) -> None:
        assert run_code("1 % 2") == "Runtime Error: Unsupported binary operation: number '%' number\n"


class TestFormatNumber:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (5.0, "5"),
            (-3.0, "-3"),
            (0.1, "0.1"),
            (1e20, "1e+20"),
            (float("inf"), "inf"),
            (float("-inf"), "-inf"),
            (float("nan"), "NaN"),
        ],
    )
    def test_format(self, value: float, expected: str) -> None:
        assert format_number(value) == expected
