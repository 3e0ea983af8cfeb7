"""Sandbox for user-supplied structure test scripts.

A structure test is a Python script that defines

    def test(payload):
        ...
        return True

The source is checked and compiled once in the harness process. It is
never executed there: every run of the script, including the load-time
probe, happens in a freshly spawned interpreter process with restricted
builtins and stand-in `json` / `re` / `math` modules. Each run therefore
starts from empty globals, and a run that exceeds its time limit is killed
without stalling other test cases.
"""

from __future__ import annotations

import builtins
import io
import json
import math
import multiprocessing
import re
from contextlib import redirect_stderr, redirect_stdout
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any

from loguru import logger

from casebench_core.domain.exceptions import ScriptLoadError

# Default execution limits
DEFAULT_TIMEOUT = 5.0  # seconds, per run of the script
STARTUP_TIMEOUT = 60.0  # seconds for the child interpreter to come up

# Names a script may use from each approved module
APPROVED_MODULES: dict[str, tuple[Any, tuple[str, ...]]] = {
    "json": (json, ("loads", "dumps", "JSONDecodeError")),
    "re": (
        re,
        (
            "compile", "escape", "findall", "finditer", "fullmatch", "match",
            "search", "split", "sub", "error", "DOTALL", "IGNORECASE",
            "MULTILINE", "I", "M", "S",
        ),
    ),
    "math": (
        math,
        (
            "ceil", "floor", "fabs", "isclose", "isfinite", "isinf", "isnan",
            "sqrt", "inf", "nan",
        ),
    ),
}

# Patterns that are forbidden in script source
FORBIDDEN_PATTERNS: list[str] = [
    "__import__",
    "eval(",
    "exec(",
    "compile(",
    "open(",
    "input(",
    "os.",
    "sys.",
    "subprocess.",
    "socket.",
    "shutil.",
    "pathlib.",
    "importlib.",
    "builtins.",
    "globals()",
    "locals()",
    "vars(",
    "getattr(",
    "setattr(",
    "delattr(",
    "breakpoint(",
]

# Dunder access and frame or code introspection lead out of the namespace
DANGEROUS_PATTERNS: list[str] = [
    r"__\w+__",
    r"\.mro\(",
    r"\b(?:gi|cr|ag)_(?:frame|code)\b",
    r"\bf_(?:back|globals|locals|builtins|code)\b",
    r"\btb_(?:frame|next)\b",
    r"\bco_\w+",
]

IMPORT_PATTERN = re.compile(r"(?:^|\n)\s*(?:from|import)\s+([a-zA-Z_][a-zA-Z0-9_.]*)")

SAFE_BUILTIN_NAMES: list[str] = [
    "abs", "all", "any", "bool", "dict", "enumerate", "filter", "float",
    "int", "isinstance", "len", "list", "map", "max", "min", "range",
    "repr", "reversed", "round", "set", "sorted", "str", "sum", "tuple",
    "zip", "print",
    "Exception", "ValueError", "TypeError", "KeyError", "IndexError",
    "AssertionError",
]


def _module_stand_in(name: str) -> SimpleNamespace:
    """Expose only the approved names of a module, never the module itself."""
    module, names = APPROVED_MODULES[name]
    return SimpleNamespace(**{attr: getattr(module, attr) for attr in names})


def _build_safe_globals() -> dict[str, Any]:
    modules = {name: _module_stand_in(name) for name in APPROVED_MODULES}

    def _restricted_import(name, globals=None, locals=None, fromlist=(), level=0):
        """Import hook that only hands out approved modules."""
        module_name = name.split(".")[0]
        if level != 0 or module_name not in modules:
            raise ImportError(f"Module '{name}' is not approved for import")
        return modules[module_name]

    safe_builtins = {name: getattr(builtins, name) for name in SAFE_BUILTIN_NAMES}
    safe_builtins.update({"True": True, "False": False, "None": None})
    safe_builtins["__import__"] = _restricted_import
    # class statements need __build_class__
    safe_builtins["__build_class__"] = builtins.__build_class__

    return {
        "__builtins__": safe_builtins,
        "__name__": "structure_test",
        **modules,
    }


def check_violations(source: str) -> list[str]:
    """List the safety violations in a script's source."""
    violations = []

    for pattern in FORBIDDEN_PATTERNS:
        if pattern in source:
            violations.append(f"Forbidden pattern: {pattern}")

    for imp in IMPORT_PATTERN.findall(source):
        module = imp.split(".")[0]
        if module not in APPROVED_MODULES:
            violations.append(f"Forbidden import: {module}")

    for pattern in DANGEROUS_PATTERNS:
        if re.search(pattern, source):
            violations.append(f"Dangerous pattern: {pattern}")

    return violations


@dataclass(frozen=True)
class ScriptRun:
    """What one run of a structure test produced.

    Attributes:
        stage: "load" when the script failed before `test` was called.
        value: The bool `test` returned, None otherwise.
        result_type: Type name of a non-bool return value.
        error: Message of whatever the script raised.
        timed_out: True when the run was killed at its time limit.
        stdout: Text the script printed.
        stderr: Text the script wrote to stderr.
    """

    stage: str = "test"
    value: bool | None = None
    result_type: str | None = None
    error: str | None = None
    timed_out: bool = False
    stdout: str = ""
    stderr: str = ""


def _execute_in_child(source: str, filename: str, payload: str | None, conn) -> None:
    """Run the script in this (child) process and send back a ScriptRun dict.

    With payload None the script is only loaded and checked for `test`.
    """
    conn.send("ready")
    stdout_capture = io.StringIO()
    stderr_capture = io.StringIO()
    report: dict[str, Any] = {"stage": "load"}

    with redirect_stdout(stdout_capture), redirect_stderr(stderr_capture):
        try:
            namespace = _build_safe_globals()
            exec(compile(source, filename, "exec"), namespace)  # noqa: S102
            test_func = namespace.get("test")
            if not callable(test_func):
                report["error"] = f"Structure test {filename} does not define a callable named 'test'"
            elif payload is not None:
                report["stage"] = "test"
                result = test_func(payload)
                if isinstance(result, bool):
                    report["value"] = result
                else:
                    report["result_type"] = type(result).__name__
        except Exception as e:
            report["error"] = str(e) or type(e).__name__

    report["stdout"] = stdout_capture.getvalue()
    report["stderr"] = stderr_capture.getvalue()
    conn.send(report)
    conn.close()


class ScriptSandbox:
    """Checked structure test that runs in a separate process per call."""

    def __init__(self, source: str, filename: str = "<structure_test>", timeout: float = DEFAULT_TIMEOUT):
        """
        Check, compile and probe the script.

        Raises:
            ScriptLoadError: If the source is unsafe, does not compile, fails
                at module level or does not define a callable `test`.
        """
        violations = check_violations(source)
        if violations:
            raise ScriptLoadError(f"Structure test rejected: {', '.join(violations)}")

        try:
            compile(source, filename, "exec")
        except SyntaxError as e:
            raise ScriptLoadError(f"Structure test does not compile: {e}", cause=e) from e

        self.source = source
        self.filename = filename
        self.timeout = timeout

        # Probe once so a broken script stops the run before any oracle call
        probe = self._spawn(None)
        if probe.timed_out:
            raise ScriptLoadError(f"Structure test failed while loading: timed out after {timeout}s")
        if probe.error is not None:
            raise ScriptLoadError(f"Structure test failed while loading: {probe.error}")
        logger.debug(f"Structure test {filename} loaded")

    def run(self, payload: str) -> ScriptRun:
        """Call `test(payload)` in a fresh interpreter process."""
        return self._spawn(payload)

    def _spawn(self, payload: str | None) -> ScriptRun:
        ctx = multiprocessing.get_context("spawn")
        receiver, sender = ctx.Pipe(duplex=False)
        process = ctx.Process(
            target=_execute_in_child,
            args=(self.source, self.filename, payload, sender),
            daemon=True,
        )
        process.start()
        sender.close()

        try:
            if not receiver.poll(STARTUP_TIMEOUT):
                return ScriptRun(stage="load", error="Structure test process did not start")
            receiver.recv()

            if not receiver.poll(self.timeout):
                return ScriptRun(timed_out=True)
            report = receiver.recv()
        except EOFError:
            process.join()
            return ScriptRun(error=f"Structure test process exited with code {process.exitcode}")
        finally:
            if process.is_alive():
                process.kill()
            process.join()
            receiver.close()

        run = ScriptRun(**report)
        if run.stdout:
            logger.debug(f"Structure test output: {run.stdout.rstrip()}")
        if run.stderr:
            logger.warning(f"Structure test stderr: {run.stderr.rstrip()}")
        return run
