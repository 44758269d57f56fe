"""Lua scoring script adapter.

Runs an operator-supplied Lua script that defines ``check_spam(message)``.
The script is read and executed in a brand new Lua runtime on every call, so
edits to the file take effect on the next message without a restart.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from lupa import LuaError, LuaRuntime

from core.config import DEFAULT_INSTRUCTION_LIMIT, DEFAULT_SCRIPT_PATH
from core.errors import ScriptError

LOGGER = logging.getLogger(__name__)

ENTRY_POINT = "check_spam"
MESSAGE_GLOBAL = "message"

# Globals removed before the script runs: no file, process, module, or
# Python object access.
BLOCKED_GLOBALS = (
    "os",
    "io",
    "package",
    "require",
    "dofile",
    "loadfile",
    "load",
    "loadstring",
    "debug",
    "collectgarbage",
    "python",
)

# Returns a function that arms a count hook aborting the script once it has
# executed the given number of VM instructions. After the first firing the
# hook re-arms itself on every instruction, so a pcall around the busy loop
# cannot swallow the error and keep running.
_BUDGET_INSTALLER = """
local sethook = debug.sethook
return function(limit)
    local function exhausted()
        sethook(exhausted, "", 1)
        error("instruction budget of " .. limit .. " exhausted", 2)
    end
    sethook(exhausted, "", limit)
end
"""


def coerce_score(value: Any) -> float:
    """Convert a Lua return value into a finite float score."""

    if isinstance(value, bool) or value is None:
        raise ScriptError(f"{ENTRY_POINT} must return a number, got {value!r}")
    if isinstance(value, (int, float)):
        score = float(value)
    elif isinstance(value, (str, bytes)):
        raw = value.decode("utf-8", errors="replace") if isinstance(value, bytes) else value
        try:
            score = float(raw.strip())
        except ValueError as exc:
            raise ScriptError(f"{ENTRY_POINT} returned a non-numeric string: {raw!r}") from exc
    else:
        raise ScriptError(f"{ENTRY_POINT} must return a number, got {type(value).__name__}")
    if not math.isfinite(score):
        raise ScriptError(f"{ENTRY_POINT} returned a non-finite score: {score}")
    return score


class LuaScriptScorer:
    """ScoringFunction backed by a Lua script reloaded on every evaluation."""

    def __init__(
        self,
        script_path: str = DEFAULT_SCRIPT_PATH,
        instruction_limit: int = DEFAULT_INSTRUCTION_LIMIT,
    ) -> None:
        self._script_path = script_path
        self._instruction_limit = instruction_limit

    @property
    def script_path(self) -> str:
        return self._script_path

    def _read_script(self) -> str:
        try:
            with open(self._script_path, "r", encoding="utf-8") as handle:
                return handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise ScriptError(f"Failed to read {self._script_path}: {exc}") from exc

    def _new_runtime(self) -> LuaRuntime:
        lua = LuaRuntime(unpack_returned_tuples=True, register_eval=False)
        install_budget = lua.execute(_BUDGET_INSTALLER)
        lua_globals = lua.globals()
        for name in BLOCKED_GLOBALS:
            lua_globals[name] = None
        if self._instruction_limit > 0:
            install_budget(self._instruction_limit)
        return lua

    def evaluate(self, message: str) -> float:
        """Run the script against a message. Raises ScriptError on any failure."""

        source = self._read_script()
        try:
            lua = self._new_runtime()
            lua.execute(source)
            lua_globals = lua.globals()
            if lua.eval(f"type({ENTRY_POINT})") != "function":
                raise ScriptError(f"{self._script_path} does not define {ENTRY_POINT}(message)")
            lua_globals[MESSAGE_GLOBAL] = message
            result = lua.eval(f"{ENTRY_POINT}({MESSAGE_GLOBAL})")
        except LuaError as exc:
            raise ScriptError(f"{self._script_path}: {exc}") from exc
        except (UnicodeError, TypeError) as exc:
            # Raised by lupa when a value cannot cross the Python/Lua boundary,
            # e.g. a message holding lone surrogates.
            raise ScriptError(f"{self._script_path}: cannot pass value to or from Lua: {exc}") from exc
        if isinstance(result, tuple):
            result = result[0] if result else None
        return coerce_score(result)

    def score(self, text: str) -> float:
        """Return the script's score, or 0.0 if anything goes wrong."""

        try:
            return self.evaluate(text)
        except ScriptError as exc:
            LOGGER.error("Lua scoring failed: %s", exc)
            return 0.0
