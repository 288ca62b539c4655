from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from .schema import ToolDescriptor
from ..errors import MissingArgumentError, TypeMismatchError

logger = logging.getLogger(__name__)


class ArgumentValidator:
    """
    Decodes engine-proposed arguments against a tool's parameter schema.

    Runs before any handler is invoked:
    - every required parameter must be present
    - every present parameter must match its declared JSON type
    - undeclared arguments are dropped
    """

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def decode(self, tool: ToolDescriptor, args: Mapping[str, Any]) -> Dict[str, Any]:

        if args is None:
            args = {}

        if not isinstance(args, Mapping):
            raise TypeMismatchError(tool.name, "<arguments>", "object", type(args).__name__)

        self._check_required(tool, args)
        self._drop_unknown(tool, args)

        decoded: Dict[str, Any] = {}

        for key, spec in tool.parameters.items():
            if key not in args:
                continue  # optional and not present
            decoded[key] = self._coerce(tool.name, key, spec.type, args[key])

        return decoded

    # ------------------------------------------------------------------
    # Validation Steps
    # ------------------------------------------------------------------

    def _check_required(self, tool: ToolDescriptor, args: Mapping[str, Any]) -> None:
        for key in tool.required:
            if key not in args or args[key] is None:
                raise MissingArgumentError(tool.name, key)

    def _drop_unknown(self, tool: ToolDescriptor, args: Mapping[str, Any]) -> None:
        extra = [k for k in args if k not in tool.parameters]
        if extra:
            logger.debug(
                "[VALIDATOR] Dropping undeclared arguments | tool=%s | args=%s",
                tool.name,
                extra,
            )

    # ------------------------------------------------------------------
    # Type Matching
    # ------------------------------------------------------------------

    def _coerce(self, tool_name: str, key: str, expected: str, value: Any) -> Any:

        # bool is an int subclass; never let it pass as a number
        if expected == "string":
            ok = isinstance(value, str)

        elif expected == "boolean":
            ok = isinstance(value, bool)

        elif expected == "number":
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)

        elif expected == "integer":
            if isinstance(value, float) and value.is_integer():
                return int(value)
            ok = isinstance(value, int) and not isinstance(value, bool)

        elif expected == "array":
            ok = isinstance(value, list)

        elif expected == "object":
            ok = isinstance(value, dict)

        else:
            ok = True

        if not ok:
            raise TypeMismatchError(tool_name, key, expected, type(value).__name__)

        return value
