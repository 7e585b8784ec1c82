"""Policy engines used to evaluate security group facts."""
from __future__ import annotations

import json
import logging
import shutil
import subprocess
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from .errors import EvaluationError
from .models import DEFAULT_QUERY, PolicyDefinition

logger = logging.getLogger(__name__)


class PolicyEngine(Protocol):
    """Anything that turns a fact record into an allow/deny verdict."""

    def evaluate(self, facts: Mapping[str, Any]) -> bool:
        ...


class OpaPolicyEngine:
    """Evaluate Rego policies with the ``opa`` command line tool.

    Each call runs ``opa eval`` with ``facts`` as the input document and the
    configured policy/data files loaded. The verdict is the ``x`` binding of
    the first result; an undefined result is treated as no match.
    """

    def __init__(
        self,
        paths: Sequence[str],
        query: str = DEFAULT_QUERY,
        *,
        binary: str = "opa",
        binding: str = "x",
        timeout: Optional[float] = 60,
    ) -> None:
        self.paths = list(paths)
        self.query = query
        self.binary = binary
        self.binding = binding
        self.timeout = timeout

    @classmethod
    def from_policy(cls, policy: PolicyDefinition, *, binary: str = "opa") -> "OpaPolicyEngine":
        return cls(policy.paths, policy.query, binary=binary)

    def command(self) -> List[str]:
        args = [self.binary, "eval", "--format", "json", "--stdin-input"]
        for path in self.paths:
            args.extend(["--data", path])
        args.append(self.query)
        return args

    def evaluate(self, facts: Mapping[str, Any]) -> bool:
        if shutil.which(self.binary) is None:
            raise EvaluationError(f"OPA executable '{self.binary}' was not found on PATH")

        logger.debug("Evaluating %s for security group %s", self.query, facts.get("id"))
        try:
            completed = subprocess.run(
                self.command(),
                input=json.dumps(facts),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise EvaluationError(f"Failed to run {self.binary}: {exc}") from exc

        if completed.returncode != 0:
            message = (completed.stderr or completed.stdout).strip()
            raise EvaluationError(f"Failed to evaluate query '{self.query}': {message}")

        try:
            output: Dict[str, Any] = json.loads(completed.stdout or "{}")
        except json.JSONDecodeError as exc:
            raise EvaluationError(f"Unexpected output from {self.binary}: {exc}") from exc
        return self._verdict(output)

    def _verdict(self, output: Mapping[str, Any]) -> bool:
        results = output.get("result") or []
        if not results:
            return False
        value = results[0].get("bindings", {}).get(self.binding)
        if not isinstance(value, bool):
            raise EvaluationError(
                f"Query '{self.query}' bound {self.binding}={value!r}; expected a boolean"
            )
        return value


__all__ = ["DEFAULT_QUERY", "OpaPolicyEngine", "PolicyEngine"]
