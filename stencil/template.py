"""
Stencil templates.

A ``Template`` owns a parsed AST and offers the passes that prepare it for
running: alias collection, parameter overrides, hole and alias filling.
Those passes edit the AST in place and are meant to run before ``run``.
A template can be run any number of times; each run gets its own report.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from .driver import Driver
from .errors import TemplateLoadError, UnresolvedHolesError
from .models import AST, RunReport, Statement
from .run_id import RunIdGenerator
from .runner import TemplateRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnresolvedHole:
    """A hole left without a value after a batch fill."""
    statement: int
    param: str
    hole: str


class Template:
    """User-facing handle on a template AST."""

    def __init__(self, statements: Optional[Iterable[Statement]] = None, ast: Optional[AST] = None):
        if ast is None:
            ast = AST(statements=list(statements or []))
        self.ast = ast

    @property
    def statements(self) -> List[Statement]:
        return self.ast.statements

    @classmethod
    def from_json(cls, json_str: str) -> "Template":
        try:
            return cls(ast=AST.from_json(json_str))
        except (ValueError, ValidationError) as e:
            raise TemplateLoadError(f"invalid template: {e}") from e

    @classmethod
    def load(cls, path: Path) -> "Template":
        """Load a template serialized with ``to_json``."""
        if not path.exists():
            raise TemplateLoadError(f"File not found: {path}")
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateLoadError(f"Cannot read {path}: {e}") from e
        return cls.from_json(content)

    def to_json(self) -> str:
        return self.ast.to_json()

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def collect_aliases(self) -> Dict[str, str]:
        """Union of every expression's aliases; later statements win."""
        aliases: Dict[str, str] = {}
        for expression in self.ast.expressions():
            aliases.update(expression.aliases)
        return aliases

    def get_holes(self) -> Dict[str, List[str]]:
        """Hole name -> names of the parameters waiting on it, in program order."""
        holes: Dict[str, List[str]] = {}
        for expression in self.ast.expressions():
            for param, hole in expression.holes.items():
                holes.setdefault(hole, []).append(param)
        return holes

    def has_errors(self) -> bool:
        return self.ast.has_errors()

    # -------------------------------------------------------------------------
    # Resolution passes
    # -------------------------------------------------------------------------

    def merge_params(self, overrides: Mapping[str, Any]) -> None:
        """Apply ``{"entity.param": value}`` overrides to every matching expression.

        Overrides matching no expression are ignored.
        """
        for key, value in overrides.items():
            entity, sep, param = key.partition(".")
            if not sep:
                logger.debug(f"Ignoring override '{key}': expected 'entity.param'")
                continue

            matched = 0
            for expression in self.ast.expressions():
                if expression.entity == entity:
                    expression.set_param(param, value)
                    matched += 1
            logger.debug(f"Override '{key}' applied to {matched} statement(s)")

    def resolve_template(self, fills: Mapping[str, Any], strict: bool = False) -> List[UnresolvedHole]:
        """Fill holes from a hole-name -> value mapping.

        Holes with no fill stay in place and are returned.

        Raises:
            UnresolvedHolesError: If ``strict`` and some holes were not filled
        """
        missing: List[UnresolvedHole] = []
        for index, statement in enumerate(self.ast.statements):
            expression = statement.expression
            for param, hole in list(expression.holes.items()):
                if hole in fills:
                    expression.set_param(param, fills[hole])
                else:
                    missing.append(UnresolvedHole(statement=index, param=param, hole=hole))

        if missing:
            logger.warning(f"{len(missing)} hole(s) left unresolved: {sorted({m.hole for m in missing})}")
            if strict:
                raise UnresolvedHolesError(missing)
        return missing

    def interactive_resolve_template(self, ask: Callable[[str], Any]) -> None:
        """Fill every hole with ``ask(hole_name)``.

        ``ask`` is called once per hole occurrence, in program order; answers
        are not reused between occurrences of the same hole name.
        """
        for expression in self.ast.expressions():
            for param, hole in list(expression.holes.items()):
                expression.set_param(param, ask(hole))

    def resolve_aliases(self, values: Mapping[str, Any]) -> List[str]:
        """Replace aliases with their resolved values.

        Args:
            values: Alias name -> concrete value, e.g. resolved by a backend

        Returns:
            Alias names that had no value, in first-seen order
        """
        missing: List[str] = []
        for expression in self.ast.expressions():
            for param, alias in list(expression.aliases.items()):
                if alias in values:
                    expression.set_param(param, values[alias])
                elif alias not in missing:
                    missing.append(alias)
        return missing

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def run(self, driver: Driver, run_ids: Optional[RunIdGenerator] = None) -> RunReport:
        """Run the template against ``driver``. See ``TemplateRunner.run``."""
        return TemplateRunner(driver, run_ids=run_ids).run(self.ast)
