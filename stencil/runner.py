"""
Template runner.

Walks the statements of a template once, in order:
resolve refs → look up the driver function → call it → record the outcome
→ bind the declared identifier. A failing statement never stops the run;
only a reference to an identifier that was never declared does.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .driver import Driver
from .errors import UnresolvedReferenceError
from .models import AST, Failed, Identifier, Outcome, RunReport, Statement
from .run_id import RunIdGenerator, new_run_id

logger = logging.getLogger(__name__)


class Scope:
    """Identifier bindings visible to the statements of a single run."""

    def __init__(self):
        self._values: Dict[str, Any] = {}

    def bind(self, name: str, value: Any) -> None:
        self._values[name] = value

    def lookup(self, name: str) -> Any:
        """Return the value bound to ``name``.

        Raises:
            UnresolvedReferenceError: If no earlier statement declared it
        """
        if name not in self._values:
            raise UnresolvedReferenceError(name)
        return self._values[name]

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)


class TemplateRunner:
    """Executes a template AST against a driver.

    Args:
        driver: Backend resolving action/entity pairs to functions
        run_ids: Source of run identifiers; the process default if omitted
    """

    def __init__(self, driver: Driver, run_ids: Optional[RunIdGenerator] = None):
        self.driver = driver
        self.run_ids = run_ids

    def run(self, ast: AST) -> RunReport:
        """Run every statement of ``ast`` and report what happened.

        The AST itself is left untouched: statements are copied into the
        report, so each run starts from clean bindings.

        Raises:
            UnresolvedReferenceError: A ref named an identifier no earlier
                statement declared. ``report`` on the exception holds the
                statements processed up to and including the failing one.
        """
        run_id = self.run_ids.new_id() if self.run_ids else new_run_id()
        started_at = datetime.now()
        statements: List[Statement] = []
        scope = Scope()

        logger.info(f"Starting run {run_id} with {len(ast.statements)} statements")

        for index, original in enumerate(ast.statements, 1):
            statement = _fresh_copy(original)
            statements.append(statement)
            logger.debug(f"[{index}/{len(ast.statements)}] {statement.line}")

            try:
                self._run_statement(statement, scope)
            except UnresolvedReferenceError as e:
                statement.outcome = Outcome(error=str(e))
                e.report = RunReport(
                    id=run_id,
                    statements=statements,
                    started_at=started_at,
                    finished_at=datetime.now(),
                    aborted=str(e),
                )
                logger.error(f"Run {run_id} aborted at statement {index}: {e}")
                raise

        report = RunReport(
            id=run_id, statements=statements, started_at=started_at, finished_at=datetime.now()
        )
        failed = len(report.failed_statements())
        logger.info(
            f"Run {run_id} complete: {len(report.statements) - failed} succeeded, {failed} failed"
        )
        return report

    def _run_statement(self, statement: Statement, scope: Scope) -> None:
        expression = statement.expression
        params, problem = self._effective_params(statement, scope)

        if problem is not None:
            outcome = Outcome(error=problem)
        else:
            try:
                fn = self.driver.lookup(expression.action, expression.entity)
                outcome = Outcome(result=fn(params))
            except Exception as e:
                outcome = Outcome(error=str(e) or type(e).__name__)

        if outcome.failed:
            logger.warning(f"Statement '{statement.line}' failed: {outcome.error}")
        statement.outcome = outcome

        declaration = statement.declaration
        if declaration is not None:
            value = Failed(error=outcome.error) if outcome.failed else outcome.result
            declaration.left.bind(value)
            scope.bind(declaration.left.name, value)

    def _effective_params(
        self, statement: Statement, scope: Scope
    ) -> Tuple[Dict[str, Any], Optional[str]]:
        """Merge literal params with resolved refs.

        Returns:
            Tuple of (params, problem). ``problem`` is set when the statement
            must not reach the driver.
        """
        expression = statement.expression
        params = dict(expression.params)

        # Every ref is looked up before any is judged, so an undeclared name
        # always aborts whatever the order of the statement's refs.
        resolved = [
            (param, identifier, scope.lookup(identifier))
            for param, identifier in expression.refs.items()
        ]
        for param, identifier, value in resolved:
            if isinstance(value, Failed):
                return params, f"reference '${identifier}' points to a failed statement: {value.error}"
            params[param] = value

        if expression.holes:
            names = ", ".join(sorted(expression.holes.values()))
            return params, f"unresolved hole(s): {names}"
        if expression.aliases:
            names = ", ".join(sorted(expression.aliases.values()))
            return params, f"unresolved alias(es): {names}"

        return params, None


def _fresh_copy(statement: Statement) -> Statement:
    """Copy the statement structure with no outcome and no bound identifier.

    Parameter values are shared with the template, not copied: they may be
    handles that cannot be copied at all.
    """
    expression = statement.expression
    node = expression.model_copy(update={
        "params": dict(expression.params),
        "refs": dict(expression.refs),
        "aliases": dict(expression.aliases),
        "holes": dict(expression.holes),
    })
    declaration = statement.declaration
    if declaration is not None:
        node = declaration.model_copy(update={
            "left": Identifier(name=declaration.left.name),
            "right": node,
        })
    return statement.model_copy(update={"node": node, "outcome": Outcome()})
