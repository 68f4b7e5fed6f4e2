"""
Console formatting for Stencil templates and run reports.

Uses Rich ``Text`` so the CLI can print styled output while tests can
inspect the plain string.
"""

from typing import Optional

from rich.console import Console
from rich.text import Text

from .models import RunReport, Statement
from .template import Template


class ReportFormatter:
    """Formats templates before a run and reports after one."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize formatter with Rich console."""
        self.console = console or Console()

        self.colors = {
            'success': 'green',
            'failed': 'red',
            'pending': 'yellow',
            'header': 'bold blue',
            'identifier': 'bright_white',
            'attribute': 'cyan',
            'comment': 'dim',
        }

    def format_template(self, template: Template) -> Text:
        """
        Format a template showing its statements and what still needs values.

        Args:
            template: Template to describe

        Returns:
            Styled text
        """
        output = Text()
        output.append(f"Template with {len(template.statements)} statement(s):\n\n", style=self.colors['header'])

        for i, statement in enumerate(template.statements, 1):
            output.append(f"  {i}. ", style=self.colors['comment'])
            output.append(f"{statement.line}\n", style=self.colors['identifier'])

        holes = template.get_holes()
        if holes:
            output.append("\nHoles:\n", style=self.colors['header'])
            for hole, params in holes.items():
                output.append(f"  {{{hole}}}", style=self.colors['pending'])
                output.append(f" -> {', '.join(params)}\n", style=self.colors['comment'])

        aliases = template.collect_aliases()
        if aliases:
            output.append("\nAliases:\n", style=self.colors['header'])
            for param, alias in aliases.items():
                output.append(f"  @{alias}", style=self.colors['pending'])
                output.append(f" -> {param}\n", style=self.colors['comment'])

        return output

    def format_report(self, report: RunReport) -> Text:
        """
        Format a run report showing each statement's outcome.

        Args:
            report: Report returned by a run

        Returns:
            Styled text
        """
        output = Text()
        output.append(f"Run {report.id}\n\n", style=self.colors['header'])

        for statement in report.statements:
            self._format_statement(output, statement)

        output.append("\n")
        failed = len(report.failed_statements())
        succeeded = len(report.statements) - failed
        if report.aborted:
            output.append(f"Run aborted: {report.aborted}\n", style=self.colors['failed'])
        elif not report.statements:
            output.append("No statements to run.\n", style=self.colors['comment'])
        elif failed == 0:
            output.append(f"Run complete! Statements: {succeeded} succeeded, 0 failed.\n", style=self.colors['success'])
        else:
            output.append(
                f"Run finished with errors. Statements: {succeeded} succeeded, {failed} failed.\n",
                style=self.colors['failed'],
            )
        return output

    def _format_statement(self, output: Text, statement: Statement) -> None:
        if statement.outcome.failed:
            output.append("  ✗ ", style=self.colors['failed'])
        else:
            output.append("  ✓ ", style=self.colors['success'])
        output.append(f"{statement.line}\n", style=self.colors['identifier'])

        if statement.outcome.failed:
            output.append(f"    Error: {statement.error}\n", style=self.colors['failed'])
        elif statement.declaration is not None:
            left = statement.declaration.left
            output.append(f"    {left.name} = {left.value}\n", style=self.colors['attribute'])
        elif statement.result is not None:
            output.append(f"    => {statement.result}\n", style=self.colors['attribute'])
