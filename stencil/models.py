"""
Pydantic models for Stencil templates and runs.

This module contains the data model shared by every stage:
- The template AST: statements, declarations, expressions, identifiers
- Per-statement outcomes recorded by the runner
- The run report returned for every run
"""

import json
from datetime import datetime
from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# Outcomes
# =============================================================================

class Failed(BaseModel):
    """Value bound to an identifier whose declaring statement failed.

    Never produced by a driver; lets later statements tell a failed
    declaration apart from any legitimate result, including ``None``.
    Serialized with ``kind: "failed"`` so a reloaded report keeps it.
    """
    kind: Literal["failed"] = "failed"
    error: str

    def __str__(self) -> str:
        return f"<failed: {self.error}>"


class Outcome(BaseModel):
    """What happened when a statement was executed."""
    result: Any = None
    error: str = ""

    @property
    def failed(self) -> bool:
        return bool(self.error)


# =============================================================================
# AST Nodes
# =============================================================================

class Identifier(BaseModel):
    """Name bound by a declaration. The value is written once per run."""
    name: str = ""
    value: Any = None
    bound: bool = False

    @field_validator("value", mode="before")
    @classmethod
    def restore_failed(cls, value: Any) -> Any:
        """Turn a serialized ``Failed`` back into the sentinel."""
        if isinstance(value, dict) and value.get("kind") == "failed" and set(value) == {"kind", "error"}:
            return Failed.model_validate(value)
        return value

    def bind(self, value: Any) -> None:
        if self.bound:
            raise ValueError(f"identifier '{self.name}' is already bound")
        self.value = value
        self.bound = True


class Expression(BaseModel):
    """An action on an entity with its parameters.

    ``params`` holds literal values. ``refs``, ``aliases`` and ``holes`` map
    a parameter name to an identifier, an alias name and a hole name
    respectively; those entries move into ``params`` once resolved.
    """
    kind: Literal["expression"] = "expression"
    action: str = ""
    entity: str = ""
    params: Dict[str, Any] = Field(default_factory=dict)
    refs: Dict[str, str] = Field(default_factory=dict)
    aliases: Dict[str, str] = Field(default_factory=dict)
    holes: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_param_names_unique(self):
        """A parameter name lives in exactly one of the four mappings."""
        seen: Dict[str, str] = {}
        for source in ("params", "refs", "aliases", "holes"):
            for name in getattr(self, source):
                if name in seen:
                    raise ValueError(
                        f"parameter '{name}' appears in both {seen[name]} and {source}"
                    )
                seen[name] = source
        return self

    def set_param(self, name: str, value: Any) -> None:
        """Set a literal parameter, dropping any pending indirection for it."""
        self.refs.pop(name, None)
        self.aliases.pop(name, None)
        self.holes.pop(name, None)
        self.params[name] = value

    def is_resolved(self) -> bool:
        return not self.holes and not self.aliases

    def __str__(self) -> str:
        parts = [p for p in (self.action, self.entity) if p]
        for name in sorted(self.params):
            parts.append(f"{name}={_format_value(self.params[name])}")
        for name in sorted(self.refs):
            parts.append(f"{name}=${self.refs[name]}")
        for name in sorted(self.aliases):
            parts.append(f"{name}=@{self.aliases[name]}")
        for name in sorted(self.holes):
            parts.append(f"{name}={{{self.holes[name]}}}")
        return " ".join(parts)


class Declaration(BaseModel):
    """``left = right``: binds the result of an expression to an identifier."""
    kind: Literal["declaration"] = "declaration"
    left: Identifier = Field(default_factory=Identifier)
    right: Expression = Field(default_factory=Expression)

    def __str__(self) -> str:
        return f"{self.left.name} = {self.right}"


Node = Annotated[Union[Declaration, Expression], Field(discriminator="kind")]


class Statement(BaseModel):
    """One line of a template plus what happened when it ran."""
    node: Node
    line: str = ""
    outcome: Outcome = Field(default_factory=Outcome)

    @model_validator(mode="after")
    def default_line(self):
        if not self.line:
            self.line = str(self.node)
        return self

    @property
    def expression(self) -> Expression:
        """The expression this statement executes, whatever its shape."""
        if self.node.kind == "declaration":
            return self.node.right
        return self.node

    @property
    def declaration(self) -> Optional[Declaration]:
        if self.node.kind == "declaration":
            return self.node
        return None

    @property
    def result(self) -> Any:
        return self.outcome.result

    @property
    def error(self) -> str:
        return self.outcome.error


class AST(BaseModel):
    """Ordered statements of a template. Order is execution order."""
    statements: List[Statement] = Field(default_factory=list)

    def expressions(self) -> Iterator[Expression]:
        for statement in self.statements:
            yield statement.expression

    def declarations(self) -> Iterator[Declaration]:
        for statement in self.statements:
            if statement.declaration is not None:
                yield statement.declaration

    def has_errors(self) -> bool:
        return any(statement.outcome.failed for statement in self.statements)

    def to_json(self) -> str:
        """Convert to JSON string for serialization."""
        return json.dumps(self.model_dump(), indent=2, default=str)

    @classmethod
    def from_json(cls, json_str: str) -> "AST":
        """Create from JSON string."""
        data = json.loads(json_str)
        return cls.model_validate(data)


# =============================================================================
# Run Report
# =============================================================================

class RunReport(BaseModel):
    """Immutable record of one run of a template.

    ``id`` is a ULID, unique per run and sortable by start time. ``aborted``
    holds the reason when the run stopped before its last statement.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    statements: List[Statement] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    aborted: str = ""

    def has_errors(self) -> bool:
        return any(statement.outcome.failed for statement in self.statements)

    def failed_statements(self) -> List[Statement]:
        return [s for s in self.statements if s.outcome.failed]

    def bindings(self) -> Dict[str, Any]:
        """Identifier name -> value for every declaration that ran."""
        return {
            s.declaration.left.name: s.declaration.left.value
            for s in self.statements
            if s.declaration is not None and s.declaration.left.bound
        }

    def to_json(self) -> str:
        """Convert to JSON string for serialization."""
        return json.dumps(self.model_dump(), indent=2, default=str)

    @classmethod
    def from_json(cls, json_str: str) -> "RunReport":
        """Create from JSON string."""
        data = json.loads(json_str)
        return cls.model_validate(data)


def _format_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_format_value(v) for v in value) + "]"
    return str(value)
