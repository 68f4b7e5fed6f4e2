"""
Stencil Test Suite

- Unit tests for the template model, run ids and drivers
- Runner tests executing templates against fake drivers
- CLI tests driving the typer app end to end
"""
