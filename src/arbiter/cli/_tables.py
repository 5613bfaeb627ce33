"""Rich table builders used by the CLI.

Kept separate to reduce duplication and keep the command module smaller.
"""

from __future__ import annotations

from rich.table import Table


def build_signatures_table(methods, title: str | None = None) -> Table:
    """Build a standard (#, Declaring Type, Signature, Modifiers) table."""
    table = Table(show_header=True, title=title)
    table.add_column("#")
    table.add_column("Declaring Type", style="cyan")
    table.add_column("Signature")
    table.add_column("Modifiers")
    for index, method in enumerate(methods):
        modifiers = method.visibility.value + (" static" if method.is_static else "")
        table.add_row(str(index), method.declaring_type, method.short_form, modifiers)
    return table


def build_validation_table(errors) -> Table:
    """Build validation error table for `validate`."""
    table = Table(show_header=True, title="Validation Errors")
    table.add_column("Error", style="red")
    table.add_column("Entity")
    table.add_column("Field")
    table.add_column("Message")
    for error in errors:
        table.add_row(
            error.error_type.value,
            error.entity_id,
            error.field_name,
            error.message,
        )
    return table
