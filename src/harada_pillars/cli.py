"""CLI for harada-pillars (create trees, expand nodes, track progress)."""

import json
import sqlite3
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from harada_pillars.config import (
    BLOCKING_LEVEL,
    DEFAULT_INITIAL_DEPTH,
    LOCAL_USER_ID,
    SEARCH_RESULT_LIMIT,
    resolve_data_directory,
)
from harada_pillars.core.checklist import (
    create_checklist_item,
    reorder_checklist_items,
    update_checklist_status,
)
from harada_pillars.core.database.schema import migrate_schema
from harada_pillars.core.database.store import SqliteNodeStore
from harada_pillars.core.search.searcher import search_nodes
from harada_pillars.core.tree.blocking import get_blocking_ancestor
from harada_pillars.core.tree.generation import create_tree, expand_node, has_children_generated
from harada_pillars.core.tree.index import TreeIndex
from harada_pillars.core.tree.markdown import format_progress, render_subtree_as_markdown
from harada_pillars.core.tree.navigation import get_breadcrumbs, get_focused_path
from harada_pillars.core.tree.progress import annotate_tree
from harada_pillars.core.tree.validation import find_structure_problems
from harada_pillars.errors import HaradaError
from harada_pillars.logging_config import configure_logging
from harada_pillars.models.node import ChecklistStatus, NodeStatus

app = typer.Typer(help="Harada pillars: plan goals as 8-way trees and track their progress.")

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Planner database directory"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _open_store(data_dir: Path | None) -> SqliteNodeStore:
    """Open (creating if needed) the planner database."""
    dst = data_dir or resolve_data_directory()
    dst.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(dst / "planner.db"))
    migrate_schema(conn)
    return SqliteNodeStore(conn)


def _fail(message: str) -> typer.Exit:
    logger.error(message)
    return typer.Exit(1)


@app.command()
def new(
    title: str = typer.Argument(..., help="Main goal"),
    depth: int = typer.Option(
        DEFAULT_INITIAL_DEPTH, "--depth", "-l", help="Levels to generate up front"
    ),
    data_dir: DataDirOption = None,
) -> None:
    """Create a new plan tree."""
    store = _open_store(data_dir)
    try:
        try:
            tree = create_tree(title, depth, user_id=LOCAL_USER_ID)
        except ValueError as e:
            raise _fail(str(e)) from e
        plan = store.insert_tree(tree)
        typer.echo(f"Created tree {plan.id} ({len(tree.nodes)} nodes), root={plan.root_id}")
    finally:
        store.conn.close()


@app.command()
def trees(data_dir: DataDirOption = None) -> None:
    """List all plan trees."""
    store = _open_store(data_dir)
    try:
        plans = store.list_trees(LOCAL_USER_ID)
        typer.echo(f"{len(plans)} trees:\n")
        for plan in plans:
            annotated = annotate_tree(
                store.get_tree_nodes(plan.id), store.get_checklist_items_for_tree(plan.id)
            )
            progress = annotated[plan.root_id].progress
            typer.echo(f"  {plan.title} - {format_progress(progress)}  [id={plan.id}]")
    finally:
        store.conn.close()


def _echo_node_context(index: TreeIndex, node_id: str) -> None:
    """Print the breadcrumb trail of a node and the sub-goal blocking it, if any."""
    crumbs = get_breadcrumbs(index, node_id)
    if crumbs:
        typer.echo("Path: " + " > ".join(c.title for c in crumbs))
    node = index.by_id[node_id]
    if node.level > BLOCKING_LEVEL:
        blocker = get_blocking_ancestor(index.ancestors_of(node))
        if blocker is not None:
            typer.echo(f"Blocked by level {blocker.level}: {blocker.title}")
    typer.echo()


@app.command()
def show(
    tree_id: str = typer.Argument(..., help="Tree ID"),
    node_id: Annotated[
        str | None,
        typer.Option("--node", "-N", help="Start rendering from this node"),
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    data_dir: DataDirOption = None,
) -> None:
    """Show a tree (or subtree) with computed progress."""
    store = _open_store(data_dir)
    try:
        plan = store.get_tree(tree_id)
        if plan is None:
            raise _fail(f"Tree '{tree_id}' not found.")

        nodes = store.get_tree_nodes(tree_id)
        annotated = annotate_tree(nodes, store.get_checklist_items_for_tree(tree_id))
        start = node_id or plan.root_id
        if start not in annotated:
            raise _fail(f"Node '{start}' not found in tree.")

        if output_json:
            data = {
                "tree": {"id": plan.id, "title": plan.title, "root_id": plan.root_id},
                "nodes": [
                    {
                        "id": entry.node.id,
                        "parent_id": entry.node.parent_id,
                        "level": entry.node.level,
                        "index_in_parent": entry.node.index_in_parent,
                        "title": entry.node.title,
                        "status": entry.node.status.value,
                        "progress": entry.progress,
                        "inherited_blocked": entry.inherited_blocked,
                        "children_count": entry.children_count,
                    }
                    for entry in annotated.values()
                ],
            }
            typer.echo(json.dumps(data, indent=2))
        else:
            if node_id:
                _echo_node_context(TreeIndex(nodes), node_id)
            typer.echo(
                render_subtree_as_markdown(annotated, node_id=start, max_depth=max_depth)
            )
    finally:
        store.conn.close()


@app.command()
def expand(
    node_id: str = typer.Argument(..., help="Node ID to expand"),
    data_dir: DataDirOption = None,
) -> None:
    """Generate the children of a node (no-op if it already has them)."""
    store = _open_store(data_dir)
    try:
        already_expanded = has_children_generated(store, node_id)
        try:
            children = expand_node(store, node_id, user_id=LOCAL_USER_ID)
        except HaradaError as e:
            raise _fail(str(e)) from e
        if not children:
            typer.echo(f"Node '{node_id}' is at the deepest level and has no children.")
        elif already_expanded:
            typer.echo("Already expanded:")
        else:
            typer.echo(f"Generated {len(children)} children:")
        for child in children:
            typer.echo(f"  {child.index_in_parent}: {child.title}  [id={child.id}]")
    finally:
        store.conn.close()


@app.command()
def status(
    node_id: str = typer.Argument(..., help="Node ID"),
    new_status: NodeStatus = typer.Argument(..., help="done, in_progress or blocked"),
    data_dir: DataDirOption = None,
) -> None:
    """Set the status of a node."""
    store = _open_store(data_dir)
    try:
        try:
            node = store.update_node_status(node_id, new_status)
        except HaradaError as e:
            raise _fail(str(e)) from e
        typer.echo(f"{node.title}: {node.status.value}")
    finally:
        store.conn.close()


@app.command()
def edit(
    node_id: str = typer.Argument(..., help="Node ID"),
    title: Annotated[str | None, typer.Option("--title", "-t", help="New title")] = None,
    description: Annotated[
        str | None, typer.Option("--description", "-D", help="New description")
    ] = None,
    clear_description: bool = typer.Option(
        False, "--clear-description", help="Remove the description"
    ),
    due: Annotated[str | None, typer.Option("--due", help="Due date (YYYY-MM-DD)")] = None,
    clear_due: bool = typer.Option(False, "--clear-due", help="Remove the due date"),
    reminder_on: bool = typer.Option(False, "--reminder", help="Enable the reminder"),
    reminder_off: bool = typer.Option(False, "--no-reminder", help="Disable the reminder"),
    reminder_time: Annotated[
        str | None, typer.Option("--reminder-time", help="Reminder time (HH:MM)")
    ] = None,
    timezone: Annotated[
        str | None, typer.Option("--timezone", help="Reminder timezone")
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Edit the title, description, due date or reminder of a node."""
    changes: dict[str, object] = {}
    if title is not None:
        changes["title"] = title
    if clear_description:
        changes["description"] = None
    elif description is not None:
        changes["description"] = description
    if clear_due:
        changes["due_date"] = None
    elif due is not None:
        changes["due_date"] = due
    if reminder_on and reminder_off:
        raise _fail("Pass either --reminder or --no-reminder, not both.")
    if reminder_on or reminder_off:
        changes["reminder_enabled"] = reminder_on
    if reminder_time is not None:
        changes["reminder_time"] = reminder_time
    if timezone is not None:
        changes["reminder_timezone"] = timezone
    if not changes:
        raise _fail("Nothing to change; pass at least one option.")

    store = _open_store(data_dir)
    try:
        try:
            node = store.update_node(node_id, **changes)
        except HaradaError as e:
            raise _fail(str(e)) from e
        typer.echo(f"Updated '{node.title}' [id={node.id}]")
    finally:
        store.conn.close()


@app.command()
def delete(
    node_id: str = typer.Argument(..., help="Node ID (level 3 or deeper)"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete a node and its descendants, leaving an empty slot."""
    store = _open_store(data_dir)
    try:
        removed = store.count_subtree(node_id)
        try:
            placeholder = store.delete_node(node_id)
        except HaradaError as e:
            raise _fail(str(e)) from e
        typer.echo(f"Deleted {removed} nodes; slot reset to '{placeholder.title}'")
        typer.echo(f"  [id={placeholder.id}]")
    finally:
        store.conn.close()


@app.command()
def duplicate(
    source_id: str = typer.Argument(..., help="Node whose subtree is copied"),
    target_id: str = typer.Argument(..., help="Node at the same level to overwrite"),
    data_dir: DataDirOption = None,
) -> None:
    """Copy a subtree onto another node, replacing that node's subtree."""
    store = _open_store(data_dir)
    try:
        try:
            copies = store.copy_onto(source_id, target_id)
        except HaradaError as e:
            raise _fail(str(e)) from e
        root = copies[0]
        typer.echo(f"Copied {len(copies)} nodes; new root '{root.title}'")
        typer.echo(f"  [id={root.id}]")
    finally:
        store.conn.close()


@app.command()
def focus(
    node_id: str = typer.Argument(..., help="Node ID to focus"),
    data_dir: DataDirOption = None,
) -> None:
    """Show the path to a node with the siblings at every level."""
    store = _open_store(data_dir)
    try:
        node = store.get_node(node_id)
        if node is None:
            raise _fail(f"Node '{node_id}' not found.")
        focused = get_focused_path(
            store.get_tree_nodes(node.tree_id),
            node_id,
            store.get_checklist_items_for_tree(node.tree_id),
        )
        on_path = {entry.node.id for entry in focused.path}
        for level in sorted(focused.siblings_by_level):
            typer.echo(f"Level {level}:")
            for entry in focused.siblings_by_level[level]:
                marker = ">" if entry.node.id in on_path else " "
                blocked = " [blocked by ancestor]" if entry.inherited_blocked else ""
                typer.echo(
                    f"  {marker} {entry.node.title} ({format_progress(entry.progress)})"
                    f"{blocked}  [id={entry.node.id}]"
                )
    finally:
        store.conn.close()


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to find in node titles"),
    tree_id: Annotated[
        str | None, typer.Option("--tree", "-T", help="Restrict to one tree")
    ] = None,
    limit: int = typer.Option(SEARCH_RESULT_LIMIT, "--limit", "-n", help="Max results"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    data_dir: DataDirOption = None,
) -> None:
    """Search node titles across all trees."""
    store = _open_store(data_dir)
    try:
        results, total = search_nodes(
            store.conn, query=query, user_id=LOCAL_USER_ID, tree_id=tree_id, limit=limit
        )
        if output_json:
            data = {
                "results": [
                    {
                        "node_id": r.node.id,
                        "tree_id": r.node.tree_id,
                        "tree": r.tree_title,
                        "title": r.node.title,
                        "level": r.node.level,
                        "status": r.node.status.value,
                        "path": [b.title for b in r.breadcrumbs],
                    }
                    for r in results
                ],
                "total": total,
            }
            typer.echo(json.dumps(data, indent=2))
        else:
            typer.echo(f"Found {total} results (showing {len(results)}):\n")
            for r in results:
                typer.echo(f"  [{r.tree_title}] {r.path_text}")
                typer.echo(f"    id={r.node.id}  level={r.node.level}")
    finally:
        store.conn.close()


@app.command()
def validate(
    tree_id: str = typer.Argument(..., help="Tree ID"),
    data_dir: DataDirOption = None,
) -> None:
    """Check a stored tree against the structural invariants."""
    store = _open_store(data_dir)
    try:
        if store.get_tree(tree_id) is None:
            raise _fail(f"Tree '{tree_id}' not found.")
        problems = find_structure_problems(store.get_tree_nodes(tree_id))
        if problems:
            for problem in problems:
                typer.echo(f"  - {problem}")
            raise typer.Exit(1)
        typer.echo("Tree structure OK")
    finally:
        store.conn.close()


@app.command(name="checklist-add")
def checklist_add(
    node_id: str = typer.Argument(..., help="Checklist-level node ID"),
    title: str = typer.Argument(..., help="Item title"),
    data_dir: DataDirOption = None,
) -> None:
    """Append a checklist item to a node."""
    store = _open_store(data_dir)
    try:
        node = store.get_node(node_id)
        if node is None:
            raise _fail(f"Node '{node_id}' not found.")
        try:
            item = create_checklist_item(
                node, title, existing=store.get_checklist_items(node_id)
            )
        except HaradaError as e:
            raise _fail(str(e)) from e
        store.save_checklist_items([item])
        typer.echo(f"Added '{item.title}' [id={item.id}]")
    finally:
        store.conn.close()


@app.command(name="checklist-status")
def checklist_status(
    item_id: str = typer.Argument(..., help="Checklist item ID"),
    new_status: ChecklistStatus = typer.Argument(..., help="todo, in_progress, done or blocked"),
    data_dir: DataDirOption = None,
) -> None:
    """Set the status of a checklist item."""
    store = _open_store(data_dir)
    try:
        item = store.get_checklist_item(item_id)
        if item is None:
            raise _fail(f"Checklist item '{item_id}' not found.")
        updated = update_checklist_status([item], item_id, new_status)
        store.save_checklist_items(updated)
        typer.echo(f"{item.title}: {new_status.value}")
    finally:
        store.conn.close()


@app.command(name="checklist-reorder")
def checklist_reorder(
    node_id: str = typer.Argument(..., help="Node ID owning the items"),
    item_ids: list[str] = typer.Argument(..., help="All item IDs in the new order"),
    data_dir: DataDirOption = None,
) -> None:
    """Reorder all checklist items of a node."""
    store = _open_store(data_dir)
    try:
        try:
            reordered = reorder_checklist_items(store.get_checklist_items(node_id), item_ids)
        except HaradaError as e:
            raise _fail(str(e)) from e
        store.save_checklist_items(reordered)
        for item in reordered:
            typer.echo(f"  {item.sort_order}: {item.title}")
    finally:
        store.conn.close()


@app.command(name="checklist-delete")
def checklist_delete(
    item_id: str = typer.Argument(..., help="Checklist item ID"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete a checklist item."""
    store = _open_store(data_dir)
    try:
        item = store.get_checklist_item(item_id)
        if item is None:
            raise _fail(f"Checklist item '{item_id}' not found.")
        store.delete_checklist_item(item_id)
        typer.echo(f"Deleted '{item.title}'")
    finally:
        store.conn.close()
