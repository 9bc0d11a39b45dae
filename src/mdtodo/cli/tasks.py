"""Command-line interface for the markdown todo lists."""

import functools
import logging
import sys
from collections import Counter
from pathlib import Path

import click
from rich.text import Text

from ..config import ConfigModel, ListMetadata, default_config_path, load_config, resolve_list, save_config
from ..document import Document, list_items
from ..errors import StorageError, TodoError
from ..mutations import BatchResult, MoveResult, add_item, move_items, remove_items, renumber, set_done
from ..storage import load_document, save_document
from ..theme import format_item, format_listing, get_console, highlight_tags

logger = logging.getLogger(__name__)


def handle_errors(func):
    """Report TodoErrors on stderr and exit with status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except TodoError as e:
            logger.debug("Command failed", exc_info=True)
            get_console(stderr=True).print(Text(f"❌ {e}", style="error"))
            sys.exit(1)
    return wrapper


def _resolve(obj: dict, name: str = None) -> ListMetadata:
    return resolve_list(obj['config'], name or obj['list_name'])


def _save(config: ConfigModel, target: ListMetadata, doc: Document) -> None:
    if target.path.parent == Path(config.main_dir):
        config.ensure_main_dir()
    save_document(target.path, doc)


def _report_failures(obj: dict, result: BatchResult) -> None:
    """Print every number that failed; exit 1 if there were any."""
    if result.ok:
        return
    err_console = get_console(obj['config'].no_color, stderr=True)
    for failure in result.failures:
        err_console.print(Text(f"❌ {failure}", style="error"))
    sys.exit(1)


def _print_welcome(console, config: ConfigModel, config_path: Path) -> None:
    console.print(Text("Welcome to todo!", style="success"))
    console.print(f"Wrote a default config to {config_path}")
    console.print(f"New lists are stored in {config.main_dir}")
    console.print(
        f"'{config.general_list}' is the general list: it is used when no list is named "
        "and the current directory has no TODO.md."
    )
    console.print()


@click.group()
@click.option("--config", "config_file", type=click.Path(dir_okay=False), envvar="MDTODO_CONFIG",
              help="Path to config file")
@click.option("--list", "-l", "list_name", help="Name of the list to use")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def main(ctx, config_file, list_name, verbose):
    """Todo lists kept as plain markdown files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['list_name'] = list_name

    config_path = Path(config_file) if config_file else default_config_path()
    first_run = not config_path.exists()
    try:
        config = load_config(config_path)
    except TodoError as e:
        get_console(stderr=True).print(Text(f"Configuration error: {e}", style="error"))
        sys.exit(1)

    ctx.obj['config'] = config
    ctx.obj['config_path'] = config_path
    ctx.obj['console'] = get_console(config.no_color)
    if first_run:
        _print_welcome(ctx.obj['console'], config, config_path)


@click.command()
@click.argument("text", nargs=-1, required=True)
@click.option("--section", "-s", help="Heading of the section to add the item under")
@click.pass_obj
@handle_errors
def add(obj, text, section):
    """Add a new item.

    Examples:
      todo add "Review PR #work"
      todo -l home add buy milk #errands
    """
    config = obj['config']
    target = _resolve(obj)
    doc = load_document(target.path)
    item = add_item(doc, " ".join(text), section=section, ascii_checkbox=not config.use_emoji)
    _save(config, target, doc)

    line = Text(f"Added to {target.name}: ", style="success")
    line.append_text(format_item(item.summary(), config.use_emoji))
    obj['console'].print(line)


@click.command()
@click.option("--all", "-a", "include_done", is_flag=True, help="Include completed items")
@click.option("--tag", "-t", "tags", multiple=True, help="Only items with this tag (repeatable)")
@click.pass_obj
@handle_errors
def list_todos(obj, include_done, tags):
    """List the items of a list."""
    config = obj['config']
    console = obj['console']
    target = _resolve(obj)
    doc = load_document(target.path)

    wanted = {tag.lstrip("#") for tag in tags}
    items = [item for item in list_items(doc, include_done) if wanted <= item.tags]

    console.print(Text(f"{target.name} ({target.path})", style="muted"))
    if not items:
        console.print(Text("No items.", style="warning"))
        return
    for line in format_listing(items, config.use_emoji):
        console.print(line)


def _mark(obj, numbers, done: bool) -> None:
    config = obj['config']
    target = _resolve(obj)
    doc = load_document(target.path)
    result = set_done(doc, numbers, done)
    if result.succeeded:
        _save(config, target, doc)

    for number in result.succeeded:
        obj['console'].print(format_item(doc.get(number).summary(), config.use_emoji))
    _report_failures(obj, result)


@click.command()
@click.argument("numbers", nargs=-1, type=int, required=True)
@click.pass_obj
@handle_errors
def done(obj, numbers):
    """Mark items as done."""
    _mark(obj, numbers, True)


@click.command()
@click.argument("numbers", nargs=-1, type=int, required=True)
@click.pass_obj
@handle_errors
def undone(obj, numbers):
    """Mark items as not done."""
    _mark(obj, numbers, False)


def _print_moved(obj: dict, result: MoveResult, dest_list: ListMetadata, dest: Document) -> None:
    for old, new in result.renumbered.items():
        line = Text(f"{old} → {dest_list.name} ", style="success")
        line.append_text(format_item(dest.get(new).summary(), obj['config'].use_emoji))
        obj['console'].print(line)


@click.command()
@click.argument("numbers", nargs=-1, type=int, required=True)
@click.option("--to", "dest_name", required=True, help="Name of the list to move the items to")
@click.option("--section", "-s", help="Heading in the destination list to move the items under")
@click.pass_obj
@handle_errors
def mv(obj, numbers, dest_name, section):
    """Move items to another list."""
    config = obj['config']
    source_list = _resolve(obj)
    dest_list = _resolve(obj, dest_name)

    source = load_document(source_list.path)
    same_file = source_list.path.resolve() == dest_list.path.resolve()
    dest = source if same_file else load_document(dest_list.path)

    result = move_items(numbers, source, dest, section=section)
    if result.succeeded:
        # Destination first: a failed second write duplicates an item rather than losing it
        _save(config, dest_list, dest)
        if not same_file:
            try:
                _save(config, source_list, source)
            except StorageError:
                _print_moved(obj, result, dest_list, dest)
                copied = ", ".join(str(number) for number in result.succeeded)
                get_console(config.no_color, stderr=True).print(Text(
                    f"⚠️  Items {copied} were added to '{dest_list.name}' but are "
                    f"still in '{source_list.name}'",
                    style="warning",
                ))
                raise

    _print_moved(obj, result, dest_list, dest)
    _report_failures(obj, result)


@click.command()
@click.argument("numbers", nargs=-1, type=int, required=True)
@click.pass_obj
@handle_errors
def rm(obj, numbers):
    """Delete items."""
    target = _resolve(obj)
    doc = load_document(target.path)
    removed = {number: doc.get(number) for number in numbers if number in doc}
    result = remove_items(doc, numbers)
    if result.succeeded:
        _save(obj['config'], target, doc)

    for number in result.succeeded:
        line = Text("Removed ", style="success")
        line.append_text(format_item(removed[number].summary(), obj['config'].use_emoji))
        obj['console'].print(line)
    _report_failures(obj, result)


@click.command("renumber")
@click.pass_obj
@handle_errors
def renumber_list(obj):
    """Number the items 1, 2, 3... in file order."""
    target = _resolve(obj)
    doc = load_document(target.path)
    changes = renumber(doc)
    if not changes:
        obj['console'].print(Text("Already numbered in order.", style="muted"))
        return
    _save(obj['config'], target, doc)
    for old, new in changes.items():
        obj['console'].print(f"{old:>3} → {new}")


@click.command()
@click.option("--all", "-a", "include_done", is_flag=True, help="Count completed items too")
@click.pass_obj
@handle_errors
def tags(obj, include_done):
    """Show the tags used in a list."""
    console = obj['console']
    doc = load_document(_resolve(obj).path)
    counts = Counter(tag for item in list_items(doc, include_done) for tag in item.tags)
    if not counts:
        console.print(Text("No tags found.", style="warning"))
        return
    for tag, count in sorted(counts.items(), key=lambda pair: (-pair[1], pair[0])):
        line = highlight_tags(f"#{tag}")
        line.append(f" {count}", style="muted")
        console.print(line)


@click.command()
@click.pass_obj
@handle_errors
def lists(obj):
    """Show all known lists."""
    config = obj['config']
    console = obj['console']
    known = config.existing_lists()
    if not any(meta.name == config.general_list for meta in known):
        known.append(ListMetadata(config.general_list, config.general_list_path()))
    for meta in known:
        marker = " (general)" if meta.name == config.general_list else ""
        console.print(Text(f"{meta}{marker}"))


@click.command()
@click.argument("name")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_obj
@handle_errors
def register(obj, name, path):
    """Register a list file that lives outside the main directory."""
    config = obj['config']
    meta = config.register_list(name, path)
    save_config(config, obj['config_path'])
    obj['console'].print(Text(f"Registered {meta}", style="success"))


main.add_command(add)
main.add_command(list_todos, name="ls")
main.add_command(done)
main.add_command(undone)
main.add_command(mv)
main.add_command(rm)
main.add_command(renumber_list)
main.add_command(tags)
main.add_command(lists)
main.add_command(register)


if __name__ == "__main__":
    main()
