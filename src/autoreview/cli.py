"""Click CLI entry point with lazy-loaded subcommands."""

import logging
import os
import sys

# Fix Unicode output on Windows consoles (cp1253, cp1252, etc.)
if sys.platform == "win32" and not os.environ.get("PYTHONIOENCODING"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import click

# Lazy-loading command group: imports command modules only when invoked.
# This keeps tree-sitter grammars out of `--help` and `--version`.
_COMMANDS = {
    "analyze": ("autoreview.commands.cmd_analyze", "analyze"),
    "batch": ("autoreview.commands.cmd_batch", "batch"),
}


class LazyGroup(click.Group):
    """A Click group that lazy-loads command modules on first access."""

    def list_commands(self, ctx):
        return sorted(_COMMANDS.keys())

    def get_command(self, ctx, cmd_name):
        if cmd_name not in _COMMANDS:
            return None
        module_path, attr_name = _COMMANDS[cmd_name]
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, attr_name)


def configure_logging(verbose: bool) -> None:
    """DEBUG on stderr with --verbose, otherwise warnings only."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


@click.group(cls=LazyGroup)
@click.version_option(package_name="autoreview")
@click.option("--json", "json_mode", is_flag=True, help="Output in JSON format")
@click.pass_context
def cli(ctx, json_mode):
    """autoreview: verdicts and feedback for resistor-color-duo solutions."""
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_mode
