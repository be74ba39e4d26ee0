import os
import click
from .. import bindings as bindings_module
from ..builder import generate_bindings
from ..decorators import handle_exceptions
from ..resolver import DEFAULT_OUT_DIR
from .common import load_run_context, overrides_for

@click.command()
@click.pass_context
@click.option("--out-dir", "-o", default=None, help="Directory for bindings.rs (defaults to $OUT_DIR).")
@click.option("--dry-run", is_flag=True, help="Print the generator command instead of running it.")
@handle_exceptions
def bindings(ctx, out_dir, dry_run):
    """Generate the RocksDB C API bindings."""
    conf, env, source_root = load_run_context(ctx)
    out_dir = out_dir or env.get("OUT_DIR") or DEFAULT_OUT_DIR
    overrides = overrides_for(conf, env)

    if dry_run:
        descriptor = bindings_module.build(overrides, source_root=source_root)
        click.echo(" ".join(descriptor.command(os.path.join(out_dir, bindings_module.OUTPUT_FILE))))
        return

    click.echo(generate_bindings(overrides, env, source_root=source_root, out_dir=out_dir))
