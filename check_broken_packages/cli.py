"""check-broken-packages: audit foreign packages, Python dirs and unit links.

Usage:
    check-broken-packages
    check-broken-packages -v                 # also dump the soname/package maps
    check-broken-packages --config my.yaml
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import click

from . import log, python_probe
from .config import load_config
from .errors import AuditError
from .pacman import list_foreign_packages
from .pipeline import Pipeline, Progress, aggregate
from .report import write_report
from .services import broken_service_links, enabled_service_links


def _wants_verbose(args):
    return any(a.startswith("-v") or a.startswith("--v") for a in args)


def run_audit(config, verbose=False):
    """Run the full audit and print the report to stdout."""
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="python-probe") as probe_pool:
        python_future = probe_pool.submit(python_probe.probe, config)

        try:
            packages = list_foreign_packages(config.pacman)
        except AuditError as e:
            raise AuditError(f"unable to get list of foreign packages: {e}") from e
        log.debug(f"{len(packages)} foreign packages")

        links = enabled_service_links(config.unit_globs)

        progress = Progress(len(packages) + len(links))
        pipeline = Pipeline(config, progress)
        try:
            pipeline.start(packages)
            # Cheap enough to do here while the pools are busy
            broken_links = broken_service_links(links)
            progress.inc(len(links))
            deps = pipeline.join()
        finally:
            progress.close()

        result = aggregate(deps, config.patchelf)
        write_report(result, python_future.result(), broken_links, verbose=verbose)
    return result


@click.command(context_settings={"ignore_unknown_options": True, "allow_extra_args": True})
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="YAML file overriding the built-in settings")
@click.pass_context
def main(ctx, config_path):
    """Report foreign packages broken by missing libraries, stale Python
    directories and dangling enabled-unit links.

    Any argument starting with -v or --v enables the verbose map dump.
    """
    verbose = _wants_verbose(ctx.args)
    log.set_verbose(verbose)
    try:
        config = load_config(config_path)
        run_audit(config, verbose=verbose)
    except AuditError as e:
        raise click.ClickException(str(e)) from e


if __name__ == "__main__":
    main()
