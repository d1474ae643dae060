"""Human-readable report of an audit run."""

import json

import click


def _soname(text):
    return click.style(text, fg="yellow")


def _package(text):
    return click.style(text, fg="red")


def _provider(text):
    return click.style(text, fg="cyan")


def _transitive(text):
    return click.style(text, fg="yellow")


def libmap_lines(result):
    """One line per missing soname, naming every package that needs it."""
    for soname, packages in result.libmap.items():
        plural = "s" if len(packages) > 1 else ""
        names = " ".join(_package(p) for p in packages)
        yield f"package{plural} need rebuild because of missing {_soname(soname)}: {names}"


def pacmap_lines(result):
    """One line per directly broken package with each soname and its provider."""
    for package, sonames in result.pacmap.items():
        entries = []
        for soname in sonames:
            entry = _soname(soname)
            provider = result.pac_sources.get(soname)
            if provider is not None:
                entry += f" from {_provider(provider)}"
            entries.append(entry)
        yield f"package {_package(package)} misses {';'.join(entries)}"


def transitive_line(result):
    if not result.transitive:
        return None
    names = ", ".join(_transitive(p) for p in result.transitive)
    return f"transitively broken packages: {names}"


def python_lines(broken_python):
    for package, directory in broken_python:
        yield click.style(
            f'Package "{package}" has files in directory "{directory}" '
            f"that are ignored by the current Python interpreter",
            fg="yellow",
        )


def service_lines(broken_links):
    for link in broken_links:
        yield click.style(f'Systemd enabled service has broken link in "{link}"', fg="yellow")


def _jsonable(obj):
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    raise TypeError(f"cannot serialize {type(obj).__name__}")


def verbose_dump(result):
    """Debug view of the soname and package maps."""
    return [
        json.dumps(result.libmap, indent=2, sort_keys=True, default=_jsonable),
        json.dumps(result.pacmap, indent=2, sort_keys=True, default=_jsonable),
    ]


def write_report(result, broken_python=(), broken_links=(), verbose=False, echo=click.echo):
    for line in libmap_lines(result):
        echo(line)
    for line in pacmap_lines(result):
        echo(line)
    line = transitive_line(result)
    if line is not None:
        echo(line)

    if verbose:
        for block in verbose_dump(result):
            echo(block)

    for line in python_lines(broken_python):
        echo(line)
    for line in service_lines(broken_links):
        echo(line)
