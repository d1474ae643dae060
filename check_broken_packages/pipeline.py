"""Broken-dependency pipeline.

    foreign packages --> [A: package -> artifacts] --> [B: artifact -> missing
    sonames + providers] --> [C: direct/transitive classification]

Stages A and B are thread pools fed by unbounded queues; each worker
exits when it pulls a stop marker.  Stage C runs in the caller's thread
once both pools have drained, so the aggregation maps need no locking.
"""

from __future__ import annotations

import multiprocessing
import os
import queue
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

import click
from tqdm import tqdm

from . import elf, log
from .config import AuditConfig
from .errors import AuditError, ToolError
from .pacman import list_package_files, owners_of_path

UNKNOWN_PROVIDER = "?"

_STOP = object()


@dataclass(frozen=True)
class ExecFileWork:
    """One artifact of a package, queued for ldd."""
    package: str
    path: str
    # Set on the final artifact of a package; drives the progress count.
    is_last: bool


@dataclass(frozen=True)
class MissingDep:
    """One unresolved soname of one artifact."""
    package: str
    artifact: str
    soname: str
    providers: Tuple[str, ...]


@dataclass
class AuditResult:
    """The three views built from the missing-dependency stream."""
    # soname -> package -> artifacts (duplicates allowed)
    libmap: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)
    # package -> sonames missing as direct NEEDED entries
    pacmap: Dict[str, Set[str]] = field(default_factory=dict)
    # soname -> first provider of its latest lookup
    pac_sources: Dict[str, str] = field(default_factory=dict)
    # packages whose misses were all transitive
    transitive: Set[str] = field(default_factory=set)


class Progress:
    """Thread-safe counter behind a tqdm bar."""

    def __init__(self, total, disable=None):
        self.lock = threading.Lock()
        self.count = 0
        self._bar = tqdm(
            total=total,
            desc="Analyzing",
            file=sys.stderr,
            leave=False,
            disable=disable,
            bar_format="{desc} {bar} {n_fmt}/{total_fmt}",
        )

    def inc(self, n=1):
        with self.lock:
            self.count += n
            self._bar.update(n)

    def close(self):
        with self.lock:
            self._bar.close()


def usable_cpu_count():
    """CPUs this process may run on (affinity-aware where supported)."""
    try:
        return len(os.sched_getaffinity(0))
    except AttributeError:
        return multiprocessing.cpu_count()


# ---------------------------------------------------------------------------
# Stage A
# ---------------------------------------------------------------------------

def package_artifacts(files, blacklist):
    """Filter a package's file listing down to the artifacts worth auditing."""
    return [
        path for path in elf.find_artifacts(files)
        if not elf.is_blacklisted(path, blacklist)
    ]


def _stage_a_worker(packages, work, progress, config):
    while True:
        package = packages.get()
        if package is _STOP:
            return
        log.debug(f"package queue => {package}")

        try:
            files = list_package_files(package, config.pacman)
        except ToolError as e:
            log.error(f"failed to get executable files of package {package}: {e}")
            progress.inc()
            continue

        artifacts = package_artifacts(files, config.blacklist)
        if not artifacts:
            progress.inc()
            continue

        last = len(artifacts) - 1
        for i, path in enumerate(artifacts):
            item = ExecFileWork(package, path, i == last)
            log.debug(f"{item} => artifact queue")
            work.put(item)


# ---------------------------------------------------------------------------
# Stage B
# ---------------------------------------------------------------------------

def providers_for(soname, pacman="pacman"):
    """Return the sync-db packages shipping *soname*'s unversioned file name."""
    key = elf.provider_lookup_key(soname)
    try:
        owners = owners_of_path(key, pacman)
    except ToolError as e:
        log.error(f"failed to look up provider of {key}: {e}")
        owners = []
    return owners or [UNKNOWN_PROVIDER]


def missing_for_artifact(item, config):
    """Run ldd on one artifact and attribute each missing soname."""
    found = []
    for soname in elf.missing_dependencies(item.path, config.ldd):
        providers = providers_for(soname, config.pacman)
        found.append(MissingDep(item.package, item.path, soname, tuple(providers)))
    return found


def _stage_b_worker(work, results, progress, config):
    while True:
        item = work.get()
        if item is _STOP:
            return
        log.debug(f"artifact queue => {item}")

        try:
            for dep in missing_for_artifact(item, config):
                log.debug(f"{dep} => missing-deps queue")
                results.put(dep)
        except ToolError as e:
            log.error(f"failed to get missing dependencies for path {item.path}: {e}")

        if item.is_last:
            progress.inc()


# ---------------------------------------------------------------------------
# Pools
# ---------------------------------------------------------------------------

class Pipeline:
    """Stages A and B running in background thread pools.

    start() returns as soon as every package is queued, leaving the caller
    free to do other work; join() waits for both stages and hands back the
    missing-dependency stream in arrival order.
    """

    def __init__(self, config: AuditConfig, progress: Progress):
        self.config = config
        self.progress = progress
        self.jobs = config.jobs or usable_cpu_count()
        self._packages = queue.Queue()
        self._work = queue.Queue()
        self._results = queue.Queue()
        self._a_pool = None
        self._b_pool = None
        self._a_futures = []
        self._b_futures = []

    def start(self, packages):
        a_count = min(self.jobs, len(packages))
        try:
            self._b_pool = ThreadPoolExecutor(max_workers=self.jobs,
                                              thread_name_prefix="artifact")
            for _ in range(self.jobs):
                self._b_futures.append(
                    self._b_pool.submit(_stage_b_worker, self._work, self._results,
                                        self.progress, self.config))
            self._a_pool = ThreadPoolExecutor(max_workers=max(a_count, 1),
                                              thread_name_prefix="package")
            for _ in range(a_count):
                self._a_futures.append(
                    self._a_pool.submit(_stage_a_worker, self._packages, self._work,
                                        self.progress, self.config))
        except RuntimeError as e:
            self._abort()
            raise AuditError(f"failed to start worker threads: {e}") from e

        for package in packages:
            log.debug(f"{package} => package queue")
            self._packages.put(package)
        for _ in range(a_count):
            self._packages.put(_STOP)

    def _abort(self):
        """Stop whatever workers did start so their threads can exit.

        A submit that failed to spawn its thread may still have queued its
        worker, so each queue gets a stop marker per possible worker.
        """
        for _ in range(self.jobs):
            self._packages.put(_STOP)
            self._work.put(_STOP)
        for pool in (self._a_pool, self._b_pool):
            if pool is not None:
                pool.shutdown(cancel_futures=True)

    def join(self) -> List[MissingDep]:
        try:
            for future in self._a_futures:
                future.result()
        finally:
            # Stage B must always be released, even if stage A blew up
            for _ in self._b_futures:
                self._work.put(_STOP)
            self._a_pool.shutdown()

        for future in self._b_futures:
            future.result()
        self._b_pool.shutdown()

        deps = []
        while True:
            try:
                deps.append(self._results.get_nowait())
            except queue.Empty:
                return deps


# ---------------------------------------------------------------------------
# Stage C
# ---------------------------------------------------------------------------

def aggregate(deps, patchelf="patchelf", echo=click.echo) -> AuditResult:
    """Classify each miss as direct or transitive and build the views.

    Prints one line per miss (providers, soname, package, artifact) in the
    order received.
    """
    result = AuditResult()
    candidates = set()

    for dep in deps:
        echo(f"{' '.join(dep.providers)} {dep.soname} {dep.package} {dep.artifact}")

        if elf.is_direct_dependency(dep.artifact, dep.soname, patchelf):
            result.libmap.setdefault(dep.soname, {}).setdefault(dep.package, []).append(dep.artifact)
            result.pacmap.setdefault(dep.package, set()).add(dep.soname)
        else:
            candidates.add(dep.package)

        # "?" means the lookup came back empty; nothing to attribute
        if dep.providers and dep.providers[0] != UNKNOWN_PROVIDER:
            result.pac_sources[dep.soname] = dep.providers[0]

    result.transitive = candidates - result.pacmap.keys()
    return result
