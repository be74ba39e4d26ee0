"""Build plan data model and its two serialisations.

A :class:`BuildPlan` is assembled once by the resolver and never mutated
afterwards. ``to_json`` gives a canonical, byte-stable rendering;
``to_directives`` gives the ``cargo:`` lines the build host consumes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from .features import DependencyDecision
from .target import TargetDescriptor

DIRECTIVE_PREFIX = "cargo:"


@dataclass(frozen=True)
class LinkDirective:
    library: str
    mode: str = "dylib"
    search_path: str | None = None

    def to_dict(self):
        return {"library": self.library, "mode": self.mode, "search_path": self.search_path}

    def lines(self):
        out = []
        if self.search_path:
            out.append(f"rustc-link-search=native={self.search_path}")
        out.append(f"rustc-link-lib={self.mode}={self.library}")
        return out


@dataclass(frozen=True)
class CompileStep:
    """One static library compiled from bundled sources."""

    name: str
    output: str
    include_dirs: tuple[str, ...]
    defines: tuple[tuple[str, str | None], ...]
    compiler_flags: tuple[str, ...]
    source_files: tuple[str, ...]
    static_crt: bool = False
    environment: tuple[tuple[str, str], ...] = ()

    def to_dict(self):
        return {
            "name": self.name,
            "output": self.output,
            "include_dirs": list(self.include_dirs),
            "defines": [[name, value] for name, value in self.defines],
            "compiler_flags": list(self.compiler_flags),
            "source_files": list(self.source_files),
            "static_crt": self.static_crt,
            "environment": dict(self.environment),
        }


@dataclass(frozen=True)
class BuildPlan:
    target: TargetDescriptor
    compiler_path: str
    decisions: tuple[DependencyDecision, ...]
    steps: tuple[CompileStep, ...] = ()
    link_directives: tuple[LinkDirective, ...] = ()
    rerun_triggers: tuple[str, ...] = ()
    exports: tuple[tuple[str, str], ...] = ()
    link_search_paths: tuple[str, ...] = ()
    warnings: tuple[str, ...] = field(default=(), compare=False)

    def step(self, name):
        for step in self.steps:
            if step.name == name:
                return step
        return None

    def decision(self, name):
        for decision in self.decisions:
            if decision.name == name:
                return decision
        return None

    # The RocksDB compile step is the plan's primary view; a system-linked
    # RocksDB has no compile step and these are empty.
    @property
    def include_dirs(self):
        step = self.step("rocksdb")
        return step.include_dirs if step else ()

    @property
    def defines(self):
        step = self.step("rocksdb")
        return step.defines if step else ()

    @property
    def compiler_flags(self):
        step = self.step("rocksdb")
        return step.compiler_flags if step else ()

    @property
    def source_files(self):
        step = self.step("rocksdb")
        return step.source_files if step else ()

    def define_names(self):
        return [name for name, _ in self.defines]

    def to_dict(self):
        return {
            "target": self.target.to_dict(),
            "compiler_path": self.compiler_path,
            "decisions": [d.to_dict() for d in self.decisions],
            "steps": [s.to_dict() for s in self.steps],
            "link_search_paths": list(self.link_search_paths),
            "link_directives": [d.to_dict() for d in self.link_directives],
            "rerun_triggers": list(self.rerun_triggers),
            "exports": dict(self.exports),
        }

    def to_json(self):
        return json.dumps(self.to_dict(), indent=2)

    def to_directives(self, include_warnings=True):
        lines = []
        if include_warnings:
            lines.extend(f"warning={w}" for w in self.warnings)
        lines.extend(self.rerun_triggers)
        lines.extend(f"rustc-link-search=native={path}" for path in self.link_search_paths)
        for directive in self.link_directives:
            lines.extend(directive.lines())
        lines.extend(f"{key}={value}" for key, value in self.exports)
        return [DIRECTIVE_PREFIX + line for line in lines]
