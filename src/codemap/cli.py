"""CLI entry point for codemap."""

import argparse
import logging
import os
import sys

from .context import get_file_context
from .errors import CodemapError
from .extract import parse_file
from .models import AnalysisConfig
from .pipeline import Analysis, run_analysis

log = logging.getLogger(__name__)


def _analyze(args: argparse.Namespace) -> Analysis:
    config = AnalysisConfig(repo_root=os.path.abspath(args.path))
    if getattr(args, "workers", None):
        config.max_workers = args.workers
    print(f"Analyzing {config.repo_root}", file=sys.stderr)
    return run_analysis(config)


def _rel(analysis: Analysis, path: str) -> str:
    return os.path.relpath(path, analysis.repo_root)


def cmd_analyze(args: argparse.Namespace) -> int:
    analysis = _analyze(args)
    stats = analysis.stats
    print(f"  files:   {stats.get('files', 0)}")
    print(f"  parsed:  {stats.get('parsed', 0)}")
    print(f"  edges:   {stats.get('edges', 0)}")
    print(f"  loc:     {stats.get('total_loc', 0)}")
    for lang, count in stats.get("by_language", {}).items():
        print(f"    {lang}: {count} files")

    print("\nMost important files:")
    for rf in analysis.ranked[:10]:
        print(f"  {rf.rank:2}. {_rel(analysis, rf.file):<50} score={rf.score:.4f}")

    print("\nModules:")
    for c in analysis.clusters:
        print(f"  {c.name:<20} {len(c.files):4} files  cohesion={c.cohesion:.2f}")

    print("\nPatterns:")
    for p in analysis.patterns:
        print(f"  {p.name}  ({p.confidence * 100:.0f}%)")
    return 0


def cmd_parse(args: argparse.Namespace) -> int:
    parsed = parse_file(args.file)
    print(f"{parsed.file_path}  [{parsed.language}]")
    print(f"\nImports ({len(parsed.imports)}):")
    for imp in parsed.imports:
        names = f"  ({', '.join(imp.names)})" if imp.names else ""
        print(f"  {imp.line:4}: {imp.source}{names}")
    print(f"\nExports ({len(parsed.exports)}): {', '.join(parsed.exports)}")
    print(f"\nDefinitions ({len(parsed.definitions)}):")
    for d in parsed.definitions:
        marker = "*" if d.exported else " "
        print(f"  {d.line:4}: {marker} {d.kind:<10} {d.name}")
    return 0


def cmd_hotspots(args: argparse.Namespace) -> int:
    analysis = _analyze(args)
    top = analysis.ranked[:args.n]
    print(f"Top {len(top)} files by PageRank:\n")
    for rf in top:
        print(f"  {rf.rank:2}. {_rel(analysis, rf.file):<50} "
              f"pr={rf.score:.4f}  in={rf.in_degree}  out={rf.out_degree}")
    return 0


def cmd_clusters(args: argparse.Namespace) -> int:
    analysis = _analyze(args)
    for c in analysis.clusters:
        print(f"\n{c.name}  [{c.id}]  cohesion={c.cohesion:.2f}")
        print(f"  {c.description}")
        for f in c.files[:args.limit]:
            print(f"    {_rel(analysis, f)}")
        if len(c.files) > args.limit:
            print(f"    ... {len(c.files) - args.limit} more")
    return 0


def cmd_patterns(args: argparse.Namespace) -> int:
    analysis = _analyze(args)
    print("=== Architectural Patterns ===")
    if not analysis.patterns:
        print("\nNo clear architectural patterns detected")
    for p in analysis.patterns:
        print(f"\n{p.name}  (confidence {p.confidence * 100:.0f}%)")
        for line in p.evidence:
            print(f"  - {line}")
    return 0


def cmd_entry_points(args: argparse.Namespace) -> int:
    analysis = _analyze(args)
    roles = [args.role] if args.role else ["entry", "hub", "aggregator", "util", "leaf"]
    for role in roles:
        matches = [e for e in analysis.entry_points if e.role == role]
        if not matches:
            continue
        print(f"\n{role.upper()} ({len(matches)}):")
        for e in matches[:args.n]:
            print(f"  {_rel(analysis, e.file):<50} in={e.in_degree} out={e.out_degree}")
    return 0


def cmd_context(args: argparse.Namespace) -> int:
    analysis = _analyze(args)
    target = os.path.abspath(args.file)
    ctx = get_file_context(target, analysis.graph, analysis.clusters, analysis.ranked)
    print(_rel(analysis, ctx.file_path))
    if ctx.summary:
        print(f"  summary:     {ctx.summary}")
    if ctx.cluster:
        print(f"  module:      {ctx.cluster}")
    if ctx.pagerank_score is not None:
        print(f"  pagerank:    {ctx.pagerank_score:.4f}  ({ctx.role})")
    print(f"  exports:     {', '.join(ctx.exports) or '-'}")
    print(f"  definitions: {len(ctx.definitions)}")
    if ctx.imports:
        print(f"  imports:     {', '.join(i.source for i in ctx.imports)}")
    if ctx.imported_by:
        print(f"  imported by: {', '.join(_rel(analysis, f) for f in ctx.imported_by[:8])}")
    if ctx.related_files:
        print(f"  related:     {', '.join(_rel(analysis, f) for f in ctx.related_files[:8])}")
    return 0


def main() -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    parser = argparse.ArgumentParser(
        prog="codemap",
        description="Dependency graph and architecture analysis for TS/JS, Haskell and PureScript repositories",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # analyze
    p = sub.add_parser("analyze", help="Run the full analysis and print a summary")
    p.add_argument("path", nargs="?", default=".", help="Repository root (default: .)")
    p.add_argument("--workers", type=int, help="Parser threads")

    # parse
    p = sub.add_parser("parse", help="Show imports, exports and definitions of one file")
    p.add_argument("file", help="Source file")

    # hotspots
    p = sub.add_parser("hotspots", help="Show the most important files by PageRank")
    p.add_argument("path", nargs="?", default=".", help="Repository root")
    p.add_argument("-n", type=int, default=20, help="Number of results")

    # clusters
    p = sub.add_parser("clusters", help="Show directory-based modules")
    p.add_argument("path", nargs="?", default=".", help="Repository root")
    p.add_argument("--limit", type=int, default=10, help="Files listed per module")

    # patterns
    p = sub.add_parser("patterns", help="Detect architectural patterns")
    p.add_argument("path", nargs="?", default=".", help="Repository root")

    # entry-points
    p = sub.add_parser("entry-points", help="Classify files by role")
    p.add_argument("path", nargs="?", default=".", help="Repository root")
    p.add_argument("--role", choices=["entry", "hub", "aggregator", "util", "leaf"])
    p.add_argument("-n", type=int, default=10, help="Files listed per role")

    # context
    p = sub.add_parser("context", help="Everything known about one file")
    p.add_argument("file", help="Source file")
    p.add_argument("--path", default=".", help="Repository root")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger("codemap").setLevel(logging.DEBUG)

    handlers = {
        "analyze": cmd_analyze,
        "parse": cmd_parse,
        "hotspots": cmd_hotspots,
        "clusters": cmd_clusters,
        "patterns": cmd_patterns,
        "entry-points": cmd_entry_points,
        "context": cmd_context,
    }

    try:
        sys.exit(handlers[args.command](args))
    except CodemapError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
