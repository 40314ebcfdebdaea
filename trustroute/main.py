#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TrustRoute - CLI Entry Point
============================

Command-line interface to the model router.

Usage:
    trustroute route [--task TASK] [--ram GB] [--prefer BACKEND] [--min-trust N] [--json]
    trustroute default [--task TASK] [--prefer BACKEND] [--urgency low|medium|high]
    trustroute recommend [--task TASK] [--route] [--json]
    trustroute models [--refresh] [--json]
    trustroute backends
    trustroute --version

Author: Léon
"""

from pathlib import Path
import argparse
import asyncio
import json
import logging
import sys

from . import __version__
from .config import ROUTING_CONFIG_FILE, USER_CONFIG_FILE, RouterConfig
from .errors import NoSuitableModels
from .models import BACKENDS, TASK_TYPES, HardwareConstraints, ModelRoutingDecision, RoutingConfig, SmartContext
from .routing.smart import SmartRoutingService, build_service

logger = logging.getLogger(__name__)


def _load_service(args) -> SmartRoutingService:
    """Build the routing service from the CLI options."""
    user_file = Path(args.config) if args.config else USER_CONFIG_FILE
    return build_service(RouterConfig.load(ROUTING_CONFIG_FILE, user_file))


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _print_no_models(error: NoSuitableModels) -> None:
    print(f"[ERR] {error}")
    print("\n    Filtering breakdown:")
    for stage, count in error.counts.items():
        print(f"      {stage:<22} {count}")
    hints = error.hints()
    if hints:
        print("\n    Try:")
        for hint in hints:
            print(f"      - {hint}")


def _print_decision(decision: ModelRoutingDecision) -> None:
    """Human-readable audit trail of a routing decision."""
    selected = decision.selected_model

    print("\n" + "=" * 60)
    print(f"[OK] {selected.name} ({selected.backend})")
    print("=" * 60)
    print(f"\n    {decision.reasoning}")

    print("\n[>] Routing steps:")
    print(f"    1. Consolidation: {decision.consolidation.total_models} models "
          f"{decision.consolidation.backend_counts} ({decision.consolidation.duration:.1f}ms)")
    print(f"    2. Filtering: {decision.filtering.remaining} remaining "
          f"(availability -{decision.filtering.availability_filtered}, "
          f"task -{decision.filtering.task_filtered}, "
          f"hardware -{decision.filtering.hardware_filtered}, "
          f"trust -{decision.filtering.trust_filtered}) ({decision.filtering.duration:.1f}ms)")
    print(f"    3. Selection: {decision.selection.scoring_method}, "
          f"{len(decision.selection.top_candidates)} candidates ({decision.selection.duration:.1f}ms)")
    print(f"    4. Routing: {decision.dispatch.target_backend} via "
          f"{decision.dispatch.routing_method} ({decision.dispatch.duration:.1f}ms)")
    print(f"    Total: {decision.total_duration:.1f}ms")

    top = decision.selection.top_candidates[0]
    print("\n[>] Selection factors:")
    for factor, value in top.breakdown.items():
        bar = "#" * int(value * 20)
        print(f"    {factor:<18} {value * 100:5.1f}% {bar}")
    if top.bonus:
        print(f"    {'preferred backend':<18} +{top.bonus:.2f}")

    if decision.alternatives:
        print("\n[>] Alternatives:")
        for i, alt in enumerate(decision.alternatives, 2):
            print(f"    {i}. {alt.name} ({alt.backend}) - Trust: {alt.trust_score:g}/10")


# =============================================================================
# ROUTE COMMAND
# =============================================================================

def cmd_route(args):
    """Run the routing pipeline once."""
    service = _load_service(args)
    constraints = None
    if args.ram is not None or args.max_download is not None:
        constraints = HardwareConstraints(
            available_ram=args.ram,
            max_download_size=int(args.max_download * 1024 ** 3) if args.max_download is not None else None,
        )
    config = RoutingConfig(
        task=args.task,
        hardware_constraints=constraints,
        preferred_backends=tuple(args.prefer or ()),
        minimum_trust_score=args.min_trust,
        max_candidates=args.max_candidates,
    )

    try:
        decision = asyncio.run(service.pipeline.route(config))
    except NoSuitableModels as e:
        _print_no_models(e)
        sys.exit(1)

    if args.json:
        _print_json(decision.to_dict())
    else:
        _print_decision(decision)


# =============================================================================
# DEFAULT COMMAND
# =============================================================================

def cmd_default(args):
    """Pick a smart default model."""
    service = _load_service(args)
    context = SmartContext(
        task=args.task,
        preferred_backends=tuple(args.prefer or ()),
        urgency=args.urgency,
    )
    selection = asyncio.run(service.get_smart_default(context))

    if args.json:
        _print_json(selection.to_dict())
        return

    model = selection.selected_model
    status = "[OK]" if model.available else "[!]"
    print(f"\n{status} {model.name} ({model.backend})")
    print(f"    Reason: {selection.reason}")
    print(f"    Confidence: {selection.confidence * 100:.0f}%")
    print(f"    {selection.reasoning}")
    if selection.alternatives:
        print(f"    Alternatives: {', '.join(m.name for m in selection.alternatives)}")


# =============================================================================
# RECOMMEND COMMAND
# =============================================================================

def cmd_recommend(args):
    """Recommend a routing configuration for this host."""
    service = _load_service(args)

    if not args.route:
        recommendation = asyncio.run(service.pipeline.get_routing_recommendation(args.task))
        if args.json:
            _print_json(recommendation.to_dict())
            return
        config = recommendation.recommended_config
        print("\n[>] Recommended routing configuration:\n")
        print(f"    {recommendation.reasoning}")
        print(f"\n    Task: {config.task or 'any'}")
        print(f"    RAM limit: {config.hardware_constraints.available_ram:g}GB")
        print(f"    Model size: {config.hardware_constraints.preferred_size}")
        print(f"    Backends: {', '.join(config.preferred_backends)}")
        print(f"    Minimum trust: {config.minimum_trust_score:g}")
        return

    try:
        recommendation = asyncio.run(service.get_routing_recommendation(args.task))
    except NoSuitableModels as e:
        _print_no_models(e)
        sys.exit(1)

    if args.json:
        _print_json(recommendation.to_dict())
        return
    print(f"\n[OK] {recommendation.primary.name} ({recommendation.primary.backend})")
    print(f"    Confidence: {recommendation.confidence * 100:.0f}%")
    for part in recommendation.reasoning.split(" | "):
        print(f"    {part}")
    print(f"\n    Fallback: {recommendation.fallback_strategy}")


# =============================================================================
# MODELS COMMAND
# =============================================================================

def cmd_models(args):
    """List every discovered model."""
    service = _load_service(args)
    models = asyncio.run(service.pipeline.consolidator.discover(force_refresh=args.refresh))

    if args.json:
        _print_json([m.to_dict() for m in models])
        return

    if not models:
        print("[!] No models discovered.")
        print("    Start Ollama (ollama serve) or download a model into the models directory.")
        return

    print(f"\n[MODELS] Discovered models:\n")
    print(f"{'Name':<32} {'Backend':<12} {'Params':<8} {'RAM':<6} {'Trust':<6} {'Available':<9}")
    print("-" * 78)
    for m in models:
        print(f"{m.name:<32} {m.backend:<12} {m.parameters or '?':<8} {m.ram_requirement:<6} "
              f"{m.trust_score:<6g} {'yes' if m.available else 'no':<9}")
    print(f"\nTotal: {len(models)} models")


# =============================================================================
# BACKENDS COMMAND
# =============================================================================

def cmd_backends(args):
    """Health of each backend."""
    service = _load_service(args)
    health = asyncio.run(service.pipeline.consolidator.check_backends())

    print("\n[>] Backends:\n")
    for backend, ok in health.items():
        print(f"    {'[OK] ' if ok else '[ERR]'} {backend}")
    if not health:
        print("    (none enabled)")


# =============================================================================
# MAIN PARSER
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    """Command-line parser."""
    parser = argparse.ArgumentParser(
        prog="trustroute",
        description="TrustRoute - Trust-aware routing across local and cloud models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  trustroute route --task coding --ram 8          Best coding model within 8GB
  trustroute route --prefer ollama --json         Full decision record as JSON
  trustroute default --urgency high               Quick default, small models first
  trustroute recommend --route                    Recommend a config and route with it
  trustroute models --refresh                     Rediscover every backend
  trustroute backends                             Backend health
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"TrustRoute {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging"
    )
    parser.add_argument(
        "--config", "-c",
        help=f"User configuration file (default: {USER_CONFIG_FILE})"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # -------------------------------------------------------------------------
    # Command: route
    # -------------------------------------------------------------------------
    route_parser = subparsers.add_parser(
        "route",
        help="Route to the best model",
        description="Run the four-step routing pipeline and show the decision."
    )
    route_parser.add_argument("--task", "-t", choices=TASK_TYPES, help="Task type")
    route_parser.add_argument("--ram", type=float, help="RAM limit in GB")
    route_parser.add_argument("--max-download", type=float, help="Maximum download size in GB")
    route_parser.add_argument("--prefer", "-p", action="append", choices=BACKENDS,
                              help="Preferred backend (repeatable)")
    route_parser.add_argument("--min-trust", type=float, help="Minimum trust score (0-10)")
    route_parser.add_argument("--max-candidates", type=int, default=5,
                              help="Candidates kept after scoring (default: 5)")
    route_parser.add_argument("--json", action="store_true", help="Print the decision as JSON")

    # -------------------------------------------------------------------------
    # Command: default
    # -------------------------------------------------------------------------
    default_parser = subparsers.add_parser(
        "default",
        help="Smart default model",
        description="Pick a default model, falling back when routing fails."
    )
    default_parser.add_argument("--task", "-t", choices=TASK_TYPES, help="Task type")
    default_parser.add_argument("--prefer", "-p", action="append", choices=BACKENDS,
                                help="Preferred backend (repeatable)")
    default_parser.add_argument("--urgency", "-u", choices=["low", "medium", "high"],
                                help="High urgency favours small models")
    default_parser.add_argument("--json", action="store_true", help="Print the selection as JSON")

    # -------------------------------------------------------------------------
    # Command: recommend
    # -------------------------------------------------------------------------
    recommend_parser = subparsers.add_parser(
        "recommend",
        help="Recommend a routing configuration",
        description="Propose a routing configuration for this host."
    )
    recommend_parser.add_argument("--task", "-t", choices=TASK_TYPES, help="Task type")
    recommend_parser.add_argument("--route", action="store_true",
                                  help="Also route with the recommended configuration")
    recommend_parser.add_argument("--json", action="store_true", help="Print as JSON")

    # -------------------------------------------------------------------------
    # Command: models
    # -------------------------------------------------------------------------
    models_parser = subparsers.add_parser(
        "models",
        help="List discovered models",
        description="List every model from every backend."
    )
    models_parser.add_argument("--refresh", "-r", action="store_true", help="Ignore the discovery cache")
    models_parser.add_argument("--json", action="store_true", help="Print as JSON")

    # -------------------------------------------------------------------------
    # Command: backends
    # -------------------------------------------------------------------------
    subparsers.add_parser(
        "backends",
        help="Backend health",
        description="Probe every enabled backend."
    )

    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # Command dispatch
    commands = {
        "route": cmd_route,
        "default": cmd_default,
        "recommend": cmd_recommend,
        "models": cmd_models,
        "backends": cmd_backends,
    }

    if args.command in commands:
        commands[args.command](args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
