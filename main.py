from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from chinese_postman_route import chinese_postman_route
from graph_utilities.cfg import CFG
from graph_utilities.connect_normalize import connect_normalize
from graph_utilities.dot_graph import read_dot, write_dot
from graph_utilities.errors import MatchingLimitExceededError, PostmanError
from graph_utilities.random_graph import random_graph


logger = logging.getLogger(__name__)


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Chinese postman route of an undirected multigraph")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("input", nargs="?", help="Path to a DOT (.gv) graph")
    src.add_argument("--random", type=int, metavar="N", help="Use a random connected graph on N nodes")
    p.add_argument("-p", "--probability", type=float, default=0.3, help="Edge probability for --random")

    p.add_argument("--matching", choices=["exhaustive", "random"], default=CFG.MATCHING)
    p.add_argument("--seed", type=int, default=CFG.SEED)
    p.add_argument("--max-odd", type=int, default=CFG.MAX_EXHAUSTIVE_ODD_NODES,
                   help="Largest odd-node set the exhaustive matching accepts")
    p.add_argument("--largest-component", action="store_true",
                   help="Route the largest connected component instead of reporting a disconnected graph")

    # Export & output
    p.add_argument("-o", "--output", help="Write the augmented graph with its route label as DOT")
    p.add_argument("--json", action="store_true", help="Print the route as JSON instead of its label")

    # Plot flags
    p.add_argument("--plot", action="store_true", help="Plot the augmented graph")
    p.add_argument("--animate", action="store_true", help="Animate the walk")

    p.add_argument("-v", "--verbose", action="count", default=0)
    # verbosity: 0=warning, 1=info, 2=debug
    return p


def configure_logging(verbosity: int) -> None:
    """Configure logging level based on verbosity.
    Parameters
    ----------
    verbosity : int
        0 = warning, 1 = info, 2 = debug
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argparser().parse_args(argv)
    configure_logging(args.verbose)

    # construct graph
    try:
        if args.random is not None:
            G = random_graph(n=args.random, p=args.probability, seed=args.seed, weighted=True)
        else:
            G = read_dot(args.input)
    except (OSError, PostmanError) as e:
        logger.error("cannot load graph: %s", e)
        return 2

    if args.largest_component:
        G = connect_normalize(G)

    cfg = CFG(MATCHING=args.matching, SEED=args.seed, MAX_EXHAUSTIVE_ODD_NODES=args.max_odd)

    # get walk
    try:
        route = chinese_postman_route(G, cfg=cfg)
    except MatchingLimitExceededError as e:
        logger.error("%s", e)
        return 1
    except PostmanError as e:
        logger.error("route computation failed: %s", e)
        return 1

    if args.json:
        print(json.dumps(route.to_dict(), indent=2))
    else:
        print(f"{route.classification.value}: {route.label}")

    if args.output:
        path = Path(args.output)
        if not path.suffix:
            path = path.with_suffix(cfg.DOT_EXTENSION)
        write_dot(G, path, label=route.label)
        logger.info("augmented graph written to %s", path)

    if not route.has_route:
        return 1

    # plot it
    if args.plot:
        from graph_utilities.plotting import plot_graph
        plot_graph(G, title=route.label)
    if args.animate and len(route.walk) >= 2:
        from graph_utilities.plotting import animate_walk
        animate_walk(
            G,
            route.walk,
            interval=300,
            arrow_every=2,
            cmap_name="plasma",
            repeat_offset_scale=0.015,
            repeat_linewidth_base=2.4,
            repeat_linewidth_step=0.9,
            growth_factor=0.45,
            fade=True,
            fade_alpha_min=0.15,
        )
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
