# cfg.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class CFG:
    # Matching
    # - "exhaustive": exact minimum pairing (double factorial in the odd-node count)
    # - "random"    : one random pairing, complete but not optimal
    MATCHING: str = "exhaustive"
    SEED: Optional[int] = None

    # Exhaustive matching refuses larger odd sets instead of hanging.
    # 16 odd nodes is 2 027 025 pairings.
    MAX_EXHAUSTIVE_ODD_NODES: int = 16

    # Augmentation
    AUGMENTED_TAG: str = "augmented"

    # Cost of an edge that carries no weight attribute
    UNWEIGHTED_COST: int = 1

    # DOT files
    DOT_EXTENSION: str = ".gv"

    # HTTP service
    HOST: str = "0.0.0.0"
    PORT: int = 8000
