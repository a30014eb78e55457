# route plots: the graph with its augmented edges, and an animated walk
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Tuple

import matplotlib
import matplotlib.pyplot as plt
import networkx as nx
from matplotlib.animation import FuncAnimation
from matplotlib.axes import Axes
from matplotlib.collections import LineCollection

from graph_utilities.cfg import CFG
from graph_utilities.multigraph import Graph


Pos2D = Dict[int, Tuple[float, float]]


def _to_drawable(graph: Graph) -> nx.Graph:
    # parallel edges collapse onto one drawn segment; labels list every weight
    return nx.Graph(graph.to_networkx())


def _compute_pos2d_from_graph(H: nx.Graph) -> Pos2D:
    return nx.spring_layout(H, seed=42, iterations=200)


def _edge_labels(graph: Graph) -> Dict[Tuple[int, int], str]:
    labels: Dict[Tuple[int, int], List[str]] = {}
    for e in graph.edges():
        if e.weight is not None:
            labels.setdefault((e.src, e.dst), []).append(str(e.weight))
    return {uv: ",".join(ws) for uv, ws in labels.items()}


def plot_graph(
    graph: Graph,
    show_edge_weights: bool = True,
    ax: Optional[Axes] = None,
    figsize: Tuple[int, int] = (6, 6),
    augmented_tag: str = CFG.AUGMENTED_TAG,
    title: Optional[str] = None,
    show: bool = True,
) -> Axes:
    """
    Plot the graph; edges tagged ``augmented_tag`` are drawn dashed in red
    on top of the original ones. The title defaults to the graph label.
    """
    if ax is None:
        _, ax = plt.subplots(figsize=figsize)
    ax.set_aspect("equal")
    ax.axis("off")

    H = _to_drawable(graph)
    pos = _compute_pos2d_from_graph(H)

    original = sorted({(e.src, e.dst) for e in graph.edges() if e.tag != augmented_tag})
    augmented = sorted({(e.src, e.dst) for e in graph.edges() if e.tag == augmented_tag})

    nx.draw_networkx_nodes(H, pos, node_size=300, node_color="skyblue", edgecolors="k", linewidths=0.6, ax=ax)
    nx.draw_networkx_labels(H, pos, font_size=9, ax=ax)
    nx.draw_networkx_edges(H, pos, edgelist=original, ax=ax)
    if augmented:
        nx.draw_networkx_edges(H, pos, edgelist=augmented, style="dashed", edge_color="red", width=2.0, ax=ax)

    if show_edge_weights:
        labels = _edge_labels(graph)
        if labels:
            nx.draw_networkx_edge_labels(H, pos, edge_labels=labels, font_size=7, ax=ax)

    title = title if title is not None else graph.label
    if title:
        ax.set_title(title, fontsize=8, wrap=True)
    if show:
        plt.tight_layout()
        plt.show()
    return ax


def animate_walk(
    graph: Graph,
    walk: List[int],
    interval: int = 250,
    arrow_every: int = 3,
    cmap_name: str = "plasma",
    node_size: int = 300,
    figsize: Tuple[int, int] = (6, 6),
    show_edge_weights: bool = True,
    repeat: bool = True,
    repeat_offset_scale: float = 0.03,
    repeat_linewidth_base: float = 2.8,
    repeat_linewidth_step: float = 0.8,
    growth_factor: float = 0.45,
    fade: bool = True,
    fade_alpha_min: float = 0.12,
    show: bool = True,
) -> FuncAnimation:
    """
    Animate a postman walk over the graph. Edges walked more than once
    (the augmented ones) are drawn with a growing sideways offset so every
    pass stays visible.
    """
    if len(walk) < 2:
        raise ValueError("walk must contain at least two vertices")

    H = _to_drawable(graph)
    pos2d = _compute_pos2d_from_graph(H)

    segments_base = [(pos2d[walk[i]], pos2d[walk[i + 1]]) for i in range(len(walk) - 1)]
    n_steps = len(segments_base)
    cmap = matplotlib.colormaps[cmap_name]
    base_colors = [cmap(i / max(1, n_steps - 1)) for i in range(n_steps)]

    fig, ax = plt.subplots(figsize=figsize)
    ax.set_aspect("equal")
    ax.axis("off")

    # Draw base faint graph (nodes/edges)
    nx.draw_networkx_nodes(H, pos2d, node_size=node_size, node_color="lightgray",
                           edgecolors="k", linewidths=0.6, ax=ax)
    nx.draw_networkx_labels(H, pos2d, font_size=9, ax=ax)
    nx.draw_networkx_edges(H, pos2d, alpha=0.25, ax=ax)
    if show_edge_weights:
        labels = _edge_labels(graph)
        if labels:
            nx.draw_networkx_edge_labels(H, pos2d, edge_labels=labels, font_size=7, ax=ax)

    trail_lc = LineCollection([], linewidths=repeat_linewidth_base, zorder=4)
    ax.add_collection(trail_lc)
    current_scatter = ax.scatter([], [], s=node_size * 0.6, c=[(0, 0, 0, 1.0)], zorder=6)
    steps_text = ax.text(0.02, 0.98, "", transform=ax.transAxes, va="top",
                         fontsize=9, bbox=dict(facecolor="white", alpha=0.8), zorder=7)

    xs = [p[0] for p in pos2d.values()]
    ys = [p[1] for p in pos2d.values()]
    span = max(1e-6, max(max(xs) - min(xs), max(ys) - min(ys)))
    delta = repeat_offset_scale * span

    edge_ids_per_step = [frozenset({walk[i], walk[i + 1]}) for i in range(n_steps)]

    def compute_offset_for_edge(u: int, v: int, occurrence_index: int) -> Tuple[float, float]:
        (x1, y1), (x2, y2) = pos2d[u], pos2d[v]
        dx, dy = x2 - x1, y2 - y1
        length = math.hypot(dx, dy)
        if length == 0:
            return (0.0, 0.0)
        side = 1 if occurrence_index % 2 == 0 else -1
        layer_base = 1.0 + (occurrence_index // 2) * growth_factor
        amount = delta * side * layer_base if occurrence_index else 0.0
        return (-dy / length * amount, dx / length * amount)

    arrow_patches: List[Any] = []

    def update(frame: int):
        nonlocal arrow_patches
        counts: Dict[frozenset, int] = {}
        segments, widths, colors = [], [], []
        for i in range(frame):
            occ = counts.get(edge_ids_per_step[i], 0)
            counts[edge_ids_per_step[i]] = occ + 1
            ox, oy = compute_offset_for_edge(walk[i], walk[i + 1], occ)
            (x1, y1), (x2, y2) = segments_base[i]
            segments.append(((x1 + ox, y1 + oy), (x2 + ox, y2 + oy)))
            widths.append(repeat_linewidth_base + repeat_linewidth_step * occ)
            r, g, b, _ = base_colors[i]
            if fade:
                age = min(1.0, ((frame - 1) - i) / max(1, n_steps - 1))
                alpha = fade_alpha_min + (1.0 - fade_alpha_min) * (1.0 - age)
            else:
                alpha = 1.0
            colors.append((r, g, b, alpha))

        trail_lc.set_segments(segments)
        if segments:
            trail_lc.set_linewidth(widths)
            trail_lc.set_colors(colors)

        cx, cy = pos2d[walk[frame]]
        current_scatter.set_offsets([[cx, cy]])

        for p in arrow_patches:
            p.remove()
        arrow_patches = []
        for idx in range(0, frame, max(1, arrow_every)):
            (x1, y1), (x2, y2) = segments[idx]
            fx, fy = x1 + 0.55 * (x2 - x1), y1 + 0.55 * (y2 - y1)
            arrow = ax.annotate("", xy=(fx + 0.001 * (x2 - x1), fy + 0.001 * (y2 - y1)), xytext=(fx, fy),
                                arrowprops=dict(arrowstyle="-|>", color=base_colors[idx], lw=0.6), zorder=5)
            arrow_patches.append(arrow)

        steps_text.set_text(f"step: {frame}/{n_steps}")
        return [trail_lc, current_scatter, steps_text] + arrow_patches

    padx = (max(xs) - min(xs)) * 0.06 or 0.1
    pady = (max(ys) - min(ys)) * 0.06 or 0.1
    ax.set_xlim(min(xs) - padx, max(xs) + padx)
    ax.set_ylim(min(ys) - pady, max(ys) + pady)

    anim = FuncAnimation(fig, update, frames=list(range(n_steps + 1)), interval=interval, blit=False, repeat=repeat)
    if show:
        plt.show()
    return anim
