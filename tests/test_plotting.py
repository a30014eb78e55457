"""
Smoke tests for the plots, rendered off-screen.
"""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402
from matplotlib.animation import FuncAnimation  # noqa: E402

from chinese_postman_route import chinese_postman_route  # noqa: E402
from graph_utilities.plotting import animate_walk, plot_graph  # noqa: E402


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_plot_graph_draws_augmented_edges(k4):
    route = chinese_postman_route(k4)
    ax = plot_graph(k4, title=route.label, show=False)
    assert ax.get_title() == route.label
    assert k4.label is None
    # dashed collection for the augmented edges on top of the base one
    assert len(ax.collections) >= 3


def test_animate_walk(k4):
    route = chinese_postman_route(k4)
    anim = animate_walk(k4, route.walk, interval=10, show=False)
    assert isinstance(anim, FuncAnimation)
    html = anim.to_jshtml()
    assert "<script" in html


def test_animate_walk_needs_two_vertices(triangle):
    with pytest.raises(ValueError):
        animate_walk(triangle, [1], show=False)
