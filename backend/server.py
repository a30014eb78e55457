from dataclasses import replace
from typing import Dict, Any, Optional

from fastapi import Body, HTTPException, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from chinese_postman_route import chinese_postman_route, classify, route_to_dot
from graph_utilities.cfg import CFG
from graph_utilities.connect_normalize import connect_normalize, connected_components, odd_degree_nodes
from graph_utilities.dot_graph import graph_to_dot, parse_dot
from graph_utilities.errors import GraphInvariantError, PostmanError
from graph_utilities.multigraph import Graph

# Create FastAPI app
app = FastAPI(title="Graph→Chinese postman route")

# CORS for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5500", "http://localhost:8000"],
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)


def _as_weight(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"edge weight {value!r} is not a number")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"edge weight {value!r} is not an integer")
    return int(value)


def create_graph_helper(payload: Dict[str, Any]) -> Graph:
    """
    Build a Graph from a request payload.
    Payload keys (either form):
      "dot":   DOT description (see graph_utilities.dot_graph)
      "nodes": optional list of node ids (isolated nodes included)
      "edges": list of [u, v] or [u, v, weight]; weight null means unweighted
    """
    dot = payload.get("dot")
    if dot is not None:
        if not isinstance(dot, str):
            raise ValueError("'dot' must be a string")
        return parse_dot(dot)

    edges_raw = payload.get("edges")
    if edges_raw is None or not isinstance(edges_raw, list):
        raise ValueError("missing or invalid 'edges'")

    G = Graph(name=str(payload.get("name", "")))
    for n in payload.get("nodes") or []:
        G.add_node(int(n))
    for item in edges_raw:
        if not isinstance(item, list) or len(item) not in (2, 3):
            raise ValueError(f"invalid edge {item!r}: expected [u, v] or [u, v, weight]")
        weight = _as_weight(item[2]) if len(item) == 3 else None
        G.add_edge(int(item[0]), int(item[1]), weight)
    return G


def _parse_or_400(payload: Dict[str, Any]) -> Graph:
    try:
        G = create_graph_helper(payload)
    except (ValueError, TypeError, PostmanError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    if G.number_of_nodes() == 0:
        raise HTTPException(status_code=400, detail="empty graph")
    return G


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/classify")
async def classify_graph(payload: Dict[str, Any] = Body(...)):
    """
    POST /classify
    Body JSON: same graph payload as /route.
    Returns classification, odd nodes, degrees and components.
    """
    G = _parse_or_400(payload)
    return JSONResponse({
        "classification": classify(G).value,
        "odd_nodes": odd_degree_nodes(G),
        "degrees": {str(n): G.degree(n) for n in G.node_ids()},
        "components": [sorted(c) for c in connected_components(G)],
        "n_nodes": G.number_of_nodes(),
        "n_edges": G.number_of_edges(),
    })


@app.post("/route")
async def postman_route(payload: Dict[str, Any] = Body(...)):
    """
    POST /route
    Body JSON:
      {
        "edges": [[u, v, weight], [u, v], ...],   # or "dot": "graph g { ... }"
        "nodes": [id, ...],                       # optional
        "matching": "exhaustive" | "random",      # optional
        "seed": <int>,                            # optional, random matching only
        "keep_largest": <bool>                    # optional; route the largest component only
      }
    Returns:
      classification, walk, edges, total_cost, extra_cost, matching, label,
      n_nodes, n_edges (after augmentation), dot (augmented graph with the label)
    """
    G = _parse_or_400(payload)

    if bool(payload.get("keep_largest", False)):
        G = connect_normalize(G)

    cfg = replace(CFG(), MATCHING=payload.get("matching", CFG.MATCHING), SEED=payload.get("seed"))

    try:
        route = chinese_postman_route(G, cfg=cfg)
    except GraphInvariantError as e:
        raise HTTPException(status_code=500, detail=f"chinese_postman_route failed: {e}")
    except (ValueError, PostmanError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    json_resp = route.to_dict()
    json_resp.update({
        "n_nodes": G.number_of_nodes(),
        "n_edges": G.number_of_edges(),
        "dot": route_to_dot(G, route) if route.has_route else graph_to_dot(G),
    })
    return JSONResponse(json_resp)


if __name__ == "__main__":
    # Run without reloader to avoid multi-process side-effects.
    uvicorn.run("backend.server:app", host=CFG.HOST, port=CFG.PORT, reload=False)
