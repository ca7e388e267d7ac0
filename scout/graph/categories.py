"""Category detection for the topic graph.

A topic is a category when several other topics frequently co-occur with it:
at least `category_min_incoming` topics have an edge into it of weight
>= `category_threshold`. When two candidates are strongly linked to each
other, only the one with more items stays a category (on a tie, the one
earlier in node order).

Detection looks at every non-zero co-occurrence weight, not just the pruned
edges kept for display, so a busy hub topic is not missed because its
incoming edges fell outside someone's strongest few.
"""

import numpy as np

from scout.graph.types import GraphParams, TopicNode


def detect_categories(
    nodes: list[TopicNode],
    weights: np.ndarray,
    params: GraphParams,
) -> set[int]:
    """
    Return the node indices that are categories.

    Args:
        nodes: Graph nodes in index order
        weights: Directed co-occurrence matrix aligned with nodes
        params: Threshold and minimum incoming count

    Returns:
        Set of category node indices
    """
    n = len(nodes)
    if n == 0:
        return set()

    strong = weights >= params.category_threshold
    np.fill_diagonal(strong, False)

    incoming = strong.sum(axis=0)
    candidates = {b for b in range(n) if incoming[b] >= params.category_min_incoming}

    disqualified: set[int] = set()
    for a in sorted(candidates):
        for b in sorted(candidates):
            if a == b or not strong[a, b]:
                continue
            count_a, count_b = nodes[a].item_count, nodes[b].item_count
            if count_a < count_b:
                disqualified.add(a)
            elif count_a > count_b:
                disqualified.add(b)
            else:
                disqualified.add(max(a, b))

    return candidates - disqualified
