"""
Visvalingam-Whyatt simplification for closed rings.

Vertices live in an arena addressed by index, with prev/next index arrays
forming a circular doubly linked list. A min-heap of (area, index, version)
entries finds the least significant vertex; entries whose version no longer
matches are stale and skipped.
"""

import heapq


def triangle_area(a, b, c):
    return abs((a[0] * (b[1] - c[1]) + b[0] * (c[1] - a[1]) + c[0] * (a[1] - b[1])) / 2)


def simplify_vw_closed_ring(ring, area_threshold):
    """
    Repeatedly remove the vertex with the smallest effective area.

    Stops once the smallest area exceeds area_threshold or only 3 vertices
    remain. Among equal areas the lowest vertex index goes first.
    Returns surviving vertices in their original order.
    """
    ring = list(ring)
    n = len(ring)
    if n <= 3 or area_threshold <= 0:
        return ring

    prev = [(i - 1) % n for i in range(n)]
    nxt = [(i + 1) % n for i in range(n)]
    removed = [False] * n
    version = [0] * n

    def area_of(i):
        return triangle_area(ring[prev[i]], ring[i], ring[nxt[i]])

    heap = [(area_of(i), i, 0) for i in range(n)]
    heapq.heapify(heap)

    active = n
    while active > 3 and heap:
        area, i, ver = heapq.heappop(heap)
        if removed[i] or ver != version[i]:
            continue
        if area > area_threshold:
            break

        p, q = prev[i], nxt[i]
        nxt[p] = q
        prev[q] = p
        removed[i] = True
        active -= 1

        for j in (p, q):
            version[j] += 1
            heapq.heappush(heap, (area_of(j), j, version[j]))

    return [point for point, gone in zip(ring, removed) if not gone]
