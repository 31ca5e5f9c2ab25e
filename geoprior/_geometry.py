"""
_geometry.py
============
Stateless 2-D geometry helpers used to define regions and to remap
coordinates between a unit square and an arbitrary quadrangle.

Public API
----------
  area_of_triangle(a, b, c)
  area_of_quadrangle(a, b, c, d)
  intersect_segments(a, b, c, d)
  project_point(a, b, qa, qb, qc, qd)
  reverse_project(point, qa, qb, qc, qd)
  point_in_quadrangle(point, qa, qb, qc, qd, tolerance=1e-9)

Points are plain ``(x, y)`` pairs (tuples, lists or length-2 arrays).
Every function returns plain Python floats / tuples.

Bilinear convention
-------------------
For a quadrangle ``ABCD`` listed in winding order, the normalized
coordinate ``(a, b)`` maps to

    P(a, b) = (1-a)(1-b)·A + a(1-b)·B + ab·C + (1-a)b·D

so ``a`` runs along edge AB (and DC) and ``b`` along edge AD (and BC).
``project_point`` and ``reverse_project`` are inverses of each other under
this convention.
"""

import math
from typing import Optional, Tuple

Point = Tuple[float, float]

# Tolerance on the segment parameters t1, t2 in intersect_segments.
# Absorbs rounding at shared vertices.
EPSILON = 0.001


def area_of_triangle(a, b, c) -> float:
    """
    Return the (unsigned) area of triangle ABC.

    Uses the 2-D cross product of the edge vectors measured from C:
        area = ½ · |(A − C) × (B − C)|
    """
    ux = a[0] - c[0]
    uy = a[1] - c[1]
    vx = b[0] - c[0]
    vy = b[1] - c[1]
    return abs(0.5 * (ux * vy - uy * vx))


def area_of_quadrangle(a, b, c, d) -> float:
    """
    Return the area of quadrangle ABCD as the sum of triangles ABC and ACD.

    The four corners must be listed in winding order (clockwise or
    counter-clockwise), so that A and C are diagonal.  Any other order gives
    a wrong area without raising.
    """
    return area_of_triangle(a, b, c) + area_of_triangle(a, c, d)


def intersect_segments(a, b, c, d) -> Optional[Point]:
    """
    Return the intersection point of segments AB and CD, or None.

    Solves ``A + t1·v = C + t2·w`` with ``v = B − A`` and ``w = D − C``.

    Parameters
    ----------
    a, b : Point   End points of the first segment.
    c, d : Point   End points of the second segment.

    Returns
    -------
    (float, float)   The point ``A + t1·v`` when both t1 and t2 lie in
                     ``[-EPSILON, 1 + EPSILON]``.
    None             When the segments are parallel (determinant exactly 0,
                     collinear overlap included) or do not meet.
    """
    vx = b[0] - a[0]
    vy = b[1] - a[1]
    wx = d[0] - c[0]
    wy = d[1] - c[1]

    den = wy * vx - wx * vy
    if den == 0.0:
        return None

    acx = c[0] - a[0]
    acy = c[1] - a[1]
    t1 = (wy * acx - wx * acy) / den
    t2 = (vy * acx - vx * acy) / den

    lo = 0.0 - EPSILON
    hi = 1.0 + EPSILON
    if lo <= t1 <= hi and lo <= t2 <= hi:
        return (a[0] + vx * t1, a[1] + vy * t1)
    return None


def project_point(a: float, b: float, qa, qb, qc, qd) -> Optional[Point]:
    """
    Map the normalized coordinate ``(a, b)`` onto quadrangle ``qa qb qc qd``.

    Two cross-segments are built by linear interpolation along opposite
    edges (E on AB and G on DC at fraction *a*; F on BC and H on AD at
    fraction *b*) and their intersection is returned.

    Returns
    -------
    (float, float) or None
        None only when the cross-segments are parallel, which happens for
        degenerate quadrangles.
    """
    e = (qa[0] + a * (qb[0] - qa[0]), qa[1] + a * (qb[1] - qa[1]))
    g = (qd[0] + a * (qc[0] - qd[0]), qd[1] + a * (qc[1] - qd[1]))
    f = (qb[0] + b * (qc[0] - qb[0]), qb[1] + b * (qc[1] - qb[1]))
    h = (qa[0] + b * (qd[0] - qa[0]), qa[1] + b * (qd[1] - qa[1]))
    return intersect_segments(e, g, f, h)


def reverse_project(point, qa, qb, qc, qd) -> Point:
    """
    Recover the normalized coordinate ``(a, b)`` of *point* inside
    quadrangle ``qa qb qc qd``; the inverse of ``project_point``.

    Algorithm
    ---------
    Eliminating *a* from the bilinear equations leaves a quadratic in *b*:

        c00·b² − c01·b + c02 = 0

    * ``c00 == 0`` exactly (e.g. parallelograms): linear, ``b = c02 / c01``.
    * Otherwise the "−" root is taken first; if it is outside [0, 1] the
      "+" root is used.

    *a* then follows linearly from *b*, using the x or y equation, whichever
    has the larger coefficient on *a*.

    Raises
    ------
    ValueError
        If the discriminant is negative or neither root lies in [0, 1],
        i.e. *point* is not inside the quadrangle, or if the quadrangle is
        degenerate (collapsed to a line or a point).
    """
    x, y = point[0], point[1]

    # Edge terms; names follow the corner each term is measured from.
    ab_x = qa[0] - qb[0]
    ab_y = qa[1] - qb[1]
    ad_x = qd[0] - qa[0]
    ad_y = qa[1] - qd[1]
    twist_x = ab_x - qd[0] + qc[0]
    twist_y = ad_y + qc[1] - qb[1]
    px = x - qa[0]
    py = y - qa[1]

    c00 = ad_x * twist_y + ad_y * twist_x
    c01 = twist_y * px + ab_x * ad_y + ad_x * ab_y - twist_x * py
    c02 = px * ab_y - ab_x * py

    if c00 == 0.0:
        if c01 == 0.0:
            raise ValueError(
                f"Cannot invert degenerate quadrangle {qa}, {qb}, {qc}, {qd}."
            )
        b = c02 / c01
    else:
        disc = c01 * c01 - 4.0 * c00 * c02
        if disc < 0.0:
            raise ValueError(
                f"Point ({x}, {y}) lies outside the quadrangle: "
                f"negative discriminant {disc}."
            )
        root = math.sqrt(disc)
        b = (c01 - root) / (2.0 * c00)
        if not (0.0 <= b <= 1.0):
            b = (c01 + root) / (2.0 * c00)
            if not (0.0 <= b <= 1.0):
                raise ValueError(
                    f"Point ({x}, {y}) lies outside the quadrangle: "
                    f"no root of the bilinear inverse in [0, 1]."
                )

    # Solve for a from whichever coordinate equation is better conditioned;
    # the x equation vanishes when AB and DC are both vertical.
    den_x = b * twist_x - ab_x
    den_y = b * twist_y - ab_y
    if den_x == 0.0 and den_y == 0.0:
        raise ValueError(
            f"Cannot invert degenerate quadrangle {qa}, {qb}, {qc}, {qd}."
        )
    if abs(den_x) >= abs(den_y):
        a = (px - b * ad_x) / den_x
    else:
        a = (py + b * ad_y) / den_y
    return (a, b)


def point_in_quadrangle(point, qa, qb, qc, qd, tolerance: float = 1e-9) -> bool:
    """
    Return True if *point* lies inside (or on the boundary of) the convex
    quadrangle ``qa qb qc qd``.

    The four triangles fanning from *point* to each edge cover the
    quadrangle exactly once when the point is inside, so their areas sum to
    the quadrangle's area; outside, the sum is strictly larger.
    """
    total = area_of_quadrangle(qa, qb, qc, qd)
    fan = (
        area_of_triangle(point, qa, qb)
        + area_of_triangle(point, qb, qc)
        + area_of_triangle(point, qc, qd)
        + area_of_triangle(point, qd, qa)
    )
    return fan - total <= tolerance * max(total, 1.0)
