"""
Grumpkin curve primitives.

Grumpkin is the curve  y² = x³ − 17  defined over the BN254 scalar field, so
its coordinates are ordinary field elements of the ledger. Its group order
is the BN254 base field modulus, which makes it the curve used for every
in-protocol key (viewing keys, address points, ephemeral log keys).

Curve arithmetic is delegated to the `ecdsa` library's generic
short-Weierstrass implementation.

Sign convention:
    A point's y is "positive" when y <= (p - 1) / 2. Only x and this single
    sign bit are transmitted for ephemeral keys.
"""

from __future__ import annotations

import ecdsa.ellipticcurve as ec
from ecdsa import numbertheory

from cazt.crypto.field import FR_MODULUS

# ==============================================================================
# Curve constants
# ==============================================================================

GRUMPKIN_P = FR_MODULUS

# Group order (the BN254 base field modulus)
GRUMPKIN_N = 0x30644E72E131A029B85045B68181585D97816A916871CA8D3C208C16D87CFD47

GRUMPKIN_B = GRUMPKIN_P - 17

_CURVE = ec.CurveFp(GRUMPKIN_P, 0, GRUMPKIN_B, 1)

_HALF_P = (GRUMPKIN_P - 1) // 2


class CurveError(ValueError):
    """Raised for coordinates that do not describe a Grumpkin point."""
    pass


def is_positive(y: int) -> bool:
    """True when y lies in the lower half of the field."""
    return y <= _HALF_P


def y_from_x(x: int) -> int | None:
    """
    Return one square root of x³ − 17, or None if x is not on the curve.
    """
    y_sq = (pow(x, 3, GRUMPKIN_P) + GRUMPKIN_B) % GRUMPKIN_P
    try:
        return numbertheory.square_root_mod_prime(y_sq, GRUMPKIN_P)
    except numbertheory.Error:
        return None


def point_from_x_and_sign(x: int, sign: bool) -> ec.PointJacobi:
    """
    Rebuild a point from its x-coordinate and sign bit.

    Args:
        x: x-coordinate as a field element.
        sign: True selects the positive y, False the negative one.

    Raises:
        CurveError: if x is not the x-coordinate of any curve point.
    """
    if not 0 <= x < GRUMPKIN_P:
        raise CurveError(f"x-coordinate out of range: 0x{x:064x}")
    y = y_from_x(x)
    if y is None:
        raise CurveError(f"x-coordinate 0x{x:064x} does not correspond to a curve point")

    y_positive = y if is_positive(y) else GRUMPKIN_P - y
    final_y = y_positive if sign else (GRUMPKIN_P - y_positive) % GRUMPKIN_P
    return ec.PointJacobi(_CURVE, x, final_y, 1, GRUMPKIN_N)


def point_from_coordinates(x: int, y: int) -> ec.PointJacobi:
    """Build a point from affine coordinates; (0, 0) is the point at infinity."""
    if x == 0 and y == 0:
        return ec.INFINITY
    if not _CURVE.contains_point(x, y):
        raise CurveError(f"({x:#x}, {y:#x}) is not on the Grumpkin curve")
    return ec.PointJacobi(_CURVE, x, y, 1, GRUMPKIN_N)


def point_to_fields(pt: ec.AbstractPoint) -> tuple[int, int, bool]:
    """Return (x, y, is_infinite) with the infinity point encoded as (0, 0)."""
    if pt == ec.INFINITY:
        return 0, 0, True
    return pt.x(), pt.y(), False


# ==============================================================================
# Generator
# ==============================================================================

# x = 1, y = the positive square root of 1 - 17
_G_Y = y_from_x(1)
if _G_Y is None:  # pragma: no cover
    raise RuntimeError("Grumpkin generator x=1 has no square root")
GENERATOR = ec.PointJacobi(
    _CURVE, 1, _G_Y if is_positive(_G_Y) else GRUMPKIN_P - _G_Y, 1, GRUMPKIN_N, generator=True
)


def derive_public_key(secret: int) -> ec.PointJacobi:
    """Public key secret·G for a Grumpkin scalar."""
    if not 0 < secret < GRUMPKIN_N:
        raise CurveError("Grumpkin secret must be in [1, N-1]")
    return secret * GENERATOR
