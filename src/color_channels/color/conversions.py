"""
Color space conversion functions.

All functions take channel-first float64 arrays: RGB input has shape
(3, ...) with components in [0, 1]; model output has shape (N, ...).
Inverse functions may return values outside [0, 1]; callers clamp with
clamp_color().

Lightness, chroma and the opponent axes use the scale where L* runs
from 0 to 1 (L*/100), so a white pixel has L = 1.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

WhitePoint = tuple[float, float, float]

# Reference whites (XYZ, Y = 1)
D65: WhitePoint = (0.95047, 1.00000, 1.08883)
D50: WhitePoint = (0.96422, 1.00000, 0.82521)
HSLUV_D65: WhitePoint = (0.95045592705167, 1.0, 1.089057750759878)

# Linear sRGB <-> XYZ (D65)
RGB_TO_XYZ = np.array([
    [0.41239079926595948, 0.35758433938387796, 0.18048078840183429],
    [0.21263900587151036, 0.71516867876775593, 0.072192315360733715],
    [0.019330818715591851, 0.11919477979462599, 0.95053215224966058],
])
XYZ_TO_RGB = np.array([
    [3.2409699419045214, -1.5373831775700935, -0.49861076029300328],
    [-0.96924363628087983, 1.8759675015077207, 0.041555057407175613],
    [0.055630079696993609, -0.20397695888897657, 1.0569715142428786],
])

CIE_EPSILON = (6.0 / 29.0) ** 3
CIE_KAPPA_100 = (29.0 / 3.0) ** 3 / 100.0
HSLUV_EPSILON = 0.0088564516790356308
HSLUV_KAPPA = 903.2962962962963
HUE_EPSILON = 1.0e-3
XYY_EPSILON = 1.0e-14
RAD_TO_DEG = 180.0 / np.pi
DEG_TO_RAD = np.pi / 180.0


def clamp_color(rgb: NDArray) -> NDArray[np.float64]:
    """Force a color into the [0, 1] gamut, mapping NaN to 0."""
    rgb = np.nan_to_num(np.asarray(rgb, dtype=np.float64), nan=0.0, posinf=1.0, neginf=0.0)
    return np.clip(rgb, 0.0, 1.0)


def _hue_degrees(a: NDArray, b: NDArray) -> NDArray:
    """
    Polar angle of (a, b) in [0, 360).

    Colors with chroma below HUE_EPSILON get hue 0, which keeps gray
    pixels from picking up a random hue from rounding noise.
    """
    hue = np.mod(RAD_TO_DEG * np.arctan2(b, a) + 360.0, 360.0)
    return np.where(np.hypot(a, b) > HUE_EPSILON, hue, 0.0)


# =============================================================================
# RGB <-> Linear RGB
# =============================================================================

def srgb_to_linear(c: NDArray) -> NDArray:
    """Remove the sRGB transfer curve."""
    return np.where(c <= 0.04045, c / 12.92, np.power((np.maximum(c, 0.04045) + 0.055) / 1.055, 2.4))


def linear_to_srgb(c: NDArray) -> NDArray:
    """Apply the sRGB transfer curve."""
    return np.where(
        c <= 0.0031308,
        12.92 * c,
        1.055 * np.power(np.maximum(c, 0.0031308), 1.0 / 2.4) - 0.055,
    )


def rgb_to_linrgb(rgb: NDArray) -> NDArray[np.float64]:
    """Convert gamma-encoded RGB to linear-light RGB."""
    return srgb_to_linear(np.asarray(rgb, dtype=np.float64))


def linrgb_to_rgb(lin: NDArray) -> NDArray[np.float64]:
    """Convert linear-light RGB to gamma-encoded RGB."""
    return linear_to_srgb(np.asarray(lin, dtype=np.float64))


def rgb_identity(rgb: NDArray) -> NDArray[np.float64]:
    """Return the components unchanged (as a float64 copy)."""
    return np.array(rgb, dtype=np.float64)


# =============================================================================
# RGB <-> XYZ (CIE 1931, D65)
# =============================================================================

def _apply_matrix(matrix: NDArray, vec: NDArray) -> NDArray:
    return np.tensordot(matrix, vec, axes=(1, 0))


def rgb_to_xyz(rgb: NDArray) -> NDArray[np.float64]:
    """Convert RGB to XYZ tristimulus values."""
    return _apply_matrix(RGB_TO_XYZ, rgb_to_linrgb(rgb))


def xyz_to_rgb(xyz: NDArray) -> NDArray[np.float64]:
    """Convert XYZ to (unclamped) RGB."""
    return linrgb_to_rgb(_apply_matrix(XYZ_TO_RGB, np.asarray(xyz, dtype=np.float64)))


# =============================================================================
# RGB <-> xyY (CIE chromaticity + luminance)
# =============================================================================

def xyz_to_xyy(xyz: NDArray, white: WhitePoint = D65) -> NDArray[np.float64]:
    """
    Convert XYZ to xyY.

    Black has no chromaticity; it takes the chromaticity of the white point.
    """
    X, Y, Z = xyz
    total = X + Y + Z
    black = np.abs(total) < XYY_EPSILON
    safe_total = np.where(black, 1.0, total)
    white_total = white[0] + white[1] + white[2]
    x = np.where(black, white[0] / white_total, X / safe_total)
    y = np.where(black, white[1] / white_total, Y / safe_total)
    return np.stack([x, y, Y], axis=0)


def xyy_to_xyz(xyy: NDArray) -> NDArray[np.float64]:
    """Convert xyY to XYZ; y = 0 gives X = Z = 0."""
    x, y, Y = np.asarray(xyy, dtype=np.float64)
    degenerate = np.abs(y) < XYY_EPSILON
    scale = np.where(degenerate, 0.0, Y / np.where(degenerate, 1.0, y))
    return np.stack([scale * x, Y, scale * (1.0 - x - y)], axis=0)


def rgb_to_xyy(rgb: NDArray) -> NDArray[np.float64]:
    """Convert RGB to xyY."""
    return xyz_to_xyy(rgb_to_xyz(rgb))


def xyy_to_rgb(xyy: NDArray) -> NDArray[np.float64]:
    """Convert xyY to (unclamped) RGB."""
    return xyz_to_rgb(xyy_to_xyz(xyy))


# =============================================================================
# RGB <-> LAB (CIE L*a*b*)
# =============================================================================

def _lab_f(t: NDArray) -> NDArray:
    return np.where(t > CIE_EPSILON, np.cbrt(t), t / 3.0 * (29.0 / 6.0) ** 2 + 4.0 / 29.0)


def _lab_finv(t: NDArray) -> NDArray:
    return np.where(t > 6.0 / 29.0, t * t * t, 3.0 * (6.0 / 29.0) ** 2 * (t - 4.0 / 29.0))


def xyz_to_lab(xyz: NDArray, white: WhitePoint = D65) -> NDArray[np.float64]:
    """Convert XYZ to L*a*b* relative to a reference white."""
    X, Y, Z = xyz
    fy = _lab_f(Y / white[1])
    L = 1.16 * fy - 0.16
    a = 5.0 * (_lab_f(X / white[0]) - fy)
    b = 2.0 * (fy - _lab_f(Z / white[2]))
    return np.stack([L, a, b], axis=0)


def lab_to_xyz(lab: NDArray, white: WhitePoint = D65) -> NDArray[np.float64]:
    """Convert L*a*b* to XYZ relative to a reference white."""
    L, a, b = np.asarray(lab, dtype=np.float64)
    l2 = (L + 0.16) / 1.16
    X = white[0] * _lab_finv(l2 + a / 5.0)
    Y = white[1] * _lab_finv(l2)
    Z = white[2] * _lab_finv(l2 - b / 2.0)
    return np.stack([X, Y, Z], axis=0)


def rgb_to_lab(rgb: NDArray, white: WhitePoint = D65) -> NDArray[np.float64]:
    """Convert RGB to L*a*b*."""
    return xyz_to_lab(rgb_to_xyz(rgb), white)


def lab_to_rgb(lab: NDArray, white: WhitePoint = D65) -> NDArray[np.float64]:
    """Convert L*a*b* to (unclamped) RGB."""
    return xyz_to_rgb(lab_to_xyz(lab, white))


# =============================================================================
# RGB <-> HCL (CIE L*C*h, polar L*a*b*)
# =============================================================================

def rgb_to_hcl(rgb: NDArray, white: WhitePoint = D65) -> NDArray[np.float64]:
    """Convert RGB to hue (degrees), chroma and luminance."""
    L, a, b = rgb_to_lab(rgb, white)
    return np.stack([_hue_degrees(a, b), np.hypot(a, b), L], axis=0)


def hcl_to_rgb(hcl: NDArray, white: WhitePoint = D65) -> NDArray[np.float64]:
    """Convert hue, chroma and luminance to (unclamped) RGB."""
    h, c, L = np.asarray(hcl, dtype=np.float64)
    h_rad = DEG_TO_RAD * h
    lab = np.stack([L, c * np.cos(h_rad), c * np.sin(h_rad)], axis=0)
    return lab_to_rgb(lab, white)


# =============================================================================
# RGB <-> LUV (CIE L*u*v*)
# =============================================================================

def _xyz_to_uv(X: NDArray | float, Y: NDArray | float, Z: NDArray | float) -> tuple:
    denom = X + 15.0 * Y + 3.0 * Z
    zero = denom == 0.0
    safe = np.where(zero, 1.0, denom)
    u = np.where(zero, 0.0, 4.0 * X / safe)
    v = np.where(zero, 0.0, 9.0 * Y / safe)
    return u, v


def xyz_to_luv(xyz: NDArray, white: WhitePoint = D65) -> NDArray[np.float64]:
    """Convert XYZ to L*u*v* relative to a reference white."""
    X, Y, Z = xyz
    yr = Y / white[1]
    L = np.where(yr <= CIE_EPSILON, yr * CIE_KAPPA_100, 1.16 * np.cbrt(yr) - 0.16)
    ubis, vbis = _xyz_to_uv(X, Y, Z)
    un, vn = _xyz_to_uv(*white)
    u = 13.0 * L * (ubis - un)
    v = 13.0 * L * (vbis - vn)
    return np.stack([L, u, v], axis=0)


def luv_to_xyz(luv: NDArray, white: WhitePoint = D65) -> NDArray[np.float64]:
    """Convert L*u*v* to XYZ; L = 0 gives black."""
    L, u, v = np.asarray(luv, dtype=np.float64)
    Y = np.where(
        L <= 0.08,
        white[1] * L / CIE_KAPPA_100,
        white[1] * ((L + 0.16) / 1.16) ** 3,
    )
    un, vn = _xyz_to_uv(*white)

    with np.errstate(divide="ignore", invalid="ignore"):
        ubis = u / (13.0 * L) + un
        vbis = v / (13.0 * L) + vn
        X = Y * 9.0 * ubis / (4.0 * vbis)
        Z = Y * (12.0 - 3.0 * ubis - 20.0 * vbis) / (4.0 * vbis)

    black = L == 0.0
    return np.stack([np.where(black, 0.0, X), Y, np.where(black, 0.0, Z)], axis=0)


def rgb_to_luv(rgb: NDArray, white: WhitePoint = D65) -> NDArray[np.float64]:
    """Convert RGB to L*u*v*."""
    return xyz_to_luv(rgb_to_xyz(rgb), white)


def luv_to_rgb(luv: NDArray, white: WhitePoint = D65) -> NDArray[np.float64]:
    """Convert L*u*v* to (unclamped, possibly NaN) RGB."""
    return xyz_to_rgb(luv_to_xyz(luv, white))


# =============================================================================
# RGB <-> HSL
# =============================================================================

def rgb_to_hsl(rgb: NDArray) -> NDArray[np.float64]:
    """Convert RGB to hue (degrees), saturation and lightness."""
    r, g, b = np.asarray(rgb, dtype=np.float64)

    _max = np.maximum(np.maximum(r, g), b)
    _min = np.minimum(np.minimum(r, g), b)
    delta = _max - _min
    lightness = (_max + _min) / 2.0

    grey = delta == 0
    safe_delta = np.where(grey, 1.0, delta)

    # Saturation
    low = np.where(grey, 1.0, _max + _min)
    high = np.where(grey, 1.0, 2.0 - _max - _min)
    saturation = np.where(lightness < 0.5, delta / low, delta / high)

    # Hue, checking R, then G, then B as the maximum
    hue = np.select(
        [r == _max, g == _max],
        [(g - b) / safe_delta, 2.0 + (b - r) / safe_delta],
        default=4.0 + (r - g) / safe_delta,
    )
    hue = hue * 60.0
    hue = np.where(hue < 0, hue + 360.0, hue)

    return np.stack([np.where(grey, 0.0, hue), np.where(grey, 0.0, saturation), lightness], axis=0)


def hsl_to_rgb(hsl: NDArray) -> NDArray[np.float64]:
    """Convert hue (degrees, any value), saturation and lightness to RGB."""
    h, s, l = np.asarray(hsl, dtype=np.float64)
    th = h / 360.0

    t2 = np.where(l < 0.5, l * (1.0 + s), l + s - l * s)
    t1 = 2.0 * l - t2

    def channel(t: NDArray) -> NDArray:
        t = np.mod(t, 1.0)
        return np.select(
            [6.0 * t < 1.0, 2.0 * t < 1.0, 3.0 * t < 2.0],
            [t1 + (t2 - t1) * 6.0 * t, t2, t1 + (t2 - t1) * (2.0 / 3.0 - t) * 6.0],
            default=t1,
        )

    rgb = np.stack([channel(th + 1.0 / 3.0), channel(th), channel(th - 1.0 / 3.0)], axis=0)

    # Achromatic override
    return np.where(s == 0, l, rgb)


# =============================================================================
# RGB <-> HSLuv
# =============================================================================

def _max_chroma_for_lh(l: NDArray, h: NDArray) -> NDArray:
    """
    Largest in-gamut chroma for lightness l (0-100) and hue h (degrees).

    Intersects the hue ray with the six lines bounding the sRGB gamut
    in the Luv plane at this lightness.
    """
    h_rad = h / 360.0 * np.pi * 2.0
    sin_h = np.sin(h_rad)
    cos_h = np.cos(h_rad)

    sub1 = np.power(l + 16.0, 3.0) / 1560896.0
    sub2 = np.where(sub1 > HSLUV_EPSILON, sub1, l / HSLUV_KAPPA)

    best = np.full(np.shape(l), np.inf)
    with np.errstate(divide="ignore", invalid="ignore"):
        for m1, m2, m3 in XYZ_TO_RGB:
            for k in (0.0, 1.0):
                top1 = (284517.0 * m1 - 94839.0 * m3) * sub2
                top2 = (838422.0 * m3 + 769860.0 * m2 + 731718.0 * m1) * l * sub2 - 769860.0 * k * l
                bottom = (632260.0 * m3 - 126452.0 * m2) * sub2 + 126452.0 * k
                slope = top1 / bottom
                intercept = top2 / bottom
                length = intercept / (sin_h - slope * cos_h)
                best = np.where((length > 0.0) & (length < best), length, best)
    return best


def rgb_to_hsluv(rgb: NDArray) -> NDArray[np.float64]:
    """Convert RGB to HSLuv hue (degrees), saturation and lightness."""
    L, u, v = rgb_to_luv(rgb, HSLUV_D65)
    h = _hue_degrees(u, v)
    c = np.hypot(u, v) * 100.0
    l = L * 100.0

    extreme = (l > 99.9999999) | (l < 0.00000001)
    with np.errstate(divide="ignore", invalid="ignore"):
        s = c / _max_chroma_for_lh(l, h) * 100.0
    s = np.where(extreme, 0.0, np.nan_to_num(s, nan=0.0))

    return np.stack([h, np.clip(s / 100.0, 0.0, 1.0), np.clip(l / 100.0, 0.0, 1.0)], axis=0)


def hsluv_to_rgb(hsluv: NDArray) -> NDArray[np.float64]:
    """Convert HSLuv to (unclamped) RGB."""
    h, s, l = np.asarray(hsluv, dtype=np.float64)
    l = l * 100.0
    s = s * 100.0

    extreme = (l > 99.9999999) | (l < 0.00000001)
    c = np.where(extreme, 0.0, _max_chroma_for_lh(l, h) / 100.0 * s)
    c = np.nan_to_num(c, nan=0.0, posinf=0.0)

    L = np.clip(l / 100.0, 0.0, 1.0)
    C = c / 100.0
    h_rad = DEG_TO_RAD * h
    luv = np.stack([L, C * np.cos(h_rad), C * np.sin(h_rad)], axis=0)
    return luv_to_rgb(luv, HSLUV_D65)


# =============================================================================
# RGB <-> YCbCr (8-bit JFIF integer transform)
# =============================================================================

def _to_uint8(values: NDArray) -> NDArray[np.int64]:
    """Round [0, 1] values to 8-bit integers, dropping extra precision."""
    clamped = np.clip(np.nan_to_num(np.asarray(values, dtype=np.float64)), 0.0, 1.0)
    return np.floor(clamped * 255.0 + 0.5).astype(np.int64)


def _shift_clip(values: NDArray) -> NDArray[np.int64]:
    """Fixed-point 16.16 to 8-bit with saturation."""
    return np.clip(values >> 16, 0, 255)


def rgb_to_ycbcr(rgb: NDArray) -> NDArray[np.float64]:
    """Convert RGB to Y'CbCr at 8-bit precision; results scaled to [0, 1]."""
    r, g, b = _to_uint8(rgb)

    y = (19595 * r + 38470 * g + 7471 * b + (1 << 15)) >> 16
    cb = _shift_clip(-11056 * r - 21712 * g + 32768 * b + (257 << 15))
    cr = _shift_clip(32768 * r - 27440 * g - 5328 * b + (257 << 15))

    return np.stack([y, cb, cr], axis=0) / 255.0


def ycbcr_to_rgb(ycbcr: NDArray) -> NDArray[np.float64]:
    """Convert Y'CbCr to RGB at 8-bit precision."""
    y, cb, cr = _to_uint8(ycbcr)

    yy = y * 0x10101
    cb = cb - 128
    cr = cr - 128

    r = _shift_clip(yy + 91881 * cr)
    g = _shift_clip(yy - 22554 * cb - 46802 * cr)
    b = _shift_clip(yy + 116130 * cb)

    return np.stack([r, g, b], axis=0) / 255.0


# =============================================================================
# RGB <-> CMYK (8-bit integer transform)
# =============================================================================

def rgb_to_cmyk(rgb: NDArray) -> NDArray[np.float64]:
    """Convert RGB to CMYK at 8-bit precision; results scaled to [0, 1]."""
    r, g, b = _to_uint8(rgb)

    w = np.maximum(np.maximum(r, g), b)
    safe_w = np.maximum(w, 1)
    c = (w - r) * 0xFF // safe_w
    m = (w - g) * 0xFF // safe_w
    y = (w - b) * 0xFF // safe_w
    k = 0xFF - w

    # Black is pure K
    cmyk = np.stack([c, m, y, k], axis=0)
    cmyk = np.where(w == 0, np.array([0, 0, 0, 0xFF]).reshape((4,) + (1,) * w.ndim), cmyk)
    return cmyk / 255.0


def cmyk_to_rgb(cmyk: NDArray) -> NDArray[np.float64]:
    """Convert CMYK to RGB at 8-bit precision."""
    c, m, y, k = _to_uint8(cmyk)

    w = 0xFFFF - k * 0x101
    r = (0xFFFF - c * 0x101) * w // 0xFFFF
    g = (0xFFFF - m * 0x101) * w // 0xFFFF
    b = (0xFFFF - y * 0x101) * w // 0xFFFF

    return np.stack([r >> 8, g >> 8, b >> 8], axis=0) / 255.0
