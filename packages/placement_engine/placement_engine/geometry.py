"""
지오메트리 및 좌표 변환 관련 유틸리티 함수.
"""
import math

import numpy as np


def clamp(value: float, lower: float, upper: float) -> float:
    """값을 [lower, upper] 범위로 제한합니다."""
    return max(lower, min(upper, value))


def wrap_degrees(angle: float) -> float:
    """각도를 [0, 360) 범위로 정규화합니다."""
    wrapped = math.fmod(angle, 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    # -1e-15 + 360.0 같은 경우 부동소수점 반올림으로 360.0이 될 수 있음
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def finite_or_zero(value: float) -> float:
    value = float(value)
    return value if math.isfinite(value) else 0.0


def yaw_rotation(angle_deg: float) -> np.ndarray:
    """
    수직(Y)축 기준 회전 행렬 (X-Z 평면, 2x2).

    [x', z'] = R @ [x, z]
    """
    r = math.radians(angle_deg)
    return np.array([
        [ math.cos(r), math.sin(r)],
        [-math.sin(r), math.cos(r)]
    ])


def footprint_corners(center_x: float, center_z: float,
                      length: float, width: float,
                      rotation_deg: float, scale: float = 1.0) -> np.ndarray:
    """
    지면(y=0) 위 회전된 직사각형의 네 꼭짓점을 계산합니다.

    length는 회전 전 X축, width는 Z축 방향 길이입니다.

    Returns:
        (4, 3) 월드 좌표 배열. 순서: 좌후, 우후, 우전, 좌전 (닫힌 폴리곤 순서).
    """
    half_l = length * scale / 2.0
    half_w = width * scale / 2.0
    local = np.array([
        [-half_l, -half_w],
        [ half_l, -half_w],
        [ half_l,  half_w],
        [-half_l,  half_w],
    ])
    rotated = local @ yaw_rotation(rotation_deg).T

    corners = np.zeros((4, 3), dtype=np.float64)
    corners[:, 0] = rotated[:, 0] + center_x
    corners[:, 2] = rotated[:, 1] + center_z
    return corners


def pointer_distance(p1, p2) -> float:
    """두 포인터 사이의 유클리드 거리."""
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def clip_polygon(points: np.ndarray, axis: int, bound: float, keep_above: bool = True) -> np.ndarray:
    """
    다각형을 축 정렬 반평면 하나로 자릅니다 (Sutherland-Hodgman).

    Args:
        points: (N, D) 꼭짓점 배열 (닫힌 폴리곤 순서).
        axis: 경계 평면에 수직인 좌표 축.
        bound: 경계 값.
        keep_above: True면 points[:, axis] >= bound 쪽을 남깁니다.

    Returns:
        (K, D) 잘린 다각형. 남는 영역이 없으면 K=0.
    """
    pts = np.asarray(points, dtype=np.float64)
    if len(pts) == 0:
        return pts

    sign = 1.0 if keep_above else -1.0
    dist = sign * (pts[:, axis] - bound)
    out = []
    n = len(pts)
    for i in range(n):
        j = (i + 1) % n
        if dist[i] >= 0.0:
            out.append(pts[i])
        if (dist[i] >= 0.0) != (dist[j] >= 0.0):
            t = dist[i] / (dist[i] - dist[j])
            out.append(pts[i] + t * (pts[j] - pts[i]))

    if not out:
        return np.empty((0, pts.shape[1]), dtype=np.float64)
    return np.array(out)


def clip_polygon_to_rect(points: np.ndarray, x_min: float, y_min: float,
                         x_max: float, y_max: float) -> np.ndarray:
    """2D 다각형을 직사각형 영역으로 자릅니다. 모서리 방향은 그대로 유지됩니다."""
    pts = clip_polygon(points, 0, x_min, keep_above=True)
    pts = clip_polygon(pts, 0, x_max, keep_above=False)
    pts = clip_polygon(pts, 1, y_min, keep_above=True)
    return clip_polygon(pts, 1, y_max, keep_above=False)
