"""
투영된 footprint를 마스크 이미지로 래스터화하는 모듈.
"""
import base64

import cv2
import numpy as np

from .footprint import FootprintProjection
from .geometry import clip_polygon_to_rect

MASK_ON = 255
MASK_OFF = 0

# 캔버스 경계 바깥 여유 (픽셀). 경계 픽셀까지 채워지도록 조금 넓게 자름
CANVAS_MARGIN = 1.0


def blank_mask(width: int, height: int) -> np.ndarray:
    return np.zeros((int(height), int(width)), dtype=np.uint8)


def canvas_polygon(points: np.ndarray, width: int, height: int) -> np.ndarray | None:
    """
    다각형을 캔버스 영역으로 자르고 fillPoly용 int32 배열로 변환합니다.

    축별로 좌표를 제한하면 화면 밖 꼭짓점으로 향하는 모서리가 휘므로
    직사각형 클리핑으로 모서리 방향을 유지합니다.

    Returns:
        (K, 1, 2) int32 배열 또는 캔버스 안에 남는 영역이 없으면 None.
    """
    if points is None or len(points) < 3:
        return None
    clipped = clip_polygon_to_rect(
        points, -CANVAS_MARGIN, -CANVAS_MARGIN,
        width - 1 + CANVAS_MARGIN, height - 1 + CANVAS_MARGIN,
    )
    if len(clipped) < 3:
        return None
    return np.round(clipped).astype(np.int32).reshape(-1, 1, 2)


class MaskRasterizer:
    """검은 배경 위에 흰색으로 채운 footprint 마스크를 생성합니다."""

    def rasterize(self, projection: FootprintProjection, width: int, height: int) -> np.ndarray:
        """
        Args:
            projection: FootprintProjector 결과.
            width, height: 원본 사진 크기 (픽셀).

        Returns:
            (height, width) uint8 마스크. 보이지 않으면 전부 0.
        """
        mask = blank_mask(width, height)
        if not projection.drawable:
            return mask

        sx = width / projection.image_size[0] if projection.image_size[0] else 1.0
        sy = height / projection.image_size[1] if projection.image_size[1] else 1.0
        polygon = canvas_polygon(projection.corners * np.array([sx, sy]), width, height)
        if polygon is None:
            return mask

        cv2.fillPoly(mask, [polygon], MASK_ON)
        return mask

    def rasterize_rotated_rect(self, center, size, rotation_deg: float,
                               width: int, height: int) -> np.ndarray:
        """
        간이 경로: 투영된 중심점과 화면상 크기로 회전된 직사각형을 그립니다.

        Args:
            center: (cx, cy) 픽셀.
            size: (rect_w, rect_h) 픽셀.
            rotation_deg: 회전 각도 (도).
        """
        mask = blank_mask(width, height)
        if center is None or size is None:
            return mask
        rect_w, rect_h = size
        if not (rect_w > 0 and rect_h > 0):
            return mask

        box = cv2.boxPoints(((float(center[0]), float(center[1])),
                             (float(rect_w), float(rect_h)),
                             float(rotation_deg)))
        polygon = canvas_polygon(box.astype(np.float64), width, height)
        if polygon is None:
            return mask
        cv2.fillPoly(mask, [polygon], MASK_ON)
        return mask


def encode_png(mask: np.ndarray) -> bytes:
    ok, buffer = cv2.imencode(".png", mask)
    if not ok:
        raise ValueError("마스크 PNG 인코딩 실패")
    return buffer.tobytes()


def to_data_url(image: np.ndarray, fmt: str = "png") -> str:
    """OpenCV 이미지를 base64 data URL로 인코딩합니다."""
    mime = "image/png" if fmt == "png" else "image/jpeg"
    ok, buffer = cv2.imencode(f".{fmt}", image)
    if not ok:
        raise ValueError(f"이미지 인코딩 실패 ({fmt})")
    return f"data:{mime};base64," + base64.b64encode(buffer.tobytes()).decode("utf-8")
