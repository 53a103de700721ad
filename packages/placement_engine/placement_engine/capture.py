"""
캡처 결과(원본 사진 + 마스크 + Pose)를 외부 생성 클라이언트용 페이로드로 묶는 모듈.
"""
from pathlib import Path

import numpy as np
import yaml

from .footprint import Dimensions
from .mask import encode_png, to_data_url
from .pose import Pose

SUPPORTED_ASPECT_RATIOS = [
    ("1:1", 1.0),
    ("4:3", 4 / 3),
    ("3:4", 3 / 4),
    ("16:9", 16 / 9),
    ("9:16", 9 / 16),
    ("3:2", 3 / 2),
    ("2:3", 2 / 3),
    ("5:4", 5 / 4),
    ("4:5", 4 / 5),
    ("21:9", 21 / 9),
]


def map_to_aspect_ratio(ratio: float) -> str:
    """폭/높이 비율을 가장 가까운 지원 종횡비 문자열로 매핑합니다."""
    for name, value in SUPPORTED_ASPECT_RATIOS:
        if abs(ratio - value) < 0.1:
            return name

    if ratio > 1.5:
        return "16:9"
    if ratio > 1.2:
        return "4:3"
    if ratio > 0.9:
        return "1:1"
    if ratio > 0.6:
        return "3:4"
    return "9:16"


def build_capture_payload(base_image: np.ndarray, mask: np.ndarray,
                          pose: Pose, dimensions: Dimensions) -> dict:
    """
    외부 이미지 생성 클라이언트에 넘길 캡처 페이로드를 만듭니다.
    네트워크 호출은 하지 않습니다.

    Raises:
        ValueError: 마스크 크기가 원본 사진과 다른 경우.
    """
    h, w = base_image.shape[:2]
    if mask.shape[:2] != (h, w):
        raise ValueError(f"마스크 크기 {mask.shape[1]}x{mask.shape[0]}가 사진 크기 {w}x{h}와 다릅니다")

    return {
        'baseImage': to_data_url(base_image, "jpg"),
        'maskImage': to_data_url(mask, "png"),
        'aspectRatio': map_to_aspect_ratio(w / h),
        'dimensions': dimensions.to_dict(),
        'position': pose.to_dict(),
    }


def save_capture(directory: str | Path, stem: str, mask: np.ndarray,
                 pose: Pose, dimensions: Dimensions) -> tuple[Path, Path]:
    """
    마스크 PNG와 Pose YAML을 저장합니다.

    Returns:
        (mask_path, pose_path)
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    mask_path = directory / f"{stem}_mask.png"
    pose_path = directory / f"{stem}_pose.yaml"

    mask_path.write_bytes(encode_png(mask))
    data = {
        'position': pose.to_dict(),
        'dimensions': dimensions.to_dict(),
        'image_size': {'width': int(mask.shape[1]), 'height': int(mask.shape[0])},
    }
    with open(pose_path, 'w', encoding='utf-8') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    print(f"[정보] Capture: 저장 완료 - {mask_path.name}, {pose_path.name}")
    return mask_path, pose_path
