"""
설정(YAML)과 이미지 데이터 로딩을 담당하는 모듈.
"""
import dataclasses
from pathlib import Path

import cv2
import numpy as np
import yaml

from .config import (
    PlacementConfig, CameraConfig, PoseConfig,
    GestureConfig, DepthConfig, TiltConfig,
)
from .footprint import Dimensions

SECTIONS = {
    'camera': CameraConfig,
    'pose': PoseConfig,
    'gesture': GestureConfig,
    'depth': DepthConfig,
    'tilt': TiltConfig,
}


def config_from_dict(data: dict | None) -> PlacementConfig:
    """
    섹션별 딕셔너리를 PlacementConfig로 변환합니다. 생략된 섹션/키는 기본값을 사용합니다.

    Raises:
        ValueError: 알 수 없는 섹션이나 키가 있는 경우.
    """
    data = data or {}
    unknown = set(data) - set(SECTIONS)
    if unknown:
        raise ValueError(f"알 수 없는 설정 섹션: {sorted(unknown)}")

    sections = {}
    for name, cls in SECTIONS.items():
        values = data.get(name) or {}
        try:
            sections[name] = cls(**values)
        except TypeError as e:
            raise ValueError(f"'{name}' 섹션 오류: {e}") from e
    return PlacementConfig(**sections)


def load_config(path: str | Path | None) -> PlacementConfig:
    """
    YAML 설정 파일을 로드합니다. 파일이 없으면 기본 설정을 반환합니다.

    Args:
        path: YAML 파일 경로.
    """
    if path is None:
        return PlacementConfig()

    path = Path(path)
    if not path.exists():
        print(f"[경고] Loader: 설정 파일 {path}를 찾을 수 없습니다. 기본값을 사용합니다.")
        return PlacementConfig()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        config = config_from_dict(data)
    except (yaml.YAMLError, ValueError) as e:
        print(f"[오류] Loader: 설정 파일 {path} 처리 중 오류 - {e}")
        raise
    print(f"[정보] Loader: 설정 로드 완료 - {path}")
    return config


def save_config(config: PlacementConfig, path: str | Path):
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(dataclasses.asdict(config), f, default_flow_style=False, sort_keys=False)


def load_dimensions(data: dict) -> Dimensions:
    """
    카탈로그 치수 딕셔너리({length, width, height|depth})를 Dimensions로 변환합니다.
    카탈로그 항목 전체가 전달되면 'dimensions' 키를 사용합니다.
    """
    if 'dimensions' in data:
        data = data['dimensions']
    try:
        return Dimensions(
            length=float(data['length']),
            width=float(data['width']),
            height=float(data['height']) if data.get('height') is not None else None,
            depth=float(data['depth']) if data.get('depth') is not None else None,
        )
    except KeyError as e:
        raise ValueError(f"치수 항목 누락: {e}") from e


def load_image(path: str | Path) -> np.ndarray | None:
    """BGR 사진을 로드합니다. 실패하면 None."""
    path = Path(path)
    if not path.exists():
        print(f"[경고] Loader: 이미지 {path}를 찾을 수 없습니다.")
        return None
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        print(f"[오류] Loader: 이미지 {path}를 디코딩할 수 없습니다.")
    return image


def load_depth_map(path: str | Path) -> np.ndarray | None:
    """단일 채널 깊이 맵을 로드합니다. 실패하면 None."""
    path = Path(path)
    if not path.exists():
        print(f"[경고] Loader: 깊이 맵 {path}를 찾을 수 없습니다.")
        return None
    depth = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if depth is None:
        print(f"[오류] Loader: 깊이 맵 {path}를 디코딩할 수 없습니다.")
    return depth
