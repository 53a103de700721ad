"""
카메라 pitch 보조 추정기 (기기 방향 센서 / 수평선 검출).

TiltEstimator 인터페이스를 구현하는 전략들:
    NoTiltEstimator      - 항상 추정값 없음
    SensorTiltEstimator  - deviceorientation beta/gamma
    HorizonTiltEstimator - 영상 프레임의 수평선 휴리스틱
    FusedTiltEstimator   - 센서 우선, 없으면 수평선
추정값이 없으면 카메라는 이전 pitch를 유지합니다.
"""
import math
from dataclasses import dataclass

import cv2
import numpy as np

from .config import TiltConfig
from .geometry import clamp


@dataclass(frozen=True)
class OrientationSample:
    beta: float   # 앞뒤 기울기 (도)
    gamma: float  # 좌우 기울기 (도)


@dataclass(frozen=True)
class TiltEstimate:
    """
    카메라에는 pitch만 적용됩니다. roll은 진단용 출력이며
    PlacementSession.last_tilt로 확인할 수 있습니다.
    """
    pitch: float              # 라디안
    roll: float | None = None  # 라디안
    source: str = "sensor"


class TiltEstimator:
    """pitch 추정 전략의 기본 인터페이스."""

    def update_orientation(self, sample: OrientationSample) -> None:
        pass

    def update_frame(self, frame: np.ndarray, timestamp: float) -> None:
        pass

    def estimate(self) -> TiltEstimate | None:
        return None


class NoTiltEstimator(TiltEstimator):
    pass


class SensorTiltEstimator(TiltEstimator):
    def __init__(self, beta_reference_deg: float = 0.0):
        self.beta_reference_deg = beta_reference_deg
        self._latest = None

    def update_orientation(self, sample: OrientationSample) -> None:
        beta, gamma = sample.beta, sample.gamma
        if beta is None or gamma is None or not (math.isfinite(beta) and math.isfinite(gamma)):
            return
        self._latest = sample

    def estimate(self) -> TiltEstimate | None:
        s = self._latest
        # 센서가 없는 브라우저/기기는 0, 0을 보고함
        if s is None or (s.beta == 0.0 and s.gamma == 0.0):
            return None
        return TiltEstimate(
            pitch=math.radians(s.beta - self.beta_reference_deg),
            roll=math.radians(s.gamma),
            source="sensor",
        )


def row_edge_strength(frame: np.ndarray) -> np.ndarray:
    """
    각 행 경계의 색 그래디언트 크기 합을 계산합니다.

    Returns:
        (H,) 배열. i번째 값은 i행과 인접 행 사이의 에지 세기.
    """
    if frame.ndim == 2:
        frame = frame[:, :, np.newaxis]
    grad = cv2.Sobel(frame.astype(np.float32), cv2.CV_32F, 0, 1, ksize=3)
    if grad.ndim == 2:
        grad = grad[:, :, np.newaxis]
    return np.abs(grad).sum(axis=(1, 2))


def detect_horizon_row(frame: np.ndarray, scan_width: int = 320) -> float | None:
    """
    프레임 중앙 1/3 구간에서 에지 세기가 가장 큰 행을 수평선으로 간주합니다.

    Args:
        frame: BGR 또는 그레이스케일 이미지.
        scan_width: 탐색 전에 축소할 폭 (속도용). 0이면 축소하지 않음.

    Returns:
        원본 프레임 기준 수평선 행 (픽셀) 또는 검출 실패 시 None.
    """
    if frame is None or frame.size == 0 or frame.shape[0] < 3:
        return None

    h, w = frame.shape[:2]
    work = frame
    ratio = 1.0
    if scan_width and w > scan_width:
        ratio = scan_width / w
        new_h = max(3, int(round(h * ratio)))
        work = cv2.resize(frame, (scan_width, new_h), interpolation=cv2.INTER_AREA)
        ratio = new_h / h

    strength = row_edge_strength(work)
    wh = work.shape[0]
    top, bottom = wh // 3, max(wh // 3 + 1, (2 * wh) // 3)
    band = strength[top:bottom]
    if band.size == 0 or not np.isfinite(band).all() or band.max() <= 1e-6:
        return None

    best = top + int(np.argmax(band))
    return best / ratio


def horizon_to_pitch(row: float, frame_height: int, max_offset_deg: float = 30.0) -> float:
    """
    수평선 행 위치를 pitch로 선형 매핑합니다.

    정규화 위치 (row - h/2) / h ∈ [-0.5, 0.5]에 π/3을 곱하고 ±max_offset으로 제한합니다.
    수평선이 화면 중앙보다 위에 있으면 카메라가 아래를 보고 있으므로 음수 pitch.
    """
    normalized = clamp((row - frame_height / 2.0) / frame_height, -0.5, 0.5)
    limit = math.radians(max_offset_deg)
    return clamp(normalized * (math.pi / 3.0), -limit, limit)


class HorizonTiltEstimator(TiltEstimator):
    """
    일정 주기(기본 2Hz)로만 수평선 탐색을 수행합니다.
    매 프레임 실행하기엔 비용이 크고 노이즈가 많습니다.
    """

    def __init__(self, scan_hz: float = 2.0, scan_width: int = 320, max_offset_deg: float = 30.0):
        self.interval = 1.0 / scan_hz
        self.scan_width = scan_width
        self.max_offset_deg = max_offset_deg
        self._last_scan = None
        self._pitch = None

    def due(self, timestamp: float) -> bool:
        return self._last_scan is None or timestamp - self._last_scan >= self.interval

    def update_frame(self, frame: np.ndarray, timestamp: float) -> None:
        if not self.due(timestamp):
            return
        self._last_scan = timestamp

        try:
            row = detect_horizon_row(frame, self.scan_width)
        except cv2.error as e:
            print(f"[경고] HorizonTiltEstimator: 프레임 분석 실패 - {e}")
            return
        if row is None:
            return
        self._pitch = horizon_to_pitch(row, frame.shape[0], self.max_offset_deg)

    def estimate(self) -> TiltEstimate | None:
        if self._pitch is None:
            return None
        return TiltEstimate(pitch=self._pitch, source="horizon")


class FusedTiltEstimator(TiltEstimator):
    """
    센서 pitch의 크기가 dead-band를 넘으면 센서를, 아니면 수평선 추정값을 사용합니다.
    dead-band 0은 "0이 아닌 센서 값이면 센서 우선" 규칙과 같습니다.
    """

    def __init__(self, sensor: SensorTiltEstimator, horizon: HorizonTiltEstimator,
                 sensor_deadband_deg: float = 0.0):
        self.sensor = sensor
        self.horizon = horizon
        self.sensor_deadband = math.radians(sensor_deadband_deg)

    def update_orientation(self, sample: OrientationSample) -> None:
        self.sensor.update_orientation(sample)

    def update_frame(self, frame: np.ndarray, timestamp: float) -> None:
        self.horizon.update_frame(frame, timestamp)

    def estimate(self) -> TiltEstimate | None:
        from_sensor = self.sensor.estimate()
        if from_sensor is not None and abs(from_sensor.pitch) > self.sensor_deadband:
            return from_sensor
        return self.horizon.estimate()


def create_tilt_estimator(config: TiltConfig | None = None) -> TiltEstimator:
    """TiltConfig.mode에 따라 추정 전략을 생성합니다."""
    config = config or TiltConfig()
    if config.mode == "sensor":
        return SensorTiltEstimator(config.beta_reference_deg)
    if config.mode == "horizon":
        return HorizonTiltEstimator(config.scan_hz, config.scan_width, config.max_offset_deg)
    if config.mode == "fused":
        return FusedTiltEstimator(
            SensorTiltEstimator(config.beta_reference_deg),
            HorizonTiltEstimator(config.scan_hz, config.scan_width, config.max_offset_deg),
            config.sensor_deadband_deg,
        )
    return NoTiltEstimator()
