"""
배치 객체의 자세(Pose) 상태 모델
"""
import dataclasses
from dataclasses import dataclass

from .config import PoseConfig
from .geometry import clamp, finite_or_zero, wrap_degrees


@dataclass(frozen=True)
class Pose:
    """
    지면 위 객체의 배치 상태 스냅샷 (불변).

    Attributes:
        x: 지면 X 오프셋 (미터, 카메라 주시점 기준).
        z: 지면 Z 오프셋 (미터). y는 저장하지 않으며 바닥면은 항상 y=0.
        rotation_deg: 수직축 회전 [0, 360).
        scale: 실제 치수에 곱하는 배율.
    """
    x: float = 0.0
    z: float = 0.0
    rotation_deg: float = 0.0
    scale: float = 1.0

    def to_dict(self) -> dict:
        return {
            'x': self.x,
            'z': self.z,
            'rotationDeg': self.rotation_deg,
            'scale': self.scale,
        }


class PoseModel:
    """
    Pose의 유일한 소유자.

    모든 변경 함수는 이전 스냅샷과 변화량만으로 새 스냅샷을 계산하여
    저장하고 반환합니다. 범위를 벗어난 입력은 거부하지 않고 클램핑합니다.
    """

    def __init__(self, config: PoseConfig | None = None):
        self.config = config or PoseConfig()
        self._pose = self._initial()

    def _initial(self) -> Pose:
        return Pose(scale=self._clamp_scale(self.config.default_scale))

    def _clamp_scale(self, s: float) -> float:
        return clamp(s, self.config.scale_min, self.config.scale_max)

    def _clamp_position(self, v: float) -> float:
        limit = self.config.position_limit
        return clamp(v, -limit, limit)

    def _commit(self, pose: Pose) -> Pose:
        self._pose = pose
        return pose

    def get(self) -> Pose:
        return self._pose

    def translate_by(self, dx: float, dz: float) -> Pose:
        p = self._pose
        return self._commit(dataclasses.replace(
            p,
            x=self._clamp_position(p.x + finite_or_zero(dx)),
            z=self._clamp_position(p.z + finite_or_zero(dz)),
        ))

    def set_position(self, x: float, z: float) -> Pose:
        p = self._pose
        return self._commit(dataclasses.replace(
            p,
            x=self._clamp_position(finite_or_zero(x)),
            z=self._clamp_position(finite_or_zero(z)),
        ))

    def rotate_by(self, ddeg: float) -> Pose:
        p = self._pose
        return self._commit(dataclasses.replace(
            p, rotation_deg=wrap_degrees(p.rotation_deg + finite_or_zero(ddeg))
        ))

    def set_rotation(self, deg: float) -> Pose:
        return self._commit(dataclasses.replace(
            self._pose, rotation_deg=wrap_degrees(finite_or_zero(deg))
        ))

    def set_scale(self, s: float) -> Pose:
        value = float(s)
        if value != value:  # NaN
            return self._pose
        return self._commit(dataclasses.replace(self._pose, scale=self._clamp_scale(value)))

    def scale_by(self, ds: float) -> Pose:
        p = self._pose
        return self._commit(dataclasses.replace(
            p, scale=self._clamp_scale(p.scale + finite_or_zero(ds))
        ))

    def reset(self) -> Pose:
        return self._commit(self._initial())
