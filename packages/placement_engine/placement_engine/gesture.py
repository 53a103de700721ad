"""
포인터/터치 이벤트 스트림을 Pose 변화량으로 변환하는 제스처 해석기.

상태 머신:
    IDLE → DRAGGING → IDLE   (포인터 1개)
    IDLE → PINCHING → IDLE   (포인터 2개 이상)

제스처 도중 포인터 개수나 ID가 바뀌면 추적 상태만 초기화하고 새 제스처로
시작합니다. 이미 적용된 변화량은 되돌리지 않습니다.
"""
import enum
import math
from dataclasses import dataclass, field

from .config import GestureConfig
from .geometry import pointer_distance
from .pose import Pose, PoseModel


class GesturePhase(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    PINCHING = "pinching"


@dataclass(frozen=True)
class Pointer:
    id: int
    x: float
    y: float


@dataclass(frozen=True)
class PointerSample:
    """한 프레임의 활성 포인터 목록. 포인터가 없으면 해제(release)를 의미합니다."""
    pointers: tuple = ()
    timestamp: float = 0.0


@dataclass(frozen=True)
class GestureDelta:
    dx: float = 0.0
    dz: float = 0.0
    ds: float = 0.0

    @property
    def is_zero(self) -> bool:
        return self.dx == 0.0 and self.dz == 0.0 and self.ds == 0.0


@dataclass(frozen=True)
class GestureState:
    phase: GesturePhase = GesturePhase.IDLE
    pointer_ids: tuple = ()
    last_position: tuple | None = None
    last_distance: float | None = None
    last_timestamp: float | None = None


IDLE_STATE = GestureState()
NO_DELTA = GestureDelta()


def _pinch_pair(pointers) -> tuple:
    ordered = sorted(pointers, key=lambda p: p.id)
    return ordered[0], ordered[1]


def reduce_gesture(state: GestureState, sample: PointerSample,
                   config: GestureConfig) -> tuple[GestureState, GestureDelta]:
    """
    제스처 리듀서. 이전 상태와 샘플 하나로 다음 상태와 변화량을 계산합니다.

    Args:
        state: 이전 GestureState.
        sample: 새 PointerSample.
        config: 감도 설정.

    Returns:
        (new_state, delta) 튜플. 새 제스처의 첫 샘플은 기준값만 기록하고
        변화량 0을 반환합니다.
    """
    if state.last_timestamp is not None and sample.timestamp < state.last_timestamp:
        # 순서가 뒤바뀐 샘플은 누적 추적을 망가뜨리므로 버림
        return state, NO_DELTA

    pointers = tuple(sample.pointers)
    timestamp = sample.timestamp

    if not pointers:
        return GestureState(last_timestamp=timestamp), NO_DELTA

    if len(pointers) == 1:
        p = pointers[0]
        position = (float(p.x), float(p.y))
        if state.phase is not GesturePhase.DRAGGING or state.pointer_ids != (p.id,):
            return GestureState(
                phase=GesturePhase.DRAGGING,
                pointer_ids=(p.id,),
                last_position=position,
                last_timestamp=timestamp,
            ), NO_DELTA

        delta_x = position[0] - state.last_position[0]
        delta_y = position[1] - state.last_position[1]
        delta = GestureDelta(
            dx=delta_x * config.drag_sensitivity,
            dz=delta_y * config.drag_sensitivity * config.drag_z_sign,
        )
        return GestureState(
            phase=GesturePhase.DRAGGING,
            pointer_ids=state.pointer_ids,
            last_position=position,
            last_timestamp=timestamp,
        ), delta

    a, b = _pinch_pair(pointers)
    ids = (a.id, b.id)
    distance = pointer_distance((a.x, a.y), (b.x, b.y))
    if not math.isfinite(distance):
        return state, NO_DELTA

    if state.phase is not GesturePhase.PINCHING or state.pointer_ids != ids:
        return GestureState(
            phase=GesturePhase.PINCHING,
            pointer_ids=ids,
            last_distance=distance,
            last_timestamp=timestamp,
        ), NO_DELTA

    delta = GestureDelta(ds=(distance - state.last_distance) * config.scale_sensitivity)
    return GestureState(
        phase=GesturePhase.PINCHING,
        pointer_ids=ids,
        last_distance=distance,
        last_timestamp=timestamp,
    ), delta


@dataclass
class GestureInterpreter:
    """
    리듀서를 감싸는 상태 보관 객체.
    feed()는 샘플 하나를 해석하고 그 결과를 다음 샘플 전에 PoseModel에 적용합니다.
    """
    config: GestureConfig = field(default_factory=GestureConfig)
    state: GestureState = IDLE_STATE

    @property
    def phase(self) -> GesturePhase:
        return self.state.phase

    def interpret(self, sample: PointerSample) -> GestureDelta:
        last = self.state.last_timestamp
        if last is not None and sample.timestamp < last:
            print(f"[경고] GestureInterpreter: 순서가 어긋난 샘플을 무시합니다 "
                  f"(t={sample.timestamp}, last={last})")
        self.state, delta = reduce_gesture(self.state, sample, self.config)
        return delta

    def feed(self, sample: PointerSample, pose_model: PoseModel) -> Pose:
        delta = self.interpret(sample)
        if delta.dx or delta.dz:
            pose_model.translate_by(delta.dx, delta.dz)
        if self.state.phase is GesturePhase.PINCHING:
            pose_model.scale_by(delta.ds)
        return pose_model.get()

    def reset(self):
        """진행 중인 제스처를 중단합니다 (적용된 변화량은 유지)."""
        self.state = GestureState(last_timestamp=self.state.last_timestamp)
