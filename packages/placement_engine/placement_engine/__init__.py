"""
카메라 기준 객체 배치 및 마스크 투영 엔진.
"""
from .camera import CameraModel
from .capture import build_capture_payload, map_to_aspect_ratio, save_capture
from .config import (
    PlacementConfig, CameraConfig, PoseConfig,
    GestureConfig, DepthConfig, TiltConfig,
)
from .depth import DepthAutoScaler, DepthSample, depth_to_scale
from .footprint import Dimensions, FootprintProjection, FootprintProjector
from .gesture import (
    GestureInterpreter, GesturePhase, GestureState, GestureDelta,
    Pointer, PointerSample, reduce_gesture,
)
from .loader import load_config, save_config, load_dimensions, load_image, load_depth_map
from .mask import MaskRasterizer, canvas_polygon, encode_png, to_data_url
from .pose import Pose, PoseModel
from .session import CaptureResult, PlacementSession, camera_from_config
from .tilt import (
    TiltEstimator, TiltEstimate, OrientationSample,
    NoTiltEstimator, SensorTiltEstimator, HorizonTiltEstimator, FusedTiltEstimator,
    create_tilt_estimator, detect_horizon_row, horizon_to_pitch,
)

__all__ = [
    "CameraModel",
    "build_capture_payload",
    "map_to_aspect_ratio",
    "save_capture",
    "PlacementConfig",
    "CameraConfig",
    "PoseConfig",
    "GestureConfig",
    "DepthConfig",
    "TiltConfig",
    "DepthAutoScaler",
    "DepthSample",
    "depth_to_scale",
    "Dimensions",
    "FootprintProjection",
    "FootprintProjector",
    "GestureInterpreter",
    "GesturePhase",
    "GestureState",
    "GestureDelta",
    "Pointer",
    "PointerSample",
    "reduce_gesture",
    "load_config",
    "save_config",
    "load_dimensions",
    "load_image",
    "load_depth_map",
    "MaskRasterizer",
    "canvas_polygon",
    "encode_png",
    "to_data_url",
    "Pose",
    "PoseModel",
    "CaptureResult",
    "PlacementSession",
    "camera_from_config",
    "TiltEstimator",
    "TiltEstimate",
    "OrientationSample",
    "NoTiltEstimator",
    "SensorTiltEstimator",
    "HorizonTiltEstimator",
    "FusedTiltEstimator",
    "create_tilt_estimator",
    "detect_horizon_row",
    "horizon_to_pitch",
]
