"""
객체 배치 애플리케이션을 위한 메인 윈도우
"""
import time
from pathlib import Path

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QLabel, QPushButton,
    QSlider, QDoubleSpinBox, QGroupBox, QHBoxLayout, QVBoxLayout,
    QGridLayout, QFileDialog, QCheckBox, QSizePolicy
)
from PySide6.QtCore import Qt, Signal, QEvent, QPointF
from PySide6.QtGui import QPixmap, QImage, QPainter, QEventPoint
import cv2
import numpy as np
import yaml

from placement_engine import (
    PlacementSession, Dimensions, Pointer, PointerSample,
    HorizonTiltEstimator, canvas_polygon, load_config, load_image, load_depth_map,
    save_capture,
)


class PlacementCanvas(QLabel):
    """
    종횡비를 유지하며 사진을 그리고, 마우스/터치 입력을 원본 이미지 좌표의
    PointerSample로 변환하여 전달하는 위젯.
    """
    pointer_sample = Signal(object)  # PointerSample
    wheel_steps = Signal(float)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setAlignment(Qt.AlignCenter)
        self.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Ignored)
        self.setAttribute(Qt.WA_AcceptTouchEvents, True)
        self.setMinimumSize(640, 360)
        self._pixmap = None
        self._image_size = None

    def setImage(self, pixmap, image_size):
        self._pixmap = pixmap
        self._image_size = image_size
        self.update()

    def _target_rect(self):
        scaled = self._pixmap.size().scaled(self.size(), Qt.KeepAspectRatio)
        x = (self.width() - scaled.width()) // 2
        y = (self.height() - scaled.height()) // 2
        return x, y, scaled.width(), scaled.height()

    def _to_image(self, pos: QPointF):
        # 위젯 좌표 → 원본 이미지 좌표. 사진이 없으면 None
        if self._pixmap is None or self._image_size is None:
            return None
        x, y, w, h = self._target_rect()
        img_w, img_h = self._image_size
        return (pos.x() - x) * img_w / w, (pos.y() - y) * img_h / h

    def paintEvent(self, event):
        if not self._pixmap or self._pixmap.isNull():
            super().paintEvent(event)
            return

        painter = QPainter(self)
        x, y, w, h = self._target_rect()
        painter.drawPixmap(x, y, w, h, self._pixmap)

    def _emit(self, pointers, timestamp_ms):
        if self._pixmap is None:
            return
        self.pointer_sample.emit(PointerSample(pointers=tuple(pointers), timestamp=timestamp_ms / 1000.0))

    def mousePressEvent(self, event):
        if self._pixmap is None:
            return
        if event.button() == Qt.LeftButton:
            x, y = self._to_image(event.position())
            self._emit([Pointer(0, x, y)], event.timestamp())

    def mouseMoveEvent(self, event):
        if self._pixmap is None:
            return
        if event.buttons() & Qt.LeftButton:
            x, y = self._to_image(event.position())
            self._emit([Pointer(0, x, y)], event.timestamp())

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._emit([], event.timestamp())

    def wheelEvent(self, event):
        self.wheel_steps.emit(event.angleDelta().y() / 120.0)

    def event(self, event):
        if event.type() in (QEvent.TouchBegin, QEvent.TouchUpdate, QEvent.TouchEnd, QEvent.TouchCancel):
            if self._pixmap is None:
                event.ignore()
                return True
            pointers = []
            if event.type() not in (QEvent.TouchEnd, QEvent.TouchCancel):
                for point in event.points():
                    if point.state() == QEventPoint.State.Released:
                        continue
                    x, y = self._to_image(point.position())
                    pointers.append(Pointer(point.id(), x, y))
            self._emit(pointers, event.timestamp())
            event.accept()
            return True
        return super().event(event)


def draw_overlay(image, projection, camera, depth_map=None, show_depth=False):
    """사진 위에 투영된 footprint와 지평선을 그립니다."""
    vis = image.copy()
    h, w = vis.shape[:2]

    if show_depth and depth_map is not None:
        depth = cv2.resize(depth_map, (w, h), interpolation=cv2.INTER_LINEAR)
        depth_bgr = cv2.cvtColor(depth, cv2.COLOR_GRAY2BGR)
        vis = cv2.addWeighted(vis, 0.5, depth_bgr, 0.5, 0)

    horizon = int(round(camera.horizon_row()))
    if 0 <= horizon < h:
        cv2.line(vis, (0, horizon), (w - 1, horizon), (0, 200, 255), 1, cv2.LINE_AA)

    polygon = canvas_polygon(projection.corners, w, h) if projection.drawable else None
    if polygon is not None:
        fill = vis.copy()
        cv2.fillPoly(fill, [polygon], (255, 123, 0))
        vis = cv2.addWeighted(vis, 0.8, fill, 0.2, 0)
        cv2.polylines(vis, [polygon], isClosed=True, color=(255, 123, 0), thickness=3)

    if projection.center is not None and 0 <= projection.center[0] < w and 0 <= projection.center[1] < h:
        cx, cy = (int(round(v)) for v in projection.center)
        cv2.drawMarker(vis, (cx, cy), (255, 255, 255), cv2.MARKER_CROSS, 20, 2)

    return vis


class PlacementWindow(QMainWindow):
    def __init__(self, dimensions: Dimensions | None = None, config_path: str | None = None):
        super().__init__()
        self.setWindowTitle("Placement")
        self.setGeometry(100, 100, 1600, 900)

        # --- 데이터 속성 ---
        self.config = load_config(config_path)
        self.dimensions = dimensions or Dimensions(length=8.0, width=4.0, depth=1.5)
        self.session = PlacementSession(self.dimensions, self.config)
        self.current_image_path = None
        self.current_image = None
        self.current_depth = None

        # --- UI 설정 ---
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        root_layout = QHBoxLayout(central_widget)
        root_layout.setContentsMargins(10, 10, 10, 10)
        root_layout.setSpacing(10)

        # 왼쪽: 이미지 표시
        self.canvas = PlacementCanvas()
        self.canvas.setText("사진을 선택하세요")
        self.canvas.setStyleSheet("background-color: black; color: grey; font-size: 20px;")
        self.canvas.pointer_sample.connect(self._on_pointer_sample)
        self.canvas.wheel_steps.connect(self._on_wheel)
        root_layout.addWidget(self.canvas, 7)

        # 오른쪽: 제어
        controls_panel = QVBoxLayout()
        root_layout.addLayout(controls_panel, 3)
        controls_panel.addWidget(self._create_file_group())
        controls_panel.addWidget(self._create_transform_group())
        controls_panel.addWidget(self._create_actions_group())
        controls_panel.addStretch()

        self.status_label = QLabel("Ready")
        controls_panel.addWidget(self.status_label)

    def _create_file_group(self):
        group = QGroupBox("Files")
        layout = QVBoxLayout()

        photo_btn = QPushButton("사진 열기")
        depth_btn = QPushButton("깊이 맵 열기")
        config_btn = QPushButton("설정 YAML 열기")
        photo_btn.clicked.connect(self._open_photo)
        depth_btn.clicked.connect(self._open_depth_map)
        config_btn.clicked.connect(self._open_config)
        layout.addWidget(photo_btn)
        layout.addWidget(depth_btn)
        layout.addWidget(config_btn)

        group.setLayout(layout)
        return group

    def _create_transform_group(self):
        group = QGroupBox("Transform (배치)")
        layout = QGridLayout()
        pose_cfg = self.config.pose

        # 회전 (도)
        self.rotation_slider = QSlider(Qt.Horizontal)
        self.rotation_slider.setRange(0, 3599)
        self.rotation_spinbox = QDoubleSpinBox()
        self.rotation_spinbox.setRange(0.0, 359.9)
        self.rotation_spinbox.setDecimals(1)
        self.rotation_slider.valueChanged.connect(lambda v: self._on_rotation_changed(v / 10.0))
        self.rotation_spinbox.valueChanged.connect(self._on_rotation_changed)
        layout.addWidget(QLabel("Rotation"), 0, 0)
        layout.addWidget(self.rotation_slider, 0, 1)
        layout.addWidget(self.rotation_spinbox, 0, 2)

        # 스케일 - 수동 조작 시 Smart Scale 해제
        slider_scale = 100
        self.scale_slider = QSlider(Qt.Horizontal)
        self.scale_slider.setRange(int(pose_cfg.scale_min * slider_scale), int(pose_cfg.scale_max * slider_scale))
        self.scale_spinbox = QDoubleSpinBox()
        self.scale_spinbox.setRange(pose_cfg.scale_min, pose_cfg.scale_max)
        self.scale_spinbox.setDecimals(2)
        self.scale_spinbox.setSingleStep(0.05)
        self.scale_slider.valueChanged.connect(lambda v: self._on_manual_scale(v / slider_scale))
        self.scale_spinbox.valueChanged.connect(self._on_manual_scale)
        layout.addWidget(QLabel("Scale"), 1, 0)
        layout.addWidget(self.scale_slider, 1, 1)
        layout.addWidget(self.scale_spinbox, 1, 2)

        self.smart_scale_checkbox = QCheckBox("Smart Scale (Depth)")
        self.smart_scale_checkbox.setChecked(self.session.depth.enabled)
        self.smart_scale_checkbox.toggled.connect(self._on_smart_scale_toggled)
        layout.addWidget(self.smart_scale_checkbox, 2, 0, 1, 3)

        self.show_depth_checkbox = QCheckBox("깊이 맵 표시")
        self.show_depth_checkbox.toggled.connect(lambda _: self._draw_image_with_overlay())
        layout.addWidget(self.show_depth_checkbox, 3, 0, 1, 3)

        group.setLayout(layout)
        return group

    def _create_actions_group(self):
        group = QGroupBox("Actions")
        layout = QVBoxLayout()

        horizon_btn = QPushButton("수평선으로 기울기 추정")
        horizon_btn.clicked.connect(self._estimate_horizon)
        layout.addWidget(horizon_btn)

        button_layout = QHBoxLayout()
        capture_btn = QPushButton("Capture")
        reset_btn = QPushButton("Reset")
        capture_btn.clicked.connect(self._capture)
        reset_btn.clicked.connect(self._reset)
        button_layout.addWidget(capture_btn)
        button_layout.addWidget(reset_btn)
        layout.addLayout(button_layout)

        group.setLayout(layout)
        return group

    # --- 파일 ---
    def _open_photo(self):
        path, _ = QFileDialog.getOpenFileName(self, "사진 선택", "", "Images (*.jpg *.jpeg *.png *.bmp)")
        if not path:
            return
        image = load_image(path)
        if image is None:
            self.status_label.setText(f"사진 로드 실패: {Path(path).name}")
            return
        self.current_image_path = path
        self.current_image = image
        self.session.set_photo(image)
        self.status_label.setText(f"사진 로드 완료: {Path(path).name} ({image.shape[1]}x{image.shape[0]})")
        self._populate_controls_from_pose()

    def _open_depth_map(self):
        path, _ = QFileDialog.getOpenFileName(self, "깊이 맵 선택", "", "Images (*.jpg *.jpeg *.png *.bmp)")
        if not path:
            return
        depth = load_depth_map(path)
        if depth is None:
            self.status_label.setText(f"깊이 맵 로드 실패: {Path(path).name}")
            return
        self.current_depth = depth
        self.session.load_depth_map(depth)
        self.status_label.setText(f"깊이 맵 로드 완료: {Path(path).name}")
        self._draw_image_with_overlay()

    def _open_config(self):
        path, _ = QFileDialog.getOpenFileName(self, "설정 파일 선택", "", "YAML (*.yaml *.yml)")
        if not path:
            return
        try:
            config = load_config(path)
        except (ValueError, yaml.YAMLError) as e:
            self.status_label.setText(f"설정 로드 실패: {e}")
            return

        # 새 설정으로 세션을 다시 구성 (사진/깊이 맵은 유지)
        self.config = config
        self.session = PlacementSession(self.dimensions, self.config)
        if self.current_image is not None:
            self.session.set_photo(self.current_image)
        if self.current_depth is not None:
            self.session.load_depth_map(self.current_depth)

        pose_cfg = self.config.pose
        for ctrl in (self.scale_slider, self.scale_spinbox):
            ctrl.blockSignals(True)
        self.scale_slider.setRange(int(pose_cfg.scale_min * 100), int(pose_cfg.scale_max * 100))
        self.scale_spinbox.setRange(pose_cfg.scale_min, pose_cfg.scale_max)
        for ctrl in (self.scale_slider, self.scale_spinbox):
            ctrl.blockSignals(False)

        self.status_label.setText(f"설정 로드 완료: {Path(path).name}")
        self._populate_controls_from_pose()

    # --- 입력 처리 ---
    def _on_pointer_sample(self, sample):
        self.session.handle_pointer(sample)
        self._populate_controls_from_pose()

        result = self.session.last_result
        if not sample.pointers and result is not None:
            coverage = np.count_nonzero(result.mask) / result.mask.size * 100.0
            state = "visible" if result.visible else "not visible"
            self.status_label.setText(f"마스크 갱신: {state}, 면적 {coverage:.1f}%")

    def _on_wheel(self, steps):
        if steps:
            self.session.scale_by(steps * self.config.gesture.wheel_step)
            self._populate_controls_from_pose()

    def _on_rotation_changed(self, value):
        self.session.set_rotation(value)
        self._populate_controls_from_pose()

    def _on_manual_scale(self, value):
        if abs(value - self.session.pose.scale) < 1e-9:
            return
        self.session.set_manual_scale(value)
        self._populate_controls_from_pose()

    def _on_smart_scale_toggled(self, checked):
        if checked:
            self.session.enable_auto_scale()
        else:
            self.session.depth.disable()

    def _populate_controls_from_pose(self):
        """현재 Pose로 UI 제어 항목 채우기"""
        pose = self.session.pose
        controls = [self.rotation_slider, self.rotation_spinbox, self.scale_slider,
                    self.scale_spinbox, self.smart_scale_checkbox]
        for ctrl in controls:
            ctrl.blockSignals(True)

        self.rotation_slider.setValue(int(round(pose.rotation_deg * 10)) % 3600)
        self.rotation_spinbox.setValue(pose.rotation_deg)
        self.scale_slider.setValue(int(round(pose.scale * 100)))
        self.scale_spinbox.setValue(pose.scale)
        self.smart_scale_checkbox.setChecked(self.session.depth.enabled)

        for ctrl in controls:
            ctrl.blockSignals(False)

        self._draw_image_with_overlay()

    def _draw_image_with_overlay(self):
        """투영된 footprint 오버레이로 사진 그리기"""
        if self.current_image is None:
            return

        projection = self.session.project()
        image = draw_overlay(
            self.current_image, projection, self.session.camera,
            depth_map=self.current_depth,
            show_depth=self.show_depth_checkbox.isChecked(),
        )

        h, w, ch = image.shape
        bytes_per_line = ch * w
        qt_image = QImage(image.data, w, h, bytes_per_line, QImage.Format_BGR888)
        self.canvas.setImage(QPixmap.fromImage(qt_image.copy()), (w, h))

        pose = self.session.pose
        state = "visible" if projection.drawable else "not visible"
        self.setWindowTitle(
            f"Placement - x={pose.x:.2f} z={pose.z:.2f} rot={pose.rotation_deg:.1f} "
            f"scale={pose.scale:.2f} ({state})"
        )

    # --- 동작 ---
    def _estimate_horizon(self):
        if self.current_image is None:
            self.status_label.setText("사진을 먼저 선택하세요")
            return
        tilt = self.config.tilt
        estimator = HorizonTiltEstimator(tilt.scan_hz, tilt.scan_width, tilt.max_offset_deg)
        estimator.update_frame(self.current_image, time.monotonic())
        estimate = estimator.estimate()
        if estimate is None:
            self.status_label.setText("수평선을 찾지 못했습니다 (pitch 유지)")
            return
        self.session.camera = self.session.camera.with_pitch(estimate.pitch)
        self.status_label.setText(f"수평선 기반 pitch: {np.degrees(estimate.pitch):.1f}°")
        self._draw_image_with_overlay()

    def _capture(self):
        if not self.current_image_path:
            self.status_label.setText("사진을 먼저 선택하세요")
            return

        result = self.session.commit()
        if result.mask is None:
            self.status_label.setText("마스크를 생성할 수 없습니다")
            return

        try:
            image_path = Path(self.current_image_path)
            mask_path, _ = save_capture(image_path.parent, image_path.stem,
                                        result.mask, result.pose, self.dimensions)
            suffix = "" if result.visible else " (객체가 화면 밖 - 빈 마스크)"
            self.status_label.setText(f"저장 완료: {mask_path.name}{suffix}")
        except OSError as e:
            self.status_label.setText(f"저장 오류: {e}")

    def _reset(self):
        self.session.reset()
        if self.config.depth.enabled:
            self.session.enable_auto_scale()
        self._populate_controls_from_pose()
        self.status_label.setText("기본값으로 리셋")

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Q:
            self.session.rotate_by(-5.0)
            self._populate_controls_from_pose()
        elif event.key() == Qt.Key_E:
            self.session.rotate_by(5.0)
            self._populate_controls_from_pose()
        else:
            super().keyPressEvent(event)
