"""
Placement UI - Application Entry Point
"""
import sys
from PySide6.QtWidgets import QApplication
from app.ui.placement_window import PlacementWindow


if __name__ == "__main__":
    app = QApplication(sys.argv)
    config_path = sys.argv[1] if len(sys.argv) > 1 else "config/placement.yaml"
    window = PlacementWindow(config_path=config_path)
    window.show()
    sys.exit(app.exec())
