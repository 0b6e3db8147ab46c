from PyQt5.QtCore import pyqtSignal
from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import (
    QButtonGroup, QColorDialog, QFrame, QGraphicsDropShadowEffect, QHBoxLayout,
    QLabel, QSizePolicy, QToolButton
)

from ...controllers.viewer_state import DEFAULT_COLOR, Tool

# (tool, label, tooltip); ERASER is an action, not a checkable mode
TOOL_BUTTONS = [
    (Tool.SELECT, "Select", "Select, move and edit objects"),
    (Tool.TEXT, "Text", "Add a text box"),
    (Tool.RECTANGLE, "Rectangle", "Add a rectangle"),
    (Tool.CIRCLE, "Circle", "Add a circle"),
    (Tool.FREEHAND, "Draw", "Draw freehand strokes"),
]


class AnnotationToolbar(QFrame):
    """Annotation tools, color picker and page actions."""

    tool_requested = pyqtSignal(object)  # Tool
    color_requested = pyqtSignal(tuple)
    delete_requested = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("AnnotationToolbar")
        self.current_color = DEFAULT_COLOR
        self.tool_buttons = {}

        self.setup_ui()

    def setup_ui(self):
        self.setSizePolicy(QSizePolicy.Preferred, QSizePolicy.Fixed)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 6, 12, 6)
        layout.setSpacing(6)

        header_label = QLabel("Tools", self)
        header_label.setStyleSheet("font-weight: bold; color: #8899AA;")
        layout.addWidget(header_label)

        self.button_group = QButtonGroup(self)
        self.button_group.setExclusive(True)
        for tool, label, tooltip in TOOL_BUTTONS:
            button = QToolButton(self)
            button.setText(label)
            button.setToolTip(tooltip)
            button.setCheckable(True)
            button.setFixedHeight(30)
            button.clicked.connect(lambda _checked, t=tool: self.tool_requested.emit(t))
            self.button_group.addButton(button)
            self.tool_buttons[tool] = button
            layout.addWidget(button)
        self.tool_buttons[Tool.SELECT].setChecked(True)

        self.clear_button = QToolButton(self)
        self.clear_button.setText("Clear Page")
        self.clear_button.setToolTip("Remove all annotations on this page")
        self.clear_button.setFixedHeight(30)
        self.clear_button.clicked.connect(lambda: self.tool_requested.emit(Tool.ERASER))
        layout.addWidget(self.clear_button)

        self.delete_button = QToolButton(self)
        self.delete_button.setText("Delete")
        self.delete_button.setToolTip("Delete selected objects (Del)")
        self.delete_button.setFixedHeight(30)
        self.delete_button.clicked.connect(self.delete_requested)
        layout.addWidget(self.delete_button)

        color_label = QLabel("Color:", self)
        color_label.setStyleSheet("color: #8899AA;")
        layout.addWidget(color_label)

        self.color_button = QToolButton(self)
        self.color_button.setToolTip("Choose color")
        self.color_button.setFixedSize(30, 30)
        self.color_button.clicked.connect(self._choose_color)
        self._update_color_button()
        layout.addWidget(self.color_button)

        layout.addStretch()

        # Add shadow
        shadow = QGraphicsDropShadowEffect()
        shadow.setBlurRadius(20)
        shadow.setColor(QColor(0, 0, 0, 80))
        shadow.setOffset(0, 2)
        self.setGraphicsEffect(shadow)

    def set_active_tool(self, tool):
        """Reflect the controller's active tool in the buttons."""
        button = self.tool_buttons.get(tool)
        if button is not None:
            button.setChecked(True)

    def set_color(self, color):
        self.current_color = tuple(color)
        self._update_color_button()

    def _choose_color(self):
        """Open color picker dialog."""
        initial_color = QColor(self.current_color[0], self.current_color[1], self.current_color[2])
        color = QColorDialog.getColor(initial_color, self, "Choose Annotation Color")

        if color.isValid():
            self.set_color((color.red(), color.green(), color.blue()))
            self.color_requested.emit(self.current_color)

    def _update_color_button(self):
        """Update the color button to show the current color."""
        r, g, b = self.current_color
        self.color_button.setStyleSheet(f"""
            QToolButton {{
                background-color: rgb({r}, {g}, {b});
                border: 2px solid #555555;
                border-radius: 4px;
            }}
            QToolButton:hover {{
                border: 2px solid #777777;
            }}
        """)
