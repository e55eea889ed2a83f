"""
Step Editor Panel
Form for the selected step or sub-step.
"""
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QPlainTextEdit, QComboBox,
    QDoubleSpinBox, QGroupBox, QFormLayout, QPushButton, QColorDialog
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QColor

from stepscene.controller.session import EditorSession
from stepscene.model.errors import ValidationError
from stepscene.model.nodes import ShapeKind, is_valid_color
from stepscene.model.scene import display_label


class StepEditorPanel(QWidget):
    def __init__(self, session: EditorSession, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.session = session
        self.store = session.store
        self._loading = False

        layout = QVBoxLayout(self)

        self.lbl_header = QLabel("Select a step to edit its properties")
        self.lbl_header.setStyleSheet("font-weight: bold;")
        layout.addWidget(self.lbl_header)

        # --- Properties Group ---
        self.grp = QGroupBox("Step")
        form = QFormLayout(self.grp)

        self.edit_title = QLineEdit()
        self.edit_title.editingFinished.connect(lambda: self._push({"title": self.edit_title.text()}))
        form.addRow("Title:", self.edit_title)

        self.edit_description = QPlainTextEdit()
        self.edit_description.setPlaceholderText("Enter step description...")
        self.edit_description.setFixedHeight(90)
        self.edit_description.textChanged.connect(
            lambda: self._push({"description": self.edit_description.toPlainText()})
        )
        form.addRow("Description:", self.edit_description)

        self.cmb_shape = QComboBox()
        for kind in ShapeKind:
            self.cmb_shape.addItem(kind.value.capitalize(), kind.value)
        self.cmb_shape.currentIndexChanged.connect(
            lambda *_: self._push({"shape": self.cmb_shape.currentData()})
        )
        form.addRow("3D Shape:", self.cmb_shape)

        color_row = QHBoxLayout()
        self.edit_color = QLineEdit()
        self.edit_color.setPlaceholderText("#ffffff")
        self.edit_color.textEdited.connect(self.on_color_text_edited)
        self.btn_color = QPushButton("Pick…")
        self.btn_color.clicked.connect(self.on_pick_color)
        color_row.addWidget(self.edit_color)
        color_row.addWidget(self.btn_color)
        form.addRow("Color:", color_row)

        self.spin_size = QDoubleSpinBox()
        self.spin_size.setRange(0.1, 20.0)
        self.spin_size.setSingleStep(0.1)
        self.spin_size.valueChanged.connect(lambda v: self._push({"size": v}))
        form.addRow("Size:", self.spin_size)

        self.spin_pos: list[QDoubleSpinBox] = []
        for axis in ("X", "Y", "Z"):
            spin = QDoubleSpinBox()
            spin.setRange(-1000.0, 1000.0)
            spin.setDecimals(2)
            spin.setSingleStep(0.5)
            spin.valueChanged.connect(self.on_position_changed)
            self.spin_pos.append(spin)
            form.addRow(f"Position {axis}:", spin)

        layout.addWidget(self.grp)

        self.lbl_status = QLabel("")
        self.lbl_status.setWordWrap(True)
        layout.addWidget(self.lbl_status)
        layout.addStretch()

        self.store.graph_changed.connect(self.load_from_state)
        self.store.selection_changed.connect(lambda *_: self.load_from_state())
        self.store.viewer_mode_changed.connect(lambda *_: self.load_from_state())
        self.load_from_state()

    # --- SLOTS ---

    def on_color_text_edited(self, text: str) -> None:
        # Only complete hex codes are sent; partial typing is left alone
        if is_valid_color(text):
            self._push({"color": text})

    def on_pick_color(self) -> None:
        node = self.store.selected()
        if node is None:
            return
        color = QColorDialog.getColor(QColor(node.color), self, "Step Color")
        if color.isValid():
            self._push({"color": color.name()})

    def on_position_changed(self, *_) -> None:
        self._push({"position": [s.value() for s in self.spin_pos]})

    # --- STATE SYNC ---

    def load_from_state(self) -> None:
        node = self.store.selected()
        self.grp.setVisible(node is not None)
        if node is None:
            self.lbl_header.setText("Select a step to edit its properties")
            return

        self._loading = True
        try:
            kind = "Sub-step" if node.is_sub_step else "Step"
            self.lbl_header.setText(f"{kind} {display_label(self.store.state, node.id)}")
            if self.edit_title.text() != node.title:
                self.edit_title.setText(node.title)
            if self.edit_description.toPlainText() != node.description:
                self.edit_description.setPlainText(node.description)
            self.cmb_shape.setCurrentIndex(self.cmb_shape.findData(node.shape.value))
            if not self.edit_color.hasFocus():
                self.edit_color.setText(node.color)
            self.edit_color.setStyleSheet(f"border-left: 12px solid {node.color};")
            self.spin_size.setValue(node.size)
            for spin, value in zip(self.spin_pos, node.position.to_list()):
                spin.setValue(value)
        finally:
            self._loading = False

        editable = self.session.editable
        for w in [self.edit_title, self.cmb_shape, self.edit_color, self.btn_color, self.spin_size] + self.spin_pos:
            w.setEnabled(editable)
        self.edit_description.setReadOnly(not editable)

    def _push(self, patch: dict) -> None:
        if self._loading:
            return
        node_id = self.store.selected_id
        if node_id is None:
            return
        try:
            self.session.update_node(node_id, patch)
            self._set_status("", "gray")
        except ValidationError as e:
            self._set_status(str(e), "red")

    def _set_status(self, text: str, color: str) -> None:
        self.lbl_status.setText(text)
        self.lbl_status.setStyleSheet(f"color: {color};")
