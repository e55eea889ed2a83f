"""
Model Settings Panel
Title / description, save, load, delete, new model and the viewer toggle.
"""
from datetime import datetime

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QPlainTextEdit, QPushButton,
    QListWidget, QListWidgetItem, QGroupBox, QFormLayout, QMessageBox
)
from PySide6.QtCore import Qt, QTimer

from stepscene.controller.session import EditorSession
from stepscene.model.errors import PersistenceError, ValidationError

MODEL_ID_ROLE = Qt.UserRole
MESSAGE_TIMEOUT_MS = 3000


class ModelControlPanel(QWidget):
    def __init__(self, session: EditorSession, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.session = session
        self.store = session.store

        layout = QVBoxLayout(self)

        # --- Metadata Group ---
        grp = QGroupBox("Model Settings")
        form = QFormLayout(grp)
        self.edit_title = QLineEdit()
        self.edit_title.setPlaceholderText("Enter model title...")
        self.edit_title.editingFinished.connect(
            lambda: self.session.update_metadata(title=self.edit_title.text())
        )
        form.addRow("Title:", self.edit_title)

        self.edit_description = QPlainTextEdit()
        self.edit_description.setPlaceholderText("Enter model description...")
        self.edit_description.setFixedHeight(70)
        self.edit_description.textChanged.connect(self.on_description_changed)
        form.addRow("Description:", self.edit_description)
        layout.addWidget(grp)

        # --- Actions ---
        row = QHBoxLayout()
        self.btn_save = QPushButton("Save Model")
        self.btn_save.clicked.connect(self.on_save_clicked)
        self.btn_new = QPushButton("New Model")
        self.btn_new.clicked.connect(self.on_new_clicked)
        row.addWidget(self.btn_save)
        row.addWidget(self.btn_new)
        layout.addLayout(row)

        self.btn_viewer = QPushButton("Viewer Mode")
        self.btn_viewer.setCheckable(True)
        self.btn_viewer.toggled.connect(self.session.set_viewer_mode)
        layout.addWidget(self.btn_viewer)

        # --- Saved Models ---
        layout.addWidget(QLabel("Saved Models:"))
        self.list_models = QListWidget()
        self.list_models.itemDoubleClicked.connect(lambda *_: self.on_load_clicked())
        layout.addWidget(self.list_models)

        row = QHBoxLayout()
        self.btn_load = QPushButton("Load")
        self.btn_load.clicked.connect(self.on_load_clicked)
        self.btn_delete = QPushButton("Delete")
        self.btn_delete.clicked.connect(self.on_delete_clicked)
        row.addWidget(self.btn_load)
        row.addWidget(self.btn_delete)
        layout.addLayout(row)

        self.lbl_status = QLabel("")
        self.lbl_status.setAlignment(Qt.AlignCenter)
        self.lbl_status.setWordWrap(True)
        layout.addWidget(self.lbl_status)

        self._status_timer = QTimer(self)
        self._status_timer.setSingleShot(True)
        self._status_timer.setInterval(MESSAGE_TIMEOUT_MS)
        self._status_timer.timeout.connect(lambda: self.lbl_status.setText(""))

        self.store.graph_changed.connect(self.load_from_state)
        self.store.viewer_mode_changed.connect(lambda *_: self.load_from_state())
        self.load_from_state()
        self.refresh_saved_models()

    # --- SLOTS ---

    def on_description_changed(self) -> None:
        text = self.edit_description.toPlainText()
        if text != self.store.state.description:
            self.session.update_metadata(description=text)

    def on_save_clicked(self) -> None:
        self.session.update_metadata(title=self.edit_title.text())
        try:
            model_id = self.session.save_model()
        except ValidationError as e:
            self._flash(str(e), "orange")
            return
        except PersistenceError as e:
            QMessageBox.critical(self, "Error", f"Could not save the model:\n{e}")
            return
        if model_id:
            self._flash("Model saved successfully!", "green")
            self.refresh_saved_models()

    def on_load_clicked(self) -> None:
        model_id = self._current_model_id()
        if model_id is None:
            return
        if self.session.load_model(model_id):
            self._flash("Model loaded successfully!", "green")
        else:
            self._flash("Model could not be loaded.", "red")

    def on_delete_clicked(self) -> None:
        model_id = self._current_model_id()
        if model_id is None:
            return
        reply = QMessageBox.question(self, "Delete Model", "Are you sure you want to delete this model?")
        if reply != QMessageBox.Yes:
            return
        try:
            self.session.delete_model(model_id)
        except PersistenceError as e:
            QMessageBox.critical(self, "Error", f"Could not delete the model:\n{e}")
            return
        self.refresh_saved_models()
        self._flash("Model deleted successfully!", "green")

    def on_new_clicked(self) -> None:
        if self.store.state.order:
            reply = QMessageBox.question(self, "New Model", "Are you sure? Unsaved changes will be lost.")
            if reply != QMessageBox.Yes:
                return
        self.session.clear_model()
        self._flash("Started new model", "gray")

    # --- STATE SYNC ---

    def load_from_state(self) -> None:
        state = self.store.state
        editable = self.session.editable

        if not self.edit_title.hasFocus() and self.edit_title.text() != state.title:
            self.edit_title.setText(state.title)
        if self.edit_description.toPlainText() != state.description:
            self.edit_description.blockSignals(True)
            self.edit_description.setPlainText(state.description)
            self.edit_description.blockSignals(False)

        self.edit_title.setEnabled(editable)
        self.edit_description.setReadOnly(not editable)
        self.btn_save.setEnabled(editable)
        self.btn_new.setEnabled(editable)

        self.btn_viewer.blockSignals(True)
        self.btn_viewer.setChecked(state.viewer_mode)
        self.btn_viewer.blockSignals(False)
        self.btn_viewer.setText("Creator Mode" if state.viewer_mode else "Viewer Mode")

    def refresh_saved_models(self) -> None:
        self.list_models.clear()
        models = self.session.list_models()
        for summary in models:
            label = f"{summary.title}  ·  {summary.step_count} step{'s' if summary.step_count != 1 else ''}"
            try:
                label += f"  ·  {datetime.fromisoformat(summary.saved_at):%d.%m.%Y}"
            except ValueError:
                pass
            item = QListWidgetItem(label)
            item.setData(MODEL_ID_ROLE, summary.id)
            self.list_models.addItem(item)
        if not models:
            self.list_models.addItem("No saved models yet")

    def _current_model_id(self) -> str | None:
        item = self.list_models.currentItem()
        return item.data(MODEL_ID_ROLE) if item is not None else None

    def _flash(self, text: str, color: str) -> None:
        self.lbl_status.setText(text)
        self.lbl_status.setStyleSheet(f"color: {color}; font-weight: bold;")
        self._status_timer.start()
