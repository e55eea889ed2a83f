"""
Connections Control Panel
Lists explicit connections and lets the author add, describe and remove them.
"""
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QListWidget, QListWidgetItem,
    QComboBox, QLineEdit, QGroupBox, QFormLayout, QLabel
)
from PySide6.QtCore import Qt

from stepscene.controller.session import EditorSession
from stepscene.model.errors import ValidationError
from stepscene.model.scene import display_label

CONNECTION_ID_ROLE = Qt.UserRole


class ConnectionsControlPanel(QWidget):
    def __init__(self, session: EditorSession, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.session = session
        self.store = session.store

        layout = QVBoxLayout(self)

        # --- New Connection Group ---
        self.grp_new = QGroupBox("New Connection")
        form = QFormLayout(self.grp_new)
        self.cmb_from = QComboBox()
        self.cmb_to = QComboBox()
        self.edit_description = QLineEdit()
        self.edit_description.setPlaceholderText("Optional description")
        form.addRow("From:", self.cmb_from)
        form.addRow("To:", self.cmb_to)
        form.addRow("Description:", self.edit_description)

        self.btn_add = QPushButton("Add Connection")
        self.btn_add.clicked.connect(self.on_add_clicked)
        form.addRow(self.btn_add)
        layout.addWidget(self.grp_new)

        # --- Existing Connections ---
        layout.addWidget(QLabel("Connections:"))
        self.list_connections = QListWidget()
        self.list_connections.currentItemChanged.connect(self.on_current_changed)
        layout.addWidget(self.list_connections)

        edit_row = QHBoxLayout()
        self.edit_selected_description = QLineEdit()
        self.edit_selected_description.setPlaceholderText("Description of selected connection")
        self.edit_selected_description.editingFinished.connect(self.on_description_edited)
        self.btn_delete = QPushButton("Delete")
        self.btn_delete.clicked.connect(self.on_delete_clicked)
        edit_row.addWidget(self.edit_selected_description)
        edit_row.addWidget(self.btn_delete)
        layout.addLayout(edit_row)

        self.lbl_status = QLabel("")
        self.lbl_status.setWordWrap(True)
        layout.addWidget(self.lbl_status)

        self.store.graph_changed.connect(self.load_from_state)
        self.store.viewer_mode_changed.connect(lambda *_: self.load_from_state())
        self.load_from_state()

    # --- SLOTS ---

    def on_add_clicked(self) -> None:
        from_id = self.cmb_from.currentData()
        to_id = self.cmb_to.currentData()
        if from_id is None or to_id is None:
            return
        try:
            self.session.add_connection(from_id, to_id, self.edit_description.text())
        except ValidationError as e:
            self._set_status(str(e), "red")
            return
        self.edit_description.clear()
        self._set_status("Connection added.", "green")

    def on_delete_clicked(self) -> None:
        connection_id = self._current_connection_id()
        if connection_id is not None:
            self.session.delete_connection(connection_id)

    def on_description_edited(self) -> None:
        connection_id = self._current_connection_id()
        if connection_id is None:
            return
        conn = self.store.state.connections.get(connection_id)
        text = self.edit_selected_description.text()
        if conn is not None and conn.description != text:
            self.session.update_connection(connection_id, {"description": text})

    def on_current_changed(self, current: QListWidgetItem | None, _previous) -> None:
        conn = None
        if current is not None:
            conn = self.store.state.connections.get(current.data(CONNECTION_ID_ROLE))
        self.edit_selected_description.setText(conn.description if conn else "")

    # --- STATE SYNC ---

    def load_from_state(self) -> None:
        state = self.store.state
        editable = self.session.editable
        current_id = self._current_connection_id()

        for combo in (self.cmb_from, self.cmb_to):
            previous = combo.currentData()
            combo.blockSignals(True)
            combo.clear()
            for node in state.walk():
                combo.addItem(display_label(state, node.id), node.id)
            index = combo.findData(previous)
            if index >= 0:
                combo.setCurrentIndex(index)
            combo.blockSignals(False)

        self.list_connections.blockSignals(True)
        try:
            self.list_connections.clear()
            for conn in state.connections:
                text = f"{display_label(state, conn.from_id)}  →  {display_label(state, conn.to_id)}"
                if conn.description:
                    text += f"  ({conn.description})"
                item = QListWidgetItem(text)
                item.setData(CONNECTION_ID_ROLE, conn.id)
                self.list_connections.addItem(item)
                if conn.id == current_id:
                    self.list_connections.setCurrentItem(item)
        finally:
            self.list_connections.blockSignals(False)

        self.grp_new.setEnabled(editable and len(state.nodes) >= 2)
        self.btn_delete.setEnabled(editable)
        self.edit_selected_description.setEnabled(editable)

    def _current_connection_id(self) -> str | None:
        item = self.list_connections.currentItem()
        return item.data(CONNECTION_ID_ROLE) if item is not None else None

    def _set_status(self, text: str, color: str) -> None:
        self.lbl_status.setText(text)
        self.lbl_status.setStyleSheet(f"color: {color};")
