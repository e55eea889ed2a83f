"""
Steps Control Panel
Tree of steps and their sub-steps with add / delete actions.
"""
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QTreeWidget, QTreeWidgetItem, QLabel
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QBrush

from stepscene.controller.session import EditorSession
from stepscene.model.scene import display_label

NODE_ID_ROLE = Qt.UserRole


class StepsControlPanel(QWidget):
    def __init__(self, session: EditorSession, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.session = session
        self.store = session.store
        self._items: dict[str, QTreeWidgetItem] = {}

        layout = QVBoxLayout(self)

        # --- Actions ---
        actions = QHBoxLayout()
        self.btn_add = QPushButton("+ Add Step")
        self.btn_add.clicked.connect(self.on_add_step)
        self.btn_add_sub = QPushButton("+ Sub-step")
        self.btn_add_sub.setToolTip("Add a sub-step to the selected step")
        self.btn_add_sub.clicked.connect(self.on_add_sub_step)
        self.btn_delete = QPushButton("Delete")
        self.btn_delete.clicked.connect(self.on_delete)
        actions.addWidget(self.btn_add)
        actions.addWidget(self.btn_add_sub)
        actions.addWidget(self.btn_delete)
        layout.addLayout(actions)

        # --- Tree ---
        self.tree = QTreeWidget()
        self.tree.setHeaderLabels(["Step", "Shape"])
        self.tree.setColumnWidth(0, 200)
        self.tree.currentItemChanged.connect(self.on_current_item_changed)
        layout.addWidget(self.tree)

        self.lbl_empty = QLabel("")
        self.lbl_empty.setWordWrap(True)
        self.lbl_empty.setStyleSheet("color: gray;")
        layout.addWidget(self.lbl_empty)

        self.store.graph_changed.connect(self.load_from_state)
        self.store.selection_changed.connect(self.sync_selection)
        self.store.viewer_mode_changed.connect(lambda *_: self.load_from_state())
        self.load_from_state()

    # --- SLOTS ---

    def on_add_step(self) -> None:
        self.session.add_step()

    def on_add_sub_step(self) -> None:
        selected = self.store.selected()
        if selected is None:
            return
        # Sub-steps always go under the top-level step
        parent_id = selected.parent_id or selected.id
        self.session.add_sub_step(parent_id)

    def on_delete(self) -> None:
        if self.store.selected_id is not None:
            self.session.delete_node(self.store.selected_id)

    def on_current_item_changed(self, current: QTreeWidgetItem | None, _previous) -> None:
        if current is not None:
            self.session.select_step(current.data(0, NODE_ID_ROLE))

    # --- STATE SYNC ---

    def load_from_state(self) -> None:
        state = self.store.state
        editable = self.session.editable

        self.btn_add.setEnabled(editable)
        self.btn_add_sub.setEnabled(editable and self.store.selected_id is not None)
        self.btn_delete.setEnabled(editable and self.store.selected_id is not None)

        self.tree.blockSignals(True)
        try:
            self.tree.clear()
            self._items.clear()
            for step in state.steps():
                item = self._make_item(step.id)
                self.tree.addTopLevelItem(item)
                for sub in state.sub_steps(step.id):
                    item.addChild(self._make_item(sub.id))
                item.setExpanded(True)
        finally:
            self.tree.blockSignals(False)

        if not state.order:
            self.lbl_empty.setText(
                "No steps in this model." if not editable
                else 'No steps yet. Click "Add Step" to create your first step.'
            )
        else:
            self.lbl_empty.setText("")

        self.sync_selection(self.store.selected_id)

    def sync_selection(self, node_id) -> None:
        editable = self.session.editable
        self.btn_add_sub.setEnabled(editable and node_id is not None)
        self.btn_delete.setEnabled(editable and node_id is not None)

        item = self._items.get(node_id)
        self.tree.blockSignals(True)
        try:
            self.tree.setCurrentItem(item)
        finally:
            self.tree.blockSignals(False)

    def _make_item(self, node_id: str) -> QTreeWidgetItem:
        node = self.store.find(node_id)
        item = QTreeWidgetItem([display_label(self.store.state, node_id), node.shape.value])
        item.setData(0, NODE_ID_ROLE, node_id)
        item.setForeground(1, QBrush(QColor(node.color)))
        item.setToolTip(0, node.description)
        self._items[node_id] = item
        return item
